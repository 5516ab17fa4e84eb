"""Built-in pipeline policies."""
from __future__ import annotations

from restpipe.policies.log import LogPolicy, Sanitizer, log_policy
from restpipe.policies.request_id import SetClientRequestIdPolicy, set_client_request_id_policy
from restpipe.policies.user_agent import UserAgentPolicy, get_user_agent_value, user_agent_policy

__all__ = [
    "LogPolicy",
    "Sanitizer",
    "log_policy",
    "SetClientRequestIdPolicy",
    "set_client_request_id_policy",
    "UserAgentPolicy",
    "get_user_agent_value",
    "user_agent_policy",
]
