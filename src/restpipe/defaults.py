"""The default policy chain."""
from __future__ import annotations

from restpipe.pipeline import Pipeline
from restpipe.policies.log import log_policy
from restpipe.policies.request_id import set_client_request_id_policy
from restpipe.policies.user_agent import user_agent_policy
from restpipe.retry.policy import default_retry_policy
from restpipe.timer import Timer
from restpipe.types.config import PipelineOptions


def create_pipeline_from_options(
    options: PipelineOptions | None = None, *, timer: Timer | None = None
) -> Pipeline:
    """Build user agent -> client request id -> retry -> log.

    Logging sits inside the retry policy so every attempt is logged.
    """
    options = options or PipelineOptions()
    pipeline = Pipeline()
    pipeline.add_policy(user_agent_policy(options.user_agent_prefix))
    pipeline.add_policy(set_client_request_id_policy(options.request_id_header_name))
    pipeline.add_policy(default_retry_policy(options.retry, options.throttling, timer=timer))
    pipeline.add_policy(log_policy(allowed_header_names=options.allowed_header_names))
    return pipeline
