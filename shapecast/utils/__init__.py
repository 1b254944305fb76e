"""
SHAPECAST Utilities Package - Cross-Cutting Helpers

Logging helpers shared by the CLI, the API and the extraction orchestrator,
forwarded through ``__all__`` to keep intra-package imports short.
"""

from .logging import (
    setup_logging,
    get_logger,
    is_logging_initialised,
    log_prompt,
    log_llm_response,
    log_attempt_failure,
    log_schema_info,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "is_logging_initialised",
    "log_prompt",
    "log_llm_response",
    "log_attempt_failure",
    "log_schema_info",
]
