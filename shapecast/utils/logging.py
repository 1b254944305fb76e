"""
SHAPECAST Logging Utilities - Per-process logs for extraction attempts

Overview:
---------
Every CLI run or server start writes its own log file under
``ShapecastConfig.log_dir`` (``~/.shapecast/logs`` unless
``SHAPECAST_HOME_DIR`` moves it).  Records carry a short run id so lines from
concurrent server processes can be told apart.

Until :func:`setup_logging` is called, ``shapecast.*`` records simply
propagate to the root logger; importing the library or running the tests
never creates files.

Log Levels:
-----------
- DEBUG: prompts, raw model replies, the shape being extracted
- INFO: request start/finish with durations
- WARNING: a failed attempt that will be retried
- ERROR: the attempt that exhausted the retry budget
"""

from __future__ import annotations

import logging
import sys
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..config import ShapecastConfig

ROOT_LOGGER_NAME = "shapecast"

CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(run_id)s | %(name)s | %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(run_id)s | %(name)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_configured = False


class _RunIdFilter(logging.Filter):
    def __init__(self, run_id: str):
        super().__init__()
        self.run_id = run_id

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = self.run_id  # type: ignore[attr-defined]
        return True


def setup_logging(
    cfg: ShapecastConfig,
    *,
    level: Optional[str] = None,
    console_output: bool = False,
) -> Path:
    """Attach a run log file (and optionally stderr) to the ``shapecast`` logger.

    ``level`` overrides ``cfg.log_level``.  Calling again replaces the
    previous run's handlers.  Returns the path of the new log file.
    """
    global _configured

    run_id = uuid.uuid4().hex[:6]
    level_name = (level or cfg.log_level).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    cfg.log_dir.mkdir(parents=True, exist_ok=True)
    log_file = cfg.log_dir / f"shapecast_{datetime.now():%Y%m%d_%H%M%S}_{run_id}.log"

    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for f in root.filters[:]:
        root.removeFilter(f)

    root.setLevel(log_level)
    root.addFilter(_RunIdFilter(run_id))

    handlers: list[tuple[logging.Handler, str]] = [
        (logging.FileHandler(log_file, encoding="utf-8"), FILE_FORMAT)
    ]
    if console_output:
        handlers.append((logging.StreamHandler(sys.stderr), CONSOLE_FORMAT))
    for handler, fmt in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(logging.Formatter(fmt, DATE_FORMAT))
        root.addHandler(handler)

    root.propagate = False
    _configured = True

    root.info(f"SHAPECAST run {run_id} | model={cfg.lm} | retries={cfg.max_retries} | level={level_name}")
    return log_file


def is_logging_initialised() -> bool:
    return _configured


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``shapecast`` namespace."""
    if name.startswith(ROOT_LOGGER_NAME):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


# ============================================================================
# Structured helpers
# ============================================================================

def _truncate(content: str, truncate_at: int) -> str:
    if len(content) > truncate_at:
        return content[:truncate_at] + f"... [TRUNCATED, {len(content)} chars total]"
    return content


def log_prompt(
    logger: logging.Logger,
    prompt_type: str,
    prompt_content: str,
    truncate_at: int = 2000,
) -> None:
    """Log a prompt being sent to the LLM (DEBUG)."""
    logger.debug(f"PROMPT ({prompt_type}):\n{_truncate(prompt_content, truncate_at)}")


def log_llm_response(
    logger: logging.Logger,
    response_type: str,
    response_content: str,
    truncate_at: int = 2000,
) -> None:
    """Log an LLM response (DEBUG)."""
    logger.debug(f"LLM RESPONSE ({response_type}):\n{_truncate(response_content, truncate_at)}")


def log_attempt_failure(
    logger: logging.Logger,
    attempt: int,
    error: BaseException,
    remaining: int,
) -> None:
    """Log a failed attempt: WARNING while retries remain, ERROR for the last one."""
    prefix = f"✗ FAILED [Attempt {attempt}] {type(error).__name__}: {error}"
    if remaining > 0:
        logger.warning(f"{prefix} ({remaining} retries left)")
    else:
        logger.error(f"{prefix} (retry budget exhausted)")


def log_schema_info(
    logger: logging.Logger,
    schema_name: str,
    schema_json: str,
    truncate_at: int = 1500,
) -> None:
    """Log the shape being extracted (DEBUG)."""
    logger.debug(f"SCHEMA ({schema_name}):\n{_truncate(schema_json, truncate_at)}")
