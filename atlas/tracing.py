"""Step-tagged trace lines for the function endpoints."""
from __future__ import annotations

import json
import logging


def log_step(logger: logging.Logger, tag: str, step: str, details: object = None) -> None:
    """Emit ``[TAG] step - {details}`` at INFO level."""
    suffix = f" - {json.dumps(details, default=str)}" if details else ""
    logger.info("[%s] %s%s", tag, step, suffix)


def log_failure(logger: logging.Logger, tag: str, step: str, exc: BaseException) -> None:
    logger.error("[%s] %s - %s", tag, step, json.dumps({"message": str(exc)}))
