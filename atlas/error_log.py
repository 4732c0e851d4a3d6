"""Best-effort sink for client-side error reports.

``ErrorLogSink.record`` never raises on store failures: a broken error log
must not break the page that reported the error. It reports the outcome as a
boolean instead.
"""
from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .models import ErrorLog

logger = logging.getLogger(__name__)

MAX_MESSAGE = 5000
MAX_STACK = 10000
MAX_URL = 2000
MAX_USER_AGENT = 500


def _clip(value: str | None, limit: int) -> str | None:
    if not value:
        return None
    return value[:limit]


class ErrorLogSink:
    def __init__(self, session: Session) -> None:
        self.session = session

    def record(
        self,
        error_message: str,
        page_url: str,
        *,
        error_stack: str | None = None,
        error_context: dict | None = None,
        user_agent: str | None = None,
        user_id: int | None = None,
    ) -> bool:
        entry = ErrorLog(
            user_id=user_id,
            error_message=error_message[:MAX_MESSAGE],
            error_stack=_clip(error_stack, MAX_STACK),
            error_context=error_context or {},
            page_url=page_url[:MAX_URL],
            user_agent=_clip(user_agent, MAX_USER_AGENT),
        )
        try:
            self.session.add(entry)
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Failed to store client error log: %s", exc)
            return False

        logger.info("Client error logged: %s", error_message[:100])
        return True
