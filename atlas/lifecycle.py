"""Completion sweep: moves overdue appointments to ``completed``.

The sweep is a single predicate-based UPDATE. A row leaves the selection as
soon as its status changes, so overlapping or repeated sweeps never
transition the same appointment twice.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .config import EngineConfig
from .errors import StoreError
from .models import Appointment
from .timeutil import TIMESTAMP_FORMAT, Clock, business_now, to_storage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SweepResult:
    completed_count: int
    swept_at: datetime  # business-local

    @property
    def timestamp(self) -> str:
        return self.swept_at.strftime(TIMESTAMP_FORMAT)

    def to_dict(self) -> dict[str, object]:
        return {
            "success": True,
            "message": "Appointments completed successfully",
            "timestamp": self.timestamp,
            "completed": self.completed_count,
        }


class CompletionSweeper:
    """Advance every ``scheduled`` appointment whose time has passed."""

    def __init__(self, config: EngineConfig, clock: Clock, session: Session) -> None:
        self.config = config
        self.clock = clock
        self.session = session

    def sweep(self) -> SweepResult:
        now = business_now(self.clock, self.config.tz)
        cutoff = to_storage(now)
        logger.info(
            "Starting appointment completion sweep at %s (%s)",
            now.strftime(TIMESTAMP_FORMAT),
            self.config.business_timezone,
        )

        stmt = (
            update(Appointment)
            .where(
                Appointment.scheduled_at < cutoff,
                Appointment.status == "scheduled",
            )
            .values(status="completed", updated_at=to_storage(self.clock.now()))
            .execution_options(synchronize_session=False)
        )

        try:
            result = self.session.execute(stmt)
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreError(f"Error completing appointments: {exc}") from exc

        completed = result.rowcount or 0
        logger.info("Completed %d past appointments", completed)
        return SweepResult(completed_count=completed, swept_at=now)
