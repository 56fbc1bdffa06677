"""Multi-row writes split into one atomic unit plus best-effort side writes.

The atomic rows are flushed one by one and committed together; any failure
rolls all of them back and raises ``TransactionError``. Side writes run only
after that commit, each in its own transaction. A failing side write is
rolled back, logged, reported to its ``on_failure`` hook and otherwise
ignored: the plan still succeeds.
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from app.extensions import db
from app.errors import DependencyError, TransactionError

logger = logging.getLogger(__name__)


@dataclass
class SideWrite:
    description: str
    apply: Callable[[], None]
    on_failure: Optional[Callable[[DependencyError], None]] = None


@dataclass
class ProvisioningPlan:
    atomic: List[Tuple[str, object]] = field(default_factory=list)
    side_writes: List[SideWrite] = field(default_factory=list)

    def add(self, row, label):
        self.atomic.append((label, row))
        return row

    def side(self, write):
        self.side_writes.append(write)
        return write

    def execute(self):
        """Commit the atomic unit, then attempt every side write.

        Returns:
            list of DependencyError for the side writes that were skipped
        """
        _commit_atomic(self.atomic)
        failures = []
        for write in self.side_writes:
            failure = _apply_side_write(write)
            if failure is not None:
                failures.append(failure)
        return failures


def _commit_atomic(rows):
    label = None
    try:
        for label, row in rows:
            db.session.add(row)
            db.session.flush()
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception("Atomic write failed at %s, rolled back", label)
        raise TransactionError(f"Failed to create {label}") from e


def _apply_side_write(write):
    try:
        write.apply()
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        failure = DependencyError(f"{write.description} failed", cause=str(e))
        logger.warning("Skipped side write: %s (%s)", write.description, e)
        if write.on_failure is not None:
            try:
                write.on_failure(failure)
            except Exception:
                logger.exception("on_failure hook failed for %s", write.description)
        return failure
    return None
