"""RQ worker job: create a stock record that failed during provisioning."""
import logging
import uuid

from flask import current_app, has_app_context
from redis.exceptions import LockError
from sqlalchemy.exc import IntegrityError

from app import create_app, extensions
from app.extensions import db
from app.models.variant import ColorVariant, StockRecord

logger = logging.getLogger(__name__)

_worker_app = None


def _get_app():
    """Return an app instance for worker execution.

    Reuse the current app when already inside an app context (tests/CLI),
    otherwise lazily create the worker app once.
    """
    global _worker_app
    if has_app_context():
        return current_app._get_current_object()
    if _worker_app is None:
        _worker_app = create_app()
    return _worker_app


def ensure_stock_record(variant_id, available=0, reserved=0, reorder_point=0):
    """Create the stock record of a color unless one exists.

    Idempotency: an existing record is never overwritten, so a manual stock
    update made in the meantime wins.
    Distributed lock: prevents two workers backfilling the same color.

    Returns:
        True when a record was created
    """
    app = _get_app()
    with app.app_context():
        vid = uuid.UUID(str(variant_id))

        lock = None
        if extensions.redis_client is not None:
            lock = extensions.redis_client.lock(f"stock_backfill:{vid}", timeout=60)
            if not lock.acquire(blocking=False):
                logger.info("Lock held for color %s, skipping", vid)
                return False

        try:
            if db.session.get(ColorVariant, vid) is None:
                logger.error("Color %s not found, nothing to backfill", vid)
                return False
            if StockRecord.query.filter_by(variant_id=vid).first():
                logger.info("Color %s already has stock, skipping", vid)
                return False

            db.session.add(
                StockRecord(
                    id=uuid.uuid4(),
                    variant_id=vid,
                    available=available,
                    reserved=reserved,
                    reorder_point=reorder_point,
                )
            )
            try:
                db.session.commit()
            except IntegrityError:
                db.session.rollback()
                logger.info("Stock for color %s created concurrently", vid)
                return False

            logger.info("Backfilled stock record for color %s", vid)
            return True

        finally:
            if lock is not None:
                try:
                    lock.release()
                except LockError:
                    pass  # lock may have expired
