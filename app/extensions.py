import logging
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
import redis as _redis
from rq import Queue

logger = logging.getLogger(__name__)

db = SQLAlchemy()
migrate = Migrate()

# Initialized lazily in create_app
redis_client: _redis.Redis = None  # type: ignore
task_queue: Queue = None  # type: ignore


class DummyQueue:
    """Stand-in for the RQ queue when Redis is not configured.

    Jobs are dropped; `flask backfill-stock` repairs what the stock
    backfill job would have done.
    """

    name = "dummy"

    def enqueue(self, func, *args, **kwargs):
        logger.warning(
            "Redis not available, dropping job %s (%s)", func, kwargs.get("job_id")
        )
        return None


def init_redis(app):
    """Connect Redis and bind the stock backfill queue, or fall back."""
    global redis_client, task_queue
    redis_client = None
    task_queue = DummyQueue()

    redis_url = app.config.get("REDIS_URL", "")
    if not redis_url:
        logger.warning("REDIS_URL not set, stock backfill jobs disabled")
        return

    try:
        client = _redis.from_url(redis_url, decode_responses=False)
        client.ping()
    except (_redis.RedisError, ValueError) as e:
        logger.warning("Redis connection failed (%s), stock backfill jobs disabled", e)
        return

    redis_client = client
    task_queue = Queue(app.config["STOCK_BACKFILL_QUEUE"], connection=client)
    logger.info("Stock backfill queue %r ready", task_queue.name)
