# dawazon/tasks/expire.py
from uuid import uuid4

from dawazon.celery_worker import celery_app
from dawazon.data.database import SessionLocal
from dawazon.services.cart_service import CartService
from dawazon.services.lock_service import LockService
from dawazon.services.product_client import ProductClient
from dawazon.utils.settings import CHECKOUT_TIMEOUT_SECONDS
from dawazon.utils.logging import add_context, clear_context, get_logger

logger = get_logger(__name__)


@celery_app.task(name="dawazon.tasks.expire.expire_checkouts_task")
def expire_checkouts_task(timeout_seconds: int = CHECKOUT_TIMEOUT_SECONDS):
    """Cofa checkouty porzucone dluzej niz timeout i oddaje towar do katalogu."""
    #kazdy log z tego przebiegu niesie run_id
    add_context(task="expire_checkouts", run_id=uuid4().hex[:12])
    logger.info("Expire checkouts task started")

    db = SessionLocal()
    try:
        service = CartService(
            db=db,
            product_client=ProductClient(),
            lock_service=LockService(),
        )
        expired = service.expire_stale_checkouts(timeout_seconds=timeout_seconds)
        logger.info("Expire checkouts task finished", expired=expired)
        return expired
    finally:
        db.close()
        clear_context()
