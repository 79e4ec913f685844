# dawazon/celery_worker.py
from celery import Celery
from celery.signals import setup_logging

from dawazon.utils.settings import (
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
    CHECKOUT_CLEANUP_INTERVAL_SECONDS,
)

celery_app = Celery(
    "dawazon",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# WAZNE: explicite importuj taski, zeby Celery je zarejestrowal
celery_app.conf.imports = (
    "dawazon.tasks.expire",
    "dawazon.services.notification_service",
)

# Konfiguracja beat schedule
celery_app.conf.beat_schedule = {
    "expire-checkouts-every-2-minutes": {
        "task": "dawazon.tasks.expire.expire_checkouts_task",
        "schedule": CHECKOUT_CLEANUP_INTERVAL_SECONDS,
    },
}

celery_app.conf.timezone = "UTC"


@setup_logging.connect
def configure_worker_logging(**kwargs):
    from dawazon.utils.logging import configure_logging

    configure_logging()
