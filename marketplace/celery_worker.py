# marketplace/celery_worker.py
from celery import Celery

from marketplace.utils.settings import (
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
    CART_PRUNE_INTERVAL_SECONDS,
)

celery_app = Celery(
    "marketplace",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# register tasks explicitly so the worker sees them
celery_app.conf.imports = (
    "marketplace.tasks.prune",
    "marketplace.services.notification_service",
)

celery_app.conf.beat_schedule = {
    "prune-cart-entries": {
        "task": "marketplace.tasks.prune.prune_cart_entries_task",
        "schedule": CART_PRUNE_INTERVAL_SECONDS,
    },
}

celery_app.conf.timezone = "UTC"
