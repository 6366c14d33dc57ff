# marketplace/tasks/prune.py
from marketplace.celery_worker import celery_app
from marketplace.data.database import SessionLocal
from marketplace.repos.cart_repo import CartRepo
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


@celery_app.task(name="marketplace.tasks.prune.prune_cart_entries_task")
def prune_cart_entries_task():
    """
    Drops cart entries whose product was sold, deleted or taken off sale.
    Placing an order only clears the buyer's own entry, other carts keep
    pointing at the listing until this runs.
    """
    logger.info("Prune cart entries task started")

    db = SessionLocal()
    try:
        repo = CartRepo(db)
        stale = repo.find_stale_entries()

        logger.info(f"Found {len(stale)} stale cart entries")

        for entry in stale:
            db.delete(entry)

        repo.commit()
        return len(stale)

    finally:
        db.close()
