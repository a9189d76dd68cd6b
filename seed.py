import logging

from matchmaking.config import settings
from matchmaking.services.account_service import AccountService
from matchmaking.services.record_store import DynamoRecordStore, RecordStore
from matchmaking.utils.errors import Conflict

logger = logging.getLogger(__name__)


def seed_tables(store: DynamoRecordStore) -> None:
    created = store.ensure_tables()
    if created:
        logger.info("Created tables: %s", ", ".join(created))
    else:
        logger.info("All tables present, skipping creation.")


def seed_default_admin(store: RecordStore) -> None:
    username = settings.DEFAULT_ADMIN_USERNAME
    password = settings.DEFAULT_ADMIN_PASSWORD
    if not username or not password:
        logger.info("No default admin configured, skipping.")
        return

    try:
        AccountService(store, settings).create_admin(username, password)
        logger.info("Default admin %s seeded!", username)
    except Conflict:
        logger.info("Default admin %s already present, skipping.", username)


def run_seed(store: DynamoRecordStore | None = None) -> None:
    store = store or DynamoRecordStore(settings)
    try:
        seed_tables(store)
        seed_default_admin(store)
    except Exception:
        logger.exception("Seeding error")


if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL)
    run_seed()
