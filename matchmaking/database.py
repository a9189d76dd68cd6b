from functools import lru_cache

from fastapi import Depends

from matchmaking.config import settings
from matchmaking.services.account_service import AccountService
from matchmaking.services.application_service import ApplicationService
from matchmaking.services.connection_registry import connection_registry
from matchmaking.services.photo_store import PhotoStore
from matchmaking.services.record_store import DynamoRecordStore, RecordStore
from matchmaking.services.search_service import SearchService


@lru_cache
def get_record_store() -> RecordStore:
    return DynamoRecordStore(settings)


@lru_cache
def get_photo_store() -> PhotoStore:
    return PhotoStore(settings)


def get_account_service(store: RecordStore = Depends(get_record_store)) -> AccountService:
    return AccountService(store, settings)


def get_application_service(
    store: RecordStore = Depends(get_record_store),
    photos: PhotoStore = Depends(get_photo_store),
) -> ApplicationService:
    return ApplicationService(store, photos, connection_registry)


def get_search_service(
    store: RecordStore = Depends(get_record_store),
    applications: ApplicationService = Depends(get_application_service),
) -> SearchService:
    return SearchService(store, applications)
