import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Callable

from starlette.concurrency import run_in_threadpool

from matchmaking.models.application import NORMALIZED_FIELDS, ProfileApplication
from matchmaking.models.base import now_epoch
from matchmaking.models.user import UserAccount
from matchmaking.services.connection_registry import ConnectionRegistry
from matchmaking.services.photo_store import PhotoStore
from matchmaking.services.record_store import Predicate, RecordStore
from matchmaking.utils.errors import Conflict, NotFound, ServiceError, ValidationError

logger = logging.getLogger(__name__)

# Attributes owned by the workflow, never taken from a request
PROTECTED_FIELDS = {"application_id", "user_id", "age", "approved", "created_at", "updated_at"}
EDITABLE_FIELDS = set(ProfileApplication.model_fields) - PROTECTED_FIELDS
PHOTO_FETCH_WORKERS = 8


def compute_age(birthday: str, today: date) -> int:
    """Full years elapsed between a DD/MM/YYYY birthday and ``today``."""
    parts = birthday.split("/") if birthday else []
    if len(parts) != 3:
        raise ValidationError("Birthday must be in DD/MM/YYYY format")
    try:
        day, month, year = (int(part) for part in parts)
        born = date(year, month, day)
    except ValueError as exc:
        raise ValidationError("Birthday must be a valid DD/MM/YYYY date") from exc
    if born > today:
        raise ValidationError("Birthday cannot be in the future")

    age = today.year - born.year
    if (today.month, today.day) < (born.month, born.day):
        age -= 1
    return age


def normalize_attributes(attributes: dict) -> dict:
    cleaned = {}
    for field, value in attributes.items():
        if field not in EDITABLE_FIELDS:
            continue
        if field in NORMALIZED_FIELDS and isinstance(value, str):
            value = value.strip().lower()
        cleaned[field] = value
    return cleaned


class ApplicationService:
    def __init__(
        self,
        store: RecordStore,
        photos: PhotoStore,
        notifier: ConnectionRegistry,
        today: Callable[[], date] = date.today,
    ):
        self.store = store
        self.photos = photos
        self.notifier = notifier
        self.today = today

    # ---- reads ----

    def find_by_user(self, user_id: str) -> ProfileApplication | None:
        items = self.store.scan("applications", Predicate().where("user_id", user_id))
        return ProfileApplication.from_item(items[0]) if items else None

    def with_photos(self, applications: list[ProfileApplication]) -> list[dict]:
        """Join each application with its photo; fetches run concurrently."""
        if not applications:
            return []
        keys = [application.application_id for application in applications]
        with ThreadPoolExecutor(max_workers=min(PHOTO_FETCH_WORKERS, len(keys))) as pool:
            photos = list(pool.map(self.photos.photo_as_base64, keys))
        return [
            {**application.model_dump(), "photo": photo}
            for application, photo in zip(applications, photos)
        ]

    def get_all_applications(self) -> list[dict]:
        applications = [ProfileApplication.from_item(item) for item in self.store.scan("applications")]
        return self.with_photos(applications)

    def get_single_application(self, application_id: str) -> dict:
        application = ProfileApplication.from_item(self.store.get_by_id("applications", application_id))
        if not application:
            raise NotFound("Application not found")
        return self.with_photos([application])[0]

    def get_application_for_user(self, user_id: str) -> dict:
        application = self.find_by_user(user_id)
        if not application:
            raise NotFound("Application not found")
        return self.with_photos([application])[0]

    # ---- writes ----

    def create_application(
        self,
        user_id: str,
        attributes: dict,
        photo: bytes | None = None,
        photo_content_type: str | None = None,
        request_upload_url: bool = False,
    ) -> dict:
        user = UserAccount.from_item(self.store.get_by_id("users", user_id))
        if not user:
            raise NotFound("User not found")
        # Existence check only; two concurrent submissions can both pass it
        if self.find_by_user(user_id):
            raise Conflict("Application already submitted")

        fields = {field: value for field, value in normalize_attributes(attributes).items() if value is not None}
        if not fields.get("birthday"):
            raise ValidationError("Birthday is required")
        fields.setdefault("email", user.email)

        application = ProfileApplication(
            user_id=user_id,
            age=compute_age(fields["birthday"], self.today()),
            **fields,
        )
        self.store.put_new("applications", application.to_item())
        logger.info("Application %s created for user %s", application.application_id, user_id)

        payload = application.model_dump()
        payload["photo_uploaded"] = False
        payload["upload_url"] = None

        # Record stays even if the photo step fails; readers see photo: null
        try:
            if photo:
                self.photos.put_object(application.application_id, photo, photo_content_type)
                payload["photo_uploaded"] = True
            elif request_upload_url:
                payload["upload_url"] = self.photos.presign_upload(
                    application.application_id, photo_content_type
                )
        except ServiceError as exc:
            logger.warning("Photo step failed for application %s: %s", application.application_id, exc.message)
        return payload

    def amend_application(
        self,
        user_id: str,
        attributes: dict,
        photo: bytes | None = None,
        photo_content_type: str | None = None,
    ) -> dict:
        application = self.find_by_user(user_id)
        if not application:
            raise NotFound("Application not found")

        fields = normalize_attributes(attributes)
        updated = application.model_copy(update=fields)
        if "birthday" in fields:
            updated.age = compute_age(fields["birthday"], self.today())
        # Approval status is left as is
        updated.updated_at = now_epoch()
        self.store.put("applications", updated.to_item())
        logger.info("Application %s amended", updated.application_id)

        payload = updated.model_dump()
        payload["photo_uploaded"] = False
        if photo:
            payload["photo_uploaded"] = self.replace_photo(updated.application_id, photo, photo_content_type)
        return payload

    def replace_photo(self, application_id: str, photo: bytes, content_type: str | None = None) -> bool:
        try:
            self.photos.delete_object(application_id)
            self.photos.put_object(application_id, photo, content_type)
        except ServiceError as exc:
            logger.warning("Photo replacement failed for application %s: %s", application_id, exc.message)
            return False
        return True

    def replace_photo_for_user(self, user_id: str, photo: bytes, content_type: str | None = None) -> dict:
        application = self.find_by_user(user_id)
        if not application:
            raise NotFound("Application not found")
        uploaded = self.replace_photo(application.application_id, photo, content_type)
        return {"application_id": application.application_id, "photo_uploaded": uploaded}

    def presign_photo_upload(self, user_id: str, content_type: str | None = None) -> dict:
        application = self.find_by_user(user_id)
        if not application:
            raise NotFound("Application not found")
        url = self.photos.presign_upload(application.application_id, content_type)
        return {"application_id": application.application_id, "upload_url": url}

    async def approve(self, application_id: str, approved: bool) -> dict:
        # Store calls block, so they run on a worker thread
        item = await run_in_threadpool(
            self.store.update,
            "applications",
            application_id,
            {"approved": approved, "updated_at": now_epoch()},
        )
        application = ProfileApplication.from_item(item)
        logger.info("Application %s approved=%s", application_id, approved)

        notified = False
        if approved:
            notified = await self.notifier.notify(
                application.user_id,
                {
                    "type": "application_approved",
                    "userId": application.user_id,
                    "applicationId": application.application_id,
                },
            )
        return {"application": application.model_dump(), "notified": notified}
