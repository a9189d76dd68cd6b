import uuid

from pydantic import Field

from matchmaking.models.base import StoredRecord, now_epoch


class AdminAccount(StoredRecord):
    admin_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    username: str
    password_hash: str
    created_at: int = Field(default_factory=now_epoch)

    def public(self) -> dict:
        return self.model_dump(exclude={"password_hash"})
