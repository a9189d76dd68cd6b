import uuid

from pydantic import Field

from matchmaking.models.base import StoredRecord, now_epoch


class UserAccount(StoredRecord):
    user_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    username: str | None = None
    email: str
    password_hash: str | None = None
    google_sub: str | None = None     # federated identity subject
    reset_token: str | None = None
    reset_token_expires: int | None = None   # epoch seconds
    created_at: int = Field(default_factory=now_epoch)

    def public(self) -> dict:
        return self.model_dump(exclude={"password_hash", "reset_token", "reset_token_expires"})
