import time

from pydantic import BaseModel


def now_epoch() -> int:
    return int(time.time())


class StoredRecord(BaseModel):
    """Typed record converted to and from a DynamoDB item only at the store boundary."""

    def to_item(self) -> dict:
        # DynamoDB rejects empty attribute values, absent fields are simply omitted
        return self.model_dump(exclude_none=True)

    @classmethod
    def from_item(cls, item: dict | None):
        if item is None:
            return None
        return cls.model_validate(item)
