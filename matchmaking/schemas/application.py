import base64
import binascii

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from matchmaking.services.photo_store import ALLOWED_CONTENT_TYPES

# Web clients send camelCase (firstName, hasChildren); snake_case is accepted too
camel_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApplicationFields(BaseModel):
    model_config = camel_config

    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    mobile_number: str | None = None
    country: str | None = None
    address: str | None = None
    city: str | None = None
    birthday: str | None = None
    gender: str | None = None
    height: int | None = None
    ethnicity: str | None = None
    religion: str | None = None
    practicing: str | None = None
    marital_status: str | None = None
    has_children: bool | None = None
    want_children: bool | None = None
    university_degree: str | None = None
    profession: str | None = None
    annual_income: str | None = None
    net_worth: str | None = None
    how_did_you_learn_about_us: str | None = None
    preferred_contact_method: str | None = None
    consultation_preference: str | None = None
    consent: bool | None = None

    # base64-encoded image
    photo: str | None = None
    photo_content_type: str | None = None

    @field_validator("photo")
    @classmethod
    def validate_photo(cls, value: str | None) -> str | None:
        if value is None:
            return None
        if "," in value and value.startswith("data:"):
            value = value.split(",", 1)[1]
        try:
            base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("photo must be base64-encoded") from exc
        return value

    @field_validator("photo_content_type")
    @classmethod
    def validate_content_type(cls, value: str | None) -> str | None:
        if value is not None and value not in ALLOWED_CONTENT_TYPES:
            raise ValueError("Unsupported image type")
        return value

    def photo_bytes(self) -> bytes | None:
        return base64.b64decode(self.photo) if self.photo else None

    def attributes(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude={"photo", "photo_content_type", "request_upload_url"})


class ApplicationCreate(ApplicationFields):
    birthday: str
    request_upload_url: bool = False


class ApplicationAmend(ApplicationFields):
    pass


class ApprovalUpdate(BaseModel):
    approved: bool


class SearchFilter(BaseModel):
    model_config = camel_config

    gender: str | None = None
    city: str | None = None
    age: int | None = None
    religion: str | None = None
    ethnicity: str | None = None
    height: int | None = None
    has_children: bool | None = None
    want_children: bool | None = None
    profession: str | None = None
    education: str | None = None
