import uuid

from pydantic import Field

from matchmaking.models.base import StoredRecord, now_epoch

# Free-text attributes stored lowercase so exact-match search is case-insensitive
NORMALIZED_FIELDS = (
    "gender",
    "city",
    "country",
    "religion",
    "ethnicity",
    "practicing",
    "marital_status",
    "profession",
    "university_degree",
)


class ProfileApplication(StoredRecord):
    application_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str

    # Contact
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    mobile_number: str | None = None
    country: str | None = None
    address: str | None = None
    city: str | None = None

    # Demographics
    birthday: str | None = None      # DD/MM/YYYY
    age: int | None = None
    gender: str | None = None
    height: int | None = None        # cm
    ethnicity: str | None = None
    religion: str | None = None
    practicing: str | None = None
    marital_status: str | None = None
    has_children: bool | None = None
    want_children: bool | None = None

    # Education & finances
    university_degree: str | None = None
    profession: str | None = None
    annual_income: str | None = None
    net_worth: str | None = None

    # Preferences
    how_did_you_learn_about_us: str | None = None
    preferred_contact_method: str | None = None
    consultation_preference: str | None = None
    consent: bool = False

    approved: bool = False
    created_at: int = Field(default_factory=now_epoch)
    updated_at: int = Field(default_factory=now_epoch)
