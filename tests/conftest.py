import os
import sys
from datetime import date
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure predictable environment variables for tests before importing the app.
BASE_DIR = Path(__file__).resolve().parents[1]

if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

os.environ.setdefault("JWT_SECRET_KEY", "test-user-secret")
os.environ.setdefault("ADMIN_SECRET_KEY", "test-admin-secret")
os.environ.setdefault("SEED_ON_STARTUP", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("GOOGLE_CLIENT_ID", "test-client-id")

import matchmaking.main as main  # noqa: E402  (import after env vars are set)
from matchmaking.config import settings  # noqa: E402
from matchmaking.database import (  # noqa: E402
    get_account_service,
    get_application_service,
    get_photo_store,
    get_record_store,
)
from matchmaking.services.account_service import AccountService  # noqa: E402
from matchmaking.services.application_service import ApplicationService  # noqa: E402
from matchmaking.services.connection_registry import connection_registry  # noqa: E402
from matchmaking.services.photo_store import PhotoStore  # noqa: E402
from matchmaking.utils.errors import InvalidCredential  # noqa: E402
from fakes import FakeS3Client, InMemoryRecordStore  # noqa: E402

RUN_DATE = date(2024, 6, 1)


@pytest.fixture()
def store():
    return InMemoryRecordStore()


@pytest.fixture()
def s3():
    return FakeS3Client()


@pytest.fixture()
def photos(s3):
    return PhotoStore(settings, client=s3)


@pytest.fixture()
def outbox():
    """Password reset emails captured as (email, token) pairs."""
    return []


@pytest.fixture()
def google_tokens():
    """ID token -> (subject, email) or (subject, email, email_verified) for the fake Google verifier."""
    return {}


@pytest.fixture()
def accounts(store, outbox, google_tokens):
    def _verify(token):
        if token not in google_tokens:
            raise InvalidCredential("Invalid Google token")
        subject, email, *verified = google_tokens[token]
        return subject, email, verified[0] if verified else True

    return AccountService(
        store,
        settings,
        send_reset_email=lambda email, token: outbox.append((email, token)),
        verify_google_token=_verify,
    )


@pytest.fixture()
def applications(store, photos):
    return ApplicationService(store, photos, connection_registry, today=lambda: RUN_DATE)


@pytest.fixture(autouse=True)
def clean_registry():
    connection_registry._connections.clear()
    yield
    connection_registry._connections.clear()


@pytest.fixture()
def client(store, photos, accounts, applications):
    """Provide a TestClient wired to in-memory adapters."""
    overrides = {
        get_record_store: lambda: store,
        get_photo_store: lambda: photos,
        get_account_service: lambda: accounts,
        get_application_service: lambda: applications,
    }
    main.app.dependency_overrides.update(overrides)

    with TestClient(main.app) as test_client:
        yield test_client

    for dependency in overrides:
        main.app.dependency_overrides.pop(dependency, None)
