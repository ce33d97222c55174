"""Shared test fixtures for all test modules."""

import base64
import contextlib
import json
import time
import uuid
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.core import database as db_module
from app.core.config import Settings, get_settings
from app.core.database import Base, get_db
from app.main import app as fastapi_app
from app.models.organization import Organization
from app.models.subscription import Subscription
from app.models.user import User
from app.repositories.admin_repository import AdminRepository
from app.repositories.organization_repository import OrganizationRepository
from app.repositories.subscription_repository import SubscriptionRepository
from app.repositories.user_repository import UserRepository
from app.schemas.admin import AdminCreate
from app.schemas.organization import OrganizationCreate
from app.schemas.subscription import SubscriptionCreate
from app.schemas.user import UserCreate
from app.services.webhook_verifier import WebhookVerifier

# Create an in-memory SQLite engine with StaticPool so all connections
# share the same database state and there are no file-locking issues.
_test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
_TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_test_engine)

WEBHOOK_SECRET = "whsec_" + base64.b64encode(b"clerk-mirror-test-signing-key").decode()


def sign_webhook(
    payload: dict[str, Any] | bytes,
    msg_id: str | None = None,
    timestamp: int | None = None,
    secret: str = WEBHOOK_SECRET,
) -> tuple[bytes, dict[str, str]]:
    """Build a Svix-signed body and its headers the way Clerk delivers them."""
    body = payload if isinstance(payload, bytes) else json.dumps(payload).encode()
    msg_id = msg_id or f"msg_{uuid.uuid4().hex}"
    timestamp = int(time.time()) if timestamp is None else timestamp
    signature = WebhookVerifier(secret).sign(msg_id, timestamp, body)
    headers = {
        "svix-id": msg_id,
        "svix-timestamp": str(timestamp),
        "svix-signature": f"v1,{signature}",
        "content-type": "application/json",
    }
    return body, headers


@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test and truncate all data after.

    Patches the module-level engine and SessionLocal so all application code
    uses the in-memory test database. Clears data after each test.
    """
    # Patch module-level engine and session factory
    original_engine = db_module.engine
    original_session = db_module.SessionLocal
    db_module.engine = _test_engine
    db_module.SessionLocal = _TestSessionLocal

    Base.metadata.create_all(bind=_test_engine)

    yield
    with _test_engine.connect() as conn:
        conn.execute(text("PRAGMA foreign_keys = OFF"))
        for table in reversed(Base.metadata.sorted_tables):
            with contextlib.suppress(OperationalError):
                conn.execute(table.delete())
        conn.execute(text("PRAGMA foreign_keys = ON"))
        conn.commit()

    # Restore originals
    db_module.engine = original_engine
    db_module.SessionLocal = original_session


@pytest.fixture
def db_session():
    gen = get_db()
    db = next(gen)
    try:
        yield db
    finally:
        for _ in gen:
            pass


@pytest.fixture
def test_settings():
    """Settings with a webhook secret, injected into every ``Depends(get_settings)``."""
    settings = Settings(
        CLERK_WEBHOOK_SECRET=WEBHOOK_SECRET,
        APP_BASE_URL="http://testserver",
        SMTP_HOST="",
    )
    fastapi_app.dependency_overrides[get_settings] = lambda: settings
    yield settings
    fastapi_app.dependency_overrides.pop(get_settings, None)


@pytest.fixture
def admin_key(db_session):
    """Raw API key of an active admin."""
    _, raw_key = AdminRepository(db_session).create(
        AdminCreate(email="admin@example.com", name="Admin")
    )
    return raw_key


@pytest.fixture
def admin_headers(admin_key):
    return {"Authorization": f"Bearer {admin_key}"}


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(fastapi_app)


@pytest.fixture
def authed_client(admin_key):
    """Create a test client carrying a valid admin API key."""
    client = TestClient(fastapi_app)
    client.headers["Authorization"] = f"Bearer {admin_key}"
    return client


# ---------------------------------------------------------------------------
# Row builders
# ---------------------------------------------------------------------------


def make_user(  # type: ignore[no-untyped-def]
    db, external_id: str = "user_1", email: str = "jane@example.com", **kwargs
) -> User:
    return UserRepository(db).create(UserCreate(external_id=external_id, email=email, **kwargs))


def make_organization(  # type: ignore[no-untyped-def]
    db, external_id: str = "org_1", name: str = "Acme", **kwargs
) -> Organization:
    return OrganizationRepository(db).create(
        OrganizationCreate(external_id=external_id, name=name, **kwargs)
    )


def make_subscription(  # type: ignore[no-untyped-def]
    db, external_id: str = "sub_1", user=None, organization=None, **kwargs
) -> Subscription:
    if organization is not None:
        subscriber = {
            "subscriber_type": "organization",
            "subscriber_organization_id": organization.id,
        }
    else:
        subscriber = {"subscriber_type": "user", "subscriber_user_id": user.id}
    return SubscriptionRepository(db).create(
        SubscriptionCreate(external_id=external_id, **subscriber, **kwargs)
    )


# ---------------------------------------------------------------------------
# Clerk payload builders
# ---------------------------------------------------------------------------


def user_data(
    clerk_id: str = "user_1",
    email: str = "jane@example.com",
    verified: bool = True,
    **overrides: Any,
) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": clerk_id,
        "object": "user",
        "email_addresses": [
            {
                "id": f"idn_{clerk_id}",
                "email_address": email,
                "verification": {"status": "verified" if verified else "unverified"},
            }
        ],
        "primary_email_address_id": f"idn_{clerk_id}",
        "phone_numbers": [],
        "primary_phone_number_id": None,
        "first_name": "Jane",
        "last_name": "Doe",
        "image_url": "https://img.clerk.com/jane.png",
        "created_at": 1_760_000_000_000,
        "last_sign_in_at": None,
        "public_metadata": {},
    }
    data.update(overrides)
    return data


def organization_data(
    clerk_id: str = "org_1",
    name: str = "Acme",
    **overrides: Any,
) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": clerk_id,
        "object": "organization",
        "name": name,
        "slug": name.lower(),
        "image_url": None,
        "created_by": None,
        "max_allowed_memberships": 5,
        "public_metadata": {},
        "private_metadata": {"tier": "gold"},
    }
    data.update(overrides)
    return data


def membership_data(
    clerk_id: str = "orgmem_1",
    org_id: str = "org_1",
    user_id: str = "user_1",
    role: str = "org:admin",
) -> dict[str, Any]:
    return {
        "id": clerk_id,
        "object": "organization_membership",
        "organization": {"id": org_id, "name": "Acme"},
        "public_user_data": {"user_id": user_id, "identifier": "jane@example.com"},
        "role": role,
        "public_metadata": {},
    }


def subscription_data(
    clerk_id: str = "sub_1",
    customer: str = "user_1",
    **overrides: Any,
) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": clerk_id,
        "customer": customer,
        "current_period_start": 1_760_000_000,
        "current_period_end": 1_762_592_000,
    }
    data.update(overrides)
    return data


def subscription_item_data(
    clerk_id: str = "si_1",
    subscription: str = "sub_1",
    **overrides: Any,
) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": clerk_id,
        "subscription": subscription,
        "plan": {
            "id": "plan_pro",
            "nickname": "Pro",
            "name": "Pro plan",
            "amount": 2000,
            "currency": "usd",
            "interval": "month",
        },
        "quantity": 1,
    }
    data.update(overrides)
    return data


def payment_attempt_data(
    clerk_id: str = "pa_1",
    subscription: str | None = "sub_1",
    **overrides: Any,
) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": clerk_id,
        "subscription": subscription,
        "amount": 2000,
        "currency": "usd",
        "status": "succeeded",
        "created": 1_760_000_100,
    }
    data.update(overrides)
    return data


def clerk_event(event_type: str, data: dict[str, Any]) -> dict[str, Any]:
    return {"type": event_type, "object": "event", "data": data}
