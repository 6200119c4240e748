"""Shared test fixtures and helpers."""

import os

# Importing citaplanner.main builds a module-level app from the environment
os.environ.setdefault("STORAGE_BACKEND", "memory")

from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient

from citaplanner.api.dependencies import create_access_token
from citaplanner.config.settings import Settings
from citaplanner.main import create_app
from citaplanner.models import Professional, Service, Tenant, User, UserRole
from citaplanner.storage.memory_store import MemoryStore
from citaplanner.storage.provider import MemoryStoreProvider

PASSWORD = "correct-horse-battery"
# Hash once; bcrypt is deliberately slow
PASSWORD_HASH = User.hash_password(PASSWORD)

ROOT_DOMAIN = "citaplanner.test"

SCENARIO_SCHEDULE = {1: [("09:00", "13:00"), ("15:00", "18:00")]}


def make_weekly(days: Optional[Dict[int, List[Tuple[str, str]]]] = None) -> List[dict]:
    """Raw weekly schedule; days not listed are disabled."""
    days = days or {}
    return [
        {
            "day_of_week": i,
            "is_enabled": i in days,
            "slots": [{"start": s, "end": e} for s, e in days.get(i, [])],
        }
        for i in range(7)
    ]


def next_weekday(weekday: int, min_days_ahead: int = 7) -> date:
    """A future date with the given day index (0=Sunday)."""
    day = date.today() + timedelta(days=min_days_ahead)
    while day.isoweekday() % 7 != weekday:
        day += timedelta(days=1)
    return day


def make_tenant(store: MemoryStore, subdomain: str, timezone: str = "UTC", **kwargs) -> Tenant:
    return store.create_tenant(Tenant(
        name=kwargs.pop("name", subdomain.title()),
        subdomain=subdomain,
        timezone=timezone,
        **kwargs
    ))


def make_user(store: MemoryStore, tenant: Optional[Tenant], phone: str,
              role: UserRole = UserRole.ADMIN, related_id=None, **kwargs) -> User:
    return store.create_user(User(
        tenant_id=tenant.id if tenant else None,
        name=kwargs.pop("name", f"User {phone}"),
        phone=phone,
        hashed_password=PASSWORD_HASH,
        role=role,
        related_id=related_id,
        **kwargs
    ))


def make_service(store: MemoryStore, tenant: Tenant, duration: int = 45, **kwargs) -> Service:
    return store.create_service(Service(
        tenant_id=tenant.id,
        name=kwargs.pop("name", "Corte"),
        duration=duration,
        price=Decimal(kwargs.pop("price", "300.00")),
        **kwargs
    ))


def make_professional(store: MemoryStore, tenant: Tenant, schedule=None,
                      exceptions=None, service_ids=None, **kwargs) -> Professional:
    return store.create_professional(Professional(
        tenant_id=tenant.id,
        name=kwargs.pop("name", "Ana"),
        weekly_schedule=make_weekly(SCENARIO_SCHEDULE if schedule is None else schedule),
        exceptions=exceptions or [],
        service_ids=[str(i) for i in (service_ids or [])],
        **kwargs
    ))


def host(subdomain: str) -> Dict[str, str]:
    return {"host": f"{subdomain}.{ROOT_DOMAIN}"}


def auth_headers(user: User, settings: Settings, subdomain: str) -> Dict[str, str]:
    token, _ = create_access_token(user, settings)
    return {"Authorization": f"Bearer {token}", **host(subdomain)}


class World:
    """Seeded tenants, users and catalog shared by the API tests."""

    def __init__(self, store: MemoryStore):
        self.store = store

        self.master = make_tenant(store, "master")
        self.bella = make_tenant(store, "bella")
        self.otra = make_tenant(store, "otra")

        self.superadmin = make_user(store, None, "5500000000", role=UserRole.SUPERADMIN)
        self.bella_admin = make_user(store, self.bella, "5510000001")
        self.otra_admin = make_user(store, self.otra, "5520000001")

        self.bella_service = make_service(store, self.bella, duration=45, name="Corte")
        self.bella_pro = make_professional(store, self.bella, name="Ana")
        self.bella_pro_user = make_user(
            store, self.bella, "5510000002", role=UserRole.PROFESSIONAL, related_id=self.bella_pro.id
        )
        self.bella_client_user = make_user(store, self.bella, "5510000003", role=UserRole.CLIENT)

        self.otra_service = make_service(store, self.otra, duration=60, name="Manicure")
        self.otra_pro = make_professional(store, self.otra, name="Carla")


@pytest.fixture
def settings():
    return Settings(
        STORAGE_BACKEND="memory",
        JWT_SECRET_KEY="test-secret-key",
        ROOT_DOMAIN=ROOT_DOMAIN,
        MASTER_SUBDOMAIN="master",
        TENANT_CACHE_ENABLED=False,
        NOTIFICATIONS_ENABLED=False,
        SEED_DEMO_DATA=False,
    )


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def world(store):
    return World(store)


@pytest.fixture
def app(settings, store, world):
    return create_app(settings=settings, store_provider=MemoryStoreProvider(store))


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def booking_payload(world: World, day: date, time: str = "09:00", **overrides) -> dict:
    payload = {
        "professional_id": str(world.bella_pro.id),
        "service_id": str(world.bella_service.id),
        "start_datetime": f"{day.isoformat()}T{time}:00",
        "client_name": "María Pérez",
        "client_phone": "5599999999",
    }
    payload.update(overrides)
    return payload
