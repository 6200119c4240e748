"""SQLStore against an in-memory SQLite database."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from citaplanner.core.exceptions import DuplicateResource, SlotConflict
from citaplanner.models import (
    Appointment,
    Base,
    IntegrationLog,
    Professional,
    Service,
    Tenant,
    User,
    UserRole,
)
from citaplanner.storage.provider import SQLStoreProvider, StoreProvider
from citaplanner.storage.sql_store import SQLStore
from tests.conftest import PASSWORD_HASH, make_weekly

START = datetime(2025, 3, 17, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def sql_store(session_factory):
    db = session_factory()
    yield SQLStore(db)
    db.close()


@pytest.fixture
def seeded(sql_store):
    tenant = sql_store.create_tenant(Tenant(name="Bella", subdomain="bella"))
    service = sql_store.create_service(Service(tenant_id=tenant.id, name="Corte", duration=45, price=Decimal("300")))
    professional = sql_store.create_professional(Professional(
        tenant_id=tenant.id, name="Ana", weekly_schedule=make_weekly({1: [("09:00", "13:00")]})
    ))
    return tenant, service, professional


def appointment(tenant, service, professional, start=START, minutes=45, **kwargs):
    return Appointment(
        tenant_id=tenant.id,
        professional_id=professional.id,
        service_id=service.id,
        title="Corte",
        client_name=kwargs.pop("client_name", "María"),
        client_phone=kwargs.pop("client_phone", "5599999999"),
        start_datetime=start,
        end_datetime=start + timedelta(minutes=minutes),
        **kwargs
    )


class TestDirectory:

    def test_tenant_defaults_and_lookup(self, sql_store, seeded):
        tenant, _, _ = seeded
        found = sql_store.get_tenant_by_subdomain("bella")

        assert found.id == tenant.id
        assert found.status == "ACTIVE"
        assert found.plan_type == "FREE"
        assert sql_store.get_tenant_by_subdomain("nope") is None

    def test_duplicate_subdomain(self, sql_store, seeded):
        with pytest.raises(DuplicateResource):
            sql_store.create_tenant(Tenant(name="Otra Bella", subdomain="bella"))
        # Session is usable after the rollback
        assert [t.subdomain for t in sql_store.list_tenants()] == ["bella"]

    def test_users_scoped_by_tenant(self, sql_store, seeded):
        tenant, _, _ = seeded
        other = sql_store.create_tenant(Tenant(name="Otra", subdomain="otra"))
        for t in (tenant, other):
            sql_store.create_user(User(
                tenant_id=t.id, name="Ana", phone="5510000001", hashed_password=PASSWORD_HASH, role=UserRole.ADMIN
            ))

        assert sql_store.get_user_by_login(tenant.id, "5510000001").tenant_id == tenant.id
        assert sql_store.get_user_by_login(other.id, "5510000001").tenant_id == other.id
        assert sql_store.get_user_by_login(None, "5510000001") is None

        with pytest.raises(DuplicateResource):
            sql_store.create_user(User(
                tenant_id=tenant.id, name="Ana 2", phone="5510000001", hashed_password=PASSWORD_HASH
            ))

    def test_schedule_json_round_trip(self, sql_store, seeded):
        tenant, _, professional = seeded
        loaded = sql_store.get_professional(tenant.id, professional.id)
        assert loaded.weekly_schedule == make_weekly({1: [("09:00", "13:00")]})
        assert loaded.exceptions == []


class TestAppointments:

    def test_create_and_read_back_in_utc(self, sql_store, seeded):
        created = sql_store.create_appointment_if_free(appointment(*seeded))
        loaded = sql_store.get_appointment(seeded[0].id, created.id)

        assert loaded.status == "SCHEDULED"
        assert loaded.to_dict()["start_datetime"] == "2025-03-17T09:00:00+00:00"
        assert loaded.to_dict()["end_datetime"] == "2025-03-17T09:45:00+00:00"

    def test_overlap_rejected(self, sql_store, seeded):
        sql_store.create_appointment_if_free(appointment(*seeded))
        with pytest.raises(SlotConflict):
            sql_store.create_appointment_if_free(appointment(*seeded, start=START + timedelta(minutes=30)))
        assert len(sql_store.list_appointments(seeded[0].id)) == 1

    def test_adjacent_allowed(self, sql_store, seeded):
        sql_store.create_appointment_if_free(appointment(*seeded))
        sql_store.create_appointment_if_free(appointment(*seeded, start=START + timedelta(minutes=45)))
        assert len(sql_store.list_appointments(seeded[0].id)) == 2

    def test_cancelled_does_not_block(self, sql_store, seeded):
        first = sql_store.create_appointment_if_free(appointment(*seeded))
        first.status = "CANCELLED"
        sql_store.save_appointment(first)

        sql_store.create_appointment_if_free(appointment(*seeded))
        assert len(sql_store.list_appointments(seeded[0].id, statuses=["SCHEDULED"])) == 1

    def test_list_filters(self, sql_store, seeded):
        tenant, _, _ = seeded
        sql_store.create_appointment_if_free(appointment(*seeded, client_phone="5511111111"))
        sql_store.create_appointment_if_free(appointment(*seeded, start=START + timedelta(hours=2)))

        by_phone = sql_store.list_appointments(tenant.id, client_phone="5511111111")
        assert len(by_phone) == 1

        window = sql_store.list_appointments(
            tenant.id, start=START + timedelta(hours=1), end=START + timedelta(hours=3)
        )
        assert [a.to_dict()["start_datetime"] for a in window] == ["2025-03-17T11:00:00+00:00"]

        ordered = sql_store.list_appointments(tenant.id)
        assert [a.start_datetime for a in ordered] == sorted(a.start_datetime for a in ordered)


class TestIntegrationLog:

    def test_latest_first_with_limit(self, sql_store, seeded):
        tenant, _, _ = seeded
        for i in range(20):
            sql_store.add_integration_log(IntegrationLog(
                tenant_id=tenant.id, platform="WHATSAPP", event_type="APPOINTMENT_CREATED",
                status="QUEUED", payload={"n": i},
                created_at=START + timedelta(minutes=i),
            ))

        logs = sql_store.list_integration_logs(tenant.id)
        assert len(logs) == 15
        assert logs[0].payload == {"n": 19}


class TestProvider:

    def test_each_unit_of_work_gets_a_session(self, session_factory):
        provider = SQLStoreProvider(session_factory)

        with provider() as store:
            store.create_tenant(Tenant(name="Bella", subdomain="bella"))
            assert store.ping()

        with provider() as store:
            assert store.get_tenant_by_subdomain("bella") is not None

    def test_provider_without_session_cannot_be_built(self):
        class Incomplete(StoreProvider):
            pass

        with pytest.raises(TypeError):
            StoreProvider()
        with pytest.raises(TypeError):
            Incomplete()
