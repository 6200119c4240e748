"""Booking notifications: channel selection, task execution and queueing."""

import pytest

from citaplanner.core.exceptions import ResourceNotFound
from citaplanner.models import IntegrationLog
from citaplanner.schemas.appointment import AppointmentCreate
from citaplanner.services.appointment.appointment_service import AppointmentService
from citaplanner.services.notification.notification_service import NotificationService
from citaplanner.storage.provider import MemoryStoreProvider
from citaplanner.tasks import notification_tasks
from tests.conftest import auth_headers, booking_payload, host, next_weekday


@pytest.fixture
def appointment(world):
    return AppointmentService.create_appointment(world.store, world.bella, AppointmentCreate(
        **booking_payload(world, next_weekday(1), "09:00", client_phone=world.bella_client_user.phone)
    ))


class TestNotificationService:

    def test_defaults_to_whatsapp_only(self, world):
        appointment = AppointmentService.create_appointment(
            world.store, world.bella, AppointmentCreate(**booking_payload(world, next_weekday(1), "11:00"))
        )
        logs = NotificationService.record_booking_notifications(world.store, world.bella.id, appointment.id)

        assert [log.platform for log in logs] == ["WHATSAPP"]
        assert logs[0].status == "QUEUED"
        assert logs[0].event_type == "APPOINTMENT_CREATED"
        assert logs[0].payload["appointment_id"] == str(appointment.id)

    def test_follows_client_preferences(self, world, appointment):
        world.bella_client_user.notification_preferences = {"whatsapp": False, "sms": True, "email": True}

        logs = NotificationService.record_booking_notifications(world.store, world.bella.id, appointment.id)
        assert [log.platform for log in logs] == ["SMS", "EMAIL"]

    def test_all_channels_off(self, world, appointment):
        world.bella_client_user.notification_preferences = {"whatsapp": False, "sms": False, "email": False}
        assert NotificationService.record_booking_notifications(world.store, world.bella.id, appointment.id) == []

    def test_unknown_appointment(self, world, appointment):
        with pytest.raises(ResourceNotFound):
            NotificationService.record_booking_notifications(world.store, world.otra.id, appointment.id)

    def test_logs_listed_per_tenant(self, world, appointment):
        NotificationService.record_booking_notifications(world.store, world.bella.id, appointment.id)
        assert len(world.store.list_integration_logs(world.bella.id)) == 1
        assert world.store.list_integration_logs(world.otra.id) == []


class TestNotificationTask:

    @pytest.fixture(autouse=True)
    def memory_provider(self, world, monkeypatch):
        monkeypatch.setattr(notification_tasks, "_store_provider", MemoryStoreProvider(world.store))

    def test_records_logs(self, world, appointment):
        result = notification_tasks.send_booking_notifications(str(world.bella.id), str(appointment.id))

        assert result == {"status": "success", "appointment_id": str(appointment.id), "channels": ["WHATSAPP"]}

    def test_missing_appointment_is_skipped(self, world, appointment):
        result = notification_tasks.send_booking_notifications(str(world.otra.id), str(appointment.id))
        assert result["status"] == "skipped"


class TestBookingQueuesNotifications:

    @pytest.fixture
    def settings(self, settings):
        settings.NOTIFICATIONS_ENABLED = True
        return settings

    def test_booking_enqueues_task(self, client, world, monkeypatch):
        queued = []
        monkeypatch.setattr(
            notification_tasks.send_booking_notifications, "delay", lambda *args: queued.append(args)
        )

        response = client.post(
            "/api/appointments", json=booking_payload(world, next_weekday(1)), headers=host("bella")
        )

        assert response.status_code == 201
        assert queued == [(str(world.bella.id), response.json()["id"])]

    def test_tenant_opt_out_skips_queue(self, client, world, monkeypatch):
        queued = []
        monkeypatch.setattr(
            notification_tasks.send_booking_notifications, "delay", lambda *args: queued.append(args)
        )
        world.bella.feature_flags = {"booking_notifications": False}

        response = client.post(
            "/api/appointments", json=booking_payload(world, next_weekday(1)), headers=host("bella")
        )

        assert response.status_code == 201
        assert queued == []

    def test_broker_outage_does_not_fail_booking(self, client, world, monkeypatch):
        def unavailable(*args):
            raise ConnectionError("broker down")

        monkeypatch.setattr(notification_tasks.send_booking_notifications, "delay", unavailable)

        response = client.post(
            "/api/appointments", json=booking_payload(world, next_weekday(1)), headers=host("bella")
        )
        assert response.status_code == 201


class TestIntegrationStatus:

    def test_admin_sees_only_own_tenant_logs(self, client, world, settings, appointment):
        NotificationService.record_booking_notifications(world.store, world.bella.id, appointment.id)
        world.store.add_integration_log(IntegrationLog(
            tenant_id=world.otra.id, platform="SMS", event_type="APPOINTMENT_CREATED", payload={}
        ))

        response = client.get("/api/integrations/status", headers=auth_headers(world.bella_admin, settings, "bella"))

        assert response.status_code == 200
        body = response.json()
        assert [log["platform"] for log in body] == ["WHATSAPP"]
        assert {log["tenant_id"] for log in body} == {str(world.bella.id)}
        assert body[0]["payload"]["appointment_id"] == str(appointment.id)

        other = client.get("/api/integrations/status", headers=auth_headers(world.otra_admin, settings, "otra"))
        assert [log["platform"] for log in other.json()] == ["SMS"]

    def test_newest_first_and_limited(self, client, world, settings, appointment):
        for platform in ("WHATSAPP", "SMS", "EMAIL"):
            world.store.add_integration_log(IntegrationLog(
                tenant_id=world.bella.id, platform=platform, event_type="APPOINTMENT_CREATED", payload={}
            ))

        response = client.get(
            "/api/integrations/status", params={"limit": 2},
            headers=auth_headers(world.bella_admin, settings, "bella")
        )
        assert [log["platform"] for log in response.json()] == ["EMAIL", "SMS"]

    def test_professional_forbidden(self, client, world, settings):
        response = client.get(
            "/api/integrations/status", headers=auth_headers(world.bella_pro_user, settings, "bella")
        )
        assert response.status_code == 403

    def test_requires_token(self, client, world):
        assert client.get("/api/integrations/status", headers=host("bella")).status_code == 401
