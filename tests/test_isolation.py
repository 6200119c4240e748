"""Tenant data never crosses tenant boundaries."""

from citaplanner.schemas.appointment import AppointmentCreate
from citaplanner.services.appointment.appointment_service import AppointmentService
from tests.conftest import auth_headers, booking_payload, host, next_weekday


def otra_booking(world):
    return AppointmentService.create_appointment(world.store, world.otra, AppointmentCreate(**booking_payload(
        world, next_weekday(1), "09:00",
        professional_id=str(world.otra_pro.id),
        service_id=str(world.otra_service.id),
    )))


class TestCatalogIsolation:

    def test_services_listing(self, client, world):
        bella = client.get("/api/services", headers=host("bella")).json()
        otra = client.get("/api/services", headers=host("otra")).json()

        assert [s["id"] for s in bella["services"]] == [str(world.bella_service.id)]
        assert [s["id"] for s in otra["services"]] == [str(world.otra_service.id)]

    def test_professionals_listing(self, client, world, settings):
        response = client.get("/api/professionals", headers=auth_headers(world.bella_admin, settings, "bella"))
        assert {p["tenant_id"] for p in response.json()} == {str(world.bella.id)}

    def test_update_foreign_service_not_found(self, client, world, settings):
        response = client.put(
            f"/api/services/{world.otra_service.id}",
            json={"name": "Robado"},
            headers=auth_headers(world.bella_admin, settings, "bella")
        )
        assert response.status_code == 404
        assert world.otra_service.name == "Manicure"

    def test_update_foreign_professional_not_found(self, client, world, settings):
        from tests.conftest import make_weekly

        response = client.put(
            f"/api/professionals/{world.otra_pro.id}",
            json={"weekly_schedule": make_weekly(), "exceptions": []},
            headers=auth_headers(world.bella_admin, settings, "bella")
        )
        assert response.status_code == 404

    def test_clients_are_per_tenant(self, client, world, settings):
        payload = {"name": "Rosa", "phone": "5577777777"}
        assert client.post(
            "/api/clients", json=payload, headers=auth_headers(world.bella_admin, settings, "bella")
        ).status_code == 201
        # Same phone in another tenant is a different client
        assert client.post(
            "/api/clients", json=payload, headers=auth_headers(world.otra_admin, settings, "otra")
        ).status_code == 201
        # But unique within one
        assert client.post(
            "/api/clients", json=payload, headers=auth_headers(world.bella_admin, settings, "bella")
        ).status_code == 409

        listed = client.get("/api/clients", headers=auth_headers(world.bella_admin, settings, "bella")).json()
        assert [c["tenant_id"] for c in listed] == [str(world.bella.id)]


class TestAppointmentIsolation:

    def test_listing_excludes_other_tenant(self, client, world, settings):
        otra_booking(world)
        response = client.get("/api/appointments", headers=auth_headers(world.bella_admin, settings, "bella"))
        assert response.json()["total"] == 0

    def test_cannot_change_foreign_appointment(self, client, world, settings):
        appointment = otra_booking(world)
        response = client.post(
            f"/api/appointments/{appointment.id}/cancel",
            headers=auth_headers(world.bella_admin, settings, "bella")
        )
        assert response.status_code == 404
        assert appointment.status == "SCHEDULED"

    def test_booking_on_one_tenant_does_not_block_another(self, world):
        day = next_weekday(1)
        otra_booking(world)
        appointment = AppointmentService.create_appointment(
            world.store, world.bella, AppointmentCreate(**booking_payload(world, day, "09:00"))
        )
        assert appointment.tenant_id == world.bella.id

    def test_store_lookups_are_tenant_scoped(self, world):
        appointment = otra_booking(world)
        store = world.store

        assert store.get_appointment(world.bella.id, appointment.id) is None
        assert store.get_professional(world.bella.id, world.otra_pro.id) is None
        assert store.get_service(world.bella.id, world.otra_service.id) is None
        assert store.list_appointments(world.bella.id) == []
