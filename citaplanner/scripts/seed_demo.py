#!/usr/bin/env python3
"""
Demo data: the master tenant, one studio tenant with services and
professionals, and a platform SUPERADMIN.
Usage: python -m citaplanner.scripts.seed_demo

Also used to seed the in-memory backend when SEED_DEMO_DATA is on.
"""
import sys
from decimal import Decimal

from citaplanner.core.exceptions import DuplicateResource
from citaplanner.models import Professional, Service, Tenant, UserRole
from citaplanner.services.user.user_service import UserService
from citaplanner.storage.base import Store

DEMO_PASSWORD = "CitaPlanner2024!"

SUPERADMIN = {"name": "Platform Operator", "phone": "5500000000"}

MASTER_TENANT = {
    "name": "CitaPlanner",
    "subdomain": "master",
    "timezone": "America/Mexico_City",
    "admin": {"name": "Master Admin", "phone": "5500000001"},
}

STUDIO_TENANT = {
    "name": "Shula Studio",
    "subdomain": "shula",
    "timezone": "America/Mexico_City",
    "plan_type": "PRO",
    "feature_flags": {"whatsapp_notifications": True},
    "admin": {"name": "Shula Admin", "phone": "5511111111"},
}

STUDIO_SERVICES = [
    {"name": "Corte de cabello", "category": "Cabello", "duration": 45, "price": "350.00"},
    {"name": "Manicure", "category": "Uñas", "duration": 60, "price": "280.00"},
    {"name": "Lifting de pestañas", "category": "Pestañas", "duration": 90, "price": "750.00"},
]


def weekday_schedule(ranges, saturday_ranges=None):
    """Monday-Friday with `ranges`, optional Saturday, Sunday closed."""
    days = []
    for day in range(7):
        if 1 <= day <= 5:
            slots = ranges
        elif day == 6 and saturday_ranges:
            slots = saturday_ranges
        else:
            slots = []
        days.append({
            "day_of_week": day,
            "is_enabled": bool(slots),
            "slots": [{"start": start, "end": end} for start, end in slots],
        })
    return days


def _tenant(store: Store, data: dict) -> Tenant:
    existing = store.get_tenant_by_subdomain(data["subdomain"])
    if existing:
        return existing
    tenant = store.create_tenant(Tenant(
        name=data["name"],
        subdomain=data["subdomain"],
        timezone=data["timezone"],
        plan_type=data.get("plan_type", "FREE"),
        feature_flags=data.get("feature_flags", {}),
    ))
    try:
        UserService.create_user(
            store, tenant.id, data["admin"]["name"], data["admin"]["phone"],
            DEMO_PASSWORD, role=UserRole.ADMIN
        )
    except DuplicateResource:
        pass
    return tenant


def seed_demo_data(store: Store) -> dict:
    """Idempotent for tenants and users; services and professionals are added once per new tenant."""
    if store.get_user_by_login(None, SUPERADMIN["phone"]) is None:
        UserService.create_user(
            store, None, SUPERADMIN["name"], SUPERADMIN["phone"], DEMO_PASSWORD,
            role=UserRole.SUPERADMIN
        )

    master = _tenant(store, MASTER_TENANT)
    studio = _tenant(store, STUDIO_TENANT)

    if not store.list_services(studio.id, include_inactive=True):
        services = [
            store.create_service(Service(
                tenant_id=studio.id,
                name=item["name"],
                category=item["category"],
                duration=item["duration"],
                price=Decimal(item["price"]),
            ))
            for item in STUDIO_SERVICES
        ]

        ana = store.create_professional(Professional(
            tenant_id=studio.id,
            name="Ana López",
            role_label="Estilista",
            service_ids=[str(services[0].id), str(services[1].id)],
            weekly_schedule=weekday_schedule([("09:00", "13:00"), ("15:00", "18:00")], [("10:00", "14:00")]),
            exceptions=[],
        ))
        store.create_professional(Professional(
            tenant_id=studio.id,
            name="Carla Ruiz",
            role_label="Lash artist",
            service_ids=[str(services[2].id)],
            weekly_schedule=weekday_schedule([("11:00", "19:00")]),
            exceptions=[],
        ))
        UserService.create_user(
            store, studio.id, ana.name, "5522222222", DEMO_PASSWORD,
            role=UserRole.PROFESSIONAL, related_id=ana.id
        )

    return {"master": master, "studio": studio}


if __name__ == "__main__":
    from citaplanner.config.settings import get_settings
    from citaplanner.storage.provider import build_store_provider

    try:
        with build_store_provider(get_settings())() as store:
            tenants = seed_demo_data(store)
    except Exception as e:
        print(f"\nError seeding demo data: {e}")
        sys.exit(1)

    print("\n" + "=" * 60)
    print("DEMO DATA READY")
    print("=" * 60)
    for tenant in tenants.values():
        print(f"  {tenant.subdomain:10} {tenant.name} ({tenant.id})")
    print(f"\nAll demo users share the password: {DEMO_PASSWORD}")
    print()
