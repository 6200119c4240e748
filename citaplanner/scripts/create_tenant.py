#!/usr/bin/env python3
"""
Script to provision a tenant with its first administrator
Usage: python -m citaplanner.scripts.create_tenant <subdomain> "<name>" <admin_phone> <admin_password> [timezone]
"""
import sys

from pydantic import ValidationError

from citaplanner.config.settings import get_settings
from citaplanner.core.exceptions import CitaPlannerError
from citaplanner.schemas.tenant import TenantCreate
from citaplanner.services.tenant.tenant_service import TenantService
from citaplanner.storage.provider import build_store_provider


def create_tenant(argv):
    if len(argv) < 4:
        print(__doc__)
        sys.exit(2)

    subdomain, name, admin_phone, admin_password = argv[:4]
    timezone = argv[4] if len(argv) > 4 else get_settings().DEFAULT_TIMEZONE

    try:
        data = TenantCreate(
            name=name,
            subdomain=subdomain,
            timezone=timezone,
            admin_name=f"{name} Admin",
            admin_phone=admin_phone,
            admin_password=admin_password,
        )
        with build_store_provider(get_settings())() as store:
            tenant, admin = TenantService.provision(store, data)
    except (ValidationError, CitaPlannerError) as e:
        print(f"\nError creating tenant: {e}")
        sys.exit(1)

    print("\n" + "=" * 60)
    print("TENANT CREATED SUCCESSFULLY!")
    print("=" * 60)
    print(f"\nTenant ID: {tenant.id}")
    print(f"Name: {tenant.name}")
    print(f"Subdomain: {tenant.subdomain}.{get_settings().ROOT_DOMAIN}")
    print(f"Time zone: {tenant.timezone}")
    print(f"Admin login: {admin.phone}")
    print()

    return str(tenant.id)


if __name__ == "__main__":
    create_tenant(sys.argv[1:])
