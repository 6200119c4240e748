# ============================================================================
# FILE: citaplanner/services/tenant/tenant_cache.py
# Redis cache in front of the tenant directory
# ============================================================================
import json
import logging
import uuid
from typing import Any, Dict, Optional

import redis.asyncio as redis

from citaplanner.config.redis import RedisKeys
from citaplanner.models import Tenant
from citaplanner.utils.time_utils import parse_timestamp

logger = logging.getLogger(__name__)


def tenant_from_dict(data: Dict[str, Any]) -> Tenant:
    """Rebuild a detached Tenant from its to_dict() form."""
    created_at = data.get("created_at")
    return Tenant(
        id=uuid.UUID(data["id"]),
        name=data["name"],
        subdomain=data["subdomain"],
        status=data["status"],
        plan_type=data["plan_type"],
        feature_flags=data.get("feature_flags") or {},
        timezone=data.get("timezone") or "UTC",
        created_at=parse_timestamp(created_at) if created_at else None,
    )


class TenantCache:
    """
    Caches found tenants by subdomain for ttl_seconds. Misses are not cached,
    so a newly provisioned tenant is visible on the next request.
    """

    def __init__(self, client: redis.Redis, ttl_seconds: int = 60):
        self.client = client
        self.ttl_seconds = ttl_seconds

    @staticmethod
    def _key(subdomain: str) -> str:
        return RedisKeys.TENANT_BY_SUBDOMAIN.format(subdomain=subdomain)

    async def get(self, subdomain: str) -> Optional[Tenant]:
        raw = await self.client.get(self._key(subdomain))
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return tenant_from_dict(json.loads(raw))

    async def set(self, tenant: Tenant) -> None:
        await self.client.set(
            self._key(tenant.subdomain),
            json.dumps(tenant.to_dict()),
            ex=self.ttl_seconds
        )

    async def invalidate(self, subdomain: str) -> None:
        await self.client.delete(self._key(subdomain))
        logger.info(f"Tenant cache invalidated for '{subdomain}'")
