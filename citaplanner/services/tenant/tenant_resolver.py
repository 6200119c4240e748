# ============================================================================
# FILE: citaplanner/services/tenant/tenant_resolver.py
# Host header -> Tenant
# ============================================================================
"""
Resolution order:
  1. lowercase the host and strip the port
  2. root domain, www.<root> and local development hosts -> master subdomain
  3. otherwise the first DNS label is the candidate subdomain
  4. unknown candidate -> master tenant; no master either -> TenantNotFound

Resolution only reads the directory. Read failures are retried up to
MAX_RETRY_ATTEMPTS and then surface as InfrastructureError.
"""
import logging
from typing import Optional

from starlette.concurrency import run_in_threadpool

from citaplanner.config.settings import Settings
from citaplanner.core.exceptions import CitaPlannerError, InfrastructureError, TenantNotFound
from citaplanner.models import Tenant
from citaplanner.services.tenant.tenant_cache import TenantCache
from citaplanner.storage.provider import StoreProvider

logger = logging.getLogger(__name__)


def normalize_host(host: Optional[str]) -> str:
    """Lowercase and drop any port, including bracketed IPv6 forms."""
    host = (host or "").strip().lower()
    if host.startswith("["):
        closing = host.find("]")
        return host[1:closing] if closing != -1 else host[1:]
    if host.count(":") == 1:
        host = host.split(":", 1)[0]
    return host.rstrip(".")


class TenantResolver:

    def __init__(self, settings: Settings, store_provider: StoreProvider,
                 cache: Optional[TenantCache] = None):
        self.settings = settings
        self.store_provider = store_provider
        self.cache = cache

        root = settings.ROOT_DOMAIN.lower()
        self.master_hosts = {root, f"www.{root}"} | {h.lower() for h in settings.LOCAL_DEV_HOSTS}

    def candidate_subdomain(self, host: Optional[str]) -> str:
        hostname = normalize_host(host)
        if not hostname or hostname in self.master_hosts:
            return self.settings.MASTER_SUBDOMAIN
        return hostname.split(".", 1)[0]

    async def resolve(self, host: Optional[str]) -> Tenant:
        candidate = self.candidate_subdomain(host)

        tenant = await self._find(candidate)
        if tenant:
            return tenant

        master = self.settings.MASTER_SUBDOMAIN
        if candidate != master:
            logger.info(f"Unknown subdomain '{candidate}', falling back to '{master}'")
            tenant = await self._find(master)
            if tenant:
                return tenant

        logger.warning(f"No tenant for host '{host}' and no master tenant configured")
        raise TenantNotFound()

    async def invalidate(self, subdomain: str) -> None:
        if not self.cache:
            return
        try:
            await self.cache.invalidate(subdomain)
        except Exception as e:
            logger.error(f"Tenant cache invalidation failed for '{subdomain}': {e}")

    async def _find(self, subdomain: str) -> Optional[Tenant]:
        if self.cache:
            try:
                cached = await self.cache.get(subdomain)
                if cached:
                    return cached
            except Exception as e:
                logger.warning(f"Tenant cache read failed for '{subdomain}', using directory: {e}")

        tenant = await run_in_threadpool(self.lookup, subdomain)

        if tenant and self.cache:
            try:
                await self.cache.set(tenant)
            except Exception as e:
                logger.warning(f"Tenant cache write failed for '{subdomain}': {e}")

        return tenant

    def lookup(self, subdomain: str) -> Optional[Tenant]:
        """Directory read with bounded retries."""
        attempts = max(1, self.settings.MAX_RETRY_ATTEMPTS)
        last_error = None

        for attempt in range(1, attempts + 1):
            try:
                with self.store_provider() as store:
                    return store.get_tenant_by_subdomain(subdomain)
            except CitaPlannerError:
                raise
            except Exception as e:
                last_error = e
                logger.warning(f"Tenant lookup attempt {attempt}/{attempts} failed for '{subdomain}': {e}")

        logger.error(f"Tenant directory unreachable: {last_error}", exc_info=last_error)
        raise InfrastructureError()
