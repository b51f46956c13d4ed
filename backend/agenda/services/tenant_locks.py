# backend/agenda/services/tenant_locks.py
"""
Per-tenant mutual exclusion for booking writes.

One threading.Lock per tenant id: writers of the same tenant queue up,
writers of different tenants never wait on each other.
"""

import logging
import threading
from contextlib import contextmanager

from .errors import BookingLockTimeout

logger = logging.getLogger(__name__)


class TenantLockRegistry:
    def __init__(self):
        self._locks: dict[int, threading.Lock] = {}
        self._guard = threading.Lock()

    def get(self, tenant_id: int) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(tenant_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[tenant_id] = lock
            return lock

    @contextmanager
    def hold(self, tenant_id: int, timeout: float | None = None):
        """
        Hold the tenant's lock for the duration of the block.

        Raises:
            BookingLockTimeout: lock not acquired within `timeout` seconds
        """
        lock = self.get(tenant_id)
        acquired = lock.acquire(timeout=timeout if timeout is not None else -1)
        if not acquired:
            logger.warning(f"Booking lock timeout for tenant={tenant_id} after {timeout}s")
            raise BookingLockTimeout(f"Tenant {tenant_id} is busy, retry later")
        try:
            yield
        finally:
            lock.release()


# Process-wide registry shared by all request handlers
tenant_locks = TenantLockRegistry()
