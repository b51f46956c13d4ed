# backend/agenda/repositories/tenants.py
"""Read-only lookups for tenants and their event types."""

from sqlalchemy.orm import Session

from ..models import EventTypes, Tenants


class TenantRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_active(self, tenant_id: int) -> Tenants | None:
        return (
            self.db.query(Tenants)
            .filter(Tenants.id == tenant_id, Tenants.is_active == 1)
            .first()
        )

    def get_active_by_slug(self, slug: str) -> Tenants | None:
        return (
            self.db.query(Tenants)
            .filter(Tenants.slug == slug.strip().lower(), Tenants.is_active == 1)
            .first()
        )

    def lock(self, tenant_id: int) -> Tenants | None:
        """
        SELECT ... FOR UPDATE on the tenant row.

        Serialises booking writers of one tenant across processes on engines
        with row locks; SQLite ignores the clause.
        """
        return (
            self.db.query(Tenants)
            .filter(Tenants.id == tenant_id)
            .with_for_update()
            .first()
        )

    # ── Event types ──────────────────────────────────────────────────────

    def get_event_type(self, tenant_id: int, event_type_id: int) -> EventTypes | None:
        """Active event type owned by the tenant."""
        return (
            self.db.query(EventTypes)
            .filter(
                EventTypes.id == event_type_id,
                EventTypes.tenant_id == tenant_id,
                EventTypes.is_active == 1,
            )
            .first()
        )

    def get_event_type_by_slug(self, tenant_id: int, slug: str) -> EventTypes | None:
        return (
            self.db.query(EventTypes)
            .filter(
                EventTypes.tenant_id == tenant_id,
                EventTypes.slug == slug,
                EventTypes.is_active == 1,
            )
            .first()
        )

    def list_active_event_types(self, tenant_id: int) -> list[EventTypes]:
        return (
            self.db.query(EventTypes)
            .filter(EventTypes.tenant_id == tenant_id, EventTypes.is_active == 1)
            .order_by(EventTypes.name.asc())
            .all()
        )
