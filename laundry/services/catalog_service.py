"""Catalog lookup used by the order engine to snapshot service names."""
from typing import Dict, Iterable
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from laundry.models.catalog import Service

logger = logging.getLogger(__name__)

UNKNOWN_SERVICE_NAME = "Unknown Service"


class CatalogLookup:
    """
    Read-only access to the services catalog.

    A missing service never fails an order; callers get the
    fallback name instead.
    """

    def __init__(self, db: AsyncSession, unknown_name: str = UNKNOWN_SERVICE_NAME):
        self.db = db
        self.unknown_name = unknown_name

    async def get_service_names(self, service_ids: Iterable[int]) -> Dict[int, str]:
        """
        Resolve display names for many services in one query.

        Every requested id is present in the result; unknown ids map to
        the fallback name.
        """
        ids = set(service_ids)
        if not ids:
            return {}

        stmt = select(Service.id, Service.name).where(Service.id.in_(ids))
        found = {row.id: row.name for row in (await self.db.execute(stmt)).all()}

        missing = ids - found.keys()
        if missing:
            logger.warning(f"Services {sorted(missing)} not found, using '{self.unknown_name}'")

        return {service_id: found.get(service_id, self.unknown_name) for service_id in ids}
