"""Record store operations over the document collections."""

import logging
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Any, Callable, Mapping, Sequence

from sqlalchemy import Select, delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import Base
from ..core.exceptions import NotFoundError, StoreWriteError
from ..models import Presentation, PresentationStatus, new_record_id

if TYPE_CHECKING:
    from .subscriptions import SnapshotHub

logger = logging.getLogger(__name__)


def resource_name(model: type[Base]) -> str:
    """Name used for a collection's records in errors and logs."""
    return model.__name__.lower()


@dataclass(frozen=True)
class RecordQuery:
    """
    Filtered, ordered query over one collection.

    ``date_from`` is a callable so live subscriptions re-evaluate it on every
    refresh instead of freezing the day the subscription was opened.
    """

    model: type[Base]
    order_by: tuple[str, ...] = ("created_at",)
    descending: bool = True
    status: str | None = None
    date_from: Callable[[], date] | None = None

    @property
    def collection(self) -> str:
        return self.model.__tablename__

    def statement(self) -> Select:
        stmt = select(self.model)

        if self.status is not None:
            stmt = stmt.where(self.model.status == self.status)

        if self.date_from is not None:
            stmt = stmt.where(self.model.date >= self.date_from())

        for name in self.order_by:
            column = getattr(self.model, name)
            stmt = stmt.order_by(column.desc() if self.descending else column.asc())

        # Stable order for records sharing a sort key
        return stmt.order_by(self.model.id)


def admin_listing(model: type[Base], status: str | None = None) -> RecordQuery:
    """Admin console listing, newest first."""
    return RecordQuery(model=model, order_by=("created_at",), descending=True, status=status)


def upcoming_presentations(today: Callable[[], date] = date.today) -> RecordQuery:
    """Approved shows from today onwards, earliest first."""
    return RecordQuery(
        model=Presentation,
        order_by=("date", "time"),
        descending=False,
        status=PresentationStatus.APPROVED.value,
        date_from=today,
    )


def showcase_listing(model: type[Base]) -> RecordQuery:
    """Carousel or pilot roster in display order."""
    return RecordQuery(model=model, order_by=("order",), descending=False)


class RecordStore:
    """Single-record CRUD against the collections, publishing every committed change."""

    def __init__(self, db: AsyncSession, hub: "SnapshotHub | None" = None):
        self.db = db
        self.hub = hub

    async def create_record(self, model: type[Base], values: Mapping[str, Any]) -> Base:
        """
        Persist a new record.

        Args:
            model: Collection model
            values: Attribute values; an id is assigned when absent

        Returns:
            The persisted record

        Raises:
            StoreWriteError: If the insert fails
        """
        record = model(**{"id": new_record_id(), **values})
        self.db.add(record)

        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "Record creation failed",
                extra={"collection": model.__tablename__, "error": str(e)}
            )
            raise StoreWriteError("create", resource_name(model)) from e

        self._publish(model)
        return record

    async def get_record(self, model: type[Base], record_id: str) -> Base | None:
        """
        Read the current stored state of a record, bypassing the identity map.

        Raises:
            StoreWriteError: If the record store cannot be read
        """
        stmt = (
            select(model)
            .where(model.id == record_id)
            .execution_options(populate_existing=True)
        )

        try:
            result = await self.db.execute(stmt)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "Record read failed",
                extra={"collection": model.__tablename__, "record_id": record_id, "error": str(e)}
            )
            raise StoreWriteError("read", resource_name(model), record_id) from e

    async def update_record(self, model: type[Base], record_id: str, values: Mapping[str, Any]) -> None:
        """
        Apply a partial update. Attributes not named in ``values`` are untouched.

        Raises:
            NotFoundError: If no record has this id
            StoreWriteError: If the update fails
        """
        stmt = (
            update(model)
            .where(model.id == record_id)
            .values({getattr(model, name): value for name, value in values.items()})
        )

        try:
            result = await self.db.execute(stmt)
            if result.rowcount == 0:
                await self.db.rollback()
                raise NotFoundError(resource_type=resource_name(model), resource_id=record_id)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "Record update failed",
                extra={
                    "collection": model.__tablename__,
                    "record_id": record_id,
                    "fields": sorted(values),
                    "error": str(e)
                }
            )
            raise StoreWriteError("update", resource_name(model), record_id) from e

        self._publish(model)

    async def delete_record(self, model: type[Base], record_id: str) -> None:
        """
        Delete a record permanently.

        Raises:
            NotFoundError: If no record has this id
            StoreWriteError: If the delete fails
        """
        stmt = delete(model).where(model.id == record_id)

        try:
            result = await self.db.execute(stmt)
            if result.rowcount == 0:
                await self.db.rollback()
                raise NotFoundError(resource_type=resource_name(model), resource_id=record_id)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "Record deletion failed",
                extra={"collection": model.__tablename__, "record_id": record_id, "error": str(e)}
            )
            raise StoreWriteError("delete", resource_name(model), record_id) from e

        self._publish(model)

    async def list_records(self, query: RecordQuery) -> Sequence[Base]:
        try:
            result = await self.db.execute(query.statement())
            return result.scalars().all()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "Record listing failed",
                extra={"collection": query.collection, "error": str(e)}
            )
            raise StoreWriteError("list", resource_name(query.model)) from e

    def _publish(self, model: type[Base]) -> None:
        if self.hub is not None:
            self.hub.publish(model.__tablename__)
