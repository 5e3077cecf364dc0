"""
Armory API — Resource Gateway
===============================

What:  Translates CRUD intents into storage operations against one
       resource's table and returns typed results.
How:   Each call checks out its own session from the injected session
       factory, runs one unit of work under a timeout, commits writes, and
       always closes the session so the connection returns to the pool.
Who:   Constructed once per resource by the app factory and passed into
       that resource's router.

Outcome contract:
    list_all      → list of records (ascending id)
    get_by_id     → record | None
    create        → record
    update        → record | None
    delete_by_id  → True (deleted) | False (no such id)

    Absence is a return value, never an exception. Failures are raised as:
        IntegrityError / DataError / OverflowError → ValidationError
        timeout                                    → StorageUnavailableError
        other SQLAlchemyError / OSError            → StorageUnavailableError

Known limitation:
    update() does no read-modify-write locking. Two concurrent updates to
    the same id race and the last write wins, as decided by the database.
"""

import asyncio
import logging
import re
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar

from pydantic import BaseModel
from sqlalchemy import delete, select
from sqlalchemy.exc import DataError, IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from armory.exceptions import StorageUnavailableError, ValidationError
from armory.resources import Resource

logger = logging.getLogger(__name__)

T = TypeVar("T")

_DRIVER_CLASS_PREFIX = re.compile(r"^<class '[^']*'>:\s*")


class ResourceGateway:
    """
    Storage access for a single resource.

    Args:
        resource:        Registry entry naming the model and read schema
        session_factory: Async session factory bound to the shared engine
        timeout:         Seconds allowed for one operation, checkout included
    """

    def __init__(
        self,
        resource: Resource,
        session_factory: async_sessionmaker[AsyncSession],
        timeout: float = 10.0,
    ):
        self.resource = resource
        self._session_factory = session_factory
        self._timeout = timeout

    @property
    def name(self) -> str:
        return self.resource.name

    # ── Operations ────────────────────────────────────────────────────────

    async def list_all(self) -> List[BaseModel]:
        """Every record, ordered by ascending primary key."""
        model = self.resource.model

        async def work(session: AsyncSession) -> List[BaseModel]:
            result = await session.execute(select(model).order_by(model.id))
            return [self._to_read(row) for row in result.scalars().all()]

        return await self._run("list_all", work)

    async def get_by_id(self, record_id: int) -> Optional[BaseModel]:
        """The record whose id equals `record_id`, or None."""

        async def work(session: AsyncSession) -> Optional[BaseModel]:
            obj = await session.get(self.resource.model, record_id)
            return self._to_read(obj) if obj is not None else None

        return await self._run("get_by_id", work, record_id=record_id)

    async def create(self, fields: BaseModel) -> BaseModel:
        """
        Insert a record built from the supplied fields.

        The database assigns the id; the returned record includes it.
        """
        values = fields.model_dump(exclude_unset=True)

        async def work(session: AsyncSession) -> BaseModel:
            obj = self.resource.model(**values)
            session.add(obj)
            await session.flush()  # assigns the serial id
            return self._to_read(obj)

        return await self._run("create", work, commit=True)

    async def update(self, record_id: int, fields: BaseModel) -> Optional[BaseModel]:
        """
        Merge the supplied fields onto an existing record.

        Only keys present in the request are written; an empty field map
        returns the record unchanged. Returns None when the id does not
        exist. Never inserts.
        """
        values = fields.model_dump(exclude_unset=True)

        async def work(session: AsyncSession) -> Optional[BaseModel]:
            obj = await session.get(self.resource.model, record_id)
            if obj is None:
                return None
            for key, value in values.items():
                setattr(obj, key, value)
            await session.flush()
            return self._to_read(obj)

        return await self._run("update", work, record_id=record_id, commit=True)

    async def delete_by_id(self, record_id: int) -> bool:
        """Remove the record. True if a row was deleted, False if none matched."""
        model = self.resource.model

        async def work(session: AsyncSession) -> bool:
            result = await session.execute(delete(model).where(model.id == record_id))
            return result.rowcount > 0

        return await self._run("delete_by_id", work, record_id=record_id, commit=True)

    # ── Internals ─────────────────────────────────────────────────────────

    def _to_read(self, obj: Any) -> BaseModel:
        return self.resource.read_schema.model_validate(obj)

    async def _run(
        self,
        operation: str,
        work: Callable[[AsyncSession], Awaitable[T]],
        record_id: Optional[int] = None,
        commit: bool = False,
    ) -> T:
        """
        Execute one unit of work in its own session under the timeout.

        Translates driver failures into application exceptions carrying the
        operation, resource and id for the server log.
        """
        context: Dict[str, Any] = {"operation": operation, "resource": self.name}
        if record_id is not None:
            context["resource_id"] = record_id

        try:
            return await asyncio.wait_for(
                self._in_session(work, commit),
                timeout=self._timeout,
            )
        except (IntegrityError, DataError, OverflowError) as e:
            message = _constraint_message(e)
            logger.warning(
                "Constraint violation during %s on %s: %s", operation, self.name, message
            )
            raise ValidationError(message=message, context=context) from e
        except asyncio.TimeoutError as e:
            context["error_type"] = "timeout"
            logger.error(
                "%s on %s timed out after %.1fs (id=%s)",
                operation,
                self.name,
                self._timeout,
                record_id,
            )
            raise StorageUnavailableError(context=context) from e
        except (SQLAlchemyError, OSError) as e:
            context["error_type"] = type(e).__name__
            logger.error(
                "Storage failure during %s on %s (id=%s): %s",
                operation,
                self.name,
                record_id,
                str(e),
            )
            raise StorageUnavailableError(context=context) from e

    async def _in_session(
        self,
        work: Callable[[AsyncSession], Awaitable[T]],
        commit: bool,
    ) -> T:
        # Leaving the `async with` closes the session and returns its
        # connection to the pool, on success, error and cancellation alike.
        async with self._session_factory() as session:
            try:
                result = await work(session)
                if commit:
                    await session.commit()
                return result
            except Exception:
                await session.rollback()
                raise


def _constraint_message(exc: Exception) -> str:
    """
    A client-facing description of a constraint or data error.

    Uses the driver's own message (e.g. "NOT NULL constraint failed:
    potions.name") without the SQL statement, the bound parameters, or the
    "<class '...'>: " prefix asyncpg puts in front of it.
    """
    orig = getattr(exc, "orig", None)
    detail = str(orig) if orig is not None else str(exc)
    detail = detail.strip().splitlines()[0] if detail.strip() else ""
    detail = _DRIVER_CLASS_PREFIX.sub("", detail)
    return detail or "the supplied fields violate a storage constraint"
