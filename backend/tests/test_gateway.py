"""
Armory API — Resource Gateway Tests
=====================================

What:  Tests for ResourceGateway against a real SQLite database, plus
       failure injection with fake session factories.

What we test:
    ✅ create → get_by_id round trip returns the same record
    ✅ delete → get_by_id reports absence
    ✅ update merges fields; empty update is a no-op
    ✅ never-issued ids: get → None, update → None, delete → False
    ✅ list_all count and order after creates and deletes
    ✅ NOT NULL violation → ValidationError
    ✅ driver failure → StorageUnavailableError with context
    ✅ timeout → StorageUnavailableError and the session is released
"""

import asyncio
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from armory.exceptions import StorageUnavailableError, ValidationError
from armory.resources import SWORDS
from armory.schemas.potion import PotionCreate, PotionUpdate
from armory.schemas.sword import SwordCreate, SwordUpdate
from armory.services.gateway import ResourceGateway, _constraint_message


class TestGatewayCrud:
    """Round trips through the real storage layer."""

    @pytest.mark.asyncio
    async def test_create_assigns_id_and_get_returns_same_record(self, sword_gateway, katana):
        created = await sword_gateway.create(SwordCreate(**katana))

        assert isinstance(created.id, int)
        assert created.model_dump(exclude={"id"}) == katana

        fetched = await sword_gateway.get_by_id(created.id)
        assert fetched == created

    @pytest.mark.asyncio
    async def test_create_with_no_fields(self, sword_gateway):
        created = await sword_gateway.create(SwordCreate())

        assert created.type is None
        assert created.attack is None

    @pytest.mark.asyncio
    async def test_ids_are_unique(self, sword_gateway):
        first = await sword_gateway.create(SwordCreate(type="dagger"))
        second = await sword_gateway.create(SwordCreate(type="dagger"))

        assert first.id != second.id

    @pytest.mark.asyncio
    async def test_delete_then_get_is_absent(self, sword_gateway, katana):
        created = await sword_gateway.create(SwordCreate(**katana))

        assert await sword_gateway.delete_by_id(created.id) is True
        assert await sword_gateway.get_by_id(created.id) is None

    @pytest.mark.asyncio
    async def test_repeated_delete_reports_absent(self, sword_gateway):
        created = await sword_gateway.create(SwordCreate(type="rapier"))

        assert await sword_gateway.delete_by_id(created.id) is True
        assert await sword_gateway.delete_by_id(created.id) is False

    @pytest.mark.asyncio
    async def test_update_merges_fields(self, sword_gateway, katana):
        created = await sword_gateway.create(SwordCreate(**katana))

        updated = await sword_gateway.update(created.id, SwordUpdate(attack=99))

        assert updated.id == created.id
        assert updated.attack == 99
        assert updated.type == "katana"
        assert updated.is_magical is True
        assert updated.sp_attack == 10
        assert await sword_gateway.get_by_id(created.id) == updated

    @pytest.mark.asyncio
    async def test_update_can_clear_nullable_field(self, sword_gateway, katana):
        created = await sword_gateway.create(SwordCreate(**katana))

        updated = await sword_gateway.update(created.id, SwordUpdate(sp_attack=None))

        assert updated.sp_attack is None
        assert updated.attack == 50

    @pytest.mark.asyncio
    async def test_empty_update_leaves_record_unchanged(self, sword_gateway, katana):
        created = await sword_gateway.create(SwordCreate(**katana))

        updated = await sword_gateway.update(created.id, SwordUpdate())

        assert updated == created
        assert await sword_gateway.get_by_id(created.id) == created

    @pytest.mark.asyncio
    async def test_never_issued_id(self, sword_gateway):
        assert await sword_gateway.get_by_id(9999) is None
        assert await sword_gateway.update(9999, SwordUpdate(attack=1)) is None
        assert await sword_gateway.delete_by_id(9999) is False

    @pytest.mark.asyncio
    async def test_update_never_creates(self, sword_gateway):
        await sword_gateway.update(42, SwordUpdate(type="ghost"))

        assert await sword_gateway.list_all() == []

    @pytest.mark.asyncio
    async def test_list_all_after_creates_and_deletes(self, sword_gateway):
        created = []
        for attack in (10, 20, 30, 40, 50):
            created.append(await sword_gateway.create(SwordCreate(type="blade", attack=attack)))

        await sword_gateway.delete_by_id(created[1].id)
        await sword_gateway.delete_by_id(created[3].id)
        renamed = await sword_gateway.update(created[4].id, SwordUpdate(type="greatsword"))

        records = await sword_gateway.list_all()

        assert records == [created[0], created[2], renamed]
        assert [r.id for r in records] == sorted(r.id for r in records)


class TestGatewayConstraints:
    """Storage constraint violations surface as ValidationError."""

    @pytest.mark.asyncio
    async def test_null_into_not_null_column(self, potion_gateway):
        potion = await potion_gateway.create(PotionCreate(name="Elixir", potency=3))

        with pytest.raises(ValidationError) as exc_info:
            await potion_gateway.update(potion.id, PotionUpdate(name=None))

        assert "NOT NULL" in exc_info.value.message
        assert exc_info.value.context["operation"] == "update"
        assert exc_info.value.context["resource_id"] == potion.id

        # the failed write was rolled back
        assert (await potion_gateway.get_by_id(potion.id)).name == "Elixir"


class _TrackingFactory:
    """Session factory stand-in that records how many sessions were closed."""

    def __init__(self, session):
        self.session = session
        self.opened = 0
        self.closed = 0

    def __call__(self):
        return self

    async def __aenter__(self):
        self.opened += 1
        return self.session

    async def __aexit__(self, exc_type, exc, tb):
        self.closed += 1
        return False


class TestGatewayFailures:
    """Failure translation and connection release."""

    @pytest.mark.asyncio
    async def test_driver_failure_becomes_storage_unavailable(self):
        session = AsyncMock()
        session.get = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("connection refused"))
        )
        factory = _TrackingFactory(session)
        gateway = ResourceGateway(SWORDS, factory, timeout=1.0)

        with pytest.raises(StorageUnavailableError) as exc_info:
            await gateway.get_by_id(7)

        assert exc_info.value.context == {
            "operation": "get_by_id",
            "resource": "swords",
            "resource_id": 7,
            "error_type": "OperationalError",
        }
        assert "connection refused" not in exc_info.value.message
        session.rollback.assert_awaited_once()
        assert factory.closed == factory.opened == 1

    @pytest.mark.asyncio
    async def test_connection_error_becomes_storage_unavailable(self):
        session = AsyncMock()
        session.execute = AsyncMock(side_effect=ConnectionRefusedError("db down"))
        factory = _TrackingFactory(session)
        gateway = ResourceGateway(SWORDS, factory, timeout=1.0)

        with pytest.raises(StorageUnavailableError):
            await gateway.list_all()

        assert factory.closed == 1

    @pytest.mark.asyncio
    async def test_timeout_releases_session(self):
        async def hang(*args, **kwargs):
            await asyncio.sleep(10)

        session = AsyncMock()
        session.get = AsyncMock(side_effect=hang)
        factory = _TrackingFactory(session)
        gateway = ResourceGateway(SWORDS, factory, timeout=0.05)

        with pytest.raises(StorageUnavailableError) as exc_info:
            await gateway.update(3, SwordUpdate(attack=1))

        assert exc_info.value.context["error_type"] == "timeout"
        assert exc_info.value.context["operation"] == "update"
        assert factory.closed == factory.opened == 1
        session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_reads_do_not_commit(self):
        session = AsyncMock()
        session.get = AsyncMock(return_value=None)
        factory = _TrackingFactory(session)
        gateway = ResourceGateway(SWORDS, factory, timeout=1.0)

        assert await gateway.get_by_id(1) is None
        session.commit.assert_not_awaited()
        assert factory.closed == 1

    @pytest.mark.asyncio
    async def test_overflow_during_flush_becomes_validation_error(self):
        existing = SWORDS.model(id=4, type="falchion")
        session = AsyncMock()
        session.add = lambda obj: None
        session.get = AsyncMock(return_value=existing)
        session.flush = AsyncMock(
            side_effect=OverflowError("Python int too large to convert to SQLite INTEGER")
        )
        factory = _TrackingFactory(session)
        gateway = ResourceGateway(SWORDS, factory, timeout=1.0)

        with pytest.raises(ValidationError) as exc_info:
            await gateway.update(4, SwordUpdate.model_construct(attack=2**70))

        assert exc_info.value.context == {
            "operation": "update",
            "resource": "swords",
            "resource_id": 4,
        }
        session.rollback.assert_awaited_once()
        session.commit.assert_not_awaited()
        assert factory.closed == 1


class TestConstraintMessage:

    def test_asyncpg_class_prefix_removed(self):
        exc = IntegrityError(
            "UPDATE potions SET name=$1",
            ("x",),
            Exception(
                "<class 'asyncpg.exceptions.NotNullViolationError'>: "
                'null value in column "name" of relation "potions" violates not-null constraint\n'
                "DETAIL:  Failing row contains (1, null)."
            ),
        )

        message = _constraint_message(exc)

        assert message == (
            'null value in column "name" of relation "potions" violates not-null constraint'
        )
        assert "asyncpg" not in message

    def test_sqlite_message_kept(self):
        exc = IntegrityError(
            "UPDATE potions SET name=?",
            (None,),
            Exception("NOT NULL constraint failed: potions.name"),
        )

        assert _constraint_message(exc) == "NOT NULL constraint failed: potions.name"

    def test_fallback_when_driver_gives_no_text(self):
        assert _constraint_message(IntegrityError("INSERT", {}, Exception(""))) == (
            "the supplied fields violate a storage constraint"
        )
