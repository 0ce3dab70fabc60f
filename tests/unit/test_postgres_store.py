"""PostgresAutomationStore against a mocked asyncpg Database."""

import contextlib
from collections.abc import AsyncIterator
from datetime import timedelta
from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import asyncpg
import pytest

from agri_shield.core.errors import IngestionError, UpstreamUnavailable
from agri_shield.models import ClaimStatus, PolicyClaimStatus
from agri_shield.storage.postgres import PostgresAutomationStore
from tests.fixtures.test_data import FIXED_NOW, make_claim, make_observation


@pytest.fixture
def conn() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def mock_db(conn: AsyncMock) -> MagicMock:
    """Database double whose transactions hand out ``conn``."""
    db = MagicMock()
    db.fetch = AsyncMock(return_value=[])
    db.fetchrow = AsyncMock(return_value=None)
    db.fetchval = AsyncMock(return_value=0)
    db.execute = AsyncMock(return_value="DELETE 0")

    @contextlib.asynccontextmanager
    async def transaction(**_: Any) -> AsyncIterator[AsyncMock]:
        yield conn

    db.transaction = transaction
    return db


@pytest.fixture
def pg_store(mock_db: MagicMock) -> PostgresAutomationStore:
    return PostgresAutomationStore(mock_db)


class TestConstruction:
    def test_requires_database(self) -> None:
        with pytest.raises(ValueError, match="Database connection required"):
            PostgresAutomationStore(None)  # type: ignore[arg-type]


class TestCreateTriggeredClaim:
    async def test_inserts_and_mirrors_policy_status(
        self, pg_store: PostgresAutomationStore, conn: AsyncMock
    ) -> None:
        claim = make_claim(uuid4())
        conn.fetchval.return_value = PolicyClaimStatus.NONE.value
        conn.fetchrow.return_value = claim.model_dump() | {"status": "Pending"}

        created = await pg_store.create_triggered_claim(claim)

        assert created == claim
        conn.execute.assert_awaited_once()
        assert conn.execute.await_args.args[1:] == (claim.user_policy_id, "Pending")

    async def test_in_flight_policy_is_skipped(
        self, pg_store: PostgresAutomationStore, conn: AsyncMock
    ) -> None:
        conn.fetchval.return_value = PolicyClaimStatus.APPROVED.value

        assert await pg_store.create_triggered_claim(make_claim(uuid4())) is None
        conn.fetchrow.assert_not_awaited()

    async def test_unique_violation_means_skipped(
        self, pg_store: PostgresAutomationStore, conn: AsyncMock
    ) -> None:
        conn.fetchval.return_value = PolicyClaimStatus.NONE.value
        conn.fetchrow.side_effect = asyncpg.UniqueViolationError("duplicate")

        assert await pg_store.create_triggered_claim(make_claim(uuid4())) is None

    async def test_driver_failure_is_upstream_unavailable(
        self, pg_store: PostgresAutomationStore, conn: AsyncMock
    ) -> None:
        conn.fetchval.side_effect = OSError("connection reset")

        with pytest.raises(UpstreamUnavailable):
            await pg_store.create_triggered_claim(make_claim(uuid4()))


class TestReplaceClaimStatus:
    async def test_lost_compare_and_swap_returns_none(
        self, pg_store: PostgresAutomationStore, conn: AsyncMock
    ) -> None:
        conn.fetchrow.return_value = None
        approved = make_claim(uuid4(), status=ClaimStatus.APPROVED)

        result = await pg_store.replace_claim_status(approved, ClaimStatus.PENDING)

        assert result is None
        conn.execute.assert_not_awaited()

    async def test_swap_updates_policy_mirror(
        self, pg_store: PostgresAutomationStore, conn: AsyncMock
    ) -> None:
        approved = make_claim(
            uuid4(),
            status=ClaimStatus.APPROVED,
            reviewed_by="insurer-1",
            reviewed_at=FIXED_NOW,
        )
        conn.fetchrow.return_value = approved.model_dump() | {"status": "Approved"}

        result = await pg_store.replace_claim_status(approved, ClaimStatus.PENDING)

        assert result == approved
        assert conn.fetchrow.await_args.args[1:3] == (approved.id, "Pending")
        assert conn.execute.await_args.args[2] == "Approved"


class TestCatalogQueries:
    async def test_delete_reports_missing_row(
        self, pg_store: PostgresAutomationStore, mock_db: MagicMock
    ) -> None:
        assert await pg_store.delete_product(uuid4()) is False

        mock_db.execute.return_value = "DELETE 1"
        assert await pg_store.delete_product(uuid4()) is True

    async def test_claim_counts(
        self, pg_store: PostgresAutomationStore, mock_db: MagicMock
    ) -> None:
        mock_db.fetch.return_value = [
            {"status": "Pending", "total": 2},
            {"status": "Paid", "total": 1},
        ]

        counts = await pg_store.count_claims_by_status()

        assert counts == {ClaimStatus.PENDING: 2, ClaimStatus.PAID: 1}

    async def test_read_failure_is_upstream_unavailable(
        self, pg_store: PostgresAutomationStore, mock_db: MagicMock
    ) -> None:
        mock_db.fetchrow.side_effect = asyncpg.InterfaceError("pool closed")

        with pytest.raises(UpstreamUnavailable):
            await pg_store.get_claim(uuid4())


class TestFarmerQueries:
    async def test_farmers_carry_their_farms(
        self, pg_store: PostgresAutomationStore, mock_db: MagicMock
    ) -> None:
        farm_id = uuid4()
        mock_db.fetch.side_effect = [
            [
                {
                    "id": "farmer-2",
                    "full_name": "Ravi Kumar",
                    "email": "ravi@example.com",
                    "phone": None,
                    "address": None,
                    "created_at": FIXED_NOW,
                },
                {
                    "id": "farmer-1",
                    "full_name": "Asha Gowda",
                    "email": "asha@example.com",
                    "phone": "+91 98450 00000",
                    "address": "Mysuru",
                    "created_at": FIXED_NOW - timedelta(days=3),
                },
            ],
            [
                {
                    "id": farm_id,
                    "user_id": "farmer-1",
                    "farm_name": "North Field",
                    "location": "Mysuru",
                    "district": "Mysuru",
                    "area": Decimal("4.50"),
                    "crop_type": "rice",
                    "season": "kharif",
                }
            ],
        ]

        farmers = await pg_store.list_farmers("50%_off", limit=20, offset=40)

        assert [f.user_id for f in farmers] == ["farmer-2", "farmer-1"]
        assert farmers[0].farms == []
        assert farmers[1].farms[0].farm_id == farm_id
        assert farmers[1].total_area == 4.5
        farmer_call, farm_call = mock_db.fetch.await_args_list
        assert farmer_call.args[1:] == (r"%50\%\_off%", 20, 40)
        assert farm_call.args[1] == ["farmer-2", "farmer-1"]

    async def test_no_farmers_skips_farm_query(
        self, pg_store: PostgresAutomationStore, mock_db: MagicMock
    ) -> None:
        assert await pg_store.list_farmers() == []

        mock_db.fetch.assert_awaited_once()
        assert mock_db.fetch.await_args.args[1] is None

    async def test_count_farmers(
        self, pg_store: PostgresAutomationStore, mock_db: MagicMock
    ) -> None:
        mock_db.fetchval.return_value = 7

        assert await pg_store.count_farmers() == 7


class TestInsertObservations:
    async def test_batch_is_one_executemany(
        self, pg_store: PostgresAutomationStore, conn: AsyncMock
    ) -> None:
        farm_id = uuid4()
        batch = [make_observation(farm_id), make_observation(farm_id)]

        assert await pg_store.insert_observations(batch) == 2
        conn.executemany.assert_awaited_once()
        assert len(conn.executemany.await_args.args[1]) == 2

    async def test_unknown_farm_is_ingestion_error(
        self, pg_store: PostgresAutomationStore, conn: AsyncMock
    ) -> None:
        conn.executemany.side_effect = asyncpg.ForeignKeyViolationError("no farm")

        with pytest.raises(IngestionError, match="unknown farm"):
            await pg_store.insert_observations([make_observation(uuid4())])
