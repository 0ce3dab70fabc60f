"""Unit tests for the farmer directory."""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from agri_shield.core.errors import UpstreamUnavailable
from agri_shield.services.farmer_directory import FarmerDirectoryService
from agri_shield.storage import InMemoryAutomationStore
from tests.fixtures.test_data import FIXED_NOW, make_farm, make_farmer


@pytest.fixture
def directory(store: InMemoryAutomationStore) -> FarmerDirectoryService:
    store.add_farmer(
        make_farmer(
            user_id="farmer-old",
            full_name="Ravi Kumar",
            email="ravi@example.com",
            created_at=FIXED_NOW - timedelta(days=90),
        )
    )
    store.add_farmer(
        make_farmer(
            user_id="farmer-new",
            full_name="Meena Patil",
            email="meena@example.com",
            created_at=FIXED_NOW - timedelta(days=2),
        )
    )
    store.add_farm(
        make_farm(user_id="farmer-old", farm_name="Canal Plot", location="Mandya")
    )
    store.add_farm(
        make_farm(user_id="farmer-old", farm_name="Hill Plot", area=None)
    )
    store.add_farm(
        make_farm(user_id="farmer-new", farm_name="River Bank", location="Hassan")
    )
    return FarmerDirectoryService(store)


class TestListFarmers:
    """Listing, search and paging over registered farmers."""

    async def test_newest_first_with_farms(
        self, directory: FarmerDirectoryService
    ) -> None:
        farmers = (await directory.list_farmers()).unwrap()

        assert [f.user_id for f in farmers] == ["farmer-new", "farmer-old"]
        assert {farm.farm_name for farm in farmers[1].farms} == {
            "Canal Plot",
            "Hill Plot",
        }
        assert farmers[1].total_area == 4.5
        assert farmers[0].farms[0].location == "Hassan"

    async def test_farmer_without_farms(self, store: InMemoryAutomationStore) -> None:
        store.add_farmer(make_farmer())

        (farmer,) = (await FarmerDirectoryService(store).list_farmers()).unwrap()

        assert farmer.farms == []
        assert farmer.total_area == 0.0

    @pytest.mark.parametrize(
        ("search", "expected"),
        [
            ("meena", ["farmer-new"]),
            ("RAVI@EXAMPLE", ["farmer-old"]),
            ("mandya", ["farmer-old"]),
            ("river", ["farmer-new"]),
            ("  plot ", ["farmer-old"]),
            ("nobody", []),
        ],
    )
    async def test_search(
        self, directory: FarmerDirectoryService, search: str, expected: list[str]
    ) -> None:
        farmers = (await directory.list_farmers(search)).unwrap()

        assert [f.user_id for f in farmers] == expected

    async def test_blank_search_lists_everyone(
        self, directory: FarmerDirectoryService
    ) -> None:
        farmers = (await directory.list_farmers("   ")).unwrap()

        assert len(farmers) == 2

    async def test_pagination(self, directory: FarmerDirectoryService) -> None:
        first = (await directory.list_farmers(limit=1)).unwrap()
        second = (await directory.list_farmers(limit=1, offset=1)).unwrap()
        past_end = (await directory.list_farmers(limit=1, offset=2)).unwrap()

        assert [f.user_id for f in first] == ["farmer-new"]
        assert [f.user_id for f in second] == ["farmer-old"]
        assert past_end == []

    async def test_store_failure_is_err(self) -> None:
        store = AsyncMock(spec=InMemoryAutomationStore)
        store.list_farmers.side_effect = UpstreamUnavailable("database down")

        result = await FarmerDirectoryService(store).list_farmers()

        assert result.is_err()
        assert isinstance(result.unwrap_err(), UpstreamUnavailable)

    def test_requires_store(self) -> None:
        with pytest.raises(ValueError, match="Automation store required"):
            FarmerDirectoryService(None)  # type: ignore[arg-type]


async def test_count_farmers(store: InMemoryAutomationStore) -> None:
    assert await store.count_farmers() == 0

    store.add_farmer(make_farmer(user_id="a"))
    store.add_farmer(make_farmer(user_id="b"))

    assert await store.count_farmers() == 2
