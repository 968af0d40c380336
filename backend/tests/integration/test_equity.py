"""Integration tests for founders and the share structure"""
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.startup import Startup
from app.schemas.equity import FounderRequest, UpdateSharesRequest
from app.services.equity import EquityStore
from app.services.errors import NotFoundError, ValidationError


def founder_request(**overrides):
    data = dict(name="Asha Rao", email="asha@acme.test", shares=600000, equity_percentage=Decimal("60"))
    data.update(overrides)
    return FounderRequest(**data)


@pytest.fixture
def store(db_session: AsyncSession) -> EquityStore:
    return EquityStore(db_session)


class TestFounders:
    """Tests for founder CRUD"""

    @pytest.mark.asyncio
    async def test_add_and_list_in_order(self, store: EquityStore, startup: Startup):
        await store.add_founder(startup.id, founder_request())
        await store.add_founder(
            startup.id, founder_request(name="Ben Ito", email="ben@acme.test", equity_percentage=Decimal("0"),
                                        mentor_code=" MC-7 ")
        )
        founders = await store.list_founders(startup.id)
        assert [f.name for f in founders] == ["Asha Rao", "Ben Ito"]
        assert founders[1].mentor_code == "MC-7"
        assert founders[1].equity_percentage == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("overrides", [
        {"name": "  "},
        {"email": None},
        {"shares": -1},
        {"equity_percentage": Decimal("101")},
        {"equity_percentage": Decimal("-1")},
    ])
    async def test_rejects_invalid_founder(self, store: EquityStore, startup: Startup, overrides):
        with pytest.raises(ValidationError):
            await store.add_founder(startup.id, founder_request(**overrides))
        assert await store.list_founders(startup.id) == []

    @pytest.mark.asyncio
    async def test_founder_equity_total_capped(self, store: EquityStore, startup: Startup):
        await store.add_founder(startup.id, founder_request())
        with pytest.raises(ValidationError):
            await store.add_founder(startup.id, founder_request(name="Ben Ito", equity_percentage=Decimal("45")))
        assert len(await store.list_founders(startup.id)) == 1

    @pytest.mark.asyncio
    async def test_unknown_startup(self, store: EquityStore):
        with pytest.raises(NotFoundError):
            await store.add_founder(999, founder_request())

    @pytest.mark.asyncio
    async def test_replace_swaps_whole_list(self, store: EquityStore, startup: Startup):
        await store.add_founder(startup.id, founder_request())
        founders = await store.replace_founders(startup.id, [
            founder_request(name="Ben Ito", email="ben@acme.test", equity_percentage=Decimal("30")),
            founder_request(name="Chen Li", email="chen@acme.test", equity_percentage=Decimal("30")),
        ])
        assert [f.name for f in founders] == ["Ben Ito", "Chen Li"]
        assert [f.name for f in await store.list_founders(startup.id)] == ["Ben Ito", "Chen Li"]

    @pytest.mark.asyncio
    async def test_invalid_replacement_keeps_existing(self, store: EquityStore, startup: Startup):
        await store.add_founder(startup.id, founder_request())
        with pytest.raises(ValidationError):
            await store.replace_founders(startup.id, [
                founder_request(name="Ben Ito"),
                founder_request(name=""),
            ])
        assert [f.name for f in await store.list_founders(startup.id)] == ["Asha Rao"]

    @pytest.mark.asyncio
    async def test_replace_with_empty_list(self, store: EquityStore, startup: Startup):
        await store.add_founder(startup.id, founder_request())
        assert await store.replace_founders(startup.id, []) == []

    @pytest.mark.asyncio
    async def test_delete_all(self, store: EquityStore, startup: Startup):
        await store.add_founder(startup.id, founder_request())
        await store.add_founder(startup.id, founder_request(name="Ben Ito", equity_percentage=Decimal("10")))
        assert await store.delete_founders(startup.id) == 2
        assert await store.list_founders(startup.id) == []


class TestShares:
    """Tests for the share structure"""

    @pytest.mark.asyncio
    async def test_zeros_before_first_save(self, store: EquityStore, startup: Startup):
        shares = await store.get_shares(startup.id)
        assert shares.total_shares == 0
        assert shares.esop_reserved_shares == 0
        assert shares.price_per_share == 0

    @pytest.mark.asyncio
    async def test_first_price_save_defaults_total_shares(self, store: EquityStore, startup: Startup):
        shares = await store.update_shares(startup.id, UpdateSharesRequest(price_per_share=Decimal("2.5")))
        assert shares.total_shares == 1_000_000
        assert shares.esop_reserved_shares == 0
        assert shares.price_per_share == Decimal("2.5")

    @pytest.mark.asyncio
    async def test_partial_update_keeps_other_fields(self, store: EquityStore, startup: Startup):
        first = await store.update_shares(
            startup.id, UpdateSharesRequest(total_shares=2_000_000, price_per_share=Decimal("1.25"))
        )
        second = await store.update_shares(startup.id, UpdateSharesRequest(esop_reserved_shares=200_000))
        assert second.id == first.id
        assert second.total_shares == 2_000_000
        assert second.esop_reserved_shares == 200_000
        assert second.price_per_share == Decimal("1.25")
        assert (await store.get_shares(startup.id)).esop_reserved_shares == 200_000

    @pytest.mark.asyncio
    @pytest.mark.parametrize("request_data", [
        {"total_shares": -1},
        {"esop_reserved_shares": -10},
        {"price_per_share": Decimal("-0.01")},
        {"esop_reserved_shares": 1_000_001},
    ])
    async def test_rejects_invalid_values(self, store: EquityStore, startup: Startup, request_data):
        with pytest.raises(ValidationError):
            await store.update_shares(startup.id, UpdateSharesRequest(**request_data))
        assert (await store.get_shares(startup.id)).total_shares == 0

    @pytest.mark.asyncio
    async def test_shrinking_below_esop_rejected(self, store: EquityStore, startup: Startup):
        await store.update_shares(startup.id, UpdateSharesRequest(esop_reserved_shares=100_000))
        with pytest.raises(ValidationError):
            await store.update_shares(startup.id, UpdateSharesRequest(total_shares=50_000))
        assert (await store.get_shares(startup.id)).total_shares == 1_000_000
