"""Tests for seller inventory and medicine search."""
from __future__ import annotations

import uuid
from datetime import date

import pytest

from quickdose.schemas.shops import InventoryItemCreate, InventoryItemUpdate
from quickdose.services.geospatial import GeoPoint
from quickdose.services.inventory import (
    InventoryItemNotFoundError,
    create_item,
    delete_item,
    get_shop_item,
    item_to_schema,
    list_items,
    stock_status,
    update_item,
)
from quickdose.services.medicines import OutOfStockError, resolve_cart_item, search_medicines

CONNAUGHT_PLACE = GeoPoint(28.6139, 77.2090)


@pytest.mark.parametrize("stock,expected", [
    (0, "out_of_stock"),
    (-2, "out_of_stock"),
    (1, "low_stock"),
    (9, "low_stock"),
    (10, "in_stock"),
    (150, "in_stock"),
])
def test_stock_status(stock, expected):
    assert stock_status(stock) == expected


class TestInventoryCrud:
    """Tests for seller inventory management."""

    async def test_create_and_list(self, async_session, make_shop):
        shop = await make_shop(async_session, name="City Pharmacy", lat=28.6180, lon=77.2120)
        await create_item(async_session, shop.id, InventoryItemCreate(name="Paracetamol 500mg", price=25, stock=150))
        await create_item(async_session, shop.id, InventoryItemCreate(
            name="Metformin 500mg", price=95, stock=8, category="Diabetes", expiry_date=date(2027, 3, 31)
        ))

        listing = await list_items(async_session, shop.id)

        assert listing.total == 2
        assert [item.name for item in listing.items] == ["Metformin 500mg", "Paracetamol 500mg"]
        assert listing.items[0].stock_status == "low_stock"
        assert listing.items[0].expiry_date == date(2027, 3, 31)

    async def test_lists_only_own_items(self, async_session, make_shop, make_item):
        mine = await make_shop(async_session, name="City Pharmacy", lat=28.6180, lon=77.2120)
        other = await make_shop(async_session, name="MedPlus", lat=28.6250, lon=77.2200)
        await make_item(async_session, other, name="Amoxicillin 250mg", price=120, stock=75)

        assert (await list_items(async_session, mine.id)).total == 0

    async def test_partial_update(self, async_session, make_shop, make_item):
        shop = await make_shop(async_session, name="City Pharmacy", lat=28.6180, lon=77.2120)
        item = await make_item(async_session, shop, name="Paracetamol 500mg", price=25, stock=150)

        updated = await update_item(async_session, shop.id, item.id, InventoryItemUpdate(stock=0))

        assert updated.stock == 0
        assert updated.price == 25
        assert item_to_schema(updated).stock_status == "out_of_stock"

    async def test_other_shop_item_is_missing(self, async_session, make_shop, make_item):
        mine = await make_shop(async_session, name="City Pharmacy", lat=28.6180, lon=77.2120)
        other = await make_shop(async_session, name="MedPlus", lat=28.6250, lon=77.2200)
        item = await make_item(async_session, other, name="Amoxicillin 250mg", price=120, stock=75)

        with pytest.raises(InventoryItemNotFoundError):
            await update_item(async_session, mine.id, item.id, InventoryItemUpdate(price=1))
        with pytest.raises(InventoryItemNotFoundError):
            await delete_item(async_session, mine.id, item.id)

    async def test_delete(self, async_session, make_shop, make_item):
        shop = await make_shop(async_session, name="City Pharmacy", lat=28.6180, lon=77.2120)
        item = await make_item(async_session, shop, name="Paracetamol 500mg", price=25, stock=150)

        await delete_item(async_session, shop.id, item.id)

        with pytest.raises(InventoryItemNotFoundError):
            await get_shop_item(async_session, shop.id, item.id)

    def test_negative_stock_rejected(self):
        with pytest.raises(ValueError):
            InventoryItemCreate(name="Paracetamol 500mg", price=25, stock=-1)


class TestSearchMedicines:
    """Tests for search_medicines."""

    async def _seed(self, session, make_shop, make_item):
        city = await make_shop(session, name="City Pharmacy", lat=28.6180, lon=77.2120)
        apollo = await make_shop(session, name="Apollo Pharmacy", lat=28.6300, lon=77.2300)
        mumbai = await make_shop(session, name="Mumbai Chemist", lat=19.0760, lon=72.8777)
        unlocated = await make_shop(session, name="New Seller", lat=None, lon=None)

        await make_item(session, apollo, name="Cetirizine 10mg", price=45, stock=0, category="Allergy")
        await make_item(session, city, name="Paracetamol 500mg", price=25, stock=150, category="Pain Relief")
        await make_item(session, city, name="Ibuprofen 400mg", price=30, stock=60, category="Pain Relief")
        await make_item(session, mumbai, name="Paracetamol 650mg", price=32, stock=20, category="Pain Relief")
        await make_item(session, unlocated, name="Omeprazole 20mg", price=85, stock=40, category="Gastro")

    async def test_alphabetical_without_location(self, async_session, make_shop, make_item):
        await self._seed(async_session, make_shop, make_item)

        result = await search_medicines(async_session)

        assert result.total == 5
        assert [m.name for m in result.items] == [
            "Cetirizine 10mg",
            "Ibuprofen 400mg",
            "Omeprazole 20mg",
            "Paracetamol 500mg",
            "Paracetamol 650mg",
        ]
        assert all(m.distance_km is None and m.distance_label == "" for m in result.items)

    async def test_query_matches_name_case_insensitively(self, async_session, make_shop, make_item):
        await self._seed(async_session, make_shop, make_item)
        result = await search_medicines(async_session, q="  PARACETAMOL ")
        assert [m.name for m in result.items] == ["Paracetamol 500mg", "Paracetamol 650mg"]

    async def test_query_matches_category(self, async_session, make_shop, make_item):
        await self._seed(async_session, make_shop, make_item)
        result = await search_medicines(async_session, q="allergy")
        assert [m.name for m in result.items] == ["Cetirizine 10mg"]
        assert result.items[0].in_stock is False
        assert result.items[0].stock_status == "out_of_stock"

    async def test_ranked_by_pharmacy_distance(self, async_session, make_shop, make_item):
        await self._seed(async_session, make_shop, make_item)

        result = await search_medicines(async_session, origin=CONNAUGHT_PLACE, radius_km=50)

        # Same pharmacy keeps alphabetical order; Mumbai and the unlocated shop drop out.
        assert [(m.name, m.pharmacy) for m in result.items] == [
            ("Ibuprofen 400mg", "City Pharmacy"),
            ("Paracetamol 500mg", "City Pharmacy"),
            ("Cetirizine 10mg", "Apollo Pharmacy"),
        ]
        assert result.items[0].distance_label == "0.5 km"
        assert result.items[0].distance_km == pytest.approx(0.54, abs=0.01)

    async def test_nothing_nearby(self, async_session, make_shop, make_item):
        await self._seed(async_session, make_shop, make_item)
        result = await search_medicines(async_session, q="omeprazole", origin=CONNAUGHT_PLACE)
        assert result.total == 0


class TestResolveCartItem:
    """Tests for resolve_cart_item."""

    async def test_builds_cart_input(self, async_session, make_shop, make_item):
        shop = await make_shop(async_session, name="City Pharmacy", lat=28.6180, lon=77.2120)
        item = await make_item(async_session, shop, name="Paracetamol 500mg", price=25, stock=150)

        cart_item = await resolve_cart_item(async_session, item.id, CONNAUGHT_PLACE)

        assert cart_item.product_id == item.id
        assert cart_item.name == "Paracetamol 500mg"
        assert cart_item.unit_price == 25
        assert cart_item.seller_label == "City Pharmacy"
        assert cart_item.seller_distance_label == "0.5 km"

    async def test_without_origin(self, async_session, make_shop, make_item):
        shop = await make_shop(async_session, name="City Pharmacy", lat=28.6180, lon=77.2120)
        item = await make_item(async_session, shop, name="Paracetamol 500mg", price=25, stock=150)
        assert (await resolve_cart_item(async_session, item.id)).seller_distance_label == ""

    async def test_unlocated_shop_has_no_label(self, async_session, make_shop, make_item):
        shop = await make_shop(async_session, name="New Seller", lat=None, lon=None)
        item = await make_item(async_session, shop, name="Paracetamol 500mg", price=25, stock=5)
        assert (await resolve_cart_item(async_session, item.id, CONNAUGHT_PLACE)).seller_distance_label == ""

    async def test_out_of_stock(self, async_session, make_shop, make_item):
        shop = await make_shop(async_session, name="Apollo Pharmacy", lat=28.6300, lon=77.2300)
        item = await make_item(async_session, shop, name="Cetirizine 10mg", price=45, stock=0)
        with pytest.raises(OutOfStockError):
            await resolve_cart_item(async_session, item.id)

    async def test_unknown_product(self, async_session):
        with pytest.raises(InventoryItemNotFoundError):
            await resolve_cart_item(async_session, uuid.uuid4())
