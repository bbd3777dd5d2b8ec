import pytest

from riftrades.codec.transport import UrlContext
from riftrades.models import failure as failure_module
from riftrades.models.card import CardGroup, Edition, TradeCard
from riftrades.services.catalog import Catalog, build_catalog

FIXED_NOW = 1_760_000_000.0


@pytest.fixture(autouse=True)
def clear_finalized_responses():
    """Clear the finalized responses set between tests.

    Python reuses memory addresses for new objects, which would otherwise
    cause id() collisions with previously finalized responses.
    """
    failure_module._finalized_responses.clear()
    yield
    failure_module._finalized_responses.clear()


@pytest.fixture
def fixed_now() -> float:
    return FIXED_NOW


@pytest.fixture
def sample_records() -> list[dict]:
    """Consolidated price-guide rows as produced by the CSV pipeline."""
    return [
        {
            "_id": 1,
            "_uniqueId": "RB000001",
            "_setNumber": 1,
            "productId": "1001",
            "name": "Zephyr Strike",
            "subTypeName": "Normal",
            "marketPrice": "0.25",
            "lowPrice": "0.10",
        },
        {
            "_id": 2,
            "_uniqueId": "RB000002",
            "_setNumber": 1,
            "productId": "1001",
            "name": "Zephyr Strike",
            "subTypeName": "Foil",
            "marketPrice": "1.50",
            "lowPrice": "1.00",
        },
        {
            "_id": 3,
            "_uniqueId": "RB000003",
            "_setNumber": 1,
            "productId": "1002",
            "name": "Zephyr Strike (Promo)",
            "subTypeName": "Normal",
            "marketPrice": "4.00",
            "lowPrice": "3.00",
        },
        {
            "_id": 4,
            "_uniqueId": "RB000004",
            "_setNumber": 1,
            "productId": "1003",
            "name": "Flame Chompers",
            "extNumber": "12",
            "extRarity": "Rare",
            "subTypeName": "Normal",
            "marketPrice": "2.75",
            "lowPrice": "2.00",
        },
        {
            "_id": 5,
            "_uniqueId": "RB000005",
            "_setNumber": 2,
            "productId": "1004",
            "name": "Kai'Sa - Daughter of the Void",
            "subTypeName": "Normal",
            "marketPrice": "12.00",
            "lowPrice": "10.00",
        },
        {
            "_id": 6,
            "_uniqueId": "RB000006",
            "_setNumber": 2,
            "productId": "1005",
            "name": "Origins Booster Box",
            "subTypeName": "Normal",
            "marketPrice": "99.99",
            "lowPrice": "90.00",
        },
    ]


@pytest.fixture
def catalog(sample_records: list[dict]) -> Catalog:
    return build_catalog(sample_records, price_type="market")


@pytest.fixture
def zephyr_group() -> CardGroup:
    return CardGroup(
        name="Zephyr Strike",
        editions=(
            Edition(sub_type_name="Normal", product_id="1001", card_price=0.25, unique_id="RB000001"),
            Edition(sub_type_name="Foil", product_id="1001", card_price=1.50, unique_id="RB000002"),
        ),
    )


@pytest.fixture
def have_cards() -> list[TradeCard]:
    return [
        TradeCard(name="Zephyr Strike", price=1.5, quantity=2, unique_id="RB000002"),
        TradeCard(name="Kai'Sa - Daughter of the Void", price=12.0),
    ]


@pytest.fixture
def want_cards() -> list[TradeCard]:
    return [TradeCard(name="Flame Chompers (12)", price=2.75, quantity=3)]


@pytest.fixture
def page() -> UrlContext:
    """A page context with a fixed clock."""
    return UrlContext(current_url="https://riftrades.app/trade?lang=en", clock=lambda: FIXED_NOW)
