"""Tests for catalog reconciliation of decoded trade entries."""

import pytest

from riftrades.codec.reconcile import (
    MatchStrategy,
    ReconciliationMiss,
    base_card_name,
    base_name_match,
    exact_name_match,
    find_best_match,
    match_candidates,
    normalize_card_name,
    reconstruct_card,
    reconstruct_cards,
    reconstruct_trade,
    select_edition,
    substring_match,
)
from riftrades.models.card import CardGroup, Edition, TradeCard
from riftrades.models.trade import CompactCardEntry, DecodedTrade
from riftrades.services.catalog import Catalog

# =============================================================================
# TEST FIXTURES
# =============================================================================


@pytest.fixture
def promo_first_groups(zephyr_group: CardGroup) -> list[CardGroup]:
    """Promo variant listed BEFORE the plain card, so catalog order alone can't win."""
    promo = CardGroup(
        name="Zephyr Strike (Promo)",
        editions=(Edition("Normal", "1002", 4.0, "RB000003"),),
    )
    return [promo, zephyr_group]


# =============================================================================
# NORMALIZATION
# =============================================================================


class TestNormalizeCardName:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("Zephyr Strike", "zephyr strike"),
            ("zephyr-strike", "zephyr strike"),
            ("Zephyr–Strike", "zephyr strike"),
            ("Kai'Sa - Daughter of the Void", "kaisa daughter of the void"),
            ("Rek`Sai", "reksai"),
            ("Kai’Sa", "kaisa"),
            ("  Flame   Chompers! ", "flame chompers"),
            ("Zephyr Strike (Promo)", "zephyr strike promo"),
            ("???", ""),
        ],
    )
    def test_normalize(self, raw: str, expected: str) -> None:
        assert normalize_card_name(raw) == expected


class TestBaseCardName:
    def test_strips_number_suffix(self) -> None:
        assert base_card_name("Flame Chompers (12)") == "Flame Chompers"

    def test_strips_everything_after_first_paren(self) -> None:
        assert base_card_name("Zephyr Strike (Promo) Foil") == "Zephyr Strike"

    def test_no_suffix(self) -> None:
        assert base_card_name("Zephyr Strike") == "Zephyr Strike"


# =============================================================================
# STRATEGY PREDICATES
# =============================================================================


class TestPredicates:
    def test_exact(self) -> None:
        assert exact_name_match("zephyr-strike", "Zephyr Strike")
        assert not exact_name_match("zephyr-strike", "Zephyr Strike (Promo)")

    def test_base_name(self) -> None:
        assert base_name_match("Flame Chompers (99)", "Flame Chompers (12)")
        assert not base_name_match("Flame", "Flame Chompers (12)")

    def test_substring_either_direction(self) -> None:
        assert substring_match("Chompers", "Flame Chompers (12)")
        assert substring_match("Flame Chompers Deluxe", "Flame Chompers")

    def test_empty_identifier_never_matches(self) -> None:
        assert not exact_name_match("???", "!!!")
        assert not base_name_match("(Promo)", "(Token)")
        assert not substring_match("(Promo)", "Zephyr Strike")

    def test_strategy_priority_order(self) -> None:
        ordered = sorted(MatchStrategy, key=lambda s: s.priority)
        assert ordered == [
            MatchStrategy.UNIQUE_ID,
            MatchStrategy.EXACT,
            MatchStrategy.BASE_NAME,
            MatchStrategy.SUBSTRING,
        ]


# =============================================================================
# MATCHING PRECEDENCE
# =============================================================================


class TestMatchPrecedence:
    def test_normalized_exact_beats_catalog_order(
        self, promo_first_groups: list[CardGroup]
    ) -> None:
        match = find_best_match("zephyr-strike", promo_first_groups)

        assert match is not None
        assert match.group.name == "Zephyr Strike"
        assert match.strategy is MatchStrategy.EXACT

    def test_promo_identifier_resolves_to_promo(self, promo_first_groups: list[CardGroup]) -> None:
        match = find_best_match("Zephyr Strike (Promo)", promo_first_groups)

        assert match is not None
        assert match.group.name == "Zephyr Strike (Promo)"
        assert match.strategy is MatchStrategy.EXACT

    def test_candidates_ranked(self, promo_first_groups: list[CardGroup]) -> None:
        candidates = match_candidates("zephyr-strike", promo_first_groups)

        assert [(c.group.name, c.strategy) for c in candidates] == [
            ("Zephyr Strike", MatchStrategy.EXACT),
            ("Zephyr Strike (Promo)", MatchStrategy.BASE_NAME),
        ]

    def test_base_name_match(self, catalog: Catalog) -> None:
        match = find_best_match("Flame Chompers (99)", catalog.groups)

        assert match is not None
        assert match.group.name == "Flame Chompers (12)"
        assert match.strategy is MatchStrategy.BASE_NAME

    def test_substring_match(self, catalog: Catalog) -> None:
        match = find_best_match("Daughter of the Void", catalog.groups)

        assert match is not None
        assert match.group.name == "Kai'Sa - Daughter of the Void"
        assert match.strategy is MatchStrategy.SUBSTRING

    def test_substring_ties_keep_catalog_order(self, catalog: Catalog) -> None:
        candidates = match_candidates("Zephyr", catalog.groups)

        assert [c.group.name for c in candidates] == ["Zephyr Strike", "Zephyr Strike (Promo)"]
        assert all(c.strategy is MatchStrategy.SUBSTRING for c in candidates)

    def test_unique_id_lookup(self, catalog: Catalog) -> None:
        match = find_best_match("RB000004", catalog.groups, catalog.id_lookup)

        assert match is not None
        assert match.group.name == "Flame Chompers (12)"
        assert match.strategy is MatchStrategy.UNIQUE_ID

    def test_unique_id_lookup_accepts_mappings(self, catalog: Catalog) -> None:
        lookup = {"RB000004": {"displayName": "Flame Chompers (12)", "_uniqueId": "RB000004"}}
        match = find_best_match("RB000004", catalog.groups, lookup)

        assert match is not None
        assert match.strategy is MatchStrategy.UNIQUE_ID

    def test_unknown_unique_id_without_name_match(self, catalog: Catalog) -> None:
        assert find_best_match("RB999999", catalog.groups, catalog.id_lookup) is None

    def test_no_match(self, catalog: Catalog) -> None:
        assert match_candidates("Nonexistent Card", catalog.groups) == []

    def test_deterministic_for_reordered_catalog(self, catalog: Catalog) -> None:
        reversed_groups = list(reversed(catalog.groups))

        forward = find_best_match("zephyr strike", catalog.groups)
        backward = find_best_match("zephyr strike", reversed_groups)

        assert forward is not None and backward is not None
        assert forward.group.name == backward.group.name == "Zephyr Strike"


# =============================================================================
# EDITION SELECTION
# =============================================================================


class TestSelectEdition:
    def test_price_match(self, zephyr_group: CardGroup) -> None:
        assert select_edition(zephyr_group, 1.5).sub_type_name == "Foil"

    def test_within_a_cent(self, zephyr_group: CardGroup) -> None:
        assert select_edition(zephyr_group, 1.505).sub_type_name == "Foil"

    def test_defaults_to_first(self, zephyr_group: CardGroup) -> None:
        assert select_edition(zephyr_group, 9.99).sub_type_name == "Normal"

    def test_no_price_defaults_to_first(self, zephyr_group: CardGroup) -> None:
        assert select_edition(zephyr_group, None).sub_type_name == "Normal"

    def test_equal_prices_resolve_by_catalog_order(self) -> None:
        group = CardGroup(
            name="Twin",
            editions=(
                Edition("Normal", "1", 1.0, "RB1"),
                Edition("Foil", "1", 1.0, "RB2"),
            ),
        )
        assert select_edition(group, 1.0).unique_id == "RB1"

    def test_no_editions(self) -> None:
        with pytest.raises(ValueError, match="no editions"):
            select_edition(CardGroup(name="Empty"), 1.0)


# =============================================================================
# RECONSTRUCTION
# =============================================================================


class TestReconstructCards:
    def test_full_card(self, catalog: Catalog) -> None:
        cards = reconstruct_cards([["RB000002", 1.5, 2]], catalog.groups, catalog.id_lookup)

        assert len(cards) == 1
        card = cards[0]
        assert isinstance(card, TradeCard)
        assert card.name == "Zephyr Strike"
        assert card.price == 1.5
        assert card.quantity == 2
        assert card.unique_id == "RB000002"
        assert card.sub_type_name == "Foil"
        assert card.card_group is not None
        assert card.available_editions == card.card_group.editions

    def test_dropped_entry_resilience(self, catalog: Catalog) -> None:
        """One unknown card among valid ones is dropped, order kept, no exception."""
        entries = [
            CompactCardEntry("Zephyr Strike", 0.25),
            CompactCardEntry("Nonexistent Card", 5.0),
            CompactCardEntry("Flame Chompers (12)", 2.75, 2),
            CompactCardEntry("RB000005", 12.0),
        ]
        cards = reconstruct_cards(entries, catalog.groups, catalog.id_lookup)

        assert [card.name for card in cards] == [
            "Zephyr Strike",
            "Flame Chompers (12)",
            "Kai'Sa - Daughter of the Void",
        ]

    def test_group_without_editions_is_dropped(self) -> None:
        groups = [CardGroup(name="Empty Card"), CardGroup(name="Other", editions=())]
        assert reconstruct_cards([["Empty Card", 1.0]], groups) == []

    @pytest.mark.parametrize(("quantity", "expected"), [(0, 1), (-2, 1), ("abc", 1), ("3", 3)])
    def test_quantity_clamped(self, catalog: Catalog, quantity: object, expected: int) -> None:
        cards = reconstruct_cards([["Zephyr Strike", 0.25, quantity]], catalog.groups)
        assert cards[0].quantity == expected

    def test_stored_price_is_kept(self, catalog: Catalog) -> None:
        """A re-priced catalog does not change the shared price."""
        cards = reconstruct_cards([["Zephyr Strike", 0.3]], catalog.groups)

        assert cards[0].price == 0.3
        assert cards[0].sub_type_name == "Normal"

    def test_missing_price_uses_edition_price(self, catalog: Catalog) -> None:
        cards = reconstruct_cards([["Zephyr Strike"]], catalog.groups)
        assert cards[0].price == 0.25

    def test_malformed_entries_skipped(self, catalog: Catalog) -> None:
        cards = reconstruct_cards([[], 5, {"x": 1}, ["Zephyr Strike", 0.25]], catalog.groups)
        assert [card.name for card in cards] == ["Zephyr Strike"]

    @pytest.mark.parametrize("entries", [None, "Zephyr Strike", {"n": "Zephyr Strike"}])
    def test_non_list_input(self, catalog: Catalog, entries: object) -> None:
        assert reconstruct_cards(entries, catalog.groups) == []  # type: ignore[arg-type]

    def test_empty_catalog(self) -> None:
        assert reconstruct_cards([["Zephyr Strike", 0.25]], []) == []


class TestReconstructCard:
    def test_miss_reasons(self, catalog: Catalog) -> None:
        miss = reconstruct_card(CompactCardEntry("Nonexistent Card", 1.0), catalog.groups)

        assert isinstance(miss, ReconciliationMiss)
        assert miss.reason == "not_found"

        empty = reconstruct_card(CompactCardEntry("Ghost", 1.0), [CardGroup(name="Ghost")])
        assert isinstance(empty, ReconciliationMiss)
        assert empty.reason == "no_editions"


class TestReconstructTrade:
    def test_both_sides_and_dropped(self, catalog: Catalog) -> None:
        decoded = DecodedTrade(
            version=1,
            timestamp_ms=None,
            have=(CompactCardEntry("RB000002", 1.5, 2), CompactCardEntry("Missing", 1.0)),
            want=(CompactCardEntry("Flame Chompers (12)", 2.75),),
        )
        rebuilt = reconstruct_trade(decoded, catalog.groups, catalog.id_lookup)

        assert [card.name for card in rebuilt.have] == ["Zephyr Strike"]
        assert [card.name for card in rebuilt.want] == ["Flame Chompers (12)"]
        assert rebuilt.dropped == (ReconciliationMiss("Missing", "not_found"),)
