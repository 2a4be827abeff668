"""Tests for card, hole card and deck representation."""

import numpy as np
import pytest

from equibot.errors import DeckExhausted, InvalidCardCode, UnknownCardRemoval
from equibot.game.cards import (
    Card, Deck, HoleCards, Rank, Suit,
    expand_hand, full_deck, get_all_hands, parse_card, parse_cards, parse_range,
)


class TestCard:
    def test_from_string(self):
        card = Card.from_string("As")
        assert card.rank == Rank.ACE
        assert card.suit == Suit.SPADES

    def test_from_string_ten(self):
        card = parse_card("Th")
        assert card.rank == Rank.TEN
        assert card.suit == Suit.HEARTS

    def test_numeric_ten(self):
        assert parse_card("10h") == parse_card("Th")

    @pytest.mark.parametrize("code,expected", [
        ("11c", "Jc"),
        ("12d", "Qd"),
        ("13h", "Kh"),
        ("14s", "As"),
    ])
    def test_numeric_face_cards(self, code, expected):
        assert str(parse_card(code)) == expected

    def test_str(self):
        card = Card(Rank.ACE, Suit.SPADES)
        assert str(card) == "As"

    def test_symbol(self):
        assert parse_card("Kh").symbol == "K♥"

    @pytest.mark.parametrize("code", [
        "Xs", "Ax", "as", "AS", "A", "Ash", "", "1s", "15h", "T",
    ])
    def test_invalid_codes(self, code):
        with pytest.raises(InvalidCardCode):
            parse_card(code)

    def test_non_string(self):
        with pytest.raises(InvalidCardCode):
            parse_card(14)

    def test_invalid_code_is_value_error(self):
        with pytest.raises(ValueError):
            parse_card("Zz")

    def test_equality(self):
        card1 = Card.from_string("As")
        card2 = Card.from_string("As")
        assert card1 == card2
        assert hash(card1) == hash(card2)
        assert card1 != Card.from_string("Ah")

    def test_to_treys(self):
        card = Card.from_string("As")
        treys_card = card.to_treys()
        assert isinstance(treys_card, int)


class TestParseCards:
    def test_concatenated(self):
        assert parse_cards("AsKh") == [parse_card("As"), parse_card("Kh")]

    def test_separated(self):
        assert parse_cards("As Kh, 2c") == parse_cards(["As", "Kh", "2c"])

    def test_mixed_objects(self):
        ace = parse_card("As")
        assert parse_cards([ace, "Kh"]) == [ace, parse_card("Kh")]

    def test_numeric_token(self):
        assert parse_cards("10h Js") == parse_cards("ThJs")

    def test_empty(self):
        assert parse_cards("") == []
        assert parse_cards(None) == []


class TestHoleCards:
    def test_from_string(self):
        hand = HoleCards.from_string("AsKh")
        assert hand.card1.rank == Rank.ACE
        assert hand.card2.rank == Rank.KING

    def test_card_ordering(self):
        # Lower card first in string should still have higher rank first
        hand = HoleCards.from_string("KsAs")
        assert hand.card1.rank == Rank.ACE
        assert hand.card2.rank == Rank.KING
        assert hand == HoleCards.from_string("AsKs")

    def test_unordered_pair_equality(self):
        assert HoleCards.from_string("AhAs") == HoleCards.from_string("AsAh")

    def test_duplicate_rejected(self):
        with pytest.raises(ValueError):
            HoleCards.from_string("AsAs")

    def test_wrong_count_rejected(self):
        with pytest.raises(ValueError):
            HoleCards.from_cards(["As"])
        with pytest.raises(ValueError):
            HoleCards.from_cards(["As", "Kh", "Qd"])

    def test_canonical_pair(self):
        hand = HoleCards.from_string("AsAh")
        assert hand.is_pair
        assert hand.canonical == "AA"

    def test_canonical_suited(self):
        hand = HoleCards.from_string("AsKs")
        assert hand.is_suited
        assert hand.canonical == "AKs"

    def test_canonical_offsuit(self):
        hand = HoleCards.from_string("7h2c")
        assert not hand.is_suited
        assert not hand.is_pair
        assert hand.canonical == "72o"

    def test_str(self):
        hand = HoleCards.from_string("AsKh")
        assert str(hand) == "AsKh"


class TestDeck:
    def test_full_deck(self):
        deck = Deck()
        assert len(deck) == 52
        assert len(set(deck)) == 52

    def test_deterministic_order(self):
        cards = full_deck()
        assert cards == full_deck()
        # Suit-major, rank-minor
        assert str(cards[0]) == "2c"
        assert str(cards[12]) == "Ac"
        assert str(cards[13]) == "2d"
        assert str(cards[51]) == "As"

    def test_excluding(self):
        removed = parse_cards("As Kh 7d 2c 9s")
        deck = Deck().excluding(removed)
        assert len(deck) == 52 - len(removed)
        for card in removed:
            assert card not in deck

    def test_excluding_leaves_original(self):
        deck = Deck()
        deck.excluding(["As"])
        assert len(deck) == 52

    def test_excluding_missing_card(self):
        deck = Deck().excluding(["As"])
        with pytest.raises(UnknownCardRemoval):
            deck.excluding(["As"])

    def test_excluding_same_card_twice(self):
        with pytest.raises(UnknownCardRemoval):
            Deck().excluding(["Kh", "Kh"])

    def test_draw_random(self, rng):
        deck = Deck().excluding(["As", "Ks"])
        drawn, rest = deck.draw_random(7, rng)

        assert len(drawn) == 7
        assert len(set(drawn)) == 7
        assert len(rest) == 50 - 7
        assert not set(drawn) & set(rest)
        assert set(drawn) | set(rest) == set(deck)

    def test_draw_random_seeded(self):
        deck = Deck()
        first, _ = deck.draw_random(5, np.random.default_rng(7))
        second, _ = deck.draw_random(5, np.random.default_rng(7))
        assert first == second

    def test_draw_zero(self, rng):
        deck = Deck()
        drawn, rest = deck.draw_random(0, rng)
        assert drawn == []
        assert len(rest) == 52

    def test_draw_too_many(self, rng):
        deck = Deck(parse_cards("As Kh"))
        with pytest.raises(DeckExhausted):
            deck.draw_random(3, rng)

    def test_draw_covers_whole_deck(self):
        # Every card should come up when sampling repeatedly
        deck = Deck()
        rng = np.random.default_rng(3)
        seen = set()
        for _ in range(1000):
            drawn, _ = deck.draw_random(2, rng)
            seen.update(drawn)
        assert len(seen) == 52


class TestHandHelpers:
    def test_get_all_hands(self):
        hands = get_all_hands()
        # 13 pairs + 78 suited + 78 offsuit = 169
        assert len(hands) == 169

        # Check some specific hands exist
        assert "AA" in hands
        assert "AKs" in hands
        assert "AKo" in hands
        assert "72o" in hands

    def test_parse_range_single(self):
        hands = parse_range("AA")
        assert hands == ["AA"]

    def test_parse_range_pair_plus(self):
        hands = parse_range("TT+")
        assert hands == ["TT", "JJ", "QQ", "KK", "AA"]

    def test_parse_range_pair_range(self):
        hands = parse_range("22-55")
        assert hands == ["22", "33", "44", "55"]

    def test_parse_range_suited_plus(self):
        hands = parse_range("ATs+")
        assert hands == ["ATs", "AJs", "AQs", "AKs"]
        # AAs is not a thing, so should not include ace
        assert "AAs" not in hands

    def test_parse_range_components(self):
        hands = parse_range("QQ+, AKs, KK")
        assert hands == ["QQ", "KK", "AA", "AKs"]

    @pytest.mark.parametrize("hand,count", [
        ("AA", 6),
        ("AKs", 4),
        ("AKo", 12),
        ("AK", 16),
        ("AsKh", 1),
    ])
    def test_expand_hand(self, hand, count):
        combos = expand_hand(hand)
        assert len(combos) == count
        assert len(set(combos)) == count

    def test_expand_suited(self):
        assert all(c.is_suited for c in expand_hand("T9s"))
        assert not any(c.is_suited for c in expand_hand("T9o"))

    @pytest.mark.parametrize("hand", ["AAs", "XK", "AKx", "A"])
    def test_expand_invalid(self, hand):
        with pytest.raises(ValueError):
            expand_hand(hand)

    def test_parse_range_any(self):
        hands = parse_range("any")
        assert len(hands) == 169
        assert sum(len(expand_hand(h)) for h in hands) == 1326

    def test_parse_range_offsuit_plus(self):
        assert parse_range("KTo+") == ["KTo", "KJo", "KQo"]

    def test_parse_range_specific_combo(self):
        assert parse_range("AsKh, AA") == ["AsKh", "AA"]

    @pytest.mark.parametrize("text", ["AAs", "AKx", "XX+", "22-"])
    def test_parse_range_invalid(self, text):
        with pytest.raises(ValueError):
            parse_range(text)
