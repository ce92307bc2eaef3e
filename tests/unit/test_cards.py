"""牌定义/编码测试"""
import pytest
import numpy as np
from collections import Counter

from core.cards import (
    Suit,
    Card,
    FULL_DECK,
    CARD_BY_ID,
    JOKER_1,
    JOKER_2,
    SPADE_THREE,
    make_card,
    card_strength,
    is_penalty_card,
    is_strong_card,
    has_spade_three,
    new_deck,
    deal,
    sort_hand,
    cards_to_array,
    array_to_cards,
    cards_to_str,
    str_to_cards,
)


class TestFullDeck:
    """完整牌组测试"""

    def test_deck_size(self):
        assert len(FULL_DECK) == 54

    def test_deck_composition(self):
        counter = Counter(c.suit for c in FULL_DECK)
        for suit in (Suit.SPADES, Suit.HEARTS, Suit.DIAMONDS, Suit.CLUBS):
            assert counter[suit] == 13
        assert counter[Suit.JOKER] == 2

    def test_unique_ids(self):
        assert len({c.id for c in FULL_DECK}) == 54
        assert CARD_BY_ID["spades-3"] == SPADE_THREE

    def test_joker_rank(self):
        assert JOKER_1.rank == 14
        assert JOKER_2.is_joker
        assert JOKER_1 != JOKER_2

    def test_card_is_frozen(self):
        with pytest.raises(Exception):
            SPADE_THREE.rank = 4


class TestCardStrength:
    """card_strength 测试"""

    def test_normal_order(self):
        order = [3, 4, 5, 6, 7, 8, 9, 10, 11, 12, 13, 1, 2]
        strengths = [card_strength(make_card(Suit.HEARTS, r)) for r in order]
        assert strengths == sorted(strengths)
        assert len(set(strengths)) == len(strengths)

    def test_normal_values(self):
        assert card_strength(make_card(Suit.CLUBS, 1)) == 14
        assert card_strength(make_card(Suit.CLUBS, 2)) == 15
        assert card_strength(JOKER_1) == 16

    def test_revolution_values(self):
        assert card_strength(JOKER_1, True) == 1
        assert card_strength(make_card(Suit.CLUBS, 2), True) == 2
        assert card_strength(make_card(Suit.CLUBS, 1), True) == 3
        assert card_strength(make_card(Suit.CLUBS, 13), True) == 3
        assert card_strength(make_card(Suit.CLUBS, 3), True) == 13

    def test_revolution_three_is_strongest(self):
        three = make_card(Suit.HEARTS, 3)
        others = [c for c in FULL_DECK if c.rank != 3]
        assert all(card_strength(three, True) > card_strength(c, True) for c in others)

    @pytest.mark.parametrize("a, b", [(a, b) for a in range(3, 14) for b in range(3, 14) if a != b])
    def test_revolution_reverses_plain_ranks(self, a, b):
        card_a, card_b = make_card(Suit.SPADES, a), make_card(Suit.HEARTS, b)
        normal = card_strength(card_a) > card_strength(card_b)
        revolution = card_strength(card_a, True) < card_strength(card_b, True)
        assert normal == revolution


class TestPenaltyCards:
    """反则牌测试"""

    def test_normal(self):
        assert is_penalty_card(JOKER_1)
        assert is_penalty_card(make_card(Suit.SPADES, 8))
        assert is_penalty_card(make_card(Suit.SPADES, 2))
        assert not is_penalty_card(make_card(Suit.SPADES, 3))

    def test_revolution(self):
        assert is_penalty_card(make_card(Suit.SPADES, 3), True)
        assert not is_penalty_card(make_card(Suit.SPADES, 2), True)
        assert is_penalty_card(make_card(Suit.SPADES, 8), True)

    def test_strong_cards(self):
        assert is_strong_card(JOKER_2)
        assert is_strong_card(make_card(Suit.HEARTS, 1))
        assert not is_strong_card(make_card(Suit.HEARTS, 13))

    def test_has_spade_three(self):
        assert has_spade_three([SPADE_THREE, JOKER_1])
        assert not has_spade_three([make_card(Suit.HEARTS, 3)])


class TestDeal:
    """发牌测试"""

    def test_deal_sizes(self):
        hands = deal(new_deck(np.random.default_rng(0)))
        assert [len(h) for h in hands] == [14, 14, 13, 13]

    def test_deal_partitions_deck(self):
        hands = deal(new_deck(np.random.default_rng(1)))
        ids = [c.id for h in hands for c in h]
        assert sorted(ids) == sorted(c.id for c in FULL_DECK)

    def test_seeded_shuffle_is_reproducible(self):
        a = new_deck(np.random.default_rng(7))
        b = new_deck(np.random.default_rng(7))
        assert a == b

    def test_sort_hand_jokers_last(self):
        hand = sort_hand([JOKER_1, make_card(Suit.HEARTS, 9), SPADE_THREE])
        assert hand[0] == SPADE_THREE
        assert hand[-1] == JOKER_1


class TestCardsToArray:
    """cards_to_array 测试"""

    def test_empty_cards(self):
        arr = cards_to_array([])
        assert arr.shape == (54,)
        assert arr.sum() == 0

    def test_single_card(self):
        arr = cards_to_array([SPADE_THREE])
        assert arr.sum() == 1
        assert arr[2] == 1  # 黑桃 A 在 0

    def test_jokers(self):
        arr = cards_to_array([JOKER_1, JOKER_2])
        assert arr[52] == 1
        assert arr[53] == 1

    def test_array_to_cards(self):
        cards = [SPADE_THREE, make_card(Suit.CLUBS, 12), JOKER_2]
        result = array_to_cards(cards_to_array(cards))
        assert sorted(c.id for c in result) == sorted(c.id for c in cards)


class TestCardsToStr:
    """字符串转换测试"""

    def test_cards_to_str(self):
        s = cards_to_str([SPADE_THREE, make_card(Suit.HEARTS, 10), JOKER_1])
        assert s == "3♠ 10♥ JOKER"

    def test_str_to_cards(self):
        cards = str_to_cards("3♠ K♦ JOKER JOKER")
        assert cards[0] == SPADE_THREE
        assert cards[1] == make_card(Suit.DIAMONDS, 13)
        assert cards[2] == JOKER_1
        assert cards[3] == JOKER_2

    def test_str_to_cards_unknown(self):
        with pytest.raises(ValueError):
            str_to_cards("Z♠")

    def test_str_to_cards_three_jokers(self):
        with pytest.raises(ValueError):
            str_to_cards("JOKER JOKER JOKER")
