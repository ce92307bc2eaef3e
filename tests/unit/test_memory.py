"""记忆模型测试"""
import pytest
import numpy as np

from core.cards import Suit, str_to_cards
from core.actions import Action
from core.state import GameState, PlayRecord
from ai.config import MemoryProfile, MemoryTendency
from ai.memory import EMPTY_MEMORY, MemoryState, recall, memory_bonus

C = str_to_cards

ALL = frozenset(MemoryTendency)


def record(player_id: int, cards: str, step: int) -> PlayRecord:
    action = Action.from_cards(C(cards)) if cards else Action.pass_action()
    return PlayRecord(player_id=player_id, cards=action.cards, action_type=action.action_type, step=step)


def history_state() -> GameState:
    history = (
        record(1, "2♠", 0),
        record(2, "JOKER", 1),
        record(3, "", 2),
        record(1, "6♥ 6♦", 3),
        record(2, "7♥ 7♣", 4),
        record(3, "9♥", 5),
        record(1, "2♦ 2♣", 6),
    )
    hands = [C("4♠ 5♠"), C("3♥"), C("3♦"), C("3♣")]
    return GameState.from_hands(hands, turn=0, play_history=history)


class TestRecall:
    """recall 测试"""

    def test_recall_failure(self):
        memory = recall(0, history_state(), np.random.default_rng(0), MemoryProfile(probability=0.0))
        assert memory is EMPTY_MEMORY
        assert not memory.recalled

    def test_recall_all(self):
        profile = MemoryProfile(probability=1.0, tendencies=ALL)
        memory = recall(0, history_state(), np.random.default_rng(0), profile)
        assert memory.recalled
        assert [c.rank for c in memory.high_cards] == [2, 14, 2, 2]
        assert sorted(c.rank for c in memory.mid_cards) == [6, 6, 7, 7, 9]
        assert memory.suit_flow == (Suit.SPADES, Suit.HEARTS, Suit.HEARTS, Suit.HEARTS, Suit.DIAMONDS)
        assert memory.revolution_signs == 3

    def test_player_styles(self):
        profile = MemoryProfile(probability=1.0, tendencies=frozenset({MemoryTendency.PLAYER_STYLE}))
        memory = recall(0, history_state(), np.random.default_rng(0), profile)
        assert memory.player_styles[1] == "aggressive"
        assert memory.player_styles[2] == "aggressive"
        assert memory.player_styles[3] == "conservative"
        assert 0 not in memory.player_styles

    def test_only_known_tendencies(self):
        profile = MemoryProfile(probability=1.0, tendencies=frozenset({MemoryTendency.HIGH_CARD}))
        memory = recall(0, history_state(), np.random.default_rng(0), profile)
        assert memory.high_cards
        assert memory.mid_cards == ()
        assert memory.suit_flow == ()
        assert memory.revolution_signs == 0

    def test_default_profile_from_character(self):
        # 6主 回忆率 0.1，没有记忆类别
        hands = [C("4♠"), C("3♥"), C("3♦"), C("3♣")]
        state = GameState.from_hands(hands, character_ids=[6, 1, 2, 3], turn=0)
        rng = np.random.default_rng(1)
        for _ in range(20):
            memory = recall(0, state, rng)
            assert memory.high_cards == ()


class TestMemoryBonus:
    """memory_bonus 测试"""

    def test_not_recalled(self):
        assert memory_bonus(C("2♠"), EMPTY_MEMORY, 3) == 0.0

    def test_high_card_reader(self):
        memory = MemoryState(recalled=True, high_cards=tuple(C("2♠ 2♥ 2♦ A♠ A♥ A♦ JOKER")))
        assert memory_bonus(C("2♣"), memory, 3) == 30
        assert memory_bonus(C("3♠"), memory, 3) == 25
        assert memory_bonus(C("2♣"), memory, 2) == 0

    def test_high_card_needs_enough_seen(self):
        memory = MemoryState(recalled=True, high_cards=tuple(C("2♠ 2♥")))
        assert memory_bonus(C("2♣"), memory, 3) == 0

    def test_revolution_reader(self):
        memory = MemoryState(recalled=True, revolution_signs=2)
        assert memory_bonus(C("9♠ 9♥ 9♦ 9♣"), memory, 4) == 40
        assert memory_bonus(C("9♠ 9♥"), memory, 4) == 0

    def test_suit_flow_reader(self):
        memory = MemoryState(recalled=True, suit_flow=(Suit.CLUBS, Suit.HEARTS, Suit.HEARTS))
        assert memory_bonus(C("9♥"), memory, 1) == 25
        assert memory_bonus(C("9♠"), memory, 1) == 0
        assert memory_bonus(C("9♥"), memory, 6) == 0
