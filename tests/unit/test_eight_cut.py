"""8 切り判断测试"""
import pytest

from core.cards import str_to_cards
from core.actions import ActionType
from core.state import GameState, PlayRecord
from ai.config import EightCutTendency
from ai.eight_cut import (
    can_execute_eight_cut,
    check_eight_cut_tendency,
    evaluate_follow_up,
    has_simple_follow_up,
    win_probability_after_eight_cut,
)

C = str_to_cards

FILLER = [
    C("3♥ 4♥ 5♥ 6♥ 7♥ 9♥ 10♥ J♥ Q♥ K♥"),
    C("3♦ 4♦ 5♦ 6♦ 7♦ 9♦ 10♦ J♦ Q♦ K♦"),
    C("3♣ 4♣ 5♣ 6♣ 7♣ 9♣ 10♣ J♣ Q♣ K♣"),
]


def table(hand: str, others=None, characters=(1, 2, 3, 4), plays: int = 0) -> GameState:
    hands = [C(hand)] + [list(h) for h in (others or FILLER)]
    history = tuple(
        PlayRecord(player_id=1, cards=tuple(C("4♥")), action_type=ActionType.SINGLE, step=i)
        for i in range(plays)
    )
    return GameState.from_hands(hands, character_ids=list(characters), turn=0, play_history=history)


class TestCanExecuteEightCut:
    """can_execute_eight_cut 测试"""

    def test_no_eights(self):
        check = can_execute_eight_cut(0, table("4♠ 5♠"))
        assert not check.can_execute

    def test_emergency_small_hand(self):
        check = can_execute_eight_cut(0, table("8♥ 4♠ 5♠ 9♦ J♣"))
        assert check.can_execute
        assert check.is_emergency

    def test_danger_zone_with_follow_up(self):
        check = can_execute_eight_cut(0, table("8♥ 4♠ 6♦ 9♦ J♣ A♣ K♠", plays=5))
        assert check.can_execute
        assert check.is_emergency

    def test_early_game_low_probability(self):
        check = can_execute_eight_cut(0, table("8♥ 3♠ 4♠ 5♦ 6♣ 7♦ 9♠ 10♦ J♣ Q♠ K♦ 3♦"))
        assert not check.can_execute
        assert check.win_probability is not None
        assert check.win_probability < 70

    def test_mid_game_too_many_cards(self):
        check = can_execute_eight_cut(0, table("8♥ 3♠ 4♠ 5♦ 6♣ 7♦ 9♠ 10♦ J♣ Q♠ K♦", plays=10))
        assert not check.can_execute
        assert check.win_probability is None

    def test_mid_game_character_tendency(self):
        hand = "8♥ 4♠ 5♠ 9♦ 9♣ J♣ Q♥ K♦ 3♦"  # 9 张
        aggressive = can_execute_eight_cut(0, table(hand, characters=(2, 1, 3, 4), plays=10))
        strategic = can_execute_eight_cut(0, table(hand, characters=(3, 1, 2, 4), plays=10))
        assert aggressive.can_execute
        assert not strategic.can_execute


class TestWinProbability:
    """win_probability_after_eight_cut 测试"""

    def test_small_rest(self):
        assert win_probability_after_eight_cut(0, table("8♥ 4♠ 5♦")) == 70

    def test_strong_cards_and_pairs(self):
        # 剩 4 张: 50 + 2 强牌 40 + 对子 24
        assert win_probability_after_eight_cut(0, table("8♥ 2♠ A♦ 6♠ 6♣")) == 100

    def test_threat_reduces(self):
        near = [C("3♥ 4♥"), C("3♦ 4♦ 5♦ 6♦ 7♦"), FILLER[2]]
        assert win_probability_after_eight_cut(0, table("8♥ 4♠ 5♦", others=near)) == 55

    def test_large_hand(self):
        assert win_probability_after_eight_cut(0, table("8♥ 3♠ 4♠ 5♦ 6♣ 7♦ 9♠ 10♦ J♣ Q♠")) == 5


class TestFollowUp:
    """后续手段测试"""

    def test_full_follow_up(self):
        follow = evaluate_follow_up(C("8♥ 4♠ 5♠ K♦ K♣"))
        assert follow.suit_lock_potential
        assert follow.straight_potential
        assert not follow.strong_card_ready
        assert follow.winning_move
        assert follow.combo_setup
        assert follow.weak_card_options
        assert follow.total_score == 145
        assert follow.is_viable

    def test_jokers_ignored_for_suits(self):
        follow = evaluate_follow_up(C("8♥ JOKER 4♠ 9♦ Q♣ 6♥ 10♠"))
        assert follow.strong_card_ready
        assert not follow.straight_potential

    def test_simple_follow_up(self):
        assert has_simple_follow_up(C("8♥ 2♠ 4♦ 6♣ 9♥ J♠"))
        assert has_simple_follow_up(C("8♥ 4♦ 4♣ 6♣ 9♥ J♠"))
        assert not has_simple_follow_up(C("8♥ 4♦ 5♣ 6♣ 9♥ J♠"))


class TestTendency:
    """check_eight_cut_tendency 测试"""

    tendency = EightCutTendency(8, 9, aggressive=False, strategic=True)

    def test_hand_limit(self):
        state = table("4♠")
        assert not check_eight_cut_tendency(self.tendency, 9, state)
        assert check_eight_cut_tendency(self.tendency, 9, state, relaxed=True)

    def test_strategic_wants_fewer(self):
        state = table("4♠")
        assert not check_eight_cut_tendency(self.tendency, 7, state)
        assert check_eight_cut_tendency(self.tendency, 6, state)

    def test_cautious_when_opponent_close(self):
        near = [C("3♥ 4♥"), FILLER[1], FILLER[2]]
        relaxed = EightCutTendency(9, 10, aggressive=False, strategic=False)
        hand = "4♠ 5♠ 6♠ 7♠ 9♠ 10♠ J♠ Q♠"
        assert not check_eight_cut_tendency(relaxed, 8, table(hand, others=near))
        assert check_eight_cut_tendency(relaxed, 8, table(hand))
