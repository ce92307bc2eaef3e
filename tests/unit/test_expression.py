"""角色表情测试"""
import pytest
import numpy as np

from core.cards import str_to_cards
from core.state import GameState, Phase
from ai.expression import (
    Expression,
    ExpressionContext,
    ExpressionRule,
    always,
    chance,
    few,
    many,
    select_expression,
)

C = str_to_cards
E = Expression

BIG = C("3♥ 4♥ 5♥ 6♥ 7♥ 9♥ 10♥ J♥ Q♥ K♥")


def table(n_cards: int, character: int, active_others: int = 3) -> GameState:
    hand = BIG[:n_cards]
    others = [BIG if i < active_others else [] for i in range(3)]
    return GameState.from_hands([hand] + others, character_ids=[character, 1, 2, 3], turn=0)


class TestRules:
    """规则对象测试"""

    def test_always(self):
        rule = always(E.HAPPY, many(5))
        rng = np.random.default_rng(0)
        assert rule.resolve(ExpressionContext(6, 4), rng) == E.HAPPY
        assert rule.resolve(ExpressionContext(4, 4), rng) is None

    def test_chance_never(self):
        rule = chance(E.HAPPY, 0.0)
        rng = np.random.default_rng(0)
        assert all(rule.resolve(ExpressionContext(6, 4), rng) is None for _ in range(20))

    def test_cumulative_outcomes(self):
        rule = ExpressionRule(few(8), ((E.THINKING, 0.3), (E.HAPPY, 0.2)))
        rng = np.random.default_rng(0)
        results = {rule.resolve(ExpressionContext(6, 4), rng) for _ in range(200)}
        assert results == {E.THINKING, E.HAPPY, None}


class TestSelectExpression:
    """select_expression 测试"""

    def test_last_card_confident(self):
        assert select_expression(0, table(1, 5)) == E.CONFIDENT

    def test_two_cards_excited(self):
        assert select_expression(0, table(2, 5)) == E.EXCITED

    def test_head_to_head_frustrated(self):
        assert select_expression(0, table(6, 5, active_others=1)) == E.FRUSTRATED

    def test_finished_keeps_current(self):
        hands = [[], [], C("3♥"), C("4♥ 5♥")]
        state = GameState.from_hands(hands, phase=Phase.FINISHED)
        assert select_expression(0, state, current=E.HAPPY) == E.HAPPY

    def test_thinking_with_big_hand(self):
        for character in (1, 3, 10):
            assert select_expression(0, table(10, character)) == E.THINKING

    def test_confident_small_hand(self):
        assert select_expression(0, table(4, 10)) == E.CONFIDENT

    def test_character_four(self):
        assert select_expression(0, table(9, 4)) == E.FRUSTRATED
        assert select_expression(0, table(7, 4)) == E.THINKING

    def test_endgame_character(self):
        # 11主: 在场 3 人以下时思考
        assert select_expression(0, table(6, 11, active_others=2)) == E.THINKING

    def test_default_rules(self):
        assert select_expression(0, table(10, 99)) == E.FRUSTRATED
        assert select_expression(0, table(4, 99)) == E.CONFIDENT

    def test_thinking_mix(self):
        rng = np.random.default_rng(0)
        results = {select_expression(0, table(6, 1), rng=rng) for _ in range(100)}
        assert results == {E.THINKING, E.NORMAL}

    def test_probabilistic_character_values(self):
        rng = np.random.default_rng(3)
        results = {select_expression(0, table(6, 5), rng=rng) for _ in range(200)}
        assert results <= {E.HAPPY, E.THINKING, E.NORMAL}
        assert E.HAPPY in results
