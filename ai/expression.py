"""
角色表情

规则表驱动: 每个角色是一串 (条件, 结果) 规则，按顺序匹配，
先匹配公共规则，再匹配角色规则，最后按 "thinking 混入" 避免一直是 normal
"""
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Tuple
import logging

import numpy as np

from core.state import GameState

logger = logging.getLogger(__name__)


class Expression(Enum):
    """表情"""
    NORMAL = "normal"
    HAPPY = "happy"
    ANGRY = "angry"
    SURPRISED = "surprised"
    FRUSTRATED = "frustrated"
    EXCITED = "excited"
    CONFIDENT = "confident"
    THINKING = "thinking"
    WORRIED = "worried"
    NERVOUS = "nervous"
    DISAPPOINTED = "disappointed"


@dataclass(frozen=True)
class ExpressionContext:
    """规则判断所需的信息"""
    hand_count: int
    active_count: int


@dataclass(frozen=True)
class ExpressionRule:
    """
    表情规则

    条件成立后掷一次骰子，按 outcomes 的累积概率决定结果；
    概率总和不足 1 时，未命中则继续匹配下一条规则

    Attributes:
        condition: 条件
        outcomes: (表情, 概率) 列表
    """
    condition: Callable[[ExpressionContext], bool]
    outcomes: Tuple[Tuple[Expression, float], ...]

    def resolve(self, ctx: ExpressionContext, rng: np.random.Generator) -> Optional[Expression]:
        if not self.condition(ctx):
            return None
        if sum(p for _, p in self.outcomes) >= 1.0:
            return self.outcomes[0][0]
        roll = rng.random()
        cumulative = 0.0
        for expression, probability in self.outcomes:
            cumulative += probability
            if roll < cumulative:
                return expression
        return None


def always(expression: Expression, condition: Callable[[ExpressionContext], bool]) -> ExpressionRule:
    return ExpressionRule(condition, ((expression, 1.0),))


def chance(expression: Expression, probability: float,
           condition: Callable[[ExpressionContext], bool] = lambda ctx: True) -> ExpressionRule:
    return ExpressionRule(condition, ((expression, probability),))


def many(n: int) -> Callable[[ExpressionContext], bool]:
    return lambda ctx: ctx.hand_count >= n


def few(n: int) -> Callable[[ExpressionContext], bool]:
    return lambda ctx: ctx.hand_count <= n


E = Expression

DEFAULT_RULES: Tuple[ExpressionRule, ...] = (
    always(E.FRUSTRATED, many(10)),
    always(E.CONFIDENT, few(4)),
)

EXPRESSION_RULES: Dict[int, Tuple[ExpressionRule, ...]] = {
    1: (always(E.THINKING, many(10)),),
    2: (always(E.EXCITED, few(4)), chance(E.EXCITED, 0.3)),
    3: (always(E.THINKING, many(10)),),
    4: (always(E.FRUSTRATED, many(9)), always(E.THINKING, many(6))),
    5: (chance(E.HAPPY, 0.2),),
    6: (always(E.EXCITED, few(5)), chance(E.CONFIDENT, 0.3)),
    7: (always(E.FRUSTRATED, many(10)), always(E.HAPPY, few(4))),
    8: (
        always(E.EXCITED, few(4)),
        chance(E.THINKING, 0.6, many(9)),
        ExpressionRule(
            lambda ctx: 5 <= ctx.hand_count <= 8,
            ((E.THINKING, 0.3), (E.HAPPY, 0.2)),
        ),
    ),
    9: (always(E.EXCITED, few(4)), chance(E.CONFIDENT, 0.35)),
    10: (always(E.THINKING, many(10)), always(E.CONFIDENT, few(4))),
    11: (always(E.THINKING, lambda ctx: ctx.active_count <= 3), always(E.CONFIDENT, few(4))),
}

NEUTRAL_EXPRESSIONS = (None, E.NORMAL)
THINKING_MIX_NEUTRAL = 0.9
THINKING_MIX_OTHER = 0.35


def select_expression(
    player_id: int,
    state: GameState,
    current: Optional[Expression] = None,
    rng: Optional[np.random.Generator] = None,
) -> Expression:
    """
    选择玩家当前的表情

    Args:
        player_id: 玩家
        state: 状态快照
        current: 当前表情
        rng: 随机数生成器

    Returns:
        表情
    """
    if rng is None:
        rng = np.random.default_rng()

    keep = current if current is not None else E.NORMAL
    if state.is_finished:
        return keep

    ctx = ExpressionContext(
        hand_count=len(state.get_hand(player_id)),
        active_count=len(state.active),
    )

    if ctx.active_count == 2 and ctx.hand_count > 0:
        return E.FRUSTRATED
    if ctx.hand_count == 0:
        return keep
    if ctx.hand_count == 1:
        return E.CONFIDENT
    if ctx.hand_count == 2:
        return E.EXCITED

    character_id = state.get_player(player_id).character_id
    for rule in EXPRESSION_RULES.get(character_id, DEFAULT_RULES):
        result = rule.resolve(ctx, rng)
        if result is not None:
            return result

    mix = THINKING_MIX_NEUTRAL if current in NEUTRAL_EXPRESSIONS else THINKING_MIX_OTHER
    if rng.random() < mix:
        return E.THINKING
    return E.NORMAL
