"""
AI Layer - 角色 AI

Modules:
    characters: 角色定义
    config: 各角色 AI 参数
    memory: 记忆/感知
    risk: 反则上がり风险
    eight_cut: 8 切り判断
    scoring: 候选评分
    selection: 性格化抽选
    agent: 决策入口
    expression: 表情规则表
"""
from .characters import (
    SpecialRules,
    Character,
    CHARACTERS,
    get_character,
    get_random_characters,
)

from .config import (
    MemoryTendency,
    SelectionMethod,
    MemoryProfile,
    EightCutTendency,
    SelectionConfig,
    CompatibilityConfig,
    AIProfile,
    AI_PROFILES,
    get_profile,
)

from .memory import MemoryState, EMPTY_MEMORY, recall, memory_bonus

from .risk import FoulRisk, evaluate_foul_risk

from .eight_cut import (
    EightCutCheck,
    FollowUp,
    can_execute_eight_cut,
    win_probability_after_eight_cut,
    evaluate_follow_up,
    check_eight_cut_tendency,
)

from .scoring import ScoredMove, score_move, score_moves

from .selection import select_move, softmax_probabilities

from .agent import decide, fallback_action

from .expression import (
    Expression,
    ExpressionRule,
    EXPRESSION_RULES,
    select_expression,
)

__all__ = [
    # characters
    "SpecialRules",
    "Character",
    "CHARACTERS",
    "get_character",
    "get_random_characters",
    # config
    "MemoryTendency",
    "SelectionMethod",
    "MemoryProfile",
    "EightCutTendency",
    "SelectionConfig",
    "CompatibilityConfig",
    "AIProfile",
    "AI_PROFILES",
    "get_profile",
    # memory
    "MemoryState",
    "EMPTY_MEMORY",
    "recall",
    "memory_bonus",
    # risk
    "FoulRisk",
    "evaluate_foul_risk",
    # eight_cut
    "EightCutCheck",
    "FollowUp",
    "can_execute_eight_cut",
    "win_probability_after_eight_cut",
    "evaluate_follow_up",
    "check_eight_cut_tendency",
    # scoring
    "ScoredMove",
    "score_move",
    "score_moves",
    # selection
    "select_move",
    "softmax_probabilities",
    # agent
    "decide",
    "fallback_action",
    # expression
    "Expression",
    "ExpressionRule",
    "EXPRESSION_RULES",
    "select_expression",
]
