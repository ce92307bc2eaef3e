"""
Core Layer - 纯游戏逻辑 (无 AI 依赖)

Modules:
    cards: 牌定义与编码
    actions: 动作类型与生成
    rules: 规则引擎
    state: 游戏状态
    errors: 错误类型
"""
from .cards import (
    Suit,
    Card,
    FULL_DECK,
    JOKER_1,
    JOKER_2,
    SPADE_THREE,
    NUM_PLAYERS,
    card_strength,
    is_strong_card,
    is_penalty_card,
    has_spade_three,
    new_deck,
    deal,
    cards_to_array,
    array_to_cards,
    card_to_str,
    cards_to_str,
    str_to_cards,
)

from .actions import (
    ActionType,
    Action,
    ActionGenerator,
    MIN_STRAIGHT_LEN,
    generate_legal_moves,
)

from .rules import RuleEngine, ROLE_NAMES

from .state import (
    Phase,
    EmptyField,
    HoldingField,
    FieldState,
    EMPTY_FIELD,
    PlayerState,
    EightCutState,
    PlayRecord,
    FinishEvent,
    Effects,
    GameState,
    new_game,
    legal_moves,
)

from .errors import (
    GameError,
    IllegalAction,
    NoLegalMove,
    StaleStateSubmission,
    ConfigurationError,
)

__all__ = [
    # cards
    "Suit",
    "Card",
    "FULL_DECK",
    "JOKER_1",
    "JOKER_2",
    "SPADE_THREE",
    "NUM_PLAYERS",
    "card_strength",
    "is_strong_card",
    "is_penalty_card",
    "has_spade_three",
    "new_deck",
    "deal",
    "cards_to_array",
    "array_to_cards",
    "card_to_str",
    "cards_to_str",
    "str_to_cards",
    # actions
    "ActionType",
    "Action",
    "ActionGenerator",
    "MIN_STRAIGHT_LEN",
    "generate_legal_moves",
    # rules
    "RuleEngine",
    "ROLE_NAMES",
    # state
    "Phase",
    "EmptyField",
    "HoldingField",
    "FieldState",
    "EMPTY_FIELD",
    "PlayerState",
    "EightCutState",
    "PlayRecord",
    "FinishEvent",
    "Effects",
    "GameState",
    "new_game",
    "legal_moves",
    # errors
    "GameError",
    "IllegalAction",
    "NoLegalMove",
    "StaleStateSubmission",
    "ConfigurationError",
]
