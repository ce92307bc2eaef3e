"""
Evaluation Layer - 评估框架

Modules:
    evaluator: 评估器和智能体
    arena: 对战竞技场
    metrics: 评估指标
    elo: 名次 ELO 评分
"""
from .evaluator import (
    EvalResult,
    Agent,
    RandomAgent,
    RuleBasedAgent,
    CharacterAgent,
    Evaluator,
)
from .arena import (
    RANK_POINTS,
    MatchResult,
    TournamentResult,
    Arena,
    LeaderBoard,
)
from .metrics import (
    GameMetrics,
    MetricsCollector,
)
from .elo import (
    PlayerRating,
    EloSystem,
    PlacementElo,
)

__all__ = [
    # evaluator
    "EvalResult",
    "Agent",
    "RandomAgent",
    "RuleBasedAgent",
    "CharacterAgent",
    "Evaluator",
    # arena
    "RANK_POINTS",
    "MatchResult",
    "TournamentResult",
    "Arena",
    "LeaderBoard",
    # metrics
    "GameMetrics",
    "MetricsCollector",
    # elo
    "PlayerRating",
    "EloSystem",
    "PlacementElo",
]
