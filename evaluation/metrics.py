"""
评估指标

收集对局结果，按玩家或全局汇总
"""
from typing import Dict, List, Optional, Tuple
from dataclasses import dataclass, field
from collections import defaultdict
import numpy as np

from core.cards import NUM_PLAYERS


@dataclass
class GameMetrics:
    """单局游戏指标"""
    players: Tuple[str, ...]
    ranking: Tuple[str, ...]
    length: int
    revolutions: int = 0
    eight_cuts: int = 0
    fouls: Tuple[str, ...] = ()
    rewards: Dict[str, float] = field(default_factory=dict)


class MetricsCollector:
    """
    指标收集器

    收集和计算游戏指标
    """

    def __init__(self):
        self.games: List[GameMetrics] = []
        self._stats: Dict[str, Dict] = defaultdict(lambda: defaultdict(list))

    def add_game(self, metrics: GameMetrics):
        """添加游戏指标"""
        self.games.append(metrics)

        for rank, player in enumerate(metrics.ranking):
            stats = self._stats[player]
            stats["ranks"].append(rank)
            stats["lengths"].append(metrics.length)
            stats["fouls"].append(1 if player in metrics.fouls else 0)
            if player in metrics.rewards:
                stats["rewards"].append(metrics.rewards[player])

    def rank_distribution(self, player: str) -> np.ndarray:
        """各名次的比例 (4,)"""
        ranks = self._stats[player]["ranks"]
        if not ranks:
            return np.zeros(NUM_PLAYERS)
        return np.bincount(ranks, minlength=NUM_PLAYERS) / len(ranks)

    def compute_metrics(self, player: Optional[str] = None) -> Dict[str, float]:
        """
        计算指标

        Args:
            player: 指定玩家，None 表示全局

        Returns:
            指标字典
        """
        if player is not None:
            stats = self._stats[player]
            n_games = len(stats["ranks"])

            if n_games == 0:
                return {}

            ranks = np.asarray(stats["ranks"])
            return {
                "games": n_games,
                "avg_rank": float(ranks.mean()),
                "daifugo_rate": float(np.mean(ranks == 0)),
                "daihinmin_rate": float(np.mean(ranks == NUM_PLAYERS - 1)),
                "foul_rate": float(np.mean(stats["fouls"])),
                "avg_length": float(np.mean(stats["lengths"])),
                "avg_reward": float(np.mean(stats["rewards"])) if stats["rewards"] else 0.0,
            }

        n_games = len(self.games)
        if n_games == 0:
            return {}

        return {
            "total_games": n_games,
            "avg_length": float(np.mean([g.length for g in self.games])),
            "avg_revolutions": float(np.mean([g.revolutions for g in self.games])),
            "revolution_rate": float(np.mean([g.revolutions > 0 for g in self.games])),
            "avg_eight_cuts": float(np.mean([g.eight_cuts for g in self.games])),
            "avg_fouls": float(np.mean([len(g.fouls) for g in self.games])),
        }

    def reset(self):
        """重置"""
        self.games.clear()
        self._stats.clear()
