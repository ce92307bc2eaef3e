"""
ELO 评分系统

4 人名次赛按两两比较拆成 6 场 "对局" 更新评分
"""
from typing import Dict, List, Sequence, Tuple
from dataclasses import dataclass
import json
from pathlib import Path


@dataclass
class PlayerRating:
    """玩家评分"""
    name: str
    rating: float = 1500.0
    games: int = 0
    peak_rating: float = 1500.0

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "rating": self.rating,
            "games": self.games,
            "peak_rating": self.peak_rating,
        }

    @classmethod
    def from_dict(cls, d: Dict) -> "PlayerRating":
        return cls(**d)


class EloSystem:
    """
    ELO 评分系统

    标准两人 ELO
    """

    def __init__(
        self,
        k_factor: float = 32.0,
        initial_rating: float = 1500.0,
        floor_rating: float = 100.0,
    ):
        self.k_factor = k_factor
        self.initial_rating = initial_rating
        self.floor_rating = floor_rating
        self.players: Dict[str, PlayerRating] = {}

    def get_player(self, name: str) -> PlayerRating:
        """获取或创建玩家"""
        if name not in self.players:
            self.players[name] = PlayerRating(
                name=name, rating=self.initial_rating, peak_rating=self.initial_rating
            )
        return self.players[name]

    @staticmethod
    def expected_score(rating_a: float, rating_b: float) -> float:
        """玩家 A 对玩家 B 的期望得分"""
        return 1.0 / (1.0 + 10.0 ** ((rating_b - rating_a) / 400.0))

    def _apply(self, player: PlayerRating, delta: float):
        player.rating = max(player.rating + delta, self.floor_rating)
        player.peak_rating = max(player.peak_rating, player.rating)

    def record_match(self, winner_name: str, loser_name: str) -> Tuple[float, float]:
        """
        记录两人对局

        Returns:
            (胜者新评分, 负者新评分)
        """
        winner = self.get_player(winner_name)
        loser = self.get_player(loser_name)
        expected = self.expected_score(winner.rating, loser.rating)
        delta = self.k_factor * (1.0 - expected)
        self._apply(winner, delta)
        self._apply(loser, -delta)
        winner.games += 1
        loser.games += 1
        return winner.rating, loser.rating

    def get_ranking(self) -> List[PlayerRating]:
        """获取排名"""
        return sorted(self.players.values(), key=lambda p: p.rating, reverse=True)

    def save(self, path: str):
        """保存评分"""
        data = {
            "k_factor": self.k_factor,
            "initial_rating": self.initial_rating,
            "players": {name: p.to_dict() for name, p in self.players.items()},
        }
        Path(path).write_text(json.dumps(data, indent=2, ensure_ascii=False))

    def load(self, path: str):
        """加载评分"""
        data = json.loads(Path(path).read_text())
        self.k_factor = data.get("k_factor", self.k_factor)
        self.initial_rating = data.get("initial_rating", self.initial_rating)
        self.players = {
            name: PlayerRating.from_dict(p)
            for name, p in data.get("players", {}).items()
        }


class PlacementElo(EloSystem):
    """
    名次 ELO

    名次高的玩家对每个名次低的玩家各记一胜，K 值按对手数均分，
    所有差值基于对局前的评分同时结算
    """

    def record_game(self, ranking: Sequence[str]):
        """
        记录一局名次赛

        Args:
            ranking: 按名次排列的玩家名称
        """
        if len(ranking) < 2:
            return
        k = self.k_factor / (len(ranking) - 1)
        before = {name: self.get_player(name).rating for name in ranking}
        deltas = {name: 0.0 for name in ranking}

        for i, upper in enumerate(ranking):
            for lower in ranking[i + 1:]:
                expected = self.expected_score(before[upper], before[lower])
                deltas[upper] += k * (1.0 - expected)
                deltas[lower] -= k * (1.0 - expected)

        for name in ranking:
            player = self.get_player(name)
            self._apply(player, deltas[name])
            player.games += 1
