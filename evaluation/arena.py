"""
对战竞技场

组织 4 人对局、循环赛和锦标赛
"""
from typing import Dict, List, Optional, Callable, Tuple
from dataclasses import dataclass, field
from collections import defaultdict
from itertools import combinations
import numpy as np
import logging

from core.cards import NUM_PLAYERS
from ai.characters import CHARACTERS

from .evaluator import Agent
from .elo import PlacementElo
from .metrics import GameMetrics, MetricsCollector

logger = logging.getLogger(__name__)

# 名次 -> 积分 (大富豪 3 分 ... 大貧民 0 分)
RANK_POINTS = (3, 2, 1, 0)


@dataclass
class MatchResult:
    """
    对局结果

    Attributes:
        agents: 各座位智能体名称
        characters: 各座位角色 ID
        standings: 按名次排列的座位
        roles: 智能体名称 -> 身份
        length: 步数
        revolutions: 革命次数
        eight_cuts: 8 切り次数
        spade_three_counters: 黑桃 3 克鬼牌次数
        foul_seats: 反则上がり的座位
        rewards: 各座位累计奖励
        emergency_advances: 看门狗强制推进次数
        truncated: 是否因步数上限截断
    """
    agents: Tuple[str, ...]
    characters: Tuple[int, ...]
    standings: Tuple[int, ...]
    roles: Dict[str, str]
    length: int
    revolutions: int = 0
    eight_cuts: int = 0
    spade_three_counters: int = 0
    foul_seats: Tuple[int, ...] = ()
    rewards: Dict[int, float] = field(default_factory=dict)
    emergency_advances: int = 0
    truncated: bool = False

    @property
    def ranking(self) -> List[str]:
        """按名次排列的智能体名称"""
        return [self.agents[seat] for seat in self.standings]

    @property
    def fouls(self) -> List[str]:
        return [self.agents[seat] for seat in self.foul_seats]

    def to_metrics(self) -> GameMetrics:
        return GameMetrics(
            players=self.agents,
            ranking=tuple(self.ranking),
            length=self.length,
            revolutions=self.revolutions,
            eight_cuts=self.eight_cuts,
            fouls=tuple(self.fouls),
            rewards={self.agents[seat]: r for seat, r in self.rewards.items()},
        )


@dataclass
class TournamentResult:
    """锦标赛结果"""
    standings: Dict[str, Dict[str, float]]
    total_games: int
    matches: List[MatchResult]

    def get_ranking(self) -> List[Tuple[str, float]]:
        """获取排名 (名称, 平均积分)"""
        return sorted(
            [(name, stats["points_per_game"]) for name, stats in self.standings.items()],
            key=lambda x: x[1],
            reverse=True,
        )

    def __repr__(self) -> str:
        ranking = self.get_ranking()
        lines = [f"Tournament Results ({self.total_games} games):"]
        for i, (name, points) in enumerate(ranking):
            stats = self.standings[name]
            lines.append(
                f"  {i+1}. {name}: {points:.2f} pts/game, "
                f"avg rank {stats['avg_rank'] + 1:.2f}, daifugo {stats['daifugo_rate']:.2%}"
            )
        return "\n".join(lines)


def _seat_characters(agents: List[Agent]) -> List[int]:
    """智能体指定的角色优先，其余座位按 ID 顺序补上未使用的角色"""
    used = {a.character_id for a in agents if a.character_id is not None}
    if len(used) != sum(1 for a in agents if a.character_id is not None):
        raise ValueError("Two agents at one table share a character")
    spare = [c.id for c in CHARACTERS if c.id not in used]
    return [a.character_id if a.character_id is not None else spare.pop(0) for a in agents]


def _accumulate(standings: Dict[str, Dict[str, float]], result: MatchResult):
    for rank, seat in enumerate(result.standings):
        stats = standings[result.agents[seat]]
        stats["games"] += 1
        stats["rank_sum"] += rank
        stats["points"] += RANK_POINTS[rank]
        stats["daifugo"] += int(rank == 0)
        stats["daihinmin"] += int(rank == NUM_PLAYERS - 1)
        stats["fouls"] += int(seat in result.foul_seats)


def _finalize(standings: Dict[str, Dict[str, float]]) -> Dict[str, Dict[str, float]]:
    for stats in standings.values():
        if stats["games"] > 0:
            stats["avg_rank"] = stats["rank_sum"] / stats["games"]
            stats["points_per_game"] = stats["points"] / stats["games"]
            stats["daifugo_rate"] = stats["daifugo"] / stats["games"]
            stats["foul_rate"] = stats["fouls"] / stats["games"]
    return {name: dict(stats) for name, stats in standings.items()}


class Arena:
    """
    对战竞技场

    组织智能体之间的 4 人对局
    """

    def __init__(self, env_fn: Callable):
        self.env_fn = env_fn
        self.metrics = MetricsCollector()

    def play_game(self, agents: List[Agent], seed: Optional[int] = None) -> MatchResult:
        """
        进行一局

        8 切り待处理时提交 None，由牌桌完成场流

        Args:
            agents: 4 个智能体 (座位顺序)
            seed: 随机种子

        Returns:
            对局结果
        """
        if len(agents) != NUM_PLAYERS:
            raise ValueError(f"Need exactly {NUM_PLAYERS} agents, got {len(agents)}")

        for agent in agents:
            agent.reset()

        env = self.env_fn()
        characters = _seat_characters(agents)
        obs, info = env.reset(seed=seed, options={"character_ids": characters})

        done = False
        truncated = False
        length = 0
        revolutions = 0
        eight_cuts = 0
        counters = 0
        emergency = 0
        rewards: Dict[int, float] = defaultdict(float)

        while not done:
            state = env.state
            if state.eight_cut_pending:
                action = None
            else:
                action = agents[state.turn].act(state, info["legal_actions"])

            obs, reward, terminated, truncated, info = env.submit(action, state.turn, state.version)
            done = terminated or truncated
            length += 1

            effects = info.get("effects")
            if effects is not None:
                revolutions += int(effects.revolution_toggled)
                eight_cuts += int(effects.eight_cut_triggered)
                counters += int(effects.spade_three_counter)
            emergency += int(info.get("emergency_advance", False))
            for seat, r in info.get("rewards", {}).items():
                rewards[seat] += r

        final = env.state
        standings = tuple(final.standings())
        result = MatchResult(
            agents=tuple(a.name for a in agents),
            characters=tuple(characters),
            standings=standings,
            roles={agents[seat].name: final.role_of(seat) for seat in standings},
            length=length,
            revolutions=revolutions,
            eight_cuts=eight_cuts,
            spade_three_counters=counters,
            foul_seats=tuple(p.id for p in final.players if p.is_foul_finished),
            rewards=dict(rewards),
            emergency_advances=emergency,
            truncated=truncated,
        )
        self.metrics.add_game(result.to_metrics())
        logger.debug("Game finished: %s", result.roles)
        return result

    def play_match(
        self,
        agents: List[Agent],
        n_games: int = 1,
        seed: Optional[int] = None,
    ) -> List[MatchResult]:
        """
        同一座位安排下连续进行多局

        Args:
            agents: 4 个智能体
            n_games: 对局数
            seed: 第一局的随机种子，之后依次 +1

        Returns:
            对局结果列表
        """
        return [
            self.play_game(agents, seed=None if seed is None else seed + i)
            for i in range(n_games)
        ]

    def round_robin(
        self,
        agents: List[Agent],
        games_per_match: int = 4,
        seed: Optional[int] = None,
    ) -> TournamentResult:
        """
        循环赛

        每个 4 人组合都对战，组合内轮换座位

        Args:
            agents: 智能体列表 (至少 4 个)
            games_per_match: 每个组合的对局数
            seed: 随机种子

        Returns:
            锦标赛结果
        """
        if len(agents) < NUM_PLAYERS:
            raise ValueError(f"Need at least {NUM_PLAYERS} agents, got {len(agents)}")

        standings = defaultdict(lambda: defaultdict(float))
        all_matches = []
        game_idx = 0

        for group in combinations(range(len(agents)), NUM_PLAYERS):
            for g in range(games_per_match):
                shift = g % NUM_PLAYERS
                seating = [agents[i] for i in group[shift:] + group[:shift]]
                result = self.play_game(seating, seed=None if seed is None else seed + game_idx)
                game_idx += 1
                all_matches.append(result)
                _accumulate(standings, result)

        return TournamentResult(
            standings=_finalize(standings),
            total_games=len(all_matches),
            matches=all_matches,
        )

    def tournament(
        self,
        agents: List[Agent],
        n_rounds: int = 100,
        seed: Optional[int] = None,
    ) -> TournamentResult:
        """
        锦标赛

        每轮随机抽 4 个智能体进行一局

        Args:
            agents: 智能体列表 (至少 4 个)
            n_rounds: 轮数
            seed: 随机种子

        Returns:
            锦标赛结果
        """
        if len(agents) < NUM_PLAYERS:
            raise ValueError(f"Need at least {NUM_PLAYERS} agents, got {len(agents)}")

        rng = np.random.default_rng(seed)
        standings = defaultdict(lambda: defaultdict(float))
        all_matches = []

        for round_idx in range(n_rounds):
            selected = rng.choice(len(agents), NUM_PLAYERS, replace=False)
            match_agents = [agents[i] for i in selected]
            game_seed = int(rng.integers(2 ** 31))

            result = self.play_game(match_agents, seed=game_seed)
            all_matches.append(result)
            _accumulate(standings, result)

        return TournamentResult(
            standings=_finalize(standings),
            total_games=len(all_matches),
            matches=all_matches,
        )


class LeaderBoard:
    """
    排行榜

    追踪智能体历史表现和名次 ELO
    """

    def __init__(self, elo: Optional[PlacementElo] = None):
        self.records: Dict[str, Dict[str, float]] = {}
        self.history: List[Dict] = []
        self.elo = elo or PlacementElo()

    def update(self, tournament_result: TournamentResult):
        """更新排行榜"""
        for name, stats in tournament_result.standings.items():
            if name not in self.records:
                self.records[name] = defaultdict(float)

            record = self.records[name]
            record["total_games"] += stats.get("games", 0)
            record["total_points"] += stats.get("points", 0)
            record["total_daifugo"] += stats.get("daifugo", 0)

            if record["total_games"] > 0:
                record["points_per_game"] = record["total_points"] / record["total_games"]
                record["daifugo_rate"] = record["total_daifugo"] / record["total_games"]

        for match in tournament_result.matches:
            self.elo.record_game(match.ranking)

        self.history.append({
            "standings": tournament_result.standings,
            "total_games": tournament_result.total_games,
        })

    def get_ranking(self) -> List[Tuple[str, float, int]]:
        """获取排名 (名称, 平均积分, 总场次)"""
        return sorted(
            [
                (name, stats.get("points_per_game", 0.0), int(stats.get("total_games", 0)))
                for name, stats in self.records.items()
            ],
            key=lambda x: (x[1], x[2]),
            reverse=True,
        )

    def __repr__(self) -> str:
        ranking = self.get_ranking()
        lines = ["Leaderboard:"]
        for i, (name, points, games) in enumerate(ranking):
            rating = self.elo.get_player(name).rating
            lines.append(f"  {i+1}. {name}: {points:.2f} pts/game, elo {rating:.0f} ({games} games)")
        return "\n".join(lines)
