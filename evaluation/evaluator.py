"""
评估器

智能体定义，以及单个智能体在轮换座位下的表现评估
"""
from typing import Dict, List, Optional, Callable
from dataclasses import dataclass, field
import numpy as np
import logging

from core.actions import Action
from core.cards import card_strength
from core.state import GameState
from ai.agent import decide
from ai.characters import get_character

logger = logging.getLogger(__name__)


@dataclass
class EvalResult:
    """评估结果"""
    avg_rank: float
    avg_reward: float
    avg_length: float
    games_played: int
    daifugo_rate: float = 0.0
    daihinmin_rate: float = 0.0
    foul_rate: float = 0.0
    extra_stats: Dict[str, float] = field(default_factory=dict)

    def __repr__(self) -> str:
        return (
            f"EvalResult(avg_rank={self.avg_rank:.2f}, "
            f"daifugo_rate={self.daifugo_rate:.2%}, "
            f"games={self.games_played})"
        )


class Agent:
    """
    智能体基类

    Attributes:
        name: 名称
        character_id: 入座时使用的角色，None 表示由牌桌分配
    """

    def __init__(self, name: str = "agent", character_id: Optional[int] = None):
        self.name = name
        self.character_id = character_id

    def act(self, state: GameState, legal_actions: List[Action]) -> Action:
        """选择动作"""
        raise NotImplementedError

    def reset(self):
        """重置状态"""
        pass


class RandomAgent(Agent):
    """随机智能体"""

    def __init__(self, name: str = "random", seed: Optional[int] = None, character_id: Optional[int] = None):
        super().__init__(name, character_id)
        self.rng = np.random.default_rng(seed)

    def act(self, state: GameState, legal_actions: List[Action]) -> Action:
        if not legal_actions:
            return Action.pass_action()
        idx = self.rng.integers(len(legal_actions))
        return legal_actions[idx]


class RuleBasedAgent(Agent):
    """规则智能体: 尽量出牌，总是出最弱的一手"""

    def __init__(self, name: str = "rule", character_id: Optional[int] = None):
        super().__init__(name, character_id)

    def act(self, state: GameState, legal_actions: List[Action]) -> Action:
        plays = [a for a in legal_actions if not a.is_pass]
        if not plays:
            return Action.pass_action()
        return min(
            plays,
            key=lambda a: (
                min(card_strength(c, state.is_revolution) for c in a.cards),
                -len(a.cards),
            ),
        )


class CharacterAgent(Agent):
    """角色 AI 智能体 (使用角色的评分和性格化选择)"""

    def __init__(self, character_id: int, name: Optional[str] = None, seed: Optional[int] = None):
        character = get_character(character_id)
        super().__init__(name or character.name, character_id)
        self.rng = np.random.default_rng(seed)

    def act(self, state: GameState, legal_actions: List[Action]) -> Action:
        return decide(state, state.turn, self.rng)


class Evaluator:
    """
    评估器

    让待评估智能体轮流坐 4 个座位，与固定对手对战
    """

    def __init__(self, env_fn: Callable):
        self.env_fn = env_fn

    def evaluate(
        self,
        agent: Agent,
        n_games: int = 100,
        opponents: Optional[List[Agent]] = None,
        seed: Optional[int] = None,
        verbose: bool = False,
    ) -> EvalResult:
        """
        评估智能体

        Args:
            agent: 待评估智能体
            n_games: 游戏数量
            opponents: 3 个对手
            seed: 第一局的随机种子，之后依次 +1
            verbose: 是否输出详情

        Returns:
            评估结果
        """
        from .arena import Arena

        if opponents is None:
            opponents = [RandomAgent(f"opp{i}", seed=i) for i in range(1, 4)]
        if len(opponents) != 3:
            raise ValueError(f"Need exactly 3 opponents, got {len(opponents)}")

        arena = Arena(self.env_fn)
        ranks = []
        rewards = []
        lengths = []
        fouls = 0

        for game_idx in range(n_games):
            seat = game_idx % 4
            agents = list(opponents)
            agents.insert(seat, agent)
            game_seed = None if seed is None else seed + game_idx

            result = arena.play_game(agents, seed=game_seed)
            ranks.append(result.standings.index(seat))
            rewards.append(result.rewards.get(seat, 0.0))
            lengths.append(result.length)
            fouls += int(seat in result.foul_seats)

            if verbose and (game_idx + 1) % 10 == 0:
                logger.info(f"Game {game_idx + 1}/{n_games}, avg rank: {np.mean(ranks):.2f}")

        if n_games == 0:
            return EvalResult(avg_rank=0.0, avg_reward=0.0, avg_length=0.0, games_played=0)

        ranks = np.asarray(ranks)
        return EvalResult(
            avg_rank=float(ranks.mean()),
            avg_reward=float(np.mean(rewards)),
            avg_length=float(np.mean(lengths)),
            games_played=n_games,
            daifugo_rate=float(np.mean(ranks == 0)),
            daihinmin_rate=float(np.mean(ranks == 3)),
            foul_rate=fouls / n_games,
        )
