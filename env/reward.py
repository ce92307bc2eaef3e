"""
奖励函数

支持两种奖励设计:
- 名次奖励 (sparse): 离场时按最终身份给分
- 过程奖励 (shaped): 名次奖励 + 出牌数量 + 反则惩罚
"""
from dataclasses import dataclass
from typing import Dict, Optional, Tuple
from enum import Enum

from core.state import GameState


class RewardType(Enum):
    """奖励类型"""
    SPARSE = "sparse"      # 仅离场时奖励
    SHAPED = "shaped"      # 过程奖励


@dataclass
class RewardConfig:
    """
    奖励配置

    Attributes:
        reward_type: 奖励类型
        rank_rewards: 大富豪 / 富豪 / 貧民 / 大貧民 的奖励
        card_bonus: 每出一张牌的奖励 (shaped)
        foul_penalty: 反则上がり的额外惩罚 (shaped)
    """
    reward_type: RewardType = RewardType.SPARSE
    rank_rewards: Tuple[float, ...] = (1.0, 0.5, -0.5, -1.0)
    card_bonus: float = 0.01
    foul_penalty: float = 0.5


class RewardCalculator:
    """
    奖励计算器

    根据配置计算不同类型的奖励
    """

    def __init__(self, config: Optional[RewardConfig] = None):
        self.config = config or RewardConfig()

    def compute(
        self,
        state: GameState,
        prev_state: Optional[GameState],
        player: int,
    ) -> float:
        """
        计算奖励

        Args:
            state: 当前状态
            prev_state: 前一状态
            player: 计算奖励的座位

        Returns:
            奖励值
        """
        if self.config.reward_type == RewardType.SHAPED:
            return self._shaped_reward(state, prev_state, player)
        return self._sparse_reward(state, prev_state, player)

    def _just_finished(self, state: GameState, prev_state: Optional[GameState], player: int) -> bool:
        if player not in state.finish_order:
            return False
        return prev_state is None or player not in prev_state.finish_order

    def _sparse_reward(self, state: GameState, prev_state: Optional[GameState], player: int) -> float:
        """
        稀疏奖励：离场 (或游戏结束被自动定为末位) 时给予一次
        """
        if not self._just_finished(state, prev_state, player):
            return 0.0
        return self.config.rank_rewards[state.rank_of(player)]

    def _shaped_reward(self, state: GameState, prev_state: Optional[GameState], player: int) -> float:
        """
        过程奖励

        奖励组成:
        1. 名次奖励
        2. 出牌数量
        3. 反则惩罚
        """
        reward = self._sparse_reward(state, prev_state, player)

        if prev_state is not None:
            cards_played = len(prev_state.get_hand(player)) - len(state.get_hand(player))
            if cards_played > 0:
                reward += cards_played * self.config.card_bonus

        if self._just_finished(state, prev_state, player) and state.get_player(player).is_foul_finished:
            reward -= self.config.foul_penalty

        return reward

    def compute_all(self, state: GameState, prev_state: Optional[GameState] = None) -> Dict[int, float]:
        """所有座位的奖励"""
        return {
            p.id: self.compute(state, prev_state, p.id)
            for p in state.players
        }


def create_reward_calculator(reward_type: str = "sparse", **kwargs) -> RewardCalculator:
    """
    工厂函数：创建奖励计算器

    Args:
        reward_type: 奖励类型 ("sparse", "shaped")
        **kwargs: 其他配置参数

    Returns:
        RewardCalculator 实例
    """
    config = RewardConfig(reward_type=RewardType(reward_type), **kwargs)
    return RewardCalculator(config)
