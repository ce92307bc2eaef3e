"""
Environment Layer - Gymnasium 兼容环境

Modules:
    daifugo_env: 主环境类 (观战牌桌驱动)
    observation: 观测空间构建
    reward: 奖励函数
"""
from .daifugo_env import (
    TableConfig,
    DaifugoEnv,
    make_env,
)

from .observation import (
    Observation,
    ObservationBuilder,
)

from .reward import (
    RewardType,
    RewardConfig,
    RewardCalculator,
    create_reward_calculator,
)

__all__ = [
    # env
    "TableConfig",
    "DaifugoEnv",
    "make_env",
    # observation
    "Observation",
    "ObservationBuilder",
    # reward
    "RewardType",
    "RewardConfig",
    "RewardCalculator",
    "create_reward_calculator",
]
