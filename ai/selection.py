"""
按角色性格从候选中抽选

- softmax: 分数除以温度后归一化抽样
- epsilon: 以概率 ε 在前 3 名中均匀抽取，否则取最高分
"""
from typing import Sequence
import logging

import numpy as np

from .config import SelectionConfig, SelectionMethod
from .scoring import ScoredMove

logger = logging.getLogger(__name__)

EPSILON_TOP_K = 3


def softmax_probabilities(scores: Sequence[float], temperature: float) -> np.ndarray:
    """
    数值稳定的 softmax

    Args:
        scores: 分数
        temperature: 温度，越小越贪心

    Returns:
        概率数组
    """
    logits = np.asarray(scores, dtype=np.float64) / max(temperature, 1e-8)
    logits -= logits.max()
    exp = np.exp(logits)
    return exp / exp.sum()


def select_move(
    moves: Sequence[ScoredMove],
    config: SelectionConfig,
    rng: np.random.Generator,
) -> ScoredMove:
    """
    抽选一个候选

    Args:
        moves: 按分数降序排列的候选
        config: 选择方式
        rng: 随机数生成器

    Returns:
        选中的候选
    """
    if not moves:
        raise ValueError("No moves to select from")

    if config.method == SelectionMethod.EPSILON:
        if rng.random() < config.param:
            index = int(rng.integers(min(len(moves), EPSILON_TOP_K)))
            logger.debug("epsilon-greedy explored move %d", index)
            return moves[index]
        return moves[0]

    probs = softmax_probabilities([m.score for m in moves], config.param)
    index = int(rng.choice(len(moves), p=probs))
    logger.debug("softmax picked move %d (p=%.3f)", index, probs[index])
    return moves[index]
