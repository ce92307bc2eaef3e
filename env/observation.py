"""
观察空间编码

将游戏状态转换为 numpy 特征 (供观战界面、统计或外部智能体使用)
"""
from dataclasses import dataclass
from typing import Dict, List, Optional
import numpy as np

from core.state import GameState
from core.cards import NUM_PLAYERS, NORMAL_SUITS, cards_to_array
from core.actions import Action

DECK_SIZE = 54
MAX_HAND = 14


@dataclass
class Observation:
    """
    结构化观测

    Attributes:
        hand: 自己的手牌 (54,)
        field: 场上的牌 (54,)
        played_cards: 各座位已出牌累计 (4, 54)
        history: 最近 N 手出牌 (N, 54)，PASS 为全 0
        cards_left: 各座位剩余牌数 (4,)，归一化
        position: 视角座位 one-hot (4,)
        passed: 本场已 PASS 的座位 (4,)
        suit_lock: 缚り花色 one-hot (4,)
        flags: [革命中, 新场, 8 切り待处理, 游戏结束] (4,)
        legal_actions: 合法动作列表
    """
    hand: np.ndarray
    field: np.ndarray
    played_cards: np.ndarray
    history: np.ndarray
    cards_left: np.ndarray
    position: np.ndarray
    passed: np.ndarray
    suit_lock: np.ndarray
    flags: np.ndarray
    legal_actions: List[Action]

    def to_dict(self) -> Dict[str, np.ndarray]:
        """转换为字典格式"""
        return {
            "hand": self.hand,
            "field": self.field,
            "played_cards": self.played_cards,
            "history": self.history,
            "cards_left": self.cards_left,
            "position": self.position,
            "passed": self.passed,
            "suit_lock": self.suit_lock,
            "flags": self.flags,
        }

    def to_flat_array(self) -> np.ndarray:
        """展平为单一向量"""
        return np.concatenate([
            self.hand,
            self.field,
            self.played_cards.flatten(),
            self.history.flatten(),
            self.cards_left,
            self.position,
            self.passed,
            self.suit_lock,
            self.flags,
        ])


class ObservationBuilder:
    """
    观测构建器

    负责将 GameState 转换为 Observation
    """

    def __init__(self, history_length: int = 16):
        """
        Args:
            history_length: 历史记录长度
        """
        self.history_length = history_length

    def build(self, state: GameState, perspective: Optional[int] = None) -> Observation:
        """
        从游戏状态构建观测

        Args:
            state: 游戏状态
            perspective: 视角座位 (默认为当前玩家)

        Returns:
            Observation 对象
        """
        if perspective is None:
            perspective = state.turn

        legal_actions = state.get_legal_actions() if perspective == state.turn else []

        return Observation(
            hand=cards_to_array(state.get_hand(perspective)),
            field=cards_to_array(state.field.cards),
            played_cards=self._encode_played_cards(state),
            history=self._encode_history(state),
            cards_left=self._encode_cards_left(state),
            position=self._one_hot(perspective),
            passed=self._encode_passed(state),
            suit_lock=self._encode_suit_lock(state),
            flags=np.array([
                state.is_revolution,
                state.field.is_empty,
                state.eight_cut_pending,
                state.is_finished,
            ], dtype=np.float32),
            legal_actions=legal_actions,
        )

    def _encode_played_cards(self, state: GameState) -> np.ndarray:
        """
        编码各座位已出的牌

        Returns:
            (4, 54) 数组
        """
        result = np.zeros((NUM_PLAYERS, DECK_SIZE), dtype=np.float32)
        for record in state.plays:
            result[record.player_id] += cards_to_array(record.cards)
        return result

    def _encode_history(self, state: GameState) -> np.ndarray:
        """
        编码最近 N 手

        Returns:
            (history_length, 54) 数组
        """
        result = np.zeros((self.history_length, DECK_SIZE), dtype=np.float32)
        if self.history_length == 0:
            return result
        recent = state.play_history[-self.history_length:]
        for i, record in enumerate(recent):
            if record.cards:
                result[i] = cards_to_array(record.cards)
        return result

    def _encode_cards_left(self, state: GameState) -> np.ndarray:
        """各座位剩余牌数，归一化到 [0, 1]"""
        return np.array(state.hand_sizes(), dtype=np.float32) / MAX_HAND

    def _encode_passed(self, state: GameState) -> np.ndarray:
        result = np.zeros(NUM_PLAYERS, dtype=np.float32)
        for pid in state.passed:
            result[pid] = 1
        return result

    def _encode_suit_lock(self, state: GameState) -> np.ndarray:
        result = np.zeros(len(NORMAL_SUITS), dtype=np.float32)
        if state.suit_lock is not None:
            result[NORMAL_SUITS.index(state.suit_lock)] = 1
        return result

    @staticmethod
    def _one_hot(seat: int) -> np.ndarray:
        result = np.zeros(NUM_PLAYERS, dtype=np.float32)
        result[seat] = 1
        return result
