"""
规则引擎 - 牌型检测、大小比较、合法性验证

所有方法都是纯函数，无状态
"""
from typing import List, Optional, Sequence, Collection, Dict

from .cards import (
    Card,
    Suit,
    NUM_PLAYERS,
    THREE,
    TWO,
    EIGHT,
    JOKER_RANK,
    card_strength,
)
from .actions import ActionType, MIN_STRAIGHT_LEN, GROUP_TYPES


# 名次 -> 身份
ROLE_NAMES: Dict[int, str] = {
    0: '大富豪',
    1: '富豪',
    2: '貧民',
    3: '大貧民',
}


class RuleEngine:
    """
    大富豪规则引擎

    提供牌型检测、大小比较、合法性验证、轮转计算等功能
    所有方法都是静态方法，无状态
    """

    @staticmethod
    def is_consecutive(ranks: List[int]) -> bool:
        """
        检查点数列表是否连续

        Args:
            ranks: 已排序的点数列表

        Returns:
            是否连续
        """
        for i in range(len(ranks) - 1):
            if ranks[i + 1] - ranks[i] != 1:
                return False
        return True

    @staticmethod
    def detect_action_type(cards: Sequence[Card]) -> ActionType:
        """
        检测牌型

        - 1 张: 单张
        - 2-4 张: 除鬼牌外同点数 (鬼牌代替该点数)，至少一张普通牌
        - 3 张以上: 同花色连号且不含鬼牌 → 阶段

        Args:
            cards: 牌列表

        Returns:
            牌型枚举值
        """
        if not cards:
            return ActionType.PASS

        n = len(cards)
        if n == 1:
            return ActionType.SINGLE

        normals = [c for c in cards if not c.is_joker]

        if n <= 4 and normals:
            if all(c.rank == normals[0].rank for c in normals):
                return GROUP_TYPES[n]

        if n >= MIN_STRAIGHT_LEN and len(normals) == n:
            suit = normals[0].suit
            if all(c.suit == suit for c in normals):
                ranks = sorted(c.rank for c in normals)
                if RuleEngine.is_consecutive(ranks):
                    return ActionType.STRAIGHT

        return ActionType.WRONG

    @staticmethod
    def representative(cards: Sequence[Card]) -> Optional[Card]:
        """代表牌: 点数最小的普通牌，全是鬼牌时为 None"""
        normals = [c for c in cards if not c.is_joker]
        if not normals:
            return None
        return min(normals, key=lambda c: c.rank)

    @staticmethod
    def combination_strength(cards: Sequence[Card], is_revolution: bool = False) -> int:
        """
        组合强度 (鬼牌不改变比较点数)

        Args:
            cards: 牌列表
            is_revolution: 是否革命中

        Returns:
            代表牌的强度
        """
        if not cards:
            return 0
        rep = RuleEngine.representative(cards)
        if rep is None:
            return card_strength(cards[0], is_revolution)
        return card_strength(rep, is_revolution)

    @staticmethod
    def effective_rank(cards: Sequence[Card]) -> int:
        """组合的实际点数 (全鬼牌时为 14)"""
        rep = RuleEngine.representative(cards)
        return rep.rank if rep is not None else JOKER_RANK

    @staticmethod
    def suit_of(cards: Sequence[Card]) -> Optional[Suit]:
        """普通牌全为同一花色时返回该花色，否则 None"""
        normals = [c for c in cards if not c.is_joker]
        if not normals:
            return None
        suit = normals[0].suit
        if all(c.suit == suit for c in normals):
            return suit
        return None

    @staticmethod
    def is_spade_three_counter(cards: Sequence[Card], field_cards: Sequence[Card]) -> bool:
        """场上是单张鬼牌，出的是单张黑桃 3"""
        if len(field_cards) != 1 or not field_cards[0].is_joker:
            return False
        return (
            len(cards) == 1
            and cards[0].suit == Suit.SPADES
            and cards[0].rank == THREE
        )

    @staticmethod
    def follows_suit_lock(cards: Sequence[Card], suit_lock: Optional[Suit]) -> bool:
        """缚り中，除鬼牌外的牌必须都是缚り花色"""
        if suit_lock is None:
            return True
        return all(c.suit == suit_lock or c.is_joker for c in cards)

    @staticmethod
    def is_valid_play(
        cards: Sequence[Card],
        field_cards: Sequence[Card] = (),
        is_revolution: bool = False,
        suit_lock: Optional[Suit] = None,
    ) -> bool:
        """
        判断出牌是否合法

        Args:
            cards: 要出的牌
            field_cards: 场上的牌，空表示新场
            is_revolution: 是否革命中
            suit_lock: 缚り花色

        Returns:
            是否合法
        """
        if not cards:
            return False

        action_type = RuleEngine.detect_action_type(cards)
        if action_type == ActionType.WRONG:
            return False

        if not field_cards:
            return RuleEngine.follows_suit_lock(cards, suit_lock)

        # 黑桃 3 克单张鬼牌，不比较牌型和大小
        if RuleEngine.is_spade_three_counter(cards, field_cards):
            return True

        if len(cards) != len(field_cards):
            return False
        if action_type != RuleEngine.detect_action_type(field_cards):
            return False
        if action_type == ActionType.STRAIGHT:
            if RuleEngine.suit_of(cards) != RuleEngine.suit_of(field_cards):
                return False

        if not RuleEngine.follows_suit_lock(cards, suit_lock):
            return False

        play_strength = RuleEngine.combination_strength(cards, is_revolution)
        field_strength = RuleEngine.combination_strength(field_cards, is_revolution)
        return play_strength > field_strength

    @staticmethod
    def check_suit_lock(
        cards: Sequence[Card],
        previous_cards: Sequence[Card],
        current_lock: Optional[Suit] = None,
    ) -> Optional[Suit]:
        """
        计算出牌后的缚り花色

        新场时无缚り；已有缚り则保持；前后两手都是同一花色的组合时成立

        Returns:
            缚り花色或 None
        """
        if not previous_cards:
            return None
        if current_lock is not None:
            return current_lock
        previous_suit = RuleEngine.suit_of(previous_cards)
        current_suit = RuleEngine.suit_of(cards)
        if previous_suit is not None and previous_suit == current_suit:
            return current_suit
        return None

    @staticmethod
    def can_finish_with(cards: Sequence[Card], is_revolution: bool = False) -> bool:
        """
        能否用这手牌上がり (否则为反则上がり)

        鬼牌、8、通常时的 2、革命时的 3 都不能作为最后一手
        """
        for card in cards:
            if card.rank == JOKER_RANK or card.rank == EIGHT:
                return False
            if not is_revolution and card.rank == TWO:
                return False
            if is_revolution and card.rank == THREE:
                return False
        return True

    @staticmethod
    def is_revolution_trigger(cards: Sequence[Card]) -> bool:
        return RuleEngine.detect_action_type(cards) == ActionType.REVOLUTION

    @staticmethod
    def is_eight_cut(cards: Sequence[Card]) -> bool:
        return any(c.rank == EIGHT for c in cards)

    @staticmethod
    def should_clear_field(active: Sequence[int], passed: Collection[int]) -> bool:
        """
        场流判定

        2 人时有 1 人 PASS 即流；3 人以上需 N-1 人 PASS
        """
        n = len(active)
        passed_count = sum(1 for pid in active if pid in passed)
        if n == 2:
            return passed_count >= 1
        if n > 2:
            return passed_count >= n - 1
        return False

    @staticmethod
    def next_active_player(
        current: int,
        active: Sequence[int],
        passed: Collection[int] = (),
        num_players: int = NUM_PLAYERS,
    ) -> int:
        """
        按座位顺序找下一个未 PASS 的在场玩家

        current 不在场时 (已上がり) 从其座位之后开始找

        Args:
            current: 当前座位
            active: 在场玩家
            passed: 已 PASS 的玩家
            num_players: 座位数

        Returns:
            下一位玩家座位
        """
        if not active:
            return current
        if len(active) == 1:
            return active[0]

        for offset in range(1, num_players + 1):
            seat = (current + offset) % num_players
            if seat in active and seat not in passed:
                return seat

        # 全员已 PASS
        for offset in range(1, num_players + 1):
            seat = (current + offset) % num_players
            if seat in active:
                return seat
        return active[0]

    @staticmethod
    def get_role_name(rank: int) -> str:
        """名次 (0 起) 对应的身份"""
        return ROLE_NAMES.get(rank, '平民')
