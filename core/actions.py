"""
动作类型定义与动作生成器

大富豪共有 5 种牌型 (另含 PASS 和 WRONG)
"""
from enum import IntEnum
from dataclasses import dataclass
from typing import List, Tuple, Optional, Dict, Sequence, FrozenSet
from collections import defaultdict
from itertools import combinations

from .cards import Card, Suit, EIGHT, sort_hand


class ActionType(IntEnum):
    """动作/牌型类型"""
    PASS = 0         # 过
    SINGLE = 1       # 单张
    PAIR = 2         # 对子
    TRIPLE = 3       # 三张
    REVOLUTION = 4   # 四张 (革命)
    STRAIGHT = 5     # 阶段 (同花色连号)
    WRONG = 6        # 非法牌型


# 阶段最少张数
MIN_STRAIGHT_LEN = 3

# 同点数牌组的牌型 (按张数)
GROUP_TYPES: Dict[int, ActionType] = {
    2: ActionType.PAIR,
    3: ActionType.TRIPLE,
    4: ActionType.REVOLUTION,
}


@dataclass(frozen=True, slots=True)
class Action:
    """
    不可变动作表示

    Attributes:
        cards: 出的牌 (保持生成时的顺序)
        action_type: 动作类型
    """
    cards: Tuple[Card, ...]
    action_type: ActionType

    @classmethod
    def pass_action(cls) -> 'Action':
        """创建 PASS 动作"""
        return cls(cards=(), action_type=ActionType.PASS)

    @classmethod
    def from_cards(cls, cards: Sequence[Card], action_type: Optional[ActionType] = None) -> 'Action':
        """从牌列表创建动作"""
        cards = tuple(cards)
        if action_type is None:
            from .rules import RuleEngine
            action_type = RuleEngine.detect_action_type(cards)
        return cls(cards=cards, action_type=action_type)

    @property
    def is_pass(self) -> bool:
        return self.action_type == ActionType.PASS

    @property
    def is_valid(self) -> bool:
        return self.action_type != ActionType.WRONG

    @property
    def card_ids(self) -> FrozenSet[str]:
        return frozenset(c.id for c in self.cards)

    @property
    def has_eight(self) -> bool:
        return any(c.rank == EIGHT for c in self.cards)

    @property
    def joker_count(self) -> int:
        return sum(1 for c in self.cards if c.is_joker)

    def __len__(self) -> int:
        return len(self.cards)


class ActionGenerator:
    """
    合法动作生成器

    根据手牌生成所有可能的出牌组合，再用规则引擎过滤
    """

    def __init__(self, hand_cards: Sequence[Card]):
        """
        Args:
            hand_cards: 手牌列表
        """
        self.hand = list(sort_hand(hand_cards))
        self.jokers: List[Card] = [c for c in self.hand if c.is_joker]

        self.rank_groups: Dict[int, List[Card]] = defaultdict(list)
        self.suit_groups: Dict[Suit, List[Card]] = defaultdict(list)
        for card in self.hand:
            if card.is_joker:
                continue
            self.rank_groups[card.rank].append(card)
            self.suit_groups[card.suit].append(card)

        # 预生成基础牌型
        self._singles: List[List[Card]] = [[c] for c in self.hand]
        self._groups: List[List[Card]] = []
        self._joker_groups: List[List[Card]] = []
        self._straights: List[List[Card]] = []

        self._gen_groups()
        self._gen_joker_groups()
        self._gen_straights()

    def _gen_groups(self):
        """同点数: 每个点数的所有 2-4 张组合"""
        for cards in self.rank_groups.values():
            for size in range(2, len(cards) + 1):
                self._groups.extend(list(combo) for combo in combinations(cards, size))

    def _gen_joker_groups(self):
        """鬼牌代替同点数牌: 任意普通牌子集加任意鬼牌子集，共 2-4 张"""
        if not self.jokers:
            return
        joker_sets = [
            list(combo)
            for n_joker in range(1, len(self.jokers) + 1)
            for combo in combinations(self.jokers, n_joker)
        ]
        for cards in self.rank_groups.values():
            for n_normal in range(1, min(len(cards), 3) + 1):
                for normals in combinations(cards, n_normal):
                    for jokers in joker_sets:
                        if n_normal + len(jokers) <= 4:
                            self._joker_groups.append(list(normals) + jokers)

    def _gen_straights(self):
        """同花色连号，滑动窗口 (至少 3 张)"""
        for cards in self.suit_groups.values():
            if len(cards) < MIN_STRAIGHT_LEN:
                continue
            ordered = sorted(cards, key=lambda c: c.rank)
            for start in range(len(ordered) - MIN_STRAIGHT_LEN + 1):
                for end in range(start + MIN_STRAIGHT_LEN, len(ordered) + 1):
                    window = ordered[start:end]
                    if window[-1].rank - window[-2].rank != 1:
                        break
                    if all(window[i + 1].rank - window[i].rank == 1 for i in range(len(window) - 1)):
                        self._straights.append(window)

    def gen_singles(self) -> List[List[Card]]:
        """生成所有单张"""
        return self._singles.copy()

    def gen_groups(self) -> List[List[Card]]:
        """生成对子、三张、四张"""
        return self._groups.copy()

    def gen_joker_groups(self) -> List[List[Card]]:
        """生成含鬼牌的同点数组合"""
        return self._joker_groups.copy()

    def gen_straights(self) -> List[List[Card]]:
        """生成所有阶段"""
        return self._straights.copy()

    def generate_all(self) -> List[Action]:
        """
        生成手牌能组成的所有牌型 (不考虑场况)

        Returns:
            去重后的动作列表
        """
        candidates = (
            self._singles + self._groups + self._joker_groups + self._straights
        )
        actions = []
        seen = set()
        for cards in candidates:
            key = frozenset(c.id for c in cards)
            if key in seen:
                continue
            seen.add(key)
            action = Action.from_cards(cards)
            if action.is_valid:
                actions.append(action)
        return actions

    def generate_legal(
        self,
        field_cards: Sequence[Card] = (),
        is_revolution: bool = False,
        suit_lock: Optional[Suit] = None,
    ) -> List[Action]:
        """
        生成当前场况下所有能出的牌 (不含 PASS)

        Args:
            field_cards: 场上的牌，空表示新场
            is_revolution: 是否革命中
            suit_lock: 缚り花色

        Returns:
            合法动作列表
        """
        from .rules import RuleEngine

        return [
            action for action in self.generate_all()
            if RuleEngine.is_valid_play(action.cards, field_cards, is_revolution, suit_lock)
        ]


def generate_legal_moves(
    hand: Sequence[Card],
    field_cards: Sequence[Card] = (),
    is_revolution: bool = False,
    suit_lock: Optional[Suit] = None,
) -> List[Action]:
    """对手牌枚举所有合法出牌"""
    return ActionGenerator(hand).generate_legal(field_cards, is_revolution, suit_lock)
