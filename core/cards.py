"""
牌的定义与编码

大富豪使用 54 张牌：
- 4 种花色 × A-K 各 13 张 (A 记为 1)
- 鬼牌 (JOKER) 2 张，rank 统一记为 14
"""
from enum import Enum
from dataclasses import dataclass
from typing import List, Tuple, Dict, Optional, Sequence
import numpy as np


class Suit(Enum):
    """花色"""
    SPADES = "spades"
    HEARTS = "hearts"
    DIAMONDS = "diamonds"
    CLUBS = "clubs"
    JOKER = "joker"


# 普通花色 (用于建牌、编码)
NORMAL_SUITS: Tuple[Suit, ...] = (Suit.SPADES, Suit.HEARTS, Suit.DIAMONDS, Suit.CLUBS)

ACE = 1
TWO = 2
THREE = 3
EIGHT = 8
KING = 13
JOKER_RANK = 14

NUM_PLAYERS = 4


@dataclass(frozen=True, slots=True)
class Card:
    """
    不可变的牌

    Attributes:
        id: 唯一标识，如 "spades-3"、"joker-1"
        suit: 花色
        rank: 1-13 (A=1)，鬼牌为 14
    """
    id: str
    suit: Suit
    rank: int

    @property
    def is_joker(self) -> bool:
        return self.suit == Suit.JOKER

    def __str__(self) -> str:
        return card_to_str(self)

    def __repr__(self) -> str:
        return f"Card({card_to_str(self)})"


def make_card(suit: Suit, rank: int) -> Card:
    """按花色和点数构造普通牌"""
    return Card(id=f"{suit.value}-{rank}", suit=suit, rank=rank)


JOKER_1 = Card(id="joker-1", suit=Suit.JOKER, rank=JOKER_RANK)
JOKER_2 = Card(id="joker-2", suit=Suit.JOKER, rank=JOKER_RANK)
SPADE_THREE = make_card(Suit.SPADES, THREE)

# 完整牌组 (54 张, 未洗牌)
FULL_DECK: Tuple[Card, ...] = tuple(
    make_card(suit, rank) for suit in NORMAL_SUITS for rank in range(1, 14)
) + (JOKER_1, JOKER_2)

CARD_BY_ID: Dict[str, Card] = {card.id: card for card in FULL_DECK}

# 点数到显示字符
RANK_TO_STR: Dict[int, str] = {
    1: 'A', 2: '2', 3: '3', 4: '4', 5: '5', 6: '6', 7: '7',
    8: '8', 9: '9', 10: '10', 11: 'J', 12: 'Q', 13: 'K',
}
STR_TO_RANK: Dict[str, int] = {v: k for k, v in RANK_TO_STR.items()}

SUIT_TO_SYMBOL: Dict[Suit, str] = {
    Suit.SPADES: '♠',
    Suit.HEARTS: '♥',
    Suit.DIAMONDS: '♦',
    Suit.CLUBS: '♣',
}
SYMBOL_TO_SUIT: Dict[str, Suit] = {v: k for k, v in SUIT_TO_SYMBOL.items()}

JOKER_STR = "JOKER"

# one-hot 编码: 普通牌占 0-51 (花色 × 13 + rank - 1)，鬼牌占 52、53
CARD_TO_INDEX: Dict[str, int] = {card.id: i for i, card in enumerate(FULL_DECK)}


def card_strength(card: Card, is_revolution: bool = False) -> int:
    """
    单张牌的强度

    通常: 3 < 4 < ... < K < A(14) < 2(15) < JOKER(16)
    革命: JOKER(1) < 2(2) < A(3) = K(3) < Q(4) ... < 3(13)，其他点数取 16 - rank

    Args:
        card: 牌
        is_revolution: 是否处于革命状态

    Returns:
        强度值，越大越强
    """
    if card.is_joker:
        return 1 if is_revolution else 16

    if is_revolution:
        if card.rank == TWO:
            return 2
        if card.rank == ACE:
            return 3
        return 16 - card.rank

    if card.rank == ACE:
        return 14
    if card.rank == TWO:
        return 15
    return card.rank


def is_strong_card(card: Card) -> bool:
    """JOKER / A / 2"""
    return card.rank in (JOKER_RANK, ACE, TWO)


def is_penalty_card(card: Card, is_revolution: bool = False) -> bool:
    """打出最后一手时会构成反则的牌 (鬼牌、8、通常时的 2、革命时的 3)"""
    if card.is_joker or card.rank == EIGHT:
        return True
    if is_revolution:
        return card.rank == THREE
    return card.rank == TWO


def has_spade_three(hand: Sequence[Card]) -> bool:
    """手牌中是否有黑桃 3"""
    return any(c.suit == Suit.SPADES and c.rank == THREE for c in hand)


def sort_hand(cards: Sequence[Card]) -> Tuple[Card, ...]:
    """按点数、花色排序，鬼牌放最后"""
    return tuple(sorted(
        cards,
        key=lambda c: (c.is_joker, c.rank, c.suit.value, c.id),
    ))


def new_deck(rng: Optional[np.random.Generator] = None) -> List[Card]:
    """
    洗好的新牌组

    Args:
        rng: numpy 随机数生成器，None 时新建

    Returns:
        54 张牌
    """
    if rng is None:
        rng = np.random.default_rng()
    order = rng.permutation(len(FULL_DECK))
    return [FULL_DECK[i] for i in order]


def deal(deck: Sequence[Card], num_players: int = NUM_PLAYERS) -> List[Tuple[Card, ...]]:
    """
    轮流发牌，54 张全部发完 (4 人时为 14/14/13/13)

    Args:
        deck: 洗好的牌组
        num_players: 玩家数

    Returns:
        各座位手牌 (已排序)
    """
    hands: List[List[Card]] = [[] for _ in range(num_players)]
    for i, card in enumerate(deck):
        hands[i % num_players].append(card)
    return [sort_hand(hand) for hand in hands]


def cards_to_array(cards: Sequence[Card]) -> np.ndarray:
    """
    将牌列表转换为 54 维 one-hot 向量

    Args:
        cards: 牌列表

    Returns:
        54 维 numpy 数组
    """
    array = np.zeros(len(FULL_DECK), dtype=np.float32)
    for card in cards:
        array[CARD_TO_INDEX[card.id]] = 1
    return array


def array_to_cards(array: np.ndarray) -> List[Card]:
    """54 维数组转换回牌列表"""
    return [FULL_DECK[i] for i in np.flatnonzero(array > 0)]


def card_to_str(card: Card) -> str:
    """如 "3♠"、"10♥"、"JOKER" """
    if card.is_joker:
        return JOKER_STR
    return f"{RANK_TO_STR[card.rank]}{SUIT_TO_SYMBOL[card.suit]}"


def cards_to_str(cards: Sequence[Card]) -> str:
    """
    将牌列表转换为可读字符串

    Returns:
        如 "3♠ 5♥ K♦"
    """
    return ' '.join(card_to_str(c) for c in cards)


def str_to_cards(s: str) -> List[Card]:
    """
    将字符串转换为牌列表

    第一个 "JOKER" 解析为 joker-1，第二个为 joker-2

    Args:
        s: 空格分隔的牌，如 "3♠ 5♥ JOKER"

    Returns:
        牌列表
    """
    cards = []
    jokers = [JOKER_1, JOKER_2]
    for token in s.split():
        if token.upper() == JOKER_STR:
            if not jokers:
                raise ValueError("Only two jokers in a deck")
            cards.append(jokers.pop(0))
            continue
        rank_str, symbol = token[:-1], token[-1]
        if rank_str not in STR_TO_RANK or symbol not in SYMBOL_TO_SUIT:
            raise ValueError(f"Unknown card: {token}")
        cards.append(make_card(SYMBOL_TO_SUIT[symbol], STR_TO_RANK[rank_str]))
    return cards
