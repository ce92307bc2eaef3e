"""
记忆/感知模型

每次决策按角色的回忆概率抽签，成功时才从公开出牌历史中提取
该角色擅长的信息类别；失败时返回空记忆，所有记忆加分为 0
"""
from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence, Tuple
import logging

import numpy as np

from core.cards import Card, Suit, ACE, TWO, JOKER_RANK
from core.state import GameState

from .config import MemoryTendency, MemoryProfile, get_profile

logger = logging.getLogger(__name__)

HIGH_RANKS = (JOKER_RANK, TWO, ACE)
MID_RANK_RANGE = (5, 10)

# 各记忆加分适用的角色
HIGH_CARD_READERS = frozenset({1, 3, 4, 8, 10, 11})
REVOLUTION_READERS = frozenset({2, 4, 7, 9})
SUIT_FLOW_READERS = frozenset({1, 3, 5, 8, 10})

AGGRESSIVE = "aggressive"
CONSERVATIVE = "conservative"


@dataclass(frozen=True)
class MemoryState:
    """
    一次决策中的记忆

    Attributes:
        recalled: 回忆是否成功
        high_cards: 已出现的 JOKER/2/A
        mid_cards: 已出现的 5-10
        suit_flow: 各手牌首张的花色 (不含鬼牌开头)
        revolution_signs: 同点数多张出牌的次数
        player_styles: 对手风格 (aggressive / conservative)
    """
    recalled: bool = False
    high_cards: Tuple[Card, ...] = ()
    mid_cards: Tuple[Card, ...] = ()
    suit_flow: Tuple[Suit, ...] = ()
    revolution_signs: int = 0
    player_styles: Dict[int, str] = field(default_factory=dict)


EMPTY_MEMORY = MemoryState()


def recall(
    player_id: int,
    state: GameState,
    rng: np.random.Generator,
    profile: Optional[MemoryProfile] = None,
) -> MemoryState:
    """
    抽取记忆

    Args:
        player_id: 决策玩家
        state: 状态快照
        rng: 随机数生成器
        profile: 记忆配置，默认取角色配置

    Returns:
        记忆
    """
    if profile is None:
        profile = get_profile(state.get_player(player_id).character_id).memory

    if rng.random() >= profile.probability:
        logger.debug("Player %d memory recall failed (p=%.2f)", player_id, profile.probability)
        return EMPTY_MEMORY

    tendencies = profile.tendencies
    history = state.play_history
    played = [c for record in history for c in record.cards]

    high_cards: Tuple[Card, ...] = ()
    mid_cards: Tuple[Card, ...] = ()
    suit_flow: Tuple[Suit, ...] = ()
    revolution_signs = 0
    player_styles: Dict[int, str] = {}

    if MemoryTendency.HIGH_CARD in tendencies:
        high_cards = tuple(c for c in played if c.rank in HIGH_RANKS)

    if MemoryTendency.MID_CARD in tendencies:
        low, high = MID_RANK_RANGE
        mid_cards = tuple(c for c in played if low <= c.rank <= high)

    if MemoryTendency.SUIT_FLOW in tendencies:
        suit_flow = tuple(
            r.cards[0].suit for r in history if r.cards and not r.cards[0].is_joker
        )

    if MemoryTendency.REVOLUTION_SIGNS in tendencies:
        for record in history:
            if len(record.cards) >= 2:
                first_rank = record.cards[0].rank
                if sum(1 for c in record.cards if c.rank == first_rank) >= 2:
                    revolution_signs += 1

    if MemoryTendency.PLAYER_STYLE in tendencies:
        for other in state.players:
            if other.id == player_id:
                continue
            actions = [r for r in history if r.player_id == other.id]
            if len(actions) < 2:
                continue
            aggressive = sum(
                1 for r in actions
                if len(r.cards) >= 2 or any(c.rank in (JOKER_RANK, TWO) for c in r.cards)
            )
            player_styles[other.id] = AGGRESSIVE if aggressive > len(actions) / 2 else CONSERVATIVE

    memory = MemoryState(
        recalled=True,
        high_cards=high_cards,
        mid_cards=mid_cards,
        suit_flow=suit_flow,
        revolution_signs=revolution_signs,
        player_styles=player_styles,
    )
    logger.debug(
        "Player %d recalled: high=%d mid=%d suits=%d revolution_signs=%d styles=%s",
        player_id, len(high_cards), len(mid_cards), len(suit_flow), revolution_signs, player_styles,
    )
    return memory


def memory_bonus(cards: Sequence[Card], memory: MemoryState, character_id: int) -> float:
    """
    记忆带来的加分

    - 强牌记忆: 已见 6 张以上强牌时，出强牌 +30 (鬼牌组合 +20)、出黑桃 3 单张 +25
    - 革命征兆: 征兆 2 次以上时出四张 +40
    - 花色流: 最近两手同花色且本手接同花色 +25

    Args:
        cards: 候选出牌
        memory: 记忆
        character_id: 角色 ID

    Returns:
        加分
    """
    if not cards or not memory.recalled:
        return 0.0

    bonus = 0.0

    if character_id in HIGH_CARD_READERS and len(memory.high_cards) > 6:
        strong = [c for c in cards if c.rank in (JOKER_RANK, TWO)]
        jokers = [c for c in cards if c.is_joker]
        if strong:
            if jokers and len(strong) > len(jokers):
                bonus += 20
            else:
                bonus += 30
        if len(cards) == 1 and cards[0].suit == Suit.SPADES and cards[0].rank == 3:
            bonus += 25

    if character_id in REVOLUTION_READERS and memory.revolution_signs >= 2:
        if len(cards) == 4 and all(c.rank == cards[0].rank for c in cards):
            bonus += 40

    if character_id in SUIT_FLOW_READERS and len(memory.suit_flow) >= 3:
        last_two = memory.suit_flow[-2:]
        if last_two[0] == last_two[1] and cards[0].suit == last_two[0]:
            bonus += 25

    return bonus
