"""
8 切り判断

合法的 8 切り是否在战略上值得执行:
- 手牌很少时无条件允许 (紧急)
- 开局需要切后胜率足够高
- 中盘看后续手段和角色倾向
"""
from dataclasses import dataclass
from collections import Counter, defaultdict
from typing import Dict, List, Optional, Sequence
import logging

from core.cards import Card, Suit, EIGHT, JOKER_RANK, ACE, TWO
from core.state import GameState

from .config import EightCutTendency, get_profile
from .risk import evaluate_foul_risk

logger = logging.getLogger(__name__)

STRONG_RANKS = (JOKER_RANK, TWO, ACE)
EARLY_GAME_PLAYS = 3
EARLY_GAME_WIN_PROBABILITY = 70
FOLLOW_UP_THRESHOLD = 30
MAX_MID_GAME_HAND = 10


@dataclass(frozen=True)
class EightCutCheck:
    """
    8 切り判断结果

    Attributes:
        can_execute: 是否执行
        reason: 理由
        is_emergency: 紧急模式 (手牌很少)
        win_probability: 切后胜率估计 (仅开局计算)
    """
    can_execute: bool
    reason: str
    is_emergency: bool = False
    win_probability: Optional[int] = None


@dataclass(frozen=True)
class FollowUp:
    """切后的后续手段"""
    suit_lock_potential: bool
    straight_potential: bool
    strong_card_ready: bool
    winning_move: bool
    combo_setup: bool
    weak_card_options: bool
    total_score: int

    @property
    def is_viable(self) -> bool:
        return (
            self.total_score >= FOLLOW_UP_THRESHOLD
            or self.suit_lock_potential
            or self.straight_potential
            or self.strong_card_ready
            or self.winning_move
            or self.combo_setup
        )


def _after_cut(hand: Sequence[Card]) -> List[Card]:
    return [c for c in hand if c.rank != EIGHT]


def _has_pair(cards: Sequence[Card]) -> bool:
    return any(n >= 2 for n in Counter(c.rank for c in cards).values())


def win_probability_after_eight_cut(player_id: int, state: GameState) -> int:
    """
    切后胜率估计 (0-100)

    按剩余手牌数给基础分，强牌每张 +20，同点数组每张 +12，
    快要上がり的对手扣分
    """
    rest = _after_cut(state.get_hand(player_id))
    n = len(rest)
    if n <= 2:
        score = 70
    elif n <= 4:
        score = 50
    elif n <= 6:
        score = 30
    elif n <= 8:
        score = 15
    else:
        score = 5

    score += 20 * sum(1 for c in rest if c.rank in STRONG_RANKS)
    score += sum(12 * count for count in Counter(c.rank for c in rest).values() if count >= 2)

    threat = 0
    for pid in state.active:
        if pid == player_id:
            continue
        size = len(state.get_hand(pid))
        if size <= 3:
            threat += 10
        elif size <= 5:
            threat += 5
    score -= threat

    return max(0, min(100, score))


def has_simple_follow_up(hand: Sequence[Card]) -> bool:
    """强牌、对子或接近上がり"""
    rest = _after_cut(hand)
    return (
        any(c.rank in STRONG_RANKS for c in rest)
        or _has_pair(rest)
        or len(rest) <= 3
    )


def evaluate_follow_up(hand: Sequence[Card]) -> FollowUp:
    """
    评估切后的后续手段

    Args:
        hand: 当前手牌

    Returns:
        FollowUp
    """
    rest = _after_cut(hand)

    by_suit: Dict[Suit, List[int]] = defaultdict(list)
    for card in rest:
        if not card.is_joker:
            by_suit[card.suit].append(card.rank)

    suit_sizes = [len(ranks) for ranks in by_suit.values()]
    suit_lock_potential = any(n >= 2 for n in suit_sizes) or sum(1 for n in suit_sizes if n == 1) >= 3

    straight_potential = False
    for ranks in by_suit.values():
        ranks = sorted(ranks)
        if any(b - a == 1 for a, b in zip(ranks, ranks[1:])):
            straight_potential = True
            break

    strong_card_ready = any(c.rank in STRONG_RANKS for c in rest)
    winning_move = len(rest) <= 4
    combo_setup = _has_pair(rest)
    weak_card_options = sum(1 for c in rest if 3 <= c.rank <= 7) >= 2

    total = (
        (25 if suit_lock_potential else 0)
        + (30 if straight_potential else 0)
        + (25 if strong_card_ready else 5)
        + (40 if winning_move else 0)
        + (20 if combo_setup else 5)
        + (15 if weak_card_options else 0)
        + (10 if len(rest) <= 5 else 0)
    )
    return FollowUp(
        suit_lock_potential=suit_lock_potential,
        straight_potential=straight_potential,
        strong_card_ready=strong_card_ready,
        winning_move=winning_move,
        combo_setup=combo_setup,
        weak_card_options=weak_card_options,
        total_score=total,
    )


def check_eight_cut_tendency(
    tendency: EightCutTendency,
    hand_count: int,
    state: GameState,
    relaxed: bool = False,
) -> bool:
    """
    角色的 8 切り倾向

    Args:
        tendency: 倾向配置
        hand_count: 手牌数
        state: 状态快照
        relaxed: 宽松模式 (不检查 strategic/aggressive)

    Returns:
        是否允许
    """
    limit = tendency.min_hand_count_relaxed if relaxed else tendency.min_hand_count
    if hand_count > limit:
        return False

    if tendency.strategic and not relaxed:
        if len(state.active) > 2 and hand_count > limit - 2:
            return False

    if not tendency.aggressive and not relaxed:
        in_reach = any(0 < len(state.get_hand(pid)) <= 3 for pid in state.active)
        if in_reach and hand_count > 7:
            return False

    return True


def can_execute_eight_cut(player_id: int, state: GameState) -> EightCutCheck:
    """
    判断是否执行 8 切り

    Args:
        player_id: 玩家
        state: 状态快照

    Returns:
        EightCutCheck
    """
    hand = state.get_hand(player_id)
    hand_count = len(hand)
    profile = get_profile(state.get_player(player_id).character_id)

    if not any(c.rank == EIGHT for c in hand):
        return EightCutCheck(False, "No eights in hand")

    risk = evaluate_foul_risk(player_id, state)
    if risk.should_pass and risk.risk_level >= 40:
        return EightCutCheck(False, f"Foul avoidance: {risk.reason} (risk {risk.risk_level})")

    if hand_count <= 5:
        return EightCutCheck(True, f"Emergency: only {hand_count} cards left", is_emergency=True)

    if hand_count <= 7 and has_simple_follow_up(hand):
        return EightCutCheck(
            True, f"Danger zone: {hand_count} cards with follow-up options", is_emergency=True
        )

    if len(state.play_history) <= EARLY_GAME_PLAYS:
        probability = win_probability_after_eight_cut(player_id, state)
        if probability < EARLY_GAME_WIN_PROBABILITY:
            return EightCutCheck(
                False, f"Early game, win probability {probability}% too low",
                win_probability=probability,
            )
        return EightCutCheck(
            True, f"Early game, win probability {probability}%", win_probability=probability
        )

    if hand_count > MAX_MID_GAME_HAND:
        return EightCutCheck(False, f"Too early, {hand_count} cards")

    follow_up = evaluate_follow_up(hand)
    if not follow_up.is_viable:
        return EightCutCheck(False, f"Insufficient follow-up (score {follow_up.total_score})")

    if not check_eight_cut_tendency(profile.eight_cut, hand_count, state):
        return EightCutCheck(False, f"Character {state.get_player(player_id).character_id} avoids eight-cut")

    logger.debug("Player %d eight-cut approved: hand=%d follow_up=%d",
                 player_id, hand_count, follow_up.total_score)
    return EightCutCheck(True, f"Mid-game eight-cut with {hand_count} cards")
