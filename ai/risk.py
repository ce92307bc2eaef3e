"""
反则上がり风险评估

估计玩家最后只剩 "不能作为最后一手" 的牌 (鬼牌、8、通常时的 2、革命时的 3)
而被迫反则上がり的可能性，给出是否应该 PASS 的建议
"""
from dataclasses import dataclass
from collections import Counter
from typing import Optional, Sequence, Tuple
import logging

from core.cards import Card, EIGHT, card_strength, is_penalty_card
from core.actions import generate_legal_moves
from core.rules import RuleEngine
from core.state import GameState

from .config import get_profile

logger = logging.getLogger(__name__)

PASS_RISK = 50
SMALL_HAND_PASS_RISK = 35


@dataclass(frozen=True)
class FoulRisk:
    """
    风险评估结果

    Attributes:
        risk_level: 风险值 (0 起，经角色系数调整)
        should_pass: 是否建议 PASS
        reason: 判断理由
        penalty_cards: 手中的风险牌
        worst_case: 最坏情况 (手牌很少且持有风险牌)
    """
    risk_level: int = 0
    should_pass: bool = False
    reason: str = "No penalty cards in hand"
    penalty_cards: Tuple[Card, ...] = ()
    worst_case: bool = False


NO_RISK = FoulRisk()


def has_winning_move(hand: Sequence[Card], state: GameState) -> bool:
    """是否存在一手出完且合法上がり的出牌"""
    for action in generate_legal_moves(hand, state.field.cards, state.is_revolution, state.suit_lock):
        if len(action.cards) == len(hand) and RuleEngine.can_finish_with(action.cards, state.is_revolution):
            return True
    return False


def evaluate_foul_risk(
    player_id: int,
    state: GameState,
    hand: Optional[Sequence[Card]] = None,
) -> FoulRisk:
    """
    评估反则上がり风险

    Args:
        player_id: 玩家
        state: 状态快照
        hand: 要评估的手牌，默认当前手牌 (用于评估出牌后的手牌)

    Returns:
        FoulRisk
    """
    if hand is None:
        hand = state.get_hand(player_id)
    hand = tuple(hand)
    is_revolution = state.is_revolution

    penalty = tuple(c for c in hand if is_penalty_card(c, is_revolution))
    if not penalty:
        return NO_RISK

    total = len(hand)
    others = [c for c in hand if not is_penalty_card(c, is_revolution)]

    field_cards = state.field.cards
    field_strength = RuleEngine.combination_strength(field_cards, is_revolution)
    playable = [
        c for c in others
        if not field_cards or card_strength(c, is_revolution) > field_strength
    ]

    pair_options = sum(1 for n in Counter(c.rank for c in others).values() if n >= 2)
    straight_options = sum(1 for n in Counter(c.suit for c in others).values() if n >= 3)

    risk = 0
    reasons = []

    ratio = len(penalty) / total
    if total <= 4 and ratio >= 0.5:
        risk += 40
        reasons.append(f"high penalty ratio {ratio:.1f}")
    elif total <= 6 and ratio >= 0.33:
        risk += 25
        reasons.append(f"moderate penalty ratio {ratio:.1f}")

    if not playable and total <= 3:
        risk += 50
        reasons.append("no playable safe cards")
    elif len(playable) <= 1 and total <= 4:
        risk += 30
        reasons.append("very few playable safe cards")

    worst_case = total <= 3
    if worst_case:
        risk += 60
        reasons.append("only penalty cards would remain")

    if pair_options == 0 and straight_options == 0 and total <= 5:
        risk += 20
        reasons.append("no combo options")

    if is_revolution and any(c.rank == EIGHT for c in hand):
        risk += 15
        reasons.append("revolution with eights")

    if total <= 4:
        in_reach = sum(
            1 for pid in state.active
            if pid != player_id and len(state.get_hand(pid)) <= 3
        )
        if in_reach:
            risk += in_reach * 10
            reasons.append(f"{in_reach} opponents in reach")

    modifier = get_profile(state.get_player(player_id).character_id).risk_modifier
    risk = int(round(risk * modifier))

    should_pass = False
    reason = ""
    if risk >= PASS_RISK:
        should_pass = True
        reason = "High foul risk, emergency pass"
    elif risk >= SMALL_HAND_PASS_RISK and total <= 3:
        should_pass = True
        reason = "Moderate risk with few cards, precautionary pass"
    elif worst_case:
        should_pass = True
        reason = "Worst case, avoiding certain foul"

    if should_pass and has_winning_move(hand, state):
        should_pass = False
        reason = "Winning move available, not passing"

    if not reason:
        reason = f"Risk level {risk} ({', '.join(reasons)})"

    logger.debug(
        "Player %d foul risk=%d should_pass=%s worst=%s: %s",
        player_id, risk, should_pass, worst_case, reason,
    )
    return FoulRisk(
        risk_level=risk,
        should_pass=should_pass,
        reason=reason,
        penalty_cards=penalty,
        worst_case=worst_case,
    )
