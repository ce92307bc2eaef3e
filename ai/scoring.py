"""
候选出牌评分

每个候选的分数由以下部分累加:
- LowCardFirst 定石 (乘以角色采用率)
- 记忆加分
- 相性补正
- 反则上がり / 残 8 惩罚
分析型角色再对前几名做 playout 精算
"""
from dataclasses import dataclass
from typing import List, Optional, Sequence
import logging

from core.cards import Card, Suit, EIGHT, THREE, ACE, TWO, JOKER_RANK, has_spade_three
from core.actions import Action
from core.rules import RuleEngine
from core.state import GameState

from .config import AIProfile, RIVAL_CHARACTER_ID, PLAYOUT_CHARACTERS, get_profile
from .eight_cut import EightCutCheck, can_execute_eight_cut
from .memory import MemoryState, memory_bonus

logger = logging.getLogger(__name__)

STRONG_RANKS = (JOKER_RANK, TWO, ACE)
FOUL_FINISH_PENALTY = 1000
PLAYOUT_TOP_N = 5
PLAYOUT_FINISH_BONUS = 500
PLAYOUT_NEAR_FINISH_BONUS = 200


@dataclass
class ScoredMove:
    """带分数的候选"""
    action: Action
    score: float


def _is_spade_three(card: Card) -> bool:
    return card.suit == Suit.SPADES and card.rank == THREE


def _hand_after(hand: Sequence[Card], cards: Sequence[Card]) -> List[Card]:
    ids = {c.id for c in cards}
    return [c for c in hand if c.id not in ids]


def compatibility_bonus(player_id: int, state: GameState, profile: Optional[AIProfile] = None) -> float:
    """
    相性补正: 2主 在场时，有配置的角色获得固定加减分

    Args:
        player_id: 玩家
        state: 状态快照
        profile: AI 配置，默认按角色查

    Returns:
        补正值
    """
    if profile is None:
        profile = get_profile(state.get_player(player_id).character_id)
    config = profile.compatibility
    if config is None:
        return 0.0

    rival_present = any(
        state.get_player(pid).character_id == RIVAL_CHARACTER_ID
        and not state.get_player(pid).is_foul_finished
        for pid in state.active
    )
    if not rival_present:
        return 0.0

    strong = sum(1 for c in state.get_hand(player_id) if c.rank in STRONG_RANKS)
    bonus = strong * config.preservation * 20 + config.strategy * 30
    if config.suit_lock and state.suit_lock is not None:
        bonus += config.suit_lock * 25
    return bonus


def joker_strategy_score(cards: Sequence[Card], hand: Sequence[Card], player_id: int, state: GameState) -> float:
    """鬼牌的使用方式: 单出有被黑桃 3 克的风险，配弱牌用最划算"""
    jokers = [c for c in cards if c.is_joker]
    if not jokers:
        return 0.0
    normals = [c for c in cards if not c.is_joker]
    score = 0.0

    if len(cards) == 1:
        if any(pid != player_id for pid in state.active):
            score -= 30
        if len(hand) <= 3:
            score += 50

    if normals:
        rank = RuleEngine.effective_rank(cards)
        if 3 <= rank <= 7:
            score += 60 * len(jokers)
        elif 8 <= rank <= 10:
            score += 40 * len(jokers)
        else:
            score += 20 * len(jokers)

        if len(cards) == 4 and RuleEngine.is_revolution_trigger(cards):
            score += 100

    remaining = sum(1 for c in hand if c.is_joker) - len(jokers)
    if remaining > 0:
        score += remaining * 25
    return score


def spade_three_score(cards: Sequence[Card], hand: Sequence[Card], state: GameState) -> float:
    """黑桃 3: 克单张鬼牌时大加分，否则留在手里"""
    score = 0.0
    if RuleEngine.is_spade_three_counter(cards, state.field.cards):
        score += 150 + 50
    if has_spade_three(hand) and not any(_is_spade_three(c) for c in cards):
        score += 20
    return score


def eight_cut_score(check: EightCutCheck, hand_size: int) -> float:
    """
    含 8 出牌的分数 (替代 LowCardFirst 其余各项)

    Args:
        check: 8 切り判断
        hand_size: 出牌前手牌数

    Returns:
        分数
    """
    if not check.can_execute:
        if hand_size <= 7:
            return -50.0
        if hand_size <= 9:
            return -75.0
        return -100.0

    score = 150.0
    if check.is_emergency:
        score += 100
    probability = check.win_probability or 0
    if probability >= 60:
        score += 60
    elif probability >= 40:
        score += 40
    elif probability >= 20:
        score += 20
    if hand_size <= 5:
        score += 80
    elif hand_size <= 7:
        score += 50
    return score


def low_card_first_score(
    cards: Sequence[Card],
    hand: Sequence[Card],
    player_id: int,
    state: GameState,
    eight_cut: Optional[EightCutCheck] = None,
) -> float:
    """
    LowCardFirst 定石的原始分 (未乘采用率)

    Args:
        cards: 候选出牌
        hand: 当前手牌
        player_id: 玩家
        state: 状态快照
        eight_cut: 本回合的 8 切り判断，含 8 的出牌需要

    Returns:
        分数
    """
    if RuleEngine.is_eight_cut(cards):
        if eight_cut is None:
            eight_cut = can_execute_eight_cut(player_id, state)
        return eight_cut_score(eight_cut, len(hand))

    score = joker_strategy_score(cards, hand, player_id, state)
    score += spade_three_score(cards, hand, state)

    normals = [c for c in cards if not c.is_joker]
    score -= 50 * sum(1 for c in normals if c.rank in (ACE, TWO))
    score += 40 * sum(1 for c in cards if 3 <= c.rank <= 7 or 9 <= c.rank <= 10)

    if normals:
        average = sum(c.rank for c in normals) / len(normals)
        score += max(0.0, (7 - average) * 10)

    rest = _hand_after(hand, cards)
    if sum(1 for c in rest if c.rank in STRONG_RANKS) >= 2:
        score += 30
    return score


def score_move(
    action: Action,
    player_id: int,
    state: GameState,
    memory: MemoryState,
    eight_cut: Optional[EightCutCheck] = None,
) -> float:
    """单个候选的总分"""
    player = state.get_player(player_id)
    profile = get_profile(player.character_id)
    hand = player.hand
    cards = action.cards

    score = low_card_first_score(cards, hand, player_id, state, eight_cut) * profile.low_card_first_rate
    score += memory_bonus(cards, memory, player.character_id)
    score += compatibility_bonus(player_id, state, profile)

    rest = _hand_after(hand, cards)
    if not rest and not RuleEngine.can_finish_with(cards, state.is_revolution):
        score -= FOUL_FINISH_PENALTY

    if action.has_eight:
        eights_left = sum(1 for c in rest if c.rank == EIGHT)
        if eights_left and len(rest) <= 3:
            score -= eights_left * len(rest) * 50
    return score


def refine_with_playouts(
    scored: List[ScoredMove],
    hand: Sequence[Card],
    is_revolution: bool,
    playout_count: int,
) -> List[ScoredMove]:
    """
    对分数最高的几个候选做 playout 精算

    能合法出完 +500，出完后剩 2 张以内 +200

    Args:
        scored: 已按分数降序排列的候选
        hand: 当前手牌
        is_revolution: 是否革命中
        playout_count: playout 次数 (仅记录)

    Returns:
        重新排序后的候选
    """
    logger.debug("Refining top %d of %d moves (%d playouts)",
                 min(PLAYOUT_TOP_N, len(scored)), len(scored), playout_count)
    for move in scored[:PLAYOUT_TOP_N]:
        rest = _hand_after(hand, move.action.cards)
        if not rest and RuleEngine.can_finish_with(move.action.cards, is_revolution):
            move.score += PLAYOUT_FINISH_BONUS
        elif len(rest) <= 2:
            move.score += PLAYOUT_NEAR_FINISH_BONUS
    return sorted(scored, key=lambda m: m.score, reverse=True)


def score_moves(
    moves: Sequence[Action],
    player_id: int,
    state: GameState,
    memory: MemoryState,
) -> List[ScoredMove]:
    """
    给所有候选出牌打分

    Args:
        moves: 候选 (不含 PASS)
        player_id: 玩家
        state: 状态快照
        memory: 本回合记忆

    Returns:
        按分数降序排列的候选
    """
    player = state.get_player(player_id)
    eight_cut = None
    if any(m.has_eight for m in moves):
        eight_cut = can_execute_eight_cut(player_id, state)
        logger.debug("Player %d eight-cut check: %s (%s)", player_id, eight_cut.can_execute, eight_cut.reason)

    scored = [
        ScoredMove(action, score_move(action, player_id, state, memory, eight_cut))
        for action in moves if not action.is_pass
    ]
    scored.sort(key=lambda m: m.score, reverse=True)

    if player.character_id in PLAYOUT_CHARACTERS:
        profile = get_profile(player.character_id)
        scored = refine_with_playouts(scored, player.hand, state.is_revolution, profile.playout_count)
    return scored
