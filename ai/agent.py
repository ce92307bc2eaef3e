"""
AI 决策入口

decide() 对状态快照做纯计算，返回一个保证合法的动作，不修改状态
"""
from typing import Optional
import logging

import numpy as np

from core.actions import Action, generate_legal_moves
from core.cards import card_strength, cards_to_str
from core.errors import IllegalAction, NoLegalMove, GAME_FINISHED, EFFECT_PENDING, NOT_YOUR_TURN
from core.state import GameState

from .config import get_profile
from .memory import recall
from .risk import evaluate_foul_risk
from .scoring import score_moves
from .selection import select_move

logger = logging.getLogger(__name__)

MODERATE_RISK = 25
FINAL_CHECK_RISK = 60


def fallback_action(state: GameState, player_id: int) -> Action:
    """
    保底动作: 场上有牌时 PASS，新场时出最弱的单张

    Raises:
        NoLegalMove: 新场时手中没有可出的牌
    """
    if not state.field.is_empty:
        return Action.pass_action()

    singles = [
        a for a in generate_legal_moves(state.get_hand(player_id), (), state.is_revolution, state.suit_lock)
        if len(a.cards) == 1
    ]
    if not singles:
        raise NoLegalMove(f"Player {player_id} has no legal play on an empty field")
    return min(singles, key=lambda a: card_strength(a.cards[0], state.is_revolution))


def decide(
    state: GameState,
    player_id: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> Action:
    """
    AI 决策

    1. 反则风险过高时 PASS (仅场上有牌时)
    2. 回忆、枚举合法出牌、打分
    3. 最终安全检查: 最佳候选出完后风险仍 ≥60 时 PASS
    4. 按角色性格抽选

    Args:
        state: 状态快照
        player_id: 决策玩家，默认当前玩家
        rng: 随机数生成器

    Returns:
        合法动作

    Raises:
        IllegalAction: 游戏已结束、8 切り待处理或不是该玩家的回合
        NoLegalMove: 新场时没有任何可出的牌 (数据损坏)
    """
    if state.is_finished:
        raise IllegalAction(GAME_FINISHED, "Game is finished")
    if state.eight_cut_pending:
        raise IllegalAction(EFFECT_PENDING, "Eight-cut pending, no decision possible")
    if player_id is None:
        player_id = state.turn
    if player_id != state.turn:
        raise IllegalAction(NOT_YOUR_TURN, f"Player {player_id} asked to decide on player {state.turn}'s turn")
    if rng is None:
        rng = np.random.default_rng()

    player = state.get_player(player_id)
    profile = get_profile(player.character_id)
    field_held = not state.field.is_empty

    if field_held:
        risk = evaluate_foul_risk(player_id, state)
        if risk.should_pass:
            logger.debug("Player %d passes to avoid a foul finish: %s", player_id, risk.reason)
            return Action.pass_action()
        if risk.risk_level >= MODERATE_RISK:
            logger.debug("Player %d moderate foul risk %d: %s", player_id, risk.risk_level, risk.reason)

    memory = recall(player_id, state, rng, profile.memory)

    moves = generate_legal_moves(player.hand, state.field.cards, state.is_revolution, state.suit_lock)
    if not moves:
        if field_held:
            return Action.pass_action()
        raise NoLegalMove(f"Player {player_id} has no legal play on an empty field")

    scored = score_moves(moves, player_id, state, memory)

    if field_held:
        best_ids = scored[0].action.card_ids
        rest = [c for c in player.hand if c.id not in best_ids]
        final = evaluate_foul_risk(player_id, state, hand=rest)
        if final.should_pass and final.risk_level >= FINAL_CHECK_RISK:
            logger.debug("Player %d final safety check passes: %s", player_id, final.reason)
            return Action.pass_action()

    selected = select_move(scored, profile.selection, rng)
    logger.debug(
        "Player %d (character %d) selected %s score=%.1f",
        player_id, player.character_id, cards_to_str(selected.action.cards), selected.score,
    )

    try:
        state.validate_action(selected.action, player_id)
    except IllegalAction as e:
        logger.warning("Player %d selected an illegal action (%s), falling back", player_id, e)
        return fallback_action(state, player_id)
    return selected.action
