"""
游戏状态定义

使用不可变数据结构，支持:
- 每次状态转移返回新对象 (旧快照可供 AI 安全读取)
- 版本号防止基于过期状态的提交
- Effects 描述每次转移的副作用，供外部展示
"""
from dataclasses import dataclass, field, replace
from typing import Dict, Tuple, Optional, List, FrozenSet, Sequence, Union
from enum import Enum
import time

import numpy as np

from .cards import Card, Suit, NUM_PLAYERS, SPADE_THREE, new_deck, deal, sort_hand
from .actions import Action, ActionType, ActionGenerator
from .rules import RuleEngine
from .errors import (
    IllegalAction,
    StaleStateSubmission,
    ConfigurationError,
    NOT_YOUR_TURN,
    OWNERSHIP_MISMATCH,
    INVALID_COMBINATION,
    PATTERN_MISMATCH,
    RANK_TOO_LOW,
    SUIT_LOCKED,
    PASS_ON_EMPTY_FIELD,
    EFFECT_PENDING,
    GAME_FINISHED,
    BAD_CHARACTER_COUNT,
)


class Phase(Enum):
    """游戏阶段"""
    PLAYING = "playing"    # 出牌阶段
    FINISHED = "finished"  # 游戏结束


@dataclass(frozen=True)
class EmptyField:
    """新场: 任意合法牌型都能出，禁止 PASS"""
    cards: Tuple[Card, ...] = ()

    @property
    def is_empty(self) -> bool:
        return True


@dataclass(frozen=True)
class HoldingField:
    """
    场上有牌

    Attributes:
        cards: 需要被压过的组合
        owner: 出这手牌的玩家
        action_type: 牌型
    """
    cards: Tuple[Card, ...]
    owner: int
    action_type: ActionType

    @property
    def is_empty(self) -> bool:
        return False


FieldState = Union[EmptyField, HoldingField]

EMPTY_FIELD = EmptyField()


@dataclass(frozen=True)
class PlayerState:
    """
    玩家状态

    Attributes:
        id: 座位 (0-3)
        character_id: 角色 ID
        hand: 手牌
        is_foul_finished: 是否反则上がり
        last_action: 最近一次动作
    """
    id: int
    character_id: int
    hand: Tuple[Card, ...]
    is_foul_finished: bool = False
    last_action: Optional[Action] = None


@dataclass(frozen=True)
class EightCutState:
    """8 切り待处理 (等待外部调用 complete_eight_cut)"""
    cards: Tuple[Card, ...]
    player_id: int
    started_at: int


@dataclass(frozen=True)
class PlayRecord:
    """出牌历史 (PASS 也记录，cards 为空)"""
    player_id: int
    cards: Tuple[Card, ...]
    action_type: ActionType
    step: int
    timestamp: float = field(default_factory=time.time, compare=False)


@dataclass(frozen=True)
class FinishEvent:
    """上がり事件"""
    player_id: int
    is_foul: bool
    rank: int


@dataclass(frozen=True)
class Effects:
    """
    一次状态转移的副作用 (供展示/动画使用)

    Attributes:
        revolution_toggled: 革命翻转
        eight_cut_triggered: 8 切り待处理
        suit_lock_set: 新成立的缚り花色
        spade_three_counter: 黑桃 3 克鬼牌
        field_cleared: 场流
        finish: 上がり事件
        game_finished: 游戏结束
    """
    revolution_toggled: bool = False
    eight_cut_triggered: bool = False
    suit_lock_set: Optional[Suit] = None
    spade_three_counter: bool = False
    field_cleared: bool = False
    finish: Optional[FinishEvent] = None
    game_finished: bool = False


@dataclass(frozen=True)
class GameState:
    """
    不可变游戏状态

    Attributes:
        players: 各座位玩家
        active: 在场玩家 (座位顺序)
        turn: 当前行动玩家
        field: 场况
        last_player: 最近出牌的玩家
        passed: 本场已 PASS 的玩家
        is_revolution: 革命中
        suit_lock: 缚り花色
        finish_order: 离场顺序 (含反则上がり)
        eight_cut: 待处理的 8 切り
        play_history: 出牌历史
        phase: 游戏阶段
        version: 状态版本号，每次转移 +1
    """
    players: Tuple[PlayerState, ...]
    active: Tuple[int, ...]
    turn: int
    field: FieldState = EMPTY_FIELD
    last_player: Optional[int] = None
    passed: FrozenSet[int] = frozenset()
    is_revolution: bool = False
    suit_lock: Optional[Suit] = None
    finish_order: Tuple[int, ...] = ()
    eight_cut: Optional[EightCutState] = None
    play_history: Tuple[PlayRecord, ...] = ()
    phase: Phase = Phase.PLAYING
    version: int = 0

    # ---------------------------------------------------------------- 构造

    @classmethod
    def initial(
        cls,
        character_ids: Sequence[int],
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
    ) -> 'GameState':
        """
        创建初始游戏状态

        Args:
            character_ids: 4 个座位的角色 ID
            rng: 随机数生成器
            seed: 随机种子 (rng 为 None 时使用)

        Returns:
            初始状态，由黑桃 3 持有者先出
        """
        if len(character_ids) != NUM_PLAYERS:
            raise ConfigurationError(
                BAD_CHARACTER_COUNT,
                f"Expected {NUM_PLAYERS} characters, got {len(character_ids)}",
            )
        if rng is None:
            rng = np.random.default_rng(seed)

        hands = deal(new_deck(rng))
        return cls.from_hands(hands, character_ids=character_ids)

    @classmethod
    def from_hands(
        cls,
        hands: Sequence[Sequence[Card]],
        character_ids: Optional[Sequence[int]] = None,
        turn: Optional[int] = None,
        **kwargs,
    ) -> 'GameState':
        """
        从指定手牌构造状态 (用于测试和残局)

        Args:
            hands: 各座位手牌，空手牌的座位视为已离场
            character_ids: 角色 ID，默认 1-4
            turn: 先手，默认黑桃 3 持有者 (无人持有时为第一个在场座位)
            **kwargs: 其余 GameState 字段

        Returns:
            状态
        """
        if len(hands) != NUM_PLAYERS:
            raise ConfigurationError(
                BAD_CHARACTER_COUNT,
                f"Expected {NUM_PLAYERS} hands, got {len(hands)}",
            )
        if character_ids is None:
            character_ids = list(range(1, NUM_PLAYERS + 1))

        players = tuple(
            PlayerState(id=i, character_id=character_ids[i], hand=sort_hand(hand))
            for i, hand in enumerate(hands)
        )
        active = tuple(p.id for p in players if p.hand)

        if turn is None:
            holders = [p.id for p in players if SPADE_THREE in p.hand]
            turn = holders[0] if holders else (active[0] if active else 0)

        finish_order = kwargs.pop(
            "finish_order", tuple(p.id for p in players if not p.hand)
        )
        return cls(
            players=players,
            active=active,
            turn=turn,
            finish_order=finish_order,
            **kwargs,
        )

    # ---------------------------------------------------------------- 查询

    def get_player(self, player_id: int) -> PlayerState:
        return self.players[player_id]

    def get_hand(self, player_id: int) -> Tuple[Card, ...]:
        """获取指定玩家的手牌"""
        return self.players[player_id].hand

    @property
    def current_hand(self) -> Tuple[Card, ...]:
        return self.players[self.turn].hand

    @property
    def field_cards(self) -> Tuple[Card, ...]:
        return self.field.cards

    @property
    def pass_flags(self) -> Dict[int, bool]:
        """在场玩家的 PASS 标记"""
        return {pid: pid in self.passed for pid in self.active}

    @property
    def is_finished(self) -> bool:
        return self.phase == Phase.FINISHED

    @property
    def eight_cut_pending(self) -> bool:
        return self.eight_cut is not None

    @property
    def plays(self) -> Tuple[PlayRecord, ...]:
        """不含 PASS 的出牌历史"""
        return tuple(r for r in self.play_history if r.cards)

    def hand_sizes(self) -> Tuple[int, ...]:
        return tuple(len(p.hand) for p in self.players)

    def get_legal_actions(self, player_id: Optional[int] = None) -> List[Action]:
        """
        获取玩家的合法动作

        场上有牌时包含 PASS；游戏结束或 8 切り待处理时为空

        Returns:
            动作列表
        """
        if self.is_finished or self.eight_cut_pending:
            return []
        pid = self.turn if player_id is None else player_id
        moves = ActionGenerator(self.get_hand(pid)).generate_legal(
            self.field.cards, self.is_revolution, self.suit_lock
        )
        if not self.field.is_empty:
            moves.append(Action.pass_action())
        return moves

    def standings(self) -> List[int]:
        """
        最终名次

        正常上がり按顺序在前；反则上がり排在其后 (越早反则名次越低)；
        仍在场的玩家按手牌数排序

        Returns:
            按名次排列的座位
        """
        normal = [pid for pid in self.finish_order if not self.players[pid].is_foul_finished]
        fouls = [pid for pid in self.finish_order if self.players[pid].is_foul_finished]
        remaining = sorted(
            (pid for pid in range(len(self.players)) if pid not in self.finish_order),
            key=lambda pid: (len(self.players[pid].hand), pid),
        )
        return normal + remaining + list(reversed(fouls))

    def rank_of(self, player_id: int) -> int:
        return self.standings().index(player_id)

    def role_of(self, player_id: int) -> str:
        """大富豪 / 富豪 / 貧民 / 大貧民"""
        return RuleEngine.get_role_name(self.rank_of(player_id))

    # ---------------------------------------------------------------- 校验

    def validate_action(self, action: Action, player_id: Optional[int] = None):
        """
        校验动作，非法时抛出 IllegalAction

        Args:
            action: 动作
            player_id: 提交者，默认当前玩家
        """
        if self.is_finished:
            raise IllegalAction(GAME_FINISHED, "Game is finished")
        if self.eight_cut_pending:
            raise IllegalAction(EFFECT_PENDING, "Eight-cut pending, complete it first")

        pid = self.turn if player_id is None else player_id
        if pid != self.turn:
            raise IllegalAction(NOT_YOUR_TURN, f"Player {pid} acted on player {self.turn}'s turn")

        if action.is_pass:
            if self.field.is_empty:
                raise IllegalAction(PASS_ON_EMPTY_FIELD, "Cannot pass on an empty field")
            return

        hand_ids = {c.id for c in self.get_hand(pid)}
        ids = [c.id for c in action.cards]
        if len(set(ids)) != len(ids) or not set(ids) <= hand_ids:
            raise IllegalAction(OWNERSHIP_MISMATCH, f"Player {pid} does not hold {ids}")

        if RuleEngine.detect_action_type(action.cards) == ActionType.WRONG:
            raise IllegalAction(INVALID_COMBINATION, f"Not a valid combination: {ids}")

        if not RuleEngine.follows_suit_lock(action.cards, self.suit_lock) and not (
            RuleEngine.is_spade_three_counter(action.cards, self.field.cards)
        ):
            raise IllegalAction(SUIT_LOCKED, f"Suit lock {self.suit_lock.value} violated")

        if not RuleEngine.is_valid_play(
            action.cards, self.field.cards, self.is_revolution, self.suit_lock
        ):
            field_type = RuleEngine.detect_action_type(self.field.cards)
            if (
                len(action.cards) != len(self.field.cards)
                or RuleEngine.detect_action_type(action.cards) != field_type
                or (field_type == ActionType.STRAIGHT
                    and RuleEngine.suit_of(action.cards) != RuleEngine.suit_of(self.field.cards))
            ):
                raise IllegalAction(PATTERN_MISMATCH, f"{ids} does not match the field")
            raise IllegalAction(RANK_TOO_LOW, f"{ids} does not beat the field")

    # ---------------------------------------------------------------- 转移

    def apply_action(
        self,
        action: Action,
        player_id: Optional[int] = None,
        expected_version: Optional[int] = None,
    ) -> Tuple['GameState', Effects]:
        """
        执行动作 (唯一的出牌/PASS 入口)

        Args:
            action: 动作
            player_id: 提交者，与当前玩家不符时视为过期提交
            expected_version: 决策时看到的版本号

        Returns:
            (新状态, 副作用)
        """
        if expected_version is not None and expected_version != self.version:
            raise StaleStateSubmission(
                f"Decision computed at version {expected_version}, state is at {self.version}"
            )
        if player_id is not None and player_id != self.turn and not self.is_finished:
            raise StaleStateSubmission(
                f"Player {player_id} submitted on player {self.turn}'s turn"
            )

        self.validate_action(action, player_id)

        if action.is_pass:
            return self._apply_pass(action)
        return self._apply_play(action)

    def with_action(self, action: Action) -> 'GameState':
        """执行动作后的新状态 (丢弃副作用)"""
        return self.apply_action(action)[0]

    def _record(self, pid: int, action: Action) -> Tuple[PlayRecord, ...]:
        record = PlayRecord(
            player_id=pid,
            cards=action.cards,
            action_type=action.action_type,
            step=len(self.play_history),
        )
        return self.play_history + (record,)

    def _apply_play(self, action: Action) -> Tuple['GameState', Effects]:
        pid = self.turn
        player = self.players[pid]
        played_ids = action.card_ids
        new_hand = tuple(c for c in player.hand if c.id not in played_ids)

        players = list(self.players)
        players[pid] = replace(player, hand=new_hand, last_action=action)

        history = self._record(pid, action)
        is_revolution = self.is_revolution
        revolution_toggled = False
        eight_cut = None
        suit_lock_set = None
        spade_three = RuleEngine.is_spade_three_counter(action.cards, self.field.cards)

        if spade_three:
            # 黑桃 3 克鬼牌: 立即场流
            field_state: FieldState = EMPTY_FIELD
            suit_lock = None
        else:
            suit_lock = RuleEngine.check_suit_lock(action.cards, self.field.cards, self.suit_lock)
            if suit_lock is not None and self.suit_lock is None:
                suit_lock_set = suit_lock
            field_state = HoldingField(cards=action.cards, owner=pid, action_type=action.action_type)

            if action.action_type == ActionType.REVOLUTION:
                is_revolution = not is_revolution
                revolution_toggled = True

            if RuleEngine.is_eight_cut(action.cards):
                eight_cut = EightCutState(cards=action.cards, player_id=pid, started_at=self.version + 1)

        state = replace(
            self,
            players=tuple(players),
            field=field_state,
            last_player=pid,
            passed=frozenset(),
            is_revolution=is_revolution,
            suit_lock=suit_lock,
            eight_cut=eight_cut,
            play_history=history,
            version=self.version + 1,
        )

        finish = None
        if not new_hand:
            # 上がり判定使用出牌前的革命状态
            is_foul = not RuleEngine.can_finish_with(action.cards, self.is_revolution)
            state, finish = state._finish_player(pid, is_foul)

        if not state.is_finished and state.turn == pid:
            if spade_three or eight_cut is not None:
                # 黑桃 3 后由本人继续；8 切り待外部完成后再轮转
                pass
            else:
                state = replace(
                    state, turn=RuleEngine.next_active_player(pid, state.active, state.passed)
                )

        effects = Effects(
            revolution_toggled=revolution_toggled,
            eight_cut_triggered=eight_cut is not None,
            suit_lock_set=suit_lock_set,
            spade_three_counter=spade_three,
            field_cleared=spade_three,
            finish=finish,
            game_finished=state.is_finished,
        )
        return state, effects

    def _apply_pass(self, action: Action) -> Tuple['GameState', Effects]:
        pid = self.turn
        players = list(self.players)
        players[pid] = replace(players[pid], last_action=action)
        passed = self.passed | {pid}

        state = replace(
            self,
            players=tuple(players),
            passed=passed,
            play_history=self._record(pid, action),
            version=self.version + 1,
        )

        if RuleEngine.should_clear_field(state.active, passed):
            return state._clear_field(resume_at=self.last_player), Effects(field_cleared=True)

        next_turn = RuleEngine.next_active_player(pid, state.active, passed)
        return replace(state, turn=next_turn), Effects()

    def _clear_field(self, resume_at: Optional[int]) -> 'GameState':
        """场流: 清空场、缚り、PASS 标记，由 resume_at (或其后一位) 开新场"""
        if resume_at is None:
            resume_at = self.turn
        if resume_at in self.active:
            turn = resume_at
        else:
            turn = RuleEngine.next_active_player(resume_at, self.active)
        return replace(
            self,
            field=EMPTY_FIELD,
            suit_lock=None,
            passed=frozenset(),
            turn=turn,
        )

    def _finish_player(self, pid: int, is_foul: bool) -> Tuple['GameState', FinishEvent]:
        """玩家离场；只剩 1 人时其自动垫底，游戏结束"""
        players = list(self.players)
        if is_foul:
            players[pid] = replace(players[pid], is_foul_finished=True)

        earlier = self.finish_order
        if is_foul:
            earlier_fouls = sum(1 for p in earlier if self.players[p].is_foul_finished)
            rank = NUM_PLAYERS - 1 - earlier_fouls
        else:
            rank = sum(1 for p in earlier if not self.players[p].is_foul_finished)

        active = tuple(p for p in self.active if p != pid)
        finish_order = earlier + (pid,)
        turn = self.turn
        if turn == pid and active:
            turn = RuleEngine.next_active_player(pid, active, self.passed)

        state = replace(
            self,
            players=tuple(players),
            active=active,
            passed=self.passed - {pid},
            finish_order=finish_order,
            turn=turn,
        )

        if len(active) <= 1:
            state = replace(
                state,
                active=(),
                passed=frozenset(),
                finish_order=finish_order + tuple(p for p in active if p not in finish_order),
                phase=Phase.FINISHED,
            )

        return state, FinishEvent(player_id=pid, is_foul=is_foul, rank=rank)

    def complete_eight_cut(self) -> 'GameState':
        """
        完成 8 切り: 场流后由出 8 的玩家 (或其后一位) 开新场

        Returns:
            新状态
        """
        if self.eight_cut is None:
            raise IllegalAction(EFFECT_PENDING, "No eight-cut pending")
        cutter = self.eight_cut.player_id
        state = replace(self, eight_cut=None, last_player=cutter, version=self.version + 1)
        if state.is_finished:
            return replace(state, field=EMPTY_FIELD, suit_lock=None)
        return state._clear_field(resume_at=cutter)

    def emergency_advance(self) -> 'GameState':
        """
        调度器安全阀: 不经动作强制推进

        有待处理的 8 切り时直接完成；否则轮到下一位未 PASS 的在场玩家

        Returns:
            新状态
        """
        if self.is_finished:
            return self
        if self.eight_cut is not None:
            return self.complete_eight_cut()
        next_turn = RuleEngine.next_active_player(self.turn, self.active, self.passed)
        return replace(self, turn=next_turn, version=self.version + 1)


def new_game(
    character_ids: Sequence[int],
    rng: Optional[np.random.Generator] = None,
) -> GameState:
    """洗牌、发牌、由黑桃 3 持有者先出"""
    return GameState.initial(character_ids, rng=rng)


def legal_moves(state: GameState) -> List[Action]:
    """当前玩家的合法动作"""
    return state.get_legal_actions()
