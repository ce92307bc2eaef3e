"""
大富豪 Gymnasium 环境

观战用的牌桌驱动: 每次 step 提交当前玩家的动作，
8 切り的效果留到下一次 step 完成 (中间可插入展示动画)
"""
from dataclasses import dataclass
from typing import Dict, Any, Tuple, Optional, List, Union
import logging

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from core.state import GameState, Effects
from core.actions import Action
from core.cards import NUM_PLAYERS, array_to_cards, cards_to_str
from core.errors import IllegalAction, StaleStateSubmission
from ai.characters import get_character, get_random_characters

from .observation import ObservationBuilder, DECK_SIZE
from .reward import RewardCalculator, RewardConfig, RewardType

logger = logging.getLogger(__name__)

ActionLike = Union[None, int, np.integer, np.ndarray, Action]


@dataclass
class TableConfig:
    """
    牌桌配置

    Attributes:
        character_ids: 固定的 4 个角色，None 表示每局随机抽取
        max_idle_steps: 连续多少次无效提交后强制推进
        max_steps: 单局最大步数 (超过则截断)
        reward_type: 奖励类型 ("sparse", "shaped")
        invalid_action_penalty: 非法提交的奖励
        history_length: 观测中的历史长度
    """
    character_ids: Optional[Tuple[int, ...]] = None
    max_idle_steps: int = 3
    max_steps: int = 2000
    reward_type: str = "sparse"
    invalid_action_penalty: float = -1.0
    history_length: int = 16

    @classmethod
    def from_dict(cls, d: dict) -> 'TableConfig':
        valid_keys = cls.__dataclass_fields__.keys()
        filtered = {k: v for k, v in d.items() if k in valid_keys}
        if filtered.get("character_ids") is not None:
            filtered["character_ids"] = tuple(filtered["character_ids"])
        return cls(**filtered)


class DaifugoEnv(gym.Env):
    """
    大富豪 Gymnasium 环境

    动作可以是:
    - Action 对象
    - 合法动作列表 (info["legal_actions"]) 中的索引
    - 54 维牌掩码 (全 0 为 PASS)
    - None (不提交，计入看门狗)

    API:
    - reset() -> observation, info
    - step(action) -> observation, reward, terminated, truncated, info
    """

    metadata = {
        "render_modes": ["human", "ansi"],
        "name": "Daifugo-v1",
    }

    def __init__(
        self,
        config: Optional[TableConfig] = None,
        render_mode: Optional[str] = None,
        seed: Optional[int] = None,
    ):
        """
        Args:
            config: 牌桌配置
            render_mode: 渲染模式 ("human", "ansi", None)
            seed: 随机种子
        """
        super().__init__()

        self.config = config or TableConfig()
        self.render_mode = render_mode
        self._seed = seed

        self._obs_builder = ObservationBuilder(history_length=self.config.history_length)
        self._reward_calculator = RewardCalculator(
            RewardConfig(reward_type=RewardType(self.config.reward_type))
        )

        self._state: Optional[GameState] = None
        self._prev_state: Optional[GameState] = None
        self._idle_steps = 0
        self._step_count = 0

        self._define_spaces()

    def _define_spaces(self):
        """定义观测和动作空间"""
        n = self.config.history_length
        self.action_space = spaces.MultiBinary(DECK_SIZE)
        self.observation_space = spaces.Dict({
            "hand": spaces.Box(0, 1, shape=(DECK_SIZE,), dtype=np.float32),
            "field": spaces.Box(0, 1, shape=(DECK_SIZE,), dtype=np.float32),
            "played_cards": spaces.Box(0, 1, shape=(NUM_PLAYERS, DECK_SIZE), dtype=np.float32),
            "history": spaces.Box(0, 1, shape=(n, DECK_SIZE), dtype=np.float32),
            "cards_left": spaces.Box(0, 1, shape=(NUM_PLAYERS,), dtype=np.float32),
            "position": spaces.Box(0, 1, shape=(NUM_PLAYERS,), dtype=np.float32),
            "passed": spaces.Box(0, 1, shape=(NUM_PLAYERS,), dtype=np.float32),
            "suit_lock": spaces.Box(0, 1, shape=(4,), dtype=np.float32),
            "flags": spaces.Box(0, 1, shape=(4,), dtype=np.float32),
        })

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        重置环境: 抽角色、洗牌、发牌

        Args:
            seed: 随机种子
            options: {"character_ids": [...]} 可覆盖配置中的角色

        Returns:
            (observation, info) 元组
        """
        super().reset(seed=seed if seed is not None else self._seed)
        self._seed = None

        character_ids = (options or {}).get("character_ids", self.config.character_ids)
        if character_ids is None:
            character_ids = [c.id for c in get_random_characters(NUM_PLAYERS, self.np_random)]
        else:
            for cid in character_ids:
                get_character(cid)

        self._state = GameState.initial(character_ids, rng=self.np_random)
        self._prev_state = None
        self._idle_steps = 0
        self._step_count = 0

        logger.debug("New game: characters=%s starter=%d", list(character_ids), self._state.turn)

        obs = self._build_observation()
        info = self._build_info()

        if self.render_mode == "human":
            self.render()

        return obs, info

    def step(
        self,
        action: ActionLike,
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        执行动作

        Args:
            action: 当前玩家的动作

        Returns:
            (observation, reward, terminated, truncated, info) 元组
        """
        return self.submit(action)

    def submit(
        self,
        action: ActionLike,
        player_id: Optional[int] = None,
        expected_version: Optional[int] = None,
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        提交动作 (带过期检查)

        有待处理的 8 切り时先完成它，此时的提交视为基于过期状态而丢弃

        Args:
            action: 动作
            player_id: 提交者
            expected_version: 决策时看到的状态版本

        Returns:
            (observation, reward, terminated, truncated, info) 元组
        """
        if self._state is None:
            raise RuntimeError("Environment not reset. Call reset() first.")
        if self._state.is_finished:
            raise RuntimeError("Game is finished. Call reset() first.")

        self._prev_state = self._state
        self._step_count += 1
        extra: Dict[str, Any] = {}
        reward = 0.0

        if self._state.eight_cut_pending:
            cutter = self._state.eight_cut.player_id
            self._state = self._state.complete_eight_cut()
            self._idle_steps = 0
            extra["effects"] = Effects(field_cleared=True)
            extra["eight_cut_completed"] = cutter
            if action is not None:
                logger.debug("Discarding submission made while an eight-cut was pending")
                extra["discarded"] = True
        elif action is None:
            extra["error"] = "NO_SUBMISSION"
            reward = self._register_idle(extra)
        else:
            actor = self._state.turn
            try:
                concrete = self._decode_action(action)
                self._state, effects = self._state.apply_action(concrete, player_id, expected_version)
            except (IllegalAction, StaleStateSubmission) as e:
                logger.warning("Rejected submission from player %d: %s", actor, e)
                extra["error"] = e.code
                reward = self._register_idle(extra)
            else:
                self._idle_steps = 0
                extra["effects"] = effects
                extra["actor"] = actor
                reward = self._reward_calculator.compute(self._state, self._prev_state, actor)
                extra["rewards"] = self._reward_calculator.compute_all(self._state, self._prev_state)

        terminated = self._state.is_finished
        truncated = not terminated and self._step_count >= self.config.max_steps

        obs = self._build_observation()
        info = self._build_info()
        info.update(extra)

        if self.render_mode == "human":
            self.render()

        return obs, reward, terminated, truncated, info

    def _register_idle(self, extra: Dict[str, Any]) -> float:
        """记一次无效提交，超过阈值时强制推进"""
        self._idle_steps += 1
        if self._idle_steps >= self.config.max_idle_steps:
            logger.warning(
                "Watchdog: %d idle steps on player %d, forcing advance",
                self._idle_steps, self._state.turn,
            )
            self._state = self._state.emergency_advance()
            self._idle_steps = 0
            extra["emergency_advance"] = True
        return self.config.invalid_action_penalty

    def _decode_action(self, action: ActionLike) -> Action:
        """解码动作"""
        if isinstance(action, Action):
            return action
        if isinstance(action, (int, np.integer)):
            legal_actions = self._state.get_legal_actions()
            if not 0 <= action < len(legal_actions):
                raise ValueError(
                    f"Invalid action index: {action}. "
                    f"Valid range: 0-{len(legal_actions) - 1}"
                )
            return legal_actions[action]
        if isinstance(action, np.ndarray):
            cards = array_to_cards(action)
            return Action.from_cards(cards) if cards else Action.pass_action()
        raise ValueError(f"Invalid action type: {type(action)}")

    def _build_observation(self) -> Dict[str, np.ndarray]:
        """构建观测"""
        return self._obs_builder.build(self._state).to_dict()

    def _build_info(self) -> Dict[str, Any]:
        """构建 info 字典"""
        state = self._state
        info = {
            "current_player": state.turn,
            "version": state.version,
            "phase": state.phase.value,
            "legal_actions": state.get_legal_actions(),
            "hand_sizes": state.hand_sizes(),
            "is_revolution": state.is_revolution,
            "suit_lock": state.suit_lock.value if state.suit_lock else None,
            "eight_cut_pending": state.eight_cut_pending,
            "step_count": self._step_count,
        }

        if state.is_finished:
            standings = state.standings()
            info["standings"] = standings
            info["roles"] = {pid: state.role_of(pid) for pid in standings}

        return info

    def render(self) -> Optional[str]:
        """渲染环境"""
        if self.render_mode == "ansi" or self.render_mode == "human":
            return self._render_text()
        return None

    def _render_text(self) -> str:
        """文本渲染"""
        state = self._state
        lines = []
        lines.append("=" * 50)
        lines.append(f"Phase: {state.phase.value}  Version: {state.version}")
        flags = []
        if state.is_revolution:
            flags.append("REVOLUTION")
        if state.suit_lock is not None:
            flags.append(f"LOCK {state.suit_lock.value}")
        if state.eight_cut_pending:
            flags.append("EIGHT-CUT")
        if flags:
            lines.append(" | ".join(flags))

        for player in state.players:
            name = get_character(player.character_id).name
            marker = ">" if player.id == state.turn and not state.is_finished else " "
            status = ""
            if player.id in state.passed:
                status = " (pass)"
            elif player.id in state.finish_order:
                status = " (foul)" if player.is_foul_finished else " (out)"
            lines.append(f"{marker} P{player.id} {name}: {cards_to_str(player.hand)} [{len(player.hand)}]{status}")

        field = cards_to_str(state.field.cards) if not state.field.is_empty else "-"
        lines.append(f"Field: {field}")

        if state.is_finished:
            roles = ", ".join(f"P{pid}={state.role_of(pid)}" for pid in state.standings())
            lines.append(f"Result: {roles}")

        lines.append("=" * 50)

        output = "\n".join(lines)
        if self.render_mode == "human":
            print(output)
        return output

    def close(self):
        """关闭环境"""
        pass

    @property
    def state(self) -> Optional[GameState]:
        """获取当前状态"""
        return self._state

    @property
    def idle_steps(self) -> int:
        return self._idle_steps

    def get_legal_actions(self) -> List[Action]:
        """获取当前合法动作"""
        if self._state is None:
            return []
        return self._state.get_legal_actions()

    def sample_action(self) -> Optional[Action]:
        """随机采样一个合法动作 (8 切り待处理时为 None)"""
        legal_actions = self.get_legal_actions()
        if not legal_actions:
            return None
        idx = self.np_random.integers(len(legal_actions))
        return legal_actions[idx]


def make_env(config: Optional[Union[TableConfig, dict]] = None, **kwargs) -> DaifugoEnv:
    """
    工厂函数：创建环境

    Args:
        config: 牌桌配置 (对象或字典)
        **kwargs: 环境参数

    Returns:
        DaifugoEnv 实例
    """
    if isinstance(config, dict):
        config = TableConfig.from_dict(config)
    return DaifugoEnv(config=config, **kwargs)
