"""
AI 配置

按角色定义记忆、LowCardFirst 采用率、8 切り倾向、风险系数、选择方式、
プレイアウト次数和相性补正
"""
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Dict, FrozenSet, Optional


class MemoryTendency(Enum):
    """记忆倾向"""
    HIGH_CARD = "HighCard"
    MID_CARD = "MidCard"
    SUIT_FLOW = "SuitFlow"
    REVOLUTION_SIGNS = "RevolutionSigns"
    PLAYER_STYLE = "PlayerStyle"


class SelectionMethod(Enum):
    """行动选择方式"""
    SOFTMAX = "softmax"
    EPSILON = "epsilon"


@dataclass(frozen=True)
class MemoryProfile:
    """
    记忆配置

    Attributes:
        probability: 每次决策时回忆成功的概率
        tendencies: 能使用的记忆类别
        level: 记忆水平标签
        usage: 使用方式标签
    """
    probability: float = 0.3
    tendencies: FrozenSet[MemoryTendency] = frozenset({MemoryTendency.HIGH_CARD})
    level: str = "low"
    usage: str = "basic"


@dataclass(frozen=True)
class EightCutTendency:
    """
    8 切り倾向

    Attributes:
        min_hand_count: 手牌数上限 (通常模式)
        min_hand_count_relaxed: 手牌数上限 (宽松模式)
        aggressive: 对手快上がり时仍然切
        strategic: 非终盘时要求更少手牌
    """
    min_hand_count: int = 8
    min_hand_count_relaxed: int = 10
    aggressive: bool = False
    strategic: bool = False


@dataclass(frozen=True)
class SelectionConfig:
    """选择方式: softmax 用 param 作温度，epsilon 用 param 作探索率"""
    method: SelectionMethod = SelectionMethod.SOFTMAX
    param: float = 1.0


@dataclass(frozen=True)
class CompatibilityConfig:
    """
    相性补正 (对 2主 在场时生效)

    Attributes:
        preservation: 强牌温存权重
        strategy: 定石判断权重
        suit_lock: 缚り中的补正
    """
    preservation: float = 0.0
    strategy: float = 0.0
    suit_lock: float = 0.0


# 相性补正的对象角色
RIVAL_CHARACTER_ID = 2

# 进行 playout 精算的角色
PLAYOUT_CHARACTERS = frozenset({1, 3, 10, 11})


@dataclass(frozen=True)
class AIProfile:
    """
    单个角色的 AI 配置

    Attributes:
        memory: 记忆配置
        low_card_first_rate: LowCardFirst 评估的采用率
        eight_cut: 8 切り倾向
        risk_modifier: 反则风险系数
        selection: 选择方式
        playout_count: playout 次数
        compatibility: 相性补正，None 表示无
    """
    memory: MemoryProfile = field(default_factory=MemoryProfile)
    low_card_first_rate: float = 0.5
    eight_cut: EightCutTendency = field(default_factory=EightCutTendency)
    risk_modifier: float = 1.0
    selection: SelectionConfig = field(default_factory=SelectionConfig)
    playout_count: int = 25
    compatibility: Optional[CompatibilityConfig] = None

    @classmethod
    def from_dict(cls, d: dict) -> 'AIProfile':
        valid_keys = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in d.items() if k in valid_keys}
        if isinstance(filtered.get("memory"), dict):
            memory = dict(filtered["memory"])
            if "tendencies" in memory:
                memory["tendencies"] = frozenset(MemoryTendency(t) for t in memory["tendencies"])
            filtered["memory"] = MemoryProfile(**memory)
        if isinstance(filtered.get("eight_cut"), dict):
            filtered["eight_cut"] = EightCutTendency(**filtered["eight_cut"])
        if isinstance(filtered.get("selection"), dict):
            selection = dict(filtered["selection"])
            selection["method"] = SelectionMethod(selection.get("method", "softmax"))
            filtered["selection"] = SelectionConfig(**selection)
        if isinstance(filtered.get("compatibility"), dict):
            filtered["compatibility"] = CompatibilityConfig(**filtered["compatibility"])
        return cls(**filtered)


def _memory(probability: float, *tendencies: MemoryTendency, level: str, usage: str) -> MemoryProfile:
    return MemoryProfile(probability, frozenset(tendencies), level, usage)


def _softmax(temperature: float) -> SelectionConfig:
    return SelectionConfig(SelectionMethod.SOFTMAX, temperature)


def _epsilon(epsilon: float) -> SelectionConfig:
    return SelectionConfig(SelectionMethod.EPSILON, epsilon)


H = MemoryTendency.HIGH_CARD
M = MemoryTendency.MID_CARD
S = MemoryTendency.SUIT_FLOW
R = MemoryTendency.REVOLUTION_SIGNS
P = MemoryTendency.PLAYER_STYLE


AI_PROFILES: Dict[int, AIProfile] = {
    1: AIProfile(
        memory=_memory(0.5, H, S, level="normal", usage="balanced"),
        low_card_first_rate=0.7,
        eight_cut=EightCutTendency(8, 9, aggressive=False, strategic=True),
        risk_modifier=0.8,
        selection=_softmax(0.8),
        playout_count=30,
        compatibility=CompatibilityConfig(preservation=0.2, strategy=0.1),
    ),
    2: AIProfile(
        memory=_memory(0.2, R, level="very_low", usage="aggressive"),
        low_card_first_rate=0.3,
        eight_cut=EightCutTendency(9, 10, aggressive=True, strategic=False),
        risk_modifier=1.3,
        selection=_epsilon(0.3),
        playout_count=20,
    ),
    3: AIProfile(
        memory=_memory(0.95, H, R, S, P, level="very_high", usage="analytical"),
        low_card_first_rate=0.9,
        eight_cut=EightCutTendency(7, 8, aggressive=False, strategic=True),
        risk_modifier=0.6,
        selection=_softmax(0.6),
        playout_count=50,
        compatibility=CompatibilityConfig(preservation=0.1, strategy=0.2),
    ),
    4: AIProfile(
        memory=_memory(0.75, H, R, level="high", usage="defensive"),
        low_card_first_rate=0.7,
        eight_cut=EightCutTendency(8, 9, aggressive=False, strategic=True),
        risk_modifier=0.7,
        selection=_softmax(0.7),
        playout_count=25,
        compatibility=CompatibilityConfig(preservation=0.2, strategy=0.1, suit_lock=-0.1),
    ),
    5: AIProfile(
        memory=_memory(0.4, S, M, level="low", usage="hedonistic"),
        low_card_first_rate=0.6,
        eight_cut=EightCutTendency(8, 9, aggressive=True, strategic=False),
        risk_modifier=1.1,
        selection=_softmax(1.0),
        playout_count=15,
    ),
    6: AIProfile(
        memory=_memory(0.1, level="very_low", usage="none"),
        low_card_first_rate=0.1,
        eight_cut=EightCutTendency(9, 10, aggressive=True, strategic=False),
        risk_modifier=1.4,
        selection=_epsilon(0.4),
        playout_count=20,
    ),
    7: AIProfile(
        memory=_memory(0.4, S, level="low", usage="basic"),
        low_card_first_rate=0.8,
        eight_cut=EightCutTendency(8, 9, aggressive=False, strategic=False),
        risk_modifier=0.9,
        selection=_softmax(0.85),
        playout_count=25,
    ),
    8: AIProfile(
        memory=_memory(0.8, H, S, M, level="very_high", usage="instinct"),
        low_card_first_rate=0.9,
        eight_cut=EightCutTendency(7, 8, aggressive=False, strategic=True),
        risk_modifier=0.7,
        selection=_softmax(0.7),
        playout_count=15,
        compatibility=CompatibilityConfig(preservation=0.2, strategy=0.1),
    ),
    9: AIProfile(
        memory=_memory(0.3, R, H, level="low", usage="experimental"),
        low_card_first_rate=0.3,
        eight_cut=EightCutTendency(9, 10, aggressive=True, strategic=False),
        risk_modifier=1.2,
        selection=_epsilon(0.3),
        playout_count=30,
    ),
    10: AIProfile(
        memory=_memory(0.85, H, S, P, M, level="high", usage="tactical"),
        low_card_first_rate=0.85,
        eight_cut=EightCutTendency(7, 8, aggressive=False, strategic=True),
        risk_modifier=0.6,
        selection=_softmax(0.65),
        playout_count=45,
    ),
    11: AIProfile(
        memory=_memory(0.5, H, P, level="normal", usage="endgame"),
        low_card_first_rate=0.8,
        eight_cut=EightCutTendency(8, 9, aggressive=False, strategic=True),
        risk_modifier=0.8,
        selection=_softmax(0.75),
        playout_count=50,
    ),
}

DEFAULT_PROFILE = AIProfile()


def get_profile(character_id: int) -> AIProfile:
    """角色的 AI 配置，未登记的角色使用默认值"""
    return AI_PROFILES.get(character_id, DEFAULT_PROFILE)
