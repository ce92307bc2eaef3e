"""
角色定义

11 名预设角色，每局随机抽 4 名。角色是静态配置，进程内不可变
"""
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np

from core.errors import ConfigurationError, UNKNOWN_CHARACTER, BAD_CHARACTER_COUNT


@dataclass(frozen=True)
class SpecialRules:
    """特殊规则偏好"""
    prefer_revolution: bool = False
    prefer_eight_cut: bool = False
    prefer_suit_lock: bool = False
    conserve_strong: bool = False
    aggressive_early: bool = False


@dataclass(frozen=True)
class Character:
    """
    角色

    Attributes:
        id: 角色 ID (1-11)
        name: 名称
        personality: 性格标签
        color: 显示颜色
        weights: Monte Carlo 评估权重 w1..w5
        special_rules: 特殊规则偏好
        focus_on_endgame: 重视终盘 (11主)
    """
    id: int
    name: str
    personality: str
    color: str
    weights: Tuple[float, ...]
    special_rules: SpecialRules
    focus_on_endgame: bool = False


CHARACTERS: Tuple[Character, ...] = (
    Character(
        id=1, name="1主", personality="strategic_aggressive", color="#191970",
        weights=(3, 2, 1, 2, 1),
        special_rules=SpecialRules(True, True, True, True, False),
    ),
    Character(
        id=2, name="2主", personality="chaotic_early", color="#1e90ff",
        weights=(2, 2, 3, 1, 1),
        special_rules=SpecialRules(True, True, True, False, True),
    ),
    Character(
        id=3, name="3主", personality="analytical_patient", color="#0000cd",
        weights=(5, 2, 3, 2),
        special_rules=SpecialRules(False, False, False, True, False),
    ),
    Character(
        id=4, name="4主", personality="cautious_defensive", color="#3cb371",
        weights=(3, 3, 1, 2, 4),
        special_rules=SpecialRules(False, False, False, True, False),
    ),
    Character(
        id=5, name="5主", personality="strategic_aggressive", color="#7b68ee",
        weights=(3, 2, 2, 2, 1),
        special_rules=SpecialRules(True, False, True, True, False),
    ),
    Character(
        id=6, name="6主", personality="energetic_momentum", color="#00bfff",
        weights=(4, 3, 2, 1),
        special_rules=SpecialRules(True, True, True, False, True),
    ),
    Character(
        id=7, name="7主", personality="studious_basic", color="#20b2aa",
        weights=(3, 2, 1, 1),
        special_rules=SpecialRules(False, False, False, True, False),
    ),
    Character(
        id=8, name="8主", personality="lucky_instinct", color="#ff8c00",
        weights=(4, 2, 3),
        special_rules=SpecialRules(True, True, False, False, True),
    ),
    Character(
        id=9, name="9主", personality="experimental_bold", color="#da70d6",
        weights=(2, 4, 2, 2),
        special_rules=SpecialRules(True, True, True, False, True),
    ),
    Character(
        id=10, name="10主", personality="master_tactical", color="#b22222",
        weights=(4, 2, -3, 2),
        special_rules=SpecialRules(False, False, False, True, False),
    ),
    Character(
        id=11, name="11主", personality="quiet_endgame", color="#9932cc",
        weights=(3, 4, 2, 3),
        special_rules=SpecialRules(False, False, False, True, False),
        focus_on_endgame=True,
    ),
)

CHARACTER_BY_ID: Dict[int, Character] = {c.id: c for c in CHARACTERS}


def get_character(character_id: int) -> Character:
    """按 ID 获取角色"""
    try:
        return CHARACTER_BY_ID[character_id]
    except KeyError:
        raise ConfigurationError(UNKNOWN_CHARACTER, f"Unknown character id {character_id}") from None


def get_random_characters(
    count: int = 4,
    rng: Optional[np.random.Generator] = None,
) -> List[Character]:
    """
    随机抽取不重复的角色

    Args:
        count: 数量
        rng: 随机数生成器

    Returns:
        角色列表
    """
    if not 0 < count <= len(CHARACTERS):
        raise ConfigurationError(
            BAD_CHARACTER_COUNT, f"Cannot pick {count} of {len(CHARACTERS)} characters"
        )
    if rng is None:
        rng = np.random.default_rng()
    picked = rng.choice(len(CHARACTERS), size=count, replace=False)
    return [CHARACTERS[i] for i in picked]
