"""
错误类型

规则引擎在 apply_action 边界拒绝非法提交，状态不会被修改
"""

# 错误码
NOT_YOUR_TURN = "NOT_YOUR_TURN"
OWNERSHIP_MISMATCH = "OWNERSHIP_MISMATCH"
INVALID_COMBINATION = "INVALID_COMBINATION"
PATTERN_MISMATCH = "PATTERN_MISMATCH"
RANK_TOO_LOW = "RANK_TOO_LOW"
SUIT_LOCKED = "SUIT_LOCKED"
PASS_ON_EMPTY_FIELD = "PASS_ON_EMPTY_FIELD"
EFFECT_PENDING = "EFFECT_PENDING"
GAME_FINISHED = "GAME_FINISHED"
STALE_VERSION = "STALE_VERSION"
NO_LEGAL_MOVE = "NO_LEGAL_MOVE"
BAD_CHARACTER_COUNT = "BAD_CHARACTER_COUNT"
UNKNOWN_CHARACTER = "UNKNOWN_CHARACTER"


class GameError(Exception):
    """游戏错误基类"""

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")


class IllegalAction(GameError):
    """动作未通过规则校验 (牌型、大小、缚り、空场 PASS 等)"""


class NoLegalMove(GameError):
    """没有任何合法动作，说明状态已损坏"""

    def __init__(self, message: str):
        super().__init__(NO_LEGAL_MOVE, message)


class StaleStateSubmission(GameError):
    """基于过期状态计算出的决策"""

    def __init__(self, message: str):
        super().__init__(STALE_VERSION, message)


class ConfigurationError(GameError):
    """开局配置错误 (角色数量不为 4 等)"""
