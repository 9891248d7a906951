"""
工具模块
"""

from magnetic_grid.utils.types import SessionId, ConfigHash
from magnetic_grid.utils.timeutils import generate_session_id, ms_to_seconds
from magnetic_grid.utils.geometry import clamp, round_half_up, approx_equal

__all__ = [
    "SessionId",
    "ConfigHash",
    "generate_session_id",
    "ms_to_seconds",
    "clamp",
    "round_half_up",
    "approx_equal",
]
