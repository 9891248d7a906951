"""
几何工具函数
"""

import math


def clamp(value: float, low: float, high: float) -> float:
    """把 value 限制在 [low, high]"""
    if high < low:
        return low
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """四舍五入（0.5 向上），与 Python 内置 round 的银行家舍入不同"""
    return int(math.floor(value + 0.5))


def approx_equal(a: float, b: float, tolerance: float) -> bool:
    """容差比较"""
    return abs(a - b) <= tolerance
