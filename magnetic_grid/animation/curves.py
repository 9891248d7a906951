"""
缓动曲线

全部满足 f(0) = 0, f(1) = 1 且单调不减；输入先截断到 [0, 1]
"""

from typing import Callable, Dict

Curve = Callable[[float], float]


def _clamp01(t: float) -> float:
    return 0.0 if t < 0.0 else 1.0 if t > 1.0 else t


def linear(t: float) -> float:
    return _clamp01(t)


def ease_out_cubic(t: float) -> float:
    """提交动画"""
    t = _clamp01(t)
    return 1.0 - (1.0 - t) ** 3


def ease_out_quart(t: float) -> float:
    """预览动画"""
    t = _clamp01(t)
    return 1.0 - (1.0 - t) ** 4


def ease_in_out(t: float) -> float:
    """回退动画（三次对称）"""
    t = _clamp01(t)
    if t < 0.5:
        return 4.0 * t ** 3
    return 1.0 - (-2.0 * t + 2.0) ** 3 / 2.0


CURVES: Dict[str, Curve] = {
    "linear": linear,
    "ease_out_cubic": ease_out_cubic,
    "ease_out_quart": ease_out_quart,
    "ease_in_out": ease_in_out,
}


def get_curve(name: str) -> Curve:
    """按名称取曲线，未知名称抛出 KeyError"""
    if name not in CURVES:
        raise KeyError(f"Unknown curve: {name}")
    return CURVES[name]
