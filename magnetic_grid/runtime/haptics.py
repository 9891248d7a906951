"""
触觉反馈实现

没有真实设备时使用：记录触发次数，可选打印
"""

from collections import Counter
from typing import List

from magnetic_grid.interfaces import HapticKind, IHapticFeedback


class RecordingHapticFeedback(IHapticFeedback):
    """记录每次触发（测试和回放）"""
    
    def __init__(self, verbose: bool = False):
        self.verbose = verbose
        self.triggered: List[HapticKind] = []
    
    def trigger(self, kind: HapticKind) -> None:
        self.triggered.append(kind)
        if self.verbose:
            print(f"  [HAPTIC] {kind.value}")
    
    def counts(self) -> Counter:
        return Counter(self.triggered)
