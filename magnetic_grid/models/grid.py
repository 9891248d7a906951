"""
网格常量

6 列固定网格、离散宽度表以及经验调优的交互阈值。
阈值是行为相关的，保持原值，不要重新推导。
"""

from typing import Tuple

# 网格
TOTAL_COLUMNS = 6
COLUMN_WIDTH = 1.0 / TOTAL_COLUMNS
ROW_HEIGHT = 70.0               # 行高（像素）
MAX_ROWS = 12                   # 默认行数上限

# 离散宽度表（按列跨度 2/3/4/6 排序）
DISCRETE_WIDTHS: Tuple[float, ...] = (
    2 / 6,   # 1/3
    3 / 6,   # 1/2
    4 / 6,   # 2/3
    6 / 6,   # 1
)
FULL_WIDTH = 1.0

# 几何容差
OVERLAP_EPSILON = 0.001         # 宽度比例

# 交互阈值
DRAG_THRESHOLD_PX = 40.0        # 超过后开始预览
ACCUMULATION_THRESHOLD = 0.10   # 调整大小累计量（容器宽度比例）
SIGNIFICANT_GAP_THRESHOLD = 0.05
WIDTH_CHANGE_THRESHOLD = 0.01
EQUAL_WIDTH_TOLERANCE = 0.05

# 行边界判定
ROW_START_EDGE = 0.05
ROW_END_EDGE = 0.95
FULL_WIDTH_SNAP = 0.99

# 放置区
PUSH_DOWN_BAND = 0.10           # 行高上下各 10%
LEFT_ZONE_BOUNDARY = 0.35
RIGHT_ZONE_BOUNDARY = 0.65

# 动画（毫秒）
PREVIEW_DURATION_MS = 150
COMMIT_DURATION_MS = 300
REVERT_DURATION_MS = 200
DEFAULT_DURATION_MS = 300


def column_span(width: float) -> int:
    """宽度对应的列跨度（2/3/4/6）"""
    if width <= 2 / 6 + OVERLAP_EPSILON:
        return 2
    if width <= 3 / 6 + OVERLAP_EPSILON:
        return 3
    if width <= 4 / 6 + OVERLAP_EPSILON:
        return 4
    return 6
