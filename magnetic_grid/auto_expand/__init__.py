"""
自动扩展模块

包含:
- engine: 提交后的空隙填充与行压缩
"""

from magnetic_grid.auto_expand.engine import (
    AutoExpandEngine,
    AutoExpandResult,
    ExpansionRule,
    Gap,
    GapKind,
    RowExpansion,
)

__all__ = [
    "AutoExpandEngine",
    "AutoExpandResult",
    "ExpansionRule",
    "Gap",
    "GapKind",
    "RowExpansion",
]
