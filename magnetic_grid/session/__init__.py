"""
会话模块

包含:
- layout_session: 表单布局会话（状态持有者与提交流程）
"""

from magnetic_grid.session.layout_session import LayoutSession

__all__ = ["LayoutSession"]
