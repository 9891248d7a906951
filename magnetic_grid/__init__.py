"""
磁吸网格布局引擎 v1

Core modules:
- models: 数据模型与常量
- collision: 碰撞检测（纯函数）
- snap_engine: 离散宽度与位置吸附
- preview: 拖拽预览模拟
- drag / resize: 交互控制器
- auto_expand: 提交后的空隙填充
- animation: 过渡动画编排
- session: 表单会话（唯一可变状态持有者）
- audit: 审计系统
"""

__version__ = "1.0.0-dev"
