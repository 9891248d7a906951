"""
时间工具函数
"""

from datetime import datetime

from magnetic_grid.utils.types import SessionId


def generate_session_id(timestamp: datetime = None) -> SessionId:
    """
    生成会话 ID
    
    格式: s{YYYYMMDD}_{HHmmss}
    示例: s20250629_143000
    """
    if timestamp is None:
        timestamp = datetime.now()
    return SessionId(f"s{timestamp.strftime('%Y%m%d_%H%M%S')}")


def ms_to_seconds(duration_ms: int) -> float:
    """毫秒转秒（动画时长配置以毫秒计）"""
    return max(0, duration_ms) / 1000.0
