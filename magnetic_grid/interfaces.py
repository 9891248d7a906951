"""
核心接口定义

引擎依赖的外部协作者：持久化与触觉反馈。
两者都是 fire-and-forget，失败不影响布局状态
"""

from abc import ABC, abstractmethod
from enum import Enum

from magnetic_grid.models.field import ConfigMap


class HapticKind(Enum):
    """触觉反馈类型"""
    DRAG_START = "drag_start"        # 长按开始拖拽
    RESIZE_STEP = "resize_step"      # 宽度走了一步


class ILayoutRepository(ABC):
    """
    布局存储接口
    
    实现：
    - InMemoryLayoutRepository: 内存（测试、回放）
    - JsonLayoutRepository: 每个 key 一个 JSON 记录文件
    """
    
    @abstractmethod
    def load(self, key: str) -> ConfigMap:
        """
        读取配置表
        
        Returns:
            配置表；不存在时为空
        """
        pass
    
    @abstractmethod
    def save(self, key: str, configs: ConfigMap) -> None:
        """覆盖写入配置表"""
        pass
    
    @abstractmethod
    def exists(self, key: str) -> bool:
        """是否存在非空配置"""
        pass
    
    @abstractmethod
    def clear(self, key: str) -> None:
        """删除配置"""
        pass


class IHapticFeedback(ABC):
    """触觉反馈接口"""
    
    @abstractmethod
    def trigger(self, kind: HapticKind) -> None:
        """触发一次反馈"""
        pass
