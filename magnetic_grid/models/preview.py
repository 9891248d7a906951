"""
预览模型

预览状态从不持久化，提交或取消时丢弃
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from magnetic_grid.models.field import ConfigMap, Position


@dataclass(frozen=True)
class PreviewInfo:
    """
    预览信息
    
    用于绘制拖拽过程中的临时指示
    """
    has_space: bool
    target_position: Optional[Position] = None
    target_columns: Optional[Tuple[int, int]] = None   # (start, span)
    message: str = ""
    is_push_down: bool = False
    preview_configs: ConfigMap = field(default_factory=dict)
    
    @classmethod
    def no_space(cls, configs: ConfigMap, message: str) -> "PreviewInfo":
        """无可用预览"""
        return cls(
            has_space=False,
            message=message,
            preview_configs=dict(configs),
        )


@dataclass(frozen=True)
class PreviewState:
    """
    预览状态
    
    base_configs 是计算预览时的已提交配置表；之后布局有任何提交，预览即过期
    """
    active: bool = False
    dragged_field_id: Optional[str] = None
    target_row: Optional[int] = None
    info: Optional[PreviewInfo] = None
    base_configs: ConfigMap = field(default_factory=dict)
    
    @property
    def has_space(self) -> bool:
        return self.info is not None and self.info.has_space
    
    @property
    def preview_configs(self) -> ConfigMap:
        return self.info.preview_configs if self.info is not None else {}
    
    @property
    def target_position(self) -> Optional[Position]:
        return self.info.target_position if self.info is not None else None
    
    @classmethod
    def initial(cls) -> "PreviewState":
        return cls()
    
    @classmethod
    def activate(
        cls,
        dragged_field_id: str,
        target_row: int,
        info: PreviewInfo,
        base_configs: Optional[ConfigMap] = None,
    ) -> "PreviewState":
        return cls(
            active=True,
            dragged_field_id=dragged_field_id,
            target_row=target_row,
            info=info,
            base_configs=dict(base_configs or {}),
        )
    
    def is_current(self, configs: ConfigMap) -> bool:
        """
        configs（被拖字段可在任意位置）与计算预览时的布局是否一致
        
        只比较被拖字段以外的字段：它们的 id、宽度和位置都不能变
        """
        if self.dragged_field_id is None or self.dragged_field_id not in self.base_configs:
            return False
        if set(configs) != set(self.base_configs):
            return False
        return all(
            configs[fid] == config
            for fid, config in self.base_configs.items()
            if fid != self.dragged_field_id
        )
