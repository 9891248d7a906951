"""
配置校验器

实现：
- 系统不变量检查
- 允许调参范围检查
- 危险组合检测
- 拒绝无效配置启动
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List

from magnetic_grid.animation.curves import CURVES
from magnetic_grid.audit.events import AuditEvent, AuditEventType
from magnetic_grid.config.schema import LayoutEngineConfig
from magnetic_grid.models.grid import COLUMN_WIDTH


STORAGE_BACKENDS = ("json", "memory")


class ConfigValidationError(Exception):
    """配置校验错误"""
    
    def __init__(self, violations: List[str]):
        self.violations = violations
        super().__init__(f"Config validation failed: {violations}")


@dataclass
class ValidationResult:
    """校验结果"""
    is_valid: bool
    violations: List[str]
    warnings: List[str]


class ConfigValidator:
    """
    配置校验器
    
    三层校验：
    1. 系统不变量（违反则拒绝启动）
    2. 允许调参范围（超出则警告）
    3. 危险组合检测（检测到则拒绝）
    """
    
    # 允许调参的范围
    CONFIGURABLE_RANGES = {
        "drag_threshold_px": (10.0, 100.0),
        "accumulation_threshold": (0.05, 0.25),
        "significant_gap_threshold": (0.01, 0.10),
        "equal_width_tolerance": (0.01, 0.08),
    }
    
    MAX_RECOMMENDED_DURATION_MS = 1000
    
    def validate(self, config: LayoutEngineConfig) -> ValidationResult:
        """
        执行完整校验
        
        Args:
            config: 配置实例
            
        Returns:
            ValidationResult
        """
        violations = []
        warnings = []
        
        # 1. 系统不变量
        violations.extend(self._check_invariants(config))
        
        # 2. 允许调参范围
        warnings.extend(self._check_ranges(config))
        
        # 3. 危险组合检测
        violations.extend(self._check_dangerous_combinations(config))
        
        return ValidationResult(
            is_valid=len(violations) == 0,
            violations=violations,
            warnings=warnings,
        )
    
    def validate_or_raise(self, config: LayoutEngineConfig) -> None:
        """
        校验配置，失败则抛出异常
        
        Raises:
            ConfigValidationError: 配置无效
        """
        result = self.validate(config)
        
        if not result.is_valid:
            raise ConfigValidationError(result.violations)
        
        for warning in result.warnings:
            print(f"[CONFIG WARNING] {warning}")
    
    def _check_invariants(self, config: LayoutEngineConfig) -> List[str]:
        """检查系统不变量"""
        violations = []
        
        grid = config.grid
        if grid.row_height <= 0:
            violations.append(
                f"Invariant violated: row_height ({grid.row_height}) must be > 0"
            )
        if grid.max_rows < 1:
            violations.append(
                f"Invariant violated: max_rows ({grid.max_rows}) must be >= 1"
            )
        
        th = config.thresholds
        if not (0 < th.overlap_epsilon < COLUMN_WIDTH):
            violations.append(
                f"Invariant violated: overlap_epsilon ({th.overlap_epsilon}) "
                f"must be in (0, {COLUMN_WIDTH:.4f})"
            )
        if th.drag_threshold_px < 0:
            violations.append(
                f"Invariant violated: drag_threshold_px ({th.drag_threshold_px}) must be >= 0"
            )
        if not (0 < th.accumulation_threshold < 1):
            violations.append(
                f"Invariant violated: accumulation_threshold "
                f"({th.accumulation_threshold}) must be in (0, 1)"
            )
        
        dz = config.drop_zone
        if not (0 <= dz.push_down_band < 0.5):
            violations.append(
                f"Invariant violated: push_down_band ({dz.push_down_band}) must be in [0, 0.5)"
            )
        if not (0 < dz.left_boundary < dz.right_boundary < 1):
            violations.append(
                f"Invariant violated: 0 < left_boundary ({dz.left_boundary}) < "
                f"right_boundary ({dz.right_boundary}) < 1"
            )
        
        anim = config.animation
        for name in (
            "preview_duration_ms",
            "commit_duration_ms",
            "revert_duration_ms",
            "default_duration_ms",
        ):
            value = getattr(anim, name)
            if value < 0:
                violations.append(f"Invariant violated: {name} ({value}) must be >= 0")
        for name in ("preview_curve", "commit_curve", "revert_curve", "default_curve"):
            value = getattr(anim, name)
            if value not in CURVES:
                violations.append(
                    f"Invariant violated: {name} '{value}' is not one of {sorted(CURVES)}"
                )
        
        if config.storage.backend not in STORAGE_BACKENDS:
            violations.append(
                f"Invariant violated: storage backend '{config.storage.backend}' "
                f"is not one of {list(STORAGE_BACKENDS)}"
            )
        
        return violations
    
    def _check_ranges(self, config: LayoutEngineConfig) -> List[str]:
        """检查参数范围"""
        warnings = []
        
        th = config.thresholds
        for name, (min_val, max_val) in self.CONFIGURABLE_RANGES.items():
            value = getattr(th, name)
            if not (min_val <= value <= max_val):
                warnings.append(
                    f"Parameter {name} ({value}) is outside recommended range [{min_val}, {max_val}]"
                )
        
        anim = config.animation
        for name in (
            "preview_duration_ms",
            "commit_duration_ms",
            "revert_duration_ms",
            "default_duration_ms",
        ):
            value = getattr(anim, name)
            if value > self.MAX_RECOMMENDED_DURATION_MS:
                warnings.append(
                    f"Parameter {name} ({value}) exceeds {self.MAX_RECOMMENDED_DURATION_MS}ms"
                )
        
        if config.behavior.auto_expand_after_resize:
            warnings.append(
                "auto_expand_after_resize is enabled, shrinking a field will be undone"
            )
        
        return warnings
    
    def _check_dangerous_combinations(self, config: LayoutEngineConfig) -> List[str]:
        """检查危险组合"""
        violations = []
        
        th = config.thresholds
        
        # 大于一列的空隙阈值会让 auto-expand 永远不触发
        if th.significant_gap_threshold >= COLUMN_WIDTH:
            violations.append(
                f"Dangerous configuration: significant_gap_threshold "
                f"({th.significant_gap_threshold}) >= one column ({COLUMN_WIDTH:.4f})"
            )
        
        if th.equal_width_tolerance >= COLUMN_WIDTH / 2:
            violations.append(
                f"Dangerous configuration: equal_width_tolerance "
                f"({th.equal_width_tolerance}) >= half a column, "
                "distinct widths would compare equal"
            )
        
        if th.overlap_epsilon >= th.significant_gap_threshold:
            violations.append(
                f"Dangerous combination: overlap_epsilon ({th.overlap_epsilon}) >= "
                f"significant_gap_threshold ({th.significant_gap_threshold})"
            )
        
        return violations
    
    def create_invalid_config_event(
        self,
        session_id: str,
        timestamp: datetime,
        violations: List[str],
        config_hash: str,
    ) -> AuditEvent:
        """创建配置无效审计事件"""
        return AuditEvent(
            session_id=session_id,
            timestamp=timestamp,
            event_type=AuditEventType.CONFIG_INVALID,
            reason="Config validation failed",
            config_hash=config_hash,
            details={"violations": violations},
        )
