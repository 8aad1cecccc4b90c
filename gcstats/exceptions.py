"""
gcstats/exceptions.py — gcstats 异常体系

所有 gcstats 异常的基类和具体异常定义。
"""
from typing import Any, Optional


class GCStatsError(Exception):
    """gcstats 基础异常"""
    pass


class ConfigError(GCStatsError):
    """配置异常"""
    pass


class PayloadDecodeError(GCStatsError, TypeError):
    """
    Payload 解码异常

    位置存在且非空，但取值无法转换为字段声明的整数宽度。
    仅影响当前事件，不做重试。
    """

    def __init__(
        self,
        message: str,
        event_name: Optional[str] = None,
        position: Optional[int] = None,
        field_name: Optional[str] = None,
        value: Any = None,
    ):
        super().__init__(message)
        self.event_name = event_name
        self.position = position
        self.field_name = field_name
        self.value = value
