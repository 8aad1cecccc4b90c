"""
gcstats_observability/log_exporter.py — 结构化日志导出

作为独立的 EventListener 挂到事件宿主上，把每个已识别的 GCHeapStats
事件解码结果写成一条结构化日志。

支持格式:
  - JSON: 每行一个 JSON 对象（适合 ELK / Loki）
  - Text: 人类可读的文本格式

输出目标:
  - stderr: 标准错误输出（默认）
  - file: 文件输出（支持 rotation）
"""
import json
import time
import logging
import logging.handlers
from typing import Dict, Any, Optional

from gcstats.config import GCStatsConfig
from gcstats.events import (
    DiagnosticEvent,
    EventKeywords,
    EventLevel,
    EventListener,
    EventSource,
)
from gcstats.exceptions import PayloadDecodeError
from gcstats.heap_stats import decode_heap_stats, resolve_version

logger = logging.getLogger(__name__)


class LogExporter(EventListener):
    """
    结构化日志导出器

    使用方式:
        exporter = LogExporter(format="json", file="gcstats.log")
        host.add_listener(exporter)
        # ...
        exporter.shutdown()
    """

    def __init__(
        self,
        format: str = "json",
        level: str = "INFO",
        file: Optional[str] = None,
        max_bytes: int = 100 * 1024 * 1024,  # 100MB
        backup_count: int = 5,
        logger_name: str = "gcstats.observability",
        config: Optional[GCStatsConfig] = None,
    ):
        """
        Args:
            format: 日志格式 ("json" / "text")
            level: 日志级别
            file: 日志文件路径（None=仅 stderr）
            max_bytes: 单文件最大大小
            backup_count: 保留的备份文件数
            logger_name: Logger 名称
            config: 事件源 / 事件名匹配配置
        """
        self._format = format
        self._level = getattr(logging, level.upper(), logging.INFO)
        self.config = config or GCStatsConfig()
        self._logger = logging.getLogger(logger_name)
        self._logger.setLevel(self._level)
        self._logger.propagate = False  # 不传播到根 logger

        # 清除已有 handler（避免重复添加）
        self._logger.handlers.clear()

        if format == "json":
            formatter = _JsonFormatter()
        else:
            formatter = logging.Formatter(
                "%(asctime)s [%(levelname)s] %(event_name)s: %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S",
            )

        # stderr handler（始终添加）
        stderr_handler = logging.StreamHandler()
        stderr_handler.setFormatter(formatter)
        stderr_handler.setLevel(self._level)
        self._logger.addHandler(stderr_handler)

        # file handler（可选）
        if file:
            file_handler = logging.handlers.RotatingFileHandler(
                file,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
            file_handler.setFormatter(formatter)
            file_handler.setLevel(self._level)
            self._logger.addHandler(file_handler)

        self._event_count = 0
        self._error_count = 0

    def on_event_source_created(self, source: EventSource) -> None:
        if source.name == self.config.provider_name:
            self.enable_events(source, EventLevel.INFORMATIONAL, EventKeywords.GC)
            logger.info(f"LogExporter 已启用事件源: {source.name} (format={self._format})")

    def on_event_written(self, event: DiagnosticEvent) -> None:
        """处理 GC 事件（日志导出失败不影响指标发布）"""
        version = resolve_version(event.name, self.config.normalize_event_names)
        if version is None:
            return

        extra = {
            "event_name": event.name.strip(),
            "event_source": event.source_name,
            "event_timestamp": event.timestamp,
            "heap_stats_version": int(version),
        }

        try:
            fields = decode_heap_stats(event.payload, version, event.name)
        except PayloadDecodeError as e:
            self._error_count += 1
            extra["position"] = e.position
            self._logger.warning(f"payload 解码失败: {e}", extra=extra)
            return

        if fields is None:
            return

        self._event_count += 1
        extra["event_data"] = fields.to_dict()
        self._logger.log(self._level, self._format_fields(fields.to_dict(), version), extra=extra)

    def _format_fields(self, data: Dict[str, int], version: int) -> str:
        """格式化解码结果为消息字符串"""
        message = (
            f"gen0={data['gen0_heap_size']} "
            f"gen1={data['gen1_heap_size']} "
            f"gen2={data['gen2_heap_size']} "
            f"loh={data['loh_size']} "
            f"pinned={data['pinned_object_count']} "
            f"handles={data['gc_handle_count']}"
        )
        if version == 2:
            message += f" poh={data['poh_size']}"
        return message

    def get_stats(self) -> Dict[str, Any]:
        """获取导出器统计"""
        return {
            "format": self._format,
            "event_count": self._event_count,
            "error_count": self._error_count,
            "handlers": len(self._logger.handlers),
        }

    def shutdown(self) -> None:
        """关闭并刷新所有 handler"""
        for handler in self._logger.handlers:
            handler.flush()
            handler.close()
        self._logger.handlers.clear()
        logger.info("LogExporter 已关闭")


class _JsonFormatter(logging.Formatter):
    """JSON 格式化器"""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": time.strftime(
                "%Y-%m-%dT%H:%M:%S", time.localtime(record.created)
            ),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for attr in ("event_name", "event_source", "event_timestamp",
                     "heap_stats_version", "position"):
            if hasattr(record, attr):
                log_entry[attr] = getattr(record, attr)
        if hasattr(record, "event_data"):
            log_entry["data"] = record.event_data

        return json.dumps(log_entry, ensure_ascii=False, default=str)
