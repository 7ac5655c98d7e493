# src/railsi18n/performance.py
"""
Load cycle timing for RailsI18n.

Large applications and engines can ship thousands of locale files; the
resolver records how long each load takes and how much resident memory the
translation trees added, so slow projects show up in the log.

Classes:
    PerformanceMonitor: Context manager recording per-operation timings
"""
import logging
import os
import time
from contextlib import contextmanager
from typing import Any, Dict, Optional

import psutil

from .config import Config, config as default_config

logger = logging.getLogger(__name__)


def _rss() -> int:
    return psutil.Process(os.getpid()).memory_info().rss


class PerformanceMonitor:
    """
    Records timings of repeated operations such as ``load_translations``.

    Each operation keeps the figures of its latest run plus a run count and
    the accumulated duration, since the resolver reloads whenever workspace
    folders change.

    Attributes:
        metrics (Dict[str, Dict[str, Any]]): Figures per operation name
        enabled (bool): ``[logging] enable_performance_logging``
    """

    def __init__(self, config: Optional[Config] = None):
        self.metrics: Dict[str, Dict[str, Any]] = {}
        self.enabled = (config or default_config).get('logging', 'enable_performance_logging', False)

    @contextmanager
    def track_operation(self, operation_name: str):
        """
        Time the wrapped block and record it under *operation_name*.

        Does nothing when monitoring is disabled.

        Example:
            with self.performance_monitor.track_operation("load_translations"):
                await self._load_yaml_files()
        """
        if not self.enabled:
            yield
            return

        start_time = time.perf_counter()
        start_memory = _rss()
        try:
            yield
        finally:
            duration = time.perf_counter() - start_time
            memory_delta = _rss() - start_memory

            previous = self.metrics.get(operation_name, {})
            self.metrics[operation_name] = {
                'runs': previous.get('runs', 0) + 1,
                'duration_seconds': duration,
                'total_duration_seconds': previous.get('total_duration_seconds', 0.0) + duration,
                'memory_delta_bytes': memory_delta,
            }
            logger.info(
                "%s took %dms (run %d), memory change: %.2fMB",
                operation_name, duration * 1000, self.metrics[operation_name]['runs'],
                memory_delta / (1024 * 1024),
            )

    def get_metrics(self) -> Dict[str, Dict[str, Any]]:
        return {name: dict(figures) for name, figures in self.metrics.items()}

    def reset(self):
        self.metrics.clear()
