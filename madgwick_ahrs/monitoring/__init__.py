"""Update loop monitoring."""

from .metrics import PerformanceMonitor, PerformanceStats, LoopMetrics

__all__ = ["PerformanceMonitor", "PerformanceStats", "LoopMetrics"]
