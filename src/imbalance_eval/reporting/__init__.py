from .base_metrics_reporter import BaseMetricsReporter
from .metrics_reporter import MetricsReporter

__all__ = ['BaseMetricsReporter', 'MetricsReporter']
