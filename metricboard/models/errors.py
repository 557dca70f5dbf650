"""
Exception hierarchy

Every failure in the capture pipeline is one of these. They are caught and
logged by the pipeline and never reach the HTTP client.
"""


class MetricboardError(Exception):
    """Base class for metricboard failures"""


class StorageError(MetricboardError):
    """Metric log could not be read, parsed or written, or its path is unsafe"""


class RenderError(MetricboardError):
    """Report document could not be built or written"""
