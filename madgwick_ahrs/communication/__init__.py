"""Sample sources for the AHRS driver."""

from .source import CsvImuSource, MockImuSource, SourceError, open_source

__all__ = ["CsvImuSource", "MockImuSource", "SourceError", "open_source"]
