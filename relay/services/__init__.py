"""Services package for the relay pipeline."""

from .classifier import classify, read_payload
from .formatter import ContentFormatter
from .pipeline import RelayPipeline
from .reporter import FailureReporter
from .scheduler import TaskScheduler

__all__ = [
    "classify",
    "read_payload",
    "ContentFormatter",
    "RelayPipeline",
    "FailureReporter",
    "TaskScheduler",
]
