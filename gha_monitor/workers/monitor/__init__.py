"""Incremental run/job/step transition monitoring."""

from .cancellation import CancellationToken
from .classifier import TransitionClassifier
from .formatter import EventFormatter
from .models import EventSink, MonitorEvent, StreamEventSink, WalkEntry, WalkSummary
from .monitor import ActionsMonitor
from .walker import HierarchyWalker
from .watermark import WatermarkTracker

__all__ = [
    "ActionsMonitor",
    "CancellationToken",
    "EventFormatter",
    "EventSink",
    "HierarchyWalker",
    "MonitorEvent",
    "StreamEventSink",
    "TransitionClassifier",
    "WalkEntry",
    "WalkSummary",
    "WatermarkTracker",
]
