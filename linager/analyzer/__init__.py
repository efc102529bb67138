"""Data lineage: where identifiers are defined, read, written and called."""

from linager.analyzer.datapoint import (
    AccessKind,
    CodeLocation,
    DataPoint,
    TouchContext,
    TouchPoint,
    dump_data_points,
)
from linager.analyzer.golang import GoAnalyzer

__all__ = [
    "AccessKind",
    "CodeLocation",
    "DataPoint",
    "GoAnalyzer",
    "TouchContext",
    "TouchPoint",
    "dump_data_points",
]
