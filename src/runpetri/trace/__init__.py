#!/usr/bin/env python3
"""
runpetri.trace - Observability for firing cascades

Transitions publish "place-trace-pre" and "place-trace-post" events to
whatever sink the controller was given. Sinks are passive observers.

Usage:
    from runpetri.trace import RecordingTraceSink

    sink = RecordingTraceSink()
    controller.set_trace_sink(sink)
    controller.inject("S", 1)
    print(sink.labels())
"""

from .events import TraceEvent, PLACE_TRACE_PRE, PLACE_TRACE_POST, TRACE_EVENTS
from .sinks import (
    TraceSink,
    RecordingTraceSink,
    TraceDispatcher,
    LoggingTraceSink,
    JSONLinesTraceSink,
    encode_trace_event,
)

__all__ = [
    'TraceEvent',
    'PLACE_TRACE_PRE',
    'PLACE_TRACE_POST',
    'TRACE_EVENTS',
    'TraceSink',
    'RecordingTraceSink',
    'TraceDispatcher',
    'LoggingTraceSink',
    'JSONLinesTraceSink',
    'encode_trace_event',
]
