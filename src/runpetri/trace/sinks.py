#!/usr/bin/env python3
"""
Trace Sinks

Observers for transition trace events. A sink only has to provide
``publish(event, label, payload, epoch_millis)``; the engine never reads
anything back from it, so sinks cannot influence control flow.
"""

from __future__ import annotations

import json
import logging
import threading
from collections import defaultdict
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Protocol

from pydantic import BaseModel

from .events import TraceEvent, PLACE_TRACE_PRE, PLACE_TRACE_POST


class TraceSink(Protocol):
    """Protocol for anything that can receive trace events"""

    def publish(self, event: str, label: str, payload: Any, epoch_millis: int) -> None:
        """
        Receive one trace event.

        Args:
            event: "place-trace-pre" or "place-trace-post"
            label: Label of the publishing transition
            payload: Enablement snapshot (pre) or post-node id list (post)
            epoch_millis: UNIX epoch time in milliseconds
        """
        ...


class RecordingTraceSink:
    """Keeps every published event in memory, in publication order"""

    def __init__(self):
        self.events: List[TraceEvent] = []

    def publish(self, event: str, label: str, payload: Any, epoch_millis: int) -> None:
        self.events.append(TraceEvent(event, label, payload, epoch_millis))

    def pre_events(self) -> List[TraceEvent]:
        return [e for e in self.events if e.name == PLACE_TRACE_PRE]

    def post_events(self) -> List[TraceEvent]:
        return [e for e in self.events if e.name == PLACE_TRACE_POST]

    def labels(self) -> List[str]:
        """Labels of fired transitions, one entry per firing"""
        return [e.label for e in self.pre_events()]

    def clear(self):
        self.events.clear()

    def __len__(self):
        return len(self.events)


TraceHandler = Callable[[str, Any, int], Any]


class TraceDispatcher:
    """
    Routes each trace event to the handlers registered for its name.

    Example:
        ```python
        dispatcher = TraceDispatcher()
        dispatcher.on("place-trace-pre", lambda label, record, ts: ...)
        controller.set_trace_sink(dispatcher)
        ```
    """

    def __init__(self):
        self._handlers: Dict[str, List[TraceHandler]] = defaultdict(list)

    def on(self, event: str, handler: TraceHandler) -> "TraceDispatcher":
        if not callable(handler):
            raise TypeError(f"Trace handler for {event!r} is not callable")
        self._handlers[event].append(handler)
        return self

    def off(self, event: str, handler: TraceHandler) -> None:
        handlers = self._handlers.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, event: str, label: str, payload: Any, epoch_millis: int) -> None:
        for handler in list(self._handlers.get(event, ())):
            handler(label, payload, epoch_millis)


class LoggingTraceSink:
    """Writes trace events to a standard library logger"""

    def __init__(self, logger: Optional[logging.Logger] = None, level: int = logging.INFO):
        self.logger = logger or logging.getLogger("runpetri.trace")
        self.level = level

    def publish(self, event: str, label: str, payload: Any, epoch_millis: int) -> None:
        self.logger.log(self.level, "%s label=%s payload=%r time=%d", event, label, payload, epoch_millis)


def _json_default(value: Any) -> Any:
    """Fallback conversion for values json cannot encode natively"""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    return repr(value)


def encode_trace_event(event: TraceEvent) -> bytes:
    """Encode a TraceEvent as compact JSON bytes"""
    return json.dumps(event.to_dict(), separators=(',', ':'), default=_json_default).encode('utf-8')


TraceEncoder = Callable[[TraceEvent], bytes]


class JSONLinesTraceSink:
    """
    Appends each trace event to a file as one encoded line.

    ``encoder`` turns a TraceEvent into the line's bytes and defaults to
    encode_trace_event. The file is opened on the first event, so a sink that
    never sees a firing leaves nothing on disk. ``truncate=True`` starts the
    file over instead of appending to an earlier run.
    """

    def __init__(
        self,
        filepath: str | Path,
        encoder: TraceEncoder = encode_trace_event,
        truncate: bool = False,
    ):
        self.filepath = Path(filepath)
        self.encoder = encoder
        self.written = 0
        self._mode = 'w' if truncate else 'a'
        self._handle = None
        self._closed = False
        self._lock = threading.Lock()

    @property
    def closed(self) -> bool:
        return self._closed

    def _open(self):
        self.filepath.parent.mkdir(parents=True, exist_ok=True)
        return open(self.filepath, self._mode, encoding='utf-8')

    def publish(self, event: str, label: str, payload: Any, epoch_millis: int) -> None:
        line = self.encoder(TraceEvent(event, label, payload, epoch_millis)).decode('utf-8')
        with self._lock:
            if self._closed:
                raise ValueError(f"Trace file {self.filepath} is closed")
            if self._handle is None:
                self._handle = self._open()
            self._handle.write(line + '\n')
            self._handle.flush()
            self.written += 1

    def close(self) -> None:
        with self._lock:
            if self._handle is not None:
                self._handle.close()
                self._handle = None
            self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
