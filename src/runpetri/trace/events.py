#!/usr/bin/env python3
"""
Trace event model.

Transitions publish two kinds of "place-trace" events:

1) place-trace-pre  - the instant a transition is fully enabled, carrying a
                      snapshot of its enablement record (place id -> value)
2) place-trace-post - right after reduction, carrying the ids of the places
                      about to receive the reduction

Both carry the transition label and a UNIX epoch timestamp in milliseconds.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Union


PLACE_TRACE_PRE = "place-trace-pre"
PLACE_TRACE_POST = "place-trace-post"

TRACE_EVENTS = (PLACE_TRACE_PRE, PLACE_TRACE_POST)


@dataclass(frozen=True)
class TraceEvent:
    """
    One published trace event.

    Attributes:
        name: PLACE_TRACE_PRE or PLACE_TRACE_POST
        label: Label of the publishing transition
        payload: Enablement snapshot (pre) or list of post-node ids (post)
        epoch_millis: Publication time
    """
    name: str
    label: str
    payload: Union[Dict[str, Any], List[str]]
    epoch_millis: int

    @property
    def is_pre(self) -> bool:
        return self.name == PLACE_TRACE_PRE

    @property
    def is_post(self) -> bool:
        return self.name == PLACE_TRACE_POST

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.name,
            "label": self.label,
            "payload": self.payload,
            "time": self.epoch_millis,
        }
