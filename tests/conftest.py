"""Shared fixtures for runpetri tests"""

import operator
from collections import defaultdict
from typing import Any, Dict, List

import pytest

from runpetri.common.timebase import DictatedClock
from runpetri.trace import RecordingTraceSink


REDUCERS = {
    "product": operator.mul,
    "maximum": max,
    "collect": lambda acc, value: acc + [value],
}

CHECKERS = {
    "positive": lambda value, count: value > 0,
    "even": lambda value, count: value % 2 == 0,
    "first_only": lambda value, count: count <= 1,
}


class ExitRecorder:
    """Callback factory that captures everything reaching an exit place."""

    def __init__(self):
        self.received: Dict[str, List[Any]] = defaultdict(list)
        self.requested: List[tuple] = []

    def __call__(self, name: str, kind: str):
        self.requested.append((name, kind))
        if kind == "exit":
            return lambda value: self.received[name].append(value)
        if kind == "reduce":
            return REDUCERS[name]
        raise KeyError(kind)

    def values(self, place_id: str) -> List[Any]:
        return self.received.get(place_id, [])


@pytest.fixture
def exits():
    return ExitRecorder()


@pytest.fixture
def checkers():
    return CHECKERS.__getitem__


@pytest.fixture
def clock():
    return DictatedClock(1_700_000_000.0)


@pytest.fixture
def sink():
    return RecordingTraceSink()
