#!/usr/bin/env python3
"""
runpetri - Transition Layer

A transition listens to its input places, records what each of them delivered
since its last firing, and fires the moment every required input is present.
Firing reduces the recorded values, clears the record, and forwards the
reduction to every output place. Output places broadcast in turn, so a single
arrival can cascade through the whole net before on_arrival() returns.

Inhibitor-role inputs (places whose inhibit_label equals this transition's
label) are never recorded or consumed. They gate firing: the transition may
only fire while each of them is empty.

Activation is only evaluated when one of this transition's own input places
broadcasts. If another transition drains an inhibitor by consuming from it,
nothing is broadcast, so a transition it was blocking keeps its complete
record and fires on the next arrival at any of its inputs. Whether that
arrival is the draining broadcast itself depends on subscriber order on the
inhibitor place.
"""

from functools import reduce
import operator
from typing import Any, Callable, Dict, List, Optional
import logging

from runpetri.common.timebase import Timebase, WallClock
from runpetri.exceptions import DuplicateNodeError, NetConfigurationError
from runpetri.trace.events import PLACE_TRACE_POST, PLACE_TRACE_PRE
from runpetri.trace.sinks import TraceSink
from .place import Place

logger = logging.getLogger(__name__)


Reducer = Callable[[Any, Any], Any]
ValueChecker = Callable[[Any, Any], bool]


class Transition:
    """Activation, reduction and forwarding unit"""

    def __init__(self, label: str, timebase: Optional[Timebase] = None):
        self.label = label
        self.pre_nodes: List[Place] = []
        self.post_nodes: List[Place] = []
        self._node_lookup: Dict[str, Place] = {}

        # place id -> value withdrawn since the last firing
        self.enablement_record: Dict[str, Any] = {}
        self.custom_filters: Dict[str, ValueChecker] = {}

        self.reducer: Reducer = operator.add
        self.init_accumulator: Any = 0
        self.has_special_reduction = False

        self.trace_sink: Optional[TraceSink] = None
        self.timebase: Timebase = timebase or WallClock()

        self.fire_count = 0
        self.last_reduction: Any = None

    def __repr__(self):
        return f"Transition({self.label!r}, inputs={self.pre_node_ids}, outputs={self.post_node_ids})"

    @property
    def pre_node_ids(self) -> List[str]:
        return [p.id for p in self.pre_nodes]

    @property
    def post_node_ids(self) -> List[str]:
        return [p.id for p in self.post_nodes]

    def set_trace_sink(self, sink: Optional[TraceSink]):
        self.trace_sink = sink

    def set_timebase(self, timebase: Timebase):
        self.timebase = timebase

    def clear(self):
        """Drop every recorded arrival"""
        self.enablement_record = {}

    def _register(self, place: Place, role: str):
        if place.id in self._node_lookup:
            raise DuplicateNodeError(
                f"Place {place.id!r} added to transition {self.label!r} twice (as {role} node)"
            )
        self._node_lookup[place.id] = place

    def add_pre_node(self, place: Place):
        """Register an input place and subscribe to its broadcasts"""
        self._register(place, "pre")
        self.pre_nodes.append(place)
        place.add_transition(self)

    def add_post_node(self, place: Place):
        """Register an output place"""
        self._register(place, "post")
        self.post_nodes.append(place)

    def set_special_reduction(self, reducer: Reducer, init_accumulator: Any):
        """Replace the default sum reduction.

        Both parts are required. The accumulator is checked for presence, so
        a zero seed is legitimate.
        """
        if not callable(reducer):
            raise NetConfigurationError(f"Reducer for transition {self.label!r} is not callable")
        if init_accumulator is None:
            raise NetConfigurationError(
                f"Special reduction for transition {self.label!r} requires an initial accumulator"
            )
        self.reducer = reducer
        self.init_accumulator = init_accumulator
        self.has_special_reduction = True

    def add_custom_value_checking(self, place_id: str, checker: ValueChecker):
        if not callable(checker):
            raise NetConfigurationError(
                f"Value checker for {place_id!r} on transition {self.label!r} is not callable"
            )
        self.custom_filters[place_id] = checker

    def _custom_check(self, place_id: str, value: Any, qty: Any) -> bool:
        checker = self.custom_filters.get(place_id)
        if checker is None:
            return True
        return bool(checker(value, qty))

    def on_arrival(self, place_id: str, value: Any, place: Place, qty: Any):
        """Handle one broadcast from a subscribed place"""
        if not place.inhibits(self.label):
            if not self._custom_check(place_id, value, qty):
                logger.debug("[trans] %s filter rejected %s value=%r", self.label, place_id, value)
                return
            self.enablement_record[place_id] = place.withdraw(value)
            logger.debug("[trans] %s recorded %s=%r", self.label, place_id, self.enablement_record[place_id])

        if self.match_inputs():
            self.fire()

    def match_inputs(self) -> bool:
        """True when every plain input has arrived and every inhibitor is clear"""
        if not self.pre_nodes:
            return False
        for place in self.pre_nodes:
            if place.inhibits(self.label):
                if not place.has_resource(self.label):
                    return False
            elif place.id not in self.enablement_record:
                return False
        # A transition reading only inhibitors has nothing to fire on
        return bool(self.enablement_record)

    def reduce_record(self) -> Any:
        """Combine recorded values in pre-node registration order"""
        values = [
            self.enablement_record[place.id]
            for place in self.pre_nodes
            if place.id in self.enablement_record
        ]
        return reduce(self.reducer, values, self.init_accumulator)

    def fire(self):
        if self.trace_sink is not None:
            self.trace_sink.publish(
                PLACE_TRACE_PRE, self.label, dict(self.enablement_record), self.timebase.epoch_millis()
            )

        reduction = self.reduce_record()
        self.clear()
        self.fire_count += 1
        self.last_reduction = reduction
        logger.debug("[fire] %s reduction=%r", self.label, reduction)

        if self.trace_sink is not None:
            self.trace_sink.publish(
                PLACE_TRACE_POST, self.label, self.post_node_ids, self.timebase.epoch_millis()
            )

        for place in list(self.post_nodes):
            place.forward(reduction)
