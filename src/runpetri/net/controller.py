#!/usr/bin/env python3
"""
runpetri - Controller Layer

NetController owns every place and transition of one net. It builds them from
declarative definitions, wires the subscriptions, and exposes the outer
surface: injecting values into sources, rebinding exit callbacks, attaching a
trace sink and resetting state for a rerun.
"""

from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Set, Type, Union
import logging

from runpetri.common.timebase import Timebase, WallClock
from runpetri.exceptions import (
    DuplicatePlaceError,
    ExitCallbackError,
    NetConfigurationError,
    PlaceClaimedError,
    UnknownPlaceError,
    UnknownVariantError,
)
from runpetri.trace.sinks import TraceSink
from .place import BUILTIN_PLACE_VARIANTS, Place, PlaceKind
from .specs import NetDefinition, PlaceDefinition, TransitionDefinition, parse_place, parse_transition
from .transition import Transition

logger = logging.getLogger(__name__)


# (id_or_name, kind) -> callable; kind is "exit" or "reduce"
CallbackFactory = Callable[[str, str], Callable[..., Any]]
# checker name -> predicate(value, count)
CheckerFactory = Callable[[str], Callable[[Any, Any], bool]]


class NetController:
    """Builds and drives one net"""

    def __init__(
        self,
        place_variants: Optional[Mapping[str, Type[Place]]] = None,
        timebase: Optional[Timebase] = None,
        strict: bool = False,
    ):
        self.place_variants: Dict[str, Type[Place]] = dict(BUILTIN_PLACE_VARIANTS)
        for name, cls in (place_variants or {}).items():
            self.register_place_variant(name, cls)

        self.timebase: Timebase = timebase or WallClock()
        self.strict = strict
        self.trace_sink: Optional[TraceSink] = None

        self.places: Dict[str, Place] = {}
        self.transitions: List[Transition] = []
        self.source_places: Dict[str, Place] = {}
        self.exit_places: Dict[str, Place] = {}
        self._claimed: Dict[str, str] = {}

    @classmethod
    def from_definition(
        cls,
        definition: Union[NetDefinition, Mapping[str, Any]],
        callback_factory: CallbackFactory,
        checker_factory: Optional[CheckerFactory] = None,
        **kwargs,
    ) -> "NetController":
        """Create a controller and build ``definition`` into it"""
        controller = cls(**kwargs)
        net_def = NetDefinition.parse(definition)
        controller.build(net_def.places, net_def.transitions, callback_factory, checker_factory)
        return controller

    def register_place_variant(self, name: str, cls: Type[Place]):
        """Make a Place subclass selectable by name in place definitions"""
        if not (isinstance(cls, type) and issubclass(cls, Place)):
            raise NetConfigurationError(f"Place variant {name!r} must be a Place subclass, got {cls!r}")
        self.place_variants[name] = cls

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    def build(
        self,
        places: Optional[Iterable[Union[PlaceDefinition, Mapping[str, Any]]]],
        transitions: Optional[Iterable[Union[TransitionDefinition, Mapping[str, Any]]]],
        callback_factory: Optional[CallbackFactory],
        checker_factory: Optional[CheckerFactory] = None,
    ):
        """Instantiate and wire the net, replacing anything built before.

        Everything is built aside first; the controller only switches to the
        new net once every place and transition has been wired, so a failed
        build leaves the previous net untouched.
        """
        if places is None:
            raise NetConfigurationError("no places specified")
        if transitions is None:
            raise NetConfigurationError("no transitions specified")
        if callback_factory is None:
            raise NetConfigurationError("no callback factory specified")

        place_defs = [parse_place(p) for p in places]
        transition_defs = [parse_transition(t) for t in transitions]

        new_places: Dict[str, Place] = {}
        for place_def in place_defs:
            if place_def.id in new_places:
                raise DuplicatePlaceError(f"Place {place_def.id!r} declared more than once")
            place = self._instantiate_place(place_def)
            if place.is_exit and place.exit_callback is None:
                cb = callback_factory(place.id, "exit")
                self._check_exit_callback(place.id, cb)
                place.set_exit_callback(cb)
            new_places[place.id] = place

        claimed: Dict[str, str] = {}
        new_transitions = [
            self._build_transition(trans_def, new_places, claimed, callback_factory, checker_factory)
            for trans_def in transition_defs
        ]

        self.places = new_places
        self.transitions = new_transitions
        self.source_places = {pid: p for pid, p in new_places.items() if p.kind == PlaceKind.SOURCE}
        self.exit_places = {pid: p for pid, p in new_places.items() if p.is_exit}
        self._claimed = claimed

        if self.trace_sink is not None:
            self.set_trace_sink(self.trace_sink)

        logger.debug("[build] places=%s", list(self.places.keys()))
        for trans in self.transitions:
            logger.debug("[build] %s inputs=%s outputs=%s", trans.label, trans.pre_node_ids, trans.post_node_ids)

    def _instantiate_place(self, place_def: PlaceDefinition) -> Place:
        place_cls: Type[Place] = Place
        if place_def.subtype is not None:
            if place_def.subtype not in self.place_variants:
                raise UnknownVariantError(
                    f"Place {place_def.id!r} uses unknown variant {place_def.subtype!r}"
                )
            place_cls = self.place_variants[place_def.subtype]
        return place_cls(place_def.id, place_def.kind, place_def.inhibit_label)

    def _build_transition(
        self,
        trans_def: TransitionDefinition,
        places: Dict[str, Place],
        claimed: Dict[str, str],
        callback_factory: CallbackFactory,
        checker_factory: Optional[CheckerFactory],
    ) -> Transition:
        def lookup(place_id: str) -> Place:
            place = places.get(place_id)
            if place is None:
                raise UnknownPlaceError(f"Transition {trans_def.label!r} references unknown place {place_id!r}")
            return place

        trans = Transition(trans_def.label, timebase=self.timebase)

        for input_id in trans_def.inputs:
            place = lookup(input_id)
            if not place.inhibits(trans_def.label):
                if input_id in claimed:
                    raise PlaceClaimedError(
                        f"{input_id!r} used as input by both {claimed[input_id]!r} "
                        f"and {trans_def.label!r}"
                    )
                claimed[input_id] = trans_def.label
            trans.add_pre_node(place)

        for output_id in trans_def.outputs:
            trans.add_post_node(lookup(output_id))

        if trans_def.reduction is not None:
            reducer = callback_factory(trans_def.reduction.reducer, "reduce")
            trans.set_special_reduction(reducer, trans_def.reduction.init_accumulator)

        if trans_def.value_checking:
            if checker_factory is None:
                raise NetConfigurationError(
                    f"Transition {trans_def.label!r} declares value checking but no checker factory was given"
                )
            for place_id, checker_name in trans_def.value_checking.items():
                trans.add_custom_value_checking(place_id, checker_factory(checker_name))

        return trans

    # ------------------------------------------------------------------
    # Running
    # ------------------------------------------------------------------

    def inject(self, source_id: str, value: Any) -> bool:
        """Forward ``value`` into a source place, running the full cascade.

        Returns the place's forward() result. Unknown source ids are ignored
        with a warning, or raise UnknownPlaceError when the controller is
        strict.
        """
        place = self.source_places.get(source_id)
        if place is None:
            if self.strict:
                raise UnknownPlaceError(f"No source place named {source_id!r}")
            logger.warning("[inject] unknown source %r; value %r ignored", source_id, value)
            return False
        logger.debug("[inject] %s value=%r", source_id, value)
        return place.forward(value)

    def injector(self, source_id: str) -> Callable[[Any], bool]:
        """Return a callable that injects into ``source_id``"""
        def _inject(value: Any) -> bool:
            return self.inject(source_id, value)
        return _inject

    def set_exit_callback(self, place_id: str, cb: Callable[[Any], Any]):
        place = self.places.get(place_id)
        if place is None:
            raise UnknownPlaceError(f"No place named {place_id!r}")
        if place_id not in self.exit_places:
            raise ExitCallbackError(f"{place_id} exit value callback cannot be set for non exiting node")
        self._check_exit_callback(place_id, cb)
        place.set_exit_callback(cb)

    @staticmethod
    def _check_exit_callback(place_id: str, cb: Any):
        if not callable(cb):
            raise ExitCallbackError(f"{place_id} exit value callback is not a function")

    def set_trace_sink(self, sink: Optional[TraceSink]):
        """Attach ``sink`` to every transition; None detaches"""
        self.trace_sink = sink
        for trans in self.transitions:
            trans.set_trace_sink(sink)

    def set_timebase(self, timebase: Timebase):
        self.timebase = timebase
        for trans in self.transitions:
            trans.set_timebase(timebase)

    def reset_all(self):
        """Zero every place and drop every partial enablement record"""
        for place in self.places.values():
            place.clear()
        for trans in self.transitions:
            trans.clear()

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def get_place(self, place_id: str) -> Place:
        try:
            return self.places[place_id]
        except KeyError:
            raise UnknownPlaceError(f"No place named {place_id!r}") from None

    def transitions_labeled(self, label: str) -> List[Transition]:
        return [t for t in self.transitions if t.label == label]

    def snapshot(self) -> Dict[str, Any]:
        """Current resource of every non-exit place, keyed by id"""
        result = {}
        for place in self.places.values():
            if not place.is_exit:
                place_id, resource = place.report()
                result[place_id] = resource
        return result

    def claimed_inputs(self) -> Set[str]:
        return set(self._claimed)
