#!/usr/bin/env python3
"""
runpetri - Builder Layer

NetBuilder provides a fluent, programmatic way to assemble a NetDefinition
without writing the JSON document by hand.

    definition = (
        NetBuilder()
        .source("S")
        .place("P")
        .exit("Out")
        .transition("T1", inputs=["S"], outputs=["P"])
        .transition("T2", inputs=["P"], outputs=["Out"])
        .build()
    )
"""

from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError

from runpetri.exceptions import NetDefinitionError
from .place import PlaceKind
from .specs import NetDefinition, PlaceDefinition, ReductionDefinition, TransitionDefinition


class NetBuilder:
    """Accumulates place and transition definitions"""

    def __init__(self):
        self._places: List[PlaceDefinition] = []
        self._transitions: List[TransitionDefinition] = []

    def place(
        self,
        id: str,
        kind: PlaceKind = PlaceKind.INTERNAL,
        inhibit_label: Optional[str] = None,
        subtype: Optional[str] = None,
    ) -> "NetBuilder":
        """Declare a place of any kind"""
        try:
            self._places.append(
                PlaceDefinition(id=id, kind=kind, inhibit_label=inhibit_label, subtype=subtype)
            )
        except ValidationError as e:
            raise NetDefinitionError(f"Invalid place {id!r}: {e}") from e
        return self

    def source(self, id: str, subtype: Optional[str] = None) -> "NetBuilder":
        return self.place(id, PlaceKind.SOURCE, subtype=subtype)

    def exit(self, id: str, subtype: Optional[str] = None) -> "NetBuilder":
        return self.place(id, PlaceKind.EXIT, subtype=subtype)

    def inhibitor(self, id: str, label: str, subtype: Optional[str] = None) -> "NetBuilder":
        """Declare a place that blocks transitions labeled ``label`` while it holds a resource"""
        return self.place(id, PlaceKind.INHIBIT, inhibit_label=label, subtype=subtype)

    def transition(
        self,
        label: str,
        inputs: Sequence[str],
        outputs: Sequence[str] = (),
        reducer: Optional[str] = None,
        init_accumulator: Any = None,
        value_checking: Optional[Dict[str, str]] = None,
    ) -> "NetBuilder":
        """Declare a transition.

        ``reducer`` names a reduction resolved by the controller's callback
        factory; it must come with an explicit ``init_accumulator``.
        """
        try:
            reduction = None
            if reducer is not None:
                reduction = ReductionDefinition(reducer=reducer, init_accumulator=init_accumulator)
            self._transitions.append(
                TransitionDefinition(
                    label=label,
                    inputs=list(inputs),
                    outputs=list(outputs),
                    reduction=reduction,
                    value_checking=dict(value_checking or {}),
                )
            )
        except ValidationError as e:
            raise NetDefinitionError(f"Invalid transition {label!r}: {e}") from e
        return self

    def build(self) -> NetDefinition:
        return NetDefinition(places=list(self._places), transitions=list(self._transitions))
