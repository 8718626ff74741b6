#!/usr/bin/env python3
"""
runpetri - Place Layer

Places hold resources and broadcast arrivals to the transitions that listen
to them. The default place is a non-negative integer counter; TokenPlace keeps
structured tokens in arrival order instead.

Subclasses customize storage by overriding add_resource, consume, count and
clear. The only contract is that count() == 0 means "no resource".
"""

from collections import deque
from enum import Enum
import numbers
from typing import Any, Callable, Deque, List, Optional, Tuple, TYPE_CHECKING
import logging

from pydantic import BaseModel

if TYPE_CHECKING:
    from .transition import Transition

logger = logging.getLogger(__name__)


class PlaceKind(str, Enum):
    """Role a place plays in the resource flow"""
    SOURCE = "source"
    INTERNAL = "internal"
    EXIT = "exit"
    INHIBIT = "inhibit"


_IMMUTABLE_TYPES = (int, float, complex, bool, str, bytes, type(None), frozenset)


def clone_value(value: Any) -> Any:
    """Copy a forwarded value according to the token clone contract.

    Immutable scalars pass through unchanged. Tokens exposing a ``clone()``
    method are cloned through it, pydantic models are deep-copied, and any
    other object is shared by reference.
    """
    if isinstance(value, _IMMUTABLE_TYPES):
        return value
    clone = getattr(value, "clone", None)
    if callable(clone):
        return clone()
    if isinstance(value, BaseModel):
        return value.model_copy(deep=True)
    return value


class Place:
    """
    Counter place.

    A place accumulates numeric resource, and on every accepted arrival
    broadcasts ``(place_id, value, place, count)`` to each subscribed
    transition in registration order. Exit places never store: they hand the
    value to their exit callback.
    """

    def __init__(
        self,
        id: str,
        kind: PlaceKind = PlaceKind.INTERNAL,
        inhibit_label: Optional[str] = None,
        constraint: Optional[Callable[[Any], bool]] = None,
    ):
        self.id = id
        self.kind = PlaceKind(kind)
        self.inhibit_label = inhibit_label
        self.constraint = constraint
        self.exit_callback: Optional[Callable[[Any], Any]] = None
        self.resource: Any = 0
        self.subscribers: List["Transition"] = []

    def __repr__(self):
        return f"{type(self).__name__}({self.id!r}, kind={self.kind.value})"

    @property
    def is_exit(self) -> bool:
        return self.kind == PlaceKind.EXIT

    def inhibits(self, label: Optional[str]) -> bool:
        """True when this place inhibits transitions carrying ``label``"""
        return self.inhibit_label is not None and self.inhibit_label == label

    def set_exit_callback(self, cb: Callable[[Any], Any]):
        self.exit_callback = cb

    def add_transition(self, transition: "Transition"):
        """Subscribe a transition to this place's arrivals"""
        self.subscribers.append(transition)

    def accepts(self, value: Any) -> bool:
        """Node-level constraint check applied before anything else in forward()"""
        if self.constraint is None:
            return True
        return bool(self.constraint(value))

    def forward(self, value: Any) -> bool:
        """Accept a value arriving from a source injection or a transition.

        Returns False when the node constraint rejects the value or the
        storage cannot hold it, True otherwise. Storing triggers a synchronous broadcast, which may cascade
        through further transitions before this call returns.
        """
        v = clone_value(value)

        if not self.accepts(v):
            logger.debug("[place] %s rejected value=%r", self.id, v)
            return False

        if self.is_exit:
            if self.exit_callback is not None:
                logger.debug("[place] %s exit value=%r", self.id, v)
                self.exit_callback(v)
            else:
                logger.warning("[place] %s is an exit place with no callback bound; value dropped", self.id)
            return True

        if not self.stores(v):
            logger.warning("[place] %s cannot store value=%r; value dropped", self.id, v)
            return False

        self.add_resource(v)
        self._broadcast(v)
        return True

    def _broadcast(self, value: Any):
        qty = self.count()
        for transition in list(self.subscribers):
            transition.on_arrival(self.id, value, self, qty)

    def has_resource(self, for_label: Optional[str] = None) -> bool:
        """Presence check, inverted when this place inhibits ``for_label``"""
        marked = self.count() > 0
        if self.inhibits(for_label):
            return not marked
        return marked

    def withdraw(self, value: Any) -> Any:
        """Consume on behalf of a listening transition.

        Returns the value the transition records for this arrival. Counter
        resource is fungible, so the arrival's own value is its contribution;
        the stored count is drawn down through ``consume()``.
        """
        self.consume()
        return value

    def report(self) -> Tuple[str, Any]:
        return (self.id, self.resource)

    # Storage overrides start here

    def stores(self, value: Any) -> bool:
        """Whether add_resource() can hold ``value``; counters take real numbers"""
        return isinstance(value, numbers.Real)

    def count(self) -> int:
        return self.resource

    def add_resource(self, value: Any):
        self.resource += int(value)

    def consume(self) -> Any:
        return self.consume_one()

    def consume_one(self) -> int:
        """Default consumption policy: one unit per arrival, never below zero"""
        if self.resource > 0:
            self.resource -= 1
        return 1

    def clear(self):
        self.resource = 0


class TokenPlace(Place):
    """
    Place holding structured tokens in FIFO order.

    Each forwarded value is stored as one token. consume() hands back the
    oldest token; withdraw() takes out the token that just arrived, so a token
    a filter rejected stays queued without being recorded in its place.
    """

    def __init__(
        self,
        id: str,
        kind: PlaceKind = PlaceKind.INTERNAL,
        inhibit_label: Optional[str] = None,
        constraint: Optional[Callable[[Any], bool]] = None,
    ):
        super().__init__(id, kind, inhibit_label, constraint)
        self.resource: Deque[Any] = deque()

    def report(self) -> Tuple[str, Any]:
        return (self.id, list(self.resource))

    def withdraw(self, value: Any) -> Any:
        for i in range(len(self.resource) - 1, -1, -1):
            if self.resource[i] is value:
                del self.resource[i]
                return value
        return self.consume()

    def stores(self, value: Any) -> bool:
        return True

    def count(self) -> int:
        return len(self.resource)

    def add_resource(self, value: Any):
        self.resource.append(value)

    def consume(self) -> Any:
        if not self.resource:
            return None
        return self.resource.popleft()

    def clear(self):
        self.resource.clear()


BUILTIN_PLACE_VARIANTS = {
    "counter": Place,
    "tokens": TokenPlace,
}
