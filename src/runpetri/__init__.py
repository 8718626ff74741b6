#!/usr/bin/env python3
"""
runpetri - Broadcast-driven Petri net execution

There is no step loop. Injecting a value into a source place broadcasts it to
every listening transition; a transition whose inputs have all arrived fires
at once and forwards its reduction downstream, and so on until the cascade
settles.

Usage:
    from runpetri import NetController

    net_def = {
        "places": [
            {"id": "A", "kind": "source"},
            {"id": "B", "kind": "source"},
            {"id": "Out", "kind": "exit"},
        ],
        "transitions": [
            {"label": "T", "inputs": ["A", "B"], "outputs": ["Out"]},
        ],
    }

    def callbacks(name, kind):
        return print

    controller = NetController.from_definition(net_def, callbacks)
    controller.inject("A", 2)
    controller.inject("B", 3)   # prints 5
"""

import logging

from .net import (
    Place,
    TokenPlace,
    PlaceKind,
    Transition,
    PlaceDefinition,
    ReductionDefinition,
    TransitionDefinition,
    NetDefinition,
    load_net_definition,
    NetBuilder,
    NetController,
)
from .trace import (
    TraceEvent,
    PLACE_TRACE_PRE,
    PLACE_TRACE_POST,
    RecordingTraceSink,
    TraceDispatcher,
    LoggingTraceSink,
    JSONLinesTraceSink,
)
from .exceptions import (
    RunPetriError,
    NetConfigurationError,
    NetDefinitionError,
    UnknownPlaceError,
    DuplicatePlaceError,
    DuplicateNodeError,
    PlaceClaimedError,
    ExitCallbackError,
    UnknownVariantError,
)
from ._version import version as __version__

# Library does not configure handlers by default. Callers may configure logging.
logging.getLogger(__name__).addHandler(logging.NullHandler())


__all__ = [
    # Net
    'Place',
    'TokenPlace',
    'PlaceKind',
    'Transition',
    'PlaceDefinition',
    'ReductionDefinition',
    'TransitionDefinition',
    'NetDefinition',
    'load_net_definition',
    'NetBuilder',
    'NetController',

    # Trace
    'TraceEvent',
    'PLACE_TRACE_PRE',
    'PLACE_TRACE_POST',
    'RecordingTraceSink',
    'TraceDispatcher',
    'LoggingTraceSink',
    'JSONLinesTraceSink',

    # Errors
    'RunPetriError',
    'NetConfigurationError',
    'NetDefinitionError',
    'UnknownPlaceError',
    'DuplicatePlaceError',
    'DuplicateNodeError',
    'PlaceClaimedError',
    'ExitCallbackError',
    'UnknownVariantError',
]
