#!/usr/bin/env python3
"""
runpetri.net - Cascade execution of Petri-style resource-flow nets

Public API for defining, building and driving nets.
"""

from .place import (
    Place,
    TokenPlace,
    PlaceKind,
    BUILTIN_PLACE_VARIANTS,
    clone_value,
)

from .transition import Transition

from .specs import (
    PlaceDefinition,
    ReductionDefinition,
    TransitionDefinition,
    NetDefinition,
    load_net_definition,
)

from .builder import NetBuilder

from .controller import NetController

__all__ = [
    # Places
    'Place',
    'TokenPlace',
    'PlaceKind',
    'BUILTIN_PLACE_VARIANTS',
    'clone_value',

    # Transitions
    'Transition',

    # Definitions
    'PlaceDefinition',
    'ReductionDefinition',
    'TransitionDefinition',
    'NetDefinition',
    'load_net_definition',

    # Builder
    'NetBuilder',

    # Controller
    'NetController',
]
