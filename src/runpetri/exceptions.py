#!/usr/bin/env python3
"""
runpetri exceptions.

All runpetri exceptions inherit from RunPetriError for easy catching.
Configuration problems are detected while a net is being built or rebound;
nothing in this module is raised by the engine during a cascade.
"""


class RunPetriError(Exception):
    """Base exception for all runpetri errors."""


class NetConfigurationError(RunPetriError):
    """The net topology or its collaborators are malformed."""


class NetDefinitionError(NetConfigurationError):
    """A declarative net definition document failed validation."""


class UnknownPlaceError(NetConfigurationError):
    """A place id was referenced that does not exist in the net."""


class DuplicatePlaceError(NetConfigurationError):
    """Two places were declared with the same id."""


class DuplicateNodeError(NetConfigurationError):
    """A place was registered twice on the same transition."""


class PlaceClaimedError(NetConfigurationError):
    """A non-inhibitor place was used as plain input by more than one transition."""


class ExitCallbackError(NetConfigurationError):
    """An exit callback is not callable or targets a non-exit place."""


class UnknownVariantError(NetConfigurationError):
    """A place definition named a place variant that is not registered."""
