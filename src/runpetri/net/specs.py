#!/usr/bin/env python3
"""
runpetri - Definition Layer

Declarative description of a net: its places and transitions. These models
validate JSON-style documents before the controller instantiates anything.

Both snake_case keys and the camelCase/legacy keys used by existing net
documents are accepted (``type`` for ``kind``, ``class`` for ``subtype``,
``transition`` or ``inhibitLabel`` for ``inhibit_label``, ``nodes`` for
``places``, ``initAccumulator``, ``valueChecking``).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, model_validator

from runpetri.exceptions import NetDefinitionError
from .place import PlaceKind


class PlaceDefinition(BaseModel):
    """Declaration of a single place"""
    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    id: str
    kind: PlaceKind = Field(
        default=PlaceKind.INTERNAL,
        validation_alias=AliasChoices("kind", "type"),
    )
    inhibit_label: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("inhibit_label", "inhibitLabel", "transition"),
    )
    subtype: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("subtype", "class"),
    )

    @model_validator(mode="after")
    def _check_inhibitor(self) -> "PlaceDefinition":
        if self.kind == PlaceKind.INHIBIT and not self.inhibit_label:
            raise ValueError(f"inhibit place {self.id!r} needs an inhibit_label")
        if self.kind == PlaceKind.EXIT and self.inhibit_label:
            raise ValueError(f"exit place {self.id!r} cannot inhibit a transition")
        return self


class ReductionDefinition(BaseModel):
    """Named reducer plus its seed; the seed must be present but may be zero"""
    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    reducer: str
    init_accumulator: Any = Field(
        validation_alias=AliasChoices("init_accumulator", "initAccumulator"),
    )

    @model_validator(mode="after")
    def _check_seed(self) -> "ReductionDefinition":
        if self.init_accumulator is None:
            raise ValueError(f"reduction {self.reducer!r} needs an init_accumulator")
        return self


class TransitionDefinition(BaseModel):
    """Declaration of a single transition"""
    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    label: str
    inputs: List[str] = Field(default_factory=list)
    outputs: List[str] = Field(default_factory=list)
    reduction: Optional[ReductionDefinition] = None
    value_checking: Dict[str, str] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("value_checking", "valueChecking"),
    )

    @model_validator(mode="after")
    def _check_wiring(self) -> "TransitionDefinition":
        if not self.inputs:
            raise ValueError(f"transition {self.label!r} has no inputs")
        unknown = set(self.value_checking) - set(self.inputs)
        if unknown:
            raise ValueError(
                f"transition {self.label!r} checks values of non-input places {sorted(unknown)}"
            )
        return self


class NetDefinition(BaseModel):
    """Complete declarative net"""
    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    places: List[PlaceDefinition] = Field(validation_alias=AliasChoices("places", "nodes"))
    transitions: List[TransitionDefinition]

    @classmethod
    def parse(cls, data: Union["NetDefinition", Dict[str, Any]]) -> "NetDefinition":
        """Validate a mapping, raising NetDefinitionError on failure"""
        if isinstance(data, cls):
            return data
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise NetDefinitionError(f"Invalid net definition: {e}") from e

    @classmethod
    def from_json(cls, text: Union[str, bytes]) -> "NetDefinition":
        try:
            return cls.model_validate_json(text)
        except ValidationError as e:
            raise NetDefinitionError(f"Invalid net definition: {e}") from e

    def place_ids(self) -> List[str]:
        return [p.id for p in self.places]


def parse_place(data: Union[PlaceDefinition, Dict[str, Any]]) -> PlaceDefinition:
    if isinstance(data, PlaceDefinition):
        return data
    try:
        return PlaceDefinition.model_validate(data)
    except ValidationError as e:
        raise NetDefinitionError(f"Invalid place definition: {e}") from e


def parse_transition(data: Union[TransitionDefinition, Dict[str, Any]]) -> TransitionDefinition:
    if isinstance(data, TransitionDefinition):
        return data
    try:
        return TransitionDefinition.model_validate(data)
    except ValidationError as e:
        raise NetDefinitionError(f"Invalid transition definition: {e}") from e


def load_net_definition(path: Union[str, Path]) -> NetDefinition:
    """Read and validate a JSON net definition file"""
    return NetDefinition.from_json(Path(path).read_text(encoding="utf-8"))
