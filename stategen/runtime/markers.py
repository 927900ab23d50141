"""Declarative markers for state definitions."""

import dataclasses
from dataclasses import dataclass, field
from typing import Any, TypeVar, overload

STATE_METADATA_KEY = "stategen"
STATE_OPTIONS_ATTR = "__stategen__"


@dataclass(frozen=True)
class FieldMarkers:
    """Delivery and lifecycle markers for one state field."""

    single: bool = False  # consume-once delivery
    persist: bool = False  # kept in the snapshot across restarts
    input: bool = False  # supplied by the caller at construction


@dataclass(frozen=True)
class StateOptions:
    """Options attached to a class by the @state decorator."""

    view_model: type | str | None = None


# Sentinel for missing default
_MISSING: Any = dataclasses.MISSING


def state_field(
    *,
    single: bool = False,
    persist: bool = False,
    input: bool = False,
    default: Any = _MISSING,
    default_factory: Any = _MISSING,
) -> Any:
    """Define a state field with generator markers.

    Args:
        single: Deliver each pushed value to one read only.
        persist: Include the field in saved snapshots.
        input: Take the initial value from the generated input type.
        default: Default value for the field.
        default_factory: Factory function for default value.

    Returns:
        A dataclass field with the markers attached as metadata.
    """
    metadata = {STATE_METADATA_KEY: FieldMarkers(single=single, persist=persist, input=input)}

    if default is not _MISSING:
        return field(default=default, metadata=metadata)
    if default_factory is not _MISSING:
        return field(default_factory=default_factory, metadata=metadata)
    return field(metadata=metadata)


T = TypeVar("T", bound=type)


@overload
def state(cls: T, /) -> T: ...


@overload
def state(*, view_model: type | str | None = None) -> Any: ...


def state(cls: Any = None, /, *, view_model: type | str | None = None) -> Any:
    """Mark a class as a state definition.

    Classes that are not dataclasses yet are turned into keyword-only frozen
    dataclasses, so input fields without defaults may follow defaulted ones.

    Example:
        @state(view_model=MainViewModel)
        class MainState:
            city: str = state_field(persist=True, default="Moscow")
            name: str = state_field(input=True)
            toast: str | None = state_field(single=True, default=None)
    """

    def wrap(target: T) -> T:
        if not dataclasses.is_dataclass(target):
            target = dataclass(target, frozen=True, kw_only=True)
        setattr(target, STATE_OPTIONS_ATTR, StateOptions(view_model=view_model))
        return target

    if cls is None:
        return wrap
    return wrap(cls)


def is_state(obj: object) -> bool:
    """Check if an object is a class marked with @state."""
    return isinstance(obj, type) and isinstance(
        obj.__dict__.get(STATE_OPTIONS_ATTR), StateOptions
    )


def state_options(cls: type) -> StateOptions | None:
    """Return the @state options of a class, if it has any."""
    options = cls.__dict__.get(STATE_OPTIONS_ATTR)
    return options if isinstance(options, StateOptions) else None
