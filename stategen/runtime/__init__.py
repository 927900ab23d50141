"""Runtime support for generated state containers."""

from .channel import Observable, StateChannel, Subscription
from .events import Event, MultiEvent, SingleEvent, wrap
from .factory import StateFactory
from .markers import FieldMarkers, StateOptions, is_state, state, state_field, state_options
from .snapshot import (
    MemorySnapshotStore,
    Snapshot,
    SnapshotDecodeError,
    SnapshotStore,
    restore_snapshot,
    snapshot_key,
)

__all__ = [
    "Event",
    "FieldMarkers",
    "MemorySnapshotStore",
    "MultiEvent",
    "Observable",
    "SingleEvent",
    "Snapshot",
    "SnapshotDecodeError",
    "SnapshotStore",
    "StateChannel",
    "StateFactory",
    "StateOptions",
    "Subscription",
    "is_state",
    "restore_snapshot",
    "snapshot_key",
    "state",
    "state_field",
    "state_options",
    "wrap",
]
