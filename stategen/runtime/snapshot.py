"""Snapshots of persisted state and the stores that hold them."""

import dataclasses
import json
import logging
import typing
from typing import Protocol, Self, TypeVar

from dataclasses_json import DataClassJsonMixin
from marshmallow import ValidationError

logger = logging.getLogger(__name__)

SNAPSHOT_KEY_SUFFIX = "_BUNDLE_KEY"


class SnapshotDecodeError(RuntimeError):
    """Raised when a stored blob cannot be decoded into a snapshot type."""


def snapshot_key(name: str) -> str:
    """Return the store key used for a definition's snapshot."""
    return f"{name.upper()}{SNAPSHOT_KEY_SUFFIX}"


class Snapshot(DataClassJsonMixin):
    """Base class for generated snapshot types.

    Subclasses are @dataclass decorated and hold only persisted fields.

    Example:
        @dataclass
        class MainStateSnapshot(Snapshot):
            city: str
    """

    def encode(self) -> str:
        """Serialize this snapshot to a JSON blob."""
        return self.to_json()

    @classmethod
    def decode(cls, blob: str | bytes) -> Self:
        """Deserialize a blob produced by encode().

        Raises:
            SnapshotDecodeError: If the blob is malformed or does not match
                this snapshot type.
        """
        try:
            data = json.loads(blob)
        except (TypeError, ValueError) as e:
            raise SnapshotDecodeError(f"{cls.__name__}: blob is not valid JSON") from e
        if not isinstance(data, dict):
            raise SnapshotDecodeError(f"{cls.__name__}: expected a JSON object")
        try:
            cls._resolve_field_types()
            return cls.schema().load(data)
        except (
            ValidationError,
            NameError,
            TypeError,
            ValueError,
            KeyError,
            AttributeError,
        ) as e:
            raise SnapshotDecodeError(f"{cls.__name__}: {e}") from e

    @classmethod
    def _resolve_field_types(cls) -> None:
        # schema() builds its fields from Field.type as written, and postponed
        # annotations leave that as a string that nothing validates against.
        hints = None
        for f in dataclasses.fields(cls):
            if isinstance(f.type, str):
                if hints is None:
                    hints = typing.get_type_hints(cls)
                f.type = hints[f.name]


TSnapshot = TypeVar("TSnapshot", bound=Snapshot)


class SnapshotStore(Protocol):
    """Key to serialized-blob store owned by the host framework."""

    def save_snapshot(self, key: str, snapshot: Snapshot) -> None: ...

    def load_snapshot(self, key: str) -> str | None: ...


class MemorySnapshotStore:
    """In-process snapshot store.

    Holds serialized blobs, so a snapshot restored from it is always a fresh
    object decoded from what was saved.
    """

    def __init__(self, blobs: dict[str, str] | None = None) -> None:
        self.blobs: dict[str, str] = dict(blobs or {})

    def save_snapshot(self, key: str, snapshot: Snapshot) -> None:
        self.blobs[key] = snapshot.encode()

    def load_snapshot(self, key: str) -> str | None:
        return self.blobs.get(key)

    def __contains__(self, key: str) -> bool:
        return key in self.blobs


def restore_snapshot(
    source: SnapshotStore | None, key: str, snapshot_type: type[TSnapshot]
) -> TSnapshot | None:
    """Load and decode a snapshot, or return None if there is nothing to restore.

    A missing source, a missing key and an undecodable blob all mean
    "no restore happened".
    """
    if source is None:
        return None
    blob = source.load_snapshot(key)
    if blob is None:
        return None
    try:
        return snapshot_type.decode(blob)
    except SnapshotDecodeError as e:
        logger.warning("Ignoring snapshot %s: %s", key, e)
        return None
