"""Schema version classification.

The database stores a plain integer. Every comparison the engine makes goes
through ``SchemaVersion`` so that "no version", "a version we know" and
"a version newer than anything we know" are never confused.
"""

from dataclasses import dataclass
from enum import Enum
from functools import total_ordering


class VersionKind(str, Enum):
    """Where a raw version sits relative to the known migrations."""

    NONE_SET = "none_set"
    INSIDE = "inside"
    OUTSIDE = "outside"


@total_ordering
@dataclass(frozen=True)
class SchemaVersion:
    """A raw version number classified against a migration count."""

    kind: VersionKind
    value: int

    def __post_init__(self) -> None:
        if self.kind is VersionKind.NONE_SET and self.value != 0:
            raise ValueError(f"NONE_SET schema version must be 0, got {self.value}")
        if self.kind is not VersionKind.NONE_SET and self.value < 1:
            raise ValueError(f"{self.kind.value} schema version must be >= 1, got {self.value}")

    @classmethod
    def classify(cls, raw: int, max_version: int) -> "SchemaVersion":
        """Classify a raw database version.

        Args:
            raw: Version as stored in the database.
            max_version: Number of known migrations.

        Returns:
            NONE_SET for 0, INSIDE for 1..max_version, OUTSIDE above that.
        """
        if raw < 0:
            raise ValueError(f"schema version cannot be negative: {raw}")
        if raw == 0:
            return cls(VersionKind.NONE_SET, 0)
        if raw <= max_version:
            return cls(VersionKind.INSIDE, raw)
        return cls(VersionKind.OUTSIDE, raw)

    @property
    def is_set(self) -> bool:
        return self.kind is not VersionKind.NONE_SET

    @property
    def is_outside(self) -> bool:
        return self.kind is VersionKind.OUTSIDE

    def __int__(self) -> int:
        return self.value

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, SchemaVersion):
            return NotImplemented
        return self.value < other.value

    def __str__(self) -> str:
        if self.kind is VersionKind.NONE_SET:
            return "0 (no version set)"
        return f"{self.value} ({self.kind.value})"
