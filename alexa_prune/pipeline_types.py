"""Typed containers shared across pipeline modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class RecordKind(str, Enum):
    ENTITY = "entity"
    ENDPOINT = "endpoint"


class DeletionState(str, Enum):
    """Delete/verify state machine. CONFIRMED and UNCONFIRMED are terminal."""

    IDLE = "idle"
    REQUESTED = "requested"
    VERIFYING = "verifying"
    CONFIRMED = "confirmed"
    UNCONFIRMED = "unconfirmed"


@dataclass(frozen=True)
class CandidateRecord:
    """
    One device as seen in a snapshot.

    identifier is only used for the verification read; description is
    always a string (absent in the snapshot -> "").
    """

    kind: RecordKind
    identifier: str
    display_name: str
    description: str = ""
    manufacturer: Optional[str] = None


@dataclass(frozen=True)
class DeletionAttemptResult:
    succeeded: bool
    attempts_made: int


@dataclass(frozen=True)
class FailureRecord:
    display_name: str
    identifier: str
    device_id: str
    description: str


@dataclass(frozen=True)
class PassSpec:
    """Which snapshot a pass reads and which text field feeds the filter."""

    name: str
    kind: RecordKind
    filter_field: str


ENTITY_PASS = PassSpec(name="entities", kind=RecordKind.ENTITY, filter_field="description")
ENDPOINT_PASS = PassSpec(name="endpoints", kind=RecordKind.ENDPOINT, filter_field="manufacturer")


@dataclass(frozen=True)
class FailureReport:
    """Merged outcome of both passes, each list in processing order."""

    entity_failures: Tuple[FailureRecord, ...] = field(default_factory=tuple)
    endpoint_failures: Tuple[FailureRecord, ...] = field(default_factory=tuple)

    @property
    def failures(self) -> Tuple[FailureRecord, ...]:
        return self.entity_failures + self.endpoint_failures

    @property
    def is_clean(self) -> bool:
        return not self.failures
