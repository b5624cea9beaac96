from __future__ import annotations

import time
from typing import Callable, List, Optional, Tuple

from loguru import logger

from .config import NOT_FOUND_STATUS, PruneSettings
from .pipeline_types import (
    CandidateRecord,
    DeletionAttemptResult,
    DeletionState,
    FailureRecord,
)
from .transport import AlexaTransport, TransportError, build_headers


class DeletionOrchestrator:
    """
    Issues the DELETE for one device and checks it independently.

    Only a 404 from the verification read counts as deleted. The attempt
    loop is bounded by settings.max_attempts but always exits after the
    first verification: one DELETE per device.
    """

    def __init__(
        self,
        transport: AlexaTransport,
        settings: PruneSettings,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.transport = transport
        self.settings = settings
        self._sleep = sleep
        self.state = DeletionState.IDLE
        self.history: List[DeletionState] = [DeletionState.IDLE]

    def _enter(self, state: DeletionState) -> None:
        self.state = state
        self.history.append(state)

    def _request_delete(self, device_id: str) -> None:
        url = f"{self.settings.delete_url_prefix}{device_id}"
        status, body = self.transport.send("DELETE", url, build_headers(self.settings, "delete"))
        logger.debug("Response Status Code: {}", status)
        logger.debug("Response Text: {}", body)

    def verify_deleted(self, identifier: str) -> bool:
        """True only when the status endpoint says the device is gone."""
        url = self.settings.verify_url(identifier)
        try:
            status, body = self.transport.send("GET", url, build_headers(self.settings, "verify"))
        except TransportError as e:
            logger.debug("Error checking device deletion: {}", e)
            return False
        logger.debug("Check device deleted status: {}", status)
        logger.debug("Check device deleted body: {}", body)
        return status == NOT_FOUND_STATUS

    def delete_and_verify(
        self,
        identifier: str,
        device_id: str,
        name: str = "",
        label: str = "Entity",
    ) -> DeletionAttemptResult:
        self.state = DeletionState.IDLE
        self.history = [DeletionState.IDLE]

        succeeded = False
        attempts = 0
        for attempt in range(self.settings.max_attempts):
            attempts = attempt + 1

            self._enter(DeletionState.REQUESTED)
            self._request_delete(device_id)

            self._enter(DeletionState.VERIFYING)
            if self.verify_deleted(identifier):
                self._enter(DeletionState.CONFIRMED)
                logger.debug("{} {}:{} successfully deleted.", label, name, identifier)
                succeeded = True
            else:
                self._enter(DeletionState.UNCONFIRMED)
                logger.warning("{} {}:{} was not deleted. Attempt {}.", label, name, identifier, attempts)
            break

        self.pace()
        return DeletionAttemptResult(succeeded=succeeded, attempts_made=attempts)

    def pace(self) -> None:
        if self.settings.should_sleep and self.settings.pace_seconds > 0:
            self._sleep(self.settings.pace_seconds)


class FailureAggregator:
    """Unconfirmed deletions for one pass, in processing order, no dedup."""

    def __init__(self, name: str = ""):
        self.name = name
        self._failures: List[FailureRecord] = []

    def record(self, candidate: CandidateRecord, device_id: str) -> FailureRecord:
        failure = FailureRecord(
            display_name=candidate.display_name,
            identifier=candidate.identifier,
            device_id=device_id,
            description=candidate.description,
        )
        self._failures.append(failure)
        return failure

    def add(self, candidate: CandidateRecord, device_id: str, result: DeletionAttemptResult) -> Optional[FailureRecord]:
        if result.succeeded:
            return None
        return self.record(candidate, device_id)

    @property
    def failures(self) -> Tuple[FailureRecord, ...]:
        return tuple(self._failures)

    def __len__(self) -> int:
        return len(self._failures)

    def __iter__(self):
        return iter(self._failures)
