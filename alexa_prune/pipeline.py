from __future__ import annotations

from typing import Iterable

from loguru import logger

from .config import PruneSettings
from .deletion import DeletionOrchestrator, FailureAggregator
from .device_id import derive_device_id
from .filtering import select_candidates
from .pipeline_types import (
    ENDPOINT_PASS,
    ENTITY_PASS,
    CandidateRecord,
    FailureReport,
    PassSpec,
)
from .report import format_failure
from .snapshots import SnapshotSource


def run_pass(
    records: Iterable[CandidateRecord],
    spec: PassSpec,
    orchestrator: DeletionOrchestrator,
    filter_text: str,
) -> FailureAggregator:
    """Filter -> derive -> delete/verify for one snapshot, strictly one device at a time."""
    aggregator = FailureAggregator(spec.name)
    candidates = select_candidates(records, filter_text, field=spec.filter_field)
    logger.info("{}: {} candidate(s) matching '{}'", spec.name, len(candidates), filter_text)

    for candidate in candidates:
        device_id = derive_device_id(candidate.description)
        logger.info(
            "Name: '{}', Entity ID: '{}', Device ID: '{}', Description: '{}'",
            candidate.display_name,
            candidate.identifier,
            device_id,
            candidate.description,
        )
        result = orchestrator.delete_and_verify(
            candidate.identifier,
            device_id,
            name=candidate.display_name,
            label=spec.kind.value.capitalize(),
        )
        aggregator.add(candidate, device_id, result)

    if len(aggregator):
        logger.warning("Failed to delete the following {}:", aggregator.name)
        for failure in aggregator:
            logger.warning(format_failure(failure, verbose=True))
    return aggregator


def merge_reports(entities: FailureAggregator, endpoints: FailureAggregator) -> FailureReport:
    return FailureReport(
        entity_failures=entities.failures,
        endpoint_failures=endpoints.failures,
    )


def run_pipeline(
    settings: PruneSettings,
    source: SnapshotSource,
    orchestrator: DeletionOrchestrator,
) -> FailureReport:
    """
    Entity pass, then endpoint-graph pass, then merge.

    Each snapshot is fetched right before its pass so the second view
    reflects whatever the first pass already removed.
    """
    source.fetch_entity_snapshot()
    entity_failures = run_pass(source.entity_candidates(), ENTITY_PASS, orchestrator, settings.filter_text)

    source.fetch_endpoint_graph_snapshot()
    endpoint_failures = run_pass(source.endpoint_candidates(), ENDPOINT_PASS, orchestrator, settings.filter_text)

    return merge_reports(entity_failures, endpoint_failures)
