from __future__ import annotations

from typing import List

from .pipeline_types import FailureRecord, FailureReport


def format_failure(failure: FailureRecord, verbose: bool = False) -> str:
    line = f"Name: '{failure.display_name}', Entity ID: '{failure.identifier}'"
    if verbose:
        line += f", Device ID: '{failure.device_id}', Description: '{failure.description}'"
    return line


def summarize(report: FailureReport, filter_text: str) -> List[str]:
    """Final run summary, one string per output line."""
    if report.is_clean:
        return [
            f"Done, removed all entities and endpoints with a manufacturer/name matching: {filter_text}"
        ]

    lines = ["Summary of all failed deletions:"]
    if report.entity_failures:
        lines.append("Failed Entities:")
        lines.extend(format_failure(f) for f in report.entity_failures)
    if report.endpoint_failures:
        lines.append("Failed Endpoints:")
        lines.extend(format_failure(f) for f in report.endpoint_failures)
    return lines
