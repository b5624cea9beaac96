from __future__ import annotations

"""
Snapshot capture and decoding for both device views.

Each fetch writes the raw response body to the snapshot directory; the
delete stage reads it back. Decoding is two-phase:

* strict: validate against the expected pydantic schema
* tolerant: if the shape is off, walk the generic JSON tree and pull the
  handful of leaves we need, defaulting each one explicitly

Anything that is missing, not JSON, or has the wrong root kind raises
SnapshotError and ends the run.
"""

import json
from pathlib import Path
from typing import Any, List, Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from .config import ENDPOINTS_QUERY, PruneSettings
from .pipeline_types import CandidateRecord, RecordKind
from .transport import AlexaTransport, build_headers


class SnapshotError(ValueError):
    """Snapshot capture is missing or cannot be decoded at all."""


class _Absent:
    """Marker for a leaf that is not present in the JSON tree."""

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = _Absent()


# ---------------------------
# Strict schemas
# ---------------------------

class EntityModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    displayName: str
    description: Optional[str] = None


class LegacyApplianceModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    applianceKey: Optional[str] = None
    friendlyDescription: Optional[str] = None
    manufacturerName: Optional[str] = None


class EndpointItemModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    friendlyName: Optional[str] = None
    legacyAppliance: Optional[LegacyApplianceModel] = None


class EndpointsModel(BaseModel):
    items: List[EndpointItemModel]


class GraphqlDataModel(BaseModel):
    endpoints: EndpointsModel


class GraphqlResponseModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    data: GraphqlDataModel


_ENTITY_LIST = TypeAdapter(List[EntityModel])


# ---------------------------
# Tolerant extraction helpers
# ---------------------------

def leaf(tree: Any, *path: str) -> Any:
    """Follow object keys down `path`; ABSENT as soon as a step is missing."""
    node = tree
    for key in path:
        if not isinstance(node, dict) or key not in node:
            return ABSENT
        node = node[key]
    return node


def leaf_text(value: Any, default: Optional[str] = "") -> Optional[str]:
    """Render a leaf as text. ABSENT and null fall back to `default`."""
    if value is ABSENT or value is None:
        return default
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value)


def _parse_json(path: Path) -> Any:
    if not path.exists():
        raise SnapshotError(f"Snapshot file not found: {path}")
    text = path.read_text(encoding="utf-8")
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise SnapshotError(f"Snapshot {path} is not valid JSON: {e}") from e


# ---------------------------
# Decoders
# ---------------------------

def decode_entities(path: Path) -> List[CandidateRecord]:
    tree = _parse_json(path)
    if not isinstance(tree, list):
        raise SnapshotError(f"Entity snapshot {path} must be a JSON array, got {type(tree).__name__}")

    try:
        models = _ENTITY_LIST.validate_python(tree)
    except ValidationError as e:
        logger.warning("Entity snapshot did not match schema ({} errors); using tolerant parse", e.error_count())
        return [
            CandidateRecord(
                kind=RecordKind.ENTITY,
                identifier=leaf_text(leaf(el, "id")),
                display_name=leaf_text(leaf(el, "displayName")),
                description=leaf_text(leaf(el, "description")),
            )
            for el in tree
        ]

    return [
        CandidateRecord(
            kind=RecordKind.ENTITY,
            identifier=m.id,
            display_name=m.displayName,
            description=m.description or "",
        )
        for m in models
    ]


def decode_endpoints(path: Path) -> List[CandidateRecord]:
    tree = _parse_json(path)
    if not isinstance(tree, dict):
        raise SnapshotError(f"Endpoint snapshot {path} must be a JSON object, got {type(tree).__name__}")

    try:
        model = GraphqlResponseModel.model_validate(tree)
    except ValidationError as e:
        logger.warning("Endpoint snapshot did not match schema ({} errors); using tolerant parse", e.error_count())
        return _tolerant_endpoints(tree)

    out: List[CandidateRecord] = []
    for item in model.data.endpoints.items:
        legacy = item.legacyAppliance or LegacyApplianceModel()
        out.append(
            CandidateRecord(
                kind=RecordKind.ENDPOINT,
                identifier=legacy.applianceKey or "",
                display_name=item.friendlyName or "",
                description=legacy.friendlyDescription or "",
                manufacturer=legacy.manufacturerName,
            )
        )
    return out


def _tolerant_endpoints(tree: dict) -> List[CandidateRecord]:
    items = leaf(tree, "data", "endpoints", "items")
    if not isinstance(items, list):
        logger.warning("Endpoint snapshot has no data.endpoints.items; nothing to process")
        return []

    out: List[CandidateRecord] = []
    for el in items:
        out.append(
            CandidateRecord(
                kind=RecordKind.ENDPOINT,
                identifier=leaf_text(leaf(el, "legacyAppliance", "applianceKey")),
                display_name=leaf_text(leaf(el, "friendlyName")),
                description=leaf_text(leaf(el, "legacyAppliance", "friendlyDescription")),
                manufacturer=leaf_text(leaf(el, "legacyAppliance", "manufacturerName"), default=None),
            )
        )
    return out


# ---------------------------
# Source
# ---------------------------

class SnapshotSource:
    """Fetches both device views and hands them back as candidate records."""

    def __init__(self, transport: AlexaTransport, settings: PruneSettings):
        self.transport = transport
        self.settings = settings

    def _persist(self, path: Path, body: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(body, encoding="utf-8")
        logger.info("Snapshot written to {}", path)

    def fetch_entity_snapshot(self) -> Path:
        s = self.settings
        status, body = self.transport.send("GET", s.entities_url, build_headers(s, "fetch"))
        logger.debug("Entity fetch: HTTP {}", status)
        if not body.strip():
            logger.warning("Empty response received from server.")
            body = "[]"
        self._persist(s.entity_snapshot_path, body)
        return s.entity_snapshot_path

    def fetch_endpoint_graph_snapshot(self) -> Path:
        s = self.settings
        status, body = self.transport.send(
            "POST",
            s.graphql_url,
            build_headers(s, "graphql"),
            json_body={"query": ENDPOINTS_QUERY},
        )
        logger.debug("GraphQL fetch: HTTP {}", status)
        self._persist(s.graphql_snapshot_path, body)
        return s.graphql_snapshot_path

    def entity_candidates(self) -> List[CandidateRecord]:
        return decode_entities(self.settings.entity_snapshot_path)

    def endpoint_candidates(self) -> List[CandidateRecord]:
        return decode_endpoints(self.settings.graphql_snapshot_path)
