from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------
# Paths
# ---------------------------

# Relative to the working directory the command is run from
SNAPSHOT_DIR_NAME = "."
ENTITY_SNAPSHOT_FILE = "data.json"
GRAPHQL_SNAPSHOT_FILE = "graphql.json"

LOG_DIR_NAME = "logs"


# ---------------------------
# Alexa account defaults (override via env)
# ---------------------------

DEFAULT_HOST = "na-api-alexa.amazon.ca"
DEFAULT_USER_AGENT = (
    "AppleWebKit PitanguiBridge/2.2.635412.0-[HARDWARE=iPhone17_3][SOFTWARE=18.2][DEVICE=iPhone]"
)
DEFAULT_ROUTINES_VERSION = "3.0.255246"

ACCEPT_HEADER = "application/json; charset=utf-8"
ACCEPT_LANGUAGE_HEADER = "en-CA,en-CA;q=1.0,ar-CA;q=0.9"

SMART_HOME_SKILL_ID = "amzn1.ask.1p.smarthome"


# ---------------------------
# Filtering / device id
# ---------------------------

DEFAULT_FILTER_TEXT = "Home Assistant"

# Suffix the HA skill appends to every description; stripped before building the URL.
VIA_SUFFIX = " via Home Assistant"


# ---------------------------
# Deletion policy
# ---------------------------

REQUEST_TIMEOUT_SECONDS = 15.0
MAX_DELETE_ATTEMPTS = 4
PACE_SECONDS = 0.2

# Verification endpoint answers 404 once the device is gone
NOT_FOUND_STATUS = 404


# ---------------------------
# GraphQL
# ---------------------------

ENDPOINTS_QUERY = """
query CustomerSmartHome {
  endpoints(endpointsQueryParams: { paginationParams: { disablePagination: true } }) {
    items {
      friendlyName
      legacyAppliance {
        applianceId
        mergedApplianceIds
        connectedVia
        applianceKey
        appliancePairs
        modelName
        friendlyDescription
        version
        friendlyName
        manufacturerName
      }
    }
  }
}
"""


# ---------------------------
# Env loading
# ---------------------------

ENV_PREFIX = "ALEXA_PRUNE_"

# env suffix -> settings field
ENV_FIELDS: Dict[str, str] = {
    "HOST": "host",
    "COOKIE": "cookie",
    "CSRF": "csrf",
    "ALEXA_APP": "alexa_app",
    "DELETE_SKILL": "delete_skill",
    "USER_AGENT": "user_agent",
    "ROUTINES_VERSION": "routines_version",
    "FILTER_TEXT": "filter_text",
    "DEBUG": "debug",
    "SHOULD_SLEEP": "should_sleep",
    "SNAPSHOT_DIR": "snapshot_dir",
    "LOG_DIR": "log_dir",
    "TIMEOUT": "request_timeout",
}

_TRUTHY = {"1", "true", "yes", "on"}


class PruneSettings(BaseModel):
    """
    Everything a run needs, built once by load_settings() and handed to
    each component. Frozen so nothing mutates it mid-run.
    """

    model_config = ConfigDict(frozen=True)

    host: str = Field(default=DEFAULT_HOST, min_length=1)
    cookie: str = ""
    csrf: str = ""
    alexa_app: str = ""
    delete_skill: str = ""
    user_agent: str = DEFAULT_USER_AGENT
    routines_version: str = DEFAULT_ROUTINES_VERSION

    filter_text: str = DEFAULT_FILTER_TEXT

    debug: bool = False
    should_sleep: bool = False
    pace_seconds: float = Field(default=PACE_SECONDS, ge=0.0)
    request_timeout: float = Field(default=REQUEST_TIMEOUT_SECONDS, gt=0.0)
    max_attempts: int = Field(default=MAX_DELETE_ATTEMPTS, ge=1)

    snapshot_dir: Path = Field(default_factory=lambda: Path.cwd() / SNAPSHOT_DIR_NAME)
    log_dir: Path = Field(default_factory=lambda: Path.cwd() / LOG_DIR_NAME)

    @property
    def entities_url(self) -> str:
        return f"https://{self.host}/api/behaviors/entities?skillId={SMART_HOME_SKILL_ID}"

    @property
    def graphql_url(self) -> str:
        return f"https://{self.host}/nexus/v1/graphql"

    @property
    def delete_url_prefix(self) -> str:
        return f"https://{self.host}/api/phoenix/appliance/{self.delete_skill}%3D%3D_"

    def verify_url(self, identifier: str) -> str:
        return (
            f"https://{self.host}/api/smarthome/v1/presentation/devices/control/"
            f"{quote(identifier or '', safe='')}"
        )

    @property
    def entity_snapshot_path(self) -> Path:
        return self.snapshot_dir / ENTITY_SNAPSHOT_FILE

    @property
    def graphql_snapshot_path(self) -> Path:
        return self.snapshot_dir / GRAPHQL_SNAPSHOT_FILE


def _env_value(field: str, raw: str) -> Any:
    if field in ("debug", "should_sleep"):
        return raw.strip().lower() in _TRUTHY
    return raw


def load_settings(environ: Optional[Dict[str, str]] = None, **overrides: Any) -> PruneSettings:
    """
    Build the run settings: defaults, then ALEXA_PRUNE_* env vars, then
    explicit overrides (None values are ignored so CLI flags can pass through).
    """
    env = os.environ if environ is None else environ
    values: Dict[str, Any] = {}
    for suffix, field in ENV_FIELDS.items():
        raw = env.get(ENV_PREFIX + suffix)
        if raw is not None and raw != "":
            values[field] = _env_value(field, raw)

    values.update({k: v for k, v in overrides.items() if v is not None})
    return PruneSettings(**values)
