from pathlib import Path

import pytest
from pydantic import ValidationError

from alexa_prune.config import (
    DEFAULT_FILTER_TEXT,
    MAX_DELETE_ATTEMPTS,
    REQUEST_TIMEOUT_SECONDS,
    load_settings,
)


def test_defaults_without_env():
    s = load_settings(environ={})
    assert s.filter_text == DEFAULT_FILTER_TEXT
    assert s.request_timeout == REQUEST_TIMEOUT_SECONDS == 15.0
    assert s.max_attempts == MAX_DELETE_ATTEMPTS == 4
    assert s.debug is False
    assert s.should_sleep is False


def test_env_then_overrides():
    env = {
        "ALEXA_PRUNE_HOST": "pitangui.amazon.com",
        "ALEXA_PRUNE_DEBUG": "true",
        "ALEXA_PRUNE_FILTER_TEXT": "Hubitat",
        "ALEXA_PRUNE_SNAPSHOT_DIR": "/tmp/snaps",
        "ALEXA_PRUNE_TIMEOUT": "30",
    }
    s = load_settings(environ=env, filter_text="Homey", debug=None)
    assert s.host == "pitangui.amazon.com"
    assert s.debug is True
    assert s.filter_text == "Homey"
    assert s.snapshot_dir == Path("/tmp/snaps")
    assert s.request_timeout == 30.0


def test_settings_are_frozen():
    s = load_settings(environ={})
    with pytest.raises(ValidationError):
        s.host = "elsewhere"


def test_invalid_values_rejected():
    with pytest.raises(ValidationError):
        load_settings(environ={"ALEXA_PRUNE_HOST": ""}, host="")
    with pytest.raises(ValidationError):
        load_settings(environ={}, request_timeout=0)


def test_urls_built_from_host_and_skill():
    s = load_settings(environ={}, host="example.test", delete_skill="SK")
    assert s.entities_url == "https://example.test/api/behaviors/entities?skillId=amzn1.ask.1p.smarthome"
    assert s.graphql_url == "https://example.test/nexus/v1/graphql"
    assert s.delete_url_prefix == "https://example.test/api/phoenix/appliance/SK%3D%3D_"
    assert s.verify_url("e 1") == "https://example.test/api/smarthome/v1/presentation/devices/control/e%201"
    assert s.entity_snapshot_path.name == "data.json"
    assert s.graphql_snapshot_path.name == "graphql.json"


def test_default_dirs_follow_working_directory(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    s = load_settings(environ={})
    assert s.snapshot_dir == tmp_path
    assert s.entity_snapshot_path == tmp_path / "data.json"
    assert s.log_dir == tmp_path / "logs"


def test_log_dir_from_env():
    s = load_settings(environ={"ALEXA_PRUNE_LOG_DIR": "/var/tmp/alexa-logs"})
    assert s.log_dir == Path("/var/tmp/alexa-logs")
