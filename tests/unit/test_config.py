from __future__ import annotations

import json
from pathlib import Path

import pytest

from shopwatch.config import Settings, load_allow_list
from shopwatch.domain.errors import ConfigurationError

CREDENTIAL = "0a" * 32


def test_settings_defaults() -> None:
    settings = Settings(_env_file=None)

    assert settings.query_timeout_ms == 5000
    assert settings.query_timeout_seconds == 5.0
    assert settings.http_port > 0
    assert settings.dsn.startswith("postgresql://")
    assert "db_password" not in repr(settings)


def test_settings_read_allowed_hosts_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SHOPWATCH_ENABLED", "true")
    monkeypatch.setenv(
        "SHOPWATCH_ALLOWED_HOSTS",
        json.dumps([{"address": "10.0.0.0/8", "credential": CREDENTIAL, "label": "ci"}]),
    )
    monkeypatch.setenv("SHOPWATCH_QUERY_TIMEOUT_MS", "1500")

    settings = Settings(_env_file=None)
    allow_list = load_allow_list(settings)

    assert settings.enabled is True
    assert settings.query_timeout_seconds == 1.5
    assert len(allow_list) == 1
    assert allow_list.entries[0].label == "ci"


def test_hosts_file_entries_follow_inline_entries(tmp_path: Path) -> None:
    hosts_file = tmp_path / "hosts.json"
    hosts_file.write_text(json.dumps([{"address": "::1", "credential": CREDENTIAL}]), encoding="utf-8")
    settings = Settings(
        _env_file=None,
        allowed_hosts=[{"address": "127.0.0.1", "credential": CREDENTIAL}],
        allowed_hosts_file=hosts_file,
    )

    allow_list = load_allow_list(settings)

    assert [entry.address for entry in allow_list.entries] == ["127.0.0.1", "::1"]


@pytest.mark.parametrize(
    ("entry", "message"),
    [
        ({"address": "10.0.0.0/33", "credential": CREDENTIAL}, "address"),
        ({"address": "10.0.0.1", "credential": "secret"}, "credential"),
        ({"address": "10.0.0.1"}, "credential"),
        ("10.0.0.1", "must be an object"),
    ],
)
def test_invalid_entries_fail_at_load_time(entry, message: str) -> None:
    settings = Settings(_env_file=None, allowed_hosts=[{"address": "127.0.0.1", "credential": CREDENTIAL}])
    settings.allowed_hosts.append(entry)

    with pytest.raises(ConfigurationError, match=r"Allowed host #1") as excinfo:
        load_allow_list(settings)
    assert message in str(excinfo.value)
    assert "secret" not in str(excinfo.value)


def test_unreadable_hosts_file(tmp_path: Path) -> None:
    broken = tmp_path / "hosts.json"
    broken.write_text("{not json", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="Cannot read allowed hosts file"):
        load_allow_list(Settings(_env_file=None, allowed_hosts_file=broken))
    with pytest.raises(ConfigurationError, match="Cannot read allowed hosts file"):
        load_allow_list(Settings(_env_file=None, allowed_hosts_file=tmp_path / "missing.json"))


def test_hosts_file_must_hold_a_list(tmp_path: Path) -> None:
    hosts_file = tmp_path / "hosts.json"
    hosts_file.write_text(json.dumps({"address": "127.0.0.1"}), encoding="utf-8")

    with pytest.raises(ConfigurationError, match="must contain a JSON list"):
        load_allow_list(Settings(_env_file=None, allowed_hosts_file=hosts_file))
