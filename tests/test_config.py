"""Tests for profile / environment / override merging and validation."""

import pytest

from log_streamer.core.config import (
    DEFAULT_DESTINATION,
    Settings,
    load_profile,
    load_settings,
    resolve_profile_path,
)
from log_streamer.errors import ConfigError


def test_baseline_profile_defaults():
    settings = load_settings(environ={})

    assert settings.interval_ms == 1000
    assert settings.interval_sec == 1.0
    assert (settings.batch_size_min, settings.batch_size_max) == (2, 5)
    assert settings.batch_size is None
    assert settings.duration_sec == 60
    assert settings.destination == DEFAULT_DESTINATION
    assert settings.overflow_policy == "drop_oldest"


def test_burst_profile_runs_until_stopped():
    settings = load_settings("burst", environ={})

    assert settings.interval_ms == 10
    assert settings.duration_sec is None


def test_environment_overrides_profile_and_cli_overrides_environment():
    environ = {"LS_AUTH_KEY": "from-env", "LS_INTERVAL_MS": "250", "LS_BATCH_SIZE": "4"}

    settings = load_settings(
        overrides={"interval_ms": 100, "auth_key": None},
        environ=environ,
    )

    assert settings.auth_key == "from-env"
    assert settings.batch_size == 4
    assert settings.interval_ms == 100


def test_zero_duration_means_no_auto_stop():
    settings = load_settings(overrides={"duration_sec": 0.0}, environ={})
    assert settings.duration_sec is None


def test_bad_environment_value():
    with pytest.raises(ConfigError, match="LS_PORT"):
        load_settings(environ={"LS_PORT": "eighty"})


def test_missing_profile():
    with pytest.raises(ConfigError, match="profile not found"):
        load_settings("does-not-exist", environ={})


def test_custom_profile_file(tmp_path):
    path = tmp_path / "steady.yaml"
    path.write_text("interval_ms: 200\nbatch_size_range: [4, 4]\nunknown_key: 1\n")

    settings = load_settings(str(path), environ={})

    assert settings.interval_ms == 200
    assert (settings.batch_size_min, settings.batch_size_max) == (4, 4)


def test_profile_must_be_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n")

    with pytest.raises(ConfigError):
        load_profile(path)


def test_resolve_profile_path():
    assert resolve_profile_path(None).name == "baseline.yaml"
    assert resolve_profile_path("burst").name == "burst.yaml"
    assert str(resolve_profile_path("/tmp/x.yml")) == "/tmp/x.yml"


def test_credential_required_unless_dry_run():
    with pytest.raises(ConfigError, match="Authentication key is required"):
        Settings().validate()

    assert Settings(dry_run=True).validate().dry_run


@pytest.mark.parametrize(
    "kwargs",
    [
        {"destination": "ftp://example.com"},
        {"interval_ms": 0},
        {"batch_size": 0},
        {"batch_size_min": 6, "batch_size_max": 5},
        {"duration_sec": -1},
        {"sink_timeout_sec": 0},
        {"log_interval_sec": 0},
        {"log_interval_sec": -1},
        {"subscriber_queue_size": 0},
        {"overflow_policy": "block"},
    ],
)
def test_invalid_settings(kwargs):
    with pytest.raises(ConfigError):
        Settings(auth_key="k", **kwargs).validate()


def test_valid_settings_pass_through():
    settings = Settings(auth_key="k")
    assert settings.validate() is settings
