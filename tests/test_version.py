"""Tests for InfluxDB dialects, version parsing and detection."""

import base64

import pytest
from conftest import FakeTransport

from influx_exporter.config import InfluxConfig
from influx_exporter.exceptions import ExporterIOError
from influx_exporter.exporter.settings import ConnectionSettings, parse_major_version
from influx_exporter.exporter.version import (
    InfluxVersionV1,
    InfluxVersionV2,
    resolve_version,
    select_version,
)


# ---------------------------------------------------------------------------
# Major version parsing
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "version, major",
    [
        ("1.8.3", 1),
        ("2.0", 2),
        ("v2.1", 2),
        ("2", 2),
        ("unknown", 1),
        ("", 1),
        (None, 1),
        ("3.0.0-beta", 3),
    ],
)
def test_parse_major_version(version, major):
    assert parse_major_version(version) == major


def test_settings_major_version_follows_cache():
    settings = ConnectionSettings()
    assert settings.version is None
    assert settings.major_version == 1
    assert settings.set_version_if_absent("v2.7.1") is True
    assert settings.major_version == 2


def test_version_is_set_only_once():
    settings = ConnectionSettings()
    assert settings.set_version_if_absent("1.8.10")
    assert not settings.set_version_if_absent("2.0")
    assert settings.version == "1.8.10"
    settings.reset_version()
    assert settings.version is None
    assert settings.set_version_if_absent("2.0")
    assert settings.version == "2.0"


def test_settings_from_config_round_trip():
    config = InfluxConfig(host="db", port=8087, user="u", password="p", database="d", ssl=True)
    settings = ConnectionSettings.from_config(config)
    assert settings.connection_url == "https://db:8087/"
    assert settings.to_config() == config


def test_empty_credentials_are_unset():
    settings = ConnectionSettings.from_config(InfluxConfig(user="", password=""))
    assert settings.user is None
    assert settings.password is None
    assert not settings.has_credentials


# ---------------------------------------------------------------------------
# Dialects
# ---------------------------------------------------------------------------

class TestInfluxVersionV1:
    def test_write_url(self):
        settings = ConnectionSettings(host="h", port=8086, database="d")
        assert InfluxVersionV1().build_write_url(settings) == "http://h:8086/write?db=d&precision=s"

    def test_write_url_ssl(self):
        settings = ConnectionSettings(host="h", port=443, database="d", ssl=True)
        assert InfluxVersionV1().build_write_url(settings) == "https://h:443/write?db=d&precision=s"

    def test_basic_auth(self):
        settings = ConnectionSettings(user="admin", password="s3cret")
        expected = base64.b64encode(b"admin:s3cret").decode("ascii")
        assert InfluxVersionV1().build_auth_headers(settings) == {
            "Authorization": f"Basic {expected}"
        }

    def test_basic_auth_replaces_non_latin1_characters(self):
        settings = ConnectionSettings(user="admin", password="pass\u20ac\u00e9")
        expected = base64.b64encode("admin:pass?\u00e9".encode("iso-8859-1")).decode("ascii")
        assert InfluxVersionV1().build_auth_headers(settings) == {
            "Authorization": f"Basic {expected}"
        }

    def test_no_auth_without_both_credentials(self):
        assert InfluxVersionV1().build_auth_headers(ConnectionSettings(user="admin")) == {}
        assert InfluxVersionV1().build_auth_headers(ConnectionSettings(password="x")) == {}


class TestInfluxVersionV2:
    def test_write_url(self):
        settings = ConnectionSettings(host="h", port=8086, database="d", user="org1", ssl=True)
        assert InfluxVersionV2().build_write_url(settings) == (
            "https://h:8086/api/v2/write?bucket=d&precision=s&org=org1"
        )

    def test_write_url_without_org(self):
        settings = ConnectionSettings(host="h", port=8086, database="d")
        assert InfluxVersionV2().build_write_url(settings).endswith("&org=")

    def test_token_auth(self):
        settings = ConnectionSettings(user="org1", password="tok")
        assert InfluxVersionV2().build_auth_headers(settings) == {"Authorization": "Token tok"}

    def test_no_auth_without_org(self):
        assert InfluxVersionV2().build_auth_headers(ConnectionSettings(password="tok")) == {}


def test_select_version():
    assert isinstance(select_version(1), InfluxVersionV1)
    assert isinstance(select_version(2), InfluxVersionV2)
    assert select_version(0) is None
    assert select_version(3) is None


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------

class TestResolveVersion:
    def test_reads_version_header(self):
        transport = FakeTransport(version="v2.1")
        settings = ConnectionSettings(host="influx", port=8086)
        assert resolve_version(transport, settings) == "v2.1"
        assert [r.url for r in transport.probes] == ["http://influx:8086/"]

    def test_missing_header_is_unknown(self):
        transport = FakeTransport(version=None)
        assert resolve_version(transport, ConnectionSettings()) == "unknown"

    def test_does_not_cache(self):
        settings = ConnectionSettings()
        resolve_version(FakeTransport(), settings)
        assert settings.version is None

    def test_transport_failure_propagates(self):
        transport = FakeTransport(probe_failures=1)
        with pytest.raises(ExporterIOError):
            resolve_version(transport, ConnectionSettings())
