import pytest

from salesmap.settings import ENDPOINT_ENV_VAR, SettingsError, load_settings


def test_defaults_when_file_missing(tmp_path, monkeypatch):
    monkeypatch.delenv(ENDPOINT_ENV_VAR, raising=False)
    settings = load_settings(tmp_path / "absent.toml")
    assert settings.columns.city == "Bydliště"
    assert settings.orchestrator.max_concurrency == 8
    assert settings.map.zoom_start == 13


def test_environment_overrides_endpoint(tmp_path, monkeypatch):
    path = tmp_path / "settings.toml"
    path.write_text('[geocoder]\nendpoint = "https://a.test/api"\n', encoding="utf-8")
    monkeypatch.setenv(ENDPOINT_ENV_VAR, "https://b.test/api")
    assert load_settings(path).geocoder.endpoint == "https://b.test/api"


def test_malformed_toml_raises(tmp_path):
    path = tmp_path / "settings.toml"
    path.write_text("[geocoder\n", encoding="utf-8")
    with pytest.raises(SettingsError):
        load_settings(path)
