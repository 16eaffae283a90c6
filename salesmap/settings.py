"""Application settings loaded from TOML and validated with pydantic."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import tomllib
from pydantic import BaseModel, Field, ValidationError, field_validator

DEFAULT_SETTINGS_PATH = Path("config/settings.toml")
ENDPOINT_ENV_VAR = "SALESMAP_GEOCODER_ENDPOINT"


class SettingsError(ValueError):
    """Raised when the settings file cannot be read or validated."""


class ColumnSettings(BaseModel):
    """Header labels of the sales export."""

    city: str = "Bydliště"
    sale_date: str = "Datum prodeje"
    given_name: str = "Jméno"
    family_name: str = "Přijmení"
    device: str = "Typ"


class GeocoderSettings(BaseModel):
    endpoint: str = Field(default="https://photon.komoot.io/api", min_length=1)
    user_agent: str = "salesmap/0.1"
    timeout_seconds: float = Field(default=30.0, gt=0)

    @field_validator("endpoint", mode="before")
    @classmethod
    def _strip_endpoint(cls, value: Any) -> str:
        return str(value).strip()


class OrchestratorSettings(BaseModel):
    max_concurrency: int = Field(default=8, gt=0)


class MapSettings(BaseModel):
    """Initial viewport and tile source of the rendered map."""

    home_lat: float = Field(default=49.01018, ge=-90, le=90)
    home_lng: float = Field(default=17.12253, ge=-180, le=180)
    zoom_start: int = Field(default=13, ge=0, le=19)
    title: str = "Zákazníci na mapě"
    tiles: str = "OpenStreetMap"


class AppSettings(BaseModel):
    columns: ColumnSettings = Field(default_factory=ColumnSettings)
    geocoder: GeocoderSettings = Field(default_factory=GeocoderSettings)
    orchestrator: OrchestratorSettings = Field(default_factory=OrchestratorSettings)
    map: MapSettings = Field(default_factory=MapSettings)
    metrics_dir: Path = Path("data/metrics")


def _apply_env_overrides(payload: Dict[str, Any]) -> Dict[str, Any]:
    endpoint = os.environ.get(ENDPOINT_ENV_VAR)
    if endpoint:
        payload.setdefault("geocoder", {})["endpoint"] = endpoint
    return payload


def load_settings(path: Optional[Path] = None) -> AppSettings:
    """Read the TOML configuration file, falling back to defaults when absent."""
    path = path or DEFAULT_SETTINGS_PATH
    payload: Dict[str, Any] = {}
    if path.exists():
        try:
            with path.open("rb") as handle:
                payload = tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise SettingsError(f"Invalid settings file {path}: {exc}") from exc
    try:
        return AppSettings(**_apply_env_overrides(payload))
    except ValidationError as exc:
        raise SettingsError(f"Invalid settings in {path}: {exc}") from exc
