from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml
from dotenv import load_dotenv

_DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "config" / "defaults.yaml"
load_dotenv()


def _bool_from_env(value: str | None) -> Optional[bool]:
    if value is None:
        return None
    value = value.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    return None


def _merge_dicts(base: Dict, overrides: Mapping) -> Dict:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, Mapping) and isinstance(base.get(key), Mapping):
            merged[key] = _merge_dicts(base[key], value)
        else:
            merged[key] = value
    return merged


def _load_yaml(path: Path) -> Dict:
    if not path.exists():
        return {}
    return yaml.safe_load(path.read_text()) or {}


@dataclass
class LoggingConfig:
    level: str = "INFO"
    json: bool = True


@dataclass
class PollingConfig:
    """Fixed timing constants for the screen rotation and poll backoff."""

    dwell_seconds: float = 12.0
    request_timeout_seconds: float = 10.0
    backoff_unit_seconds: float = 5.0
    max_backoff_seconds: float = 30.0
    weather_rotations: int = 10
    weather_rotations_when_empty: int = 4
    lift_rotation_interval: int = 2
    lift_degrade_threshold: int = 6
    weather_degrade_threshold: int = 3


@dataclass
class DisplayConfig:
    brightness: float = 0.1
    animation_frame_seconds: float = 0.4


@dataclass
class NetworkConfig:
    probe_url: str = "https://www.google.com"
    probe_attempts: int = 30
    probe_interval_seconds: float = 2.0


@dataclass
class SourceSettings:
    url: str = ""


@dataclass
class AppConfig:
    sources: Dict[str, SourceSettings] = field(default_factory=dict)
    polling: PollingConfig = field(default_factory=PollingConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    network: NetworkConfig = field(default_factory=NetworkConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(*, config_path: str | None = None, env: Mapping[str, str] | None = None) -> AppConfig:
    env = dict(os.environ if env is None else env)
    data = _load_yaml(_DEFAULT_CONFIG_PATH)

    explicit_path = config_path or env.get("LIFTKIOSK_CONFIG_PATH")
    if explicit_path:
        data = _merge_dicts(data, _load_yaml(Path(explicit_path)))

    logging_data = data.get("logging", {})
    level_override = env.get("LIFTKIOSK_LOG_LEVEL")
    if level_override:
        logging_data["level"] = level_override
    json_override = _bool_from_env(env.get("LIFTKIOSK_LOG_JSON"))
    if json_override is not None:
        logging_data["json"] = json_override

    sources = {key: SourceSettings(**details) for key, details in data.get("sources", {}).items()}
    polling_data = data.get("polling", {})
    display_data = data.get("display", {})
    network_data = data.get("network", {})

    return AppConfig(
        sources=sources,
        polling=PollingConfig(**polling_data) if polling_data else PollingConfig(),
        display=DisplayConfig(**display_data) if display_data else DisplayConfig(),
        network=NetworkConfig(**network_data) if network_data else NetworkConfig(),
        logging=LoggingConfig(**logging_data) if logging_data else LoggingConfig(),
    )


app_config = load_config()
