from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from config import ConfigurationSet, config_from_dict, config_from_env, config_from_yaml

from dfs_projector.exceptions import ConfigError

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off", ""})


def _defaults() -> dict[str, object]:
    return {
        "projection": {
            "season": "",
            "max_concurrency": 16,
            "fallback_penalty": 15.0,
        },
        "http": {
            "base_url": "https://statsapi.mlb.com/api",
            "timeout": 10.0,
            "connect_timeout": 5.0,
        },
        "statcast": {
            "enabled": True,
            "base_url": "https://baseballsavant.mlb.com",
            "timeout": 30.0,
        },
        "cache": {
            "enabled": True,
            "db_path": "~/.config/dfs/cache.db",
            "player_ttl": 21600,
            "environment_ttl": 1800,
            "ballpark_ttl": 604800,
            "schedule_ttl": 3600,
        },
        "fantasy_site": {
            "salary_file": "",
        },
    }


def create_config(
    yaml_path: str = "dfs.yaml",
    env_prefix: str = "DFS",
    defaults: dict[str, object] | None = None,
    *,
    overrides: dict[str, object] | None = None,
) -> ConfigurationSet:
    """Create a layered configuration.

    Priority (highest to lowest): explicit overrides > env vars > YAML file > defaults dict.

    Args:
        yaml_path: Path to the YAML config file; a missing file is ignored.
        env_prefix: Prefix for environment variables, e.g. ``DFS__CACHE__ENABLED``.
        defaults: Default configuration values.
        overrides: Nested values supplied by the caller, typically CLI options.
    """
    if defaults is None:
        defaults = _defaults()

    layers = [
        config_from_env(env_prefix, separator="__", lowercase_keys=True),
        config_from_yaml(yaml_path, read_from_file=True, ignore_missing_paths=True),
        config_from_dict(defaults),
    ]
    if overrides:
        layers.insert(0, config_from_dict(overrides))

    return ConfigurationSet(*layers)


@dataclass(frozen=True)
class Settings:
    season: int | None
    max_concurrency: int
    fallback_penalty: float
    base_url: str
    timeout: float
    connect_timeout: float
    statcast_enabled: bool
    statcast_base_url: str
    statcast_timeout: float
    cache_enabled: bool
    cache_db_path: Path
    player_ttl: int
    environment_ttl: int
    ballpark_ttl: int
    schedule_ttl: int
    salary_file: Path | None


def _read(cfg: ConfigurationSet, key: str) -> object:
    try:
        return cfg[key]
    except KeyError as e:
        raise ConfigError(f"missing configuration key '{key}'") from e


def _int(cfg: ConfigurationSet, key: str, *, minimum: int | None = None) -> int:
    raw = _read(cfg, key)
    try:
        value = int(str(raw))
    except ValueError as e:
        raise ConfigError(f"'{key}' must be an integer, got {raw!r}") from e
    if minimum is not None and value < minimum:
        raise ConfigError(f"'{key}' must be at least {minimum}, got {value}")
    return value


def _optional_int(cfg: ConfigurationSet, key: str, *, minimum: int | None = None) -> int | None:
    raw = _read(cfg, key)
    if raw is None or str(raw).strip() == "":
        return None
    return _int(cfg, key, minimum=minimum)


def _float(cfg: ConfigurationSet, key: str) -> float:
    raw = _read(cfg, key)
    try:
        value = float(str(raw))
    except ValueError as e:
        raise ConfigError(f"'{key}' must be a number, got {raw!r}") from e
    if value < 0:
        raise ConfigError(f"'{key}' must not be negative, got {value}")
    return value


def _bool(cfg: ConfigurationSet, key: str) -> bool:
    raw = _read(cfg, key)
    if isinstance(raw, bool):
        return raw
    text = str(raw).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigError(f"'{key}' must be a boolean, got {raw!r}")


def load_settings(cfg: ConfigurationSet | None = None) -> Settings:
    if cfg is None:
        cfg = create_config()
    salary_file = str(_read(cfg, "fantasy_site.salary_file") or "").strip()
    return Settings(
        season=_optional_int(cfg, "projection.season", minimum=1876),
        max_concurrency=_int(cfg, "projection.max_concurrency", minimum=1),
        fallback_penalty=_float(cfg, "projection.fallback_penalty"),
        base_url=str(_read(cfg, "http.base_url")),
        timeout=_float(cfg, "http.timeout"),
        connect_timeout=_float(cfg, "http.connect_timeout"),
        statcast_enabled=_bool(cfg, "statcast.enabled"),
        statcast_base_url=str(_read(cfg, "statcast.base_url")),
        statcast_timeout=_float(cfg, "statcast.timeout"),
        cache_enabled=_bool(cfg, "cache.enabled"),
        cache_db_path=Path(str(_read(cfg, "cache.db_path"))).expanduser(),
        player_ttl=_int(cfg, "cache.player_ttl", minimum=0),
        environment_ttl=_int(cfg, "cache.environment_ttl", minimum=0),
        ballpark_ttl=_int(cfg, "cache.ballpark_ttl", minimum=0),
        schedule_ttl=_int(cfg, "cache.schedule_ttl", minimum=0),
        salary_file=Path(salary_file).expanduser() if salary_file else None,
    )
