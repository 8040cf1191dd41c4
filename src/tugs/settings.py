# ====================================================================================================
# Settings - the tug calculator's "knob panel"
#
# One frozen `AppConfig` carries everything the loader, the lookup CLI and the offline shell cache need:
# - where the reference dataset lives (relative to the shell's base URL or on disk)
# - which cache generation is current (`cache_prefix` + `cache_version`)
# - which immutable assets are pre-cached at install time
# - the numeric policy switch for unparseable length bounds (`strict_lengths`)
#
# Configs travel as plain dicts between the CLI, JSON files and `apply_overrides(...)`, and are turned
# back into an `AppConfig` with `config_from_dict(...)` right before use.
# ====================================================================================================

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, List


# ----------------------------------------------------------------------------------------------------
# AppConfig
# Purpose (simple): Single, immutable configuration object for one session (CLI run or shell worker).
# Inputs: Field values (URLs, relative paths, cache naming, policy flags)
# Outputs: A frozen dataclass instance shared by `src.tugs` and `src.offline`
# ----------------------------------------------------------------------------------------------------
@dataclass(frozen=True)
class AppConfig:
    # Identity (useful for metadata/logs).
    name: str
    description: str

    # Where the shell is served from; relative asset paths resolve against it.
    base_url: str

    # Reference dataset location (relative to `base_url` for fetches, or a filesystem path for the CLI).
    dataset_path: str

    # Cache generation naming: the worker owns exactly one cache, `cache_prefix + cache_version`.
    # Bump `cache_version` on every deploy of the shell.
    cache_prefix: str
    cache_version: str

    # Immutable, stable-path assets fetched all-or-nothing at install time.
    static_assets: List[str]

    # Lifecycle: activate a freshly installed generation without waiting for open pages to close.
    skip_waiting_on_install: bool

    # Numeric policy: False keeps rows whose length bounds do not parse (bound defaults to 0).
    strict_lengths: bool

    @property
    def cache_name(self) -> str:
        return f"{self.cache_prefix}{self.cache_version}"


# Stable list of config keys (kept in dataclass order) used for schema checks, metadata, and overrides.
CONFIG_KEYS = tuple(AppConfig.__dataclass_fields__.keys())  # pylint: disable=no-member


def config_to_dict(config: AppConfig) -> dict:
    return asdict(config)


def config_from_dict(data: dict) -> AppConfig:
    return AppConfig(**data)


# ----------------------------------------------------------------------------------------------------
# _default
# Purpose (simple): Define the default profile (matches the deployed shell layout).
# Inputs: None
# Outputs: AppConfig named "default"
# ----------------------------------------------------------------------------------------------------
def _default() -> AppConfig:
    return AppConfig(
        name="default",
        description="Tug requirement lookup served next to tug_requirements.csv.",
        base_url="http://localhost:8000/",
        dataset_path="./tug_requirements.csv",
        cache_prefix="mmp-mintug-static-",
        cache_version="v6",
        static_assets=[
            "./",
            "./styles.css",
            "./app.js",
            "./manifest.webmanifest",
            "./icons/icon-192.png",
            "./icons/icon-512.png",
        ],
        skip_waiting_on_install=True,
        strict_lengths=False,
    )


# ----------------------------------------------------------------------------------------------------
# get_config
# Purpose (simple): Controlled entrypoint for selecting a named profile.
# Inputs: `name` ("default" or "strict")
# Outputs: AppConfig ("strict" drops rows whose length bounds cannot be parsed)
# ----------------------------------------------------------------------------------------------------
def get_config(name: str = "default") -> AppConfig:
    name = name.lower().strip()
    if name not in {"default", "strict"}:
        raise ValueError(f"Unknown config profile: {name}")
    base = _default()
    if name == "default":
        return base
    return replace(
        base,
        name="strict",
        description="Default profile, but rows with unparseable length bounds are discarded.",
        strict_lengths=True,
    )


ALLOWED_OVERRIDE_KEYS = set(CONFIG_KEYS)
NON_EMPTY_KEYS = {
    "base_url",
    "dataset_path",
    "cache_prefix",
    "cache_version",
}


def _validate_type(key: str, value: Any, expected: Any) -> None:
    if isinstance(expected, bool):
        if not isinstance(value, bool):
            raise ValueError(f"Override '{key}' must be bool.")
        return
    if isinstance(expected, str):
        if not isinstance(value, str):
            raise ValueError(f"Override '{key}' must be str.")
        return
    if isinstance(expected, list):
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise ValueError(f"Override '{key}' must be a list of str.")
        return


def apply_overrides(config: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(config, dict) or not config:
        raise ValueError("Config must be a non-empty dict.")
    if not overrides:
        return dict(config)

    unknown = [key for key in overrides if key not in ALLOWED_OVERRIDE_KEYS]
    if unknown:
        raise ValueError(f"Unknown override keys: {', '.join(sorted(unknown))}")

    merged = dict(config)
    for key, value in overrides.items():
        if key not in merged:
            raise ValueError(f"Override key not in base config: {key}")
        _validate_type(key, value, merged[key])
        merged[key] = value

    for key in NON_EMPTY_KEYS:
        if key in merged and not str(merged[key]).strip():
            raise ValueError(f"{key} must be a non-empty string.")

    return merged
