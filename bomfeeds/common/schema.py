"""Minimal strict schemas for YAML config validation."""

from __future__ import annotations

from bomfeeds.common.errors import ConfigError

SECTION_KEYS = {
    "source": {"base_url", "timeout", "retry"},
    "locations": {"forecast_towns", "bulletin_stations"},
    "stations": {"name_cutoff"},
    "orchestration": {"max_workers"},
    "output": {"precis_filename", "bulletin_filename"},
}


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    if not isinstance(obj, dict):
        raise ConfigError(f"{ctx} must be a mapping")
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _assert_positive_number(value, ctx: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError(f"{ctx} must be a positive number")


def validate_settings_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    _assert_required_keys(cfg, set(SECTION_KEYS), "settings")
    _assert_no_unknown_keys(cfg, set(SECTION_KEYS), "settings", allow_unknown)
    for section, keys in SECTION_KEYS.items():
        _assert_required_keys(cfg[section], keys, section)
        _assert_no_unknown_keys(cfg[section], keys, section, allow_unknown)

    source = cfg["source"]
    if not str(source["base_url"]).endswith("/"):
        raise ConfigError("source.base_url must end with '/'")
    _assert_required_keys(source["timeout"], {"connect", "read"}, "source.timeout")
    _assert_positive_number(source["timeout"]["connect"], "source.timeout.connect")
    _assert_positive_number(source["timeout"]["read"], "source.timeout.read")
    _assert_required_keys(source["retry"], {"max_attempts"}, "source.retry")
    if not isinstance(source["retry"]["max_attempts"], int) or source["retry"]["max_attempts"] < 1:
        raise ConfigError("source.retry.max_attempts must be an integer >= 1")

    cutoff = cfg["stations"]["name_cutoff"]
    if isinstance(cutoff, bool) or not isinstance(cutoff, (int, float)) or not 0 < cutoff <= 100:
        raise ConfigError("stations.name_cutoff must be in (0, 100]")

    workers = cfg["orchestration"]["max_workers"]
    if not isinstance(workers, int) or isinstance(workers, bool) or workers < 1:
        raise ConfigError("orchestration.max_workers must be an integer >= 1")

    for key in ("precis_filename", "bulletin_filename"):
        if "{region}" not in str(cfg["output"][key]):
            raise ConfigError(f"output.{key} must contain a '{{region}}' placeholder")

    return cfg
