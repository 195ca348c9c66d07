"""Minimal strict schemas for YAML config validation."""

from __future__ import annotations

from manifest_reconciler.common.errors import ConfigError

MANIFEST_FIELD_KEYS = {
    "sequence",
    "stop",
    "address",
    "postal_code",
    "neighborhood",
    "city",
    "latitude",
    "longitude",
    "complement",
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


def _assert_positive(value, ctx: str) -> None:
    if not isinstance(value, (int, float)) or isinstance(value, bool) or value <= 0:
        raise ConfigError(f"{ctx} must be a positive number")


def validate_reconciler_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    top_required = {"manifest", "postal", "geocoding", "http", "report", "inbox"}
    _assert_required_keys(cfg, top_required, "reconciler config")
    _assert_no_unknown_keys(cfg, top_required, "reconciler config", allow_unknown)

    _assert_required_keys(cfg["manifest"], {"fields"}, "manifest")
    _assert_required_keys(cfg["manifest"]["fields"], MANIFEST_FIELD_KEYS, "manifest.fields")
    _assert_no_unknown_keys(cfg["manifest"]["fields"], MANIFEST_FIELD_KEYS, "manifest.fields", allow_unknown)

    _assert_required_keys(cfg["postal"], {"enabled", "base_url", "state", "timeout_seconds"}, "postal")
    _assert_required_keys(
        cfg["geocoding"],
        {"enabled", "endpoint", "api_key_env", "country", "timeout_seconds"},
        "geocoding",
    )
    for section in ("postal", "geocoding"):
        timeouts = cfg[section]["timeout_seconds"]
        _assert_required_keys(timeouts, {"connect", "read"}, f"{section}.timeout_seconds")
        _assert_positive(timeouts["connect"], f"{section}.timeout_seconds.connect")
        _assert_positive(timeouts["read"], f"{section}.timeout_seconds.read")

    _assert_required_keys(cfg["http"], {"retry"}, "http")
    retry = cfg["http"]["retry"]
    _assert_required_keys(retry, {"max_attempts", "multiplier", "max_wait"}, "http.retry")
    if not isinstance(retry["max_attempts"], int) or retry["max_attempts"] < 1:
        raise ConfigError("http.retry.max_attempts must be an integer >= 1")

    _assert_required_keys(cfg["report"], {"top_n", "alley_prefixes", "headings"}, "report")
    if not isinstance(cfg["report"]["top_n"], int) or cfg["report"]["top_n"] < 1:
        raise ConfigError("report.top_n must be an integer >= 1")
    if not isinstance(cfg["report"]["alley_prefixes"], list) or not cfg["report"]["alley_prefixes"]:
        raise ConfigError("report.alley_prefixes must be a non-empty list")
    _assert_required_keys(cfg["report"]["headings"], {"addresses", "streets", "alleys"}, "report.headings")

    _assert_required_keys(cfg["inbox"], {"extensions", "state_filename", "output_label", "report_label"}, "inbox")

    return cfg
