"""
Browser Compare - run configuration.

Merge order: defaults < .browsercompare.json < command line flags.
"""

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

from browser_profiles import DEFAULT_DEVICES, DEFAULT_ENGINES


CONFIG_FILENAME = ".browsercompare.json"
LAUNCH_FAILURE_POLICIES = ("abort", "skip")

# camelCase keys accepted in .browsercompare.json
FILE_KEY_ALIASES = {
    "fullPage": "full_page",
    "uaSpoof": "ua_spoof",
    "injectEruda": "inject_eruda",
    "customWidth": "custom_width",
    "customHeight": "custom_height",
    "includeFailures": "include_failures",
    "onLaunchFailure": "on_launch_failure",
}


class ConfigurationError(ValueError):
    pass


@dataclass
class CaptureConfig:
    url: Optional[str] = None
    output: str = "./report"
    full_page: bool = True
    delay: int = 2000
    browsers: List[str] = field(default_factory=lambda: list(DEFAULT_ENGINES))
    devices: List[str] = field(default_factory=lambda: list(DEFAULT_DEVICES))
    ua_spoof: List[str] = field(default_factory=list)
    inject_eruda: bool = False
    custom_width: Optional[int] = None
    custom_height: Optional[int] = None
    include_failures: bool = False
    on_launch_failure: str = "abort"
    concurrency: int = 1

    @property
    def output_dir(self) -> Path:
        return Path(self.output).resolve()

    @property
    def screenshots_dir(self) -> Path:
        return self.output_dir / "screenshots"

    def validate(self) -> "CaptureConfig":
        if not self.url:
            raise ConfigurationError("Please provide a URL as the first argument")
        if self.on_launch_failure not in LAUNCH_FAILURE_POLICIES:
            raise ConfigurationError(
                f"on_launch_failure must be one of {', '.join(LAUNCH_FAILURE_POLICIES)}, "
                f"got {self.on_launch_failure!r}"
            )
        if self.concurrency < 1:
            raise ConfigurationError(f"concurrency must be at least 1, got {self.concurrency}")
        if self.delay < 0:
            raise ConfigurationError(f"delay must not be negative, got {self.delay}")
        return self


def parse_list(raw: Any, lower: bool = False) -> List[str]:
    if raw is None:
        return []
    items = raw.split(",") if isinstance(raw, str) else list(raw)
    values = [str(item).strip() for item in items if str(item).strip()]
    return [v.lower() for v in values] if lower else values


def parse_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    return str(raw).strip().lower() not in {"false", "0", "no", "off"}


def load_config_file(path: Optional[Path] = None) -> Dict[str, Any]:
    """Read the JSON config file; a missing or unreadable file yields ``{}``."""
    config_path = Path(path) if path else Path.cwd() / CONFIG_FILENAME
    if not config_path.exists():
        return {}
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        print(f"⚠️  Ignoring {config_path}: {exc}")
        return {}
    if not isinstance(data, dict):
        print(f"⚠️  Ignoring {config_path}: expected a JSON object")
        return {}
    print(f"📄 Loaded config from {config_path}")
    return {FILE_KEY_ALIASES.get(key, key): value for key, value in data.items()}


def merge_config(*layers: Dict[str, Any]) -> CaptureConfig:
    """Apply layers left to right over the defaults; ``None`` values are ignored."""
    known = {f.name for f in fields(CaptureConfig)}
    merged: Dict[str, Any] = {}
    for layer in layers:
        for key, value in layer.items():
            if key in known and value is not None:
                merged[key] = value

    try:
        for key in ("browsers", "ua_spoof"):
            if key in merged:
                merged[key] = parse_list(merged[key], lower=True)
        if "devices" in merged:
            merged["devices"] = parse_list(merged["devices"])
        for key in ("full_page", "inject_eruda", "include_failures"):
            if key in merged:
                merged[key] = parse_bool(merged[key])
        for key in ("delay", "custom_width", "custom_height", "concurrency"):
            if key in merged:
                merged[key] = int(merged[key])
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid configuration value: {exc}") from exc

    return CaptureConfig(**merged)
