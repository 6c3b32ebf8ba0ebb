"""
Browser Compare - capture matrix expansion and platform compatibility filter.
"""

import re
from pathlib import Path
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from browser_profiles import (
    FIREFOX,
    WEBKIT,
    DeviceDescriptor,
    EngineDescriptor,
    IdentityProfile,
    ProfileRegistry,
)
from capture_config import CaptureConfig


# Engines that have no automation target on a platform.
PLATFORM_EXCLUSIONS = {
    WEBKIT: frozenset({"android"}),
    FIREFOX: frozenset({"ios", "android"}),
}


def safe_filename(value: str) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "_", value)


def warn(notes: Optional[List[str]], message: str) -> None:
    print(f"⚠️  {message}")
    if notes is not None:
        notes.append(message)


def is_compatible(engine_name: str, platform: str) -> bool:
    return platform not in PLATFORM_EXCLUSIONS.get(engine_name, frozenset())


@dataclass(frozen=True)
class ContextSpec:
    """Everything a driver session needs for one capture attempt."""

    options: Dict[str, Any]
    url: str
    path: Path
    delay_ms: int = 2000
    full_page: bool = True
    inject_script: bool = False


@dataclass(frozen=True)
class CaptureRequest:
    engine: EngineDescriptor
    device: DeviceDescriptor
    platform: str
    url: str
    delay_ms: int = 2000
    full_page: bool = True
    inject_script: bool = False
    viewport: Optional[Dict[str, int]] = None
    identity: Optional[IdentityProfile] = None

    @property
    def kind(self) -> str:
        return "in-app" if self.identity else "standard"

    @property
    def label(self) -> str:
        if self.identity:
            return self.identity.name
        return f"{self.engine.label} - {self.device.name}"

    @property
    def device_label(self) -> str:
        return self.device.name

    @property
    def effective_viewport(self) -> Dict[str, int]:
        return dict(self.viewport or self.device.viewport)

    @property
    def user_agent(self) -> str:
        return self.identity.user_agent if self.identity else self.device.user_agent

    @property
    def filename(self) -> str:
        if self.identity:
            return f"inapp_{safe_filename(self.identity.key)}.png"
        return f"{self.engine.name}_{safe_filename(self.device.name)}.png"

    def context_options(self) -> Dict[str, Any]:
        options = self.device.context_options()
        options["viewport"] = self.effective_viewport
        options["user_agent"] = self.user_agent
        return options


@dataclass
class CapturePlan:
    standard: List[CaptureRequest] = field(default_factory=list)
    in_app: List[CaptureRequest] = field(default_factory=list)
    rejected: List[Tuple[EngineDescriptor, DeviceDescriptor]] = field(default_factory=list)

    @property
    def requests(self) -> List[CaptureRequest]:
        return self.standard + self.in_app


def build_matrix(
    registry: ProfileRegistry,
    engines: Sequence[str],
    devices: Sequence[str],
    notes: Optional[List[str]] = None,
) -> List[Tuple[EngineDescriptor, DeviceDescriptor]]:
    """Expand engines x devices in caller order.

    Unknown names are warned about once and dropped; repeated names keep
    their first position so no pair is produced twice.
    """
    known_engines = unique_profiles(engines, registry.engine, "browser", notes)
    known_devices = unique_profiles(devices, registry.device, "device", notes)
    return [(engine, device) for engine in known_engines for device in known_devices]


def unique_profiles(names, lookup, kind, notes):
    found, seen = [], set()
    for name in names:
        if name in seen:
            continue
        seen.add(name)
        profile = lookup(name)
        if profile is None:
            warn(notes, f"Unknown {kind}: {name}, skipping")
            continue
        found.append(profile)
    return found


def filter_compatible(
    pairs: Sequence[Tuple[EngineDescriptor, DeviceDescriptor]],
) -> Tuple[List[Tuple[EngineDescriptor, DeviceDescriptor]], List[Tuple[EngineDescriptor, DeviceDescriptor]]]:
    kept, rejected = [], []
    for engine, device in pairs:
        if is_compatible(engine.name, device.platform):
            kept.append((engine, device))
        else:
            rejected.append((engine, device))
    return kept, rejected


def resolve_identities(
    registry: ProfileRegistry,
    keys: Sequence[str],
    notes: Optional[List[str]] = None,
) -> List[IdentityProfile]:
    """Resolve requested identity keys, exact match first, then prefix/substring.

    A key matching nothing is looked up literally and reported as unknown.
    Each identity is returned once, at its first resolved position.
    """
    available = registry.identity_keys()
    resolved: List[IdentityProfile] = []
    seen = set()

    for raw in keys:
        wanted = raw.strip().lower()
        exact = [k for k in available if k.lower() == wanted]
        if exact:
            matches = exact
        else:
            matches = [k for k in available if k.lower().startswith(wanted) or wanted in k.lower()]
        if not matches:
            matches = [raw]

        for key in matches:
            identity = registry.identity(key)
            if identity is None:
                warn(notes, f"Unknown in-app browser: {key}, skipping")
                continue
            if identity.key in seen:
                continue
            seen.add(identity.key)
            resolved.append(identity)

    return resolved


def custom_viewport(config: CaptureConfig, device: DeviceDescriptor) -> Optional[Dict[str, int]]:
    if not config.custom_width:
        return None
    return {
        "width": config.custom_width,
        "height": config.custom_height or device.viewport["height"],
    }


def plan_captures(
    registry: ProfileRegistry,
    config: CaptureConfig,
    notes: Optional[List[str]] = None,
) -> CapturePlan:
    plan = CapturePlan()

    pairs = build_matrix(registry, config.browsers, config.devices, notes)
    kept, plan.rejected = filter_compatible(pairs)
    for engine, device in kept:
        plan.standard.append(
            CaptureRequest(
                engine=engine,
                device=device,
                platform=device.platform,
                url=config.url,
                delay_ms=config.delay,
                full_page=config.full_page,
                inject_script=config.inject_eruda,
                viewport=custom_viewport(config, device),
            )
        )

    for identity in resolve_identities(registry, config.ua_spoof, notes):
        engine = registry.engine(identity.engine)
        device = registry.device(identity.device)
        if engine is None or device is None:
            missing = identity.engine if engine is None else identity.device
            warn(notes, f"In-app browser {identity.key} needs unknown profile {missing}, skipping")
            continue
        plan.in_app.append(
            CaptureRequest(
                engine=engine,
                device=device,
                platform=identity.platform,
                url=config.url,
                delay_ms=config.delay,
                full_page=config.full_page,
                identity=identity,
            )
        )

    return plan
