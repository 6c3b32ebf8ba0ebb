"""
Browser Compare - browser engine, device and in-app identity profiles.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional


CHROMIUM = "chromium"
WEBKIT = "webkit"
FIREFOX = "firefox"

ENGINE_LABELS = {
    CHROMIUM: "Chromium (Chrome)",
    WEBKIT: "WebKit (Safari)",
    FIREFOX: "Firefox",
}

DEFAULT_ENGINES = [CHROMIUM, WEBKIT, FIREFOX]

DEFAULT_DEVICES = [
    "iPhone 15 Pro",
    "iPhone 13",
    "iPhone SE (3rd generation)",
    "Pixel 7",
    "Galaxy S9+",
    "iPad Pro 11",
    "Desktop Chrome",
    "Desktop Safari",
    "Desktop Firefox",
]

IN_APP_PROFILES = {
    "facebook_ios": {
        "name": "Facebook In-App (iOS)",
        "ua": "Mozilla/5.0 (iPhone; CPU iPhone OS 17_4 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Mobile/21E219 [FBAN/FBIOS;FBAV/454.0.0.43.109;FBBV/568067598;FBDV/iPhone16,2;FBMD/iPhone;FBSN/iOS;FBSV/17.4;FBSS/3;FBID/phone;FBLC/en_US;FBOP/5;FBRV/569644498]",
        "engine": WEBKIT,
        "device": "iPhone 15 Pro",
    },
    "facebook_android": {
        "name": "Facebook In-App (Android)",
        "ua": "Mozilla/5.0 (Linux; Android 14; Pixel 8 Pro Build/UQ1A.240205.002) AppleWebKit/537.36 (KHTML, like Gecko) Version/4.0 Chrome/121.0.6167.178 Mobile Safari/537.36 [FB_IAB/FB4A;FBAV/454.0.0.43.109;]",
        "engine": CHROMIUM,
        "device": "Pixel 7",
    },
    "instagram_ios": {
        "name": "Instagram In-App (iOS)",
        "ua": "Mozilla/5.0 (iPhone; CPU iPhone OS 17_4 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Mobile/21E219 Instagram 321.0.2.22.102 (iPhone16,2; iOS 17_4; en_US; en; scale=3.00; 1290x2796; 569644498)",
        "engine": WEBKIT,
        "device": "iPhone 15 Pro",
    },
    "instagram_android": {
        "name": "Instagram In-App (Android)",
        "ua": "Mozilla/5.0 (Linux; Android 14; Pixel 8 Pro) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/121.0.6167.178 Mobile Safari/537.36 Instagram 321.0.2.22.102 Android",
        "engine": CHROMIUM,
        "device": "Pixel 7",
    },
    "tiktok_ios": {
        "name": "TikTok In-App (iOS)",
        "ua": "Mozilla/5.0 (iPhone; CPU iPhone OS 17_4 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Mobile/21E219 BytedanceWebview/d8a21c6 TikTok/33.7.4 ByteLocale/en",
        "engine": WEBKIT,
        "device": "iPhone 15 Pro",
    },
    "tiktok_android": {
        "name": "TikTok In-App (Android)",
        "ua": "Mozilla/5.0 (Linux; Android 14; Pixel 8 Pro) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/121.0.6167.178 Mobile Safari/537.36 BytedanceWebview TikTok/33.7.4",
        "engine": CHROMIUM,
        "device": "Pixel 7",
    },
    "wechat": {
        "name": "WeChat In-App",
        "ua": "Mozilla/5.0 (iPhone; CPU iPhone OS 17_4 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Mobile/21E219 MicroMessenger/8.0.47(0x18002f2f) NetType/4G Language/en",
        "engine": WEBKIT,
        "device": "iPhone 15 Pro",
    },
    "line": {
        "name": "LINE In-App",
        "ua": "Mozilla/5.0 (iPhone; CPU iPhone OS 17_4 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Mobile/21E219 Safari Line/14.3.1",
        "engine": WEBKIT,
        "device": "iPhone 15 Pro",
    },
    "twitter_ios": {
        "name": "Twitter/X In-App (iOS)",
        "ua": "Mozilla/5.0 (iPhone; CPU iPhone OS 17_4 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Mobile/21E219 Twitter for iPhone/10.24",
        "engine": WEBKIT,
        "device": "iPhone 15 Pro",
    },
    "snapchat": {
        "name": "Snapchat In-App",
        "ua": "Mozilla/5.0 (iPhone; CPU iPhone OS 17_4 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Mobile/21E219 Snapchat/12.76.0.33",
        "engine": WEBKIT,
        "device": "iPhone 15 Pro",
    },
}


@dataclass(frozen=True)
class EngineDescriptor:
    name: str
    label: str
    launcher: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class DeviceDescriptor:
    name: str
    viewport: Dict[str, int]
    is_mobile: bool
    default_engine: str
    user_agent: str
    device_scale_factor: float = 1
    has_touch: bool = False

    @property
    def platform(self) -> str:
        return get_platform(self)

    def context_options(self) -> Dict[str, Any]:
        """Keyword arguments for ``Browser.new_context`` emulating this device."""
        return {
            "viewport": dict(self.viewport),
            "user_agent": self.user_agent,
            "device_scale_factor": self.device_scale_factor,
            "is_mobile": self.is_mobile,
            "has_touch": self.has_touch,
        }

    @classmethod
    def from_playwright(cls, name: str, descriptor: Dict[str, Any]) -> "DeviceDescriptor":
        viewport = descriptor.get("viewport") or {"width": 1280, "height": 720}
        return cls(
            name=name,
            viewport={"width": int(viewport["width"]), "height": int(viewport["height"])},
            is_mobile=bool(descriptor.get("is_mobile", False)),
            default_engine=descriptor.get("default_browser_type", CHROMIUM),
            user_agent=descriptor.get("user_agent", ""),
            device_scale_factor=descriptor.get("device_scale_factor", 1),
            has_touch=bool(descriptor.get("has_touch", False)),
        )


@dataclass(frozen=True)
class IdentityProfile:
    """A fixed (engine, device, user agent) triple posing as an in-app browser."""

    key: str
    name: str
    user_agent: str
    engine: str
    device: str

    @property
    def platform(self) -> str:
        return "ios" if self.engine == WEBKIT else "android"


def get_platform(device: DeviceDescriptor) -> str:
    if not device.is_mobile:
        return "desktop"
    return "ios" if device.default_engine == WEBKIT else "android"


def build_identities(profiles: Optional[Dict[str, Dict[str, str]]] = None) -> Dict[str, IdentityProfile]:
    profiles = IN_APP_PROFILES if profiles is None else profiles
    return {
        key: IdentityProfile(
            key=key,
            name=data["name"],
            user_agent=data["ua"],
            engine=data["engine"],
            device=data["device"],
        )
        for key, data in profiles.items()
    }


class ProfileRegistry:
    """Read-only catalog of engines, devices and in-app identities.

    Passed explicitly to the matrix builder and the capture engine so tests
    can run against a hand-built catalog.
    """

    def __init__(
        self,
        engines: Iterable[EngineDescriptor],
        devices: Iterable[DeviceDescriptor],
        identities: Iterable[IdentityProfile] = (),
    ):
        self._engines = {e.name: e for e in engines}
        self._devices = {d.name: d for d in devices}
        self._identities = {i.key: i for i in identities}

    def engine(self, name: str) -> Optional[EngineDescriptor]:
        return self._engines.get(name)

    def device(self, name: str) -> Optional[DeviceDescriptor]:
        return self._devices.get(name)

    def identity(self, key: str) -> Optional[IdentityProfile]:
        return self._identities.get(key)

    def engine_names(self) -> List[str]:
        return list(self._engines)

    def device_names(self) -> List[str]:
        return list(self._devices)

    def identity_keys(self) -> List[str]:
        return list(self._identities)

    @classmethod
    def from_playwright(cls, playwright: Any) -> "ProfileRegistry":
        """Build the registry from a running ``async_playwright()`` instance."""
        engines = [
            EngineDescriptor(name=name, label=label, launcher=getattr(playwright, name))
            for name, label in ENGINE_LABELS.items()
        ]
        devices = [
            DeviceDescriptor.from_playwright(name, descriptor)
            for name, descriptor in playwright.devices.items()
        ]
        return cls(engines, devices, build_identities().values())
