"""Shared pytest configuration and fixtures for the Browser Compare test suite."""

import sys
from pathlib import Path

import pytest

# Scripts are plain modules; make them importable
SCRIPTS_DIR = Path(__file__).parent.parent / "scripts"
if str(SCRIPTS_DIR) not in sys.path:
    sys.path.insert(0, str(SCRIPTS_DIR))

from browser_profiles import (  # noqa: E402
    ENGINE_LABELS,
    DeviceDescriptor,
    EngineDescriptor,
    ProfileRegistry,
    build_identities,
)


# =============================================================================
# Fake automation driver
# =============================================================================

class FakeSession:
    def __init__(self, driver, engine):
        self.driver = driver
        self.engine = engine
        self.closed = False

    async def capture(self, spec):
        self.driver.captures.append((self.engine.name, spec))
        failures = self.driver.failures.get(spec.path.name, 0)
        if failures:
            self.driver.failures[spec.path.name] = failures - 1
            raise RuntimeError(f"navigation timeout for {spec.path.name}")
        spec.path.write_bytes(b"\x89PNG fake")
        return spec.path

    async def close(self):
        self.closed = True


class FakeDriver:
    """Records launches and captures; ``failures`` maps filename -> failing attempts."""

    def __init__(self, failures=None, broken_engines=()):
        self.failures = dict(failures or {})
        self.broken_engines = set(broken_engines)
        self.launches = []
        self.sessions = []
        self.captures = []

    async def launch(self, engine):
        self.launches.append(engine.name)
        if engine.name in self.broken_engines:
            raise RuntimeError(f"{engine.name} executable not found")
        session = FakeSession(self, engine)
        self.sessions.append(session)
        return session


async def no_sleep(seconds):
    return None


# =============================================================================
# Shared Fixtures
# =============================================================================

DEVICES = {
    "iPhone 15 Pro": {"viewport": {"width": 393, "height": 659}, "is_mobile": True,
                      "default_browser_type": "webkit", "user_agent": "iPhone UA",
                      "device_scale_factor": 3, "has_touch": True},
    "iPhone 13": {"viewport": {"width": 390, "height": 664}, "is_mobile": True,
                  "default_browser_type": "webkit", "user_agent": "iPhone 13 UA",
                  "device_scale_factor": 3, "has_touch": True},
    "Pixel 7": {"viewport": {"width": 412, "height": 839}, "is_mobile": True,
                "default_browser_type": "chromium", "user_agent": "Pixel UA",
                "device_scale_factor": 2.625, "has_touch": True},
    "Desktop Chrome": {"viewport": {"width": 1280, "height": 720}, "is_mobile": False,
                       "default_browser_type": "chromium", "user_agent": "Chrome UA",
                       "device_scale_factor": 1, "has_touch": False},
    "Desktop Firefox": {"viewport": {"width": 1280, "height": 720}, "is_mobile": False,
                        "default_browser_type": "firefox", "user_agent": "Firefox UA",
                        "device_scale_factor": 1, "has_touch": False},
}


@pytest.fixture
def registry() -> ProfileRegistry:
    """A small registry with no Playwright launchers attached."""
    engines = [EngineDescriptor(name=name, label=label) for name, label in ENGINE_LABELS.items()]
    devices = [DeviceDescriptor.from_playwright(name, d) for name, d in DEVICES.items()]
    return ProfileRegistry(engines, devices, build_identities().values())


@pytest.fixture
def fake_driver() -> FakeDriver:
    return FakeDriver()
