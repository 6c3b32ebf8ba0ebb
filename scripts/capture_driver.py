"""
Browser Compare - Playwright automation driver.

The capture engine only needs ``launch(engine) -> session``,
``session.capture(spec) -> Path`` and ``session.close()``.
"""

from pathlib import Path

from playwright.async_api import Browser

from browser_profiles import EngineDescriptor
from capture_matrix import ContextSpec


NAVIGATION_TIMEOUT_MS = 30000
ERUDA_URL = "https://cdn.jsdelivr.net/npm/eruda"


class PlaywrightSession:
    def __init__(self, browser: Browser):
        self.browser = browser

    async def capture(self, spec: ContextSpec) -> Path:
        context = await self.browser.new_context(**spec.options)
        try:
            page = await context.new_page()
            await page.goto(spec.url, wait_until="networkidle", timeout=NAVIGATION_TIMEOUT_MS)
            if spec.inject_script:
                await page.add_script_tag(url=ERUDA_URL)
                await page.evaluate("() => eruda.init()")
            await page.wait_for_timeout(spec.delay_ms)
            await page.screenshot(path=str(spec.path), full_page=spec.full_page)
        finally:
            await context.close()
        return spec.path

    async def close(self) -> None:
        await self.browser.close()


class PlaywrightDriver:
    def __init__(self, headless: bool = True):
        self.headless = headless

    async def launch(self, engine: EngineDescriptor) -> PlaywrightSession:
        browser = await engine.launcher.launch(headless=self.headless)
        return PlaywrightSession(browser)
