#!/usr/bin/env python3
"""
Browser Compare - Screenshot Comparison Tool
Captures a target URL across browser engines, device emulations and in-app
browser identities using Playwright, then writes an HTML comparison report.

Examples:
    python scripts/capture.py https://example.com
    python scripts/capture.py https://example.com --browsers chromium,webkit --devices "iPhone 15 Pro,Pixel 7"
    python scripts/capture.py https://example.com --ua-spoof facebook,instagram,wechat
"""

import argparse
import asyncio
import sys
from typing import Any, Dict, List, Optional

try:
    from playwright.async_api import async_playwright
except ImportError:
    print("ERROR: playwright not installed. Run: python scripts/setup.py")
    raise SystemExit(1)

from browser_profiles import ProfileRegistry
from capture_config import (
    LAUNCH_FAILURE_POLICIES,
    CaptureConfig,
    ConfigurationError,
    load_config_file,
    merge_config,
)
from capture_driver import PlaywrightDriver
from capture_engine import CaptureEngine, LaunchError
from report_generator import generate_report


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Capture screenshots of a URL across browser engines and devices"
    )
    parser.add_argument("url", nargs="?", help="Target URL")
    parser.add_argument("--output", "-o", help="Output directory (default: ./report)")
    parser.add_argument("--width", "-w", dest="custom_width", type=int, help="Custom viewport width")
    parser.add_argument("--height", "-H", dest="custom_height", type=int, help="Custom viewport height")
    parser.add_argument(
        "--full-page",
        dest="full_page",
        help="Capture full page screenshots: true/false (default: true)",
    )
    parser.add_argument("--delay", type=int, help="Wait ms after page load before capture (default: 2000)")
    parser.add_argument("--devices", help="Comma-separated device list (default: all presets)")
    parser.add_argument("--browsers", help="Comma-separated browser list: chromium,webkit,firefox")
    parser.add_argument(
        "--ua-spoof",
        dest="ua_spoof",
        help="Comma-separated in-app browsers to spoof (facebook, instagram, tiktok, wechat, ...)",
    )
    parser.add_argument(
        "--inject-eruda",
        dest="inject_eruda",
        action="store_true",
        default=None,
        help="Inject the Eruda console for debugging",
    )
    parser.add_argument(
        "--include-failures",
        dest="include_failures",
        action="store_true",
        default=None,
        help="Keep failed captures in the report as failed tiles",
    )
    parser.add_argument(
        "--on-launch-failure",
        dest="on_launch_failure",
        choices=LAUNCH_FAILURE_POLICIES,
        help="Abort the run or skip the engine when a browser fails to launch (default: abort)",
    )
    parser.add_argument("--concurrency", type=int, help="Captures run at once per browser (default: 1)")
    parser.add_argument("--config", help="Path to a JSON config file (default: ./.browsercompare.json)")
    return parser


def cli_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    values = vars(args).copy()
    values.pop("config", None)
    return values


def build_config(args: argparse.Namespace) -> CaptureConfig:
    file_config = load_config_file(args.config)
    return merge_config(file_config, cli_overrides(args)).validate()


async def main_async(args: argparse.Namespace) -> None:
    config = build_config(args)
    async with async_playwright() as p:
        registry = ProfileRegistry.from_playwright(p)
        engine = CaptureEngine(config, registry, PlaywrightDriver())
        results = await engine.run()
    generate_report(results, config, engine.notes)


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        asyncio.run(main_async(args))
    except ConfigurationError as exc:
        print(f"❌ {exc}")
        parser.print_usage()
        sys.exit(1)
    except LaunchError as exc:
        print(f"❌ {exc}")
        sys.exit(2)


if __name__ == "__main__":
    main()
