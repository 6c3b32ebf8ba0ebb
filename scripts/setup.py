#!/usr/bin/env python3
"""
Installer for Browser Compare.

Installs the playwright package, then the browser engines the capture
matrix drives (all of them unless names are given).

    python scripts/setup.py                   # chromium, webkit, firefox
    python scripts/setup.py webkit firefox
"""

import subprocess
import sys
from typing import List, Optional, Sequence

from browser_profiles import DEFAULT_ENGINES, ENGINE_LABELS


MIN_PYTHON = (3, 9)


def select_engines(requested: Optional[Sequence[str]] = None) -> List[str]:
    """Validate engine names against the registry; ``None`` means every default engine."""
    if not requested:
        return list(DEFAULT_ENGINES)
    engines = []
    for name in requested:
        name = name.strip().lower()
        if name not in ENGINE_LABELS:
            raise SystemExit(f"❌ Unknown browser engine: {name} (choose from {', '.join(ENGINE_LABELS)})")
        if name not in engines:
            engines.append(name)
    return engines


def install_steps(engines: Sequence[str]) -> List[tuple]:
    labels = ", ".join(ENGINE_LABELS[e] for e in engines)
    return [
        ([sys.executable, "-m", "pip", "install", "playwright"], "Installing Playwright"),
        ([sys.executable, "-m", "playwright", "install", *engines], f"Installing {labels}"),
    ]


def run_step(cmd: List[str], description: str) -> bool:
    print(f"\n📦 {description}...")
    try:
        subprocess.run(cmd, check=True, capture_output=True, text=True)
    except subprocess.CalledProcessError as e:
        print(f"❌ {description} failed")
        if e.stderr:
            print(e.stderr)
        return False
    print(f"✅ {description} completed")
    return True


def main(argv: Optional[Sequence[str]] = None) -> None:
    if sys.version_info < MIN_PYTHON:
        raise SystemExit(f"❌ Python {'.'.join(map(str, MIN_PYTHON))}+ required")

    engines = select_engines(argv)
    for cmd, description in install_steps(engines):
        if not run_step(cmd, description):
            sys.exit(1)

    print("\n✅ Browser Compare is ready:")
    print("   python scripts/capture.py <url> --browsers " + ",".join(engines))


if __name__ == "__main__":
    main(sys.argv[1:])
