"""
Browser Compare - capture orchestration with retry support.

Runs every planned request through one retry loop, reusing one browser per
engine for the standard matrix and one browser per in-app identity.
"""

import asyncio
from dataclasses import asdict, dataclass, field, replace
from itertools import groupby
from typing import Any, Awaitable, Callable, Dict, List, Optional

from browser_profiles import ProfileRegistry
from capture_config import CaptureConfig
from capture_matrix import CapturePlan, CaptureRequest, ContextSpec, plan_captures, warn


MAX_ATTEMPTS = 3
BASE_DELAY_MS = 1000


class LaunchError(RuntimeError):
    pass


@dataclass
class CaptureOutcome:
    success: bool
    label: str
    engine: str = ""
    device: str = ""
    viewport: Dict[str, int] = field(default_factory=dict)
    user_agent: str = ""
    filename: Optional[str] = None
    filepath: Optional[str] = None
    kind: str = "standard"
    platform: str = ""
    error: Optional[str] = None
    attempts: int = 0

    @classmethod
    def for_request(cls, request: CaptureRequest, **values: Any) -> "CaptureOutcome":
        data = {
            "success": False,
            "label": request.label,
            "engine": request.engine.name,
            "device": request.device_label,
            "viewport": request.effective_viewport,
            "user_agent": request.user_agent,
            "filename": request.filename,
            "kind": request.kind,
            "platform": request.platform,
        }
        data.update(values)
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["browser"] = data.pop("label")
        data["type"] = data.pop("kind")
        return data


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = MAX_ATTEMPTS
    base_delay_ms: int = BASE_DELAY_MS

    def backoff_ms(self, attempt: int) -> int:
        return self.base_delay_ms * 2 ** (attempt - 1)


async def capture_with_retry(
    work: Callable[[], Awaitable[CaptureOutcome]],
    label: str,
    request: Optional[CaptureRequest] = None,
    policy: Optional[RetryPolicy] = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> CaptureOutcome:
    """Run ``work`` until it succeeds or the policy runs out of attempts.

    Capture errors never escape: the last one is returned as a failure
    outcome. ``sleep`` takes seconds, like ``asyncio.sleep``.
    """
    policy = policy or RetryPolicy()
    for attempt in range(1, policy.max_attempts + 1):
        try:
            outcome = await work()
            return replace(outcome, success=True, error=None, attempts=attempt)
        except Exception as exc:
            message = str(exc) or exc.__class__.__name__
            if attempt == policy.max_attempts:
                print(f"  ❌ {label} - failed after {policy.max_attempts} attempts: {message}")
                if request is not None:
                    return CaptureOutcome.for_request(request, error=message, attempts=attempt)
                return CaptureOutcome(success=False, label=label, error=message, attempts=attempt)
            backoff = policy.backoff_ms(attempt)
            print(
                f"  ⚠️  {label} - attempt {attempt}/{policy.max_attempts} failed: {message}. "
                f"Retrying in {backoff}ms..."
            )
            await sleep(backoff / 1000.0)


class ResultCollector:
    """Ordered, append-only record of capture outcomes."""

    def __init__(self):
        self._outcomes: List[CaptureOutcome] = []

    def add(self, outcome: CaptureOutcome) -> None:
        self._outcomes.append(outcome)

    def extend(self, outcomes: List[CaptureOutcome]) -> None:
        self._outcomes.extend(outcomes)

    @property
    def successes(self) -> List[CaptureOutcome]:
        return [o for o in self._outcomes if o.success]

    @property
    def failures(self) -> List[CaptureOutcome]:
        return [o for o in self._outcomes if not o.success]

    def results(self, include_failures: bool = False) -> List[CaptureOutcome]:
        if include_failures:
            return list(self._outcomes)
        return self.successes

    def summary(self) -> Dict[str, int]:
        return {
            "attempted": len(self._outcomes),
            "captured": len(self.successes),
            "failed": len(self.failures),
        }


class CaptureEngine:
    def __init__(
        self,
        config: CaptureConfig,
        registry: ProfileRegistry,
        driver: Any,
        policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.config = config.validate()
        self.registry = registry
        self.driver = driver
        self.policy = policy or RetryPolicy()
        self.sleep = sleep
        self.collector = ResultCollector()
        self.notes: List[str] = []
        self._semaphore = asyncio.Semaphore(config.concurrency)

    def plan(self) -> CapturePlan:
        return plan_captures(self.registry, self.config, self.notes)

    async def run(self) -> List[CaptureOutcome]:
        self.config.screenshots_dir.mkdir(parents=True, exist_ok=True)
        plan = self.plan()

        # 1. Standard engine + device combos, one browser per engine
        for _, group in groupby(plan.standard, key=lambda r: r.engine.name):
            requests = list(group)
            engine = requests[0].engine
            print(f"\n🚀 Launching {engine.label}...")
            await self.run_session(requests)

        # 2. In-app identities, one browser each
        for request in plan.in_app:
            print(f"\n📲 {request.label} ({request.engine.label} engine)")
            await self.run_session([request])

        summary = self.collector.summary()
        print(f"\n📸 {summary['captured']}/{summary['attempted']} screenshots captured")
        return self.collector.results(self.config.include_failures)

    async def run_session(self, requests: List[CaptureRequest]) -> None:
        engine = requests[0].engine
        try:
            session = await self.driver.launch(engine)
        except Exception as exc:
            if self.config.on_launch_failure == "abort":
                raise LaunchError(f"Could not launch {engine.label}: {exc}") from exc
            warn(self.notes, f"Could not launch {engine.label}: {exc}, skipping {len(requests)} capture(s)")
            self.collector.extend(
                [CaptureOutcome.for_request(r, error=f"launch failed: {exc}") for r in requests]
            )
            return

        try:
            outcomes = await asyncio.gather(*(self.capture(session, r) for r in requests))
        finally:
            await session.close()
        self.collector.extend(list(outcomes))

    async def capture(self, session: Any, request: CaptureRequest) -> CaptureOutcome:
        spec = ContextSpec(
            options=request.context_options(),
            url=request.url,
            path=self.config.screenshots_dir / request.filename,
            delay_ms=request.delay_ms,
            full_page=request.full_page,
            inject_script=request.inject_script,
        )

        async def attempt() -> CaptureOutcome:
            path = await session.capture(spec)
            return CaptureOutcome.for_request(request, filepath=str(path))

        async with self._semaphore:
            if request.kind == "standard":
                print(f"  📱 {request.label}")
            return await capture_with_retry(
                attempt, request.label, request=request, policy=self.policy, sleep=self.sleep
            )
