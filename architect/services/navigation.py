"""Escalating page-load policy.

A navigation is attempted with the strictest readiness condition first and
relaxed on timeout: ``networkidle`` → ``domcontentloaded`` → ``load``. Each
attempt has its own (shrinking) timeout and starts from scratch. Only
timeouts move the chain forward; any other navigation error ends it.
"""

import logging
from dataclasses import dataclass

from playwright.async_api import Page, TimeoutError as PlaywrightTimeoutError

from architect.core.exceptions import FetchError, NavigationTimeoutError
from architect.core.metrics import navigation_attempts_total

logger = logging.getLogger(__name__)

WAIT_CONDITIONS = ("networkidle", "domcontentloaded", "load", "commit")


@dataclass(frozen=True)
class WaitStrategy:
    wait_until: str
    timeout_ms: int

    @classmethod
    def parse(cls, text: str) -> "WaitStrategy":
        """Parse ``"<wait_until>:<timeout_ms>"``, e.g. ``"networkidle:30000"``."""
        wait_until, sep, timeout = text.partition(":")
        wait_until = wait_until.strip()
        if not sep or wait_until not in WAIT_CONDITIONS:
            raise ValueError(f"Invalid wait strategy {text!r}")
        timeout_ms = int(timeout)
        if timeout_ms <= 0:
            raise ValueError(f"Wait strategy timeout must be positive: {text!r}")
        return cls(wait_until=wait_until, timeout_ms=timeout_ms)


DEFAULT_WAIT_STRATEGIES: tuple[WaitStrategy, ...] = (
    WaitStrategy("networkidle", 30000),
    WaitStrategy("domcontentloaded", 20000),
    WaitStrategy("load", 15000),
)
DEFAULT_SETTLE_DELAY_MS = 2000


def parse_wait_strategies(entries: list[str]) -> tuple[WaitStrategy, ...]:
    strategies = tuple(WaitStrategy.parse(s) for s in entries)
    if not strategies:
        raise ValueError("At least one navigation wait strategy is required")
    return strategies


async def _attempt(page: Page, url: str, strategy: WaitStrategy) -> None:
    try:
        await page.goto(url, wait_until=strategy.wait_until, timeout=strategy.timeout_ms)
    except PlaywrightTimeoutError as e:
        raise NavigationTimeoutError(
            f"Navigation to {url} timed out after {strategy.timeout_ms}ms "
            f"waiting for '{strategy.wait_until}'",
            wait_until=strategy.wait_until,
            timeout_ms=strategy.timeout_ms,
        ) from e


async def navigate_with_fallback(
    page: Page,
    url: str,
    strategies: tuple[WaitStrategy, ...] = DEFAULT_WAIT_STRATEGIES,
    settle_delay_ms: int = DEFAULT_SETTLE_DELAY_MS,
) -> WaitStrategy:
    """Load ``url`` in ``page``, relaxing the wait condition on each timeout.

    Returns the strategy that succeeded. After a successful load the page is
    given ``settle_delay_ms`` for client-side rendering to finish.

    Raises:
        FetchError: every strategy timed out.
    """
    last_timeout: NavigationTimeoutError | None = None

    for attempt, strategy in enumerate(strategies, start=1):
        try:
            await _attempt(page, url, strategy)
        except NavigationTimeoutError as e:
            navigation_attempts_total.labels(
                wait_until=strategy.wait_until, outcome="timeout"
            ).inc()
            logger.warning(f"{e.message} (attempt {attempt}/{len(strategies)})")
            last_timeout = e
            continue

        navigation_attempts_total.labels(
            wait_until=strategy.wait_until, outcome="success"
        ).inc()
        if attempt > 1:
            logger.info(f"Loaded {url} with fallback wait condition '{strategy.wait_until}'")

        if settle_delay_ms > 0:
            await page.wait_for_timeout(settle_delay_ms)
        return strategy

    raise FetchError(
        f"Failed to load {url}: all {len(strategies)} navigation strategies timed out"
    ) from last_timeout
