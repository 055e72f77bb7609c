"""CLI for Architect Prime: scrape pages and manage the local cache and session.

Usage:
    architect scrape https://example.com
    architect scrape example.com --no-cache -o text
    architect login --url https://example.com/login
    architect logout
    architect cache stats
    architect cache clear-expired
    architect cache clear
    architect reset
"""

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict

from playwright.async_api import Error as PlaywrightError

from architect.config import settings
from architect.core.cache import ScrapeCache
from architect.core.exceptions import ArchitectError
from architect.services.browser import BrowserManager
from architect.services.session import SessionArtifact


def _setup_logging(verbose: bool = False):
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _open_cache() -> ScrapeCache:
    return ScrapeCache(
        settings.CACHE_FILE,
        ttl=settings.CACHE_TTL_SECONDS,
        max_entries=settings.CACHE_MAX_ENTRIES,
    )


async def _cmd_scrape(args) -> int:
    """Scrape a single URL with the configured strategy."""
    from architect.services.scraper import build_scrape_strategy, scrape_url

    strategy = build_scrape_strategy(settings)
    try:
        result = await scrape_url(args.url, strategy, use_cache=not args.no_cache)
    except ArchitectError as e:
        print(f"[ERROR] {e.message}", file=sys.stderr)
        return 1
    finally:
        await strategy.close()

    if args.output == "text":
        print(result.content)
        print(
            f"\n[{result.provider}] {len(result.content)} chars"
            f"{' (authenticated)' if result.used_auth else ''}",
            file=sys.stderr,
        )
    else:
        print(
            json.dumps(
                result.model_dump(by_alias=True, exclude_none=True),
                indent=2,
                ensure_ascii=False,
            )
        )
    return 0


async def _cmd_login(args) -> int:
    """Open a visible browser and save the signed-in session."""
    session = SessionArtifact(settings.AUTH_STATE_FILE)

    async def wait_for_enter():
        print("=" * 50)
        print("1. A browser window has opened.")
        print("2. Navigate to the website you want to scrape.")
        print("3. Log in manually (solve CAPTCHAs, 2FA, etc.).")
        print("4. Once you are fully logged in, come back to this terminal.")
        print("=" * 50)
        await asyncio.to_thread(input, "Press ENTER when you are fully logged in to save the session...")

    try:
        await BrowserManager(headless=False).capture_session(session.path, args.url, wait_for_enter)
    except PlaywrightError as e:
        print(f"[ERROR] Login failed: {e.message}", file=sys.stderr)
        return 1
    print(f"Session saved to {session.path}")
    print("The scraper will now use this session to access protected pages.")
    return 0


def _cmd_logout(args) -> int:
    session = SessionArtifact(settings.AUTH_STATE_FILE)
    if session.clear():
        print(f"Session cleared: {session.path}")
    else:
        print("No session file found to clear")
    return 0


def _cmd_cache(args) -> int:
    cache = _open_cache()
    if args.action == "stats":
        print(json.dumps(asdict(cache.stats()), indent=2))
    elif args.action == "clear-expired":
        removed = cache.clear_expired()
        print(f"Removed {removed} expired entries ({len(cache)} remaining)")
    elif args.action == "clear":
        cache.clear()
        print(f"Cache cleared: {cache.path}")
    return 0


def _cmd_reset(args) -> int:
    _open_cache().clear()
    print(f"Cache cleared: {settings.CACHE_FILE}")
    return _cmd_logout(args)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="architect",
        description="Architect Prime CLI: scrape pages, manage the scrape cache and browser session",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # --- scrape ---
    scrape_parser = subparsers.add_parser("scrape", help="Scrape a single URL")
    scrape_parser.add_argument("url", help="URL to scrape (https:// is added if missing)")
    scrape_parser.add_argument("--no-cache", action="store_true", help="Bypass the cache lookup")
    scrape_parser.add_argument(
        "-o", "--output", default="json",
        choices=["json", "text"],
        help="Output format (default: json)",
    )

    # --- login / logout ---
    login_parser = subparsers.add_parser("login", help="Sign in interactively and save the session")
    login_parser.add_argument("--url", default=None, help="Page to open first")
    subparsers.add_parser("logout", help="Delete the saved session")

    # --- cache ---
    cache_parser = subparsers.add_parser("cache", help="Inspect or clear the scrape cache")
    cache_parser.add_argument("action", choices=["stats", "clear", "clear-expired"])

    # --- reset ---
    subparsers.add_parser("reset", help="Delete both the cache and the saved session")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    _setup_logging(args.verbose)

    if args.command == "scrape":
        return asyncio.run(_cmd_scrape(args))
    if args.command == "login":
        return asyncio.run(_cmd_login(args))
    if args.command == "logout":
        return _cmd_logout(args)
    if args.command == "cache":
        return _cmd_cache(args)
    if args.command == "reset":
        return _cmd_reset(args)
    return 1


if __name__ == "__main__":
    sys.exit(main())
