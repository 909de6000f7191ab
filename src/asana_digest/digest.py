"""Daily Asana task digest for Slack.

Resolves the target JST date, fetches tasks due and starting on it,
formats both blocks, and posts them to Slack in a fixed order.

Usage:
  asana-digest                     # today (JST)
  asana-digest --date tomorrow
  asana-digest --date 2025-08-15 --dry-run
  python -m asana_digest --config digest.yaml
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

import yaml
from dotenv import load_dotenv

from asana_digest.asana_client import AsanaAPIError, AsanaClient
from asana_digest.config import (
    ConfigError,
    DigestConfig,
    DisplayConfig,
    load_settings,
)
from asana_digest.dates import InvalidDateError, resolve_target_date
from asana_digest.formatter import format_due_message, format_start_message
from asana_digest.slack_client import Notifier, SlackAPIError, build_notifier, deliver

logger = logging.getLogger(__name__)

SEPARATOR = "────────────────"
SPACER = "\n"

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2


@dataclass
class DigestSummary:
    """Outcome of one digest run."""

    date: str
    due_count: int
    start_count: int
    messages: list[str] = field(default_factory=list)
    sent: int = 0


def build_message_sequence(start_msg: str, due_msg: str) -> list[str]:
    """Messages in posting order: separator, starting, spacer, due, separator."""
    return [SEPARATOR, start_msg, SPACER, due_msg, SEPARATOR]


def run_digest(
    date_str: str,
    client: AsanaClient,
    notifier: Notifier | None,
    display: DisplayConfig | None = None,
    *,
    dry_run: bool = False,
) -> DigestSummary:
    """Fetch, format, and deliver the digest for one date.

    Args:
        date_str: Target JST date (YYYY-MM-DD).
        client: Asana search client.
        notifier: Slack transport. May be None when dry_run is set.
        display: Rendering settings.
        dry_run: Log the messages without posting them.

    Returns:
        DigestSummary with counts and the rendered messages.

    Raises:
        InvalidDateError: If date_str is malformed.
        AsanaAPIError: On any Asana failure.
        SlackAPIError: On any delivery failure.
    """
    display = display or DisplayConfig()

    due_tasks = client.fetch_due_tasks(date_str)
    start_tasks = client.fetch_starting_tasks(date_str)

    start_msg = format_start_message(date_str, start_tasks, display)
    due_msg = format_due_message(date_str, due_tasks, display)

    logger.info("--- Start message ---\n%s\n---------------------", start_msg)
    logger.info("--- Due message   ---\n%s\n---------------------", due_msg)

    messages = build_message_sequence(start_msg, due_msg)
    summary = DigestSummary(
        date=date_str,
        due_count=len(due_tasks),
        start_count=len(start_tasks),
        messages=messages,
    )
    if dry_run:
        logger.info("Dry run: %d messages not sent", len(messages))
        return summary
    if notifier is None:
        raise SlackAPIError("No Slack notifier available")

    summary.sent = deliver(notifier, messages)
    return summary


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="asana-digest",
        description="Post Asana tasks due or starting on a JST date to Slack",
    )
    parser.add_argument(
        "--date",
        help="Target date: 'today', 'tomorrow', or YYYY-MM-DD (default: today JST)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="YAML file with display and Slack identity settings",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Query and format, but do not post to Slack",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint. Returns the process exit code."""
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )
    load_dotenv(override=False)

    try:
        settings = load_settings(args.config) if args.config else None
        config = DigestConfig.from_env(settings=settings)
    except (ConfigError, OSError, yaml.YAMLError) as exc:
        logger.error("Configuration error: %s", exc)
        return EXIT_CONFIG

    date_str = resolve_target_date(args.date, config.date_override)
    logger.info(
        "Using JST date: %s (runner UTC now: %s)",
        date_str,
        datetime.now(UTC).isoformat(timespec="seconds"),
    )

    try:
        client = AsanaClient.from_config(config.asana)
        notifier = None if args.dry_run else build_notifier(config.slack)
        summary = run_digest(
            date_str, client, notifier, config.display, dry_run=args.dry_run
        )
    except (InvalidDateError, AsanaAPIError, SlackAPIError) as exc:
        logger.error("Digest failed for %s: %s", date_str, exc)
        return EXIT_FAILURE
    except Exception:
        logger.exception("Unexpected failure for %s", date_str)
        return EXIT_FAILURE

    action = "Prepared (dry run)" if args.dry_run else "Sent to Slack"
    logger.info(
        "%s: %s due=%d, start=%d",
        action,
        summary.date,
        summary.due_count,
        summary.start_count,
    )
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
