"""Send a single error report: python -m error_dashboard MESSAGE."""

import argparse
import asyncio
import sys
from collections.abc import Sequence

from error_dashboard.client import ErrorDashboardClient, ReportStatus
from error_dashboard.config import ClientSettings, Configuration, PartialConfigs
from error_dashboard.log import setup_logging


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="error_dashboard",
        description="Send an error report to the error dashboard",
    )
    parser.add_argument("message", help="Error message (deduplication key)")
    parser.add_argument(
        "--details",
        default="",
        help="Error details sent alongside the message",
    )
    parser.add_argument(
        "--endpoint",
        default=None,
        help="Collection endpoint (default: ERROR_DASHBOARD_ENDPOINT)",
    )
    parser.add_argument("--attempts", type=int, default=None, help="Retry attempts")
    parser.add_argument(
        "--delay-ms", type=int, default=None, help="Delay between attempts in ms"
    )
    parser.add_argument("--verbose", action="store_true", help="Log the outcome")
    return parser.parse_args(argv)


async def _send(args: argparse.Namespace, settings: ClientSettings) -> ReportStatus:
    configuration = Configuration.new(
        PartialConfigs(
            verbose=args.verbose,
            retry_attempts=args.attempts,
            retry_delay=args.delay_ms,
        )
    )
    async with ErrorDashboardClient.from_settings(
        settings, configuration=configuration
    ) as client:
        return await client._send_error(args.details or args.message, args.message)


def main(argv: Sequence[str] | None = None) -> None:
    args = _parse_args(argv)
    settings = ClientSettings()
    if args.endpoint:
        settings = settings.model_copy(update={"endpoint": args.endpoint})
    setup_logging(settings.log_level)

    status = asyncio.run(_send(args, settings))
    sys.exit(0 if status == ReportStatus.SENT else 1)


if __name__ == "__main__":
    main()
