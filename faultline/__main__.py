from __future__ import annotations

import argparse
import asyncio
import sys

from faultline.config import get_settings
from faultline.notifier import HttpNotifier
from faultline.observability.logging import configure_logging


class FaultlineTestError(RuntimeError):
    pass


async def send_test_notice(message: str) -> str | None:
    notifier = HttpNotifier(get_settings())
    try:
        try:
            raise FaultlineTestError(message)
        except FaultlineTestError as exc:
            return await notifier.notify_or_ignore(exc, {"source": "faultline test"})
    finally:
        await notifier.aclose()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="faultline", description="Faultline error reporting tools")
    subparsers = parser.add_subparsers(dest="command", required=True)
    test_parser = subparsers.add_parser("test", help="Send a test notice using the current settings")
    test_parser.add_argument("--message", default="Testing faultline configuration", help="Error message to send")
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.log_level)

    if not settings.is_configured:
        print("faultline is not configured: set FAULTLINE_API_KEY (and FAULTLINE_REPORT_ENABLED=true)", file=sys.stderr)
        return 1

    error_id = asyncio.run(send_test_notice(args.message))
    if error_id is None:
        print("Test notice was ignored", file=sys.stderr)
        return 1
    print(f"Sent test notice {error_id}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
