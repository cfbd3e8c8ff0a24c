from __future__ import annotations

import argparse
import json
import logging
import sys

from push_api.core.config import settings
from push_api.core.errors import NotificationError
from push_api.db.session import SessionLocal
from push_api.services.dispatch_service import send_to_all


def _json_object(value: str) -> dict:
    try:
        parsed = json.loads(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise argparse.ArgumentTypeError("--data must be a JSON object")
    return parsed


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Broadcast a push notification to every registered device")
    parser.add_argument("title", nargs="?", default="Notification")
    parser.add_argument("body", nargs="?", default="You have a new message")
    parser.add_argument("--data", type=_json_object, default=None, help="JSON object attached to each message")
    args = parser.parse_args(argv)

    logging.basicConfig(level=settings.log_level.upper())

    session = SessionLocal()
    try:
        result = send_to_all(session, args.title, args.body, args.data)
    except NotificationError as exc:
        print(f"{exc.kind}: {exc.message}", file=sys.stderr)
        return 1
    finally:
        session.close()

    print(f"{result.sent_count} notification(s) sent")
    return 0


if __name__ == "__main__":
    sys.exit(main())
