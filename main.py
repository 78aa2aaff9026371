import argparse
import asyncio
import datetime as dt
import logging

from slotpicker.config import load_settings
from slotpicker.domain import Status
from slotpicker.worker import run_check_once, run_forever


def _setup_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )


def _parse_date(raw: str) -> dt.date:
    try:
        return dt.date.fromisoformat(raw)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Invalid date {raw!r}, expected YYYY-MM-DD") from e


def main() -> int:
    parser = argparse.ArgumentParser(description="slotpicker: booking availability for a business")
    parser.add_argument("--business-id", help="Business to book with (defaults to BUSINESS_ID)")
    parser.add_argument("--duration", type=int, help="Booking length in minutes (defaults to DURATION_MINUTES)")
    parser.add_argument("--date", type=_parse_date, required=True, help="Date to inspect, YYYY-MM-DD")
    parser.add_argument("--time", help="Time to select, HH:MM")
    parser.add_argument("--watch", action="store_true", help="Re-check every REFRESH_INTERVAL_SECONDS")
    args = parser.parse_args()

    _setup_logging()
    settings = load_settings()

    business_id = args.business_id or settings.business_id
    if not business_id:
        parser.error("--business-id is required when BUSINESS_ID is not set")

    duration_minutes = args.duration if args.duration is not None else settings.duration_minutes
    if duration_minutes < 1:
        parser.error("--duration must be >= 1")

    try:
        if args.watch:
            asyncio.run(
                run_forever(
                    settings,
                    business_id=business_id,
                    duration_minutes=duration_minutes,
                    selected_date=args.date,
                )
            )
            return 0

        state = asyncio.run(
            run_check_once(
                settings,
                business_id=business_id,
                duration_minutes=duration_minutes,
                selected_date=args.date,
                selected_time=args.time,
            )
        )
    except ValueError as e:
        logging.getLogger(__name__).error("%s", e)
        return 2
    except KeyboardInterrupt:
        return 0

    if state.status is not Status.READY:
        return 1
    if args.time and state.selected_time != args.time:
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
