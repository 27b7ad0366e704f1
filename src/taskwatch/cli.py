import argparse
import asyncio
import logging
import sys
from datetime import timedelta

from taskwatch.config import settings
from taskwatch.errors import AuthError, FetchError, StorageError
from taskwatch.sentry import flush as sentry_flush
from taskwatch.sentry import init_sentry

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _require_notifier() -> None:
    if not settings.has_notifier:
        print(f"Error: notifier '{settings.notifier}' is not configured")
        print("Set LINE_NOTIFY_TOKEN, TELEGRAM_BOT_TOKEN/TELEGRAM_CHAT_ID or WEBHOOK_URL")
        sys.exit(1)


def build_cycle():
    from taskwatch.google import GoogleTasksClient, google_auth
    from taskwatch.notify import create_notifier
    from taskwatch.services.check_cycle import CheckCycle
    from taskwatch.services.notification_state import open_notification_state

    try:
        state = open_notification_state()
    except StorageError as e:
        print(f"Error: could not load notification state: {e}")
        sys.exit(1)

    return CheckCycle(
        authorizer=google_auth,
        source=GoogleTasksClient(),
        notifier=create_notifier(),
        state=state,
    )


def print_report(report) -> None:
    print("\nCheck results:")
    print(f"  Overdue: {report.overdue}")
    print(f"  Upcoming: {report.upcoming}")
    print(f"  No due date: {report.no_due_date}")
    print(f"  New tasks: {len(report.new_task_ids)}")
    print(f"  Messages sent: {report.sent}")
    print(f"  Messages failed: {report.failed}")
    if report.state_error:
        print(f"  State not saved: {report.state_error}")
    print(f"\nOutcome: {report.outcome.value}")


async def run_scheduler() -> None:
    from taskwatch.services.scheduler import DailyScheduler

    _require_notifier()
    cycle = build_cycle()

    # Fail fast on missing credentials instead of at the first trigger
    try:
        cycle.authorizer.get_credential()
    except (AuthError, FetchError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    scheduler = DailyScheduler(
        cycle,
        hour=settings.schedule_hour,
        minute=settings.schedule_minute,
    )
    try:
        await scheduler.run_forever()
    except AuthError as e:
        print(f"Error: {e}")
        sys.exit(1)
    finally:
        await cycle.notifier.close()


async def check_now() -> None:
    _require_notifier()
    cycle = build_cycle()

    try:
        report = await cycle.run()
    except (AuthError, FetchError) as e:
        print(f"Error: {e}")
        sys.exit(1)
    finally:
        await cycle.notifier.close()

    if report is not None:
        print_report(report)


async def create_test_task() -> None:
    _require_notifier()
    cycle = build_cycle()

    try:
        credential = cycle.authorizer.get_credential()
        due = cycle.timezone.now() + timedelta(hours=24)
        task = cycle.source.insert_task(
            credential,
            title="Test Task",
            notes="This is a test task",
            due=due,
        )
        print(f"Created test task {task.id}")
        report = await cycle.run()
    except (AuthError, FetchError) as e:
        print(f"Error: {e}")
        sys.exit(1)
    finally:
        await cycle.notifier.close()

    if report is not None:
        print_report(report)


async def check_config() -> None:
    print("Task Watch Configuration Check\n")

    checks = [
        ("Google credentials", settings.has_google),
        (f"Notifier ({settings.notifier})", settings.has_notifier),
        ("Sentry DSN", settings.has_sentry),
    ]

    all_required_ok = True
    for name, configured in checks:
        status = "OK" if configured else "MISSING"
        symbol = "+" if configured else "-"
        print(f"  [{symbol}] {name}: {status}")
        if name != "Sentry DSN" and not configured:
            all_required_ok = False

    print(f"\n  Schedule: {settings.schedule_hour:02d}:{settings.schedule_minute:02d} {settings.user_timezone}")
    print(f"  State file: {settings.resolved_state_path}")
    print(f"  Task list: {settings.google_tasklist_id}")

    print()
    if all_required_ok:
        print("Required configuration present. Ready to run.")
    else:
        print("Missing required configuration. See .env.example for setup.")


def authenticate() -> None:
    from taskwatch.google import google_auth

    if google_auth.authenticate_interactive():
        print(f"Google authenticated. Token saved to {google_auth.token_path}")
    else:
        print("Authentication failed. Check GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET.")
        sys.exit(1)


def main() -> None:
    parser = argparse.ArgumentParser(description="Task Watch - daily Google Tasks notifications")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("run", help="Start the daily scheduler")
    subparsers.add_parser("check-now", help="Run one check cycle immediately")
    subparsers.add_parser("check", help="Check configuration")
    subparsers.add_parser("auth", help="Authorize Google Tasks access in a browser")
    subparsers.add_parser("test-task", help="Create a task due tomorrow and run a check")

    args = parser.parse_args()

    setup_logging()

    init_sentry(
        dsn=settings.sentry_dsn if settings.has_sentry else None,
        environment=settings.sentry_environment,
    )

    try:
        if args.command == "run":
            asyncio.run(run_scheduler())
        elif args.command == "check-now":
            asyncio.run(check_now())
        elif args.command == "check":
            asyncio.run(check_config())
        elif args.command == "auth":
            authenticate()
        elif args.command == "test-task":
            asyncio.run(create_test_task())
        else:
            parser.print_help()
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    finally:
        sentry_flush(timeout=2.0)


if __name__ == "__main__":
    main()
