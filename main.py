"""CLI entry point for StartupConnect applicant tracking."""

import argparse
import logging
import sys
from collections.abc import Callable

from applicant_tracking.core.config import Settings
from applicant_tracking.core.errors import (
    NotFoundError,
    PartialFailure,
    StorageError,
    ValidationError,
)
from applicant_tracking.core.schemas import ApplicationPayload, ReconcileReport
from applicant_tracking.stores.base import RecordStore
from applicant_tracking.stores.sqlite import SQLiteRecordStore
from applicant_tracking.tracking.counter import ApplicantCounter
from applicant_tracking.tracking.opportunities import (
    applications_for,
    deactivate_opportunity,
    post_opportunity,
)
from applicant_tracking.tracking.reconciler import CountReconciler, export_report_json
from applicant_tracking.tracking.recorder import ApplicationRecorder
from applicant_tracking.tracking.resume import encode_resume_file

EXIT_ERROR = 1
EXIT_PARTIAL_FAILURE = 2
EXIT_STORAGE = 3


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        default="config/settings.yaml",
        help="Path to settings YAML file (default: config/settings.yaml)",
    )
    common.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    parser = argparse.ArgumentParser(
        description="StartupConnect applicant tracking - record applications and keep counts honest",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- post subcommand ---
    post_parser = subparsers.add_parser("post", parents=[common], help="Post a new opportunity")
    post_parser.add_argument("--title", required=True, help="Opportunity title")
    post_parser.add_argument("--description", default="", help="Longer description")
    post_parser.add_argument("--type", dest="opportunity_type", help="internship, job, research...")
    post_parser.add_argument("--location", help="Where the work happens")
    post_parser.add_argument("--compensation-type", help="paid, unpaid, equity...")
    post_parser.add_argument("--compensation-amount", type=float, help="Amount, if paid")
    post_parser.add_argument("--created-by", help="Id of the posting user")

    # --- apply subcommand ---
    apply_parser = subparsers.add_parser(
        "apply", parents=[common], help="Submit an application to an opportunity",
    )
    apply_parser.add_argument("opportunity_id", help="Opportunity to apply to")
    apply_parser.add_argument("--motivation", required=True, help="Why you are applying")
    apply_parser.add_argument("--resume", help="Path to a PDF, DOC or DOCX resume")
    apply_parser.add_argument("--applicant", help="Id of the applying user")

    # --- reconciliation subcommands ---
    verify_parser = subparsers.add_parser(
        "verify", parents=[common], help="Report cached counts that disagree with applications",
    )
    verify_parser.add_argument(
        "--export",
        choices=["json"],
        help="Export the report to format (json)",
    )
    subparsers.add_parser(
        "sync", parents=[common], help="Rewrite every active opportunity's applicant count",
    )
    resolve_parser = subparsers.add_parser(
        "resolve", parents=[common], help="Repair the applicant count of one opportunity",
    )
    resolve_parser.add_argument("opportunity_id")

    # --- inspection subcommands ---
    stats_parser = subparsers.add_parser(
        "stats", parents=[common], help="Show application statistics for an opportunity",
    )
    stats_parser.add_argument("opportunity_id")
    list_parser = subparsers.add_parser(
        "applications", parents=[common], help="List applications, newest first",
    )
    list_parser.add_argument("opportunity_id")
    deactivate_parser = subparsers.add_parser(
        "deactivate", parents=[common], help="Soft-delete an opportunity",
    )
    deactivate_parser.add_argument("opportunity_id")

    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def cmd_post(args: argparse.Namespace, settings: Settings, store: RecordStore) -> None:
    opp = post_opportunity(
        store,
        args.title,
        description=args.description,
        opportunity_type=args.opportunity_type,
        location=args.location,
        compensation_type=args.compensation_type,
        compensation_amount=args.compensation_amount,
        created_by=args.created_by,
    )
    print(f"Posted opportunity {opp.id}: {opp.title}")


def cmd_apply(args: argparse.Namespace, settings: Settings, store: RecordStore) -> None:
    resume = encode_resume_file(args.resume) if args.resume else None
    payload = ApplicationPayload(
        motivation=args.motivation,
        resume=resume,
        applicant_id=args.applicant,
    )
    recorder = ApplicationRecorder(store, settings.resume)
    submission = recorder.submit(args.opportunity_id, payload)
    print(f"Application {submission.application.id} submitted.")
    if not submission.count_updated:
        print("  Applicant count will catch up on the next sync.")


def _print_report(report: ReconcileReport) -> None:
    verb = "repaired" if report.repaired else "found"
    print(f"{len(report.checked)} opportunities checked, "
          f"{len(report.mismatches)} mismatches {verb}, {len(report.failed)} failed.")
    for m in report.mismatches:
        print(f"  {m.opportunity_id} '{m.title}': cached {m.cached_count}, "
              f"actual {m.true_count} ({m.difference:+d})")
    for opportunity_id, error in report.failed.items():
        print(f"  {opportunity_id}: skipped ({error})")


def cmd_verify(args: argparse.Namespace, settings: Settings, store: RecordStore) -> None:
    report = CountReconciler(store).verify()
    if args.export == "json":
        print(export_report_json(report))
    else:
        _print_report(report)
    report.raise_for_failures()


def cmd_sync(args: argparse.Namespace, settings: Settings, store: RecordStore) -> None:
    report = CountReconciler(store).sync_all()
    _print_report(report)
    report.raise_for_failures()


def cmd_resolve(args: argparse.Namespace, settings: Settings, store: RecordStore) -> None:
    mismatch = CountReconciler(store).resolve_one(args.opportunity_id)
    if mismatch is None:
        print(f"{args.opportunity_id}: count already correct.")
    else:
        print(f"{args.opportunity_id}: {mismatch.cached_count} -> {mismatch.true_count}")


def cmd_stats(args: argparse.Namespace, settings: Settings, store: RecordStore) -> None:
    stats = ApplicantCounter(store).stats(args.opportunity_id)
    latest = stats.latest_application_at.isoformat() if stats.latest_application_at else "never"
    print(f"Opportunity {stats.opportunity_id}")
    print(f"  Applications: {stats.total_applications}")
    print(f"  Cached count: {stats.cached_count}{'' if stats.in_sync else ' (out of sync)'}")
    print(f"  Latest application: {latest}")


def cmd_applications(args: argparse.Namespace, settings: Settings, store: RecordStore) -> None:
    applications = applications_for(store, args.opportunity_id)
    print(f"{len(applications)} applications")
    for app in applications:
        resume = "resume attached" if app.resume else "no resume"
        print(f"  {app.submitted_at:%Y-%m-%d %H:%M} {app.id} ({resume})")
        print(f"    {app.motivation}")


def cmd_deactivate(args: argparse.Namespace, settings: Settings, store: RecordStore) -> None:
    deactivate_opportunity(store, args.opportunity_id)
    print(f"Deactivated {args.opportunity_id}")


_COMMANDS: dict[str, Callable[[argparse.Namespace, Settings, RecordStore], None]] = {
    "post": cmd_post,
    "apply": cmd_apply,
    "verify": cmd_verify,
    "sync": cmd_sync,
    "resolve": cmd_resolve,
    "stats": cmd_stats,
    "applications": cmd_applications,
    "deactivate": cmd_deactivate,
}


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = Settings.from_yaml(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(EXIT_ERROR)

    try:
        store = SQLiteRecordStore.open(settings.database)
    except StorageError as e:
        print(f"Error opening database: {e}", file=sys.stderr)
        sys.exit(EXIT_STORAGE)

    try:
        _COMMANDS[args.command](args, settings, store)
    except ValidationError as e:
        print(f"Error: {e.field} {e.message}", file=sys.stderr)
        sys.exit(EXIT_ERROR)
    except (NotFoundError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(EXIT_ERROR)
    except PartialFailure as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(EXIT_PARTIAL_FAILURE)
    except StorageError:
        logging.getLogger(__name__).debug("Storage failure", exc_info=True)
        print("Error: could not reach the database. Please try again.", file=sys.stderr)
        sys.exit(EXIT_STORAGE)
    finally:
        store.close()


if __name__ == "__main__":
    main()
