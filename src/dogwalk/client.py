"""
CLI client: starts booking workflows and drives them with signals.

Usage:
    # Book a 45-minute walk for two dogs and wait for confirmation:
    python -m dogwalk.client book --owner u-1 --walker w-7 --dog d-1 --dog d-2 \\
        --at 2030-05-01T09:00:00+00:00 --duration 45

    # Report walk progress / cancel:
    python -m dogwalk.client start-walk <booking-id>
    python -m dogwalk.client finish-walk <booking-id>
    python -m dogwalk.client cancel <booking-id> --reason "owner sick"

    # Inspect a running booking:
    python -m dogwalk.client status <booking-id>
"""

import argparse
import asyncio
import json
import logging
from datetime import datetime

from temporalio.client import Client, WorkflowHandle

# Must match the data_converter used by the worker.
from temporalio.contrib.pydantic import pydantic_data_converter

from dogwalk.config import configure_logging, get_settings
from dogwalk.domain.models import BookingRequest, new_id
from dogwalk.workflows import BookingWorkflow

logger = logging.getLogger(__name__)


def workflow_id_for(booking_id: str) -> str:
    return f"booking-{booking_id}"


def build_request(args: argparse.Namespace) -> BookingRequest:
    return BookingRequest(
        booking_id=args.booking_id or new_id(),
        owner_id=args.owner,
        walker_id=args.walker,
        dog_ids=args.dog or [],
        scheduled_at=datetime.fromisoformat(args.at),
        duration_minutes=args.duration,
    )


async def book(client: Client, args: argparse.Namespace) -> None:
    settings = get_settings()
    req = build_request(args)
    workflow_id = workflow_id_for(req.booking_id)
    logger.info("Starting workflow %s", workflow_id)

    handle = await client.start_workflow(
        BookingWorkflow.run,
        req,
        id=workflow_id,            # one workflow per booking, prevents duplicates
        task_queue=settings.task_queue,
    )
    print(req.booking_id)

    if args.wait:
        # The workflow stays open until the walk finishes; poll for the
        # outcome of the payment step instead of awaiting the result.
        while True:
            status = await handle.query(BookingWorkflow.get_status)
            if status["status"] not in (None, "pending") or status["error"]:
                print(json.dumps(status, indent=2))
                return
            await asyncio.sleep(0.5)


async def signal(handle: WorkflowHandle, args: argparse.Namespace) -> None:
    if args.command == "start-walk":
        await handle.signal(BookingWorkflow.walk_started)
    elif args.command == "finish-walk":
        await handle.signal(BookingWorkflow.walk_finished)
    else:
        await handle.signal(BookingWorkflow.cancel, args.reason)
    logger.info("Sent %s to %s", args.command, handle.id)


async def run_client(args: argparse.Namespace) -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    client = await Client.connect(
        settings.temporal_address,
        namespace=settings.temporal_namespace,
        data_converter=pydantic_data_converter,
    )

    if args.command == "book":
        await book(client, args)
        return

    handle = client.get_workflow_handle(workflow_id_for(args.booking_id))
    if args.command == "status":
        print(json.dumps(await handle.query(BookingWorkflow.get_status), indent=2))
    else:
        await signal(handle, args)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Book and manage dog walks via Temporal")
    sub = parser.add_subparsers(dest="command", required=True)

    book_p = sub.add_parser("book", help="Create a booking and pay for it")
    book_p.add_argument("--booking-id", default=None, help="Booking id (a UUID is generated if omitted)")
    book_p.add_argument("--owner", required=True, help="Owner user id")
    book_p.add_argument("--walker", required=True, help="Walker user id")
    book_p.add_argument("--dog", action="append", help="Dog id; repeat for several dogs")
    book_p.add_argument("--at", required=True, help="Scheduled time, ISO 8601 with timezone")
    book_p.add_argument("--duration", type=int, default=30, help="Walk length in minutes")
    book_p.add_argument("--wait", action="store_true", help="Wait for confirmation or cancellation")

    for name, help_text in (
        ("start-walk", "Report that the walk has started"),
        ("finish-walk", "Report that the walk has finished"),
        ("status", "Query the booking workflow's state"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("booking_id")

    cancel_p = sub.add_parser("cancel", help="Cancel a booking (refunds a completed payment)")
    cancel_p.add_argument("booking_id")
    cancel_p.add_argument("--reason", default=None)
    return parser


def main() -> None:
    asyncio.run(run_client(build_parser().parse_args()))


if __name__ == "__main__":
    main()
