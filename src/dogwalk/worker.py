"""
Temporal worker: polls the booking task queue.

The worker registers BookingWorkflow and the booking activities, then
executes whatever the Temporal server dispatches on the task queue.
Several workers can poll the same queue for horizontal scaling; Temporal
delivers each task to exactly one of them.

Run with:
    python -m dogwalk.worker
"""

import asyncio
import logging

from temporalio.client import Client

# The same data_converter must be used on both the worker AND the client,
# otherwise pydantic models will not round-trip.
from temporalio.contrib.pydantic import pydantic_data_converter
from temporalio.worker import Worker

from dogwalk.activities import ALL_ACTIVITIES
from dogwalk.config import configure_logging, get_settings
from dogwalk.workflows import BookingWorkflow


async def run_worker() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    logger = logging.getLogger(__name__)

    client = await Client.connect(
        settings.temporal_address,
        namespace=settings.temporal_namespace,
        data_converter=pydantic_data_converter,
    )
    logger.info(
        "Connected to Temporal at %s, starting worker on queue %r", settings.temporal_address, settings.task_queue
    )

    worker = Worker(
        client,
        task_queue=settings.task_queue,
        workflows=[BookingWorkflow],
        activities=ALL_ACTIVITIES,
    )
    # Blocks until the worker is shut down (e.g. via Ctrl+C).
    await worker.run()


def main() -> None:
    asyncio.run(run_worker())


if __name__ == "__main__":
    main()
