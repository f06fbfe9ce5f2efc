"""Temporal Worker entry point.

This worker polls the analysis-queue for workflow and activity tasks.
"""
import asyncio
import logging
import signal

from temporalio.client import Client
from temporalio.worker import Worker

from app.core.logging import setup_logging
from app.db.session import Base, sync_engine
from worker.activities import assess_risk, extract_document
from worker.config import WorkerSettings
from worker.workflows import AnalysisWorkflow

logger = logging.getLogger("worker")


def _install_signal_handlers(stop_event: asyncio.Event) -> None:
    """Install signal handlers for graceful shutdown."""
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:  # pragma: no cover - Windows
            signal.signal(sig, lambda *_: stop_event.set())


def build_worker(client: Client, settings: WorkerSettings) -> Worker:
    """Create the worker with the analysis workflow and its activities."""
    return Worker(
        client,
        task_queue=settings.WORKER_TASK_QUEUE,
        workflows=[AnalysisWorkflow],
        activities=[extract_document, assess_risk],
        max_concurrent_activities=settings.MAX_CONCURRENT_ACTIVITIES,
    )


async def run_worker() -> None:
    """Run the Temporal worker."""
    settings = WorkerSettings()

    logger.info(
        "Starting worker: temporal=%s, namespace=%s, queue=%s, default provider=%s",
        settings.TEMPORAL_ADDRESS,
        settings.TEMPORAL_NAMESPACE,
        settings.WORKER_TASK_QUEUE,
        settings.AI_PROVIDER,
    )

    # Tables may not exist yet if the worker starts before the API
    Base.metadata.create_all(sync_engine)

    client = await Client.connect(
        settings.TEMPORAL_ADDRESS,
        namespace=settings.TEMPORAL_NAMESPACE,
    )
    worker = build_worker(client, settings)

    # Setup graceful shutdown
    stop_event = asyncio.Event()
    _install_signal_handlers(stop_event)

    logger.info("Worker running, polling for tasks...")
    worker_task = asyncio.create_task(worker.run())

    await stop_event.wait()
    logger.info("Shutdown signal received, stopping worker...")

    await worker.shutdown()
    await asyncio.gather(worker_task, return_exceptions=True)
    logger.info("Worker stopped")


def main() -> None:
    """Main entry point."""
    setup_logging()
    asyncio.run(run_worker())


if __name__ == "__main__":
    main()
