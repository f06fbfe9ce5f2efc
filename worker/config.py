"""Worker configuration.

Environment-based configuration for the Temporal worker. Provider
credentials are resolved per activity (settings table first, then
environment), not here.
"""
import os


class WorkerSettings:
    """Worker configuration from environment variables."""

    def __init__(self):
        # Temporal configuration
        self.TEMPORAL_ADDRESS = os.getenv("TEMPORAL_ADDRESS", "localhost:7233")
        self.TEMPORAL_NAMESPACE = os.getenv("TEMPORAL_NAMESPACE", "default")
        self.WORKER_TASK_QUEUE = os.getenv("WORKER_TASK_QUEUE", "analysis-queue")

        # Concurrency
        self.MAX_CONCURRENT_ACTIVITIES = int(os.getenv("MAX_CONCURRENT_ACTIVITIES", "4"))

        # Default AI provider (logged at startup only)
        self.AI_PROVIDER = os.getenv("AI_PROVIDER", "ollama")

    def __repr__(self):
        return (
            f"WorkerSettings(temporal={self.TEMPORAL_ADDRESS}, "
            f"queue={self.WORKER_TASK_QUEUE}, "
            f"namespace={self.TEMPORAL_NAMESPACE})"
        )
