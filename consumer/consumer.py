"""Main consumer entry point."""
import asyncio
import signal
import os
import logging
from consumer.worker import WorkerPool
from database.connection import DatabaseConnection
from shared.config import settings

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def main():
    """Main entry point for the consumer service."""
    # Worker names derive from environment or process id
    pool_name = os.getenv("WORKER_ID", f"worker-{os.getpid()}")

    logger.info(f"Starting consumer {pool_name} with {settings.worker_concurrency} workers")

    # Initialize database connections
    db = await DatabaseConnection.init_mongo()
    redis_client = await DatabaseConnection.init_redis()

    pool = WorkerPool(db, redis_client, name_prefix=pool_name)

    # Setup signal handlers for graceful shutdown
    loop = asyncio.get_running_loop()

    def signal_handler():
        logger.info("Received shutdown signal")
        asyncio.create_task(pool.stop())

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, signal_handler)

    try:
        await pool.start()
    except Exception as e:
        logger.error(f"Worker pool error: {e}")
    finally:
        # Cleanup
        await DatabaseConnection.close_connections()
        logger.info("Consumer shutdown complete")


if __name__ == "__main__":
    asyncio.run(main())
