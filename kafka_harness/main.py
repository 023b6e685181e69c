"""Standalone entrypoint: run an embedded Kafka until interrupted."""

from __future__ import annotations

import asyncio
import logging
import os

from kafka_harness.harness import EmbeddedKafka

logger = logging.getLogger(__name__)


async def _run(harness: EmbeddedKafka) -> None:
    """Keep the loop alive until cancelled, then stop the harness."""
    try:
        while True:
            await asyncio.sleep(1)
    finally:
        harness.stop()


def main() -> None:
    """Application entrypoint for the standalone harness."""
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    harness = EmbeddedKafka()
    logger.info("zookeeper: %s", harness.coordination_connect_string())
    logger.info("bootstrap: %s", harness.bootstrap_address())
    logger.info("bootstrap tls: %s", harness.bootstrap_tls_address())
    logger.info("health: %s", harness.health()["status"])

    try:
        asyncio.run(_run(harness))
    except KeyboardInterrupt:
        logger.info("interrupted")


if __name__ == "__main__":
    main()
