"""Probe the configured archiver: log its status and the last processed tick's transactions."""

import logging

from archiver_client.client import ArchiverClient
from archiver_client.core.config import get_settings
from archiver_client.core.errors import ArchiverError
from archiver_client.core.logging import configure_logging


def main() -> int:
    """Query status and tick transactions once, then exit."""

    logger = logging.getLogger(__name__)
    try:
        settings = get_settings()
    except ValueError as exc:
        configure_logging()
        logger.error("probe_invalid_settings", extra={"error": str(exc)})
        return 2
    configure_logging(settings.LOG_LEVEL, service=settings.APP_NAME)

    try:
        transport = settings.archiver_transport()
        with ArchiverClient.from_settings(settings) as client:
            status = client.get_status()
            tick = status.last_processed_tick
            logger.info(
                "probe_status",
                extra={
                    "transport": transport,
                    "tick_number": tick.tick_number,
                    "epoch": tick.epoch,
                },
            )

            transactions = client.get_tick_transactions(tick.tick_number)
            logger.info(
                "probe_tick_transactions",
                extra={"tick_number": tick.tick_number, "count": len(transactions)},
            )
            for transaction in transactions:
                logger.info(
                    "probe_transaction",
                    extra={
                        "tx_id": transaction.id,
                        "amount": transaction.amount,
                        "source_id": transaction.source_id,
                        "dest_id": transaction.dest_id,
                    },
                )
    except ValueError as exc:
        logger.error("probe_invalid_settings", extra={"error": str(exc)})
        return 2
    except ArchiverError as exc:
        logger.error("probe_failed", exc_info=exc)
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
