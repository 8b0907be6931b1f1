"""Minimal example sending records to a local Graylog GELF UDP input."""

from __future__ import annotations

import gelflog


def main() -> None:
    gelflog.configure(
        {
            "targets": {
                "gelf": {
                    "host": "127.0.0.1",
                    "port": 12201,
                    "facility": "gelflog-demo",
                },
            },
            "logging": {"root": {"level": "DEBUG"}},
            "levels": {"root": "DEBUG"},
        }
    )

    logger = gelflog.get_logger("examples.orders")
    logger.info("processed order", extra={"Notes": "maintenance window"})
    try:
        1 / 0
    except ZeroDivisionError:
        logger.exception("failed to compute order total")
    logger.debug("large payload %s", "x" * 50_000)

    print(gelflog.publish_stats())
    gelflog.shutdown()


if __name__ == "__main__":
    main()
