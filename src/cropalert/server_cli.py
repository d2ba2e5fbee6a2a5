"""CLI entry point for the CropAlert API server."""

import argparse
import os


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="cropalert-server",
        description="CropAlert API server: weather, price, seasonal and scheme alerts for farmers",
    )
    parser.add_argument("--host", default=None, help="Bind host (default: CROPALERT_HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, default=None, help="Bind port (default: CROPALERT_PORT or 8080)")
    parser.add_argument(
        "--no-scheduler",
        action="store_true",
        help="Do not poll event sources; notifications arrive only via POST /api/v1/events",
    )
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines")
    parser.add_argument("--log-level", default=None, help="debug, info, warning or error")
    args = parser.parse_args(argv)

    # Settings are read when cropalert.main is imported by uvicorn
    if args.no_scheduler:
        os.environ["CROPALERT_SCHEDULER_ENABLED"] = "false"
    if args.json_logs:
        os.environ["CROPALERT_JSON_LOGS"] = "true"
    if args.log_level:
        os.environ["CROPALERT_LOG_LEVEL"] = args.log_level

    import uvicorn

    from cropalert.config import settings

    uvicorn.run("cropalert.main:app", host=args.host or settings.host, port=args.port or settings.port)


if __name__ == "__main__":
    main()
