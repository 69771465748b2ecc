"""Command line entry point for the memcached admission webhook."""

from __future__ import annotations

import argparse
import logging
import os

from webhook import create_app

LOG = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="memcached-webhook")
    parser.add_argument(
        "--tls-key", default="/etc/certs/tls.key", help="Path to the TLS key."
    )
    parser.add_argument(
        "--tls-cert",
        default="/etc/certs/tls.crt",
        help="Path to the TLS certificate.",
    )
    parser.add_argument("--host", default="0.0.0.0", help="Address to listen on.")
    parser.add_argument("--port", type=int, default=9443, help="Port to listen on.")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level))

    for path in (args.tls_cert, args.tls_key):
        if not os.path.isfile(path):
            LOG.error("TLS file %s does not exist", path)
            return 1

    app = create_app()

    LOG.info("Server started ...")
    try:
        app.run(
            host=args.host,
            port=args.port,
            ssl_context=(args.tls_cert, args.tls_key),
            threaded=True,
        )
    except OSError as err:
        LOG.error("webhook server exited: %s", err)
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
