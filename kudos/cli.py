"""Command-line entrypoint applying a reconciliation payload once.

Reads a JSON payload from a file (or ``-`` for stdin), applies it against the
database configured by ``KUDOS_DATABASE_URL`` and prints the same summary the
webhook returns.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
import typing as typ
from pathlib import Path

from sqlalchemy.ext.asyncio import async_sessionmaker

from kudos.api.reconcile.resources import format_import_summary
from kudos.config import ConfigError, KudosConfig
from kudos.errors import KudosError
from kudos.logging import configure_logging, get_logger, log_exception
from kudos.reconcile.factory import build_reconcile_service
from kudos.reconcile.payload import decode_payload
from kudos.storage.models import create_engine

if typ.TYPE_CHECKING:
    from kudos.reconcile.models import ReconcileResult

logger = get_logger(__name__)


def _read_payload(source: str) -> bytes:
    if source == "-":
        return sys.stdin.buffer.read()
    return Path(source).read_bytes()


async def _reconcile(config: KudosConfig, body: bytes) -> ReconcileResult:
    payload = decode_payload(body)
    engine = create_engine(config.database_url)
    try:
        session_factory = async_sessionmaker(engine, expire_on_commit=False)
        service = build_reconcile_service(session_factory, config)
        return await service.reconcile(payload)
    finally:
        await engine.dispose()


def main(argv: list[str] | None = None) -> int:
    """Apply one reconciliation payload.

    Parameters
    ----------
    argv : list[str] | None, optional
        Command-line arguments. ``None`` defaults to ``sys.argv``.

    Returns
    -------
    int
        Exit code: 0 on success, 1 when configuration or reconciliation
        fails.

    """
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("payload", help="JSON payload file, or - for stdin")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="femtologging level (default: INFO)",
    )
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        config = KudosConfig.from_env()
        body = _read_payload(args.payload)
        result = asyncio.run(_reconcile(config, body))
    except (ConfigError, OSError, KudosError) as exc:
        log_exception(logger, "Reconciliation failed", exc)
        print(f"Reconciliation failed: {exc}", file=sys.stderr)
        return 1

    print(format_import_summary(result.imported_count))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
