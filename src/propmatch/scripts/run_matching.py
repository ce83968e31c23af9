"""
Script para regenerar los matches de propiedades.

Recalcula y guarda los matches de todos los usuarios, o de uno solo.
Pensado para correr a mano o desde cron.

Uso:
    python -m propmatch.scripts.run_matching
    python -m propmatch.scripts.run_matching --user-id <uuid>
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

import structlog

from propmatch.config import get_settings
from propmatch.matching import MatchingEngine

logger = structlog.get_logger()


def configure_logging(log_level: str) -> None:
    """Configura structlog sobre el logging estándar."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(message)s",
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


async def run_matching(engine: MatchingEngine, user_id: Optional[str] = None) -> dict:
    """Regenera los matches de un usuario o de todos."""
    if user_id is None:
        return await engine.run_matching_cycle()

    success = await engine.regenerate_user_matches(user_id)
    return {
        "users_processed": 1,
        "users_succeeded": 1 if success else 0,
        "errors": 0 if success else 1,
    }


def main(argv: Optional[list[str]] = None):
    """Entry point del script."""
    parser = argparse.ArgumentParser(
        description="Regenera los matches de propiedades por usuario"
    )
    parser.add_argument(
        "--user-id",
        type=str,
        default=None,
        help="Procesar solo este usuario (UUID)",
    )
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.log_level)

    logger.info("Iniciando regeneración de matches...")

    try:
        engine = MatchingEngine(settings=settings)
        stats = asyncio.run(run_matching(engine, user_id=args.user_id))

        logger.info(
            "Matching completado",
            users=stats.get("users_processed", 0),
            succeeded=stats.get("users_succeeded", 0),
        )

        sys.exit(0 if stats.get("errors", 0) == 0 else 1)

    except KeyboardInterrupt:
        logger.info("Matching interrumpido por usuario")
        sys.exit(130)
    except Exception as e:
        logger.error("Error fatal en matching", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
