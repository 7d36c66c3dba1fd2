"""
CLI: Contentful -> Postgres (import completo).

ADVERTENCIA: cada ejecución elimina y recrea todas las tablas del mirror
(una por content model, más `asset`). Los datos previos se pierden.

Variables de entorno (o .env):
  - CONTENTFUL_SPACE_ID, CONTENTFUL_ACCESS_TOKEN, CONTENTFUL_ENVIRONMENT
  - DATABASE_HOST, DATABASE_PORT, DATABASE_USER, DATABASE_PASSWORD, DATABASE_NAME
    (o DATABASE_URL completa)

Ejecución:
  python scripts/import_contentful.py
  python scripts/import_contentful.py --space-id xxx --access-token yyy --page-size 500
"""

from __future__ import annotations

import argparse
import signal
import sys
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

# Permite ejecutar este script desde cualquier cwd sin configurar PYTHONPATH.
_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

load_dotenv(_ROOT / ".env", override=False)

from cms_mirror.core.config import settings
from cms_mirror.infrastructure.external.contentful_import.import_service import build_from_settings
from cms_mirror.infrastructure.external.contentful_import.types import CancelToken
from cms_mirror.shared.exceptions.base import AppException


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Importa content models, entries y assets de Contentful a PostgreSQL. "
            "Destructivo: reemplaza todas las tablas del mirror."
        )
    )
    parser.add_argument("--space-id", help="Space de Contentful (default: CONTENTFUL_SPACE_ID)")
    parser.add_argument("--access-token", help="Token de la Delivery API (default: CONTENTFUL_ACCESS_TOKEN)")
    parser.add_argument("--environment", help="Environment de Contentful (default: CONTENTFUL_ENVIRONMENT)")
    parser.add_argument("--page-size", type=int, help="Items por página (default: CONTENTFUL_PAGE_SIZE)")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    logger.remove()
    logger.add(sys.stderr, level=settings.LOG_LEVEL)

    cancel_token = CancelToken()

    def _on_sigint(signum, frame) -> None:
        logger.warning("Cancelación pedida; el import se detiene en el próximo paso...")
        cancel_token.cancel()

    signal.signal(signal.SIGINT, _on_sigint)

    try:
        importer = build_from_settings(
            settings,
            space_id=args.space_id,
            access_token=args.access_token,
            environment=args.environment,
            page_size=args.page_size,
        )
        result = importer.run(cancel_token=cancel_token)
    except AppException as e:
        logger.error(f"Import falló [{e.error_code}]: {e.message}")
        return 1
    except Exception:
        logger.exception("Import falló por un error inesperado")
        return 1

    logger.info(
        f"Import OK: models={result.models} tables={result.tables} "
        f"entries={result.entries} assets={result.assets}"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
