"""
Levanta el API de lectura del mirror en modo desarrollo (autoreload).
"""
import sys
from pathlib import Path

import uvicorn

_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from cms_mirror.core.config import settings


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        app_dir=str(_ROOT),
        host=settings.HOST,
        port=settings.PORT,
        reload=True,
        log_level=settings.LOG_LEVEL.lower()
    )
