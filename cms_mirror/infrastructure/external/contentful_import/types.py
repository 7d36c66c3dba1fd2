"""
Tipos y utilidades puras para el pipeline Contentful -> Postgres.

Se mantienen libres de I/O para poder testearlos fácilmente.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

from cms_mirror.shared.exceptions.domain import ImportCancelled


@dataclass(frozen=True)
class Page:
    """Página de una colección del CMS."""

    items: list[dict[str, Any]]
    total: int


FetchPage = Callable[[int, int], Page]


class ImportState(str, Enum):
    """Pasos del import, en el único orden posible."""

    CONNECTING = "connecting"
    FETCHING_MODELS = "fetching_models"
    SYNTHESIZING_SCHEMA = "synthesizing_schema"
    FETCHING_ENTRIES = "fetching_entries"
    INSERTING_ENTRIES = "inserting_entries"
    FETCHING_ASSETS = "fetching_assets"
    INSERTING_ASSETS = "inserting_assets"
    DONE = "done"
    FAILED = "failed"


class CancelToken:
    """
    Cancelación cooperativa del import.

    El operador llama `cancel()` (p.ej. desde un handler de SIGINT) y el
    pipeline corta entre páginas, entries o assets.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, step: str) -> None:
        if self._event.is_set():
            raise ImportCancelled(step)


@dataclass
class ImportResult:
    models: int = 0
    tables: int = 0
    entries: int = 0
    assets: int = 0
    states: list[ImportState] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def state(self) -> Optional[ImportState]:
        return self.states[-1] if self.states else None
