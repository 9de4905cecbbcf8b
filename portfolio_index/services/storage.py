"""Reading and writing the persisted performance document."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from pydantic import ValidationError

from portfolio_index.core.errors import WriteError
from portfolio_index.schemas import PerformanceDocument

logger = logging.getLogger(__name__)


def load_document(path: Path) -> PerformanceDocument:
    """Return the document at ``path``, or an empty one if it is absent or unreadable."""

    if not path.exists():
        return PerformanceDocument()
    try:
        return PerformanceDocument.model_validate(json.loads(path.read_text(encoding="utf-8")))
    except (OSError, ValueError, ValidationError) as exc:
        logger.warning("Ignoring unreadable performance document %s: %s", path, exc)
        return PerformanceDocument()


def write_document(path: Path, document: PerformanceDocument) -> None:
    """Write ``document`` atomically; any failure is raised as ``WriteError``."""

    tmp_path = path.with_name(path.name + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path.write_text(document.to_json() + "\n", encoding="utf-8")
        os.replace(tmp_path, path)
    except OSError as exc:
        raise WriteError(f"Could not write {path}: {exc}") from exc


__all__ = ["load_document", "write_document"]
