"""Cached loaders for bundled controlled-vocabulary seed data."""

# purpose: expose the default ability/platform/modality/population vocabularies
# status: active
# depends_on: json, pathlib

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

_BASE_DIR = Path(__file__).resolve().parent


def _load_json(path: Path) -> Any:
    """Return parsed JSON payload from disk."""

    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


@lru_cache(maxsize=None)
def get_vocabulary_seed() -> dict[str, tuple[dict[str, Any], ...]]:
    """Return cached seed terms keyed by facet."""

    payload = _load_json(_BASE_DIR / "vocabularies.json")
    return {facet: tuple(terms) for facet, terms in payload.items()}
