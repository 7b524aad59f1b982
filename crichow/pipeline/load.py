"""Load the raw record snapshot from a local file or an HTTP(S) URL."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from crichow.common.errors import AssetLoadError
from crichow.common.fs import read_json
from crichow.common.http import HttpClient


def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def _validate_payload(payload: Any, source: str) -> list[Any]:
    # Some exports wrap the array as {"rows": [...]}.
    if isinstance(payload, dict) and isinstance(payload.get("rows"), list):
        payload = payload["rows"]
    if not isinstance(payload, list):
        raise AssetLoadError(f"Expected a JSON array of records in {source}")
    return payload


def load_raw_records(source: str, *, client: HttpClient | None = None) -> list[Any]:
    """Return the snapshot rows as-is. Rows that are not objects are rejected during cleaning."""
    if _is_url(source):
        if client is not None:
            payload = client.get_json(source)
        else:
            with HttpClient() as owned:
                payload = owned.get_json(source)
        return _validate_payload(payload, source)

    path = Path(source)
    if not path.exists():
        raise AssetLoadError(f"Record snapshot not found: {path}")
    try:
        payload = read_json(path)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise AssetLoadError(f"Invalid JSON in record snapshot {path}") from exc
    return _validate_payload(payload, source)
