"""Output helpers for place search results."""
from __future__ import annotations

import json
import os
import tempfile
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Iterator, List, Optional, TextIO

from .models import Place


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def _fsync_dir(path: str) -> None:
    try:
        dir_fd = os.open(path, os.O_DIRECTORY)
    except OSError:
        return
    try:
        os.fsync(dir_fd)
    except OSError:
        pass
    finally:
        os.close(dir_fd)


@contextmanager
def atomic_writer(
    path: str,
    mode: str = "w",
    encoding: str = "utf-8",
    newline: Optional[str] = None,
) -> Iterator[TextIO]:
    dir_path = os.path.dirname(path) or "."
    base = os.path.basename(path)
    fd, tmp_path = tempfile.mkstemp(prefix=f".{base}.", suffix=".tmp", dir=dir_path)
    try:
        with os.fdopen(fd, mode, encoding=encoding, newline=newline) as f:
            yield f
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
        _fsync_dir(dir_path)
    except Exception:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def write_json_object(path: str, payload: Dict[str, Any]) -> None:
    with atomic_writer(path, mode="w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)


def place_to_dict(place: Place) -> Dict[str, Any]:
    return {
        "id": place.id,
        "name": place.name,
        "description": place.description,
        "lat": place.location.latitude,
        "lon": place.location.longitude,
        "context_count": place.context_count,
        "checkins": place.checkins,
        "rating": place.rating,
        "hours": dict(place.hours),
        "is_always_open": place.is_always_open,
        "address": place.address,
        "images": list(place.images),
        "engagement": place.engagement,
    }


def write_places_json(path: str, places: Iterable[Place], sort_method: str) -> None:
    rows = [place_to_dict(p) for p in places]
    write_json_object(
        path,
        {
            "generated_at": utc_now_iso(),
            "sort": sort_method,
            "count": len(rows),
            "places": rows,
        },
    )


def _fmt(value: Any) -> str:
    return "-" if value is None else str(value)


def render_places_table(places: Iterable[Place]) -> str:
    lines: List[str] = [f"{'#':>2}  {'friends':>7}  {'checkins':>8}  {'rating':>6}  name"]
    for idx, place in enumerate(places, start=1):
        lines.append(
            f"{idx:>2}  {_fmt(place.context_count):>7}  {_fmt(place.checkins):>8}  "
            f"{_fmt(place.rating):>6}  {place.name}"
        )
    return "\n".join(lines)
