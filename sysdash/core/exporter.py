"""Export samples as JSON-ready dicts or CSV text."""
import json
import logging
import os
from typing import Any, Callable, Dict, Optional, Sequence

from ..collectors.system_models import CSV_COLUMNS, Sample
from .sample_store import SampleStore
from .window_queries import now_ms

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("json", "csv")


def export(store: SampleStore, format: str = "json", start_ms: Optional[int] = None,
           end_ms: Optional[int] = None, clock: Callable[[], int] = now_ms) -> Dict[str, Any]:
    """Export a range of the store, or all of it when either bound is missing.

    Unknown formats fall back to JSON.
    """
    if start_ms is not None and end_ms is not None:
        samples = store.range_query(start_ms, end_ms)
    else:
        samples = store.samples()

    fmt = (format or "json").lower()
    if fmt not in EXPORT_FORMATS:
        logger.warning("Unknown export format %r, falling back to json", format)
        fmt = "json"

    exported_at = clock()
    if fmt == "csv":
        return export_csv(samples, exported_at)
    return export_json(samples, exported_at)


def export_json(samples: Sequence[Sample], exported_at: int) -> Dict[str, Any]:
    return {
        "format": "json",
        "data": [s.to_dict() for s in samples],
        "metadata": {
            "total_points": len(samples),
            "start_time": samples[0].timestamp if samples else None,
            "end_time": samples[-1].timestamp if samples else None,
            "exported_at": exported_at,
        },
    }


def export_csv(samples: Sequence[Sample], exported_at: int) -> Dict[str, Any]:
    # every column is numeric, so no quoting
    rows = [",".join(CSV_COLUMNS)]
    for s in samples:
        rows.append(",".join(str(getattr(s, column)) for column in CSV_COLUMNS))

    return {
        "format": "csv",
        "content": "\n".join(rows),
        "filename": f"metrics_{exported_at}.csv",
    }


def write_export(result: Dict[str, Any], directory: str) -> str:
    """Write an export result into directory and return the file path."""
    os.makedirs(directory, exist_ok=True)
    if result["format"] == "csv":
        path = os.path.join(directory, result["filename"])
        with open(path, "w", encoding="utf-8") as f:
            f.write(result["content"] + "\n")
    else:
        path = os.path.join(directory, f"metrics_{result['metadata']['exported_at']}.json")
        with open(path, "w", encoding="utf-8") as f:
            json.dump(result, f, indent=2)
    logger.info("Exported %s metrics to %s", result["format"], path)
    return path
