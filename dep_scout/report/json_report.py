# dep_scout/report/json_report.py
"""
JSON report: every Result of a scan serialised as a list of objects.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable

from dep_scout.models import Result


def render_json(results: Iterable[Result], output_path: Path | str) -> Path:
    """
    Save *results* as a JSON array at *output_path* and return the path.

    Each element has ``request_url``, ``status_code``, ``resolver``, ``error``
    (string or null) and ``packages`` (``name``, ``namespace``, ``claimed``).
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    data = [result.to_dict() for result in results]
    with output.open("w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)

    return output
