# dep_scout/report/text_report.py
"""
Plain-text output: the per-package table printed by the CLI and the
``<status> <url>`` output file.
"""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, List

from dep_scout.models import Result


def package_lines(result: Result, hide_claimed: bool = False) -> List[str]:
    """One ``name namespace Yes|No url`` line per package of *result*."""
    lines = []
    for pkg in result.packages:
        if hide_claimed and pkg.claimed:
            continue
        claimed = "Yes" if pkg.claimed else "No"
        lines.append(f"{pkg.name:<40} {pkg.namespace:<10} {claimed:<4} {result.request_url}")
    return lines


def status_line(result: Result) -> str:
    return f"{result.status_code} {result.request_url}"


def render_text(results: Iterable[Result], output_path: Path | str) -> Path:
    """Write one ``<status> <url>`` line per result to *output_path*."""
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    with output.open("w", encoding="utf-8") as f:
        for result in results:
            f.write(status_line(result) + "\n")
    return output
