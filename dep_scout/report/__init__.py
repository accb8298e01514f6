# File: dep_scout/report/__init__.py
"""dep_scout.report: JSON and plain-text report writers used by the CLI and tests."""

from __future__ import annotations

from .json_report import render_json
from .text_report import package_lines, render_text, status_line

__all__ = ["package_lines", "render_json", "render_text", "status_line"]
