"""Reporting helpers for FlagMatch.

This module handles:
- the one-line console summary for each mystery image
- report generation (CSV and optional XLSX)
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Dict, Iterable, List

from .matching import MatchResult

REPORT_HEADERS = ["mystery", "best_match", "score", "status"]


def format_result(res: MatchResult) -> str:
    """Render a match result the way it is printed on the console."""
    if not res.matched:
        return f"no match found for {res.mystery_name}"
    return f"the closest match to {res.mystery_name} is {res.best_name} with a score of {res.best_score}"


def result_row(res: MatchResult) -> Dict[str, object]:
    """Flatten a match result into one report row."""
    return {
        "mystery": res.mystery_name,
        "best_match": res.best_name or "",
        "score": res.best_score,
        "status": res.status,
    }


def write_results_csv(results: Iterable[MatchResult], out_csv: Path) -> None:
    """Write the match report as CSV."""

    out_csv.parent.mkdir(parents=True, exist_ok=True)
    with out_csv.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=REPORT_HEADERS)
        writer.writeheader()
        writer.writerows(result_row(r) for r in results)


def write_results_xlsx(results: Iterable[MatchResult], out_xlsx: Path) -> bool:
    """Write the match report as XLSX.

    Returns False if openpyxl isn't installed.
    """

    try:
        from openpyxl import Workbook  # type: ignore
    except ImportError:
        return False

    out_xlsx.parent.mkdir(parents=True, exist_ok=True)
    wb = Workbook()
    ws = wb.active
    ws.title = "matches"

    ws.append(REPORT_HEADERS)
    rows: List[Dict[str, object]] = [result_row(r) for r in results]
    for r in rows:
        ws.append([r[h] for h in REPORT_HEADERS])

    wb.save(out_xlsx)
    return True
