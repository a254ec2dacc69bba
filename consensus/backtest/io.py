"""consensus.backtest.io

Lightweight IO helpers for replay.

CSV schema:
- required: number, and issue_number (or period)
- rows in draw order, oldest first

Blank rows are skipped. Anything else that does not validate is an error:
a replay over silently repaired data is not a replay.
"""

from __future__ import annotations

import csv
from pathlib import Path

from pydantic import ValidationError

from consensus.core.exceptions import DrawInputError
from consensus.integration.session import DrawResult

ISSUE_COLUMNS = ("issue_number", "period")


def load_draws_csv(path: str | Path) -> list[DrawResult]:
    p = Path(path)
    if not p.exists():
        raise DrawInputError(f"Draw file not found: {p}")

    rows: list[dict[str, str]] = []
    with p.open("r", encoding="utf-8", newline="") as f:
        r = csv.DictReader(f)
        fieldnames = [c.strip() for c in (r.fieldnames or [])]
        for row in r:
            rows.append({k.strip(): (v.strip() if isinstance(v, str) else "") for k, v in row.items() if k is not None})

    issue_col = next((c for c in ISSUE_COLUMNS if c in fieldnames), None)
    if issue_col is None:
        raise DrawInputError("CSV missing required column: issue_number")
    if "number" not in fieldnames:
        raise DrawInputError("CSV missing required column: number")

    draws: list[DrawResult] = []
    for i, row in enumerate(rows, start=2):
        issue = row.get(issue_col, "")
        number = row.get("number", "")
        if not issue and not number:
            continue
        try:
            draws.append(DrawResult(issue_number=issue, number=number))
        except ValidationError as e:
            raise DrawInputError(f"{p}:{i}: invalid draw: {e}") from e
    return draws
