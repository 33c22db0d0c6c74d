"""
Per-generation KPI table for the bird simulator.

One CSV row per completed generation, columns in `MetricsCollector.kpi_names()`
order. Floats are rounded so the file stays readable; counts are written as-is.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Optional

from birdsim.simulation.metrics import MetricsCollector


FLOAT_DIGITS = 6


class CSVLogger:
    """
    Appends generation KPI rows to a CSV file.

    The header is written when the file is created (or found empty), so a
    logger pointed at an existing table keeps appending to it.

    Attributes:
        file_path: Output CSV path.
        columns: Column order; keys outside it are dropped.
        rows_written: Rows appended by this logger.
    """

    def __init__(self, file_path: str | Path, columns: Optional[list[str]] = None):
        self.file_path = Path(file_path)
        self.columns = columns or MetricsCollector.kpi_names()
        self.rows_written = 0
        self.file_path.parent.mkdir(parents=True, exist_ok=True)

        if not self.file_path.exists() or self.file_path.stat().st_size == 0:
            with open(self.file_path, "w", newline="", encoding="utf-8") as f:
                csv.writer(f).writerow(self.columns)

    def log_row(self, kpis: dict) -> None:
        """Append one generation's KPIs."""
        row = [_format(kpis.get(name, "")) for name in self.columns]
        with open(self.file_path, "a", newline="", encoding="utf-8") as f:
            csv.writer(f).writerow(row)
        self.rows_written += 1


def _format(value):
    if isinstance(value, float):
        return round(value, FLOAT_DIGITS)
    return value
