"""
app/validators/csv_validator.py

Cell-level parsing for metal concentration columns.
"""

from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

from app.domain.water_quality import CellIssue


class MetalCellValidator:
    """
    Parses metal concentration cells.

    The whole cell must be a decimal: ``"0.05abc"`` is rejected rather
    than read as ``0.05``. Blank cells are absent, not errors.
    """

    def is_completely_empty_row(self, row: Mapping[Any, Any]) -> bool:
        """
        Return True when all values in the row are empty or whitespace.
        """

        return all(self._is_blank(value) for value in row.values())

    def parse_metal_cell(
        self,
        *,
        value: Any,
        row_number: int,
        column: str,
    ) -> tuple[float | None, CellIssue | None]:
        """
        Parse one concentration cell.

        Returns
        -------
        tuple
            ``(value, None)`` for a valid non-negative decimal,
            ``(None, None)`` for a blank cell and ``(None, CellIssue)``
            for anything else.
        """

        if self._is_blank(value):
            return None, None

        raw_value = str(value).strip()
        try:
            decimal_value = Decimal(raw_value)
        except (InvalidOperation, ValueError):
            return None, CellIssue(
                row_number=row_number,
                column=column,
                message="Concentration is not a valid decimal number.",
                value=self._stringify_value(value),
            )

        if not decimal_value.is_finite():
            return None, CellIssue(
                row_number=row_number,
                column=column,
                message="Concentration must be a finite number.",
                value=self._stringify_value(value),
            )
        if decimal_value < 0:
            return None, CellIssue(
                row_number=row_number,
                column=column,
                message="Concentration must not be negative.",
                value=self._stringify_value(value),
            )

        number = float(decimal_value)
        if not math.isfinite(number):
            return None, CellIssue(
                row_number=row_number,
                column=column,
                message="Concentration is out of range.",
                value=self._stringify_value(value),
            )

        return number, None

    @staticmethod
    def _is_blank(value: Any) -> bool:
        if value is None:
            return True
        if isinstance(value, (list, tuple)):
            return all(str(item).strip() == "" for item in value)
        return str(value).strip() == ""

    @staticmethod
    def _stringify_value(value: Any) -> str | None:
        if value is None:
            return None
        return str(value)
