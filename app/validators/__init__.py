"""
app/validators package marker.
"""

from app.validators.csv_validator import MetalCellValidator

__all__ = [
    "MetalCellValidator",
]
