from .sheet_has_columns import SHEET_HAS_COLUMNS
from .sheets_exist import SHEETS_EXIST

__all__ = [
    "SHEETS_EXIST",
    "SHEET_HAS_COLUMNS",
]
