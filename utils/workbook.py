import logging
import os
import re
import tempfile
from enum import Enum
from typing import Any, Iterable, Sequence

import openpyxl
from openpyxl.cell.cell import Cell
from openpyxl.utils.exceptions import IllegalCharacterError
from openpyxl.workbook.workbook import Workbook
from openpyxl.worksheet.worksheet import Worksheet

import config
from utils.errors import RowScanError, SchemaError, SerializationError, SheetCreationError

logger = logging.getLogger(__name__)

FLOAT_FORMAT = "0.00"

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class CellKind(Enum):
    INTEGER = "integer"
    FLOAT = "float"
    BYTES = "bytes"
    OTHER = "other"


def classify(value: Any) -> CellKind:
    # bool is an int subclass, but it is not an integer column value
    if isinstance(value, int) and not isinstance(value, bool):
        return CellKind.INTEGER
    if isinstance(value, float):
        return CellKind.FLOAT
    if isinstance(value, (bytes, bytearray, memoryview)):
        return CellKind.BYTES
    return CellKind.OTHER


def _text_cell(ws: Worksheet, text: str) -> Cell:
    cell = Cell(ws, value=text)
    # keep "=..." as text, not a formula
    cell.data_type = "s"
    return cell


def make_cell(ws: Worksheet, value: Any) -> Cell:
    kind = classify(value)
    if kind is CellKind.INTEGER:
        return Cell(ws, value=value)
    if kind is CellKind.FLOAT:
        cell = Cell(ws, value=value)
        cell.number_format = FLOAT_FORMAT
        return cell
    if kind is CellKind.BYTES:
        return _text_cell(ws, bytes(value).decode("utf-8"))
    return _text_cell(ws, str(value))


def new_sheet() -> Worksheet:
    """Fresh workbook holding a single sheet."""
    try:
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = config.SHEET_TITLE
    except Exception as e:
        logger.error(f"Failed to create Excel sheet: {e}")
        raise SheetCreationError() from e
    return ws


def append_header(ws: Worksheet, columns: Iterable[str]) -> None:
    try:
        cells = [_text_cell(ws, str(name)) for name in columns]
    except IllegalCharacterError as e:
        logger.error(f"Column name cannot be written to the sheet: {e}")
        raise SchemaError() from e
    ws.append(cells)


def append_record(ws: Worksheet, values: Sequence[Any]) -> None:
    try:
        cells = [make_cell(ws, value) for value in values]
    except (UnicodeDecodeError, IllegalCharacterError, ValueError, TypeError) as e:
        logger.error(f"Failed to convert row {ws.max_row} values: {e}")
        raise RowScanError() from e
    ws.append(cells)


def temp_filename(db_name: str) -> str:
    return os.path.join(
        tempfile.gettempdir(),
        f"result_{_UNSAFE_NAME_CHARS.sub('_', db_name)}_{os.urandom(8).hex()}.xlsx",
    )


def save_workbook(wb: Workbook, db_name: str) -> bytes:
    """
    Write the workbook to a request-unique temporary file and return its bytes.
    The file is removed before returning, whatever happens.
    """
    path = temp_filename(db_name)
    try:
        wb.save(path)
        with open(path, "rb") as f:
            return f.read()
    except Exception as e:
        logger.error(f"Failed to save Excel file {path}: {e}")
        raise SerializationError() from e
    finally:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
