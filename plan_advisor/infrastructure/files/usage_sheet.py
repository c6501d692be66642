"""Read customer usage sheets (Excel or CSV) into CustomerUsage records"""

import zipfile
from pathlib import Path
from typing import BinaryIO, List
import pandas as pd
from xlrd import XLRDError
from xlrd.compdoc import CompDocError
from plan_advisor.domain.models import CustomerUsage
from plan_advisor.domain.usage_parser import parse_usage_rows
from plan_advisor.domain.exceptions import InvalidUsageDataError

# pandas picks the engine from the file content: openpyxl for .xlsx, xlrd for legacy .xls
EXCEL_SUFFIXES = {".xlsx", ".xls"}
CSV_SUFFIXES = {".csv"}

READ_ERRORS = (
    ValueError,
    OSError,
    zipfile.BadZipFile,
    XLRDError,
    CompDocError,
    pd.errors.ParserError,
    pd.errors.EmptyDataError,
)


def read_usage_sheet(fileobj: BinaryIO, filename: str) -> List[CustomerUsage]:
    """
    Parse the first sheet of an uploaded file; the first row is a header.

    Raises:
        InvalidUsageDataError: Unsupported extension or unreadable content
    """
    suffix = Path(filename or "").suffix.lower()

    try:
        if suffix in EXCEL_SUFFIXES:
            frame = pd.read_excel(fileobj, sheet_name=0, header=0, dtype=object)
        elif suffix in CSV_SUFFIXES:
            frame = pd.read_csv(fileobj, header=0, dtype=object)
        else:
            raise InvalidUsageDataError(f"Unsupported file type: {suffix or filename!r}")
    except InvalidUsageDataError:
        raise
    except READ_ERRORS as e:
        raise InvalidUsageDataError(f"Could not read usage sheet: {e}") from e

    return parse_usage_rows(frame.values.tolist())
