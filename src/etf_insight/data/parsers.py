"""
CSV parsing for holdings and price panel uploads.

Parsing is lenient at the row level: rows or cells that fail validation
are dropped without being reported. Only a structurally unreadable file
is an error.
"""

import io
import logging
import re
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional

import pandas as pd

from etf_insight.models import (
    DateRange,
    Holding,
    PriceObservation,
    PricePanel,
)
from etf_insight.data.schemas import (
    FileSchema,
    HOLDINGS_SCHEMA,
    PRICES_SCHEMA,
)


logger = logging.getLogger(__name__)

# Leading decimal literal; anything after it is ignored
_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)", re.ASCII)


class DataLoadError(Exception):
    """Raised when input data cannot be loaded or is invalid."""
    pass


class CsvParseError(DataLoadError):
    """Raised when CSV content is structurally unreadable."""
    pass


def parse_number(value: Any) -> Optional[Decimal]:
    """
    Parse a raw cell into a finite Decimal.

    The longest leading decimal literal is read and any trailing text
    is ignored, so "5%" is 5 and "1_000" is 1.

    Args:
        value: Raw cell value (usually a string)

    Returns:
        The parsed Decimal, or None for blank cells, cells without a
        leading number, and NaN or infinity literals
    """
    if not isinstance(value, str):
        return None

    match = _LEADING_NUMBER.match(value)
    if not match:
        return None

    number = Decimal(match.group(1))

    # Beyond the double range the value is infinite once serialized
    if number and number.adjusted() > 308:
        return None

    return number


def parse_holdings(data: bytes | str) -> list[Holding]:
    """
    Parse a holdings CSV into Holding records.

    The identifier is read from "name", falling back to "constituent";
    the weight from "weight". Rows with a blank identifier or a
    non-numeric weight are skipped.

    Args:
        data: Raw CSV content

    Returns:
        Holdings in file order

    Raises:
        CsvParseError: If the CSV structure cannot be parsed
    """
    headers, rows = _read_rows(data)
    _warn_missing_columns(HOLDINGS_SCHEMA, headers)

    name_column = HOLDINGS_SCHEMA.column("name")
    weight_column = HOLDINGS_SCHEMA.column("weight")

    holdings = []
    for row in rows:
        constituent = name_column.first_value(row).strip()
        weight = parse_number(weight_column.first_value(row))

        if constituent and weight is not None:
            holdings.append(Holding(constituent=constituent, weight=weight))

    return holdings


def parse_price_panel(data: bytes | str) -> PricePanel:
    """
    Parse a wide price CSV into a PricePanel.

    The date comes from "DATE" (or "date"); every other column is a
    constituent. Undated rows are dropped whole, non-numeric cells
    are dropped individually.

    Args:
        data: Raw CSV content

    Returns:
        PricePanel with observations in row-then-column order

    Raises:
        CsvParseError: If the CSV structure cannot be parsed
    """
    headers, rows = _read_rows(data)
    _warn_missing_columns(PRICES_SCHEMA, headers)

    date_column = PRICES_SCHEMA.column("DATE")
    reserved = PRICES_SCHEMA.reserved_headers
    constituent_headers = [h for h in headers if h not in reserved]

    prices: list[PriceObservation] = []
    constituents: dict[str, None] = {}
    dates: list[str] = []

    for row in rows:
        date = date_column.first_value(row).strip()
        if not date:
            continue

        for header in constituent_headers:
            price = parse_number(row.get(header))
            if price is None:
                continue

            constituent = header.strip()
            prices.append(
                PriceObservation(date=date, constituent=constituent, price=price)
            )
            constituents.setdefault(constituent, None)

        dates.append(date)

    date_range = DateRange(min(dates), max(dates)) if dates else DateRange()

    return PricePanel(
        prices=tuple(prices),
        constituents=tuple(constituents),
        date_range=date_range,
    )


def load_holdings(file_path: str | Path) -> list[Holding]:
    """
    Load holdings from a CSV file on disk.

    Raises:
        DataLoadError: If the file cannot be read or parsed
    """
    return parse_holdings(_read_file(Path(file_path)))


def load_price_panel(file_path: str | Path) -> PricePanel:
    """
    Load a price panel from a CSV file on disk.

    Raises:
        DataLoadError: If the file cannot be read or parsed
    """
    return parse_price_panel(_read_file(Path(file_path)))


def holdings_to_csv(holdings: list[Holding]) -> str:
    """
    Serialize holdings back to a name,weight CSV.

    Args:
        holdings: Holdings to write

    Returns:
        CSV text that parse_holdings reads back to the same records
    """
    records = [
        {"name": h.constituent, "weight": str(h.weight)}
        for h in holdings
    ]
    df = pd.DataFrame(records, columns=["name", "weight"])
    return df.to_csv(index=False)


def _read_file(file_path: Path) -> bytes:
    if not file_path.exists():
        raise DataLoadError(f"File not found: {file_path}")

    try:
        return file_path.read_bytes()
    except OSError as e:
        raise DataLoadError(f"Failed to read {file_path}: {e}")


def _read_rows(data: bytes | str) -> tuple[list[str], list[dict[str, Any]]]:
    """
    Read CSV content into headers and raw string rows.

    Args:
        data: Raw CSV content

    Returns:
        Tuple of (header names, rows as header -> raw cell mappings)

    Raises:
        CsvParseError: If the content cannot be decoded or tokenized
    """
    if isinstance(data, bytes):
        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise CsvParseError(f"CSV content is not valid UTF-8: {e}")
    else:
        text = data.lstrip("\ufeff")

    try:
        # Selecting every header column keeps rows with surplus cells;
        # the cells past the header width are dropped
        df = pd.read_csv(
            io.StringIO(text),
            engine="python",
            dtype=str,
            keep_default_na=False,
            index_col=False,
            usecols=lambda column: True,
            skip_blank_lines=True,
        )
    except pd.errors.EmptyDataError:
        return [], []
    except (pd.errors.ParserError, ValueError) as e:
        raise CsvParseError(f"Failed to parse CSV content: {e}")

    headers = [str(c) for c in df.columns]
    df.columns = headers
    return headers, df.to_dict(orient="records")


def _warn_missing_columns(schema: FileSchema, headers: list[str]) -> None:
    """Log when a file lacks a column every row depends on."""
    if not headers:
        return

    missing = schema.missing_columns(headers)
    if missing:
        logger.warning(
            f"{schema.name} CSV is missing columns {missing}; "
            f"rows without them are skipped"
        )
