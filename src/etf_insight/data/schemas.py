"""
Column schemas for the holdings and price panel CSV files.

Defines which header names each input file is read from. Columns may
have aliases; the first alias holding a non-empty cell wins per row.
"""

from dataclasses import dataclass
from typing import Any, Mapping


@dataclass(frozen=True)
class ColumnSchema:
    """Schema definition for a single logical column."""
    name: str
    aliases: tuple[str, ...] = ()

    @property
    def candidates(self) -> tuple[str, ...]:
        """Header names accepted for this column, in priority order."""
        return (self.name,) + self.aliases

    def first_value(self, row: Mapping[str, Any]) -> str:
        """
        Get the raw cell for this column from a parsed row.

        Args:
            row: Mapping of header name to raw cell value

        Returns:
            First non-empty string among the candidate columns, or ""
        """
        for candidate in self.candidates:
            value = row.get(candidate)
            if isinstance(value, str) and value:
                return value
        return ""


@dataclass(frozen=True)
class FileSchema:
    """Schema definition for a file."""
    name: str
    columns: tuple[ColumnSchema, ...]
    description: str

    @property
    def reserved_headers(self) -> set[str]:
        """All header names claimed by a schema column."""
        return {c for column in self.columns for c in column.candidates}

    def column(self, name: str) -> ColumnSchema:
        """Look up a column by its logical name."""
        for column in self.columns:
            if column.name == name:
                return column
        raise KeyError(name)

    def missing_columns(self, headers: list[str]) -> list[str]:
        """
        Find logical columns that no header satisfies.

        Args:
            headers: Header names from the parsed file

        Returns:
            Logical names of the columns with no matching header
        """
        present = set(headers)
        return [
            column.name for column in self.columns
            if not present.intersection(column.candidates)
        ]


# Holdings (portfolio weights) Schema
HOLDINGS_SCHEMA = FileSchema(
    name="holdings",
    description="Constituent weights of the portfolio",
    columns=(
        ColumnSchema(name="name", aliases=("constituent",)),
        ColumnSchema(name="weight"),
    ),
)

# Price Panel Schema: every header outside the date column is a constituent
PRICES_SCHEMA = FileSchema(
    name="prices",
    description="Prices by date, one column per constituent",
    columns=(
        ColumnSchema(name="DATE", aliases=("date",)),
    ),
)
