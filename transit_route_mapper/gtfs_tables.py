"""Read GTFS text tables into column-indexed rows.

A table is parsed once with pandas and kept in memory. Callers look columns up
by name through :attr:`Table.column_index` and iterate rows lazily through
:meth:`Table.rows` or :meth:`Table.records`.

Limitations:
    - Values are split on the delimiter only. Quoted fields are not honoured, so
      a value that contains the delimiter produces an overlong row. Such rows,
      the first data row included, are skipped and reported as a warning.
    - Short rows are padded with empty strings.
"""

from __future__ import annotations

import csv
import io
import logging
import os
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Optional, Union

import pandas as pd

from transit_route_mapper.errors import MalformedTableError

logger = logging.getLogger(__name__)

TableSource = Union[str, "os.PathLike[str]", IO[str], IO[bytes]]

DEFAULT_GTFS_FILES: tuple[str, ...] = ("stops.txt", "stop_times.txt")


# =============================================================================
# Table
# =============================================================================


@dataclass(frozen=True, eq=False)
class Table:
    """A parsed GTFS table.

    Attributes:
        name: Label used in log and error messages (usually the file name).
        frame: All values as strings; missing values are empty strings.
        column_index: Column name to position, built once from the header.
    """

    name: str
    frame: pd.DataFrame
    column_index: dict[str, int] = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "column_index", {col: pos for pos, col in enumerate(self.frame.columns)}
        )

    @property
    def header(self) -> list[str]:
        return list(self.frame.columns)

    def __len__(self) -> int:
        return len(self.frame)

    def has_column(self, column: str) -> bool:
        return column in self.column_index

    def require_columns(self, *columns: str) -> None:
        """Raise :class:`MalformedTableError` if any of *columns* is absent."""
        missing = [col for col in columns if col not in self.column_index]
        if missing:
            raise MalformedTableError(
                f"{self.name}: missing required columns: {', '.join(missing)}"
            )

    def rows(self) -> Iterator[list[str]]:
        """Yield each data row as an ordered list of field values."""
        for values in self.frame.itertuples(index=False, name=None):
            yield list(values)

    def records(self) -> Iterator[dict[str, str]]:
        """Yield each data row as a column name to value mapping."""
        header = self.header
        for values in self.frame.itertuples(index=False, name=None):
            yield dict(zip(header, values))


# =============================================================================
# Parsing
# =============================================================================


def _source_name(source: TableSource) -> str:
    if isinstance(source, (str, os.PathLike)):
        return Path(source).name
    return str(getattr(source, "name", "<stream>"))


def parse_table(
    source: TableSource,
    name: Optional[str] = None,
    delimiter: str = ",",
) -> Table:
    """Parse a delimited table with a header row.

    Args:
        source: Path to the file, or an open text or binary stream.
        name: Label for messages. Defaults to the file name.
        delimiter: Field separator.

    Returns:
        The parsed :class:`Table`.

    Raises:
        MalformedTableError: Source is empty, unreadable, or cannot be decoded.
    """
    label = name or _source_name(source)
    skipped: list[int] = []

    def _skip_overlong(bad_line: list[str]) -> None:
        skipped.append(len(bad_line))

    # The header is read as data row 0 so the field count is fixed by it and
    # pandas never promotes extra leading fields to an implicit index.
    try:
        raw = pd.read_csv(
            source,
            sep=delimiter,
            header=None,
            dtype=object,
            keep_default_na=False,
            na_filter=False,
            quoting=csv.QUOTE_NONE,
            engine="python",
            on_bad_lines=_skip_overlong,
            encoding="utf-8-sig",
            skip_blank_lines=True,
        )
    except pd.errors.EmptyDataError as exc:
        raise MalformedTableError(f"Table '{label}' is empty.") from exc
    except pd.errors.ParserError as exc:
        raise MalformedTableError(f"Parser error in '{label}': {exc}") from exc
    except UnicodeDecodeError as exc:
        raise MalformedTableError(f"Table '{label}' is not valid UTF-8: {exc}") from exc
    except OSError as exc:
        raise MalformedTableError(f"Could not read table '{label}': {exc}") from exc

    if raw.empty:
        raise MalformedTableError(f"Table '{label}' is empty.")

    if skipped:
        logger.warning(
            "%s: skipped %d row(s) with more fields than the header (unquoted delimiter?).",
            label,
            len(skipped),
        )

    raw = raw.fillna("").astype(str)
    frame = raw.iloc[1:].reset_index(drop=True)
    frame.columns = [col.strip() for col in raw.iloc[0]]
    logger.debug("Parsed %s (%d records, %d columns).", label, len(frame), len(frame.columns))
    return Table(name=label, frame=frame)


def parse_table_text(text: str, name: str = "<text>", delimiter: str = ",") -> Table:
    """Parse a table held in a string."""
    return parse_table(io.StringIO(text), name=name, delimiter=delimiter)


# =============================================================================
# Folder loading
# =============================================================================


def load_gtfs_tables(
    gtfs_folder_path: Union[str, "os.PathLike[str]"],
    files: Optional[Sequence[str]] = None,
) -> dict[str, Table]:
    """Load one or more GTFS text files from a folder.

    Args:
        gtfs_folder_path: Folder containing the feed.
        files: File names to load. Defaults to ``stops.txt`` and
            ``stop_times.txt``.

    Returns:
        Mapping of file stem to :class:`Table`; ``data["stops"]`` holds
        *stops.txt*.

    Raises:
        OSError: Folder missing or one of *files* not present.
        MalformedTableError: A file is empty or cannot be parsed.
    """
    folder = Path(gtfs_folder_path)
    if not folder.is_dir():
        raise OSError(f"The directory '{folder}' does not exist.")

    if files is None:
        files = DEFAULT_GTFS_FILES

    missing = [file_name for file_name in files if not (folder / file_name).exists()]
    if missing:
        raise OSError(f"Missing GTFS files in '{folder}': {', '.join(missing)}")

    data: dict[str, Table] = {}
    for file_name in files:
        table = parse_table(folder / file_name, name=file_name)
        data[Path(file_name).stem] = table
        logger.info("Loaded %s (%d records).", file_name, len(table))
    return data
