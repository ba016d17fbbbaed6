import csv
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

from .errors import FieldTypeError
from .records import FieldKind, Record

TRUE_WORDS = {"true", "1", "yes", "y"}
FALSE_WORDS = {"false", "0", "no", "n"}


@dataclass(frozen=True)
class ColumnSpec:
    """One column of a record file and the kind its cells convert to."""

    name: str
    kind: FieldKind

    def convert(self, cell: str) -> object:
        text = cell.strip().strip('"')
        if self.kind.is_integer:
            value = int(text)
            if FieldKind.of(value) is FieldKind.INT64 and self.kind is FieldKind.INT:
                raise ValueError(f"{self.name}: {value} does not fit in a 32-bit int")
            return value
        if self.kind is FieldKind.TEXT:
            return text if text else None
        if self.kind is FieldKind.BOOL:
            lowered = text.lower()
            if lowered in TRUE_WORDS:
                return True
            if lowered in FALSE_WORDS:
                return False
            raise ValueError(f"{self.name}: '{text}' is not a boolean")
        return None


PEOPLE_COLUMNS = (
    ColumnSpec("id", FieldKind.INT64),
    ColumnSpec("firstName", FieldKind.TEXT),
    ColumnSpec("lastName", FieldKind.TEXT),
    ColumnSpec("age", FieldKind.INT),
    ColumnSpec("gender", FieldKind.TEXT),
)


class CsvRecordSource:
    """Reads records from a CSV file whose first row is a header."""

    def __init__(self, path: str, columns: Sequence[ColumnSpec] = PEOPLE_COLUMNS):
        self.path = Path(path)
        self.columns = tuple(columns)
        self._records: Optional[List[Record]] = None
        self._skipped = 0

    @property
    def records_loaded(self) -> int:
        return len(self.load())

    @property
    def rows_skipped(self) -> int:
        self.load()
        return self._skipped

    def load(self) -> List[Record]:
        if self._records is not None:
            return self._records
        if not self.path.exists():
            raise FileNotFoundError(f"Record file missing: {self.path}")

        records: List[Record] = []
        with self.path.open("r", encoding="utf-8", newline="") as handle:
            reader = csv.reader(handle)
            next(reader, None)
            for row in reader:
                if not row or not any(cell.strip() for cell in row):
                    continue
                record = self._convert_row(row)
                if record is None:
                    self._skipped += 1
                    continue
                records.append(record)

        self._records = records
        print(
            f"[RecordSource] loaded {len(records)} records from {self.path.name}"
            f" ({self._skipped} rows skipped)",
            flush=True,
        )
        return records

    def _convert_row(self, row: List[str]) -> Optional[Record]:
        try:
            return Record({
                column.name: column.convert(row[index])
                for index, column in enumerate(self.columns)
            })
        except (ValueError, IndexError, FieldTypeError):
            return None

    def __iter__(self) -> Iterator[Record]:
        return iter(self.load())
