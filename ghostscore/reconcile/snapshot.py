"""Target table snapshot keyed by EmployerKey."""

from typing import Any, Dict, Iterable, Iterator, Mapping, Optional

from ghostscore.domain.models import TargetRow
from ghostscore.logging import get_logger
from ghostscore.scoring.fields import ReportField, get_field, get_text
from ghostscore.scoring.keys import normalize_company_key

logger = get_logger(__name__, component="reconcile")

COMPANY_KEY_COLUMN = "Company Key"

# NocoDB's primary key column name differs between versions and table setups
ROW_ID_FIELDS = ("id", "Id", "ID", "insertId", "rowid", "_id", "row_id")


def get_row_id(row: Mapping[str, Any]) -> Optional[Any]:
    """Return the first populated primary-key field of ``row``, or None."""
    for name in ROW_ID_FIELDS:
        value = get_field(row, name)
        if value != "":
            return value
    return None


def row_company_key(row: Mapping[str, Any]) -> str:
    """EmployerKey of an existing target row (Company Key, else Company Name)."""
    return normalize_company_key(get_text(row, COMPANY_KEY_COLUMN, ReportField.COMPANY_NAME))


class TargetSnapshot:
    """Existing target rows, read once per run and never modified afterwards."""

    def __init__(self, rows_by_key: Optional[Dict[str, TargetRow]] = None):
        self._rows: Dict[str, TargetRow] = dict(rows_by_key or {})

    @classmethod
    def from_rows(cls, rows: Iterable[Mapping[str, Any]]) -> "TargetSnapshot":
        """
        Index target rows by normalized key.

        On duplicate keys the first row with an id wins. A row without an id
        is only kept until a row with an id turns up for the same key.
        Entries that are not mappings are skipped.
        """
        indexed: Dict[str, TargetRow] = {}

        for row in rows:
            if not isinstance(row, Mapping):
                logger.warning(
                    f"Skipping malformed target row of type {type(row).__name__}",
                    extra={
                        "event": "target.snapshot.malformed_row",
                        "row_type": type(row).__name__,
                    },
                )
                continue

            key = row_company_key(row)
            candidate = TargetRow(company_key=key, row_id=get_row_id(row), content=dict(row))
            existing = indexed.get(key)

            if existing is None:
                indexed[key] = candidate
                continue

            if existing.row_id is None and candidate.row_id is not None:
                kept, ignored = candidate, existing
                indexed[key] = candidate
            else:
                kept, ignored = existing, candidate

            logger.warning(
                f"Duplicate target rows for {key}; keeping row {kept.row_id}",
                extra={
                    "event": "target.snapshot.duplicate_key",
                    "company_key": key,
                    "kept_row_id": kept.row_id,
                    "ignored_row_id": ignored.row_id,
                },
            )

        return cls(indexed)

    def lookup(self, company_key: str) -> Optional[TargetRow]:
        """Return the updatable row for ``company_key``; rows without an id don't count."""
        row = self._rows.get(company_key)
        if row is None or row.row_id is None:
            return None
        return row

    def __contains__(self, company_key: object) -> bool:
        return isinstance(company_key, str) and self.lookup(company_key) is not None

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[str]:
        return iter(self._rows)
