"""Create-or-update of scored employers against the target table."""

import time
from typing import Callable, Optional

from ghostscore.domain.models import OutputRecord, ReconcileAction, ReconcileResult
from ghostscore.logging import get_logger
from ghostscore.nocodb.client import NocoDBClient
from ghostscore.scoring.keys import normalize_company_key

from .snapshot import TargetSnapshot, get_row_id

logger = get_logger(__name__, component="reconcile")


class Reconciler:
    """Maps OutputRecords onto target rows by EmployerKey.

    An employer found in the snapshot is updated in place, anything else is
    created, so repeated runs never duplicate an employer's row. The snapshot
    is not refreshed during a run. In dry-run mode the same matching decision
    is made and logged, but no mutating request is sent.
    """

    def __init__(
        self,
        client: NocoDBClient,
        table: str,
        snapshot: TargetSnapshot,
        dry_run: bool = True,
        write_delay: float = 0.15,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client
        self.table = table
        self.snapshot = snapshot
        self.dry_run = dry_run
        self.write_delay = write_delay
        self._sleep = sleep

    def reconcile(self, record: OutputRecord) -> ReconcileResult:
        """Write ``record`` to the target table (or describe the write in dry-run).

        Raises:
            NocoDBError: If the live write fails; the caller decides whether to continue
        """
        key = normalize_company_key(record.company_key)
        existing = self.snapshot.lookup(key)
        action = ReconcileAction.UPDATED if existing else ReconcileAction.CREATED
        row_id = existing.row_id if existing else None
        payload = record.to_payload()

        if self.dry_run:
            logger.info(
                f"[DRY RUN] Would {'update' if existing else 'create'} {key}",
                extra={
                    "event": "reconcile.dry_run",
                    "company_key": key,
                    "action": action.value,
                    "row_id": row_id,
                    "payload": payload,
                },
            )
            return ReconcileResult(company_key=key, action=action, row_id=row_id, dry_run=True)

        try:
            if existing:
                self.client.update_row(self.table, row_id, payload)
            else:
                response = self.client.create_row(self.table, payload)
                row_id = _created_row_id(response)
        finally:
            # Space out writes whether or not this one succeeded
            if self.write_delay:
                self._sleep(self.write_delay)

        return ReconcileResult(company_key=key, action=action, row_id=row_id)


def _created_row_id(response) -> Optional[object]:
    """Primary key of a freshly created row, when the server echoes it back."""
    return get_row_id(response) if isinstance(response, dict) else None
