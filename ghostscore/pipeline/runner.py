"""Sync orchestration: read reports, score employers, reconcile the target table."""

import time
from typing import Callable, Dict
from uuid import uuid4

from ghostscore.config.models import AppConfig
from ghostscore.logging import get_logger
from ghostscore.logging.context import log_context
from ghostscore.nocodb.client import NocoDBClient
from ghostscore.nocodb.exceptions import NocoDBError
from ghostscore.reconcile import Reconciler, TargetSnapshot
from ghostscore.scoring.aggregator import EmployerAggregate, group_reports
from ghostscore.scoring.calculator import summarize
from ghostscore.utils.timestamps import utc_now

from .models import EmployerRunStats, SyncRunResult

logger = get_logger(__name__, component="pipeline")


class SyncPipeline:
    """
    Runs one GhostScore sync.

    Steps: list the source table, group and score reports per employer, list
    the target table once, then create or update one target row per employer.
    A failed read aborts the run; a failed write only skips that employer.
    """

    def __init__(
        self,
        app_config: AppConfig,
        client: NocoDBClient,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the sync pipeline.

        Args:
            app_config: Application configuration
            client: NocoDB client used for every read and write
            sleep: Pause function used between writes (injectable for tests)
        """
        self.app_config = app_config
        self.client = client
        self._sleep = sleep

    def run_once(self) -> SyncRunResult:
        """
        Execute a complete sync.

        Returns:
            SyncRunResult with per-employer outcomes

        Raises:
            NocoDBError: If the source or target table cannot be listed
        """
        run_started_at = utc_now()
        run_id = uuid4().hex
        tables = self.app_config.tables
        dry_run = self.app_config.sync.dry_run

        with log_context(run_id=run_id):
            logger.info(
                "Sync run started",
                extra={
                    "event": "sync.run.started",
                    "source_table": tables.source,
                    "target_table": tables.target,
                    "dry_run": dry_run,
                },
            )

            reports = self._read_table(tables.source)
            aggregates = group_reports(reports)
            self._log_grouping(aggregates, len(reports))

            target_rows = self._read_table(tables.target)
            snapshot = TargetSnapshot.from_rows(target_rows)

            reconciler = Reconciler(
                client=self.client,
                table=tables.target,
                snapshot=snapshot,
                dry_run=dry_run,
                write_delay=self.app_config.sync.write_delay_seconds,
                sleep=self._sleep,
            )

            employer_stats = [
                self._process_employer(aggregate, reconciler)
                for aggregate in aggregates.values()
            ]

            result = SyncRunResult(
                run_id=run_id,
                run_started_at=run_started_at,
                run_finished_at=utc_now(),
                dry_run=dry_run,
                total_reports=len(reports),
                total_target_rows=len(target_rows),
                employer_stats=employer_stats,
            )

            logger.info(
                "Sync run completed",
                extra={
                    "event": "sync.run.completed",
                    "duration_ms": int(result.total_duration_seconds * 1000),
                    "total_reports": result.total_reports,
                    "total_employers": result.total_employers,
                    "created_count": result.created_count,
                    "updated_count": result.updated_count,
                    "error_count": result.error_count,
                    "dry_run": dry_run,
                },
            )

            return result

    def _read_table(self, table: str) -> list:
        try:
            return self.client.fetch_all(table)
        except NocoDBError as e:
            logger.error(
                f"Cannot read table {table}; aborting run",
                extra={
                    "event": "sync.read.failed",
                    "table": table,
                    "error_type": type(e).__name__,
                    "error": str(e),
                },
            )
            raise

    def _log_grouping(self, aggregates: Dict[str, EmployerAggregate], report_count: int) -> None:
        logger.info(
            f"Grouped {report_count} reports into {len(aggregates)} employers",
            extra={
                "event": "sync.reports.grouped",
                "report_count": report_count,
                "employer_count": len(aggregates),
            },
        )

        for aggregate in aggregates.values():
            if aggregate.merged_names:
                logger.info(
                    f"Merged {len(aggregate.display_names)} display names under {aggregate.company_key}",
                    extra={
                        "event": "aggregate.key.merged",
                        "company_key": aggregate.company_key,
                        "display_names": list(aggregate.display_names),
                    },
                )

    def _process_employer(
        self, aggregate: EmployerAggregate, reconciler: Reconciler
    ) -> EmployerRunStats:
        """
        Score one employer and reconcile it, isolating failures.

        Args:
            aggregate: Folded statistics for the employer
            reconciler: Reconciler bound to this run's target snapshot

        Returns:
            EmployerRunStats; ``error_message`` is set if the employer failed
        """
        stats = EmployerRunStats(
            company_key=aggregate.company_key,
            report_count=aggregate.report_count,
        )

        with log_context(company_key=aggregate.company_key):
            try:
                record = summarize(aggregate)
                stats.ghost_score = record.ghost_score

                outcome = reconciler.reconcile(record)
                stats.action = outcome.action.value
                stats.dry_run = outcome.dry_run

                if not outcome.dry_run:
                    logger.info(
                        f"Upserted {aggregate.company_key}: GhostScore={record.ghost_score} reports={aggregate.report_count}",
                        extra={
                            "event": "employer.upsert.succeeded",
                            "action": stats.action,
                            "row_id": outcome.row_id,
                            "ghost_score": record.ghost_score,
                            "report_count": aggregate.report_count,
                        },
                    )

            except Exception as e:
                # One employer's failure must not stop the batch
                stats.error_message = str(e) or type(e).__name__
                logger.error(
                    f"Upsert failed for {aggregate.company_key}: {e}",
                    extra={
                        "event": "employer.upsert.failed",
                        "company_key": aggregate.company_key,
                        "error_type": type(e).__name__,
                        "error": str(e),
                    },
                    exc_info=True,
                )

        return stats
