"""Read view over vendor submissions, and its JSON persistence."""
import json
import logging
import os
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional, Set

from translation_sync.models import JobRecord, JobStatus, TranslationGroup

logger = logging.getLogger(__name__)


class JobLedger:
    """Vendor jobs per (group key, target locale); the latest record for a pair wins."""

    def __init__(self, records: Optional[Iterable[JobRecord]] = None):
        self._records = {}
        for record in records or ():
            self.add(record)

    def add(self, record: JobRecord) -> None:
        self._records[(record.group_key, record.target_locale)] = record

    def record_submission(self, group_key: Any, target_locale: str) -> JobRecord:
        record = JobRecord(group_key=group_key, target_locale=target_locale)
        self.add(record)
        logger.info("Recorded vendor submission for group '%s' into '%s'.", group_key, target_locale)
        return record

    def _set_status(self, group_key: Any, target_locale: str, status: JobStatus) -> None:
        record = self._records.get((group_key, target_locale))
        if record is None:
            logger.warning("No job for group '%s' into '%s'; nothing to mark %s.", group_key, target_locale, status.value)
            return
        self._records[(group_key, target_locale)] = replace(record, status=status)
        logger.info("Marked job for group '%s' into '%s' %s.", group_key, target_locale, status.value)

    def mark_complete(self, group_key: Any, target_locale: str) -> None:
        self._set_status(group_key, target_locale, JobStatus.COMPLETE)

    def mark_failed(self, group_key: Any, target_locale: str) -> None:
        self._set_status(group_key, target_locale, JobStatus.FAILED)

    def jobs_for(self, group_key: Any) -> List[JobRecord]:
        return [record for (key, _), record in self._records.items() if key == group_key]

    def records(self) -> List[JobRecord]:
        return list(self._records.values())

    def active_locales(self, group: TranslationGroup) -> Set[str]:
        """
        Locales with an in-progress job for the group.

        The parent's own locale may be present: it means the whole group is
        being processed, not that one child is busy.
        """
        return {
            record.target_locale
            for record in self.jobs_for(group.key)
            if record.status is JobStatus.IN_PROGRESS
        }


def load_job_ledger(ledger_path: str) -> JobLedger:
    """Load a ledger saved by save_job_ledger; a missing file is an empty ledger."""
    if not os.path.exists(ledger_path):
        return JobLedger()
    with open(ledger_path, "r", encoding="utf-8") as ledger_file:
        payload = json.load(ledger_file)
    return JobLedger(
        JobRecord(group_key=entry["group"], target_locale=entry["locale"], status=JobStatus(entry["status"]))
        for entry in payload.get("jobs", [])
    )


def save_job_ledger(ledger_path: str, ledger: JobLedger) -> None:
    folder = os.path.dirname(ledger_path)
    if folder:
        os.makedirs(folder, exist_ok=True)
    payload = {
        "updated_at": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
        "jobs": [
            {"group": record.group_key, "locale": record.target_locale, "status": record.status.value}
            for record in ledger.records()
        ],
    }
    with open(ledger_path, "w", encoding="utf-8") as ledger_file:
        json.dump(payload, ledger_file, ensure_ascii=False, indent=2)
