"""Sync engine draining the local queue into the remote API.

One pass sends every queued checklist, then every queued supply, one record at
a time in local-key order. A failing record is logged, its attempt recorded,
and the pass moves on; the only thing a caller sees is the
:class:`SyncOutcome`, and in particular how many records are still pending.

Passes never overlap. Both the connectivity monitor and the manual "sync"
button call :meth:`SyncEngine.sync`; whichever arrives while a pass is running
gets ``None`` back and submits nothing.
"""

import threading
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from frota.schemas import RecordKind
from frota.utils.error_handler import LocalStorageError, RemoteSubmissionError
from frota.utils.helpers import utcnow
from frota.utils.logging_config import get_logger

logger = get_logger('frota.sync')

# Checklists are always drained before supplies
SYNC_ORDER = (RecordKind.CHECKLIST, RecordKind.SUPPLY)


@dataclass
class SyncOutcome:
    trigger: str
    attempted: int = 0
    synced: int = 0
    failed: int = 0
    pending: Optional[int] = None
    # Pending rows that hit the retry ceiling and wait for a manual retry
    failed_permanently: int = 0
    error: Optional[str] = None

    @property
    def complete(self):
        return self.error is None and self.pending == 0


@dataclass
class RetryPolicy:
    """Bounded exponential backoff.

    ``max_attempts`` of 0 retries forever; ``backoff_base`` of 0 retries on
    every pass.
    """
    max_attempts: int = 10
    backoff_base: int = 30
    backoff_max: int = 3600

    def next_attempt_at(self, attempts, now):
        if not self.backoff_base:
            return None
        delay = min(self.backoff_base * 2 ** max(attempts - 1, 0), self.backoff_max)
        return now + timedelta(seconds=delay)

    def exhausted(self, attempts):
        return bool(self.max_attempts) and attempts >= self.max_attempts


class SyncEngine:

    def __init__(self, queue, client, notifier=None, retry_policy=None):
        self.queue = queue
        self.client = client
        self.notifier = notifier
        self.retry_policy = retry_policy or RetryPolicy()
        self._in_flight = threading.Lock()

    @property
    def is_syncing(self):
        return self._in_flight.locked()

    def sync(self, trigger='manual', respect_backoff=False, retry_failed=False):
        """Run one pass unless another is already running.

        ``respect_backoff`` skips records still inside their retry window; the
        reconnect and manual triggers leave it off so an operator can always
        force a retry. ``retry_failed`` first gives records that reached the
        retry ceiling a fresh set of attempts.
        """
        if not self._in_flight.acquire(blocking=False):
            logger.info(f"Sync already in progress, ignoring {trigger} trigger",
                        extra={'trigger': trigger})
            return None
        try:
            outcome = self._run_pass(trigger, respect_backoff, retry_failed)
        finally:
            self._in_flight.release()

        if self.notifier is not None:
            self.notifier.notify(outcome)
        return outcome

    def _run_pass(self, trigger, respect_backoff, retry_failed=False):
        outcome = SyncOutcome(trigger=trigger)
        logger.info(f"Sync pass started ({trigger})", extra={'trigger': trigger})

        try:
            if retry_failed:
                requeued = self.queue.requeue_failed()
                if requeued:
                    logger.info(f"Requeued {requeued} failed records", extra={'trigger': trigger})

            for kind in SYNC_ORDER:
                for record in self._pending_records(kind, respect_backoff):
                    outcome.attempted += 1
                    if self._submit(kind, record, trigger):
                        outcome.synced += 1
                    else:
                        outcome.failed += 1

            outcome.pending = self.queue.count_unsynced()
            outcome.failed_permanently = self.queue.count_failed()
        except LocalStorageError as e:
            logger.error(f"Sync pass aborted: {e}", extra={'trigger': trigger})
            outcome.error = str(e)
            return outcome

        logger.info(
            f"Sync pass finished ({trigger}): {outcome.synced} synced, "
            f"{outcome.failed} failed, {outcome.pending} pending",
            extra={'trigger': trigger}
        )
        return outcome

    def _pending_records(self, kind, respect_backoff):
        if respect_backoff:
            return self.queue.list_due(kind)
        return [record for record in self.queue.list_unsynced(kind) if not record.failed]

    def _submit(self, kind, record, trigger):
        """Send one record; True when the remote store accepted it."""
        context = {'kind': kind.value, 'local_key': record.local_key, 'trigger': trigger}
        try:
            remote_id = self.client.create(kind, record.to_submission(), record.idempotency_key)
        except RemoteSubmissionError as e:
            logger.warning(f"Could not sync {kind.value} {record.local_key}: {e}", extra=context)
            self._record_failure(kind, record, e)
            return False
        except Exception as e:
            logger.exception(f"Unexpected error syncing {kind.value} {record.local_key}", extra=context)
            self._record_failure(kind, record, e)
            return False

        try:
            self.queue.mark_synced(kind, record.local_key, remote_id=remote_id)
        except LocalStorageError as e:
            # The remote row exists; the idempotency key maps the retry back onto it
            logger.error(f"Synced {kind.value} {record.local_key} but could not flag it: {e}", extra=context)
            return False

        logger.info(f"Synced {kind.value} {record.local_key} as {remote_id}", extra=context)
        return True

    def _record_failure(self, kind, record, error):
        attempts = record.attempts + 1
        failed = self.retry_policy.exhausted(attempts)
        if failed:
            logger.error(
                f"Giving up on {kind.value} {record.local_key} after {attempts} attempts",
                extra={'kind': kind.value, 'local_key': record.local_key}
            )
        try:
            self.queue.record_failure(
                kind, record.local_key, error,
                next_attempt_at=self.retry_policy.next_attempt_at(attempts, utcnow()),
                failed=failed
            )
        except LocalStorageError as e:
            logger.error(f"Could not record failed attempt for {kind.value} {record.local_key}: {e}")
