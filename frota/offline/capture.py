from dataclasses import dataclass
from typing import Optional

from frota.offline.queue import new_idempotency_key
from frota.schemas import ChecklistSubmission, RecordKind, SupplySubmission
from frota.utils.error_handler import LocalStorageError, RemoteUnavailableError
from frota.utils.logging_config import get_logger

logger = get_logger('frota.sync')

SAVED_MESSAGE = 'Registro salvo com sucesso!'
QUEUED_MESSAGE = 'Você está offline. Os dados serão sincronizados quando houver conexão.'
SAVE_FAILED_MESSAGE = 'Não foi possível salvar os dados no dispositivo. Tente novamente.'


@dataclass
class CaptureResult:
    queued: bool
    remote_id: Optional[int] = None
    local_key: Optional[int] = None


class CaptureService:
    """Entry point for the mobile checklist and supply forms.

    Online, a submission goes straight to the API. Offline, or when the API
    turns out to be unreachable mid-request, it lands in the local queue
    and waits for the next sync pass. Validation errors, remote rejections
    and :class:`~frota.utils.error_handler.LocalStorageError` reach the
    caller, which must tell the operator the record was not saved.
    """

    def __init__(self, client, queue, monitor, notifier=None):
        self.client = client
        self.queue = queue
        self.monitor = monitor
        self.notifier = notifier

    def submit_checklist(self, data, operator_id=None):
        submission = ChecklistSubmission.from_dict(data, default_operator_id=operator_id)
        return self._submit(RecordKind.CHECKLIST, submission, self.queue.enqueue_checklist)

    def submit_supply(self, data, operator_id=None):
        submission = SupplySubmission.from_dict(data, default_operator_id=operator_id)
        return self._submit(RecordKind.SUPPLY, submission, self.queue.enqueue_supply)

    def _submit(self, kind, submission, enqueue):
        # Shared by the direct attempt and the queued copy, so a request that
        # reached the server before timing out is not stored twice
        idempotency_key = new_idempotency_key()

        if self.monitor.is_online:
            try:
                remote_id = self.client.create(kind, submission, idempotency_key)
                self._toast('success', SAVED_MESSAGE)
                return CaptureResult(queued=False, remote_id=remote_id)
            except RemoteUnavailableError as e:
                logger.warning(f"API unreachable while sending {kind.value}, queueing it: {e}")
                self.monitor.update(False)

        try:
            local_key = enqueue(submission, idempotency_key=idempotency_key)
        except LocalStorageError:
            self._toast('error', SAVE_FAILED_MESSAGE)
            raise

        self._toast('info', QUEUED_MESSAGE)
        return CaptureResult(queued=True, local_key=local_key)

    def _toast(self, level, message):
        if self.notifier is not None:
            self.notifier.toast(level, message)
