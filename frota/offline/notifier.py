from frota.utils.logging_config import get_logger

logger = get_logger('frota.sync')

ALL_SYNCED = 'Todos os dados foram sincronizados!'
SYNC_FAILED = 'Erro ao sincronizar dados'


def pending_message(count):
    if count == 1:
        return '1 registro pendente de sincronização'
    return f'{count} registros pendentes de sincronização'


def failed_permanently_message(count):
    if count == 1:
        return '1 registro falhou permanentemente. Toque em sincronizar para tentar novamente.'
    return f'{count} registros falharam permanentemente. Toque em sincronizar para tentar novamente.'


def outcome_message(outcome):
    """``(level, text)`` of the toast shown after a sync pass."""
    if outcome.error:
        return 'error', SYNC_FAILED
    if outcome.pending == 0:
        return 'success', ALL_SYNCED
    if outcome.failed_permanently:
        return 'error', failed_permanently_message(outcome.failed_permanently)
    return 'error', pending_message(outcome.pending)


class SyncNotifier:
    """Fans sync results out to whatever shows toasts on the device."""

    def __init__(self):
        self._subscribers = []
        self.last_message = None

    def subscribe(self, callback):
        """Register ``callback(level, message)``."""
        self._subscribers.append(callback)
        return callback

    def toast(self, level, message):
        self.last_message = (level, message)
        logger.info(f"[{level}] {message}")
        for callback in list(self._subscribers):
            try:
                callback(level, message)
            except Exception:
                logger.exception("Toast subscriber failed")

    def notify(self, outcome):
        level, message = outcome_message(outcome)
        self.toast(level, message)
        return message
