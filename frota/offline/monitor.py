import threading
from enum import Enum

from frota.utils.logging_config import get_logger

logger = get_logger('frota.sync')


class ConnectivityState(str, Enum):
    ONLINE = 'online'
    OFFLINE = 'offline'


class ConnectivityMonitor:
    """Tracks ONLINE/OFFLINE and fires ``on_reconnect`` on OFFLINE -> ONLINE.

    ``probe`` answers "can we reach the API right now?"; :meth:`check` polls it
    (the agent schedules that), while :meth:`update` accepts a signal from
    anywhere else, e.g. a capture form that just failed to connect.
    The monitor starts OFFLINE so the first successful probe after start-up
    drains whatever an earlier session left in the queue.
    """

    def __init__(self, probe=None, on_reconnect=None, initial_state=ConnectivityState.OFFLINE):
        self.probe = probe
        self.on_reconnect = on_reconnect
        self._state = ConnectivityState(initial_state)
        self._state_lock = threading.Lock()
        self._listeners = []

    @property
    def state(self):
        return self._state

    @property
    def is_online(self):
        return self._state == ConnectivityState.ONLINE

    def subscribe(self, listener):
        """Register ``listener(state)``, called on every transition."""
        self._listeners.append(listener)
        return listener

    def update(self, is_online):
        """Apply a connectivity signal; returns True when it was a reconnect."""
        new_state = ConnectivityState.ONLINE if is_online else ConnectivityState.OFFLINE
        with self._state_lock:
            previous = self._state
            if previous == new_state:
                return False
            self._state = new_state

        logger.info(f"Connectivity changed: {previous.value} -> {new_state.value}")
        for listener in list(self._listeners):
            try:
                listener(new_state)
            except Exception:
                logger.exception("Connectivity listener failed")

        if new_state != ConnectivityState.ONLINE:
            return False

        if self.on_reconnect is not None:
            try:
                self.on_reconnect()
            except Exception:
                logger.exception("Reconnect handler failed")
        return True

    def check(self):
        """Run the probe and feed its answer to :meth:`update`."""
        if self.probe is None:
            return self.is_online
        try:
            is_online = bool(self.probe())
        except Exception:
            logger.exception("Connectivity probe failed")
            is_online = False
        self.update(is_online)
        return is_online
