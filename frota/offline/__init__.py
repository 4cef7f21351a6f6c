"""Offline capture and sync for the mobile checklist and supply forms."""

from frota.offline.agent import SyncAgent
from frota.offline.capture import CaptureResult, CaptureService
from frota.offline.client import RemoteApiClient
from frota.offline.engine import RetryPolicy, SyncEngine, SyncOutcome
from frota.offline.monitor import ConnectivityMonitor, ConnectivityState
from frota.offline.notifier import SyncNotifier
from frota.offline.queue import LocalQueue

__all__ = [
    'CaptureResult', 'CaptureService', 'ConnectivityMonitor', 'ConnectivityState',
    'LocalQueue', 'RemoteApiClient', 'RetryPolicy', 'SyncAgent', 'SyncEngine',
    'SyncNotifier', 'SyncOutcome',
]
