from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from frota.offline.capture import CaptureService
from frota.offline.client import RemoteApiClient
from frota.offline.engine import RetryPolicy, SyncEngine
from frota.offline.monitor import ConnectivityMonitor
from frota.offline.notifier import SyncNotifier
from frota.offline.queue import LocalQueue
from frota.schemas import RecordKind
from frota.utils.logging_config import get_logger

logger = get_logger('frota.sync')


class SyncAgent:
    """Device runtime: queue, API client, sync engine and connectivity polling."""

    def __init__(self, queue, client, retry_policy=None, probe_interval=30, retry_interval=300):
        self.queue = queue
        self.client = client
        self.notifier = SyncNotifier()
        self.engine = SyncEngine(queue, client, self.notifier, retry_policy)
        self.monitor = ConnectivityMonitor(probe=client.ping, on_reconnect=self.on_reconnect)
        self.capture = CaptureService(client, queue, self.monitor, self.notifier)
        self.probe_interval = probe_interval
        self.retry_interval = retry_interval
        self.scheduler = BackgroundScheduler()

    @classmethod
    def from_config(cls, config):
        """Build an agent from a config class (see ``config.base.Config``)."""
        queue = LocalQueue(config.OFFLINE_DATABASE_URL)
        client = RemoteApiClient(
            config.API_BASE_URL,
            api_token=config.API_TOKEN,
            timeout=config.API_TIMEOUT
        )
        retry_policy = RetryPolicy(
            max_attempts=config.SYNC_MAX_ATTEMPTS,
            backoff_base=config.SYNC_BACKOFF_BASE,
            backoff_max=config.SYNC_BACKOFF_MAX
        )
        return cls(queue, client, retry_policy,
                   probe_interval=config.SYNC_PROBE_INTERVAL,
                   retry_interval=config.SYNC_RETRY_INTERVAL)

    def start(self):
        """Start connectivity polling and the periodic retry"""
        self.scheduler.add_job(
            func=self.monitor.check,
            trigger=IntervalTrigger(seconds=self.probe_interval),
            id='connectivity_probe',
            name='Probe remote API availability',
            max_instances=1,
            coalesce=True,
            replace_existing=True
        )
        
        self.scheduler.add_job(
            func=self.retry_due,
            trigger=IntervalTrigger(seconds=self.retry_interval),
            id='sync_retry',
            name='Retry queued records whose backoff expired',
            max_instances=1,
            coalesce=True,
            replace_existing=True
        )
        
        self.scheduler.start()
        logger.info("Sync agent started")
        
        # Do not wait a full interval to learn whether we are online
        self.monitor.check()

    def stop(self):
        """Stop the scheduler"""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        self.queue.close()
        logger.info("Sync agent stopped")

    def on_reconnect(self):
        return self.engine.sync(trigger='reconnect')

    def sync_now(self):
        """Manual "sync" button; returns None while a pass is already running.

        Records that reached the retry ceiling are sent again too.
        """
        return self.engine.sync(trigger='manual', retry_failed=True)

    def retry_due(self):
        if not self.monitor.is_online:
            return None
        if not any(self.queue.list_due(kind) for kind in RecordKind):
            return None
        return self.engine.sync(trigger='retry', respect_backoff=True)

    @property
    def pending_count(self):
        return self.queue.count_unsynced()
