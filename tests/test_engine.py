import threading
from datetime import datetime

from frota.offline.engine import RetryPolicy, SyncEngine
from frota.offline.notifier import SyncNotifier
from frota.offline.queue import Base
from frota.schemas import RecordKind
from frota.utils.error_handler import LocalStorageError, RemoteSubmissionError
from factories import make_checklist, make_supply
from fakes import FakeClient


def make_engine(queue, client, retry_policy=None):
    notifier = SyncNotifier()
    toasts = []
    notifier.subscribe(lambda level, message: toasts.append((level, message)))
    engine = SyncEngine(queue, client, notifier, retry_policy or RetryPolicy(backoff_base=0))
    return engine, toasts


def test_checklists_are_sent_before_supplies_in_queue_order(queue, fake_client):
    queue.enqueue_supply(make_supply(liters='10'))
    queue.enqueue_checklist(make_checklist(notes='C1'))
    queue.enqueue_checklist(make_checklist(notes='C2'))
    engine, _ = make_engine(queue, fake_client)

    engine.sync()

    sent = [(kind, getattr(submission, 'notes', None)) for kind, submission, _ in fake_client.calls]
    assert sent == [
        (RecordKind.CHECKLIST, 'C1'),
        (RecordKind.CHECKLIST, 'C2'),
        (RecordKind.SUPPLY, None),
    ]


def test_full_pass_empties_the_queue(queue, fake_client):
    queue.enqueue_checklist(make_checklist())
    queue.enqueue_supply(make_supply())
    engine, toasts = make_engine(queue, fake_client)

    outcome = engine.sync()

    assert outcome.complete
    assert outcome.pending == 0
    assert outcome.synced == 2
    assert queue.list_unsynced(RecordKind.CHECKLIST) == []
    assert queue.list_unsynced(RecordKind.SUPPLY) == []
    assert toasts == [('success', 'Todos os dados foram sincronizados!')]


def test_failures_are_isolated_per_record(queue):
    client = FakeClient(fail_when=lambda kind, submission: submission.notes == 'A')
    failing = queue.enqueue_checklist(make_checklist(notes='A'))
    passing = queue.enqueue_checklist(make_checklist(notes='B'))
    engine, toasts = make_engine(queue, client)

    outcome = engine.sync()

    assert outcome.synced == 1
    assert outcome.failed == 1
    assert outcome.pending == 1
    assert queue.get(RecordKind.CHECKLIST, failing).synced is False
    assert queue.get(RecordKind.CHECKLIST, passing).synced is True
    assert toasts == [('error', '1 registro pendente de sincronização')]


def test_always_failing_supply_stays_queued(queue):
    client = FakeClient(fail_when=lambda kind, submission: True)
    key = queue.enqueue_supply(make_supply())
    engine, toasts = make_engine(queue, client)

    outcome = engine.sync()

    assert [record.local_key for record in queue.list_unsynced(RecordKind.SUPPLY)] == [key]
    assert outcome.pending == 1
    assert len(client.calls) == 1
    assert toasts[-1] == ('error', '1 registro pendente de sincronização')

    # retried on the next trigger
    engine.sync()
    assert len(client.calls) == 2
    assert queue.get(RecordKind.SUPPLY, key).attempts == 2


def test_pending_count_message_is_pluralized(queue):
    client = FakeClient(fail_when=lambda kind, submission: True)
    queue.enqueue_checklist(make_checklist())
    queue.enqueue_supply(make_supply())
    engine, toasts = make_engine(queue, client)

    engine.sync()

    assert toasts == [('error', '2 registros pendentes de sincronização')]


def test_overlapping_triggers_never_double_submit(queue):
    queue.enqueue_checklist(make_checklist(notes='slow'))
    queue.enqueue_supply(make_supply())
    entered = threading.Event()
    release = threading.Event()

    class BlockingClient(FakeClient):
        def create(self, kind, submission, idempotency_key=None):
            entered.set()
            release.wait(timeout=5)
            return super().create(kind, submission, idempotency_key)

    client = BlockingClient()
    engine, _ = make_engine(queue, client)
    results = []
    worker = threading.Thread(target=lambda: results.append(engine.sync(trigger='reconnect')))
    worker.start()
    assert entered.wait(timeout=5)

    assert engine.is_syncing
    assert engine.sync(trigger='manual') is None

    release.set()
    worker.join(timeout=5)

    keys = [key for _, _, key in client.calls]
    assert len(keys) == 2
    assert len(set(keys)) == 2
    assert results[0].synced == 2
    assert not engine.is_syncing


def test_queue_read_failure_is_reported_not_raised(queue, fake_client):
    Base.metadata.drop_all(queue.engine)
    engine, toasts = make_engine(queue, fake_client)

    outcome = engine.sync()

    assert outcome.error is not None
    assert not outcome.complete
    assert toasts == [('error', 'Erro ao sincronizar dados')]


def test_unexpected_client_errors_do_not_stop_the_pass(queue):
    class BrokenClient(FakeClient):
        def create(self, kind, submission, idempotency_key=None):
            if kind == RecordKind.CHECKLIST:
                raise KeyError('boom')
            return super().create(kind, submission, idempotency_key)

    queue.enqueue_checklist(make_checklist())
    queue.enqueue_supply(make_supply())
    engine, _ = make_engine(queue, BrokenClient())

    outcome = engine.sync()

    assert outcome.synced == 1
    assert outcome.pending == 1


def test_submissions_carry_the_record_idempotency_key(queue, fake_client):
    key = queue.enqueue_checklist(make_checklist())
    expected = queue.get(RecordKind.CHECKLIST, key).idempotency_key
    engine, _ = make_engine(queue, fake_client)

    engine.sync()

    assert fake_client.calls[0][2] == expected


def test_record_becomes_terminal_after_max_attempts(queue):
    client = FakeClient(fail_when=lambda kind, submission: True)
    key = queue.enqueue_supply(make_supply())
    engine, toasts = make_engine(queue, client, RetryPolicy(max_attempts=2, backoff_base=0))

    engine.sync()
    engine.sync()
    assert queue.get(RecordKind.SUPPLY, key).failed is True

    outcome = engine.sync()
    assert len(client.calls) == 2
    # a terminal record still counts as pending for the operator
    assert outcome.pending == 1
    assert outcome.failed_permanently == 1
    assert toasts[-1] == (
        'error', '1 registro falhou permanentemente. Toque em sincronizar para tentar novamente.'
    )

    queue.requeue_failed()
    engine.sync()
    assert len(client.calls) == 3


def test_retry_failed_flag_requeues_terminal_records(queue):
    client = FakeClient(fail_when=lambda kind, submission: True)
    key = queue.enqueue_checklist(make_checklist())
    engine, toasts = make_engine(queue, client, RetryPolicy(max_attempts=1, backoff_base=0))

    engine.sync()
    assert queue.get(RecordKind.CHECKLIST, key).failed is True

    client.fail_when = lambda kind, submission: False
    engine.sync(trigger='reconnect')
    assert len(client.calls) == 1

    outcome = engine.sync(trigger='manual', retry_failed=True)
    assert len(client.calls) == 2
    assert outcome.complete
    assert toasts[-1] == ('success', 'Todos os dados foram sincronizados!')


def test_backoff_only_applies_to_periodic_retries(queue):
    client = FakeClient(fail_when=lambda kind, submission: True)
    key = queue.enqueue_checklist(make_checklist())
    engine, _ = make_engine(queue, client, RetryPolicy(max_attempts=0, backoff_base=60, backoff_max=600))

    engine.sync(trigger='reconnect')
    assert queue.get(RecordKind.CHECKLIST, key).next_attempt_at is not None

    engine.sync(trigger='retry', respect_backoff=True)
    assert len(client.calls) == 1

    engine.sync(trigger='manual')
    assert len(client.calls) == 2


def test_mark_synced_failure_leaves_record_for_idempotent_retry(queue, fake_client, monkeypatch):
    key = queue.enqueue_checklist(make_checklist())
    engine, _ = make_engine(queue, fake_client)
    original = queue.mark_synced

    def broken(*args, **kwargs):
        raise LocalStorageError('disk full')

    monkeypatch.setattr(queue, 'mark_synced', broken)
    outcome = engine.sync()
    assert outcome.pending == 1

    monkeypatch.setattr(queue, 'mark_synced', original)
    engine.sync()

    first_key, second_key = [call[2] for call in fake_client.calls]
    assert first_key == second_key
    assert queue.get(RecordKind.CHECKLIST, key).synced is True


def test_retry_policy_backoff_is_capped():
    policy = RetryPolicy(max_attempts=5, backoff_base=30, backoff_max=100)
    now = datetime(2026, 1, 1)

    assert (policy.next_attempt_at(1, now) - now).total_seconds() == 30
    assert (policy.next_attempt_at(2, now) - now).total_seconds() == 60
    assert (policy.next_attempt_at(4, now) - now).total_seconds() == 100
    assert not policy.exhausted(4)
    assert policy.exhausted(5)
    assert not RetryPolicy(max_attempts=0).exhausted(1000)


def test_remote_rejection_is_a_normal_failure(queue):
    class RejectingClient(FakeClient):
        def create(self, kind, submission, idempotency_key=None):
            raise RemoteSubmissionError('Vehicle 1 not found', status_code=404)

    key = queue.enqueue_checklist(make_checklist())
    engine, _ = make_engine(queue, RejectingClient())

    outcome = engine.sync()

    assert outcome.failed == 1
    assert queue.get(RecordKind.CHECKLIST, key).last_error == 'Vehicle 1 not found'
