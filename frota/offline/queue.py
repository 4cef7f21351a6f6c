"""On-device queue of submissions captured while offline.

Two tables, one per record kind, each keyed by an auto-incrementing local id
and indexed on the ``synced`` flag. Rows are only ever appended by the capture
forms and flipped to synced by the sync engine; synced rows stay as history
until :meth:`LocalQueue.purge_synced` removes them.
"""

import uuid
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Integer,
    Numeric,
    String,
    Text,
    create_engine,
    or_,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from frota.schemas import (
    ChecklistSubmission,
    FuelType,
    RecordKind,
    SupplySubmission,
    dump_checklist_items,
    parse_checklist_items,
)
from frota.utils.error_handler import LocalStorageError
from frota.utils.helpers import utcnow
from frota.utils.logging_config import get_logger

logger = get_logger('frota.sync')

Base = declarative_base()


def new_idempotency_key():
    return str(uuid.uuid4())


class PendingRecordMixin:
    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_id = Column(Integer, nullable=False)
    operator_id = Column(Integer, nullable=False)
    created_at = Column(DateTime, nullable=False)
    synced = Column(Boolean, nullable=False, default=False, index=True)
    idempotency_key = Column(String(36), nullable=False, unique=True, default=new_idempotency_key)
    attempts = Column(Integer, nullable=False, default=0)
    last_error = Column(Text, nullable=True)
    next_attempt_at = Column(DateTime, nullable=True)
    # Terminal state: retry ceiling reached, skipped until requeued
    failed = Column(Boolean, nullable=False, default=False)
    synced_at = Column(DateTime, nullable=True)
    remote_id = Column(Integer, nullable=True)

    @property
    def local_key(self):
        return self.id


class PendingChecklist(PendingRecordMixin, Base):
    __tablename__ = 'pending_checklists'

    kind = RecordKind.CHECKLIST

    items = Column(Text, nullable=False)
    notes = Column(Text, nullable=True)

    def to_submission(self):
        return ChecklistSubmission(
            vehicle_id=self.vehicle_id,
            operator_id=self.operator_id,
            items=parse_checklist_items(self.items),
            notes=self.notes,
            checked_at=self.created_at,
        )

    def __repr__(self):
        return f'<PendingChecklist {self.id} synced={self.synced}>'


class PendingSupply(PendingRecordMixin, Base):
    __tablename__ = 'pending_supplies'

    kind = RecordKind.SUPPLY

    station_id = Column(Integer, nullable=False)
    fuel_type = Column(String(20), nullable=False)
    liters = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    total_value = Column(Numeric(12, 2, asdecimal=False), nullable=False)

    def to_submission(self):
        return SupplySubmission(
            vehicle_id=self.vehicle_id,
            operator_id=self.operator_id,
            station_id=self.station_id,
            fuel_type=FuelType(self.fuel_type),
            liters=Decimal(str(self.liters)),
            total_value=Decimal(str(self.total_value)),
            supplied_at=self.created_at,
        )

    def __repr__(self):
        return f'<PendingSupply {self.id} synced={self.synced}>'


MODELS = {
    RecordKind.CHECKLIST: PendingChecklist,
    RecordKind.SUPPLY: PendingSupply,
}


class LocalQueue:
    """Durable store of records waiting for the remote API."""

    def __init__(self, database_url='sqlite:///offline_queue.db'):
        engine_options = {}
        if database_url.startswith('sqlite'):
            engine_options['connect_args'] = {'check_same_thread': False}
            if database_url in ('sqlite://', 'sqlite:///:memory:'):
                # One shared connection, otherwise every checkout sees an empty database
                engine_options['poolclass'] = StaticPool

        self.engine = create_engine(database_url, **engine_options)
        self.Session = sessionmaker(bind=self.engine, expire_on_commit=False)
        Base.metadata.create_all(self.engine)

    def _model(self, kind):
        return MODELS[RecordKind(kind)]

    def _add(self, row):
        session = self.Session()
        try:
            session.add(row)
            session.commit()
            logger.info(
                f"Queued {row.kind.value} {row.id} for later sync",
                extra={'kind': row.kind.value, 'local_key': row.id}
            )
            return row.id
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Could not queue {row.kind.value}: {e}")
            raise LocalStorageError(f'Could not save {row.kind.value} locally') from e
        finally:
            session.close()

    def enqueue_checklist(self, submission, idempotency_key=None):
        """Append an unsynced checklist; returns its local key."""
        return self._add(PendingChecklist(
            vehicle_id=submission.vehicle_id,
            operator_id=submission.operator_id,
            items=dump_checklist_items(submission.items),
            notes=submission.notes,
            created_at=submission.checked_at,
            synced=False,
            idempotency_key=idempotency_key or new_idempotency_key(),
        ))

    def enqueue_supply(self, submission, idempotency_key=None):
        """Append an unsynced supply; returns its local key."""
        return self._add(PendingSupply(
            vehicle_id=submission.vehicle_id,
            operator_id=submission.operator_id,
            station_id=submission.station_id,
            fuel_type=submission.fuel_type.value,
            liters=float(submission.liters),
            total_value=float(submission.total_value),
            created_at=submission.supplied_at,
            synced=False,
            idempotency_key=idempotency_key or new_idempotency_key(),
        ))

    def list_unsynced(self, kind):
        """Every unsynced row of ``kind`` in insertion order, failed ones included."""
        model = self._model(kind)
        return self._query(lambda session: session.query(model)
                           .filter(model.synced.is_(False))
                           .order_by(model.id).all())

    def list_due(self, kind, now=None):
        """Unsynced rows that are neither failed nor waiting out a backoff."""
        model = self._model(kind)
        now = now or utcnow()
        return self._query(lambda session: session.query(model)
                           .filter(model.synced.is_(False), model.failed.is_(False))
                           .filter(or_(model.next_attempt_at.is_(None), model.next_attempt_at <= now))
                           .order_by(model.id).all())

    def count_unsynced(self, kind=None):
        models = [self._model(kind)] if kind else list(MODELS.values())
        return self._query(lambda session: sum(
            session.query(model).filter(model.synced.is_(False)).count() for model in models
        ))

    def count_failed(self, kind=None):
        """Unsynced rows that reached the retry ceiling."""
        models = [self._model(kind)] if kind else list(MODELS.values())
        return self._query(lambda session: sum(
            session.query(model).filter(model.synced.is_(False), model.failed.is_(True)).count()
            for model in models
        ))

    def get(self, kind, local_key):
        model = self._model(kind)
        return self._query(lambda session: session.get(model, local_key))

    def mark_synced(self, kind, local_key, remote_id=None):
        """Flag a row as accepted by the remote store.

        Calling it again for the same key, or for a key that no longer exists,
        changes nothing.
        """
        model = self._model(kind)

        def update(session):
            row = session.get(model, local_key)
            if row is None or row.synced:
                return False
            row.synced = True
            row.synced_at = utcnow()
            row.remote_id = remote_id
            row.next_attempt_at = None
            return True

        return self._write(update)

    def record_failure(self, kind, local_key, error, next_attempt_at=None, failed=False):
        """Count a failed attempt and store when the row may be retried."""
        model = self._model(kind)

        def update(session):
            row = session.get(model, local_key)
            if row is None or row.synced:
                return None
            row.attempts += 1
            row.last_error = str(error)[:1000]
            row.next_attempt_at = next_attempt_at
            row.failed = failed
            return row.attempts

        return self._write(update)

    def requeue_failed(self, kind=None):
        """Give rows in the terminal failed state a fresh set of attempts."""
        kinds = [RecordKind(kind)] if kind else list(RecordKind)

        def update(session):
            count = 0
            for k in kinds:
                model = self._model(k)
                count += session.query(model).filter(
                    model.synced.is_(False), model.failed.is_(True)
                ).update({'failed': False, 'attempts': 0, 'next_attempt_at': None},
                         synchronize_session=False)
            return count

        return self._write(update)

    def purge_synced(self, before=None):
        """Delete synced history, optionally only rows synced before ``before``."""

        def update(session):
            count = 0
            for model in MODELS.values():
                query = session.query(model).filter(model.synced.is_(True))
                if before is not None:
                    query = query.filter(model.synced_at < before)
                count += query.delete(synchronize_session=False)
            return count

        return self._write(update)

    def _query(self, fn):
        session = self.Session()
        try:
            return fn(session)
        except SQLAlchemyError as e:
            logger.error(f"Local queue read failed: {e}")
            raise LocalStorageError('Could not read the local queue') from e
        finally:
            session.close()

    def _write(self, fn):
        session = self.Session()
        try:
            result = fn(session)
            session.commit()
            return result
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Local queue write failed: {e}")
            raise LocalStorageError('Could not update the local queue') from e
        finally:
            session.close()

    def close(self):
        self.engine.dispose()
