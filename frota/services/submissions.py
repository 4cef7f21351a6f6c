"""Creation of checklists and supplies in the canonical store."""

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from frota import db
from frota.models import Checklist, Supply, Vehicle, FuelStation, User
from frota.schemas import dump_checklist_items
from frota.utils.error_handler import DatabaseError, NotFoundError
from frota.utils.logging_config import get_logger

logger = get_logger(__name__)


def _require_active(model, record_id, label):
    record = db.session.get(model, record_id)
    if record is None or not record.is_active:
        raise NotFoundError(f'{label} {record_id} not found')
    return record


def _find_duplicate(model, operator_id, idempotency_key):
    """Row the same operator already stored under ``idempotency_key``.

    Keys are scoped to the operator, so another user's key never matches.
    """
    if not idempotency_key:
        return None
    return model.query.filter_by(operator_id=operator_id, idempotency_key=idempotency_key).first()


def _save(model, record, idempotency_key):
    """Insert ``record``, falling back to the row already stored under the key.

    Returns ``(row, created)``.
    """
    try:
        db.session.add(record)
        db.session.commit()
        return record, True
    except IntegrityError:
        db.session.rollback()
        # Lost a race against a concurrent retry of the same submission
        existing = _find_duplicate(model, record.operator_id, idempotency_key)
        if existing is not None:
            return existing, False
        raise DatabaseError(f'Could not store {model.__tablename__} row')
    except SQLAlchemyError as e:
        db.session.rollback()
        raise DatabaseError(str(e))


class ChecklistService:
    """Service for checklist submissions."""
    
    @staticmethod
    def create(submission, idempotency_key=None):
        """Store a checklist; returns ``(checklist, created)``."""
        existing = _find_duplicate(Checklist, submission.operator_id, idempotency_key)
        if existing is not None:
            logger.info(f"Duplicate checklist submission {idempotency_key} -> {existing.id}")
            return existing, False
        
        _require_active(Vehicle, submission.vehicle_id, 'Vehicle')
        _require_active(User, submission.operator_id, 'Operator')
        
        checklist = Checklist(
            vehicle_id=submission.vehicle_id,
            operator_id=submission.operator_id,
            checked_at=submission.checked_at,
            items=dump_checklist_items(submission.items),
            notes=submission.notes,
            idempotency_key=idempotency_key
        )
        checklist, created = _save(Checklist, checklist, idempotency_key)
        if created:
            logger.info(f"Checklist {checklist.id} stored for vehicle {checklist.vehicle_id}")
        return checklist, created
    
    @staticmethod
    def list(vehicle_id=None, limit=100):
        query = Checklist.query
        if vehicle_id:
            query = query.filter_by(vehicle_id=vehicle_id)
        return query.order_by(Checklist.checked_at.desc()).limit(limit).all()
    
    @staticmethod
    def delete(checklist_id):
        checklist = db.session.get(Checklist, checklist_id)
        if checklist is None:
            raise NotFoundError(f'Checklist {checklist_id} not found')
        db.session.delete(checklist)
        db.session.commit()
        logger.info(f"Checklist {checklist_id} deleted")


class SupplyService:
    """Service for fuel supply submissions."""
    
    @staticmethod
    def create(submission, idempotency_key=None):
        """Store a supply; returns ``(supply, created)``."""
        existing = _find_duplicate(Supply, submission.operator_id, idempotency_key)
        if existing is not None:
            logger.info(f"Duplicate supply submission {idempotency_key} -> {existing.id}")
            return existing, False
        
        _require_active(Vehicle, submission.vehicle_id, 'Vehicle')
        _require_active(User, submission.operator_id, 'Operator')
        _require_active(FuelStation, submission.station_id, 'Fuel station')
        
        supply = Supply(
            vehicle_id=submission.vehicle_id,
            operator_id=submission.operator_id,
            station_id=submission.station_id,
            fuel_type=submission.fuel_type.value,
            liters=submission.liters,
            total_value=submission.total_value,
            supplied_at=submission.supplied_at,
            idempotency_key=idempotency_key
        )
        supply, created = _save(Supply, supply, idempotency_key)
        if created:
            logger.info(f"Supply {supply.id} stored: {supply.liters}L for vehicle {supply.vehicle_id}")
        return supply, created
    
    @staticmethod
    def list(vehicle_id=None, limit=100):
        query = Supply.query
        if vehicle_id:
            query = query.filter_by(vehicle_id=vehicle_id)
        return query.order_by(Supply.supplied_at.desc()).limit(limit).all()
