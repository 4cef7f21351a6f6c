from frota import db
from frota.schemas import parse_checklist_items, ChecklistStatus
from frota.utils.helpers import utcnow


class Checklist(db.Model):
    __tablename__ = 'checklists'
    
    id = db.Column(db.Integer, primary_key=True)
    vehicle_id = db.Column(db.Integer, db.ForeignKey('vehicles.id'), nullable=False, index=True)
    operator_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    checked_at = db.Column(db.DateTime, nullable=False, index=True)
    items = db.Column(db.Text, nullable=False)  # JSON list of {id, name, status, note}
    notes = db.Column(db.Text, nullable=True)
    # Client-generated key, unique per operator; a retried submission maps back onto the same row
    idempotency_key = db.Column(db.String(64), nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow)

    __table_args__ = (
        db.UniqueConstraint('operator_id', 'idempotency_key', name='uq_checklists_operator_idempotency_key'),
    )

    def get_items(self):
        return parse_checklist_items(self.items)
    
    def failed_items(self):
        """Items marked as not ok"""
        return [item for item in self.get_items() if item.status == ChecklistStatus.NOT_OK]
    
    def to_dict(self):
        return {
            'id': self.id,
            'vehicle_id': self.vehicle_id,
            'vehicle_plate': self.vehicle.plate if self.vehicle else None,
            'operator_id': self.operator_id,
            'operator_email': self.operator.email if self.operator else None,
            'checked_at': self.checked_at.isoformat(),
            'items': [item.to_dict() for item in self.get_items()],
            'failed_items': len(self.failed_items()),
            'notes': self.notes,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
    
    def __repr__(self):
        return f'<Checklist {self.id} vehicle={self.vehicle_id}>'
