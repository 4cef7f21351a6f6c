from frota import db
from frota.schemas import LITERS_DIGITS, TOTAL_VALUE_DIGITS
from frota.utils.helpers import utcnow


class Supply(db.Model):
    __tablename__ = 'supplies'
    
    id = db.Column(db.Integer, primary_key=True)
    vehicle_id = db.Column(db.Integer, db.ForeignKey('vehicles.id'), nullable=False, index=True)
    operator_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    station_id = db.Column(db.Integer, db.ForeignKey('fuel_stations.id'), nullable=False, index=True)
    fuel_type = db.Column(db.Enum('gasoline', 'diesel', 'ethanol', 'natural_gas', name='fuel_types'), nullable=False)
    liters = db.Column(db.Numeric(*LITERS_DIGITS), nullable=False)
    total_value = db.Column(db.Numeric(*TOTAL_VALUE_DIGITS), nullable=False)
    supplied_at = db.Column(db.DateTime, nullable=False, index=True)
    idempotency_key = db.Column(db.String(64), nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow)
    
    __table_args__ = (
        db.UniqueConstraint('operator_id', 'idempotency_key', name='uq_supplies_operator_idempotency_key'),
        db.CheckConstraint('liters > 0', name='ck_supplies_liters_positive'),
        db.CheckConstraint('total_value > 0', name='ck_supplies_total_value_positive'),
    )
    
    def to_dict(self):
        return {
            'id': self.id,
            'vehicle_id': self.vehicle_id,
            'vehicle_plate': self.vehicle.plate if self.vehicle else None,
            'operator_id': self.operator_id,
            'station_id': self.station_id,
            'station_name': self.station.name if self.station else None,
            'fuel_type': self.fuel_type,
            'liters': float(self.liters),
            'total_value': float(self.total_value),
            'supplied_at': self.supplied_at.isoformat(),
        }
    
    def __repr__(self):
        return f'<Supply {self.id} vehicle={self.vehicle_id} {self.liters}L>'
