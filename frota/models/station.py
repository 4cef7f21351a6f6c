from frota import db
from frota.utils.helpers import utcnow


class FuelStation(db.Model):
    __tablename__ = 'fuel_stations'
    
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    city = db.Column(db.String(50), nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)
    
    # Relationships
    supplies = db.relationship('Supply', backref='station', lazy=True)
    
    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'city': self.city}
    
    def __repr__(self):
        return f'<FuelStation {self.name}>'
