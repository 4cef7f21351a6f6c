from frota import db
from frota.utils.helpers import utcnow


class Vehicle(db.Model):
    __tablename__ = 'vehicles'
    
    id = db.Column(db.Integer, primary_key=True)
    plate = db.Column(db.String(10), unique=True, nullable=False, index=True)
    model = db.Column(db.String(100), nullable=False)
    qr_code = db.Column(db.String(64), unique=True, nullable=True, index=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)
    
    # Relationships
    checklists = db.relationship('Checklist', backref='vehicle', lazy=True, cascade='all, delete-orphan')
    supplies = db.relationship('Supply', backref='vehicle', lazy=True, cascade='all, delete-orphan')
    
    def to_dict(self):
        return {
            'id': self.id,
            'plate': self.plate,
            'model': self.model,
        }
    
    def __repr__(self):
        return f'<Vehicle {self.plate}>'
