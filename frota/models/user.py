from frota import db
from frota.utils.helpers import utcnow
from frota.utils.security import hash_secret, verify_secret, generate_token_secret
from flask_login import UserMixin


class User(db.Model, UserMixin):
    __tablename__ = 'users'
    
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    first_name = db.Column(db.String(50), nullable=False)
    last_name = db.Column(db.String(50), nullable=False)
    role = db.Column(db.Enum('operator', 'admin', name='user_roles'), nullable=False, default='operator')
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    api_token_hash = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)
    
    # Relationships
    checklists = db.relationship('Checklist', backref='operator', lazy=True)
    supplies = db.relationship('Supply', backref='operator', lazy=True)
    
    def issue_api_token(self):
        """Replace the user's API token and return it in ``<id>.<secret>`` form.

        Only the hash is stored, so the returned string is the one chance to
        hand it to the device. The user must already have an id.
        """
        secret = generate_token_secret()
        self.api_token_hash = hash_secret(secret)
        return f'{self.id}.{secret}'
    
    def check_api_token(self, secret):
        return verify_secret(secret, self.api_token_hash)
    
    def get_full_name(self):
        """Get user's full name"""
        return f"{self.first_name} {self.last_name}"
    
    @property
    def is_admin(self):
        return self.role == 'admin'
    
    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'name': self.get_full_name(),
            'role': self.role,
        }
    
    def __repr__(self):
        return f'<User {self.email}>'
