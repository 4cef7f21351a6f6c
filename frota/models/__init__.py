from frota import db

# Import models after db is defined
from .user import User
from .vehicle import Vehicle
from .station import FuelStation
from .checklist import Checklist
from .supply import Supply

# Export models
__all__ = ['db', 'User', 'Vehicle', 'FuelStation', 'Checklist', 'Supply']
