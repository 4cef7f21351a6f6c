from flask import Blueprint, jsonify
from flask_login import login_required

from frota import cache
from frota.models import Vehicle, FuelStation
from frota.utils.error_handler import error_handler, NotFoundError

fleet_bp = Blueprint('fleet', __name__, url_prefix='/api')


@fleet_bp.route('/vehicles')
@login_required
@cache.cached(key_prefix='active_vehicles')
def list_vehicles():
    vehicles = Vehicle.query.filter_by(is_active=True).order_by(Vehicle.plate).all()
    return jsonify({'vehicles': [vehicle.to_dict() for vehicle in vehicles]})


@fleet_bp.route('/vehicles/qr/<code>')
@login_required
@error_handler
def vehicle_by_qr_code(code):
    """Resolve the QR code stuck on a vehicle to the vehicle record."""
    vehicle = Vehicle.query.filter_by(qr_code=code.strip(), is_active=True).first()
    if vehicle is None:
        raise NotFoundError('Vehicle not found')
    return jsonify(vehicle.to_dict())


@fleet_bp.route('/stations')
@login_required
@cache.cached(key_prefix='active_stations')
def list_stations():
    stations = FuelStation.query.filter_by(is_active=True).order_by(FuelStation.name).all()
    return jsonify({'stations': [station.to_dict() for station in stations]})
