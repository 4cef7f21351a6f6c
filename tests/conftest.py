from types import SimpleNamespace

import pytest

from frota import create_app, db
from frota.models import User, Vehicle, FuelStation
from frota.offline.queue import LocalQueue
from fakes import FakeClient, FlaskTestSession


@pytest.fixture()
def app():
    app = create_app('testing')
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def seed(app):
    """Admin, two operators, one vehicle and one station, with API tokens."""
    with app.app_context():
        admin = User(email='admin@frota.local', first_name='Ana', last_name='Admin', role='admin')
        operator = User(email='op@frota.local', first_name='Otto', last_name='Operador')
        other = User(email='other@frota.local', first_name='Olga', last_name='Outra')
        vehicle = Vehicle(plate='ABC1D23', model='Fiat Strada', qr_code='VEH-ABC1D23')
        retired = Vehicle(plate='XYZ9A87', model='VW Gol', is_active=False)
        station = FuelStation(name='Posto Central', city='São Paulo')
        db.session.add_all([admin, operator, other, vehicle, retired, station])
        db.session.commit()

        data = SimpleNamespace(
            admin_id=admin.id,
            operator_id=operator.id,
            other_id=other.id,
            vehicle_id=vehicle.id,
            retired_vehicle_id=retired.id,
            station_id=station.id,
            admin_token=admin.issue_api_token(),
            operator_token=operator.issue_api_token(),
        )
        db.session.commit()
    return data


@pytest.fixture()
def auth_headers(seed):
    return {'Authorization': f'Bearer {seed.operator_token}'}


@pytest.fixture()
def admin_headers(seed):
    return {'Authorization': f'Bearer {seed.admin_token}'}


@pytest.fixture()
def queue(tmp_path):
    queue = LocalQueue(f"sqlite:///{tmp_path / 'offline_queue.db'}")
    yield queue
    queue.close()


@pytest.fixture()
def api_session(client):
    return FlaskTestSession(client)


@pytest.fixture()
def fake_client():
    return FakeClient()
