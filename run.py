import os
from frota import create_app, db
from frota.models import User, Vehicle, FuelStation


def create_initial_data(app):
    """Create initial data for the application"""
    with app.app_context():
        # Check if admin user already exists
        admin = User.query.filter_by(email='admin@frota.local').first()
        if not admin:
            admin = User(
                email='admin@frota.local',
                first_name='Admin',
                last_name='User',
                role='admin'
            )
            db.session.add(admin)
            db.session.commit()
            token = admin.issue_api_token()
            db.session.commit()
            print(f"Created admin user admin@frota.local, API token: {token}")
        
        # Check if sample station exists
        station = FuelStation.query.filter_by(name='Posto Central').first()
        if not station:
            station = FuelStation(name='Posto Central', city='São Paulo', is_active=True)
            db.session.add(station)
            db.session.commit()
            print("Created sample fuel station")
        
        vehicle = Vehicle.query.filter_by(plate='ABC1D23').first()
        if not vehicle:
            vehicle = Vehicle(plate='ABC1D23', model='Fiat Strada', qr_code='VEH-ABC1D23', is_active=True)
            db.session.add(vehicle)
            db.session.commit()
            print("Created sample vehicle ABC1D23")


if __name__ == '__main__':
    # Determine the environment
    env = os.getenv('FLASK_ENV', 'development')
    
    # Create the Flask app with appropriate configuration
    app = create_app(env)
    
    # Create initial data if tables are empty
    create_initial_data(app)
    
    print(f"Starting Frota API in {env} mode...")
    
    # Run the app
    if env == 'development':
        app.run(debug=True, host='0.0.0.0', port=5000)
    else:
        # In production, don't use Flask's development server
        print("Production mode - use a production WSGI server like Gunicorn")
        app.run(debug=False, host='0.0.0.0', port=5000)
