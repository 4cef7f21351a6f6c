from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_caching import Cache
from dotenv import load_dotenv

# Setup logging first
from frota.utils.logging_config import setup_logging
from frota.utils.error_handler import init_error_handlers

load_dotenv()

# Initialize extensions
db = SQLAlchemy()
login_manager = LoginManager()
limiter = Limiter(key_func=get_remote_address)
cache = Cache()


def create_app(config_name='default'):
    from config import get_config

    app = Flask(__name__)
    
    # Load configuration
    app.config.from_object(get_config(config_name))
    
    # Setup logging based on config
    setup_logging(app.config['LOG_LEVEL'], app.config['LOG_DIR'])
    
    # Initialize extensions with app
    db.init_app(app)
    login_manager.init_app(app)
    limiter.init_app(app)
    cache.init_app(app)
    
    # Bearer token loader for the JSON API
    from frota.utils.security import load_user_from_request, unauthorized
    login_manager.request_loader(load_user_from_request)
    login_manager.unauthorized_handler(unauthorized)
    
    # Initialize error handlers
    init_error_handlers(app)
    
    # Register blueprints
    from frota.controllers.main import main_bp
    from frota.controllers.checklists import checklists_bp
    from frota.controllers.supplies import supplies_bp
    from frota.controllers.fleet import fleet_bp
    from frota.controllers.reports import reports_bp
    
    app.register_blueprint(main_bp)
    app.register_blueprint(checklists_bp)
    app.register_blueprint(supplies_bp)
    app.register_blueprint(fleet_bp)
    app.register_blueprint(reports_bp)
    
    # Create tables
    with app.app_context():
        import frota.models  # noqa: F401
        db.create_all()
    
    return app
