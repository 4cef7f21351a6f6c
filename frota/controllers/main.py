from flask import Blueprint, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from frota import db, limiter
from frota.utils.logging_config import get_logger

main_bp = Blueprint('main', __name__)
logger = get_logger(__name__)


@main_bp.route('/health')
@limiter.exempt
def health():
    """Liveness probe polled by the devices' connectivity monitor."""
    try:
        db.session.execute(text('SELECT 1'))
    except SQLAlchemyError as e:
        logger.error(f"Health check failed: {e}")
        return jsonify({'status': 'unavailable'}), 503
    return jsonify({'status': 'ok'})
