"""Logging configuration for Frota application."""

import logging
import logging.config
import os
from pythonjsonlogger import jsonlogger


def setup_logging(log_level='INFO', log_dir='logs'):
    """Set up logging configuration for the application."""
    
    # Create logs directory if it doesn't exist
    os.makedirs(log_dir, exist_ok=True)
    
    # Fields carried by the JSON audit logs
    audit_format = '%(asctime)s %(name)s %(levelname)s %(message)s %(event_type)s %(user_id)s'
    sync_format = '%(asctime)s %(name)s %(levelname)s %(message)s %(kind)s %(local_key)s %(trigger)s'
    
    # Configure logging
    logging_config = {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'standard': {
                'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
            },
            'detailed': {
                'format': '%(asctime)s [%(levelname)s] %(name)s %(funcName)s %(lineno)d: %(message)s'
            },
            'json': {
                '()': jsonlogger.JsonFormatter,
                'format': audit_format
            },
            'sync_json': {
                '()': jsonlogger.JsonFormatter,
                'format': sync_format
            }
        },
        'handlers': {
            'default': {
                'level': log_level,
                'formatter': 'standard',
                'class': 'logging.StreamHandler',
                'stream': 'ext://sys.stdout'
            },
            'file': {
                'level': log_level,
                'formatter': 'detailed',
                'class': 'logging.handlers.RotatingFileHandler',
                'filename': os.path.join(log_dir, 'app.log'),
                'maxBytes': 10485760,  # 10MB
                'backupCount': 5
            },
            'security_file': {
                'level': 'INFO',
                'formatter': 'json',
                'class': 'logging.handlers.RotatingFileHandler',
                'filename': os.path.join(log_dir, 'security.log'),
                'maxBytes': 10485760,  # 10MB
                'backupCount': 5
            },
            'sync_file': {
                'level': 'DEBUG',
                'formatter': 'sync_json',
                'class': 'logging.handlers.RotatingFileHandler',
                'filename': os.path.join(log_dir, 'sync.log'),
                'maxBytes': 10485760,  # 10MB
                'backupCount': 5
            },
            'error_file': {
                'level': 'ERROR',
                'formatter': 'detailed',
                'class': 'logging.handlers.RotatingFileHandler',
                'filename': os.path.join(log_dir, 'error.log'),
                'maxBytes': 10485760,  # 10MB
                'backupCount': 5
            }
        },
        'loggers': {
            '': {  # root logger
                'handlers': ['default', 'file'],
                'level': log_level,
                'propagate': False
            },
            'frota.security': {
                'handlers': ['security_file'],
                'level': 'INFO',
                'propagate': False
            },
            'frota.sync': {
                'handlers': ['sync_file', 'default', 'file'],
                'level': log_level,
                'propagate': False
            },
            'frota.errors': {
                'handlers': ['error_file', 'default'],
                'level': 'ERROR',
                'propagate': False
            }
        }
    }
    
    logging.config.dictConfig(logging_config)
    
    # Set specific log levels for third-party libraries
    logging.getLogger('werkzeug').setLevel(logging.WARNING)
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('apscheduler').setLevel(logging.WARNING)


def get_logger(name):
    """Get a logger instance with the specified name."""
    return logging.getLogger(name)


def log_security_event(event_type, user_id=None, ip_address=None, details=None):
    """Log a security-related event."""
    logger = get_logger('frota.security')
    logger.info(
        "Security event",
        extra={
            'event_type': event_type,
            'user_id': user_id,
            'ip_address': ip_address,
            'details': details
        }
    )
