"""Testing configuration for Frota application."""

from .base import Config
import os


class TestingConfig(Config):
    """Testing configuration."""
    
    # Debug mode
    DEBUG = True
    TESTING = True
    
    # Database
    SQLALCHEMY_DATABASE_URI = os.environ.get('TEST_DATABASE_URL') or 'sqlite://'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    
    # Security
    SECRET_KEY = 'test-secret-key'
    
    # Caching
    CACHE_TYPE = 'NullCache'
    
    # Logging
    LOG_LEVEL = 'DEBUG'
    
    # Rate limiting
    RATELIMIT_ENABLED = False
    
    # Device side
    OFFLINE_DATABASE_URL = 'sqlite://'
    API_BASE_URL = 'http://frota.test'
    SYNC_BACKOFF_BASE = 0
