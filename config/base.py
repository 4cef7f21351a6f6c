"""Base configuration for Frota application."""

import os


class Config:
    """Base configuration class."""
    
    # Security
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    
    # Database
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///frota.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'pool_recycle': 300,
    }
    
    # Request size (checklist payloads are small JSON documents)
    MAX_CONTENT_LENGTH = 1 * 1024 * 1024
    
    # Caching for pick lists (vehicles, stations)
    CACHE_TYPE = os.environ.get('CACHE_TYPE', 'SimpleCache')
    CACHE_DEFAULT_TIMEOUT = int(os.environ.get('CACHE_DEFAULT_TIMEOUT', 300))
    
    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_DIR = os.environ.get('LOG_DIR', 'logs')
    
    # Rate limiting
    RATELIMIT_ENABLED = True
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI', 'memory://')
    RATELIMIT_HEADERS_ENABLED = True
    SUBMISSION_RATE_LIMIT = os.environ.get('SUBMISSION_RATE_LIMIT', '120 per minute')
    
    # Device side: local queue and remote API
    OFFLINE_DATABASE_URL = os.environ.get('OFFLINE_DATABASE_URL', 'sqlite:///offline_queue.db')
    API_BASE_URL = os.environ.get('API_BASE_URL', 'http://localhost:5000')
    API_TOKEN = os.environ.get('API_TOKEN')
    API_TIMEOUT = float(os.environ.get('API_TIMEOUT', 15))
    
    # Device side: sync scheduling (seconds)
    SYNC_PROBE_INTERVAL = int(os.environ.get('SYNC_PROBE_INTERVAL', 30))
    SYNC_RETRY_INTERVAL = int(os.environ.get('SYNC_RETRY_INTERVAL', 300))
    SYNC_MAX_ATTEMPTS = int(os.environ.get('SYNC_MAX_ATTEMPTS', 10))
    SYNC_BACKOFF_BASE = int(os.environ.get('SYNC_BACKOFF_BASE', 30))
    SYNC_BACKOFF_MAX = int(os.environ.get('SYNC_BACKOFF_MAX', 3600))
