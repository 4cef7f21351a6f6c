"""Configuration lookup for Frota."""


def get_config(config_name='default'):
    """Return the configuration class registered under ``config_name``."""
    if config_name == 'development':
        from config.development import DevelopmentConfig
        return DevelopmentConfig
    elif config_name == 'production':
        from config.production import ProductionConfig
        return ProductionConfig
    elif config_name == 'testing':
        from config.testing import TestingConfig
        return TestingConfig
    else:
        from config.base import Config
        return Config
