import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    """
    Base configuration for Vitrine.
    Deployments provide database paths and secrets via environment variables.
    """
    # Flask settings
    SECRET_KEY = os.getenv('FLASK_SECRET_KEY')

    # Get DB_DIR from environment, or use a default if not set
    DB_DIR = os.getenv('DB_DIR', os.path.join(os.getcwd(), 'databases'))

    # Database paths - use environment variables or fallback to DB_DIR
    PROJECTS_DB = os.getenv('PROJECTS_DB', os.path.join(DB_DIR, "projects.db"))
    USER_DB = os.getenv('USER_DB', os.path.join(DB_DIR, "users.db"))
    SETTINGS_DB = os.getenv('SETTINGS_DB', os.path.join(DB_DIR, "settings.db"))
    LOGS_DB = os.getenv('LOGS_DB', os.path.join(DB_DIR, "app_logs.db"))

    # Uploads
    SPACES_FOLDER = os.getenv('SPACES_FOLDER', 'uploads')
    MAX_IMAGE_BYTES = int(os.getenv('MAX_IMAGE_BYTES', str(5 * 1024 * 1024)))

    # Storefront
    BRAND_NAME = os.getenv('BRAND_NAME', 'Vitrine')
    DEFAULT_WHATSAPP_NUMBER = os.getenv('DEFAULT_WHATSAPP_NUMBER', '919137106851')


def get_config_value(key, default=None):
    """Get configuration value: Flask app config first, then Config, then env var"""
    try:
        from flask import current_app
        val = current_app.config.get(key)
        if val:
            return val
    except RuntimeError:
        pass
    val = getattr(Config, key, None)
    if val:
        return val
    return os.getenv(key, default)
