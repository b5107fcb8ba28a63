"""
Settings Helpers
================

Convenient functions for accessing settings throughout the application.
These automatically fall back to environment variables if settings aren't in the database.
"""

from ...core.config import get_config_value
from .database import get_setting


# ============================================
# Contact Settings
# ============================================

def get_whatsapp_number(default=None):
    """Get the WhatsApp number used for quote links"""
    return get_setting('WHATSAPP_NUMBER', default)


# ============================================
# Storage Settings (DigitalOcean Spaces)
# ============================================

def get_storage_type():
    """Get storage type (local or cloud)"""
    return get_setting('STORAGE_TYPE', 'local')


def is_cloud_storage():
    """Check if using cloud storage"""
    return get_storage_type() == 'cloud'


def get_do_spaces_config():
    """Get DigitalOcean Spaces configuration"""
    return {
        'region': get_setting('DO_SPACES_REGION'),
        'space_name': get_setting('DO_SPACES_NAME'),
        'access_key': get_setting('DO_SPACES_KEY'),
        'secret_key': get_setting('DO_SPACES_SECRET')
    }


# ============================================
# Site Settings
# ============================================

def get_brand_name():
    """Get brand/site name"""
    return get_setting('BRAND_NAME') or get_config_value('BRAND_NAME', 'Vitrine')
