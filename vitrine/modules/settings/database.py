"""
Settings Database with Encryption
=================================

Stores site settings with encryption for sensitive values.
Uses Fernet symmetric encryption (AES-128-CBC).
"""

import base64
import hashlib
import os
import re
from datetime import datetime

from cryptography.fernet import Fernet, InvalidToken

from ...core.config import get_config_value
from ...core.database import Database

WHATSAPP_PATTERN = re.compile(r'^\+?[1-9]\d{1,14}$')
WHATSAPP_MAX_LENGTH = 15


def get_settings_db_path():
    """Get settings database path"""
    return Database.ensure_dir(get_config_value('SETTINGS_DB', 'settings.db'))


def get_encryption_key():
    """
    Derive encryption key from Flask SECRET_KEY.
    Returns a Fernet-compatible key (32 bytes, base64 encoded).
    """
    try:
        from flask import current_app
        secret = current_app.config.get('SECRET_KEY') or 'default-insecure-key'
    except RuntimeError:
        # Outside of app context
        secret = os.environ.get('SECRET_KEY', os.environ.get('FLASK_SECRET_KEY', 'default-insecure-key'))

    key_bytes = hashlib.sha256(secret.encode()).digest()
    return base64.urlsafe_b64encode(key_bytes)


def encrypt_value(value):
    """Encrypt a value using Fernet"""
    if not value:
        return value
    return Fernet(get_encryption_key()).encrypt(value.encode()).decode()


def decrypt_value(encrypted_value):
    """Decrypt a value using Fernet"""
    if not encrypted_value:
        return encrypted_value
    try:
        return Fernet(get_encryption_key()).decrypt(encrypted_value.encode()).decode()
    except InvalidToken:
        # Stored before encryption was enabled, or under another SECRET_KEY
        return encrypted_value


def validate_whatsapp_number(value):
    """Normalise and validate a WhatsApp number in international format.

    Returns the trimmed number, raises ValueError with a user-facing message.
    """
    number = (value or '').strip()
    if not number:
        raise ValueError('WhatsApp number is required')
    if len(number) > WHATSAPP_MAX_LENGTH:
        raise ValueError('Phone number too long')
    if not WHATSAPP_PATTERN.match(number):
        raise ValueError('Invalid phone number format. Use international format (e.g., +1234567890)')
    return number


def init_settings_db():
    """Initialize settings database"""
    db_path = get_settings_db_path()

    with Database.connect(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS settings (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                category TEXT NOT NULL,
                key TEXT NOT NULL UNIQUE,
                value TEXT,
                is_secret BOOLEAN DEFAULT 0,
                description TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        ''')
        cursor.execute('CREATE INDEX IF NOT EXISTS idx_settings_category ON settings(category)')
        conn.commit()

    return db_path


def get_setting(key, default=None, decrypt=True):
    """
    Get a setting value by key.
    Falls back to environment variable if not in database.
    """
    try:
        db_path = get_settings_db_path()
        if not os.path.exists(db_path):
            return os.environ.get(key, default)

        with Database.connect(db_path) as conn:
            cursor = conn.cursor()
            cursor.execute('SELECT value, is_secret FROM settings WHERE key = ?', (key,))
            row = cursor.fetchone()

        if row:
            value, is_secret = row
            if is_secret and decrypt and value:
                value = decrypt_value(value)
            return value if value else default

        return os.environ.get(key, default)

    except Exception as e:
        print(f"Error getting setting {key}: {e}")
        return os.environ.get(key, default)


def set_setting(key, value, category='general', is_secret=False, description=None):
    """Set a setting value"""
    try:
        db_path = init_settings_db()
        stored_value = encrypt_value(value) if is_secret and value else value

        with Database.connect(db_path) as conn:
            cursor = conn.cursor()
            cursor.execute('''
                INSERT INTO settings (category, key, value, is_secret, description, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    category = excluded.category,
                    is_secret = excluded.is_secret,
                    description = COALESCE(excluded.description, settings.description),
                    updated_at = excluded.updated_at
            ''', (category, key, stored_value, is_secret, description, datetime.now().isoformat()))
            conn.commit()
        return True

    except Exception as e:
        print(f"Error setting {key}: {e}")
        return False


def delete_setting(key):
    """Delete a setting"""
    try:
        db_path = get_settings_db_path()
        if not os.path.exists(db_path):
            return False

        with Database.connect(db_path) as conn:
            cursor = conn.cursor()
            cursor.execute('DELETE FROM settings WHERE key = ?', (key,))
            conn.commit()
            return cursor.rowcount > 0

    except Exception as e:
        print(f"Error deleting setting {key}: {e}")
        return False


def _mask(value):
    # Show only last 4 characters
    if len(value) > 4:
        return '*' * (len(value) - 4) + value[-4:]
    return '****'


def get_all_settings(category=None, mask_secrets=True):
    """
    Get all settings, optionally filtered by category.
    Secrets are masked by default (show only last 4 chars).
    """
    try:
        db_path = get_settings_db_path()
        if not os.path.exists(db_path):
            return []

        with Database.connect(db_path) as conn:
            cursor = conn.cursor()
            if category:
                cursor.execute('''
                    SELECT id, category, key, value, is_secret, description, updated_at
                    FROM settings WHERE category = ? ORDER BY key
                ''', (category,))
            else:
                cursor.execute('''
                    SELECT id, category, key, value, is_secret, description, updated_at
                    FROM settings ORDER BY category, key
                ''')
            rows = cursor.fetchall()

        settings = []
        for setting_id, cat, key, value, is_secret, description, updated_at in rows:
            display_value = value
            if is_secret and value:
                decrypted = decrypt_value(value)
                display_value = _mask(decrypted) if mask_secrets and decrypted else decrypted

            settings.append({
                'id': setting_id,
                'category': cat,
                'key': key,
                'value': display_value,
                'is_secret': bool(is_secret),
                'description': description,
                'updated_at': updated_at
            })
        return settings

    except Exception as e:
        print(f"Error getting all settings: {e}")
        return []


def find_schema_entry(key):
    """Return (category_key, setting_dict) for a schema key, or (None, None)."""
    for category_key, category_data in SETTINGS_SCHEMA.items():
        for setting in category_data['settings']:
            if setting['key'] == key:
                return category_key, setting
    return None, None


# Define the standard settings schema
SETTINGS_SCHEMA = {
    'contact': {
        'label': 'Contact',
        'settings': [
            {'key': 'WHATSAPP_NUMBER', 'label': 'WhatsApp Number', 'type': 'tel', 'is_secret': False,
             'description': 'International format (e.g., +1234567890). Used for the "Get a Quote" buttons.'},
        ]
    },
    'storage': {
        'label': 'Storage (DigitalOcean Spaces)',
        'settings': [
            {'key': 'STORAGE_TYPE', 'label': 'Storage Type', 'type': 'select', 'options': ['local', 'cloud'], 'default': 'local', 'is_secret': False, 'description': 'Where to store uploaded images'},
            {'key': 'DO_SPACES_REGION', 'label': 'Region', 'type': 'text', 'is_secret': False, 'description': 'e.g., sfo3, nyc3'},
            {'key': 'DO_SPACES_NAME', 'label': 'Space Name', 'type': 'text', 'is_secret': False, 'description': 'Your space/bucket name'},
            {'key': 'DO_SPACES_KEY', 'label': 'Access Key ID', 'type': 'text', 'is_secret': False, 'description': 'Spaces access key'},
            {'key': 'DO_SPACES_SECRET', 'label': 'Secret Access Key', 'type': 'password', 'is_secret': True, 'description': 'Spaces secret key'},
        ]
    },
    'site': {
        'label': 'Site Settings',
        'settings': [
            {'key': 'BRAND_NAME', 'label': 'Brand Name', 'type': 'text', 'is_secret': False, 'description': 'Your site/brand name'},
        ]
    }
}
