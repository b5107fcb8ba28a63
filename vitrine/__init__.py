"""
Vitrine - A Flask Portfolio Storefront
======================================

A project catalog with:
- Public portfolio, browse page (search + category filters) and detail pages
- Admin dashboard with login, project editing and multi-image management
- Encrypted site settings (WhatsApp contact number, storage credentials)

Usage:
    from flask import Flask
    from vitrine import Vitrine

    app = Flask(__name__)
    Vitrine(app, {'brand_name': 'My Portfolio'})
"""

import os

from .core.config import Config

__version__ = '0.1.0'

DEFAULT_FEATURES = {
    'dashboard': True,
    'settings': True,
    'projects': True,
    'projects_public': True,
}

# App config keys that default to a file inside DB_DIR
_DB_FILES = {
    'PROJECTS_DB': 'projects.db',
    'USER_DB': 'users.db',
    'SETTINGS_DB': 'settings.db',
    'LOGS_DB': 'app_logs.db',
}


class Vitrine:
    """Flask extension that wires the Vitrine modules into an app."""

    def __init__(self, app=None, config=None):
        self._config = {}
        self._registered = []
        if app is not None:
            self.init_app(app, config)

    def init_app(self, app, config=None):
        self._config = self._merge_config(config or {})

        # Flask's default config already holds SECRET_KEY = None
        if not app.config.get('SECRET_KEY'):
            app.config['SECRET_KEY'] = Config.SECRET_KEY
        app.config.setdefault('DB_DIR', Config.DB_DIR)
        app.config.setdefault('SPACES_FOLDER', Config.SPACES_FOLDER)
        app.config.setdefault('MAX_IMAGE_BYTES', Config.MAX_IMAGE_BYTES)
        app.config.setdefault('DEFAULT_WHATSAPP_NUMBER', Config.DEFAULT_WHATSAPP_NUMBER)
        for key, filename in _DB_FILES.items():
            app.config.setdefault(key, os.path.join(app.config['DB_DIR'], filename))

        self._setup_database_dir(app)
        self._register_modules(app)
        self._setup_context_processor(app)

        app.extensions['vitrine'] = self

    def _merge_config(self, config):
        merged = {
            'brand_name': None,
            'features': dict(DEFAULT_FEATURES),
        }
        for key, value in config.items():
            if key == 'features':
                merged['features'].update(value or {})
            else:
                merged[key] = value
        return merged

    def _setup_database_dir(self, app):
        os.makedirs(app.config['DB_DIR'], exist_ok=True)

    def _register_modules(self, app):
        features = self._config['features']

        if features.get('dashboard'):
            from .modules.dashboard import dashboard_bp
            app.register_blueprint(dashboard_bp)
            self._registered.append('dashboard')

        if features.get('settings'):
            from .modules.settings import settings_bp
            app.register_blueprint(settings_bp)
            self._registered.append('settings')

        if features.get('projects'):
            from .modules.projects import projects_bp
            app.register_blueprint(projects_bp)
            self._registered.append('projects')

        if features.get('projects_public'):
            from .modules.projects_public import projects_public_bp
            app.register_blueprint(projects_public_bp)
            self._registered.append('projects_public')

    def _setup_context_processor(self, app):
        extension = self

        @app.context_processor
        def inject_vitrine():
            from .modules.settings.helpers import get_brand_name
            brand_name = extension._config.get('brand_name') or get_brand_name()
            return {
                'vitrine_config': dict(extension._config),
                'brand_name': brand_name,
            }

    def get_registered_modules(self):
        return list(self._registered)

    @property
    def config(self):
        return self._config


__all__ = ['Vitrine']
