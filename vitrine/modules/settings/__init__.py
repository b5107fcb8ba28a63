"""
Settings Module
===============

Provides admin UI for managing the WhatsApp contact number, storage and site settings.
Secret settings are encrypted at rest.
"""

from flask import Blueprint
import os

_template_dir = os.path.join(os.path.dirname(__file__), 'templates')

settings_bp = Blueprint('settings', __name__,
                        url_prefix='/admin/settings',
                        template_folder=_template_dir)

from . import routes

__all__ = ['settings_bp']
