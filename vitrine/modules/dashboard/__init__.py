"""
Dashboard Module
================

Admin dashboard interface for Vitrine.

Provides core admin functionality:
- Admin authentication (login/logout)
- Project list with publish/delete controls
- Admin user creation

This is the foundation module that other admin features plug into.
"""

from flask import Blueprint

# Note: Blueprint name is 'admin' so other modules can redirect to admin.login
dashboard_bp = Blueprint(
    'admin',
    __name__,
    url_prefix='/admin',
    template_folder='templates',
)

# Import routes after blueprint is created
from . import routes

__all__ = ['dashboard_bp']
