"""
Projects Admin Module
=====================

Admin interface for the project catalog.
Plugs into the admin dashboard module.

Provides:
- Project creation, editing and deletion
- Draft/published toggle
- Multi-image upload with main-image ordering
- Category and technologies tagging
"""

from flask import Blueprint

projects_bp = Blueprint(
    'projects_admin',
    __name__,
    url_prefix='/admin/projects',
    template_folder='templates',
)

from . import routes

__all__ = ['projects_bp']
