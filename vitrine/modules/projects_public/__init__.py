"""
Projects Public Module
======================

Portfolio home, browse page with search/category filters, and project detail pages.
"""

from .routes import projects_public_bp

__all__ = ['projects_public_bp']
