"""
Vitrine Modules
===============

Flask blueprint modules registered by the Vitrine extension.
"""

__all__ = ['dashboard', 'projects', 'projects_public', 'settings']
