"""
Vitrine Core
============

Core utilities and shared functionality for Vitrine modules.
"""

from .config import Config, get_config_value
from .database import Database
from .logging_service import LoggingService, logger

__all__ = ['Config', 'get_config_value', 'Database', 'LoggingService', 'logger']
