"""
Centralized logging service for Vitrine.
Provides structured logging with database storage and easy integration.
"""

import json
import logging
import traceback
from datetime import datetime, timedelta
from flask import request, has_request_context
from .database import Database
from .config import get_config_value

_fallback = logging.getLogger('vitrine')


def _logs_db():
    return Database.ensure_dir(get_config_value('LOGS_DB'))


class LoggingService:
    """Centralized logging service for application-wide logging"""

    @staticmethod
    def _ensure_logs_table():
        """Ensure the app_logs table exists"""
        with Database.connect(_logs_db()) as conn:
            cursor = conn.cursor()
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS app_logs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    timestamp TEXT NOT NULL,
                    level TEXT NOT NULL,
                    source TEXT NOT NULL,
                    message TEXT NOT NULL,
                    details TEXT,
                    ip_address TEXT,
                    user_agent TEXT,
                    request_path TEXT,
                    user_id TEXT
                )
            """)
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_logs_timestamp
                ON app_logs(timestamp DESC)
            """)
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_logs_level
                ON app_logs(level)
            """)
            conn.commit()

    @staticmethod
    def _get_request_context():
        """Extract request context information"""
        if not has_request_context():
            return None, None, None

        ip_address = request.headers.get('X-Forwarded-For', request.remote_addr)
        if ip_address and ',' in ip_address:
            ip_address = ip_address.split(',')[0].strip()

        return ip_address, request.headers.get('User-Agent', ''), request.path

    @staticmethod
    def log(level, source, message, details=None, user_id=None):
        """
        Log a message to the database

        Args:
            level (str): Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            source (str): Source component (projects, settings, admin, etc.)
            message (str): Main log message
            details (str/dict): Additional details (will be JSON-encoded if dict)
            user_id (str): Optional user identifier
        """
        if isinstance(details, (dict, list)):
            details = json.dumps(details, indent=2, default=str)

        try:
            LoggingService._ensure_logs_table()
            ip_address, user_agent, request_path = LoggingService._get_request_context()

            with Database.connect(_logs_db()) as conn:
                cursor = conn.cursor()
                cursor.execute("""
                    INSERT INTO app_logs
                    (timestamp, level, source, message, details, ip_address, user_agent, request_path, user_id)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """, (
                    datetime.now().isoformat(), level.upper(), source, message, details,
                    ip_address, user_agent, request_path, user_id
                ))
                conn.commit()

        except Exception as e:
            # Fall back to the process logger if the database is unavailable
            _fallback.log(getattr(logging, level.upper(), logging.INFO), "[%s] %s", source, message)
            if details:
                _fallback.log(getattr(logging, level.upper(), logging.INFO), "Details: %s", details)
            _fallback.warning("Logging service error: %s", e)

    @staticmethod
    def debug(source, message, details=None, user_id=None):
        """Log debug message"""
        LoggingService.log('DEBUG', source, message, details, user_id)

    @staticmethod
    def info(source, message, details=None, user_id=None):
        """Log info message"""
        LoggingService.log('INFO', source, message, details, user_id)

    @staticmethod
    def warning(source, message, details=None, user_id=None):
        """Log warning message"""
        LoggingService.log('WARNING', source, message, details, user_id)

    @staticmethod
    def error(source, message, details=None, user_id=None):
        """Log error message"""
        LoggingService.log('ERROR', source, message, details, user_id)

    @staticmethod
    def critical(source, message, details=None, user_id=None):
        """Log critical message"""
        LoggingService.log('CRITICAL', source, message, details, user_id)

    @staticmethod
    def log_user_action(source, action, user_id=None, details=None):
        """Log admin actions (login, project created, image promoted, etc.)"""
        LoggingService.info(source, f"User action: {action}", details, user_id)

    @staticmethod
    def log_error_with_traceback(source, error, details=None):
        """Log error with full traceback"""
        error_details = {
            'error_type': type(error).__name__,
            'error_message': str(error),
            'traceback': traceback.format_exc()
        }
        if details:
            error_details['additional_details'] = details

        LoggingService.error(source, f"Exception occurred: {type(error).__name__}", error_details)

    @staticmethod
    def get_recent_logs(limit=50, level=None, source=None):
        """Return the most recent log rows as dicts, newest first."""
        LoggingService._ensure_logs_table()
        conditions = []
        params = []
        if level:
            conditions.append('level = ?')
            params.append(level.upper())
        if source:
            conditions.append('source = ?')
            params.append(source)
        where = f' WHERE {" AND ".join(conditions)}' if conditions else ''

        with Database.connect(_logs_db()) as conn:
            cursor = conn.cursor()
            cursor.execute(f"""
                SELECT timestamp, level, source, message, details, request_path, user_id
                FROM app_logs{where}
                ORDER BY id DESC
                LIMIT ?
            """, params + [limit])
            keys = ('timestamp', 'level', 'source', 'message', 'details', 'request_path', 'user_id')
            return [dict(zip(keys, row)) for row in cursor.fetchall()]

    @staticmethod
    def cleanup_old_logs(days_to_keep=30):
        """Clean up old log entries"""
        cutoff_iso = (datetime.now() - timedelta(days=days_to_keep)).isoformat()

        try:
            with Database.connect(_logs_db()) as conn:
                cursor = conn.cursor()
                cursor.execute("DELETE FROM app_logs WHERE timestamp < ?", (cutoff_iso,))
                deleted_count = cursor.rowcount
                conn.commit()

            LoggingService.info('system', f"Cleaned up {deleted_count} old log entries")
            return deleted_count

        except Exception as e:
            LoggingService.error('system', f"Failed to cleanup old logs: {e}")
            return 0


# Convenience instance for easy importing
logger = LoggingService()
