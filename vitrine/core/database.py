import os
import sqlite3


class Database:

    @staticmethod
    def connect(path):
        return sqlite3.connect(path)

    @staticmethod
    def ensure_dir(path):
        """Create the parent directory of a database file if needed."""
        db_dir = os.path.dirname(path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)
        return path

    @staticmethod
    def table_columns(conn, table):
        """Return the column names of *table* (empty list if it doesn't exist)."""
        cursor = conn.cursor()
        cursor.execute(f"PRAGMA table_info({table})")
        return [column[1] for column in cursor.fetchall()]

    @staticmethod
    def add_missing_columns(conn, table, new_columns):
        """
        Additive migration: add every (name, type) in *new_columns* that
        *table* doesn't have yet. Returns the names that were added.
        """
        existing = Database.table_columns(conn, table)
        cursor = conn.cursor()
        added = []
        for col_name, col_type in new_columns:
            if col_name not in existing:
                print(f"Adding {col_name} column to {table} table...")
                cursor.execute(f'ALTER TABLE {table} ADD COLUMN {col_name} {col_type}')
                added.append(col_name)
        return added
