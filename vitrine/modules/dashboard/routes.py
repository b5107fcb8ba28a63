"""
Admin Dashboard Routes
======================

Admin authentication and the dashboard listing every project.
"""

from datetime import datetime
import sqlite3

from flask import current_app, render_template, request, redirect, url_for, flash, session, jsonify
from werkzeug.security import check_password_hash, generate_password_hash

from . import dashboard_bp
from ..projects.routes import get_all_projects_db, init_projects_db
from ...core.auth import admin_required
from ...core.config import get_config_value
from ...core.database import Database
from ...core.logging_service import LoggingService

MIN_PASSWORD_LENGTH = 6


def _user_db():
    return Database.ensure_dir(get_config_value('USER_DB', 'users.db'))


def init_admin_table():
    """Initialize admin table if it doesn't exist"""
    with Database.connect(_user_db()) as conn:
        cursor = conn.cursor()
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS admin (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                email TEXT UNIQUE NOT NULL,
                password_hash TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        ''')
        conn.commit()


def count_admins():
    init_admin_table()
    with Database.connect(_user_db()) as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT COUNT(*) FROM admin")
        return cursor.fetchone()[0]


def create_admin_db(email, password):
    """Insert an admin. Raises sqlite3.IntegrityError when the email exists."""
    init_admin_table()
    with Database.connect(_user_db()) as conn:
        cursor = conn.cursor()
        cursor.execute("INSERT INTO admin (email, password_hash) VALUES (?, ?)",
                       (email.strip().lower(), generate_password_hash(password)))
        conn.commit()
        return cursor.lastrowid


def authenticate_admin(email, password):
    """Return (id, email) for valid credentials, otherwise None."""
    init_admin_table()
    with Database.connect(_user_db()) as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT id, email, password_hash FROM admin WHERE email = ?",
                       (email.strip().lower(),))
        row = cursor.fetchone()

    if row and check_password_hash(row[2], password):
        return row[0], row[1]
    return None


@dashboard_bp.route('/login', methods=['GET', 'POST'])
def login():
    """Admin login route"""
    if request.method == 'POST':
        email = request.form.get('email', '').strip().lower()
        password = request.form.get('password', '')

        if not email or not password:
            flash('Please enter both email and password', 'error')
            return render_template('dashboard/login.html'), 400

        try:
            admin = authenticate_admin(email, password)
        except Exception as e:
            LoggingService.log_error_with_traceback('admin', e)
            flash('Login error, please try again', 'error')
            return render_template('dashboard/login.html'), 500

        if admin:
            session['admin_id'] = admin[0]
            session['admin_email'] = admin[1]
            LoggingService.log_user_action('admin', 'login', user_id=admin[1])
            flash('Login successful', 'success')
            next_page = request.args.get('next')
            # Only follow local redirects
            if not next_page or not next_page.startswith('/') or next_page.startswith('//'):
                next_page = url_for('admin.dashboard')
            return redirect(next_page)

        LoggingService.warning('admin', 'Failed admin login', {'email': email})
        flash('Invalid email or password', 'error')
        return render_template('dashboard/login.html'), 401

    return render_template('dashboard/login.html')


@dashboard_bp.route('/logout')
def logout():
    """Admin logout route"""
    admin_email = session.pop('admin_email', None)
    session.pop('admin_id', None)
    if admin_email:
        LoggingService.log_user_action('admin', 'logout', user_id=admin_email)
    flash('You have been logged out', 'info')
    return redirect(url_for('admin.login'))


@dashboard_bp.route('/')
@dashboard_bp.route('/dashboard')
@admin_required
def dashboard():
    """Admin dashboard - every project, newest first"""
    init_projects_db()
    projects = get_all_projects_db()
    return render_template('dashboard/dashboard.html', projects=projects)


@dashboard_bp.route('/create-admin', methods=['GET', 'POST'])
def create_admin():
    """Create new admin (only accessible by existing admin or if no admins exist)"""
    if count_admins() > 0 and 'admin_id' not in session:
        return redirect(url_for('admin.login'))

    if request.method == 'POST':
        email = request.form.get('email', '').strip().lower()
        password = request.form.get('password', '')
        confirm_password = request.form.get('confirm_password', '')

        if not all([email, password, confirm_password]):
            flash('All fields are required', 'error')
            return render_template('dashboard/create_admin.html'), 400

        if password != confirm_password:
            flash('Passwords do not match', 'error')
            return render_template('dashboard/create_admin.html'), 400

        if len(password) < MIN_PASSWORD_LENGTH:
            flash(f'Password must be at least {MIN_PASSWORD_LENGTH} characters long', 'error')
            return render_template('dashboard/create_admin.html'), 400

        try:
            create_admin_db(email, password)
        except sqlite3.IntegrityError:
            flash('An admin with this email already exists', 'error')
            return render_template('dashboard/create_admin.html'), 400

        LoggingService.log_user_action('admin', f'created admin {email}',
                                       user_id=session.get('admin_email'))
        flash(f'Admin {email} created successfully', 'success')
        return redirect(url_for('admin.dashboard') if 'admin_id' in session else url_for('admin.login'))

    return render_template('dashboard/create_admin.html')


@dashboard_bp.route('/status')
def status():
    """Check admin login status (API endpoint)"""
    if 'admin_id' in session:
        return jsonify({
            'logged_in': True,
            'admin_email': session.get('admin_email')
        })
    return jsonify({'logged_in': False}), 401


@dashboard_bp.context_processor
def utility_processor():
    """Add utility functions to template context"""
    def endpoint_exists(endpoint):
        """Check if a Flask endpoint is registered (modules can be switched off)"""
        return endpoint in current_app.view_functions

    def current_year():
        return datetime.now().year

    return dict(endpoint_exists=endpoint_exists, current_year=current_year)
