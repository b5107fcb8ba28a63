"""
Admin guards shared by every admin blueprint.
"""

from functools import wraps

from flask import jsonify, redirect, request, session, url_for


def admin_required(f):
    """Decorator to require admin login (page routes redirect to the login form)"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if 'admin_id' not in session:
            return redirect(url_for('admin.login', next=request.path))
        return f(*args, **kwargs)
    return decorated_function


def admin_api_required(f):
    """Decorator to require admin login (API routes answer 401 JSON)"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if 'admin_id' not in session:
            return jsonify({'error': 'Authentication required'}), 401
        return f(*args, **kwargs)
    return decorated_function
