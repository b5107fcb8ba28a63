"""
Projects Public Routes
======================

Public-facing portfolio pages and API.
"""

from flask import Blueprint, render_template, jsonify, redirect, url_for, flash, request

from .filtering import filter_projects, clean_categories, whatsapp_quote_url, toggle_category
from ..projects.routes import (
    get_all_projects_db, get_project_db, init_projects_db, PROJECT_CATEGORIES
)
from ..settings.helpers import get_whatsapp_number
from ...core.config import get_config_value
from ...core.logging_service import LoggingService

projects_public_bp = Blueprint('projects', __name__, template_folder='templates')


@projects_public_bp.app_template_filter('whatsapp_url')
def whatsapp_url_filter(title, number=None):
    return whatsapp_quote_url(number if number is not None else get_whatsapp_number(''), title)


@projects_public_bp.app_template_global('toggle_category')
def toggle_category_global(selected, category):
    return toggle_category(selected, category)


def _filter_args():
    query = request.args.get('q', '')
    categories = clean_categories(request.args.getlist('category'))
    return query, categories


# ===== Routes =====

@projects_public_bp.route('/')
def portfolio():
    """Portfolio home - published projects, newest first."""
    init_projects_db()
    projects = get_all_projects_db(published=True)
    return render_template('projects_public/portfolio.html',
                           projects=projects,
                           whatsapp_number=get_whatsapp_number(''))


@projects_public_bp.route('/projects/')
def browse_projects():
    """Browse page with search and multi-select category filtering."""
    init_projects_db()
    query, categories = _filter_args()
    projects = get_all_projects_db(published=True, order='display')
    filtered = filter_projects(projects, query, categories)

    return render_template('projects_public/browse.html',
                           projects=filtered,
                           total=len(projects),
                           query=query,
                           selected_categories=categories,
                           categories=PROJECT_CATEGORIES,
                           whatsapp_number=get_whatsapp_number(''))


@projects_public_bp.route('/projects/<int:project_id>')
def project_detail(project_id):
    """Project detail page with the image carousel."""
    init_projects_db()
    project = get_project_db(project_id)

    if not project or not project.get('published'):
        LoggingService.warning('projects', f"Public request for unavailable project {project_id}")
        flash('Project not found', 'error')
        return redirect(url_for('projects.browse_projects'))

    whatsapp_number = get_whatsapp_number() or get_config_value('DEFAULT_WHATSAPP_NUMBER')

    return render_template('projects_public/project_detail.html',
                           project=project,
                           images=project['images'],
                           whatsapp_number=whatsapp_number,
                           quote_url=whatsapp_quote_url(whatsapp_number, project['title']))


# ===== API Routes =====

@projects_public_bp.route('/projects/api/projects', methods=['GET'])
def get_projects():
    """Published projects API - public endpoint, accepts q and category filters."""
    init_projects_db()
    query, categories = _filter_args()
    projects = get_all_projects_db(published=True, order='display')
    return jsonify(filter_projects(projects, query, categories))
