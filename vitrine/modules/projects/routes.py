"""
Projects Admin Routes
=====================

Project catalog management.
- `published`: controls public visibility
- `image_urls` / `image_url`: ordered images and the legacy main-image column,
  always written together from an ImageSet
"""

from flask import render_template, request, redirect, url_for, session, jsonify
from . import projects_bp
from .exceptions import OutOfRange, TransferFailed, UploadRejected
from .image_set import ImageSet
from .uploads import ImageUploader, DEFAULT_MAX_BYTES
from ...core.auth import admin_required, admin_api_required
from ...core.config import get_config_value
from ...core.database import Database
from ...core.logging_service import LoggingService
import json

PROJECT_CATEGORIES = [
    "Web Development",
    "Mobile App",
    "Machine Learning",
    "Data Science",
    "AI/ML",
    "Blockchain",
    "Game Development",
    "Desktop Application",
    "DevOps/Cloud",
    "Cybersecurity",
    "IoT",
    "E-commerce",
    "Other",
]
DEFAULT_CATEGORY = "Web Development"

TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500

# ===== Database Helper Functions =====

def get_db_config():
    """Get database configuration"""
    return get_config_value('PROJECTS_DB', 'projects.db')

def init_projects_db():
    """Initialize projects database with migrations"""
    projects_db = Database.ensure_dir(get_db_config())

    try:
        with Database.connect(projects_db) as conn:
            cursor = conn.cursor()

            cursor.execute('''
                CREATE TABLE IF NOT EXISTS projects (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    description TEXT NOT NULL,
                    technologies TEXT NOT NULL DEFAULT '[]',
                    image_url TEXT,
                    published BOOLEAN NOT NULL DEFAULT 0,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            ''')

            # Migration: add missing columns
            Database.add_missing_columns(conn, 'projects', [
                ('category', 'TEXT'),
                ('image_urls', "TEXT DEFAULT '[]'"),
                ('display_order', 'INTEGER DEFAULT 0'),
            ])

            _backfill_image_urls(cursor)

            cursor.execute('CREATE INDEX IF NOT EXISTS idx_projects_published ON projects(published)')
            cursor.execute('CREATE INDEX IF NOT EXISTS idx_projects_display_order ON projects(display_order)')

            conn.commit()

    except Exception as e:
        LoggingService.error('projects', f"Error initializing projects database: {e}")
        raise


def _backfill_image_urls(cursor):
    """Copy the legacy single image into image_urls for rows that have none."""
    cursor.execute('''
        SELECT id, image_url FROM projects
        WHERE (image_urls IS NULL OR image_urls = '' OR image_urls = '[]')
          AND image_url IS NOT NULL AND TRIM(image_url) != ''
    ''')
    rows = cursor.fetchall()
    for project_id, image_url in rows:
        cursor.execute('UPDATE projects SET image_urls = ? WHERE id = ?',
                       (json.dumps([image_url]), project_id))
    if rows:
        print(f"Migrated {len(rows)} project image(s) to image_urls")


_SELECT_COLS = '''id, title, description, technologies, category, image_url, image_urls,
                  published, display_order, created_at, updated_at'''

def _decode_list(value):
    if not value:
        return []
    try:
        parsed = json.loads(value)
    except (json.JSONDecodeError, TypeError):
        return []
    return [item for item in parsed if isinstance(item, str)] if isinstance(parsed, list) else []

def _row_to_dict(row):
    """Convert a DB row to a project dict"""
    d = {
        'id': row[0], 'title': row[1], 'description': row[2],
        'technologies': _decode_list(row[3]),
        'category': row[4] or DEFAULT_CATEGORY,
        'image_url': row[5],
        'image_urls': _decode_list(row[6]),
        'published': bool(row[7]),
        'display_order': row[8] or 0,
        'created_at': row[9], 'updated_at': row[10],
    }
    d['images'] = ImageSet.load({'image_url': row[5], 'image_urls': row[6]}).images
    return d

def get_all_projects_db(published=None, order='recent'):
    """Get all projects.
    published: True/False to filter on visibility, None for all
    order: 'recent' (newest first) or 'display' (display_order, then newest)
    """
    try:
        with Database.connect(get_db_config()) as conn:
            cursor = conn.cursor()

            where = ''
            params = []
            if published is not None:
                where = ' WHERE published = ?'
                params.append(1 if published else 0)

            if order == 'display':
                order_by = 'display_order ASC, created_at DESC, id DESC'
            else:
                order_by = 'created_at DESC, id DESC'

            cursor.execute(f'''
                SELECT {_SELECT_COLS}
                FROM projects{where}
                ORDER BY {order_by}
            ''', params)

            return [_row_to_dict(row) for row in cursor.fetchall()]
    except Exception as e:
        LoggingService.error('projects', f"Error getting projects: {e}")
        return []

def get_project_db(project_id):
    """Get single project by ID"""
    try:
        with Database.connect(get_db_config()) as conn:
            cursor = conn.cursor()
            cursor.execute(f'SELECT {_SELECT_COLS} FROM projects WHERE id = ?', (project_id,))
            row = cursor.fetchone()
            return _row_to_dict(row) if row else None
    except Exception as e:
        LoggingService.error('projects', f"Error getting project {project_id}: {e}")
        return None

def create_project_db(title, description, technologies, category=DEFAULT_CATEGORY,
                      images=None, published=False, display_order=0):
    """Create new project in database. Returns the new id."""
    persisted = (images or ImageSet()).to_persisted()

    with Database.connect(get_db_config()) as conn:
        cursor = conn.cursor()
        cursor.execute('''
            INSERT INTO projects (title, description, technologies, category,
                image_url, image_urls, published, display_order)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        ''', (title, description, json.dumps(technologies), category,
              persisted['image_url'], json.dumps(persisted['image_urls']),
              1 if published else 0, display_order))
        conn.commit()
        return cursor.lastrowid

def update_project_db(project_id, title, description, technologies, category=DEFAULT_CATEGORY,
                      images=None, published=False, display_order=0):
    """Update existing project. Returns False when the project doesn't exist."""
    persisted = (images or ImageSet()).to_persisted()

    with Database.connect(get_db_config()) as conn:
        cursor = conn.cursor()
        cursor.execute('''
            UPDATE projects
            SET title = ?, description = ?, technologies = ?, category = ?,
                image_url = ?, image_urls = ?, published = ?, display_order = ?,
                updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
        ''', (title, description, json.dumps(technologies), category,
              persisted['image_url'], json.dumps(persisted['image_urls']),
              1 if published else 0, display_order, project_id))
        conn.commit()
        return cursor.rowcount > 0

def save_project_images_db(project_id, images):
    """Write both image columns from an ImageSet (never one without the other)."""
    persisted = images.to_persisted()

    with Database.connect(get_db_config()) as conn:
        cursor = conn.cursor()
        cursor.execute('''
            UPDATE projects
            SET image_url = ?, image_urls = ?, updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
        ''', (persisted['image_url'], json.dumps(persisted['image_urls']), project_id))
        conn.commit()
        return cursor.rowcount > 0

def delete_project_db(project_id):
    """Delete project from database"""
    with Database.connect(get_db_config()) as conn:
        cursor = conn.cursor()
        cursor.execute('DELETE FROM projects WHERE id = ?', (project_id,))
        conn.commit()
        return cursor.rowcount > 0

def toggle_publish_db(project_id):
    """Flip published. Returns the new value, or None when the project doesn't exist."""
    with Database.connect(get_db_config()) as conn:
        cursor = conn.cursor()
        cursor.execute('SELECT published FROM projects WHERE id = ?', (project_id,))
        result = cursor.fetchone()
        if not result:
            return None

        new_value = not bool(result[0])
        cursor.execute('''
            UPDATE projects SET published = ?, updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
        ''', (1 if new_value else 0, project_id))
        conn.commit()
        return new_value


# ===== Payload Validation =====

def parse_technologies(value):
    """Accept a list or a comma-separated string; return trimmed, non-empty names."""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(',')
    if not isinstance(value, (list, tuple)):
        raise ValueError('Technologies must be a list or a comma-separated string')
    return [t.strip() for t in value if isinstance(t, str) and t.strip()]

def _text_field(data, key):
    """Trimmed string value of *key*; '' when missing, None when not a string."""
    value = data.get(key)
    if value is None:
        return ''
    if not isinstance(value, str):
        return None
    return value.strip()

def _parse_bool(value):
    if isinstance(value, str):
        return value.strip().lower() in ('1', 'true', 'on', 'yes')
    return bool(value)

def validate_project_payload(data):
    """Validate a create/update body.

    Returns (fields, None) on success or (None, error_message).
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        return None, 'Invalid request body'

    title = _text_field(data, 'title')
    if title is None:
        return None, 'Title must be text'
    if not title:
        return None, 'Title is required'
    if len(title) > TITLE_MAX_LENGTH:
        return None, 'Title too long'

    description = _text_field(data, 'description')
    if description is None:
        return None, 'Description must be text'
    if not description:
        return None, 'Description is required'
    if len(description) > DESCRIPTION_MAX_LENGTH:
        return None, 'Description too long'

    try:
        technologies = parse_technologies(data.get('technologies'))
    except ValueError as e:
        return None, str(e)
    if not technologies:
        return None, 'Technologies are required'

    category = _text_field(data, 'category')
    if category is None:
        return None, 'Category must be text'
    category = category or DEFAULT_CATEGORY
    if category not in PROJECT_CATEGORIES:
        return None, f'Category must be one of: {", ".join(PROJECT_CATEGORIES)}'

    display_order = data.get('display_order') or 0
    try:
        display_order = int(display_order)
    except (ValueError, TypeError):
        return None, 'Display order must be a number'

    images = ImageSet.load({
        'image_url': data.get('image_url'),
        'image_urls': data.get('image_urls'),
    })

    return {
        'title': title,
        'description': description,
        'technologies': technologies,
        'category': category,
        'images': images,
        'published': _parse_bool(data.get('published', False)),
        'display_order': display_order,
    }, None


def _uploader():
    return ImageUploader(max_bytes=int(get_config_value('MAX_IMAGE_BYTES', DEFAULT_MAX_BYTES)))


def _image_response(project_id, images, **extra):
    payload = {'success': True, 'id': project_id}
    payload.update(images.to_persisted())
    payload.update(extra)
    return jsonify(payload)


# ===== Routes =====

@projects_bp.route('/')
@admin_required
def projects_index():
    """Project management lives on the dashboard"""
    return redirect(url_for('admin.dashboard'))

@projects_bp.route('/new')
@admin_required
def new_project():
    """Project form - create"""
    init_projects_db()
    return render_template('projects/project_form.html', project=None,
                           categories=PROJECT_CATEGORIES)

@projects_bp.route('/<int:project_id>/edit')
@admin_required
def edit_project(project_id):
    """Project form - edit"""
    init_projects_db()
    project = get_project_db(project_id)
    if not project:
        return redirect(url_for('admin.dashboard'))
    return render_template('projects/project_form.html', project=project,
                           categories=PROJECT_CATEGORIES)

@projects_bp.route('/api/projects', methods=['GET'])
@admin_api_required
def get_projects():
    """Get all projects, newest first"""
    try:
        init_projects_db()
        return jsonify(get_all_projects_db())
    except Exception as e:
        LoggingService.log_error_with_traceback('projects', e)
        return jsonify({'error': str(e)}), 500

@projects_bp.route('/api/projects/<int:project_id>', methods=['GET'])
@admin_api_required
def get_project(project_id):
    """Get single project"""
    init_projects_db()
    project = get_project_db(project_id)
    if project:
        return jsonify(project)
    return jsonify({'error': 'Project not found'}), 404

@projects_bp.route('/api/projects', methods=['POST'])
@admin_api_required
def create_project():
    """Create new project"""
    fields, error = validate_project_payload(request.get_json(silent=True))
    if error:
        return jsonify({'error': error}), 400

    try:
        init_projects_db()
        project_id = create_project_db(**fields)
        LoggingService.log_user_action('projects', f'created project {project_id}',
                                       user_id=session.get('admin_email'))

        return jsonify({
            'success': True,
            'id': project_id,
            'published': fields['published'],
            **fields['images'].to_persisted(),
        })
    except Exception as e:
        LoggingService.log_error_with_traceback('projects', e)
        return jsonify({'error': 'Failed to create project.'}), 500

@projects_bp.route('/api/projects/<int:project_id>', methods=['PUT'])
@admin_api_required
def update_project(project_id):
    """Update project (full replace, both image columns included)"""
    fields, error = validate_project_payload(request.get_json(silent=True))
    if error:
        return jsonify({'error': error}), 400

    try:
        init_projects_db()
        if update_project_db(project_id, **fields):
            LoggingService.log_user_action('projects', f'updated project {project_id}',
                                           user_id=session.get('admin_email'))
            return jsonify({'success': True, 'message': 'Project updated successfully'})
        return jsonify({'error': 'Project not found'}), 404
    except Exception as e:
        LoggingService.log_error_with_traceback('projects', e)
        return jsonify({'error': 'Failed to update project.'}), 500

@projects_bp.route('/api/projects/<int:project_id>', methods=['DELETE'])
@admin_api_required
def delete_project(project_id):
    """Delete project"""
    try:
        init_projects_db()
        if delete_project_db(project_id):
            LoggingService.log_user_action('projects', f'deleted project {project_id}',
                                           user_id=session.get('admin_email'))
            return jsonify({'success': True})
        return jsonify({'error': 'Project not found'}), 404
    except Exception as e:
        LoggingService.log_error_with_traceback('projects', e)
        return jsonify({'error': 'Failed to delete project.'}), 500

@projects_bp.route('/api/projects/<int:project_id>/toggle-publish', methods=['POST'])
@admin_api_required
def toggle_publish(project_id):
    """Toggle published"""
    try:
        init_projects_db()
        new_value = toggle_publish_db(project_id)
        if new_value is None:
            return jsonify({'error': 'Project not found'}), 404
        return jsonify({'success': True, 'published': new_value})
    except Exception as e:
        LoggingService.log_error_with_traceback('projects', e)
        return jsonify({'error': str(e)}), 500


# ===== Image Routes =====

@projects_bp.route('/upload-images', methods=['POST'])
@admin_api_required
def upload_images():
    """Upload a batch of images for the project form (all or nothing)"""
    files = request.files.getlist('images')
    if not files:
        return jsonify({'error': 'No image file provided'}), 400

    images = ImageSet()
    try:
        refs = images.append_uploads(files, _uploader())
        return jsonify({'success': True, 'image_urls': refs})
    except UploadRejected as e:
        LoggingService.warning('projects', f"Upload rejected: {e}")
        return jsonify({'error': e.reason, 'filename': e.filename}), 400
    except TransferFailed as e:
        LoggingService.error('projects', f"Upload failed: {e}")
        return jsonify({'error': 'Failed to upload image', 'filename': e.filename}), 500

@projects_bp.route('/api/projects/<int:project_id>/images', methods=['POST'])
@admin_api_required
def add_project_images(project_id):
    """Upload images and append them to a project's list"""
    files = request.files.getlist('images')
    if not files:
        return jsonify({'error': 'No image file provided'}), 400

    init_projects_db()
    project = get_project_db(project_id)
    if not project:
        return jsonify({'error': 'Project not found'}), 404

    images = ImageSet(project['images'])
    uploader = _uploader()
    try:
        refs = images.append_uploads(files, uploader)
    except UploadRejected as e:
        LoggingService.warning('projects', f"Upload rejected: {e}")
        return jsonify({'error': e.reason, 'filename': e.filename}), 400
    except TransferFailed as e:
        LoggingService.error('projects', f"Upload failed for project {project_id}: {e}")
        return jsonify({'error': 'Failed to upload image', 'filename': e.filename}), 500

    try:
        save_project_images_db(project_id, images)
    except Exception as e:
        # Nothing references the new uploads yet
        uploader.discard(refs)
        LoggingService.log_error_with_traceback('projects', e, {'project_id': project_id})
        return jsonify({'error': 'Failed to save project images.'}), 500

    return _image_response(project_id, images, uploaded=refs)

@projects_bp.route('/api/projects/<int:project_id>/images/<int:index>', methods=['DELETE'])
@admin_api_required
def remove_project_image(project_id, index):
    """Remove one image; the next one becomes main"""
    init_projects_db()
    project = get_project_db(project_id)
    if not project:
        return jsonify({'error': 'Project not found'}), 404

    images = ImageSet(project['images'])
    try:
        removed = images.remove(index)
    except OutOfRange as e:
        LoggingService.warning('projects', str(e), {'project_id': project_id})
        return jsonify({'error': str(e)}), 400

    try:
        save_project_images_db(project_id, images)
    except Exception as e:
        LoggingService.log_error_with_traceback('projects', e, {'project_id': project_id})
        return jsonify({'error': 'Failed to save project images.'}), 500

    return _image_response(project_id, images, removed=removed)

@projects_bp.route('/api/projects/<int:project_id>/images/<int:index>/promote', methods=['POST'])
@admin_api_required
def promote_project_image(project_id, index):
    """Make the image at index the main image"""
    init_projects_db()
    project = get_project_db(project_id)
    if not project:
        return jsonify({'error': 'Project not found'}), 404

    images = ImageSet(project['images'])
    try:
        images.promote_to_main(index)
    except OutOfRange as e:
        LoggingService.warning('projects', str(e), {'project_id': project_id})
        return jsonify({'error': str(e)}), 400

    try:
        save_project_images_db(project_id, images)
    except Exception as e:
        LoggingService.log_error_with_traceback('projects', e, {'project_id': project_id})
        return jsonify({'error': 'Failed to save project images.'}), 500

    return _image_response(project_id, images)
