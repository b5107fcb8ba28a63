"""
Settings Admin Routes
=====================

Admin interface for managing site settings.
"""

from flask import render_template, request, redirect, url_for, session, jsonify, flash
from . import settings_bp
from .database import (
    init_settings_db, set_setting, delete_setting, get_all_settings,
    find_schema_entry, validate_whatsapp_number, SETTINGS_SCHEMA
)
from ...core.auth import admin_required, admin_api_required
from ...core.logging_service import LoggingService


def _save_schema_setting(key, value):
    """Validate and store one schema setting. Returns False for unknown keys."""
    category_key, setting = find_schema_entry(key)
    if setting is None:
        return False

    value = (value or '').strip()
    if key == 'WHATSAPP_NUMBER':
        value = validate_whatsapp_number(value)

    return set_setting(
        key=key,
        value=value if value else None,
        category=category_key,
        is_secret=setting.get('is_secret', False),
        description=setting.get('description')
    )


@settings_bp.route('/')
@admin_required
def settings_page():
    """Main settings page"""
    init_settings_db()
    current_values = {s['key']: s['value'] for s in get_all_settings(mask_secrets=True)}

    return render_template('settings/settings.html',
                           schema=SETTINGS_SCHEMA,
                           current_values=current_values)


@settings_bp.route('/save', methods=['POST'])
@admin_required
def save_settings():
    """Save settings from form"""
    data = request.form.to_dict()

    try:
        saved_count = 0
        for category_data in SETTINGS_SCHEMA.values():
            for setting in category_data['settings']:
                key = setting['key']
                if key not in data:
                    continue

                # Don't overwrite secrets with masked value
                if setting.get('is_secret') and data[key].startswith('*'):
                    continue

                if _save_schema_setting(key, data[key]):
                    saved_count += 1

        LoggingService.log_user_action('settings', 'settings saved',
                                       user_id=session.get('admin_email'),
                                       details={'count': saved_count})
        flash(f'Settings saved successfully ({saved_count} settings updated)', 'success')

    except ValueError as e:
        flash(str(e), 'error')
    except Exception as e:
        LoggingService.log_error_with_traceback('settings', e)
        flash(f'Error saving settings: {str(e)}', 'error')

    return redirect(url_for('settings.settings_page'))


@settings_bp.route('/api/settings')
@admin_api_required
def api_get_settings():
    """API endpoint to get all settings"""
    category = request.args.get('category')
    settings = get_all_settings(category=category, mask_secrets=True)
    return jsonify({'success': True, 'settings': settings})


@settings_bp.route('/api/settings', methods=['POST'])
@admin_api_required
def api_save_setting():
    """API endpoint to save a single schema setting"""
    data = request.get_json(silent=True)

    if not data or 'key' not in data:
        return jsonify({'success': False, 'error': 'Key is required'}), 400

    try:
        saved = _save_schema_setting(data['key'], data.get('value', ''))
    except ValueError as e:
        return jsonify({'success': False, 'error': str(e)}), 400

    if saved:
        return jsonify({'success': True, 'message': 'Setting saved'})
    return jsonify({'success': False, 'error': 'Unknown setting'}), 400


@settings_bp.route('/api/settings/<key>', methods=['DELETE'])
@admin_api_required
def api_delete_setting(key):
    """API endpoint to delete a setting"""
    if delete_setting(key):
        return jsonify({'success': True, 'message': 'Setting deleted'})
    return jsonify({'success': False, 'error': 'Setting not found'}), 404
