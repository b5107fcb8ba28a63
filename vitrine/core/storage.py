"""
Storage Utility
===============

Shared file upload with cloud (DigitalOcean Spaces) / local branching.
"""

import os
from urllib.parse import urlparse

import boto3
from flask import current_app

from ..modules.settings.helpers import is_cloud_storage, get_do_spaces_config

CONTENT_TYPES = {
    'jpg': 'image/jpeg', 'jpeg': 'image/jpeg',
    'png': 'image/png', 'gif': 'image/gif', 'webp': 'image/webp',
}


def _spaces_client(config):
    region = config['region']
    return boto3.client(
        's3',
        region_name=region,
        endpoint_url=f"https://{region}.digitaloceanspaces.com",
        aws_access_key_id=config['access_key'],
        aws_secret_access_key=config['secret_key'],
    )


def upload_file(file_bytes, filename, subfolder):
    """Upload file to cloud storage or local filesystem.

    Args:
        file_bytes: Raw bytes of the file.
        filename: Target filename (e.g. "abc123.jpg").
        subfolder: Subfolder name (e.g. "projects").

    Returns:
        Public URL (cloud) or local path like "/static/projects/abc.jpg" (local).
    """
    if is_cloud_storage():
        return _upload_to_spaces(file_bytes, filename, subfolder)
    return _save_locally(file_bytes, filename, subfolder)


def _upload_to_spaces(file_bytes, filename, subfolder):
    """Upload to DigitalOcean Spaces via boto3."""
    config = get_do_spaces_config()
    region = config['region']
    space_name = config['space_name']

    app_prefix = current_app.config.get('SPACES_FOLDER', 'uploads')
    object_key = f"{app_prefix}/{subfolder}/{filename}"

    ext = filename.rsplit('.', 1)[-1].lower() if '.' in filename else ''
    content_type = CONTENT_TYPES.get(ext, 'application/octet-stream')

    _spaces_client(config).put_object(
        Bucket=space_name,
        Key=object_key,
        Body=file_bytes,
        ACL='public-read',
        ContentType=content_type,
    )

    return f"https://{space_name}.{region}.digitaloceanspaces.com/{object_key}"


def _save_locally(file_bytes, filename, subfolder):
    """Save to local static folder."""
    upload_dir = os.path.join(current_app.static_folder, subfolder)
    os.makedirs(upload_dir, exist_ok=True)
    filepath = os.path.join(upload_dir, filename)
    with open(filepath, 'wb') as f:
        f.write(file_bytes)
    return f"/static/{subfolder}/{filename}"


def delete_file(file_url):
    """Delete a file by its URL (cloud or local).

    Returns True when something was deleted, raises on failure.
    """
    if not file_url:
        return False

    if 'digitaloceanspaces.com' in file_url:
        return _delete_cloud_file(file_url)
    return _delete_local_file(file_url)


def _delete_cloud_file(file_url):
    """Delete a file from DigitalOcean Spaces."""
    config = get_do_spaces_config()
    # Object key is the path without leading slash
    object_key = urlparse(file_url).path.lstrip('/')
    _spaces_client(config).delete_object(Bucket=config['space_name'], Key=object_key)
    return True


def _delete_local_file(file_url):
    """Delete a file from local static folder."""
    # file_url looks like /static/subfolder/filename.jpg
    if file_url.startswith('/static/'):
        rel_path = file_url[len('/static/'):]
        full_path = os.path.join(current_app.static_folder, rel_path)
        if os.path.isfile(full_path):
            os.unlink(full_path)
            return True
    return False
