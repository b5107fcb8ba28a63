"""
Project Image Uploads
=====================

Validates candidate image files and transfers them to storage as one batch.
A batch either uploads completely or leaves nothing behind.
"""

import logging
import uuid

from ...core import storage
from .exceptions import TransferFailed, UploadRejected

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = {
    'image/jpeg': 'jpg',
    'image/png': 'png',
    'image/webp': 'webp',
    'image/gif': 'gif',
}
ALLOWED_EXTENSIONS = {'jpg', 'jpeg', 'png', 'webp', 'gif'}
DEFAULT_MAX_BYTES = 5 * 1024 * 1024  # 5MB


def _extension(filename):
    return filename.rsplit('.', 1)[1].lower() if '.' in filename else ''


class ImageUploader:
    """Upload handle passed into ``ImageSet.append_uploads``.

    ``upload_func(bytes, filename, subfolder) -> url`` and
    ``delete_func(url)`` default to the shared storage module.
    """

    def __init__(self, upload_func=None, delete_func=None, subfolder='projects',
                 max_bytes=DEFAULT_MAX_BYTES):
        self.upload_func = upload_func or storage.upload_file
        self.delete_func = delete_func or storage.delete_file
        self.subfolder = subfolder
        self.max_bytes = max_bytes

    def validate(self, file):
        """Check type and size of one candidate. Returns (bytes, extension)."""
        filename = getattr(file, 'filename', None) or ''
        if not filename:
            raise UploadRejected(filename, 'No file selected')

        ext = _extension(filename)
        mimetype = (getattr(file, 'mimetype', None) or '').lower()
        if mimetype in ALLOWED_MIME_TYPES:
            if ext not in ALLOWED_EXTENSIONS:
                ext = ALLOWED_MIME_TYPES[mimetype]
        elif mimetype in ('', 'application/octet-stream') and ext in ALLOWED_EXTENSIONS:
            pass
        else:
            raise UploadRejected(filename, 'Invalid file type. Please upload a JPEG, PNG, WebP, or GIF image.')

        payload = file.read()
        if not payload:
            raise UploadRejected(filename, 'File is empty')
        if len(payload) > self.max_bytes:
            limit_mb = self.max_bytes / (1024 * 1024)
            raise UploadRejected(filename, f'File too large. Please upload an image smaller than {limit_mb:g}MB.')

        return payload, ('jpg' if ext == 'jpeg' else ext)

    def upload_batch(self, files):
        """Upload every file or none of them. Returns references in input order."""
        files = list(files)

        # Validate everything before the first transfer
        prepared = [(file.filename, *self.validate(file)) for file in files]

        uploaded = []
        for filename, payload, ext in prepared:
            unique_filename = f"{uuid.uuid4().hex}.{ext}"
            try:
                uploaded.append(self.upload_func(payload, unique_filename, self.subfolder))
            except Exception as e:
                self.discard(uploaded)
                raise TransferFailed(filename, str(e) or 'Failed to upload image') from e

        return uploaded

    def discard(self, refs):
        """Best-effort removal of references uploaded earlier in a failed batch."""
        for ref in refs:
            try:
                self.delete_func(ref)
            except Exception as e:
                logger.warning("Could not remove orphaned upload %s: %s", ref, e)
