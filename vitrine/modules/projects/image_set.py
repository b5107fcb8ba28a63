"""
Project Image Set
=================

Ordered list of image references for one project. Position 0 is the main
image. Projects created before multi-image support only have the single
``image_url`` column; newer rows also carry ``image_urls``. Both columns are
written together from this list, with ``image_url`` always equal to the first
entry (or NULL when there are no images).
"""

import json
import logging

from .exceptions import OutOfRange

logger = logging.getLogger(__name__)


def _clean(refs):
    """Drop non-string and blank references, keeping order."""
    return [ref for ref in refs if isinstance(ref, str) and ref.strip()]


def _as_refs(refs):
    """Normalise caller-supplied references to a clean list."""
    if refs is None:
        return []
    if isinstance(refs, (str, bytes)):
        raise TypeError("image references must be a list, not a single string")
    return _clean(refs)


def _parse_image_urls(value):
    """Decode an ``image_urls`` value. Returns None when absent or unusable."""
    if value is None:
        return None
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except (json.JSONDecodeError, TypeError):
            logger.debug("Ignoring unparseable image_urls value: %r", value)
            return None
    if not isinstance(value, (list, tuple)):
        return None
    return list(value)


class ImageSet:
    """Ordered image references for a single edit session."""

    def __init__(self, images=None):
        self._images = _as_refs(images)

    @classmethod
    def load(cls, record):
        """Build the list from a persisted record.

        Prefers a non-empty ``image_urls`` list, falls back to wrapping a
        non-blank ``image_url``, otherwise starts empty. Never raises.
        """
        record = record or {}

        images = _clean(_parse_image_urls(record.get('image_urls')) or [])
        if images:
            return cls(images)

        legacy = record.get('image_url')
        if isinstance(legacy, str) and legacy.strip():
            return cls([legacy])

        return cls()

    @property
    def images(self):
        return list(self._images)

    @property
    def main_image(self):
        return self._images[0] if self._images else None

    def __len__(self):
        return len(self._images)

    def __iter__(self):
        return iter(list(self._images))

    def __bool__(self):
        return bool(self._images)

    def __eq__(self, other):
        if isinstance(other, ImageSet):
            return self._images == other._images
        return NotImplemented

    def __repr__(self):
        return f"ImageSet({self._images!r})"

    def _check_index(self, index):
        if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < len(self._images):
            raise OutOfRange(index, len(self._images))

    def append(self, new_refs):
        """Add references to the end, in arrival order. Duplicates are kept,
        blank entries are dropped."""
        self._images.extend(_as_refs(new_refs))

    def append_uploads(self, files, uploader):
        """Upload *files* with *uploader* and append the resulting references.

        The batch is all-or-nothing: if the uploader raises, the list is left
        exactly as it was.
        """
        refs = uploader.upload_batch(files)
        self.append(refs)
        return refs

    def remove(self, index):
        """Remove and return the reference at *index*."""
        self._check_index(index)
        return self._images.pop(index)

    def promote_to_main(self, index):
        """Move the reference at *index* to the front.

        Entries before *index* shift right by one and keep their relative order.
        """
        self._check_index(index)
        if index:
            self._images.insert(0, self._images.pop(index))

    def to_persisted(self):
        """Return the column values to write back: ``image_url`` and ``image_urls``."""
        return {
            'image_url': self.main_image,
            'image_urls': self.images,
        }
