"""
Errors raised while editing a project's images.
"""


class ImageSetError(Exception):
    """Base class for image list and upload errors"""


class OutOfRange(ImageSetError, IndexError):
    """An index outside ``0 <= index < length`` was used on an image list."""

    def __init__(self, index, length):
        self.index = index
        self.length = length
        super().__init__(f"Image index {index} out of range for {length} image(s)")


class UploadRejected(ImageSetError, ValueError):
    """A candidate file failed validation before any transfer was attempted."""

    def __init__(self, filename, reason):
        self.filename = filename
        self.reason = reason
        super().__init__(f"{filename or 'file'}: {reason}")


class TransferFailed(ImageSetError):
    """Storage failed while transferring an accepted file."""

    def __init__(self, filename, message='Failed to upload image'):
        self.filename = filename
        super().__init__(f"{filename or 'file'}: {message}")
