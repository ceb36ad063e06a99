"""Upload of completed log pages."""

from pagedlog.upload.queue import (
    FileUploadQueue,
    RecordingUploadQueue,
    Uploader,
    UploadQueue,
    UploadRequest,
)
from pagedlog.upload.uploader import DirectoryUploader

__all__ = [
    "DirectoryUploader",
    "FileUploadQueue",
    "RecordingUploadQueue",
    "UploadQueue",
    "UploadRequest",
    "Uploader",
]
