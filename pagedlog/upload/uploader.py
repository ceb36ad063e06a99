"""Uploaders that move completed files into a log store."""

import shutil
from pathlib import Path

from pagedlog.upload.queue import UploadRequest
from pagedlog.utils.logging import get_logger

logger = get_logger(__name__)


class DirectoryUploader:
    """
    Uploads files into a local directory tree.

    Files land in ``<target_dir>/<timeline_id>/<record_id>/<file name>``,
    standing in for a remote log store.
    """

    def __init__(self, target_dir: Path):
        self.target_dir = Path(target_dir)
        self.target_dir.mkdir(parents=True, exist_ok=True)

    def upload(self, request: UploadRequest) -> Path:
        """
        Copy the request's file into the store.

        Returns:
            Path of the stored copy

        Raises:
            FileNotFoundError: If the source file is gone
            FileExistsError: If the store already holds this file
        """
        destination_dir = self.target_dir / str(request.timeline_id) / str(request.record_id)
        destination_dir.mkdir(parents=True, exist_ok=True)

        destination = destination_dir / request.path.name
        if destination.exists():
            raise FileExistsError(f"Already uploaded: {destination}")

        shutil.copyfile(request.path, destination)

        logger.debug(
            "Stored file",
            source=str(request.path),
            destination=str(destination),
            log_type=request.log_type,
            name=request.name,
        )
        return destination
