import logging
import os
import secrets
import time

from werkzeug.utils import secure_filename

from churchhub.exceptions import StorageError, ValidationError

logger = logging.getLogger(__name__)

BUCKETS = ("sermon-audio", "sermon-documents", "sermon-presentations", "song-audio", "images")


def generate_key(filename: str) -> str:
    """`<ms timestamp>-<random>.<ext>`; uploaded names are never trusted for uniqueness."""
    ext = secure_filename(filename or "").rsplit(".", 1)
    suffix = f".{ext[1].lower()}" if len(ext) == 2 and ext[1] else ""
    return f"{int(time.time() * 1000)}-{secrets.token_hex(4)}{suffix}"


class BlobStorage:
    """Uploaded media on local disk, one directory per bucket."""

    def __init__(self, root: str, public_url: str = "", max_size_mb: int = 50):
        self.root = root
        self.public_url = public_url.rstrip("/")
        self.max_size_mb = max_size_mb

    def bucket_path(self, bucket: str) -> str:
        if bucket not in BUCKETS:
            raise ValidationError(f"Unknown bucket '{bucket}'")
        return os.path.join(self.root, bucket)

    def upload(self, bucket: str, file) -> str:
        """Stores a werkzeug FileStorage and returns its key within the bucket."""
        directory = self.bucket_path(bucket)
        if file is None or not file.filename:
            raise ValidationError("No file provided")

        file.stream.seek(0, os.SEEK_END)
        size = file.stream.tell()
        file.stream.seek(0)
        if size > self.max_size_mb * 1024 * 1024:
            raise ValidationError(f"File size must be less than {self.max_size_mb}MB")

        key = generate_key(file.filename)
        try:
            os.makedirs(directory, exist_ok=True)
            file.save(os.path.join(directory, key))
        except OSError as e:
            logger.error(f"Failed to store upload in {bucket}: {str(e)}")
            raise StorageError("Failed to upload file")

        logger.info(f"Stored {file.filename} as {bucket}/{key} ({size} bytes)")
        return key

    def get_public_url(self, bucket: str, path: str) -> str:
        return f"{self.public_url}/storage/{bucket}/{path}"
