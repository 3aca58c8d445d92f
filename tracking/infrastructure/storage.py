"""Local-disk storage for package images, served under the uploads mount."""

import os
from pathlib import Path

from shared.core import get_logger
from tracking.application.errors import StoreError, ValidationError

logger = get_logger(__name__)

class FileStorage:
    def __init__(self, root: str, url_prefix: str = "/uploads"):
        self.root = Path(root)
        self.url_prefix = url_prefix.rstrip("/")

    def _resolve(self, path: str) -> Path:
        target = (self.root / path).resolve()
        if self.root.resolve() not in target.parents:
            raise ValidationError(f"Invalid storage path: {path}")
        return target

    def url_for(self, path: str) -> str:
        return f"{self.url_prefix}/{path.lstrip('/')}"

    def path_from_url(self, url: str) -> str:
        if not url.startswith(self.url_prefix + "/"):
            raise ValidationError(f"Not a stored file: {url}")
        return url[len(self.url_prefix) + 1:]

    def upload_file(self, data: bytes, path: str) -> str:
        target = self._resolve(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "wb") as f:
                f.write(data)
        except OSError as e:
            logger.error(f"Upload to {path} failed: {e}")
            raise StoreError(f"could not store {path}")
        return self.url_for(path)

    def delete_file(self, path: str) -> None:
        target = self._resolve(path)
        try:
            os.remove(target)
        except FileNotFoundError:
            logger.warning(f"File already gone: {path}")
        except OSError as e:
            logger.error(f"Delete of {path} failed: {e}")
            raise StoreError(f"could not delete {path}")
