"""
Object store for user media.

Files are scoped to a per-user folder, kryos/users/<user_id>/media, and
addressed by a public id (the folder-relative path) that is stable for URL
construction and deletion.
"""
import logging
import mimetypes
import os
import re
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List

from kryos.errors import InputValidationError, UpstreamError

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9.-]")


def user_folder(user_id: str) -> str:
    return f"kryos/users/{user_id}/media"


def sanitize_filename(name: str) -> str:
    return _UNSAFE_CHARS.sub("_", name)


def resource_type_for(content_type: str) -> str:
    return "video" if (content_type or "").startswith("video/") else "image"


class BaseMediaStore(ABC):

    @abstractmethod
    def upload(self, folder: str, public_name: str, data: bytes, content_type: str) -> Dict[str, Any]:
        """Store bytes and return the stored resource description."""
        pass

    @abstractmethod
    def list_folder(self, folder: str) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    def delete(self, public_id: str) -> str:
        """Return "ok" or "not found"."""
        pass


class LocalMediaStore(BaseMediaStore):
    """Stores media on the local disk, served from base_url."""

    def __init__(self, root: str, base_url: str):
        self.root = os.path.abspath(root)
        self.base_url = base_url.rstrip("/")

    def _path_for(self, public_id: str) -> str:
        path = os.path.abspath(os.path.join(self.root, public_id))
        if os.path.commonpath([self.root, path]) != self.root or path == self.root:
            raise InputValidationError(f"Invalid public id: {public_id}")
        return path

    def _describe(self, public_id: str, path: str) -> Dict[str, Any]:
        stat = os.stat(path)
        content_type, _ = mimetypes.guess_type(path)
        return {
            "public_id": public_id,
            "filename": os.path.basename(public_id),
            "resource_type": resource_type_for(content_type or ""),
            "format": os.path.splitext(path)[1].lstrip(".") or None,
            "bytes": stat.st_size,
            "secure_url": f"{self.base_url}/{public_id}",
            "created_at": datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
        }

    def upload(self, folder: str, public_name: str, data: bytes, content_type: str) -> Dict[str, Any]:
        public_id = f"{folder}/{public_name}"
        path = self._path_for(public_id)
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            # overwrite: same public id replaces the previous file
            with open(path, "wb") as f:
                f.write(data)
        except OSError as e:
            raise UpstreamError("Upload failed", detail=str(e))
        resource = self._describe(public_id, path)
        resource["resource_type"] = resource_type_for(content_type)
        return resource

    def list_folder(self, folder: str) -> List[Dict[str, Any]]:
        directory = self._path_for(folder)
        if not os.path.isdir(directory):
            return []
        try:
            names = os.listdir(directory)
        except OSError as e:
            raise UpstreamError("Failed to list media files", detail=str(e))
        return [
            self._describe(f"{folder}/{name}", os.path.join(directory, name))
            for name in names
            if os.path.isfile(os.path.join(directory, name))
        ]

    def delete(self, public_id: str) -> str:
        path = self._path_for(public_id)
        if not os.path.isfile(path):
            return "not found"
        try:
            os.remove(path)
        except OSError as e:
            raise UpstreamError("Failed to delete file", detail=str(e))
        return "ok"
