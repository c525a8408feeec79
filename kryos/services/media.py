import logging
from typing import Any, Dict, List, Optional

from kryos.errors import InputValidationError
from kryos.media_store import BaseMediaStore, resource_type_for, sanitize_filename, user_folder

logger = logging.getLogger(__name__)


def _to_media_file(resource: Dict[str, Any], user_id: str, name: Optional[str] = None) -> Dict[str, Any]:
    public_id = resource["public_id"]
    return {
        "id": public_id,
        "name": name or resource.get("filename") or public_id.split("/")[-1] or "Unknown",
        "type": "video" if resource.get("resource_type") == "video" else "image",
        "size": resource.get("bytes") or 0,
        "url": resource["secure_url"],
        "public_id": public_id,
        "user_id": user_id,
        "uploaded_at": resource["created_at"],
        "format": resource.get("format"),
    }


def upload_media(
    store: BaseMediaStore,
    user_id: str,
    file_id: str,
    file_name: str,
    data: bytes,
    content_type: str,
    original_name: Optional[str] = None,
) -> Dict[str, Any]:
    if not user_id or not file_id or not file_name or data is None:
        raise InputValidationError("Missing required fields")

    public_name = f"{file_id}-{sanitize_filename(file_name)}"
    resource = store.upload(user_folder(user_id), public_name, data, content_type)
    media_file = _to_media_file(resource, user_id, name=original_name or file_name)
    media_file["type"] = resource_type_for(content_type)
    logger.info("Media uploaded", extra={"user_id": user_id, "public_id": media_file["public_id"]})
    return media_file


def list_media(store: BaseMediaStore, user_id: str) -> List[Dict[str, Any]]:
    """Files in the user's folder, newest upload first."""
    if not user_id:
        raise InputValidationError("User ID is required")
    files = [_to_media_file(r, user_id) for r in store.list_folder(user_folder(user_id))]
    files.sort(key=lambda f: f["uploaded_at"], reverse=True)
    return files


def delete_media(store: BaseMediaStore, public_id: str) -> str:
    if not public_id:
        raise InputValidationError("Public ID is required")
    result = store.delete(public_id)
    logger.info("Media deleted", extra={"public_id": public_id, "result": result})
    return result
