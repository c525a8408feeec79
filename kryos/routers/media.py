from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from kryos.dependencies import get_media_store
from kryos.media_store import BaseMediaStore
from kryos.schemas.requests import DeleteMediaRequest
from kryos.schemas.responses import DeleteMediaResponse, MediaListResponse, UploadResponse
from kryos.services import media

router = APIRouter()


@router.post("/upload", response_model=UploadResponse)
async def upload(
    file: UploadFile = File(...),
    file_name: str = Form(None),
    file_id: str = Form(None),
    user_id: str = Form(None),
    store: BaseMediaStore = Depends(get_media_store),
):
    """Upload one file into the user's media folder."""
    data = await file.read()
    media_file = media.upload_media(
        store,
        user_id=user_id,
        file_id=file_id,
        file_name=file_name,
        data=data,
        content_type=file.content_type or "",
        original_name=file.filename,
    )
    return UploadResponse(url=media_file["url"], file=media_file)


@router.get("/list", response_model=MediaListResponse)
def list_media(
    user_id: str = Query(None),
    store: BaseMediaStore = Depends(get_media_store),
):
    files = media.list_media(store, user_id)
    return MediaListResponse(files=files, total=len(files))


@router.delete("/delete", response_model=DeleteMediaResponse)
def delete_media(
    request: DeleteMediaRequest,
    store: BaseMediaStore = Depends(get_media_store),
):
    result = media.delete_media(store, request.public_id)
    return DeleteMediaResponse(message="File deleted successfully", result=result)
