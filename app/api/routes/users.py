"""Profile picture endpoint."""

from fastapi import APIRouter, File, UploadFile

from app.core.dependencies import CurrentUser, Gateway
from app.schemas.user import MessageResponse

router = APIRouter()


@router.post("/uploadAvatar", response_model=MessageResponse)
async def upload_avatar(
    current_user: CurrentUser,
    gateway: Gateway,
    media: UploadFile = File(...),
):
    """
    Replace the current user's avatar.

    Accepts image files only; the previous picture is removed.
    """
    content = await media.read()
    await gateway.update_avatar(
        current_user,
        file_name=media.filename,
        content_type=media.content_type,
        content=content,
    )
    return MessageResponse(message="Profile picture uploaded successfully")
