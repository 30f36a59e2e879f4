from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import JSONResponse
from ..config import settings
from ..models import User
from ..security import require_user
from ..services.media import save_image

router = APIRouter(prefix="/api", tags=["uploads"])


@router.post("/upload")
async def upload_image(file: UploadFile = File(...), folder: str = Form("properties"), user: User = Depends(require_user)):
    data = await file.read()
    if len(data) > settings.UPLOAD_IMAGE_MAX_BYTES:
        return JSONResponse({"error": f"File is larger than {settings.UPLOAD_IMAGE_MAX_MB} MB"}, status_code=400)
    url = save_image(data, file.filename, folder=folder)
    if not url:
        return JSONResponse({"error": "Only JPG, PNG, GIF and WEBP images are accepted"}, status_code=400)
    return {"url": url}
