import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from parkmap.api.deps import require_admin
from parkmap.services.storage.photos import PhotoError, save_photo

logger = logging.getLogger(__name__)
router = APIRouter()

MAX_UPLOAD_BYTES = 15 * 1024 * 1024


@router.post("", dependencies=[Depends(require_admin)])
@router.post("/", dependencies=[Depends(require_admin)])
async def upload_photo(file: UploadFile = File(...)):
    content = await file.read()
    if len(content) > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="File too large")
    try:
        url = save_photo(file.filename or "photo", content)
    except PhotoError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OSError:
        logger.exception("Error storing upload %r", file.filename)
        raise HTTPException(status_code=500, detail="Failed to upload file")
    return {"url": url}
