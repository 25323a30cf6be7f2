# backend/ostsee/api/routers/files.py
from fastapi import APIRouter, Body, Depends, File, Form, UploadFile

from ostsee.exceptions import ValidationError
from ostsee.logging_config import get_logger
from ostsee.services import uploads
from ostsee.services.storage.base import StorageProvider
from ostsee.services.storage.factory import get_storage_provider

logger = get_logger(__name__)

router = APIRouter()


@router.post("/upload")
async def upload_file(
    file: UploadFile = File(...),
    reference_id: str = Form(..., alias="referenceId"),
    storage: StorageProvider = Depends(get_storage_provider),
):
    if not uploads.is_safe_name(reference_id):
        raise ValidationError("Ungültige Referenz-ID")
    data = await file.read()
    mime = uploads.check_upload(file.filename or "", file.content_type, len(data), uploads.MEDIA)
    stored = storage.upload(data, file.filename, mime, reference_id, extract_exif=True)
    logger.info("Uploaded %s for %s (%d bytes)", stored.file_path, reference_id, stored.size)
    return stored.model_dump(mode="json")


@router.api_route("/delete", methods=["POST", "DELETE"])
def delete_file(file_path: str = Body(..., alias="filePath", embed=True),
                storage: StorageProvider = Depends(get_storage_provider)):
    if not file_path or ".." in file_path or "\\" in file_path or file_path.startswith("/"):
        logger.warning("Rejected file path %r", file_path)
        raise ValidationError("Ungültiger Datei-Pfad")
    storage.delete(file_path)
    return {"success": True}
