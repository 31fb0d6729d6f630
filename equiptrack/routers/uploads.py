"""
Photo upload router.
"""

from fastapi import APIRouter, Depends, File, Form, UploadFile

from equiptrack.exceptions import ValidationError
from equiptrack.schemas.imports import UploadResponse
from equiptrack.services.inventory import InventoryState, get_inventory
from equiptrack.services.storage import photo_path

router = APIRouter()

UPLOAD_FOLDERS = ("equipment", "movements")


@router.post("/uploads", response_model=UploadResponse, status_code=201)
async def upload_photo(
    file: UploadFile = File(...),
    folder: str = Form("equipment"),
    owner_id: str = Form(...),
    inventory: InventoryState = Depends(get_inventory),
):
    """
    Upload a photo for an item or a movement.

    Stored under ``<folder>/<owner_id>/<millis>-<filename>``; returns the
    URL to save on the equipment or movement.
    """
    if folder not in UPLOAD_FOLDERS:
        raise ValidationError(
            f"Unknown upload folder '{folder}'. Expected one of: {', '.join(UPLOAD_FOLDERS)}",
            fields=["folder"],
        )

    path = photo_path(folder, owner_id, file.filename or "photo")
    data = await file.read()
    url = await inventory.upload_photo(data, path)
    return {"url": url, "path": path}
