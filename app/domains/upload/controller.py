"""Upload API controller."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from app.domains.upload.service import UploadService
from app.exceptions.upload import UploadTooLargeError
from app.schemas.base import ResponseSchema
from app.schemas.upload import UploadSignRequest

router = APIRouter(prefix="/api/uploads", tags=["uploads"])


def get_upload_service() -> UploadService:
    return UploadService()


@router.post("/sign", response_model=ResponseSchema)
async def sign_upload(
    sign_request: UploadSignRequest,
    service: UploadService = Depends(get_upload_service),
):
    """Issue a signed upload URL for one file."""
    signed = service.sign(sign_request.filename)
    return ResponseSchema(status="success", message="Upload URL issued", data=signed.model_dump())


@router.put("/put", response_model=ResponseSchema)
async def put_upload(
    request: Request,
    id: Optional[str] = Query(None, description="Upload id from /sign"),
    filename: Optional[str] = Query(None, description="Sanitised file name from /sign"),
    signature: Optional[str] = Query(None, description="Signature from /sign"),
    service: UploadService = Depends(get_upload_service),
):
    """Store the raw request body as the uploaded file."""
    service.verify(id, filename, signature)

    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > service.max_size:
        raise UploadTooLargeError(service.max_size)

    body = await service.read_body(request.stream())
    uploaded = await service.store(id, filename, signature, body)
    return ResponseSchema(status="success", message="File uploaded", data=uploaded.model_dump())
