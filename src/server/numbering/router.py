"""Numbering API routes."""

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from starlette.concurrency import run_in_threadpool

from server.config import settings
from server.numbering.dependencies import parse_options
from server.numbering.exceptions import UploadTooLarge
from server.numbering.schemas import NumberingOptions, NumberingResponse
from server.numbering.service import number_document


router = APIRouter(prefix="/numbering", tags=["numbering"])


def _validate_upload(upload: UploadFile, label: str) -> None:
    if not upload.filename:
        raise HTTPException(status_code=400, detail=f"Missing {label} filename")


def _ensure_bytes(data: bytes, label: str) -> bytes:
    if not data:
        raise HTTPException(status_code=400, detail=f"{label} is empty")
    if len(data) > settings.max_upload_bytes:
        raise UploadTooLarge(message=f"{label} exceeds {settings.max_upload_bytes} bytes")
    return data


@router.post("", response_model=NumberingResponse)
async def number_docx(
    docx: UploadFile = File(...),
    options: NumberingOptions = Depends(parse_options),
):
    _validate_upload(docx, "docx")
    if docx.size is not None and docx.size > settings.max_upload_bytes:
        raise UploadTooLarge(message=f"docx exceeds {settings.max_upload_bytes} bytes")
    docx_bytes = _ensure_bytes(await docx.read(settings.max_upload_bytes + 1), "docx")
    return await run_in_threadpool(number_document, docx_bytes, options)
