# controller/admin_controller.py
from typing import Optional
from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from model.api import BulletinUploadResponse, DocumentUploadResponse
from service.admin_service import AdminService
from util.constants import InternalURIs
from util.enums import ErrorMessage
from util.errors import AppError
from controller.controller_dependencies import (
    get_admin_service,
    rate_limit,
    read_limited_upload,
)

admin_router = APIRouter(dependencies=[Depends(rate_limit)])


async def _require_file(request: Request, file: Optional[UploadFile]) -> bytes:
    data = await read_limited_upload(request, file)
    if not data:
        raise AppError.of(ErrorMessage.FILE_MISSING)
    return data


@admin_router.post(
    InternalURIs.ADMIN_BULLETINS,
    response_model=BulletinUploadResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_bulletin(
    request: Request,
    file: Optional[UploadFile] = File(None),
    year: int = Form(..., ge=1900, le=2200),
    category: str = Form("Major"),
    description: Optional[str] = Form(None),
    service: AdminService = Depends(get_admin_service),
) -> BulletinUploadResponse:
    data = await _require_file(request, file)
    result = await service.upload_bulletin(
        data, file.filename or "", year=year, category=category, description=description
    )
    return BulletinUploadResponse(
        pagesExtracted=result.pages_extracted,
        totalChars=result.total_chars,
        coursesFound=result.courses_found,
        locator=result.locator,
    )


@admin_router.post(
    InternalURIs.ADMIN_DOCUMENTS,
    response_model=DocumentUploadResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_document(
    request: Request,
    file: Optional[UploadFile] = File(None),
    docType: str = Form(""),
    courseCode: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    service: AdminService = Depends(get_admin_service),
) -> DocumentUploadResponse:
    data = await _require_file(request, file)
    result = await service.upload_document(
        data,
        file.filename or "",
        doc_type=docType,
        course_code=courseCode,
        description=description,
    )
    return DocumentUploadResponse(
        documentName=result.document_name, locator=result.locator
    )
