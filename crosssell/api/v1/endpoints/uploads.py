"""Book-of-Business upload endpoints."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile, status

from crosssell.api.v1.dependencies import default_scoring_options, get_upload_service
from crosssell.core.config import settings
from crosssell.core.exceptions import IngestionError
from crosssell.schemas.common import ApiResponse
from crosssell.services.upload_service import UploadService
from crosssell.utils.logging import get_logger
from crosssell.utils.responses import create_api_response, create_error_detail

LOGGER = get_logger(__name__)

router = APIRouter()


@router.post(
    "/csv",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a Book-of-Business CSV",
    description="Parse, score and persist the opportunities in a CSV export",
    operation_id="upload_book_of_business_csv",
)
async def upload_csv(
    request: Request,
    upload_service: Annotated[UploadService, Depends(get_upload_service)],
    file: UploadFile = File(..., description="Book-of-Business CSV export"),
    agency_id: Optional[str] = Form(None),
    dry_run: bool = Form(False),
    skip_duplicates: bool = Form(False),
    replace_existing: bool = Form(False),
    use_lead_scoring: Optional[bool] = Form(None),
) -> ApiResponse:
    """Upload and process a CSV file."""
    content = await file.read()

    if len(content) > settings.max_upload_bytes:
        error_detail = create_error_detail(
            title="File Too Large",
            status=status.HTTP_413_CONTENT_TOO_LARGE,
            detail=f"File exceeds {settings.max_upload_bytes} bytes",
            request=request,
        )
        raise HTTPException(
            status_code=status.HTTP_413_CONTENT_TOO_LARGE, detail=error_detail.model_dump(mode="json")
        )

    options = default_scoring_options()
    if use_lead_scoring is not None:
        options = options.model_copy(update={"use_lead_scoring": use_lead_scoring})

    try:
        summary = await upload_service.process_csv(
            content,
            agency_id=agency_id,
            options=options,
            dry_run=dry_run,
            skip_duplicates=skip_duplicates,
            replace_existing=replace_existing,
        )
    except IngestionError as e:
        LOGGER.warning(
            f"Upload rejected: {e}",
            extra={"upload_filename": file.filename, "agency_id": agency_id},
        )
        error_detail = create_error_detail(
            title="Invalid Upload",
            status=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
            request=request,
        )
        raise HTTPException(status_code=400, detail=error_detail.model_dump(mode="json"))

    message = (
        f"Dry run scored {summary.valid_records} records"
        if dry_run
        else f"Created {summary.records_created} opportunities from {file.filename}"
    )
    return create_api_response(data=summary, message=message, request=request)
