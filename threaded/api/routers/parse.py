"""
Document parse API endpoint.

Routes:
- POST /parse - multipart/form-data with `file`, or JSON `{"url": ...}`

Dependencies: threaded.application.services.parse_service, threaded.models
System role: Document-to-markdown HTTP API
"""

from fastapi import APIRouter, Depends, Request
from starlette.datastructures import UploadFile

from threaded.api.deps import get_parse_service
from threaded.application.services import ParseService
from threaded.core.exceptions import ValidationError
from threaded.models.parse import ParseResponse, ParseUrlRequest

router = APIRouter(prefix="/parse", tags=["parse"])


@router.post("", response_model=ParseResponse)
async def parse_document(
    request: Request,
    parse_service: ParseService = Depends(get_parse_service),
) -> ParseResponse:
    """
    Convert an uploaded file or a public URL to markdown.

    The request kind is chosen by Content-Type.

    Raises:
        ValidationError (400): Bad upload, unsupported type, invalid or private URL
        UpstreamExtractionError (500): Extraction backend failed
    """
    content_type = request.headers.get("content-type", "")

    if "multipart/form-data" in content_type:
        form = await request.form()
        upload = form.get("file")
        if not isinstance(upload, UploadFile):
            raise ValidationError("No file provided", field="file")
        content = await upload.read()
        result = await parse_service.parse_file(upload.filename, content, upload.content_type)
        return ParseResponse(**result)

    if "application/json" in content_type:
        try:
            payload = ParseUrlRequest.model_validate(await request.json())
        except ValueError:
            raise ValidationError("Invalid request body")
        result = await parse_service.parse_url(payload.url)
        return ParseResponse(**result)

    raise ValidationError("Invalid request format")
