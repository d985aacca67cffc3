from fastapi import APIRouter, File, Request, UploadFile

from resume_tailor.api.v1.dependencies import read_upload
from resume_tailor.core.rate_limit import rate_limit
from resume_tailor.parsing import parse_document
from resume_tailor.schemas.api import ExtractedDocumentResponse

router = APIRouter()


@router.post("/documents/extract", response_model=ExtractedDocumentResponse)
@rate_limit()
async def extract_document(request: Request, file: UploadFile = File(...)):
    _ = request
    raw = await read_upload(file)
    parsed = parse_document(raw)
    return ExtractedDocumentResponse(
        doc_id=parsed.doc_id,
        source_type=parsed.source_type,
        filename=parsed.filename,
        extractor=parsed.extractor,
        truncated=parsed.truncated,
        characters=len(parsed.text),
        parsing_warnings=parsed.parsing_warnings,
        text=parsed.text,
    )
