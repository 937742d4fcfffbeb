"""
Resume API.

POST /api/parse-resume      — Structured fields from resume text (persisted when signed in)
POST /api/parse-resume/file — Extract text from an uploaded PDF / DOCX / TXT resume
"""

import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.auth import AuthenticatedUser
from ..core.dependencies import get_optional_db, get_optional_user
from ..services.resume import MIN_RESUME_CHARS, parse_resume_text, save_resume
from ..services.text_extract import extract_text

logger = logging.getLogger(__name__)

resume_router = APIRouter(prefix="/parse-resume", tags=["resume"])

MAX_UPLOAD_SIZE = 10 * 1024 * 1024  # 10 MB
ALLOWED_EXTENSIONS = {".pdf", ".docx", ".txt", ".md"}


# ── POST /api/parse-resume ───────────────────────────────────────────

class ParseResumeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    resume_text: str = Field(alias="resumeText")


@resume_router.post("")
async def parse_resume(
    request: ParseResumeRequest,
    user: Optional[AuthenticatedUser] = Depends(get_optional_user),
    db: Optional[AsyncSession] = Depends(get_optional_db),
):
    """
    Parse resume text into fullName, email, phone, education, skills, experience.

    Anonymous callers get the parse only; signed-in users also get it saved
    when a database is configured.
    """
    if len(request.resume_text.strip()) < MIN_RESUME_CHARS:
        raise HTTPException(status_code=400, detail="Valid resume text is required")

    logger.info("Resume text received: %d chars", len(request.resume_text))
    parsed = await parse_resume_text(request.resume_text)

    stored = False
    if user and db is not None:
        stored = await save_resume(db, user.user_id, parsed, request.resume_text)

    return {**parsed, "stored": stored}


# ── POST /api/parse-resume/file ──────────────────────────────────────

class ResumeTextResponse(BaseModel):
    text: str
    metadata: dict = {}


@resume_router.post("/file", response_model=ResumeTextResponse)
async def upload_resume_file(
    file: UploadFile = File(..., description="Resume as PDF, DOCX or plain text"),
):
    """Extract text from an uploaded resume. Feed the result to POST /api/parse-resume."""
    filename = file.filename or "resume"
    ext = Path(filename).suffix.lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise HTTPException(
            status_code=400,
            detail=f"File type '{ext or 'unknown'}' not allowed. "
                   f"Supported: {', '.join(sorted(ALLOWED_EXTENSIONS))}",
        )

    file_bytes = await file.read()
    if len(file_bytes) == 0:
        raise HTTPException(status_code=400, detail="Empty file")
    if len(file_bytes) > MAX_UPLOAD_SIZE:
        raise HTTPException(
            status_code=400,
            detail=f"File too large (max {MAX_UPLOAD_SIZE // (1024 * 1024)}MB)",
        )

    text, metadata = extract_text(file_bytes, filename)
    if not text.strip():
        raise HTTPException(status_code=422, detail="Failed to extract text from file")

    logger.info("Resume file %s: %d chars via %s", filename, len(text), metadata["extractor"])
    return ResumeTextResponse(text=text, metadata=metadata)
