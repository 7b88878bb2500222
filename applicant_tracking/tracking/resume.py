"""Resume attachment checks.

Resumes travel as data URLs (``data:<mime>;base64,<payload>``), the form a
browser produces when it reads an uploaded file. Only the declared mime
type and the decoded size are checked; the document itself is never decoded.
"""

import base64
import mimetypes
import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from applicant_tracking.core.config import ResumeConfig
from applicant_tracking.core.errors import ValidationError

_DATA_URL = re.compile(
    r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)(?:;[\w.+-]+=[\w.+-]+)*;base64,(?P<data>.*)$",
    re.DOTALL,
)
_BASE64_BODY = re.compile(r"^[A-Za-z0-9+/]*={0,2}$")

# mimetypes does not know .docx on every platform
_EXTENSION_TYPES = {
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


class ResumeInfo(BaseModel):
    """What a resume data URL declares about itself."""

    model_config = ConfigDict(frozen=True)

    mime_type: str
    size_bytes: int


def inspect_resume(resume: str) -> ResumeInfo:
    """Read the mime type and decoded size out of a resume data URL.

    Raises:
        ValidationError: If the value is not a base64 data URL.
    """
    match = _DATA_URL.match(resume.strip())
    if match is None:
        raise ValidationError("resume", "must be a base64 data URL")

    body = "".join(match.group("data").split())
    if len(body) % 4 != 0 or not _BASE64_BODY.match(body):
        raise ValidationError("resume", "is not valid base64")

    padding = len(body) - len(body.rstrip("="))
    size = len(body) // 4 * 3 - padding
    return ResumeInfo(mime_type=match.group("mime").lower(), size_bytes=size)


def validate_resume(resume: str, config: ResumeConfig) -> ResumeInfo:
    """Check a resume against the allowed types and size ceiling."""
    info = inspect_resume(resume)
    if info.mime_type not in config.allowed_mime_types:
        allowed = ", ".join(config.allowed_mime_types)
        raise ValidationError(
            "resume", f"type '{info.mime_type}' is not allowed (expected one of: {allowed})",
        )
    if info.size_bytes > config.max_bytes:
        limit_mb = config.max_bytes / (1024 * 1024)
        raise ValidationError(
            "resume", f"is {info.size_bytes} bytes, larger than the {limit_mb:g}MB limit",
        )
    return info


def encode_resume_file(path: str | Path) -> str:
    """Build a resume data URL from a local document.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValidationError: If the file type cannot be determined.
    """
    path = Path(path)
    if not path.exists():
        msg = f"Resume file not found: {path}"
        raise FileNotFoundError(msg)

    mime_type = _EXTENSION_TYPES.get(path.suffix.lower()) or mimetypes.guess_type(path.name)[0]
    if mime_type is None:
        raise ValidationError("resume", f"cannot determine the type of {path.name}")

    encoded = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"
