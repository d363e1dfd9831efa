"""
Document Intelligence

Summary and risk assessment of an uploaded document. The document arrives as
a data URI (what the browser's FileReader produces) and is forwarded to the
generative backend: text documents inline, anything else as a file part.
"""
import base64
import binascii
import re

from pydantic import BaseModel

from ..core.errors import ValidationError
from .content_generator import GenerativeContentService, content_generator

DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(;[\w-]+=[^;,]+)*);base64,(?P<data>.*)$", re.S)

MAX_DOCUMENT_BYTES = 10 * 1024 * 1024


class DocumentAnalysis(BaseModel):
    summary: str
    riskAssessment: str


def parse_data_uri(data_uri: str) -> tuple[str, bytes]:
    """Split a base64 data URI into (mime type, decoded bytes)."""
    m = DATA_URI_RE.match(data_uri or "")
    if not m:
        raise ValidationError("Document must be a base64 data URI.")
    try:
        raw = base64.b64decode(m.group("data"), validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError("Document data is not valid base64.")
    if not raw:
        raise ValidationError("Document is empty.")
    if len(raw) > MAX_DOCUMENT_BYTES:
        raise ValidationError("Document is larger than 10 MB.")
    return m.group("mime") or "application/octet-stream", raw


class DocumentIntelligenceService:

    def __init__(self, generator: GenerativeContentService):
        self.generator = generator

    async def analyze(self, data_uri: str, filename: str = "document") -> DocumentAnalysis:
        mime, raw = parse_data_uri(data_uri)
        system_prompt = (
            "You are a document analyst. Read the provided document and return `summary`, a concise "
            "summary of its content, and `riskAssessment`, the legal, financial or operational risks "
            "it contains, with the clauses they come from."
        )
        if mime.startswith("text/"):
            user_content = f"Document ({filename}):\n{raw.decode('utf-8', errors='replace')}"
        else:
            user_content = [
                {"type": "text", "text": f"Analyze the attached document ({filename})."},
                {"type": "file", "file": {"filename": filename, "file_data": data_uri}},
            ]
        return await self.generator.generate(system_prompt, user_content, DocumentAnalysis)


document_intelligence = DocumentIntelligenceService(content_generator)
