from __future__ import annotations

import base64
import logging
import uuid
from dataclasses import dataclass

from ..knowledge.base import CaseProfile, DocumentInfo, FactSource
from ..knowledge.store import KnowledgeStore
from .errors import InputRejected, MalformedResponse, UpstreamTransportError
from .llm import ModelClient
from .results import Err, parse_json, unwrap
from .workflow import INVALID_FORMAT, Workflow

logger = logging.getLogger(__name__)

FACT_LIST_SCHEMA = {"type": "array", "items": {"type": "string"}}

IMAGE_PROMPT = (
    "Analyze this image of a legal document page, identify key facts, entities, "
    "and dates, and return them as a JSON array of strings."
)


@dataclass(frozen=True)
class PendingImage:
    name: str
    mime_type: str
    base64_data: str


class DocumentAnalyzer(Workflow):
    """Extracts atomic facts from a document or page image.

    Nothing reaches the knowledge base until ``incorporate`` is called.
    """

    def __init__(
        self, store: KnowledgeStore, model: ModelClient, profile: CaseProfile
    ) -> None:
        super().__init__(store, model, profile)
        self.documents: list[DocumentInfo] = list(profile.documents)
        self.selected: DocumentInfo | None = self.documents[0] if self.documents else None
        self.pending_image: PendingImage | None = None
        self.extracted_facts: list[str] = []
        self._analyzed_name: str | None = None

    def select_document(self, doc_id: str) -> DocumentInfo:
        for doc in self.documents:
            if doc.id == doc_id:
                self.selected = doc
                self.pending_image = None
                self.extracted_facts = []
                return doc
        raise InputRejected(f"Unknown document {doc_id!r}")

    def attach_file(self, name: str, mime_type: str, data: bytes) -> None:
        self.error = None
        self.extracted_facts = []

        if mime_type == "text/plain":
            try:
                content = data.decode("utf-8")
            except UnicodeDecodeError:
                logger.error("Uploaded text file %r is not valid UTF-8", name)
                self.error = "Failed to read text file."
                return
            doc = DocumentInfo(id=f"uploaded-{uuid.uuid4().hex[:12]}", name=name, content=content)
            self.documents.append(doc)
            self.selected = doc
            self.pending_image = None
        elif mime_type.startswith("image/"):
            self.selected = None
            self.pending_image = PendingImage(
                name=name,
                mime_type=mime_type,
                base64_data=base64.b64encode(data).decode("ascii"),
            )
        else:
            self.pending_image = None
            self.error = "Unsupported file type. Please upload a .txt, .jpg, or .png file."

    async def analyze(self) -> list[str]:
        if self.pending_image is None and self.selected is None:
            self.failure = InputRejected.__name__
            self.error = "No document selected or uploaded for analysis."
            return []

        self._begin()
        self.extracted_facts = []
        try:
            if self.pending_image is not None:
                name = self.pending_image.name
                facts = await self._analyze_image(self.pending_image)
            else:
                name = self.selected.name
                facts = await self._analyze_text(self.selected)
        except UpstreamTransportError as exc:
            self._fail(exc, "An error occurred during analysis.")
            return []
        except MalformedResponse as exc:
            self._fail(exc, f"Failed to extract facts in the correct format. {INVALID_FORMAT}")
            return []
        except Exception as exc:
            self._fail(exc, "An error occurred during analysis.")
            return []
        finally:
            self.busy = False

        if self.closed:
            return []
        self.extracted_facts = facts
        self._analyzed_name = name
        return facts

    def incorporate(self) -> FactSource | None:
        if not self.extracted_facts:
            return None
        name = self._analyzed_name or "Uploaded Document"
        return self.store.add_fact_source(name, list(self.extracted_facts))

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _analyze_text(self, doc: DocumentInfo) -> list[str]:
        prompt = self._build_prompt(doc.content, self.store.case_context)
        raw = await self.model.generate_structured(prompt, FACT_LIST_SCHEMA)
        return unwrap(parse_json(raw, list[str]))

    async def _analyze_image(self, image: PendingImage) -> list[str]:
        raw = await self.model.analyze_image(image.base64_data, image.mime_type, IMAGE_PROMPT)
        result = parse_json(raw, list[str])
        if isinstance(result, Err):
            # page images often come back as prose; keep it as one fact
            return [raw]
        return result.value

    def _build_prompt(self, document_content: str, case_context: str) -> str:
        p = self.profile
        return (
            f"You are an expert legal paralegal AI for a self-represented litigant in the {p.court}.\n"
            "Your task is to analyze a new document in the context of an existing case.\n\n"
            "**Existing Case Context:**\n"
            "---\n"
            f"{case_context}\n"
            "---\n\n"
            "**New Document Content:**\n"
            "---\n"
            f"{document_content}\n"
            "---\n\n"
            "**Instructions:**\n"
            "1. Read the new document and identify the most critical and relevant facts it contains.\n"
            "2. Focus on extracting atomic, individual pieces of information (e.g., specific "
            "dates, findings, names, allegations, key events, quotes).\n"
            "3. Do NOT provide a narrative summary. Instead, output a list of distinct factual statements.\n"
            "4. Ensure the facts are directly supported by the document's text.\n"
            f"5. Analyze this within the framework of the {p.legislation}, paying close "
            "attention to sections relevant to the best interests of the child (s 60CC).\n\n"
            "Return your response as a valid JSON array of strings. Each string in the array "
            "should be a single, concise fact.\n\n"
            "Do not include any text outside of the JSON array."
        )
