from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from ..engine.document_analyzer import DocumentAnalyzer
from ..engine.errors import InputRejected
from ..engine.workspace import CaseWorkspace
from ..schemas import DocumentOut, DocumentsResponse, IncorporateResponse
from .deps import ensure_idle, get_workspace
from .knowledge import source_out

router = APIRouter(prefix="/api/documents", tags=["documents"])


def documents_out(analyzer: DocumentAnalyzer) -> DocumentsResponse:
    return DocumentsResponse(
        documents=[DocumentOut(id=d.id, name=d.name) for d in analyzer.documents],
        selected_document_id=analyzer.selected.id if analyzer.selected else None,
        pending_image=analyzer.pending_image.name if analyzer.pending_image else None,
        extracted_facts=analyzer.extracted_facts,
        busy=analyzer.busy,
        error=analyzer.error,
    )


@router.get("", response_model=DocumentsResponse)
async def list_documents(workspace: CaseWorkspace = Depends(get_workspace)):
    return documents_out(workspace.documents)


@router.post("/{doc_id}/select", response_model=DocumentsResponse)
async def select_document(doc_id: str, workspace: CaseWorkspace = Depends(get_workspace)):
    analyzer = workspace.documents
    ensure_idle(analyzer.busy)
    try:
        analyzer.select_document(doc_id)
    except InputRejected as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return documents_out(analyzer)


@router.post("/upload", response_model=DocumentsResponse)
async def upload_document(
    file: UploadFile = File(...), workspace: CaseWorkspace = Depends(get_workspace)
):
    analyzer = workspace.documents
    ensure_idle(analyzer.busy)
    data = await file.read()
    analyzer.attach_file(
        file.filename or "Uploaded Document",
        file.content_type or "application/octet-stream",
        data,
    )
    return documents_out(analyzer)


@router.post("/analyze", response_model=DocumentsResponse)
async def analyze_document(workspace: CaseWorkspace = Depends(get_workspace)):
    analyzer = workspace.documents
    ensure_idle(analyzer.busy)
    await analyzer.analyze()
    return documents_out(analyzer)


@router.post("/incorporate", response_model=IncorporateResponse)
async def incorporate_facts(workspace: CaseWorkspace = Depends(get_workspace)):
    source = workspace.documents.incorporate()
    if source is None:
        return IncorporateResponse(message="No extracted facts to incorporate.")
    return IncorporateResponse(
        message="Facts incorporated into Case Brain.",
        source=source_out(source),
    )
