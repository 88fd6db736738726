from fastapi import APIRouter, Depends, HTTPException, Response

from ..engine.workspace import CaseWorkspace
from ..knowledge.base import FactSource
from ..knowledge.store import MANUAL_SOURCE_ID, KnowledgeStore
from ..schemas import AddFactRequest, FactOut, FactSourceOut, KnowledgeResponse
from .deps import get_workspace

router = APIRouter(prefix="/api/knowledge", tags=["knowledge"])


def source_out(source: FactSource) -> FactSourceOut:
    return FactSourceOut(
        id=source.id,
        name=source.name,
        facts=[FactOut(id=f.id, text=f.text) for f in source.facts],
    )


def knowledge_out(store: KnowledgeStore) -> KnowledgeResponse:
    return KnowledgeResponse(
        sources=[source_out(s) for s in store.sources],
        case_context=store.case_context,
        fact_count=store.fact_count,
    )


@router.get("", response_model=KnowledgeResponse)
async def get_knowledge(workspace: CaseWorkspace = Depends(get_workspace)):
    return knowledge_out(workspace.store)


@router.post("/facts", response_model=KnowledgeResponse)
async def add_fact(
    req: AddFactRequest, workspace: CaseWorkspace = Depends(get_workspace)
):
    # blank text is ignored rather than rejected
    workspace.store.add_fact(req.text, req.source_id or MANUAL_SOURCE_ID)
    return knowledge_out(workspace.store)


@router.delete("/sources/{source_id}/facts/{fact_id}", status_code=204)
async def delete_fact(
    source_id: str, fact_id: str, workspace: CaseWorkspace = Depends(get_workspace)
):
    if not workspace.store.delete_fact(fact_id, source_id):
        raise HTTPException(status_code=404, detail="Fact not found")
    return Response(status_code=204)
