from fastapi import APIRouter, Depends, HTTPException

from ..engine.errors import InputRejected
from ..engine.strategist import Strategist
from ..engine.workspace import CaseWorkspace
from ..schemas import StrategyRequest, StrategyResponse, StrategySelectResponse
from .deps import ensure_idle, get_workspace

router = APIRouter(prefix="/api/strategy", tags=["strategy"])


def strategy_out(strategist: Strategist) -> StrategyResponse:
    return StrategyResponse(
        goal=strategist.goal,
        pathways=strategist.pathways,
        busy=strategist.busy,
        error=strategist.error,
    )


@router.get("", response_model=StrategyResponse)
async def get_strategy(workspace: CaseWorkspace = Depends(get_workspace)):
    return strategy_out(workspace.strategist)


@router.post("/generate", response_model=StrategyResponse)
async def generate_strategy(
    req: StrategyRequest, workspace: CaseWorkspace = Depends(get_workspace)
):
    strategist = workspace.strategist
    ensure_idle(strategist.busy)
    if req.goal is not None:
        strategist.goal = req.goal
    await strategist.generate()
    return strategy_out(strategist)


@router.post("/{index}/select", response_model=StrategySelectResponse)
async def select_strategy(index: int, workspace: CaseWorkspace = Depends(get_workspace)):
    try:
        tasks = workspace.strategist.select(index)
    except InputRejected as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return StrategySelectResponse(
        message="Strategy selected! The action items have been sent to the Prioritizer module.",
        tasks=tasks,
    )
