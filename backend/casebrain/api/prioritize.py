from fastapi import APIRouter, Depends

from ..engine.prioritizer import Prioritizer, priority_label
from ..engine.workspace import CaseWorkspace
from ..schemas import PrioritizedTaskOut, PrioritizerResponse, PrioritizerUpdate
from .deps import ensure_idle, get_workspace

router = APIRouter(prefix="/api/prioritize", tags=["prioritize"])


def prioritizer_out(prioritizer: Prioritizer) -> PrioritizerResponse:
    return PrioritizerResponse(
        tasks=prioritizer.tasks,
        goals=prioritizer.goals,
        prioritized_tasks=[
            PrioritizedTaskOut(**t.model_dump(), label=priority_label(t.priority))
            for t in prioritizer.prioritized_tasks
        ],
        busy=prioritizer.busy,
        error=prioritizer.error,
    )


@router.get("", response_model=PrioritizerResponse)
async def get_prioritizer(workspace: CaseWorkspace = Depends(get_workspace)):
    workspace.prioritizer.sync()
    return prioritizer_out(workspace.prioritizer)


@router.put("", response_model=PrioritizerResponse)
async def update_prioritizer(
    req: PrioritizerUpdate, workspace: CaseWorkspace = Depends(get_workspace)
):
    prioritizer = workspace.prioritizer
    ensure_idle(prioritizer.busy)
    prioritizer.sync()
    if req.tasks is not None:
        prioritizer.tasks = req.tasks
    if req.goals is not None:
        prioritizer.goals = req.goals
    return prioritizer_out(prioritizer)


@router.post("/run", response_model=PrioritizerResponse)
async def run_prioritization(workspace: CaseWorkspace = Depends(get_workspace)):
    prioritizer = workspace.prioritizer
    ensure_idle(prioritizer.busy)
    await prioritizer.prioritize()
    return prioritizer_out(prioritizer)
