from fastapi import FastAPI, HTTPException, Request

from ..engine.workspace import CaseWorkspace


def current_workspace(app: FastAPI) -> CaseWorkspace | None:
    """The live workspace, or None before startup and after shutdown."""
    workspace = getattr(app.state, "workspace", None)
    if workspace is None or workspace.closed:
        return None
    return workspace


def get_workspace(request: Request) -> CaseWorkspace:
    workspace = current_workspace(request.app)
    if workspace is None:
        raise HTTPException(status_code=503, detail="Workspace is not available")
    return workspace


def ensure_idle(busy: bool) -> None:
    if busy:
        raise HTTPException(status_code=409, detail="A request is already in progress")
