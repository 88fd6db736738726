from fastapi import APIRouter, Depends

from ..engine.chat_session import ChatSessionManager
from ..engine.workspace import CaseWorkspace
from ..schemas import ChatMessageOut, ChatMessageRequest, ChatStateResponse
from .deps import ensure_idle, get_workspace

router = APIRouter(prefix="/api/chat", tags=["chat"])


def chat_out(chat: ChatSessionManager) -> ChatStateResponse:
    return ChatStateResponse(
        state=chat.state.value,
        busy=chat.busy,
        history=[ChatMessageOut(role=m.role, text=m.text) for m in chat.history],
    )


@router.get("", response_model=ChatStateResponse)
async def get_chat(workspace: CaseWorkspace = Depends(get_workspace)):
    chat = workspace.chat
    if not chat.busy:
        await chat.ensure_synced()
    return chat_out(chat)


@router.post("/message", response_model=ChatStateResponse)
async def send_message(
    req: ChatMessageRequest, workspace: CaseWorkspace = Depends(get_workspace)
):
    chat = workspace.chat
    ensure_idle(chat.busy)
    await chat.ensure_synced()
    await chat.send(req.message)
    return chat_out(chat)
