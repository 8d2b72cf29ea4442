# controller/chat_controller.py
from typing import Optional
from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from core.entities import TurnOutcome
from model.api import (
    CitationOut,
    CreateSessionRequest,
    CreateSessionResponse,
    HistoryResponse,
    MessageOut,
    OkResponse,
    SendMessageResponse,
    TurnError,
)
from model.chat import ChatMessage
from service.chat_service import ChatService
from util.constants import InternalURIs
from util.enums import ErrorKind
from controller.controller_dependencies import (
    get_chat_service,
    rate_limit,
    read_limited_upload,
)

chat_router = APIRouter(dependencies=[Depends(rate_limit)])

_ERROR_HINTS = {
    ErrorKind.UPSTREAM_UNAVAILABLE: "A backing service is unavailable. Please try again later.",
    ErrorKind.PARSE_EMPTY: "No course listings could be read from the PDF.",
}


def _messages(messages: list[ChatMessage]) -> list[MessageOut]:
    return [
        MessageOut(role=m.role, content=m.content, timestamp=m.timestamp)
        for m in messages
    ]


def _turn_response(outcome: TurnOutcome) -> SendMessageResponse:
    error = None
    if outcome.error is not None:
        error = TurnError(kind=outcome.error, message=_ERROR_HINTS.get(outcome.error))
    return SendMessageResponse(
        reply=outcome.reply,
        citations=[
            CitationOut(source=c.source, page=c.page, academicYear=c.academic_year)
            for c in outcome.citations
        ],
        messages=_messages(outcome.messages),
        error=error,
        state=outcome.state,
    )


@chat_router.post(
    InternalURIs.SESSIONS,
    response_model=CreateSessionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_session(
    payload: CreateSessionRequest,
    service: ChatService = Depends(get_chat_service),
) -> CreateSessionResponse:
    ctx = await service.start_session(payload.studentId)
    return CreateSessionResponse(sessionId=ctx.session_id)


@chat_router.delete(InternalURIs.SESSION, response_model=OkResponse)
async def end_session(
    session_id: str, service: ChatService = Depends(get_chat_service)
) -> OkResponse:
    await service.end_session(session_id)
    return OkResponse()


@chat_router.post(InternalURIs.CHAT_MESSAGES, response_model=SendMessageResponse)
async def send_message(
    session_id: str,
    request: Request,
    message: str = Form(""),
    file: Optional[UploadFile] = File(None),
    service: ChatService = Depends(get_chat_service),
) -> SendMessageResponse:
    data = await read_limited_upload(request, file)
    upload = (data, file.filename or "") if data is not None and file else None
    outcome = await service.send_message(session_id, message, upload)
    return _turn_response(outcome)


@chat_router.get(InternalURIs.CHAT_MESSAGES, response_model=HistoryResponse)
async def get_messages(
    session_id: str, service: ChatService = Depends(get_chat_service)
) -> HistoryResponse:
    return HistoryResponse(messages=_messages(await service.history(session_id)))


@chat_router.post(InternalURIs.CHAT_CLEAR, response_model=OkResponse)
async def clear_conversation(
    session_id: str, service: ChatService = Depends(get_chat_service)
) -> OkResponse:
    await service.clear(session_id)
    return OkResponse()


@chat_router.post(InternalURIs.CHAT_REMOVE_PDF, response_model=OkResponse)
async def remove_pdf(
    session_id: str, service: ChatService = Depends(get_chat_service)
) -> OkResponse:
    await service.remove_pdf(session_id)
    return OkResponse()
