# service/chat_service.py
import asyncio
import os
from typing import List, Optional, Sequence, Tuple
from config.settings import settings
from core import prompt_builder
from core.catalog_parser import parse_degree_plan
from core.completion_client import CompletionClient
from core.course_recommender import recommend_next
from core.entities import Citation, TurnOutcome
from core.pdf_text import extract_pages
from core.snippet_retriever import find_top_relevant_snippets
from core.student_context import render_student_context, short_snapshot
from model.catalog import PdfExtractResult
from model.chat import ChatMessage
from model.session import ConversationContext
from repository.blob_repository import BlobRepository
from repository.chat_log_repository import ChatLogRepository
from repository.document_repository import DocumentRepository, bulletin_year_label
from repository.session_repository import SessionRepository
from service.student_context_service import StudentContextService
from service.supporting_docs_service import SupportingDocsService
from util.enums import ErrorKind, ErrorMessage, Intent, TurnState
from util.errors import (
    AppError,
    BlobStorageError,
    CompletionError,
    DataAccessError,
    PdfUnreadableError,
    StudentNotFoundError,
)
from util.functions import find_course_code
from util.timing import timed
import logging

logger = logging.getLogger(__name__)

# (reply, state, citations, error)
_Answer = Tuple[str, TurnState, List[Citation], Optional[ErrorKind]]


def _transition(ctx: ConversationContext, state: TurnState, **kv) -> None:
    suffix = "".join(f" {k}={v}" for k, v in kv.items())
    logger.info("chat.turn.state conv=%s state=%s%s", ctx.conversation_id, state.value, suffix)


def validate_pdf_upload(file_name: str, size: int) -> None:
    """Extension and size gate; runs before any byte is parsed."""
    if os.path.splitext(file_name or "")[1].lower() != ".pdf":
        raise AppError.of(ErrorMessage.PDF_ONLY)
    if size > settings.MAX_FILE_MB * 1024 * 1024:
        raise AppError.of(
            ErrorMessage.FILE_TOO_LARGE,
            f"PDF is too large (max {settings.MAX_FILE_MB}MB).",
        )


def confirmation_message(file_name: str, extracted: PdfExtractResult, plan) -> str:
    return (
        f"✅ Loaded PDF: {file_name}. Extracted {len(extracted.pages)} page(s), "
        f"{extracted.total_chars:,} chars. Parsed {plan.total_count} course item(s) "
        f"(Required: {len(plan.required)}, Electives: {len(plan.electives)})."
    )


class ChatService:
    """
    Per-turn orchestration of the advising chat.

    Flow per turn:
    - load session context, mint conversation id, ingest an attached PDF
    - classify intent, then answer directly (profile / missing data) or
      assemble a grounded prompt and call the completion service
    - persist user + assistant messages; upstream failures persist an apology
    State transitions are logged as `chat.turn.state`.
    """

    def __init__(
        self,
        sessions: SessionRepository,
        chat_logs: ChatLogRepository,
        student_context: StudentContextService,
        documents: DocumentRepository,
        blobs: BlobRepository,
        supporting_docs: SupportingDocsService,
        completion: CompletionClient,
    ) -> None:
        self._sessions = sessions
        self._chat_logs = chat_logs
        self._student_context = student_context
        self._documents = documents
        self._blobs = blobs
        self._supporting_docs = supporting_docs
        self._completion = completion

    # ---------------- Sessions ----------------

    async def start_session(self, student_id: int) -> ConversationContext:
        ctx = await self._sessions.create(student_id)
        logger.info("session.start session=%s student=%s", ctx.session_id, student_id)
        return ctx

    async def end_session(self, session_id: str) -> None:
        await self._sessions.delete(session_id)
        logger.info("session.end session=%s", session_id)

    async def _require(self, session_id: str) -> ConversationContext:
        ctx = await self._sessions.get(session_id)
        if ctx is None:
            raise AppError.of(ErrorMessage.SESSION_NOT_FOUND)
        return ctx

    # ---------------- Log operations ----------------

    async def history(self, session_id: str) -> List[ChatMessage]:
        ctx = await self._require(session_id)
        if not ctx.conversation_id:
            return []
        return await self._chat_logs.load(ctx.conversation_id)

    async def clear(self, session_id: str) -> None:
        """Wipe the conversation log and every cached piece of session state."""
        ctx = await self._require(session_id)
        if ctx.conversation_id:
            await self._chat_logs.clear(ctx.conversation_id)
        ctx.reset()
        await self._sessions.put(ctx)
        logger.info("chat.clear session=%s", session_id)

    async def remove_pdf(self, session_id: str) -> None:
        ctx = await self._require(session_id)
        ctx.invalidate_catalog()
        await self._sessions.put(ctx)
        logger.info("chat.remove_pdf session=%s", session_id)

    # ---------------- Bulletin ingestion ----------------

    async def _ingest_pdf(
        self, ctx: ConversationContext, data: bytes, file_name: str
    ) -> Tuple[str, bool]:
        validate_pdf_upload(file_name, len(data))
        try:
            extracted = await asyncio.to_thread(
                extract_pages,
                data,
                file_name,
                settings.BULLETIN_MAX_PAGES,
                settings.BULLETIN_MAX_CHARS,
            )
        except PdfUnreadableError:
            raise AppError.of(ErrorMessage.PDF_UNREADABLE)

        plan = parse_degree_plan(extracted.pages)
        ctx.invalidate_catalog()
        ctx.pdf_file_name = file_name
        ctx.pages = extracted.pages if extracted.text_found else []
        ctx.catalog = plan
        logger.info(
            "chat.upload.ok conv=%s pages=%d courses=%d",
            ctx.conversation_id,
            len(extracted.pages),
            plan.total_count,
        )
        parse_empty = not extracted.text_found or plan.total_count == 0
        return confirmation_message(file_name, extracted, plan), parse_empty

    async def _auto_load_catalog(self, ctx: ConversationContext) -> bool:
        """Newest active bulletin for the default category; False when unavailable."""
        category = settings.DEFAULT_BULLETIN_CATEGORY
        try:
            row = await self._documents.get_latest_bulletin(category)
            if row is None:
                logger.info("chat.autoload.none category=%s", category)
                return False
            name = str(row.get("FileName") or "Bulletin.pdf")
            raw = await self._blobs.download(str(row.get("FilePath") or ""))
            extracted = await asyncio.to_thread(
                extract_pages,
                raw,
                name,
                settings.BULLETIN_MAX_PAGES,
                settings.BULLETIN_MAX_CHARS,
            )
        except (DataAccessError, BlobStorageError, PdfUnreadableError):
            logger.warning("chat.autoload.error category=%s", category, exc_info=True)
            return False

        plan = parse_degree_plan(extracted.pages)
        if plan.total_count == 0:
            logger.warning("chat.autoload.empty name=%s", name)
            return False

        year = row.get("BulletinYear") or (
            bulletin_year_label(int(row["AcademicYear"]))
            if row.get("AcademicYear")
            else None
        )
        ctx.pdf_file_name = name
        ctx.academic_year = str(year) if year else None
        ctx.pages = extracted.pages
        ctx.catalog = plan
        logger.info("chat.autoload.ok name=%s courses=%d", name, plan.total_count)
        return True

    # ---------------- Answering ----------------

    async def _ensure_student(self, ctx: ConversationContext) -> bool:
        if ctx.student is not None:
            return True
        try:
            ctx.student = await self._student_context.build(ctx.student_id)
        except StudentNotFoundError:
            return False
        return True

    async def _answer(
        self,
        ctx: ConversationContext,
        intent: Intent,
        question: str,
        history: Sequence[ChatMessage],
    ) -> _Answer:
        found = await self._ensure_student(ctx)

        if intent == Intent.PROFILE:
            if not found:
                return (
                    prompt_builder.STUDENT_NOT_FOUND_MESSAGE,
                    TurnState.BYPASSED,
                    [],
                    ErrorKind.NOT_FOUND,
                )
            reply = prompt_builder.build_profile_answer(
                render_student_context(ctx.student)
            )
            return reply, TurnState.BYPASSED, [], None

        if not ctx.has_catalog() and not await self._auto_load_catalog(ctx):
            return (
                prompt_builder.NO_CATALOG_MESSAGE,
                TurnState.BYPASSED,
                [],
                ErrorKind.NOT_FOUND,
            )

        snapshot_text = short_snapshot(ctx.student)
        catalog_name = ctx.pdf_file_name or prompt_builder.DEFAULT_CATALOG_NAME

        if intent == Intent.PLANNING:
            completed = ctx.student.completed_codes() if ctx.student else set()
            recommended = recommend_next(
                ctx.catalog, completed, settings.RECOMMEND_COUNT
            )
            if not recommended:
                return (
                    prompt_builder.NOTHING_TO_RECOMMEND_MESSAGE,
                    TurnState.BYPASSED,
                    [],
                    None,
                )
            prompt = prompt_builder.build_planning_prompt(
                question, snapshot_text, catalog_name, recommended
            )
            _transition(ctx, TurnState.CONTEXT_ASSEMBLED, recommended=len(recommended))
            reply = await self._completion.generate(prompt, history)
            return reply, TurnState.COMPLETED, [], None

        hits = find_top_relevant_snippets(
            ctx.pages,
            question,
            top_k=settings.RAG_TOP_K,
            snippet_max_chars=settings.RAG_SNIPPET_CHARS,
        )
        docs = await self._supporting_docs.search(
            question, course_code=find_course_code(question)
        )
        prepared = prompt_builder.prepare_general(
            question,
            snapshot_text,
            ctx.pdf_file_name,
            ctx.academic_year,
            ctx.catalog,
            hits,
            docs,
        )
        _transition(ctx, TurnState.CONTEXT_ASSEMBLED, hits=len(hits), docs=len(docs))
        reply = await self._completion.generate(prepared.prompt, history)
        return (
            reply + prompt_builder.format_citations(prepared.citations),
            TurnState.COMPLETED,
            prepared.citations,
            None,
        )

    # ---------------- Turn ----------------

    async def send_message(
        self,
        session_id: str,
        message: str,
        upload: Optional[Tuple[bytes, str]] = None,
    ) -> TurnOutcome:
        ctx = await self._require(session_id)
        conversation_id = ctx.ensure_conversation_id()
        _transition(ctx, TurnState.IDLE)

        messages: List[ChatMessage] = []
        upload_reply: Optional[str] = None
        upload_error: Optional[ErrorKind] = None
        if upload is not None:
            data, file_name = upload
            upload_reply, parse_empty = await self._ingest_pdf(ctx, data, file_name)
            messages = await self._chat_logs.append(
                conversation_id, [ChatMessage(role="system", content=upload_reply)]
            )
            await self._sessions.put(ctx)
            if parse_empty:
                upload_error = ErrorKind.PARSE_EMPTY

        question = (message or "").strip()
        if not question:
            await self._sessions.put(ctx)
            if upload is None:
                messages = await self._chat_logs.load(conversation_id)
            return TurnOutcome(
                reply=upload_reply,
                state=TurnState.IDLE,
                messages=messages,
                error=upload_error,
            )

        intent = prompt_builder.classify_intent(question)
        _transition(ctx, TurnState.INTENT_DETECTED, intent=intent.value)
        history = await self._chat_logs.load(conversation_id)
        user = ChatMessage(role="user", content=question)

        try:
            with timed(logger, "chat.turn", intent=intent.value):
                reply, state, citations, error = await self._answer(
                    ctx, intent, question, history
                )
        except (CompletionError, DataAccessError, BlobStorageError):
            logger.error("chat.turn.failed conv=%s", conversation_id, exc_info=True)
            _transition(ctx, TurnState.FAILED)
            messages = await self._chat_logs.append(
                conversation_id,
                [user, ChatMessage(role="assistant", content=prompt_builder.APOLOGY_MESSAGE)],
            )
            await self._sessions.put(ctx)
            return TurnOutcome(
                reply=prompt_builder.APOLOGY_MESSAGE,
                state=TurnState.FAILED,
                messages=messages,
                error=ErrorKind.UPSTREAM_UNAVAILABLE,
            )

        _transition(ctx, state)
        messages = await self._chat_logs.append(
            conversation_id, [user, ChatMessage(role="assistant", content=reply)]
        )
        await self._sessions.put(ctx)
        return TurnOutcome(
            reply=reply,
            state=state,
            messages=messages,
            citations=citations,
            error=error or upload_error,
        )
