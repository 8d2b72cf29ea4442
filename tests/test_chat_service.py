"""
Tests for the chat turn orchestration
"""
import asyncio
from unittest.mock import AsyncMock, Mock, patch
import pytest
from core import prompt_builder
from model.session import ConversationContext
from model.student import CourseRecord, StudentSnapshot
from repository.chat_log_repository import ChatLogRepository
from service.chat_service import ChatService
from util.enums import ErrorKind, TurnState
from util.errors import AppError, CompletionError, DataAccessError, StudentNotFoundError


class InMemorySessions:
    def __init__(self):
        self.data = {}
        self.puts = 0

    async def create(self, student_id):
        ctx = ConversationContext(session_id=f"s{len(self.data) + 1}", student_id=student_id)
        await self.put(ctx)
        return ctx

    async def put(self, ctx):
        self.puts += 1
        self.data[ctx.session_id] = ctx.model_copy(deep=True)

    async def get(self, session_id):
        ctx = self.data.get(session_id)
        return ctx.model_copy(deep=True) if ctx else None

    async def delete(self, session_id):
        return 1 if self.data.pop(session_id, None) else 0


def _snapshot():
    return StudentSnapshot(
        student_id=7,
        name="Ada Lovelace",
        major="Computer Science",
        gpa=3.5,
        credits_earned=45,
        courses=[CourseRecord(code="CS 215", title="Intro Programming", credit_hours=3, grade="A")],
    )


class TestChatService:
    @pytest.fixture(autouse=True)
    def _service(self, tmp_path, make_pdf, bulletin_text):
        self.pdf = make_pdf([bulletin_text])
        self.sessions = InMemorySessions()
        self.chat_logs = ChatLogRepository(str(tmp_path))
        self.student_context = Mock()
        self.student_context.build = AsyncMock(return_value=_snapshot())
        self.documents = Mock()
        self.documents.get_latest_bulletin = AsyncMock(return_value=None)
        self.blobs = Mock()
        self.blobs.download = AsyncMock(return_value=self.pdf)
        self.supporting_docs = Mock()
        self.supporting_docs.search = AsyncMock(return_value=[])
        self.completion = Mock()
        self.completion.generate = AsyncMock(return_value="LLM answer")
        self.service = ChatService(
            sessions=self.sessions,
            chat_logs=self.chat_logs,
            student_context=self.student_context,
            documents=self.documents,
            blobs=self.blobs,
            supporting_docs=self.supporting_docs,
            completion=self.completion,
        )
        self.sid = asyncio.run(self.service.start_session(7)).session_id

    def _send(self, message, upload=None):
        return asyncio.run(self.service.send_message(self.sid, message, upload))

    def _ctx(self):
        return self.sessions.data[self.sid]

    # ---------------- Sessions ----------------

    def test_unknown_session(self):
        with pytest.raises(AppError) as e:
            asyncio.run(self.service.send_message("nope", "hi"))
        assert e.value.status_code == 404

    def test_end_session(self):
        asyncio.run(self.service.end_session(self.sid))

        assert self.sid not in self.sessions.data

    # ---------------- Uploads ----------------

    def test_upload_caches_catalog_and_confirms(self):
        outcome = self._send("", (self.pdf, "bulletin.pdf"))

        assert outcome.state == TurnState.IDLE
        assert outcome.reply.startswith("✅ Loaded PDF: bulletin.pdf. Extracted 1 page(s),")
        assert "Parsed 6 course item(s) (Required: 4, Electives: 2)." in outcome.reply
        assert [m.role for m in outcome.messages] == ["system"]
        ctx = self._ctx()
        assert ctx.has_catalog()
        assert ctx.pdf_file_name == "bulletin.pdf"
        self.completion.generate.assert_not_called()

    def test_non_pdf_rejected_without_state_change(self):
        puts = self.sessions.puts

        with pytest.raises(AppError) as e:
            self._send("hello", (b"plain text", "notes.txt"))

        assert e.value.status_code == 400
        assert e.value.detail == "Only PDF files are allowed."
        assert self.sessions.puts == puts
        assert self._ctx().conversation_id is None

    def test_oversized_upload_rejected_before_extraction(self):
        big = b"0" * (60 * 1024 * 1024)

        with patch("service.chat_service.extract_pages") as extract:
            with pytest.raises(AppError) as e:
                self._send("", (big, "huge.pdf"))

        assert e.value.status_code == 413
        extract.assert_not_called()
        assert not self._ctx().has_catalog()

    def test_unreadable_pdf(self):
        with pytest.raises(AppError) as e:
            self._send("", (b"definitely not a pdf", "broken.pdf"))

        assert e.value.status_code == 422

    def test_scanned_pdf_is_parse_empty(self, make_pdf):
        outcome = self._send("", (make_pdf([""]), "scan.pdf"))

        assert outcome.error == ErrorKind.PARSE_EMPTY
        assert "Parsed 0 course item(s)" in outcome.reply
        assert self._ctx().pages == []

    # ---------------- Turns ----------------

    def test_blank_message_is_a_no_op(self):
        outcome = self._send("   ")

        assert outcome.state == TurnState.IDLE
        assert outcome.messages == []
        self.completion.generate.assert_not_called()

    def test_profile_bypasses_completion(self):
        outcome = self._send("who am i?")

        assert outcome.state == TurnState.BYPASSED
        assert outcome.reply.startswith("## Answer\nHere’s your profile from the database.\n\n")
        assert "Name: Ada Lovelace" in outcome.reply
        assert [m.role for m in outcome.messages] == ["user", "assistant"]
        self.completion.generate.assert_not_called()

    def test_profile_student_missing(self):
        self.student_context.build.side_effect = StudentNotFoundError(7)

        outcome = self._send("show my profile")

        assert outcome.error == ErrorKind.NOT_FOUND
        assert outcome.reply == prompt_builder.STUDENT_NOT_FOUND_MESSAGE

    def test_snapshot_is_built_once_per_session(self):
        self._send("who am i")
        self._send("my info")

        assert self.student_context.build.await_count == 1

    def test_planning_uses_recommendations_without_completed(self):
        self._send("", (self.pdf, "bulletin.pdf"))

        outcome = self._send("What should I take next semester?")

        assert outcome.state == TurnState.COMPLETED
        assert outcome.reply == "LLM answer"
        prompt, history = self.completion.generate.await_args.args
        assert "- CS 311 — Data Structures and Analysis of Algorithms | Credits: 3" in prompt
        assert "- CS 215 —" not in prompt
        assert [m.role for m in history] == ["system"]
        assert [m.role for m in outcome.messages] == ["system", "user", "assistant"]

    def test_planning_nothing_left(self, make_pdf):
        pdf = make_pdf(["Required Courses\nCS 215 - Intro Programming Credits: 3"])
        self._send("", (pdf, "b.pdf"))

        outcome = self._send("recommend courses")

        assert outcome.reply == prompt_builder.NOTHING_TO_RECOMMEND_MESSAGE
        assert outcome.state == TurnState.BYPASSED
        self.completion.generate.assert_not_called()

    def test_no_catalog_anywhere(self):
        outcome = self._send("What is the probation policy?")

        assert outcome.reply == prompt_builder.NO_CATALOG_MESSAGE
        assert outcome.error == ErrorKind.NOT_FOUND
        self.documents.get_latest_bulletin.assert_awaited_once_with("Major")

    def test_auto_load_and_cite(self):
        self.documents.get_latest_bulletin.return_value = {
            "FileName": "Bulletin_2024.pdf",
            "FilePath": "/uploads/bulletins/2024/Bulletin_2024_x.pdf",
            "BulletinYear": "2024-2025",
            "AcademicYear": 2024,
        }

        outcome = self._send("Tell me about Machine Learning")

        assert outcome.state == TurnState.COMPLETED
        assert outcome.reply.startswith("LLM answer")
        assert "- Bulletin_2024.pdf (2024-2025), page 1" in outcome.reply
        assert outcome.citations[0].academic_year == "2024-2025"
        ctx = self._ctx()
        assert ctx.academic_year == "2024-2025"
        assert ctx.has_catalog()

    def test_general_passes_course_filter_to_documents(self):
        self._send("", (self.pdf, "bulletin.pdf"))

        self._send("Is CS311 hard?")

        self.supporting_docs.search.assert_awaited_once_with("Is CS311 hard?", course_code="CS 311")

    def test_auto_load_failure_degrades(self):
        self.documents.get_latest_bulletin.side_effect = DataAccessError("bulletin.latest")

        outcome = self._send("probation policy")

        assert outcome.reply == prompt_builder.NO_CATALOG_MESSAGE

    def test_completion_failure_persists_apology(self):
        self._send("", (self.pdf, "bulletin.pdf"))
        self.completion.generate.side_effect = CompletionError("status 500")

        outcome = self._send("recommend something")

        assert outcome.state == TurnState.FAILED
        assert outcome.error == ErrorKind.UPSTREAM_UNAVAILABLE
        assert outcome.reply == prompt_builder.APOLOGY_MESSAGE
        assert [(m.role, m.content) for m in outcome.messages[-2:]] == [
            ("user", "recommend something"),
            ("assistant", prompt_builder.APOLOGY_MESSAGE),
        ]

    def test_database_failure_persists_apology(self):
        self.student_context.build.side_effect = DataAccessError("student.summary")

        outcome = self._send("who am i")

        assert outcome.error == ErrorKind.UPSTREAM_UNAVAILABLE
        assert len(asyncio.run(self.service.history(self.sid))) == 2

    # ---------------- Clear / remove ----------------

    def test_clear_wipes_log_and_state(self):
        self._send("", (self.pdf, "bulletin.pdf"))
        self._send("who am i")
        conversation_id = self._ctx().conversation_id

        asyncio.run(self.service.clear(self.sid))

        ctx = self._ctx()
        assert ctx.conversation_id is None
        assert ctx.catalog is None and ctx.student is None and ctx.pages == []
        assert asyncio.run(self.chat_logs.load(conversation_id)) == []
        assert asyncio.run(self.service.history(self.sid)) == []

    def test_remove_pdf_keeps_student(self):
        self._send("", (self.pdf, "bulletin.pdf"))
        self._send("who am i")

        asyncio.run(self.service.remove_pdf(self.sid))

        ctx = self._ctx()
        assert ctx.catalog is None and ctx.pdf_file_name is None and ctx.pages == []
        assert ctx.student is not None
        assert ctx.conversation_id is not None
