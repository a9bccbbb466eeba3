"""Unit tests for the user-facing chat session."""

import asyncio
from collections.abc import AsyncGenerator

import pytest
import pytest_check as check

from doc_analysis.config import SessionConfig
from doc_analysis.models import Sender, SessionState, UploadedFile
from doc_analysis.session import (
    ChatSession,
    FilesLockedError,
    NoDocumentsError,
    ReplyPendingError,
)
from tests.fakes import FakeConnector


class SlowFile(UploadedFile):
    """File whose read yields to the event loop before returning."""

    async def read(self) -> bytes:
        await asyncio.sleep(0.01)
        return self.content


def contract_file() -> UploadedFile:
    return UploadedFile(
        filename="lease.txt",
        media_type="text/plain",
        content=b"The tenant pays rent   monthly.",
    )


@pytest.fixture
async def chat_session(
    connector: FakeConnector, session_config: SessionConfig
) -> AsyncGenerator[ChatSession, None]:
    session = ChatSession(connector, session_config)
    yield session
    await session.new_session()


class TestSubmit:
    """Tests for sending messages through the session."""

    async def test_first_message_without_files(
        self, chat_session: ChatSession, connector: FakeConnector
    ) -> None:
        """Nothing is sent when no document is selected."""
        with pytest.raises(NoDocumentsError, match="upload at least one document"):
            await chat_session.submit("Summarize")

        check.equal(connector.urls, [])
        check.is_none(chat_session.coordinator)

    async def test_blank_message_is_ignored(
        self, chat_session: ChatSession, connector: FakeConnector
    ) -> None:
        chat_session.files.add(contract_file())

        await chat_session.submit("   ")

        check.equal(connector.urls, [])
        check.is_none(chat_session.coordinator)

    async def test_first_message_sends_corpus_and_locks_files(
        self, chat_session: ChatSession, connector: FakeConnector
    ) -> None:
        chat_session.files.add(contract_file())

        await chat_session.submit("Who pays rent?")

        expected_corpus = "--- lease.txt (TXT) ---\nThe tenant pays rent monthly."
        check.equal(connector.connection.sent, [expected_corpus, "Who pays rent?"])
        check.equal(chat_session.corpus, expected_corpus)
        check.is_true(chat_session.files.locked)
        check.equal([doc.filename for doc in chat_session.documents], ["lease.txt"])
        check.equal(chat_session.coordinator.state, SessionState.AWAITING_REPLY)

    async def test_files_cannot_change_after_start(self, chat_session: ChatSession) -> None:
        chat_session.files.add(contract_file())
        await chat_session.submit("Who pays rent?")

        with pytest.raises(FilesLockedError):
            chat_session.files.add(contract_file())

    async def test_follow_up_uses_same_connection(
        self, chat_session: ChatSession, connector: FakeConnector
    ) -> None:
        chat_session.files.add(contract_file())
        await chat_session.submit("Who pays rent?")
        chat_session.coordinator.handle_frame("The tenant.")

        await chat_session.submit("How often?")

        check.equal(len(connector.connections), 1)
        check.equal(connector.connection.sent[-1], "How often?")
        check.equal(
            [m.sender for m in chat_session.messages],
            [Sender.USER, Sender.ASSISTANT, Sender.USER],
        )

    async def test_sections(self, chat_session: ChatSession) -> None:
        chat_session.files.add(
            contract_file(),
            UploadedFile(filename="notes.md", media_type="text/markdown", content=b"# Notes"),
        )

        await chat_session.submit("Compare these")

        assert [(s.filename, s.label) for s in chat_session.sections] == [
            ("lease.txt", "TXT"),
            ("notes.md", "MARKDOWN"),
        ]

    async def test_listener_follows_new_coordinator(
        self, chat_session: ChatSession, connector: FakeConnector
    ) -> None:
        """Listeners registered before the first message see its session."""
        seen: list[SessionState] = []
        chat_session.subscribe(lambda session: seen.append(session.state))
        chat_session.files.add(contract_file())

        await chat_session.submit("Who pays rent?")

        check.is_in(SessionState.CONNECTING, seen)
        check.equal(seen[-1], SessionState.AWAITING_REPLY)

    async def test_unsubscribe_stops_notifications(
        self, chat_session: ChatSession, connector: FakeConnector
    ) -> None:
        seen: list[SessionState] = []
        unsubscribe = chat_session.subscribe(lambda session: seen.append(session.state))
        chat_session.files.add(contract_file())
        await chat_session.submit("Who pays rent?")
        count = len(seen)

        unsubscribe()
        chat_session.coordinator.handle_frame("The tenant.")

        check.greater(count, 0)
        check.equal(len(seen), count)

    async def test_unsubscribe_before_start(
        self, chat_session: ChatSession, connector: FakeConnector
    ) -> None:
        seen: list[SessionState] = []
        unsubscribe = chat_session.subscribe(lambda session: seen.append(session.state))
        unsubscribe()
        chat_session.files.add(contract_file())

        await chat_session.submit("Who pays rent?")

        assert seen == []

    async def test_overlapping_first_messages_open_one_connection(
        self, chat_session: ChatSession, connector: FakeConnector
    ) -> None:
        """A second message while the session is starting is rejected."""
        chat_session.files.add(
            SlowFile(filename="lease.txt", media_type="text/plain", content=b"Rent is monthly.")
        )

        results = await asyncio.gather(
            chat_session.submit("First"),
            chat_session.submit("Second"),
            return_exceptions=True,
        )

        check.is_none(results[0])
        check.is_instance(results[1], ReplyPendingError)
        check.equal(len(connector.connections), 1)
        check.equal(connector.connection.sent[1:], ["First"])
        check.equal([m.text for m in chat_session.messages], ["First"])


class TestNewSession:
    """Tests for starting over."""

    async def test_new_session_resets_everything(
        self, chat_session: ChatSession, connector: FakeConnector
    ) -> None:
        chat_session.files.add(contract_file())
        await chat_session.submit("Who pays rent?")
        old_connection = connector.connection
        old_id = chat_session.session_id

        await chat_session.new_session()

        check.is_true(old_connection.closed)
        check.is_none(chat_session.coordinator)
        check.equal(chat_session.messages, ())
        check.equal(len(chat_session.files), 0)
        check.is_false(chat_session.files.locked)
        check.not_equal(chat_session.session_id, old_id)

    async def test_new_session_opens_new_connection(
        self, chat_session: ChatSession, connector: FakeConnector
    ) -> None:
        chat_session.files.add(contract_file())
        await chat_session.submit("First session")
        await chat_session.new_session()

        chat_session.files.add(contract_file())
        await chat_session.submit("Second session")

        check.equal(len(connector.connections), 2)
        check.equal(connector.connection.sent[-1], "Second session")
        check.equal([m.text for m in chat_session.messages], ["Second session"])

    async def test_new_session_restores_suggestions(self, chat_session: ChatSession) -> None:
        chat_session.suggestions.use("Analyze key clauses")

        await chat_session.new_session()

        assert len(chat_session.suggestions.available) == 3
