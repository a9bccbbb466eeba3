"""Terminal entry point for document analysis chat.

Extracts the given files, opens a session with the analysis backend and
streams replies to stdout. Follow-up questions are read from stdin, one
per line, until EOF or /quit. Environment variables are loaded from .env.
"""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from doc_analysis.config import SessionConfig, get_session_config
from doc_analysis.models import Sender, SessionState, UploadedFile
from doc_analysis.session import (
    NoDocumentsError,
    NotConnectedError,
    ReplyPendingError,
    SessionCoordinator,
    create_chat_session,
)

load_dotenv()

logger = logging.getLogger(__name__)

QUIT_COMMAND = "/quit"


def configure_logging() -> None:
    """Configure root logging from LOG_LEVEL.

    Logs go to stderr so streamed replies on stdout stay readable.
    """
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Chat about documents with the analysis backend")
    parser.add_argument("files", nargs="+", type=Path, help="PDF or text files to analyze.")
    parser.add_argument("-m", "--message", required=True, help="First question about the documents.")
    parser.add_argument("--origin", default=None, help="Backend origin (defaults to DOC_ANALYSIS_ORIGIN).")
    return parser.parse_args(argv)


class ReplyPrinter:
    """Prints reply tokens to stdout as they are merged into the log."""

    def __init__(self) -> None:
        self._printed = 0

    def __call__(self, coordinator: SessionCoordinator) -> None:
        last = coordinator.chat_log.last
        if last is None or last.sender is not Sender.ASSISTANT:
            if self._printed:
                print(flush=True)
            self._printed = 0
            return
        delta = last.text[self._printed :]
        if delta:
            print(delta, end="", flush=True)
            self._printed = len(last.text)


async def wait_for_reply(coordinator: SessionCoordinator) -> None:
    """Wait until the pending reply starts streaming or the session ends."""
    ready = asyncio.Event()

    def on_change(session: SessionCoordinator) -> None:
        if session.state is not SessionState.AWAITING_REPLY:
            ready.set()

    unsubscribe = coordinator.subscribe(on_change)
    try:
        on_change(coordinator)
        await ready.wait()
    finally:
        unsubscribe()


async def run(args: argparse.Namespace) -> int:
    """Run one interactive session.

    Returns:
        Process exit code.
    """
    config = SessionConfig(origin=args.origin) if args.origin else get_session_config()
    session = create_chat_session(config)
    session.subscribe(ReplyPrinter())

    missing = [path for path in args.files if not path.is_file()]
    if missing:
        print(f"File not found: {', '.join(str(p) for p in missing)}", file=sys.stderr)
        return 2
    session.files.add(*(UploadedFile.from_path(path) for path in args.files))

    try:
        await session.submit(args.message)
    except NoDocumentsError as e:
        print(e, file=sys.stderr)
        return 2

    coordinator = session.coordinator
    while coordinator is not None:
        # Read input only once the pending reply has started
        await wait_for_reply(coordinator)
        if coordinator.state.is_terminal:
            break
        line = await asyncio.to_thread(sys.stdin.readline)
        if not line or line.strip() == QUIT_COMMAND:
            break
        try:
            await session.submit(line.strip())
        except ReplyPendingError:
            print("Still waiting for the current reply.", file=sys.stderr)
        except NotConnectedError as e:
            print(e, file=sys.stderr)

    await session.close()

    if coordinator is not None and coordinator.failure_message:
        print(coordinator.failure_message, file=sys.stderr)
        return 1
    return 0


def main(argv: list[str] | None = None) -> None:
    """Application entry point."""
    configure_logging()
    args = parse_args(argv)
    logger.info(f"Starting document analysis chat with {len(args.files)} file(s)")
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
