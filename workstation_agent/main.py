"""Main entry point for the workstation agent."""

import argparse
import asyncio
import getpass
import logging
import sys
from typing import List, Optional

from .agent import ChatAgent
from .client import BackendClient, LocalBackend
from .config import API_URL, LOG_LEVEL, SERVER_HOST, SERVER_PORT
from .desktop import DesktopRuntime
from .exceptions import ApiError, DesktopError
from .file_client import FileSessionClient
from .session import SessionManager
from .snapshot import snapshot_runtime

logger = logging.getLogger(__name__)

ROLE_MARKERS = {"user": "🧑", "assistant": "🤖"}


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else LOG_LEVEL
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


def print_help():
    """Print welcome message and help text."""
    print("=" * 60)
    print("Workstation Agent")
    print("=" * 60)
    print("\n💬 Type a request and the assistant will carry it out on the desktop.")
    print("\n📋 Commands:")
    print("  - /state            Show the desktop as the assistant sees it")
    print("  - /files            List saved files")
    print("  - /storage          Show storage usage")
    print("  - /save             Save the desktop as a session")
    print("  - /sessions         List saved sessions, newest first")
    print("  - /load <id>        Restore a saved session")
    print("  - /delete <id>      Delete a saved session")
    print("  - /testing <pass>   Enable testing mode (/testing off to leave it)")
    print("  - 'quit' or 'exit' to stop")
    print("=" * 60 + "\n")


def print_messages(messages, start: int = 0) -> int:
    """Print transcript lines from `start`; returns the new transcript length."""
    for message in messages[start:]:
        marker = ROLE_MARKERS.get(message.role, "")
        prefix = "✗ " if message.kind == "error" else ""
        print(f"{marker} {prefix}{message.text}")
    return len(messages)


def connect(args) -> Optional[object]:
    """Build the backend and log in; returns None if that failed."""
    if args.local:
        from .ai_service import AIService
        from .store import UserStore

        backend = LocalBackend(UserStore(), AIService())
    else:
        backend = BackendClient(args.api_url)

    username = args.username or input("Username: ").strip()
    password = args.password or getpass.getpass("Password: ")

    # The in-process store starts empty, so the account is always created there
    if args.signup or args.local:
        try:
            backend.signup(username, password)
            print(f"✓ Created account '{username}'")
        except ApiError as e:
            print(f"✗ Sign up failed: {e}")
            return None

    try:
        backend.login(username, password)
    except ApiError as e:
        print(f"✗ Login failed: {e}")
        return None
    print(f"✓ Logged in as '{username}'\n")
    return backend


async def handle_slash_command(text: str, runtime: DesktopRuntime, files: FileSessionClient, sessions: SessionManager) -> None:
    parts = text.split()
    command, rest = parts[0].lower(), parts[1:]

    try:
        if command == "/state":
            print(snapshot_runtime(runtime))
        elif command == "/files":
            all_files = await files.get_files()
            names: List[str] = [f"📝 {name}" for name in all_files.get("documents", {})]
            names += [f"🖼️ {name}" for name in all_files.get("images", {})]
            print("\n".join(names) if names else "No saved files yet.")
        elif command == "/storage":
            print(f"Storage: {await files.storage_summary()}")
        elif command == "/save":
            session_id = await sessions.save()
            print(f"✓ Session saved as {session_id}")
        elif command == "/sessions":
            ids = await sessions.list()
            print("\n".join(ids) if ids else "No saved sessions.")
        elif command == "/load" and rest:
            await sessions.load(rest[0])
            print(f"✓ Session {rest[0]} loaded")
            print_messages(runtime.state.messages)
        elif command == "/delete" and rest:
            await sessions.delete(rest[0])
            print(f"✓ Session {rest[0]} deleted")
        elif command == "/testing" and rest:
            if rest[0].lower() == "off":
                runtime.disable_testing_mode()
                print("✓ Testing mode disabled")
            elif runtime.enable_testing_mode(rest[0]):
                print("✓ Testing mode enabled; chat requests are ignored")
            else:
                print("✗ Incorrect password")
        elif command == "/help":
            print_help()
        else:
            print(f"Unknown command: {text}")
    except (ApiError, DesktopError) as e:
        print(f"✗ {e}")


async def chat_loop(runtime: DesktopRuntime, agent: ChatAgent, files: FileSessionClient, sessions: SessionManager) -> None:
    shown = print_messages(runtime.state.messages)
    while True:
        try:
            text = (await asyncio.to_thread(input, "> ")).strip()
        except (EOFError, KeyboardInterrupt):
            print()
            break
        if not text:
            continue
        if text.lower() in ("quit", "exit"):
            break

        if text.startswith("/"):
            await handle_slash_command(text, runtime, files, sessions)
            shown = len(runtime.state.messages)
            continue

        if runtime.state.testing_mode:
            print("Testing mode is on; use '/testing off' to chat again.")
            continue
        print("🤔 Thinking...")
        await agent.handle_user_input(text)
        shown = print_messages(runtime.state.messages, shown)
    print("Goodbye!")


def run_chat(args) -> int:
    backend = connect(args)
    if backend is None:
        return 1

    files = FileSessionClient(backend)
    runtime = DesktopRuntime(files=files)
    runtime.initialize(backend.username)
    agent = ChatAgent(runtime)
    sessions = SessionManager(runtime)

    print_help()
    try:
        asyncio.run(chat_loop(runtime, agent, files, sessions))
    finally:
        try:
            backend.logout()
        except ApiError as e:
            logger.warning("Logout failed: %s", e)
    return 0


def run_serve(args) -> int:
    from .api_server import run_server

    run_server(host=args.host, port=args.port)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="workstation-agent", description="AI-driven virtual workstation")
    parser.add_argument("--verbose", action="store_true", help="Log debug output")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the REST backend")
    serve.add_argument("--host", default=SERVER_HOST)
    serve.add_argument("--port", type=int, default=SERVER_PORT)

    chat = subparsers.add_parser("chat", help="Chat with the assistant on a headless desktop")
    chat.add_argument("--local", action="store_true", help="Use an in-process backend instead of the server")
    chat.add_argument("--api-url", default=API_URL)
    chat.add_argument("--username")
    chat.add_argument("--password")
    chat.add_argument("--signup", action="store_true", help="Create the account before logging in")

    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    if args.command == "serve":
        return run_serve(args)
    return run_chat(args)


if __name__ == "__main__":
    sys.exit(main())
