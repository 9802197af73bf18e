"""CLI interface for VisaBud."""

import importlib.util
import logging
import os
import uuid
from pathlib import Path

from groq import AsyncGroq

from .agent import AgentReply, EngineContext, Orchestrator
from .config import EngineConfig, config_from_env
from .documents import render_review
from .llm import GroqLLMClient, SentenceTransformerEmbedder
from .logging import configure_logger

logger = logging.getLogger(__name__)

BANNER = """
╔══════════════════════════════════════════╗
║            VisaBud v0.1.0                ║
║    Offline Visa & Immigration Helper     ║
╚══════════════════════════════════════════╝

Commands:
  /exit, /quit    - Exit the CLI
  /profile        - Show what I know about you
  /reset          - Forget your profile and start a new thread
  /export         - Save the last result to a file
  /ingest <path>  - Read profile details from a document
  /review <path>  - Check a passport, bank statement or degree
  /help           - Show this help

Type your message and press Enter.
"""


class CLI:
    """Interactive command-line interface for VisaBud."""

    def __init__(self, orchestrator: Orchestrator) -> None:
        self.orchestrator = orchestrator
        self.thread_id = self._new_thread_id()
        self.last_reply: AgentReply | None = None

    def _new_thread_id(self) -> str:
        """Generate a new thread ID."""
        return f"cli-{uuid.uuid4().hex[:8]}"

    def _format_response(self, reply: AgentReply) -> str:
        """Format a reply for display."""
        output = ["\n" + "─" * 40]
        output.append(reply.reply_text)
        if reply.warnings:
            output.append("")
            output.extend(f"⚠ {w}" for w in reply.warnings)
        if reply.citations:
            output.append("")
            output.append("Sources: " + ", ".join(reply.citations))
        output.append("─" * 40)
        return "\n".join(output)

    async def _process_message(self, message: str) -> None:
        """Process a user message through the orchestrator."""
        reply = await self.orchestrator.handle_message(message, thread_id=self.thread_id)
        self.last_reply = reply
        print(self._format_response(reply))

    def _show_profile(self) -> None:
        profile = self.orchestrator.engine.profiles.get_or_create()
        print("\n" + profile.summary())

    def _reset(self) -> None:
        """Reset the profile and start a fresh thread."""
        self.orchestrator.reset_profile()
        self.orchestrator.engine.chats.clear_thread(self.thread_id)
        self.thread_id = self._new_thread_id()
        self.last_reply = None
        print(f"\n✓ Profile cleared. New thread: {self.thread_id}")

    def _export(self) -> None:
        if self.last_reply is None:
            print("\nNothing to export yet.")
            return
        location = self.orchestrator.export_reply(self.last_reply)
        if location is None:
            print("\nExport is unavailable.")
        else:
            print(f"\n✓ Saved to {location}")

    def _ingest(self, argument: str) -> None:
        if not argument:
            print("\nUsage: /ingest <path>")
            return
        profile = self.orchestrator.ingest_document(Path(argument).expanduser())
        if profile is None:
            print("\nCould not read any text from that document.")
        else:
            print("\n✓ Profile updated:\n" + profile.summary())

    def _review(self, argument: str) -> None:
        if not argument:
            print("\nUsage: /review <path>")
            return
        review = self.orchestrator.review_document(Path(argument).expanduser())
        if review is None:
            print("\nCould not read any text from that document.")
        else:
            print("\n" + render_review(review))

    async def _handle_command(self, command: str) -> bool:
        """Handle a special command. Returns True if should continue, False to exit."""
        cmd, _, argument = command.strip().partition(" ")
        cmd = cmd.lower()

        if cmd in ("/exit", "/quit", "exit", "quit"):
            print("\nGoodbye!")
            return False

        if cmd == "/reset":
            self._reset()
            return True

        if cmd == "/profile":
            self._show_profile()
            return True

        if cmd == "/export":
            self._export()
            return True

        if cmd == "/ingest":
            self._ingest(argument.strip())
            return True

        if cmd == "/review":
            self._review(argument.strip())
            return True

        if cmd == "/help":
            print(BANNER)
            return True

        return True  # Unknown command, continue

    async def run(self) -> None:
        """Run the interactive CLI."""
        print(BANNER)
        print(f"Thread: {self.thread_id}\n")

        while True:
            try:
                user_input = input("you> ").strip()

                if not user_input:
                    continue

                if user_input.startswith("/") or user_input.lower() in ("exit", "quit"):
                    if not await self._handle_command(user_input):
                        break
                    continue

                await self._process_message(user_input)

            except KeyboardInterrupt:
                print("\n\n⚡ Interrupted")
                try:
                    confirm = input("Exit? (y/n): ").strip().lower()
                    if confirm in ("y", "yes"):
                        print("Goodbye!")
                        break
                except (KeyboardInterrupt, EOFError):
                    print("\nGoodbye!")
                    break

            except EOFError:
                print("\nGoodbye!")
                break


def build_engine(config: EngineConfig) -> EngineContext:
    """Engine with Groq and sentence-transformers when they are available."""
    llm = None
    if os.getenv("GROQ_API_KEY"):
        llm = GroqLLMClient(AsyncGroq(api_key=os.getenv("GROQ_API_KEY")), model=config.model)
    else:
        print("GROQ_API_KEY not set: answers use local heuristics only.")

    embedder = None
    if importlib.util.find_spec("sentence_transformers") is not None:
        embedder = SentenceTransformerEmbedder(config.embedding_model)
    else:
        print("sentence-transformers not installed: fact search is disabled.")

    events = configure_logger(config.log_dir)
    engine = EngineContext.create(config, embedder=embedder, llm=llm, events=events)
    if embedder is not None:
        print("Preparing the fact index (the first run downloads the embedding model)...")
        engine.prepare()
    return engine


async def run_cli(config: EngineConfig | None = None) -> None:
    """Run the CLI with configuration from the config file and environment."""
    config = config or config_from_env()
    cli = CLI(Orchestrator(build_engine(config)))
    await cli.run()
