"""Orchestrator: one conversational turn from inbound text to reply."""

import logging
import mimetypes
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..documents import DocumentReview, review_document
from ..index.retriever import RetrievedFact
from ..intent import Intent
from ..memory.extractor import extract_message
from ..memory.models import UserProfile
from ..tools.base import ToolRequest, ToolResult, payload_to_dict
from ..tools.context import build_turn_context
from .engine import EngineContext
from .prompt import DISCLAIMER, FALLBACK_NO_DATA, GREETING, build_system_preamble, heuristic_summary, is_greeting

logger = logging.getLogger(__name__)

PENDING_INTENT_KEY = "pending_intent"
GREETING_TOOL = "chat"
GENERIC_TOOL = "generic"
TEXT_SUFFIXES = (".txt", ".md")


@dataclass
class AgentReply:
    """What the user sees for one turn.

    ``prompt`` is set only when the turn stopped on a missing-information
    question; ``payload`` is set only when a tool produced a result.
    """

    reply_text: str
    prompt: str | None = None
    tool_used: str | None = None
    payload: Any = None
    citations: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    intent: Intent | None = None

    @property
    def is_gated(self) -> bool:
        return self.prompt is not None


class Orchestrator:
    """Runs the turn state machine over an :class:`EngineContext`.

    Received -> Greeted, or Received -> ProfileUpdated -> Routed -> Gated
    or Executed. Nothing raised by a store, tool or collaborator escapes
    :meth:`handle_message`; the worst case is the "couldn't retrieve"
    reply.
    """

    def __init__(self, engine: EngineContext) -> None:
        self.engine = engine

    # Persistence is a side effect: failures are logged and the turn goes on.

    def _persist(self, thread_id: str, role: str, content: str) -> None:
        try:
            self.engine.chats.add_message(thread_id, role, content)
        except Exception as e:
            logger.warning(f"Failed to persist {role} message: {e}")
            self._event("log_persistence_failed", "chat", thread_id=thread_id, error=str(e))

    def _history(self, thread_id: str) -> list[dict[str, str]]:
        try:
            return self.engine.chats.history(thread_id)
        except Exception as e:
            logger.warning(f"Failed to read history for {thread_id}: {e}")
            return []

    def _set_pending(self, thread_id: str, intent: Intent | None) -> None:
        try:
            self.engine.chats.set_context(thread_id, PENDING_INTENT_KEY, intent.value if intent else None)
        except Exception as e:
            logger.warning(f"Failed to store pending intent: {e}")
            self._event("log_persistence_failed", "chat", thread_id=thread_id, error=str(e))

    def _pending(self, thread_id: str) -> Intent | None:
        try:
            value = self.engine.chats.get_context(thread_id, PENDING_INTENT_KEY)
            return Intent(value) if value else None
        except Exception as e:
            logger.debug(f"No usable pending intent: {e}")
            return None

    def _event(self, method: str, *args: Any, **kwargs: Any) -> None:
        events = self.engine.events
        if events is None:
            return
        try:
            getattr(events, method)(*args, **kwargs)
        except OSError as e:
            logger.warning(f"Failed to write event log: {e}")

    async def handle_message(self, text: str, thread_id: str = "default") -> AgentReply:
        """Process one inbound message and return the reply."""
        text = text or ""
        self._persist(thread_id, "user", text)
        self._event("log_turn_received", thread_id, len(text))

        if is_greeting(text):
            self._persist(thread_id, "assistant", GREETING)
            self._event("log_greeted", thread_id)
            return AgentReply(reply_text=GREETING, tool_used=GREETING_TOOL)

        try:
            reply = await self._route(text, thread_id)
        except Exception as e:
            logger.exception(f"Turn failed: {e}")
            reply = AgentReply(reply_text=FALLBACK_NO_DATA + DISCLAIMER, tool_used=GENERIC_TOOL)

        self._persist(thread_id, "assistant", reply.reply_text)
        return reply

    async def _route(self, text: str, thread_id: str) -> AgentReply:
        engine = self.engine
        history = self._history(thread_id)

        # Untargeted pass: keeps the profile current before routing.
        engine.profiles.auto_fill_from_chat(history)

        intent = engine.router.classify(text)
        if intent is Intent.GENERIC:
            intent = self._pending(thread_id) or Intent.GENERIC

        profile = engine.profiles.get_or_create()
        ctx = build_turn_context(text, history, profile)
        tool = engine.registry.for_intent(intent)
        if tool is None:
            return await self._answer_generic(text, thread_id, ctx.destination)

        request = ToolRequest(profile=profile, context=ctx)
        hints = tool.hints(request)
        fill = engine.profiles.auto_fill_from_chat(
            history,
            destination_hint=hints.destination,
            needed_for=tool.needed_for,
            goal_hint=hints.goal,
        )
        if fill.prompt:
            return self._gated(thread_id, intent, tool.name, fill.prompt, fill.missing)

        request = ToolRequest(
            profile=fill.profile,
            context=ctx,
            passport_valid=engine.profiles.passport_valid(fill.profile),
        )
        started = time.monotonic()
        result = await engine.registry.dispatch(intent, request)
        assert result is not None
        if result.is_gated:
            assert result.prompt is not None
            return self._gated(thread_id, intent, tool.name, result.prompt, result.missing)

        self._set_pending(thread_id, None)
        self._event(
            "log_tool_executed",
            thread_id,
            intent.value,
            tool.name,
            duration_ms=round((time.monotonic() - started) * 1000, 2),
            source=result.source,
        )
        return self._executed(intent, result)

    def _gated(self, thread_id: str, intent: Intent, tool: str, prompt: str, missing: list[str]) -> AgentReply:
        self._set_pending(thread_id, intent)
        self._event("log_gated", thread_id, intent.value, tool, missing)
        return AgentReply(reply_text=prompt, prompt=prompt, tool_used=tool, intent=intent)

    @staticmethod
    def _executed(intent: Intent, result: ToolResult) -> AgentReply:
        return AgentReply(
            reply_text=result.text + DISCLAIMER,
            tool_used=result.tool,
            payload=result.payload,
            citations=list(result.citations),
            warnings=list(result.warnings),
            intent=intent,
        )

    async def _answer_generic(self, text: str, thread_id: str, destination: str | None) -> AgentReply:
        """Grounded answer from retrieved facts, with model synthesis when available."""
        engine = self.engine
        facts = engine.retriever.retrieve(text, top_k=engine.config.generic_top_k, country=destination)
        if not facts:
            self._event("log_generic_answered", thread_id, 0, "fallback")
            return AgentReply(reply_text=FALLBACK_NO_DATA + DISCLAIMER, tool_used=GENERIC_TOOL, intent=Intent.GENERIC)

        answer, source = await self._synthesize(text, facts), "model"
        if not answer:
            answer, source = heuristic_summary(facts), "heuristic"
        self._event("log_generic_answered", thread_id, len(facts), source)
        citations = list(dict.fromkeys(f.site for f in facts if f.site))
        return AgentReply(
            reply_text=answer + DISCLAIMER,
            tool_used=GENERIC_TOOL,
            citations=citations,
            intent=Intent.GENERIC,
        )

    async def _synthesize(self, text: str, facts: list[RetrievedFact]) -> str | None:
        llm = self.engine.llm
        if llm is None:
            return None
        system = build_system_preamble(self.engine.profiles.format_for_prompt(), facts)
        try:
            answer = await llm.complete(system, text)
        except Exception as e:
            logger.warning(f"Generic synthesis failed: {e}")
            return None
        return answer.strip() or None

    async def handle_audio(self, audio: bytes, thread_id: str = "default") -> AgentReply | None:
        """Transcribe speech and handle it as a message; None if unavailable."""
        text = self.engine.collaborators.transcribe(audio)
        if text is None:
            return None
        return await self.handle_message(text, thread_id)

    def _read_document(self, path: Path) -> str | None:
        """Document text; plain-text files are read directly, anything else
        goes through the document extractor collaborator."""
        try:
            data = path.read_bytes()
        except OSError as e:
            logger.warning(f"Cannot read document {path}: {e}")
            return None

        if path.suffix.lower() in TEXT_SUFFIXES:
            return data.decode("utf-8", errors="replace").strip() or None
        mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        return self.engine.collaborators.extract_document(data, mime_type)

    def ingest_document(self, path: Path, document_id: str | None = None) -> UserProfile | None:
        """Extract profile fields from a document and merge them.

        Returns None when no text could be obtained.
        """
        path = Path(path)
        text = self._read_document(path)
        if text is None:
            return None

        update = extract_message(text)
        update.saved_document_ids = [document_id or path.name]
        # Destinations named in a document are not travel plans.
        update.preferred_destinations = []
        return self.engine.profiles.apply(update)

    def review_document(
        self,
        path: Path,
        goal: str | None = None,
        declared_type: str | None = None,
    ) -> DocumentReview | None:
        """Check a document against the profile and the target visa goal.

        ``goal`` defaults to the most recent goal in the profile. Returns None
        when no text could be obtained.
        """
        path = Path(path)
        text = self._read_document(path)
        if text is None:
            return None

        engine = self.engine
        profile = engine.profiles.get_or_create()
        if goal is None and profile.selected_goals:
            goal = profile.selected_goals[-1]
        review = review_document(
            text,
            filename=path.name,
            declared_type=declared_type,
            goal=goal,
            profile=profile,
            today=engine.profiles.today(),
        )
        if engine.config.persist_roadmaps:
            engine.artifacts.save("document_review", {"document": path.name, **review.to_dict()})
        return review

    def export_reply(self, reply: AgentReply, name: str | None = None) -> str | None:
        """Save a reply's payload (or text) through the exporter."""
        if reply.payload is not None:
            content: Any = {
                "tool": reply.tool_used,
                "payload": payload_to_dict(reply.payload),
                "citations": reply.citations,
                "warnings": reply.warnings,
            }
        else:
            content = reply.reply_text
        filename = name or f"{reply.tool_used or 'reply'}.{'json' if reply.payload is not None else 'txt'}"
        return self.engine.collaborators.export(filename, content)

    def reset_profile(self) -> UserProfile:
        return self.engine.profiles.reset()
