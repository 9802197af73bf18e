"""Profile memory: the persisted user profile and chat-driven auto-fill."""

import logging
import time
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Callable, Iterable

from ..storage import JsonDocument
from .extractor import extract_from_chat
from .models import ProfileUpdate, UserProfile, merge_profile
from .requirements import NeedHints, build_prompt, missing_fields, passport_is_valid

logger = logging.getLogger(__name__)


@dataclass
class AutoFillResult:
    """Outcome of one auto-fill pass."""

    profile: UserProfile
    extracted: ProfileUpdate
    missing: list[str] = field(default_factory=list)
    prompt: str | None = None


class ProfileMemory:
    """Owns the single local profile record.

    The profile is created on first access, changed only through
    :meth:`apply`, and removed only by :meth:`reset`. Reads and writes
    go through one lock.
    """

    def __init__(
        self,
        path: Path | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._doc = JsonDocument(path)
        self._profile: UserProfile | None = None
        self._today = today

    def _load(self) -> UserProfile:
        """Cached profile, created if absent. Caller holds the lock."""
        if self._profile is not None:
            return self._profile

        data = self._doc.read()
        profile: UserProfile | None = None
        if isinstance(data, dict):
            try:
                profile = UserProfile.from_dict(data)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Discarding unreadable profile: %s", e)

        if profile is None:
            profile = UserProfile()
            self._doc.write(profile.to_dict())

        self._profile = profile
        return profile

    def get_or_create(self) -> UserProfile:
        """Return the profile, creating an empty one on first access."""
        with self._doc.lock:
            return self._load()

    def apply(self, update: ProfileUpdate) -> UserProfile:
        """Merge a partial update into the profile and persist it."""
        with self._doc.lock:
            current = self._load()
            merged = merge_profile(current, update)
            merged.last_seen = time.time()
            self._profile = merged
            self._doc.write(merged.to_dict())
            return merged

    def reset(self) -> UserProfile:
        """Replace the profile with an empty one."""
        with self._doc.lock:
            self._profile = UserProfile()
            self._doc.write(self._profile.to_dict())
            return self._profile

    def passport_valid(self, profile: UserProfile | None = None) -> bool | None:
        """Six-month passport validity for the profile; None if unknown."""
        profile = profile or self.get_or_create()
        if profile.passport_expiry:
            return passport_is_valid(profile.passport_expiry, self._today())
        return profile.passport_valid

    def today(self) -> date:
        return self._today()

    def auto_fill_from_chat(
        self,
        history: Iterable[dict[str, Any]],
        destination_hint: str | None = None,
        needed_for: str | None = None,
        goal_hint: str | None = None,
    ) -> AutoFillResult:
        """Extract profile signals from the conversation, merge them, and
        work out the one question still needed for ``needed_for``.

        Args:
            history: Messages as ``{"role": ..., "content": ...}`` dicts.
            destination_hint: Destination known from the current turn.
            needed_for: Requirement context (e.g. "roadmap"); None for the
                general profile rules.
            goal_hint: Visa goal known from the current turn.

        Returns:
            The merged profile, what was extracted, and the missing-info
            prompt (None when nothing is missing).
        """
        extracted = extract_from_chat(history)
        profile = self.apply(extracted) if not extracted.is_empty() else self.get_or_create()

        hints = NeedHints(destination=destination_hint, goal=goal_hint)
        missing = missing_fields(needed_for, profile, hints)
        prompt = build_prompt(needed_for, missing, destination_hint)
        if prompt:
            logger.debug("Profile incomplete for %s: %s", needed_for or "general", missing)

        return AutoFillResult(profile=profile, extracted=extracted, missing=missing, prompt=prompt)

    def format_for_prompt(self, profile: UserProfile | None = None) -> str:
        """Format the profile for injection into a model system prompt."""
        profile = profile or self.get_or_create()
        return f"<profile>\n{profile.summary()}\n</profile>"
