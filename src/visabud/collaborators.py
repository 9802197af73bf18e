"""Optional device collaborators: document text, speech, export and location.

Every one of them is optional. When a collaborator is missing or fails,
the feature is reported unavailable and the caller carries on.
"""

import json
import logging
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class DocumentExtractor(Protocol):
    def extract_text(self, data: bytes, mime_type: str) -> str: ...


@runtime_checkable
class SpeechToText(Protocol):
    def transcribe(self, audio: bytes) -> str: ...


@runtime_checkable
class FileExporter(Protocol):
    def export(self, name: str, content: str) -> str:
        """Write ``content`` and return where it went."""
        ...


@runtime_checkable
class LocationProvider(Protocol):
    def current_city(self) -> str | None: ...


class LocalFileExporter:
    """Exports to plain files in a directory."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def export(self, name: str, content: str) -> str:
        self.directory.mkdir(parents=True, exist_ok=True)
        safe = re.sub(r"[^A-Za-z0-9_.-]", "_", name) or "export"
        path = self.directory / f"{int(time.time())}_{safe}"
        path.write_text(content, encoding="utf-8")
        return str(path)


class StaticLocation:
    """A fixed city, e.g. from configuration."""

    def __init__(self, city: str | None) -> None:
        self.city = city

    def current_city(self) -> str | None:
        return self.city


@dataclass
class Collaborators:
    """Bundle of optional collaborators with best-effort wrappers."""

    documents: DocumentExtractor | None = None
    speech: SpeechToText | None = None
    exporter: FileExporter | None = None
    location: LocationProvider | None = None

    def extract_document(self, data: bytes, mime_type: str) -> str | None:
        if self.documents is None:
            logger.info("Document extraction unavailable")
            return None
        try:
            text = self.documents.extract_text(data, mime_type)
        except Exception as e:
            logger.warning(f"Document extraction failed: {e}")
            return None
        return text.strip() or None

    def transcribe(self, audio: bytes) -> str | None:
        if self.speech is None:
            logger.info("Speech recognition unavailable")
            return None
        try:
            text = self.speech.transcribe(audio)
        except Exception as e:
            logger.warning(f"Speech recognition failed: {e}")
            return None
        return text.strip() or None

    def export(self, name: str, payload: Any) -> str | None:
        if self.exporter is None:
            logger.info("Export unavailable")
            return None
        content = payload if isinstance(payload, str) else json.dumps(payload, indent=2, default=str)
        try:
            return self.exporter.export(name, content)
        except Exception as e:
            logger.warning(f"Export failed: {e}")
            return None

    def locate(self) -> str | None:
        if self.location is None:
            return None
        try:
            return self.location.current_city()
        except Exception as e:
            logger.warning(f"Location lookup failed: {e}")
            return None
