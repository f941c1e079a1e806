"""Autosave persistence adapters.

The editor session is handed a ``PersistenceAdapter`` instead of touching
storage itself. ``load`` returns ``None`` when nothing usable is stored, in
which case the session starts from the built-in default project.
"""

import logging
from pathlib import Path
from typing import Optional, Protocol

from pydantic import BaseModel, Field

from .errors import MalformedDocument
from .slides import Project

logger = logging.getLogger("SlideTimeline.core.persistence")

AUTOSAVE_KEY = "mte_autosave_v3"


class PersistenceAdapter(Protocol):
    def load(self) -> Optional[Project]: ...

    def save(self, project: Project) -> None: ...


class FilePersistence(BaseModel):
    """Stores the project as ``<root_path>/<key>.json``."""
    root_path: Path
    key: str = AUTOSAVE_KEY

    model_config = {"arbitrary_types_allowed": True}

    @property
    def path(self) -> Path:
        return self.root_path / f"{self.key}.json"

    def load(self) -> Optional[Project]:
        if not self.path.exists():
            return None
        try:
            return Project.load(self.path)
        except (MalformedDocument, OSError) as e:
            logger.warning(f"Ignoring unreadable autosave at {self.path}: {e}")
            return None

    def save(self, project: Project) -> None:
        self.root_path.mkdir(parents=True, exist_ok=True)
        project.save(self.path)


class MemoryPersistence(BaseModel):
    """Key/value store of serialized documents, kept in memory."""
    key: str = AUTOSAVE_KEY
    store: dict[str, str] = Field(default_factory=dict)

    def load(self) -> Optional[Project]:
        raw = self.store.get(self.key)
        if raw is None:
            return None
        try:
            return Project.from_json(raw)
        except MalformedDocument as e:
            logger.warning(f"Ignoring unreadable autosave '{self.key}': {e}")
            return None

    def save(self, project: Project) -> None:
        self.store[self.key] = project.to_json()
