"""Data models for PageBundler."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class RenderMode(str, Enum):
    """What ends up in a bundled page's ``content``."""

    PLAIN = "plain"
    HTML = "html"


class Page(BaseModel):
    """A normalized document record.

    Known fields are declared; any other front-matter keys are kept as
    extra fields, in the order they were written.
    """

    model_config = ConfigDict(extra="allow")

    title: str
    author: str
    date: str | None = None
    id: str | int | None = None
    content: str
    uri: str | None = None

    @property
    def identity(self) -> tuple[str, str | int]:
        """Key used to match this page across runs."""
        if self.id is not None:
            return ("id", self.id)
        return ("title", self.title)

    def to_bundle(self) -> dict:
        """Return the JSON-ready mapping stored in a bundle."""
        return self.model_dump(exclude_none=True)


class DirectoryEntry(BaseModel):
    """A directory being bundled and where its bundle is persisted."""

    name: str
    bundle_path: Path
    source_dir: Path | None = None


class PageSet(BaseModel):
    """Pre-built pages supplied programmatically instead of read from disk."""

    directory: str
    bundle_path: Path
    pages: list[Page] = Field(default_factory=list)


class BundleResult(BaseModel):
    """Outcome of processing one directory."""

    directory: str
    bundle_path: Path
    added: list[str] = Field(default_factory=list)
    changed: list[str] = Field(default_factory=list)
    deleted: list[str] = Field(default_factory=list)
    unchanged: list[str] = Field(default_factory=list)
    saved: bool = False
    error: str | None = None
