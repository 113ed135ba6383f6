"""Storage abstraction for source documents and page bundles."""

import json
from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import ValidationError

from pagebundler.core.errors import BundleParseError, NoMarkdownFilesError
from pagebundler.core.frontmatter import serialize_page
from pagebundler.core.models import Page


def shorten_path(path: Path | str) -> str:
    """Return the last two components of a path, e.g. ``docs/page.md``."""
    parts = Path(path).parts
    return "/".join(parts[-2:])


def bundle_path_for(directory: Path) -> Path:
    """Get the bundle file of a directory: ``<dir>/<basename(dir)>.json``."""
    return directory / f"{directory.name}.json"


class Storage(ABC):
    """Abstract base class for reading sources and persisting bundles."""

    @abstractmethod
    async def list_sources(self, directory: Path) -> list[Path]:
        """List the Markdown documents of a directory, sorted by name."""
        ...

    @abstractmethod
    async def read_source(self, path: Path) -> str:
        """Read a source document as text."""
        ...

    @abstractmethod
    async def load_bundle(self, path: Path) -> list[Page]:
        """Load a bundle. Returns an empty list if it does not exist."""
        ...

    @abstractmethod
    async def save_bundle(self, path: Path, pages: list[Page]) -> None:
        """Overwrite a bundle with the given pages."""
        ...


class FileStorage(Storage):
    """File-based storage implementation.

    Sources are ``*.md`` files; bundles are pretty-printed JSON arrays.
    """

    SOURCE_SUFFIX = ".md"

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    async def list_sources(self, directory: Path) -> list[Path]:
        """List Markdown files of a directory.

        Raises:
            NoMarkdownFilesError: If the directory is empty or holds no
                Markdown files.
        """
        paths = [
            path
            for path in directory.iterdir()
            if path.is_file() and path.suffix == self.SOURCE_SUFFIX
        ]
        if not paths:
            raise NoMarkdownFilesError(shorten_path(directory))
        return sorted(paths, key=lambda p: p.name)

    async def read_source(self, path: Path) -> str:
        """Read a source document."""
        return path.read_text(encoding=self.encoding)

    async def load_bundle(self, path: Path) -> list[Page]:
        """Load a bundle file.

        Raises:
            BundleParseError: If the file exists but is not a JSON array
                of pages.
        """
        if not path.exists():
            return []

        short = shorten_path(path)
        try:
            data = json.loads(path.read_text(encoding=self.encoding))
        except json.JSONDecodeError as e:
            raise BundleParseError(short, f"not valid JSON ({e.msg})") from e
        if not isinstance(data, list):
            raise BundleParseError(short, "expected a JSON array of pages")

        try:
            return [Page.model_validate(item) for item in data]
        except ValidationError as e:
            raise BundleParseError(short, f"invalid page ({e.error_count()} errors)") from e

    async def save_bundle(self, path: Path, pages: list[Page]) -> None:
        """Write a bundle file, replacing any previous one."""
        data = [page.to_bundle() for page in pages]
        path.write_text(
            json.dumps(data, indent=2, ensure_ascii=False),
            encoding=self.encoding,
        )


class PageWriter:
    """Writes pages back out as Markdown documents with front matter.

    File naming: ``<title>.md``, so the output also satisfies the
    title-matches-file-name rule.
    """

    def __init__(self, directory: Path, encoding: str = "utf-8"):
        self.directory = directory
        self.encoding = encoding
        self.directory.mkdir(parents=True, exist_ok=True)

    def _title_to_filename(self, title: str) -> str:
        """Convert page title to filename."""
        return title.replace("/", "_").replace("\\", "_") + ".md"

    async def write_page(self, page: Page) -> Path:
        """Write a single page and return its path."""
        path = self.directory / self._title_to_filename(page.title)
        path.write_text(serialize_page(page), encoding=self.encoding)
        return path

    async def write_pages(self, pages: list[Page]) -> list[Path]:
        """Write all pages."""
        return [await self.write_page(page) for page in pages]
