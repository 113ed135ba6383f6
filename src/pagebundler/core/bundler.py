"""Directory orchestrator: reconciles source documents with their bundles.

Usage is two-phase: construct a :class:`PageBundler` with its
collaborators, load the page sets with one of the ``load_from_*``
methods, then call :meth:`PageBundler.process`.
"""

import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from pathlib import Path

from pagebundler.core.diff import (
    DiffResult,
    carry_forward_dates,
    diff_pages,
    resolve_dates,
)
from pagebundler.core.errors import (
    BundleParseError,
    ConfigurationEmptyError,
    DirectoryNotFoundError,
    DuplicatePageError,
    PageError,
)
from pagebundler.core.frontmatter import parse_document
from pagebundler.core.models import (
    BundleResult,
    DirectoryEntry,
    Page,
    PageSet,
    RenderMode,
)
from pagebundler.core.renderer import render_markdown
from pagebundler.core.slug import assign_uris
from pagebundler.core.storage import FileStorage, Storage, bundle_path_for, shorten_path
from pagebundler.core.validator import validate_page

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    """Current wall-clock time in UTC."""
    return datetime.now(UTC)


class PageBundler:
    """Bundles directories of Markdown pages into JSON.

    Args:
        storage: Source and bundle storage. Defaults to the filesystem.
        renderer: Markdown to HTML callable used in html mode.
        clock: Returns "now"; read once per :meth:`process` call.
        quiet: Silence progress logging. Errors are still logged.
        log: Logger for progress lines.
        require_title_match: Require each document's title to equal its
            file name without the ``.md`` suffix.
        isolate_errors: Record document and bundle errors on the failing
            directory's result and carry on, instead of aborting the run.
    """

    def __init__(
        self,
        storage: Storage | None = None,
        *,
        renderer: Callable[[str], str] = render_markdown,
        clock: Callable[[], datetime] = utc_now,
        quiet: bool = False,
        log: logging.Logger | None = None,
        require_title_match: bool = False,
        isolate_errors: bool = False,
    ):
        self.storage = storage or FileStorage()
        self.renderer = renderer
        self.clock = clock
        self.quiet = quiet
        self.log = log or logger
        self.require_title_match = require_title_match
        self.isolate_errors = isolate_errors

        self._entries: list[DirectoryEntry] = []
        self._new_pages: dict[str, list[Page]] = {}
        self._old_pages: dict[str, list[Page]] = {}
        self._processed: dict[str, list[Page]] = {}
        self._errors: dict[str, str] = {}

    @property
    def dirs(self) -> list[Path]:
        """Absolute paths of the loaded source directories."""
        return [e.source_dir for e in self._entries if e.source_dir is not None]

    @property
    def short_dirs(self) -> list[str]:
        """Loaded source directories as ``parent/name``."""
        return [shorten_path(d) for d in self.dirs]

    @property
    def new_pages_map(self) -> dict[str, list[Page]]:
        """Validated pages per directory, as loaded."""
        return self._new_pages

    @property
    def pages_map(self) -> dict[str, list[Page]]:
        """Pages per directory after the last :meth:`process` call."""
        return self._processed

    def _log(self, msg: str, *args) -> None:
        if not self.quiet:
            self.log.info(msg, *args)

    def _reset(self) -> None:
        self._entries = []
        self._new_pages = {}
        self._old_pages = {}
        self._processed = {}
        self._errors = {}

    def _short_name(self, entry: DirectoryEntry) -> str:
        if entry.source_dir is not None:
            return shorten_path(entry.source_dir)
        return entry.name

    # ============================================================
    # Loading
    # ============================================================

    async def load_from_directories(self, dirs: Iterable[str | Path]) -> None:
        """Load old bundles and parse every source document.

        Raises:
            ConfigurationEmptyError: If no directories are given.
            DirectoryNotFoundError: If any directory does not exist.
            NoMarkdownFilesError: If a directory holds no Markdown files.
            PageError: If a document is invalid (unless isolating errors).
            BundleParseError: If an existing bundle is unreadable (unless
                isolating errors).
        """
        self._log("Initializing")
        paths = [Path(d).resolve() for d in dirs]
        self._validate_dirs(paths)
        self._reset()

        for path in paths:
            entry = DirectoryEntry(
                name=str(path),
                source_dir=path,
                bundle_path=bundle_path_for(path),
            )
            self._entries.append(entry)
            await self._load_entry(entry)

    async def load_from_page_sets(self, page_sets: Iterable[PageSet]) -> None:
        """Load pre-built pages, bypassing document parsing.

        Pages still go through validation, so dates are normalized and
        duplicate identities are rejected.
        """
        self._log("Initializing")
        page_sets = list(page_sets)
        if not page_sets:
            raise ConfigurationEmptyError()
        self._reset()

        for page_set in page_sets:
            entry = DirectoryEntry(
                name=page_set.directory,
                bundle_path=page_set.bundle_path,
            )
            self._entries.append(entry)
            await self._load_entry(entry, page_set.pages)

    def _validate_dirs(self, paths: list[Path]) -> None:
        if not paths:
            raise ConfigurationEmptyError()
        for path in paths:
            if not path.is_dir():
                raise DirectoryNotFoundError(str(path))

    async def _load_entry(self, entry: DirectoryEntry, pages: list[Page] | None = None) -> None:
        try:
            self._old_pages[entry.name] = await self.storage.load_bundle(entry.bundle_path)
            if entry.source_dir is not None:
                self._new_pages[entry.name] = await self._read_pages(entry.source_dir)
            else:
                self._new_pages[entry.name] = self._validate_pages(entry.name, pages or [])
        except (PageError, BundleParseError) as e:
            if not self.isolate_errors:
                raise
            self.log.error("Skipping %s: %s", self._short_name(entry), e)
            self._errors[entry.name] = str(e)

    async def _read_pages(self, directory: Path) -> list[Page]:
        paths = await self.storage.list_sources(directory)
        texts = [await self.storage.read_source(path) for path in paths]

        pages = []
        sources = []
        for path, text in zip(paths, texts):
            source = shorten_path(path)
            attributes, body = parse_document(text, source)
            expected_title = path.stem if self.require_title_match else None
            pages.append(
                validate_page(attributes, body, source, expected_title=expected_title)
            )
            sources.append(source)

        self._check_unique(pages, sources)
        return pages

    def _validate_pages(self, directory: str, pages: list[Page]) -> list[Page]:
        validated = []
        sources = []
        for i, page in enumerate(pages):
            source = f"{directory}[{i}]"
            attributes = page.model_dump(exclude={"content"})
            validated.append(validate_page(attributes, page.content, source))
            sources.append(source)

        self._check_unique(validated, sources)
        return validated

    def _check_unique(self, pages: list[Page], sources: list[str]) -> None:
        seen: dict[tuple, str] = {}
        for page, source in zip(pages, sources):
            if page.identity in seen:
                kind, value = page.identity
                raise DuplicatePageError(
                    source,
                    f'Duplicate page {kind} "{value}" (also in "{seen[page.identity]}")',
                )
            seen[page.identity] = source

    # ============================================================
    # Processing
    # ============================================================

    async def process(self, mode: RenderMode | str = RenderMode.PLAIN) -> list[BundleResult]:
        """Reconcile every loaded directory with its bundle.

        A bundle is only written when a page was added, changed or
        deleted, so unchanged bundles keep their modification time.

        Returns:
            One result per directory, in load order.
        """
        mode = RenderMode(mode)
        now = self.clock()
        results = []
        for entry in self._entries:
            if entry.name in self._errors:
                results.append(
                    BundleResult(
                        directory=entry.name,
                        bundle_path=entry.bundle_path,
                        error=self._errors[entry.name],
                    )
                )
                continue
            self._log("[processing: %s]", self._short_name(entry))
            results.append(await self._process_entry(entry, mode, now))
        return results

    async def _process_entry(
        self, entry: DirectoryEntry, mode: RenderMode, now: datetime
    ) -> BundleResult:
        old_pages = self._old_pages[entry.name]
        new_pages = [page.model_copy(deep=True) for page in self._new_pages[entry.name]]

        # Render first so stored html is compared with html
        if mode is RenderMode.HTML:
            for page in new_pages:
                page.content = self.renderer(page.content)

        diff = diff_pages(new_pages, old_pages)
        self._log_diff(diff)
        resolve_dates(diff, now)
        carry_forward_dates(new_pages, old_pages)
        assign_uris(new_pages)
        self._processed[entry.name] = new_pages

        result = BundleResult(
            directory=entry.name,
            bundle_path=entry.bundle_path,
            added=[p.title for p in diff.added],
            changed=[p.title for p in diff.changed],
            deleted=[p.title for p in diff.deleted],
            unchanged=[p.title for p in diff.unchanged],
        )
        if diff.has_changes:
            await self.storage.save_bundle(entry.bundle_path, new_pages)
            result.saved = True
        else:
            self._log("Pages are up to date!")
        return result

    def _log_diff(self, diff: DiffResult) -> None:
        for page in diff.added:
            self._log("[ADD]: %s", page.title)
        for page in diff.changed:
            self._log("[CHG]: %s", page.title)
        for page in diff.deleted:
            self._log("[DEL]: %s", page.title)


async def bundle_directories(
    dirs: Iterable[str | Path],
    mode: RenderMode | str = RenderMode.PLAIN,
    **options,
) -> list[BundleResult]:
    """Load and process directories in one call.

    Keyword options are passed to :class:`PageBundler`.
    """
    bundler = PageBundler(**options)
    await bundler.load_from_directories(dirs)
    return await bundler.process(mode)
