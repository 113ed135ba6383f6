"""Exceptions raised while bundling pages."""


class BundlerError(Exception):
    """Base exception for all PageBundler errors."""


class ConfigurationEmptyError(BundlerError):
    """Raised when no directories are configured."""

    def __init__(self) -> None:
        super().__init__("Path configuration is empty.")


class DirectoryNotFoundError(BundlerError):
    """Raised when a configured directory does not exist."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f'One or more paths do not exist: "{path}"')


class NoMarkdownFilesError(BundlerError):
    """Raised when a directory holds no Markdown documents."""

    def __init__(self, directory: str) -> None:
        self.directory = directory
        super().__init__(f"No .md files found @{directory}")


class BundleParseError(BundlerError):
    """Raised when an existing bundle file cannot be read back."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f'Invalid bundle file: {reason} @ "{path}"')


class PageError(BundlerError):
    """Base exception for errors tied to a single source document.

    The message always ends with the document's short path so that a
    failed batch can be located.
    """

    reason = "Invalid page"

    def __init__(self, source: str, reason: str | None = None) -> None:
        self.source = source
        if reason is not None:
            self.reason = reason
        super().__init__(f'{self.reason} @ "{source}"')


class MissingFrontMatterError(PageError):
    reason = "Invalid or missing front matter"


class MissingTitleError(PageError):
    reason = "File is missing a title"


class TitleMismatchError(PageError):
    reason = "Title does not match file name"


class MissingAuthorError(PageError):
    reason = "Missing Author"


class InvalidDateError(PageError):
    reason = "Invalid Date for page"


class EmptyContentError(PageError):
    reason = "Empty file content"


class UnsupportedValueError(PageError):
    reason = "Front matter value cannot be stored as JSON"


class DuplicatePageError(PageError):
    reason = "Duplicate page identity"
