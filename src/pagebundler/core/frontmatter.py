"""YAML front matter parsing and serialization."""

import re
from typing import Any

import yaml

from pagebundler.core.errors import MissingFrontMatterError
from pagebundler.core.models import Page

FRONTMATTER_PATTERN = re.compile(
    r"\A\ufeff?---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)",
    re.DOTALL | re.MULTILINE,
)

LEADING_BLANK_LINES = re.compile(r"\A(?:[ \t]*\r?\n)+")

TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class FrontMatterLoader(yaml.SafeLoader):
    """Safe loader that keeps timestamps as the strings the author wrote."""


FrontMatterLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def parse_document(text: str, source: str = "<string>") -> tuple[dict[str, Any], str]:
    """Split a Markdown document into front matter attributes and body.

    Args:
        text: Raw document text.
        source: Short identifier of the document, used in errors.

    Returns:
        Tuple of (attributes, body). Blank lines between the closing
        fence and the first line of the body are dropped.

    Raises:
        MissingFrontMatterError: If the document has no fenced block, the
            block is not valid YAML, or it is not a mapping.
    """
    match = FRONTMATTER_PATTERN.match(text)
    if match is None:
        raise MissingFrontMatterError(source)

    try:
        attributes = yaml.load(match.group(1), Loader=FrontMatterLoader) or {}
    except yaml.YAMLError as exc:
        raise MissingFrontMatterError(source) from exc
    if not isinstance(attributes, dict):
        raise MissingFrontMatterError(source)

    body = LEADING_BLANK_LINES.sub("", text[match.end() :])
    return {str(key): value for key, value in attributes.items()}, body


def serialize_page(page: Page) -> str:
    """Render a page back into a Markdown document with front matter."""
    data = page.model_dump(exclude_none=True, exclude={"content", "uri"})
    header = yaml.safe_dump(
        data,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )
    return f"---\n{header}---\n\n{page.content}"
