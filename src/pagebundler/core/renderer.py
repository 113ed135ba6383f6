"""Markdown to HTML rendering for bundled page content."""

from xml.etree.ElementTree import Element

from markdown import Markdown
from markdown.extensions import Extension
from markdown.inlinepatterns import SimpleTagInlineProcessor
from markdown.treeprocessors import Treeprocessor


# Pattern for strikethrough: ~~text~~
# Group 2 must contain the text (SimpleTagInlineProcessor expectation)
STRIKETHROUGH_PATTERN = r"(~~)(.*?)~~"

EXTERNAL_LINK_PREFIXES = ("http://", "https://")


class StrikethroughExtension(Extension):
    """Markdown extension for ~~strikethrough~~ text."""

    def extendMarkdown(self, md: Markdown) -> None:
        """Add strikethrough pattern to markdown parser."""
        md.inlinePatterns.register(
            SimpleTagInlineProcessor(STRIKETHROUGH_PATTERN, "del"),
            "strikethrough",
            50,
        )


class ExternalLinkTreeprocessor(Treeprocessor):
    """Open links that leave the site in a new tab."""

    def run(self, root: Element) -> None:
        for el in root.iter("a"):
            href = el.get("href", "").lower()
            if href.startswith(EXTERNAL_LINK_PREFIXES):
                el.set("target", "_blank")


class ExternalLinkExtension(Extension):
    """Markdown extension adding target="_blank" to external links."""

    def extendMarkdown(self, md: Markdown) -> None:
        """Run after inline patterns have produced the anchors."""
        md.treeprocessors.register(
            ExternalLinkTreeprocessor(md),
            "external_links",
            15,
        )


def create_renderer() -> Markdown:
    """Create the Markdown renderer used for html bundles.

    Returns:
        Configured Markdown parser instance.
    """
    return Markdown(
        output_format="xhtml",
        extensions=[
            "extra",  # Includes: abbreviations, attr_list, def_list, fenced_code, footnotes, md_in_html, tables
            "sane_lists",
            "smarty",  # Smart quotes and dashes
            "nl2br",  # Single newlines become <br />
            "pymdownx.magiclink",  # Bare URLs become links
            StrikethroughExtension(),
            ExternalLinkExtension(),
        ],
    )


def render_markdown(content: str) -> str:
    """Render Markdown content to HTML."""
    return create_renderer().convert(content)
