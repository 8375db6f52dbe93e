"""Rewrite HTML references to point at content-hashed files."""
import logging
import posixpath
import re
from pathlib import Path

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup

from sitebuild.errors import HtmlParseError
from sitebuild.filesystem import relative_posix, walk_directory

logger = logging.getLogger(__name__)

# Reference-bearing attributes, visited in this order
REFERENCE_SELECTORS = (
    ("link[href]", "href"),
    ("script[src]", "src"),
)

SCHEME_PATTERN = re.compile(r"^[a-z][a-z0-9+.\-]*:", re.IGNORECASE)


def to_root_relative(document_path: str, value: str | None) -> str | None:
    """Convert an attribute value into a root-relative site URL.

    Relative values resolve against the directory of the referencing
    document, not the site root. For example "../style.css" inside
    "blog/post/index.html" becomes "/blog/style.css".

    Args:
        document_path: Forward-slash path of the HTML document, relative to
            the site root
        value: Raw ``href``/``src`` attribute value

    Returns:
        Root-relative URL, or None for empty values, URLs with a scheme
        (http:, https:, data:, ...) and protocol-relative URLs
    """
    if not value or SCHEME_PATTERN.match(value) or value.startswith("//"):
        return None

    if value.startswith("/"):
        return value

    document_dir = posixpath.dirname(document_path.lstrip("/"))
    joined = posixpath.normpath(posixpath.join(document_dir, value))
    return "/" + joined.lstrip("/")


def _rewrite_references(
    soup: BeautifulSoup, document_path: str, manifest: dict[str, str]
) -> int:
    replaced = 0
    for selector, attribute in REFERENCE_SELECTORS:
        for element in soup.select(selector):
            value = element.get(attribute)
            root_relative = to_root_relative(document_path, value)
            if root_relative is None:
                continue

            hashed = manifest.get(root_relative)
            if not hashed:
                continue

            element[attribute] = hashed
            replaced += 1
            logger.debug(f"{document_path}: {attribute}={value!r} -> {hashed!r}")
    return replaced


def rewrite_html_document(html: str, document_path: str, manifest: dict[str, str]) -> str:
    """Rewrite an HTML document's link/script references using the manifest.

    Only attributes whose resolved URL is a manifest key are replaced. A
    document without any replacement is returned exactly as given.

    Args:
        html: Document text
        document_path: Forward-slash path of the document relative to the
            site root, used to resolve relative references
        manifest: Source URL to distribution URL mapping

    Returns:
        Rewritten document text

    Raises:
        HtmlParseError: If the parser rejects the document
    """
    # html5lib applies the HTML5 tree-construction rules (implied end tags)
    try:
        soup = BeautifulSoup(html, "html5lib")
    except ParserRejectedMarkup as e:
        raise HtmlParseError(document_path, str(e)) from e

    if _rewrite_references(soup, document_path, manifest) == 0:
        return html
    return str(soup)


def rewrite_html_documents(
    output_dir: Path,
    manifest: dict[str, str],
    html_extensions: list[str] | tuple[str, ...] = (".html", ".htm"),
) -> list[Path]:
    """Rewrite every HTML document in the output tree in place.

    The output tree mirrors the source tree, so a document's path relative
    to ``output_dir`` is also its path relative to the source root.

    Args:
        output_dir: Output tree root
        manifest: Source URL to distribution URL mapping
        html_extensions: Extensions identifying HTML documents

    Returns:
        Paths of the documents that changed

    Raises:
        HtmlParseError: If a document cannot be decoded or parsed
    """
    output_dir = Path(output_dir)
    wanted = {ext.lower() for ext in html_extensions}
    rewritten = []

    for html_file in walk_directory(output_dir):
        if html_file.suffix.lower() not in wanted:
            continue

        document_path = relative_posix(output_dir, html_file)
        try:
            html = html_file.read_bytes().decode("utf-8")
        except UnicodeDecodeError as e:
            raise HtmlParseError(document_path, f"not valid UTF-8 ({e})") from e

        result = rewrite_html_document(html, document_path, manifest)
        if result != html:
            html_file.write_bytes(result.encode("utf-8"))
            rewritten.append(html_file)
            logger.debug(f"Rewrote {document_path}")

    logger.info(f"Rewrote {len(rewritten)} HTML documents in {output_dir}")
    return rewritten
