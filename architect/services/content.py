import logging
import re

from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)

# Tags that never carry readable page text.
NOISE_TAGS = [
    "script",
    "style",
    "noscript",
    "template",
    "iframe",
    "svg",
    "canvas",
    "img",
    "picture",
    "video",
    "audio",
    "source",
    "track",
    "object",
    "embed",
    "nav",
    "header",
    "footer",
    "aside",
]

# Matched case-insensitively against "<class> <id>" of every element.
NOISE_ATTR_PATTERNS = [
    "advertisement",
    "advert",
    "ad-slot",
    "ad-container",
    "ad-banner",
    "adsbygoogle",
    "sponsor",
    "promo",
    "popup",
    "modal",
    "overlay",
    "cookie",
    "banner",
    "newsletter",
]

BULLET = "•"

# Elements that start a new line when rendered.
_BLOCK_TAGS = [
    "address",
    "article",
    "blockquote",
    "dd",
    "div",
    "dl",
    "dt",
    "figcaption",
    "figure",
    "form",
    "main",
    "ol",
    "pre",
    "section",
    "table",
    "tr",
    "ul",
]

_HSPACE_RE = re.compile(r"[ \t\r\f\v\xa0]+")
_BLANK_RUN_RE = re.compile(r"\n{3,}")


def _normalize_whitespace(text: str) -> str:
    lines = [_HSPACE_RE.sub(" ", line).strip() for line in text.split("\n")]
    return _BLANK_RUN_RE.sub("\n\n", "\n".join(lines)).strip()


def _inline_text(el: Tag) -> str:
    """Element text with horizontal whitespace collapsed, line breaks kept."""
    return _normalize_whitespace(el.get_text())


def _attr_signature(el: Tag) -> str:
    classes = el.get("class") or []
    if isinstance(classes, str):
        classes = [classes]
    return f"{' '.join(classes)} {el.get('id') or ''}".lower()


def _remove_noise(root: Tag) -> None:
    for el in root.find_all(NOISE_TAGS):
        el.decompose()

    for el in root.find_all(True):
        if getattr(el, "decomposed", False) or el.name in ("html", "body"):
            continue
        signature = _attr_signature(el)
        if any(pattern in signature for pattern in NOISE_ATTR_PATTERNS):
            el.decompose()


def _annotate_links(root: Tag) -> None:
    for a in root.find_all("a"):
        text = _inline_text(a)
        href = (a.get("href") or "").strip()
        if text and href:
            a.replace_with(f"{text} [{href}]")


def _annotate_headings(root: Tag) -> None:
    for level in range(1, 7):
        marker = "=" * level
        for h in root.find_all(f"h{level}"):
            text = _inline_text(h)
            if text:
                h.replace_with(f"\n{marker} {text} {marker}\n")
            else:
                h.decompose()


def _annotate_paragraphs(root: Tag) -> None:
    for p in root.find_all("p"):
        p.replace_with(f"{_inline_text(p)}\n\n")


def _annotate_list_items(root: Tag) -> None:
    # Nested lists start on their own line under the parent item
    for nested in root.select("li ul, li ol"):
        nested.insert(0, "\n")
    # Innermost first so nested items keep their own bullets
    for li in reversed(root.find_all("li")):
        li.replace_with(f"{BULLET} {_inline_text(li)}\n")


def _apply_layout(root: Tag) -> None:
    for br in root.find_all("br"):
        br.replace_with("\n")
    for el in root.find_all(_BLOCK_TAGS):
        el.append("\n")
    for cell in root.find_all(["td", "th"]):
        cell.append(" ")


def _document_root(soup: BeautifulSoup) -> Tag:
    return soup.body or soup


def extract_page_text(html: str) -> str:
    """Convert rendered HTML into structure-annotated plain text.

    Noise (scripts, media, navigation chrome, ad and overlay containers) is
    dropped. Headings become ``== Title ==`` lines, paragraphs are followed
    by a blank line, list items get a bullet, and links keep their target as
    ``text [href]``. If nothing survives the cleanup, the plain text of the
    untouched document is returned instead.
    """
    if not html or not html.strip():
        return ""

    soup = BeautifulSoup(html, "html.parser")
    root = _document_root(soup)

    _remove_noise(root)
    _annotate_links(root)
    _annotate_headings(root)
    _annotate_paragraphs(root)
    _annotate_list_items(root)
    _apply_layout(root)

    text = _normalize_whitespace(root.get_text())
    if text:
        return text

    logger.debug("Structured extraction produced no text, using raw document text")
    original = BeautifulSoup(html, "html.parser")
    for el in original.find_all(["script", "style", "noscript", "template"]):
        el.decompose()
    return _normalize_whitespace(_document_root(original).get_text("\n"))
