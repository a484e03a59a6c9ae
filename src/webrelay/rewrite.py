"""Rewrite relative references in HTML so they resolve against the proxied origin.

This is a textual, regex-based pass rather than a DOM transform. URLs that
scripts assemble at runtime are not rewritten.
"""

import re

from .config import settings
from .errors import RewriteDegraded
from .models import RewrittenDocument, TargetURL

# href="..." / src='...', not data-src, srcset or obj.src
ATTR_PATTERN = re.compile(
    r"""(?<![\w.$-])(href|src)(\s*=\s*)(["'])(.*?)\3""",
    re.IGNORECASE,
)
# unquoted href=foo.html, only looked for inside start tags so script text is left alone
TAG_PATTERN = re.compile(r"<[a-zA-Z][\w:-]*\s[^<>]*>")
UNQUOTED_ATTR_PATTERN = re.compile(
    r"""(?<=\s)(href|src)(\s*=\s*)([^\s"'=<>`]+)""",
    re.IGNORECASE,
)
# url(foo.png), url('foo.png'), url("foo.png"), url(&quot;foo.png&quot;) from style attributes;
# bare values stop at whitespace, commas and entities so new URL(a, b) is left alone
CSS_URL_PATTERN = re.compile(
    r"""(?<![\w.$-])(url\(\s*)(?:(["']|&quot;|&#0?39;)([^"'\n]*?)\2|([^\s"'(),&]*))(\s*\))"""
)
SCHEME_PATTERN = re.compile(r"^[a-z][a-z0-9+.\-]*:", re.IGNORECASE)


def is_absolute_reference(ref: str) -> bool:
    """True for references that must be left alone.

    That covers empty values, protocol-relative ``//host`` references,
    fragments and anything carrying a scheme (http, javascript, mailto, data...).
    """
    ref = ref.strip()
    if not ref or ref.startswith(("//", "#")):
        return True
    return bool(SCHEME_PATTERN.match(ref))


def rewrite_reference(ref: str, origin: str) -> str:
    """Anchor a relative reference at ``origin``.

    Document-relative references resolve against the origin root, not the
    directory of the current page. Query strings and fragments are kept.
    """
    if is_absolute_reference(ref):
        return ref
    ref = ref.strip()
    if ref.startswith("/"):
        return origin + ref
    return f"{origin}/{ref}"


class _Rewriter:
    """Replacement callbacks sharing one bounded rewrite counter."""

    def __init__(self, origin: str, limit: int):
        self.origin = origin
        self.limit = limit
        self.count = 0

    def _rewrite(self, ref: str) -> str:
        new_ref = rewrite_reference(ref, self.origin)
        if new_ref != ref:
            self.count += 1
            if self.count > self.limit:
                raise RewriteDegraded(f"More than {self.limit} references to rewrite")
        return new_ref

    def attribute(self, match: re.Match) -> str:
        name, equals, quote, ref = match.groups()
        return f"{name}{equals}{quote}{self._rewrite(ref)}{quote}"

    def unquoted_attribute(self, match: re.Match) -> str:
        name, equals, ref = match.groups()
        return f"{name}{equals}{self._rewrite(ref)}"

    def tag(self, match: re.Match) -> str:
        return UNQUOTED_ATTR_PATTERN.sub(self.unquoted_attribute, match.group(0))

    def css_url(self, match: re.Match) -> str:
        opening, quote, quoted, bare, closing = match.groups()
        quote = quote or ""
        ref = quoted if quoted is not None else bare
        return f"{opening}{quote}{self._rewrite(ref)}{quote}{closing}"


def rewrite_html(html: str, base_url: TargetURL, limit: int | None = None) -> str:
    """Rewrite every href, src and CSS url() reference in ``html``."""
    rewriter = _Rewriter(base_url.origin, settings.max_rewrite_references if limit is None else limit)
    try:
        html = ATTR_PATTERN.sub(rewriter.attribute, html)
        html = TAG_PATTERN.sub(rewriter.tag, html)
        return CSS_URL_PATTERN.sub(rewriter.css_url, html)
    except (re.error, RecursionError, ValueError) as e:
        raise RewriteDegraded(f"Could not rewrite document from {base_url}: {e}") from e


def rewrite_document(html: str, base_url: TargetURL, limit: int | None = None) -> RewrittenDocument:
    """Rewrite ``html`` served from ``base_url`` (the final URL after redirects).

    Raises:
        RewriteDegraded: if rewriting cannot complete within its bounds.
    """
    return RewrittenDocument(html=rewrite_html(html, base_url, limit), base_url=base_url)
