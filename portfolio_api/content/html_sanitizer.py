"""
Allowlist sanitizer for rich-text blog content.

Tags outside the allowlist are dropped but their text is kept, except for
script-like elements whose content is dropped too. Attributes outside the
allowlist, data-* attributes, event handlers and script/data URLs are removed.
"""

import html
import re
from html.parser import HTMLParser

ALLOWED_TAGS = frozenset({
    'h1', 'h2', 'h3', 'h4', 'h5', 'h6',
    'p', 'br', 'hr',
    'ul', 'ol', 'li',
    'strong', 'b', 'em', 'i', 'u', 's', 'strike',
    'a', 'img',
    'blockquote', 'pre', 'code',
    'div', 'span',
})

ALLOWED_ATTRIBUTES = frozenset({
    'href', 'target', 'rel',
    'src', 'alt', 'title', 'width', 'height',
    'class',
})

URL_ATTRIBUTES = frozenset({'href', 'src'})

VOID_TAGS = frozenset({'br', 'hr', 'img'})

# Elements dropped together with everything inside them
DROP_CONTENT_TAGS = frozenset({'script', 'style', 'iframe', 'object', 'embed', 'noscript', 'template'})

UNSAFE_URL_SCHEMES = ('javascript:', 'vbscript:', 'data:')

_URL_NOISE = re.compile(r'[\x00-\x20]+')


def _is_safe_url(value: str) -> bool:
    normalized = _URL_NOISE.sub('', html.unescape(value)).lower()
    return not normalized.startswith(UNSAFE_URL_SCHEMES)


class _AllowlistParser(HTMLParser):

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.parts = []
        self._skip_depth = 0

    def handle_starttag(self, tag, attrs):
        if tag in DROP_CONTENT_TAGS:
            self._skip_depth += 1
            return
        if self._skip_depth or tag not in ALLOWED_TAGS:
            return
        self.parts.append(self._render_start(tag, attrs))

    def handle_startendtag(self, tag, attrs):
        if self._skip_depth or tag not in ALLOWED_TAGS:
            return
        self.parts.append(self._render_start(tag, attrs))
        if tag not in VOID_TAGS:
            self.parts.append(f"</{tag}>")

    def handle_endtag(self, tag):
        if tag in DROP_CONTENT_TAGS:
            if self._skip_depth:
                self._skip_depth -= 1
            return
        if self._skip_depth or tag not in ALLOWED_TAGS or tag in VOID_TAGS:
            return
        self.parts.append(f"</{tag}>")

    def handle_data(self, data):
        if self._skip_depth:
            return
        self.parts.append(html.escape(data, quote=False))

    def _render_start(self, tag, attrs):
        rendered = [tag]
        for name, value in attrs:
            name = name.lower()
            if name not in ALLOWED_ATTRIBUTES:
                continue
            if value is None:
                rendered.append(name)
                continue
            if name in URL_ATTRIBUTES and not _is_safe_url(value):
                continue
            rendered.append(f'{name}="{html.escape(value, quote=True)}"')
        return f"<{' '.join(rendered)}>"


def sanitize_html(content: str) -> str:
    """Return `content` reduced to the allowed tags and attributes."""
    if not content:
        return ""
    parser = _AllowlistParser()
    parser.feed(content)
    parser.close()
    return "".join(parser.parts)
