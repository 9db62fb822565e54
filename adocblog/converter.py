"""
AsciiDoc collaborator for adocblog.

Two modes are exposed: a load-only mode that reads the document header
(title, author/revision lines and attribute entries) without producing any
output, and a write mode that hands the document to asciidoc-py to produce
an HTML5 page.
"""

import os
import re
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, Optional

from asciidoc.api import AsciiDocAPI

ADOC_EXTENSION = '.adoc'

# html5 section templates with a self-link anchor on every heading
SECTANCHORS_CONF = os.path.join(os.path.dirname(__file__), 'conf', 'sectanchors.conf')

# Fixed conversion options. toc2 puts the table of contents in a left
# sidebar. A value of None unsets the attribute, which leaves asciidoc on
# its built-in stylesheet.
CONVERT_ATTRIBUTES = {
    'toc2': '',
    'sectanchors': '',
    'source-highlighter': 'pygments',
    'stylesheet': None,
    'docinfo1': '',
}

DOCUMENT_TITLE_RE = re.compile(r'^[=#]\s+(?P<title>\S.*?)\s*$')
SECTION_TITLE_RE = re.compile(r'^(?:={2,6}|#{2,6})\s+(?P<title>\S.*?)\s*$')
ATTRIBUTE_ENTRY_RE = re.compile(
    r'^:(?P<pre>!)?(?P<name>\w[\w-]*)(?P<post>!)?:(?:\s+(?P<value>.*?))?\s*$'
)
ATTRIBUTE_REF_RE = re.compile(r'\{(?P<name>\w[\w-]*)\}')
REVISION_LINE_RE = re.compile(
    r'^(?:[^\d{]*(?P<number>.*?),)?\s*(?P<date>[^:]*?)\s*(?::\s*(?P<remark>.*))?$'
)
COMMENT_BLOCK_RE = re.compile(r'^/{4,}\s*$')


class ConversionError(Exception):
    """Raised when a document cannot be converted to HTML."""


@dataclass
class Document:
    """Header information of an AsciiDoc document."""
    title: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)

    def attr(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.attributes.get(name, default)


def _strip_comments(lines: Iterable[str]) -> Iterator[str]:
    """Yield lines with line comments and comment blocks removed."""
    in_block = False
    for line in lines:
        if COMMENT_BLOCK_RE.match(line):
            in_block = not in_block
            continue
        if in_block:
            continue
        if line.startswith('//') and not line.startswith('///'):
            continue
        yield line


def _substitute(value: str, attributes: Dict[str, str]) -> str:
    def repl(match):
        name = match.group('name').lower()
        return attributes.get(name, match.group(0))
    return ATTRIBUTE_REF_RE.sub(repl, value)


def _apply_attribute_entry(match, attributes: Dict[str, str]) -> None:
    name = match.group('name').lower()
    if match.group('pre') or match.group('post'):
        attributes.pop(name, None)
    else:
        attributes[name] = _substitute(match.group('value') or '', attributes)


def _apply_revision_line(line: str, attributes: Dict[str, str]) -> None:
    match = REVISION_LINE_RE.match(line.strip())
    if not match:
        return
    number = (match.group('number') or '').strip()
    date_value = (match.group('date') or '').strip()
    remark = (match.group('remark') or '').strip()
    if number:
        attributes['revnumber'] = number.lstrip('vV')
    elif re.match(r'^[vV]\d', date_value):
        # A lone "v1.2" is a version number, not a date
        attributes['revnumber'] = date_value[1:]
        date_value = ''
    if date_value:
        attributes['revdate'] = date_value
    if remark:
        attributes['revremark'] = remark


def read_header(text: str) -> Document:
    """
    Read the header of an AsciiDoc document.

    Args:
        text: Full document source

    Returns:
        Document with the resolved title (or None) and header attributes
    """
    lines = list(_strip_comments(text.lstrip('\ufeff').splitlines()))
    attributes = {}
    header_title = None
    pos = 0

    while pos < len(lines) and not lines[pos].strip():
        pos += 1

    # Attribute entries may precede the title
    while pos < len(lines):
        match = ATTRIBUTE_ENTRY_RE.match(lines[pos])
        if not match:
            break
        _apply_attribute_entry(match, attributes)
        pos += 1

    title_match = DOCUMENT_TITLE_RE.match(lines[pos]) if pos < len(lines) else None
    if title_match:
        header_title = title_match.group('title')
        pos += 1
        implicit = 0
        while pos < len(lines) and lines[pos].strip():
            line = lines[pos]
            match = ATTRIBUTE_ENTRY_RE.match(line)
            if match:
                _apply_attribute_entry(match, attributes)
            elif implicit == 0:
                attributes['author'] = line.strip()
                implicit = 1
            elif implicit == 1:
                _apply_revision_line(line, attributes)
                implicit = 2
            pos += 1

    section_title = None
    if header_title is None:
        while pos < len(lines):
            line = lines[pos]
            if line.strip() and not ATTRIBUTE_ENTRY_RE.match(line):
                section_match = SECTION_TITLE_RE.match(line)
                if section_match:
                    section_title = section_match.group('title')
                break
            pos += 1

    title = (
        attributes.get('title')
        or header_title
        or attributes.get('doctitle')
        or section_title
    )
    if title:
        title = _substitute(title, attributes)
    return Document(title=title, attributes=attributes)


class AsciiDocConverter:
    """Load and convert AsciiDoc documents."""

    def __init__(self, backend: str = 'html5', safe: bool = False):
        self.backend = backend
        self.safe = safe
        self.logger = logging.getLogger('adocblog.AsciiDocConverter')

    def load(self, src: str) -> Document:
        """Read a document's header without writing any output."""
        with open(src, 'r', encoding='utf-8') as f:
            return read_header(f.read())

    def convert(self, src: str, out: str, attributes: Optional[Dict[str, Optional[str]]] = None) -> None:
        """
        Convert a document to HTML. The directory of `out` must already exist.

        Args:
            src: Path to the AsciiDoc source
            out: Path of the HTML file to write
            attributes: Document attributes passed to asciidoc

        Raises:
            ConversionError: If asciidoc fails for any reason
        """
        attributes = attributes or {}
        api = AsciiDocAPI()
        if self.safe:
            api.options.append('--safe')
        if attributes.get('sectanchors') is not None:
            api.options.append('--conf-file', SECTANCHORS_CONF)
        api.attributes.update(attributes)

        try:
            api.execute(src, out, backend=self.backend)
        except Exception as e:
            # asciidoc-py can fail with IndexError when it exits without a message
            raise ConversionError(f"Failed to convert {src}: {e}") from e
        finally:
            for message in api.messages:
                self.logger.debug(f"asciidoc: {message}")
        self.logger.debug(f"Generated HTML: {out}")
