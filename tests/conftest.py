"""Test configuration and fixtures for adocblog tests."""

import pytest
import tempfile
import shutil
import os
import json
import html
import logging
from pathlib import Path

import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from adocblog.converter import AsciiDocConverter


class FakeConverter(AsciiDocConverter):
    """Reads headers for real but writes a stub page instead of calling asciidoc."""

    def __init__(self, fail_on=None):
        super().__init__()
        self.fail_on = fail_on
        self.calls = []

    def convert(self, src, out, attributes=None):
        self.calls.append((src, out, attributes))
        if self.fail_on and os.path.basename(src) == self.fail_on:
            raise RuntimeError(f"cannot convert {src}")
        document = self.load(src)
        with open(out, 'w', encoding='utf-8') as f:
            f.write(f"<html><body><h1>{html.escape(document.title or '')}</h1></body></html>\n")


@pytest.fixture(autouse=True)
def reset_adocblog_logger():
    """Keep handlers added by the CLI from leaking between tests."""
    logger = logging.getLogger('adocblog')
    handlers = list(logger.handlers)
    level = logger.level
    yield
    for handler in logger.handlers[:]:
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def fake_converter():
    return FakeConverter()


@pytest.fixture
def mock_content_dir(temp_dir):
    """Create a mock content directory structure."""
    content_dir = Path(temp_dir) / 'content'
    notes_dir = content_dir / 'notes'
    notes_dir.mkdir(parents=True)

    (content_dir / 'about.html').write_text('<p>Hi, I write about <em>compilers</em>.</p>\n')

    (content_dir / 'talks.json').write_text(json.dumps([
        {'title': 'Smart casts', 'url': 'https://example.com/smart-casts',
         'event': 'KotlinConf', 'date': '2024-05-23'},
        {'title': 'Lightning talk', 'url': 'https://example.com/lightning'},
    ]))

    (content_dir / 'new-year.adoc').write_text("""= New Year Post
Jane Doe
v1.0, 2024-01-01: First post

Happy new year.
""")

    (content_dir / 'summer.adoc').write_text("""= Summer Post
:revdate: 2024-06-01

It is warm.
""")

    (content_dir / 'hello-world.adoc').write_text("""No title here, just text.
""")

    (notes_dir / 'foo.adoc').write_text("""= Foo Notes
:revdate: not a date at all

Some notes.
""")

    return str(content_dir)


@pytest.fixture
def mock_output_dir(temp_dir):
    """Path of a not yet created output directory."""
    return str(Path(temp_dir) / 'build')
