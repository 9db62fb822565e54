import os
import glob
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from dateutil import parser as date_parser
from jinja2 import ChoiceLoader, Environment, FileSystemLoader, PackageLoader, TemplateNotFound, TemplateSyntaxError

from .converter import ADOC_EXTENSION, CONVERT_ATTRIBUTES, AsciiDocConverter
from .talks import TalkMetadata, load_talks

ABOUT_FILE = 'about.html'
INDEX_FILE = 'index.html'
POST_DATE_FORMAT = '%Y-%m-%d'
GENERATED_AT_FORMAT = '%Y-%m-%d %H:%M %Z'

# Undated posts sort as if they were written at the epoch
EPOCH = datetime(1970, 1, 1)


@dataclass
class PageMetadata:
    title: str
    link: str
    date: Optional[datetime] = None


def find_sources(content_dir, extension=ADOC_EXTENSION):
    """Return every markup file below content_dir, sorted by path."""
    pattern = os.path.join(content_dir, '**', f'*{extension}')
    return sorted(path for path in glob.glob(pattern, recursive=True) if os.path.isfile(path))


def sort_posts(posts):
    """Sort posts most recent first; undated posts go last."""
    ordered = sorted(posts, key=lambda p: p.date or EPOCH)
    ordered.reverse()
    return ordered


class PageBuilder:
    """Convert one source document and collect its index metadata."""

    def __init__(self, content_dir, output_dir, converter=None, attributes=None):
        self.content_dir = content_dir
        self.output_dir = output_dir
        self.converter = converter or AsciiDocConverter()
        self.attributes = dict(CONVERT_ATTRIBUTES if attributes is None else attributes)
        self.logger = logging.getLogger('adocblog.PageBuilder')

    def resolve_title(self, document, src):
        """Use the declared title, else the filename without its extension."""
        if document.title:
            return document.title
        return os.path.splitext(os.path.basename(src))[0]

    def resolve_date(self, document, src):
        """
        Parse the revision date, falling back to the file's mtime.

        Timezone-aware dates are converted to naive local time so that
        every resolved date can be compared with every other.
        """
        revdate = document.attr('revdate') or document.attr('revdate-at')
        if revdate:
            try:
                parsed = date_parser.parse(revdate)
                if parsed.tzinfo is not None:
                    parsed = parsed.astimezone().replace(tzinfo=None)
                return parsed
            except (ValueError, OverflowError) as e:
                self.logger.debug(f"Unparsable revdate {revdate!r} in {src}: {e}")
        return datetime.fromtimestamp(os.path.getmtime(src))

    def output_path_for(self, src):
        """Mirror the source's place under the content root onto the output root."""
        rel_path = os.path.relpath(src, self.content_dir)
        base, _ = os.path.splitext(rel_path)
        return os.path.join(self.output_dir, base + '.html')

    def relative_link(self, out_path):
        """Link to an output file, relative to the output root, with '/' separators."""
        return os.path.relpath(out_path, self.output_dir).replace(os.sep, '/')

    def process(self, src):
        """
        Build a single page.

        Conversion errors are not caught: a document that cannot be
        converted fails the whole build.
        """
        document = self.converter.load(src)
        title = self.resolve_title(document, src)
        date = self.resolve_date(document, src)

        out_path = self.output_path_for(src)
        os.makedirs(os.path.dirname(out_path), exist_ok=True)
        self.converter.convert(src, out_path, self.attributes)
        self.logger.debug(f"Converted {src} -> {out_path}")

        return PageMetadata(title=title, link=self.relative_link(out_path), date=date)


class IndexRenderer:
    """Render the index page from the bundled or a user supplied template."""

    def __init__(self, templates_dir=None, site_title=None, site_tagline=None):
        loaders = []
        if templates_dir:
            loaders.append(FileSystemLoader(templates_dir))
        loaders.append(PackageLoader('adocblog', 'templates'))
        # Content is author-controlled; titles and links are not escaped.
        self.env = Environment(loader=ChoiceLoader(loaders), trim_blocks=True, lstrip_blocks=True)
        self.site_title = site_title
        self.site_tagline = site_tagline
        self.logger = logging.getLogger('adocblog.IndexRenderer')

    def render(self, posts: List[PageMetadata], talks: List[TalkMetadata], about_html: str,
               generated_at: Optional[datetime] = None) -> str:
        generated_at = generated_at or datetime.now().astimezone()
        try:
            template = self.env.get_template(INDEX_FILE)
        except (TemplateNotFound, TemplateSyntaxError) as e:
            self.logger.error(f"Template error: {e}")
            raise
        return template.render(
            site_title=self.site_title,
            site_tagline=self.site_tagline,
            about_html=about_html,
            posts=sort_posts(posts),
            talks=talks,
            date_format=POST_DATE_FORMAT,
            generated_at=generated_at.strftime(GENERATED_AT_FORMAT).strip(),
        )


class Blog:
    """Run the scan, page, talks and index stages in one pass."""

    def __init__(self, content_dir='content', output_dir='build', templates_dir=None,
                 site_title='My Blog', site_tagline=None, converter=None):
        self.content_dir = content_dir
        self.output_dir = output_dir
        self.templates_dir = templates_dir
        self.site_title = site_title
        self.site_tagline = site_tagline
        self.posts = []
        self.talks = []
        self.logger = logging.getLogger('adocblog')

        self.page_builder = PageBuilder(content_dir, output_dir, converter=converter)
        self.renderer = IndexRenderer(templates_dir, site_title, site_tagline)

    @property
    def pages_built(self):
        return len(self.posts)

    def create_output_dir(self):
        os.makedirs(self.output_dir, exist_ok=True)

    def find_sources(self):
        sources = find_sources(self.content_dir)
        if not sources:
            self.logger.warning(
                f"No {ADOC_EXTENSION} files found in {self.content_dir}. "
                f"Create one, e.g., content/hello-world{ADOC_EXTENSION}"
            )
        return sources

    def build_pages(self, sources):
        self.logger.info(f"Building {len(sources)} page(s)")
        return [self.page_builder.process(src) for src in sources]

    def read_about(self):
        """Read the about fragment. It is required; a missing file is fatal."""
        about_path = os.path.join(self.content_dir, ABOUT_FILE)
        with open(about_path, 'r', encoding='utf-8') as f:
            return f.read()

    def build_index_page(self, about_html, generated_at=None):
        self.logger.info("Building index page")
        html = self.renderer.render(self.posts, self.talks, about_html, generated_at)
        output_path = os.path.join(self.output_dir, INDEX_FILE)
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(html)
        self.logger.debug(f"Generated index page at {output_path}")
        return output_path

    def build(self, generated_at=None):
        """Main build process."""
        self.logger.info("Starting site build...")
        self.create_output_dir()

        sources = self.find_sources()
        self.posts = self.build_pages(sources)
        self.talks = load_talks(self.content_dir)

        about_html = self.read_about()
        self.build_index_page(about_html, generated_at)
        return self.posts
