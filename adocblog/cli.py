#!/usr/bin/env python3
"""
Command-line interface for adocblog - static AsciiDoc blog generator.
"""

import os
import sys
import time
import logging
import argparse
from datetime import datetime
from typing import List, Optional

from . import __version__
from .core import Blog
from .settings import BlogSettings


class InfoFilter(logging.Filter):
    """Filter to allow warnings and selected INFO messages in the console."""
    allowed_messages = [
        "Building index page",
        "Site build completed in",
    ]

    def filter(self, record):
        if record.levelno >= logging.WARNING:
            return True
        return any(msg in record.getMessage() for msg in self.allowed_messages)


def setup_logging(log_dir: Optional[str] = None) -> logging.Logger:
    """Set up logging configuration for the 'adocblog' logger tree."""
    logger = logging.getLogger('adocblog')
    logger.setLevel(logging.DEBUG if log_dir else logging.INFO)

    if not logger.handlers:
        # Console handler (stderr) with filter
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.INFO)
        console_handler.addFilter(InfoFilter())
        console_handler.setFormatter(logging.Formatter('%(message)s'))
        logger.addHandler(console_handler)

        # File handler for all logs
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
            log_filename = datetime.now().strftime('adocblog_%Y-%m-%d_%H-%M-%S.log')
            file_handler = logging.FileHandler(os.path.join(log_dir, log_filename))
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
            logger.addHandler(file_handler)

    return logger


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entry point. Builds the whole site; takes no build options."""
    parser = argparse.ArgumentParser(description='adocblog - static AsciiDoc blog generator')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.parse_args(argv)

    settings_loader = BlogSettings()
    settings = settings_loader.load_settings()

    logger = setup_logging(settings_loader.resolve_path('log_dir'))
    output_dir = settings_loader.resolve_path('output')

    start_time = time.time()
    try:
        blog = Blog(
            content_dir=settings_loader.resolve_path('content'),
            output_dir=output_dir,
            templates_dir=settings_loader.resolve_path('templates'),
            site_title=settings['site_title'],
            site_tagline=settings['site_tagline'],
        )
        blog.build()
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    logger.info(f"Site build completed in {time.time() - start_time:.6f} seconds.")
    print(f"Built {blog.pages_built} page(s) into {output_dir}")


if __name__ == '__main__':
    main()
