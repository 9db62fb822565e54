"""Load the optional talks side file for the index page."""

import os
import json
import logging
from dataclasses import dataclass
from typing import Any, List, Optional

import yaml

# Side files to look for (in order of preference)
TALKS_FILES = ['talks.json', 'talks.yml', 'talks.yaml']

logger = logging.getLogger('adocblog.talks')


@dataclass
class TalkMetadata:
    title: str
    url: str
    event: Optional[str] = None
    date: Optional[str] = None


def find_talks_file(content_dir: str) -> Optional[str]:
    for filename in TALKS_FILES:
        path = os.path.join(content_dir, filename)
        if os.path.exists(path):
            return path
    return None


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def parse_talks(data: Any, source: str = 'talks') -> List[TalkMetadata]:
    """
    Build talk records from decoded side file data.

    Records that are not mappings or lack a title or url are skipped.

    Raises:
        ValueError: If the data is not a list
    """
    if data is None:
        return []
    if not isinstance(data, list):
        raise ValueError(f"expected a list of talks, got {type(data).__name__}")

    talks = []
    for index, record in enumerate(data):
        if not isinstance(record, dict):
            logger.warning(f"Skipping talk #{index + 1} in {source}: not a mapping")
            continue
        title = _optional_str(record.get('title'))
        url = _optional_str(record.get('url'))
        if not title or not url:
            logger.warning(f"Skipping talk #{index + 1} in {source}: title and url are required")
            continue
        talks.append(TalkMetadata(
            title=title,
            url=url,
            event=_optional_str(record.get('event')),
            date=_optional_str(record.get('date')),
        ))
    return talks


def load_talks(content_dir: str) -> List[TalkMetadata]:
    """
    Load talks from the first side file found in the content directory.

    A missing file yields no talks. A malformed file is reported as a
    warning and also yields no talks.
    """
    file_path = find_talks_file(content_dir)
    if file_path is None:
        return []

    filename = os.path.basename(file_path)
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            if file_path.endswith('.json'):
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
        talks = parse_talks(data, filename)
    except (IOError, OSError, PermissionError) as e:
        logger.error(f"Failed to read {filename}: {e}")
        return []
    except (json.JSONDecodeError, yaml.YAMLError, ValueError) as e:
        logger.warning(f"Failed to parse {filename}: {e}")
        return []

    logger.debug(f"Loaded {len(talks)} talk(s) from {file_path}")
    return talks
