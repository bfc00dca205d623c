"""Front matter parsing and metadata appended to archived tasks."""

from datetime import datetime
from typing import Any, Callable

import yaml

from md_outline import ContentNode

from mdarchive.models.config import MetadataSettings
from mdarchive.utils.logging import get_logger

logger = get_logger(__name__)

FRONT_MATTER_DELIMITER = "---"


def split_front_matter(lines: list[str]) -> list[str]:
    """Return the front matter block (delimiters included), or [] if there is none.

    Examples:
        >>> split_front_matter(["---", "tags: work", "---", "- [ ] task"])
        ['---', 'tags: work', '---']
    """
    if not lines or lines[0].strip() != FRONT_MATTER_DELIMITER:
        return []
    for i in range(1, len(lines)):
        if lines[i].strip() == FRONT_MATTER_DELIMITER:
            return lines[: i + 1]
    return []


def parse_front_matter(lines: list[str]) -> dict[str, Any]:
    """Parse front matter lines (delimiters included) into a mapping.

    Unparsable or non-mapping front matter yields an empty mapping.
    """
    if not lines:
        return {}

    try:
        data = yaml.safe_load("\n".join(lines[1:-1]))
    except yaml.YAMLError as e:
        logger.warning("front_matter_unparsable", error=str(e))
        return {}

    return data if isinstance(data, dict) else {}


def front_matter_to_meta(front_matter: dict[str, Any]) -> str:
    """Render front matter as inline "key:: value" fields.

    Examples:
        >>> front_matter_to_meta({"project": "home", "priority": 2})
        'project:: home priority:: 2'
    """
    return " ".join(f"{key}:: {value}" for key, value in front_matter.items())


def pick_front_matter(front_matter: dict[str, Any], keys: str) -> dict[str, Any]:
    """Keep only the comma-separated keys, in front matter order.

    Examples:
        >>> pick_front_matter({"foo": "bar", "baz": "qux"}, "foo")
        {'foo': 'bar'}
        >>> pick_front_matter({"foo": "bar"}, "")
        {}
    """
    wanted = {key.strip() for key in keys.split(",") if key.strip()}
    return {key: value for key, value in front_matter.items() if key in wanted}


class MetadataService:
    """Appends resolved metadata templates to archived task lines.

    Supported placeholders: {{date}}, {{heading}}, {{frontmatter}}.
    """

    def __init__(self, settings: MetadataSettings, clock: Callable[[], datetime] = datetime.now):
        self.settings = settings
        self._clock = clock

    @property
    def enabled(self) -> bool:
        return self.settings.add_metadata

    def resolve(self, heading: str, front_matter: dict[str, Any]) -> str:
        if self.settings.frontmatter_keys is not None:
            front_matter = pick_front_matter(front_matter, self.settings.frontmatter_keys)
        replacements = {
            "{{date}}": self._clock().strftime(self.settings.date_format),
            "{{heading}}": heading,
            "{{frontmatter}}": front_matter_to_meta(front_matter),
        }
        resolved = self.settings.metadata
        for placeholder, value in replacements.items():
            resolved = resolved.replace(placeholder, value)
        return resolved

    def append_metadata(self, task: ContentNode, heading: str, front_matter: dict[str, Any]) -> None:
        """Append resolved metadata to the task's own line (no-op when disabled)."""
        if not self.enabled:
            return
        task.text = f"{task.text} {self.resolve(heading, front_matter)}".strip()
