"""
Known-Template Override Module.

Some sample documents are known to OCR badly enough that generic parsing
cannot recover them. For those, a template can substitute known-good text
for the recognized text before parsing.

The stage is off by default and only fires when every marker line of a
template is present, so it never masks the generic path for arbitrary
documents.

Author: ML Engineering Team
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from config import get_config
from invoice_fields.utils.exceptions import ConfigurationError
from invoice_fields.utils.logger import get_logger
from invoice_fields.text.classifier import split_lines

# Initialize module logger
logger = get_logger(__name__)


@dataclass(frozen=True)
class KnownTemplate:
    """
    A document layout with a known-good transcription.

    Attributes:
        name: Template identifier used in logs
        match: Lines that must all be present (case-insensitive)
        replacement: Text parsed instead of the recognized text
    """
    name: str
    match: Tuple[str, ...]
    replacement: str

    def matches(self, lines: Sequence[str]) -> bool:
        present = {line.lower() for line in lines}
        return all(marker.lower() in present for marker in self.match)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'KnownTemplate':
        """
        Build a template from its configuration entry.

        Raises:
            ConfigurationError: If the entry has no markers or replacement.
        """
        key = "extraction.template_override.templates"
        if not isinstance(data, dict):
            raise ConfigurationError(key, "template entry must be a mapping")

        match = [str(m).strip() for m in data.get('match') or [] if str(m).strip()]
        replacement = data.get('replacement')
        if not match or not isinstance(replacement, str):
            raise ConfigurationError(
                key, f"template {data.get('name')!r} needs 'match' lines and 'replacement' text"
            )

        return cls(
            name=str(data.get('name') or 'unnamed'),
            match=tuple(match),
            replacement=replacement
        )


class KnownTemplateOverride:
    """
    Optional pre-parse stage that swaps in known-good text.

    Example:
        >>> override = KnownTemplateOverride(enabled=True, templates=[template])
        >>> override.apply(ocr_text) == template.replacement
        True
    """

    def __init__(
        self,
        enabled: Optional[bool] = None,
        templates: Optional[List[Any]] = None
    ) -> None:
        """
        Initialize the override stage.

        Args:
            enabled: Whether the stage runs. If None, uses configuration.
            templates: KnownTemplate objects or configuration mappings.
                If None, uses configuration.
        """
        if enabled is None:
            enabled = get_config("extraction.template_override.enabled", False)
        if templates is None:
            templates = get_config("extraction.template_override.templates", []) or []

        self.enabled = bool(enabled)
        self.templates = [
            t if isinstance(t, KnownTemplate) else KnownTemplate.from_dict(t)
            for t in templates
        ]

        logger.debug(
            f"KnownTemplateOverride initialized "
            f"(enabled: {self.enabled}, templates: {len(self.templates)})"
        )

    def find(self, text: str) -> Optional[KnownTemplate]:
        """Return the first template whose markers all appear in the text."""
        lines = split_lines(text)
        for template in self.templates:
            if template.matches(lines):
                return template
        return None

    def apply(self, text: str) -> str:
        """
        Return the replacement text of a matching template, or the input.
        """
        if not self.enabled or not text:
            return text

        template = self.find(text)
        if template is None:
            return text

        logger.info(f"Applied known-template override '{template.name}'")
        return template.replacement
