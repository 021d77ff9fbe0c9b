"""Generator configuration."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Any, List, Mapping, Optional

logger = logging.getLogger(__name__)

__all__ = ["GeneratorConfig", "DEFAULT_FALLBACK_TYPE"]

# Result of an unanalysed sequence: the matched characters.
DEFAULT_FALLBACK_TYPE: str = "string[]"

# Option spellings used by peggy plugin options.
_OPTION_ALIASES = {
    "doNotCamelCaseTypes": "do_not_camel_case_types",
    "customHeader": "custom_header",
    "customHeaderText": "custom_header",
    "fallbackType": "fallback_type",
}


@dataclass(frozen=True)
class GeneratorConfig:
    """Tuning knobs for declaration generation."""
    do_not_camel_case_types: bool = False
    custom_header: Optional[str] = None
    fallback_type: str = DEFAULT_FALLBACK_TYPE

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> "GeneratorConfig":
        """Build a config from plugin-style or field-name option keys.

        Unknown keys are ignored.
        """
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in options.items():
            name = _OPTION_ALIASES.get(key, key)
            if name in known:
                values[name] = value
            else:
                logger.debug("Ignoring unknown option %r", key)
        if "do_not_camel_case_types" in values:
            values["do_not_camel_case_types"] = bool(values["do_not_camel_case_types"])
        return cls(**values)

    def validate(self) -> List[str]:
        """Return a list of validation warnings (empty if valid)."""
        warnings: List[str] = []
        if not self.fallback_type.strip():
            warnings.append("fallback_type is empty; declarations will not parse")
        if self.custom_header:
            for line in self.custom_header.splitlines():
                stripped = line.strip()
                if stripped and not stripped.startswith(("//", "/*", "*")):
                    warnings.append(f"custom_header line is not a comment: {line!r}")
                    break
        return warnings
