"""Rule name → declaration identifier."""

from __future__ import annotations

import re
from typing import Dict, Iterable

__all__ = ["DeclarationNamer", "to_type_name"]

_SEPARATORS = re.compile(r"[^0-9A-Za-z]+")
_IDENTIFIER = re.compile(r"^[A-Za-z_$][\w$]*$")


def to_type_name(raw: str) -> str:
    """Upper camel case: ``other_rule`` → ``OtherRule``, ``START`` → ``START``.

    Names that collapse to nothing usable (``_``) are returned unchanged.
    """
    name = "".join(part[:1].upper() + part[1:] for part in _SEPARATORS.split(raw))
    if not _IDENTIFIER.match(name):
        return raw
    return name


class DeclarationNamer:
    """Assigns each rule a unique declaration identifier.

    Identifiers are allocated in rule order; when two rules normalise to
    the same identifier the later one gets a numeric suffix.
    """

    def __init__(self, rules: Iterable[str], camel_case: bool = True) -> None:
        self._names: Dict[str, str] = {}
        taken = set()
        for rule in rules:
            base = to_type_name(rule) if camel_case else rule
            name, counter = base, 1
            while name in taken:
                counter += 1
                name = f"{base}{counter}"
            taken.add(name)
            self._names[rule] = name

    def __call__(self, rule: str) -> str:
        return self._names.get(rule, rule)

    def __getitem__(self, rule: str) -> str:
        return self._names[rule]
