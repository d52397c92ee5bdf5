"""Translation of fixed UI strings.

A ``Translator`` looks source strings up in a flat catalog for one
language and substitutes ``@name`` placeholders. Catalogs are JSON objects
mapping English source strings to translations, stored as
``<language>.json`` in a translations directory. Substituted values are
inserted verbatim; escaping happens once, when the output is rendered.
"""

from __future__ import annotations

import json
import logging
import os
import re
from typing import Dict, Mapping, Optional

logger = logging.getLogger(__name__)

SOURCE_LANGUAGE = "en"


class Translator:
    """Callable translating source strings for a single language."""

    def __init__(self, language: str = SOURCE_LANGUAGE, catalog: Optional[Mapping[str, str]] = None) -> None:
        self.language = language
        self._catalog: Dict[str, str] = dict(catalog or {})

    @classmethod
    def from_directory(cls, language: str, directory: Optional[str]) -> "Translator":
        """Load the catalog for ``language`` from ``directory``.

        The source language needs no catalog. A missing catalog file falls
        back to the source strings with a warning; an unreadable one raises.
        """
        if language == SOURCE_LANGUAGE or not directory:
            return cls(language)
        path = os.path.join(directory, f"{language}.json")
        if not os.path.exists(path):
            logger.warning("No translation catalog for language %r at %s; using source strings", language, path)
            return cls(language)
        with open(path, "r", encoding="utf-8") as fh:
            catalog = json.load(fh)
        if not isinstance(catalog, dict):
            raise ValueError(f"translation catalog {path} must be a JSON object")
        logger.info("Loaded %d translations for language %r", len(catalog), language)
        return cls(language, catalog)

    def __call__(self, text: str, args: Optional[Mapping[str, object]] = None) -> str:
        translated = self._catalog.get(text, text)
        if not args:
            return translated
        for key in args:
            if not key.startswith("@"):
                raise ValueError(f"unsupported placeholder {key!r}; placeholders start with '@'")
        # One pass, longest placeholders first, so substituted values are never rescanned
        # and "@entity_type" is not clobbered by "@entity".
        pattern = re.compile("|".join(re.escape(key) for key in sorted(args, key=len, reverse=True)))
        return pattern.sub(lambda match: str(args[match.group(0)]), translated)
