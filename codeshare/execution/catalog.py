# Language catalog - static mapping from language id to execution strategy

import os
import re
from typing import Dict, Iterable, List, Optional

from .models import ExecutionMode, LanguageSpec
from .. import config

DEFAULT_LANGUAGE = "javascript"

_PUBLIC_CLASS_RE = re.compile(r"public\s+(?:final\s+|abstract\s+)*class\s+(\w+)")
_ANY_CLASS_RE = re.compile(r"\bclass\s+(\w+)")


def default_languages() -> List[LanguageSpec]:
    """Built-in languages; interpreter commands honor the config overrides"""
    return [
        LanguageSpec(
            id="javascript",
            display_name="JavaScript",
            extensions=(".js", ".jsx"),
            mode=ExecutionMode.INTERPRET,
            run_command=(config.NODE_COMMAND, "{source}"),
            timeout_s=10,
        ),
        LanguageSpec(
            id="python",
            display_name="Python",
            extensions=(".py",),
            mode=ExecutionMode.INTERPRET,
            run_command=(config.PYTHON_COMMAND, "{source}"),
            timeout_s=10,
        ),
        LanguageSpec(
            id="java",
            display_name="Java",
            extensions=(".java",),
            mode=ExecutionMode.COMPILE_THEN_RUN,
            compile_command=("javac", "{source}"),
            run_command=("java", "-cp", "{workdir}", "{entry}"),
            timeout_s=15,
            class_based=True,
        ),
        LanguageSpec(
            id="cpp",
            display_name="C++",
            extensions=(".cpp", ".cxx", ".cc"),
            mode=ExecutionMode.COMPILE_THEN_RUN,
            compile_command=("g++", "{source}", "-o", "{executable}"),
            run_command=("{executable}",),
            timeout_s=15,
        ),
        LanguageSpec(
            id="c",
            display_name="C",
            extensions=(".c",),
            mode=ExecutionMode.COMPILE_THEN_RUN,
            compile_command=("gcc", "{source}", "-o", "{executable}"),
            run_command=("{executable}",),
            timeout_s=15,
        ),
        LanguageSpec(
            id="go",
            display_name="Go",
            extensions=(".go",),
            mode=ExecutionMode.INTERPRET,
            run_command=("go", "run", "{source}"),
            timeout_s=15,
        ),
        LanguageSpec(
            id="rust",
            display_name="Rust",
            extensions=(".rs",),
            mode=ExecutionMode.COMPILE_THEN_RUN,
            compile_command=("rustc", "--edition", "2021", "{source}", "-o", "{executable}"),
            run_command=("{executable}",),
            timeout_s=20,
        ),
    ]


def detect_entry_class(code: str) -> Optional[str]:
    """
    Heuristic scan for the class a class-based source file must be named after

    Takes the first ``public class X``, falling back to the first ``class X``.
    Returns None when neither is found; callers then pick a default name.
    """
    match = _PUBLIC_CLASS_RE.search(code) or _ANY_CLASS_RE.search(code)
    return match.group(1) if match else None


class LanguageCatalog:
    """Lookup table of supported languages"""

    def __init__(self, languages: Optional[Iterable[LanguageSpec]] = None):
        specs = list(languages) if languages is not None else default_languages()
        self._languages: Dict[str, LanguageSpec] = {spec.id: spec for spec in specs}
        self._by_extension: Dict[str, str] = {}
        for spec in specs:
            for ext in spec.extensions:
                self._by_extension.setdefault(ext.lower(), spec.id)

    def __contains__(self, language_id: str) -> bool:
        return language_id in self._languages

    def get(self, language_id: Optional[str]) -> Optional[LanguageSpec]:
        if not isinstance(language_id, str):
            return None
        return self._languages.get(language_id)

    def languages(self) -> List[LanguageSpec]:
        return list(self._languages.values())

    def ids(self) -> List[str]:
        return list(self._languages)

    def language_from_filename(self, filename: Optional[str]) -> Optional[str]:
        """Language id for a filename's extension, or None if unknown"""
        if not isinstance(filename, str) or not filename:
            return None
        ext = os.path.splitext(filename)[1].lower()
        return self._by_extension.get(ext)

    def resolve_language(self, language: Optional[str], filename: Optional[str]) -> str:
        """
        Pick the language for a run request

        A filename with a known extension wins over the explicit id; otherwise
        the explicit id is used as-is (it may be unsupported), and with
        neither the default language applies.
        """
        inferred = self.language_from_filename(filename)
        if inferred is not None:
            return inferred
        if isinstance(language, str) and language:
            return language
        return DEFAULT_LANGUAGE
