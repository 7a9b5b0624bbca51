"""Search support: trace records, search options, query identifier extraction and keywords."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

__all__ = [
    "ToolTrace",
    "SearchCodeOptions",
    "extract_code_identifiers",
    "is_common_keyword",
]


@dataclass
class ToolTrace:
    """A short record of one tool execution."""

    tool: str
    summary: str


_IGNORED_DIRS = (".git", "target", "node_modules", "dist", "build")


@dataclass
class SearchCodeOptions:
    """Limits for a repository code search."""

    max_files: int = 8_000
    max_hits: int = 64
    max_file_bytes: int = 500_000
    ignore_dirs: list[str] = field(default_factory=lambda: list(_IGNORED_DIRS))


_WORD_PATTERN = re.compile(r"[a-zA-Z_][a-zA-Z0-9_]{2,}")
_MIXED_CASE_PATTERN = re.compile(r"\b[a-zA-Z][a-zA-Z0-9]*?[A-Z][a-zA-Z0-9]*\b")


def extract_code_identifiers(query: str) -> list[str]:
    """Extract snake_case, camelCase and PascalCase identifiers from a natural-language query."""
    found = _WORD_PATTERN.findall(query)
    seen = set(found)
    for word in _MIXED_CASE_PATTERN.findall(query):
        if word not in seen:
            seen.add(word)
            found.append(word)
    return found


def _words(text: str) -> frozenset[str]:
    return frozenset(text.split())


_UNIVERSAL_KEYWORDS = _words(
    "if else for while return break continue true false null undefined"
)

_RUST_WORDS = (
    _words(
        """
        if else for while loop match return break continue
        let mut const static ref
        fn struct enum impl trait type where
        pub crate super self Self
        mod use extern
        try await async move
        dyn '_
        true false None Some Ok Err
        String str Vec HashMap BTreeMap HashSet BTreeSet
        Box Arc Rc RefCell Cell Mutex RwLock
        Option Result PhantomData VecDeque LinkedList
        """
    )
    | {"impl Trait"}
)


def is_common_keyword(name: str, lang_id: str | None = None) -> bool:
    """Tell whether ``name`` is a common keyword or standard type for the language."""
    vocabulary = _RUST_WORDS if lang_id in (None, "rs") else _UNIVERSAL_KEYWORDS
    return name in vocabulary