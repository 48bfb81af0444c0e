"""
Skill name normalization and category guessing.

Upstream sources (OCR, PDF parsing, free-text forms) reliably leave stray
quotes, parentheses and whitespace around skill names. Everything that
creates or compares skills goes through `clean_name` / `name_key`.
"""
import re
from typing import Any, Optional
from uuid import UUID

from app.core.config import settings

_EDGE_PUNCTUATION = re.compile(r"^[\"'()]+|[\"'()]+$")
_DOUBLE_QUOTES = re.compile(r'"+')
_WHITESPACE = re.compile(r"\s+")
_UUID_TEXT = re.compile(
    r"^[0-9a-f]{8}-?[0-9a-f]{4}-?[0-9a-f]{4}-?[0-9a-f]{4}-?[0-9a-f]{12}$",
    re.IGNORECASE,
)

DEFAULT_CATEGORY = settings.skill_default_category

# Checked in order; the first category with a matching keyword wins.
CATEGORY_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("Language", (
        "javascript", "typescript", "python", "java", "c#", "c++", "go",
        "rust", "php", "ruby", "kotlin", "swift", "dart", "sql", "html", "css",
    )),
    ("Framework / Library", (
        "react", "next", "next.js", "vue", "nuxt", "angular", "svelte",
        "redux", "tailwind", "bootstrap", "material ui", "mui", "express",
        "nestjs", "django", "flask", "fastapi", "laravel", "spring",
        "spring boot",
    )),
    ("Database", (
        "mongodb", "mongoose", "mysql", "postgresql", "postgres", "sqlite",
        "redis", "oracle", "mariadb", "firebase", "supabase",
    )),
    ("DevOps / Cloud", (
        "docker", "kubernetes", "k8s", "aws", "azure", "gcp",
        "github actions", "gitlab ci", "jenkins", "ci/cd", "terraform",
    )),
    ("Tooling", (
        "git", "github", "gitlab", "bitbucket", "vscode", "visual studio",
        "webstorm", "eslint", "prettier", "webpack", "vite", "rollup", "babel",
    )),
    ("Testing", (
        "jest", "mocha", "chai", "vitest", "cypress", "playwright",
        "selenium", "testing library", "react testing library",
    )),
    ("UI / UX", (
        "figma", "adobe xd", "sketch", "framer", "tailwind ui", "chakra ui",
    )),
]


def _keyword_pattern(keyword: str) -> re.Pattern:
    # Whole-token match so "go" does not fire on "django" or "mongodb"
    return re.compile(rf"(?<![a-z0-9]){re.escape(keyword)}(?![a-z0-9])")


_CATEGORY_PATTERNS = [
    (category, [_keyword_pattern(k) for k in keywords])
    for category, keywords in CATEGORY_KEYWORDS
]


def clean_name(value: Any) -> str:
    """Strip edge quotes/parentheses, drop embedded double quotes, collapse whitespace."""
    if value is None:
        return ""
    cleaned = str(value).strip()
    cleaned = _EDGE_PUNCTUATION.sub("", cleaned)
    cleaned = _DOUBLE_QUOTES.sub("", cleaned)
    cleaned = _WHITESPACE.sub(" ", cleaned).strip()
    return cleaned


def name_key(value: Any) -> str:
    """Case-insensitive identity of a skill name."""
    return clean_name(value).lower()


def parse_uuid(value: Any) -> Optional[UUID]:
    """Return the UUID a value denotes, or None if it is not id-shaped."""
    if isinstance(value, UUID):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not _UUID_TEXT.match(text):
        return None
    return UUID(text)


def guess_category(name: str) -> str:
    """
    Best-effort category for a new skill.

    Cosmetic only; admins can recategorize at any time.
    """
    lowered = clean_name(name).lower()
    if not lowered:
        return DEFAULT_CATEGORY

    for category, patterns in _CATEGORY_PATTERNS:
        if any(p.search(lowered) for p in patterns):
            return category
    return DEFAULT_CATEGORY
