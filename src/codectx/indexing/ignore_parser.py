"""
Ignore patterns for sensitive and generated files.

Combines patterns from:
1. Built-in sensitive-file defaults (*.env, *.pem, *secret*, ...)
2. User patterns persisted to a JSON state file
3. Index-only defaults for build output and generated code (bin/, obj/, *.g.cs)

File listings consult the sensitive and user patterns by file name. The
semantic indexer additionally matches index and user patterns against the
full path.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from codectx.errors import InvalidPatternError

if TYPE_CHECKING:
    from codectx.config import Config

logger = structlog.get_logger(__name__)


DEFAULT_SENSITIVE_PATTERNS = [
    "*.env",
    "appsettings.*.json",
    "*.pfx",
    "*.key",
    "*.pem",
    "*password*",
    "*secret*",
]

# Characters never valid in a file name on any supported platform, minus the
# glob metacharacters.
INVALID_PATTERN_CHARS = frozenset('<>:"|\0') | frozenset(chr(c) for c in range(1, 32))


@dataclass
class PatternSet:
    """Snapshot of the configured patterns."""

    default_patterns: list[str]
    user_patterns: list[str]

    @property
    def all_patterns(self) -> list[str]:
        return _distinct(self.default_patterns + self.user_patterns)


@dataclass
class PatternUpdate:
    """Outcome of adding patterns."""

    added: list[str] = field(default_factory=list)
    invalid: list[str] = field(default_factory=list)
    all_patterns: list[str] = field(default_factory=list)


@dataclass
class PatternRemoval:
    """Outcome of removing patterns."""

    default_patterns: list[str] = field(default_factory=list)
    user_patterns: list[str] = field(default_factory=list)
    all_patterns: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    not_found: list[str] = field(default_factory=list)
    default_skipped: list[str] = field(default_factory=list)


def _distinct(patterns: list[str]) -> list[str]:
    """De-duplicate case-insensitively, keeping first spelling and order."""
    seen: set[str] = set()
    result = []
    for pattern in patterns:
        folded = pattern.casefold()
        if folded not in seen:
            seen.add(folded)
            result.append(pattern)
    return result


def wildcard_to_regex(pattern: str) -> str:
    """
    Convert a full-path wildcard pattern to an anchored regex.

    ``**`` matches across separators, ``*`` matches within one path
    segment, ``?`` matches any single character.

    Args:
        pattern: Wildcard pattern such as ``**/obj/**``.

    Returns:
        Regex source string.
    """
    escaped = re.escape(pattern)
    escaped = escaped.replace(r"\*\*", ".*")
    escaped = escaped.replace(r"\*", r"[^/\\]*")
    escaped = escaped.replace(r"\?", ".")
    return "^" + escaped + "$"


def file_name_matches(file_name: str, pattern: str) -> bool:
    """Match a bare file name against a ``*`` pattern or an exact name."""
    if "*" in pattern:
        regex = "^" + re.escape(pattern).replace(r"\*", ".*") + "$"
        return re.match(regex, file_name, re.IGNORECASE) is not None
    return file_name.casefold() == pattern.casefold()


def check_pattern(pattern: str) -> None:
    """
    Validate a user ignore pattern.

    Raises:
        InvalidPatternError: If the pattern is blank, rooted, contains
            characters that cannot appear in a file name, or has unbalanced
            square brackets.
    """
    if not pattern or not pattern.strip():
        raise InvalidPatternError(pattern, "pattern is blank")
    if pattern.startswith(("/", "\\")):
        raise InvalidPatternError(pattern, "pattern must not start with a path separator")
    bad = sorted({c for c in pattern if c in INVALID_PATTERN_CHARS})
    if bad:
        raise InvalidPatternError(pattern, f"invalid characters {bad!r}")
    if pattern.count("[") != pattern.count("]"):
        raise InvalidPatternError(pattern, "unbalanced square brackets")


def is_valid_glob_pattern(pattern: str) -> bool:
    """Return True if ``check_pattern`` accepts the pattern."""
    try:
        check_pattern(pattern)
    except InvalidPatternError:
        return False
    return True


class IgnoreFilter:
    """
    Sensitive-file and index ignore rules with persisted user patterns.

    User patterns are stored as ``{"user_patterns": [...]}`` in the state
    file and reloaded on every ``get_patterns`` call so that edits from
    another process are picked up.
    """

    def __init__(self, config: "Config") -> None:
        """
        Initialize the filter and load persisted user patterns.

        Args:
            config: codectx configuration.
        """
        self.config = config
        self.default_patterns = list(DEFAULT_SENSITIVE_PATTERNS)
        self.index_patterns = list(config.ignore.index_patterns)
        self._state_file = config.ignore_state_path
        self._user_patterns: list[str] = []
        self._index_regexes: list[re.Pattern[str]] | None = None
        self._load_state()

    @property
    def state_file_location(self) -> Path:
        return self._state_file

    @property
    def user_patterns(self) -> list[str]:
        return list(self._user_patterns)

    def _load_state(self) -> None:
        if not self._state_file.exists():
            return
        try:
            data = json.loads(self._state_file.read_text(encoding="utf-8"))
            patterns = data.get("user_patterns", [])
        except (OSError, ValueError, AttributeError) as e:
            logger.warning(
                "Failed to load ignore state, starting empty",
                path=str(self._state_file),
                error=str(e),
            )
            patterns = []
        self._set_user_patterns(patterns)

    def _save_state(self) -> None:
        self._state_file.parent.mkdir(parents=True, exist_ok=True)
        self._state_file.write_text(
            json.dumps({"user_patterns": self._user_patterns}, indent=2),
            encoding="utf-8",
        )

    def _set_user_patterns(self, patterns: list[str]) -> None:
        self._user_patterns = _distinct([p for p in patterns if isinstance(p, str)])
        self._index_regexes = None

    def _is_default(self, pattern: str) -> bool:
        folded = pattern.casefold()
        return any(folded == p.casefold() for p in self.default_patterns)

    def get_patterns(self) -> PatternSet:
        """Reload state and return default and user patterns."""
        self._load_state()
        return PatternSet(
            default_patterns=list(self.default_patterns),
            user_patterns=list(self._user_patterns),
        )

    def add_patterns(self, patterns: list[str]) -> PatternUpdate:
        """
        Add user patterns, skipping invalid ones.

        Args:
            patterns: Candidate patterns.

        Returns:
            Added and rejected patterns plus the resulting full set.
        """
        update = PatternUpdate()
        current = list(self._user_patterns)

        for pattern in patterns:
            if is_valid_glob_pattern(pattern):
                current.append(pattern)
                update.added.append(pattern)
            else:
                update.invalid.append(pattern)

        if update.invalid:
            logger.warning("Rejected invalid ignore patterns", patterns=update.invalid)

        self._set_user_patterns(current)
        self._save_state()
        update.all_patterns = self.get_patterns().all_patterns
        return update

    def remove_patterns(self, patterns: list[str]) -> PatternRemoval:
        """
        Remove user patterns. Default patterns cannot be removed.

        Args:
            patterns: Patterns to remove (case-insensitive).

        Returns:
            Which patterns were removed, missing, or protected defaults.
        """
        removal = PatternRemoval()
        current = list(self._user_patterns)

        for pattern in patterns:
            if self._is_default(pattern):
                removal.default_skipped.append(pattern)
                continue
            match = next((p for p in current if p.casefold() == pattern.casefold()), None)
            if match is None:
                removal.not_found.append(pattern)
            else:
                current.remove(match)
                removal.removed.append(pattern)

        self._set_user_patterns(current)
        self._save_state()

        removal.default_patterns = list(self.default_patterns)
        removal.user_patterns = list(self._user_patterns)
        removal.all_patterns = PatternSet(removal.default_patterns, removal.user_patterns).all_patterns
        return removal

    def clear_patterns(self) -> list[str]:
        """Remove every user pattern and return the (empty) user list."""
        self._set_user_patterns([])
        self._save_state()
        logger.info("Cleared user ignore patterns")
        return list(self._user_patterns)

    def should_ignore_file(self, path: str | Path) -> bool:
        """
        Check a path's file name against default and user patterns.

        Args:
            path: File path (only the final component is matched).

        Returns:
            True if the file is restricted.
        """
        name = Path(path).name
        patterns = _distinct(self.default_patterns + self._user_patterns)
        return any(file_name_matches(name, pattern) for pattern in patterns)

    def _compiled_index_patterns(self) -> list[re.Pattern[str]]:
        if self._index_regexes is None:
            self._index_regexes = [
                re.compile(wildcard_to_regex(p), re.IGNORECASE)
                for p in self.index_patterns + self._user_patterns
            ]
        return self._index_regexes

    def should_ignore_for_index(self, path: str | Path) -> bool:
        """
        Check whether a file must be kept out of the semantic index.

        Args:
            path: Full file path.

        Returns:
            True if the file name is restricted or the full path matches an
            index or user wildcard pattern.
        """
        if self.should_ignore_file(path):
            return True
        str_path = str(path)
        return any(regex.match(str_path) for regex in self._compiled_index_patterns())
