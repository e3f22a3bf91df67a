"""
Glob expression compilation.

Translates absolute glob expressions into anchored regular expressions.
Matching is purely lexical: the filesystem is never consulted.

Supported tokens, evaluated per path segment:
    *       any run of characters except the separator
    ?       exactly one character except the separator
    [...]   character class ('!' or '^' negates)
    {a,b}   alternation inside one segment
    **      zero or more whole segments (must be the entire segment)

Backslash is not an escape character.
"""

import os
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from .errors import InvalidPatternError

SEP = os.sep

WILDCARD_CHARS = frozenset("*?[{")

_SEP_RE = re.escape(SEP)
_NOT_SEP = "[^" + _SEP_RE + "]"


def has_wildcard(segment: str) -> bool:
    """True if the segment contains any glob token."""
    return any(ch in WILDCARD_CHARS for ch in segment)


@dataclass(frozen=True)
class GlobMatcher:
    """
    A compiled glob expression.

    Two matchers are equal when they were compiled from the same expression.

    Attributes:
        expression: The original expression
        literal_root: Longest wildcard-free directory prefix. Files matched by
            this expression can only live under it.
        max_depth: Number of path segments below literal_root a match can have,
            or None when a '**' makes the depth unbounded.
    """

    expression: str
    literal_root: str = field(compare=False)
    max_depth: Optional[int] = field(compare=False)
    _regex: re.Pattern = field(compare=False, repr=False)
    _prefix_regex: re.Pattern = field(compare=False, repr=False)

    def matches(self, path: Union[str, os.PathLike]) -> bool:
        """Full lexical match of the path against the expression."""
        return self._regex.fullmatch(os.fspath(path)) is not None

    def matches_prefix(self, path: Union[str, os.PathLike]) -> bool:
        """
        True if the expression matches the path or any of its ancestors.

        A blacklist entry naming a directory therefore excludes everything
        under that directory.
        """
        return self._prefix_regex.fullmatch(os.fspath(path)) is not None


def _translate_class(segment: str, start: int, expression: str) -> Tuple[int, str]:
    """Translate a '[...]' class starting at segment[start]. Returns (next index, regex)."""
    i = start + 1
    n = len(segment)
    negate = False
    if i < n and segment[i] in "!^":
        negate = True
        i += 1

    j = i
    # A ']' directly after the opening bracket is a literal member
    if j < n and segment[j] == "]":
        j += 1
    while j < n and segment[j] != "]":
        j += 1
    if j >= n:
        raise InvalidPatternError(expression, "unclosed '[' character class")

    body = "".join(ch if ch == "-" else re.escape(ch) for ch in segment[i:j])
    if negate:
        # A negated class must still never match the separator
        return j + 1, "[^" + _SEP_RE + body + "]"
    return j + 1, "[" + body + "]"


def _translate_segment(segment: str, expression: str) -> str:
    """Translate one non-'**' path segment into a regex fragment."""
    out: List[str] = []
    in_braces = False
    i = 0
    n = len(segment)

    while i < n:
        ch = segment[i]
        if ch == "*":
            if i + 1 < n and segment[i + 1] == "*":
                raise InvalidPatternError(expression, "'**' must be a whole path segment")
            out.append(_NOT_SEP + "*")
        elif ch == "?":
            out.append(_NOT_SEP)
        elif ch == "[":
            i, fragment = _translate_class(segment, i, expression)
            out.append(fragment)
            continue
        elif ch == "{":
            if in_braces:
                raise InvalidPatternError(expression, "nested '{' alternation")
            in_braces = True
            out.append("(?:")
        elif ch == "}":
            if not in_braces:
                raise InvalidPatternError(expression, "unbalanced '}'")
            in_braces = False
            out.append(")")
        elif ch == "," and in_braces:
            out.append("|")
        else:
            out.append(re.escape(ch))
        i += 1

    if in_braces:
        raise InvalidPatternError(expression, "unclosed '{' alternation")
    return "".join(out)


def compile_glob(expression: str) -> GlobMatcher:
    """
    Compile an absolute glob expression.

    Duplicate and trailing separators are ignored, so '/data//logs/' and
    '/data/logs' compile to equivalent matchers.

    Raises:
        InvalidPatternError: If the expression is empty, relative or malformed
    """
    if not isinstance(expression, str) or not expression.strip():
        raise InvalidPatternError(str(expression), "expression is empty")
    if not os.path.isabs(expression):
        raise InvalidPatternError(expression, "expression must be an absolute path")

    segments = [s for s in expression.split(SEP) if s]

    parts: List[str] = []
    for segment in segments:
        if segment == "**":
            parts.append("(?:" + _SEP_RE + _NOT_SEP + "+)*")
        else:
            parts.append(_SEP_RE + _translate_segment(segment, expression))
    pattern = "".join(parts) or _SEP_RE

    try:
        regex = re.compile(pattern, re.DOTALL)
        prefix_regex = re.compile(pattern + "(?:" + _SEP_RE + ".*)?", re.DOTALL)
    except re.error as e:
        raise InvalidPatternError(expression, str(e)) from e

    literal: List[str] = []
    for segment in segments:
        if has_wildcard(segment):
            break
        literal.append(segment)

    if len(literal) == len(segments):
        # Fully literal expression names a single path; walk its parent
        literal_root = SEP + SEP.join(segments[:-1])
        max_depth: Optional[int] = 1 if segments else 0
    else:
        literal_root = SEP + SEP.join(literal)
        remaining = segments[len(literal):]
        max_depth = None if "**" in remaining else len(remaining)

    return GlobMatcher(
        expression=expression,
        literal_root=literal_root,
        max_depth=max_depth,
        _regex=regex,
        _prefix_regex=prefix_regex,
    )
