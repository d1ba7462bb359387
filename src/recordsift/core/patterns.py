"""Pattern compilation — Turns filter values into reusable match predicates.

Three modes are supported:

  - ``exact``: the value matches literally.
  - ``wildcard``: ``*`` matches any run of characters, ``?`` exactly one.
  - ``regex``: the value is a regular expression.

The operator decides how the compiled expression is applied (full match,
substring, prefix, suffix).  Patterns are compiled once per filter field per
request and are never shared between requests.

Overly complex patterns are rejected with a validation error before any
upstream call is made.  Any other compilation failure degrades to an
exact-match pattern so one bad value never aborts a search.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from recordsift.core.exceptions import SearchValidationError
from recordsift.core.fieldpath import MISSING
from recordsift.models.query import EMPTY_FILTER_VALUE, NormalizedSearchRequest, PatternMode, SearchOperator

logger = logging.getLogger(__name__)

MAX_PATTERN_LENGTH = 1000
MAX_REGEX_LENGTH = 500
MAX_WILDCARD_STARS = 10
MAX_WILDCARD_QUESTIONS = 20

# Stacked quantifiers and brace repetition after a quantifier or group.
_UNSAFE_REGEX = (
    re.compile(r"(\*\+|\+\*|\*\*|\+\+)"),
    re.compile(r"(\*\{|\+\{|\}\{|\)\{)"),
    re.compile(r"\[\^[^\]]*\]\{"),
)

# Operators evaluated without a compiled pattern.
UNPATTERNED_OPERATORS = frozenset({SearchOperator.IS_EMPTY, SearchOperator.BEFORE, SearchOperator.AFTER})


class PatternTooComplexError(SearchValidationError):
    """Raised when a filter value exceeds the pattern complexity limits."""


@dataclass(frozen=True)
class Pattern:
    """A compiled filter pattern.

    Attributes:
        source: The original filter value, as a string.
        mode: The compilation mode actually used.
        operator: The operator the pattern was compiled for.
        case_sensitive: Whether matching respects case.
        fallback: True when compilation failed and an exact pattern was used instead.
    """

    source: str
    mode: PatternMode
    operator: SearchOperator
    case_sensitive: bool
    regex: re.Pattern[str]
    fallback: bool = False

    def test(self, value: Any) -> bool:
        """Match a field value; list values match when any element matches."""
        if value is MISSING or value is None:
            return False
        if isinstance(value, (list, tuple, set)):
            return any(self.test(v) for v in value)
        return self._apply(stringify(value))

    def _apply(self, text: str) -> bool:
        if self.operator in (SearchOperator.EQUALS, SearchOperator.WILDCARD):
            return self.regex.fullmatch(text) is not None
        if self.operator == SearchOperator.STARTS_WITH:
            return self.regex.match(text) is not None
        return self.regex.search(text) is not None


def stringify(value: Any) -> str:
    """String form used for matching; booleans are lower-cased."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def wildcard_to_regex(pattern: str) -> str:
    """Translate ``*`` / ``?`` wildcards into an (unanchored) regex body."""
    parts: list[str] = []
    for ch in pattern:
        if ch == "*":
            parts.append(".*")
        elif ch == "?":
            parts.append(".")
        else:
            parts.append(re.escape(ch))
    return "".join(parts)


def effective_mode(operator: SearchOperator, mode: PatternMode) -> PatternMode:
    """``regex`` and ``wildcard`` operators force their own mode."""
    if operator == SearchOperator.REGEX:
        return PatternMode.REGEX
    if operator == SearchOperator.WILDCARD:
        return PatternMode.WILDCARD
    return mode


def is_literal(value: str, mode: PatternMode) -> bool:
    """Whether ``value`` means the same thing in ``mode`` as in exact mode."""
    if mode == PatternMode.EXACT:
        return True
    if mode == PatternMode.WILDCARD:
        return "*" not in value and "?" not in value
    return False


def check_complexity(source: str, mode: PatternMode, field: str) -> None:
    """Reject patterns whose length or repetition could make matching expensive.

    Raises:
        PatternTooComplexError: Tagged with the filter field name.
    """
    if len(source) > MAX_PATTERN_LENGTH:
        raise PatternTooComplexError(
            f"Pattern for field '{field}' is too long: {len(source)} > {MAX_PATTERN_LENGTH} characters",
            field=field,
        )

    if mode == PatternMode.WILDCARD:
        stars = source.count("*")
        questions = source.count("?")
        if stars > MAX_WILDCARD_STARS or questions > MAX_WILDCARD_QUESTIONS:
            raise PatternTooComplexError(
                f"Wildcard pattern for field '{field}' is too complex "
                f"({stars} '*' / {questions} '?'; limits {MAX_WILDCARD_STARS} / {MAX_WILDCARD_QUESTIONS})",
                field=field,
            )

    elif mode == PatternMode.REGEX:
        if len(source) > MAX_REGEX_LENGTH:
            raise PatternTooComplexError(
                f"Regex pattern for field '{field}' is too long: {len(source)} > {MAX_REGEX_LENGTH} characters",
                field=field,
            )
        if has_nested_quantifier(source) or any(unsafe.search(source) for unsafe in _UNSAFE_REGEX):
            raise PatternTooComplexError(
                f"Regex pattern for field '{field}' has nested or stacked quantifiers; "
                "use wildcard mode for safer matching",
                field=field,
            )


def has_nested_quantifier(source: str) -> bool:
    """Whether a group containing a quantifier is itself quantified.

    Groups are tracked on a stack, so extra parentheses (``((a+))+``) and
    quantified subgroups (``((a)+)+``) are caught as well.  Escapes and
    character classes are skipped.
    """
    stack: list[bool] = []
    i = 0
    while i < len(source):
        ch = source[i]
        if ch == "\\":
            i += 2
            continue
        if ch == "[":
            i = _skip_class(source, i)
            continue
        if ch == "(":
            stack.append(False)
        elif ch == ")" and stack:
            quantified_inside = stack.pop()
            follows = source[i + 1] if i + 1 < len(source) else ""
            if follows in ("*", "+", "?", "{"):
                if quantified_inside:
                    return True
                quantified_inside = True
            if quantified_inside and stack:
                stack[-1] = True
        elif ch in ("*", "+", "{") and stack:
            stack[-1] = True
        i += 1
    return False


def _skip_class(source: str, start: int) -> int:
    """Index just past the character class opening at ``start``."""
    i = start + 1
    if i < len(source) and source[i] == "^":
        i += 1
    if i < len(source) and source[i] == "]":
        i += 1
    while i < len(source):
        if source[i] == "\\":
            i += 2
            continue
        if source[i] == "]":
            return i + 1
        i += 1
    return i


def complexity_score(source: str, mode: PatternMode) -> int:
    """Rough measure of how much pattern machinery a value uses."""
    if mode == PatternMode.WILDCARD:
        return source.count("*") + source.count("?")
    if mode == PatternMode.REGEX:
        return sum(1 for ch in source if ch in ".*+?{}[]()|^$\\")
    return 0


_BODY_BUILDERS: dict[PatternMode, Callable[[str], str]] = {
    PatternMode.EXACT: re.escape,
    PatternMode.WILDCARD: wildcard_to_regex,
    PatternMode.REGEX: lambda source: source,
}


def compile_pattern(
    value: Any,
    operator: SearchOperator = SearchOperator.EQUALS,
    mode: PatternMode = PatternMode.WILDCARD,
    *,
    case_sensitive: bool = False,
    field: str = "",
) -> Pattern:
    """Compile a filter value for one operator.

    Args:
        value: The filter value.
        operator: Operator the pattern will be evaluated with.
        mode: The request's pattern mode (overridden by regex/wildcard operators).
        case_sensitive: Respect case when matching.
        field: Filter field name, used to tag complexity errors.

    Returns:
        The compiled pattern; ``fallback`` is set when an exact pattern had
        to be substituted.

    Raises:
        PatternTooComplexError: If the value exceeds the complexity limits.
    """
    source = stringify(value)
    used_mode = effective_mode(operator, mode)
    check_complexity(source, used_mode, field or "<pattern>")

    flags = 0 if case_sensitive else re.IGNORECASE
    if used_mode == PatternMode.WILDCARD:
        flags |= re.DOTALL

    try:
        regex = _compile(_BODY_BUILDERS[used_mode](source), operator, flags)
        return Pattern(source, used_mode, operator, case_sensitive, regex)
    except re.error as e:
        logger.debug("Pattern %r for field %s failed to compile (%s), using exact match", source, field, e)
        regex = _compile(re.escape(source), operator, 0 if case_sensitive else re.IGNORECASE)
        return Pattern(source, PatternMode.EXACT, operator, case_sensitive, regex, fallback=True)


def _compile(body: str, operator: SearchOperator, flags: int) -> re.Pattern[str]:
    if operator == SearchOperator.ENDS_WITH:
        body = f"(?:{body})\\Z"
    return re.compile(body, flags)


def compile_request_patterns(request: NormalizedSearchRequest) -> tuple[dict[str, Pattern], list[str]]:
    """Compile one pattern per filter field of a validated request.

    Fields using ``isEmpty``/``before``/``after``, and fields whose value is
    the empty marker, need no pattern.

    Returns:
        ``(patterns_by_field, warnings)``; a warning is emitted for every
        field that fell back to exact matching.

    Raises:
        PatternTooComplexError: Before any fetch, if a value is too complex.
    """
    patterns: dict[str, Pattern] = {}
    warnings: list[str] = []

    for field, value in request.filters.items():
        operator = request.operator_for(field)
        if operator in UNPATTERNED_OPERATORS or value == EMPTY_FILTER_VALUE:
            continue

        pattern = compile_pattern(
            value,
            operator,
            request.pattern_mode,
            case_sensitive=request.case_sensitive,
            field=field,
        )
        if pattern.fallback:
            warnings.append(f'Pattern for field "{field}" could not be compiled; using exact match instead')
        patterns[field] = pattern

    return patterns, warnings
