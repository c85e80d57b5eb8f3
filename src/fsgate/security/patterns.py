"""Deny-pattern compilation.

Patterns follow the usual dev-server conventions: a pattern without a
slash matches a basename at any depth, ``{a,b}`` alternatives are expanded,
and matching is case-insensitive with ``*`` also matching dotfiles.

``*`` and ``?`` never cross a ``/``. ``**`` spans any number of directories,
and ``**/`` may also match nothing at all.
"""

import re
from typing import Iterable

BRACE_PATTERN = re.compile(r"\{([^{}]*)\}")


def expand_braces(pattern: str) -> list[str]:
    """Expand ``{a,b}`` groups into every concrete alternative."""
    match = BRACE_PATTERN.search(pattern)
    if match is None:
        return [pattern]

    head, tail = pattern[: match.start()], pattern[match.end() :]
    expanded: list[str] = []
    for option in match.group(1).split(","):
        expanded.extend(expand_braces(f"{head}{option}{tail}"))
    return expanded


def _translate_class(pattern: str, start: int) -> tuple[str, int] | None:
    """Translate the ``[...]`` class opening at ``start``.

    Returns the regex source and the index after the closing bracket, or None
    when the bracket is never closed.
    """
    i = start + 1
    if i < len(pattern) and pattern[i] in "!^":
        i += 1
    if i < len(pattern) and pattern[i] == "]":
        i += 1
    end = pattern.find("]", i)
    if end == -1:
        return None

    body = pattern[start + 1 : end].replace("\\", "\\\\")
    if body[:1] in ("!", "^"):
        body = "^" + body[1:]
    # a class never matches the separator
    return f"(?!/)[{body}]", end + 1


def translate_glob(pattern: str) -> str:
    """Translate one brace-free glob into an anchored regex source."""
    parts: list[str] = []
    i = 0
    while i < len(pattern):
        if pattern.startswith("**/", i):
            parts.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("**", i):
            parts.append(".*")
            i += 2
        elif pattern[i] == "*":
            parts.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            parts.append("[^/]")
            i += 1
        elif pattern[i] == "[" and _translate_class(pattern, i) is not None:
            source, i = _translate_class(pattern, i)
            parts.append(source)
        else:
            parts.append(re.escape(pattern[i]))
            i += 1
    return f"(?s:{''.join(parts)})\\Z"


def compile_deny_patterns(patterns: Iterable[str]) -> re.Pattern[str] | None:
    """Compile glob patterns into one case-insensitive regular expression.

    The result is meant for ``match``; every alternative is anchored at both
    ends. Returns None when there is nothing to match.
    """
    sources = []
    for pattern in patterns:
        anchored = pattern if "/" in pattern else f"**/{pattern}"
        sources.extend(translate_glob(option) for option in expand_braces(anchored))

    if not sources:
        return None
    return re.compile("|".join(sources), re.IGNORECASE)
