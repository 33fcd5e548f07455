"""Route pattern compiler and parameter extractor.

A route pattern is a ``/``-delimited list of tokens. One leading and one
trailing slash are stripped before splitting, so ``"/articles/"``,
``"articles"`` and ``"/articles"`` describe the same route and ``""`` is the
root path.

Token kinds
-----------
- ``{name}``: one or more word characters or hyphens; ``name`` is the
  capture key returned by :func:`extract_params`.
- ``*`` alone: one or more word, slash, hyphen or dot characters. It may
  span several path segments and acts as a catch-all tail.
- a token containing ``*`` (``*.txt``): each ``*`` matches one or more word,
  slash or hyphen characters (no dot); the remaining characters are matched
  literally.
- anything else is inserted into the expression verbatim. Patterns are
  registered by the application developer, so literal tokens are not
  escaped.

The compiled expression is anchored at both ends and accepts an optional
trailing slash on the request path. Compilation is cached per pattern
string.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict, List, Tuple

__all__ = [
    "PathMatcher",
    "compile_pattern",
    "extract_params",
    "is_param_token",
    "split_path",
]

PARAM_REGEX = r"[\w-]+"
TAIL_WILDCARD_REGEX = r"[\w/\-.]+"
INLINE_WILDCARD_REGEX = r"[\w/-]+"


def split_path(value: str) -> List[str]:
    """Strip one leading and one trailing slash and split on ``/``."""
    if value.startswith("/"):
        value = value[1:]
    if value.endswith("/"):
        value = value[:-1]
    return value.split("/")


def is_param_token(token: str) -> bool:
    return len(token) >= 2 and token.startswith("{") and token.endswith("}")


def _token_regex(token: str) -> str:
    if is_param_token(token):
        return PARAM_REGEX
    if token == "*":
        return TAIL_WILDCARD_REGEX
    if "*" in token:
        return INLINE_WILDCARD_REGEX.join(re.escape(chunk) for chunk in token.split("*"))
    return token


@dataclass(frozen=True)
class PathMatcher:
    """Compiled form of a route pattern."""

    pattern: str
    tokens: Tuple[str, ...]
    regex: "re.Pattern[str]" = field(repr=False)

    @property
    def param_names(self) -> Tuple[str, ...]:
        return tuple(token[1:-1] for token in self.tokens if is_param_token(token))

    def matches(self, path: str) -> bool:
        return self.regex.match(path) is not None

    def extract(self, path: str, *, escape: bool = False) -> Dict[str, str]:
        return _collect_params(self.tokens, split_path(path), escape=escape)


@lru_cache(maxsize=None)
def compile_pattern(pattern: str) -> PathMatcher:
    """Compile ``pattern`` into a :class:`PathMatcher`.

    Raises:
        TypeError: if ``pattern`` is not a string.
    """
    if not isinstance(pattern, str):
        raise TypeError(f"Route pattern must be a string, got {type(pattern).__name__}")
    tokens = tuple(split_path(pattern))
    body = "/".join(_token_regex(token) for token in tokens)
    regex = re.compile(rf"\A/{body}/?\Z")
    return PathMatcher(pattern=pattern, tokens=tokens, regex=regex)


def extract_params(pattern: str, path: str, *, escape: bool = False) -> Dict[str, str]:
    """Map the named parameters of ``pattern`` to the values found in ``path``.

    ``path`` must already match ``pattern``; nothing is re-validated here.
    Pattern and path are split independently and compared by position, so
    extra segments swallowed by a trailing ``*`` are never exposed. With
    ``escape=True`` every value is HTML-escaped, which means the result can
    no longer be used to rebuild the original path.
    """
    return _collect_params(tuple(split_path(pattern)), split_path(path), escape=escape)


def _collect_params(
    pattern_tokens: Tuple[str, ...], path_tokens: List[str], *, escape: bool
) -> Dict[str, str]:
    params: Dict[str, str] = {}
    for index, token in enumerate(pattern_tokens):
        if index >= len(path_tokens):
            break
        if not is_param_token(token):
            continue
        value = path_tokens[index]
        params[token[1:-1]] = html.escape(value, quote=True) if escape else value
    return params
