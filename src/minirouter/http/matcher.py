"""
=============================================================================
PATH MATCHER
=============================================================================

Pure functions deciding whether a route pattern matches a concrete path,
and extracting the one parameter a pattern may capture.

=============================================================================
PATTERN GRAMMAR
=============================================================================

A pattern is a literal path, optionally ending in ONE parameter segment:

    /api/users            literal
    /api/users/:id        literal prefix "/api/users/" + parameter "id"

Not supported (rejected by validate_pattern):

    /api/:version/users   parameter that is not the last segment
    /a/:x/:y              more than one parameter
    /static/*path         wildcards

=============================================================================
MATCHING RULES
=============================================================================

    ┌──────────────────┬───────────────────────┬─────────┬──────────────┐
    │ Pattern          │ Path                  │ Match?  │ Captured     │
    ├──────────────────┼───────────────────────┼─────────┼──────────────┤
    │ /api/users       │ /api/users            │ yes     │ -            │
    │ /api/users       │ /api/users/1          │ no      │ -            │
    │ /api/users/:id   │ /api/users/42         │ yes     │ "42"         │
    │ /api/users/:id   │ /api/users/42/extra   │ yes (*) │ "42"         │
    │ /api/users/:id   │ /api/users/           │ no      │ -            │
    │ /api/users/:id   │ /api/users//x         │ no      │ -            │
    │ /api/users/:id   │ /api/users            │ no      │ -            │
    │ /api/users/:id   │ /api/usersX           │ no      │ -            │
    └──────────────────┴───────────────────────┴─────────┴──────────────┘

(*) Parameterized patterns are PREFIX matches, not segment-count matches.
    A route for /api/users/:id also receives /api/users/42/extra. Register a
    more specific route first if that path needs different handling.

=============================================================================
"""

from typing import Optional, Tuple

PARAM_MARKER = ":"


def split_pattern(pattern: str) -> Tuple[str, Optional[str]]:
    """
    Split a pattern into its fixed prefix and parameter name.

    Example:
        split_pattern("/api/users/:id")  # ("/api/users/", "id")
        split_pattern("/api/users")      # ("/api/users", None)
    """
    head, sep, last = pattern.rpartition("/")
    if sep and last.startswith(PARAM_MARKER):
        return head + "/", last[len(PARAM_MARKER):]
    return pattern, None


def param_name(pattern: str) -> Optional[str]:
    """Name of the trailing parameter, or None for literal patterns."""
    return split_pattern(pattern)[1]


def validate_pattern(pattern: str) -> None:
    """
    Reject patterns outside the supported grammar.

    Raises:
        ValueError: If the pattern does not start with "/", uses a wildcard,
            has a parameter that is not the last segment, or has an empty
            parameter name.
    """
    if not pattern.startswith("/"):
        raise ValueError(f"Route pattern must start with '/': {pattern!r}")
    if "*" in pattern:
        raise ValueError(f"Wildcards are not supported: {pattern!r}")

    segments = pattern.split("/")
    for segment in segments[:-1]:
        if segment.startswith(PARAM_MARKER):
            raise ValueError(
                f"Only a single trailing parameter is supported: {pattern!r}"
            )
    if segments[-1] == PARAM_MARKER:
        raise ValueError(f"Parameter name missing: {pattern!r}")


def matches(pattern: str, path: str) -> bool:
    """
    Check whether a concrete path matches a route pattern.

    Exact equality always matches. For a parameterized pattern the path must
    start with the fixed prefix and the captured segment must be non-empty.
    """
    if pattern == path:
        return True

    prefix, name = split_pattern(pattern)
    if name is None:
        return False
    if not path.startswith(prefix):
        return False
    return path[len(prefix):].split("/", 1)[0] != ""


def extract_param(pattern: str, path: str) -> Optional[str]:
    """
    Extract the captured parameter value.

    Returns the first path segment after the pattern's prefix, or None when
    the pattern has no parameter or does not match the path.

    Example:
        extract_param("/api/users/:id", "/api/users/42")        # "42"
        extract_param("/api/users/:id", "/api/users/42/extra")  # "42"
        extract_param("/api/users/:id", "/api/users")           # None
    """
    prefix, name = split_pattern(pattern)
    if name is None or not matches(pattern, path):
        return None

    remainder = path[len(prefix):]
    return remainder.split("/", 1)[0]
