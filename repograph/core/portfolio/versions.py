"""Version constraint parsing."""

from __future__ import annotations

import re

# Longest operators first so ">=" is not read as ">" followed by "=".
_OPERATOR = re.compile(r"^\s*(?:~>|\^|~=|>=|<=|==|!=|~|=|>|<)?\s*[vV]?\s*")
_MAJOR = re.compile(r"\d+")


def parse_major(constraint: str | None) -> int | None:
    """Leading major version of a constraint such as "~> 3.10", "^1.2" or ">=2.0,<3".

    Returns None when the constraint does not start with a number once the
    operator is stripped ("*", "latest", git URLs, ...).
    """
    if not constraint:
        return None
    first = constraint.split(",")[0].split("||")[0]
    rest = _OPERATOR.sub("", first, count=1)
    match = _MAJOR.match(rest)
    return int(match.group()) if match else None
