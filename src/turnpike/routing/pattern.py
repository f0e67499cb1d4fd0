"""Path template compilation and reverse URL building.

A template such as ``/users/{id}/posts/{slug}`` compiles into an anchored
regex with one ``[^/]+`` capture group per placeholder, plus the ordered
list of placeholder names.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote, urlencode

from turnpike.errors import ConfigurationError

# Placeholder names follow Python identifier rules
_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

# A placeholder in a template, for reverse substitution
_PLACEHOLDER_RE = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")

# A placeholder matches one or more non-slash characters
SEGMENT_PATTERN = r"([^/]+)"


@dataclass(frozen=True, slots=True)
class CompiledPath:
    """A compiled path template. Never mutated after construction."""

    template: str
    regex: re.Pattern[str]
    param_names: tuple[str, ...]

    def match(self, path: str) -> dict[str, str] | None:
        """Return ``{name: value}`` for a full match, else None."""
        m = self.regex.fullmatch(path)
        if m is None:
            return None
        return dict(zip(self.param_names, m.groups(), strict=True))

    def build(
        self,
        params: Mapping[str, Any],
        *,
        quote_values: bool = True,
    ) -> tuple[str, tuple[str, ...]]:
        """Substitute *params* into the template.

        Keys that are not placeholders are appended as a query string.

        Returns:
            Tuple of (url, names of placeholders left unfilled)
        """
        def substitute(m: re.Match[str]) -> str:
            name = m.group(1)
            if name not in params:
                return m.group(0)
            value = str(params[name])
            return quote(value, safe="") if quote_values else value

        # One pass over the template: substituted values are never rescanned
        url = _PLACEHOLDER_RE.sub(substitute, self.template)

        missing = tuple(name for name in self.param_names if name not in params)
        extra = {k: str(v) for k, v in params.items() if k not in self.param_names}
        if extra:
            url = f"{url}?{urlencode(extra)}"
        return url, missing


def compile_path(template: str) -> CompiledPath:
    """Compile a path template into a whole-path matcher.

    The regex is used with ``fullmatch``, so a trailing newline (or any
    other leftover character) never matches.

    Examples::

        "/users"            -> /users                ()
        "/users/{id}"       -> /users/([^/]+)        ("id",)
        "/a/{x}-{y}"        -> /a/([^/]+)\\-([^/]+)   ("x", "y")

    Raises:
        ConfigurationError: unbalanced braces, empty or invalid placeholder
            names, or a placeholder name used twice.
    """
    regex_parts: list[str] = []
    names: list[str] = []

    i = 0
    while i < len(template):
        char = template[i]
        if char == "{":
            end = template.find("}", i)
            if end == -1:
                msg = f"Unclosed placeholder at position {i} in path {template!r}"
                raise ConfigurationError(msg)
            name = template[i + 1 : end]
            _check_placeholder(template, name, names)
            names.append(name)
            regex_parts.append(SEGMENT_PATTERN)
            i = end + 1
        elif char == "}":
            msg = f"Unmatched '}}' at position {i} in path {template!r}"
            raise ConfigurationError(msg)
        else:
            # Consume a literal run up to the next brace
            next_brace = len(template)
            for brace in ("{", "}"):
                pos = template.find(brace, i)
                if pos != -1:
                    next_brace = min(next_brace, pos)
            regex_parts.append(re.escape(template[i:next_brace]))
            i = next_brace

    regex = re.compile("".join(regex_parts))
    return CompiledPath(template=template, regex=regex, param_names=tuple(names))


def _check_placeholder(template: str, name: str, seen: list[str]) -> None:
    if "{" in name:
        msg = f"Nested '{{' inside placeholder in path {template!r}"
        raise ConfigurationError(msg)
    if not name:
        msg = f"Empty placeholder '{{}}' in path {template!r}"
        raise ConfigurationError(msg)
    if not _NAME_RE.fullmatch(name):
        msg = f"Invalid placeholder name {name!r} in path {template!r}"
        raise ConfigurationError(msg)
    if name in seen:
        msg = f"Placeholder {{{name}}} appears twice in path {template!r}"
        raise ConfigurationError(msg)
