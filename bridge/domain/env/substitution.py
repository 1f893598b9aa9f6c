"""
${VAR} substitution engine

Syntax:
- ${VAR}          - Required variable; error when missing and strict, else empty
- ${VAR:-default} - Optional variable with a literal fallback
- $${VAR}         - Escaped, becomes literal ${VAR} in output

The template is scanned once, left to right. Escapes are tried first at
each position, so `$${` always wins over `${`. Anything that does not form a
complete marker (unterminated `${`, invalid names) is copied verbatim.
"""
import re
from typing import List, Mapping, Optional

from ...core.exceptions import SubstitutionError

_TOKEN_RE = re.compile(
    r"\$\$\{(?P<escaped>[^}]*)\}"
    r"|\$\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?P<fallback>:-(?P<default>[^}]*))?\}"
)


def substitute(
    template: str,
    context: Mapping[str, str],
    strict: bool = True,
    source: Optional[str] = None,
) -> str:
    """
    Substitute ${VAR} markers in template.

    Args:
        template: Input string
        context: Variable lookup (an EnvironmentContext in normal use)
        strict: Fail on missing required variables instead of using ""
        source: What is being substituted, used in the error message

    Returns:
        Substituted string

    Raises:
        SubstitutionError: If strict and required variables are missing.
            All missing names are reported at once.
    """
    missing: List[str] = []

    def replace(match: re.Match) -> str:
        if match.group("escaped") is not None:
            return "${" + match.group("escaped") + "}"

        name = match.group("name")
        if name in context:
            return context[name]
        if match.group("fallback") is not None:
            return match.group("default")
        if strict:
            if name not in missing:
                missing.append(name)
            return match.group(0)
        return ""

    result = _TOKEN_RE.sub(replace, template)

    if missing:
        raise SubstitutionError(missing, source=source)
    return result
