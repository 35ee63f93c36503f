"""
Command-line construction for wkhtmltopdf.

Turns a switch mapping and a header/footer replacement mapping into the
ordered token list wkhtmltopdf expects:

    <binary> [--<switch> [<value>]]... [--replace <key> <value>]... <source> -

The tokens are passed to the child as an argv list, so values are never
interpreted by a shell. format_command() produces the escaped textual form
for logs and for reproducing a render by hand.
"""

import os
import re
import shlex
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Union

# Source token meaning "read HTML from stdin"; also the output token
STDIO_TOKEN = "-"

_INVALID_CHARS = re.compile(r"[^-a-zA-Z]")
# Capital letter anywhere but the first position
_INNER_CAPITAL = re.compile(r"(?<=.)([A-Z])")


def normalize_switch_name(name: str) -> str:
    """
    Collapse any spelling of a switch name to its canonical kebab-case form.

    Everything that is not a letter or hyphen is dropped, then every capital
    after the first character gets a hyphen in front of it, and the result is
    lowercased. Hyphens already present are kept as they are.

    Args:
        name: Switch name in any casing (e.g. "pageSize", "PageSize", "page-size")

    Returns:
        Canonical switch name (e.g. "page-size")

    Examples:
        >>> normalize_switch_name("marginTop")
        'margin-top'
        >>> normalize_switch_name(normalize_switch_name("marginTop"))
        'margin-top'
    """
    cleaned = _INVALID_CHARS.sub("", name)
    return _INNER_CAPITAL.sub(r"-\1", cleaned).lower()


def stringify_value(value: Any) -> str:
    """Render a scalar switch value as the token wkhtmltopdf receives."""
    if isinstance(value, (os.PathLike, Path)):
        return os.fspath(value)
    return str(value)


def escape_value(value: Any) -> str:
    """POSIX single-quote escaping of a value (safe to paste into a shell)."""
    return shlex.quote(stringify_value(value))


def build_arguments(
    switches: Mapping[str, Any],
    replacements: Optional[Mapping[str, Optional[str]]] = None,
    source: Union[str, Path] = STDIO_TOKEN,
) -> List[str]:
    """
    Build the argument tokens that follow the binary path.

    Args:
        switches: Normalized switch name -> value. True emits a bare flag,
            False and None omit the switch, anything else emits the switch
            followed by its stringified value.
        replacements: Header/footer replacement name -> text. None values are
            skipped; empty strings are kept.
        source: "-" to read the payload from stdin, or an absolute file path

    Returns:
        Token list ending in the source token and the stdout token "-"
    """
    tokens: List[str] = []

    for name, value in switches.items():
        if value is None or value is False:
            continue
        tokens.append(f"--{name}")
        if value is not True:
            tokens.append(stringify_value(value))

    for key, value in (replacements or {}).items():
        if value is None:
            continue
        tokens.extend(["--replace", str(key), str(value)])

    tokens.append(stringify_value(source))
    tokens.append(STDIO_TOKEN)
    return tokens


def build_command(
    binary: Union[str, Path],
    switches: Mapping[str, Any],
    replacements: Optional[Mapping[str, Optional[str]]] = None,
    source: Union[str, Path] = STDIO_TOKEN,
) -> List[str]:
    """Full token list: binary path followed by build_arguments()."""
    return [stringify_value(binary)] + build_arguments(switches, replacements, source)


def format_command(tokens: Iterable[Any]) -> str:
    """
    Join tokens into a single shell-safe command line.

    Each token is escaped independently, so shlex.split() on the result
    yields the original tokens.
    """
    return " ".join(escape_value(token) for token in tokens)
