"""
Compound CA names.

A CA address is a dash-delimited name: namespace root and local name, plus
an optional map name, or the fully qualified
``appPublisher-appLocalName-caOwner-caLocalName``.
"""

from typing import Iterable, Optional

from caf_rpc.errors import InvalidName

NAME_SEPARATOR = "-"
APP_SEPARATOR = "#"


def split_name(name: str, separator: Optional[str] = None) -> list[str]:
    """Split a compound name into 2 to 4 parts. Raises InvalidName otherwise."""
    parts = name.split(separator or NAME_SEPARATOR)
    if 2 <= len(parts) <= 4:
        return parts
    raise InvalidName(name)


def join_name(*parts: str) -> str:
    return NAME_SEPARATOR.join(parts)


def join_name_array(parts: Iterable[str], separator: Optional[str] = None) -> str:
    return (separator or NAME_SEPARATOR).join(parts)
