"""
Parsing of the lines an engine sends while answering "uci".

    id name Stockfish 17
    id author the Stockfish developers
    option name Hash type spin default 16 min 1 max 33554432
    option name Style type combo default Normal var Solid var Normal var Risky

These are informational: a malformed line is ignored, never an error.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

_OPTION_KEYWORDS = {"type", "default", "min", "max", "var"}


@dataclass
class OptionSpec:
    """An option advertised by the engine."""

    name: str
    type: str = ""
    default: Optional[str] = None
    min: Optional[int] = None
    max: Optional[int] = None
    vars: List[str] = field(default_factory=list)


@dataclass
class EngineIdentity:
    """What the engine told us about itself during the handshake."""

    name: Optional[str] = None
    author: Optional[str] = None
    options: Dict[str, OptionSpec] = field(default_factory=dict)


def parse_id(line: str) -> Optional[Tuple[str, str]]:
    """
    Parse an "id name ..." or "id author ..." line.

    Returns:
        (field, value) tuple, or None if the line is not an id line
    """
    parts = line.split(maxsplit=2)
    if len(parts) < 3 or parts[0] != "id" or parts[1] not in ("name", "author"):
        return None
    return parts[1], parts[2].strip()


def _collect(tokens: List[str], start: int) -> Tuple[str, int]:
    """Join tokens from start up to the next option keyword."""
    end = start
    while end < len(tokens) and tokens[end] not in _OPTION_KEYWORDS:
        end += 1
    return " ".join(tokens[start:end]), end


def parse_option(line: str) -> Optional[OptionSpec]:
    """
    Parse an "option name <name> type <type> ..." line.

    Option names and values may contain spaces; they run until the next
    keyword.

    Returns:
        OptionSpec, or None if the line is not a well-formed option line
    """
    tokens = line.split()
    if len(tokens) < 3 or tokens[0] != "option" or tokens[1] != "name":
        return None

    name, i = _collect(tokens, 2)
    if not name:
        return None

    spec = OptionSpec(name=name)
    while i < len(tokens):
        key = tokens[i]
        value, i = _collect(tokens, i + 1)
        if key == "type":
            spec.type = value
        elif key == "default":
            # "default <empty>" is how engines advertise empty strings
            spec.default = "" if value == "<empty>" else value
        elif key in ("min", "max"):
            try:
                setattr(spec, key, int(value))
            except ValueError:
                return None
        elif key == "var":
            spec.vars.append(value)

    return spec
