"""Normalization of raw sort scripts into leveled instructions.

Two syntax modes are supported. The default mode derives each line's
indentation from its own leading whitespace and only treats ``#`` as a comment
marker outside of quoted literals. The legacy mode keeps the historical
handling: comments are cut at the first ``#`` anywhere on the line and every
run of four spaces in the script is turned into a tab, including runs inside
literals. Trailing spaces and tabs are trimmed together in both modes, so
rendering and normalizing again is stable.
"""

from dataclasses import dataclass
from typing import Iterator, List, Tuple

INDENT = "\t"
SPACE_INDENT = "    "
COMMENT_MARKER = "#"
QUOTE = '"'


@dataclass(frozen=True, slots=True)
class Instruction:
    """One normalized script line with its nesting level."""
    level: int
    text: str

    def render(self) -> str:
        return INDENT * self.level + self.text


@dataclass(frozen=True)
class Script:
    """Ordered sequence of instructions produced from raw script text."""
    instructions: Tuple[Instruction, ...] = ()
    legacy: bool = False

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self.instructions)

    def __len__(self) -> int:
        return len(self.instructions)

    def __getitem__(self, index: int) -> Instruction:
        return self.instructions[index]

    def render(self) -> str:
        """Render the script back to tab-indented text."""
        return "\n".join(instruction.render() for instruction in self.instructions)


def count_indent(line: str) -> int:
    """Count the leading indentation units of a tab-normalized line."""
    return len(line) - len(line.lstrip(INDENT))


def _strip_comment(line: str) -> str:
    """Cut a line at the first comment marker that is not inside a literal."""
    in_literal = False
    for index, char in enumerate(line):
        if char == QUOTE:
            in_literal = not in_literal
        elif char == COMMENT_MARKER and not in_literal:
            return line[:index]
    return line


def _split_indent(line: str) -> Tuple[int, str]:
    """Split a line into (level, text) using only its leading whitespace."""
    text = line.lstrip(" \t")
    leading = line[:len(line) - len(text)]
    return leading.replace(SPACE_INDENT, INDENT).count(INDENT), text


def _normalize_legacy(raw_text: str) -> List[Instruction]:
    kept = []
    for line in raw_text.split("\n"):
        if COMMENT_MARKER in line:
            line = line.split(COMMENT_MARKER, 1)[0]
        line = line.rstrip(" \t")
        if not line.strip():
            continue
        kept.append(line)

    joined = "\n".join(kept).rstrip("\n")
    joined = joined.replace(SPACE_INDENT, INDENT)
    joined = joined.replace("'", QUOTE)

    if not joined:
        return []
    instructions = []
    for line in joined.split("\n"):
        level = count_indent(line)
        instructions.append(Instruction(level, line[level:]))
    return instructions


def _normalize(raw_text: str) -> List[Instruction]:
    instructions = []
    for line in raw_text.split("\n"):
        line = _strip_comment(line.replace("'", QUOTE)).rstrip()
        if not line.strip():
            continue
        level, text = _split_indent(line)
        instructions.append(Instruction(level, text))
    return instructions


def normalize(raw_text: str, legacy: bool = False) -> Script:
    """Normalize raw script text into a Script.

    Args:
        raw_text: Script source as written by the user
        legacy: Use the historical comment and indentation handling

    Returns:
        Script with one Instruction per surviving line
    """
    if legacy:
        instructions = _normalize_legacy(raw_text)
    else:
        instructions = _normalize(raw_text)
    return Script(tuple(instructions), legacy=legacy)
