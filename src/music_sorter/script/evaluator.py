"""Path generation from a compiled sort script.

A script is compiled once into a tree of scoped blocks. ``IF`` and
``ADD FOLDER`` open a block for the lines indented exactly one level below
them; every other line keeps its successors at its own level. Lines that no
block can ever reach are dropped at compile time.

Evaluating the tree for one file gives the same result as walking the
instructions with a nesting cursor that only climbs through a granting line.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

from ..models.track import TrackMetadata
from .conditions import evaluate_condition
from .preprocessor import Instruction, Script
from .tags import resolve

logger = logging.getLogger(__name__)

FOLDER_SEPARATOR = "/"


@dataclass(frozen=True)
class Literal:
    text: str


@dataclass(frozen=True)
class TagReference:
    name: str


@dataclass(frozen=True)
class Stop:
    pass


@dataclass(frozen=True)
class AddFolder:
    body: Tuple["Node", ...] = ()


@dataclass(frozen=True)
class Conditional:
    """``IF`` line; ``parenthesized`` is False for the bare ``IF TAG`` form."""
    condition: str
    parenthesized: bool = True
    body: Tuple["Node", ...] = ()

    def test(self, metadata: TrackMetadata) -> bool:
        if self.parenthesized:
            return evaluate_condition(self.condition, metadata)
        return resolve(self.condition, metadata) != ""


Node = Union[Literal, TagReference, Stop, AddFolder, Conditional]


@dataclass(frozen=True)
class CompiledScript:
    """Block tree of a script plus the lines that can never run."""
    body: Tuple[Node, ...]
    unreachable: Tuple[Instruction, ...] = field(default=())


class _StopEvaluation(Exception):
    pass


def _parse_literal(text: str) -> str:
    """Return the text between the first and second double quote."""
    parts = text.split('"')
    return parts[1] if len(parts) > 1 else ""


def _parse_condition(text: str) -> Tuple[str, bool]:
    condition = text[len("IF"):].strip()
    if len(condition) > 2 and condition[0] == "(" and condition[-1] == ")":
        return condition[1:-1], True
    return condition, False


def _classify(instruction: Instruction) -> Node:
    text = instruction.text
    if text.startswith("IF"):
        condition, parenthesized = _parse_condition(text)
        return Conditional(condition, parenthesized)
    if text.startswith("ADD FOLDER"):
        return AddFolder()
    if text.startswith('"'):
        return Literal(_parse_literal(text))
    if text.startswith("STOP"):
        return Stop()
    return TagReference(text.strip())


class _Compiler:
    def __init__(self, instructions: Sequence[Instruction]):
        self.instructions = instructions
        self.position = 0
        self.unreachable: List[Instruction] = []

    def _peek(self) -> Optional[Instruction]:
        if self.position < len(self.instructions):
            return self.instructions[self.position]
        return None

    def _skip_deeper_than(self, level: int) -> None:
        while (instruction := self._peek()) is not None and instruction.level > level:
            self.unreachable.append(instruction)
            self.position += 1

    def block(self, level: int) -> Tuple[Node, ...]:
        """Compile consecutive lines at ``level`` until a shallower line."""
        nodes: List[Node] = []
        while (instruction := self._peek()) is not None and instruction.level >= level:
            if instruction.level > level:
                self._skip_deeper_than(level)
                continue
            self.position += 1
            node = _classify(instruction)
            if isinstance(node, (Conditional, AddFolder)):
                body = self.block(level + 1)
                if isinstance(node, Conditional):
                    node = Conditional(node.condition, node.parenthesized, body)
                else:
                    node = AddFolder(body)
            nodes.append(node)
        return tuple(nodes)


def compile_script(script: Union[Script, Sequence[Instruction]]) -> CompiledScript:
    """Compile instructions into a block tree."""
    instructions = tuple(script)
    compiler = _Compiler(instructions)
    body = compiler.block(0)
    for instruction in compiler.unreachable:
        logger.debug(f"Unreachable script line (level {instruction.level}): {instruction.text}")
    return CompiledScript(body, tuple(compiler.unreachable))


def _run_block(nodes: Tuple[Node, ...], metadata: TrackMetadata, parts: List[str]) -> None:
    for node in nodes:
        if isinstance(node, Literal):
            parts.append(node.text)
        elif isinstance(node, TagReference):
            parts.append(resolve(node.name, metadata))
        elif isinstance(node, AddFolder):
            parts.append(FOLDER_SEPARATOR)
            _run_block(node.body, metadata, parts)
        elif isinstance(node, Conditional):
            if node.test(metadata):
                _run_block(node.body, metadata, parts)
        elif isinstance(node, Stop):
            raise _StopEvaluation()


class PathEvaluator:
    """Evaluate a compiled script against the metadata of one file at a time."""

    def __init__(self, script: Union[Script, Sequence[Instruction]]):
        self.compiled = compile_script(script)

    @property
    def unreachable(self) -> Tuple[Instruction, ...]:
        return self.compiled.unreachable

    def evaluate(self, metadata: TrackMetadata) -> str:
        """Build the destination path fragment for one file.

        Returns:
            Path fragment using ``/`` between folders, without the
            destination root or the file extension; empty if the file must
            not be relocated
        """
        parts: List[str] = []
        try:
            _run_block(self.compiled.body, metadata, parts)
        except _StopEvaluation:
            return ""
        return "".join(parts)


def evaluate(script: Union[Script, Sequence[Instruction]], metadata: TrackMetadata) -> str:
    """Compile ``script`` and evaluate it for one file."""
    return PathEvaluator(script).evaluate(metadata)
