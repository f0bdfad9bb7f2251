"""Sort script interpreter."""

from .preprocessor import Instruction, Script, normalize
from .tags import StandardTag, resolve
from .conditions import evaluate_condition
from .evaluator import CompiledScript, PathEvaluator, compile_script, evaluate

__all__ = [
    "Instruction",
    "Script",
    "normalize",
    "StandardTag",
    "resolve",
    "evaluate_condition",
    "CompiledScript",
    "PathEvaluator",
    "compile_script",
    "evaluate",
]
