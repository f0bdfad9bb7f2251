"""Music Library Sorter

Reorganize a music library into folders computed from each file's tags by a
small line-oriented sort script.
"""

__version__ = "0.1.0"

from .script import (
    Instruction,
    Script,
    PathEvaluator,
    compile_script,
    evaluate,
    evaluate_condition,
    normalize,
    resolve,
)

from .models import CommentFrame, Picture, SortConfig, TrackMetadata

from .core import LibrarySorter, SortReport

__all__ = [
    # Script interpreter
    "Instruction",
    "Script",
    "PathEvaluator",
    "compile_script",
    "evaluate",
    "evaluate_condition",
    "normalize",
    "resolve",

    # Models
    "CommentFrame",
    "Picture",
    "SortConfig",
    "TrackMetadata",

    # Orchestration
    "LibrarySorter",
    "SortReport",
]
