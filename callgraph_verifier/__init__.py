from .ir import (
    IRNode,
    Stmt,
    Expr,
    IntImm,
    Variable,
    BinaryOp,
    Load,
    ProducerScope,
    LetBinding,
    Conditional,
    Sequence,
    For,
    Realize,
    Provide,
    Evaluate,
    AssertStmt,
    NODE_TYPES,
    IRVisitor,
    block,
)
from .core import (
    CallGraph,
    CallGraphWalker,
    StageInfo,
    UnregisteredStageError,
    build_call_graph,
    make_registry,
    split_update_stage,
    update_caller_name,
)
from .verify import (
    VerificationResult,
    MismatchReason,
    CardinalityMismatch,
    MissingCaller,
    CalleeMismatch,
    ImageMismatch,
    check_call_graphs,
    check_image,
)
from .utils.tree_io import (
    save_tree,
    load_tree,
    save_registry,
    load_registry,
    save_call_graph,
    load_call_graph,
)
from .runner import CallGraphCheck
from .utils.logger import set_log_level, DEBUG, INFO, WARNING, ERROR

__all__ = [
    # ir
    "IRNode",
    "Stmt",
    "Expr",
    "IntImm",
    "Variable",
    "BinaryOp",
    "Load",
    "ProducerScope",
    "LetBinding",
    "Conditional",
    "Sequence",
    "For",
    "Realize",
    "Provide",
    "Evaluate",
    "AssertStmt",
    "NODE_TYPES",
    "IRVisitor",
    "block",
    # walker
    "CallGraph",
    "CallGraphWalker",
    "StageInfo",
    "UnregisteredStageError",
    "build_call_graph",
    "make_registry",
    "split_update_stage",
    "update_caller_name",
    # verifier
    "VerificationResult",
    "MismatchReason",
    "CardinalityMismatch",
    "MissingCaller",
    "CalleeMismatch",
    "ImageMismatch",
    "check_call_graphs",
    "check_image",
    # io
    "save_tree",
    "load_tree",
    "save_registry",
    "load_registry",
    "save_call_graph",
    "load_call_graph",
    "CallGraphCheck",
    "set_log_level",
    "DEBUG",
    "INFO",
    "WARNING",
    "ERROR",
]
