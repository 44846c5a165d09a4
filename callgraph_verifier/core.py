from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple, Union

from .ir import IRVisitor, IRNode, Stmt, ProducerScope, Load, LetBinding, Conditional, Sequence
from .utils.logger import logger as logging, log_walk

# Caller -> callees, in order of first read, without duplicates
CallGraph = Dict[str, List[str]]


class UnregisteredStageError(ValueError):
    """A producer scope names a stage that is missing from the registry."""

    def __init__(self, name):
        super().__init__(f"Producer '{name}' is not in the stage registry")
        self.name = name


class StageInfo:
    """Registry metadata for one stage: its name and number of update stages."""

    def __init__(self, name: str, update_count: int = 0):
        if update_count < 0:
            raise ValueError(f"update_count must be >= 0, got {update_count}")
        self.name = name
        self.update_count = update_count

    @property
    def has_updates(self) -> bool:
        return self.update_count > 0

    def __eq__(self, other):
        return (
            isinstance(other, StageInfo)
            and self.name == other.name
            and self.update_count == other.update_count
        )

    def __hash__(self):
        return hash((self.name, self.update_count))

    def __repr__(self):
        return f"StageInfo(name={self.name!r}, update_count={self.update_count})"


StageRegistry = Dict[str, StageInfo]


def make_registry(
    stages: Union[Iterable[StageInfo], Mapping[str, Union[int, StageInfo]]]
) -> StageRegistry:
    """Builds a stage registry.

    Accepts StageInfo objects, a mapping of name -> update count, or a
    mapping of name -> StageInfo.
    """
    registry: StageRegistry = {}
    if isinstance(stages, Mapping):
        for name, meta in stages.items():
            if isinstance(meta, StageInfo):
                if meta.name != name:
                    raise ValueError(
                        f"Registry key '{name}' does not match stage '{meta.name}'"
                    )
                registry[name] = meta
            else:
                registry[name] = StageInfo(name, int(meta))
    else:
        for stage in stages:
            registry[stage.name] = stage
    return registry


def update_caller_name(name: str) -> str:
    """Caller id under which all update stages of `name` are recorded."""
    # Every update stage is lumped into index 0.
    return f"{name}.update({0})"


def split_update_stage(body: Stmt) -> Tuple[Stmt, Optional[Stmt]]:
    """Splits a producer body into its initialization and update parts.

    Peels LetBinding bodies and Conditional then-branches until some other
    node is reached. If that node is a Sequence, its first child is the
    initialization and its second child the update. Otherwise the whole body
    is the initialization and there is no update part.

    The else-branch of a Conditional is never followed.
    """
    node = body
    while True:
        if isinstance(node, LetBinding):
            node = node.body
        elif isinstance(node, Conditional):
            node = node.then_branch
        else:
            break
    if isinstance(node, Sequence):
        return node.first, node.rest
    return body, None


class CallGraphWalker(IRVisitor):
    """
    Recovers the call graph of a lowered pipeline.

    The current producer is passed down as the visitor argument, so a
    walker keeps no traversal state besides the graph it is filling in.
    Use walk() (or build_call_graph) for a fresh graph per tree.
    """

    def __init__(self, stages: Union[StageRegistry, Iterable[StageInfo], Mapping[str, int]]):
        self.stages = make_registry(stages)
        self.calls: CallGraph = {}
        self._seen: Dict[str, Set[str]] = {}

    @log_walk
    def walk(self, tree: IRNode) -> CallGraph:
        self.calls = {}
        self._seen = {}
        self.visit(tree, "")
        return self.calls

    def _ensure_caller(self, caller: str):
        # Every producer gets a slot, even one that reads nothing
        if caller not in self.calls:
            self.calls[caller] = []
            self._seen[caller] = set()

    def visit_ProducerScope(self, node: ProducerScope, producer: str):
        if node.name not in self.stages:
            logging.error(f"Producer '{node.name}' is not in the stage registry")
            raise UnregisteredStageError(node.name)

        produce, update = node.body, None
        if self.stages[node.name].has_updates:
            produce, update = split_update_stage(node.body)
            if update is None:
                logging.debug(
                    f"Producer '{node.name}' has update stages but no update block was found"
                )

        logging.debug(f"Entering producer '{node.name}'")
        self._ensure_caller(node.name)
        self.visit(produce, node.name)

        if update is not None:
            update_name = update_caller_name(node.name)
            logging.debug(f"Entering update stages of '{node.name}' as '{update_name}'")
            self._ensure_caller(update_name)
            self.visit(update, update_name)

    def visit_Load(self, node: Load, producer: str):
        self.visit_children(node, producer)
        if not producer:
            return
        seen = self._seen[producer]
        if node.name not in seen:
            seen.add(node.name)
            self.calls[producer].append(node.name)


def build_call_graph(
    tree: IRNode,
    stages: Union[StageRegistry, Iterable[StageInfo], Mapping[str, int]],
) -> CallGraph:
    """Walks `tree` once and returns its call graph."""
    return CallGraphWalker(stages).walk(tree)
