"""
Statement tree IR.

A lowered pipeline is a single nested statement tree: loops, allocation
scopes, producer regions, conditionals and sequencing, with expressions at
the leaves. Every node kind is a plain class listed in NODE_TYPES, and
IRVisitor provides one handler per kind.
"""

from typing import List, Optional, Sequence as SequenceType, Tuple


class IRNode:
    """Base class for all statement tree nodes."""

    _fields: Tuple[str, ...] = ()

    def children(self) -> List["IRNode"]:
        """Returns the child nodes in evaluation order."""
        result = []
        for field in self._fields:
            value = getattr(self, field)
            if isinstance(value, IRNode):
                result.append(value)
            elif isinstance(value, (list, tuple)):
                result.extend(v for v in value if isinstance(v, IRNode))
        return result

    def accept(self, visitor, *args):
        return visitor.visit(self, *args)

    def __eq__(self, other):
        if type(self) is not type(other):
            return False
        return all(getattr(self, f) == getattr(other, f) for f in self._fields)

    def __hash__(self):
        values = []
        for f in self._fields:
            value = getattr(self, f)
            values.append(tuple(value) if isinstance(value, list) else value)
        return hash((type(self).__name__, tuple(values)))

    def __repr__(self):
        args = ", ".join(f"{f}={getattr(self, f)!r}" for f in self._fields)
        return f"{type(self).__name__}({args})"


class Stmt(IRNode):
    pass


class Expr(IRNode):
    pass


# =======================
# Expressions
# =======================


class IntImm(Expr):
    _fields = ("value",)

    def __init__(self, value: int):
        self.value = value


class Variable(Expr):
    _fields = ("name",)

    def __init__(self, name: str):
        self.name = name


class BinaryOp(Expr):
    """Arithmetic or comparison, e.g. BinaryOp("+", a, b)."""

    _fields = ("op", "a", "b")

    def __init__(self, op: str, a: Expr, b: Expr):
        self.op = op
        self.a = a
        self.b = b


class Load(Expr):
    """A read from stage `name` at the given index expressions."""

    _fields = ("name", "index")

    def __init__(self, name: str, index: SequenceType[Expr] = ()):
        self.name = name
        self.index = tuple(index)


# =======================
# Statements
# =======================


class ProducerScope(Stmt):
    """Reads under `body` logically belong to stage `name`."""

    _fields = ("name", "body")

    def __init__(self, name: str, body: Stmt):
        self.name = name
        self.body = body


class LetBinding(Stmt):
    _fields = ("name", "value", "body")

    def __init__(self, name: str, value: Expr, body: Stmt):
        self.name = name
        self.value = value
        self.body = body


class Conditional(Stmt):
    _fields = ("condition", "then_branch", "else_branch")

    def __init__(
        self,
        condition: Expr,
        then_branch: Stmt,
        else_branch: Optional[Stmt] = None,
    ):
        self.condition = condition
        self.then_branch = then_branch
        self.else_branch = else_branch


class Sequence(Stmt):
    """Exactly two statements run in order."""

    _fields = ("first", "rest")

    def __init__(self, first: Stmt, rest: Stmt):
        self.first = first
        self.rest = rest


class For(Stmt):
    _fields = ("var", "min", "extent", "body")

    def __init__(self, var: str, min: Expr, extent: Expr, body: Stmt):
        self.var = var
        self.min = min
        self.extent = extent
        self.body = body


class Realize(Stmt):
    """Allocation scope for the storage of stage `name`."""

    _fields = ("name", "body")

    def __init__(self, name: str, body: Stmt):
        self.name = name
        self.body = body


class Provide(Stmt):
    """A store of `value` into stage `name`."""

    _fields = ("name", "value", "index")

    def __init__(self, name: str, value: Expr, index: SequenceType[Expr] = ()):
        self.name = name
        self.value = value
        self.index = tuple(index)


class Evaluate(Stmt):
    _fields = ("value",)

    def __init__(self, value: Expr):
        self.value = value


class AssertStmt(Stmt):
    _fields = ("condition", "message")

    def __init__(self, condition: Expr, message: str = ""):
        self.condition = condition
        self.message = message


NODE_TYPES = (
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
)


def block(*stmts: Stmt) -> Stmt:
    """Chains statements into right-nested Sequence nodes."""
    if not stmts:
        raise ValueError("block() needs at least one statement")
    result = stmts[-1]
    for stmt in reversed(stmts[:-1]):
        result = Sequence(stmt, result)
    return result


class IRVisitor:
    """
    Dispatches visit(node, *args) to visit_<NodeKind>(node, *args).

    Every kind in NODE_TYPES has a handler here that recurses into all
    children with the same extra arguments. Subclasses override only the
    kinds they care about. A node whose kind has no handler is rejected
    rather than skipped.
    """

    def visit(self, node: IRNode, *args):
        handler = getattr(self, f"visit_{type(node).__name__}", None)
        if handler is None:
            raise NotImplementedError(
                f"{type(self).__name__} has no handler for {type(node).__name__}"
            )
        return handler(node, *args)

    def visit_children(self, node: IRNode, *args):
        for child in node.children():
            self.visit(child, *args)

    def visit_IntImm(self, node, *args):
        pass

    def visit_Variable(self, node, *args):
        pass

    def visit_BinaryOp(self, node, *args):
        self.visit_children(node, *args)

    def visit_Load(self, node, *args):
        self.visit_children(node, *args)

    def visit_ProducerScope(self, node, *args):
        self.visit_children(node, *args)

    def visit_LetBinding(self, node, *args):
        self.visit_children(node, *args)

    def visit_Conditional(self, node, *args):
        self.visit_children(node, *args)

    def visit_Sequence(self, node, *args):
        # Iterates the rest chain: depth tracks nesting, not block length
        current = node
        while True:
            self.visit(current.first, *args)
            if type(current.rest) is not Sequence:
                self.visit(current.rest, *args)
                return
            current = current.rest

    def visit_For(self, node, *args):
        self.visit_children(node, *args)

    def visit_Realize(self, node, *args):
        self.visit_children(node, *args)

    def visit_Provide(self, node, *args):
        self.visit_children(node, *args)

    def visit_Evaluate(self, node, *args):
        self.visit_children(node, *args)

    def visit_AssertStmt(self, node, *args):
        self.visit_children(node, *args)
