"""
Grammar-independent syntax nodes produced by the source analyzer
"""

import re
from dataclasses import dataclass, field

_PUNCTUATION_SPACE = re.compile(r"\s*([<>,()\[\]&:;*])\s*")


def canonical_spelling(text: str) -> str:
    """`Vec < u8 >` and `Vec<u8>` spell the same type; `&mut T` keeps its space"""
    collapsed = " ".join(text.split())
    return _PUNCTUATION_SPACE.sub(r"\1", collapsed)


@dataclass
class TypeExpr:
    """A type as written in a signature"""
    kind = "type_expr"
    spelling: str
    line: int = 0

    def __post_init__(self):
        self.spelling = canonical_spelling(self.spelling)

    def children(self):
        return []


@dataclass
class Receiver:
    """The self parameter of a method, kept raw for the extractor to classify"""
    kind = "receiver"
    text: str
    is_reference: bool
    is_mutable: bool = False

    def children(self):
        return []


@dataclass
class FunctionParam:
    """A typed, non-self parameter"""
    kind = "function_param"
    pattern: str
    type: TypeExpr
    line: int = 0

    def children(self):
        return [self.type]


@dataclass
class FunctionMember:
    """A fn item inside an annotated impl block"""
    kind = "function_member"
    name: str
    receiver: Receiver | None = None
    params: list[FunctionParam] = field(default_factory=list)
    return_type: TypeExpr | None = None
    line: int = 0

    def children(self):
        nodes = []
        if self.receiver is not None:
            nodes.append(self.receiver)
        nodes.extend(self.params)
        if self.return_type is not None:
            nodes.append(self.return_type)
        return nodes


@dataclass
class ImplBlock:
    """An impl block carrying #[java_class("namespace")]"""
    kind = "impl_block"
    type_name: str
    namespace: str
    functions: list[FunctionMember] = field(default_factory=list)
    module_path: str = "crate"
    source: str = "<string>"
    line: int = 0

    def children(self):
        return list(self.functions)


class SyntaxVisitor:
    """Walks syntax nodes, dispatching on node kind

    Subclasses override visit_<kind>; unhandled kinds recurse into children.
    """

    def visit(self, node):
        method = getattr(self, f"visit_{node.kind}", self.generic_visit)
        return method(node)

    def generic_visit(self, node):
        for child in node.children():
            self.visit(child)
