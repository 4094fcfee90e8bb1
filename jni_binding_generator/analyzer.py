"""
Source analyzer: finds #[java_class] impl blocks in Rust source
"""

import tree_sitter_rust as ts_rust
from tree_sitter import Language, Parser

from .constants import ANNOTATION_NAME
from .errors import ParseError
from .syntax import FunctionMember, FunctionParam, ImplBlock, Receiver, TypeExpr


class SourceAnalyzer:
    """Parses one Rust source unit into annotated impl blocks

    Signatures are captured as written; classifying receivers and checking
    types is left to the descriptor extractor.
    """

    def __init__(self):
        self.parser = Parser(Language(ts_rust.language()))

    def analyze(self, text: str, source: str = "<string>", module_path: str = "crate") -> list[ImplBlock]:
        """Return every annotated impl block in `text`, in source order"""
        data = bytes(text, "utf-8")
        tree = self.parser.parse(data)
        root = tree.root_node

        if root.has_error:
            bad = self._first_error(root)
            line = bad.start_point[0] + 1 if bad is not None else None
            column = bad.start_point[1] + 1 if bad is not None else None
            what = "missing token" if bad is not None and bad.is_missing else "syntax error"
            raise ParseError(f"{what} at column {column}", source, line)

        blocks = []
        self._walk_items(root, data, module_path, source, blocks)
        return blocks

    def _first_error(self, node):
        if node.is_error or node.is_missing:
            return node
        for child in node.children:
            if child.has_error or child.is_missing:
                found = self._first_error(child)
                if found is not None:
                    return found
        return None

    def _walk_items(self, node, data: bytes, module_path: str, source: str, blocks: list):
        """Visit the items of a file or inline module body"""
        pending_attributes = []
        for child in node.named_children:
            if child.type == "attribute_item":
                pending_attributes.append(child)
                continue
            if child.type in ("line_comment", "block_comment"):
                continue

            if child.type == "impl_item":
                for namespace in self._annotation_namespaces(pending_attributes, data, source):
                    blocks.append(self._impl_block(child, namespace, data, module_path, source))
            elif child.type == "mod_item":
                body = child.child_by_field_name("body")
                if body is not None:
                    name = _text(child.child_by_field_name("name"), data)
                    self._walk_items(body, data, f"{module_path}::{name}", source, blocks)
            pending_attributes = []

    def _annotation_namespaces(self, attribute_items, data: bytes, source: str) -> list[str]:
        namespaces = []
        for item in attribute_items:
            attribute = next((c for c in item.named_children if c.type == "attribute"), None)
            if attribute is None or not attribute.named_children:
                continue
            path = attribute.named_children[0]
            if path.type != "identifier" or _text(path, data) != ANNOTATION_NAME:
                continue

            line = item.start_point[0] + 1
            arguments = attribute.child_by_field_name("arguments")
            literals = arguments.named_children if arguments is not None else []
            if len(literals) != 1 or literals[0].type != "string_literal":
                raise ParseError(
                    f"The `{ANNOTATION_NAME}` attribute must have a single string literal "
                    "supplied to specify the class path",
                    source, line,
                )
            namespace = _text(literals[0], data)[1:-1]
            if not namespace:
                raise ParseError(f"The `{ANNOTATION_NAME}` namespace must not be empty", source, line)
            namespaces.append(namespace)
        return namespaces

    def _impl_block(self, node, namespace: str, data: bytes, module_path: str, source: str) -> ImplBlock:
        type_node = node.child_by_field_name("type")
        block = ImplBlock(
            type_name=TypeExpr(_text(type_node, data)).spelling,
            namespace=namespace,
            module_path=module_path,
            source=source,
            line=node.start_point[0] + 1,
        )
        body = node.child_by_field_name("body")
        if body is None:
            return block
        for item in body.named_children:
            if item.type == "function_item":
                block.functions.append(self._function_member(item, data, source))
        return block

    def _function_member(self, node, data: bytes, source: str) -> FunctionMember:
        line = node.start_point[0] + 1
        member = FunctionMember(name=_text(node.child_by_field_name("name"), data), line=line)

        parameters = node.child_by_field_name("parameters")
        for param in (parameters.named_children if parameters is not None else []):
            if param.type in ("line_comment", "block_comment", "attribute_item"):
                continue
            if param.type == "self_parameter":
                child_types = {c.type for c in param.children}
                member.receiver = Receiver(
                    text=_text(param, data),
                    is_reference="&" in child_types,
                    is_mutable="mutable_specifier" in child_types,
                )
            elif param.type == "parameter":
                pattern = param.child_by_field_name("pattern")
                type_node = param.child_by_field_name("type")
                if pattern.type == "self":
                    # `self: Box<Self>` and friends take the receiver by value
                    member.receiver = Receiver(text=_text(param, data), is_reference=False)
                    continue
                member.params.append(FunctionParam(
                    pattern=_text(pattern, data),
                    type=TypeExpr(_text(type_node, data), param.start_point[0] + 1),
                    line=param.start_point[0] + 1,
                ))
            else:
                raise ParseError(
                    f"unsupported parameter `{_text(param, data)}` in fn {member.name}",
                    source, param.start_point[0] + 1,
                )

        return_type = node.child_by_field_name("return_type")
        if return_type is not None:
            member.return_type = TypeExpr(_text(return_type, data), return_type.start_point[0] + 1)
        return member


def _text(node, data: bytes) -> str:
    return data[node.start_byte:node.end_byte].decode("utf-8")
