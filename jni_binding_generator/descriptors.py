"""
Method and class descriptors extracted from annotated impl blocks
"""

import re
from dataclasses import dataclass, field
from enum import Enum

from .constants import DROP_FUNCTION_NAME, EXTERN_SUFFIX, KOTLIN_ANY_MEMBERS, NATIVE_HANDLE_PARAM, SELF_TYPE
from .errors import BindingError, InvalidReceiverError, ParseError, ReservedNameError
from .syntax import FunctionMember, ImplBlock, SyntaxVisitor

_WORD_BOUNDARY = re.compile(r"[_\-\s]+|(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_IDENTIFIER = re.compile(r"^(?:r#)?[A-Za-z_][A-Za-z0-9_]*$")


def _words(name: str) -> list[str]:
    return [word for word in _WORD_BOUNDARY.split(name) if word]


def camel_case(name: str) -> str:
    """`new_from_bytes` -> `newFromBytes`; already camel-cased names are kept"""
    words = _words(name)
    if not words:
        return name
    first, rest = words[0], words[1:]
    return first.lower() + "".join(w[0].upper() + w[1:].lower() for w in rest)


def snake_case(name: str) -> str:
    """`SomeStruct` -> `some_struct`"""
    return "_".join(word.lower() for word in _words(name))


class ReceiverKind(Enum):
    NONE = "none"
    SHARED = "shared"
    EXCLUSIVE = "exclusive"


@dataclass(frozen=True)
class Parameter:
    name: str
    native_type: str

    @property
    def kotlin_name(self) -> str:
        return camel_case(self.name.removeprefix("r#"))

    @property
    def jni_name(self) -> str:
        return f"j_{self.name.removeprefix('r#')}"

    @property
    def local_name(self) -> str:
        return f"arg_{self.name.removeprefix('r#')}"


@dataclass(frozen=True)
class MethodDescriptor:
    name: str
    receiver_kind: ReceiverKind
    parameters: tuple[Parameter, ...] = ()
    return_type: str | None = None
    line: int = 0

    @property
    def is_static(self) -> bool:
        return self.receiver_kind is ReceiverKind.NONE

    @property
    def returns_self(self) -> bool:
        return self.return_type == SELF_TYPE

    @property
    def kotlin_name(self) -> str:
        return camel_case(self.name)

    @property
    def extern_name(self) -> str:
        return f"{self.kotlin_name}{EXTERN_SUFFIX}"


@dataclass
class ClassDescriptor:
    native_type_name: str
    declared_namespace: str
    methods: list[MethodDescriptor] = field(default_factory=list)
    module_path: str = "crate"
    source: str = "<string>"

    @property
    def package_path(self) -> str:
        return f"{self.declared_namespace}.{self.native_type_name}"

    @property
    def jvm_path(self) -> str:
        return self.package_path.replace(".", "/")

    @property
    def rust_module_name(self) -> str:
        return snake_case(self.native_type_name)

    @property
    def static_methods(self) -> list[MethodDescriptor]:
        return [m for m in self.methods if m.is_static]

    @property
    def instance_methods(self) -> list[MethodDescriptor]:
        return [m for m in self.methods if not m.is_static]


class DescriptorExtractor(SyntaxVisitor):
    """Turns parsed impl blocks into class and method descriptors"""

    def __init__(self):
        self._current: ClassDescriptor | None = None

    def extract(self, block: ImplBlock) -> ClassDescriptor:
        self._current = ClassDescriptor(
            native_type_name=block.type_name,
            declared_namespace=block.namespace,
            module_path=block.module_path,
            source=block.source,
        )
        try:
            self.visit(block)
            return self._current
        finally:
            self._current = None

    def visit_function_member(self, node: FunctionMember):
        try:
            method = self.extract_method(node, self._current.native_type_name, self._current.source)
        except BindingError as e:
            raise e.add_context(f"in fn {node.name} of impl {self._current.native_type_name}")
        for existing in self._current.methods:
            if existing.kotlin_name == method.kotlin_name:
                raise ParseError(
                    f"fn {existing.name} and fn {method.name} of impl {self._current.native_type_name} "
                    f"both map to Kotlin name `{method.kotlin_name}`",
                    self._current.source, method.line,
                )
        self._current.methods.append(method)

    def extract_method(self, member: FunctionMember, class_name: str, source: str = "<string>") -> MethodDescriptor:
        receiver_kind = ReceiverKind.NONE
        if member.receiver is not None:
            if not member.receiver.is_reference:
                raise InvalidReceiverError(class_name, member.name, member.receiver.text)
            receiver_kind = ReceiverKind.EXCLUSIVE if member.receiver.is_mutable else ReceiverKind.SHARED

        if camel_case(member.name) == DROP_FUNCTION_NAME:
            raise ReservedNameError(class_name, member.name, f"{DROP_FUNCTION_NAME}{EXTERN_SUFFIX}")
        if camel_case(member.name) in KOTLIN_ANY_MEMBERS:
            raise ReservedNameError(class_name, member.name, camel_case(member.name), "member of kotlin.Any")

        parameters = []
        for index, param in enumerate(member.params):
            pattern = param.pattern.strip().removeprefix("mut ").strip()
            if pattern == "_":
                pattern = f"arg{index}"
            elif not _IDENTIFIER.match(pattern):
                raise ParseError(
                    f"unsupported parameter pattern `{pattern}` in fn {member.name}; "
                    "only plain identifiers can cross the boundary",
                    source, param.line,
                )
            parameter = Parameter(name=pattern, native_type=param.type.spelling)
            if parameter.kotlin_name == NATIVE_HANDLE_PARAM:
                raise ReservedNameError(class_name, member.name, NATIVE_HANDLE_PARAM, "parameter name")
            for other in parameters:
                if other.kotlin_name == parameter.kotlin_name:
                    raise ParseError(
                        f"parameters `{other.name}` and `{parameter.name}` of fn {member.name} "
                        f"both map to Kotlin name `{parameter.kotlin_name}`",
                        source, param.line,
                    )
            parameters.append(parameter)

        return_type = None
        if member.return_type is not None and member.return_type.spelling != "()":
            return_type = member.return_type.spelling

        return MethodDescriptor(
            name=member.name,
            receiver_kind=receiver_kind,
            parameters=tuple(parameters),
            return_type=return_type,
            line=member.line,
        )
