"""
Generation-time errors for Kotlin/JNI bindings

Every error carries a kind plus an ordered list of context frames, so callers
can add "where" information while the error propagates outwards.
"""

from enum import Enum


class ErrorKind(Enum):
    PARSE = "ParseError"
    INVALID_RECEIVER = "InvalidReceiver"
    DUPLICATE_CLASS_REGISTRATION = "DuplicateClassRegistration"
    UNRESOLVED_SELF_REFERENCE = "UnresolvedSelfReference"
    UNMAPPED_TYPE = "UnmappedType"
    RESERVED_NAME = "ReservedName"
    OUTPUT_COLLISION = "OutputCollision"


class BindingError(Exception):
    """Base class for all binding generation errors"""

    kind: ErrorKind = None

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.context: list[str] = []

    def add_context(self, frame: str) -> "BindingError":
        """Prepend a context frame (outermost first) and return self for re-raising"""
        self.context.insert(0, frame)
        return self

    def __str__(self) -> str:
        if not self.context:
            return f"{self.kind.value}: {self.message}"
        frames = "\n".join(self.context)
        return f"{frames}, caused by {self.kind.value}: {self.message}"


class ParseError(BindingError):
    """Source unit or signature is not valid Rust for our purposes"""

    kind = ErrorKind.PARSE

    def __init__(self, message: str, source: str = None, line: int = None):
        location = ""
        if source is not None:
            location = f"{source}:{line}: " if line is not None else f"{source}: "
        super().__init__(f"{location}{message}")
        self.source = source
        self.line = line


class InvalidReceiverError(BindingError):
    kind = ErrorKind.INVALID_RECEIVER

    def __init__(self, class_name: str, method_name: str, token: str):
        super().__init__(
            f"Must only take self as reference in {class_name}::{method_name}, found `{token}`"
        )
        self.class_name = class_name
        self.method_name = method_name
        self.token = token


class DuplicateClassRegistrationError(BindingError):
    kind = ErrorKind.DUPLICATE_CLASS_REGISTRATION

    def __init__(self, type_name: str, first_origin: str = None, second_origin: str = None):
        message = f"Found more than one #[java_class] for struct_name {type_name}"
        if first_origin or second_origin:
            message += f" (first in {first_origin or '<unknown>'}, again in {second_origin or '<unknown>'})"
        super().__init__(message)
        self.type_name = type_name
        self.first_origin = first_origin
        self.second_origin = second_origin


class UnresolvedSelfReferenceError(BindingError):
    kind = ErrorKind.UNRESOLVED_SELF_REFERENCE

    def __init__(self, class_name: str, method_name: str = None):
        where = f"{class_name}::{method_name}" if method_name else class_name
        super().__init__(f"Failed to find {class_name} in java_class lookup for {where}. This is a bug.")
        self.class_name = class_name
        self.method_name = method_name


class UnmappedTypeError(BindingError):
    kind = ErrorKind.UNMAPPED_TYPE

    def __init__(self, spelling: str, class_name: str = None, method_name: str = None):
        message = f"No boundary mapping for type `{spelling}`"
        if class_name and method_name:
            message += f" in {class_name}::{method_name}"
        super().__init__(message)
        self.spelling = spelling
        self.class_name = class_name
        self.method_name = method_name


class ReservedNameError(BindingError):
    kind = ErrorKind.RESERVED_NAME

    def __init__(self, class_name: str, method_name: str, reserved: str, role: str = "entry point"):
        super().__init__(
            f"{class_name}::{method_name} collides with the reserved {role} `{reserved}`"
        )
        self.class_name = class_name
        self.method_name = method_name
        self.reserved = reserved


class OutputCollisionError(BindingError):
    """Two classes, or a class and a support file, would be written to one path"""

    kind = ErrorKind.OUTPUT_COLLISION

    def __init__(self, target: str, first: str, second: str):
        super().__init__(f"{first} and {second} both generate `{target}`")
        self.target = target
        self.first = first
        self.second = second
