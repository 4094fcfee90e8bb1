"""
JNI Bindings Generator - Generate Kotlin wrappers and Rust JNI trampolines from annotated impl blocks
"""

from .generator import KotlinBindingsGenerator, SourceUnit, GeneratedArtifact
from .type_mapper import TypeMapper
from .code_generators import TrampolineGenerator, WrapperGenerator, OutputBuilder
from .errors import BindingError
from .constants import (
    KOTLIN_TYPE_MAP,
    ANNOTATION_NAME,
    MarshalStrategy,
)

__version__ = "0.1.0"

__all__ = [
    "KotlinBindingsGenerator",
    "SourceUnit",
    "GeneratedArtifact",
    "TypeMapper",
    "TrampolineGenerator",
    "WrapperGenerator",
    "OutputBuilder",
    "BindingError",
    "KOTLIN_TYPE_MAP",
    "ANNOTATION_NAME",
    "MarshalStrategy",
]
