"""
Constants and mappings for Kotlin/JNI bindings generation
"""

from enum import Enum


class MarshalStrategy(Enum):
    """How a value crosses the JNI boundary"""
    SCALAR = "scalar"
    STRING = "string"
    BYTE_SEQUENCE = "byte-sequence"
    PRIMITIVE_ARRAY = "primitive-array"
    STRING_ARRAY = "string-array"
    OBJECT = "object"
    OBJECT_ARRAY = "object-array"


# Attribute marking an impl block for binding generation: #[java_class("a.b")]
ANNOTATION_NAME = "java_class"

# Literal self-reference in Rust signatures
SELF_TYPE = "Self"

# Suffix that separates native entry points from the Kotlin forwarding methods
EXTERN_SUFFIX = "Extern"

# Reserved per-class drop entry point (emitted as dropByHandleExtern)
DROP_FUNCTION_NAME = "dropByHandle"

# Backing field of every wrapper object
HANDLE_FIELD = "handle"
HANDLE_SENTINEL = -1

# Leading parameter of instance `external fun` stubs
NATIVE_HANDLE_PARAM = "nativeHandle"

# Members of kotlin.Any; a plain `fun` with these names does not compile
KOTLIN_ANY_MEMBERS = {"equals", "hashCode", "toString"}

# Process-wide finalization registry generated once per project
REGISTRY_OBJECT = "Library"
REGISTRY_FIELD = "CLEANER"

NATIVE_LOADER_IMPORT = "cz.adamh.utils.NativeUtils"

# Name of the generated Rust support module
RUNTIME_MODULE = "runtime"

# Rust bindings file names no class module may take
RESERVED_MODULE_NAMES = {RUNTIME_MODULE, "mod"}

# Default output locations, relative to the crate root
DEFAULT_KOTLIN_SOURCE_ROOT = "kotlin/src/main/kotlin"
DEFAULT_KOTLIN_RESOURCE_ROOT = "kotlin/src/main/resources"
DEFAULT_RUST_OUTPUT = "src/jni_bindings"

# Mapping from Rust boundary types to
# (Kotlin type, strategy, Rust JNI type, to-managed template, from-managed template).
# Templates are Rust expressions over {value}; `env` is the trampoline's JNIEnv.
KOTLIN_TYPE_MAP = {
    "bool": ("Boolean", MarshalStrategy.SCALAR, "jboolean",
             "jboolean::from({value})", "{value} != 0"),
    "i8": ("Byte", MarshalStrategy.SCALAR, "jbyte", "{value}", "{value}"),
    "i16": ("Short", MarshalStrategy.SCALAR, "jshort", "{value}", "{value}"),
    "i32": ("Int", MarshalStrategy.SCALAR, "jint", "{value}", "{value}"),
    "i64": ("Long", MarshalStrategy.SCALAR, "jlong", "{value}", "{value}"),
    "f32": ("Float", MarshalStrategy.SCALAR, "jfloat", "{value}", "{value}"),
    "f64": ("Double", MarshalStrategy.SCALAR, "jdouble", "{value}", "{value}"),
    "String": ("String", MarshalStrategy.STRING, "JString<'local>",
               "runtime::string_to_java(&mut env, {value})",
               "runtime::string_from_java(&mut env, &{value})"),
    "Vec<u8>": ("ByteArray", MarshalStrategy.BYTE_SEQUENCE, "JByteArray<'local>",
                "runtime::bytes_to_java(&mut env, {value})",
                "runtime::bytes_from_java(&mut env, &{value})"),
    "Vec<bool>": ("BooleanArray", MarshalStrategy.PRIMITIVE_ARRAY, "JBooleanArray<'local>",
                  "runtime::bool_array_to_java(&mut env, {value})",
                  "runtime::bool_array_from_java(&mut env, &{value})"),
    "Vec<i8>": ("ByteArray", MarshalStrategy.PRIMITIVE_ARRAY, "JByteArray<'local>",
                "runtime::i8_array_to_java(&mut env, {value})",
                "runtime::i8_array_from_java(&mut env, &{value})"),
    "Vec<i16>": ("ShortArray", MarshalStrategy.PRIMITIVE_ARRAY, "JShortArray<'local>",
                 "runtime::i16_array_to_java(&mut env, {value})",
                 "runtime::i16_array_from_java(&mut env, &{value})"),
    "Vec<i32>": ("IntArray", MarshalStrategy.PRIMITIVE_ARRAY, "JIntArray<'local>",
                 "runtime::i32_array_to_java(&mut env, {value})",
                 "runtime::i32_array_from_java(&mut env, &{value})"),
    "Vec<i64>": ("LongArray", MarshalStrategy.PRIMITIVE_ARRAY, "JLongArray<'local>",
                 "runtime::i64_array_to_java(&mut env, {value})",
                 "runtime::i64_array_from_java(&mut env, &{value})"),
    "Vec<f32>": ("FloatArray", MarshalStrategy.PRIMITIVE_ARRAY, "JFloatArray<'local>",
                 "runtime::f32_array_to_java(&mut env, {value})",
                 "runtime::f32_array_from_java(&mut env, &{value})"),
    "Vec<f64>": ("DoubleArray", MarshalStrategy.PRIMITIVE_ARRAY, "JDoubleArray<'local>",
                 "runtime::f64_array_to_java(&mut env, {value})",
                 "runtime::f64_array_from_java(&mut env, &{value})"),
    "Vec<String>": ("Array<String>", MarshalStrategy.STRING_ARRAY, "JObjectArray<'local>",
                    "runtime::strings_to_java(&mut env, {value})",
                    "runtime::strings_from_java(&mut env, &{value})"),
}

# Conversions for annotated classes; {element} is the Rust type name
OBJECT_MAPPING = ("JObject<'local>",
                  "runtime::object_to_java(&mut env, {value})",
                  "runtime::object_from_java::<{element}>(&mut env, &{value})")
OBJECT_ARRAY_MAPPING = ("JObjectArray<'local>",
                        "runtime::objects_to_java(&mut env, {value})",
                        "runtime::objects_from_java::<{element}>(&mut env, &{value})")

# Kotlin hard keywords, escaped with backticks when used as identifiers
KOTLIN_KEYWORDS = {
    'as', 'break', 'class', 'continue', 'do', 'else', 'false', 'for', 'fun',
    'if', 'in', 'interface', 'is', 'null', 'object', 'package', 'return',
    'super', 'this', 'throw', 'true', 'try', 'typealias', 'typeof', 'val',
    'var', 'when', 'while',
}
