"""
Code generation functions for Kotlin wrappers and Rust JNI trampolines
"""

from .constants import (
    DROP_FUNCTION_NAME,
    EXTERN_SUFFIX,
    HANDLE_FIELD,
    HANDLE_SENTINEL,
    KOTLIN_KEYWORDS,
    NATIVE_HANDLE_PARAM,
    NATIVE_LOADER_IMPORT,
    REGISTRY_FIELD,
    REGISTRY_OBJECT,
    RUNTIME_MODULE,
    MarshalStrategy,
)
from .descriptors import ClassDescriptor, MethodDescriptor, ReceiverKind
from .errors import BindingError, UnresolvedSelfReferenceError
from .type_mapper import TypeMapper, TypeMapping

GENERATED_HEADER = "// AUTO-GENERATED by jni-binding-generator - DO NOT EDIT"

DROP_EXTERN_NAME = f"{DROP_FUNCTION_NAME}{EXTERN_SUFFIX}"


def jni_mangle(name: str) -> str:
    """Escape a Java identifier or dotted path for use in a JNI symbol"""
    out = []
    for ch in name:
        if ch in "./":
            out.append("_")
        elif ch == "_":
            out.append("_1")
        elif ch == ";":
            out.append("_2")
        elif ch == "[":
            out.append("_3")
        elif ch.isascii() and ch.isalnum():
            out.append(ch)
        else:
            out.append(f"_0{ord(ch):04x}")
    return "".join(out)


def jni_symbol(package_path: str, method_name: str) -> str:
    """`dev.x.Tokenizer` + `tokenizeExtern` -> `Java_dev_x_Tokenizer_tokenizeExtern`"""
    return f"Java_{jni_mangle(package_path)}_{jni_mangle(method_name)}"


def _jni_base(jni_type: str) -> str:
    return jni_type.split("<", 1)[0]


class TrampolineGenerator:
    """Generates Rust `extern "system"` entry points for one class"""

    def __init__(self, type_mapper: TypeMapper, lookup):
        self.type_mapper = type_mapper
        self.lookup = lookup

    def _resolve(self, cls: ClassDescriptor, method: MethodDescriptor, spelling: str) -> TypeMapping:
        try:
            return self.type_mapper.resolve(spelling, cls.native_type_name, self.lookup)
        except UnresolvedSelfReferenceError as e:
            raise UnresolvedSelfReferenceError(cls.native_type_name, method.name) from e

    def signature_mappings(self, cls: ClassDescriptor, method: MethodDescriptor):
        """Return (parameter mappings, return mapping or None)"""
        params = [self._resolve(cls, method, p.native_type) for p in method.parameters]
        result = self._resolve(cls, method, method.return_type) if method.return_type else None
        return params, result

    def generate_method(self, cls: ClassDescriptor, method: MethodDescriptor, mappings=None) -> str:
        """Generate the trampoline for a single method

        Arguments are rebound to `arg_<name>` locals so they never shadow
        `env` or `handle`.
        """
        type_name = cls.native_type_name
        params, result = mappings or self.signature_mappings(cls, method)

        signature = ["    mut env: JNIEnv<'local>", "    _class: JClass<'local>"]
        if method.receiver_kind is not ReceiverKind.NONE:
            signature.append("    handle: jlong")
        for param, mapping in zip(method.parameters, params):
            signature.append(f"    {param.jni_name}: {mapping.jni}")

        body = []
        for param, mapping in zip(method.parameters, params):
            body.append(f"    let {param.local_name}: {mapping.native} = {mapping.from_managed_expr(param.jni_name)};")

        call_args = ", ".join(p.local_name for p in method.parameters)
        if method.receiver_kind is ReceiverKind.SHARED:
            call = f"runtime::with_shared(handle, |this: &{type_name}| this.{method.name}({call_args}))"
        elif method.receiver_kind is ReceiverKind.EXCLUSIVE:
            call = f"runtime::with_exclusive(handle, |this: &mut {type_name}| this.{method.name}({call_args}))"
        else:
            call = f"{type_name}::{method.name}({call_args})"

        if result is None:
            body.append(f"    {call};")
            returns = ""
        else:
            body.append(f"    let result = {call};")
            body.append(f"    {result.to_managed_expr('result')}")
            returns = f" -> {result.jni}"

        lines = [
            "#[no_mangle]",
            f"pub extern \"system\" fn {jni_symbol(cls.package_path, method.extern_name)}<'local>(",
            ",\n".join(signature) + ",",
            f"){returns} {{",
            *body,
            "}",
        ]
        return "\n".join(lines) + "\n"

    def generate_drop(self, cls: ClassDescriptor) -> str:
        """Generate the per-class drop trampoline; it must run at most once per handle"""
        return "\n".join([
            "#[no_mangle]",
            f"pub extern \"system\" fn {jni_symbol(cls.package_path, DROP_EXTERN_NAME)}<'local>(",
            "    _env: JNIEnv<'local>,",
            "    _class: JClass<'local>,",
            "    handle: jlong,",
            ") {",
            f"    unsafe {{ runtime::drop_handle::<{cls.native_type_name}>(handle) }}",
            "}",
        ]) + "\n"

    def generate_class(self, cls: ClassDescriptor) -> str:
        """Generate the Rust module holding every trampoline of a class"""
        functions = []
        jni_types = {"JClass", "jlong"}
        for method in cls.methods:
            try:
                params, result = self.signature_mappings(cls, method)
                functions.append(self.generate_method(cls, method, (params, result)))
            except BindingError as e:
                raise e.add_context(f"while generating trampoline for {cls.native_type_name}::{method.name}")
            for mapping in params + ([result] if result else []):
                jni_types.add(_jni_base(mapping.jni))
        functions.append(self.generate_drop(cls))

        objects = sorted(t for t in jni_types if t.startswith("J"))
        scalars = sorted(t for t in jni_types if t.startswith("j"))
        parts = [
            GENERATED_HEADER,
            f"// Trampolines for {cls.package_path}",
            "#![allow(non_snake_case, unused_mut, unused_imports)]",
            "",
            f"use jni::objects::{{{', '.join(objects)}}};",
            f"use jni::sys::{{{', '.join(scalars)}}};",
            "use jni::JNIEnv;",
            "",
            "use super::*;",
            "",
            f"impl runtime::JavaClass for {cls.native_type_name} {{",
            f"    const PATH: &'static str = \"{cls.jvm_path}\";",
            "}",
            "",
        ]
        parts.append("\n".join(functions))
        return "\n".join(parts)


class WrapperGenerator:
    """Generates the Kotlin class wrapping one annotated Rust type"""

    def __init__(self, type_mapper: TypeMapper, lookup, project_root: str, library_file: str):
        self.type_mapper = type_mapper
        self.lookup = lookup
        self.project_root = project_root
        self.library_file = library_file

    @staticmethod
    def _escape_keyword(name: str) -> str:
        """Escape Kotlin keywords with backticks"""
        if name in KOTLIN_KEYWORDS:
            return f"`{name}`"
        return name

    @staticmethod
    def _short_name(qualified: str, package: str) -> str:
        namespace, _, simple = qualified.rpartition(".")
        return simple if namespace == package else qualified

    def _kotlin_type(self, mapping: TypeMapping, package: str) -> str:
        if mapping.element_class:
            return mapping.kotlin.replace(mapping.element_class, self._short_name(mapping.element_class, package))
        return mapping.kotlin

    def _params(self, cls: ClassDescriptor, method: MethodDescriptor):
        """Return (typed parameter list, argument names) for the Kotlin signature"""
        typed, names = [], []
        for param in method.parameters:
            mapping = self.type_mapper.resolve(param.native_type, cls.native_type_name, self.lookup)
            name = self._escape_keyword(param.kotlin_name)
            typed.append(f"{name}: {self._kotlin_type(mapping, cls.declared_namespace)}")
            names.append(name)
        return typed, names

    def _cleanup(self, mapping: TypeMapping | None, package: str) -> str | None:
        """Cleaner registration for results that are fresh annotated objects"""
        if mapping is None or not mapping.is_class:
            return None
        owner = self._short_name(mapping.element_class, package)
        simple = mapping.element_class.rpartition(".")[2]
        cleaner = f"{owner}.Companion.{simple}Cleaner"
        if mapping.strategy is MarshalStrategy.OBJECT_ARRAY:
            return f"obj.forEach {{ {REGISTRY_FIELD}.register(it, {cleaner}(it.{HANDLE_FIELD})) }}"
        return f"{REGISTRY_FIELD}.register(obj, {cleaner}(obj.{HANDLE_FIELD}))"

    def _forwarding_body(self, call: str, mapping: TypeMapping | None, package: str, indent: str) -> list[str]:
        if mapping is None:
            return [f"{indent}{call}"]
        lines = [f"{indent}val obj = {call}"]
        cleanup = self._cleanup(mapping, package)
        if cleanup:
            lines.append(f"{indent}{cleanup}")
        lines.append(f"{indent}return obj")
        return lines

    def generate_static_method(self, cls: ClassDescriptor, method: MethodDescriptor) -> str:
        """Public companion function forwarding to a receiver-less trampoline"""
        typed, names = self._params(cls, method)
        mapping = self._return_mapping(cls, method)
        returns = f": {self._kotlin_type(mapping, cls.declared_namespace)}" if mapping else ""
        call = f"{method.extern_name}({', '.join(names)})"
        lines = [
            "        @JvmStatic",
            f"        fun {self._escape_keyword(method.kotlin_name)}({', '.join(typed)}){returns} {{",
            *self._forwarding_body(call, mapping, cls.declared_namespace, " " * 12),
            "        }",
        ]
        return "\n".join(lines)

    def generate_instance_method(self, cls: ClassDescriptor, method: MethodDescriptor) -> str:
        """Public member function passing this object's handle to the trampoline"""
        typed, names = self._params(cls, method)
        mapping = self._return_mapping(cls, method)
        returns = f": {self._kotlin_type(mapping, cls.declared_namespace)}" if mapping else ""
        call = f"Companion.{method.extern_name}({', '.join([f'this.{HANDLE_FIELD}'] + names)})"
        lines = [
            f"    fun {self._escape_keyword(method.kotlin_name)}({', '.join(typed)}){returns} {{",
            *self._forwarding_body(call, mapping, cls.declared_namespace, " " * 8),
            "    }",
        ]
        return "\n".join(lines)

    def generate_external(self, cls: ClassDescriptor, method: MethodDescriptor) -> str:
        """`private external fun` stub matching the Rust trampoline"""
        typed, _ = self._params(cls, method)
        if not method.is_static:
            typed.insert(0, f"{NATIVE_HANDLE_PARAM}: Long")
        mapping = self._return_mapping(cls, method)
        returns = f": {self._kotlin_type(mapping, cls.declared_namespace)}" if mapping else ""
        return "\n".join([
            "        @JvmStatic",
            f"        private external fun {method.extern_name}({', '.join(typed)}){returns}",
        ])

    def _return_mapping(self, cls: ClassDescriptor, method: MethodDescriptor) -> TypeMapping | None:
        if method.return_type is None:
            return None
        return self.type_mapper.resolve(method.return_type, cls.native_type_name, self.lookup)

    def generate_class(self, cls: ClassDescriptor) -> str:
        """Generate the complete Kotlin source for a class"""
        name = cls.native_type_name
        static_fns, externals, instance_fns = [], [], []
        for method in cls.methods:
            try:
                if method.is_static:
                    static_fns.append(self.generate_static_method(cls, method))
                else:
                    instance_fns.append(self.generate_instance_method(cls, method))
                externals.append(self.generate_external(cls, method))
            except BindingError as e:
                raise e.add_context(f"while generating Kotlin wrapper for {name}::{method.name}")
        externals.append("\n".join([
            "        @JvmStatic",
            f"        private external fun {DROP_EXTERN_NAME}({HANDLE_FIELD}: Long)",
        ]))

        lines = [
            GENERATED_HEADER,
            f"package {cls.declared_namespace}",
            "",
            f"import {self.project_root}.{REGISTRY_OBJECT}.{REGISTRY_FIELD}",
            f"import {NATIVE_LOADER_IMPORT}",
            "",
            f"class {name} {{",
            f"    internal var {HANDLE_FIELD}: Long = {HANDLE_SENTINEL}",
            "        private set",
            "",
            "    companion object {",
            f"        val _libImport = NativeUtils.loadLibraryFromJar(\"/{self.library_file}\")",
            "",
            f"        class {name}Cleaner(private val {HANDLE_FIELD}: Long) : Runnable {{",
            "            override fun run() {",
            f"                {DROP_EXTERN_NAME}({HANDLE_FIELD})",
            "            }",
            "        }",
        ]
        for block in static_fns + externals:
            lines.append("")
            lines.append(block)
        lines.append("    }")
        for block in instance_fns:
            lines.append("")
            lines.append(block)
        lines.append("}")
        return "\n".join(lines) + "\n"


class OutputBuilder:
    """Builds the per-project support files"""

    @staticmethod
    def build_registry(project_root: str) -> str:
        """Kotlin object holding the process-wide Cleaner, created once on first use"""
        return "\n".join([
            GENERATED_HEADER,
            f"package {project_root}",
            "",
            "import java.lang.ref.Cleaner",
            "",
            f"object {REGISTRY_OBJECT} {{",
            f"    val {REGISTRY_FIELD}: Cleaner by lazy {{ Cleaner.create() }}",
            "}",
        ]) + "\n"

    @staticmethod
    def build_module_index(classes: list[ClassDescriptor]) -> str:
        """mod.rs declaring the runtime and one module per class

        Each annotated type is imported here so sibling modules can reach it
        through `use super::*`.
        """
        lines = [
            GENERATED_HEADER,
            "#![allow(unused_imports)]",
            "",
            f"pub mod {RUNTIME_MODULE};",
        ]
        for cls in classes:
            lines.append(f"pub mod {cls.rust_module_name};")
        lines.append("")
        for cls in classes:
            lines.append(f"use {cls.module_path}::{cls.native_type_name};")
        return "\n".join(lines) + "\n"

    @staticmethod
    def build_runtime() -> str:
        return RUST_RUNTIME


RUST_RUNTIME = GENERATED_HEADER + r'''
//! Handle and conversion support shared by all generated trampolines.
#![allow(dead_code)]

use std::sync::RwLock;

use jni::objects::{
    JBooleanArray, JByteArray, JDoubleArray, JFloatArray, JIntArray, JLongArray, JObject,
    JObjectArray, JShortArray, JString, JValue,
};
use jni::sys::{jboolean, jlong, jsize};
use jni::JNIEnv;

/// A Rust type exposed as a Kotlin class whose `handle` field owns a boxed value.
///
/// Values handed out through `object_to_java` must be released exactly once,
/// by the class's `dropByHandleExtern` trampoline.
pub trait JavaClass: Sized {
    /// JVM class path, e.g. `dev/gigapixel/tokenizers/Tokenizer`
    const PATH: &'static str;
}

pub fn into_handle<T>(value: T) -> jlong {
    Box::into_raw(Box::new(RwLock::new(value))) as jlong
}

fn cell<'a, T>(handle: jlong) -> &'a RwLock<T> {
    // Borrow only: the box stays alive until drop_handle runs
    unsafe { &*(handle as *const RwLock<T>) }
}

pub fn with_shared<T, R, F: FnOnce(&T) -> R>(handle: jlong, f: F) -> R {
    let guard = cell::<T>(handle).read().expect("Failed to read RwLock");
    f(&guard)
}

pub fn with_exclusive<T, R, F: FnOnce(&mut T) -> R>(handle: jlong, f: F) -> R {
    let mut guard = cell::<T>(handle).write().expect("Failed to lock RwLock");
    f(&mut guard)
}

/// # Safety
/// `handle` must come from `into_handle::<T>` and must not be used afterwards.
pub unsafe fn drop_handle<T>(handle: jlong) {
    drop(Box::from_raw(handle as *mut RwLock<T>));
}

pub fn object_to_java<'local, T: JavaClass>(env: &mut JNIEnv<'local>, value: T) -> JObject<'local> {
    let obj = env
        .new_object(T::PATH, "()V", &[])
        .unwrap_or_else(|e| panic!("failed to instantiate class {}: {e}", T::PATH));
    env.set_field(&obj, "handle", "J", JValue::Long(into_handle(value)))
        .unwrap_or_else(|e| panic!("Failed to set handle pointer for java object {}: {e}", T::PATH));
    obj
}

pub fn handle_of<'local>(env: &mut JNIEnv<'local>, obj: &JObject<'local>) -> jlong {
    env.get_field(obj, "handle", "J")
        .and_then(|value| value.j())
        .expect("failed to read handle field")
}

pub fn object_from_java<'local, T: JavaClass + Clone>(env: &mut JNIEnv<'local>, obj: &JObject<'local>) -> T {
    let handle = handle_of(env, obj);
    with_shared(handle, |value: &T| value.clone())
}

pub fn string_to_java<'local>(env: &mut JNIEnv<'local>, value: String) -> JString<'local> {
    env.new_string(value).expect("failed to create java string")
}

pub fn string_from_java<'local>(env: &mut JNIEnv<'local>, value: &JString<'local>) -> String {
    env.get_string(value).expect("failed to read java string").into()
}

pub fn bytes_to_java<'local>(env: &mut JNIEnv<'local>, value: Vec<u8>) -> JByteArray<'local> {
    let array = env
        .new_byte_array(value.len() as jsize)
        .expect("failed to allocate byte array");
    for (idx, byte) in value.into_iter().enumerate() {
        env.set_byte_array_region(&array, idx as jsize, &[byte as i8])
            .expect("failed to set byte array element");
    }
    array
}

pub fn bytes_from_java<'local>(env: &mut JNIEnv<'local>, value: &JByteArray<'local>) -> Vec<u8> {
    env.convert_byte_array(value).expect("failed to read byte array")
}

pub fn bool_array_to_java<'local>(env: &mut JNIEnv<'local>, value: Vec<bool>) -> JBooleanArray<'local> {
    let array = env
        .new_boolean_array(value.len() as jsize)
        .expect("failed to allocate boolean array");
    let raw: Vec<jboolean> = value.into_iter().map(jboolean::from).collect();
    env.set_boolean_array_region(&array, 0, &raw)
        .expect("failed to fill boolean array");
    array
}

pub fn bool_array_from_java<'local>(env: &mut JNIEnv<'local>, value: &JBooleanArray<'local>) -> Vec<bool> {
    let len = env.get_array_length(value).expect("failed to read array length");
    let mut raw = vec![0 as jboolean; len as usize];
    env.get_boolean_array_region(value, 0, &mut raw)
        .expect("failed to read boolean array");
    raw.into_iter().map(|b| b != 0).collect()
}

macro_rules! primitive_array {
    ($to:ident, $from:ident, $elem:ty, $array:ident, $new:ident, $set:ident, $get:ident) => {
        pub fn $to<'local>(env: &mut JNIEnv<'local>, value: Vec<$elem>) -> $array<'local> {
            let array = env
                .$new(value.len() as jsize)
                .expect(concat!("failed to allocate ", stringify!($array)));
            env.$set(&array, 0, &value)
                .expect(concat!("failed to fill ", stringify!($array)));
            array
        }

        pub fn $from<'local>(env: &mut JNIEnv<'local>, value: &$array<'local>) -> Vec<$elem> {
            let len = env.get_array_length(value).expect("failed to read array length");
            let mut out = vec![<$elem>::default(); len as usize];
            env.$get(value, 0, &mut out)
                .expect(concat!("failed to read ", stringify!($array)));
            out
        }
    };
}

primitive_array!(i8_array_to_java, i8_array_from_java, i8, JByteArray, new_byte_array, set_byte_array_region, get_byte_array_region);
primitive_array!(i16_array_to_java, i16_array_from_java, i16, JShortArray, new_short_array, set_short_array_region, get_short_array_region);
primitive_array!(i32_array_to_java, i32_array_from_java, i32, JIntArray, new_int_array, set_int_array_region, get_int_array_region);
primitive_array!(i64_array_to_java, i64_array_from_java, i64, JLongArray, new_long_array, set_long_array_region, get_long_array_region);
primitive_array!(f32_array_to_java, f32_array_from_java, f32, JFloatArray, new_float_array, set_float_array_region, get_float_array_region);
primitive_array!(f64_array_to_java, f64_array_from_java, f64, JDoubleArray, new_double_array, set_double_array_region, get_double_array_region);

pub fn strings_to_java<'local>(env: &mut JNIEnv<'local>, value: Vec<String>) -> JObjectArray<'local> {
    let prototype = env.new_string("").expect("failed to create java string");
    let class = env
        .get_object_class(&prototype)
        .expect("failed to find java.lang.String");
    let array = env
        .new_object_array(value.len() as jsize, class, &prototype)
        .expect("failed to allocate string array");
    for (idx, elem) in value.into_iter().enumerate() {
        let j_elem = string_to_java(env, elem);
        env.set_object_array_element(&array, idx as jsize, j_elem)
            .expect("failed to set string array element");
    }
    array
}

pub fn strings_from_java<'local>(env: &mut JNIEnv<'local>, value: &JObjectArray<'local>) -> Vec<String> {
    let len = env.get_array_length(value).expect("failed to read array length");
    (0..len)
        .map(|idx| {
            let j_obj = env
                .get_object_array_element(value, idx)
                .expect("failed to read string array element");
            string_from_java(env, &JString::from(j_obj))
        })
        .collect()
}

/// Object arrays need a prototype element to fix their runtime element type.
/// The prototype never escapes, so its handle is released before returning.
pub fn objects_to_java<'local, T: JavaClass + Default>(env: &mut JNIEnv<'local>, value: Vec<T>) -> JObjectArray<'local> {
    let prototype = object_to_java(env, T::default());
    let prototype_handle = handle_of(env, &prototype);
    let class = env
        .get_object_class(&prototype)
        .unwrap_or_else(|e| panic!("failed to find class {}: {e}", T::PATH));
    let array = env
        .new_object_array(value.len() as jsize, class, &prototype)
        .unwrap_or_else(|e| panic!("failed to allocate {} array: {e}", T::PATH));
    for (idx, elem) in value.into_iter().enumerate() {
        let j_elem = object_to_java(env, elem);
        env.set_object_array_element(&array, idx as jsize, j_elem)
            .expect("failed to set object array element");
    }
    unsafe { drop_handle::<T>(prototype_handle) };
    array
}

pub fn objects_from_java<'local, T: JavaClass + Clone>(env: &mut JNIEnv<'local>, value: &JObjectArray<'local>) -> Vec<T> {
    let len = env.get_array_length(value).expect("failed to read array length");
    (0..len)
        .map(|idx| {
            let j_obj = env
                .get_object_array_element(value, idx)
                .expect("failed to read object array element");
            object_from_java::<T>(env, &j_obj)
        })
        .collect()
}
'''
