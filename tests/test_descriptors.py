"""
Tests for method and class descriptor extraction
"""

import pytest

from jni_binding_generator.analyzer import SourceAnalyzer
from jni_binding_generator.descriptors import (
    DescriptorExtractor,
    ReceiverKind,
    camel_case,
    snake_case,
)
from jni_binding_generator.errors import (
    ErrorKind,
    InvalidReceiverError,
    ParseError,
    ReservedNameError,
)


def extract(source):
    blocks = SourceAnalyzer().analyze(source, "src/lib.rs")
    extractor = DescriptorExtractor()
    return [extractor.extract(block) for block in blocks]


def single_class(body, type_name="Thing", namespace="a.b"):
    return extract(f'#[java_class("{namespace}")]\nimpl {type_name} {{\n{body}\n}}\n')[0]


class TestNameConversion:
    """Rust to Kotlin identifier conversion"""

    @pytest.mark.parametrize("name,expected", [
        ("new_from_bytes", "newFromBytes"),
        ("tokenize", "tokenize"),
        ("distance_to", "distanceTo"),
        ("already_camelCase", "alreadyCamelCase"),
        ("x", "x"),
    ])
    def test_camel_case(self, name, expected):
        """Test snake_case to lowerCamelCase"""
        assert camel_case(name) == expected

    @pytest.mark.parametrize("name,expected", [
        ("Tokenizer", "tokenizer"),
        ("SomeStruct", "some_struct"),
        ("HTTPClient", "http_client"),
    ])
    def test_snake_case(self, name, expected):
        """Test type names to Rust module names"""
        assert snake_case(name) == expected


class TestReceivers:
    """Receiver classification"""

    def test_tokenizer_receivers(self, tokenizer_source):
        """Test the tokenizer scenario: one static and one shared method"""
        cls = extract(tokenizer_source)[0]

        assert cls.native_type_name == "Tokenizer"
        assert cls.package_path == "dev.gigapixel.tokenizers.Tokenizer"
        assert cls.jvm_path == "dev/gigapixel/tokenizers/Tokenizer"
        new, tokenize = cls.methods
        assert new.receiver_kind is ReceiverKind.NONE
        assert new.kotlin_name == "newFromBytes"
        assert new.extern_name == "newFromBytesExtern"
        assert tokenize.receiver_kind is ReceiverKind.SHARED
        assert [m.name for m in cls.static_methods] == ["new_from_bytes"]
        assert [m.name for m in cls.instance_methods] == ["tokenize"]

    def test_exclusive_receiver(self):
        """Test that &mut self is an exclusive receiver"""
        cls = single_class("fn bump(&mut self, by: i32) {}")
        assert cls.methods[0].receiver_kind is ReceiverKind.EXCLUSIVE
        assert not cls.methods[0].is_static

    def test_by_value_self_rejected(self):
        """Test that a by-value self raises InvalidReceiver naming the method"""
        with pytest.raises(InvalidReceiverError) as exc_info:
            single_class("fn consume(self) -> i32 { 0 }")

        error = exc_info.value
        assert error.kind is ErrorKind.INVALID_RECEIVER
        assert error.class_name == "Thing"
        assert error.method_name == "consume"
        assert error.token == "self"
        assert "in fn consume of impl Thing" in str(error)

    def test_mut_by_value_self_rejected(self):
        """Test that `mut self` is still by value"""
        with pytest.raises(InvalidReceiverError):
            single_class("fn consume(mut self) {}")

    def test_boxed_self_rejected(self):
        """Test that `self: Box<Self>` is rejected"""
        with pytest.raises(InvalidReceiverError):
            single_class("fn consume(self: Box<Self>) {}")


class TestParameters:
    """Parameter and return type extraction"""

    def test_parameters_in_order(self):
        """Test that parameter names and types keep declaration order"""
        method = single_class("fn f(a: i32, b: String, c: Vec<u8>) {}").methods[0]
        assert [(p.name, p.native_type) for p in method.parameters] == [
            ("a", "i32"), ("b", "String"), ("c", "Vec<u8>"),
        ]

    def test_underscore_parameter_gets_name(self):
        """Test that `_` parameters get a positional name"""
        method = single_class("fn f(_: i32, y: i32) {}").methods[0]
        assert [p.name for p in method.parameters] == ["arg0", "y"]

    def test_raw_identifier_parameter(self):
        """Test that r#type keeps its Rust spelling but not in Kotlin/JNI names"""
        param = single_class("fn f(r#type: String) {}").methods[0].parameters[0]
        assert param.name == "r#type"
        assert param.kotlin_name == "type"
        assert param.jni_name == "j_type"
        assert param.local_name == "arg_type"

    def test_snake_case_parameter_names(self):
        """Test Kotlin parameter names are camel-cased"""
        param = single_class("fn f(max_len: i32) {}").methods[0].parameters[0]
        assert param.kotlin_name == "maxLen"
        assert param.jni_name == "j_max_len"

    def test_destructuring_pattern_rejected(self):
        """Test that tuple patterns cannot cross the boundary"""
        with pytest.raises(ParseError, match="unsupported parameter pattern"):
            single_class("fn f((a, b): (i32, i32)) {}")

    def test_unit_return_is_none(self):
        """Test that missing and explicit unit returns both become None"""
        cls = single_class("fn f() {}\nfn g() -> () {}")
        assert [m.return_type for m in cls.methods] == [None, None]

    def test_self_return_type(self):
        """Test that returning Self is recognized"""
        method = single_class("fn new() -> Self { Thing }").methods[0]
        assert method.returns_self

    def test_reserved_drop_name(self):
        """Test that a method colliding with the drop entry point is rejected"""
        with pytest.raises(ReservedNameError, match="dropByHandleExtern"):
            single_class("fn drop_by_handle(&self) {}")

    @pytest.mark.parametrize("name,kotlin", [
        ("to_string", "toString"),
        ("hash_code", "hashCode"),
        ("equals", "equals"),
    ])
    def test_any_member_names_rejected(self, name, kotlin):
        """Test that methods clashing with kotlin.Any members are rejected"""
        with pytest.raises(ReservedNameError) as exc_info:
            single_class(f"fn {name}(&self) -> String {{ String::new() }}")
        assert exc_info.value.kind is ErrorKind.RESERVED_NAME
        assert f"`{kotlin}`" in str(exc_info.value)

    def test_native_handle_parameter_rejected(self):
        """Test that the external stub's leading parameter name is reserved"""
        with pytest.raises(ReservedNameError, match="nativeHandle"):
            single_class("fn f(&self, native_handle: i64) {}")

    def test_handle_and_env_parameters_allowed(self):
        """Test that parameters may reuse the names of the implicit arguments"""
        method = single_class("fn get(&self, handle: i64, env: String) -> i64 { handle }").methods[0]
        assert [p.kotlin_name for p in method.parameters] == ["handle", "env"]
        assert [p.local_name for p in method.parameters] == ["arg_handle", "arg_env"]

    def test_parameter_kotlin_name_collision(self):
        """Test that parameters camel-casing to the same Kotlin name are rejected"""
        with pytest.raises(ParseError, match="both map to Kotlin name `fooBar`") as exc_info:
            single_class("fn f(foo_bar: i32, fooBar: i32) {}")
        assert exc_info.value.source == "src/lib.rs"
        assert "in fn f of impl Thing" in str(exc_info.value)

    def test_positional_name_collision(self):
        """Test that an explicit arg0 clashes with the name given to `_`"""
        with pytest.raises(ParseError, match="`arg0`"):
            single_class("fn f(_: i32, arg0: i32) {}")

    def test_method_kotlin_name_collision(self):
        """Test that methods camel-casing to the same Kotlin name are rejected"""
        with pytest.raises(ParseError, match="fn foo_bar and fn fooBar") as exc_info:
            single_class("fn foo_bar(&self) {}\nfn fooBar(&self) {}")
        assert exc_info.value.line == 4

    def test_source_and_module_recorded(self):
        """Test that class descriptors remember where they came from"""
        blocks = SourceAnalyzer().analyze('#[java_class("a.b")]\nimpl T {\n fn f() {}\n}\n', "src/x.rs", "crate::x")
        cls = DescriptorExtractor().extract(blocks[0])
        assert cls.source == "src/x.rs"
        assert cls.module_path == "crate::x"
        assert cls.rust_module_name == "t"
