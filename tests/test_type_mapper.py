"""
Unit tests for TypeMapper
"""

import pytest

from jni_binding_generator.constants import KOTLIN_TYPE_MAP, MarshalStrategy
from jni_binding_generator.errors import (
    ErrorKind,
    UnmappedTypeError,
    UnresolvedSelfReferenceError,
)
from jni_binding_generator.lookup import PackageLookup
from jni_binding_generator.type_mapper import TypeMapper


EXPECTED_TABLE = [
    ("bool", "Boolean", MarshalStrategy.SCALAR),
    ("i8", "Byte", MarshalStrategy.SCALAR),
    ("i16", "Short", MarshalStrategy.SCALAR),
    ("i32", "Int", MarshalStrategy.SCALAR),
    ("i64", "Long", MarshalStrategy.SCALAR),
    ("f32", "Float", MarshalStrategy.SCALAR),
    ("f64", "Double", MarshalStrategy.SCALAR),
    ("String", "String", MarshalStrategy.STRING),
    ("Vec<u8>", "ByteArray", MarshalStrategy.BYTE_SEQUENCE),
    ("Vec<bool>", "BooleanArray", MarshalStrategy.PRIMITIVE_ARRAY),
    ("Vec<i8>", "ByteArray", MarshalStrategy.PRIMITIVE_ARRAY),
    ("Vec<i16>", "ShortArray", MarshalStrategy.PRIMITIVE_ARRAY),
    ("Vec<i32>", "IntArray", MarshalStrategy.PRIMITIVE_ARRAY),
    ("Vec<i64>", "LongArray", MarshalStrategy.PRIMITIVE_ARRAY),
    ("Vec<f32>", "FloatArray", MarshalStrategy.PRIMITIVE_ARRAY),
    ("Vec<f64>", "DoubleArray", MarshalStrategy.PRIMITIVE_ARRAY),
    ("Vec<String>", "Array<String>", MarshalStrategy.STRING_ARRAY),
]


def make_lookup(**entries):
    lookup = PackageLookup()
    for type_name, namespace in entries.items():
        lookup.register(type_name, namespace)
    return lookup.freeze()


class TestTypeMapper:
    """Test the TypeMapper class"""

    def setup_method(self):
        """Create a TypeMapper instance for each test"""
        self.mapper = TypeMapper()

    @pytest.mark.parametrize("native,kotlin,strategy", EXPECTED_TABLE)
    def test_table_entry(self, native, kotlin, strategy):
        """Test that every table entry maps to one Kotlin type and strategy"""
        mapping = self.mapper.map_type(native)
        assert mapping.kotlin == kotlin
        assert mapping.strategy is strategy
        assert not mapping.is_class

    def test_table_is_complete(self):
        """Test that the mapping table holds exactly the supported vocabulary"""
        assert sorted(self.mapper.supported_types()) == sorted(row[0] for row in EXPECTED_TABLE)
        assert set(KOTLIN_TYPE_MAP) == {row[0] for row in EXPECTED_TABLE}

    def test_spacing_is_ignored(self):
        """Test that whitespace inside a spelling does not change the mapping"""
        assert self.mapper.map_type("Vec < String >").kotlin == "Array<String>"

    @pytest.mark.parametrize("spelling", [
        "HashMap<String,String>",
        "u8",
        "usize",
        "&str",
        "Option<i32>",
        "Vec<Vec<u8>>",
    ])
    def test_unmapped_types(self, spelling):
        """Test that anything outside the table fails naming the exact spelling"""
        with pytest.raises(UnmappedTypeError) as exc_info:
            self.mapper.map_type(spelling)

        assert exc_info.value.kind is ErrorKind.UNMAPPED_TYPE
        assert exc_info.value.spelling == spelling
        assert f"`{spelling}`" in str(exc_info.value)

    def test_scalar_conversions(self):
        """Test that integer scalars pass through and bool is converted"""
        assert self.mapper.map_type("i32").from_managed_expr("j_x") == "j_x"
        assert self.mapper.map_type("bool").from_managed_expr("j_flag") == "j_flag != 0"
        assert self.mapper.map_type("bool").to_managed_expr("result") == "jboolean::from(result)"

    def test_string_conversions(self):
        """Test the runtime helpers used for strings"""
        mapping = self.mapper.map_type("String")
        assert mapping.jni == "JString<'local>"
        assert mapping.from_managed_expr("j_text") == "runtime::string_from_java(&mut env, &j_text)"
        assert mapping.to_managed_expr("result") == "runtime::string_to_java(&mut env, result)"


class TestClassResolution:
    """Resolution of Self and annotated classes through the lookup"""

    def setup_method(self):
        self.mapper = TypeMapper()
        self.lookup = make_lookup(
            Tokenizer="dev.gigapixel.tokenizers",
            Point="dev.gigapixel.shapes",
        )

    def test_self_resolves_to_owner(self):
        """Test that Self maps to the owning class's qualified path"""
        mapping = self.mapper.resolve("Self", "Tokenizer", self.lookup)

        assert mapping.strategy is MarshalStrategy.OBJECT
        assert mapping.kotlin == "dev.gigapixel.tokenizers.Tokenizer"
        assert mapping.native == "Tokenizer"
        assert mapping.is_class

    def test_other_annotated_class(self):
        """Test that another annotated class resolves through the lookup"""
        mapping = self.mapper.resolve("Point", "Tokenizer", self.lookup)
        assert mapping.kotlin == "dev.gigapixel.shapes.Point"
        assert mapping.from_managed_expr("j_p") == "runtime::object_from_java::<Point>(&mut env, &j_p)"

    def test_vec_of_self(self):
        """Test that Vec<Self> is an object array of the owner"""
        mapping = self.mapper.resolve("Vec<Self>", "Point", self.lookup)

        assert mapping.strategy is MarshalStrategy.OBJECT_ARRAY
        assert mapping.kotlin == "Array<dev.gigapixel.shapes.Point>"
        assert mapping.native == "Vec<Point>"
        assert mapping.element_class == "dev.gigapixel.shapes.Point"

    def test_vec_of_other_class(self):
        """Test that Vec<Tokenizer> is an object array"""
        mapping = self.mapper.resolve("Vec<Tokenizer>", "Point", self.lookup)
        assert mapping.kotlin == "Array<dev.gigapixel.tokenizers.Tokenizer>"

    def test_table_types_still_resolve(self):
        """Test that non-class types go through the table"""
        assert self.mapper.resolve("Vec<u8>", "Tokenizer", self.lookup).kotlin == "ByteArray"

    def test_unannotated_struct_is_unmapped(self):
        """Test that a struct missing from the lookup is an unmapped type"""
        with pytest.raises(UnmappedTypeError, match="Plain"):
            self.mapper.resolve("Plain", "Tokenizer", self.lookup)

    def test_self_with_unregistered_owner(self):
        """Test that Self fails when the owner is missing from the lookup"""
        with pytest.raises(UnresolvedSelfReferenceError) as exc_info:
            self.mapper.resolve("Self", "Ghost", self.lookup)
        assert exc_info.value.kind is ErrorKind.UNRESOLVED_SELF_REFERENCE
        assert "Ghost" in str(exc_info.value)
