"""
Pytest configuration and fixtures
"""

import pytest

from jni_binding_generator.generator import SourceUnit


TOKENIZER_SOURCE = """
use std::str::FromStr;

pub struct Tokenizer {
    inner: tokenizers::Tokenizer,
}

#[java_class("dev.gigapixel.tokenizers")]
impl Tokenizer {
    pub fn new_from_bytes(bytes: Vec<u8>) -> Self {
        Tokenizer {
            inner: tokenizers::Tokenizer::from_bytes(bytes).unwrap(),
        }
    }

    pub fn tokenize(&self, text: String) -> Vec<String> {
        self.inner.encode(text, false).unwrap().get_tokens().to_vec()
    }
}
"""

SHAPES_SOURCE = """
#[derive(Clone, Default)]
pub struct Point {
    x: f64,
    y: f64,
}

#[java_class("dev.gigapixel.shapes")]
impl Point {
    pub fn new(x: f64, y: f64) -> Point {
        Point { x, y }
    }

    pub fn x(&self) -> f64 {
        self.x
    }

    pub fn translate(&mut self, dx: f64, dy: f64) {
        self.x += dx;
        self.y += dy;
    }

    pub fn distance_to(&self, other: Point) -> f64 {
        ((self.x - other.x).powi(2) + (self.y - other.y).powi(2)).sqrt()
    }

    pub fn grid(n: i32) -> Vec<Self> {
        (0..n).map(|i| Point { x: i as f64, y: 0.0 }).collect()
    }

    pub fn label(&self, r#type: String) -> String {
        format!("{}({}, {})", r#type, self.x, self.y)
    }
}
"""

STORE_SOURCE = """
pub struct Store;

#[java_class("dev.gigapixel.store")]
impl Store {
    pub fn get(&self, handle: i64, env: String) -> i64 {
        handle + env.len() as i64
    }

    pub fn object(&self) -> i32 {
        0
    }

    pub fn when() -> Self {
        Store
    }
}
"""

LIB_SOURCE = """
mod tokenizer;
mod shapes;
mod jni_bindings;
"""


@pytest.fixture
def tokenizer_source():
    """Single annotated impl block with one static and one instance method"""
    return TOKENIZER_SOURCE


@pytest.fixture
def shapes_source():
    """Annotated type using Self, object arrays and unit returns"""
    return SHAPES_SOURCE


@pytest.fixture
def tokenizer_unit():
    return SourceUnit("src/tokenizer.rs", TOKENIZER_SOURCE, "crate::tokenizer")


@pytest.fixture
def shapes_unit():
    return SourceUnit("src/shapes/mod.rs", SHAPES_SOURCE, "crate::shapes")


@pytest.fixture
def store_unit():
    """Annotated type whose names collide with implicit arguments and Kotlin keywords"""
    return SourceUnit("src/store.rs", STORE_SOURCE, "crate::store")


@pytest.fixture
def sample_crate(tmp_path):
    """Create a small Cargo crate with two annotated types in separate modules"""
    crate = tmp_path / "crate"
    src = crate / "src"
    (src / "shapes").mkdir(parents=True)

    (crate / "Cargo.toml").write_text("""
[package]
name = "example-lib"
version = "0.1.0"
edition = "2021"

[lib]
crate-type = ["cdylib"]

[dependencies]
jni = "0.21"
""")
    (src / "lib.rs").write_text(LIB_SOURCE)
    (src / "tokenizer.rs").write_text(TOKENIZER_SOURCE)
    (src / "shapes" / "mod.rs").write_text(SHAPES_SOURCE)

    return crate


@pytest.fixture
def duplicate_crate(tmp_path):
    """Two annotated SomeStruct blocks in different files"""
    crate = tmp_path / "dup_crate"
    src = crate / "src"
    src.mkdir(parents=True)

    (crate / "Cargo.toml").write_text('[package]\nname = "dup"\nversion = "0.1.0"\n')
    (src / "lib.rs").write_text("""
pub struct SomeStruct;

#[java_class("beep.boop")]
impl SomeStruct {
    pub fn new() -> Self {
        SomeStruct
    }
}
""")
    (src / "other.rs").write_text("""
pub struct SomeStruct;

#[java_class("beep.boop")]
impl SomeStruct {
    pub fn ping(&self) -> i32 {
        1
    }
}
""")
    return crate
