"""
Main Kotlin/JNI bindings generator orchestration
"""

import re
import sys
from dataclasses import dataclass
from fnmatch import fnmatch
from pathlib import Path

from .analyzer import SourceAnalyzer
from .code_generators import OutputBuilder, TrampolineGenerator, WrapperGenerator
from .config import native_library_filename
from .constants import (
    DEFAULT_KOTLIN_SOURCE_ROOT,
    DEFAULT_RUST_OUTPUT,
    REGISTRY_OBJECT,
    RESERVED_MODULE_NAMES,
    RUNTIME_MODULE,
)
from .descriptors import ClassDescriptor, DescriptorExtractor
from .errors import BindingError, OutputCollisionError
from .lookup import LookupBuilder, PackageLookup
from .type_mapper import TypeMapper


@dataclass(frozen=True)
class SourceUnit:
    """One Rust source file (or string) and the module path it is compiled as"""
    path: str
    text: str
    module_path: str = "crate"

    @classmethod
    def from_file(cls, path, src_root) -> "SourceUnit":
        path = Path(path)
        return cls(str(path), path.read_text(encoding="utf-8"), module_path_for(path, src_root))


def module_path_for(path, src_root) -> str:
    """Rust module path of a file below the crate's src directory

    src/lib.rs -> crate, src/a/mod.rs -> crate::a, src/a/b.rs -> crate::a::b
    """
    relative = Path(path).resolve().relative_to(Path(src_root).resolve())
    parts = list(relative.with_suffix("").parts)
    if parts and parts[-1] == "mod":
        parts.pop()
    if len(parts) == 1 and parts[0] in ("lib", "main"):
        parts = []
    return "::".join(["crate"] + parts)


def _is_excluded(relative: str, excludes) -> bool:
    for pattern, is_regex in excludes:
        if is_regex:
            if re.search(pattern, relative):
                return True
        elif fnmatch(relative, pattern) or pattern in relative.split("/"):
            return True
    return False


def discover_sources(src_root, excludes=(), skip_dirs=()) -> list[SourceUnit]:
    """Collect every *.rs file under src_root in a stable order"""
    src_root = Path(src_root)
    if not src_root.is_dir():
        raise FileNotFoundError(f"Source directory not found: {src_root}")
    skipped = [Path(d).resolve() for d in skip_dirs]
    units = []
    for path in sorted(src_root.rglob("*.rs")):
        resolved = path.resolve()
        if any(resolved.is_relative_to(d) for d in skipped):
            continue
        relative = path.relative_to(src_root).as_posix()
        if _is_excluded(relative, excludes):
            continue
        units.append(SourceUnit.from_file(path, src_root))
    return units


@dataclass(frozen=True)
class GeneratedArtifact:
    """One generated file; the writer places it according to its package path"""
    target_package_path: str
    class_name: str
    source_text: str
    language: str = "kotlin"

    def relative_path(self, kotlin_root: str = DEFAULT_KOTLIN_SOURCE_ROOT,
                      rust_root: str = DEFAULT_RUST_OUTPUT) -> str:
        if self.language == "kotlin":
            package_dir = self.target_package_path.replace(".", "/")
            return f"{kotlin_root}/{package_dir}/{self.class_name}.kt"
        return f"{rust_root}/{self.class_name}.rs"


class KotlinBindingsGenerator:
    """Main orchestrator for generating Kotlin bindings from annotated Rust code"""

    def __init__(self, project_root: str, library_name: str, platform: str = None,
                 kotlin_source_root: str = DEFAULT_KOTLIN_SOURCE_ROOT,
                 rust_output: str = DEFAULT_RUST_OUTPUT):
        self.project_root = project_root
        self.library_name = library_name
        self.library_file = native_library_filename(library_name, platform)
        self.kotlin_source_root = kotlin_source_root
        self.rust_output = rust_output

        self.type_mapper = TypeMapper()
        self.analyzer = SourceAnalyzer()
        self.extractor = DescriptorExtractor()

    def build_lookup(self, sources: list[SourceUnit]) -> PackageLookup:
        """Pass 1: register every annotated type; must finish before any generation"""
        return LookupBuilder(self.analyzer).build(sources)

    def generate_unit(self, source: SourceUnit, lookup: PackageLookup):
        """Pass 2 for one source unit

        Returns (class descriptors, artifacts): one Kotlin wrapper and one Rust
        trampoline module per annotated impl block.
        """
        trampolines = TrampolineGenerator(self.type_mapper, lookup)
        wrappers = WrapperGenerator(self.type_mapper, lookup, self.project_root, self.library_file)

        classes, artifacts = [], []
        try:
            for block in self.analyzer.analyze(source.text, str(source.path), source.module_path):
                cls = self.extractor.extract(block)
                artifacts.append(GeneratedArtifact(
                    cls.declared_namespace, cls.native_type_name,
                    wrappers.generate_class(cls), "kotlin",
                ))
                artifacts.append(GeneratedArtifact(
                    cls.declared_namespace, cls.rust_module_name,
                    trampolines.generate_class(cls), "rust",
                ))
                classes.append(cls)
        except BindingError as e:
            raise e.add_context(f"while processing {source.path}")
        return classes, artifacts

    def support_artifacts(self, classes: list[ClassDescriptor]) -> list[GeneratedArtifact]:
        """Registry object, Rust runtime module and the bindings module index"""
        return [
            GeneratedArtifact(self.project_root, REGISTRY_OBJECT,
                              OutputBuilder.build_registry(self.project_root), "kotlin"),
            GeneratedArtifact("", RUNTIME_MODULE, OutputBuilder.build_runtime(), "rust"),
            GeneratedArtifact("", "mod", OutputBuilder.build_module_index(classes), "rust"),
        ]

    def check_output_collisions(self, classes: list[ClassDescriptor]):
        """Each class needs its own Rust module file, distinct from the support files"""
        owners = {name: f"support module `{name}`" for name in RESERVED_MODULE_NAMES}
        for cls in classes:
            module = cls.rust_module_name
            if module in owners:
                raise OutputCollisionError(f"{self.rust_output}/{module}.rs", owners[module], cls.package_path)
            owners[module] = cls.package_path
            if cls.declared_namespace == self.project_root and cls.native_type_name == REGISTRY_OBJECT:
                raise OutputCollisionError(
                    f"{REGISTRY_OBJECT}.kt", f"registry object `{REGISTRY_OBJECT}`", cls.package_path
                )

    def generate(self, sources: list[SourceUnit], output: str = None) -> dict[str, str]:
        """Generate every artifact; files are written only if the whole run succeeds

        Args:
            sources: Source units to scan (order does not matter)
            output: Optional crate root to write into; nothing is written if omitted

        Returns:
            Mapping of relative output path to file content
        """
        lookup = self.build_lookup(sources)
        print(f"Registered {len(lookup)} java_class type(s)")

        classes, artifacts = [], []
        for source in sources:
            print(f"Processing: {source.path}")
            unit_classes, unit_artifacts = self.generate_unit(source, lookup)
            classes.extend(unit_classes)
            artifacts.extend(unit_artifacts)

        self.check_output_collisions(classes)
        if not classes:
            print("Warning: no #[java_class] impl blocks found", file=sys.stderr)
        artifacts.extend(self.support_artifacts(classes))

        files = {}
        for artifact in artifacts:
            files[artifact.relative_path(self.kotlin_source_root, self.rust_output)] = artifact.source_text

        if output:
            output_path = Path(output)
            for relative, content in files.items():
                path = output_path / relative
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(content, encoding="utf-8")
                print(f"Generated: {path}")

        return files

    def generate_from_directory(self, src_root: str, output: str = None, excludes=()) -> dict[str, str]:
        """Discover the crate's sources, skipping previously generated bindings, and generate"""
        skip = []
        if output:
            skip.append(Path(output) / self.rust_output)
        sources = discover_sources(src_root, excludes, skip)
        return self.generate(sources, output)
