"""
XML configuration file parsing for Kotlin/JNI bindings generator
"""

import sys
import tomllib
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field

from .constants import DEFAULT_KOTLIN_SOURCE_ROOT, DEFAULT_RUST_OUTPUT

LIBRARY_FILE_PATTERNS = {
    "darwin": "lib{name}.dylib",
    "linux": "lib{name}.so",
    "windows": "{name}.dll",
}


@dataclass
class BindingConfig:
    """Configuration for Kotlin bindings generation"""
    group: str | None = None
    package: str | None = None
    library: str | None = None
    platform: str | None = None
    source_dirs: list[str] = field(default_factory=list)
    source_files: list[str] = field(default_factory=list)
    excludes: list[tuple[str, bool]] = field(default_factory=list)
    kotlin_output: str = DEFAULT_KOTLIN_SOURCE_ROOT
    rust_output: str = DEFAULT_RUST_OUTPUT

    @property
    def project_root(self) -> str | None:
        if not self.group or not self.package:
            return None
        return f"{self.group}.{self.package}"


def _optional(element, name):
    value = element.get(name)
    return value.strip() if value is not None else None


def parse_config_file(config_path):
    """Parse XML configuration file and return BindingConfig object"""
    try:
        tree = ET.parse(config_path)
        root = tree.getroot()

        if root.tag != "bindings":
            raise ValueError(f"Expected root element 'bindings', got '{root.tag}'")

        config = BindingConfig(
            group=_optional(root, "group"),
            package=_optional(root, "package"),
            library=_optional(root, "library"),
            platform=_optional(root, "platform"),
        )

        if config.platform is not None:
            config.platform = config.platform.lower()
            if config.platform not in LIBRARY_FILE_PATTERNS:
                raise ValueError(
                    f"Invalid platform value '{config.platform}'. "
                    f"Must be one of: {', '.join(LIBRARY_FILE_PATTERNS)}"
                )

        for source_dir in root.findall("source_directory"):
            path = source_dir.get("path")
            if not path:
                raise ValueError("Source directory element missing 'path' attribute")
            config.source_dirs.append(path.strip())

        for source in root.findall("source"):
            path = source.get("file")
            if not path:
                raise ValueError("Source element missing 'file' attribute")
            config.source_files.append(path.strip())

        # Excludes support both simple and regex patterns
        for exclude in root.findall("exclude"):
            pattern = exclude.get("pattern")
            if not pattern:
                raise ValueError("Exclude element missing 'pattern' attribute")
            is_regex = exclude.get("regex", "false").lower() == "true"
            config.excludes.append((pattern.strip(), is_regex))

        kotlin_output = root.find("kotlin_output")
        if kotlin_output is not None:
            path = kotlin_output.get("path")
            if not path:
                raise ValueError("Kotlin output element missing 'path' attribute")
            config.kotlin_output = path.strip().rstrip("/")

        rust_output = root.find("rust_output")
        if rust_output is not None:
            path = rust_output.get("path")
            if not path:
                raise ValueError("Rust output element missing 'path' attribute")
            config.rust_output = path.strip().rstrip("/")

        return config

    except ET.ParseError as e:
        raise ValueError(f"XML parsing error: {e}")
    except FileNotFoundError:
        raise FileNotFoundError(f"Configuration file not found: {config_path}")


def read_crate_name(cargo_toml):
    """Name of the compiled library: [lib].name, else [package].name with dashes replaced"""
    try:
        with open(cargo_toml, "rb") as f:
            manifest = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Cargo.toml parsing error: {e}")
    except FileNotFoundError:
        raise FileNotFoundError(f"Cargo manifest not found: {cargo_toml}")

    name = manifest.get("lib", {}).get("name") or manifest.get("package", {}).get("name")
    if not name:
        raise ValueError(f"No [lib] or [package] name in {cargo_toml}")
    return name.replace("-", "_")


def native_library_filename(name, platform=None):
    """File name the JVM loader looks for inside the jar, e.g. libexample.dylib"""
    if platform is None:
        platform = "windows" if sys.platform.startswith("win") else sys.platform
        if platform not in LIBRARY_FILE_PATTERNS:
            platform = "linux"
    pattern = LIBRARY_FILE_PATTERNS.get(platform.lower())
    if pattern is None:
        raise ValueError(f"Unsupported platform: {platform}")
    return pattern.format(name=name)
