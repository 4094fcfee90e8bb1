"""
Global lookup from bare Rust type name to fully-qualified Kotlin class path
"""

from .analyzer import SourceAnalyzer
from .errors import BindingError, DuplicateClassRegistrationError


class PackageLookup:
    """Maps `TypeName -> namespace.TypeName`

    Filled during the first pass only; freeze() makes it read-only before
    code generation starts.
    """

    def __init__(self):
        self._entries: dict[str, str] = {}
        self._origins: dict[str, str] = {}
        self._frozen = False

    def register(self, type_name: str, namespace: str, origin: str = None) -> str:
        """Insert a class; a second registration of the same name is an error"""
        if self._frozen:
            raise RuntimeError("PackageLookup is frozen; register() is only valid during the lookup pass")
        if type_name in self._entries:
            raise DuplicateClassRegistrationError(type_name, self._origins.get(type_name), origin)
        path = f"{namespace}.{type_name}"
        self._entries[type_name] = path
        self._origins[type_name] = origin
        return path

    def freeze(self) -> "PackageLookup":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, type_name: str, default=None):
        return self._entries.get(type_name, default)

    def origin(self, type_name: str) -> str | None:
        return self._origins.get(type_name)

    def as_dict(self) -> dict[str, str]:
        return dict(self._entries)

    def __getitem__(self, type_name: str) -> str:
        return self._entries[type_name]

    def __contains__(self, type_name) -> bool:
        return type_name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"PackageLookup({self._entries!r})"


class LookupBuilder:
    """First pass: scan every source unit and register its annotated types"""

    def __init__(self, analyzer: SourceAnalyzer = None):
        self.analyzer = analyzer or SourceAnalyzer()

    def build(self, sources) -> PackageLookup:
        """Build and freeze the lookup from an iterable of SourceUnit-like objects

        Each source needs `text`, `path` and `module_path` attributes.
        """
        lookup = PackageLookup()
        for source in sources:
            self.fill(lookup, source.text, str(source.path), source.module_path)
        return lookup.freeze()

    def fill(self, lookup: PackageLookup, text: str, source: str = "<string>", module_path: str = "crate"):
        """Register the annotated blocks of one source unit"""
        try:
            for block in self.analyzer.analyze(text, source, module_path):
                lookup.register(block.type_name, block.namespace, f"{source}:{block.line}")
        except BindingError as e:
            raise e.add_context(f"while building the class lookup from {source}")
