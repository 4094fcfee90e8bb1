"""
Type mapping logic for converting Rust boundary types to Kotlin/JNI types
"""

import re
from dataclasses import dataclass

from .constants import (
    KOTLIN_TYPE_MAP,
    OBJECT_ARRAY_MAPPING,
    OBJECT_MAPPING,
    SELF_TYPE,
    MarshalStrategy,
)
from .errors import UnmappedTypeError, UnresolvedSelfReferenceError
from .syntax import canonical_spelling

_VEC = re.compile(r"^Vec<(.+)>$")


@dataclass(frozen=True)
class TypeMapping:
    """One row of the mapping table, both marshaling directions included"""
    native: str
    kotlin: str
    strategy: MarshalStrategy
    jni: str
    to_managed: str
    from_managed: str
    element_class: str | None = None  # qualified Kotlin class for OBJECT/OBJECT_ARRAY

    @property
    def is_class(self) -> bool:
        return self.strategy in (MarshalStrategy.OBJECT, MarshalStrategy.OBJECT_ARRAY)

    def to_managed_expr(self, value: str) -> str:
        return self.to_managed.format(value=value)

    def from_managed_expr(self, value: str) -> str:
        return self.from_managed.format(value=value)


class TypeMapper:
    """Maps Rust boundary types to Kotlin types and marshaling strategies"""

    def __init__(self):
        self.type_map = {
            native: TypeMapping(native, kotlin, strategy, jni, to_managed, from_managed)
            for native, (kotlin, strategy, jni, to_managed, from_managed) in KOTLIN_TYPE_MAP.items()
        }

    def supported_types(self) -> list[str]:
        return list(self.type_map)

    def map_type(self, spelling: str) -> TypeMapping:
        """Look up a non-class type; anything outside the table is an error"""
        mapping = self.type_map.get(canonical_spelling(spelling))
        if mapping is None:
            raise UnmappedTypeError(spelling)
        return mapping

    def resolve(self, spelling: str, owner: str, lookup) -> TypeMapping:
        """Map a type as seen from inside `owner`'s impl block

        Self and annotated classes resolve through the lookup; everything
        else goes to the mapping table.
        """
        spelling = canonical_spelling(spelling)

        class_name = self._class_reference(spelling, owner, lookup)
        if class_name is not None:
            jni, to_managed, from_managed = OBJECT_MAPPING
            qualified = lookup[class_name]
            return TypeMapping(
                native=class_name,
                kotlin=qualified,
                strategy=MarshalStrategy.OBJECT,
                jni=jni,
                to_managed=to_managed,
                from_managed=from_managed.replace("{element}", class_name),
                element_class=qualified,
            )

        if m := _VEC.match(spelling):
            element = self._class_reference(m.group(1), owner, lookup)
            if element is not None:
                jni, to_managed, from_managed = OBJECT_ARRAY_MAPPING
                qualified = lookup[element]
                return TypeMapping(
                    native=f"Vec<{element}>",
                    kotlin=f"Array<{qualified}>",
                    strategy=MarshalStrategy.OBJECT_ARRAY,
                    jni=jni,
                    to_managed=to_managed,
                    from_managed=from_managed.replace("{element}", element),
                    element_class=qualified,
                )

        return self.map_type(spelling)

    @staticmethod
    def _class_reference(spelling: str, owner: str, lookup) -> str | None:
        """Return the annotated class a spelling refers to, if any"""
        if spelling == SELF_TYPE:
            if owner not in lookup:
                raise UnresolvedSelfReferenceError(owner)
            return owner
        if spelling in lookup:
            return spelling
        return None
