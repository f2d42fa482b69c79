"""
Type mapping logic for converting C type references to C# types
"""

from typing import NamedTuple

from .constants import (
    BOOLEAN_TYPES,
    CSHARP_TYPE_MAP,
    FALLBACK_POINTER_TYPE,
    FALLBACK_VALUE_TYPE,
)
from .diagnostics import Diagnostics
from .model import (
    ArrayType,
    Enum,
    ForeignModel,
    FunctionType,
    NamedType,
    OpaqueClass,
    PointerType,
    PrimitiveType,
    Struct,
    Typedef,
    UnknownType,
)
from .naming import NameResolver


class TranslatedType(NamedTuple):
    cs_type: str
    is_boolean: bool = False


class TypeMapper:
    """Maps foreign type references to C# types

    Precedence for a single reference: explicit override string, then the
    one-byte boolean shape, then the structural translation.
    """

    def __init__(self, model: ForeignModel, config, resolver: NameResolver = None,
                 diagnostics: Diagnostics = None):
        self.model = model
        self.config = config
        self.resolver = resolver if resolver is not None else NameResolver(config.prefixes)
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.type_map = CSHARP_TYPE_MAP.copy()
        # Class name -> is opaque, filled by the opaque alias emitter
        self.class_types: dict[str, bool] = {}

    def register_class(self, name: str, is_opaque: bool):
        self.class_types[name] = is_opaque

    @property
    def opaque_types(self) -> set[str]:
        return {name for name, opaque in self.class_types.items() if opaque}

    def host_type_name(self, name: str) -> str:
        """C# name of a struct, enum or opaque type"""
        override = self.config.type_override(name)
        if override is not None and override.cs_type:
            return override.cs_type
        return self.resolver.clean(name)

    def delegate_name(self, name: str) -> str:
        override = self.config.callable_override(name)
        if override is not None and override.cs_type:
            return override.cs_type
        return self.resolver.clean(name)

    def translate(self, ctype, override: str | None = None) -> TranslatedType:
        if override:
            return TranslatedType(override)
        if self.is_boolean(ctype):
            return TranslatedType("bool", True)
        return TranslatedType(self.storage_type(ctype))

    def is_boolean(self, ctype) -> bool:
        seen = set()
        while isinstance(ctype, NamedType) and ctype.name not in seen:
            seen.add(ctype.name)
            decl = self.model.get(ctype.name)
            if not isinstance(decl, Typedef):
                return False
            ctype = decl.aliased
        return isinstance(ctype, PrimitiveType) and ctype.name in BOOLEAN_TYPES

    def storage_type(self, ctype) -> str:
        """Structural translation, ignoring overrides and boolean semantics"""
        return self._map_value(ctype, frozenset())

    def _map_value(self, ctype, resolving) -> str:
        if isinstance(ctype, PrimitiveType):
            if ctype.name in self.type_map:
                return self.type_map[ctype.name]
            return self._fallback(ctype, FALLBACK_VALUE_TYPE)

        if isinstance(ctype, PointerType):
            return self._map_pointer(ctype.pointee, resolving)

        if isinstance(ctype, ArrayType):
            # Arrays decay to pointers outside of struct fields
            return self._map_pointer(ctype.element, resolving)

        if isinstance(ctype, NamedType):
            decl = self.model.get(ctype.name)
            if isinstance(decl, (Struct, Enum)):
                return self.host_type_name(ctype.name)
            if isinstance(decl, OpaqueClass) and ctype.name in self.class_types:
                return ctype.name
            if isinstance(decl, Typedef) and ctype.name not in resolving:
                if decl.function_type is not None:
                    return self.delegate_name(ctype.name)
                return self._map_value(decl.aliased, resolving | {ctype.name})
            if ctype.name in self.type_map:
                return self.type_map[ctype.name]
            return self._fallback(ctype, FALLBACK_VALUE_TYPE)

        # By-value function types and unknown spellings have no C# equivalent
        return self._fallback(ctype, FALLBACK_VALUE_TYPE)

    def _map_pointer(self, pointee, resolving) -> str:
        if isinstance(pointee, PrimitiveType):
            if pointee.name == "void":
                return "void*"
            if pointee.name in self.type_map:
                return f"{self.type_map[pointee.name]}*"
            return self._fallback(PointerType(pointee), FALLBACK_POINTER_TYPE)

        if isinstance(pointee, FunctionType):
            return "void*"

        if isinstance(pointee, (PointerType, ArrayType)):
            return f"{self._map_value(pointee, resolving)}*"

        if isinstance(pointee, NamedType):
            name = pointee.name
            decl = self.model.get(name)
            if isinstance(decl, OpaqueClass) and name in self.class_types:
                return name
            if isinstance(decl, (Struct, Enum)):
                return f"{self.host_type_name(name)}*"
            if isinstance(decl, Typedef) and name not in resolving:
                if decl.function_type is not None:
                    return "void*"
                return self._map_pointer(decl.aliased, resolving | {name})
            if name in self.type_map:
                return f"{self.type_map[name]}*"

        return self._fallback(PointerType(pointee), FALLBACK_POINTER_TYPE)

    def _fallback(self, ctype, cs_type: str) -> str:
        self.diagnostics.warn(f"Unknown type '{ctype}', using '{cs_type}'")
        return cs_type
