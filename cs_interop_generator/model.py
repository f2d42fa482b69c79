"""
In-memory model of a parsed C API surface
"""

from dataclasses import dataclass, field
from typing import Union


# Type references

@dataclass(frozen=True)
class PrimitiveType:
    """Builtin or well-known scalar type such as `int` or `uint32_t`"""
    name: str

    def __str__(self):
        return self.name


@dataclass(frozen=True)
class NamedType:
    """Reference to a struct, enum, opaque class or typedef by canonical name"""
    name: str

    def __str__(self):
        return self.name


@dataclass(frozen=True)
class PointerType:
    pointee: "TypeRef"

    def __str__(self):
        if isinstance(self.pointee, FunctionType):
            params = ", ".join(str(p) for p in self.pointee.parameters)
            return f"{self.pointee.return_type} (*)({params})"
        return f"{self.pointee}*"


@dataclass(frozen=True)
class ArrayType:
    element: "TypeRef"
    size: int

    def __str__(self):
        return f"{self.element}[{self.size}]"


@dataclass(frozen=True)
class FunctionType:
    return_type: "TypeRef"
    parameters: tuple = ()

    def __str__(self):
        params = ", ".join(str(p) for p in self.parameters)
        return f"{self.return_type} ({params})"


@dataclass(frozen=True)
class UnknownType:
    """A type the parser could not classify, kept by its raw spelling"""
    spelling: str

    def __str__(self):
        return self.spelling


TypeRef = Union[PrimitiveType, NamedType, PointerType, ArrayType, FunctionType, UnknownType]


# Declarations

@dataclass(frozen=True)
class Parameter:
    name: str
    type: TypeRef

    def __str__(self):
        return f"{self.type} {self.name}".rstrip()


@dataclass(frozen=True)
class Field:
    name: str
    type: TypeRef

    def __str__(self):
        return f"{self.type} {self.name}"


@dataclass(frozen=True)
class EnumItem:
    name: str
    value: int
    expression: str | None = None

    def __str__(self):
        return f"{self.name} = {self.expression if self.expression is not None else self.value}"


@dataclass(frozen=True)
class Function:
    name: str
    parameters: tuple = ()
    return_type: TypeRef = PrimitiveType("void")
    file: str = ""

    def __str__(self):
        params = ", ".join(str(p) for p in self.parameters)
        return f"{self.return_type} {self.name}({params})"


@dataclass(frozen=True)
class Struct:
    name: str
    size: int
    fields: tuple = ()
    file: str = ""

    @property
    def is_opaque(self) -> bool:
        return self.size == 0


@dataclass(frozen=True)
class OpaqueClass:
    """A struct of unknown size, only ever used through pointers"""
    name: str
    file: str = ""


@dataclass(frozen=True)
class Enum:
    name: str
    items: tuple = ()
    underlying: str | None = None
    file: str = ""


@dataclass(frozen=True)
class Typedef:
    name: str
    aliased: TypeRef
    file: str = ""

    @property
    def is_delegate_candidate(self) -> bool:
        return isinstance(self.aliased, PointerType)

    @property
    def function_type(self) -> FunctionType | None:
        """The pointed-to function type, or None if this is not a function pointer"""
        if self.is_delegate_candidate and isinstance(self.aliased.pointee, FunctionType):
            return self.aliased.pointee
        return None

    def __str__(self):
        if self.function_type is not None:
            params = ", ".join(str(p) for p in self.function_type.parameters)
            return f"typedef {self.function_type.return_type} (*{self.name})({params})"
        return f"typedef {self.aliased} {self.name}"


Declaration = Union[Function, Struct, Enum, Typedef, OpaqueClass]

FUNCTION = "function"
STRUCT = "struct"
ENUM = "enum"
TYPEDEF = "typedef"
OPAQUE_CLASS = "opaque_class"


def declaration_kind(decl) -> str:
    """Return the kind tag of a declaration, rejecting anything outside the closed set"""
    if isinstance(decl, Function):
        return FUNCTION
    if isinstance(decl, Struct):
        return OPAQUE_CLASS if decl.is_opaque else STRUCT
    if isinstance(decl, Enum):
        return ENUM
    if isinstance(decl, Typedef):
        return TYPEDEF
    if isinstance(decl, OpaqueClass):
        return OPAQUE_CLASS
    raise TypeError(f"Unsupported declaration: {decl!r}")


@dataclass(frozen=True)
class ForeignModel:
    """Read-only collection of declarations keyed by canonical name

    Zero-size structs are normalized into OpaqueClass entries. When two
    declarations share a name the first one wins.
    """
    declarations: tuple = ()
    _by_name: dict = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self):
        normalized = []
        for decl in self.declarations:
            kind = declaration_kind(decl)
            if kind == OPAQUE_CLASS and isinstance(decl, Struct):
                decl = OpaqueClass(decl.name, decl.file)
            if decl.name in self._by_name:
                continue
            self._by_name[decl.name] = decl
            normalized.append(decl)
        object.__setattr__(self, "declarations", tuple(normalized))

    @classmethod
    def of(cls, *declarations) -> "ForeignModel":
        return cls(tuple(declarations))

    def get(self, name: str):
        return self._by_name.get(name)

    def __contains__(self, name):
        return name in self._by_name

    def _of_kind(self, kind):
        return [d for d in self.declarations if declaration_kind(d) == kind]

    @property
    def functions(self) -> list[Function]:
        return self._of_kind(FUNCTION)

    @property
    def structs(self) -> list[Struct]:
        return self._of_kind(STRUCT)

    @property
    def opaque_classes(self) -> list[OpaqueClass]:
        return self._of_kind(OPAQUE_CLASS)

    @property
    def enums(self) -> list[Enum]:
        return self._of_kind(ENUM)

    @property
    def typedefs(self) -> list[Typedef]:
        return self._of_kind(TYPEDEF)
