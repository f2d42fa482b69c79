"""
Code generation functions for C# interop declarations
"""

import posixpath
from dataclasses import dataclass

from .config import BindingConfig, TypeOverride
from .constants import (
    BOOL_PARAMETER_MARSHAL,
    BOOL_RETURN_MARSHAL,
    DELEGATE_CALL_CONV,
    FUNCTION_CALL_CONV,
    OPAQUE_HANDLE_TYPE,
    PRIVATE_FIELD_PREFIX,
    REQUIRED_USINGS,
)
from .diagnostics import Diagnostics
from .model import ArrayType, Enum, Field, ForeignModel, Function, Struct, Typedef
from .naming import NameResolver, escape_keyword
from .type_mapper import TypeMapper


ALIASES = "aliases"
FUNCTIONS = "functions"
DELEGATES = "delegates"
STRUCTS = "structs"
ENUMS = "enums"

# Emission order; aliases must come first so the opaque registry is populated
SECTION_ORDER = (ALIASES, FUNCTIONS, DELEGATES, STRUCTS, ENUMS)

SECTION_TITLES = {
    ALIASES: "Class declarations",
    DELEGATES: "Delegates",
    STRUCTS: "Structs",
    ENUMS: "Enums",
}


@dataclass(frozen=True)
class Declaration:
    """One emitted C# declaration"""
    kind: str
    name: str
    code: str
    group: str | None = None


@dataclass(frozen=True)
class Unrecognized:
    """Placeholder for a declaration whose shape could not be translated"""
    kind: str
    name: str
    reason: str
    code: str
    group: str | None = None


@dataclass(frozen=True)
class Section:
    kind: str
    items: tuple = ()

    @property
    def declarations(self) -> list[Declaration]:
        return [item for item in self.items if isinstance(item, Declaration)]

    @property
    def unrecognized(self) -> list[Unrecognized]:
        return [item for item in self.items if isinstance(item, Unrecognized)]


def normalize_source_path(path: str) -> str:
    return (path or "").lower().replace("\\", "/")


def _group_sort_key(key: str) -> str:
    return posixpath.dirname(key) + "/" + posixpath.basename(key)


@dataclass
class _Member:
    """A struct backing field after prefix stripping and array expansion"""
    field: Field
    name: str
    ctype: object
    is_private: bool


class CodeGenerator:
    """Generates C# code from the foreign model"""

    def __init__(self, config: BindingConfig, type_mapper: TypeMapper,
                 resolver: NameResolver = None, diagnostics: Diagnostics = None):
        self.config = config
        self.type_mapper = type_mapper
        self.resolver = resolver if resolver is not None else type_mapper.resolver
        self.diagnostics = diagnostics if diagnostics is not None else type_mapper.diagnostics

    # Opaque class aliases

    def generate_opaque_aliases(self, model: ForeignModel) -> list[Declaration]:
        """Register every class and alias the opaque ones to a handle type"""
        for struct in model.structs:
            self.type_mapper.register_class(struct.name, False)

        items = []
        for opaque in sorted(model.opaque_classes, key=lambda c: c.name):
            self.type_mapper.register_class(opaque.name, True)
            items.append(Declaration(ALIASES, opaque.name, self.generate_opaque_type(opaque.name)))
        return items

    @staticmethod
    def generate_opaque_type(name: str) -> str:
        return f"using {name} = {OPAQUE_HANDLE_TYPE};\n"

    # Functions

    def generate_functions(self, model: ForeignModel) -> list[Declaration]:
        groups = {}
        for function in sorted(model.functions, key=lambda f: f.name):
            groups.setdefault(normalize_source_path(function.file), []).append(function)

        items = []
        for key in sorted(groups, key=_group_sort_key):
            for function in groups[key]:
                items.append(Declaration(FUNCTIONS, function.name, self.generate_function(function), key))
        return items

    def generate_function(self, function: Function) -> str:
        """Generate C# LibraryImport for a function"""
        override = self.config.callable_override(function.name)
        params, return_type, return_marshal = self._signature(
            function.name, function.parameters, function.return_type, override)
        method_name = escape_keyword(
            override.cs_type if override is not None and override.cs_type else function.name)

        lines = [
            f"    // {function}",
            f'    [LibraryImport("{self.config.library}", EntryPoint = "{function.name}")]',
            f"    {FUNCTION_CALL_CONV}",
        ]
        if return_marshal:
            lines.append(f"    {BOOL_RETURN_MARSHAL}")
        lines.append(f"    {self.config.visibility} static partial {return_type} {method_name}({', '.join(params)});")
        return "\n".join(lines) + "\n"

    def _signature(self, name, parameters, return_type, override):
        """Translate parameters and return type, applying callable overrides

        Returns (parameter declarations, return type, needs return marshalling).
        """
        if override is not None:
            for target in override.parameters:
                index = getattr(target, "index", None)
                if index is not None and index >= len(parameters):
                    self.diagnostics.warn(
                        f"Override for '{name}' references parameter {index}, "
                        f"but it only has {len(parameters)}")

        params = []
        for i, param in enumerate(parameters):
            translated = self.type_mapper.translate(param.type, override and override.parameter(i))
            cs_type = translated.cs_type
            if translated.is_boolean:
                cs_type = f"{BOOL_PARAMETER_MARSHAL} {cs_type}"
            param_name = escape_keyword(param.name) if param.name else f"param{i}"
            params.append(f"{cs_type} {param_name}")

        translated = self.type_mapper.translate(return_type, override and override.return_type)
        return params, translated.cs_type, translated.is_boolean

    # Delegates

    def generate_delegates(self, model: ForeignModel) -> list:
        items = []
        candidates = [t for t in model.typedefs if t.is_delegate_candidate]
        for typedef in sorted(candidates, key=lambda t: t.name):
            if typedef.function_type is None:
                reason = f"Unknown delegate type {typedef}"
                self.diagnostics.warn(reason)
                items.append(Unrecognized(
                    DELEGATES, typedef.name, reason, f"// unrecognized delegate type: {typedef}\n"))
                continue
            items.append(Declaration(DELEGATES, typedef.name, self.generate_delegate(typedef)))
        return items

    def generate_delegate(self, typedef: Typedef) -> str:
        """Generate C# delegate for a function pointer typedef"""
        function = typedef.function_type
        override = self.config.callable_override(typedef.name)
        params, return_type, return_marshal = self._signature(
            typedef.name, function.parameters, function.return_type, override)

        lines = [f"// {typedef}", DELEGATE_CALL_CONV]
        if return_marshal:
            lines.append(BOOL_RETURN_MARSHAL)
        lines.append(f"{self.config.visibility} unsafe delegate {return_type} "
                     f"{self.type_mapper.delegate_name(typedef.name)}({', '.join(params)});")
        return "\n".join(lines) + "\n"

    # Structs

    def generate_structs(self, model: ForeignModel) -> list[Declaration]:
        return [
            Declaration(STRUCTS, struct.name, self.generate_struct(struct))
            for struct in sorted(model.structs, key=lambda s: s.name)
        ]

    def _members(self, struct: Struct) -> list[_Member]:
        members = []
        for field in struct.fields:
            name = field.name
            is_private = name.lower().startswith(PRIVATE_FIELD_PREFIX)
            if is_private:
                name = name[len(PRIVATE_FIELD_PREFIX):]
            if isinstance(field.type, ArrayType):
                # Fixed-size arrays are expanded into individual fields
                for i in range(field.type.size):
                    members.append(_Member(field, f"{name}_{i}", field.type.element, is_private))
            else:
                members.append(_Member(field, name, field.type, is_private))
        return members

    def generate_struct(self, struct: Struct) -> str:
        """Generate C# struct with accessors and optional equality members"""
        override = self.config.type_override(struct.name) or TypeOverride()
        name = self.type_mapper.host_type_name(struct.name)

        visibility = "internal" if override.internal else "public"
        readonly = " readonly" if override.read_only else ""
        equatable = f" : IEquatable<{name}>" if override.generate_equality else ""

        lines = [
            f"// {struct.name}",
            "[StructLayout(LayoutKind.Sequential)]",
            f"{visibility}{readonly} unsafe partial struct {name}{equatable}",
            "{",
        ]

        members = self._members(struct)
        field_names = []
        for member in members:
            field_name = escape_keyword(member.name)
            property_name = None
            if not member.is_private and override.generate_properties and not override.internal:
                property_name = override.members.get(member.name) or self.resolver.clean(member.name)
                # Backing field and property must not share a name
                if property_name == field_name:
                    field_name = f"_{member.name}"
            field_names.append(field_name)

            cs_type = override.member_types.get(member.field.name)
            if cs_type is None:
                cs_type = self.type_mapper.storage_type(member.ctype)
            is_bool = member.field.name not in override.member_types and self.type_mapper.is_boolean(member.ctype)

            field_visibility = "public" if override.internal else "private"
            lines.append(f"    // {member.field}")
            lines.append(f"    {field_visibility}{readonly} {cs_type} {field_name};")

            if property_name is not None:
                lines.extend(self._property(property_name, field_name, cs_type, is_bool, override.read_only))
            lines.append("")

        if override.generate_equality:
            lines.extend(self._equality_members(name, field_names))

        if lines[-1] == "":
            lines.pop()
        lines.append("}")
        return "\n".join(lines) + "\n"

    @staticmethod
    def _property(property_name, field_name, cs_type, is_bool, read_only) -> list[str]:
        if is_bool:
            getter = f"{field_name} > 0"
            setter = f"{field_name} = value ? (byte)1 : (byte)0"
            cs_type = "bool"
        else:
            getter = field_name
            setter = f"{field_name} = value"

        if read_only:
            return [f"    public readonly {cs_type} {property_name} => {getter};"]
        return [
            f"    public {cs_type} {property_name}",
            "    {",
            f"        readonly get => {getter};",
            f"        set => {setter};",
            "    }",
        ]

    @staticmethod
    def _equality_members(name, field_names) -> list[str]:
        comparison = " && ".join(f"{f} == obj.{f}" for f in field_names) or "true"
        lines = [
            f"    public readonly bool Equals({name} obj) =>",
            f"        {comparison};",
            "",
            "    public readonly override bool Equals(object obj) =>",
            f"        obj is {name} f && Equals(f);",
            "",
            f"    public static bool operator ==({name} left, {name} right) =>",
            "        left.Equals(right);",
            "",
            f"    public static bool operator !=({name} left, {name} right) =>",
            "        !left.Equals(right);",
            "",
            "    public readonly override int GetHashCode()",
            "    {",
            "        var hash = new HashCode();",
        ]
        lines.extend(f"        hash.Add({f});" for f in field_names)
        lines.extend([
            "        return hash.ToHashCode();",
            "    }",
        ])
        return lines

    # Enums

    def generate_enums(self, model: ForeignModel) -> list[Declaration]:
        return [
            Declaration(ENUMS, enum.name, self.generate_enum(enum))
            for enum in sorted(model.enums, key=lambda e: e.name)
        ]

    def generate_enum(self, enum: Enum) -> str:
        """Generate C# enum, keeping item order and source values"""
        override = self.config.type_override(enum.name) or TypeOverride()
        name = self.type_mapper.host_type_name(enum.name)
        visibility = "internal" if override.internal else "public"

        item_names = {}
        for item in enum.items:
            item_names[item.name] = override.members.get(item.name) or self.resolver.clean(item.name, is_enum_member=True)

        inheritance = ""
        if enum.underlying:
            underlying = self.type_mapper.type_map.get(enum.underlying, enum.underlying)
            if underlying != "int":
                inheritance = f" : {underlying}"

        lines = [f"// {enum.name}"]
        if override.flags:
            lines.append("[Flags]")
        lines.append(f"{visibility} enum {name}{inheritance}")
        lines.append("{")
        for item in enum.items:
            lines.append(f"    // {item}")
            # The source expression only survives in the comment above
            lines.append(f"    {item_names[item.name]} = {item.value},")
        lines.append("}")
        return "\n".join(lines) + "\n"


class OutputBuilder:
    """Builds the final C# output file"""

    @staticmethod
    def build(config: BindingConfig, sections: list[Section]) -> str:
        by_kind = {section.kind: section for section in sections}
        parts = []

        parts.extend(REQUIRED_USINGS)
        parts.append("")
        parts.append(f"namespace {config.namespace};")
        parts.append("")

        for kind in SECTION_ORDER:
            section = by_kind.get(kind)
            if section is None:
                continue
            if kind == FUNCTIONS:
                parts.extend(OutputBuilder._functions(config, section))
            else:
                parts.append(f"#region {SECTION_TITLES[kind]}")
                parts.append("")
                for item in section.items:
                    parts.append(item.code)
                parts.append("#endregion")
            parts.append("")

        return "\n".join(parts)

    @staticmethod
    def _functions(config: BindingConfig, section: Section) -> list[str]:
        parts = [f"{config.visibility} static unsafe partial class {config.class_name}", "{"]
        group = None
        for item in section.items:
            if item.group != group:
                if group is not None:
                    parts.append("    #endregion")
                    parts.append("")
                group = item.group
                parts.append(f"    #region {posixpath.basename(group) or '(unknown)'}")
                parts.append("")
            parts.append(item.code)
        if group is not None:
            parts.append("    #endregion")
        parts.append("}")
        return parts
