"""
Override configuration and XML configuration file parsing for the C# interop generator
"""

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field

from .constants import NATIVE_METHODS_CLASS, VISIBILITIES

logger = logging.getLogger(__name__)


class ConfigurationError(ValueError):
    """Raised when required global settings are missing"""


@dataclass(frozen=True)
class Parameter:
    """Override target for the parameter at `index`"""
    index: int


@dataclass(frozen=True)
class ReturnValue:
    """Override target for the return value"""


RETURN_VALUE = ReturnValue()

ParameterOverrideTarget = Parameter | ReturnValue


@dataclass
class TypeOverride:
    """Overrides for one struct, enum or opaque type"""
    cs_type: str | None = None
    internal: bool = False
    read_only: bool = False
    generate_properties: bool = True
    generate_equality: bool = False
    flags: bool = False
    members: dict[str, str] = field(default_factory=dict)
    member_types: dict[str, str] = field(default_factory=dict)


@dataclass
class CallableOverride:
    """Overrides for one function or delegate typedef"""
    cs_type: str | None = None
    parameters: dict[ParameterOverrideTarget, str] = field(default_factory=dict)

    def parameter(self, index: int) -> str | None:
        return self.parameters.get(Parameter(index))

    @property
    def return_type(self) -> str | None:
        return self.parameters.get(RETURN_VALUE)


@dataclass
class BindingConfig:
    """Configuration for C# interop generation"""
    namespace: str | None = None
    class_name: str = NATIVE_METHODS_CLASS
    library: str | None = None
    visibility: str = "public"
    headers: list[str] = field(default_factory=list)
    include_dirs: list[str] = field(default_factory=list)
    prefixes: dict[str, str] = field(default_factory=dict)
    type_overrides: dict[str, TypeOverride] = field(default_factory=dict)
    callable_overrides: dict[str, CallableOverride] = field(default_factory=dict)

    def validate(self):
        """Fail fast when settings needed to produce valid output are missing"""
        missing = [name for name in ("namespace", "class_name", "library")
                   if not (getattr(self, name) or "").strip()]
        if missing:
            raise ConfigurationError(f"Missing required configuration: {', '.join(missing)}")
        if self.visibility not in VISIBILITIES:
            raise ConfigurationError(
                f"Invalid visibility value '{self.visibility}'. Must be 'public' or 'internal'.")

    def type_override(self, name: str) -> TypeOverride | None:
        return self.type_overrides.get(name)

    def callable_override(self, name: str) -> CallableOverride | None:
        return self.callable_overrides.get(name)


def _flag(element, name: str, default: bool = False) -> bool:
    value = element.get(name)
    if value is None:
        return default
    return value.strip().lower() == "true"


def _parse_target(element, owner: str) -> ParameterOverrideTarget | None:
    index = element.get("index")
    if index is None:
        raise ValueError(f"Parameter element in '{owner}' missing 'index' attribute")
    try:
        index = int(index.strip())
    except ValueError:
        raise ValueError(f"Parameter element in '{owner}' has invalid index '{index}'")
    # -1 is the historical spelling of the return value
    if index == -1:
        return RETURN_VALUE
    if index < 0:
        logger.warning(f"Ignoring parameter override in '{owner}' with out of range index {index}")
        return None
    return Parameter(index)


def _parse_type_override(element) -> tuple[str, TypeOverride]:
    name = element.get("name")
    if not name:
        raise ValueError("Type element missing 'name' attribute")
    name = name.strip()

    override = TypeOverride(
        cs_type=(element.get("cs") or "").strip() or None,
        internal=_flag(element, "internal"),
        read_only=_flag(element, "readonly"),
        generate_properties=_flag(element, "properties", default=True),
        generate_equality=_flag(element, "equality"),
        flags=_flag(element, "flags"),
    )
    for member in element.findall("member"):
        member_name = member.get("name")
        if not member_name:
            raise ValueError(f"Member element in type '{name}' missing 'name' attribute")
        member_name = member_name.strip()
        if member.get("cs"):
            override.members[member_name] = member.get("cs").strip()
        if member.get("type"):
            override.member_types[member_name] = member.get("type").strip()
    return name, override


def _parse_callable_override(element) -> tuple[str, CallableOverride]:
    name = element.get("name")
    if not name:
        raise ValueError(f"{element.tag.capitalize()} element missing 'name' attribute")
    name = name.strip()

    override = CallableOverride(cs_type=(element.get("cs") or "").strip() or None)
    for parameter in element.findall("parameter"):
        cs_type = parameter.get("type")
        if not cs_type:
            raise ValueError(f"Parameter element in '{name}' missing 'type' attribute")
        target = _parse_target(parameter, name)
        if target is not None:
            override.parameters[target] = cs_type.strip()
    for ret in element.findall("return"):
        cs_type = ret.get("type")
        if not cs_type:
            raise ValueError(f"Return element in '{name}' missing 'type' attribute")
        override.parameters[RETURN_VALUE] = cs_type.strip()
    return name, override


def parse_config_file(config_path) -> BindingConfig:
    """Parse XML configuration file and return BindingConfig object"""
    try:
        tree = ET.parse(config_path)
        root = tree.getroot()

        if root.tag != "bindings":
            raise ValueError(f"Expected root element 'bindings', got '{root.tag}'")

        config = BindingConfig()

        if root.get("namespace") is not None:
            config.namespace = root.get("namespace").strip()
        if root.get("library") is not None:
            config.library = root.get("library").strip()
        config.class_name = root.get("class", NATIVE_METHODS_CLASS).strip()

        config.visibility = root.get("visibility", "public").strip().lower()
        if config.visibility not in VISIBILITIES:
            raise ValueError(
                f"Invalid visibility value '{config.visibility}'. Must be 'public' or 'internal'.")

        for include_dir in root.findall("include_directory"):
            path = include_dir.get("path")
            if not path:
                raise ValueError("Include directory element missing 'path' attribute")
            config.include_dirs.append(path.strip())

        for include in root.findall("include"):
            header_path = include.get("file")
            if not header_path:
                raise ValueError("Include element missing 'file' attribute")
            config.headers.append(header_path.strip())

        # Native name prefixes and their managed replacement, e.g. sk_ -> SK
        for prefix in root.findall("prefix"):
            native = prefix.get("native")
            if not native:
                raise ValueError("Prefix element missing 'native' attribute")
            config.prefixes[native.strip()] = (prefix.get("cs") or "").strip()

        for element in root.findall("type"):
            name, override = _parse_type_override(element)
            config.type_overrides[name] = override

        for element in root.findall("function") + root.findall("delegate"):
            name, override = _parse_callable_override(element)
            config.callable_overrides[name] = override

        return config

    except ET.ParseError as e:
        raise ValueError(f"XML parsing error: {e}")
    except FileNotFoundError:
        raise FileNotFoundError(f"Configuration file not found: {config_path}")
