"""
C# Interop Generator - Generate C# interop declarations from a C API model
"""

from .generator import CSharpInteropGenerator, GenerationResult
from .type_mapper import TypeMapper, TranslatedType
from .code_generators import CodeGenerator, OutputBuilder, Declaration, Unrecognized
from .config import (
    BindingConfig,
    CallableOverride,
    ConfigurationError,
    TypeOverride,
    parse_config_file,
)
from .naming import NameResolver
from .constants import (
    CSHARP_TYPE_MAP,
    REQUIRED_USINGS,
    NATIVE_METHODS_CLASS,
)

__version__ = "0.1.0"

__all__ = [
    "CSharpInteropGenerator",
    "GenerationResult",
    "TypeMapper",
    "TranslatedType",
    "CodeGenerator",
    "OutputBuilder",
    "Declaration",
    "Unrecognized",
    "BindingConfig",
    "CallableOverride",
    "ConfigurationError",
    "TypeOverride",
    "parse_config_file",
    "NameResolver",
    "CSHARP_TYPE_MAP",
    "REQUIRED_USINGS",
    "NATIVE_METHODS_CLASS",
]
