"""
Constants and mappings for C# interop generation
"""


# Mapping from C primitive spellings to C# types
CSHARP_TYPE_MAP = {
    "void": "void",
    "bool": "byte",  # Storage type, see BOOLEAN_TYPES
    "_Bool": "byte",
    "char": "byte",
    "signed char": "sbyte",
    "unsigned char": "byte",
    "short": "short",
    "unsigned short": "ushort",
    "int": "int",
    "unsigned int": "uint",
    "long": "int",
    "unsigned long": "uint",
    "long long": "long",
    "unsigned long long": "ulong",
    "float": "float",
    "double": "double",
    # Fixed width and platform typedefs
    "int8_t": "sbyte",
    "uint8_t": "byte",
    "int16_t": "short",
    "uint16_t": "ushort",
    "int32_t": "int",
    "uint32_t": "uint",
    "int64_t": "long",
    "uint64_t": "ulong",
    "size_t": "nuint",
    "ssize_t": "nint",
    "ptrdiff_t": "nint",
    "intptr_t": "nint",
    "uintptr_t": "nuint",
    "wchar_t": "char",
}

# C spellings of a boolean stored as a single byte
BOOLEAN_TYPES = {"bool", "_Bool"}

# Host representation of an opaque handle
OPAQUE_HANDLE_TYPE = "nint"

# Fallbacks used when a type reference matches no known shape
FALLBACK_VALUE_TYPE = "nint"
FALLBACK_POINTER_TYPE = "void*"

# Struct fields starting with this prefix get no generated property
PRIVATE_FIELD_PREFIX = "_private_"

# C# keywords that might appear as identifiers
CSHARP_KEYWORDS = {
    'abstract', 'as', 'base', 'bool', 'break', 'byte', 'case', 'catch',
    'char', 'checked', 'class', 'const', 'continue', 'decimal', 'default',
    'delegate', 'do', 'double', 'else', 'enum', 'event', 'explicit', 'extern',
    'false', 'finally', 'fixed', 'float', 'for', 'foreach', 'goto', 'if',
    'implicit', 'in', 'int', 'interface', 'internal', 'is', 'lock', 'long',
    'namespace', 'new', 'null', 'object', 'operator', 'out', 'override',
    'params', 'private', 'protected', 'public', 'readonly', 'ref', 'return',
    'sbyte', 'sealed', 'short', 'sizeof', 'stackalloc', 'static', 'string',
    'struct', 'switch', 'this', 'throw', 'true', 'try', 'typeof', 'uint',
    'ulong', 'unchecked', 'unsafe', 'ushort', 'using', 'virtual', 'void',
    'volatile', 'while'
}

# C# usings required for generated code
REQUIRED_USINGS = [
    "using System;",
    "using System.Runtime.CompilerServices;",
    "using System.Runtime.InteropServices;",
]

# Marshalling attributes for boolean-semantic positions
BOOL_PARAMETER_MARSHAL = "[MarshalAs(UnmanagedType.I1)]"
BOOL_RETURN_MARSHAL = "[return: MarshalAs(UnmanagedType.I1)]"

# Calling convention annotations (native ABI is cdecl throughout)
FUNCTION_CALL_CONV = "[UnmanagedCallConv(CallConvs = [typeof(CallConvCdecl)])]"
DELEGATE_CALL_CONV = "[UnmanagedFunctionPointer(CallingConvention.Cdecl)]"

# Default class name for native methods
NATIVE_METHODS_CLASS = "NativeMethods"

VISIBILITIES = ("public", "internal")
