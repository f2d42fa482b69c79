"""
libclang front end producing the foreign model from C header files
"""

import logging
import subprocess
from pathlib import Path

import clang.cindex
from clang.cindex import CursorKind, TypeKind

from .constants import CSHARP_TYPE_MAP
from .model import (
    ArrayType,
    Enum,
    EnumItem,
    Field,
    ForeignModel,
    Function,
    FunctionType,
    NamedType,
    OpaqueClass,
    Parameter,
    PointerType,
    PrimitiveType,
    Struct,
    Typedef,
    UnknownType,
)

logger = logging.getLogger(__name__)


# Mapping from libclang builtin kinds to canonical C spellings
PRIMITIVE_KINDS = {
    TypeKind.VOID: "void",
    TypeKind.BOOL: "bool",
    TypeKind.CHAR_S: "char",
    TypeKind.CHAR_U: "char",
    TypeKind.SCHAR: "signed char",
    TypeKind.UCHAR: "unsigned char",
    TypeKind.SHORT: "short",
    TypeKind.USHORT: "unsigned short",
    TypeKind.INT: "int",
    TypeKind.UINT: "unsigned int",
    TypeKind.LONG: "long",
    TypeKind.ULONG: "unsigned long",
    TypeKind.LONGLONG: "long long",
    TypeKind.ULONGLONG: "unsigned long long",
    TypeKind.FLOAT: "float",
    TypeKind.DOUBLE: "double",
    TypeKind.WCHAR: "wchar_t",
}

C_STD_HEADERS = {
    'assert.h', 'complex.h', 'ctype.h', 'errno.h', 'fenv.h', 'float.h',
    'inttypes.h', 'iso646.h', 'limits.h', 'locale.h', 'math.h', 'setjmp.h',
    'signal.h', 'stdalign.h', 'stdarg.h', 'stdatomic.h', 'stdbool.h',
    'stddef.h', 'stdint.h', 'stdio.h', 'stdlib.h', 'stdnoreturn.h',
    'string.h', 'tgmath.h', 'threads.h', 'time.h', 'uchar.h', 'wchar.h',
    'wctype.h', 'alloca.h'
}

SYSTEM_PATHS = [
    '/usr/include',
    '/usr/lib/gcc',
    '/usr/lib/clang',
    '/usr/lib/llvm',
    '/usr/local/include',
    '/Library/Developer',
    '/Applications/Xcode.app',
]


def is_system_header(file_path: str) -> bool:
    """Check if a file path is a system header that should be excluded"""
    path = Path(file_path).resolve()
    if path.name in C_STD_HEADERS:
        return True
    path_str = str(path)
    return any(path_str.startswith(sys_path) for sys_path in SYSTEM_PATHS)


def _system_include_args() -> list[str]:
    """Ask clang for its default include search path"""
    args = []
    try:
        result = subprocess.run(
            ['clang', '-E', '-v', '-'],
            input=b'',
            capture_output=True,
            timeout=2
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug(f"Could not query clang include paths: {e}")
        return args

    stderr = result.stderr.decode('utf-8', errors='ignore')
    in_includes = False
    for line in stderr.split('\n'):
        if '#include <...> search starts here:' in line:
            in_includes = True
            continue
        if in_includes:
            if line.startswith('End of search list'):
                break
            path = line.strip()
            if path and path.startswith('/'):
                args.append(f'-I{path}')
    return args


def _strip_qualifiers(spelling: str) -> str:
    for prefix in ('const ', 'volatile ', 'struct ', 'enum ', 'union '):
        while spelling.startswith(prefix):
            spelling = spelling[len(prefix):]
    return spelling.strip()


class HeaderParser:
    """Parses C headers into a ForeignModel"""

    def __init__(self, include_dirs: list[str] = None, ignore_missing: bool = False,
                 clang_args: list[str] = None):
        self.include_dirs = include_dirs or []
        self.ignore_missing = ignore_missing
        self.clang_args = clang_args

        self._declarations = []
        self._anonymous_names = {}
        self._defined = set()
        self._forward = {}

    def _build_args(self) -> list[str]:
        if self.clang_args is not None:
            return list(self.clang_args)
        args = ['-x', 'c']
        for include_dir in self.include_dirs:
            args.append(f'-I{include_dir}')
        args.extend(_system_include_args())
        return args

    def parse(self, headers: list[str]) -> ForeignModel:
        self._declarations = []
        self._anonymous_names = {}
        self._defined = set()
        self._forward = {}

        index = clang.cindex.Index.create()
        args = self._build_args()
        options = clang.cindex.TranslationUnit.PARSE_SKIP_FUNCTION_BODIES

        processed = 0
        for header_file in headers:
            if not Path(header_file).exists():
                if self.ignore_missing:
                    logger.warning(f"Header file not found: {header_file}")
                    continue
                raise FileNotFoundError(f"Header file not found: {header_file}")

            logger.info(f"Processing: {header_file}")
            tu = index.parse(header_file, args=args, options=options)
            self._check_diagnostics(tu, header_file)
            self._process(tu.cursor)
            processed += 1

        if processed == 0 and headers and not self.ignore_missing:
            raise RuntimeError(f"No header files could be processed: {', '.join(headers)}")

        # Structs that were only ever forward declared are opaque
        for name, file in self._forward.items():
            if name not in self._defined:
                self._declarations.append(OpaqueClass(name, file))

        return ForeignModel(tuple(self._declarations))

    @staticmethod
    def _check_diagnostics(tu, header_file: str):
        """Fail on fatal parse errors; warnings don't stop processing"""
        errors = []
        fatal = False
        for diag in tu.diagnostics:
            if diag.severity >= clang.cindex.Diagnostic.Error:
                logger.error(f"Error in {header_file}: {diag.spelling}")
                errors.append(diag.spelling)
            if diag.severity >= clang.cindex.Diagnostic.Fatal:
                fatal = True
        if fatal:
            raise RuntimeError(
                f"Fatal parsing errors in {header_file}. Errors: {'; '.join(errors)}. "
                "Check include directories and header file accessibility.")

    def _process(self, root):
        children = [c for c in root.get_children() if self._is_allowed(c)]

        # Anonymous records take the name of the typedef that introduces them
        for cursor in children:
            if cursor.kind == CursorKind.TYPEDEF_DECL:
                decl = cursor.underlying_typedef_type.get_declaration()
                if decl.kind in (CursorKind.STRUCT_DECL, CursorKind.ENUM_DECL) and self._is_anonymous(decl):
                    self._anonymous_names[decl.hash] = cursor.spelling

        for cursor in children:
            if cursor.kind == CursorKind.FUNCTION_DECL:
                self._add_function(cursor)
            elif cursor.kind == CursorKind.STRUCT_DECL:
                self._add_struct(cursor)
            elif cursor.kind == CursorKind.ENUM_DECL:
                self._add_enum(cursor)
            elif cursor.kind == CursorKind.TYPEDEF_DECL:
                self._add_typedef(cursor)

    @staticmethod
    def _is_allowed(cursor) -> bool:
        if not cursor.location.file:
            return False
        return not is_system_header(cursor.location.file.name)

    @staticmethod
    def _is_anonymous(cursor) -> bool:
        if hasattr(cursor, 'is_anonymous') and cursor.is_anonymous():
            return True
        name = cursor.spelling
        return not name or "unnamed" in name or "anonymous" in name or "(" in name

    def _record_name(self, cursor) -> str | None:
        if self._is_anonymous(cursor):
            return self._anonymous_names.get(cursor.hash)
        return cursor.spelling

    @staticmethod
    def _file(cursor) -> str:
        return cursor.location.file.name if cursor.location.file else ""

    def _add_function(self, cursor):
        if cursor.type.kind == TypeKind.FUNCTIONPROTO and cursor.type.is_function_variadic():
            logger.debug(f"Skipping variadic function {cursor.spelling}")
            return
        params = tuple(
            Parameter(arg.spelling, self.convert_type(arg.type))
            for arg in cursor.get_arguments()
        )
        self._declarations.append(Function(
            cursor.spelling, params, self.convert_type(cursor.result_type), self._file(cursor)))

    def _add_struct(self, cursor):
        name = self._record_name(cursor)
        if not name:
            return
        if not cursor.is_definition():
            self._forward.setdefault(name, self._file(cursor))
            return
        self._defined.add(name)
        fields = tuple(
            Field(f.spelling, self.convert_type(f.type))
            for f in cursor.type.get_fields()
            if f.spelling
        )
        size = max(cursor.type.get_size(), 0)
        self._declarations.append(Struct(name, size, fields, self._file(cursor)))

    def _add_enum(self, cursor):
        name = self._record_name(cursor)
        if not name or not cursor.is_definition():
            return
        items = tuple(
            EnumItem(child.spelling, child.enum_value, self._enum_expression(child))
            for child in cursor.get_children()
            if child.kind == CursorKind.ENUM_CONSTANT_DECL
        )
        # C enums default to int or unsigned int; only other widths are kept
        underlying = PRIMITIVE_KINDS.get(cursor.enum_type.kind)
        if underlying in ("int", "unsigned int"):
            underlying = None
        self._declarations.append(Enum(name, items, underlying, self._file(cursor)))

    @staticmethod
    def _enum_expression(cursor) -> str | None:
        """Source text after '=' in an enumerator, or None if implicit"""
        tokens = [t.spelling for t in cursor.get_tokens()]
        if "=" not in tokens:
            return None
        return " ".join(tokens[tokens.index("=") + 1:]) or None

    def _add_typedef(self, cursor):
        name = cursor.spelling
        underlying = cursor.underlying_typedef_type
        decl = underlying.get_declaration()

        # typedef struct X X; and typedef struct {...} X; name the record itself
        if decl.kind in (CursorKind.STRUCT_DECL, CursorKind.ENUM_DECL):
            record_name = self._record_name(decl)
            if decl.kind == CursorKind.STRUCT_DECL and record_name and not decl.is_definition():
                self._forward.setdefault(record_name, self._file(cursor))
            if record_name == name:
                return

        param_names = [c.spelling for c in cursor.get_children() if c.kind == CursorKind.PARM_DECL]
        aliased = self.convert_type(underlying, param_names)
        if isinstance(aliased, NamedType) and aliased.name == name:
            return
        self._declarations.append(Typedef(name, aliased, self._file(cursor)))

    def convert_type(self, ctype, param_names: list[str] = None):
        """Convert a libclang type to a model type reference"""
        kind = ctype.kind

        if kind == TypeKind.POINTER:
            return PointerType(self.convert_type(ctype.get_pointee(), param_names))

        if kind == TypeKind.FUNCTIONPROTO:
            names = param_names or []
            params = tuple(
                Parameter(names[i] if i < len(names) else "", self.convert_type(arg))
                for i, arg in enumerate(ctype.argument_types())
            )
            return FunctionType(self.convert_type(ctype.get_result()), params)

        if kind == TypeKind.FUNCTIONNOPROTO:
            return FunctionType(self.convert_type(ctype.get_result()))

        if kind == TypeKind.CONSTANTARRAY:
            return ArrayType(self.convert_type(ctype.get_array_element_type()), ctype.get_array_size())

        if kind == TypeKind.INCOMPLETEARRAY:
            return PointerType(self.convert_type(ctype.get_array_element_type()))

        if kind == TypeKind.ELABORATED:
            return self.convert_type(ctype.get_named_type(), param_names)

        if kind == TypeKind.TYPEDEF:
            name = _strip_qualifiers(ctype.spelling)
            if name in CSHARP_TYPE_MAP:
                return PrimitiveType(name)
            return NamedType(name)

        if kind in (TypeKind.RECORD, TypeKind.ENUM):
            name = self._record_name(ctype.get_declaration())
            if name:
                return NamedType(name)
            return UnknownType(ctype.spelling)

        if kind in PRIMITIVE_KINDS:
            return PrimitiveType(PRIMITIVE_KINDS[kind])

        if kind == TypeKind.UNEXPOSED:
            canonical = ctype.get_canonical()
            if canonical.kind != TypeKind.UNEXPOSED:
                return self.convert_type(canonical, param_names)

        return UnknownType(ctype.spelling)
