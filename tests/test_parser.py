"""
Tests for the libclang header parser
"""

import pytest

from cs_interop_generator.model import (
    FunctionType,
    NamedType,
    OpaqueClass,
    PointerType,
    PrimitiveType,
    Struct,
)
from cs_interop_generator.parser import HeaderParser, is_system_header


class TestHeaderParser:
    """Test conversion of C headers to the foreign model"""

    def setup_method(self):
        self.parser = HeaderParser()

    def test_parse_struct(self, temp_header_file):
        model = self.parser.parse([temp_header_file])

        point = model.get("Point")
        assert isinstance(point, Struct)
        assert point.size == 8
        assert [f.name for f in point.fields] == ["_private_x", "y"]
        assert point.fields[1].type == PrimitiveType("int32_t")
        assert point.file == temp_header_file

    def test_parse_functions(self, temp_header_file):
        model = self.parser.parse([temp_header_file])

        names = [f.name for f in model.functions]
        assert names == ["add", "get_data", "is_ready"]

        add = model.get("add")
        assert [p.name for p in add.parameters] == ["a", "b"]
        assert add.return_type == PrimitiveType("int")

        assert model.get("get_data").return_type == PointerType(PrimitiveType("void"))
        assert model.get("get_data").parameters == ()

        is_ready = model.get("is_ready")
        assert is_ready.return_type == PrimitiveType("bool")
        assert is_ready.parameters[0].type == PointerType(NamedType("Point"))

    def test_parse_enum_keeps_expression(self, temp_header_file):
        model = self.parser.parse([temp_header_file])

        status = model.get("Status")
        assert [(i.name, i.value) for i in status.items] == [("OK", 0), ("ERROR", 1), ("PENDING", 2)]
        assert status.items[2].expression == "1 << 1"
        assert status.underlying is None

    def test_parse_delegate_typedef(self, temp_header_file):
        model = self.parser.parse([temp_header_file])

        callback = model.get("point_callback")
        assert callback.is_delegate_candidate
        assert isinstance(callback.function_type, FunctionType)
        assert [p.name for p in callback.function_type.parameters] == ["point", "context"]
        assert callback.function_type.return_type == PrimitiveType("void")

    def test_forward_declared_structs_are_opaque(self, opaque_types_header):
        model = self.parser.parse([opaque_types_header])

        assert {o.name for o in model.opaque_classes} == {"SDL_Window", "SDL_Renderer"}
        assert all(isinstance(o, OpaqueClass) for o in model.opaque_classes)
        assert model.get("SDL_CreateWindow").return_type == PointerType(NamedType("SDL_Window"))
        assert model.typedefs == []

    def test_missing_header_fails(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Header file not found"):
            self.parser.parse([str(tmp_path / "missing.h")])

    def test_missing_header_ignored(self, tmp_path, temp_header_file):
        parser = HeaderParser(ignore_missing=True)
        model = parser.parse([str(tmp_path / "missing.h"), temp_header_file])

        assert "Point" in model

    def test_repeated_parse_is_independent(self, temp_header_file, opaque_types_header):
        self.parser.parse([temp_header_file])
        model = self.parser.parse([opaque_types_header])

        assert "Point" not in model


class TestSystemHeaders:
    """Test system header detection"""

    @pytest.mark.parametrize("path, expected", [
        ("/usr/include/stdio.h", True),
        ("/usr/include/x86_64-linux-gnu/bits/types.h", True),
        ("/home/user/project/stdint.h", True),
        ("/home/user/project/include/sk_canvas.h", False),
    ])
    def test_is_system_header(self, path, expected):
        assert is_system_header(path) is expected
