"""
Pytest configuration and fixtures
"""

import pytest
from pathlib import Path
import tempfile

from cs_interop_generator.config import BindingConfig
from cs_interop_generator.model import (
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


INT = PrimitiveType("int")
FLOAT = PrimitiveType("float")
BOOL = PrimitiveType("bool")
VOID = PrimitiveType("void")
VOID_PTR = PointerType(VOID)


@pytest.fixture
def config():
    """Minimal valid configuration"""
    return BindingConfig(namespace="SkiaSharp", class_name="SkiaApi", library="libSkiaSharp",
                         prefixes={"sk_": "SK"})


@pytest.fixture
def skia_model():
    """A small skia-like API surface, deliberately declared out of order"""
    return ForeignModel.of(
        Function("sk_paint_set_antialias", (
            Parameter("paint", PointerType(NamedType("sk_paint_t"))),
            Parameter("aa", BOOL),
        ), VOID, "include/c/sk_paint.h"),
        Function("sk_canvas_draw_point", (
            Parameter("canvas", PointerType(NamedType("sk_canvas_t"))),
            Parameter("point", PointerType(NamedType("sk_point_t"))),
        ), VOID, "include/c/sk_canvas.h"),
        Function("sk_paint_is_antialias", (
            Parameter("paint", PointerType(NamedType("sk_paint_t"))),
        ), BOOL, "include/c/sk_paint.h"),
        Function("sk_canvas_clear", (
            Parameter("canvas", PointerType(NamedType("sk_canvas_t"))),
            Parameter("color", NamedType("sk_color_t")),
        ), VOID, "include\\c\\SK_Canvas.h"),
        Struct("sk_point_t", 8, (Field("x", FLOAT), Field("y", FLOAT))),
        Struct("sk_paint_t", 0),
        OpaqueClass("sk_canvas_t"),
        Enum("sk_colortype_t", (
            EnumItem("UNKNOWN_SK_COLORTYPE", 0),
            EnumItem("RGBA_8888_SK_COLORTYPE", 1),
            EnumItem("BGRA_8888_SK_COLORTYPE", 2),
        )),
        Typedef("sk_color_t", PrimitiveType("uint32_t")),
        Typedef("sk_data_release_proc", PointerType(FunctionType(VOID, (
            Parameter("ptr", VOID_PTR),
            Parameter("context", VOID_PTR),
        )))),
        Typedef("sk_broken_proc", PointerType(UnknownType("__attribute__((stdcall)) void (int)"))),
    )


@pytest.fixture
def temp_header_file():
    """Create a temporary C header file for testing"""
    with tempfile.NamedTemporaryFile(mode='w', suffix='.h', delete=False) as f:
        f.write("""
// Simple test header
#include <stdbool.h>
#include <stdint.h>

typedef struct Point {
    int32_t _private_x;
    int32_t y;
} Point;

enum Status {
    OK = 0,
    ERROR = 1,
    PENDING = 1 << 1
};

typedef void (*point_callback)(Point* point, void* context);

int add(int a, int b);
void* get_data(void);
bool is_ready(Point* p);
""")
        path = f.name

    yield path

    # Cleanup
    Path(path).unlink(missing_ok=True)


@pytest.fixture
def opaque_types_header():
    """Create a header with opaque types (like SDL)"""
    with tempfile.NamedTemporaryFile(mode='w', suffix='.h', delete=False) as f:
        f.write("""
// Opaque types header (like SDL)
typedef struct SDL_Window SDL_Window;
typedef struct SDL_Renderer SDL_Renderer;

// Functions that use opaque types
SDL_Window* SDL_CreateWindow(int x, int y, int w, int h, unsigned int flags);
void SDL_DestroyWindow(SDL_Window* window);
SDL_Renderer* SDL_CreateRenderer(SDL_Window* window);
void SDL_RenderPresent(SDL_Renderer* renderer);
""")
        path = f.name

    yield path

    # Cleanup
    Path(path).unlink(missing_ok=True)


@pytest.fixture
def config_file(tmp_path, temp_header_file):
    """XML configuration pointing at the simple test header"""
    config_path = tmp_path / "bindings.xml"
    config_path.write_text(f"""
<bindings namespace="Test.Interop" library="testlib" class="TestApi">
    <include file="{temp_header_file}"/>
    <type name="Status" flags="true"/>
</bindings>
""")
    return config_path
