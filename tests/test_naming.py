"""
Tests for native to C# name conversion
"""

import pytest

from cs_interop_generator.naming import NameResolver, escape_keyword


class TestNameResolver:
    """Test the NameResolver class"""

    def setup_method(self):
        self.resolver = NameResolver({"sk_": "SK", "gr_": "GR"})

    @pytest.mark.parametrize("raw, expected", [
        ("sk_canvas_t", "SKCanvas"),
        ("sk_color_type_t", "SKColorType"),
        ("gr_context_t", "GRContext"),
        ("Point", "Point"),
        ("y", "Y"),
        ("fX", "FX"),
        ("point_callback", "PointCallback"),
    ])
    def test_clean_identifier(self, raw, expected):
        assert self.resolver.clean(raw) == expected

    @pytest.mark.parametrize("raw, expected", [
        ("UNKNOWN_SK_COLORTYPE", "Unknown"),
        ("BGRA_8888_SK_COLORTYPE", "Bgra8888"),
        ("SK_BLEND_MODE_SRC", "BlendModeSrc"),
        ("None", "None"),
        ("A", "A"),
        ("kDefault", "KDefault"),
    ])
    def test_clean_enum_member(self, raw, expected):
        assert self.resolver.clean(raw, is_enum_member=True) == expected

    def test_enum_member_rule_differs_from_identifier(self):
        assert self.resolver.clean("RGBA_8888", is_enum_member=True) == "Rgba8888"
        assert self.resolver.clean("RGBA_8888") == "RGBA8888"

    def test_leading_digit_is_prefixed(self):
        assert self.resolver.clean("3d_point") == "_3dPoint"
        assert self.resolver.clean("2D", is_enum_member=True) == "_2d"

    def test_illegal_characters_are_replaced(self):
        assert self.resolver.clean("my-type.name") == "MyTypeName"

    def test_empty_names_are_total(self):
        assert self.resolver.clean("") == "_"
        assert self.resolver.clean("___", is_enum_member=True) == "_"

    def test_longest_prefix_wins(self):
        resolver = NameResolver({"sk_": "SK", "sk_path_": "SKPath"})
        assert resolver.clean("sk_path_verb_t") == "SKPathVerb"

    def test_prefix_match_is_case_insensitive(self):
        assert self.resolver.clean("SK_Surface") == "SKSurface"

    def test_deterministic(self):
        assert self.resolver.clean("sk_font_t") == self.resolver.clean("sk_font_t")


def test_escape_keyword():
    assert escape_keyword("object") == "@object"
    assert escape_keyword("params") == "@params"
    assert escape_keyword("canvas") == "canvas"
