"""
Conversion of native identifiers to C# identifiers
"""

import re

from .constants import CSHARP_KEYWORDS


_ILLEGAL_CHARS = re.compile(r"[^A-Za-z0-9_]")


def escape_keyword(name: str) -> str:
    """Escape C# keywords by prefixing with @"""
    if name in CSHARP_KEYWORDS:
        return f"@{name}"
    return name


class NameResolver:
    """Maps native names to C# names

    `prefixes` maps a native prefix (matched case-insensitively) to the managed
    prefix that replaces it, e.g. {"sk_": "SK"}.
    """

    def __init__(self, prefixes: dict[str, str] | None = None):
        # Longest prefix first so "sk_path_" wins over "sk_"
        self.prefixes = sorted((prefixes or {}).items(), key=lambda p: (-len(p[0]), p[0]))

    def clean(self, name: str, is_enum_member: bool = False) -> str:
        name = _ILLEGAL_CHARS.sub("_", name or "")
        if is_enum_member:
            result = self._clean_enum_member(name)
        else:
            result = self._clean_identifier(name)

        if not result:
            return "_"
        if result[0].isdigit():
            result = f"_{result}"
        return escape_keyword(result)

    def _clean_identifier(self, name: str) -> str:
        if name.endswith("_t") and len(name) > 2:
            name = name[:-2]

        prefix = ""
        for native, managed in self.prefixes:
            if name.lower().startswith(native.lower()):
                prefix = managed
                name = name[len(native):]
                break

        parts = [p for p in name.split("_") if p]
        return prefix + "".join(p[0].upper() + p[1:] for p in parts)

    def _clean_enum_member(self, name: str) -> str:
        upper = name.upper()
        for native, _ in self.prefixes:
            marker = native.upper()
            if upper.startswith(marker):
                name = name[len(marker):]
                break
            # Items like UNKNOWN_SK_COLORTYPE carry the prefix as a suffix
            index = upper.find("_" + marker)
            if index > 0:
                name = name[:index]
                break

        parts = [p for p in name.split("_") if p]
        return "".join(_title(p) for p in parts)


def _title(part: str) -> str:
    if part.isupper():
        return part[0] + part[1:].lower()
    return part[0].upper() + part[1:]
