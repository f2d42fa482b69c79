"""
Main C# interop generator orchestration
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from .code_generators import (
    ALIASES,
    DELEGATES,
    ENUMS,
    FUNCTIONS,
    STRUCTS,
    CodeGenerator,
    OutputBuilder,
    Section,
    Unrecognized,
)
from .config import BindingConfig
from .diagnostics import Diagnostics
from .model import ForeignModel
from .naming import NameResolver
from .type_mapper import TypeMapper

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """Output of one generation run"""
    text: str
    sections: list[Section]
    warnings: list[str] = field(default_factory=list)
    class_types: dict[str, bool] = field(default_factory=dict)

    def section(self, kind: str) -> Section:
        for section in self.sections:
            if section.kind == kind:
                return section
        raise KeyError(kind)

    @property
    def unrecognized(self) -> list[Unrecognized]:
        return [item for section in self.sections for item in section.unrecognized]


class CSharpInteropGenerator:
    """Main orchestrator for generating C# interop declarations"""

    def __init__(self, config: BindingConfig):
        self.config = config

    def generate(self, model: ForeignModel) -> GenerationResult:
        """Generate C# declarations for every declaration in the model"""
        self.config.validate()

        # Fresh state for every run
        diagnostics = Diagnostics()
        resolver = NameResolver(self.config.prefixes)
        type_mapper = TypeMapper(model, self.config, resolver, diagnostics)
        code_generator = CodeGenerator(self.config, type_mapper, resolver, diagnostics)

        self._check_overrides(model, diagnostics)

        # Opaque aliases first: they populate the registry used by every other emitter
        emitters = [
            (ALIASES, code_generator.generate_opaque_aliases),
            (FUNCTIONS, code_generator.generate_functions),
            (DELEGATES, code_generator.generate_delegates),
            (STRUCTS, code_generator.generate_structs),
            (ENUMS, code_generator.generate_enums),
        ]
        sections = []
        for kind, emit in emitters:
            items = emit(model)
            logger.info(f"Generated {len(items)} {kind}")
            sections.append(Section(kind, tuple(items)))

        text = OutputBuilder.build(self.config, sections)
        return GenerationResult(
            text=text,
            sections=sections,
            warnings=list(diagnostics),
            class_types=dict(type_mapper.class_types),
        )

    def _check_overrides(self, model: ForeignModel, diagnostics: Diagnostics):
        """Report overrides that no longer match anything; they are otherwise ignored"""
        for name in sorted(self.config.type_overrides):
            if name not in model:
                diagnostics.warn(f"Type override '{name}' does not match any declaration")
        for name in sorted(self.config.callable_overrides):
            if name not in model:
                diagnostics.warn(f"Function override '{name}' does not match any declaration")

    def generate_from_headers(self, headers: list[str] = None, output: str = None,
                              ignore_missing: bool = False) -> GenerationResult:
        """Parse the configured headers with libclang and generate declarations"""
        from .parser import HeaderParser

        self.config.validate()
        parser = HeaderParser(self.config.include_dirs, ignore_missing=ignore_missing)
        model = parser.parse(headers if headers is not None else self.config.headers)
        result = self.generate(model)

        if output:
            output_path = Path(output)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(result.text)
            print(f"Generated bindings: {output_path}")
        else:
            print(result.text)

        return result
