"""
Engine surface registry

Maps the names scripts call (``lroff.<name>``) to SurfaceSpec objects whose
handlers are bound methods of one MarkupEmitter. Script runtimes install the
surface from here, so the emitter stays the only mutation point for
DocumentState and DiversionStore.
"""

from typing import Callable, Dict, Iterator, List, Optional

from ..models.surface import SurfaceSpec, SurfaceCategory
from .emitter import MarkupEmitter


class SurfaceRegistry:
    """
    Registry of lroff function specifications

    Args:
        emitter: Emitter every handler is bound to
    """

    def __init__(self, emitter: MarkupEmitter) -> None:
        self.emitter = emitter
        self.specs: Dict[str, SurfaceSpec] = {}
        self.outputFunctions_register()
        self.escapingFunctions_register()
        self.fontFunctions_register()
        self.registerFunctions_register()
        self.diversionFunctions_register()
        self.macroFunctions_register()
        self.stylingFunctions_register()
        self.structureFunctions_register()
        self.compoundFunctions_register()
        self.utilityFunctions_register()

    def register(self, spec: SurfaceSpec) -> None:
        """Register a function specification"""
        self.specs[spec.name] = spec

    def get(self, name: str) -> Optional[Callable]:
        """Handler for ``name``, or None if not registered"""
        spec = self.specs.get(name)
        return spec.handler if spec is not None else None

    def spec_get(self, name: str) -> Optional[SurfaceSpec]:
        return self.specs.get(name)

    def functions_listByCategory(self, category: SurfaceCategory) -> List[SurfaceSpec]:
        """Get all functions in a category"""
        return [spec for spec in self.specs.values() if spec.category == category]

    def __iter__(self) -> Iterator[SurfaceSpec]:
        return iter(self.specs.values())

    def __len__(self) -> int:
        return len(self.specs)

    def _many_register(
        self,
        category: SurfaceCategory,
        entries: List[tuple],
        returns_text: bool = False,
    ) -> None:
        for name, handler, description in entries:
            self.register(SurfaceSpec(
                name=name,
                category=category,
                description=description,
                handler=handler,
                returns_text=returns_text,
            ))

    def outputFunctions_register(self) -> None:
        """Register raw output functions"""
        e = self.emitter
        self._many_register(SurfaceCategory.OUTPUT, [
            ("emit", e.emit, "Write text without a newline"),
            ("emitln", e.emitln, "Write text followed by a newline"),
            ("request", e.request, "Write a bare request line (.XX)"),
            ("request_with", e.request_with, "Write a request line with arguments"),
            ("comment", e.comment, 'Write a groff comment (.\\" text)'),
            ("blank", e.blank, "Write an empty line"),
        ])

    def escapingFunctions_register(self) -> None:
        """Register escaping builders"""
        e = self.emitter
        self._many_register(SurfaceCategory.ESCAPING, [
            ("escape", e.escape, "Escape text for safe inclusion in groff input"),
            ("inline_escape", e.inline_escape, "Build \\X or \\X[arg] escape sequences"),
        ], returns_text=True)

    def fontFunctions_register(self) -> None:
        """Register font and size requests"""
        e = self.emitter
        self._many_register(SurfaceCategory.FONTS, [
            ("font", e.font, "Switch font (.ft)"),
            ("font_bold", e.font_bold, "Switch to bold"),
            ("font_italic", e.font_italic, "Switch to italic"),
            ("font_roman", e.font_roman, "Switch to roman"),
            ("font_bold_italic", e.font_bold_italic, "Switch to bold italic"),
            ("font_previous", e.font_previous, "Return to the previous font"),
            ("size", e.size, "Set point size (.ps)"),
            ("size_relative", e.size_relative, "Change point size by a delta"),
            ("size_get", e.size_get, "Current point size from the state shadow"),
        ])

    def registerFunctions_register(self) -> None:
        """Register number and string register functions"""
        e = self.emitter
        self._many_register(SurfaceCategory.REGISTERS, [
            ("nr_set", e.nr_set, "Set a number register (.nr)"),
            ("nr_incr", e.nr_incr, "Increment a number register"),
            ("nr_get", e.nr_get, "Read a number register from the state shadow"),
            ("ds_set", e.ds_set, "Define a string register (.ds)"),
            ("ds_get", e.ds_get, "Read a string register from the state shadow"),
        ])
        self._many_register(SurfaceCategory.REGISTERS, [
            ("nr_ref", e.nr_ref, "Interpolation syntax for a number register"),
            ("ds_ref", e.ds_ref, "Interpolation syntax for a string register"),
        ], returns_text=True)

    def diversionFunctions_register(self) -> None:
        """Register preprocessor-level diversion functions"""
        e = self.emitter
        self._many_register(SurfaceCategory.DIVERSIONS, [
            ("divert_begin", e.divert_begin, "Start writing into a named diversion"),
            ("divert_end", e.divert_end, "Stop writing into the current diversion"),
            ("divert_emit", e.divert_emit, "Replay a diversion into the current target"),
            ("divert_clear", e.divert_clear, "Empty a diversion"),
            ("divert_erase", e.divert_erase, "Forget a diversion"),
        ])
        self._many_register(SurfaceCategory.DIVERSIONS, [
            ("divert_get", e.divert_get, "Contents of a diversion"),
        ], returns_text=True)

    def macroFunctions_register(self) -> None:
        """Register macro definition helpers"""
        e = self.emitter
        self._many_register(SurfaceCategory.MACROS, [
            ("macro_define", e.macro_define, "Define a groff macro (.de ... ..)"),
            ("macro_define_lua", e.macro_define_lua, "Define a macro whose body is a script block"),
        ])

    def stylingFunctions_register(self) -> None:
        """Register inline styling builders"""
        e = self.emitter
        self._many_register(SurfaceCategory.STYLING, [
            ("styled", e.styled, "Wrap text in a font change and restore"),
            ("bold", e.bold, "Bold text"),
            ("italic", e.italic, "Italic text"),
            ("bold_italic", e.bold_italic, "Bold italic text"),
            ("mono", e.mono, "Constant-width text"),
            ("special_char", e.special_char, "Special character escape"),
        ], returns_text=True)

    def structureFunctions_register(self) -> None:
        """Register ms document structure helpers"""
        e = self.emitter
        self._many_register(SurfaceCategory.STRUCTURE, [
            ("paragraph", e.paragraph, "Start a paragraph (default .PP)"),
            ("section", e.section, "Section heading (.SH)"),
            ("subsection", e.subsection, "Subsection heading (.SS)"),
            ("title", e.title, "Document title (.TL)"),
            ("author", e.author, "Document author (.AU)"),
            ("display_begin", e.display_begin, "Start a display (.DS)"),
            ("display_end", e.display_end, "End a display (.DE)"),
        ])

    def compoundFunctions_register(self) -> None:
        """Register table and list emitters"""
        e = self.emitter
        self.register(SurfaceSpec(
            name="table",
            category=SurfaceCategory.COMPOUND,
            description="Emit a tbl table from headers and rows",
            handler=e.table_emit,
            examples=['lroff.table({"Name", "Qty"}, {{"apples", "3"}}, "box center;")'],
        ))
        self.register(SurfaceSpec(
            name="bullet_list",
            category=SurfaceCategory.COMPOUND,
            description="Emit a bulleted list",
            handler=e.bullet_list,
            examples=['lroff.bullet_list({"one", "two"})'],
        ))
        self.register(SurfaceSpec(
            name="numbered_list",
            category=SurfaceCategory.COMPOUND,
            description="Emit a numbered list",
            handler=e.numbered_list,
            examples=['lroff.numbered_list({"first", "second"})'],
        ))
        self.register(SurfaceSpec(
            name="def_list",
            category=SurfaceCategory.COMPOUND,
            description="Emit a definition list from {term, definition} pairs",
            handler=e.def_list,
            examples=['lroff.def_list({{"pplua", "a preprocessor"}})'],
        ))

    def utilityFunctions_register(self) -> None:
        """Register utility functions"""
        e = self.emitter
        self._many_register(SurfaceCategory.UTILITY, [
            ("unique", e.unique, "Generate a run-unique name"),
            ("version", e.version, "pplua version string"),
        ], returns_text=True)
