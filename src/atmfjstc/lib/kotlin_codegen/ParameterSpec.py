from typing import AbstractSet, Optional, Tuple, Union

from atmfjstc.lib.kotlin_codegen.base import (
    Spec, SpecBuilder, DocumentableBuilder, AnnotatableBuilder, ModifiableBuilder, as_code_block,
    check_allowed_modifiers,
)
from atmfjstc.lib.kotlin_codegen.modifiers import KModifier
from atmfjstc.lib.kotlin_codegen.typenames import TypeName
from atmfjstc.lib.kotlin_codegen.CodeBlock import CodeBlock, CodeBlockBuilder
from atmfjstc.lib.kotlin_codegen.AnnotationSpec import AnnotationSpec


ALLOWED_PARAMETER_MODIFIERS = frozenset((KModifier.VARARG, KModifier.NOINLINE, KModifier.CROSSINLINE))


class ParameterSpec(Spec):
    """
    A generated parameter of a function or constructor, like ``vararg names: String = "x"``.
    """

    name: str
    type: TypeName
    modifiers: AbstractSet[KModifier]
    kdoc: CodeBlock
    annotations: Tuple[AnnotationSpec, ...]
    default_value: Optional[CodeBlock]

    def __init__(self, builder: 'ParameterSpecBuilder'):
        modifiers = frozenset(builder.modifiers)
        check_allowed_modifiers(f"Parameter {builder.name}", modifiers, ALLOWED_PARAMETER_MODIFIERS)

        self.name = builder.name
        self.type = builder.type
        self.modifiers = modifiers
        self.kdoc = builder.kdoc.build()
        self.annotations = tuple(builder.annotations)
        self.default_value = builder.default_value
        self.tags = builder._build_tags()
        self._lock()

    @staticmethod
    def builder(name: str, type_name: TypeName, *modifiers: KModifier) -> 'ParameterSpecBuilder':
        return ParameterSpecBuilder(name, type_name).add_modifiers(*modifiers)

    @staticmethod
    def get(name: str, type_name: TypeName, *modifiers: KModifier) -> 'ParameterSpec':
        return ParameterSpec.builder(name, type_name, *modifiers).build()

    def to_builder(self, name: Optional[str] = None, type_name: Optional[TypeName] = None) -> 'ParameterSpecBuilder':
        builder = ParameterSpecBuilder(name or self.name, type_name or self.type)
        builder.kdoc.add_code(self.kdoc)
        builder.annotations.extend(self.annotations)
        builder.modifiers.update(self.modifiers)
        builder.default_value = self.default_value
        builder.tags.update(self.tags)

        return builder

    def _emit(self, writer, include_type: bool = True, inline_annotations: bool = True):
        writer.emit_annotations(self.annotations, inline_annotations)
        writer.emit_modifiers(self.modifiers)
        writer.emit_code('%N', self)
        if include_type:
            writer.emit_code(': %T', self.type)
        self._emit_default_value(writer)

    def _emit_default_value(self, writer):
        if self.default_value is not None:
            writer.emit_code(' = %L' if self.default_value.has_statements() else ' = «%L»', self.default_value)

    def _emit_standalone(self, writer):
        self._emit(writer)

    def _emit_as_literal(self, writer, constant_context: bool):
        self._emit(writer)


class ParameterSpecBuilder(SpecBuilder, DocumentableBuilder, AnnotatableBuilder, ModifiableBuilder):
    def __init__(self, name: str, type_name: TypeName):
        if not isinstance(type_name, TypeName):
            raise TypeError(f"Expected a TypeName for the type of parameter {name}, got {type_name!r}")

        super().__init__()

        self.name = name
        self.type = type_name
        self.kdoc = CodeBlockBuilder()
        self.annotations = []
        self.modifiers = set()
        self.default_value = None

    def set_default_value(self, format_or_block: Union[str, CodeBlock, None], *args) -> 'ParameterSpecBuilder':
        self.default_value = None if format_or_block is None else as_code_block(format_or_block, *args)
        return self

    def build(self) -> ParameterSpec:
        return ParameterSpec(self)


ParameterSpec.Builder = ParameterSpecBuilder


def emit_parameter_list(writer, parameters: Tuple[ParameterSpec, ...], force_new_lines: bool = False, emit_one=None):
    """
    Emits a parenthesized parameter list. Lists of more than two parameters (or any list, if `force_new_lines` is set)
    are laid out one parameter per line, with a trailing comma.
    """
    if emit_one is None:
        def emit_one(parameter):
            parameter._emit(writer)

    writer.emit('(')

    if len(parameters) > 0:
        new_lines = force_new_lines or (len(parameters) > 2)
        if new_lines:
            writer.emit('\n')
            writer.indent(1)

        for index, parameter in enumerate(parameters):
            if index > 0:
                writer.emit('\n' if new_lines else ', ')
            emit_one(parameter)
            if new_lines:
                writer.emit(',')

        if new_lines:
            writer.unindent(1)
            writer.emit('\n')

    writer.emit(')')
