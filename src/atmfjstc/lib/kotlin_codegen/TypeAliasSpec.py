from typing import AbstractSet, Optional, Tuple

from atmfjstc.lib.kotlin_codegen.base import (
    Spec, SpecBuilder, DocumentableBuilder, AnnotatableBuilder, ModifiableBuilder, TypeVariableHolderBuilder,
    check_allowed_modifiers,
)
from atmfjstc.lib.kotlin_codegen.modifiers import KModifier
from atmfjstc.lib.kotlin_codegen.typenames import TypeName, TypeVariableName
from atmfjstc.lib.kotlin_codegen.CodeBlock import CodeBlock, CodeBlockBuilder
from atmfjstc.lib.kotlin_codegen.AnnotationSpec import AnnotationSpec


ALLOWED_TYPE_ALIAS_MODIFIERS = frozenset((KModifier.PUBLIC, KModifier.INTERNAL, KModifier.PRIVATE, KModifier.ACTUAL))


class TypeAliasSpec(Spec):
    """A generated ``typealias`` declaration"""

    name: str
    type: TypeName
    modifiers: AbstractSet[KModifier]
    type_variables: Tuple[TypeVariableName, ...]
    kdoc: CodeBlock
    annotations: Tuple[AnnotationSpec, ...]

    def __init__(self, builder: 'TypeAliasSpecBuilder'):
        modifiers = frozenset(builder.modifiers)
        check_allowed_modifiers(f"Type alias {builder.name}", modifiers, ALLOWED_TYPE_ALIAS_MODIFIERS)

        self.name = builder.name
        self.type = builder.type
        self.modifiers = modifiers
        self.type_variables = tuple(builder.type_variables)
        self.kdoc = builder.kdoc.build()
        self.annotations = tuple(builder.annotations)
        self.tags = builder._build_tags()
        self._lock()

    @staticmethod
    def builder(name: str, type_name: TypeName) -> 'TypeAliasSpecBuilder':
        return TypeAliasSpecBuilder(name, type_name)

    def to_builder(self, name: Optional[str] = None, type_name: Optional[TypeName] = None) -> 'TypeAliasSpecBuilder':
        builder = TypeAliasSpecBuilder(name or self.name, type_name or self.type)
        builder.modifiers.update(self.modifiers)
        builder.type_variables.extend(self.type_variables)
        builder.kdoc.add_code(self.kdoc)
        builder.annotations.extend(self.annotations)
        builder.tags.update(self.tags)

        return builder

    def _emit(self, writer):
        writer.emit_kdoc(self.kdoc.ensure_ends_with_newline())
        writer.emit_annotations(self.annotations, False)
        writer.emit_modifiers(self.modifiers, {KModifier.PUBLIC})
        writer.emit_code('typealias %N', self.name)
        writer.emit_type_variables(self.type_variables)
        writer.emit_code(' = %T', self.type)
        writer.emit('\n')

    def _emit_standalone(self, writer):
        self._emit(writer)

    def _emit_as_literal(self, writer, constant_context: bool):
        self._emit(writer)


class TypeAliasSpecBuilder(
    SpecBuilder, DocumentableBuilder, AnnotatableBuilder, ModifiableBuilder, TypeVariableHolderBuilder
):
    def __init__(self, name: str, type_name: TypeName):
        if not isinstance(type_name, TypeName):
            raise TypeError(f"Expected a TypeName for the type of alias {name}, got {type_name!r}")

        super().__init__()

        self.name = name
        self.type = type_name
        self.modifiers = set()
        self.type_variables = []
        self.kdoc = CodeBlockBuilder()
        self.annotations = []

    def build(self) -> TypeAliasSpec:
        return TypeAliasSpec(self)


TypeAliasSpec.Builder = TypeAliasSpecBuilder
