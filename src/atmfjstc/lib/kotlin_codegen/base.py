"""
Machinery shared by all declaration specs (functions, properties, types etc.) and their builders.

Specs are immutable: they are created by calling ``build()`` on a builder, which takes a snapshot of everything that
was accumulated so far. Continuing to use the builder afterwards never affects specs that were already built.
"""

from typing import AbstractSet, Iterable, Union

from atmfjstc.lib.kotlin_codegen.tags import Taggable, TaggableBuilder
from atmfjstc.lib.kotlin_codegen.errors import ModelValidationError
from atmfjstc.lib.kotlin_codegen.modifiers import KModifier
from atmfjstc.lib.kotlin_codegen.typenames import TypeName, TypeVariableName
from atmfjstc.lib.kotlin_codegen.CodeBlock import CodeBlock, CodeBlockBuilder


class Spec(Taggable):
    """
    Base class for immutable declaration specs.

    Two specs are equal if they are of the same kind and render to the same text.
    """

    _locked = False

    def _lock(self):
        self._locked = True

    def __setattr__(self, name, value):
        if self._locked:
            raise AttributeError(f"Attribute '{name}' cannot be set in immutable {self.__class__.__name__}")

        super().__setattr__(name, value)

    def __eq__(self, other):
        if self is other:
            return True
        if other.__class__ is not self.__class__:
            return False

        return str(self) == str(other)

    def __hash__(self):
        return hash(str(self))

    def __str__(self):
        from atmfjstc.lib.kotlin_codegen.CodeWriter import build_code_string

        return build_code_string(self._emit_standalone)

    def __repr__(self):
        return f"{self.__class__.__name__}({str(self)!r})"

    def _emit_standalone(self, writer):
        """Emits the spec the way it is rendered by ``str()``"""
        raise NotImplementedError

    def _emit_as_literal(self, writer, constant_context: bool):
        """Emits the spec when it is used as a ``%L`` argument"""
        raise NotImplementedError


class SpecBuilder(TaggableBuilder):
    def __init__(self):
        self.tags = dict()


class DocumentableBuilder:
    """Mixin for builders of specs that can carry KDoc"""

    kdoc: CodeBlockBuilder

    def add_kdoc(self, format_or_block: Union[str, CodeBlock], *args):
        """
        Adds to the KDoc of the spec being built. Accepts either a `CodeBlock` or a format string and its arguments.
        """
        self.kdoc.add_code(as_code_block(format_or_block, *args))
        return self


class AnnotatableBuilder:
    """Mixin for builders of specs that can carry annotations"""

    annotations: list

    def add_annotation(self, annotation):
        """
        Adds an annotation. Accepts an `AnnotationSpec`, or the type name of an annotation class that takes no
        arguments.
        """
        from atmfjstc.lib.kotlin_codegen.AnnotationSpec import AnnotationSpec

        if isinstance(annotation, TypeName):
            annotation = AnnotationSpec.builder(annotation).build()
        if not isinstance(annotation, AnnotationSpec):
            raise TypeError(f"Expected an AnnotationSpec or a type name, got {annotation!r}")

        self.annotations.append(annotation)
        return self

    def add_annotations(self, annotations: Iterable):
        for annotation in annotations:
            self.add_annotation(annotation)

        return self


class ModifiableBuilder:
    """Mixin for builders of specs that can carry modifiers"""

    modifiers: set

    def add_modifiers(self, *modifiers: KModifier):
        for modifier in modifiers:
            if not isinstance(modifier, KModifier):
                raise TypeError(f"Expected a KModifier, got {modifier!r}")
            self.modifiers.add(modifier)

        return self


class TypeVariableHolderBuilder:
    """Mixin for builders of generic declarations"""

    type_variables: list

    def add_type_variable(self, type_variable: TypeVariableName):
        if not isinstance(type_variable, TypeVariableName):
            raise TypeError(f"Expected a TypeVariableName, got {type_variable!r}")

        self.type_variables.append(type_variable)
        return self

    def add_type_variables(self, type_variables: Iterable[TypeVariableName]):
        for type_variable in type_variables:
            self.add_type_variable(type_variable)

        return self


def as_code_block(format_or_block: Union[str, CodeBlock], *args) -> CodeBlock:
    if isinstance(format_or_block, CodeBlock):
        if len(args) > 0:
            raise TypeError("Format arguments cannot be specified along with a prebuilt CodeBlock")
        return format_or_block

    return CodeBlock.of(format_or_block, *args)


def check_allowed_modifiers(
    what: str, modifiers: AbstractSet[KModifier], allowed: AbstractSet[KModifier]
):
    """
    Raises:
        ModelValidationError: If any of the modifiers is not in the allowed set
    """
    disallowed = [modifier for modifier in KModifier if (modifier in modifiers) and (modifier not in allowed)]
    if len(disallowed) > 0:
        raise ModelValidationError(
            f"{what} may only have the modifiers {_describe_modifiers(allowed)}, but found "
            f"{_describe_modifiers(disallowed)}"
        )


def check_at_most_one_of(what: str, modifiers: AbstractSet[KModifier], *exclusive: KModifier):
    present = [modifier for modifier in exclusive if modifier in modifiers]
    if len(present) > 1:
        raise ModelValidationError(f"{what} cannot have more than one of the modifiers {_describe_modifiers(present)}")


def check_none_of(what: str, modifiers: AbstractSet[KModifier], *forbidden: KModifier):
    present = [modifier for modifier in forbidden if modifier in modifiers]
    if len(present) > 0:
        raise ModelValidationError(f"{what} cannot have the modifiers {_describe_modifiers(present)}")


def _describe_modifiers(modifiers: Iterable[KModifier]) -> str:
    ordered = [modifier for modifier in KModifier if modifier in set(modifiers)]

    return ', '.join(modifier.keyword for modifier in ordered)

