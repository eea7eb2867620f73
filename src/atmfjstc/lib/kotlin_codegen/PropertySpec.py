from typing import AbstractSet, Optional, Tuple, Union

from atmfjstc.lib.kotlin_codegen.base import (
    Spec, SpecBuilder, DocumentableBuilder, AnnotatableBuilder, ModifiableBuilder, TypeVariableHolderBuilder,
    as_code_block,
)
from atmfjstc.lib.kotlin_codegen.errors import ModelValidationError
from atmfjstc.lib.kotlin_codegen.modifiers import KModifier, ModifierTarget, VISIBILITY_MODIFIERS
from atmfjstc.lib.kotlin_codegen.typenames import TypeName, TypeVariableName, LambdaTypeName
from atmfjstc.lib.kotlin_codegen.CodeBlock import CodeBlock, CodeBlockBuilder
from atmfjstc.lib.kotlin_codegen.AnnotationSpec import AnnotationSpec
from atmfjstc.lib.kotlin_codegen.ParameterSpec import ParameterSpec
from atmfjstc.lib.kotlin_codegen.FunSpec import FunSpec, GETTER, SETTER


class PropertySpec(Spec):
    """
    A generated property declaration, like ``val name: String = "x"`` or ``var count: Int by lazy { 0 }``.

    Attributes:
        mutable: Whether the property is a ``var`` (as opposed to a ``val``)
        name: The property name
        type: The property type
        kdoc: The KDoc of the property
        annotations: The annotations, as `AnnotationSpec` values
        modifiers: The explicit modifiers
        type_variables: The type parameters, for generic extension properties
        initializer: The initializer expression, or None
        delegated: Whether the initializer is a delegate (``by``) rather than a value (``=``)
        getter: A custom getter, built with `FunSpec.getter_builder`
        setter: A custom setter, built with `FunSpec.setter_builder`
        receiver_type: The receiver type, for extension properties
    """

    mutable: bool
    name: str
    type: TypeName
    kdoc: CodeBlock
    annotations: Tuple[AnnotationSpec, ...]
    modifiers: AbstractSet[KModifier]
    type_variables: Tuple[TypeVariableName, ...]
    initializer: Optional[CodeBlock]
    delegated: bool
    getter: Optional[FunSpec]
    setter: Optional[FunSpec]
    receiver_type: Optional[TypeName]

    def __init__(self, builder: 'PropertySpecBuilder'):
        self.mutable = builder.mutable
        self.name = builder.name
        self.type = builder.type
        self.kdoc = builder.kdoc.build()
        self.annotations = tuple(builder.annotations)
        self.modifiers = frozenset(builder.modifiers)
        self.type_variables = tuple(builder.type_variables)
        self.initializer = builder.initializer
        self.delegated = builder.delegated
        self.getter = builder.getter
        self.setter = builder.setter
        self.receiver_type = builder.receiver_type
        self.tags = builder._build_tags()

        self._validate(builder.is_primary_constructor_parameter)
        self._lock()

    def _validate(self, is_primary_constructor_parameter: bool):
        if not is_primary_constructor_parameter:
            for modifier in self.modifiers:
                if ModifierTarget.PROPERTY not in modifier.targets:
                    raise ModelValidationError(f"unexpected modifier {modifier.keyword} for property {self.name}")

        if (self.setter is not None) and not self.mutable:
            raise ModelValidationError("only a mutable property can have a setter")

        if any(type_variable.reified for type_variable in self.type_variables):
            accessors = [accessor for accessor in (self.getter, self.setter) if accessor is not None]
            if (len(accessors) == 0) or any(KModifier.INLINE not in accessor.modifiers for accessor in accessors):
                raise ModelValidationError(
                    "only type parameters of properties with inline getters and/or setters can be reified!"
                )

    @staticmethod
    def builder(name: str, type_name: TypeName, *modifiers: KModifier) -> 'PropertySpecBuilder':
        return PropertySpecBuilder(name, type_name).add_modifiers(*modifiers)

    def to_builder(self, name: Optional[str] = None, type_name: Optional[TypeName] = None) -> 'PropertySpecBuilder':
        builder = PropertySpecBuilder(name or self.name, type_name or self.type)
        builder.mutable = self.mutable
        builder.kdoc.add_code(self.kdoc)
        builder.annotations.extend(self.annotations)
        builder.modifiers.update(self.modifiers)
        builder.type_variables.extend(self.type_variables)
        builder.initializer = self.initializer
        builder.delegated = self.delegated
        builder.getter = self.getter
        builder.setter = self.setter
        builder.receiver_type = self.receiver_type
        builder.tags.update(self.tags)

        return builder

    def from_primary_constructor_parameter(self, parameter: ParameterSpec) -> 'PropertySpec':
        """
        Returns a version of this property that is declared inline in a primary constructor, taking over the
        annotations, modifiers and (if the property has none of its own) documentation of the parameter.
        """
        builder = self.to_builder().add_annotations(parameter.annotations)
        builder.is_primary_constructor_parameter = True
        builder.modifiers.update(parameter.modifiers)
        if builder.kdoc.is_empty():
            builder.add_kdoc(parameter.kdoc)

        return builder.build()

    def _emit(
        self, writer, implicit_modifiers: AbstractSet[KModifier], with_initializer: bool = True,
        emit_kdoc: bool = True, inline: bool = False, inline_annotations: Optional[bool] = None,
    ):
        if inline_annotations is None:
            inline_annotations = inline

        is_inline_property = (
            (self.getter is not None) and (KModifier.INLINE in self.getter.modifiers) and
            ((not self.mutable) or ((self.setter is not None) and (KModifier.INLINE in self.setter.modifiers)))
        )
        property_modifiers = self.modifiers | {KModifier.INLINE} if is_inline_property else self.modifiers

        if emit_kdoc:
            writer.emit_kdoc(self.kdoc.ensure_ends_with_newline())
        writer.emit_annotations(self.annotations, inline_annotations)
        writer.emit_modifiers(property_modifiers, implicit_modifiers)
        writer.emit_code('var ' if self.mutable else 'val ')

        if len(self.type_variables) > 0:
            writer.emit_type_variables(self.type_variables)
            writer.emit('♢')

        if self.receiver_type is not None:
            writer.emit_code(
                '(%T).' if isinstance(self.receiver_type, LambdaTypeName) else '%T.', self.receiver_type
            )

        writer.emit_code('%N:♢%T', self, self.type)

        if with_initializer and (self.initializer is not None):
            writer.emit('♢by♢' if self.delegated else '♢=♢')
            initializer_format = '%L' if self.initializer.has_statements() else '«%L»'
            writer.emit_code(
                CodeBlock.of(initializer_format, self.initializer.trim_trailing_newline()),
                constant_context=KModifier.CONST in self.modifiers,
            )

        writer.emit_where_block(self.type_variables)
        if not inline:
            writer.emit('\n')

        # Accessor visibility defaults to that of the property
        implicit_accessor_modifiers = {
            modifier for modifier in implicit_modifiers if modifier not in VISIBILITY_MODIFIERS
        }
        if is_inline_property:
            implicit_accessor_modifiers.add(KModifier.INLINE)

        for accessor in (self.getter, self.setter):
            if accessor is not None:
                writer.emit_code('⇥')
                accessor._emit(writer, implicit_accessor_modifiers)
                writer.emit_code('⇤')

    def _emit_standalone(self, writer):
        self._emit(writer, set())

    def _emit_as_literal(self, writer, constant_context: bool):
        self._emit(writer, set())


class PropertySpecBuilder(
    SpecBuilder, DocumentableBuilder, AnnotatableBuilder, ModifiableBuilder, TypeVariableHolderBuilder
):
    def __init__(self, name: str, type_name: TypeName):
        if not isinstance(type_name, TypeName):
            raise TypeError(f"Expected a TypeName for the type of property {name}, got {type_name!r}")

        super().__init__()

        self.name = name
        self.type = type_name
        self.mutable = False
        self.kdoc = CodeBlockBuilder()
        self.annotations = []
        self.modifiers = set()
        self.type_variables = []
        self.initializer = None
        self.delegated = False
        self.getter = None
        self.setter = None
        self.receiver_type = None
        self.is_primary_constructor_parameter = False

    def set_mutable(self, mutable: bool = True) -> 'PropertySpecBuilder':
        self.mutable = mutable
        return self

    def set_initializer(self, format_or_block: Union[str, CodeBlock, None], *args) -> 'PropertySpecBuilder':
        self.initializer = None if format_or_block is None else as_code_block(format_or_block, *args)
        self.delegated = False
        return self

    def delegate(self, format_or_block: Union[str, CodeBlock], *args) -> 'PropertySpecBuilder':
        self.initializer = as_code_block(format_or_block, *args)
        self.delegated = True
        return self

    def set_getter(self, getter: Optional[FunSpec]) -> 'PropertySpecBuilder':
        if (getter is not None) and (getter.name != GETTER):
            raise ModelValidationError(f"{getter.name} is not a getter")

        self.getter = getter
        return self

    def set_setter(self, setter: Optional[FunSpec]) -> 'PropertySpecBuilder':
        if (setter is not None) and (setter.name != SETTER):
            raise ModelValidationError(f"{setter.name} is not a setter")

        self.setter = setter
        return self

    def receiver(self, receiver_type: Optional[TypeName]) -> 'PropertySpecBuilder':
        self.receiver_type = receiver_type
        return self

    def build(self) -> PropertySpec:
        return PropertySpec(self)


PropertySpec.Builder = PropertySpecBuilder
