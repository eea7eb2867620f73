"""
Generated classes, objects and interfaces.

A `TypeSpec` covers every kind of Kotlin type declaration: plain, data, value, enum and annotation classes, objects
and companion objects, (functional) interfaces, as well as anonymous classes (``object : Runnable { ... }``), which
double as the bodies of enum constants.

Properties whose initializer is just the same-named primary constructor parameter are folded into the constructor, so
that::

    class Point(x: Int) {
        val x: Int = x
    }

is rendered as ``class Point(val x: Int)``.
"""

from enum import Enum
from typing import AbstractSet, Dict, Mapping, Optional, Tuple, Union

from atmfjstc.lib.kotlin_codegen.base import (
    Spec, SpecBuilder, DocumentableBuilder, AnnotatableBuilder, ModifiableBuilder, TypeVariableHolderBuilder,
    as_code_block, check_at_most_one_of, check_none_of,
)
from atmfjstc.lib.kotlin_codegen.errors import ModelValidationError
from atmfjstc.lib.kotlin_codegen.lexical import escape_if_necessary
from atmfjstc.lib.kotlin_codegen.modifiers import KModifier
from atmfjstc.lib.kotlin_codegen.typenames import ClassName, TypeName, TypeVariableName, ANY
from atmfjstc.lib.kotlin_codegen.CodeBlock import CodeBlock, CodeBlockBuilder, join_to_code
from atmfjstc.lib.kotlin_codegen.AnnotationSpec import AnnotationSpec
from atmfjstc.lib.kotlin_codegen.ParameterSpec import ParameterSpec, emit_parameter_list
from atmfjstc.lib.kotlin_codegen.PropertySpec import PropertySpec
from atmfjstc.lib.kotlin_codegen.FunSpec import FunSpec
from atmfjstc.lib.kotlin_codegen.TypeAliasSpec import TypeAliasSpec


DEFAULT_COMPANION_NAME = 'Companion'


class Kind(Enum):
    CLASS = ('class', frozenset((KModifier.PUBLIC,)), frozenset((KModifier.PUBLIC,)), frozenset())
    OBJECT = ('object', frozenset((KModifier.PUBLIC,)), frozenset((KModifier.PUBLIC,)), frozenset())
    INTERFACE = (
        'interface',
        frozenset((KModifier.PUBLIC, KModifier.ABSTRACT)),
        frozenset((KModifier.PUBLIC, KModifier.ABSTRACT)),
        frozenset(),
    )

    @property
    def declaration_keyword(self) -> str:
        return self.value[0]

    def implicit_property_modifiers(self, modifiers: AbstractSet[KModifier]) -> AbstractSet[KModifier]:
        if KModifier.ANNOTATION in modifiers:
            return self.value[1]

        return self.value[1] | _inherited_platform_modifiers(modifiers)

    def implicit_function_modifiers(self, modifiers: AbstractSet[KModifier] = frozenset()) -> AbstractSet[KModifier]:
        return self.value[2] | _inherited_platform_modifiers(modifiers)

    def implicit_type_modifiers(self, modifiers: AbstractSet[KModifier] = frozenset()) -> AbstractSet[KModifier]:
        return self.value[3] | _inherited_platform_modifiers(modifiers)


def _inherited_platform_modifiers(modifiers: AbstractSet[KModifier]) -> AbstractSet[KModifier]:
    if KModifier.EXPECT in modifiers:
        return frozenset((KModifier.EXPECT,))
    if KModifier.EXTERNAL in modifiers:
        return frozenset((KModifier.EXTERNAL,))

    return frozenset()


class TypeSpec(Spec):
    """
    A generated class, interface, object or anonymous class.

    Attributes:
        kind: Whether this is a class, object or interface. Enum and annotation classes are classes with the
            corresponding modifier.
        name: The simple name of the type, or None for anonymous classes
        kdoc: The KDoc of the type itself (not including the constructor docs, which are merged in when rendering)
        annotations: The annotations on the type
        modifiers: The explicit modifiers of the type
        type_variables: The type parameters of the type
        primary_constructor: The primary constructor, or None
        superclass: The superclass (``Any`` if none)
        superclass_constructor_parameters: The arguments passed to the superclass constructor
        superinterfaces: The implemented interfaces, each mapped to a delegate expression (or None)
        enum_constants: For enums, the constants, each mapped to its anonymous class body
        property_specs: The properties
        initializer_block: The ``init { ... }`` block, if any
        initializer_index: The position of the initializer block among the properties, or -1
        fun_specs: The functions and secondary constructors
        type_specs: The nested types
        type_alias_specs: The nested type aliases
    """

    kind: Kind
    name: Optional[str]
    kdoc: CodeBlock
    annotations: Tuple[AnnotationSpec, ...]
    modifiers: AbstractSet[KModifier]
    type_variables: Tuple[TypeVariableName, ...]
    primary_constructor: Optional[FunSpec]
    superclass: TypeName
    superclass_constructor_parameters: Tuple[CodeBlock, ...]
    superinterfaces: Mapping[TypeName, Optional[CodeBlock]]
    enum_constants: Mapping[str, 'TypeSpec']
    property_specs: Tuple[PropertySpec, ...]
    initializer_block: CodeBlock
    initializer_index: int
    fun_specs: Tuple[FunSpec, ...]
    type_specs: Tuple['TypeSpec', ...]
    type_alias_specs: Tuple[TypeAliasSpec, ...]

    def __init__(self, builder: 'TypeSpecBuilder'):
        self.kind = builder.kind
        self.name = builder.name
        self.kdoc = builder.kdoc.build()
        self.annotations = tuple(builder.annotations)
        self.modifiers = frozenset(builder.modifiers)
        self.type_variables = tuple(builder.type_variables)
        self.primary_constructor = builder.primary_constructor
        self.superclass = builder.superclass
        self.superclass_constructor_parameters = tuple(builder.superclass_constructor_parameters)
        self.superinterfaces = dict(builder.superinterfaces)
        self.enum_constants = dict(builder.enum_constants)
        self.property_specs = tuple(builder.property_specs)
        self.initializer_block = builder.initializer_block.build()
        self.initializer_index = builder.initializer_index
        self.fun_specs = tuple(builder.fun_specs)
        self.type_specs = tuple(builder.type_specs)
        self.type_alias_specs = tuple(builder.type_alias_specs)
        self.tags = builder._build_tags()
        self._lock()

    @staticmethod
    def class_builder(name: Union[str, ClassName]) -> 'TypeSpecBuilder':
        return TypeSpecBuilder(Kind.CLASS, _simple_name(name))

    @staticmethod
    def object_builder(name: Union[str, ClassName]) -> 'TypeSpecBuilder':
        return TypeSpecBuilder(Kind.OBJECT, _simple_name(name))

    @staticmethod
    def companion_object_builder(name: Optional[str] = None) -> 'TypeSpecBuilder':
        return TypeSpecBuilder(Kind.OBJECT, name or DEFAULT_COMPANION_NAME, KModifier.COMPANION)

    @staticmethod
    def interface_builder(name: Union[str, ClassName]) -> 'TypeSpecBuilder':
        return TypeSpecBuilder(Kind.INTERFACE, _simple_name(name))

    @staticmethod
    def fun_interface_builder(name: Union[str, ClassName]) -> 'TypeSpecBuilder':
        return TypeSpecBuilder(Kind.INTERFACE, _simple_name(name), KModifier.FUN)

    @staticmethod
    def enum_builder(name: Union[str, ClassName]) -> 'TypeSpecBuilder':
        return TypeSpecBuilder(Kind.CLASS, _simple_name(name), KModifier.ENUM)

    @staticmethod
    def annotation_builder(name: Union[str, ClassName]) -> 'TypeSpecBuilder':
        return TypeSpecBuilder(Kind.CLASS, _simple_name(name), KModifier.ANNOTATION)

    @staticmethod
    def anonymous_class_builder() -> 'TypeSpecBuilder':
        return TypeSpecBuilder(Kind.CLASS, None)

    @property
    def is_enum(self) -> bool:
        return (self.kind == Kind.CLASS) and (KModifier.ENUM in self.modifiers)

    @property
    def is_annotation(self) -> bool:
        return (self.kind == Kind.CLASS) and (KModifier.ANNOTATION in self.modifiers)

    @property
    def is_anonymous_class(self) -> bool:
        return (self.name is None) and (self.kind == Kind.CLASS)

    @property
    def is_companion(self) -> bool:
        return (self.kind == Kind.OBJECT) and (KModifier.COMPANION in self.modifiers)

    @property
    def nested_type_names(self) -> AbstractSet[str]:
        return frozenset(type_spec.name for type_spec in self.type_specs if type_spec.name is not None)

    def to_builder(self, kind: Optional[Kind] = None, name: Optional[str] = None) -> 'TypeSpecBuilder':
        builder = TypeSpecBuilder(kind or self.kind, name or self.name)
        builder.kdoc.add_code(self.kdoc)
        builder.annotations.extend(self.annotations)
        builder.modifiers.update(self.modifiers)
        builder.type_variables.extend(self.type_variables)
        builder.primary_constructor = self.primary_constructor
        builder.superclass = self.superclass
        builder.superclass_constructor_parameters.extend(self.superclass_constructor_parameters)
        builder.superinterfaces.update(self.superinterfaces)
        builder.enum_constants.update(self.enum_constants)
        builder.property_specs.extend(self.property_specs)
        builder.initializer_block.add_code(self.initializer_block)
        builder.initializer_index = self.initializer_index
        builder.fun_specs.extend(self.fun_specs)
        builder.type_specs.extend(self.type_specs)
        builder.type_alias_specs.extend(self.type_alias_specs)
        builder.tags.update(self.tags)

        return builder

    def _emit(
        self, writer, enum_name: Optional[str], implicit_modifiers: AbstractSet[KModifier] = frozenset(),
        is_nested_external: bool = False,
    ):
        are_nested_external = (KModifier.EXTERNAL in self.modifiers) or is_nested_external

        # Nested types interrupt wrapped line indentation
        previous_statement_line = writer.statement_line
        writer.statement_line = -1

        constructor_properties = self._constructor_properties()
        superclass_arguments = join_to_code(self.superclass_constructor_parameters)

        try:
            if enum_name is not None:
                writer.emit_kdoc(self._kdoc_with_constructor_docs(constructor_properties))
                writer.emit_annotations(self.annotations, False)
                writer.emit_code('%N', enum_name)
                if not superclass_arguments.is_empty():
                    writer.emit('(')
                    writer.emit_code(superclass_arguments)
                    writer.emit(')')
                if self._has_no_body(constructor_properties):
                    return
                writer.emit(' {\n')
            elif self.is_anonymous_class:
                writer.emit_code('object')

                supertypes = []
                if self.superclass != ANY:
                    if are_nested_external or (KModifier.EXPECT in self.modifiers):
                        supertypes.append(CodeBlock.of('%T', self.superclass))
                    else:
                        supertypes.append(CodeBlock.of('%T(%L)', self.superclass, superclass_arguments))
                supertypes.extend(self._superinterface_blocks())

                if len(supertypes) > 0:
                    writer.emit_code(join_to_code(supertypes, prefix=' : '))
                if self._has_no_body(constructor_properties):
                    writer.emit(' {\n}')
                    return
                writer.emit(' {\n')
            else:
                self._emit_header(writer, constructor_properties, superclass_arguments, is_nested_external)

                if self._has_no_body(constructor_properties):
                    writer.emit('\n')
                    return
                writer.emit(' {\n')

            writer.push_type(self)
            writer.indent()
            self._emit_members(writer, constructor_properties, implicit_modifiers, are_nested_external)
            writer.unindent()
            writer.pop_type()

            writer.emit('}')
            if (enum_name is None) and not self.is_anonymous_class:
                writer.emit('\n')
        finally:
            writer.statement_line = previous_statement_line

    def _emit_header(
        self, writer, constructor_properties: Mapping[str, PropertySpec], superclass_arguments: CodeBlock,
        is_nested_external: bool,
    ):
        writer.emit_kdoc(self._kdoc_with_constructor_docs(constructor_properties))
        writer.emit_annotations(self.annotations, False)
        writer.emit_modifiers(
            self.modifiers, {KModifier.PUBLIC, KModifier.EXTERNAL} if is_nested_external else {KModifier.PUBLIC}
        )
        writer.emit(self.kind.declaration_keyword)
        if (self.name is not None) and not (self.is_companion and (self.name == DEFAULT_COMPANION_NAME)):
            writer.emit_code(' %N', self)
        writer.emit_type_variables(self.type_variables)

        wrap_supertypes = False

        if self.primary_constructor is not None:
            constructor = self.primary_constructor

            writer.push_type(self)  # Avoid name collisions when emitting the primary constructor

            if len(constructor.annotations) > 0:
                writer.emit(' ')
                writer.emit_annotations(constructor.annotations, True)
            if len(constructor.modifiers) > 0:
                if len(constructor.annotations) == 0:
                    writer.emit(' ')
                writer.emit_modifiers(constructor.modifiers)
            if (len(constructor.annotations) > 0) or (len(constructor.modifiers) > 0):
                writer.emit('constructor')

            def emit_constructor_parameter(parameter: ParameterSpec):
                prop = constructor_properties.get(parameter.name)
                if prop is not None:
                    prop._emit(
                        writer, {KModifier.PUBLIC}, with_initializer=False, emit_kdoc=False, inline=True,
                        inline_annotations=False,
                    )
                    parameter._emit_default_value(writer)
                else:
                    parameter._emit(writer, inline_annotations=False)

            emit_parameter_list(
                writer, constructor.parameters, force_new_lines=True, emit_one=emit_constructor_parameter
            )
            wrap_supertypes = len(constructor.parameters) > 0

            writer.pop_type()

        supertypes = []
        if self.superclass != ANY:
            passes_arguments = (
                ((self.primary_constructor is not None) or not any(fun.is_constructor for fun in self.fun_specs)) and
                (KModifier.EXTERNAL not in self.modifiers) and not is_nested_external and
                (KModifier.EXPECT not in self.modifiers)
            )
            if passes_arguments:
                supertypes.append(CodeBlock.of('%T(%L)', self.superclass, superclass_arguments))
            else:
                supertypes.append(CodeBlock.of('%T', self.superclass))
        supertypes.extend(self._superinterface_blocks())

        if len(supertypes) > 0:
            writer.emit_code(join_to_code(supertypes, separator=',\n    ' if wrap_supertypes else ',♢', prefix=' : '))

        writer.emit_where_block(self.type_variables)

    def _emit_members(
        self, writer, constructor_properties: Mapping[str, PropertySpec], implicit_modifiers: AbstractSet[KModifier],
        are_nested_external: bool,
    ):
        first_member = True

        def separate():
            nonlocal first_member
            if not first_member:
                writer.emit('\n')
            first_member = False

        for constant_name, constant_body in self.enum_constants.items():
            separate()
            constant_body._emit(writer, constant_name)
            writer.emit(',')

        if self.is_enum:
            if not first_member:
                writer.emit('\n')
            if (
                (len(self.property_specs) > 0) or (len(self.fun_specs) > 0) or (len(self.type_specs) > 0) or
                not self.initializer_block.is_empty()
            ):
                writer.emit(';\n')

        initializer_emitted = False

        def emit_initializer():
            nonlocal initializer_emitted
            if initializer_emitted:
                return
            initializer_emitted = True
            if self._has_initializer:
                separate()
                writer.emit_code(self.initializer_block)

        for index, prop in enumerate(self.property_specs):
            if index == self.initializer_index:
                emit_initializer()
            if prop.name in constructor_properties:
                continue
            separate()
            prop._emit(writer, self.kind.implicit_property_modifiers(self.modifiers))

        emit_initializer()

        if (self.primary_constructor is not None) and not self.primary_constructor.body.is_empty():
            writer.emit('init {\n')
            writer.indent()
            writer.emit_code(self.primary_constructor.body)
            writer.unindent()
            writer.emit('}\n')

        function_modifiers = self.kind.implicit_function_modifiers(self.modifiers | implicit_modifiers)

        for fun in self.fun_specs:
            if fun.is_constructor:
                separate()
                fun._emit(writer, function_modifiers, False)

        for fun in self.fun_specs:
            if not fun.is_constructor:
                separate()
                fun._emit(writer, function_modifiers, True)

        for type_spec in self.type_specs:
            separate()
            type_spec._emit(
                writer, None, self.kind.implicit_type_modifiers(self.modifiers | implicit_modifiers),
                is_nested_external=are_nested_external,
            )

        for type_alias_spec in self.type_alias_specs:
            separate()
            type_alias_spec._emit(writer)

    def _superinterface_blocks(self):
        return [
            CodeBlock.of('%T', superinterface) if delegate is None
            else CodeBlock.of('%T by %L', superinterface, delegate)
            for superinterface, delegate in self.superinterfaces.items()
        ]

    def _constructor_properties(self) -> Dict[str, PropertySpec]:
        """Returns the properties that can be declared inline as constructor parameters"""
        if self.primary_constructor is None:
            return dict()

        # Properties added after the initializer block can't be moved into the constructor, as that would change the
        # order of initialization
        candidates = self.property_specs[:self.initializer_index] if self._has_initializer else self.property_specs

        result = dict()
        for prop in candidates:
            if (prop.getter is not None) or (prop.setter is not None) or (prop.initializer is None):
                continue

            parameter = self.primary_constructor.parameter(prop.name)
            if (parameter is None) or (parameter.type != prop.type):
                continue
            if str(CodeBlock.of('%N', parameter)) != escape_if_necessary(str(prop.initializer), validate=False):
                continue

            result[prop.name] = prop.from_primary_constructor_parameter(parameter)

        return result

    def _kdoc_with_constructor_docs(self, constructor_properties: Mapping[str, PropertySpec]) -> CodeBlock:
        """
        Merges the KDoc of the type with that of its primary constructor and constructor parameters, and that of any
        properties folded into the constructor, so that the header carries a single doc comment.
        """
        class_kdoc = self.kdoc.ensure_ends_with_newline()

        constructor_kdoc = CodeBlockBuilder()
        if self.primary_constructor is not None:
            if not self.primary_constructor.kdoc.is_empty():
                constructor_kdoc.add('@constructor %L', self.primary_constructor.kdoc.ensure_ends_with_newline())

            for parameter in self.primary_constructor.parameters:
                prop = constructor_properties.get(parameter.name)
                if prop is not None:
                    if not prop.kdoc.is_empty():
                        constructor_kdoc.add('@property %L %L', parameter.name, prop.kdoc.ensure_ends_with_newline())
                elif not parameter.kdoc.is_empty():
                    constructor_kdoc.add('@param %L %L', parameter.name, parameter.kdoc.ensure_ends_with_newline())

        return join_to_code(
            [block for block in (class_kdoc, constructor_kdoc.build()) if not block.is_empty()], separator='\n'
        )

    @property
    def _has_initializer(self) -> bool:
        return (self.initializer_index != -1) and not self.initializer_block.is_empty()

    def _has_no_body(self, constructor_properties: Mapping[str, PropertySpec]) -> bool:
        if any(prop.name not in constructor_properties for prop in self.property_specs):
            return False

        return (
            (len(self.enum_constants) == 0) and
            self.initializer_block.is_empty() and
            ((self.primary_constructor is None) or self.primary_constructor.body.is_empty()) and
            (len(self.fun_specs) == 0) and
            (len(self.type_specs) == 0) and
            (len(self.type_alias_specs) == 0)
        )

    def _emit_standalone(self, writer):
        self._emit(writer, None)

    def _emit_as_literal(self, writer, constant_context: bool):
        self._emit(writer, None)


class TypeSpecBuilder(
    SpecBuilder, DocumentableBuilder, AnnotatableBuilder, ModifiableBuilder, TypeVariableHolderBuilder
):
    def __init__(self, kind: Kind, name: Optional[str], *modifiers: KModifier):
        if (name is not None) and (name == ''):
            raise ValueError("Type name must not be empty")

        super().__init__()

        self.kind = kind
        self.name = name
        self.kdoc = CodeBlockBuilder()
        self.annotations = []
        self.modifiers = set(modifiers)
        self.type_variables = []
        self.primary_constructor = None
        self.superclass = ANY
        self.superclass_constructor_parameters = []
        self.superinterfaces = dict()
        self.enum_constants = dict()
        self.property_specs = []
        self.initializer_block = CodeBlockBuilder()
        self.initializer_index = -1
        self.fun_specs = []
        self.type_specs = []
        self.type_alias_specs = []

    @property
    def is_anonymous_class(self) -> bool:
        return (self.name is None) and (self.kind == Kind.CLASS)

    @property
    def is_enum(self) -> bool:
        return (self.kind == Kind.CLASS) and (KModifier.ENUM in self.modifiers)

    @property
    def is_annotation(self) -> bool:
        return (self.kind == Kind.CLASS) and (KModifier.ANNOTATION in self.modifiers)

    @property
    def is_value_class(self) -> bool:
        return (self.kind == Kind.CLASS) and bool({KModifier.INLINE, KModifier.VALUE} & self.modifiers)

    @property
    def is_simple_class(self) -> bool:
        return (self.kind == Kind.CLASS) and not self.is_enum and not self.is_annotation

    def add_modifiers(self, *modifiers: KModifier) -> 'TypeSpecBuilder':
        if self.is_anonymous_class:
            raise ModelValidationError("modifiers are forbidden on anonymous types")

        return super().add_modifiers(*modifiers)

    def set_primary_constructor(self, primary_constructor: Optional[FunSpec]) -> 'TypeSpecBuilder':
        if self.kind != Kind.CLASS:
            raise ModelValidationError(f"{self.kind.name} can't have a primary constructor")

        if primary_constructor is not None:
            if not primary_constructor.is_constructor:
                raise ModelValidationError(f"expected a constructor but was {primary_constructor.name}")
            if self.is_value_class and (len(primary_constructor.parameters) != 1):
                raise ModelValidationError("value classes must have 1 parameter in constructor")
            if primary_constructor.delegate_constructor is not None:
                raise ModelValidationError("primary constructor can't delegate to other constructors")

        self.primary_constructor = primary_constructor
        return self

    def set_superclass(self, superclass: TypeName) -> 'TypeSpecBuilder':
        self._check_can_have_superclass()
        if self.superclass is not ANY:
            raise ModelValidationError(f"superclass already set to {self.superclass}")

        self.superclass = superclass
        return self

    def add_superclass_constructor_parameter(self, format_or_block: Union[str, CodeBlock], *args) -> 'TypeSpecBuilder':
        self._check_can_have_superclass()
        self.superclass_constructor_parameters.append(as_code_block(format_or_block, *args))
        return self

    def _check_can_have_superclass(self):
        if not (self.is_simple_class or (self.kind == Kind.OBJECT)):
            raise ModelValidationError(f"only classes can have super classes, not {self.kind.name}")
        if self.is_value_class:
            raise ModelValidationError("value classes cannot have super classes")

    def add_superinterface(
        self, superinterface: TypeName, delegate: Union[str, CodeBlock, None] = None, *args
    ) -> 'TypeSpecBuilder':
        """
        Adds an implemented interface. If a delegate expression is given, the implementation is delegated to it, as in
        ``class Impl(base: Base) : Base by base``.
        """
        delegate = None if delegate is None else as_code_block(delegate, *args)

        if (delegate is None) or delegate.is_empty():
            self.superinterfaces[superinterface] = None
            return self

        if not (self.is_simple_class or (self.kind == Kind.OBJECT)):
            raise ModelValidationError(
                f"delegation only allowed for classes and objects (found {self.kind.name} '{self.name}')"
            )
        if superinterface.nullable:
            raise ModelValidationError(f"expected non-nullable type but was '{superinterface.copy(nullable=False)}'")
        if self.superinterfaces.get(superinterface) is not None:
            raise ModelValidationError(
                f"'{self.name}' can not delegate to {superinterface} by {delegate} with existing declaration by "
                f"{self.superinterfaces[superinterface]}"
            )

        self.superinterfaces[superinterface] = delegate
        return self

    def add_enum_constant(self, name: str, type_spec: Optional[TypeSpec] = None) -> 'TypeSpecBuilder':
        if name in ('name', 'ordinal'):
            raise ModelValidationError(
                f'constant with name "{name}" conflicts with a supertype member with the same name'
            )

        self.enum_constants[name] = type_spec if type_spec is not None else TypeSpec.anonymous_class_builder().build()
        return self

    def add_property(self, property_or_name: Union[PropertySpec, str], *args) -> 'TypeSpecBuilder':
        """
        Adds a property. Accepts either a `PropertySpec`, or a name, type and modifiers to create one with.
        """
        if isinstance(property_or_name, PropertySpec):
            if len(args) > 0:
                raise TypeError("No further arguments are accepted along with a prebuilt PropertySpec")
            prop = property_or_name
        else:
            prop = PropertySpec.builder(property_or_name, *args).build()

        if KModifier.EXPECT in self.modifiers:
            if prop.initializer is not None:
                raise ModelValidationError("properties in expect classes can't have initializers")
            if (prop.getter is not None) or (prop.setter is not None):
                raise ModelValidationError("properties in expect classes can't have getters and setters")
        if self.is_enum and (prop.name in ('name', 'ordinal')):
            raise ModelValidationError(f"{prop.name} is a final supertype member and can't be redeclared or overridden")

        self.property_specs.append(prop)
        return self

    def add_properties(self, properties) -> 'TypeSpecBuilder':
        for prop in properties:
            self.add_property(prop)

        return self

    def add_initializer_block(self, format_or_block: Union[str, CodeBlock], *args) -> 'TypeSpecBuilder':
        """
        Adds code to the ``init { ... }`` block. Properties added after this call are declared after the block, and
        thus can no longer be folded into the primary constructor.
        """
        if not (self.is_simple_class or self.is_enum or (self.kind == Kind.OBJECT)):
            raise ModelValidationError(f"{self.kind.name} can't have initializer blocks")
        if KModifier.EXPECT in self.modifiers:
            raise ModelValidationError(f"expect {self.kind.name} can't have initializer blocks")

        self.initializer_index = len(self.property_specs)
        self.initializer_block.add('init {\n').indent().add_code(as_code_block(format_or_block, *args))
        self.initializer_block.unindent().add('}\n')

        return self

    def add_function(self, fun_spec: FunSpec) -> 'TypeSpecBuilder':
        self.fun_specs.append(fun_spec)
        return self

    def add_functions(self, fun_specs) -> 'TypeSpecBuilder':
        self.fun_specs.extend(fun_specs)
        return self

    def add_type(self, type_spec: TypeSpec) -> 'TypeSpecBuilder':
        self.type_specs.append(type_spec)
        return self

    def add_types(self, type_specs) -> 'TypeSpecBuilder':
        self.type_specs.extend(type_specs)
        return self

    def add_type_alias(self, type_alias_spec: TypeAliasSpec) -> 'TypeSpecBuilder':
        self.type_alias_specs.append(type_alias_spec)
        return self

    def build(self) -> TypeSpec:
        self._validate()
        return TypeSpec(self)

    def _validate(self):
        if (len(self.enum_constants) > 0) and not self.is_enum:
            raise ModelValidationError(f"{self.name} is not an enum and cannot have enum constants")

        is_external = KModifier.EXTERNAL in self.modifiers

        if len(self.superclass_constructor_parameters) > 0:
            self._check_can_have_superclass()
            if is_external:
                raise ModelValidationError("delegated constructor call in external class is not allowed")
        if is_external and any(fun.delegate_constructor is not None for fun in self.fun_specs):
            raise ModelValidationError("delegated constructor call in external class is not allowed")

        if self.is_anonymous_class and (len(self.type_variables) > 0):
            raise ModelValidationError("type variables are forbidden on anonymous types")

        is_abstract = (
            bool({KModifier.ABSTRACT, KModifier.SEALED} & self.modifiers) or (self.kind == Kind.INTERFACE) or
            self.is_enum
        )

        for fun in self.fun_specs:
            if (not is_abstract) and (KModifier.ABSTRACT in fun.modifiers):
                raise ModelValidationError(f"non-abstract type {self.name} cannot declare abstract function {fun.name}")

            if self.kind == Kind.INTERFACE:
                check_none_of(f"Interface function {fun.name}", fun.modifiers, KModifier.INTERNAL, KModifier.PROTECTED)
                check_at_most_one_of(
                    f"Interface function {fun.name}", fun.modifiers, KModifier.ABSTRACT, KModifier.PRIVATE
                )
            elif self.is_annotation:
                raise ModelValidationError(f"annotation class {self.name} cannot declare member function {fun.name}")
            elif (KModifier.EXPECT in self.modifiers) and not fun.body.is_empty():
                raise ModelValidationError("functions in expect classes can't have bodies")

        for prop in self.property_specs:
            if (not is_abstract) and (KModifier.ABSTRACT in prop.modifiers):
                raise ModelValidationError(
                    f"non-abstract type {self.name} cannot declare abstract property {prop.name}"
                )

        if self.is_annotation and (self.primary_constructor is not None):
            check_none_of(
                f"Annotation class {self.name} constructor", self.primary_constructor.modifiers,
                KModifier.INTERNAL, KModifier.PROTECTED, KModifier.PRIVATE, KModifier.ABSTRACT,
            )

        if self.primary_constructor is None:
            if any(fun.is_constructor for fun in self.fun_specs) and (len(self.superclass_constructor_parameters) > 0):
                raise ModelValidationError(
                    "types without a primary constructor cannot specify secondary constructors and superclass "
                    "constructor parameters"
                )

        if self.is_value_class:
            self._validate_value_class()

        if (self.kind == Kind.INTERFACE) and (KModifier.FUN in self.modifiers) and (len(self.superinterfaces) == 0):
            abstract_functions = [fun.name for fun in self.fun_specs if KModifier.ABSTRACT in fun.modifiers]
            if len(abstract_functions) != 1:
                raise ModelValidationError(
                    f"Functional interfaces must have exactly one abstract function. Contained "
                    f"{len(abstract_functions)}: {abstract_functions}"
                )

        companions = sum(1 for type_spec in self.type_specs if type_spec.is_companion)
        if companions > 1:
            raise ModelValidationError("Multiple companion objects are present but only one is allowed.")
        if (companions == 1) and not (self.is_simple_class or (self.kind == Kind.INTERFACE) or self.is_enum or
                                      self.is_annotation):
            raise ModelValidationError(f"{self.kind.name} types can't have a companion object")

    def _validate_value_class(self):
        if (self.primary_constructor is not None) and (len(self.primary_constructor.parameters) != 1):
            raise ModelValidationError("value classes must have 1 parameter in constructor")
        if len(self.property_specs) == 0:
            raise ModelValidationError("value classes must have at least 1 property")

        if self.primary_constructor is not None:
            parameter_name = self.primary_constructor.parameters[0].name
            underlying = [prop for prop in self.property_specs if prop.name == parameter_name]
            if (len(underlying) == 0) or underlying[0].mutable:
                raise ModelValidationError("value classes must have a single read-only (val) property parameter.")

        if self.superclass != ANY:
            raise ModelValidationError("value classes cannot have super classes")


TypeSpec.Builder = TypeSpecBuilder


def _simple_name(name: Union[str, ClassName]) -> str:
    return name.simple_name if isinstance(name, ClassName) else name
