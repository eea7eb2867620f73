from typing import AbstractSet, Iterable, Mapping, Optional, Tuple, Union

from atmfjstc.lib.kotlin_codegen.base import (
    Spec, SpecBuilder, DocumentableBuilder, AnnotatableBuilder, ModifiableBuilder, TypeVariableHolderBuilder,
    as_code_block,
)
from atmfjstc.lib.kotlin_codegen.errors import ModelValidationError
from atmfjstc.lib.kotlin_codegen.modifiers import KModifier
from atmfjstc.lib.kotlin_codegen.typenames import TypeName, TypeVariableName, LambdaTypeName, UNIT
from atmfjstc.lib.kotlin_codegen.MemberName import MemberName
from atmfjstc.lib.kotlin_codegen.CodeBlock import CodeBlock, CodeBlockBuilder, EMPTY_CODE_BLOCK, join_to_code
from atmfjstc.lib.kotlin_codegen.AnnotationSpec import AnnotationSpec
from atmfjstc.lib.kotlin_codegen.ParameterSpec import ParameterSpec, emit_parameter_list


CONSTRUCTOR = 'constructor()'
GETTER = 'get()'
SETTER = 'set()'

_RETURN_PREFIXES = (CodeBlock.of('return '), CodeBlock.of('return·'))
_THROW_PREFIXES = (CodeBlock.of('throw '), CodeBlock.of('throw·'))


class FunSpec(Spec):
    """
    A generated function, constructor, or property accessor.

    A body that consists of a single ``return`` statement is rendered as an expression body (``fun f() = x``).

    Attributes:
        name: The name of the function. Constructors and accessors use the special names `CONSTRUCTOR`, `GETTER` and
            `SETTER`.
        kdoc: The KDoc for the function itself
        return_kdoc: The KDoc for the ``@return`` tag
        receiver_kdoc: The KDoc for the ``@receiver`` tag
        annotations: The annotations, as `AnnotationSpec` values
        modifiers: The explicit modifiers
        type_variables: The type parameters, for generic functions
        receiver_type: The receiver type, for extension functions
        return_type: The return type (``Unit`` if not specified)
        parameters: The parameters, as `ParameterSpec` values
        delegate_constructor: ``'this'`` or ``'super'``, for constructors that delegate to another constructor
        delegate_constructor_arguments: The arguments for the delegate constructor call
        body: The code of the function
    """

    name: str
    kdoc: CodeBlock
    return_kdoc: CodeBlock
    receiver_kdoc: CodeBlock
    annotations: Tuple[AnnotationSpec, ...]
    modifiers: AbstractSet[KModifier]
    type_variables: Tuple[TypeVariableName, ...]
    receiver_type: Optional[TypeName]
    return_type: TypeName
    parameters: Tuple[ParameterSpec, ...]
    delegate_constructor: Optional[str]
    delegate_constructor_arguments: Tuple[CodeBlock, ...]
    body: CodeBlock

    def __init__(self, builder: 'FunSpecBuilder'):
        self.name = builder.name
        self.kdoc = builder.kdoc.build()
        self.return_kdoc = builder.return_kdoc
        self.receiver_kdoc = builder.receiver_kdoc
        self.annotations = tuple(builder.annotations)
        self.modifiers = frozenset(builder.modifiers)
        self.type_variables = tuple(builder.type_variables)
        self.receiver_type = builder.receiver_type
        self.return_type = builder.return_type
        self.parameters = tuple(builder.parameters)
        self.delegate_constructor = builder.delegate_constructor
        self.delegate_constructor_arguments = tuple(builder.delegate_constructor_arguments)
        self.body = builder.body.build()
        self.tags = builder._build_tags()

        self._validate()
        self._lock()

    def _validate(self):
        if (not self.body.is_empty()) and ({KModifier.ABSTRACT, KModifier.EXPECT} & self.modifiers):
            raise ModelValidationError(f"abstract or expect function {self.name} cannot have code")
        if self.is_accessor and (len(self.type_variables) > 0):
            raise ModelValidationError(f"{self.name} cannot have type variables")
        if (self.name == GETTER) and (len(self.parameters) > 0):
            raise ModelValidationError(f"{self.name} cannot have parameters")
        if (self.name == SETTER) and (len(self.parameters) > 1):
            raise ModelValidationError(f"{self.name} can have at most one parameter")
        if self._is_external_getter and not self.body.is_empty():
            raise ModelValidationError("external getter cannot have code")
        if (self.is_constructor or self.is_accessor) and (self.receiver_type is not None):
            raise ModelValidationError(f"{self.name} cannot have receiver type")
        if (self.is_constructor or self.is_accessor) and (self.return_type != UNIT):
            raise ModelValidationError(f"{self.name} cannot have a return type")
        if (self.delegate_constructor is not None) and not self.is_constructor:
            raise ModelValidationError("only constructors can delegate to other constructors!")

    @staticmethod
    def builder(name: Union[str, MemberName]) -> 'FunSpecBuilder':
        return FunSpecBuilder(name.simple_name if isinstance(name, MemberName) else name)

    @staticmethod
    def constructor_builder() -> 'FunSpecBuilder':
        return FunSpecBuilder(CONSTRUCTOR)

    @staticmethod
    def getter_builder() -> 'FunSpecBuilder':
        return FunSpecBuilder(GETTER)

    @staticmethod
    def setter_builder() -> 'FunSpecBuilder':
        return FunSpecBuilder(SETTER)

    @property
    def is_constructor(self) -> bool:
        return self.name == CONSTRUCTOR

    @property
    def is_accessor(self) -> bool:
        return self.name in (GETTER, SETTER)

    @property
    def _is_external_getter(self) -> bool:
        return (self.name == GETTER) and (KModifier.EXTERNAL in self.modifiers)

    @property
    def _is_empty_setter(self) -> bool:
        return (self.name == SETTER) and (len(self.parameters) == 0)

    def parameter(self, name: str) -> Optional[ParameterSpec]:
        for parameter in self.parameters:
            if parameter.name == name:
                return parameter

        return None

    def to_builder(self, name: Optional[str] = None) -> 'FunSpecBuilder':
        builder = FunSpecBuilder(name or self.name)
        builder.kdoc.add_code(self.kdoc)
        builder.return_kdoc = self.return_kdoc
        builder.receiver_kdoc = self.receiver_kdoc
        builder.annotations.extend(self.annotations)
        builder.modifiers.update(self.modifiers)
        builder.type_variables.extend(self.type_variables)
        builder.receiver_type = self.receiver_type
        builder.return_type = self.return_type
        builder.parameters.extend(self.parameters)
        builder.delegate_constructor = self.delegate_constructor
        builder.delegate_constructor_arguments.extend(self.delegate_constructor_arguments)
        builder.body.add_code(self.body)
        builder.tags.update(self.tags)

        return builder

    def _emit(self, writer, implicit_modifiers: AbstractSet[KModifier], include_kdoc_tags: bool = False):
        writer.emit_kdoc(self._kdoc_with_tags() if include_kdoc_tags else self.kdoc.ensure_ends_with_newline())
        writer.emit_annotations(self.annotations, False)
        writer.emit_modifiers(self.modifiers, implicit_modifiers)

        if not self.is_constructor and not self.is_accessor:
            writer.emit_code('fun ')

        if len(self.type_variables) > 0:
            writer.emit_type_variables(self.type_variables)
            writer.emit(' ')

        self._emit_signature(writer)
        writer.emit_where_block(self.type_variables)

        if self._should_omit_body(implicit_modifiers):
            writer.emit('\n')
            return

        expression_body = _as_expression_body(self.body)

        if expression_body is not None:
            writer.emit_code(CodeBlock.of(' = %L', expression_body), ensure_trailing_newline=True)
        elif not self._is_empty_setter:
            writer.emit_code(' {\n')
            writer.indent()
            writer.emit_code(_returns_without_line_break(self.body), ensure_trailing_newline=True)
            writer.unindent()
            writer.emit('}\n')
        else:
            writer.emit('\n')

    def _should_omit_body(self, implicit_modifiers: AbstractSet[KModifier]) -> bool:
        all_modifiers = self.modifiers | implicit_modifiers

        if (KModifier.ABSTRACT in self.modifiers) or (KModifier.EXPECT in all_modifiers):
            if not self.body.is_empty():
                raise ModelValidationError(f"function {self.name} cannot have code")
            return True

        can_omit = self.is_constructor or (KModifier.EXTERNAL in all_modifiers)

        return can_omit and self.body.is_empty()

    def _emit_signature(self, writer):
        if self.is_constructor:
            writer.emit_code('constructor')
        elif self.name == GETTER:
            writer.emit_code('get')
        elif self.name == SETTER:
            writer.emit_code('set')
        else:
            if self.receiver_type is not None:
                writer.emit_code(
                    '(%T).' if isinstance(self.receiver_type, LambdaTypeName) else '%T.', self.receiver_type
                )
            writer.emit_code('%N', self)

        if not self._is_empty_setter and not self._is_external_getter:
            emit_parameter_list(
                writer, self.parameters,
                emit_one=lambda parameter: parameter._emit(writer, include_type=self.name != SETTER),
            )

        if (self.return_type != UNIT) or self._emit_unit_return_type():
            writer.emit_code(': %T', self.return_type)

        if self.delegate_constructor is not None:
            writer.emit_code(join_to_code(
                self.delegate_constructor_arguments, prefix=f" : {self.delegate_constructor}(", suffix=')'
            ))

    def _emit_unit_return_type(self) -> bool:
        # Unit is only spelled out for expression bodies, where it would otherwise be inferred
        if self.is_constructor or self.is_accessor:
            return False

        return _as_expression_body(self.body) is not None

    def _kdoc_with_tags(self) -> CodeBlock:
        builder = self.kdoc.ensure_ends_with_newline().to_builder()
        has_doc = not builder.is_empty()
        newline_added = False

        def separate_tags():
            nonlocal newline_added
            if has_doc and not newline_added:
                builder.add('\n')
                newline_added = True

        if not self.receiver_kdoc.is_empty():
            separate_tags()
            builder.add('@receiver %L', self.receiver_kdoc.ensure_ends_with_newline())

        for parameter in self.parameters:
            if not parameter.kdoc.is_empty():
                separate_tags()
                builder.add('@param %L %L', parameter.name, parameter.kdoc.ensure_ends_with_newline())

        if not self.return_kdoc.is_empty():
            separate_tags()
            builder.add('@return %L', self.return_kdoc.ensure_ends_with_newline())

        return builder.build()

    def _emit_standalone(self, writer):
        self._emit(writer, {KModifier.PUBLIC}, include_kdoc_tags=True)

    def _emit_as_literal(self, writer, constant_context: bool):
        self._emit(writer, {KModifier.PUBLIC}, include_kdoc_tags=True)


def _as_expression_body(body: CodeBlock) -> Optional[CodeBlock]:
    trimmed = body.trim()

    # If after trimming there are unmatched closing statement markers, we can't have an expression body
    if trimmed.has_unmatched_closing_statement():
        return None

    for prefix in _RETURN_PREFIXES:
        remainder = trimmed.without_prefix(prefix)
        if remainder is not None:
            return remainder

    for prefix in _THROW_PREFIXES:
        if trimmed.without_prefix(prefix) is not None:
            return trimmed

    return None


def _returns_without_line_break(body: CodeBlock) -> CodeBlock:
    """Makes the space after ``return`` non-breaking, as a line break there would change the meaning of the code"""
    if not any(part.startswith('return ') for part in body.format_parts):
        return body

    builder = body.to_builder()
    for index, part in enumerate(builder.format_parts):
        if part.startswith('return '):
            builder.format_parts[index] = 'return·' + part[len('return '):]

    return builder.build()


class FunSpecBuilder(
    SpecBuilder, DocumentableBuilder, AnnotatableBuilder, ModifiableBuilder, TypeVariableHolderBuilder
):
    def __init__(self, name: str):
        if name == '':
            raise ValueError("Function name must not be empty")

        super().__init__()

        self.name = name
        self.kdoc = CodeBlockBuilder()
        self.return_kdoc = EMPTY_CODE_BLOCK
        self.receiver_kdoc = EMPTY_CODE_BLOCK
        self.annotations = []
        self.modifiers = set()
        self.type_variables = []
        self.receiver_type = None
        self.return_type = UNIT
        self.parameters = []
        self.delegate_constructor = None
        self.delegate_constructor_arguments = []
        self.body = CodeBlockBuilder()

    def receiver(self, receiver_type: TypeName, kdoc: Union[str, CodeBlock, None] = None, *args) -> 'FunSpecBuilder':
        if self.name in (CONSTRUCTOR, GETTER, SETTER):
            raise ModelValidationError(f"{self.name} cannot have receiver type")

        self.receiver_type = receiver_type
        if kdoc is not None:
            self.receiver_kdoc = as_code_block(kdoc, *args)

        return self

    def returns(self, return_type: TypeName, kdoc: Union[str, CodeBlock, None] = None, *args) -> 'FunSpecBuilder':
        if self.name in (CONSTRUCTOR, GETTER, SETTER):
            raise ModelValidationError(f"{self.name} cannot have a return type")

        self.return_type = return_type
        if kdoc is not None:
            self.return_kdoc = as_code_block(kdoc, *args)

        return self

    def add_parameter(self, parameter_or_name: Union[ParameterSpec, str], *args) -> 'FunSpecBuilder':
        """
        Adds a parameter. Accepts either a `ParameterSpec`, or a name, type and modifiers to create one with.
        """
        if isinstance(parameter_or_name, ParameterSpec):
            if len(args) > 0:
                raise TypeError("No further arguments are accepted along with a prebuilt ParameterSpec")
            parameter = parameter_or_name
        else:
            parameter = ParameterSpec.builder(parameter_or_name, *args).build()

        self.parameters.append(parameter)
        return self

    def add_parameters(self, parameters: Iterable[ParameterSpec]) -> 'FunSpecBuilder':
        for parameter in parameters:
            self.add_parameter(parameter)

        return self

    def call_this_constructor(self, *args: Union[str, CodeBlock]) -> 'FunSpecBuilder':
        return self._call_constructor('this', args)

    def call_super_constructor(self, *args: Union[str, CodeBlock]) -> 'FunSpecBuilder':
        return self._call_constructor('super', args)

    def _call_constructor(self, constructor: str, args) -> 'FunSpecBuilder':
        if self.name != CONSTRUCTOR:
            raise ModelValidationError("only constructors can delegate to other constructors!")

        self.delegate_constructor = constructor
        self.delegate_constructor_arguments = [
            arg if isinstance(arg, CodeBlock) else CodeBlock.of('%L', arg) for arg in args
        ]

        return self

    def add_code(self, format_or_block: Union[str, CodeBlock], *args) -> 'FunSpecBuilder':
        self.body.add_code(as_code_block(format_or_block, *args))
        return self

    def add_named_code(self, format_string: str, arguments: Mapping[str, object]) -> 'FunSpecBuilder':
        self.body.add_named(format_string, arguments)
        return self

    def add_comment(self, format_string: str, *args) -> 'FunSpecBuilder':
        self.body.add('//·' + format_string.replace(' ', '·') + '\n', *args)
        return self

    def add_statement(self, format_string: str, *args) -> 'FunSpecBuilder':
        self.body.add_statement(format_string, *args)
        return self

    def begin_control_flow(self, control_flow: str, *args) -> 'FunSpecBuilder':
        self.body.begin_control_flow(control_flow, *args)
        return self

    def next_control_flow(self, control_flow: str, *args) -> 'FunSpecBuilder':
        self.body.next_control_flow(control_flow, *args)
        return self

    def end_control_flow(self) -> 'FunSpecBuilder':
        self.body.end_control_flow()
        return self

    def clear_body(self) -> 'FunSpecBuilder':
        self.body.clear()
        return self

    def build(self) -> FunSpec:
        return FunSpec(self)


FunSpec.Builder = FunSpecBuilder
