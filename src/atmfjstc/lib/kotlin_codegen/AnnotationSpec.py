from enum import Enum
from typing import Optional, Tuple, Union

from atmfjstc.lib.kotlin_codegen.base import Spec, SpecBuilder, as_code_block
from atmfjstc.lib.kotlin_codegen.typenames import ClassName, ParameterizedTypeName, TypeName
from atmfjstc.lib.kotlin_codegen.CodeBlock import CodeBlock, join_to_code


class UseSiteTarget(Enum):
    """The use-site targets of an annotation, as in ``@get:JvmName("x")``"""

    FILE = 'file'
    PROPERTY = 'property'
    FIELD = 'field'
    GET = 'get'
    SET = 'set'
    RECEIVER = 'receiver'
    PARAM = 'param'
    SETPARAM = 'setparam'
    DELEGATE = 'delegate'

    @property
    def keyword(self) -> str:
        return self.value


class AnnotationSpec(Spec):
    """
    A generated annotation on a declaration, like ``@Column(name = "id")``.

    Attributes:
        type_name: The annotation class (possibly parameterized)
        members: The arguments of the annotation, as code blocks (e.g. ``name = "id"``)
        use_site_target: The use-site target, if any
    """

    type_name: TypeName
    members: Tuple[CodeBlock, ...]
    use_site_target: Optional[UseSiteTarget]

    def __init__(self, builder: 'AnnotationSpecBuilder'):
        self.type_name = builder.type_name
        self.members = tuple(builder.members)
        self.use_site_target = builder.use_site_target
        self.tags = builder._build_tags()
        self._lock()

    @staticmethod
    def builder(type_name: Union[ClassName, ParameterizedTypeName]) -> 'AnnotationSpecBuilder':
        return AnnotationSpecBuilder(type_name)

    @staticmethod
    def get(type_name: Union[ClassName, ParameterizedTypeName]) -> 'AnnotationSpec':
        """Returns an annotation with no arguments"""
        return AnnotationSpecBuilder(type_name).build()

    @property
    def class_name(self) -> ClassName:
        return self.type_name if isinstance(self.type_name, ClassName) else self.type_name.raw_type

    def to_builder(self) -> 'AnnotationSpecBuilder':
        builder = AnnotationSpecBuilder(self.type_name)
        builder.members.extend(self.members)
        builder.use_site_target = self.use_site_target
        builder.tags.update(self.tags)

        return builder

    def _emit(self, writer, inline: bool, as_parameter: bool = False):
        if not as_parameter:
            writer.emit('@')
        if self.use_site_target is not None:
            writer.emit(self.use_site_target.keyword + ':')
        writer.emit_code('%T', self.type_name)

        if (len(self.members) == 0) and not as_parameter:
            return

        whitespace = '' if inline else '\n'
        separator = ', ' if inline else ',\n'
        suffix = ',' if (not inline) and (len(self.members) > 1) else ''

        # Inline:
        #   @Column(name = "updated_at", nullable = false)
        #
        # Not inline:
        #   @Column(
        #     name = "updated_at",
        #     nullable = false,
        #   )

        writer.emit('(')
        if len(self.members) > 1:
            writer.emit(whitespace).indent(1)

        members = [
            member.replace_all('⇥', '').replace_all('⇤', '') if inline else member for member in self.members
        ]
        writer.emit_code(join_to_code(members, separator=separator, suffix=suffix), constant_context=True)

        if len(self.members) > 1:
            writer.unindent(1).emit(whitespace)
        writer.emit(')')

    def _emit_standalone(self, writer):
        self._emit(writer, inline=True)

    def _emit_as_literal(self, writer, constant_context: bool):
        self._emit(writer, inline=True, as_parameter=constant_context)


class AnnotationSpecBuilder(SpecBuilder):
    def __init__(self, type_name: Union[ClassName, ParameterizedTypeName]):
        if not isinstance(type_name, (ClassName, ParameterizedTypeName)):
            raise TypeError(f"An annotation must be a class type, got {type_name!r}")

        super().__init__()

        self.type_name = type_name
        self.members = []
        self.use_site_target = None

    def add_member(self, format_or_block: Union[str, CodeBlock], *args) -> 'AnnotationSpecBuilder':
        self.members.append(as_code_block(format_or_block, *args))
        return self

    def set_use_site_target(self, use_site_target: Optional[UseSiteTarget]) -> 'AnnotationSpecBuilder':
        self.use_site_target = use_site_target
        return self

    def build(self) -> AnnotationSpec:
        return AnnotationSpec(self)


AnnotationSpec.Builder = AnnotationSpecBuilder
