"""
The symbol reference model: immutable values naming Kotlin types.

Any type in Kotlin's type system can be represented:

- `ClassName` for declared types such as ``String`` or ``Map.Entry``
- `ParameterizedTypeName` for applications of generic types, such as ``List<String>``
- `TypeVariableName` for type variables, such as ``T`` in ``fun <T> f(t: T)``
- `WildcardTypeName` for use-site variance projections, such as ``out Number`` or ``*``
- `LambdaTypeName` for function types, such as ``(Int) -> String``

All type names may be nullable and may carry type annotations. They may also carry tags (arbitrary metadata for use
by the caller), which are ignored for the purposes of equality and hashing.
"""

from functools import total_ordering
from typing import Any, Hashable, Iterable, Mapping, Optional, Sequence, Tuple, TYPE_CHECKING

from atmfjstc.lib.kotlin_codegen.tags import Taggable, TagMap, as_tag_map
from atmfjstc.lib.kotlin_codegen.modifiers import KModifier
from atmfjstc.lib.kotlin_codegen.lexical import escape_segments_if_necessary

if TYPE_CHECKING:
    from atmfjstc.lib.kotlin_codegen.AnnotationSpec import AnnotationSpec


class TypeName(Taggable):
    """
    Abstract base for all type names.

    Attributes:
        nullable: Whether the type is nullable (rendered with a trailing ``?``)
        annotations: The type annotations, as a tuple of `AnnotationSpec`
        tags: The tags attached to this type name
    """

    nullable: bool
    annotations: Tuple['AnnotationSpec', ...]
    tags: TagMap

    _locked = False

    def __init__(
        self, nullable: bool = False, annotations: Iterable['AnnotationSpec'] = (),
        tags: Optional[Mapping[Hashable, Any]] = None,
    ):
        if self.__class__ is TypeName:
            raise TypeError("TypeName is abstract")

        self.nullable = bool(nullable)
        self.annotations = tuple(annotations)
        self.tags = as_tag_map(tags)
        self._locked = True

    def __setattr__(self, name, value):
        if self._locked:
            raise AttributeError(f"Attribute '{name}' cannot be set in immutable {self.__class__.__name__}. Use copy()")

        super().__setattr__(name, value)

    @property
    def is_annotated(self) -> bool:
        return len(self.annotations) > 0

    def copy(
        self, nullable: Optional[bool] = None, annotations: Optional[Iterable['AnnotationSpec']] = None,
        tags: Optional[Mapping[Hashable, Any]] = None,
    ) -> 'TypeName':
        """
        Returns a copy of this type name with some fields replaced. Fields that are not specified (including the tags)
        are carried over unchanged.
        """
        return self._altered(
            nullable=self.nullable if nullable is None else bool(nullable),
            annotations=self.annotations if annotations is None else tuple(annotations),
            tags=self.tags if tags is None else as_tag_map(tags),
        )

    def _altered(self, **fields) -> 'TypeName':
        clone = object.__new__(self.__class__)
        clone.__dict__.update(self.__dict__)
        clone.__dict__.update(fields)

        return clone

    def _structure(self) -> tuple:
        """The subclass-specific fields that take part in equality and hashing"""
        raise NotImplementedError

    def __eq__(self, other):
        if other.__class__ is not self.__class__:
            return False

        return (
            (self.nullable == other.nullable) and (self.annotations == other.annotations) and
            (self._structure() == other._structure())
        )

    def __hash__(self):
        return hash((self.__class__.__name__, self.nullable, self.annotations, self._structure()))

    def __str__(self):
        from atmfjstc.lib.kotlin_codegen.CodeWriter import build_code_string

        return build_code_string(lambda writer: writer.emit_code('%T', self))

    def __repr__(self):
        return f"{self.__class__.__name__}({str(self)!r})"

    def _emit(self, writer):
        raise NotImplementedError

    def _emit_annotations(self, writer):
        for annotation in self.annotations:
            annotation._emit(writer, inline=True)
            writer.emit(' ')

    def _emit_nullable(self, writer):
        if self.nullable:
            writer.emit('?')


@total_ordering
class ClassName(TypeName):
    """
    A fully-qualified class name for top-level and nested classes.

    Example: ``ClassName('kotlin.collections', 'Map', 'Entry')`` names ``kotlin.collections.Map.Entry``.
    """

    _names: Tuple[str, ...]

    def __init__(
        self, package_name: str, *simple_names: str, nullable: bool = False,
        annotations: Iterable['AnnotationSpec'] = (), tags: Optional[Mapping[Hashable, Any]] = None,
    ):
        if len(simple_names) == 0:
            raise ValueError("simple_names must not be empty")
        if any(name == '' for name in simple_names):
            raise ValueError(f"simple_names must not contain empty items: {list(simple_names)!r}")

        self._names = (package_name,) + tuple(simple_names)

        super().__init__(nullable, annotations, tags)

    @property
    def package_name(self) -> str:
        """Package name, like ``'kotlin.collections'`` for ``Map.Entry``"""
        return self._names[0]

    @property
    def simple_names(self) -> Tuple[str, ...]:
        """The simple names of this class and its enclosing classes, like ``('Map', 'Entry')`` for ``Map.Entry``"""
        return self._names[1:]

    @property
    def simple_name(self) -> str:
        return self._names[-1]

    @property
    def canonical_name(self) -> str:
        """Fully qualified name using ``.`` as a separator, like ``kotlin.collections.Map.Entry``"""
        return '.'.join(self._names) if self.package_name != '' else '.'.join(self.simple_names)

    def enclosing_class_name(self) -> Optional['ClassName']:
        """The enclosing class, like ``Map`` for ``Map.Entry``. Returns None for top-level classes."""
        if len(self._names) == 2:
            return None

        return ClassName(self.package_name, *self._names[1:-1])

    def top_level_class_name(self) -> 'ClassName':
        return ClassName(self.package_name, self._names[1])

    def nested_class(self, name: str) -> 'ClassName':
        return ClassName(self.package_name, *self.simple_names, name)

    def peer_class(self, name: str) -> 'ClassName':
        """Returns a class that shares the same enclosing package or class"""
        return ClassName(self.package_name, *self._names[1:-1], name)

    def reflection_name(self) -> str:
        """The JVM binary name, like ``kotlin.collections.Map$Entry``"""
        top_level = self.top_level_class_name().canonical_name

        return '$'.join((top_level,) + self.simple_names[1:])

    def parameterized_by(self, *type_arguments: TypeName) -> 'ParameterizedTypeName':
        return ParameterizedTypeName(self, type_arguments)

    @staticmethod
    def best_guess(class_name_string: str) -> 'ClassName':
        """
        Returns a class name created from a fully-qualified string, guessing that lowercase segments are the package
        and the rest are (nested) class names. This fails for names that do not follow the usual conventions.
        """
        parts = class_name_string.split('.')
        split = 0
        while (split < len(parts)) and (parts[split][:1].islower()):
            split += 1

        class_parts = parts[split:]
        if (len(class_parts) == 0) or not all(part[:1].isupper() for part in class_parts):
            raise ValueError(f"couldn't make a guess for {class_name_string}")

        return ClassName('.'.join(parts[:split]), *class_parts)

    def _structure(self) -> tuple:
        return self._names

    def _sort_key(self):
        return self.canonical_name, self.nullable, tuple(str(annotation) for annotation in self.annotations)

    def __lt__(self, other):
        if not isinstance(other, ClassName):
            return NotImplemented

        return self._sort_key() < other._sort_key()

    def _emit(self, writer):
        writer.emit(escape_segments_if_necessary(writer.lookup_name(self)))


class ParameterizedTypeName(TypeName):
    """
    A generic type applied to type arguments, like ``List<String>``.
    """

    raw_type: ClassName
    type_arguments: Tuple[TypeName, ...]
    enclosing_type: Optional[TypeName]

    def __init__(
        self, raw_type: ClassName, type_arguments: Iterable[TypeName], enclosing_type: Optional[TypeName] = None,
        nullable: bool = False, annotations: Iterable['AnnotationSpec'] = (),
        tags: Optional[Mapping[Hashable, Any]] = None,
    ):
        self.raw_type = raw_type
        self.type_arguments = tuple(type_arguments)
        self.enclosing_type = enclosing_type

        if (len(self.type_arguments) == 0) and (enclosing_type is None):
            raise ValueError(f"no type arguments: {raw_type}")

        super().__init__(nullable, annotations, tags)

    def plus_parameter(self, type_argument: TypeName) -> 'ParameterizedTypeName':
        return ParameterizedTypeName(
            self.raw_type, self.type_arguments + (type_argument,), self.enclosing_type, self.nullable, self.annotations,
            self.tags,
        )

    def nested_class(self, name: str, type_arguments: Iterable[TypeName] = ()) -> 'ParameterizedTypeName':
        return ParameterizedTypeName(self.raw_type.nested_class(name), type_arguments, enclosing_type=self)

    def _structure(self) -> tuple:
        return self.enclosing_type, self.raw_type, self.type_arguments

    def _emit(self, writer):
        if self.enclosing_type is not None:
            self.enclosing_type._emit_annotations(writer)
            self.enclosing_type._emit(writer)
            writer.emit('.' + self.raw_type.simple_name)
        else:
            self.raw_type._emit_annotations(writer)
            self.raw_type._emit(writer)

        if len(self.type_arguments) > 0:
            writer.emit('<')
            for index, argument in enumerate(self.type_arguments):
                if index > 0:
                    writer.emit(', ')
                argument._emit_annotations(writer)
                argument._emit(writer)
                argument._emit_nullable(writer)
            writer.emit('>')


class TypeVariableName(TypeName):
    """
    A type variable, like ``T`` in ``class Box<T : Comparable<T>>``.

    A type variable with no explicit bounds is bounded by ``Any?``; this implicit bound is dropped whenever other
    bounds are present.
    """

    name: str
    bounds: Tuple[TypeName, ...]
    variance: Optional[KModifier]
    reified: bool

    def __init__(
        self, name: str, *bounds: TypeName, variance: Optional[KModifier] = None, reified: bool = False,
        nullable: bool = False, annotations: Iterable['AnnotationSpec'] = (),
        tags: Optional[Mapping[Hashable, Any]] = None,
    ):
        if variance not in (None, KModifier.IN, KModifier.OUT):
            raise ValueError(f"{variance} is an invalid variance modifier, the only allowed values are in and out!")

        self.name = name
        self.bounds = _without_implicit_bound(bounds if len(bounds) > 0 else (NULLABLE_ANY,))
        self.variance = variance
        self.reified = bool(reified)

        super().__init__(nullable, annotations, tags)

    def copy(
        self, nullable: Optional[bool] = None, annotations: Optional[Iterable['AnnotationSpec']] = None,
        tags: Optional[Mapping[Hashable, Any]] = None, bounds: Optional[Sequence[TypeName]] = None,
        reified: Optional[bool] = None,
    ) -> 'TypeVariableName':
        clone = super().copy(nullable, annotations, tags)
        if bounds is not None:
            clone.__dict__['bounds'] = _without_implicit_bound(tuple(bounds) if len(bounds) > 0 else (NULLABLE_ANY,))
        if reified is not None:
            clone.__dict__['reified'] = bool(reified)

        return clone

    def _structure(self) -> tuple:
        return self.name, self.bounds, self.variance, self.reified

    def _emit(self, writer):
        writer.emit(self.name)


def _without_implicit_bound(bounds: Tuple[TypeName, ...]) -> Tuple[TypeName, ...]:
    return bounds if len(bounds) == 1 else tuple(bound for bound in bounds if bound != NULLABLE_ANY)


class WildcardTypeName(TypeName):
    """
    A use-site variance projection: ``out T``, ``in T`` or the star projection ``*``.

    Use the `producer_of` and `consumer_of` factories, or the `STAR` constant, to create values of this type.
    """

    out_types: Tuple[TypeName, ...]
    in_types: Tuple[TypeName, ...]

    def __init__(
        self, out_types: Iterable[TypeName], in_types: Iterable[TypeName], nullable: bool = False,
        annotations: Iterable['AnnotationSpec'] = (), tags: Optional[Mapping[Hashable, Any]] = None,
    ):
        self.out_types = tuple(out_types)
        self.in_types = tuple(in_types)

        if len(self.out_types) != 1:
            raise ValueError(f"unexpected out types: {list(self.out_types)!r}")

        super().__init__(nullable, annotations, tags)

    @staticmethod
    def producer_of(out_type: TypeName) -> 'WildcardTypeName':
        return WildcardTypeName((out_type,), ())

    @staticmethod
    def consumer_of(in_type: TypeName) -> 'WildcardTypeName':
        return WildcardTypeName((ANY,), (in_type,))

    def _structure(self) -> tuple:
        return self.out_types, self.in_types

    def _emit(self, writer):
        if len(self.in_types) == 1:
            writer.emit_code('in %T', self.in_types[0])
        elif self.out_types == (NULLABLE_ANY,):
            writer.emit('*')
        else:
            writer.emit_code('out %T', self.out_types[0])


class LambdaTypeName(TypeName):
    """
    A function type, like ``suspend String.(Int) -> Boolean``.
    """

    receiver: Optional[TypeName]
    parameters: Tuple[TypeName, ...]
    return_type: TypeName
    suspending: bool

    def __init__(
        self, parameters: Iterable[TypeName] = (), return_type: Optional[TypeName] = None,
        receiver: Optional[TypeName] = None, suspending: bool = False, nullable: bool = False,
        annotations: Iterable['AnnotationSpec'] = (), tags: Optional[Mapping[Hashable, Any]] = None,
    ):
        self.receiver = receiver
        self.parameters = tuple(parameters)
        self.return_type = UNIT if return_type is None else return_type
        self.suspending = bool(suspending)

        super().__init__(nullable, annotations, tags)

    def _structure(self) -> tuple:
        return self.receiver, self.parameters, self.return_type, self.suspending

    def _emit(self, writer):
        if self.nullable:
            writer.emit('(')
        if self.suspending:
            writer.emit('suspend ')

        if self.receiver is not None:
            writer.emit_code('(%T).' if self.receiver.is_annotated else '%T.', self.receiver)

        writer.emit('(')
        for index, parameter in enumerate(self.parameters):
            if index > 0:
                writer.emit(', ')
            writer.emit_code('%T', parameter)
        writer.emit(')')

        writer.emit_code(' -> (%T)' if isinstance(self.return_type, LambdaTypeName) else ' -> %T', self.return_type)

        if self.nullable:
            writer.emit(')')


_KOTLIN = 'kotlin'
_KOTLIN_COLLECTIONS = 'kotlin.collections'

ANY = ClassName(_KOTLIN, 'Any')
NULLABLE_ANY = ANY.copy(nullable=True)
UNIT = ClassName(_KOTLIN, 'Unit')
NOTHING = ClassName(_KOTLIN, 'Nothing')
STRING = ClassName(_KOTLIN, 'String')
CHAR_SEQUENCE = ClassName(_KOTLIN, 'CharSequence')
CHAR = ClassName(_KOTLIN, 'Char')
BOOLEAN = ClassName(_KOTLIN, 'Boolean')
BYTE = ClassName(_KOTLIN, 'Byte')
SHORT = ClassName(_KOTLIN, 'Short')
INT = ClassName(_KOTLIN, 'Int')
LONG = ClassName(_KOTLIN, 'Long')
FLOAT = ClassName(_KOTLIN, 'Float')
DOUBLE = ClassName(_KOTLIN, 'Double')
NUMBER = ClassName(_KOTLIN, 'Number')
ARRAY = ClassName(_KOTLIN, 'Array')
ENUM = ClassName(_KOTLIN, 'Enum')
THROWABLE = ClassName(_KOTLIN, 'Throwable')
ANNOTATION = ClassName(_KOTLIN, 'Annotation')

ITERABLE = ClassName(_KOTLIN_COLLECTIONS, 'Iterable')
COLLECTION = ClassName(_KOTLIN_COLLECTIONS, 'Collection')
LIST = ClassName(_KOTLIN_COLLECTIONS, 'List')
SET = ClassName(_KOTLIN_COLLECTIONS, 'Set')
MAP = ClassName(_KOTLIN_COLLECTIONS, 'Map')
MAP_ENTRY = MAP.nested_class('Entry')
MUTABLE_ITERABLE = ClassName(_KOTLIN_COLLECTIONS, 'MutableIterable')
MUTABLE_COLLECTION = ClassName(_KOTLIN_COLLECTIONS, 'MutableCollection')
MUTABLE_LIST = ClassName(_KOTLIN_COLLECTIONS, 'MutableList')
MUTABLE_SET = ClassName(_KOTLIN_COLLECTIONS, 'MutableSet')
MUTABLE_MAP = ClassName(_KOTLIN_COLLECTIONS, 'MutableMap')

STAR = WildcardTypeName.producer_of(NULLABLE_ANY)
"""The star projection, ``*``"""


