from enum import Enum
from typing import AbstractSet, Iterable, List


class ModifierTarget(Enum):
    CLASS = 'class'
    VARIANCE_ANNOTATION = 'variance annotation'
    PARAMETER = 'parameter'
    TYPE_PARAMETER = 'type parameter'
    FUNCTION = 'function'
    PROPERTY = 'property'
    INTERFACE = 'interface'


_T = ModifierTarget


class KModifier(Enum):
    """
    Kotlin declaration modifiers.

    The members are listed in the order recommended by the Kotlin coding conventions, which is also the order in which
    they are rendered.
    """

    # Access
    PUBLIC = ('public', _T.PROPERTY)
    PROTECTED = ('protected', _T.PROPERTY)
    PRIVATE = ('private', _T.PROPERTY)
    INTERNAL = ('internal', _T.PROPERTY)

    # Multiplatform modules
    EXPECT = ('expect', _T.CLASS, _T.FUNCTION, _T.PROPERTY)
    ACTUAL = ('actual', _T.CLASS, _T.FUNCTION, _T.PROPERTY)

    FINAL = ('final', _T.CLASS, _T.FUNCTION, _T.PROPERTY)
    OPEN = ('open', _T.CLASS, _T.FUNCTION, _T.PROPERTY)
    ABSTRACT = ('abstract', _T.CLASS, _T.FUNCTION, _T.PROPERTY)
    SEALED = ('sealed', _T.CLASS)
    CONST = ('const', _T.PROPERTY)
    EXTERNAL = ('external', _T.CLASS, _T.FUNCTION, _T.PROPERTY)
    OVERRIDE = ('override', _T.FUNCTION, _T.PROPERTY)
    LATEINIT = ('lateinit', _T.PROPERTY)
    TAILREC = ('tailrec', _T.FUNCTION)
    VARARG = ('vararg', _T.PARAMETER)
    SUSPEND = ('suspend', _T.FUNCTION)
    INNER = ('inner', _T.CLASS)
    ENUM = ('enum', _T.CLASS)
    ANNOTATION = ('annotation', _T.CLASS)
    VALUE = ('value', _T.CLASS)
    FUN = ('fun', _T.INTERFACE)
    COMPANION = ('companion', _T.CLASS)

    # Call-site compiler tips
    INLINE = ('inline', _T.FUNCTION)
    NOINLINE = ('noinline', _T.PARAMETER)
    CROSSINLINE = ('crossinline', _T.PARAMETER)
    REIFIED = ('reified', _T.TYPE_PARAMETER)
    INFIX = ('infix', _T.FUNCTION)
    OPERATOR = ('operator', _T.FUNCTION)
    DATA = ('data', _T.CLASS)
    IN = ('in', _T.VARIANCE_ANNOTATION)
    OUT = ('out', _T.VARIANCE_ANNOTATION)

    @property
    def keyword(self) -> str:
        return self.value[0]

    @property
    def targets(self) -> AbstractSet[ModifierTarget]:
        return frozenset(self.value[1:])

    def __repr__(self):
        return f"KModifier.{self.name}"

    def __str__(self):
        return self.keyword


VISIBILITY_MODIFIERS = frozenset((KModifier.PUBLIC, KModifier.INTERNAL, KModifier.PROTECTED, KModifier.PRIVATE))


def sorted_modifiers(modifiers: Iterable[KModifier]) -> List[KModifier]:
    """Returns the distinct modifiers in a set, in canonical declaration order"""
    present = set(modifiers)

    return [modifier for modifier in KModifier if modifier in present]
