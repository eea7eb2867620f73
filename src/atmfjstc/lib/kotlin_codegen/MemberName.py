from typing import Optional

from atmfjstc.lib.kotlin_codegen.typenames import ClassName
from atmfjstc.lib.kotlin_codegen.lexical import escape_segments_if_necessary


class MemberName:
    """
    The fully-qualified name of a top-level or class member (function or property), for use with the ``%M``
    placeholder. Members are imported just like types when this is safe.

    Attributes:
        package_name: The package that contains the member (or its enclosing class)
        simple_name: The name of the member itself
        enclosing_class_name: The class that contains the member, or None for top-level members
        is_extension: Whether the member is an extension. Extension members are always imported, even when they
            clash with a function declared in the current type, since they cannot be called by their qualified name.
    """

    package_name: str
    simple_name: str
    enclosing_class_name: Optional[ClassName]
    is_extension: bool

    _locked = False

    def __init__(
        self, package_name: str, simple_name: str, enclosing_class_name: Optional[ClassName] = None,
        is_extension: bool = False,
    ):
        if (enclosing_class_name is not None) and (enclosing_class_name.package_name != package_name):
            raise ValueError(
                f"Package '{package_name}' does not match that of enclosing class {enclosing_class_name.canonical_name}"
            )

        self.package_name = package_name
        self.simple_name = simple_name
        self.enclosing_class_name = enclosing_class_name
        self.is_extension = bool(is_extension)
        self._locked = True

    @staticmethod
    def member_of(enclosing_class_name: ClassName, simple_name: str, is_extension: bool = False) -> 'MemberName':
        return MemberName(enclosing_class_name.package_name, simple_name, enclosing_class_name, is_extension)

    def __setattr__(self, name, value):
        if self._locked:
            raise AttributeError(f"Attribute '{name}' cannot be set in immutable MemberName")

        super().__setattr__(name, value)

    @property
    def canonical_name(self) -> str:
        if self.enclosing_class_name is not None:
            return f"{self.enclosing_class_name.canonical_name}.{self.simple_name}"
        if self.package_name.strip() != '':
            return f"{self.package_name}.{self.simple_name}"

        return self.simple_name

    def reference(self):
        """Returns a callable reference to this member, like ``::println`` or ``String::length``"""
        from atmfjstc.lib.kotlin_codegen.CodeBlock import CodeBlock

        if self.enclosing_class_name is None:
            return CodeBlock.of('::%M', self)

        return CodeBlock.of('%T::%N', self.enclosing_class_name, self.simple_name)

    def _key(self):
        return self.package_name, self.enclosing_class_name, self.simple_name, self.is_extension

    def __eq__(self, other):
        return isinstance(other, MemberName) and (self._key() == other._key())

    def __hash__(self):
        return hash(self._key())

    def __str__(self):
        return self.canonical_name

    def __repr__(self):
        return f"MemberName({self.canonical_name!r})"

    def _emit(self, writer):
        writer.emit(escape_segments_if_necessary(writer.lookup_name(self)))
