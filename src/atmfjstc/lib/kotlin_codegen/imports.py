"""
Import decisions for rendered files.

A file is rendered in two passes. During the first (collection) pass, the writer reports every type and member that
it could not name locally to an `ImportResolver`, along with every simple name that it did manage to use unqualified.
At the end of the pass, the resolver decides which of the collected names can safely be imported:

- a simple name that is used for exactly one qualified name, and that is not already taken by a local or same-package
  name, gets a plain import;
- a simple name that is shared by two or more qualified names gets no import at all, and all of those names remain
  fully qualified in the output.

Types and members share the same simple-name namespace, so a type and a member with the same simple name also count
as a collision: neither is imported.
"""

import logging

from functools import total_ordering
from typing import Dict, List, Mapping, NamedTuple, Optional, Set

from atmfjstc.lib.kotlin_codegen.lexical import escape_if_necessary, escape_segments_if_necessary
from atmfjstc.lib.kotlin_codegen.typenames import ClassName
from atmfjstc.lib.kotlin_codegen.MemberName import MemberName


LOG = logging.getLogger(__name__)


@total_ordering
class Import:
    """
    An ``import`` directive, optionally with an alias (``import a.b.C as D``).

    Imports sort by their rendered text, except that aliased imports always sort after plain ones.
    """

    __slots__ = ('_qualified_name', '_alias')

    def __init__(self, qualified_name: str, alias: Optional[str] = None):
        if qualified_name == '':
            raise ValueError("Import must have a non-empty qualified name")

        object.__setattr__(self, '_qualified_name', qualified_name)
        object.__setattr__(self, '_alias', alias)

    def __setattr__(self, name, value):
        raise AttributeError("Import is immutable")

    @property
    def qualified_name(self) -> str:
        return self._qualified_name

    @property
    def alias(self) -> Optional[str]:
        return self._alias

    def __str__(self):
        text = escape_segments_if_necessary(self._qualified_name)
        if self._alias is not None:
            text += ' as ' + escape_if_necessary(self._alias)

        return text

    def __repr__(self):
        return f"Import({str(self)!r})"

    def _sort_key(self):
        return self._alias is not None, str(self)

    def __eq__(self, other):
        if not isinstance(other, Import):
            return False

        return (self._qualified_name, self._alias) == (other._qualified_name, other._alias)

    def __lt__(self, other):
        if not isinstance(other, Import):
            return NotImplemented

        return self._sort_key() < other._sort_key()

    def __hash__(self):
        return hash((self._qualified_name, self._alias))


class ImportDecision(NamedTuple):
    """
    The outcome of the collection pass.

    Attributes:
        imports: The generated imports, keyed by qualified name
        types: The imported types, keyed by the simple name (or alias) under which they are visible
        members: The imported members, keyed by the simple name (or alias) under which they are visible
    """
    imports: Dict[str, Import]
    types: Dict[str, ClassName]
    members: Dict[str, MemberName]


class ImportResolver:
    """
    Collects importable and referenced names during the collection pass, and decides the imports for the final pass.

    Explicit imports specified by the caller are taken into account: an explicit alias replaces the simple name under
    which a symbol is registered.
    """

    _explicit_imports: Dict[str, Import]
    _importable_types: Dict[str, List[ClassName]]
    _importable_members: Dict[str, List[MemberName]]
    _referenced_names: Set[str]

    def __init__(self, explicit_imports: Optional[Mapping[str, Import]] = None):
        self._explicit_imports = dict(explicit_imports or dict())
        self._importable_types = dict()
        self._importable_members = dict()
        self._referenced_names = set()

    def alias_for(self, qualified_name: str) -> Optional[str]:
        explicit = self._explicit_imports.get(qualified_name)

        return explicit.alias if explicit is not None else None

    @property
    def referenced_names(self) -> Set[str]:
        return set(self._referenced_names)

    def mark_referenced(self, simple_name: str):
        """Records that a simple name has been emitted unqualified, and thus cannot be used for an import"""
        self._referenced_names.add(simple_name)

    def register_type(self, class_name: ClassName):
        alias = self.alias_for(class_name.canonical_name)
        if alias is not None:
            candidate = class_name.copy(nullable=False, annotations=())
            simple_name = alias
        else:
            candidate = class_name.top_level_class_name()
            simple_name = candidate.simple_name

        _add_distinct(self._importable_types.setdefault(simple_name, []), candidate)

    def register_member(self, member_name: MemberName):
        if member_name.package_name == '':
            return

        simple_name = self.alias_for(member_name.canonical_name) or member_name.simple_name
        _add_distinct(self._importable_members.setdefault(simple_name, []), member_name)

    def suggested_imports(self) -> ImportDecision:
        """
        Decides which of the collected names will be imported.

        Returns:
            An `ImportDecision` covering both types and members.
        """
        imports = dict()
        types = dict()
        members = dict()

        for simple_name in dict.fromkeys(list(self._importable_types) + list(self._importable_members)):
            class_names = self._importable_types.get(simple_name, [])
            member_names = self._importable_members.get(simple_name, [])

            # Types and members share one namespace, so a clash between the two kinds is a collision too
            qualified_names = []
            for name in class_names + member_names:
                _add_distinct(qualified_names, name.canonical_name)

            chosen = self._decide(simple_name, qualified_names)
            if chosen is None:
                continue

            if len(class_names) > 0:
                types[simple_name] = class_names[0]
            if len(member_names) > 0:
                members[simple_name] = member_names[0]
            imports[chosen] = Import(chosen, self._generated_alias(chosen, simple_name))

        return ImportDecision(imports, types, members)

    def _decide(self, simple_name: str, qualified_names: List[str]) -> Optional[str]:
        if simple_name in self._referenced_names:
            LOG.debug("Not importing %s: the name '%s' is already used locally", qualified_names, simple_name)
            return None

        if len(qualified_names) > 1:
            LOG.debug(
                "Not importing any of %s: they share the simple name '%s' and will stay fully qualified",
                qualified_names, simple_name,
            )
            return None

        LOG.debug("Importing %s as '%s'", qualified_names[0], simple_name)

        return qualified_names[0]

    def _generated_alias(self, qualified_name: str, simple_name: str) -> Optional[str]:
        return simple_name if self.alias_for(qualified_name) is not None else None


def _add_distinct(items: list, item):
    if item not in items:
        items.append(item)
