from typing import AbstractSet, Dict, Hashable, Iterable, Optional, Set

from atmfjstc.lib.kotlin_codegen.errors import TagAlreadyBoundError, UnknownTagError
from atmfjstc.lib.kotlin_codegen.lexical import KEYWORDS, is_identifier_part, is_identifier_start


class NameAllocator:
    """
    Assigns Kotlin identifier names to avoid collisions, keywords, and invalid characters.

    Create an allocator for each scope in which names must be unique (e.g. the body of a function). Request a name for
    each symbol using `new_name`, optionally passing a *tag* (any hashable value) that can later be used with `get` to
    retrieve the allocated name::

        allocator = NameAllocator()
        allocator.new_name('count', tag=count_param)
        allocator.new_name('count', tag=count_local)   # -> 'count_'
        ...
        allocator.get(count_local)                      # -> 'count_'

    Suggested names are sanitized (characters that are invalid in identifiers are replaced with underscores) and then
    suffixed with underscores until they are unique within the allocator.

    Notes:

    - The reserved words are configuration owned by each allocator, not global state. By default the Kotlin keyword
      set is preallocated, so that a request for e.g. ``'when'`` yields ``'when_'``.
    - Allocators are mutable and not thread-safe. Use `copy` to fork an allocator for a nested scope.
    """

    _allocated_names: Set[str]
    _tag_to_name: Dict[Hashable, str]

    def __init__(self, preallocate_keywords: bool = True, keywords: Iterable[str] = KEYWORDS):
        self._allocated_names = set(keywords) if preallocate_keywords else set()
        self._tag_to_name = dict()

    @property
    def allocated_names(self) -> AbstractSet[str]:
        return frozenset(self._allocated_names)

    def new_name(self, suggestion: str, tag: Optional[Hashable] = None) -> str:
        """
        Allocates a unique name based on a suggestion.

        Args:
            suggestion: The desired name. It will be sanitized and made unique as described in the class docs.
            tag: An optional tag under which the allocated name will be recorded. If omitted, a private throwaway
                tag is used and the name cannot be looked up later.

        Returns:
            The allocated name.

        Raises:
            TagAlreadyBoundError: If the tag is already associated with a name. The allocator is left unchanged.
        """
        if tag is None:
            tag = object()

        result = to_identifier(suggestion)
        while result in self._allocated_names:
            result += '_'

        if tag in self._tag_to_name:
            raise TagAlreadyBoundError(tag, self._tag_to_name[tag], result)

        self._allocated_names.add(result)
        self._tag_to_name[tag] = result

        return result

    def get(self, tag: Hashable) -> str:
        """Retrieves the name allocated for a tag, or throws `UnknownTagError`"""
        try:
            return self._tag_to_name[tag]
        except KeyError:
            raise UnknownTagError(tag) from None

    def __getitem__(self, tag: Hashable) -> str:
        return self.get(tag)

    def __contains__(self, tag: Hashable) -> bool:
        return tag in self._tag_to_name

    def copy(self) -> 'NameAllocator':
        """
        Creates an independent copy of this allocator. Allocations made afterwards in either allocator are not visible
        in the other.
        """
        clone = NameAllocator(preallocate_keywords=False)
        clone._allocated_names = set(self._allocated_names)
        clone._tag_to_name = dict(self._tag_to_name)

        return clone


def to_identifier(suggestion: str) -> str:
    """
    Sanitizes an arbitrary string into a valid identifier.

    Each codepoint that is not valid inside an identifier is replaced with ``_``. If the first codepoint may appear
    inside an identifier but not at its start (e.g. a digit), an ``_`` is prepended instead of replacing it.
    """
    parts = []

    for index, char in enumerate(suggestion):
        if (index == 0) and not is_identifier_start(char) and is_identifier_part(char):
            parts.append('_')

        parts.append(char if is_identifier_part(char) else '_')

    return ''.join(parts) if len(parts) > 0 else '_'
