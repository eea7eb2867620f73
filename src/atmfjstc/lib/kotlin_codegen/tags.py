"""
Support for attaching arbitrary caller-defined metadata ("tags") to model values.

A tag is stored under a key, which is any hashable discriminator chosen by the caller (a string, a class, a sentinel
object etc.) Tags never take part in equality, hashing or rendering.
"""

from typing import Any, Hashable, Iterator, Mapping, Optional

from atmfjstc.lib.kotlin_codegen.errors import UnknownTagError


class TagMap(Mapping[Hashable, Any]):
    """
    An immutable key -> value mapping of tags.
    """

    __slots__ = ('_data',)

    def __init__(self, tags: Optional[Mapping[Hashable, Any]] = None):
        object.__setattr__(self, '_data', dict(tags) if tags is not None else dict())

    def __setattr__(self, name, value):
        raise AttributeError("TagMap is immutable")

    def __getitem__(self, key: Hashable) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self):
        return f"TagMap({self._data!r})"

    def tag(self, key: Hashable) -> Optional[Any]:
        """Returns the tag stored under the given key, or None if there is no such tag"""
        return self._data.get(key)

    def require_tag(self, key: Hashable) -> Any:
        """Returns the tag stored under the given key, or throws `UnknownTagError` if there is no such tag"""
        try:
            return self._data[key]
        except KeyError:
            raise UnknownTagError(key) from None


EMPTY_TAGS = TagMap()


def as_tag_map(tags: Optional[Mapping[Hashable, Any]]) -> TagMap:
    if tags is None:
        return EMPTY_TAGS

    return tags if isinstance(tags, TagMap) else TagMap(tags)


class Taggable:
    """
    Mixin for immutable values that carry a `TagMap` in their ``tags`` attribute.
    """

    tags: TagMap

    def tag(self, key: Hashable) -> Optional[Any]:
        return self.tags.tag(key)

    def require_tag(self, key: Hashable) -> Any:
        return self.tags.require_tag(key)


class TaggableBuilder:
    """
    Mixin for builders that accumulate tags in a mutable ``tags`` dict.
    """

    tags: dict

    def tag(self, key: Hashable, value: Any):
        """
        Attaches a tag to the value being built. A later call with the same key replaces the value; passing None as
        the value removes the tag.
        """
        if value is None:
            self.tags.pop(key, None)
        else:
            self.tags[key] = value

        return self

    def _build_tags(self) -> TagMap:
        return TagMap(self.tags)
