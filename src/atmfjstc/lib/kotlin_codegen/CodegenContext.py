from dataclasses import dataclass


@dataclass(frozen=True)
class CodegenContext:
    """
    Holds options that control how a Kotlin file is rendered to text.

    For safety, objects of this type are immutable. To "modify" a context, you can create an altered copy by calling
    its `derive` function, similar to how one would call `replace` for a named tuple.

    Attributes:
        indent: The string used for one level of indentation. It must consist only of spaces and/or tabs.
        column_limit: The number of columns available for rendering the code. The line wrapper will break lines at
            wrap points so as to fit this width, but note that success is not guaranteed: an unbreakable run of text
            that is wider than the limit is emitted as-is.
    """

    indent: str = '  '
    column_limit: int = 100

    def __post_init__(self):
        if not isinstance(self.indent, str) or (self.indent.strip(' \t') != ''):
            raise ValueError(f"Indent must be a string of spaces and/or tabs, got {self.indent!r}")
        if isinstance(self.column_limit, bool) or not isinstance(self.column_limit, int) or (self.column_limit <= 0):
            raise ValueError(f"Column limit must be a positive integer, got {self.column_limit!r}")

    def derive(self, indent=None, column_limit=None):
        """
        Creates a modified copy of this rendering context (contexts are otherwise immutable).

        Args:
            indent: The new indent string for the context (or None to leave it unchanged)
            column_limit: The new column limit for the context (or None to leave it unchanged)

        Returns:
            A context with the modifications performed.
        """
        def coalesce(a, b):
            return a if b is None else b

        return CodegenContext(
            indent=coalesce(self.indent, indent),
            column_limit=coalesce(self.column_limit, column_limit),
        )


DEFAULT_CONTEXT = CodegenContext()
