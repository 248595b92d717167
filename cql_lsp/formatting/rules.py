"""Named formatting presets."""

from __future__ import annotations

from .core import FormattingOptions, IndentStyle


class DefaultFormattingRules:
    """Formatting presets offered to the server and the CLI."""

    @classmethod
    def standard(cls) -> FormattingOptions:
        """Four space indentation."""
        return FormattingOptions(indent_style=IndentStyle.SPACES, indent_size=4)

    @classmethod
    def tabs(cls) -> FormattingOptions:
        return FormattingOptions(indent_style=IndentStyle.TABS, indent_size=1)

    @classmethod
    def with_indent(cls, indent_size: int) -> FormattingOptions:
        if indent_size == 0:
            return cls.tabs()
        return FormattingOptions(indent_style=IndentStyle.SPACES, indent_size=indent_size)


__all__ = ["DefaultFormattingRules"]
