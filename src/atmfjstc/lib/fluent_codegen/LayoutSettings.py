from dataclasses import dataclass, replace


@dataclass(frozen=True)
class LayoutSettings:
    """
    Holds the options that control how a `LayoutEngine` lays out generated text.

    For safety, objects of this type are immutable. To "modify" the settings, create an altered copy by calling the
    `derive` function, similar to how one would call `replace` for a named tuple.

    The defaults are suitable for C-family languages (Java, C#, JavaScript etc.)

    Attributes:
        line_limit: The column budget. Words that would extend past this column cause a line wrap. Note that a single
            word that is wider than the budget is still emitted as-is, on a line by itself.
        indent: The number of columns by which the content of each block (and each wrapped line) is indented
        block_open: The text that opens a block
        block_close: The text that closes a block
        statement_terminator: The text that ends a statement (an empty string disables terminators altogether)
        attached_punctuation: Single characters that, when appended raw, snap back onto the previous token, ignoring
            any whitespace or line breaks that were emitted since
        opening_delimiters: Characters after which a word is not preceded by a space
        statement_enders: Characters after which a new statement must start on a new line
        string_quote: The quote character used for string literals
        line_comment_prefix: The text that starts a line comment
    """

    line_limit: int = 80
    indent: int = 4
    block_open: str = '{'
    block_close: str = '}'
    statement_terminator: str = ';'
    attached_punctuation: str = ',;'
    opening_delimiters: str = '([{<'
    statement_enders: str = ';}'
    string_quote: str = '"'
    line_comment_prefix: str = '// '

    def __post_init__(self):
        if self.line_limit <= 1:
            raise ValueError(f"Line limit must be greater than 1, got {self.line_limit}")
        if self.indent < 0:
            raise ValueError(f"Indent must be non-negative, got {self.indent}")

    def derive(self, **changes) -> 'LayoutSettings':
        """
        Creates a modified copy of these settings (settings are otherwise immutable).

        Args:
            **changes: New values for any of the attributes; those not mentioned are left unchanged.

        Returns:
            The settings with the modifications performed. The new values are validated just like for a fresh object.
        """
        return replace(self, **changes)


DEFAULT_SETTINGS = LayoutSettings()
