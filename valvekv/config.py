"""Configuration classes for KeyValues parsing and serialization."""

from dataclasses import dataclass

SEQUENCE_ORDERS = ("numeric", "lexicographic")


@dataclass
class KvConfig:
    """Configuration for KeyValues parsing and serialization.

    Attributes:
        indent: Indentation unit written per nesting level.
        wrap_root: Keep the outermost brace pair when serializing a
            struct or map, producing an embeddable fragment instead of
            a standalone document.
        sequence_order: How section keys are ordered when a section is
            read as a sequence. ``"numeric"`` compares integer keys by
            value; ``"lexicographic"`` reproduces the legacy text sort
            where ``"10"`` comes before ``"2"``.
        max_depth: Maximum section nesting accepted by the tokenizer.
        base_marker: Directive that introduces an import.
    """

    indent: str = "  "
    wrap_root: bool = False
    sequence_order: str = "numeric"
    max_depth: int = 100
    base_marker: str = "#base"

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.indent.strip():
            raise ValueError("Indent must contain only whitespace")

        if self.sequence_order not in SEQUENCE_ORDERS:
            raise ValueError(
                f"Unknown sequence order '{self.sequence_order}', "
                f"expected one of {', '.join(SEQUENCE_ORDERS)}"
            )

        if self.max_depth < 1:
            raise ValueError("max_depth must be at least 1")

        if not self.base_marker or not self.base_marker.startswith("#"):
            raise ValueError("Import marker must start with '#'")
        if any(c in self.base_marker for c in [' ', '\t', '\n', '\r', '"']):
            raise ValueError("Import marker cannot contain whitespace or quotes")
