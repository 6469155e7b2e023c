"""Text-level indentation for KeyValues output.

The formatter never looks at the tree: it walks lines and tracks brace
depth, so it can re-indent any brace-delimited text, including text that
was already formatted.
"""

from typing import List


def format_text(text: str, indent: str = "  ") -> str:
    """Re-indent brace-delimited KeyValues text.

    A line ending in ``}`` is dedented before it is written; a line ending
    in ``{`` indents the lines after it. Lines that continue a multi-line
    quoted string are written unchanged, and braces inside strings do not
    count.

    Args:
        text: KeyValues text, one token group per line
        indent: Indentation unit per nesting level

    Returns:
        Re-indented text without a trailing newline.
    """
    lines: List[str] = []
    depth = 0
    in_string = False

    for raw_line in text.split("\n"):
        if in_string:
            lines.append(raw_line)
            in_string = _ends_inside_string(raw_line, True)
            continue

        line = raw_line.lstrip()
        if not line.strip():
            continue

        in_string = _ends_inside_string(line, False)
        if not in_string:
            line = line.rstrip()
        if not in_string and line.endswith("}"):
            depth = max(depth - 1, 0)
        lines.append(indent * depth + line)
        if not in_string and line.endswith("{"):
            depth += 1

    return "\n".join(lines)


def trim_root(text: str, indent: str = "  ") -> str:
    """Strip the single outermost brace pair and dedent its contents.

    Text that is not wrapped in a root brace pair is returned as is.
    """
    lines = text.split("\n")
    if len(lines) < 2 or lines[0].strip() != "{" or lines[-1].strip() != "}":
        return text

    body = []
    in_string = False
    for line in lines[1:-1]:
        if not in_string and line.startswith(indent):
            line = line[len(indent):]
        body.append(line)
        in_string = _ends_inside_string(line, in_string)
    return "\n".join(body)


def _ends_inside_string(line: str, in_string: bool) -> bool:
    """Whether an open quoted string carries over past the end of ``line``."""
    if line.count('"') % 2:
        return not in_string
    return in_string
