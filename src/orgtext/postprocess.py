"""Output buffer clean-up applied after an export pass.

Both steps leave already processed text unchanged, so running the whole
post-processing twice gives the same result as running it once.
"""


def comment_lines(text: str, prefix: str = ';; ') -> str:
    """Turn every line into a comment starting with prefix.

    Lines that already start with the comment marker are left alone and
    blank lines become the bare marker. Such a line (an exported ";; note")
    keeps a single comment level, and a second pass changes nothing.
    """
    if not text.strip():
        return text
    marker = prefix.rstrip() or prefix
    ends_with_newline = text.endswith('\n')
    if ends_with_newline:
        text = text[:-1]
    out = []
    for line in text.split('\n'):
        if line.startswith(marker):
            out.append(line)
        elif not line.strip():
            out.append(marker)
        else:
            out.append(prefix + line)
    return '\n'.join(out) + ('\n' if ends_with_newline else '')


def trim_trailing_whitespace(text: str) -> str:
    """Strip whitespace at line ends and drop blank lines at the end."""
    lines = [line.rstrip() for line in text.split('\n')]
    while lines and not lines[-1]:
        lines.pop()
    return '\n'.join(lines) + '\n' if lines else ''


def postprocess(text: str, prefix: str = ';; ') -> str:
    return trim_trailing_whitespace(comment_lines(text, prefix))
