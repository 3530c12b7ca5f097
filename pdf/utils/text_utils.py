# pdf/utils/text_utils.py

def sanitize_text(value):
    """
    Ensures text is safe for FPDF core fonts (Latin-1) by converting to
    string and replacing unsupported characters.
    """
    if value is None:
        return ""

    text = str(value)
    return text.encode("latin-1", "replace").decode("latin-1")


def wrap_text(text, max_chars=80):
    """
    Splits long text into lines of at most max_chars, breaking on words.
    Words longer than max_chars are hard-split.
    """
    if not text:
        return [""]

    words = text.split()
    lines = []
    current = []
    count = 0

    for w in words:
        while len(w) > max_chars:
            if current:
                lines.append(" ".join(current))
                current, count = [], 0
            lines.append(w[:max_chars])
            w = w[max_chars:]

        if current and count + len(w) + 1 > max_chars:
            lines.append(" ".join(current))
            current = [w]
            count = len(w)
        else:
            current.append(w)
            count += len(w) + (1 if count else 0)

    if current:
        lines.append(" ".join(current))

    return lines or [""]


def wrap_block(text, max_chars=80):
    """Keep the author's line breaks (addresses) and wrap each line."""
    if not text:
        return []

    lines = []
    for raw in str(text).splitlines():
        lines.extend(wrap_text(raw.strip(), max_chars) if raw.strip() else [""])
    return lines


__all__ = ["sanitize_text", "wrap_text", "wrap_block"]
