from __future__ import annotations


def is_cjk(ch: str) -> bool:
    code = ord(ch)
    return (
        0x4E00 <= code <= 0x9FFF
        or 0x3040 <= code <= 0x30FF
        or 0x31F0 <= code <= 0x31FF
        or 0x3400 <= code <= 0x4DBF
    )


def needs_space(left: str, right: str) -> bool:
    """
    True when concatenating `left` and `right` directly would fuse two words:
    the last visible character of `left` and the first visible character of
    `right` are both alphanumeric.
    """

    left_s = left.rstrip()
    right_s = right.lstrip()
    if not left_s or not right_s:
        return False
    a = left_s[-1]
    b = right_s[0]
    if a.isascii() and b.isascii():
        return a.isalnum() and b.isalnum()
    return a.isalpha() and b.isalpha()


def join_inline(left: str, right: str, *, separated: bool = True) -> str:
    """
    Concatenate two fragments of one visual line.

    `separated=False` means the fragments touch on the page, so no space is
    inserted even when both boundary characters are alphanumeric.
    """

    left_s = left.rstrip()
    right_s = right.lstrip()
    if separated and needs_space(left_s, right_s):
        return f"{left_s} {right_s}"
    return f"{left_s}{right_s}"


def merge_confidence(conf_a: float, len_a: int, conf_b: float, len_b: int) -> float:
    total = max(len_a + len_b, 1)
    return (conf_a * len_a + conf_b * len_b) / total


def cjk_ratio(text: str) -> float:
    visible = [ch for ch in text if not ch.isspace()]
    if not visible:
        return 0.0
    return sum(1 for ch in visible if is_cjk(ch)) / len(visible)
