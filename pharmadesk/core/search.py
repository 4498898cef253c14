LIKE_ESCAPE = "\\"


def contains_pattern(value: str) -> str:
    """``%value%`` with LIKE wildcards in the value matched literally.

    Use with ``column.ilike(pattern, escape=LIKE_ESCAPE)``.
    """
    text = value.strip()
    for char in (LIKE_ESCAPE, "%", "_"):
        text = text.replace(char, LIKE_ESCAPE + char)
    return "%{}%".format(text)


__all__ = ["LIKE_ESCAPE", "contains_pattern"]
