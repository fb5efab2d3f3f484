def escape_sql_identifier(*parts: str) -> str:
    """
    Escapes the name components to make them SQL safe.

    Args:
        parts (str): The components of an object name, outermost first. Empty components are skipped.

    Returns:
         str: The dot-joined name with all parts wrapped in double quotes.
    """
    escaped = [f'"{part.replace(chr(34), chr(34) * 2)}"' for part in parts if part]
    return ".".join(escaped)


def escape_sql_string(value: str) -> str:
    """Wraps a value in single quotes, backslash-escaping embedded quotes and backslashes."""
    return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"


def split_string_to_set(value: str, sep: str = ",") -> frozenset[str]:
    """Splits a delimited string, dropping blank items. An empty string yields an empty set."""
    return frozenset(item.strip() for item in value.split(sep) if item.strip())
