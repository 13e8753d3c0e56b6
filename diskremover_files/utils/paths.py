# 1 GB in binary
GB = 1024 * 1024 * 1024


def append_sub_path(path: str, sub_path: str) -> str:
    """Append a sub path to a path, with exactly one separator between them.

    Args:
        path (str): The parent path, with or without a trailing slash.
        sub_path (str): The path to append, with or without a leading slash.

    Returns:
        str: The joined path.
    """
    separator = "" if path.endswith("/") else "/"
    if sub_path.startswith("/"):
        sub_path = sub_path[1:]
    return f"{path}{separator}{sub_path}"


def bytes_to_gb(size: int) -> float:
    return size / GB
