"""
Typed access into decoded JSON documents.

GitHub's GraphQL responses are deeply nested and fields come and go depending
on what a repository has configured. These helpers take a JSON pointer
(e.g. "/commits/nodes/0/commit") and either return a value of the expected
type or raise a NavigationError naming the exact path that was wrong.
"""

from typing import Any, Optional

from errors import NavigationError

_MISSING = object()


def _split_pointer(path: str) -> list[str]:
    if path == "":
        return []
    if not path.startswith("/"):
        raise ValueError(f"{path!r} is not a JSON pointer")

    return [
        part.replace("~1", "/").replace("~0", "~")
        for part in path[1:].split("/")
    ]


def _resolve(node: Any, path: str) -> Any:
    current = node
    for part in _split_pointer(path):
        if isinstance(current, dict):
            if part not in current:
                return _MISSING
            current = current[part]
        elif isinstance(current, list):
            if not part.isdecimal():
                return _MISSING
            index = int(part)
            if index >= len(current):
                return _MISSING
            current = current[index]
        else:
            return _MISSING

    return current


def _require(node: Any, path: str) -> Any:
    value = _resolve(node, path)
    if value is _MISSING:
        raise NavigationError(path, f"could not get {path}")
    return value


def _is_u64(value: Any) -> bool:
    # bool is a subclass of int, but JSON true/false are not numbers
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def lookup(node: Any, path: str) -> Optional[Any]:
    """
    Resolve a JSON pointer, returning None if any part of it is missing.

    Note that a present JSON null also comes back as None. Use has_path() when
    the two need to be told apart.
    """
    value = _resolve(node, path)
    return None if value is _MISSING else value


def has_path(node: Any, path: str) -> bool:
    """Whether the pointer resolves to something, including JSON null."""
    return _resolve(node, path) is not _MISSING


def get_str(node: Any, path: str) -> str:
    value = _require(node, path)
    if not isinstance(value, str):
        raise NavigationError(path, f"{path} was not a string")
    return value


def get_optional_str(node: Any, path: str) -> Optional[str]:
    """Like get_str(), but a missing path is None rather than an error."""
    value = _resolve(node, path)
    if value is _MISSING:
        return None
    if not isinstance(value, str):
        raise NavigationError(path, f"{path} was not a string")
    return value


def get_nullable_str(node: Any, path: str) -> Optional[str]:
    """Like get_str(), but a present JSON null is None. The path must exist."""
    value = _require(node, path)
    if value is None:
        return None
    if not isinstance(value, str):
        raise NavigationError(path, f"{path} was not a string")
    return value


def get_bool(node: Any, path: str) -> bool:
    value = _require(node, path)
    if not isinstance(value, bool):
        raise NavigationError(path, f"{path} was not a bool")
    return value


def get_u64(node: Any, path: str) -> int:
    value = _require(node, path)
    if not _is_u64(value):
        raise NavigationError(path, f"{path} was not an integer")
    return value


def get_array(node: Any, path: str) -> list:
    value = _require(node, path)
    if not isinstance(value, list):
        raise NavigationError(path, f"{path} was not an array")
    return value
