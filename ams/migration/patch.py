"""Structural patch interpreter (JSON Patch operations over JSON Pointer paths).

Supports ``add``, ``remove``, ``replace``, ``move``, ``copy`` and ``test``.
An operation addressing a missing location fails; each operation is applied
to its own copy of the document, so a failure never leaves a half-applied
operation behind.
"""

import copy
import re
from typing import Any

from ams.errors import ErrorKind, Failure
from ams.migration.models import DiffEntry

SUPPORTED_OPS = frozenset({"add", "remove", "replace", "move", "copy", "test"})

_ARRAY_INDEX = re.compile(r"^(0|[1-9][0-9]*)\Z")


class PatchError(Exception):
    """Raised internally when an operation cannot be applied."""


def parse_pointer(pointer: str) -> list[str]:
    """Split a JSON Pointer into unescaped reference tokens."""
    if not isinstance(pointer, str):
        raise PatchError(f"Pointer must be a string, got {type(pointer).__name__}")
    if pointer == "":
        return []
    if not pointer.startswith("/"):
        raise PatchError(f"Pointer {pointer!r} must start with '/'")
    return [token.replace("~1", "/").replace("~0", "~") for token in pointer[1:].split("/")]


def _array_index(token: str, size: int, *, allow_end: bool) -> int:
    if allow_end and token == "-":
        return size
    if not _ARRAY_INDEX.match(token):
        raise PatchError(f"Invalid array index {token!r}")
    index = int(token)
    limit = size if allow_end else size - 1
    if index > limit:
        raise PatchError(f"Array index {index} out of range")
    return index


def _child(container: Any, token: str) -> Any:
    if isinstance(container, dict):
        if token not in container:
            raise PatchError(f"Member {token!r} not found")
        return container[token]
    if isinstance(container, list):
        return container[_array_index(token, len(container), allow_end=False)]
    raise PatchError(f"Cannot descend into {type(container).__name__} at {token!r}")


def resolve(document: Any, pointer: str) -> Any:
    """Return the value a pointer addresses, raising PatchError when missing."""
    target = document
    for token in parse_pointer(pointer):
        target = _child(target, token)
    return target


def _parent(document: Any, pointer: str) -> tuple[Any, str]:
    tokens = parse_pointer(pointer)
    if not tokens:
        raise PatchError("Operation requires a non-root path")
    parent = document
    for token in tokens[:-1]:
        parent = _child(parent, token)
    return parent, tokens[-1]


def _add(document: Any, pointer: str, value: Any) -> Any:
    if pointer == "":
        return value
    parent, token = _parent(document, pointer)
    if isinstance(parent, dict):
        parent[token] = value
    elif isinstance(parent, list):
        parent.insert(_array_index(token, len(parent), allow_end=True), value)
    else:
        raise PatchError(f"Cannot add to {type(parent).__name__} at {pointer!r}")
    return document


def _remove(document: Any, pointer: str) -> tuple[Any, Any]:
    parent, token = _parent(document, pointer)
    if isinstance(parent, dict):
        if token not in parent:
            raise PatchError(f"Path {pointer!r} not found")
        return document, parent.pop(token)
    if isinstance(parent, list):
        return document, parent.pop(_array_index(token, len(parent), allow_end=False))
    raise PatchError(f"Cannot remove from {type(parent).__name__} at {pointer!r}")


def _replace(document: Any, pointer: str, value: Any) -> Any:
    if pointer == "":
        return value
    parent, token = _parent(document, pointer)
    if isinstance(parent, dict):
        if token not in parent:
            raise PatchError(f"Path {pointer!r} not found")
        parent[token] = value
    elif isinstance(parent, list):
        parent[_array_index(token, len(parent), allow_end=False)] = value
    else:
        raise PatchError(f"Cannot replace in {type(parent).__name__} at {pointer!r}")
    return document


def _require(operation: dict[str, Any], field: str) -> Any:
    if field not in operation:
        raise PatchError(f"Operation {operation.get('op')!r} requires {field!r}")
    return operation[field]


def _require_pointer(operation: dict[str, Any], field: str) -> str:
    pointer = _require(operation, field)
    if not isinstance(pointer, str):
        raise PatchError(f"{field!r} must be a string, got {type(pointer).__name__}")
    return pointer


def json_equal(left: Any, right: Any) -> bool:
    """Compare two JSON values by JSON type as well as value.

    Booleans never equal numbers, and containers are compared member by member.
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if isinstance(left, dict) and isinstance(right, dict):
        return left.keys() == right.keys() and all(json_equal(left[k], right[k]) for k in left)
    if isinstance(left, list) and isinstance(right, list):
        return len(left) == len(right) and all(map(json_equal, left, right))
    if isinstance(left, dict | list) or isinstance(right, dict | list):
        return False
    return left == right


def apply_operation(document: Any, operation: dict[str, Any]) -> tuple[Any, DiffEntry | None]:
    """Apply one operation to ``document`` in place where possible.

    Returns the (possibly new) document and the diff entry describing the
    change, or None for ``test`` which changes nothing.

    Raises:
        PatchError: If the operation is malformed or its target is missing
    """
    if not isinstance(operation, dict):
        raise PatchError("Operation must be an object")
    op = operation.get("op")
    if not isinstance(op, str) or op not in SUPPORTED_OPS:
        raise PatchError(f"Unsupported operation {op!r}")
    path = _require_pointer(operation, "path")

    if op == "add":
        value = copy.deepcopy(_require(operation, "value"))
        return _add(document, path, value), DiffEntry(op=op, path=path, value=value)

    if op == "remove":
        document, _ = _remove(document, path)
        return document, DiffEntry(op=op, path=path)

    if op == "replace":
        value = copy.deepcopy(_require(operation, "value"))
        resolve(document, path)
        return _replace(document, path, value), DiffEntry(op=op, path=path, value=value)

    if op in ("move", "copy"):
        source = _require_pointer(operation, "from")

    if op == "move":
        if source == path:
            resolve(document, source)
            return document, DiffEntry(op=op, path=path, from_path=source)
        if path.startswith(source + "/"):
            raise PatchError(f"Cannot move {source!r} into its own child {path!r}")
        document, value = _remove(document, source)
        return _add(document, path, value), DiffEntry(op=op, path=path, from_path=source)

    if op == "copy":
        value = copy.deepcopy(resolve(document, source))
        return _add(document, path, value), DiffEntry(
            op=op, path=path, value=value, from_path=source
        )

    # test
    expected = _require(operation, "value")
    actual = resolve(document, path)
    if not json_equal(actual, expected):
        raise PatchError(f"Test failed at {path!r}")
    return document, None


def apply_patch(
    document: Any,
    operations: list[dict[str, Any]],
) -> tuple[Any, list[DiffEntry]] | Failure:
    """Apply ``operations`` in order to a copy of ``document``.

    Returns:
        The patched document and the diff entries actually applied, or an
        INVALID_PATCH Failure naming the offending operation.
    """
    current = copy.deepcopy(document)
    diff: list[DiffEntry] = []

    for index, operation in enumerate(operations):
        try:
            current, entry = apply_operation(copy.deepcopy(current), operation)
        except PatchError as e:
            return Failure.of(
                ErrorKind.INVALID_PATCH,
                str(e),
                operation_index=index,
                operation=operation,
            )
        if entry is not None:
            diff.append(entry)

    return current, diff
