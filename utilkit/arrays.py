"""
Accessors for ordered key-value containers.

"Containers" are mappings (dict and friends) and sequences (list, tuple),
whose keys are their integer indexes.
"""

from collections.abc import Mapping, Sequence, Set
from functools import singledispatch
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import BaseModel


Container = Union[Mapping, Sequence]


def _is_container(value: Any) -> bool:
    """Mappings and non-text sequences."""
    if isinstance(value, Mapping):
        return True
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def _items(container: Container):
    if isinstance(container, Mapping):
        return container.items()
    return enumerate(container)


def get(container: Container, key: Any, default: Any = None) -> Any:
    """
    Get a value from a container by key.

    Presence decides, not truthiness: a key holding None, 0 or "" returns
    that value rather than the default.

    Args:
        container: Mapping or sequence to search
        key: Mapping key or sequence index
        default: Value returned when the key is absent

    Returns:
        The stored value, or default
    """
    if isinstance(container, Mapping):
        return container[key] if key in container else default
    if _is_container(container) and isinstance(key, int) and not isinstance(key, bool):
        return container[key] if 0 <= key < len(container) else default
    return default


def set_value(mapping: Dict[Any, Any], key: Any, value: Any) -> None:
    """Set a value in a mapping in place."""
    mapping[key] = value


def filter_keys(mapping: Mapping, excluded_keys: Iterable[Any]) -> Dict[Any, Any]:
    """
    Filter out keys and their values from a mapping.

    Args:
        mapping: Mapping to filter
        excluded_keys: Keys to leave out

    Returns:
        New dict with the remaining entries in their original order
    """
    excluded = list(excluded_keys)
    return {key: value for key, value in mapping.items() if key not in excluded}


def flatten(nested: Container, preserve_keys: bool = False) -> Union[List[Any], Dict[Any, Any]]:
    """
    Flatten a deeply nested container.

    Args:
        nested: Mapping or sequence, possibly containing further containers
        preserve_keys: Keep each leaf's own key. Colliding keys overwrite
            earlier ones (last write wins)

    Returns:
        List of leaves in traversal order, or a dict of leaf key to value
        when preserve_keys is True
    """
    flattened: Union[List[Any], Dict[Any, Any]] = {} if preserve_keys else []

    def walk(container):
        for key, value in _items(container):
            if _is_container(value):
                walk(value)
            elif preserve_keys:
                flattened[key] = value
            else:
                flattened.append(value)

    walk(nested)
    return flattened


def clean(container: Container) -> Union[List[Any], Dict[Any, Any]]:
    """
    Remove all falsy values ("", 0, False, None, empty containers).

    Args:
        container: Mapping or sequence to clean

    Returns:
        New dict (keys kept) or list with only truthy values
    """
    if isinstance(container, Mapping):
        return {key: value for key, value in container.items() if value}
    return [value for value in container if value]


def first(container: Container) -> Any:
    """Get the first value of a container, None when empty."""
    for _, value in _items(container):
        return value
    return None


def last(container: Container) -> Any:
    """Get the last value of a container, None when empty."""
    if isinstance(container, Mapping):
        return container[list(container)[-1]] if container else None
    return container[-1] if container else None


def is_assoc(container: Container) -> bool:
    """
    Check if a container is associative.

    Args:
        container: Mapping or sequence

    Returns:
        True unless the keys are exactly 0..n-1 in order
    """
    if not isinstance(container, Mapping):
        return False
    return list(container.keys()) != list(range(len(container)))


@singledispatch
def to_array(value: Any, *values: Any) -> Union[List[Any], Dict[str, Any]]:
    """
    Coerce a value to a list or dict.

    Scalars (including str, bytes and None) and any extra positional values
    are collected into a new list. The registered overloads handle the
    other input shapes.

    Args:
        value: Value to coerce
        *values: Further values collected alongside a scalar

    Returns:
        A list or dict
    """
    if hasattr(value, "__dict__") and not callable(value):
        return {key: item for key, item in vars(value).items() if not key.startswith("_")}
    return [value, *values]


@to_array.register(list)
def _(value: list, *values: Any) -> List[Any]:
    return value


@to_array.register(tuple)
@to_array.register(Set)
def _(value, *values: Any) -> List[Any]:
    return list(value)


@to_array.register(Mapping)
def _(value: Mapping, *values: Any) -> Dict[Any, Any]:
    return dict(value)


@to_array.register(BaseModel)
def _(value: BaseModel, *values: Any) -> Dict[str, Any]:
    return value.model_dump()


def obj_to_dict(obj: Any, include: Optional[Iterable[Any]] = None) -> Dict[Any, Any]:
    """
    Map an object to a dict, recursively.

    Args:
        obj: Object, mapping or sequence to remap
        include: Optional keys to keep at every level (default keeps all)

    Returns:
        A dict; nested objects and containers are converted as well
    """
    keep = list(include) if include else None

    if isinstance(obj, Mapping):
        entries = obj.items()
    elif _is_container(obj):
        entries = enumerate(obj)
    elif isinstance(obj, BaseModel):
        entries = obj.model_dump().items()
    else:
        entries = ((k, v) for k, v in vars(obj).items() if not k.startswith("_"))

    mapped = {}
    for key, value in entries:
        if keep is not None and key not in keep:
            continue
        if _is_container(value) or isinstance(value, BaseModel) or (
                hasattr(value, "__dict__") and not callable(value)):
            mapped[key] = obj_to_dict(value, keep)
        else:
            mapped[key] = value
    return mapped
