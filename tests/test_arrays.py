"""Tests for utilkit.arrays."""

from pydantic import BaseModel

from utilkit.arrays import (
    clean,
    filter_keys,
    first,
    flatten,
    get,
    is_assoc,
    last,
    obj_to_dict,
    set_value,
    to_array,
)


class Point:
    def __init__(self, x, y):
        self.x = x
        self.y = y
        self._hidden = "secret"

    def norm(self):
        return abs(self.x) + abs(self.y)


class Slotted:
    __slots__ = ("value",)

    def __init__(self, value):
        self.value = value


class User(BaseModel):
    name: str
    age: int = 0


class TestGet:
    """Presence-based lookup"""

    def test_missing_key_returns_default(self):
        assert get({}, "missing", "D") == "D"

    def test_presence_beats_falsiness(self):
        assert get({"k": None}, "k", "D") is None
        assert get({"k": 0}, "k", "D") == 0
        assert get({"k": ""}, "k", "D") == ""

    def test_sequence_index(self):
        assert get(["a", "b"], 1) == "b"
        assert get(["a", "b"], 2, "D") == "D"
        assert get(["a", "b"], -1, "D") == "D"
        assert get(("a",), 0) == "a"

    def test_bool_is_not_an_index(self):
        assert get(["a", "b"], True, "D") == "D"

    def test_non_container(self):
        assert get("abc", 0, "D") == "D"
        assert get(None, "k", "D") == "D"


class TestMutationAndFiltering:
    """set_value, filter_keys and clean"""

    def test_set_value_in_place(self):
        data = {"a": 1}
        assert set_value(data, "b", 2) is None
        assert data == {"a": 1, "b": 2}

    def test_filter_keys_keeps_order(self):
        data = {"a": 1, "b": 2, "c": 3, "d": 4}
        result = filter_keys(data, ["b", "d"])
        assert list(result.items()) == [("a", 1), ("c", 3)]
        assert data == {"a": 1, "b": 2, "c": 3, "d": 4}

    def test_clean_sequence(self):
        assert clean([0, 1, "", None, "a", [], False, {}]) == [1, "a"]

    def test_clean_mapping_keeps_keys(self):
        assert clean({"a": 0, "b": 1, "c": None, "d": "x"}) == {"b": 1, "d": "x"}


class TestFlatten:
    """Recursive flattening"""

    def test_values_in_traversal_order(self):
        nested = {"a": 1, "b": [2, {"c": 3, "d": [4, 5]}], "e": 6}
        assert flatten(nested) == [1, 2, 3, 4, 5, 6]

    def test_preserve_keys(self):
        nested = {"a": 1, "b": [2, {"c": 3}]}
        assert flatten(nested, preserve_keys=True) == {"a": 1, 0: 2, "c": 3}

    def test_preserve_keys_last_write_wins(self):
        nested = {"a": 1, "b": {"a": 2}}
        assert flatten(nested, preserve_keys=True) == {"a": 2}

    def test_strings_are_leaves(self):
        assert flatten(["ab", ["cd"]]) == ["ab", "cd"]


class TestFirstLast:
    """first / last"""

    def test_sequences(self):
        assert first([1, 2, 3]) == 1
        assert last([1, 2, 3]) == 3

    def test_mappings(self):
        data = {"x": "first", "y": "middle", "z": "last"}
        assert first(data) == "first"
        assert last(data) == "last"

    def test_empty(self):
        assert first([]) is None
        assert last([]) is None
        assert first({}) is None
        assert last({}) is None


class TestIsAssoc:
    """Associative vs list-like containers"""

    def test_list_is_not_assoc(self):
        assert not is_assoc([1, 2, 3])

    def test_sequential_int_keys_are_not_assoc(self):
        assert not is_assoc({0: "a", 1: "b"})
        assert not is_assoc({})

    def test_assoc(self):
        assert is_assoc({"a": 1})
        assert is_assoc({1: "a", 0: "b"})
        assert is_assoc({0: "a", 2: "b"})


class TestToArray:
    """One conversion per input shape"""

    def test_list_returned_as_is(self):
        data = [1, 2]
        assert to_array(data) is data

    def test_tuple_and_set(self):
        assert to_array((1, 2)) == [1, 2]
        assert to_array(frozenset({7})) == [7]

    def test_mapping(self):
        source = {"a": 1}
        result = to_array(source)
        assert result == {"a": 1}
        assert result is not source

    def test_pydantic_model(self):
        assert to_array(User(name="Ada", age=36)) == {"name": "Ada", "age": 36}

    def test_object_public_attributes(self):
        assert to_array(Point(1, 2)) == {"x": 1, "y": 2}

    def test_scalars(self):
        assert to_array("abc") == ["abc"]
        assert to_array(b"abc") == [b"abc"]
        assert to_array(None) == [None]
        assert to_array(1, 2, 3) == [1, 2, 3]

    def test_object_without_dict_is_a_scalar(self):
        item = Slotted(1)
        assert to_array(item) == [item]


class TestObjToDict:
    """Recursive object mapping"""

    def test_nested_objects(self):
        outer = Point(1, Point(2, 3))
        assert obj_to_dict(outer) == {"x": 1, "y": {"x": 2, "y": 3}}

    def test_nested_sequences_keyed_by_index(self):
        assert obj_to_dict({"items": ["a", "b"]}) == {"items": {0: "a", 1: "b"}}

    def test_pydantic_model(self):
        assert obj_to_dict({"user": User(name="Ada")}) == {"user": {"name": "Ada", "age": 0}}

    def test_include(self):
        data = {"x": 1, "y": 2, "z": {"x": 3, "w": 4}}
        assert obj_to_dict(data, include=["x", "z"]) == {"x": 1, "z": {"x": 3}}
