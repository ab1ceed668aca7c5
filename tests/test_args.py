import pytest

from mockwork import Keywords, Param, clone
from mockwork._args import parse_param, process_args


def test_parse_param_forms() -> None:
    assert parse_param("x") == Param("x")
    assert parse_param({"y": 2}) == Param("y", 2)
    assert parse_param(("z", [1])) == Param("z", [1])


def test_parse_param_rejects_bad_specs() -> None:
    with pytest.raises(TypeError, match="exactly one entry"):
        parse_param({"a": 1, "b": 2})
    with pytest.raises(TypeError, match="Parameter must be a name"):
        parse_param(42)  # type: ignore[arg-type]


def test_positional_sequence_when_nothing_declared() -> None:
    assert process_args((1, "a", None), {}, (), ()) == [1, "a", None]


def test_named_mapping_in_declaration_order() -> None:
    params = (Param("b"), Param("a", "default"))

    record = process_args((1,), {}, params, ())

    assert record == {"b": 1, "a": "default"}
    assert list(record) == ["b", "a"]


def test_explicit_none_is_not_absent() -> None:
    params = (Param("a", "default"),)

    assert process_args((None,), {}, params, ()) == {"a": None}


def test_single_select_out_of_range() -> None:
    assert process_args(("only",), {}, (), (3,)) is None


def test_single_select_falls_back_to_keyword() -> None:
    params = (Param("a"), Param("b"))

    assert process_args(("x",), {"b": "by name"}, params, (1,)) == "by name"


def test_select_without_params_ignored_for_sequences() -> None:
    assert process_args((1, 2, 3), {}, (), (0, 2)) == [1, 2, 3]


def test_clone_copies_builtin_containers() -> None:
    original = {"list": [1, {"deep": True}], "tuple": (1, [2]), "set": {1, 2}}

    copied = clone(original)

    assert copied == original
    assert copied is not original
    assert copied["list"][1] is not original["list"][1]
    assert copied["tuple"][1] is not original["tuple"][1]
    assert copied["set"] is not original["set"]


def test_clone_keeps_other_values_by_reference() -> None:
    class Record:
        pass

    class Items(list[int]):
        pass

    record = Record()
    items = Items([1])

    assert clone(record) is record
    assert clone(items) is items
    assert clone([record])[0] is record


def test_keywords_appended_to_positional_record() -> None:
    record = process_args((1,), {"flag": [True]}, (), ())

    assert record == [1, {"flag": [True]}]
    assert isinstance(record[-1], Keywords)
    assert not isinstance(process_args(({"flag": True},), {}, (), ())[-1], Keywords)


def test_clone_keeps_keywords_type() -> None:
    original = Keywords({"items": [1, 2]})

    copied = clone(original)

    assert isinstance(copied, Keywords)
    assert copied == original
    assert copied["items"] is not original["items"]
    assert repr(copied).startswith("Keywords(")
