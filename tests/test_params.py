import pytest

from rmdecision.params import get_param, xml_rpc_get_double


def test_get_param_present():
    assert get_param({"queue_size": 5}, "queue_size", 1) == 5


def test_get_param_missing_gives_default():
    assert get_param({"queue_size": 5}, "topic", "fallback") == "fallback"


def test_get_param_nested_path():
    params = {"heat_limit": {"type": "ID1_42MM"}}
    assert get_param(params, "heat_limit/type", None) == "ID1_42MM"
    assert get_param(params, "heat_limit/missing", "x") == "x"


def test_get_param_none_params():
    assert get_param(None, "anything", 7) == 7


def test_int_becomes_float():
    result = xml_rpc_get_double(3)
    assert result == 3.0
    assert isinstance(result, float)


def test_float_passes_through():
    assert xml_rpc_get_double(2.5) == 2.5


def test_index_field():
    assert xml_rpc_get_double([1, 4.5], 1) == 4.5


def test_named_field_and_default():
    assert xml_rpc_get_double({"gain": 2}, "gain", 9.0) == 2.0
    assert xml_rpc_get_double({"gain": 2}, "other", 9.0) == 9.0


def test_named_field_missing_without_default():
    with pytest.raises(KeyError):
        xml_rpc_get_double({}, "gain")


@pytest.mark.parametrize("bad", ["1.0", True, None, [1.0]])
def test_wrong_type_raises(bad):
    with pytest.raises(TypeError):
        xml_rpc_get_double(bad)


def test_wrong_member_type_raises():
    with pytest.raises(TypeError):
        xml_rpc_get_double({"gain": "high"}, "gain", 1.0)