from tripease.mappers.payload_extractor import (
    FirstArrayProperty,
    KnownKeys,
    RootArray,
    default_chain,
    extract_records,
)


def test_root_array():
    assert extract_records([{"name": "a"}, {"name": "b"}]) == [{"name": "a"}, {"name": "b"}]


def test_data_key():
    assert extract_records({"data": [{"name": "a"}]}) == [{"name": "a"}]


def test_results_key():
    assert extract_records({"meta": {}, "results": [{"name": "a"}]}) == [{"name": "a"}]


def test_data_preferred_over_earlier_array_property():
    body = {"warnings": [{"code": "W1"}], "data": [{"name": "a"}]}
    assert extract_records(body) == [{"name": "a"}]


def test_provider_key():
    body = {"links": "x", "hotels": [{"name": "Taj"}]}
    assert extract_records(body, provider_key="hotels") == [{"name": "Taj"}]


def test_first_array_property_fallback():
    body = {"count": 1, "buses": [{"operator": "VRL"}], "other": [{"x": 1}]}
    assert extract_records(body) == [{"operator": "VRL"}]


def test_no_array_is_empty():
    assert extract_records({"status": "ok"}) == []
    assert extract_records(None) == []
    assert extract_records("text") == []


def test_non_object_items_dropped():
    assert extract_records({"data": [{"name": "a"}, "junk", 3, None]}) == [{"name": "a"}]


def test_keyed_empty_array_wins_over_later_arrays():
    body = {"data": [], "extra": [{"name": "a"}]}
    assert extract_records(body) == []


def test_default_chain_order():
    chain = default_chain("trains")

    assert isinstance(chain[0], RootArray)
    assert isinstance(chain[1], KnownKeys)
    assert chain[1].keys == ("data", "results", "trains")
    assert isinstance(chain[2], FirstArrayProperty)


def test_custom_chain():
    only_root = (RootArray(),)
    assert extract_records({"data": [{"a": 1}]}, chain=only_root) == []
