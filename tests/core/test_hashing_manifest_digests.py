from __future__ import annotations

from camctl.core.hashing import hash_documents, hash_mapping, hash_text, json_dumps_canonical


def test_canonical_json_is_key_order_independent() -> None:
    a = {"b": 1, "a": [1, 2], "c": {"y": 1, "x": 2}}
    b = {"c": {"x": 2, "y": 1}, "a": [1, 2], "b": 1}
    assert json_dumps_canonical(a) == json_dumps_canonical(b) == '{"a":[1,2],"b":1,"c":{"x":2,"y":1}}'
    assert hash_mapping(a) == hash_mapping(b)


def test_hash_documents_orders_by_filename() -> None:
    docs = {"property_ids_core.yaml": "p", "control_ids_rpi.yaml": "r", "control_ids_core.yaml": "c"}
    digests = hash_documents(docs)
    assert list(digests) == ["control_ids_core.yaml", "control_ids_rpi.yaml", "property_ids_core.yaml"]
    assert digests["control_ids_core.yaml"] == hash_text("c")
    assert len(set(digests.values())) == 3
