from casebrain.engine.results import Err, Ok, parse_json, strip_code_fence


def test_valid_array():
    assert parse_json('["a", "b"]', list[str]) == Ok(["a", "b"])


def test_invalid_json_is_err():
    assert isinstance(parse_json("not json", list[str]), Err)


def test_wrong_container_is_err():
    assert isinstance(parse_json('{"facts": ["a"]}', list[str]), Err)


def test_none_is_err():
    assert parse_json(None, list[str]) == Err("empty response")


def test_strip_code_fence():
    assert strip_code_fence('```json\n["a"]\n```') == '["a"]'
    assert strip_code_fence('  ["a"]  ') == '["a"]'
