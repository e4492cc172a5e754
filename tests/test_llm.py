from unittest.mock import patch

from trip_planner.llm import extract_json, generate_json, generate_text


def test_extract_object_from_chatty_text():
    text = 'Sure! Here is your plan:\n{"days": [{"day": 1}]}\nEnjoy.'
    assert extract_json(text) == {"days": [{"day": 1}]}


def test_extract_array():
    assert extract_json("tips: [1, 2, 3] done", kind="array") == [1, 2, 3]


def test_extract_nothing_parses():
    assert extract_json("no json here") is None
    assert extract_json("{not: valid}") is None
    assert extract_json(None) is None


def test_generate_json_stub_mode_uses_callable_fallback():
    assert generate_json("prompt", lambda: {"canned": True}) == {"canned": True}


def test_generate_json_uses_llm_answer():
    with patch("trip_planner.llm.call_llm", return_value='```json\n{"ok": 1}\n```'):
        assert generate_json("prompt", {"canned": True}) == {"ok": 1}


def test_generate_json_falls_back_on_unparseable_answer():
    with patch("trip_planner.llm.call_llm", return_value="I cannot do that"):
        assert generate_json("prompt", {"canned": True}) == {"canned": True}


def test_generate_json_falls_back_on_api_error():
    with patch("trip_planner.llm.call_llm", side_effect=RuntimeError("quota")):
        assert generate_json("prompt", [], kind="array") == []


def test_generate_text_fallback():
    assert generate_text("prompt", "en") == "en"
