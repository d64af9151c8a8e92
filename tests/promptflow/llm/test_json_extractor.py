import pytest


def test_strip_code_fences_removes_json_fence():
    from promptflow.llm import strip_code_fences

    body = '{"a": 1, "b": [1, 2]}'
    assert strip_code_fences(f"```json\n{body}\n```") == body
    assert strip_code_fences(f"```\n{body}\n```") == body
    # no fence: only trimmed
    assert strip_code_fences(f"  {body}  ") == body


def test_parse_fenced_output_equals_fence_content():
    from promptflow.llm import parse_json_from_model_output

    text = '```json\n{"isClear": true, "questions": []}\n```'
    assert parse_json_from_model_output(text) == {"isClear": True, "questions": []}


def test_extract_first_json_from_prose():
    from promptflow.llm import extract_first_json

    text = 'Sure! Here is the result: {"a": {"b": 2}} and some trailing words {"c": 3}'
    assert extract_first_json(text) == '{"a": {"b": 2}}'


def test_extract_first_json_prefers_earliest_bracket():
    from promptflow.llm import extract_first_json

    assert extract_first_json('list: [1, {"x": 2}] then {"y": 3}') == '[1, {"x": 2}]'
    assert extract_first_json('obj: {"x": [1, 2]} then [3]') == '{"x": [1, 2]}'


def test_extract_ignores_braces_inside_strings():
    from promptflow.llm import extract_first_json

    assert extract_first_json('{"a":"}"}') == '{"a":"}"}'
    assert extract_first_json('x {"a": "{{", "b": "]"} y') == '{"a": "{{", "b": "]"}'


def test_extract_handles_escaped_quotes():
    from promptflow.llm import extract_first_json

    text = r'prefix {"a": "say \"}\" loudly", "b": 1} suffix'
    assert extract_first_json(text) == r'{"a": "say \"}\" loudly", "b": 1}'


def test_extract_raises_when_no_bracket():
    from promptflow.llm import ErrorCode, JSONExtractionError, extract_first_json

    with pytest.raises(JSONExtractionError) as exc:
        extract_first_json("no json here")
    assert exc.value.code == ErrorCode.PARSE_ERROR


def test_extract_raises_on_unterminated_structure():
    from promptflow.llm import JSONExtractionError, extract_first_json

    with pytest.raises(JSONExtractionError, match="Unterminated"):
        extract_first_json('{"a": {"b": 1}')


def test_parse_model_output_with_prose_around_json():
    from promptflow.llm import parse_json_from_model_output

    text = 'I analysed it.\n{"isClear": false, "problems": ["Mixed intents"]}\nHope this helps'
    assert parse_json_from_model_output(text) == {
        "isClear": False,
        "problems": ["Mixed intents"],
    }


def test_parse_model_output_invalid_json_inside_brackets():
    from promptflow.llm import LLMValidationError, parse_json_from_model_output

    with pytest.raises(LLMValidationError):
        parse_json_from_model_output("{'single': 'quotes'}")


def test_validate_json_names_the_field():
    from promptflow.llm import ErrorCode, LLMValidationError
    from promptflow.llm._json import validate_json

    schema = {
        "type": "object",
        "required": ["name"],
        "properties": {"name": {"type": "string"}},
    }
    validate_json({"name": "ok"}, schema)

    with pytest.raises(LLMValidationError) as exc:
        validate_json({"name": 3}, schema)
    assert exc.value.code == ErrorCode.SCHEMA_ERROR
    assert "name" in str(exc.value)
