import json

import pytest

ANALYSIS = json.dumps(
    {
        "isClear": False,
        "questions": [
            {
                "id": "q1",
                "question": "Which aspects?",
                "type": "multiple",
                "options": [
                    {"id": "perf", "label": "Performance"},
                    {"id": "read", "label": "Readability"},
                    {"id": "other", "label": "Other", "allowCustomInput": True},
                ],
            },
            {
                "id": "q2",
                "question": "Which language?",
                "options": [{"id": "py", "label": "Python"}, {"id": "js", "label": "JavaScript"}],
            },
        ],
    }
)


def _flow(cfg, preset, client, raw="optimize this"):
    from promptflow.intent import ClarificationFlow

    return ClarificationFlow(raw, preset, cfg, client=client)


def test_full_flow_select_and_submit(provider_config, preset, scripted_client_factory):
    from promptflow.intent import CheckerState

    client = scripted_client_factory([ANALYSIS, "Optimize this Python code for speed and clarity."])
    flow = _flow(provider_config, preset, client)

    analysis = flow.analyze()
    assert analysis.needs_clarification is True
    assert flow.state == CheckerState.AWAITING_SELECTIONS
    assert [q.id for q in flow.questions] == ["q1", "q2"]

    multi = flow.select("q1", ["perf", "read"])
    assert multi.selected_option_ids == ["perf", "read"]
    assert multi.selected_option_id == "perf"
    flow.select("q2", ["js"])
    flow.select("q2", ["py"])  # replaces the earlier answer
    assert len(flow.selections) == 2

    result = flow.submit()
    assert flow.state == CheckerState.DONE
    assert flow.result is result
    assert result.clarified_prompt == "Optimize this Python code for speed and clarity."
    context = client.requests[1].messages[1].content
    assert "Which aspects: Performance、Readability" in context
    assert "Which language: Python" in context


def test_clear_input_finishes_immediately(provider_config, preset, scripted_client_factory):
    from promptflow.intent import CheckerState, IntentError

    client = scripted_client_factory(['{"isClear": true}'])
    flow = _flow(provider_config, preset, client)
    result = flow.analyze()

    assert flow.state == CheckerState.DONE
    assert result.clarified_prompt == "optimize this"
    with pytest.raises(IntentError):
        flow.submit()


def test_select_validates_ids(provider_config, preset, scripted_client_factory):
    from promptflow.intent import IntentError

    flow = _flow(provider_config, preset, scripted_client_factory([ANALYSIS]))
    with pytest.raises(IntentError):
        flow.select("q1", ["perf"])  # before analyze()

    flow.analyze()
    with pytest.raises(IntentError):
        flow.select("nope", ["perf"])
    with pytest.raises(IntentError):
        flow.select("q1", ["missing"])
    with pytest.raises(IntentError):
        flow.select("q2", ["py", "js"])
    with pytest.raises(IntentError):
        flow.select("q2", [])


def test_submit_with_explicit_selections(provider_config, preset, scripted_client_factory):
    from promptflow.intent import IntentError, UserSelection

    client = scripted_client_factory([ANALYSIS, "done"])
    flow = _flow(provider_config, preset, client)
    flow.analyze()

    with pytest.raises(IntentError):
        flow.submit([UserSelection("q9", "x")])

    result = flow.submit([UserSelection("q1", "other", selected_option_ids=["other"], custom_input="Memory")])
    assert result.clarified_prompt == "done"
    assert "Which aspects: Memory" in client.requests[1].messages[1].content


def test_skip_returns_raw_input(provider_config, preset, scripted_client_factory):
    from promptflow.intent import CheckerState

    client = scripted_client_factory([ANALYSIS])
    flow = _flow(provider_config, preset, client)
    flow.analyze()

    result = flow.skip()
    assert flow.state == CheckerState.DONE
    assert (result.clarified_prompt, result.success) == ("optimize this", True)
    assert len(client.requests) == 1
