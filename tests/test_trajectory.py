import json

from mindmesh.services import trajectory
from mindmesh.services.json_extract import (
    extract_json_array,
    extract_json_object,
    strip_code_fences,
    strip_model_tokens,
)
from mindmesh.services.memory import fetch_recent_memories

PATH_A = {
    "name": "Stay and specialise",
    "assumptions": ["Team keeps funding"],
    "shortTermOutcomes": ["Deeper expertise"],
    "longTermOutcomes": ["Staff engineer"],
    "risks": ["Narrow skill set"],
    "effortLevel": "medium",
    "confidence": "high",
}
PATH_B = {
    "name": "Move to a startup",
    "assumptions": ["Savings cover 6 months"],
    "shortTermOutcomes": ["Broader scope"],
    "longTermOutcomes": ["Founding engineer"],
    "risks": ["Company fails"],
    "effortLevel": "High",
    "confidence": "low",
}


# ── Extraction cascade ───────────────────────────────────────────────

def test_fenced_block_wins_over_surrounding_brackets():
    text = (
        "Options [draft]:\n```json\n" + json.dumps([PATH_A, PATH_B]) + "\n```\nPick one [any]."
    )
    items, strategy = extract_json_array(text)
    assert strategy == "fenced_block"
    assert [i["name"] for i in items] == ["Stay and specialise", "Move to a startup"]


def test_bracket_slice_from_prose():
    text = "Here are your options: " + json.dumps([PATH_A, PATH_B]) + " Hope this helps!"
    items, strategy = extract_json_array(text)
    assert strategy == "bracket_slice"
    assert len(items) == 2


def test_bare_objects_are_collected():
    # No enclosing array; inner arrays defeat the bracket slice.
    text = "Option one: " + json.dumps(PATH_A) + "\nOption two: " + json.dumps(PATH_B)
    items, strategy = extract_json_array(text)
    assert strategy == "object_list"
    assert [i["name"] for i in items] == ["Stay and specialise", "Move to a startup"]


def test_trailing_commas_are_repaired():
    text = 'Result: [{"name": "Freelance", "risks": ["Unstable income",],}, {"name": "Stay",},]'
    items, strategy = extract_json_array(text)
    assert strategy == "trailing_comma_repair"
    assert [i["name"] for i in items] == ["Freelance", "Stay"]


def test_unparseable_text_yields_nothing():
    assert extract_json_array("I can't help with that decision.") == (None, None)


def test_array_without_objects_is_not_usable():
    assert extract_json_array('["a", "b"]') == (None, None)


def test_object_extraction_variants():
    assert extract_json_object('```json\n{"a": 1}\n```') == {"a": 1}
    assert extract_json_object('Sure! {"a": {"b": 2}} Done.') == {"a": {"b": 2}}
    assert extract_json_object("not json") is None


def test_cleanup_helpers():
    assert strip_code_fences("```json\n{\"a\": 1}\n```") == '{"a": 1}'
    assert strip_model_tokens("<s>[INST] hi [/INST]</s>") == " hi "


# ── Trajectory model ─────────────────────────────────────────────────

def test_trajectory_normalises_levels_and_lists():
    parsed = trajectory.parse_trajectories(json.dumps([
        {"name": "Pivot", "risks": "Pay cut", "effortLevel": "Medium-High", "confidence": "unsure"},
    ]))
    assert parsed[0].effort_level == "medium"
    assert parsed[0].confidence == "medium"
    assert parsed[0].risks == ["Pay cut"]


def test_summary_lists_names():
    parsed = trajectory.parse_trajectories(json.dumps([PATH_A, PATH_B]))
    assert trajectory.summarize(parsed) == "Trajectory Analysis: Stay and specialise, Move to a startup"


# ── Simulation ───────────────────────────────────────────────────────

async def test_simulate_stores_summary(db, fake_llm):
    fake_llm.replies = ["```json\n" + json.dumps([PATH_A, PATH_B]) + "\n```"]

    result = await trajectory.simulate(db, "u1", "Should I join a startup?")

    assert result.success
    assert result.decision_context == "Should I join a startup?"
    assert [t.name for t in result.trajectories] == ["Stay and specialise", "Move to a startup"]
    assert result.trajectories[1].effort_level == "high"
    assert fake_llm.calls[0][1] == "simulation"
    assert "## CONTEXT FROM PAST INTERACTIONS" in fake_llm.calls[0][0][0]["content"]

    memories = await fetch_recent_memories(db, "u1")
    assert len(memories) == 1
    assert memories[0].type == "trajectory"
    assert memories[0].content == "Trajectory Analysis: Stay and specialise, Move to a startup"
    assert memories[0].metadata["trajectories_count"] == 2
    assert memories[0].metadata["decision_context"] == "Should I join a startup?"


async def test_simulate_parse_failure_returns_raw(db, fake_llm):
    fake_llm.replies = ["Honestly, both paths look fine."]

    result = await trajectory.simulate(db, "u1", "Should I join a startup?")

    assert not result.success
    assert result.trajectories == []
    assert result.raw_response == "Honestly, both paths look fine."
    assert result.error == "Failed to parse trajectory JSON, returning raw response"
    assert await fetch_recent_memories(db, "u1") == []
