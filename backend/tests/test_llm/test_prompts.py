"""Tests for upstream prompt building and reply parsing (no network)."""

import pytest

from unisvg.generation.errors import ErrorClass, TierFailure, classify_error
from unisvg.llm.client import extract_json
from unisvg.llm.prompts import build_system_prompt, build_user_prompt


def test_system_prompt_describes_canvas():
    text = build_system_prompt(512, 288, "16:9")
    assert '"aspectRatio": "16:9"' in text
    assert "0..288 vertically" in text
    assert "- top_right:" in text
    assert "bottom_center" in text


def test_user_prompt_with_feedback():
    text = build_user_prompt("a lighthouse", ["#112233"], ["Critical issues found:", "- Invalid fill color: red"])
    assert text.startswith("Draw: a lighthouse")
    assert "Use this palette: #112233" in text
    assert text.endswith("Critical issues found:\n- Invalid fill color: red")


def test_user_prompt_plain():
    assert build_user_prompt("a cat", None, None) == "Draw: a cat"


def test_extract_json_from_fenced_reply():
    reply = 'Here you go:\n```json\n{"version": "unified-layered-1.0", "layers": []}\n```'
    assert extract_json(reply) == {"version": "unified-layered-1.0", "layers": []}


@pytest.mark.parametrize("reply", ["no json here", '{"broken": ', "[1, 2]"])
def test_extract_json_failures_advance(reply):
    with pytest.raises(TierFailure) as info:
        extract_json(reply)
    assert classify_error(info.value) == ErrorClass.JSON_PARSE
