import json

import pytest

from errors import ValidationError
from models import SectionType
from parser import clean_json_response, outline_from_dict, parse_ai_output

SAMPLE_OUTPUT = """```json
{
  "sections": [
    {
      "heading": "Vocal Chain",
      "type": "quick_reference",
      "items": [
        {"text": "HPF at 80-100 Hz", "subItems": ["Male: 80 Hz", "Female: 100 Hz"]},
        {"text": "Boosting 12 kHz before de-essing", "isWarning": true}
      ]
    },
    {
      "heading": "Workflow",
      "type": "step_by_step",
      "items": [{"text": "Gain stage first", "isTip": true}]
    }
  ]
}
```"""


def test_parse_fenced_json():
    sections = parse_ai_output(SAMPLE_OUTPUT)

    assert [s.title for s in sections] == ["Vocal Chain", "Workflow"]
    assert sections[0].type is SectionType.QUICK_REFERENCE
    assert sections[0].items[0].sub_items == ["Male: 80 Hz", "Female: 100 Hz"]
    assert sections[0].items[1].is_warning
    assert sections[1].items[0].is_tip


def test_clean_json_response_variants():
    assert clean_json_response('```\n{"a": 1}\n```') == '{"a": 1}'
    assert clean_json_response('```json {"a": 1}```') == '{"a": 1}'
    assert clean_json_response('  {"a": 1}  ') == '{"a": 1}'


def test_missing_fields_get_defaults():
    raw = json.dumps({"sections": [{"type": "flashcards", "items": [{"subItems": "not a list"}]}]})

    section = parse_ai_output(raw)[0]

    assert section.title == "Untitled Section"
    assert section.type is SectionType.CUSTOM
    assert section.items[0].text == ""
    assert section.items[0].sub_items == []
    assert not section.items[0].is_tip


def test_string_items_and_junk_are_handled():
    raw = json.dumps({"sections": [
        {"title": "Plain", "items": ["just text", 42, None, {"text": "ok"}]},
        "not a section",
    ]})

    sections = parse_ai_output(raw)

    assert len(sections) == 1
    assert [i.text for i in sections[0].items] == ["just text", "ok"]
    assert sections[0].type is SectionType.CUSTOM


@pytest.mark.parametrize("raw", [
    "",
    "Sorry, I cannot help with that.",
    "[1, 2, 3]",
    '{"sections": "none"}',
    '{"title": "no sections"}',
])
def test_unusable_output_raises(raw):
    with pytest.raises(ValidationError):
        parse_ai_output(raw)


@pytest.mark.parametrize("raw", [123, ["sections"], {"sections": []}])
def test_non_string_output_raises(raw):
    with pytest.raises(ValidationError, match="must be a string"):
        parse_ai_output(raw)


def test_only_real_booleans_mark_callouts():
    raw = json.dumps({"sections": [{"heading": "Flags", "type": "tips", "items": [
        {"text": "string false", "isTip": "false", "isWarning": "false"},
        {"text": "number one", "isTip": 1, "isWarning": "yes"},
        {"text": "real true", "isTip": True, "isWarning": False},
    ]}]})

    items = parse_ai_output(raw)[0].items

    assert [(i.is_tip, i.is_warning) for i in items] == [
        (False, False), (False, False), (True, False)]


def test_outline_from_dict_prefers_document_fields():
    data = {
        "title": "From Doc",
        "sections": [{"heading": "A", "type": "tips", "items": []}],
    }
    outline = outline_from_dict(data, title="Fallback", subtitle="Sub", footer="Foot")

    assert outline.title == "From Doc"
    assert outline.subtitle == "Sub"
    assert outline.footer == "Foot"
    assert outline.sections[0].type is SectionType.TIPS


def test_to_dict_round_trips_through_parser():
    sections = parse_ai_output(SAMPLE_OUTPUT)
    outline = outline_from_dict({"sections": [s.to_dict() for s in sections]}, title="T")
    assert outline.sections == sections
