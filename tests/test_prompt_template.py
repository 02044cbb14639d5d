from prompt_template import (SYSTEM_PROMPT, TRUNCATION_MARKER, build_chapter_content, build_prompt,
                             group_chapters_by_module, strip_html_tags)


def test_strip_html_tags():
    html = "<p>Cut&nbsp;below <b>80&nbsp;Hz</b> &amp; boost</p>\n<p>&quot;air&quot; at 12k&#39;s</p>"
    assert strip_html_tags(html) == "Cut below 80 Hz & boost \"air\" at 12k's"
    assert strip_html_tags(None) == ""


def test_build_chapter_content_orders_and_truncates():
    chapters = [
        {"title": "Second", "position": 2, "description": "<p>" + "a" * 50 + "</p>"},
        {"title": "First", "position": 1, "description": "short", "lessonTitle": "Intro"},
    ]

    content = build_chapter_content(chapters, max_chars=20)

    first, second = content.split("\n\n")
    assert first == "### First (Intro)\nshort"
    assert second == "### Second\n" + "a" * 20 + TRUNCATION_MARKER


def test_group_chapters_by_module_keeps_first_seen_order():
    chapters = [
        {"title": "a", "moduleTitle": "EQ"},
        {"title": "b"},
        {"title": "c", "moduleTitle": "EQ"},
    ]
    groups = group_chapters_by_module(chapters)
    assert list(groups) == ["EQ", "General"]
    assert [c["title"] for c in groups["EQ"]] == ["a", "c"]


def test_build_prompt():
    system, user = build_prompt("Mixing 101", "### EQ\nCut mud at 300 Hz", module="EQ",
                                chapter_count=3, topics=["Low end"])

    assert system == SYSTEM_PROMPT
    assert '"sections"' in system
    assert "MAXIMUM 4 sections" in system
    assert 'Course: "Mixing 101"' in user
    assert 'Module: "EQ" (3 chapters)' in user
    assert "Cut mud at 300 Hz" in user
    assert "- Low end" in user


def test_build_prompt_without_module():
    _, user = build_prompt("Mixing 101", "notes {with braces}")
    assert "Module:" not in user
    assert "notes {with braces}" in user
