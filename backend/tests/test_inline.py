import pytest

from report_export.markdown.inline import StyledRun, is_safe_link, parse_inline, strip_inline


def test_plain_text_is_single_run() -> None:
    assert parse_inline("just words") == [StyledRun("just words")]


def test_bold_run_between_plain_text() -> None:
    runs = parse_inline("Hello **world**.")
    assert runs == [StyledRun("Hello "), StyledRun("world", bold=True), StyledRun(".")]


def test_all_marker_kinds() -> None:
    runs = parse_inline("a **b** *c* `d` [e](https://x.org)")
    styled = [run for run in runs if not run.plain]
    assert styled == [
        StyledRun("b", bold=True),
        StyledRun("c", italic=True),
        StyledRun("d", code=True),
        StyledRun("e", link_url="https://x.org"),
    ]


def test_bold_may_contain_italic() -> None:
    runs = parse_inline("**strong *and leaning* text**")
    assert runs == [
        StyledRun("strong ", bold=True),
        StyledRun("and leaning", bold=True, italic=True),
        StyledRun(" text", bold=True),
    ]


def test_default_style_is_inherited() -> None:
    runs = parse_inline("Intro to *topic*", bold=True)
    assert all(run.bold for run in runs)
    assert runs[-1] == StyledRun("topic", bold=True, italic=True)


def test_code_wins_over_italic_inside_backticks() -> None:
    assert parse_inline("`a*b*c`") == [StyledRun("a*b*c", code=True)]


@pytest.mark.parametrize(
    "text",
    ["a stray ** marker", "**unterminated", "half *open", "`tick", "[label](no-close", "***"],
)
def test_unterminated_markers_pass_through(text: str) -> None:
    assert "".join(run.text for run in parse_inline(text)) == text


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Hello **world**.", "Hello world."),
        ("*a* and `b` or [c](http://c.example)", "a and b or c"),
        ("**x** *y* **z**", "x y z"),
        ("Revenue grew **12%** in [Q3](https://r.example/q3), see `table_1`", "Revenue grew 12% in Q3, see table_1"),
    ],
)
def test_runs_reconstruct_text_without_markers(text: str, expected: str) -> None:
    assert strip_inline(text) == expected


def test_empty_link_url_renders_plain_text() -> None:
    assert parse_inline("[label]()") == [StyledRun("label")]


def test_safe_link_schemes() -> None:
    assert is_safe_link("https://example.com")
    assert is_safe_link("mailto:team@example.com")
    assert not is_safe_link("javascript:alert(1)")
    assert not is_safe_link(None)


def test_bold_may_contain_a_link() -> None:
    assert parse_inline("**see [docs](https://d.example) now**") == [
        StyledRun("see ", bold=True),
        StyledRun("docs", bold=True, link_url="https://d.example"),
        StyledRun(" now", bold=True),
    ]


def test_link_target_may_hold_balanced_parentheses() -> None:
    url = "https://en.wikipedia.org/wiki/Python_(programming_language)"
    assert parse_inline(f"[Python]({url}) (lang)") == [
        StyledRun("Python", link_url=url),
        StyledRun(" (lang)"),
    ]
