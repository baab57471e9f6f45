from report_export.layout.metrics import FontSet
from report_export.layout.wrap import split_words, wrap_runs, wrap_text
from report_export.markdown.inline import StyledRun, parse_inline


def test_wrap_text_respects_width(measure) -> None:
    lines = wrap_text("alpha beta gamma delta epsilon", 60, "Helvetica", 10, measure)
    assert lines == ["alpha beta", "gamma delta", "epsilon"]
    assert all(measure(line, "Helvetica", 10) <= 60 for line in lines)


def test_wrap_text_of_empty_string_is_one_empty_line(measure) -> None:
    assert wrap_text("", 60, "Helvetica", 10, measure) == [""]


def test_words_span_runs_without_inserting_spaces() -> None:
    words = split_words(parse_inline("Hello **world**."))
    assert [["".join(piece.text for piece in word)] for word in words] == [["Hello"], ["world."]]
    assert words[1] == [StyledRun("world", bold=True), StyledRun(".")]


def test_wrap_runs_keeps_styles_and_order(measure) -> None:
    runs = parse_inline("one **two** three *four* five six seven")
    lines = wrap_runs(runs, 80, 10, FontSet(), measure)
    assert " ".join(line.text for line in lines) == "one two three four five six seven"
    assert all(line.width <= 80 for line in lines)
    flat = [piece for line in lines for word in line.words for piece in word]
    assert StyledRun("two", bold=True) in flat
    assert StyledRun("four", italic=True) in flat


def test_wrap_runs_width_matches_measured_pieces(measure) -> None:
    (line,) = wrap_runs(parse_inline("a **bb** ccc"), 500, 10, FontSet(), measure)
    space = measure(" ", "Helvetica", 10)
    assert line.width == measure("a", "", 10) + measure("bb", "", 10) + measure("ccc", "", 10) + 2 * space


def test_font_set_picks_variants() -> None:
    fonts = FontSet()
    assert fonts.pick() == "Helvetica"
    assert fonts.pick(bold=True, italic=True) == "Helvetica-BoldOblique"
    assert fonts.for_run(StyledRun("x", code=True, bold=True)) == "Courier"


def test_wrap_runs_breaks_overwide_word_keeping_styles(measure) -> None:
    runs = parse_inline("see **" + "a" * 20 + "**" + "b" * 10)
    lines = wrap_runs(runs, 60, 10, FontSet(), measure)
    assert [line.text for line in lines] == ["see", "a" * 12, "a" * 8 + "b" * 4, "b" * 6]
    assert all(line.width <= 60 for line in lines)
    assert lines[2].words == [[StyledRun("a" * 8, bold=True), StyledRun("b" * 4)]]


def test_wrap_runs_resumes_after_broken_word(measure) -> None:
    lines = wrap_runs(parse_inline("x" * 15 + " tail"), 60, 10, FontSet(), measure)
    assert [line.text for line in lines] == ["x" * 12, "xxx tail"]
