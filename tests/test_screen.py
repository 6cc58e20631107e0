import pytest

from termemu.screen import (
    BRIGHT_COLORS,
    NORMAL_COLORS,
    Cell,
    CharAttr,
    Cursor,
    ParserState,
    RgbColor,
    Screen,
)


@pytest.fixture
def screen():
    return Screen(80, 24)


def fill(screen, ch):
    for r in range(screen.rows):
        for c in range(screen.cols):
            screen.buffer[r][c] = Cell(ch, screen.attr)


def row_text(screen, r):
    return "".join(cell.ch for cell in screen.buffer[r])


def test_esc_c_resets_state_and_clears_screen(screen):
    screen.attr = CharAttr(RgbColor(255, 0, 0), screen.attr.bg)
    screen.cursor = Cursor(5, 10)
    screen.buffer[5][10] = Cell("x", screen.attr)

    dirty = screen.feed(b"\x1bc")

    assert screen.attr.fg == NORMAL_COLORS[7]
    assert screen.attr.bg == NORMAL_COLORS[0]
    assert (screen.cursor.row, screen.cursor.col) == (0, 0)
    assert all(cell.ch == " " for line in screen.buffer for cell in line)
    assert dirty == list(range(24))


def test_esc_k_clears_line(screen):
    screen.cursor = Cursor(5, 10)
    screen.buffer[5] = [Cell("x") for _ in range(80)]
    dirty = screen.apply_sequence("[0K")
    assert row_text(screen, 5) == "x" * 10 + " " * 70
    assert dirty == [5]

    screen.buffer[5] = [Cell("x") for _ in range(80)]
    dirty = screen.apply_sequence("[1K")
    assert row_text(screen, 5) == " " * 11 + "x" * 69
    assert dirty == [5]

    screen.buffer[5] = [Cell("x") for _ in range(80)]
    dirty = screen.apply_sequence("[2K")
    assert row_text(screen, 5) == " " * 80
    assert dirty == [5]


def test_esc_m_sets_colors(screen):
    assert screen.apply_sequence("[31m") == []
    assert screen.attr.fg == NORMAL_COLORS[1]

    assert screen.apply_sequence("[41m") == []
    assert screen.attr.fg == NORMAL_COLORS[1]
    assert screen.attr.bg == NORMAL_COLORS[1]

    assert screen.apply_sequence("[0m") == []
    assert screen.attr.fg == NORMAL_COLORS[7]
    assert screen.attr.bg == NORMAL_COLORS[0]


def test_cursor_movement(screen):
    screen.cursor = Cursor(5, 10)
    assert screen.apply_sequence("[3;5H") == []
    assert (screen.cursor.row, screen.cursor.col) == (2, 4)
    assert screen.apply_sequence("[2A") == []
    assert (screen.cursor.row, screen.cursor.col) == (0, 4)
    assert screen.apply_sequence("[3B") == []
    assert (screen.cursor.row, screen.cursor.col) == (3, 4)
    assert screen.apply_sequence("[5C") == []
    assert (screen.cursor.row, screen.cursor.col) == (3, 9)
    assert screen.apply_sequence("[2D") == []
    assert (screen.cursor.row, screen.cursor.col) == (3, 7)


def test_text_buffer_insertion(screen):
    screen.cursor = Cursor(5, 10)
    screen.buffer[5][10] = Cell("x", screen.attr)
    dirty = screen.feed(b"y")
    assert screen.buffer[5][10].ch == "y"
    assert screen.cursor.col == 11
    assert dirty == [5]


def test_scroll_up(screen):
    screen.buffer[0] = [Cell("a") for _ in range(80)]
    screen.buffer[23] = [Cell("b") for _ in range(80)]
    screen.cursor = Cursor(23, 0)

    dirty = screen.feed(b"\n")

    assert screen.buffer[0][0].ch == " "
    assert screen.buffer[22][0].ch == "b"
    assert screen.buffer[23][0].ch == " "
    assert (screen.cursor.row, screen.cursor.col) == (23, 0)
    assert dirty == list(range(24))


def test_clear_screen_esc_0j(screen):
    fill(screen, "x")
    screen.cursor = Cursor(5, 10)
    dirty = screen.feed(b"\x1b[0J")
    for r in range(5):
        assert row_text(screen, r) == "x" * 80
    assert row_text(screen, 5) == "x" * 10 + " " * 70
    for r in range(6, 24):
        assert row_text(screen, r) == " " * 80
    assert (screen.cursor.row, screen.cursor.col) == (5, 10)
    assert dirty == list(range(5, 24))


def test_clear_screen_esc_1j(screen):
    fill(screen, "x")
    screen.cursor = Cursor(5, 10)
    dirty = screen.feed(b"\x1b[1J")
    for r in range(5):
        assert row_text(screen, r) == " " * 80
    assert row_text(screen, 5) == " " * 11 + "x" * 69
    for r in range(6, 24):
        assert row_text(screen, r) == "x" * 80
    assert (screen.cursor.row, screen.cursor.col) == (5, 10)
    assert dirty == list(range(6))


def test_clear_screen_esc_2j(screen):
    fill(screen, "x")
    screen.cursor = Cursor(5, 10)
    dirty = screen.feed(b"\x1b[2J")
    assert all(row_text(screen, r) == " " * 80 for r in range(24))
    assert (screen.cursor.row, screen.cursor.col) == (0, 0)
    assert dirty == list(range(24))


def test_utf8_input(screen):
    screen.cursor = Cursor(5, 10)
    screen.feed(b"a")
    assert screen.buffer[5][10].ch == "a"

    screen.cursor = Cursor(5, 11)
    screen.feed(b"\xd0\xaf")
    assert ord(screen.buffer[5][11].ch) == 0x042F

    screen.cursor = Cursor(5, 12)
    screen.feed(b"\xe2\x82\xac")
    assert ord(screen.buffer[5][12].ch) == 0x20AC

    screen.cursor = Cursor(5, 13)
    screen.feed(b"\xf0\x9f\x98\x80")
    assert ord(screen.buffer[5][13].ch) == 0x1F600


def test_invalid_and_truncated_utf8_is_skipped(screen):
    screen.feed(b"\x80a\xe2\x82")
    assert screen.buffer[0][0].ch == "a"
    assert screen.cursor.col == 1


def test_line_wrap(screen):
    screen.cursor = Cursor(0, 79)
    dirty = screen.feed(b"z")
    assert screen.buffer[0][79].ch == "z"
    assert (screen.cursor.row, screen.cursor.col) == (1, 0)
    assert dirty == [0]


def test_tab_stops_and_clamp(screen):
    screen.feed(b"\t")
    assert screen.cursor.col == 8
    screen.feed(b"ab\t")
    assert screen.cursor.col == 16
    screen.cursor = Cursor(0, 75)
    screen.feed(b"\t")
    assert screen.cursor.col == 79


def test_backspace_erases(screen):
    screen.feed(b"ab")
    dirty = screen.feed(b"\b")
    assert screen.cursor.col == 1
    assert row_text(screen, 0)[:2] == "a "
    assert dirty == [0]
    screen.cursor = Cursor(3, 0)
    assert screen.feed(b"\b") == []


def test_carriage_return_line_feed(screen):
    screen.feed(b"hello")
    dirty = screen.feed(b"\r\n")
    assert (screen.cursor.row, screen.cursor.col) == (1, 0)
    assert dirty == [1]
    dirty = screen.feed(b"xy\r")
    assert (screen.cursor.row, screen.cursor.col) == (1, 0)
    assert dirty == [1]


def test_sequence_split_across_feeds(screen):
    screen.feed(b"\x1b[3")
    assert screen.state is ParserState.CSI
    screen.feed(b"2mQ")
    assert screen.state is ParserState.NORMAL
    assert screen.buffer[0][0] == Cell("Q", CharAttr(NORMAL_COLORS[2], NORMAL_COLORS[0]))


def test_unknown_escape_returns_to_normal(screen):
    screen.feed(b"\x1bZk")
    assert screen.state is ParserState.NORMAL
    assert screen.buffer[0][0].ch == "k"


def test_bold_switches_palette(screen):
    screen.apply_sequence("[1;31m")
    assert screen.attr.fg == BRIGHT_COLORS[1]
    screen.apply_sequence("[0;1m")
    assert screen.attr.fg == BRIGHT_COLORS[7]
    screen.apply_sequence("[94;102m")
    assert screen.attr == CharAttr(BRIGHT_COLORS[4], BRIGHT_COLORS[2])
    screen.apply_sequence("[m")
    assert screen.attr == CharAttr()


def test_home_defaults_and_clamps(screen):
    screen.cursor = Cursor(7, 7)
    screen.apply_sequence("[H")
    assert (screen.cursor.row, screen.cursor.col) == (0, 0)
    screen.apply_sequence("[100;200H")
    assert (screen.cursor.row, screen.cursor.col) == (23, 79)


def test_apply_sequence_without_bracket_is_ignored(screen):
    screen.cursor = Cursor(4, 4)
    assert screen.apply_sequence("2J") == []
    assert (screen.cursor.row, screen.cursor.col) == (4, 4)


def test_erase_uses_current_attributes(screen):
    screen.apply_sequence("[44m")
    screen.apply_sequence("[2K")
    assert screen.buffer[0][5].attr.bg == NORMAL_COLORS[4]


def test_resize_keeps_content_and_clamps_cursor(screen):
    screen.feed(b"abc")
    screen.cursor = Cursor(20, 70)
    screen.resize(40, 10)
    assert len(screen.buffer) == 10
    assert all(len(line) == 40 for line in screen.buffer)
    assert row_text(screen, 0).startswith("abc")
    assert (screen.cursor.row, screen.cursor.col) == (9, 39)
    screen.resize(100, 30)
    assert len(screen.buffer) == 30
    assert all(len(line) == 100 for line in screen.buffer)
    assert row_text(screen, 0)[:3] == "abc"


def test_scroll_up_method(screen):
    screen.buffer[1] = [Cell("q") for _ in range(80)]
    screen.scroll_up()
    assert row_text(screen, 0) == "q" * 80
    assert screen.cursor.row == 23
    assert len(screen.buffer) == 24