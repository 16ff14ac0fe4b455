from textdetect.ocr.repair import repair_text


def test_quotes_and_dashes():
    assert repair_text("“Save” isn’t —— done") == "\"Save\" isn't - done"


def test_whitespace_is_collapsed():
    assert repair_text("  File  menu\t\nbar  ") == "File menu bar"


def test_control_characters_are_dropped():
    assert repair_text("ab\x00c\x07") == "abc"


def test_empty():
    assert repair_text("") == ""
    assert repair_text(" 　 ") == ""
