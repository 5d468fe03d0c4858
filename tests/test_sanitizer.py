import pytest

from safety.sanitizer import MAX_MESSAGE_LENGTH, sanitize


def test_example_scenario_two_paths():
    result = sanitize("Error at /home/user/a.js, tried /home/user/b.js")
    assert result.count("[path]") == 2
    assert "/home/user" not in result


@pytest.mark.parametrize(
    "message, leaked",
    [
        ("Error at C:\\Users\\Admin\\project\\file.js:10:5", "C:\\Users"),
        ("Error at C:/Users/Admin/project/file.js:10:5", "C:/Users"),
        ("Error at /home/user/project/src/file.ts:25:10", "/home/user"),
        ("Failed to load /Users/developer/Documents/app/index.js", "/Users/developer"),
        ("Error at d:\\projects\\app.js", "d:\\projects"),
    ],
)
def test_paths_are_replaced(message, leaked):
    result = sanitize(message)
    assert leaked not in result
    assert "[path]" in result


def test_non_path_text_is_preserved():
    result = sanitize("SyntaxError: Unexpected token at /path/to/file.js:1:5")
    assert result.startswith("SyntaxError: Unexpected token at [path]")


def test_three_disjoint_paths():
    result = sanitize("a /x/y b /p/q c C:\\w\\z")
    assert result == "a [path] b [path] c [path]"


def test_single_slash_is_not_a_path():
    assert sanitize("Use / as separator") == "Use / as separator"


@pytest.mark.parametrize(
    "message",
    ["", "   ", "TypeError: Cannot read property of undefined", 'Error: <script>alert("xss")</script>'],
)
def test_short_messages_unchanged(message):
    assert sanitize(message) == message


def test_exactly_max_length_is_unchanged():
    message = "B" * MAX_MESSAGE_LENGTH
    assert sanitize(message) == message


@pytest.mark.parametrize("length", [501, 600, 5000])
def test_long_messages_are_truncated(length):
    result = sanitize("A" * length)
    assert len(result) == MAX_MESSAGE_LENGTH
    assert result.endswith("...")
    assert result[:-3] == "A" * 497


def test_paths_and_length_together():
    result = sanitize("/home/user/very/long/path/to/file.js " + "x" * 600)
    assert len(result) == MAX_MESSAGE_LENGTH
    assert "/home/user" not in result
    assert result.startswith("[path] ")


def test_path_replacement_can_bring_message_under_limit():
    message = "/" + "a" * 300 + "/" + "b" * 300
    assert sanitize(message) == "[path]"
