import pytest

from rotector.textutils import contains_normalized, normalize_string


def test_empty_string():
    assert normalize_string("") == ""


def test_removes_diacritics():
    assert normalize_string("Café") == "cafe"


def test_removes_spaces_and_lowercases():
    assert normalize_string("Hello World") == "helloworld"


def test_compatibility_characters():
    assert normalize_string("ＡＢＣ") == normalize_string("abc")


@pytest.mark.parametrize("text", ["Crème Brûlée", "  Tab\tand\nnewline ", "ÅNGSTRÖM", "ﬁne"])
def test_idempotent_and_no_whitespace(text):
    once = normalize_string(text)
    assert normalize_string(once) == once
    assert not any(ch.isspace() for ch in once)
    assert once == once.lower()


def test_whitespace_only_normalizes_to_empty():
    assert normalize_string(" \t\n ") == ""


def test_contains_with_accents_and_spacing():
    assert contains_normalized("Le Café Noir", "cafe noir") is True


def test_contains_false_when_absent():
    assert contains_normalized("hello world", "planet") is False


@pytest.mark.parametrize("s, sub", [("", "a"), ("abc", ""), ("abc", "   "), ("   ", "a")])
def test_contains_empty_inputs(s, sub):
    assert contains_normalized(s, sub) is False


def test_contains_case_insensitive():
    assert contains_normalized("ROTECTOR", "tect") is True