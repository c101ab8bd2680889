import random

import pytest
from reportlab.pdfbase import pdfmetrics

from api.services.render_errors import MeasurementFailure
from api.services.word_wrap import helvetica_measure, wrap_text


def char_measure(text, size, weight):
    return len(text)


def test_greedy_fill():
    rows = wrap_text("the quick brown fox jumps", 10, char_measure)
    assert rows == ["the quick", "brown fox", "jumps"]


def test_empty_input_yields_one_empty_row():
    assert wrap_text("", 10, char_measure) == [""]
    assert wrap_text("   \n ", 10, char_measure) == [""]


def test_overlong_token_sits_alone_unsplit():
    rows = wrap_text("a supercalifragilistic b", 5, char_measure)
    assert rows == ["a", "supercalifragilistic", "b"]


def test_rows_fit_and_preserve_token_order():
    rng = random.Random(42)
    vocab = ["FCA", "admission", "prospectus", "a", "of", "Takeover", "supercalifragilisticexpialidocious"]
    for _ in range(50):
        words = [rng.choice(vocab) for _ in range(rng.randint(0, 40))]
        text = " ".join(words)
        width = rng.randint(8, 40)
        rows = wrap_text(text, width, char_measure)
        for row in rows:
            assert len(row) <= width or len(row.split()) == 1
        assert " ".join(rows).split() == words


def test_wrap_with_real_font_metrics():
    text = "Applicants for admission to AIM must appoint a nominated adviser " * 6
    rows = wrap_text(text, 200, helvetica_measure, 11)
    assert len(rows) > 1
    for row in rows:
        assert helvetica_measure(row, 11) <= 200


def test_helvetica_measure_matches_reportlab():
    assert helvetica_measure("Hello", 11) == pdfmetrics.stringWidth("Hello", "Helvetica", 11)
    assert helvetica_measure("Hello", 11, "bold") > helvetica_measure("Hello", 11)


def test_unknown_weight_is_a_measurement_failure():
    with pytest.raises(MeasurementFailure):
        helvetica_measure("Hello", 11, "light")


def test_measure_errors_propagate():
    def broken(text, size, weight):
        raise MeasurementFailure("no metrics")

    with pytest.raises(MeasurementFailure):
        wrap_text("two words", 100, broken)
