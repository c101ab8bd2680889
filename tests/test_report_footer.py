import random
import re
from datetime import datetime, timedelta, timezone

from api.services.line_classifier import FOOTER_MARKER
from api.services.report_footer import (
    build_footer,
    footer_for,
    generate_registration_code,
    registration_number,
)

WHEN = datetime(2025, 10, 29, 16, 15, tzinfo=timezone.utc)


def test_registration_code_uses_date_seed():
    for seed in range(20):
        code = generate_registration_code(WHEN, random.Random(seed))
        match = re.fullmatch(r"(\d{6})-(\d{4})", code)
        assert match
        assert match.group(1) == "251029"
        assert 1000 <= int(match.group(2)) <= 9999


def test_registration_code_is_reproducible_with_seeded_rng():
    assert generate_registration_code(WHEN, random.Random(3)) == generate_registration_code(WHEN, random.Random(3))


def test_registration_number():
    assert registration_number("251029-1234", 42) == "AIVS/UK/251029-1234/42"


def test_footer_contains_count_and_marker():
    footer = footer_for(WHEN, 42, rng=random.Random(1))
    assert footer.startswith(FOOTER_MARKER)
    assert re.search(r"Reg\. No\. AIVS/UK/251029-\d{4}/42$", footer, re.MULTILINE)
    assert "ISO 42001" not in footer
    assert footer.splitlines()[-1] == "© AIVS Software Limited 2025 — All rights reserved."


def test_footer_includes_fairness_line_when_given():
    footer = build_footer("AIVS/UK/251029-1234/7", 2025, fairness="No bias detected")
    assert "ISO 42001 Fairness Verification: No bias detected\nReg. No. AIVS/UK/251029-1234/7" in footer


def test_registration_code_uses_utc_date():
    late_evening = datetime(2025, 12, 31, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
    assert generate_registration_code(late_evening, random.Random(0)).startswith("260101-")
    footer = footer_for(late_evening, 1, rng=random.Random(0))
    assert footer.splitlines()[-1] == "© AIVS Software Limited 2026 — All rights reserved."
    assert generate_registration_code(datetime(2025, 10, 29, 23, 30), random.Random(0)).startswith("251029-")
