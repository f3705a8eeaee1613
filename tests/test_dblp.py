import pytest

from collabnet.config import DBLP_PERSON_BASE
from collabnet.dblp import dblp_extract_pid, person_url, seed_url


def test_extract_pid_variants():
    test_cases = [
        ("47/8013", "47/8013"),
        ("pid:47/8013", "47/8013"),
        ("https://dblp.uni-trier.de/pid/47/8013.xml", "47/8013"),
        ("https://dblp.org/pid/47/8013.html", "47/8013"),
        ("https://dblp.org/pid/47/8013", "47/8013"),
        ("https://dblp.org/pid/47/8013.xml?view=bibtex", "47/8013"),
        ("https://dblp.org/pid/e/JohnDoe", "e/JohnDoe"),
        ("  176/9894 ", "176/9894"),
        ("", None),
        (None, None),
        ("two words", None),
    ]
    for value, expected in test_cases:
        assert dblp_extract_pid(value) == expected, f"{value!r}: expected {expected!r}"


def test_person_url():
    assert person_url("1/2345") == f"{DBLP_PERSON_BASE}/1/2345.xml"
    assert person_url("1/2345", "https://dblp.org/pid/") == "https://dblp.org/pid/1/2345.xml"


def test_seed_url_keeps_full_urls():
    url = "https://dblp.uni-trier.de/pid/47/8013.xml"
    assert seed_url(url) == url
    assert seed_url("47/8013") == url
    assert seed_url("https://example.org/people/1") == "https://example.org/people/1"


def test_seed_url_rebuilds_dblp_profile_urls():
    """
    Any DBLP profile URL form maps to the canonical XML record URL.
    """
    url = "https://dblp.uni-trier.de/pid/47/8013.xml"
    test_cases = [
        "http://dblp.uni-trier.de/pid/47/8013.xml",
        "HTTPS://DBLP.UNI-TRIER.DE/pid/47/8013.xml",
        "https://dblp.uni-trier.de/pid/47/8013.xml?view=coauthor",
        "https://dblp.uni-trier.de/pid/47/8013.xml#top",
        "https://dblp.uni-trier.de/pid/47/8013.html",
        "https://dblp.org/pid/47/8013",
    ]
    for hint in test_cases:
        assert seed_url(hint) == url, hint


def test_seed_url_rejects_garbage():
    with pytest.raises(ValueError):
        seed_url("no such author")
