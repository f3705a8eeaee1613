from collabnet.config import (
    CSV_FIELDNAMES,
    COLLABORATOR_SEPARATOR,
    DBLP_HOST,
    DBLP_PERSON_BASE,
    MAX_DEPTH,
    PARALLELISM,
    RANDOM_DELAY,
    REQUEST_DELAY,
)


def test_traversal_defaults():
    """
    The crawl follows collaborators of collaborators and stays polite.
    """
    assert MAX_DEPTH == 2
    assert PARALLELISM == 2
    assert RANDOM_DELAY > 0
    assert REQUEST_DELAY >= 0


def test_person_base_uses_allowed_host():
    assert DBLP_PERSON_BASE.startswith(f"https://{DBLP_HOST}/")


def test_csv_layout():
    assert CSV_FIELDNAMES == ["name", "id", "collaborators"]
    assert COLLABORATOR_SEPARATOR == ","
