from unittest.mock import patch

from collabnet import engine
from collabnet.io_utils import read_records_csv
from collabnet.models import AuthorRecord
import main
from tests.fixtures import FakeTransport, person_xml, publication, site

DOCS = site({
    "47/8013": person_xml("47/8013", "A. Example", publication("47/8013", "1/2345")),
    "1/2345": person_xml("1/2345", "B. Collaborator"),
})


def _args(tmp_path, *extra):
    return [
        "--out", str(tmp_path / "out" / "collaborators.csv"),
        "--log-file", str(tmp_path / "out" / "run.log"),
        "--random-delay", "0",
        *extra,
    ]


def test_main_writes_dataset(tmp_path):
    with patch.object(engine, "http_get_text", FakeTransport(DOCS)):
        code = main.main(_args(tmp_path, "--parallelism", "1", "47/8013"))

    assert code == 0
    assert read_records_csv(str(tmp_path / "out" / "collaborators.csv")) == [
        AuthorRecord("A. Example", "47/8013", ("1/2345",)),
        AuthorRecord("B. Collaborator", "1/2345", ()),
    ]
    assert (tmp_path / "out" / "run.log").exists()


def test_main_failed_pages_do_not_change_exit_code(tmp_path):
    with patch.object(engine, "http_get_text", FakeTransport({})):
        code = main.main(_args(tmp_path, "404/404"))

    assert code == 0
    assert read_records_csv(str(tmp_path / "out" / "collaborators.csv")) == []


def test_main_unwritable_output_is_fatal(tmp_path):
    """
    A directory in place of the output file stops the run before any fetch.
    """
    transport = FakeTransport(DOCS)
    (tmp_path / "taken").mkdir()
    args = ["--out", str(tmp_path / "taken"), "--log-file", str(tmp_path / "run.log"), "47/8013"]

    with patch.object(engine, "http_get_text", transport):
        code = main.main(args)

    assert code == 2
    assert transport.calls == []


def test_main_invalid_seed(tmp_path):
    with patch.object(engine, "http_get_text", FakeTransport(DOCS)):
        code = main.main(_args(tmp_path, "not a pid!"))

    assert code == 2


def test_main_write_failure(tmp_path):
    with patch.object(engine, "http_get_text", FakeTransport(DOCS)), \
            patch.object(main, "write_records_csv", side_effect=OSError("disk full")):
        code = main.main(_args(tmp_path, "47/8013"))

    assert code == 1


def test_main_invalid_seed_keeps_previous_dataset(tmp_path):
    """
    A bad seed stops the run before the existing dataset is truncated.
    """
    out = tmp_path / "out" / "collaborators.csv"
    out.parent.mkdir()
    out.write_text("name,id,collaborators\nA. Example,47/8013,1/2345\n", encoding="utf-8")
    transport = FakeTransport(DOCS)

    with patch.object(engine, "http_get_text", transport):
        code = main.main(_args(tmp_path, "47/8013", "not a pid!"))

    assert code == 2
    assert transport.calls == []
    assert out.read_text(encoding="utf-8") == "name,id,collaborators\nA. Example,47/8013,1/2345\n"
