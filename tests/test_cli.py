"""Tests for the command-line interface."""

import pytest
from click.testing import CliRunner

from lineage.cli import main
from lineage.projection.templates import build_person_template
from lineage.session.parser import parse_session, serialize_session


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def vault(tmp_path):
    (tmp_path / "Sessions").mkdir()
    return tmp_path


def _invoke(runner, vault, *args):
    return runner.invoke(main, ["--vault", str(vault), *args])


def test_new_creates_session(runner, vault):
    result = _invoke(runner, vault, "new", "Smith Household")

    assert result.exit_code == 0
    assert "Created session" in result.output
    created = list((vault / "Sessions").glob("*-smith-household.md"))
    assert len(created) == 1
    assert parse_session(created[0].read_text()).metadata.title == "Smith Household"


class TestValidate:
    def test_clean_session(self, runner, vault, session_text):
        (vault / "Sessions" / "smith.md").write_text(session_text())

        result = _invoke(runner, vault, "validate", "Sessions/smith.md")

        assert result.exit_code == 0
        assert "No issues found." in result.output

    def test_blocking_session(self, runner, vault):
        _invoke(runner, vault, "new", "Smith")
        path = next((vault / "Sessions").glob("*-smith.md")).relative_to(vault).as_posix()

        result = _invoke(runner, vault, "validate", path)

        assert result.exit_code == 1
        assert "blocking issue(s)" in result.output

    def test_missing_session(self, runner, vault):
        result = _invoke(runner, vault, "validate", "Sessions/missing.md")

        assert result.exit_code == 1
        assert "Error: File not found" in result.output


class TestProject:
    def test_projects_and_saves_session(self, runner, vault, census_session):
        (vault / "Sessions" / "smith.md").write_text(serialize_session(census_session))

        result = _invoke(runner, vault, "project", "Sessions/smith.md")

        assert result.exit_code == 0
        assert "Persons: 3 created, 0 updated" in result.output
        assert (vault / "Lineage" / "People" / "Jane Doe.md").is_file()
        assert (vault / "Lineage" / "Events" / "Birth - Bob Smith - 1900.md").is_file()

        saved = parse_session((vault / "Sessions" / "smith.md").read_text())
        assert len(saved.metadata.projected_entities) == 17
        assert saved.persons[0].matched_to == "[[Lineage/People/Jane Doe]]"

    def test_skips_blocked_session(self, runner, vault, session_text):
        (vault / "Sessions" / "smith.md").write_text(session_text(repository=""))

        result = _invoke(runner, vault, "project", "Sessions/smith.md")

        assert result.exit_code == 1
        assert "Skipping Sessions/smith.md" in result.output
        assert not (vault / "Lineage").exists()

    def test_several_sessions(self, runner, vault, session_text, census_session):
        (vault / "Sessions" / "a.md").write_text(serialize_session(census_session))
        (vault / "Sessions" / "b.md").write_text(
            session_text(persons=[{"id": "p1", "name": "Mary Smith"}])
        )

        result = _invoke(runner, vault, "project", "Sessions/a.md", "Sessions/b.md")

        assert result.exit_code == 0
        assert (vault / "Lineage" / "People" / "Mary Smith.md").is_file()


def test_conflicts(runner, vault, session_text):
    (vault / "Sessions" / "smith.md").write_text(
        session_text(
            persons=[{"id": "p1", "name": "Bob Smith"}],
            assertions=[
                {"id": "a1", "type": "birth", "participants": [{"person_ref": "p1"}]},
                {"id": "a2", "type": "birth", "participants": [{"person_ref": "p1"}]},
            ],
        )
    )

    result = _invoke(runner, vault, "conflicts", "Sessions/smith.md")

    assert result.exit_code == 0
    assert "high" in result.output
    assert "a1, a2" in result.output


def test_match_suggests_existing_person(runner, vault, session_text):
    people = vault / "Lineage" / "People"
    people.mkdir(parents=True)
    (people / "Robert Smith.md").write_text(build_person_template("Robert Smith"))
    (vault / "Sessions" / "smith.md").write_text(
        session_text(persons=[{"id": "p1", "name": "Robert Smith"}])
    )

    result = _invoke(runner, vault, "match", "Sessions/smith.md")

    assert result.exit_code == 0
    assert "Lineage/People/Robert Smith.md" in result.output


def test_index_counts(runner, vault):
    people = vault / "Lineage" / "People"
    people.mkdir(parents=True)
    (people / "Robert Smith.md").write_text(build_person_template("Robert Smith"))

    result = _invoke(runner, vault, "index")

    assert result.exit_code == 0
    assert "Indexed 1 person(s)" in result.output
    assert "Indexed 0 place(s)" in result.output
