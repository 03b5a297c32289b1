"""Tests for the record stores and header handling."""

import pytest

from lineage.errors import StoreError
from lineage.store.base import StoreEvent, VaultFile, extract_link_target
from lineage.store.filesystem import FileSystemVault
from lineage.store.frontmatter import load_yaml, merge_frontmatter, split_frontmatter
from lineage.store.memory import MemoryVault

PERSON = "---\nlineage_type: person\nname: Jane Doe\n---\n\n## Events\n"


# ------------------------------------------------------------------ #
#  Header handling                                                    #
# ------------------------------------------------------------------ #


class TestFrontmatter:
    def test_split(self):
        frontmatter, rest, has_block = split_frontmatter(PERSON)
        assert frontmatter == {"lineage_type": "person", "name": "Jane Doe"}
        assert rest == "\n## Events\n"
        assert has_block

    def test_no_header(self):
        assert split_frontmatter("# Title\n") == ({}, "# Title\n", False)

    def test_empty_header(self):
        assert split_frontmatter("---\n---\nbody") == ({}, "body", True)

    def test_malformed_header_reads_empty(self):
        frontmatter, _, has_block = split_frontmatter("---\nname: [oops\n---\nbody")
        assert frontmatter == {}
        assert has_block

    def test_dates_stay_text(self):
        assert load_yaml("date: 1900-03-15") == {"date": "1900-03-15"}

    def test_merge_keeps_body_and_skips_none(self):
        merged = merge_frontmatter(PERSON, {"sex": "F", "name": None})
        frontmatter, rest, _ = split_frontmatter(merged)
        assert frontmatter == {"lineage_type": "person", "name": "Jane Doe", "sex": "F"}
        assert rest == "\n## Events\n"

    def test_merge_adds_header(self):
        merged = merge_frontmatter("# Notes\n", {"lineage_type": "place"})
        assert merged == "---\nlineage_type: place\n---\n\n# Notes\n"

    def test_merge_refuses_malformed_header(self):
        with pytest.raises(StoreError):
            merge_frontmatter("---\nname: [oops\n---\nbody", {"sex": "F"})


def test_extract_link_target():
    """Wikilinks and markdown links resolve to their bare target."""
    assert extract_link_target("[[Jane Doe]]") == "Jane Doe"
    assert extract_link_target("[[Jane Doe|Jane]]") == "Jane Doe"
    assert extract_link_target("[[Jane Doe#Births]]") == "Jane Doe"
    assert extract_link_target("[Jane](People/Jane%20Doe.md)") == "People/Jane Doe.md"
    assert extract_link_target("  Springfield ") == "Springfield"


# ------------------------------------------------------------------ #
#  Memory store                                                       #
# ------------------------------------------------------------------ #


class TestMemoryVault:
    def test_create_and_read(self, store):
        file = store.create("People//Jane Doe.md", PERSON)

        assert file == VaultFile("People/Jane Doe.md")
        assert file.basename == "Jane Doe"
        assert file.parent == "People"
        assert store.read("People/Jane Doe.md") == PERSON
        assert store.folder_exists("People")

    def test_create_refuses_existing(self, store):
        store.create("a.md", "one")
        with pytest.raises(StoreError):
            store.create("a.md", "two")
        assert store.read("a.md") == "one"

    def test_missing_file(self, store):
        with pytest.raises(StoreError):
            store.modify("missing.md", "x")
        with pytest.raises(StoreError):
            store.read("missing.md")

    def test_create_folder_registers_parents(self, store):
        store.create_folder("Lineage/People/")
        assert store.folder_exists("Lineage")
        assert store.exists("Lineage/People")
        assert store.list_files() == []

    def test_frontmatter_round_trip(self, store):
        file = store.create("People/Jane Doe.md", PERSON)
        store.update_frontmatter(file, {"lineage_id": "abc"})

        assert store.get_frontmatter(file)["lineage_id"] == "abc"
        assert store.read(file).endswith("\n## Events\n")

    def test_events(self, store):
        events = []
        store.subscribe(events.append)

        file = store.create("a.md", "one")
        store.modify(file, "two")
        renamed = store.rename(file, "b.md")
        store.delete(renamed)
        store.unsubscribe(events.append)
        store.create("c.md", "three")

        assert [e.kind for e in events] == ["create", "modify", "rename", "delete"]
        assert events[2] == StoreEvent("rename", VaultFile("b.md"), old_path="a.md")

    def test_rename_refuses_existing_target(self, store):
        store.create("a.md", "one")
        store.create("b.md", "two")
        with pytest.raises(StoreError):
            store.rename("a.md", "b.md")


class TestResolveLink:
    @pytest.fixture
    def linked_store(self):
        return MemoryVault(
            {
                "Lineage/People/Jane Doe.md": PERSON,
                "Lineage/Places/Springfield.md": "---\nlineage_type: place\n---\n",
            }
        )

    @pytest.mark.parametrize(
        "link",
        [
            "[[Jane Doe]]",
            "[[Jane Doe|Jane]]",
            "[[People/Jane Doe]]",
            "[[Lineage/People/Jane Doe.md]]",
            "[Jane](Lineage/People/Jane%20Doe.md)",
            "Jane Doe",
        ],
    )
    def test_resolves(self, linked_store, link):
        assert linked_store.resolve_link(link) == VaultFile("Lineage/People/Jane Doe.md")

    def test_unresolved(self, linked_store):
        assert linked_store.resolve_link("[[Nobody]]") is None
        assert linked_store.resolve_link("") is None


# ------------------------------------------------------------------ #
#  File system store                                                  #
# ------------------------------------------------------------------ #


class TestFileSystemVault:
    def test_create_writes_file(self, tmp_path):
        vault = FileSystemVault(tmp_path)
        vault.create("Lineage/People/Jane Doe.md", PERSON)

        target = tmp_path / "Lineage" / "People" / "Jane Doe.md"
        assert target.read_text(encoding="utf-8") == PERSON
        assert [p.name for p in target.parent.iterdir()] == ["Jane Doe.md"]

    def test_list_skips_hidden_and_non_markdown(self, tmp_path):
        (tmp_path / ".obsidian").mkdir()
        (tmp_path / ".obsidian" / "workspace.md").write_text("x")
        (tmp_path / "b.md").write_text("b")
        (tmp_path / "a.md").write_text("a")
        (tmp_path / "scan.jpg").write_text("binary")

        vault = FileSystemVault(tmp_path)
        assert [f.path for f in vault.list_files()] == ["a.md", "b.md"]
        assert vault.get_file("scan.jpg") == VaultFile("scan.jpg")

    def test_rename_and_delete(self, tmp_path):
        vault = FileSystemVault(tmp_path)
        file = vault.create("a.md", "one")
        renamed = vault.rename(file, "Archive/a.md")

        assert not (tmp_path / "a.md").exists()
        assert (tmp_path / "Archive" / "a.md").read_text() == "one"

        vault.delete(renamed)
        assert vault.list_files() == []

    def test_missing_root(self, tmp_path):
        vault = FileSystemVault(tmp_path / "nowhere")
        assert vault.list_files() == []
        with pytest.raises(StoreError):
            vault.read("a.md")

    def test_update_frontmatter(self, tmp_path):
        vault = FileSystemVault(tmp_path)
        vault.create("p.md", PERSON)
        vault.update_frontmatter("p.md", {"sex": "F"})
        assert vault.get_frontmatter("p.md")["sex"] == "F"
