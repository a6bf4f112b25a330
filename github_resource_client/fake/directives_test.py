"""Unit tests for directive batches and path queries."""

import xml.etree.ElementTree as ET

import pytest

from ..exceptions import NoMatchError, StorageError
from .directives import Directives, find, literal, select


@pytest.fixture
def root():
    return ET.fromstring(
        "<github><repos>"
        "<repo coords='jeff/a'><name>a</name><git/></repo>"
        "<repo coords='jeff/b'><name>b</name><git/></repo>"
        "</repos></github>"
    )


def describe_find():
    def it_starts_absolute_paths_at_the_root(root):
        assert [n.get("coords") for n in find(root, "/github/repos/repo")] == ["jeff/a", "jeff/b"]
        assert find(root, "/github") == [root]

    def it_matches_nothing_under_another_root(root):
        assert find(root, "/gitlab/repos") == []

    def it_filters_by_attribute_with_slashes_in_the_value(root):
        nodes = find(root, "/github/repos/repo[@coords='jeff/b']")

        assert [n.findtext("name") for n in nodes] == ["b"]

    def it_filters_by_child_text(root):
        assert len(find(root, "/github/repos/repo[name='a']")) == 1

    def it_searches_descendants(root):
        assert len(find(root, "//git")) == 2

    def it_searches_descendants_below_the_root(root):
        assert len(find(root, "/github//git")) == 2
        assert [n.text for n in find(root, "/github//repo[@coords='jeff/b']/name")] == ["b"]
        assert find(root, "/gitlab//git") == []

    def it_reports_malformed_paths(root):
        with pytest.raises(StorageError):
            find(root, "/github/repos[")

    @pytest.mark.parametrize("path", [
        "/github/repos/repo[@coords=",
        "/github/repos/repo[name=",
        "/github/repos/repo[",
        "/github//repo[name=",
    ])
    def it_reports_truncated_predicates(root, path):
        with pytest.raises(StorageError):
            find(root, path)


def describe_select():
    def it_selects_text(root):
        assert select(root, "/github/repos/repo/name/text()") == ["a", "b"]

    def it_selects_attributes(root):
        assert select(root, "/github/repos/repo/@coords") == ["jeff/a", "jeff/b"]

    def it_selects_string_values(root):
        assert select(root, "/github/repos/repo[@coords='jeff/a']") == ["a"]


def describe_literal():
    def it_quotes_values():
        assert literal("refs/heads/x") == "'refs/heads/x'"
        assert literal("it's") == '"it\'s"'

    def it_rejects_values_with_both_quotes():
        with pytest.raises(ValueError):
            literal("'\"")


def describe_Directives():
    def it_adds_nested_children(root):
        Directives().xpath("/github/repos/repo[@coords='jeff/a']/git").add("refs").add("reference") \
            .add("ref").set("refs/heads/master").up() \
            .add("sha").set("abc").apply(root)

        assert select(root, "/github/repos/repo[@coords='jeff/a']/git/refs/reference/sha/text()") == ["abc"]

    def it_adds_if_absent_only_once(root):
        for _ in range(3):
            Directives().xpath("/github/repos/repo[@coords='jeff/a']/git").add_if("refs").apply(root)

        assert len(find(root, "/github/repos/repo[@coords='jeff/a']/git/refs")) == 1

    def it_applies_steps_to_every_cursor_node(root):
        Directives().xpath("/github/repos/repo").add_if("refs").apply(root)

        assert len(find(root, "/github/repos/repo/refs")) == 2

    def it_sets_attributes(root):
        Directives().xpath("/github/repos").add("repo").attr("coords", "jeff/c").apply(root)

        assert select(root, "/github/repos/repo/@coords")[-1] == "jeff/c"

    def it_removes_matched_nodes(root):
        Directives().xpath("/github/repos/repo[@coords='jeff/a']").remove().apply(root)

        assert select(root, "/github/repos/repo/@coords") == ["jeff/b"]

    def it_ignores_steps_after_an_empty_match(root):
        before = ET.tostring(root)

        Directives().xpath("/github/repos/repo[@coords='jeff/zzz']/git").add("refs").set("x").apply(root)

        assert ET.tostring(root) == before

    def it_evaluates_relative_paths_from_the_cursor(root):
        Directives().xpath("/github/repos/repo[@coords='jeff/b']").xpath("git").add("refs").apply(root)

        assert len(find(root, "/github/repos/repo[@coords='jeff/b']/git/refs")) == 1
        assert find(root, "/github/repos/repo[@coords='jeff/a']/git/refs") == []

    def it_refuses_to_leave_the_root(root):
        with pytest.raises(StorageError):
            Directives().up().apply(root)
        with pytest.raises(StorageError):
            Directives().xpath("/github").remove().apply(root)

    def it_reports_malformed_paths(root):
        with pytest.raises(StorageError):
            Directives().xpath("/github/repos/repo[@coords=").apply(root)

    def it_describes_itself():
        directives = Directives().xpath("/github").add_if("repos")

        assert len(directives) == 2
        assert list(directives) == [("xpath", "/github"), ("add_if", "repos")]

    def describe_where():
        def it_narrows_the_cursor(root):
            Directives().xpath("/github/repos/repo").where(lambda n: n.findtext("name") == "b") \
                .add("private").set("true").apply(root)

            assert select(root, "/github/repos/repo[private='true']/@coords") == ["jeff/b"]

        def it_matches_text_with_both_kinds_of_quotes(root):
            odd = "it's \"quoted\""
            Directives().xpath("/github/repos/repo[@coords='jeff/a']/name").set(odd).apply(root)

            Directives().xpath("/github/repos/repo").where(lambda n: n.findtext("name") == odd).remove() \
                .apply(root)

            assert select(root, "/github/repos/repo/@coords") == ["jeff/b"]

    def describe_strict():
        def it_passes_on_the_expected_count(root):
            Directives().xpath("/github/repos/repo").strict(2).strict().add("git").apply(root)

            assert len(find(root, "/github/repos/repo/git")) == 4

        def it_fails_on_an_empty_cursor(root):
            with pytest.raises(NoMatchError):
                Directives().xpath("/github/repos/repo[@coords='jeff/zzz']").strict().apply(root)

        def it_fails_on_a_different_count(root):
            with pytest.raises(NoMatchError, match="Expected 1 nodes, found 2"):
                Directives().xpath("/github/repos/repo").strict(1).apply(root)

        def it_is_a_storage_error():
            assert issubclass(NoMatchError, StorageError)
