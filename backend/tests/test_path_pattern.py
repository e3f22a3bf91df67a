"""
Tests for PathPattern value semantics and matching.

These tests verify:
1. Equality and hashing by (job id, whitelist set, blacklist set) only
2. Offset is carried but not part of identity
3. Blacklist takes precedence over whitelist, at any depth
4. Walk roots derived from whitelist literal prefixes
"""

import dataclasses

import pytest

from watchtrigger.triggers import InvalidPatternError, PathPattern

pytestmark = pytest.mark.posix


class TestValueIdentity:
    """PathPattern equality is structural."""

    def test_equal_patterns_are_interchangeable_map_keys(self):
        """
        GIVEN: Two patterns built from separately constructed sets
        WHEN: One is used as a dict key and the other to remove it
        THEN: The entry is found and removed
        """
        a1 = PathPattern("1", {"/data/parent"}, set())
        a2 = PathPattern("1", {"/data/parent"}, set())
        entries = {a1: 10}

        assert a1 == a2
        assert entries.pop(a2) == 10
        assert entries == {}

    def test_insertion_order_and_container_type_ignored(self):
        a = PathPattern("1", ["/a/*.log", "/b/*.log"], ("/a/tmp", "/b/tmp"))
        b = PathPattern("1", {"/b/*.log", "/a/*.log"}, frozenset({"/b/tmp", "/a/tmp"}))

        assert a == b
        assert hash(a) == hash(b)

    def test_offset_not_part_of_identity(self):
        a = PathPattern("1", {"/a/*.log"}, set(), offset="100")
        b = PathPattern("1", {"/a/*.log"}, set(), offset=None)

        assert a == b
        assert hash(a) == hash(b)
        assert len({a, b}) == 1

    def test_job_id_is_part_of_identity(self):
        assert PathPattern("1", {"/a/*.log"}) != PathPattern("2", {"/a/*.log"})

    def test_blacklist_is_part_of_identity(self):
        assert PathPattern("1", {"/a/*.log"}, {"/a/tmp"}) != PathPattern("1", {"/a/*.log"})

    def test_single_string_is_one_expression(self):
        pattern = PathPattern("1", "/a/*.log", "/a/tmp")
        assert pattern.whitelist == frozenset({"/a/*.log"})
        assert pattern.blacklist == frozenset({"/a/tmp"})

    def test_immutable(self):
        pattern = PathPattern("1", {"/a/*.log"})
        with pytest.raises(dataclasses.FrozenInstanceError):
            pattern.job_id = "2"


class TestValidation:
    def test_empty_whitelist_rejected(self):
        with pytest.raises(InvalidPatternError):
            PathPattern("1", set())

    def test_malformed_whitelist_rejected(self):
        with pytest.raises(InvalidPatternError) as exc_info:
            PathPattern("1", {"/a/[x.log"})
        assert exc_info.value.expression == "/a/[x.log"

    def test_malformed_blacklist_rejected(self):
        with pytest.raises(InvalidPatternError):
            PathPattern("1", {"/a/*.log"}, {"/a/{tmp"})


class TestMatching:
    """Whitelist/blacklist evaluation."""

    def test_blacklist_precedence(self):
        """
        GIVEN: Whitelist /root/**/*.log and blacklist /root/tmp
        WHEN: Evaluating /root/1.log and /root/tmp/2.log
        THEN: Only /root/1.log matches, though both satisfy the whitelist
        """
        pattern = PathPattern("1", {"/root/**/*.log"}, {"/root/tmp"})

        assert pattern.matches("/root/1.log")
        assert not pattern.matches("/root/tmp/2.log")
        assert not pattern.matches("/root/tmp/deep/3.log")

    def test_blacklist_glob(self):
        pattern = PathPattern("1", {"/root/**/*.log"}, {"/root/**/*.debug.log"})

        assert pattern.matches("/root/a/app.log")
        assert not pattern.matches("/root/a/app.debug.log")

    def test_any_whitelist_entry_matches(self):
        pattern = PathPattern("1", {"/root/tmp/*.log", "/root/**/*.txt"})

        assert pattern.matches("/root/1.txt")
        assert pattern.matches("/root/tmp/4.txt")
        assert pattern.matches("/root/tmp/5.log")
        assert not pattern.matches("/root/2.log")
        assert not pattern.matches("/root/3.tar.gz")

    def test_matching_expression_names_whitelist_entry(self):
        pattern = PathPattern("1", {"/root/tmp/*.log", "/root/**/*.txt"})

        assert pattern.matching_expression("/root/tmp/5.log") == "/root/tmp/*.log"
        assert pattern.matching_expression("/root/1.txt") == "/root/**/*.txt"
        assert pattern.matching_expression("/root/2.log") is None

    def test_is_blacklisted(self):
        pattern = PathPattern("1", {"/root/**/*.log"}, {"/root/tmp"})

        assert pattern.is_blacklisted("/root/tmp")
        assert pattern.is_blacklisted("/root/tmp/x")
        assert not pattern.is_blacklisted("/root")


class TestWalkRoots:
    def test_root_hints(self):
        pattern = PathPattern("1", {"/root/tmp/*.log", "/root/**/*.txt"})
        assert pattern.root_hints() == {"/root/tmp", "/root"}

    def test_walk_roots_sorted_with_depth(self):
        pattern = PathPattern("1", {"/root/tmp/*.log", "/root/**/*.txt"})
        assert pattern.walk_roots() == [("/root", None), ("/root/tmp", 1)]

    def test_shared_root_takes_deepest_bound(self):
        pattern = PathPattern("1", {"/root/*.log", "/root/*/*.txt"})
        assert pattern.walk_roots() == [("/root", 2)]

    def test_shared_root_unbounded_wins(self):
        pattern = PathPattern("1", {"/root/*.log", "/root/**/*.txt"})
        assert pattern.walk_roots() == [("/root", None)]


class TestSerialization:
    def test_to_dict_sorted(self):
        pattern = PathPattern("1", {"/b/*.log", "/a/*.log"}, {"/b/tmp", "/a/tmp"}, offset="7")
        assert pattern.to_dict() == {
            "job_id": "1",
            "whitelist": ["/a/*.log", "/b/*.log"],
            "blacklist": ["/a/tmp", "/b/tmp"],
            "offset": "7",
        }
