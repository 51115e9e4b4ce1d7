"""Tests for the VersionSpec value type and related models."""

import pytest

from vcrbpkg.models import (
    ProcessResult,
    RuntimeProfile,
    VersionSpec,
    compare_versions,
)


class TestVersionParse:
    """Tests for VersionSpec.parse()."""

    @pytest.mark.parametrize("text,expected", [
        ("3.2.2", VersionSpec(3, 2, 2)),
        ("2.7.6\n", VersionSpec(2, 7, 6)),
        ("  1.9.3  ", VersionSpec(1, 9, 3)),
        ("3.2.2-rc1", VersionSpec(3, 2, 2)),
        ("3.2.2-patch", VersionSpec(3, 2, 2)),
        ("10.20.30.40", VersionSpec(10, 20, 30)),
        ("0.0.0", VersionSpec(0, 0, 0)),
    ])
    def test_valid_versions(self, text, expected):
        assert VersionSpec.parse(text) == expected

    @pytest.mark.parametrize("text", [
        None,
        "",
        "   \n",
        "not-a-version",
        "1.2",
        "3",
        "ruby-3.2.2",
        "v3.2.2",
        "3.2.x",
        "-1.2.3",
    ])
    def test_invalid_versions_are_absent(self, text):
        assert VersionSpec.parse(text) is None

    def test_non_ascii_digits_rejected(self):
        # Arabic-Indic digits are \d in unicode mode
        assert VersionSpec.parse("٣.٢.٢") is None


class TestVersionConstruction:
    """VersionSpec component validation."""

    def test_negative_component_rejected(self):
        with pytest.raises(ValueError):
            VersionSpec(1, -1, 0)

    def test_non_integer_component_rejected(self):
        with pytest.raises(ValueError):
            VersionSpec(1, "2", 0)

    def test_bool_component_rejected(self):
        with pytest.raises(ValueError):
            VersionSpec(True, 0, 0)

    def test_immutable(self):
        version = VersionSpec(3, 2, 2)
        with pytest.raises(AttributeError):
            version.major = 4

    def test_zero_version_is_distinct_from_absent(self):
        assert VersionSpec.parse("0.0.0") is not None


class TestVersionRendering:
    """Tests for to_string() and str()."""

    def test_to_string(self):
        assert VersionSpec(3, 2, 2).to_string() == "3.2.2"
        assert str(VersionSpec(10, 0, 11)) == "10.0.11"

    @pytest.mark.parametrize("version", [
        VersionSpec(0, 0, 0),
        VersionSpec(1, 9, 3),
        VersionSpec(3, 2, 2),
        VersionSpec(12, 345, 6789),
    ])
    def test_round_trip(self, version):
        assert VersionSpec.parse(version.to_string()) == version


class TestVersionComparison:
    """Tests for the three-way comparison and ordering."""

    VERSIONS = [
        VersionSpec(1, 9, 3),
        VersionSpec(2, 4, 0),
        VersionSpec(2, 4, 11),
        VersionSpec(2, 4, 36),
        VersionSpec(2, 5, 0),
        VersionSpec(3, 0, 0),
    ]

    def test_ordering_priority(self):
        assert compare_versions(VersionSpec(3, 0, 0), VersionSpec(2, 9, 9)) == 1
        assert compare_versions(VersionSpec(2, 5, 0), VersionSpec(2, 4, 99)) == 1
        assert compare_versions(VersionSpec(2, 4, 11), VersionSpec(2, 4, 36)) == -1

    def test_equality_requires_all_components(self):
        assert VersionSpec(2, 2, 2) != VersionSpec(2, 2, 3)
        assert VersionSpec(3, 2, 2).compare(VersionSpec(3, 2, 3)) == -1
        assert VersionSpec(3, 2, 2).compare(VersionSpec(3, 2, 2)) == 0

    def test_comparison_is_antisymmetric(self):
        for a in self.VERSIONS:
            assert compare_versions(a, a) == 0
            for b in self.VERSIONS:
                assert compare_versions(a, b) == -compare_versions(b, a)

    def test_rich_comparison_matches_compare(self):
        for a in self.VERSIONS:
            for b in self.VERSIONS:
                assert (a < b) == (compare_versions(a, b) < 0)
                assert (a == b) == (compare_versions(a, b) == 0)

    def test_sorting(self):
        assert sorted(reversed(self.VERSIONS)) == self.VERSIONS


class TestOtherModels:

    def test_profiles_in_priority_order(self):
        assert [p.value for p in RuntimeProfile] == ["production", "development", "test"]

    def test_process_result_success(self):
        assert ProcessResult(args=['true'], returncode=0).success
        assert not ProcessResult(args=['false'], returncode=1).success
        assert not ProcessResult(args=['sleep'], returncode=None, timed_out=True).success
        assert ProcessResult(args=['rvm', 'version'], returncode=0).command == "rvm version"
