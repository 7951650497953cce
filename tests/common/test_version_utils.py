import json

import pytest

from common.exceptions import VersionError
from common.version_utils import (
    compare_versions,
    less_versions,
    parse_version,
    read_version_metadata,
)


@pytest.mark.parametrize(
    "version, expected",
    [
        ("2.18.1.0", ((2, 18, 1, 0), None)),
        ("2.18.1.0-b42", ((2, 18, 1, 0), 42)),
        ("2.18.1.0_b42", ((2, 18, 1, 0), 42)),
        ("2.18.1.0-42", ((2, 18, 1, 0), 42)),
    ],
)
def test_parse_version(version, expected):
    assert parse_version(version) == expected


@pytest.mark.parametrize("version", ["", "  ", "2.x.1.0", "2..1", "2.18.1.0-bnext"])
def test_parse_version_rejects_malformed(version):
    with pytest.raises(VersionError):
        parse_version(version)


def test_compare_versions_is_numeric_not_lexical():
    assert compare_versions("2.9.0.0", "2.18.0.0") == -1
    assert compare_versions("2.18.0.0", "2.9.0.0") == 1


def test_build_number_breaks_ties():
    assert compare_versions("2.18.1.0-b9", "2.18.1.0-b42") == -1
    assert less_versions("2.18.1.0-b9", "2.18.1.0-b42")


def test_equal_versions():
    assert compare_versions("2.18.1.0-b42", "2.18.1.0_b42") == 0
    assert not less_versions("2.18.1.0-b42", "2.18.1.0-b42")


def test_different_segment_counts_raise():
    with pytest.raises(VersionError, match="segment counts"):
        compare_versions("2.18.1", "2.18.1.0")


def test_build_on_one_side_only_raises():
    with pytest.raises(VersionError, match="build number"):
        compare_versions("2.18.1.0-b42", "2.18.1.0")


def test_read_version_metadata(tmp_path):
    metadata = tmp_path / "version_metadata.json"
    metadata.write_text(json.dumps({"version_number": "2.20.1.0", "build_number": "b97"}))
    assert read_version_metadata(metadata) == "2.20.1.0-b97"


def test_read_version_metadata_without_build(tmp_path):
    metadata = tmp_path / "version_metadata.json"
    metadata.write_text(json.dumps({"version_number": "2.20.1.0"}))
    assert read_version_metadata(metadata) == "2.20.1.0"


def test_read_version_metadata_missing_file(tmp_path):
    with pytest.raises(VersionError, match="could not read"):
        read_version_metadata(tmp_path / "missing.json")


def test_read_version_metadata_without_version(tmp_path):
    metadata = tmp_path / "version_metadata.json"
    metadata.write_text(json.dumps({"build_number": "b97"}))
    with pytest.raises(VersionError, match="no version_number"):
        read_version_metadata(metadata)


@pytest.mark.parametrize("version", ["2.18.1.²", "2.18.1.0-b٣", "２.18.1.0"])
def test_non_ascii_digits_are_rejected(version):
    with pytest.raises(VersionError, match="invalid"):
        compare_versions(version, "2.18.1.0-b1")


def test_read_version_metadata_not_an_object(tmp_path):
    metadata = tmp_path / "version_metadata.json"
    metadata.write_text(json.dumps(["2.20.1.0"]))
    with pytest.raises(VersionError, match="JSON object"):
        read_version_metadata(metadata)
