import os
import tarfile

import pytest

from ybactl.layout import prepare_install_layout, stage_package, version_software_dir

VERSION = "2.20.1.0-b97"


def test_prepare_install_layout(mocker, app_settings):
    mocker.patch("ybactl.layout.has_sudo_access", return_value=False)
    mock_chown = mocker.patch("ybactl.layout.chown_recursive")

    prepare_install_layout(app_settings, VERSION)

    assert version_software_dir(app_settings, VERSION).is_dir()
    assert app_settings.data_dir.is_dir()
    assert os.readlink(app_settings.active_software_dir) == str(version_software_dir(app_settings, VERSION))
    mock_chown.assert_not_called()


def test_prepare_install_layout_as_root_chowns(mocker, app_settings):
    mocker.patch("ybactl.layout.has_sudo_access", return_value=True)
    mock_chown = mocker.patch("ybactl.layout.chown_recursive")

    prepare_install_layout(app_settings, VERSION)

    assert mock_chown.call_args.args[:2] == (app_settings.install_root, "yugabyte")


def test_stage_package_extracts_latest_match(mocker, app_settings, tmp_path):
    packages = tmp_path / "packages"
    packages.mkdir()
    payload = tmp_path / "prometheus"
    payload.write_text("binary")
    with tarfile.open(packages / "prometheus-2.47.1.linux-amd64.tar.gz", "w:gz") as tar:
        tar.add(payload, arcname="prometheus")
    mocker.patch("setup.config.PACKAGES_DIR", packages)

    destination = stage_package(app_settings, VERSION, "prometheus", "prometheus")

    assert destination == version_software_dir(app_settings, VERSION) / "prometheus"
    assert (destination / "prometheus").read_text() == "binary"


def test_stage_package_missing(mocker, app_settings, tmp_path):
    mocker.patch("setup.config.PACKAGES_DIR", tmp_path)
    with pytest.raises(FileNotFoundError, match="postgresql"):
        stage_package(app_settings, VERSION, "postgres", "postgresql")
