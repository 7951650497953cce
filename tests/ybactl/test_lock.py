import os

import pytest

from common.exceptions import LockError
from ybactl.lock import InstallerLock


def test_lock_records_pid(tmp_path):
    lock_file = tmp_path / "yba-ctl" / ".lock"
    with InstallerLock(lock_file):
        assert lock_file.read_text() == str(os.getpid())


def test_second_lock_is_refused(tmp_path):
    lock_file = tmp_path / ".lock"
    with InstallerLock(lock_file):
        with pytest.raises(LockError, match=str(os.getpid())):
            InstallerLock(lock_file).acquire()


def test_lock_can_be_taken_again_after_release(tmp_path):
    lock_file = tmp_path / ".lock"
    with InstallerLock(lock_file):
        pass
    lock = InstallerLock(lock_file)
    lock.acquire()
    lock.release()
    lock.release()
