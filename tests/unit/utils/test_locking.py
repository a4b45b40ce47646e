from __future__ import annotations

import threading
import time
from pathlib import Path

import pytest

from modctl.core.utils.io import LockTimeoutError, acquire_file_lock, is_locked


def test_lock_creates_and_removes_sidecar(tmp_path: Path) -> None:
    target = tmp_path / "module_config.json"
    sidecar = tmp_path / "module_config.json.lock"

    with acquire_file_lock(target, timeout=1.0):
        assert sidecar.exists()
        assert is_locked(target)

    assert not sidecar.exists()
    assert not is_locked(target)


def test_second_acquire_times_out(tmp_path: Path) -> None:
    target = tmp_path / "module_config.json"
    with acquire_file_lock(target, timeout=1.0):
        with pytest.raises(LockTimeoutError):
            with acquire_file_lock(target, timeout=0.2, poll_interval=0.05):
                pass


def test_waiter_acquires_after_release(tmp_path: Path) -> None:
    target = tmp_path / "module_config.json"
    acquired = threading.Event()
    leaving = threading.Event()

    def _holder() -> None:
        with acquire_file_lock(target, timeout=1.0):
            acquired.set()
            time.sleep(0.2)
            leaving.set()

    thread = threading.Thread(target=_holder)
    thread.start()
    assert acquired.wait(2.0)

    with acquire_file_lock(target, timeout=5.0, poll_interval=0.02):
        assert leaving.is_set()

    thread.join()


@pytest.mark.parametrize("kwargs", [{"timeout": 0}, {"timeout": 1.0, "poll_interval": -1}])
def test_rejects_non_positive_timing(tmp_path: Path, kwargs) -> None:
    with pytest.raises(ValueError):
        with acquire_file_lock(tmp_path / "x.json", **kwargs):
            pass
