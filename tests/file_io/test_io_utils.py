from __future__ import annotations

import threading
from pathlib import Path

import pytest
import yaml

from appserver.core.utils.io import (
    LockTimeoutError,
    acquire_file_lock,
    dump_yaml_string,
    iter_yaml_files,
    read_yaml,
    remove_file,
    touch_file,
    write_yaml,
)


def test_write_yaml_roundtrip_keeps_order(tmp_path: Path) -> None:
    out = tmp_path / "nested" / "data.yaml"
    payload = {"z": 1, "a": {"c": [1, 2, 3]}}
    write_yaml(out, payload)

    assert list(yaml.safe_load(out.read_text())) == ["z", "a"]
    assert read_yaml(out) == payload


def test_read_yaml_missing(tmp_path: Path) -> None:
    assert read_yaml(tmp_path / "nope.yaml", default={}) == {}
    with pytest.raises(FileNotFoundError):
        read_yaml(tmp_path / "nope.yaml", raise_on_error=True)


def test_read_yaml_invalid(tmp_path: Path) -> None:
    bad = tmp_path / "bad.yaml"
    bad.write_text("a: [unclosed\n", encoding="utf-8")
    assert read_yaml(bad, default="fallback") == "fallback"
    with pytest.raises(yaml.YAMLError):
        read_yaml(bad, raise_on_error=True)


def test_multiline_strings_use_block_style() -> None:
    assert "|" in dump_yaml_string({"text": "a\nb\n"})


def test_concurrent_atomic_writes_produce_valid_yaml(tmp_path: Path) -> None:
    out = tmp_path / "race.yaml"

    def writer(value: int) -> None:
        for _ in range(50):
            write_yaml(out, {"v": value}, lock_cm=acquire_file_lock(out, timeout=5))

    t1 = threading.Thread(target=writer, args=(1,))
    t2 = threading.Thread(target=writer, args=(2,))
    t1.start(); t2.start()
    t1.join(); t2.join()

    assert read_yaml(out)["v"] in (1, 2)
    assert [p.name for p in tmp_path.iterdir()] == ["race.yaml"]


def test_lock_timeout(tmp_path: Path) -> None:
    target = tmp_path / "locked.yaml"
    errors = []

    def contender() -> None:
        try:
            with acquire_file_lock(target, timeout=0.2, poll_interval=0.05):
                pass
        except LockTimeoutError as exc:
            errors.append(exc)

    with acquire_file_lock(target, timeout=1):
        t = threading.Thread(target=contender)
        t.start()
        t.join()

    assert len(errors) == 1


def test_lock_rejects_non_positive_timeout(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        with acquire_file_lock(tmp_path / "x", timeout=0):
            pass


def test_touch_and_remove(tmp_path: Path) -> None:
    flag = tmp_path / "a.zip.dodeploy"
    touch_file(flag)
    assert flag.exists() and flag.stat().st_size == 0
    assert remove_file(flag) is True
    assert remove_file(flag) is False


def test_iter_yaml_files_prefers_yaml(tmp_path: Path) -> None:
    for name in ("b.yml", "b.yaml", "a.yml", "c.txt"):
        (tmp_path / name).write_text("x: 1\n")
    assert [p.name for p in iter_yaml_files(tmp_path)] == ["a.yml", "b.yaml"]
    assert iter_yaml_files(tmp_path / "missing") == []
