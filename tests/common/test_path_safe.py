import pytest
from pathlib import Path
from reelprobe.common.path.safe import resolve_root, is_inside, ensure_inside


def test_resolve_root(tmp_path):
    p = resolve_root(tmp_path)
    assert isinstance(p, Path)
    assert p.exists()


def test_is_inside(tmp_path):
    assert is_inside(tmp_path / "a" / "thumb.png", tmp_path)
    assert not is_inside(tmp_path / ".." / "outside.png", tmp_path)


def test_ensure_inside_ok(tmp_path):
    inner = tmp_path / "x" / "y"
    inner.mkdir(parents=True, exist_ok=True)
    ensure_inside(inner, tmp_path)  # should not raise


def test_ensure_inside_reject(tmp_path):
    with pytest.raises(ValueError):
        ensure_inside("/", tmp_path)
