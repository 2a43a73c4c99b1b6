import pytest

from pedigree_py import fs
from pedigree_py.errors import ValidationError


def test_ensure_dir_and_atomic_write(tmp_path):
    d = tmp_path / "sub"
    p = d / "file.txt"
    fs.ensure_dir(d)
    assert d.exists()
    fs.atomic_write_text(p, "hello")
    assert p.read_text() == "hello"
    assert [x.name for x in d.iterdir()] == ["file.txt"]


def test_json_save_and_load(tmp_path):
    p = tmp_path / "dogs.json"
    obj = {"dogs": [{"id": "d1", "name": "Bella"}]}
    fs.json_save(p, obj)
    assert fs.json_load(p) == obj


def test_json_load_default(tmp_path):
    assert fs.json_load(tmp_path / "missing.json", default=[]) == []


def test_json_load_rejects_malformed_file(tmp_path):
    p = tmp_path / "broken.json"
    p.write_text("{not json")
    with pytest.raises(ValidationError):
        fs.json_load(p)
