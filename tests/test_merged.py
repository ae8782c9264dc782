import shutil
from pathlib import Path

import pytest

from Tree_Hash.core.errors import NotADirectory, PathNotFound
from Tree_Hash.core.source import MemorySource
from Tree_Hash.core.walker import compute_merged_tree_hash, compute_tree_hash


BASE = {
    "a.txt": "base\n",
    "conf": {"x.ini": "1\n"},
    "lib": {"a.py": "a\n"},
}
TOP = {
    "a.txt": "top\n",
    "conf": "conf is a file now\n",
    "lib": {"b.py": "b\n"},
}


def physically_merged(tmp_path: Path, *dirs: Path) -> Path:
    out = tmp_path / "merged"
    out.mkdir()
    for d in dirs:
        for item in d.iterdir():
            target = out / item.name
            if target.is_dir() and not item.is_dir():
                shutil.rmtree(target)
            elif target.exists() and not target.is_dir() and item.is_dir():
                target.unlink()
            if item.is_dir():
                shutil.copytree(item, target, dirs_exist_ok=True)
            else:
                shutil.copy2(item, target)
    return out


def test_single_directory_is_plain_hash(tmp_path: Path, make_tree):
    base = make_tree(tmp_path / "base", BASE)

    assert compute_merged_tree_hash([base]) == compute_tree_hash(base)


def test_merge_matches_copied_tree(tmp_path: Path, make_tree):
    base = make_tree(tmp_path / "base", BASE)
    top = make_tree(tmp_path / "top", TOP)

    expected = physically_merged(tmp_path, base, top)

    assert compute_merged_tree_hash([base, top]) == compute_tree_hash(expected)


def test_later_directory_wins(tmp_path: Path, make_tree):
    base = make_tree(tmp_path / "base", {"a.txt": "base\n"})
    top = make_tree(tmp_path / "top", {"a.txt": "top\n"})
    only_top = make_tree(tmp_path / "only_top", {"a.txt": "top\n"})

    assert compute_merged_tree_hash([base, top]) == compute_tree_hash(only_top)
    assert compute_merged_tree_hash([top, base]) != compute_tree_hash(only_top)


def test_directories_are_merged(tmp_path: Path, make_tree):
    base = make_tree(tmp_path / "base", {"lib": {"a.py": "a\n"}})
    top = make_tree(tmp_path / "top", {"lib": {"b.py": "b\n"}})
    both = make_tree(tmp_path / "both", {"lib": {"a.py": "a\n", "b.py": "b\n"}})

    assert compute_merged_tree_hash([base, top]) == compute_tree_hash(both)


def test_missing_layer_is_skipped(tmp_path: Path, make_tree, caplog):
    base = make_tree(tmp_path / "base", BASE)

    digest = compute_merged_tree_hash([tmp_path / "nope", base])

    assert digest == compute_tree_hash(base)
    assert "Skipping layer" in caplog.text


def test_no_usable_layer_raises_first_error(tmp_path: Path):
    f = tmp_path / "file.txt"
    f.write_text("x")

    with pytest.raises(PathNotFound):
        compute_merged_tree_hash([tmp_path / "nope", f])

    with pytest.raises(NotADirectory):
        compute_merged_tree_hash([f, tmp_path / "nope"])


def test_empty_list_rejected():
    with pytest.raises(ValueError):
        compute_merged_tree_hash([])


def test_memory_layers():
    source = MemorySource({
        "base": {"a.txt": b"base\n", "keep": b"k"},
        "top": {"a.txt": b"hello\n"},
    })
    expected = MemorySource({"a.txt": b"hello\n", "keep": b"k"})

    assert compute_merged_tree_hash(["base", "top"], source=source) == (
        compute_tree_hash(".", source=expected)
    )


def test_metadata_directory_ignored_in_every_layer(tmp_path: Path, make_tree):
    base = make_tree(tmp_path / "base", {"a.txt": "hello\n"})
    top = make_tree(tmp_path / "top", {".git": {"HEAD": "ref\n"}})

    assert compute_merged_tree_hash([base, top]) == compute_tree_hash(base)
