from Tree_Hash.core.models import DirectoryEntry
from Tree_Hash.core.ordering import (
    compare_bytes,
    compare_entries,
    encode_name,
    sort_entries,
    sort_key,
)


def names(entries):
    return [e.name for e in entries]


def test_compare_bytes_first_difference_decides():
    assert compare_bytes(b"abc", b"abd") < 0
    assert compare_bytes(b"b", b"abc") > 0
    assert compare_bytes(b"same", b"same") == 0


def test_compare_bytes_prefix_sorts_first():
    assert compare_bytes(b"lib", b"lib.txt") < 0
    assert compare_bytes(b"lib.txt", b"lib") > 0


def test_directory_sorts_after_file_with_same_prefix():
    lib_dir = DirectoryEntry(name="lib", is_directory=True)
    lib_txt = DirectoryEntry(name="lib.txt", is_directory=False)

    # "lib." < "lib/"
    assert compare_entries(lib_txt, lib_dir) < 0
    assert names(sort_entries([lib_dir, lib_txt])) == ["lib.txt", "lib"]


def test_same_name_file_would_sort_before_directory_suffix():
    assert sort_key("lib", is_directory=False) == b"lib"
    assert sort_key("lib", is_directory=True) == b"lib/"


def test_separator_position_in_byte_order():
    entries = [
        DirectoryEntry(name="lib0", is_directory=False),
        DirectoryEntry(name="lib", is_directory=True),
        DirectoryEntry(name="lib-x", is_directory=False),
    ]

    # "-" (0x2d) < "/" (0x2f) < "0" (0x30)
    assert names(sort_entries(entries)) == ["lib-x", "lib", "lib0"]


def test_plain_file_prefix_sorts_first():
    entries = [
        DirectoryEntry(name="a.b", is_directory=False),
        DirectoryEntry(name="a", is_directory=False),
    ]
    assert names(sort_entries(entries)) == ["a", "a.b"]


def test_byte_order_not_locale_order():
    entries = [
        DirectoryEntry(name="b", is_directory=False),
        DirectoryEntry(name="B", is_directory=False),
        DirectoryEntry(name="é", is_directory=False),
        DirectoryEntry(name="z", is_directory=False),
        DirectoryEntry(name="_", is_directory=False),
    ]

    # uppercase < underscore < lowercase < multi-byte UTF-8
    assert names(sort_entries(entries)) == ["B", "_", "b", "z", "é"]


def test_non_bmp_names_compare_by_utf8_bytes():
    # U+FF5E (ef bd 9e) sorts before U+1F600 (f0 9f 98 80) byte-wise
    entries = [
        DirectoryEntry(name="\U0001F600", is_directory=False),
        DirectoryEntry(name="～", is_directory=False),
    ]
    assert names(sort_entries(entries)) == ["～", "\U0001F600"]


def test_undecodable_names_round_trip():
    name = b"caf\xe9".decode("utf-8", "surrogateescape")
    assert encode_name(name) == b"caf\xe9"


def test_sort_is_a_total_order_over_a_level():
    entries = [
        DirectoryEntry(name=n, is_directory=d)
        for n, d in [
            ("src", True),
            ("setup.py", False),
            ("src.egg-info", True),
            ("README", False),
            (".gitignore", False),
            ("s", False),
        ]
    ]

    ordered = sort_entries(entries)

    keys = [sort_key(e.name, e.is_directory) for e in ordered]
    assert keys == sorted(keys)
    assert names(ordered) == [
        ".gitignore", "README", "s", "setup.py", "src.egg-info", "src",
    ]
