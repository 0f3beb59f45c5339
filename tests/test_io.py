"""Tests for I/O helpers."""
import numpy as np
import pytest

from fingerprint_registration.utils.io import (
    ManifestEntry,
    load_image,
    load_json,
    load_manifest,
    read_bytes,
    save_image,
    save_json,
    save_manifest,
    save_text_lines,
    write_bytes,
)


def test_write_and_read_bytes(tmp_path):
    path = write_bytes(b"\x89PNG", tmp_path / "a" / "b" / "c.bin")
    assert read_bytes(path) == b"\x89PNG"


def test_read_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_bytes(tmp_path / "missing.png")


def test_image_round_trip(tmp_path):
    image = np.arange(100, dtype=np.uint8).reshape(10, 10)
    save_image(image, tmp_path / "img.png")

    np.testing.assert_array_equal(load_image(tmp_path / "img.png"), image)


def test_load_image_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_image(tmp_path / "missing.png")

    bogus = tmp_path / "bogus.png"
    bogus.write_bytes(b"nope")
    with pytest.raises(ValueError):
        load_image(bogus)


def test_manifest_resolves_relative_paths(tmp_path):
    manifest = tmp_path / "pairs.csv"
    manifest.write_text(
        "pair_id,moving,fixed,m1x,m1y,f1x,f1y,m2x,m2y,f2x,f2y\n"
        "p1,img/a.png,img/b.png,1,2,3,4,5,6,7,8\n"
        ",img/c.png,/abs/d.png,0,0,0,0,9,9,9,9\n"
    )

    entries = load_manifest(manifest)

    assert entries[0].pair_id == "p1"
    assert entries[0].moving == tmp_path / "img" / "a.png"
    assert entries[0].points == [1, 2, 3, 4, 5, 6, 7, 8]
    assert entries[1].pair_id == "c_d"
    assert str(entries[1].fixed) == "/abs/d.png"


def test_manifest_bad_row(tmp_path):
    manifest = tmp_path / "pairs.csv"
    manifest.write_text(
        "pair_id,moving,fixed,m1x,m1y,f1x,f1y,m2x,m2y,f2x,f2y\n"
        "p1,a.png,b.png,1,2,3,4,5,6,7,x\n"
    )
    with pytest.raises(ValueError, match="pairs.csv:2"):
        load_manifest(manifest)


def test_manifest_round_trip(tmp_path):
    entries = [ManifestEntry("p", tmp_path / "m.png", tmp_path / "f.png", list(range(8)))]
    save_manifest(entries, tmp_path / "out.csv")

    assert load_manifest(tmp_path / "out.csv") == entries


def test_json_and_text(tmp_path):
    save_json({'a': 1}, tmp_path / "x" / "d.json")
    assert load_json(tmp_path / "x" / "d.json") == {'a': 1}

    save_text_lines(["<a>", "</a>"], tmp_path / "t.xml")
    assert (tmp_path / "t.xml").read_text() == "<a>\n</a>\n"
