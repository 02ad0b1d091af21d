from __future__ import annotations

import io
import tarfile
from pathlib import Path, PurePosixPath

import pytest
from PIL import Image as PILImage

from icon_family import resample
from icon_family.errors import AlreadyIncludedError
from icon_family.formats.png_sequence import PngSequence
from icon_family.image import open_image
from icon_family.keys import PngKey


def test_entries_keep_insertion_order_in_tar(hydra_png: Path) -> None:
    hydra = open_image(hydra_png)
    seq = PngSequence()
    seq.add_entry(resample.nearest, hydra, PngKey(64, PurePosixPath("hi/icon.png")))
    seq.add_entry(resample.nearest, hydra, 16)

    with tarfile.open(fileobj=io.BytesIO(seq.to_bytes()), mode="r") as tar:
        assert tar.getnames() == ["hi/icon.png", "16.png"]
        fh = tar.extractfile("hi/icon.png")
        assert fh is not None
        with PILImage.open(fh) as im:
            assert im.size == (64, 64)


def test_colliding_paths_are_rejected(hydra_png: Path) -> None:
    hydra = open_image(hydra_png)
    seq = PngSequence().add_entry(resample.nearest, hydra, PngKey(16, PurePosixPath("a.png")))
    with pytest.raises(AlreadyIncludedError):
        seq.add_entry(resample.nearest, hydra, PngKey(32, PurePosixPath("a.png")))
    # Same size under another path is fine.
    seq.add_entry(resample.nearest, hydra, PngKey(16, PurePosixPath("b.png")))
    assert len(seq) == 2


def test_save_to_directory(tmp_path: Path, hydra_png: Path) -> None:
    out = tmp_path / "pngs"
    seq = PngSequence().add_entries(resample.linear, open_image(hydra_png), [16, 32])
    seq.save(out)
    assert sorted(p.name for p in out.iterdir()) == ["16.png", "32.png"]
    with PILImage.open(out / "32.png") as im:
        assert im.size == (32, 32)


def test_save_into_existing_file_writes_tar(tmp_path: Path, hydra_png: Path) -> None:
    target = tmp_path / "pngs.tar"
    _ = target.write_bytes(b"")
    seq = PngSequence().add_entry(resample.linear, open_image(hydra_png), 16)
    seq.save(target)
    assert tarfile.is_tarfile(target)
