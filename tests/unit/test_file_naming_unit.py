from datetime import datetime
from pathlib import Path

from autocrop.utils.file_naming import (
    CropDestinationBuilder,
    build_crop_basename,
    build_crop_destination,
)


def test_crop_destination_sits_in_subdir():
    dest = build_crop_destination("/data/2024-05-01/M51/LIGHT_0001.fits")
    assert dest == Path("/data/2024-05-01/M51/crop/LIGHT_0001.fits")


def test_crop_destination_adds_fits_suffix_and_custom_subdir():
    dest = build_crop_destination(Path("session/frame_0002"), subdir="stacks")
    assert dest == Path("session/stacks/frame_0002.fits")


def test_fit_suffix_is_kept():
    assert build_crop_destination("a/b.fit").name == "b.fit"


def test_basename_from_window_start():
    name = build_crop_basename(datetime(2024, 5, 1, 22, 0, 5), 150.25, -12.5)
    assert name == "crop_20240501_220005_rap150.250_decm012.500.fits"


def test_builder_prefers_source_path(tmp_path):
    builder = CropDestinationBuilder(subdir="crop", output_dir=tmp_path)
    start = datetime(2024, 5, 1, 22, 0, 0)
    assert builder(start, 1.0, 2.0, "s/x.fits") == Path("s/crop/x.fits")
    assert builder(start, 1.0, 2.0, None).parent == tmp_path
