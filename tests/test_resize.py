"""Test the calculation of printed image sizes."""

from __future__ import annotations

import pytest
from PIL import Image

from termpix.errors import EncodingError, InvalidConfiguration
from termpix.resize import DEFAULT_CELL_SIZE_PX, fit_dimensions, resize_image


@pytest.mark.parametrize(
    ("image_size", "width", "cell_size"),
    [
        ((200, 100), 40, (10, 20)),
        ((640, 480), 80, (9, 18)),
        ((33, 170), 7, (8, 16)),
        ((1920, 1080), 123, (10, 21)),
    ],
)
def test_width_only_preserves_aspect(
    image_size: tuple[int, int], width: int, cell_size: tuple[int, int]
) -> None:
    """Requesting only a width derives a height within one cell of exact."""
    px, py = image_size
    cell_x, cell_y = cell_size
    size = fit_dimensions(image_size, width=width, cell_size=cell_size)
    exact_rows = width * cell_x * py / px / cell_y
    assert size.cols == width
    assert abs(size.rows - exact_rows) <= 1
    assert size.pixels == (width * cell_x, size.rows * cell_y)


def test_height_only_preserves_aspect() -> None:
    """Requesting only a height derives a width from the aspect ratio."""
    size = fit_dimensions((200, 100), height=10, cell_size=(10, 20))
    assert size.cells == (40, 10)


def test_width_and_height_used_as_given() -> None:
    """Requesting both a width and a height ignores the aspect ratio."""
    size = fit_dimensions((80, 50), width=80, height=25, cell_size=(10, 20))
    assert size == (80, 25, 800, 500)


def test_native_size() -> None:
    """Images are printed at their native size if they fit in the terminal."""
    size = fit_dimensions((95, 41), cell_size=(10, 20), terminal_size=(80, 24))
    assert size.cells == (10, 3)


def test_native_size_clipped_to_terminal() -> None:
    """Large images are shrunk to fit inside the terminal."""
    size = fit_dimensions((4000, 1000), cell_size=(10, 20), terminal_size=(80, 24))
    assert size.cols <= 80
    assert size.rows <= 23
    assert size.cols == 80


def test_native_size_unclipped() -> None:
    """Large images keep their native size if clipping is disabled."""
    size = fit_dimensions(
        (4000, 1000), cell_size=(10, 20), terminal_size=(80, 24), clip=False
    )
    assert size.cells == (400, 50)


def test_default_cell_size() -> None:
    """A default cell size is used if none is known."""
    size = fit_dimensions((100, 100), width=10)
    assert size.px_width == 10 * DEFAULT_CELL_SIZE_PX[0]


def test_tiny_image_occupies_one_cell() -> None:
    """Sizes never drop below a single cell."""
    size = fit_dimensions((1000, 1), width=2, cell_size=(10, 20))
    assert size.rows == 1


@pytest.mark.parametrize("image_size", [(0, 10), (10, 0)])
def test_empty_image(image_size: tuple[int, int]) -> None:
    """Images with no pixels cannot be printed."""
    with pytest.raises(EncodingError):
        fit_dimensions(image_size, width=10)


@pytest.mark.parametrize(
    ("width", "height"), [(-4, None), (None, -1), (-2, 3), (5, -5), (-1, -1)]
)
def test_negative_size(width: int | None, height: int | None) -> None:
    """Negative widths and heights are rejected."""
    with pytest.raises(InvalidConfiguration):
        fit_dimensions((20, 10), width=width, height=height)


@pytest.mark.parametrize("cell_size", [(0, 0), (0, 20), (10, 0)])
def test_unusable_cell_size(cell_size: tuple[int, int]) -> None:
    """A cell size with an empty side falls back to the default."""
    assert fit_dimensions((40, 40), cell_size=cell_size) == fit_dimensions(
        (40, 40), cell_size=DEFAULT_CELL_SIZE_PX
    )


def test_resize_image() -> None:
    """Images are only resampled if their size changes."""
    image = Image.new("RGBA", (10, 10), (255, 0, 0, 255))
    assert resize_image(image, (10, 10)) is image
    resized = resize_image(image, (20, 5))
    assert resized.size == (20, 5)
    assert image.size == (10, 10)
