"""Calculate the size at which images are printed, and resample them."""

from __future__ import annotations

import logging
from math import ceil, floor
from typing import TYPE_CHECKING

from PIL import Image

from termpix.data_structures import Dimensions
from termpix.errors import EncodingError, InvalidConfiguration

if TYPE_CHECKING:
    from PIL.Image import Image as PilImage

log = logging.getLogger(__name__)

# Used when the size of a terminal cell cannot be determined
DEFAULT_CELL_SIZE_PX = (10, 20)


def fit_dimensions(
    image_size: tuple[int, int],
    width: int | None = None,
    height: int | None = None,
    cell_size: tuple[int, int] | None = None,
    terminal_size: tuple[int, int] | None = None,
    clip: bool = True,
) -> Dimensions:
    """Calculate the size of an image in terminal cells and pixels.

    If both a width and a height are requested, they are used as given. If only one is
    given, the other is derived from the image's aspect ratio. If neither is given,
    the image's native size is used, scaled down to fit in the terminal.

    Args:
        image_size: The size of the source image in pixels as ``(width, height)``
        width: The requested width in cells
        height: The requested height in cells
        cell_size: The size of a terminal cell in pixels as ``(width, height)``
        terminal_size: The size of the terminal in cells as ``(columns, rows)``
        clip: Whether images displayed at their native size are scaled down to fit
            in the terminal

    Returns:
        The target size of the image

    Raises:
        EncodingError: If the source image has no pixels
        InvalidConfiguration: If the requested width or height is negative

    """
    px, py = image_size
    if px <= 0 or py <= 0:
        raise EncodingError(f"Cannot print an image of size {px}x{py}")
    if (width or 0) < 0 or (height or 0) < 0:
        raise InvalidConfiguration(
            f"The image size cannot be negative: width={width}, height={height}"
        )
    if cell_size is None or min(cell_size) < 1:
        cell_size = DEFAULT_CELL_SIZE_PX
    cell_x, cell_y = cell_size

    if width and height:
        cols, rows = width, height

    elif width:
        cols = width
        rows = max(1, round(width * cell_x * py / px / cell_y))

    elif height:
        rows = height
        cols = max(1, round(height * cell_y * px / py / cell_x))

    else:
        cols = ceil(px / cell_x)
        rows = ceil(py / cell_y)
        if clip and terminal_size is not None:
            term_cols, term_rows = terminal_size
            # Leave a line free below the image for the prompt
            max_rows = max(1, term_rows - 1)
            if cols > term_cols or rows > max_rows:
                scale = min(term_cols / cols, max_rows / rows)
                cols = max(1, min(term_cols, floor(cols * scale)))
                rows = max(1, min(max_rows, floor(rows * scale)))

    return Dimensions(
        cols=cols, rows=rows, px_width=cols * cell_x, px_height=rows * cell_y
    )


def resize_image(image: PilImage, size: tuple[int, int]) -> PilImage:
    """Resample an image to a new size in pixels.

    A bicubic filter is used to avoid blocky output when scaling up or down.

    Args:
        image: The image to resize
        size: The target size as ``(width, height)``

    Returns:
        The resized image, or the original image if it is already the right size

    """
    if image.size == size:
        return image
    log.debug("Resizing image from %s to %s", image.size, size)
    return image.resize(size, resample=Image.Resampling.BICUBIC)
