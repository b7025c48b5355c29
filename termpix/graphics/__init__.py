"""Contains printers for each of the supported terminal graphics protocols."""

from termpix.graphics.base import Printer
from termpix.graphics.block import BlockPrinter
from termpix.graphics.iterm import ItermPrinter
from termpix.graphics.kitty import KittyPrinter
from termpix.graphics.sixel import SixelPrinter

__all__ = ["Printer", "BlockPrinter", "ItermPrinter", "KittyPrinter", "SixelPrinter"]
