"""Core data types shared by the decoder, the animation cursor and ViewState."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

import numpy as np

if TYPE_CHECKING:
    from .animation import AnimationHandle

RGB_CHANNELS = 3


@dataclass(frozen=True, eq=False)
class Bitmap:
    """A decoded RGB frame: ``pixels`` is a (height, width, 3) uint8 array."""

    pixels: np.ndarray

    def __post_init__(self) -> None:
        if self.pixels.ndim != 3 or self.pixels.shape[2] != RGB_CHANNELS:
            raise ValueError(f"expected (h, w, 3) array, got shape {self.pixels.shape}")

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def reference_dimension(self) -> int:
        """min(width, height): the basis all zoom ratios are measured against."""
        return min(self.width, self.height)


@dataclass(frozen=True)
class SingleFrame:
    bitmap: Bitmap


@dataclass(frozen=True)
class MultiFrame:
    animation: AnimationHandle


DecodedImage = Union[SingleFrame, MultiFrame]
