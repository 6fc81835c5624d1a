"""Image Engine - Qt-free collaborators of the viewer core.

- Decoding and bilinear rescaling (decoder)
- Animated image playback (animation)
- Sibling navigation within a directory (navigator)
- In-process counters and timings (metrics)

Usage:
    from huaga.image_engine import decode_image, DirectoryNavigator

    decoded = decode_image("/path/to/image.gif")
    candidates = DirectoryNavigator().next_candidates("/path/to/image.gif")
"""

from .animation import AnimationCursor, AnimationFrame, AnimationHandle
from .decoder import decode_image, rescale
from .navigator import Direction, DirectoryNavigator, list_directory
from .types import Bitmap, DecodedImage, MultiFrame, SingleFrame

__all__ = [
    "AnimationCursor",
    "AnimationFrame",
    "AnimationHandle",
    "Bitmap",
    "DecodedImage",
    "Direction",
    "DirectoryNavigator",
    "MultiFrame",
    "SingleFrame",
    "decode_image",
    "list_directory",
    "rescale",
]
