"""Writing 8-bit greyscale images as binary PGM (P5) files."""

from __future__ import annotations

from os import PathLike
from typing import Union

_HEADER_COMMENT = "# Created by pcamctl"


class PGMError(Exception):
    """Raised when an image cannot be written as a PGM file."""


def pgm_header(magic: str, width: int, height: int) -> bytes:
    """Return the PGM header for an image of ``width`` x ``height`` pixels."""
    return f"{magic}\n{_HEADER_COMMENT}\n{width}\n{height}\n255\n".encode("ascii")


def write_pgm_file(
    data: bytes,
    width: int,
    height: int,
    pitch: int,
    bytes_per_pixel: int,
    path: Union[str, "PathLike[str]"],
) -> None:
    """Write ``data`` to ``path`` as a binary PGM image.

    ``pitch`` is the number of bytes between the starts of two rows in
    ``data``; padding beyond ``width * bytes_per_pixel`` is not written.
    Only 8-bit pixels are supported.
    """
    if bytes_per_pixel > 1:
        raise PGMError(
            "only 8-bit per pixel images supported! "
            f"This image has {bytes_per_pixel * 8}-bit per pixel!"
        )
    view = memoryview(bytes(data))
    line_bytes = width * bytes_per_pixel
    if pitch == line_bytes:
        rows = [view[: pitch * height]]
        expected = pitch * height
        if len(rows[0]) != expected:
            raise PGMError(f"only {len(rows[0])} bytes available for {path}")
    else:
        rows = [view[y * pitch : y * pitch + line_bytes] for y in range(height)]
        for row in rows:
            if len(row) != line_bytes:
                raise PGMError(
                    f"only {len(row)} from {line_bytes} bytes available for {path}"
                )
    try:
        with open(path, "wb") as handle:
            handle.write(pgm_header("P5", width, height))
            for row in rows:
                handle.write(row)
    except OSError as exc:
        raise PGMError(f"can not open file {path}") from exc