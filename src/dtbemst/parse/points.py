"""Point set loading from delimited text and NumPy files.

One point per row, one coordinate per column. Text files may use commas,
tabs or runs of whitespace as separators; lines starting with ``#`` and
blank lines are ignored.
"""

from dataclasses import dataclass
from pathlib import Path

import numpy as np
from numpy.typing import NDArray

from dtbemst.utils import calculate_file_sha256, get_file_mtime

__all__ = [
    "SUPPORTED_EXTENSIONS",
    "PointsFile",
    "PointsFormatError",
    "detect_delimiter",
    "load_points",
    "parse_points_text",
    "read_points_file",
]

SUPPORTED_EXTENSIONS: dict[str, str] = {
    ".csv": "csv",
    ".tsv": "tsv",
    ".txt": "txt",
    ".npy": "npy",
}


class PointsFormatError(ValueError):
    """Raised when a points file cannot be read as an ``(n, d)`` matrix."""

    def __init__(self, message: str, file: str | None = None) -> None:
        """Initialize points format error.

        Parameters
        ----------
        message : str
            Error message.
        file : str | None, optional
            File where error occurred.
        """
        super().__init__(message)
        self.file = file


@dataclass(frozen=True)
class PointsFile:
    """A loaded points file and its provenance.

    Attributes
    ----------
    path : Path
        Source file.
    format : str
        Format from ``SUPPORTED_EXTENSIONS``.
    points : NDArray[np.float64]
        Loaded points, shape ``(n, d)``.
    file_size : int
        Size of file in bytes.
    file_digest : str
        SHA-256 digest with "sha256:" prefix.
    file_mtime : str | None
        ISO8601 modification timestamp.
    """

    path: Path
    format: str
    points: NDArray[np.float64]
    file_size: int
    file_digest: str
    file_mtime: str | None

    @property
    def num_points(self) -> int:
        return int(self.points.shape[0])

    @property
    def dimensions(self) -> int:
        return int(self.points.shape[1])


def detect_delimiter(line: str) -> str | None:
    """Guess the column separator of a data line (None means whitespace)."""
    if "," in line:
        return ","
    if "\t" in line:
        return "\t"
    return None


def parse_points_text(text: str, source: str = "<string>") -> NDArray[np.float64]:
    """Parse delimited text into an ``(n, d)`` matrix.

    Parameters
    ----------
    text : str
        File contents.
    source : str, optional
        Name used in error messages.

    Returns
    -------
    NDArray[np.float64]
        Parsed points. Text without data lines gives shape ``(0, 0)``.

    Raises
    ------
    PointsFormatError
        On non-numeric fields, rows of differing length, or NaN/infinite
        coordinates.
    """
    rows: list[list[float]] = []
    delimiter: str | None = None
    width: int | None = None

    for line_number, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue

        if width is None:
            delimiter = detect_delimiter(line)

        fields = [field.strip() for field in line.split(delimiter)]
        try:
            row = [float(field) for field in fields]
        except ValueError:
            raise PointsFormatError(
                f"{source}: line {line_number}: non-numeric value in {line!r}",
                file=source,
            ) from None

        if width is None:
            width = len(row)
        elif len(row) != width:
            raise PointsFormatError(
                f"{source}: line {line_number}: expected {width} columns, got {len(row)}",
                file=source,
            )
        rows.append(row)

    if not rows:
        return np.empty((0, 0), dtype=np.float64)

    points = np.array(rows, dtype=np.float64)
    _check_finite(points, source)
    return points


def read_points_file(path: str | Path) -> PointsFile:
    """Load a points file together with its size, digest and mtime.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    PointsFormatError
        If the extension is unsupported or the contents are malformed.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise FileNotFoundError(f"File not found: {path}")

    file_format = SUPPORTED_EXTENSIONS.get(file_path.suffix.lower())
    if file_format is None:
        supported = ", ".join(sorted(SUPPORTED_EXTENSIONS))
        raise PointsFormatError(
            f"{file_path.name}: unsupported extension {file_path.suffix!r} (expected one of {supported})",
            file=str(file_path),
        )

    if file_format == "npy":
        points = _load_npy(file_path)
    else:
        try:
            text = file_path.read_bytes().decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise PointsFormatError(
                f"{file_path.name}: not UTF-8 text ({exc.reason})",
                file=str(file_path),
            ) from exc
        points = parse_points_text(text, source=file_path.name)

    return PointsFile(
        path=file_path,
        format=file_format,
        points=points,
        file_size=file_path.stat().st_size,
        file_digest=calculate_file_sha256(file_path),
        file_mtime=get_file_mtime(file_path),
    )


def load_points(path: str | Path) -> NDArray[np.float64]:
    """Load a points file as an ``(n, d)`` float matrix."""
    return read_points_file(path).points


def _load_npy(file_path: Path) -> NDArray[np.float64]:
    try:
        raw = np.load(file_path, allow_pickle=False)
    except ValueError as exc:
        raise PointsFormatError(f"{file_path.name}: {exc}", file=str(file_path)) from exc

    if raw.ndim == 1:
        raw = raw.reshape(-1, 1)
    if raw.ndim != 2:
        raise PointsFormatError(
            f"{file_path.name}: expected a 2-D array, got shape {raw.shape}",
            file=str(file_path),
        )
    try:
        points = raw.astype(np.float64)
    except (TypeError, ValueError) as exc:
        raise PointsFormatError(f"{file_path.name}: {exc}", file=str(file_path)) from exc

    _check_finite(points, file_path.name)
    return points


def _check_finite(points: NDArray[np.float64], source: str) -> None:
    if not np.all(np.isfinite(points)):
        bad_row = int(np.flatnonzero(~np.isfinite(points).all(axis=1))[0])
        raise PointsFormatError(
            f"{source}: row {bad_row} has a NaN or infinite coordinate",
            file=source,
        )
