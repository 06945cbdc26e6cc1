"""Project a calibrated geodetic target into a metric offset on the marker."""

from __future__ import annotations

import math
from typing import Tuple

from .errors import DegenerateProjection
from .types import CalibrationRecord

DEGENERATE_EPS = 1e-9


def project_pixel(record: CalibrationRecord, eps: float = DEGENERATE_EPS) -> Tuple[float, float]:
    """
    Map ``record.target`` to pixel coordinates of the marker's reference image.

    The matrix is applied as ``[lon, lat, 1] @ H``; the vertical axis is
    flipped to the calibration's image convention.
    """
    lat, lon = record.target
    H = record.projection

    px = H[0][0] * lon + H[1][0] * lat + H[2][0]
    py = H[0][1] * lon + H[1][1] * lat + H[2][1]
    w = H[0][2] * lon + H[1][2] * lat + H[2][2]

    if not math.isfinite(w) or abs(w) <= eps:
        raise DegenerateProjection(
            f"marker {record.marker_id}: homogeneous denominator {w!r} is degenerate"
        )

    return float(px / w), float(-(py / w))


def project(
    record: CalibrationRecord,
    extent_width: float,
    extent_height: float,
    eps: float = DEGENERATE_EPS,
) -> Tuple[float, float]:
    """
    Metric offset (x, y) of the POI from the marker's visual center.

    The pixel displacement from the reference frame center is expressed as
    a percentage of the reference frame and rescaled by the marker's
    observed physical extent, so the result does not depend on print size.

    Args:
        record: Calibration of the marker
        extent_width: Observed marker width (m)
        extent_height: Observed marker height (m)
        eps: Threshold below which the homogeneous denominator is degenerate

    Returns:
        (offset_x, offset_y) in meters, in the marker plane

    Raises:
        DegenerateProjection: projection would divide by ~0 or is not finite
    """
    pixel_x, pixel_y = project_pixel(record, eps)

    ref_w, ref_h = record.reference_size
    delta_x = ref_w / 2.0 - pixel_x
    delta_y = ref_h / 2.0 - pixel_y

    # percent of the reference frame; (dX * 10) / 64 for 640x480
    percent_x = delta_x * 100.0 / ref_w
    percent_y = delta_y * 100.0 / ref_h

    offset_x = -(percent_x * extent_width) / 100.0
    offset_y = (percent_y * extent_height) / 100.0

    if not (math.isfinite(offset_x) and math.isfinite(offset_y)):
        raise DegenerateProjection(f"marker {record.marker_id}: projected offset is not finite")
    return offset_x, offset_y
