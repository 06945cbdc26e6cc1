from pathlib import Path

import numpy as np
import pytest

from geo_anchor.calibration import CalibrationStore
from geo_anchor.types import MarkerObservation, Pose, TrackingMethod, TrackingState

REPO_ROOT = Path(__file__).resolve().parents[1]

# Projects any target to pixel (640, 400) with w == 1. On a 0.20 x 0.15 m
# marker that is an offset of (0.10, -0.05) m from the marker center.
SCENARIO_MATRIX = [
    [0.0, 0.0, 0.0],
    [0.0, 0.0, 0.0],
    [640.0, -400.0, 1.0],
]
SCENARIO_TARGET = [46.6711523, 12.990682]


@pytest.fixture
def shipped_calibration() -> Path:
    return REPO_ROOT / "data" / "calibration.yaml"


@pytest.fixture
def calibration_doc():
    return {
        "markers": [
            {"id": 3, "target": SCENARIO_TARGET, "matrix": SCENARIO_MATRIX},
            {"id": 5, "target": SCENARIO_TARGET, "matrix": SCENARIO_MATRIX},
            # third column is zero: homogeneous denominator is always 0
            {"id": 7, "target": SCENARIO_TARGET, "matrix": [[1, 0, 0], [0, 1, 0], [0, 0, 0]]},
        ]
    }


@pytest.fixture
def store(calibration_doc) -> CalibrationStore:
    return CalibrationStore.from_records(calibration_doc)


@pytest.fixture
def calib_file(tmp_path, calibration_doc) -> Path:
    import yaml

    path = tmp_path / "calibration.yaml"
    path.write_text(yaml.safe_dump(calibration_doc), encoding="utf-8")
    return path


@pytest.fixture
def make_obs():
    def _make(
        marker_id=3,
        state=TrackingState.TRACKING,
        method=TrackingMethod.FULL_TRACKING,
        tvec=(0.0, 0.0, -1.0),
        rvec=(0.0, 0.0, 0.0),
        extent=(0.20, 0.15),
    ) -> MarkerObservation:
        return MarkerObservation(
            marker_id=marker_id,
            tracking_state=state,
            tracking_method=method,
            extent_width=extent[0],
            extent_height=extent[1],
            center_pose=Pose(np.array(rvec, dtype=float), np.array(tvec, dtype=float)),
        )

    return _make
