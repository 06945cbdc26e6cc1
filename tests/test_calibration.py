import json

import numpy as np
import pytest

from geo_anchor.calibration import CalibrationStore, load_calibration
from geo_anchor.errors import CalibrationError

from conftest import SCENARIO_MATRIX, SCENARIO_TARGET


def test_shipped_table_loads(shipped_calibration):
    store = load_calibration(shipped_calibration)

    assert len(store) == 63
    assert store.ids() == list(range(63))
    rec = store.lookup(19)
    assert rec.target == pytest.approx((46.8322843, 14.8161273))
    assert rec.projection.shape == (3, 3)
    assert rec.projection[2][2] == 1.0
    assert rec.reference_size == (640, 480)


def test_lookup_missing_returns_none(store):
    assert store.lookup(42) is None
    assert 42 not in store
    assert 3 in store


def test_records_are_immutable(store):
    rec = store.lookup(3)
    with pytest.raises(ValueError):
        rec.projection[0, 0] = 1.0
    with pytest.raises(AttributeError):
        rec.target = (0.0, 0.0)


def test_json_list_root_and_flat_matrix(tmp_path):
    path = tmp_path / "calib.json"
    flat = [v for row in SCENARIO_MATRIX for v in row]
    path.write_text(json.dumps([{"id": 1, "target": SCENARIO_TARGET, "matrix": flat}]))

    store = load_calibration(path)

    assert np.allclose(store.lookup(1).projection, SCENARIO_MATRIX)


def test_reference_frame_is_carried(tmp_path):
    path = tmp_path / "calib.json"
    path.write_text(
        json.dumps(
            {
                "reference_frame": {"width": 1280, "height": 960},
                "markers": [{"id": 1, "target": {"lat": 1.0, "lon": 2.0}, "matrix": SCENARIO_MATRIX}],
            }
        )
    )

    rec = load_calibration(path).lookup(1)

    assert rec.reference_size == (1280, 960)
    assert rec.target == (1.0, 2.0)


def test_missing_file_is_calibration_error(tmp_path):
    with pytest.raises(CalibrationError):
        load_calibration(tmp_path / "nope.yaml")


def test_unparseable_file_is_calibration_error(tmp_path):
    path = tmp_path / "calib.json"
    path.write_text("{not json")
    with pytest.raises(CalibrationError):
        load_calibration(path)


@pytest.mark.parametrize(
    "entry",
    [
        {"id": 1, "target": SCENARIO_TARGET},
        {"id": 1, "target": SCENARIO_TARGET, "matrix": [[1, 2], [3, 4]]},
        {"id": 1, "target": SCENARIO_TARGET, "matrix": [1, 2, 3, 4, 5, 6, 7, 8, float("nan")]},
        {"id": 1, "target": [1.0], "matrix": SCENARIO_MATRIX},
        {"id": "one", "target": SCENARIO_TARGET, "matrix": SCENARIO_MATRIX},
        {"id": "3", "target": SCENARIO_TARGET, "matrix": SCENARIO_MATRIX},
        {"id": True, "target": SCENARIO_TARGET, "matrix": SCENARIO_MATRIX},
        {"id": 3.7, "target": SCENARIO_TARGET, "matrix": SCENARIO_MATRIX},
        {"id": 1, "target": "12", "matrix": SCENARIO_MATRIX},
        {"id": 1, "target": [True, 2.0], "matrix": SCENARIO_MATRIX},
        {"id": 1, "target": ["46.6", "12.9"], "matrix": SCENARIO_MATRIX},
    ],
)
def test_bad_entry_rejects_whole_table(entry):
    good = {"id": 0, "target": SCENARIO_TARGET, "matrix": SCENARIO_MATRIX}
    with pytest.raises(CalibrationError):
        CalibrationStore.from_records({"markers": [good, entry]})


def test_duplicate_ids_rejected():
    entry = {"id": 4, "target": SCENARIO_TARGET, "matrix": SCENARIO_MATRIX}
    with pytest.raises(CalibrationError, match="duplicate"):
        CalibrationStore.from_records([entry, dict(entry)])


def test_bad_reference_frame_rejected():
    with pytest.raises(CalibrationError):
        CalibrationStore.from_records({"reference_frame": {"width": 0}, "markers": []})


def test_integral_float_id_is_accepted():
    store = CalibrationStore.from_records(
        [{"id": 4.0, "target": SCENARIO_TARGET, "matrix": SCENARIO_MATRIX}]
    )
    assert store.ids() == [4]
    assert isinstance(store.ids()[0], int)
