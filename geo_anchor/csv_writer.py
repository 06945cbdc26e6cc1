import csv

import numpy as np


class CsvWriter:
    HEADER = [
        "frame_idx", "marker_id",
        "rvec_x", "rvec_y", "rvec_z",
        "tvec_x", "tvec_y", "tvec_z",
    ]

    def __init__(self, csv_path: str):
        self.csv_path = csv_path
        self._opened = False
        self._fh = None
        self._w = None

    def open(self):
        self._fh = open(self.csv_path, "w", newline="")
        self._w = csv.writer(self._fh)
        self._w.writerow(self.HEADER)
        self._opened = True

    @staticmethod
    def _vec3(vec):
        if vec is None:
            return [float("nan")] * 3
        a = np.asarray(vec, dtype=float).reshape(-1).tolist()
        if len(a) < 3:
            a += [float("nan")] * (3 - len(a))
        return a[:3]

    @classmethod
    def _row(cls, frame_idx, marker_id, rvec, tvec):
        return [frame_idx, marker_id, *cls._vec3(rvec), *cls._vec3(tvec)]

    def append(self, frame_idx, marker_id, rvec, tvec):
        if not self._opened:
            raise RuntimeError("CsvWriter.append() called before open()")
        self._w.writerow(self._row(frame_idx, marker_id, rvec, tvec))

    def close(self):
        if self._opened and self._fh:
            self._fh.close()
            self._opened = False
            self._fh = None
            self._w = None
