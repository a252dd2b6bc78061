from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .errors import MalformedScan


@dataclass(frozen=True)
class RangeSample:
    angle: float
    length: float
    valid: bool
    end_point: tuple[float, float]


@dataclass(frozen=True, eq=False)
class ScanFrame:
    """Robot-frame view of one laser scan.

    Invalid samples stay in place so index ``i`` always maps to
    ``angle_min + i * angle_increment``.
    """

    angles: np.ndarray
    lengths: np.ndarray
    valid: np.ndarray
    points: np.ndarray
    range_min: float
    range_max: float

    def __len__(self) -> int:
        return int(self.lengths.shape[0])

    def __getitem__(self, i: int) -> RangeSample:
        return RangeSample(
            angle=float(self.angles[i]),
            length=float(self.lengths[i]),
            valid=bool(self.valid[i]),
            end_point=(float(self.points[i, 0]), float(self.points[i, 1])),
        )

    @property
    def valid_count(self) -> int:
        return int(np.count_nonzero(self.valid))


class RangeFrameBuilder:
    def __init__(self, cfg) -> None:
        self.cfg = cfg

    def build(self, scan) -> ScanFrame:
        try:
            ranges = np.asarray(scan.ranges, dtype=float)
            angle_min = float(scan.angle_min)
            angle_increment = float(scan.angle_increment)
            range_min = float(scan.range_min)
            range_max = float(scan.range_max)
        except (AttributeError, TypeError, ValueError) as exc:
            raise MalformedScan(f"Unreadable scan: {exc}") from exc

        if ranges.ndim != 1:
            raise MalformedScan(f"Scan ranges must be one-dimensional, got shape {ranges.shape}.")
        if ranges.size == 0:
            raise MalformedScan("Scan has zero samples.")
        if not all(math.isfinite(v) for v in (angle_min, angle_increment, range_min, range_max)):
            raise MalformedScan("Scan metadata is not finite.")
        if angle_increment == 0.0:
            raise MalformedScan("Scan angle_increment is zero.")
        if range_min > range_max:
            raise MalformedScan(f"Scan range_min {range_min:.3f} exceeds range_max {range_max:.3f}.")

        angles = angle_min + np.arange(ranges.size) * angle_increment
        # NaN compares false on both sides, so it lands in the invalid set
        valid = (ranges >= range_min) & (ranges <= range_max)

        # sensor mounted ahead of the base, no rotation between the frames
        with np.errstate(invalid="ignore"):
            points = np.column_stack(
                (np.cos(angles) * ranges + self.cfg.mount_offset_x, np.sin(angles) * ranges)
            )

        return ScanFrame(
            angles=angles,
            lengths=ranges,
            valid=valid,
            points=points,
            range_min=range_min,
            range_max=range_max,
        )


@dataclass
class ConeMetrics:
    min_distance: float
    repulsion: tuple[float, float]
    points_in_cone: int


class ScanAnalyzer:
    def analyze(self, frame: Optional[ScanFrame], cfg) -> ConeMetrics:
        if frame is None:
            return ConeMetrics(min_distance=float("inf"), repulsion=(0.0, 0.0), points_in_cone=0)

        pts = frame.points[frame.valid]
        dist = np.hypot(pts[:, 0], pts[:, 1])
        bearing = np.arctan2(pts[:, 1], pts[:, 0])
        in_cone = (np.abs(bearing) <= cfg.cone_half) & (dist > 1e-6)
        if not np.any(in_cone):
            return ConeMetrics(min_distance=float("inf"), repulsion=(0.0, 0.0), points_in_cone=0)

        cone_pts = pts[in_cone]
        cone_dist = dist[in_cone]
        # unit vector away from each point, weighted by 1/d
        weights = 1.0 / (cone_dist * cone_dist)
        rx = float(-np.sum(cone_pts[:, 0] * weights))
        ry = float(-np.sum(cone_pts[:, 1] * weights))

        return ConeMetrics(
            min_distance=float(np.min(cone_dist)),
            repulsion=(rx, ry),
            points_in_cone=int(cone_pts.shape[0]),
        )
