from __future__ import annotations


class LocalPlannerError(Exception):
    """Base class for recoverable local planner errors."""


class MalformedScan(LocalPlannerError):
    pass


class TransformUnavailable(LocalPlannerError):
    pass


class InvalidConfiguration(LocalPlannerError):
    pass
