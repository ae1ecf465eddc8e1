"""HTTP access to the TrainFit backend."""

from trainfit.api.client import ApiClient

__all__ = ["ApiClient"]
