"""Capacity Gate - admission decisions for courses and bundles."""

from studioreg.capacity.gate import CapacityGate
from studioreg.capacity.models import BundleCheck, BundleRejection, CapacityCheck

__all__ = [
    "BundleCheck",
    "BundleRejection",
    "CapacityCheck",
    "CapacityGate",
]
