# planar_mbs/config.py
"""
Kernel configuration and defaults.
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class KernelConfig:
    """Defaults read by the kernel. Frozen: copied into each model, never mutated."""

    # Gravity vector (m/s^2) given to every new assembled model
    default_gravity: Tuple[float, float, float] = (0.0, -9.81, 0.0)

    # Wrap relative-angle residuals into (-pi, pi]
    angle_wrap: bool = True

    # Name given to bodies added without one
    body_name_format: str = "body{index}"


# Global config instance
CONFIG = KernelConfig()
