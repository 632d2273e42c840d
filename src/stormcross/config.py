import argparse
from dataclasses import dataclass

from .geometry_utils import DETERMINANT_EPSILON


@dataclass
class StormcrossConfig:
    """Configuration for the stormcross CLI."""

    log_level: str = "INFO"
    metrics: bool = False
    epsilon: float = DETERMINANT_EPSILON
    pre_shifted: bool = False
    fail_on_intersection: bool = False

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "StormcrossConfig":
        return cls(
            log_level=args.log_level,
            metrics=args.metrics,
            epsilon=args.epsilon,
            pre_shifted=args.pre_shifted,
            fail_on_intersection=args.fail_on_intersection,
        )
