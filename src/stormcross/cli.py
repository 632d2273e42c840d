#!/usr/bin/env python3
"""
Stormcross command line tool.
This script loads a shipping route and GeoJSON cyclone hazard layers and
reports the first point where the route crosses a forecast cone or a
storm track.

Requirements:
    pip install gpxpy shapely pyproj

"""

from typing import Optional
import argparse
import json
import logging
import sys
from gpxpy import gpx

from . import __version__
from .config import StormcrossConfig
from .geometry import ParseError
from .geometry_utils import DETERMINANT_EPSILON
from .hazard import HazardFeatureSet, find_route_intersection
from .metrics import collect_metrics, log_metrics
from .route import Route

# Configure logging
logger = logging.getLogger("stormcross")

WARNING_TEXT = "Warning: Your route intersects with a forecasted or observed area!"

EXIT_INPUT_ERROR = 1
EXIT_INTERSECTION = 2


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the command-line argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        description="Check a shipping route against cyclone forecast cones and tracks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "filename",
        type=str,
        nargs="?",
        help="Route file to process (JSON records or GPX)",
    )
    parser.add_argument(
        "--cone",
        type=str,
        default=None,
        help="GeoJSON file with forecast cone polygons",
    )
    parser.add_argument(
        "--track",
        type=str,
        default=None,
        help="GeoJSON file with observed or forecast track lines",
    )
    parser.add_argument(
        "--pre-shifted",
        action="store_true",
        help="Hazard files already hold original, minus360 and plus360 copies",
    )
    parser.add_argument(
        "--epsilon",
        type=float,
        default=DETERMINANT_EPSILON,
        help=f"Relative tolerance for parallel segments (default: {DETERMINANT_EPSILON})",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set logging level (default: WARNING)",
    )
    parser.add_argument(
        "--metrics",
        action="store_true",
        help="Output structured metrics after processing",
    )
    parser.add_argument(
        "--fail-on-intersection",
        action="store_true",
        help=f"Exit with status {EXIT_INTERSECTION} when the route intersects a hazard",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"stormcross {__version__}",
    )
    return parser


def setup_logging(config: StormcrossConfig) -> None:
    """Setup logging configuration."""
    level = getattr(logging, config.log_level)

    # Create formatter
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%H:%M:%S"
    )

    # Create console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    # Configure the root logger so all modules inherit the configuration
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)

    # Suppress overly verbose third-party logging
    logging.getLogger("gpxpy").setLevel(logging.WARNING)
    logging.getLogger("pyproj").setLevel(logging.WARNING)


def load_hazard(filename: Optional[str], pre_shifted: bool) -> Optional[HazardFeatureSet]:
    """
    Load a hazard layer from a GeoJSON file.

    Raises:
        OSError: If the file cannot be read
        json.JSONDecodeError: If the file is not valid JSON
        ParseError: If the content is not a usable hazard layer
    """
    if filename is None:
        return None

    with open(filename, "r", encoding="utf-8") as f:
        data = json.load(f)

    if pre_shifted:
        hazard = HazardFeatureSet.from_dict(data)
    else:
        hazard = HazardFeatureSet.from_collection(data)
    logger.debug(f"Loaded {len(hazard)} hazard features from {filename}")
    return hazard


def main():
    """
    Parses command-line arguments, loads the route and hazard layers,
    and reports the first intersection.
    """
    parser = create_argument_parser()
    args = parser.parse_args()

    if not args.filename:
        parser.print_help()
        sys.exit(EXIT_INPUT_ERROR)

    config = StormcrossConfig.from_args(args)

    # Setup logging
    setup_logging(config)

    try:
        route = Route.from_file(args.filename)
    except FileNotFoundError:
        logger.error(f"Route file not found: {args.filename}")
        sys.exit(EXIT_INPUT_ERROR)
    except PermissionError:
        logger.error(f"Cannot read route file (permission denied): {args.filename}")
        sys.exit(EXIT_INPUT_ERROR)
    except gpx.GPXException as e:
        logger.error(f"Invalid GPX file: {e}")
        sys.exit(EXIT_INPUT_ERROR)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON route file: {e}")
        sys.exit(EXIT_INPUT_ERROR)
    except (ParseError, ValueError) as e:
        logger.error(f"Invalid route: {e}")
        sys.exit(EXIT_INPUT_ERROR)
    logger.info(f"Loaded route with {len(route)} points")

    try:
        forecast_cone = load_hazard(args.cone, config.pre_shifted)
        observed_track = load_hazard(args.track, config.pre_shifted)
    except OSError as e:
        logger.error(f"Cannot read hazard file: {e}")
        sys.exit(EXIT_INPUT_ERROR)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid GeoJSON hazard file: {e}")
        sys.exit(EXIT_INPUT_ERROR)
    except ParseError as e:
        logger.error(f"Invalid hazard geometry: {e}")
        sys.exit(EXIT_INPUT_ERROR)

    if forecast_cone is None and observed_track is None:
        logger.warning("No hazard layers given; nothing to check")

    try:
        intersection = find_route_intersection(
            route.normalized_coords,
            forecast_cone=forecast_cone,
            observed_track=observed_track,
            epsilon=config.epsilon,
        )
    except ParseError as e:
        logger.error(f"Invalid hazard geometry: {e}")
        sys.exit(EXIT_INPUT_ERROR)

    focus = route.focus_point(intersection.position if intersection else None)
    center = route.center
    print(f"Route center: {center.latitude:.4f}, {center.longitude:.4f}")

    if intersection is not None:
        point = intersection.position
        print(WARNING_TEXT)
        print(
            f"Intersection at {point.latitude:.4f}, {point.longitude:.4f} "
            f"({intersection.kind.value}, {intersection.copy.value} copy, "
            f"feature {intersection.feature_index})"
        )
    else:
        print("No intersection found")
    logger.debug(f"Map focus: {focus.latitude:.4f}, {focus.longitude:.4f}")

    metrics = collect_metrics(route, forecast_cone, observed_track, intersection)
    log_metrics(metrics, config)

    if intersection is not None and config.fail_on_intersection:
        sys.exit(EXIT_INTERSECTION)


if __name__ == "__main__":
    main()
