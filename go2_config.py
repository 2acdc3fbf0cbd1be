#!/usr/bin/env python3
"""
Go2 Environment Configuration Helper

Provides easy access to .env configuration for the launcher and demos.
Loads the .env file and builds the core config dataclasses from it,
falling back to their defaults for anything not set.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from motion_core.errors import ConfigurationError
from motion_core.sequencer import DISTANCE_SOURCES
from motion_core.types import ControllerConfig, MapperConfig, SupervisorConfig


class Go2Config:
    """Configuration manager for go2-motion"""

    def __init__(self, env_file: Optional[str] = None):
        """
        Initialize configuration

        Args:
            env_file: Path to .env file (default: .env in current directory)
        """
        self._loaded = False

        path = Path(env_file) if env_file is not None else Path(".env")
        if path.exists():
            load_dotenv(path)
            self._loaded = True

    @staticmethod
    def _float(name: str, default: float) -> float:
        raw = os.getenv(name)
        if raw is None or raw == "":
            return default
        try:
            return float(raw)
        except ValueError:
            raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None

    @staticmethod
    def _int(name: str, default: int) -> int:
        raw = os.getenv(name)
        if raw is None or raw == "":
            return default
        try:
            return int(raw)
        except ValueError:
            raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None

    @property
    def loaded(self) -> bool:
        """True if a .env file was found and loaded"""
        return self._loaded

    @property
    def network_interface(self) -> Optional[str]:
        """Network interface wired to the robot"""
        return os.getenv("GO2_NETWORK_INTERFACE") or None

    @property
    def control_period(self) -> float:
        """Control tick period in seconds (default: 0.01)"""
        return self._float("GO2_CONTROL_PERIOD", SupervisorConfig.control_period)

    @property
    def turn_speed(self) -> float:
        """Point-turn rate in rad/s (default: 0.5)"""
        return self._float("GO2_TURN_SPEED", ControllerConfig.turn_speed)

    @property
    def turn_tolerance(self) -> float:
        """Turn arrival window in rad (default: 0.05)"""
        return self._float("GO2_TURN_TOLERANCE", ControllerConfig.turn_tolerance)

    @property
    def travel_speed(self) -> float:
        """Straight-line speed in m/s (default: 0.5)"""
        return self._float("GO2_TRAVEL_SPEED", ControllerConfig.travel_speed)

    @property
    def heading_gain(self) -> float:
        """Heading bias gain (default: 0.5)"""
        return self._float("GO2_HEADING_GAIN", ControllerConfig.heading_gain)

    @property
    def heading_limit(self) -> float:
        """Heading bias clamp in rad/s (default: 0.3)"""
        return self._float("GO2_HEADING_LIMIT", ControllerConfig.heading_correction_limit)

    @property
    def distance_source(self) -> str:
        """Travel distance source: elapsed or pose (default: elapsed)"""
        return os.getenv("GO2_DISTANCE_SOURCE", ControllerConfig.distance_source).strip().lower()

    @property
    def segment_pause(self) -> float:
        """Settle time between plan segments in seconds (default: 1.0)"""
        return self._float("GO2_SEGMENT_PAUSE", ControllerConfig.segment_pause)

    @property
    def feedback_timeout(self) -> float:
        """Max wait for the first pose sample in seconds (default: 3.0)"""
        return self._float("GO2_FEEDBACK_TIMEOUT", SupervisorConfig.feedback_timeout)

    @property
    def startup_repeats(self) -> int:
        """StandUp / BalanceStand repetitions at startup (default: 30)"""
        return self._int("GO2_STARTUP_REPEATS", SupervisorConfig.startup_repeats)

    def validate(self) -> tuple[bool, list[str]]:
        """
        Validate configuration

        Returns:
            (is_valid, list_of_errors)
        """
        errors = []

        positive = [
            ("GO2_CONTROL_PERIOD", "control_period"),
            ("GO2_TURN_SPEED", "turn_speed"),
            ("GO2_TURN_TOLERANCE", "turn_tolerance"),
            ("GO2_TRAVEL_SPEED", "travel_speed"),
            ("GO2_HEADING_GAIN", "heading_gain"),
            ("GO2_HEADING_LIMIT", "heading_limit"),
            ("GO2_FEEDBACK_TIMEOUT", "feedback_timeout"),
        ]
        for env_name, attr in positive:
            try:
                value = getattr(self, attr)
            except ConfigurationError as e:
                errors.append(str(e))
                continue
            if not value > 0.0:
                errors.append(f"{env_name} must be positive, got {value}")

        try:
            if self.segment_pause < 0.0:
                errors.append(f"GO2_SEGMENT_PAUSE must be >= 0, got {self.segment_pause}")
        except ConfigurationError as e:
            errors.append(str(e))

        try:
            if self.startup_repeats < 0:
                errors.append(f"GO2_STARTUP_REPEATS must be >= 0, got {self.startup_repeats}")
        except ConfigurationError as e:
            errors.append(str(e))

        if self.distance_source not in DISTANCE_SOURCES:
            errors.append(
                f"GO2_DISTANCE_SOURCE must be one of {', '.join(DISTANCE_SOURCES)}, "
                f"got {self.distance_source!r}"
            )

        return len(errors) == 0, errors

    def _require_valid(self) -> None:
        is_valid, errors = self.validate()
        if not is_valid:
            raise ConfigurationError("; ".join(errors))

    def controller_config(self) -> ControllerConfig:
        """
        Build the controller configuration

        Raises:
            ConfigurationError: If any setting is invalid
        """
        self._require_valid()
        return ControllerConfig(
            turn_speed=self.turn_speed,
            turn_tolerance=self.turn_tolerance,
            travel_speed=self.travel_speed,
            heading_gain=self.heading_gain,
            heading_correction_limit=self.heading_limit,
            distance_source=self.distance_source,
            segment_pause=self.segment_pause,
        )

    def supervisor_config(self) -> SupervisorConfig:
        """
        Build the supervisor configuration

        Raises:
            ConfigurationError: If any setting is invalid
        """
        self._require_valid()
        return SupervisorConfig(
            control_period=self.control_period,
            feedback_timeout=self.feedback_timeout,
            startup_repeats=self.startup_repeats,
        )

    def mapper_config(self) -> MapperConfig:
        """Teleop speeds (defaults from the keyboard controller)"""
        return MapperConfig()

    def print_status(self):
        """Print configuration status"""
        print("Go2 Configuration Status:")
        print(f"  .env loaded:      {'Yes' if self._loaded else 'No'}")
        print(f"  Interface:        {self.network_interface or '(not set)'}")

        is_valid, errors = self.validate()
        if is_valid:
            print(f"  Control period:   {self.control_period * 1000:.1f} ms")
            print(f"  Turn speed:       {self.turn_speed} rad/s (tolerance {self.turn_tolerance} rad)")
            print(f"  Travel speed:     {self.travel_speed} m/s")
            print(f"  Heading gain:     {self.heading_gain} (limit {self.heading_limit} rad/s)")
            print(f"  Distance source:  {self.distance_source}")
            print(f"  Segment pause:    {self.segment_pause}s")
            print(f"  Feedback timeout: {self.feedback_timeout}s")
            print(f"  Startup repeats:  {self.startup_repeats}")
            print("\n  Status: Configuration is valid")
        else:
            print("\n  Status: Configuration has errors:")
            for error in errors:
                print(f"    - {error}")


# Global config instance
_config = None

def get_config(reload: bool = False, env_file: Optional[str] = None) -> Go2Config:
    """
    Get the global configuration instance

    Args:
        reload: Force reload of .env file
        env_file: Path to .env file used when (re)loading

    Returns:
        Go2Config instance
    """
    global _config
    if _config is None or reload:
        _config = Go2Config(env_file)
    return _config


def main(argv=None):
    """Command-line utility to check configuration"""
    import argparse

    parser = argparse.ArgumentParser(
        description="Go2 Configuration Utility",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Check current configuration:
    python go2_config.py

  Validate configuration:
    python go2_config.py --validate

  Use custom .env file:
    python go2_config.py --env-file /path/to/.env
        """
    )

    parser.add_argument("--env-file", help="Path to .env file")
    parser.add_argument("--validate", action="store_true",
                       help="Validate configuration and exit with error if invalid")

    args = parser.parse_args(argv)

    config = Go2Config(args.env_file)
    config.print_status()

    if args.validate:
        is_valid, _ = config.validate()
        if not is_valid:
            print("\nValidation failed!")
            import sys
            sys.exit(1)
        else:
            print("\nValidation passed!")


if __name__ == "__main__":
    main()
