"""
lander.py
Craft state and fixed-step physics for the 2D lunar lander

Provides:
- Position / velocity / fuel / mass bookkeeping for one craft
- Three on/off thrusters (main engine + two side thrusters)
- Mass-aware thrust: effectiveness grows as the tank empties
- Semi-implicit Euler integration with wall clamping
- Anomaly detection with clamping, reported through UpdateResult
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

import lander_constants as LC


@dataclass(frozen=True)
class UpdateResult:
    """Outcome of a single Lander.update() call."""
    is_anomaly: bool = False
    reason: Optional[str] = None

    @classmethod
    def ok(cls):
        return cls()

    @classmethod
    def anomalous(cls, reason):
        return cls(is_anomaly=True, reason=reason)

    def __bool__(self):
        # Truthy when the step was clean
        return not self.is_anomaly


class Lander:
    """
    Lunar module state for one playing session.

    Sign conventions:
    - altitude is measured upward from the bottom of the playfield
    - vertical_velocity is positive when descending
    - horizontal_velocity is positive to the right

    The craft is constructed once and reset() at the start of every attempt.
    It is only mutated by update() and by the thruster start/stop methods.
    """

    def __init__(self, max_range=LC.MAX_RANGE, lander_type=LC.DEFAULT_LANDER_TYPE,
                 dry_mass=LC.DEFAULT_DRY_MASS, max_altitude=LC.MAX_ALTITUDE):
        """
        Args:
            max_range: Horizontal span of the playfield (m)
            lander_type: Visual/physical variant name (stored for renderers)
            dry_mass: Mass of the empty craft
            max_altitude: Top of the playfield (m)
        """
        if max_range <= 0:
            raise ValueError(f"max_range must be positive, got {max_range}")
        if dry_mass <= 0:
            raise ValueError(f"dry_mass must be positive, got {dry_mass}")

        self.max_range = float(max_range)
        self.max_altitude = float(max_altitude)
        self.lander_type = lander_type

        # full_mass is captured at reset so thrust can be scaled by
        # full_mass / mass as fuel burns
        self.dry_mass = float(dry_mass)
        self.full_mass = self.dry_mass
        self.mass = self.dry_mass

        self.reset(0.0)

    def reset(self, start_fuel):
        """Put the craft back at the top centre of the playfield with a fresh tank."""
        if start_fuel < 0:
            raise ValueError(f"start_fuel must be non-negative, got {start_fuel}")

        self.altitude = self.max_altitude
        self.vertical_velocity = 0.0
        self.horizontal_position = self.max_range / 2.0
        self.horizontal_velocity = 0.0

        self.fuel = float(start_fuel)
        self.mass = self.dry_mass + self.fuel
        self.full_mass = self.mass

        self.up_thruster = False
        self.left_thruster = False
        self.right_thruster = False

        self.anomaly = False
        self.last_anomaly_reason = None

    # ------------------------------------------------------------------
    # Thruster controls (idempotent, take effect on the next update)
    # ------------------------------------------------------------------

    def start_up(self):
        if self.fuel > 0:
            self.up_thruster = True

    def stop_up(self):
        self.up_thruster = False

    def start_left(self):
        if self.fuel > 0:
            self.left_thruster = True

    def stop_left(self):
        self.left_thruster = False

    def start_right(self):
        if self.fuel > 0:
            self.right_thruster = True

    def stop_right(self):
        self.right_thruster = False

    def stop_all(self):
        self.up_thruster = False
        self.left_thruster = False
        self.right_thruster = False

    @property
    def active_thrusters(self):
        """Number of thrusters that will fire on the next update."""
        if self.fuel <= 0:
            return 0
        return int(self.up_thruster) + int(self.left_thruster) + int(self.right_thruster)

    @property
    def thrust_ratio(self):
        """Thrust effectiveness ratio full_mass / mass (>= 1)."""
        return self.full_mass / self.mass

    @property
    def fuel_fraction(self):
        fuel_capacity = self.full_mass - self.dry_mass
        if fuel_capacity <= 0:
            return 0.0
        return self.fuel / fuel_capacity

    # ------------------------------------------------------------------
    # Integration
    # ------------------------------------------------------------------

    def update(self, dt, gravity, main_thrust, side_thrust):
        """
        Advance the craft by dt seconds.

        Velocities are integrated first and the new velocities are then used
        to move the craft (semi-implicit Euler).

        Args:
            dt: Timestep (s), must be >= 0
            gravity: Downward acceleration (m/s²)
            main_thrust: Main engine acceleration at full tank (m/s²)
            side_thrust: Side thruster acceleration at full tank (m/s²)

        Returns:
            UpdateResult: ok, or anomalous with the reason the state was clamped
        """
        if dt < 0:
            raise ValueError(f"dt must be non-negative, got {dt}")

        accel_y = gravity
        accel_x = 0.0
        thrusters = 0

        ratio = self.thrust_ratio

        if self.up_thruster and self.fuel > 0:
            accel_y -= main_thrust * ratio
            thrusters += 1
        if self.left_thruster and self.fuel > 0:
            accel_x -= side_thrust * ratio
            thrusters += 1
        if self.right_thruster and self.fuel > 0:
            accel_x += side_thrust * ratio
            thrusters += 1

        if thrusters > 0 and self.fuel > 0:
            fuel_used = thrusters * LC.FUEL_BURN_PER_THRUSTER * dt
            self.fuel = max(self.fuel - fuel_used, 0.0)
            self.mass = self.dry_mass + self.fuel
            if self.fuel <= 0:
                # Thrust already applied this step stays applied
                self.stop_all()

        self.vertical_velocity += accel_y * dt
        self.horizontal_velocity += accel_x * dt

        self.altitude -= self.vertical_velocity * dt
        self.horizontal_position += self.horizontal_velocity * dt

        if self.horizontal_position < 0:
            self.horizontal_position = 0.0
            self.horizontal_velocity = 0.0
        elif self.horizontal_position > self.max_range:
            self.horizontal_position = self.max_range
            self.horizontal_velocity = 0.0

        return self._check_anomaly()

    def _check_anomaly(self):
        reason = None

        if not np.isfinite(self.altitude):
            reason = 'non-finite altitude'
        elif self.altitude < 0 or self.altitude > self.max_altitude:
            reason = 'altitude out of range'

        velocity_bad = (not np.isfinite(self.vertical_velocity)
                        or abs(self.vertical_velocity) > LC.ANOMALY_VELOCITY_LIMIT)
        if velocity_bad and reason is None:
            if np.isfinite(self.vertical_velocity):
                reason = 'vertical velocity out of range'
            else:
                reason = 'non-finite vertical velocity'

        if reason is None:
            return UpdateResult.ok()

        self.anomaly = True
        self.last_anomaly_reason = reason

        if np.isnan(self.altitude):
            self.altitude = 0.0
        else:
            self.altitude = float(np.clip(self.altitude, 0.0, self.max_altitude))
        if velocity_bad:
            self.vertical_velocity = 0.0

        return UpdateResult.anomalous(reason)

    def __repr__(self):
        return (f"Lander(alt={self.altitude:.2f}, vv={self.vertical_velocity:.2f}, "
                f"x={self.horizontal_position:.2f}, hv={self.horizontal_velocity:.2f}, "
                f"fuel={self.fuel:.1f})")
