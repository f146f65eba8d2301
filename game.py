"""
game.py
Simulation controller for the 2D lunar lander

Owns the lander, the terrain and the attempt/level state:
- Fixed-step tick: physics update, terrain contact test, outcome judgment
- Level progression (less fuel and more gravity after every success)
- Observer hooks for renderers/UI/audio ('restart', 'landing', 'anomaly')
- Read-only status snapshots for HUD text

Rendering and input live outside this module; they read status() and call
the thruster methods.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import lander_constants as LC
from lander import Lander
from terrain import Terrain, TerrainSampler, generate_terrain

LOGGER = logging.getLogger(__name__)


class GameState(Enum):
    NOT_STARTED = 'not_started'
    IN_PROGRESS = 'in_progress'
    ENDED = 'ended'


class Outcome(Enum):
    SUCCESS = 'success'
    CRASH = 'crash'


SUCCESS_MESSAGE = 'Successful landing!'
CRASH_MESSAGE = 'Crash!'


@dataclass(frozen=True)
class GameConfig:
    """Gameplay tunables; defaults come from lander_constants."""
    gravity: float = LC.LUNAR_GRAVITY
    main_thrust: float = LC.MAIN_THRUST
    side_thrust: float = LC.SIDE_THRUST
    max_altitude: float = LC.MAX_ALTITUDE
    max_range: float = LC.MAX_RANGE
    dry_mass: float = LC.DEFAULT_DRY_MASS
    base_fuel: float = LC.BASE_FUEL
    fuel_decrease: float = LC.FUEL_DECREASE_PER_LEVEL
    min_fuel: float = LC.MIN_START_FUEL
    gravity_increment: float = LC.GRAVITY_INCREMENT_PER_LEVEL
    max_safe_vertical_speed: float = LC.MAX_SAFE_VERTICAL_SPEED
    max_safe_horizontal_speed: float = LC.MAX_SAFE_HORIZONTAL_SPEED
    terrain_segments: int = LC.TERRAIN_SEGMENTS

    def validate(self):
        for name in ('max_altitude', 'max_range', 'dry_mass'):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if self.min_fuel < 0:
            raise ValueError(f"min_fuel must be non-negative, got {self.min_fuel}")
        if self.terrain_segments < 3:
            raise ValueError(f"terrain_segments must be at least 3, got {self.terrain_segments}")
        return self

    def start_fuel(self, level):
        return max(self.base_fuel - self.fuel_decrease * (level - 1), self.min_fuel)

    def level_gravity(self, level):
        return self.gravity + self.gravity_increment * (level - 1)


@dataclass(frozen=True)
class LandingReport:
    """What happened at touchdown; velocities are captured before they are zeroed."""
    outcome: Outcome
    impact_vertical_velocity: float
    impact_horizontal_velocity: float
    horizontal_position: float
    surface_altitude: float
    on_pad: bool
    level: int

    @property
    def success(self):
        return self.outcome is Outcome.SUCCESS


@dataclass(frozen=True)
class GameStatus:
    altitude: float
    vertical_velocity: float
    horizontal_position: float
    horizontal_velocity: float
    fuel: float
    level: int
    gravity: float
    message: str
    state: GameState
    outcome: Optional[Outcome]
    crashed: bool
    anomaly: bool
    thrusters: dict = field(default_factory=dict)
    pixel_position: tuple = (0.0, 0.0)

    def hud_lines(self):
        """HUD text as shown above the playfield."""
        return [
            f"ALT {self.altitude:.1f}m",
            f"VV {self.vertical_velocity:.1f}m/s",
            f"HV {self.horizontal_velocity:.1f}m/s",
            f"FUEL {int(self.fuel)}",
            f"LVL {self.level}",
        ]


class LanderGame:
    """
    Game controller: NOT_STARTED -> IN_PROGRESS -> ENDED, restartable.

    Only tick(), restart() and the thruster methods mutate state, and each
    runs to completion before returning.
    """

    def __init__(self, config=None, rng=None, width=LC.VIEWPORT_WIDTH,
                 height=LC.VIEWPORT_HEIGHT, lander_type=LC.DEFAULT_LANDER_TYPE):
        """
        Args:
            config: GameConfig (defaults from lander_constants)
            rng: Random source handed to the terrain generator
            width: Viewport width (px) used for the contact test
            height: Viewport height (px) used for the contact test
            lander_type: Variant name stored on the lander
        """
        self.config = (config or GameConfig()).validate()
        self.rng = rng
        self.width = width
        self.height = height

        self.level = 1
        self.current_gravity = self.config.gravity
        self.start_fuel = self.config.start_fuel(self.level)

        self.state = GameState.NOT_STARTED
        self.outcome = None
        self.crashed = False
        self.message = ''
        self.last_landing = None

        self.lander = Lander(
            max_range=self.config.max_range,
            lander_type=lander_type,
            dry_mass=self.config.dry_mass,
            max_altitude=self.config.max_altitude,
        )
        self.terrain = Terrain.empty(self.config.max_range)
        self.sampler = TerrainSampler(self.terrain, width, height)

        self._listeners = []

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def add_listener(self, callback):
        """Register callback(event_name, game) for 'restart', 'landing' and 'anomaly'."""
        self._listeners.append(callback)
        return callback

    def remove_listener(self, callback):
        self._listeners.remove(callback)

    def _notify(self, event):
        for callback in list(self._listeners):
            callback(event, self)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def game_started(self):
        return self.state is not GameState.NOT_STARTED

    @property
    def game_over(self):
        return self.state is GameState.ENDED

    @property
    def safe_zone(self):
        return self.terrain.safe_zone

    def level_start_fuel(self, level=None):
        return self.config.start_fuel(self.level if level is None else level)

    def level_gravity(self, level=None):
        return self.config.level_gravity(self.level if level is None else level)

    def to_pixels(self, horizontal_position=None, altitude=None):
        """Convert physical coordinates (defaults: the lander's) to viewport pixels."""
        if horizontal_position is None:
            horizontal_position = self.lander.horizontal_position
        if altitude is None:
            altitude = self.lander.altitude
        x_pix = (horizontal_position / self.config.max_range) * self.width
        y_pix = self.height - (altitude / self.config.max_altitude) * self.height
        return x_pix, y_pix

    # ------------------------------------------------------------------
    # Controls
    # ------------------------------------------------------------------

    def start_thruster(self, name):
        """Fire a thruster ('up', 'left' or 'right'); ignored once the attempt has ended."""
        starter = self._thruster_method(name, 'start')
        if not self.game_over:
            starter()

    def stop_thruster(self, name):
        self._thruster_method(name, 'stop')()

    def stop_all_thrusters(self):
        self.lander.stop_all()

    def _thruster_method(self, name, prefix):
        if name not in LC.THRUSTER_NAMES:
            raise ValueError(f"Unknown thruster {name!r}, expected one of {LC.THRUSTER_NAMES}")
        return getattr(self.lander, f"{prefix}_{name}")

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------

    def restart(self):
        """Start a new attempt at the current level."""
        self.start_fuel = self.config.start_fuel(self.level)
        self.current_gravity = self.config.level_gravity(self.level)
        self.lander.reset(self.start_fuel)

        self.terrain = generate_terrain(
            num_segments=self.config.terrain_segments,
            max_range=self.config.max_range,
            rng=self.rng,
        )
        self.sampler = TerrainSampler(self.terrain, self.width, self.height)

        self.outcome = None
        self.crashed = False
        self.message = ''
        self.last_landing = None
        self.state = GameState.IN_PROGRESS

        LOGGER.info("Level %d started: fuel %.0f, gravity %.2f, pad [%.1f, %.1f]",
                    self.level, self.start_fuel, self.current_gravity,
                    self.safe_zone.start_range, self.safe_zone.end_range)
        self._notify('restart')

    def tick(self, dt=LC.SIM_DT):
        """
        Advance the attempt by one fixed step.

        Returns:
            UpdateResult of the lander step, or None when no attempt is running
        """
        if self.state is not GameState.IN_PROGRESS:
            return None

        result = self.lander.update(dt, self.current_gravity,
                                    self.config.main_thrust, self.config.side_thrust)
        if result.is_anomaly:
            LOGGER.warning("Lander anomaly at level %d: %s", self.level, result.reason)
            self._notify('anomaly')

        x_pix, y_pix = self.to_pixels()
        terrain_y = self.sampler.height_at(x_pix)
        if y_pix >= terrain_y:
            self._touchdown(terrain_y)

        return result

    def _touchdown(self, terrain_y):
        lander = self.lander
        impact_vertical = lander.vertical_velocity
        impact_horizontal = lander.horizontal_velocity

        surface_altitude = ((self.height - terrain_y) / self.height) * self.config.max_altitude
        lander.altitude = surface_altitude
        lander.vertical_velocity = 0.0
        lander.horizontal_velocity = 0.0
        lander.stop_all()

        on_pad = self.safe_zone.contains(lander.horizontal_position)
        safe = (abs(impact_vertical) <= self.config.max_safe_vertical_speed
                and abs(impact_horizontal) <= self.config.max_safe_horizontal_speed
                and on_pad)

        landed_level = self.level
        if safe:
            self.outcome = Outcome.SUCCESS
            self.message = SUCCESS_MESSAGE
            self.crashed = False
            self.level += 1
        else:
            self.outcome = Outcome.CRASH
            self.message = CRASH_MESSAGE
            self.crashed = True

        self.state = GameState.ENDED
        self.last_landing = LandingReport(
            outcome=self.outcome,
            impact_vertical_velocity=impact_vertical,
            impact_horizontal_velocity=impact_horizontal,
            horizontal_position=lander.horizontal_position,
            surface_altitude=surface_altitude,
            on_pad=on_pad,
            level=landed_level,
        )

        LOGGER.info("Level %d %s: vv=%.2f hv=%.2f x=%.1f on_pad=%s",
                    landed_level, self.outcome.value, impact_vertical,
                    impact_horizontal, lander.horizontal_position, on_pad)
        self._notify('landing')

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    def status(self):
        lander = self.lander
        return GameStatus(
            altitude=lander.altitude,
            vertical_velocity=lander.vertical_velocity,
            horizontal_position=lander.horizontal_position,
            horizontal_velocity=lander.horizontal_velocity,
            fuel=lander.fuel,
            level=self.level,
            gravity=self.current_gravity,
            message=self.message,
            state=self.state,
            outcome=self.outcome,
            crashed=self.crashed,
            anomaly=lander.anomaly,
            thrusters={
                'up': lander.up_thruster,
                'left': lander.left_thruster,
                'right': lander.right_thruster,
            },
            pixel_position=self.to_pixels(),
        )

    def share_text(self):
        lander = self.lander
        return (f"Level {self.level}, Fuel left {int(lander.fuel)}, "
                f"Vertical velocity {lander.vertical_velocity:.1f} m/s, "
                f"Horizontal velocity {lander.horizontal_velocity:.1f} m/s")
