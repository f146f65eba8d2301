"""
Lunar Lander 2D Configuration Constants

Physical, gameplay and display constants for the 2D descent game, shared by
the lander physics, the terrain generator, the game controller and the
result-validation server.

LANDER CONFIGURATION:
- Playfield: 100 m high x 100 m wide, drawn on a 360 x 480 px viewport
- Dry mass: 1,000 units (mass = dry mass + remaining fuel)
- Main engine: 6.0 m/s² upward, side thrusters: 3.0 m/s² lateral
- Fuel burn: 1 unit per second per active thruster
"""

# ==============================================================================
# PLAYFIELD
# ==============================================================================

MAX_ALTITUDE = 100.0  # m - starting altitude, also the top of the viewport
MAX_RANGE = 100.0  # m - horizontal range mapped onto the viewport width

VIEWPORT_WIDTH = 360  # px
VIEWPORT_HEIGHT = 480  # px

LANDER_WIDTH = 20  # px
LANDER_HEIGHT = 30  # px

# ==============================================================================
# MASS PROPERTIES
# ==============================================================================

# Total mass is dry mass plus remaining fuel; thrust gets more effective as
# the tank empties (effectiveness ratio = full mass / current mass)
DEFAULT_DRY_MASS = 1000.0
DEFAULT_LANDER_TYPE = 'classic'

# ==============================================================================
# PROPULSION
# ==============================================================================

LUNAR_GRAVITY = 1.62  # m/s² - level 1 gravity
MAIN_THRUST = 6.0  # m/s² - upward acceleration of the main engine at full tank
SIDE_THRUST = 3.0  # m/s² - lateral acceleration of each side thruster

FUEL_BURN_PER_THRUSTER = 1.0  # fuel units per second per active thruster

THRUSTER_NAMES = ('up', 'left', 'right')

# ==============================================================================
# LEVEL PROGRESSION
# ==============================================================================

BASE_FUEL = 1000.0  # level 1 starting fuel
FUEL_DECREASE_PER_LEVEL = 200.0
MIN_START_FUEL = 100.0
GRAVITY_INCREMENT_PER_LEVEL = 0.3  # m/s² per level

# ==============================================================================
# LANDING CRITERIA
# ==============================================================================

MAX_SAFE_VERTICAL_SPEED = 2.0  # m/s - inclusive
MAX_SAFE_HORIZONTAL_SPEED = 2.0  # m/s - inclusive

# Sanity bound for the vertical velocity; beyond this the state is flagged
# as an anomaly and the velocity is zeroed
ANOMALY_VELOCITY_LIMIT = 1000.0  # m/s

# ==============================================================================
# TERRAIN
# ==============================================================================

TERRAIN_SEGMENTS = 10
TERRAIN_MIN_HEIGHT = 0.1  # fraction of viewport height
TERRAIN_MAX_HEIGHT = 0.4  # fraction of viewport height
SAFE_PAD_MAX_HEIGHT = 0.2  # fraction of viewport height

# ==============================================================================
# SIMULATION CLOCK
# ==============================================================================

SIM_TICK_HZ = 10
SIM_DT = 1.0 / SIM_TICK_HZ  # s

# ==============================================================================
# RESULT VALIDATION SERVER
# ==============================================================================

# Order matters: the token is an HMAC over the JSON text of these parameters
GAME_PARAMS = {
    'mass': 1000,
    'gravity': 1.62,
}

DEFAULT_SECRET = 'supersecret'
DEFAULT_PORT = 3000
MAX_RESULT_VERTICAL_SPEED = 50.0  # m/s


def level_start_fuel(level):
    """
    Starting fuel for a level.

    Args:
        level: 1-based level number

    Returns:
        float: fuel units, never below MIN_START_FUEL
    """
    return max(BASE_FUEL - FUEL_DECREASE_PER_LEVEL * (level - 1), MIN_START_FUEL)


def level_gravity(level):
    """Gravity for a level (grows linearly from LUNAR_GRAVITY)."""
    return LUNAR_GRAVITY + GRAVITY_INCREMENT_PER_LEVEL * (level - 1)


def print_configuration_summary():
    print("=" * 60)
    print("LUNAR LANDER 2D CONFIGURATION")
    print("=" * 60)
    print(f"Playfield: {MAX_RANGE:.0f} m x {MAX_ALTITUDE:.0f} m "
          f"({VIEWPORT_WIDTH} x {VIEWPORT_HEIGHT} px)")
    print(f"Dry mass: {DEFAULT_DRY_MASS:,.0f}")
    print(f"Gravity (level 1): {LUNAR_GRAVITY:.2f} m/s² "
          f"(+{GRAVITY_INCREMENT_PER_LEVEL:.2f} per level)")
    print(f"Main thrust: {MAIN_THRUST:.1f} m/s², side thrust: {SIDE_THRUST:.1f} m/s²")
    print(f"Start fuel: {BASE_FUEL:,.0f} (-{FUEL_DECREASE_PER_LEVEL:,.0f} per level, "
          f"min {MIN_START_FUEL:,.0f})")
    print(f"Safe landing: |vv| <= {MAX_SAFE_VERTICAL_SPEED} m/s, "
          f"|hv| <= {MAX_SAFE_HORIZONTAL_SPEED} m/s on the pad")
    print(f"Terrain: {TERRAIN_SEGMENTS} segments, heights "
          f"{TERRAIN_MIN_HEIGHT:.1f}-{TERRAIN_MAX_HEIGHT:.1f}, pad <= {SAFE_PAD_MAX_HEIGHT:.1f}")
    print(f"Tick: {SIM_TICK_HZ} Hz (dt = {SIM_DT:.2f} s)")
    print("=" * 60)


if __name__ == "__main__":
    print_configuration_summary()
