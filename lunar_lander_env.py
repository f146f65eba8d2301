"""
lunar_lander_env.py
Gymnasium Environment Wrapper for the 2D Lunar Lander

This module provides a Gymnasium-compatible environment so agents can be
trained or scripted against the same physics and landing rules the game uses.

Features:
- Full Gymnasium API compatibility (step, reset, render)
- One environment step = one fixed simulation tick (default 0.1 s)
- Reward shaping for the landing task
- Terrain regenerated from the environment's seeded RNG on every reset
- Reuses game.LanderGame for physics, terrain contact and judging
"""

import numpy as np
import gymnasium as gym
from gymnasium import spaces

import lander_constants as LC
from game import GameConfig, LanderGame, Outcome


class LunarLanderEnv(gym.Env):
    """
    Gymnasium Environment for the 2D lunar lander game

    Observation Space (7D, float32):
        - Altitude fraction (1): altitude / max_altitude
        - Vertical velocity (1): m/s, positive descending
        - Horizontal position fraction (1): position / max_range
        - Horizontal velocity (1): m/s, positive to the right
        - Fuel fraction (1): remaining fuel [0-1]
        - Pad offset (1): (pad centre - position) / max_range
        - Gravity (1): m/s² for the current level

    Action Space (MultiBinary 3):
        - [up, left, right] thruster held for one tick

    Reward Function:
        - Terminal: +100 successful landing (plus up to +50 for fuel left),
          -100 crash
        - Shaping per step: -0.05 x (|vv| + |hv|), -0.01 per active thruster
    """

    metadata = {'render_modes': ['ansi'], 'render_fps': LC.SIM_TICK_HZ}

    SUCCESS_REWARD = 100.0
    CRASH_PENALTY = -100.0
    FUEL_BONUS = 50.0
    SPEED_PENALTY = 0.05
    THRUSTER_PENALTY = 0.01

    def __init__(self,
                 render_mode=None,
                 max_episode_steps=2000,
                 dt=LC.SIM_DT,
                 config=None,
                 level_progression=False):
        """
        Initialize Lunar Lander Gymnasium Environment

        Args:
            render_mode: 'ansi' or None
            max_episode_steps: Maximum steps per episode before truncation
            dt: Simulation timestep per env step (s)
            config: GameConfig for the underlying game
            level_progression: If True, successes carry over to harder levels
                               between episodes; otherwise every episode is level 1
        """
        super().__init__()

        if render_mode is not None and render_mode not in self.metadata['render_modes']:
            raise ValueError(f"Unsupported render_mode {render_mode!r}")

        self.render_mode = render_mode
        self.max_episode_steps = max_episode_steps
        self.dt = dt
        self.level_progression = level_progression
        self.config = config or GameConfig()

        self.current_step = 0
        self.episode_count = 0

        self.action_space = spaces.MultiBinary(3)
        self.observation_space = spaces.Box(
            low=-np.inf,
            high=np.inf,
            shape=(7,),
            dtype=np.float32
        )

        self.game = None

    def _get_observation(self):
        lander = self.game.lander
        config = self.game.config
        pad_offset = (self.game.safe_zone.center - lander.horizontal_position) / config.max_range
        return np.array([
            lander.altitude / config.max_altitude,
            lander.vertical_velocity,
            lander.horizontal_position / config.max_range,
            lander.horizontal_velocity,
            lander.fuel_fraction,
            pad_offset,
            self.game.current_gravity,
        ], dtype=np.float32)

    def _get_info(self):
        lander = self.game.lander
        return {
            'altitude': lander.altitude,
            'vertical_velocity': lander.vertical_velocity,
            'horizontal_velocity': lander.horizontal_velocity,
            'fuel': lander.fuel,
            'level': self.game.level,
            'outcome': self.game.outcome.value if self.game.outcome else None,
            'anomaly': lander.anomaly,
            'step': self.current_step,
        }

    def _compute_reward(self, terminated):
        if terminated:
            report = self.game.last_landing
            if report.outcome is Outcome.SUCCESS:
                return self.SUCCESS_REWARD + self.FUEL_BONUS * self.game.lander.fuel_fraction
            return self.CRASH_PENALTY

        lander = self.game.lander
        reward = -self.SPEED_PENALTY * (abs(lander.vertical_velocity) + abs(lander.horizontal_velocity))
        reward -= self.THRUSTER_PENALTY * lander.active_thrusters
        return reward

    def reset(self, seed=None, options=None):
        """
        Reset environment to initial state

        Options:
            level: start the episode at this level (>= 1)

        Returns:
            observation: Initial observation
            info: Additional information
        """
        super().reset(seed=seed)

        self.current_step = 0
        self.episode_count += 1

        if self.game is None:
            # Terrain draws from Gymnasium's RNG so seeded resets are reproducible
            self.game = LanderGame(config=self.config, rng=self.np_random)
        else:
            self.game.rng = self.np_random

        options = options or {}
        if 'level' in options:
            level = int(options['level'])
            if level < 1:
                raise ValueError(f"level must be >= 1, got {level}")
            self.game.level = level
        elif not self.level_progression:
            self.game.level = 1

        self.game.restart()

        return self._get_observation(), self._get_info()

    def step(self, action):
        """
        Execute one timestep

        Args:
            action: [up, left, right] flags

        Returns:
            observation, reward, terminated, truncated, info
        """
        if self.game is None:
            raise RuntimeError("Call reset() before step()")

        action = np.asarray(action).astype(bool).reshape(-1)
        if action.shape != (3,):
            raise ValueError(f"Expected 3 thruster flags, got shape {action.shape}")

        self.current_step += 1

        for name, held in zip(LC.THRUSTER_NAMES, action):
            if held:
                self.game.start_thruster(name)
            else:
                self.game.stop_thruster(name)

        self.game.tick(self.dt)

        terminated = self.game.game_over
        truncated = (not terminated) and self.current_step >= self.max_episode_steps

        reward = float(self._compute_reward(terminated))

        return self._get_observation(), reward, terminated, truncated, self._get_info()

    def render(self):
        """Text rendering of the HUD (render_mode='ansi')"""
        if self.render_mode != 'ansi' or self.game is None:
            return None
        status = self.game.status()
        line = ' '.join(status.hud_lines())
        if status.message:
            line += f" {status.message}"
        return line

    def close(self):
        self.game = None


# Register environment with Gymnasium
gym.register(
    id='LunarLander2D-v0',
    entry_point='lunar_lander_env:LunarLanderEnv',
    max_episode_steps=2000,
)


if __name__ == "__main__":
    print("Testing Lunar Lander 2D Environment...")

    env = LunarLanderEnv(render_mode='ansi')

    obs, info = env.reset(seed=42)
    print(f"\nInitial observation shape: {obs.shape}")
    print(f"Initial info: {info}")

    for i in range(5):
        action = env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)
        print(f"\nStep {i+1}:")
        print(f"  Action: {action.tolist()}")
        print(f"  Reward: {reward:.2f}")
        print(f"  {env.render()}")
        if terminated or truncated:
            print("Episode ended!")
            break
    print("\nEnvironment test complete!")
