#!/usr/bin/env python3
"""
play_lander.py
Headless lunar lander runner

Flies a number of attempts with a simple rule-based autopilot at a fixed
tick rate and prints the outcome of every attempt. Successful landings carry
over to the next level (less fuel, more gravity), crashes retry the level.

Usage:
    python play_lander.py                      # 5 attempts at 10 Hz
    python play_lander.py --attempts 20 --seed 7
    python play_lander.py --dt 0.05 --verbose  # log every tick
"""

import argparse
import logging
import sys

import numpy as np

import lander_constants as LC
from game import GameState, LanderGame, Outcome


class Autopilot:
    """
    Bang-bang autopilot: cruise above the hills towards the pad, then
    descend slowly once the lander is over it.
    """

    def __init__(self, cruise_altitude=55.0, cruise_descent=1.0, final_descent=1.0,
                 approach_descent=3.0, max_cruise_speed=3.0, deadband=0.2):
        self.cruise_altitude = cruise_altitude
        self.cruise_descent = cruise_descent
        self.final_descent = final_descent
        self.approach_descent = approach_descent
        self.max_cruise_speed = max_cruise_speed
        self.deadband = deadband

    def command(self, game):
        """
        Returns:
            dict: thruster name -> held
        """
        lander = game.lander
        zone = game.safe_zone

        dx = zone.center - lander.horizontal_position
        half_width = 0.5 * (zone.end_range - zone.start_range)
        over_pad = abs(dx) < 0.6 * half_width

        if over_pad:
            desired_hv = float(np.clip(0.2 * dx, -0.5, 0.5))
        else:
            desired_hv = float(np.clip(0.3 * dx, -self.max_cruise_speed, self.max_cruise_speed))

        if over_pad:
            x_pix, _ = game.to_pixels()
            surface_y = game.sampler.height_at(x_pix)
            surface_altitude = (game.height - surface_y) / game.height * game.config.max_altitude
            clearance = lander.altitude - surface_altitude
            target_vv = self.final_descent if clearance < 10.0 else self.approach_descent
        elif lander.altitude > self.cruise_altitude:
            target_vv = self.cruise_descent
        else:
            target_vv = -0.5

        return {
            'up': lander.vertical_velocity > target_vv,
            'left': lander.horizontal_velocity > desired_hv + self.deadband,
            'right': lander.horizontal_velocity < desired_hv - self.deadband,
        }


def fly_attempt(game, autopilot, dt=LC.SIM_DT, max_steps=5000):
    """
    Run one attempt to touchdown (or max_steps).

    Returns:
        tuple: (LandingReport or None, steps taken, anomaly count)
    """
    game.restart()
    anomalies = 0
    steps = 0
    while game.state is GameState.IN_PROGRESS and steps < max_steps:
        for name, held in autopilot.command(game).items():
            if held:
                game.start_thruster(name)
            else:
                game.stop_thruster(name)
        result = game.tick(dt)
        if result is not None and result.is_anomaly:
            anomalies += 1
        steps += 1
    return game.last_landing, steps, anomalies


def main():
    parser = argparse.ArgumentParser(
        description='Run headless lunar lander attempts with an autopilot'
    )
    parser.add_argument('--attempts', type=int, default=5,
                        help='Number of attempts to fly (default: 5)')
    parser.add_argument('--dt', type=float, default=LC.SIM_DT,
                        help=f'Simulation timestep in seconds (default: {LC.SIM_DT})')
    parser.add_argument('--max-steps', type=int, default=5000,
                        help='Abort an attempt after this many ticks (default: 5000)')
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed for terrain (default: random)')
    parser.add_argument('--summary', action='store_true',
                        help='Print the configuration summary first')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Log simulation events')

    args = parser.parse_args()

    if args.dt <= 0:
        parser.error('--dt must be positive')

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(levelname)s %(name)s: %(message)s')

    if args.summary:
        LC.print_configuration_summary()

    game = LanderGame(rng=np.random.default_rng(args.seed))
    autopilot = Autopilot()

    print("=" * 60)
    print("LUNAR LANDER - HEADLESS RUN")
    print("=" * 60)

    successes = 0
    for attempt in range(1, args.attempts + 1):
        level = game.level
        report, steps, anomalies = fly_attempt(game, autopilot, dt=args.dt,
                                               max_steps=args.max_steps)
        if report is None:
            print(f"[{attempt}] Level {level}: aborted after {steps} steps")
            continue

        mark = '✓' if report.outcome is Outcome.SUCCESS else '✗'
        print(f"[{attempt}] Level {level}: {mark} {game.message} "
              f"vv={report.impact_vertical_velocity:.2f} m/s "
              f"hv={report.impact_horizontal_velocity:.2f} m/s "
              f"x={report.horizontal_position:.1f} m "
              f"fuel={game.lander.fuel:.0f} t={steps * args.dt:.1f}s")
        if anomalies:
            print(f"    {anomalies} anomalous step(s)")
        if report.success:
            successes += 1

    print("=" * 60)
    print(f"Landings: {successes}/{args.attempts}, reached level {game.level}")
    print(game.share_text())
    print("=" * 60)

    return 0


if __name__ == '__main__':
    sys.exit(main())
