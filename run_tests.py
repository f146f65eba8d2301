#!/usr/bin/env python3
"""
run_tests.py
Test runner for the 2D Lunar Lander project

Loads the test module of every component, in dependency order (constants,
craft, terrain, controller, then the environment, CLI and server), so a
physics failure shows up before the failures it causes further up.

Usage:
    python run_tests.py                    # Run every module
    python run_tests.py -v                 # Verbose output
    python run_tests.py game terrain       # Only these modules
    python run_tests.py -k touchdown       # Only tests whose name matches
    python run_tests.py --list             # Show the known modules
"""

import argparse
import sys
import unittest

TEST_MODULES = (
    'lander_constants',
    'lander',
    'terrain',
    'game',
    'lunar_lander_env',
    'play_lander',
    'validation_server',
)


def build_suite(modules, name_filter=None):
    loader = unittest.TestLoader()
    if name_filter:
        # Same matching rule as `python -m unittest -k`
        loader.testNamePatterns = [f'*{name_filter}*']
    suite = unittest.TestSuite()
    for module in modules:
        suite.addTests(loader.loadTestsFromName(f'test_{module}'))
    return suite


def print_summary(result):
    failed = len(result.failures) + len(result.errors)
    print()
    print("=" * 80)
    print(f"Ran {result.testsRun} tests: {result.testsRun - failed} passed, "
          f"{len(result.failures)} failed, {len(result.errors)} errors, "
          f"{len(result.skipped)} skipped")
    print("=" * 80)
    print("\n✓ ALL TESTS PASSED" if result.wasSuccessful() else "\n✗ SOME TESTS FAILED")


def main():
    parser = argparse.ArgumentParser(
        description='Run unit tests for the 2D Lunar Lander project'
    )
    parser.add_argument('modules', nargs='*', metavar='MODULE',
                        help='Component modules to test (default: all)')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Verbose output')
    parser.add_argument('-k', dest='name_filter', type=str, default=None,
                        help='Only run tests whose name contains this text')
    parser.add_argument('--failfast', action='store_true',
                        help='Stop on first test failure')
    parser.add_argument('--list', action='store_true',
                        help='List the component modules and exit')

    args = parser.parse_args()

    if args.list:
        for name in TEST_MODULES:
            print(f"  - {name}  (test_{name}.py)")
        return 0

    unknown = [name for name in args.modules if name not in TEST_MODULES]
    if unknown:
        parser.error(f"unknown module(s): {', '.join(unknown)} "
                     f"(choose from {', '.join(TEST_MODULES)})")

    modules = args.modules or TEST_MODULES

    print("=" * 80)
    print("LUNAR LANDER 2D - UNIT TESTS")
    print(f"Modules: {', '.join(modules)}")
    if args.name_filter:
        print(f"Filter: {args.name_filter}")
    print("=" * 80)

    runner = unittest.TextTestRunner(
        verbosity=2 if args.verbose else 1,
        failfast=args.failfast
    )
    result = runner.run(build_suite(modules, args.name_filter))

    print_summary(result)
    return 0 if result.wasSuccessful() else 1


if __name__ == '__main__':
    sys.exit(main())
