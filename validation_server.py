"""
validation_server.py
Result-validation HTTP server for the lunar lander

Endpoints:
- GET  /config    -> {"params": GAME_PARAMS, "token": HMAC-SHA256 hex}
- POST /validate  -> {"ok": true} or 400 {"ok": false, "reason": ...}

The token is an HMAC over the JSON text of the gameplay parameters, so the
server can check that a submitted result was produced against the parameters
it issued. Submitted results are bounds-checked against the physics limits.

Configuration:
    LANDER_SECRET  HMAC key (default 'supersecret')
    PORT           listen port (default 3000)

Usage:
    python validation_server.py --port 3000
"""

import argparse
import hashlib
import hmac
import json
import logging
import math
import os
from dataclasses import dataclass
from typing import Optional

from flask import Flask, jsonify, request

import lander_constants as LC

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    reason: Optional[str] = None

    def to_json(self):
        if self.ok:
            return {'ok': True}
        return {'ok': False, 'reason': self.reason}


def canonical_json(params):
    """JSON text of the parameters in insertion order, without whitespace."""
    return json.dumps(params, separators=(',', ':'))


def sign_params(params, secret):
    """HMAC-SHA256 hex digest of the canonical parameter JSON."""
    return hmac.new(
        secret.encode('utf-8'),
        canonical_json(params).encode('utf-8'),
        hashlib.sha256,
    ).hexdigest()


def _is_number(value):
    # bool is an int subclass but not a number on the wire
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _as_float(value):
    """Float value of a JSON number, or None when it does not fit in a float."""
    try:
        return float(value)
    except OverflowError:
        return None


def _in_range(value, low, high):
    return value is not None and math.isfinite(value) and low <= value <= high


def validate_result(result, max_altitude=LC.MAX_ALTITUDE,
                    max_vertical_speed=LC.MAX_RESULT_VERTICAL_SPEED):
    """Range-check a submitted {altitude, verticalVelocity} result."""
    if not isinstance(result, dict):
        return ValidationResult(False, 'malformed result')

    altitude = result.get('altitude')
    vertical_velocity = result.get('verticalVelocity')
    if not _is_number(altitude) or not _is_number(vertical_velocity):
        return ValidationResult(False, 'malformed result')

    # Integers too large for a float are out of range, not malformed
    if not _in_range(_as_float(altitude), 0.0, max_altitude):
        return ValidationResult(False, 'invalid altitude')
    if not _in_range(_as_float(vertical_velocity), -max_vertical_speed, max_vertical_speed):
        return ValidationResult(False, 'invalid velocity')

    return ValidationResult(True)


def validate_submission(body, secret, params=LC.GAME_PARAMS):
    """
    Check the token first, then the result.

    Args:
        body: Decoded JSON request body (anything; never raises)
        secret: HMAC key
        params: Gameplay parameters the token was issued for

    Returns:
        ValidationResult
    """
    if not isinstance(body, dict):
        body = {}

    token = body.get('token')
    expected = sign_params(params, secret)
    # compare_digest only accepts ASCII str; a hex digest never holds anything else
    if (not isinstance(token, str) or not token.isascii()
            or not hmac.compare_digest(token, expected)):
        return ValidationResult(False, 'invalid token')

    return validate_result(body.get('result'))


def create_app(secret=None, params=None):
    """
    Build the Flask application.

    Args:
        secret: HMAC key (default: LANDER_SECRET env var or DEFAULT_SECRET)
        params: Gameplay parameters to issue (default: GAME_PARAMS)
    """
    if secret is None:
        secret = os.environ.get('LANDER_SECRET', LC.DEFAULT_SECRET)
    if params is None:
        params = dict(LC.GAME_PARAMS)

    app = Flask(__name__)
    # Keep params in the order they were signed
    app.json.sort_keys = False
    app.config['LANDER_SECRET'] = secret
    app.config['GAME_PARAMS'] = params

    @app.route('/config', methods=['GET'])
    def config():
        token = sign_params(params, secret)
        return jsonify({'params': params, 'token': token})

    @app.route('/validate', methods=['POST'])
    def validate():
        body = request.get_json(silent=True)
        verdict = validate_submission(body, secret, params)
        if not verdict.ok:
            LOGGER.warning("Rejected submission from %s: %s", request.remote_addr, verdict.reason)
            return jsonify(verdict.to_json()), 400
        return jsonify(verdict.to_json())

    return app


def main():
    parser = argparse.ArgumentParser(description='Lunar lander result-validation server')
    parser.add_argument('--host', type=str, default='127.0.0.1',
                        help='Bind address (default: 127.0.0.1)')
    parser.add_argument('--port', type=int,
                        default=int(os.environ.get('PORT', LC.DEFAULT_PORT)),
                        help='Listen port (default: $PORT or 3000)')
    parser.add_argument('--secret', type=str, default=None,
                        help='HMAC secret (default: $LANDER_SECRET)')
    parser.add_argument('--debug', action='store_true',
                        help='Enable Flask debug mode')
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO)

    app = create_app(secret=args.secret)
    print(f"Lander server listening on {args.port}")
    app.run(host=args.host, port=args.port, debug=args.debug)


if __name__ == '__main__':
    main()
