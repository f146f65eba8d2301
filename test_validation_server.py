"""
Unit tests for validation_server.py
Tests parameter signing, result validation and the Flask endpoints.
"""

import hashlib
import hmac
import os
import unittest
from unittest.mock import patch

# Import module under test
from validation_server import (
    ValidationResult,
    canonical_json,
    create_app,
    sign_params,
    validate_result,
    validate_submission,
)
import lander_constants as LC

SECRET = 'test-secret'


class TestSigning(unittest.TestCase):
    """Test canonical JSON and HMAC signing"""

    def test_canonical_json_matches_client(self):
        """Test parameters serialize like JSON.stringify in the browser client"""
        self.assertEqual(canonical_json(LC.GAME_PARAMS), '{"mass":1000,"gravity":1.62}')

    def test_sign_params_is_hmac_sha256(self):
        """Test token is the hex HMAC-SHA256 of the canonical JSON"""
        expected = hmac.new(SECRET.encode(), b'{"mass":1000,"gravity":1.62}',
                            hashlib.sha256).hexdigest()
        self.assertEqual(sign_params(LC.GAME_PARAMS, SECRET), expected)
        self.assertEqual(len(expected), 64)

    def test_key_order_changes_token(self):
        """Test that reordering parameters changes the signature"""
        reordered = {'gravity': 1.62, 'mass': 1000}
        self.assertNotEqual(sign_params(reordered, SECRET), sign_params(LC.GAME_PARAMS, SECRET))

    def test_secret_changes_token(self):
        """Test that a different key produces a different token"""
        self.assertNotEqual(sign_params(LC.GAME_PARAMS, SECRET),
                            sign_params(LC.GAME_PARAMS, 'other'))


class TestValidateResult(unittest.TestCase):
    """Test bounds checking of submitted results"""

    def test_valid_result(self):
        """Test in-range values pass"""
        self.assertEqual(validate_result({'altitude': 20.0, 'verticalVelocity': 1.5}),
                         ValidationResult(True))
        self.assertTrue(validate_result({'altitude': 0, 'verticalVelocity': -50}).ok)
        self.assertTrue(validate_result({'altitude': 100, 'verticalVelocity': 50}).ok)

    def test_invalid_altitude(self):
        """Test altitude outside [0, max] or non-finite is rejected"""
        for altitude in (-1, 100.5, float('inf'), float('nan')):
            verdict = validate_result({'altitude': altitude, 'verticalVelocity': 0})
            self.assertFalse(verdict.ok)
            self.assertEqual(verdict.reason, 'invalid altitude')

    def test_invalid_velocity(self):
        """Test velocity beyond 50 m/s or non-finite is rejected"""
        for velocity in (50.01, -51, float('inf'), float('nan')):
            verdict = validate_result({'altitude': 10, 'verticalVelocity': velocity})
            self.assertFalse(verdict.ok)
            self.assertEqual(verdict.reason, 'invalid velocity')

    def test_malformed_result(self):
        """Test missing or non-numeric fields are rejected"""
        for result in (None, [], {'altitude': 10}, {'altitude': '10', 'verticalVelocity': 0},
                       {'altitude': True, 'verticalVelocity': 0}):
            verdict = validate_result(result)
            self.assertFalse(verdict.ok)
            self.assertEqual(verdict.reason, 'malformed result')

    def test_integers_beyond_float_range(self):
        """Test integers too large for a float are out of range rather than raising"""
        huge = 10 ** 400
        verdict = validate_result({'altitude': huge, 'verticalVelocity': 0})
        self.assertEqual(verdict, ValidationResult(False, 'invalid altitude'))

        verdict = validate_result({'altitude': 10, 'verticalVelocity': -huge})
        self.assertEqual(verdict, ValidationResult(False, 'invalid velocity'))



class TestValidateSubmission(unittest.TestCase):
    """Test token check ordering"""

    def setUp(self):
        self.token = sign_params(LC.GAME_PARAMS, SECRET)

    def test_bad_token_rejected_regardless_of_result(self):
        """Test a wrong token wins over any result problem"""
        for result in ({'altitude': 10, 'verticalVelocity': 1}, {'altitude': -1}, None):
            verdict = validate_submission({'result': result, 'token': 'deadbeef'}, SECRET)
            self.assertEqual(verdict.reason, 'invalid token')

    def test_non_dict_body(self):
        """Test garbage bodies never raise"""
        for body in (None, 'text', 42, []):
            self.assertEqual(validate_submission(body, SECRET).reason, 'invalid token')

    def test_non_ascii_token(self):
        """Test a non-ASCII token is rejected rather than raising"""
        verdict = validate_submission({'token': 'ü' * 64, 'result': {}}, SECRET)
        self.assertEqual(verdict.reason, 'invalid token')

    def test_good_submission(self):
        """Test a valid token and result pass"""
        body = {'result': {'altitude': 20.0, 'verticalVelocity': 1.0}, 'token': self.token}
        self.assertTrue(validate_submission(body, SECRET).ok)

    def test_lone_surrogate_token(self):
        """Test a token that cannot be encoded is rejected rather than raising"""
        for token in ('\ud800', self.token[:-1] + '\udfff'):
            verdict = validate_submission({'token': token, 'result': {}}, SECRET)
            self.assertEqual(verdict.reason, 'invalid token')

    def test_non_string_token(self):
        """Test numeric, list and object tokens are rejected"""
        for token in (12345, 10 ** 400, ['a'], {'token': self.token}, None, True):
            verdict = validate_submission({'token': token, 'result': {}}, SECRET)
            self.assertEqual(verdict.reason, 'invalid token')


class TestServerEndpoints(unittest.TestCase):
    """Test the Flask application"""

    def setUp(self):
        self.app = create_app(secret=SECRET)
        self.app.testing = True
        self.client = self.app.test_client()

    def _config_token(self):
        return self.client.get('/config').get_json()['token']

    def test_config_endpoint(self):
        """Test /config returns the parameters and their signature"""
        response = self.client.get('/config')
        self.assertEqual(response.status_code, 200)

        data = response.get_json()
        self.assertEqual(data['params'], {'mass': 1000, 'gravity': 1.62})
        self.assertEqual(data['token'], sign_params(LC.GAME_PARAMS, SECRET))

    def test_validate_success(self):
        """Test a valid submission returns ok"""
        response = self.client.post('/validate', json={
            'result': {'altitude': 20.0, 'verticalVelocity': 1.2},
            'token': self._config_token(),
        })
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json(), {'ok': True})

    def test_validate_invalid_token(self):
        """Test a forged token is rejected with 400"""
        response = self.client.post('/validate', json={
            'result': {'altitude': 20.0, 'verticalVelocity': 1.2},
            'token': 'forged',
        })
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json(), {'ok': False, 'reason': 'invalid token'})

    def test_validate_invalid_altitude(self):
        """Test altitude -1 is rejected"""
        response = self.client.post('/validate', json={
            'result': {'altitude': -1, 'verticalVelocity': 1.2},
            'token': self._config_token(),
        })
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['reason'], 'invalid altitude')

    def test_validate_invalid_velocity(self):
        """Test excessive velocity is rejected"""
        response = self.client.post('/validate', json={
            'result': {'altitude': 10, 'verticalVelocity': 75},
            'token': self._config_token(),
        })
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['reason'], 'invalid velocity')

    def test_validate_malformed_result(self):
        """Test a missing result is rejected"""
        response = self.client.post('/validate', json={'token': self._config_token()})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['reason'], 'malformed result')

    def test_validate_without_json_body(self):
        """Test a non-JSON body is treated as an invalid token"""
        response = self.client.post('/validate', data='not json',
                                    content_type='text/plain')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['reason'], 'invalid token')

    def test_tokens_from_other_secret_rejected(self):
        """Test a token issued by a server with another secret fails here"""
        other = create_app(secret='another-secret').test_client()
        token = other.get('/config').get_json()['token']
        response = self.client.post('/validate', json={
            'result': {'altitude': 10, 'verticalVelocity': 1},
            'token': token,
        })
        self.assertEqual(response.get_json()['reason'], 'invalid token')

    def _post_raw(self, text):
        return self.client.post('/validate', data=text, content_type='application/json')

    def test_validate_huge_integer_altitude(self):
        """Test a 400-digit altitude is a 400 response, not a server error"""
        text = ('{"result":{"altitude":%s,"verticalVelocity":1},"token":"%s"}'
                % ('9' * 400, self._config_token()))
        response = self._post_raw(text)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['reason'], 'invalid altitude')

    def test_validate_huge_integer_velocity(self):
        """Test a 400-digit velocity is a 400 response"""
        text = ('{"result":{"altitude":10,"verticalVelocity":-%s},"token":"%s"}'
                % ('9' * 400, self._config_token()))
        response = self._post_raw(text)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['reason'], 'invalid velocity')

    def test_validate_non_finite_literals(self):
        """Test NaN and Infinity literals are rejected as out of range"""
        token = self._config_token()
        cases = (
            ('NaN', '1', 'invalid altitude'),
            ('Infinity', '1', 'invalid altitude'),
            ('10', '-Infinity', 'invalid velocity'),
            ('10', 'NaN', 'invalid velocity'),
        )
        for altitude, velocity, reason in cases:
            text = ('{"result":{"altitude":%s,"verticalVelocity":%s},"token":"%s"}'
                    % (altitude, velocity, token))
            response = self._post_raw(text)
            self.assertEqual(response.status_code, 400, text)
            self.assertEqual(response.get_json()['reason'], reason)

    def test_validate_lone_surrogate_token(self):
        """Test an escaped lone surrogate token is a 400 response"""
        response = self._post_raw(
            r'{"result":{"altitude":10,"verticalVelocity":1},"token":"\ud800"}')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json(), {'ok': False, 'reason': 'invalid token'})

    def test_secret_from_environment(self):
        """Test LANDER_SECRET is used when no secret is given"""
        with patch.dict(os.environ, {'LANDER_SECRET': 'from-env'}):
            app = create_app()
        token = app.test_client().get('/config').get_json()['token']
        self.assertEqual(token, sign_params(LC.GAME_PARAMS, 'from-env'))


if __name__ == '__main__':
    unittest.main()
