"""Tests for :mod:`sims.auth.decorators`."""

from datetime import datetime
from http import HTTPStatus
from unittest import TestCase, mock

from flask import Flask, jsonify, request

from sims import domain
from sims.auth import decorators
from sims.auth.exceptions import InvalidToken, ExpiredToken
from sims.factory import register_error_handlers


class TestProtected(TestCase):
    """The :func:`.protected` decorator gates routes on bearer tokens."""

    def setUp(self):
        self.app = Flask('test')
        register_error_handlers(self.app)

        @self.app.route('/anyone')
        @decorators.protected()
        def anyone():
            return jsonify(user_id=request.auth.user.user_id)

        @self.app.route('/faculty')
        @decorators.protected(domain.UserKind.FACULTY,
                              domain.UserKind.ADMIN)
        def faculty():
            return jsonify(user_id=request.auth.user.user_id)

        self.client = self.app.test_client()
        self.user = domain.User(user_id='42', email='john.doe@must.ac.tz',
                                kind=domain.UserKind.STUDENT)
        self.token = domain.AccessToken(
            token='footoken', client_id='lms-client-id', user_id='42',
            scope='student.read', created=datetime(2024, 10, 2),
            expires=datetime(2024, 10, 2, 1), refresh_token='foorefresh'
        )

    def test_no_header(self):
        """A request without an Authorization header is unauthorized."""
        response = self.client.get('/anyone')
        self.assertEqual(response.status_code, HTTPStatus.UNAUTHORIZED)
        self.assertEqual(response.get_json(),
                         {'error': 'missing authorization header'})

    def test_malformed_header(self):
        """The header must be ``Bearer`` and a token, and nothing else."""
        for header in ['footoken', 'Basic footoken', 'Bearer',
                       'Bearer foo token', 'bearer footoken']:
            response = self.client.get('/anyone',
                                       headers={'Authorization': header})
            self.assertEqual(response.status_code, HTTPStatus.UNAUTHORIZED,
                             header)
            self.assertEqual(response.get_json(),
                             {'error': 'invalid authorization header format'},
                             header)

    @mock.patch(f'{decorators.__name__}.validate')
    def test_invalid_token(self, mock_validate):
        """Unknown and expired tokens get the same generic response."""
        for exc in [InvalidToken('nope'), ExpiredToken('too late')]:
            mock_validate.side_effect = exc
            response = self.client.get(
                '/anyone', headers={'Authorization': 'Bearer footoken'}
            )
            self.assertEqual(response.status_code, HTTPStatus.UNAUTHORIZED)
            self.assertEqual(response.get_json(),
                             {'error': 'invalid or expired access token'})

    @mock.patch(f'{decorators.__name__}.validate')
    def test_valid_token(self, mock_validate):
        """The token and its owner are attached to the request."""
        mock_validate.return_value = self.token, self.user
        response = self.client.get(
            '/anyone', headers={'Authorization': 'Bearer footoken'}
        )
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(response.get_json(), {'user_id': '42'})
        mock_validate.assert_called_once_with('footoken')

    @mock.patch(f'{decorators.__name__}.validate')
    def test_wrong_kind(self, mock_validate):
        """Users of other kinds are forbidden."""
        mock_validate.return_value = self.token, self.user
        response = self.client.get(
            '/faculty', headers={'Authorization': 'Bearer footoken'}
        )
        self.assertEqual(response.status_code, HTTPStatus.FORBIDDEN)
        self.assertEqual(response.get_json(),
                         {'error': 'forbidden - insufficient permissions'})

    @mock.patch(f'{decorators.__name__}.validate')
    def test_permitted_kind(self, mock_validate):
        """Any of the permitted kinds may use the route."""
        admin = self.user._replace(kind=domain.UserKind.ADMIN)
        mock_validate.return_value = self.token, admin
        response = self.client.get(
            '/faculty', headers={'Authorization': 'Bearer footoken'}
        )
        self.assertEqual(response.status_code, HTTPStatus.OK)
