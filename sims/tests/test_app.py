"""End-to-end tests for :mod:`sims`."""

import os
import shutil
import tempfile
import threading
from datetime import timedelta
from http import HTTPStatus
from unittest import TestCase, mock
from urllib.parse import parse_qs, urlencode, urlparse

from click.testing import CliRunner
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from sims import seed, seed_data
from sims.factory import create_web_app
from sims.services import datastore

CLIENT_ID = 'lms-client-id'
CLIENT_SECRET = 'lms-client-secret'
REDIRECT_URI = 'http://localhost:8080/auth/callback'


class AppTestCase(TestCase):
    """Each test gets a freshly seeded SQLite database."""

    def setUp(self):
        self.workdir = tempfile.mkdtemp()
        self.db_path = os.path.join(self.workdir, 'sims.db')
        self.app = create_web_app({
            'SQLALCHEMY_DATABASE_URI': f'sqlite:///{self.db_path}',
            'CREATE_DB': True,
            'LOG_JSON': False,
            'TESTING': True
        })
        with self.app.app_context():
            seed.seed_client(self.app.config)
            seed.seed_users(n_students=0)
        self.client = self.app.test_client()

    def tearDown(self):
        with self.app.app_context():
            datastore.drop_all()
        shutil.rmtree(self.workdir)

    def _authorize_url(self, **overrides) -> str:
        params = {
            'client_id': CLIENT_ID,
            'redirect_uri': REDIRECT_URI,
            'response_type': 'code',
            'state': 'xyz'
        }
        params.update(overrides)
        return f'/oauth/authorize?{urlencode(params)}'

    def _login(self, username='john.doe@must.ac.tz', password='password123'):
        return self.client.post(self._authorize_url(), data={
            'username': username,
            'password': password
        })

    def _get_code(self, **login) -> str:
        response = self._login(**login)
        self.assertEqual(response.status_code, HTTPStatus.FOUND)
        return parse_qs(urlparse(response.headers['Location']).query)['code'][0]

    def _exchange(self, code: str, client=None):
        return (client or self.client).post('/oauth/token', data={
            'grant_type': 'authorization_code',
            'code': code,
            'client_id': CLIENT_ID,
            'client_secret': CLIENT_SECRET,
            'redirect_uri': REDIRECT_URI
        })

    def _get(self, path: str, token: str):
        return self.client.get(path,
                               headers={'Authorization': f'Bearer {token}'})

    def _token_for(self, email: str) -> str:
        code = self._get_code(username=email)
        return self._exchange(code).get_json()['access_token']


class TestHealth(AppTestCase):
    def test_health(self):
        """The health endpoint reports the service and its version."""
        response = self.client.get('/health')
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(response.get_json(), {
            'status': 'ok',
            'service': 'mock-sims',
            'version': self.app.config['APP_VERSION']
        })


class TestAuthorizationCodeFlow(AppTestCase):
    """The LMS obtains delegated access on behalf of a user."""

    def test_login_page(self):
        """The login page posts back with the request parameters."""
        response = self.client.get(self._authorize_url())
        self.assertEqual(response.status_code, HTTPStatus.OK)
        body = response.get_data(as_text=True)
        self.assertIn('Mock LMS', body)
        self.assertIn('name="username"', body)
        self.assertIn('name="password"', body)
        self.assertIn('state=xyz', body)
        self.assertEqual(response.headers['X-Frame-Options'], 'DENY')

    def test_login_page_escapes_parameters(self):
        """Request parameters cannot inject markup into the login page."""
        response = self.client.get(
            self._authorize_url(state='"><script>alert(1)</script>')
        )
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertNotIn('<script>', response.get_data(as_text=True))

    def test_invalid_request_is_not_redirected(self):
        """Bad requests get an error page, never a redirect."""
        for overrides in [{'client_id': 'nope'},
                          {'redirect_uri': 'http://evil.example/cb'},
                          {'response_type': 'token'}]:
            response = self.client.get(self._authorize_url(**overrides))
            self.assertEqual(response.status_code, HTTPStatus.BAD_REQUEST,
                             overrides)
            self.assertNotIn('Location', response.headers)

    def test_unsupported_response_type_page(self):
        """The error page names the supported response type."""
        response = self.client.get(self._authorize_url(response_type='token'))
        self.assertEqual(response.status_code, HTTPStatus.BAD_REQUEST)
        self.assertIn('response_type must be code',
                      response.get_data(as_text=True))

    def test_bad_credentials(self):
        """Wrong passwords and unknown users get the same message."""
        for username, password in [('john.doe@must.ac.tz', 'wrong'),
                                   ('nobody@must.ac.tz', 'password123')]:
            response = self._login(username=username, password=password)
            self.assertEqual(response.status_code, HTTPStatus.BAD_REQUEST)
            self.assertNotIn('Location', response.headers)
            self.assertIn('Invalid username or password.',
                          response.get_data(as_text=True))

    def test_login_with_registration_number(self):
        """Students may log in with their registration number."""
        response = self._login(username='2201010000001')
        self.assertEqual(response.status_code, HTTPStatus.FOUND)

    def test_full_flow(self):
        """Log in, exchange the code, and call the API."""
        response = self._login()
        self.assertEqual(response.status_code, HTTPStatus.FOUND)
        location = urlparse(response.headers['Location'])
        self.assertEqual(f'{location.scheme}://{location.netloc}'
                         f'{location.path}', REDIRECT_URI)
        query = parse_qs(location.query)
        self.assertEqual(query['state'], ['xyz'])
        code = query['code'][0]
        self.assertGreaterEqual(len(code), 32)

        response = self._exchange(code)
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(response.headers['Cache-Control'], 'no-store')
        data = response.get_json()
        self.assertEqual(data['expires_in'], 3600)
        self.assertEqual(data['token_type'], 'Bearer')
        self.assertEqual(data['scope'], 'student.read courses.read')
        self.assertTrue(data['access_token'])
        self.assertTrue(data['refresh_token'])

        response = self._get('/api/students/me', data['access_token'])
        self.assertEqual(response.status_code, HTTPStatus.OK)
        student = response.get_json()
        self.assertEqual(student['reg_number'], '2201010000001')
        self.assertEqual(student['email'], 'john.doe@must.ac.tz')
        self.assertEqual(student['program']['code'], 'MB011')

        response = self._get('/api/me', data['access_token'])
        self.assertEqual(response.get_json()['user_type'], 'student')

        response = self._get('/api/students/me', data['access_token'] + 'x')
        self.assertEqual(response.status_code, HTTPStatus.UNAUTHORIZED)
        self.assertEqual(response.get_json(),
                         {'error': 'invalid or expired access token'})

    def test_code_is_single_use(self):
        """A code cannot be exchanged twice."""
        code = self._get_code()
        self.assertEqual(self._exchange(code).status_code, HTTPStatus.OK)
        response = self._exchange(code)
        self.assertEqual(response.status_code, HTTPStatus.BAD_REQUEST)
        self.assertEqual(response.get_json()['error'], 'invalid_grant')

    def test_concurrent_exchange(self):
        """Of many simultaneous exchanges of one code, exactly one wins."""
        code = self._get_code()
        n_requests = 5
        barrier = threading.Barrier(n_requests)
        results = []
        lock = threading.Lock()

        def exchange():
            client = self.app.test_client()
            barrier.wait()
            response = self._exchange(code, client=client)
            with lock:
                results.append((response.status_code, response.get_json()))

        threads = [threading.Thread(target=exchange)
                   for _ in range(n_requests)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        statuses = sorted(status for status, _ in results)
        self.assertEqual(statuses, [HTTPStatus.OK]
                         + [HTTPStatus.BAD_REQUEST] * (n_requests - 1))
        for status, data in results:
            if status == HTTPStatus.BAD_REQUEST:
                self.assertEqual(data['error'], 'invalid_grant')

    def test_refresh(self):
        """Refreshing supersedes the old access token."""
        tokens = self._exchange(self._get_code()).get_json()
        response = self.client.post('/oauth/token', data={
            'grant_type': 'refresh_token',
            'refresh_token': tokens['refresh_token']
        })
        self.assertEqual(response.status_code, HTTPStatus.OK)
        refreshed = response.get_json()
        self.assertNotEqual(refreshed['access_token'], tokens['access_token'])
        self.assertEqual(refreshed['refresh_token'], tokens['refresh_token'])
        self.assertEqual(refreshed['expires_in'], 3600)

        self.assertEqual(
            self._get('/api/me', tokens['access_token']).status_code,
            HTTPStatus.UNAUTHORIZED
        )
        self.assertEqual(
            self._get('/api/me', refreshed['access_token']).status_code,
            HTTPStatus.OK
        )

    def test_unsupported_grant(self):
        """The token endpoint rejects unknown grant types."""
        response = self.client.post('/oauth/token',
                                    data={'grant_type': 'password'})
        self.assertEqual(response.status_code, HTTPStatus.BAD_REQUEST)
        self.assertEqual(response.get_json()['error'],
                         'unsupported_grant_type')


class TestProtectedAPI(AppTestCase):
    """Profile routes are restricted by kind of user."""

    def test_missing_header(self):
        """A request without a token is unauthorized."""
        response = self.client.get('/api/me')
        self.assertEqual(response.status_code, HTTPStatus.UNAUTHORIZED)
        self.assertEqual(response.get_json(),
                         {'error': 'missing authorization header'})

    def test_faculty(self):
        """Faculty can see their own profile, but not student routes."""
        token = self._token_for('joseph.mkunda@must.ac.tz')
        response = self._get('/api/faculty/me', token)
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(response.get_json()['staff_id'], 'MUST-F-001')
        response = self._get('/api/students/me', token)
        self.assertEqual(response.status_code, HTTPStatus.FORBIDDEN)
        self.assertEqual(response.get_json(),
                         {'error': 'forbidden - insufficient permissions'})

    def test_admin(self):
        """Admins can see their own profile."""
        token = self._token_for('admin@must.ac.tz')
        response = self._get('/api/admin/me', token)
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(response.get_json()['role'], 'Registrar')


class TestAcademicAPI(AppTestCase):
    """Catalogue and student records, read on behalf of a user."""

    def setUp(self):
        super(TestAcademicAPI, self).setUp()
        with self.app.app_context():
            seed.seed_catalogue()
            seed.seed_users(n_students=1)
            seed.seed_records()
            john = datastore.load_user_by_email('john.doe@must.ac.tz')
            self.john_id = datastore.load_profile(john).student_id
            self.other_id = [student.student_id for student
                             in datastore.list_students()
                             if student.student_id != self.john_id][0]
        self.student_token = self._token_for('john.doe@must.ac.tz')

    def test_own_courses(self):
        """A student sees this semester's and last semester's courses."""
        response = self._get(f'/api/students/{self.john_id}/courses',
                             self.student_token)
        self.assertEqual(response.status_code, HTTPStatus.OK)
        data = response.get_json()
        self.assertEqual(data['student_id'], self.john_id)
        statuses = [course['status'] for course in data['courses']]
        self.assertEqual(statuses.count('active'), seed.COURSES_PER_SEMESTER)
        self.assertEqual(statuses.count('completed'),
                         seed.COURSES_PER_SEMESTER)
        self.assertEqual(data['total'], len(data['courses']))

    def test_own_grades(self):
        """Only completed courses are graded."""
        response = self._get(f'/api/students/{self.john_id}/grades',
                             self.student_token)
        self.assertEqual(response.status_code, HTTPStatus.OK)
        grades = response.get_json()['grades']
        self.assertEqual(len(grades), seed.COURSES_PER_SEMESTER)
        for grade in grades:
            self.assertEqual(grade['semester'], '2024/2025 - Semester I')
            self.assertAlmostEqual(grade['total_marks'],
                                   grade['ca_marks'] + grade['final_exam'],
                                   places=1)
            letter, point, _ = seed.letter_grade(grade['total_marks'])
            self.assertEqual(grade['letter_grade'], letter)
            self.assertEqual(grade['grade_point'], point)

    def test_own_timetable(self):
        """The timetable has one lecture per active course."""
        response = self._get(f'/api/students/{self.john_id}/timetable',
                             self.student_token)
        self.assertEqual(response.status_code, HTTPStatus.OK)
        data = response.get_json()
        self.assertEqual(data['semester'], '2024/2025 - Semester II')
        self.assertEqual(len(data['timetable']), seed.COURSES_PER_SEMESTER)
        courses = self._get(f'/api/students/{self.john_id}/courses',
                            self.student_token).get_json()['courses']
        self.assertEqual(
            sorted(entry['course_code'] for entry in data['timetable']),
            sorted(course['course_code'] for course in courses
                   if course['status'] == 'active')
        )

    def test_other_students_records(self):
        """Students are forbidden from reading each other's records."""
        for path in ['courses', 'grades', 'timetable']:
            response = self._get(f'/api/students/{self.other_id}/{path}',
                                 self.student_token)
            self.assertEqual(response.status_code, HTTPStatus.FORBIDDEN)
        token = self._token_for('joseph.mkunda@must.ac.tz')
        response = self._get(f'/api/students/{self.other_id}/grades', token)
        self.assertEqual(response.status_code, HTTPStatus.OK)

    def test_bad_student_id(self):
        """A student ID that is not a number is a bad request."""
        response = self._get('/api/students/abc/courses', self.student_token)
        self.assertEqual(response.status_code, HTTPStatus.BAD_REQUEST)
        self.assertEqual(response.get_json(), {'error': 'invalid student ID'})

    def test_me_is_not_a_student_id(self):
        """The profile route is not shadowed by the records routes."""
        response = self._get('/api/students/me', self.student_token)
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(response.get_json()['student_id'], self.john_id)

    def test_faculty_courses(self):
        """Any user can see what a lecturer teaches."""
        token = self._token_for('joseph.mkunda@must.ac.tz')
        faculty_id = self._get('/api/faculty/me', token) \
            .get_json()['faculty_id']
        response = self._get(f'/api/faculty/{faculty_id}/courses',
                             self.student_token)
        self.assertEqual(response.status_code, HTTPStatus.OK)
        courses = response.get_json()['courses']
        self.assertIn('CS6301', [course['course_code'] for course in courses])
        self.assertEqual({course['role'] for course in courses},
                         {'Lecturer'})
        response = self._get('/api/faculty/999/courses', self.student_token)
        self.assertEqual(response.status_code, HTTPStatus.NOT_FOUND)

    def test_course_catalogue(self):
        """The catalogue is paged."""
        response = self._get('/api/courses?page=2&limit=10',
                             self.student_token)
        self.assertEqual(response.status_code, HTTPStatus.OK)
        data = response.get_json()
        self.assertEqual(data['total'], len(seed_data.COURSES))
        self.assertEqual(data['page'], 2)
        self.assertEqual(len(data['courses']), 10)

    def test_course(self):
        """A course has details, lectures and a roster."""
        response = self._get('/api/courses/CS6301', self.student_token)
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(response.get_json()['department']['code'], 'CS')

        response = self._get('/api/courses/CS6301/lectures',
                             self.student_token)
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(response.get_json()['total'], 1)

        token = self._token_for('joseph.mkunda@must.ac.tz')
        response = self._get('/api/courses/CS6301/students', token)
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertIn(self.john_id, [student['student_id'] for student
                                     in response.get_json()['students']])

    def test_roster_is_not_for_students(self):
        """Students cannot list who else is in a course."""
        response = self._get('/api/courses/CS6301/students',
                             self.student_token)
        self.assertEqual(response.status_code, HTTPStatus.FORBIDDEN)

    def test_unknown_course(self):
        """An unknown course is not found."""
        for path in ['/api/courses/XX0000', '/api/courses/XX0000/lectures']:
            response = self._get(path, self.student_token)
            self.assertEqual(response.status_code, HTTPStatus.NOT_FOUND)
            self.assertEqual(response.get_json(),
                             {'error': 'course not found'})

    def test_structure(self):
        """Colleges, departments and programs can be listed and filtered."""
        data = self._get('/api/colleges', self.student_token).get_json()
        self.assertEqual(data['total'], len(seed_data.COLLEGES))
        college = data['colleges'][0]

        data = self._get(f'/api/departments?college_id={college["id"]}',
                         self.student_token).get_json()
        self.assertEqual(data['total'], college['departments_count'])
        self.assertEqual({department['college'] for department
                          in data['departments']}, {college['name']})

        data = self._get('/api/programs?level=Masters',
                         self.student_token).get_json()
        self.assertGreater(data['total'], 0)
        self.assertEqual({program['degree_level'] for program
                          in data['programs']}, {'Masters'})

    def test_requires_token(self):
        """Academic routes need a bearer token."""
        for path in ['/api/courses', '/api/colleges',
                     f'/api/students/{self.john_id}/grades']:
            response = self.client.get(path)
            self.assertEqual(response.status_code, HTTPStatus.UNAUTHORIZED)


class TestCommands(AppTestCase):
    """The ``seed`` and ``purge`` commands."""

    def test_seed_is_idempotent(self):
        """Seeding again creates nothing new, and logins still work."""
        runner = CliRunner()
        result = runner.invoke(seed.cli, ['seed', '--students', '0'],
                               obj=self.app)
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('Created 0 users', result.output)
        self.assertIn(f'Catalogue has {len(seed_data.COURSES)} courses',
                      result.output)
        result = runner.invoke(seed.cli, ['seed', '--students', '0'],
                               obj=self.app)
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('Created 0 users and 0 grades', result.output)
        self.assertEqual(self._login().status_code, HTTPStatus.FOUND)

    def test_seed_synthetic_students(self):
        """Synthetic students are the same every time."""
        with self.app.app_context():
            created = seed.seed_users(n_students=3)
            emails = [datastore.load_user(user_id).email
                      for user_id in created]
        self.assertEqual(len(created), 3)
        with self.app.app_context():
            self.assertEqual(seed.seed_users(n_students=3), [])
        for email in emails:
            self.assertTrue(email.endswith('@must.ac.tz'))

    def test_purge(self):
        """Used codes are purged."""
        self._exchange(self._get_code())
        result = CliRunner().invoke(seed.cli, ['purge'], obj=self.app)
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('Deleted 1 authorization codes and 0 access tokens',
                      result.output)

    def test_refresh_survives_purge(self):
        """Purging after the access token expires keeps the refresh token."""
        tokens = self._exchange(self._get_code()).get_json()
        window = self.app.config['OAUTH_REFRESH_TOKEN_EXPIRY']
        with self.app.app_context():
            later = datastore.now() + timedelta(seconds=7200)
            _, n_tokens = datastore.purge_expired(
                later, refresh_expires_in=window
            )
        self.assertEqual(n_tokens, 0)
        response = self.client.post('/oauth/token', data={
            'grant_type': 'refresh_token',
            'refresh_token': tokens['refresh_token']
        })
        self.assertEqual(response.status_code, HTTPStatus.OK)


class TestStoreFailures(AppTestCase):
    """A failing store is a JSON 500, never a retry or an HTML page."""

    def setUp(self):
        super().setUp()
        self.app.config['PROPAGATE_EXCEPTIONS'] = False

    def _assert_json_500(self, response):
        self.assertEqual(response.status_code,
                         HTTPStatus.INTERNAL_SERVER_ERROR)
        self.assertEqual(response.mimetype, 'application/json')
        data = response.get_json()
        self.assertEqual(list(data), ['error'])
        self.assertTrue(data['error'])

    def test_token_endpoint(self):
        """The token endpoint fails cleanly if the client cannot be loaded."""
        code = self._get_code()
        error = OperationalError('SELECT', {}, Exception('disk I/O error'))
        with mock.patch.object(datastore, 'load_client', side_effect=error):
            response = self._exchange(code)
        self._assert_json_500(response)

    def test_token_endpoint_does_not_retry(self):
        """The failed store call is made exactly once."""
        code = self._get_code()
        with mock.patch.object(datastore, 'redeem_auth_code',
                               side_effect=SQLAlchemyError('locked')) \
                as redeem:
            response = self._exchange(code)
        self._assert_json_500(response)
        self.assertEqual(redeem.call_count, 1)

    def test_protected_api(self):
        """Token validation fails cleanly if the store is unavailable."""
        tokens = self._exchange(self._get_code()).get_json()
        with mock.patch.object(datastore, 'load_access_token',
                               side_effect=SQLAlchemyError('down')):
            response = self._get('/api/me', tokens['access_token'])
        self._assert_json_500(response)

    def test_missing_tables(self):
        """A real database error is logged, rolled back and reported."""
        tokens = self._exchange(self._get_code()).get_json()
        with self.app.app_context():
            datastore.drop_all()
        with self.assertLogs('sims.services.datastore.util', level='ERROR'):
            response = self._get('/api/me', tokens['access_token'])
        self._assert_json_500(response)
