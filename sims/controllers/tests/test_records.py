"""Tests for :mod:`sims.controllers.records`."""

from datetime import date, datetime
from http import HTTPStatus
from unittest import TestCase, mock

from werkzeug.exceptions import BadRequest, Forbidden, NotFound

from sims import domain
from sims.controllers import records
from sims.services import datastore

TOKEN = domain.AccessToken(
    token='footoken', client_id='lms-client-id', user_id='42',
    scope='student.read courses.read', created=datetime(2024, 10, 2),
    expires=datetime(2024, 10, 2, 1), refresh_token='foorefresh'
)
COURSE = domain.Course(
    code='CS6301', name='Distributed Systems', credits=6, level=300,
    department_code='CS', department_name='Computer Science and Engineering'
)
STUDENT = domain.StudentProfile(
    student_id='7', user_id='42', reg_number='2201010000001',
    first_name='John', middle_name='Doe', last_name='Mwamba',
    program_code='MB011', program_name='Computer Science',
    year_of_study=3, admission_year=2022
)
LECTURE = domain.Lecture(
    course=COURSE, staff_id='MUST-F-001', lecturer='Joseph Mkunda',
    semester='2024/2025 - Semester II', day_of_week='Monday',
    start_time='08:00', end_time='10:00', venue='CoICT Building 102',
    capacity=100
)


def _auth(kind: domain.UserKind) -> domain.Authorization:
    user = domain.User(user_id='42', email='someone@must.ac.tz', kind=kind)
    return domain.Authorization(token=TOKEN, user=user)


def _mock_datastore(mock_datastore):
    mock_datastore.NoSuchStudent = datastore.NoSuchStudent
    mock_datastore.NoSuchFaculty = datastore.NoSuchFaculty
    mock_datastore.NoSuchSemester = datastore.NoSuchSemester
    mock_datastore.NoSuchProfile = datastore.NoSuchProfile
    mock_datastore.NoSuchUser = datastore.NoSuchUser
    mock_datastore.load_profile.return_value = STUDENT
    mock_datastore.load_student.return_value = STUDENT


class TestStudentAccess(TestCase):
    """Who may read a student's records."""

    @mock.patch(f'{records.__name__}.datastore')
    def test_own_records(self, mock_datastore):
        """A student may read their own records."""
        _mock_datastore(mock_datastore)
        mock_datastore.load_student_enrollments.return_value = []
        data, code, _ = records.get_student_courses(
            _auth(domain.UserKind.STUDENT), '7'
        )
        self.assertEqual(code, HTTPStatus.OK)
        self.assertEqual(data, {'student_id': '7', 'courses': [],
                                'total': 0})

    @mock.patch(f'{records.__name__}.datastore')
    def test_other_student(self, mock_datastore):
        """A student may not read anyone else's records."""
        _mock_datastore(mock_datastore)
        for controller in [records.get_student_courses,
                           records.get_student_grades,
                           records.get_student_timetable]:
            with self.assertRaises(Forbidden) as ctx:
                controller(_auth(domain.UserKind.STUDENT), '8')
            self.assertEqual(ctx.exception.description,
                             'forbidden - insufficient permissions')
        mock_datastore.load_student.assert_not_called()

    @mock.patch(f'{records.__name__}.datastore')
    def test_other_student_does_not_exist(self, mock_datastore):
        """Students cannot find out which IDs exist."""
        _mock_datastore(mock_datastore)
        mock_datastore.load_student.side_effect = datastore.NoSuchStudent
        with self.assertRaises(Forbidden):
            records.get_student_grades(_auth(domain.UserKind.STUDENT), '999')

    @mock.patch(f'{records.__name__}.datastore')
    def test_faculty_and_admin(self, mock_datastore):
        """Faculty and administrators may read any student's records."""
        _mock_datastore(mock_datastore)
        mock_datastore.load_student_grades.return_value = []
        for kind in [domain.UserKind.FACULTY, domain.UserKind.ADMIN]:
            _, code, _ = records.get_student_grades(_auth(kind), '8')
            self.assertEqual(code, HTTPStatus.OK)
        mock_datastore.load_profile.assert_not_called()

    @mock.patch(f'{records.__name__}.datastore')
    def test_unknown_student(self, mock_datastore):
        """An unknown student is a 404 for staff."""
        _mock_datastore(mock_datastore)
        mock_datastore.load_student.side_effect = datastore.NoSuchStudent
        with self.assertRaises(NotFound) as ctx:
            records.get_student_courses(_auth(domain.UserKind.ADMIN), '999')
        self.assertEqual(ctx.exception.description, 'student not found')

    @mock.patch(f'{records.__name__}.datastore')
    def test_invalid_id(self, mock_datastore):
        """Student IDs are positive integers."""
        _mock_datastore(mock_datastore)
        for student_id in ['abc', '0', '-1', '7.5']:
            with self.assertRaises(BadRequest) as ctx:
                records.get_student_courses(_auth(domain.UserKind.ADMIN),
                                            student_id)
            self.assertEqual(ctx.exception.description, 'invalid student ID')


class TestStudentRecords(TestCase):
    @mock.patch(f'{records.__name__}.datastore')
    def test_grades(self, mock_datastore):
        """Grades carry marks and the course they were earned in."""
        _mock_datastore(mock_datastore)
        mock_datastore.load_student_grades.return_value = [domain.Grade(
            course=COURSE, semester='2024/2025 - Semester I', ca_marks=28.0,
            final_exam=45.5, total_marks=73.5, letter_grade='A',
            grade_point=5.0, remarks='PASS',
            submitted_at=datetime(2025, 2, 15, 12)
        )]
        data, _, _ = records.get_student_grades(
            _auth(domain.UserKind.STUDENT), '7'
        )
        grade = data['grades'][0]
        self.assertEqual(data['total'], 1)
        self.assertEqual(grade['course_code'], 'CS6301')
        self.assertEqual(grade['total_marks'], 73.5)
        self.assertEqual(grade['letter_grade'], 'A')
        self.assertEqual(grade['remark'], 'PASS')
        self.assertEqual(grade['submitted_at'], '2025-02-15T12:00:00')

    @mock.patch(f'{records.__name__}.datastore')
    def test_timetable(self, mock_datastore):
        """The timetable names the current semester."""
        _mock_datastore(mock_datastore)
        mock_datastore.load_student_timetable.return_value = [LECTURE]
        mock_datastore.load_current_semester.return_value = \
            domain.Semester('2024/2025 - Semester II', '2024/2025', 2,
                            date(2025, 3, 1), date(2025, 8, 31), True)
        data, _, _ = records.get_student_timetable(
            _auth(domain.UserKind.STUDENT), '7'
        )
        self.assertEqual(data['semester'], '2024/2025 - Semester II')
        self.assertEqual(data['timetable'][0]['lecturer'], 'Joseph Mkunda')
        self.assertEqual(data['timetable'][0]['day'], 'Monday')

    @mock.patch(f'{records.__name__}.datastore')
    def test_timetable_without_semester(self, mock_datastore):
        """Without a current semester the timetable is empty."""
        _mock_datastore(mock_datastore)
        mock_datastore.load_student_timetable.return_value = []
        mock_datastore.load_current_semester.side_effect = \
            datastore.NoSuchSemester
        data, code, _ = records.get_student_timetable(
            _auth(domain.UserKind.STUDENT), '7'
        )
        self.assertEqual(code, HTTPStatus.OK)
        self.assertEqual(data['timetable'], [])
        self.assertIsNone(data['semester'])


class TestFacultyCourses(TestCase):
    @mock.patch(f'{records.__name__}.datastore')
    def test_courses(self, mock_datastore):
        """Each course appears once per semester."""
        _mock_datastore(mock_datastore)
        mock_datastore.load_faculty_lectures.return_value = [
            LECTURE,
            LECTURE._replace(day_of_week='Thursday'),
            LECTURE._replace(semester='2024/2025 - Semester I'),
        ]
        data, code, _ = records.get_faculty_courses(
            _auth(domain.UserKind.STUDENT), '1'
        )
        self.assertEqual(code, HTTPStatus.OK)
        self.assertEqual(data['faculty_id'], '1')
        self.assertEqual(data['total'], 2)
        self.assertEqual(data['courses'][0]['role'], 'Lecturer')
        self.assertEqual([c['semester'] for c in data['courses']],
                         ['2024/2025 - Semester II',
                          '2024/2025 - Semester I'])

    @mock.patch(f'{records.__name__}.datastore')
    def test_unknown_faculty(self, mock_datastore):
        _mock_datastore(mock_datastore)
        mock_datastore.load_faculty.side_effect = datastore.NoSuchFaculty
        with self.assertRaises(NotFound) as ctx:
            records.get_faculty_courses(_auth(domain.UserKind.ADMIN), '99')
        self.assertEqual(ctx.exception.description, 'faculty not found')
        with self.assertRaises(BadRequest):
            records.get_faculty_courses(_auth(domain.UserKind.ADMIN), 'x')
