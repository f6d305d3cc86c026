"""
Controllers for student records and teaching assignments.

A student may only read their own records. Faculty and administrators may
read any student's records. Teaching assignments are visible to any
authenticated user.
"""

import logging
from http import HTTPStatus
from typing import Optional

from werkzeug.exceptions import BadRequest, Forbidden, NotFound

from . import ResponseData
from .catalogue import course_summary
from .. import domain
from ..services import datastore

logger = logging.getLogger(__name__)

NOT_YOUR_RECORD = 'forbidden - insufficient permissions'


def get_student_courses(auth: domain.Authorization,
                        student_id: str) -> ResponseData:
    """Get every course a student is or was enrolled in."""
    student_id = _check_student_access(auth, student_id)
    enrollments = datastore.load_student_enrollments(student_id)
    courses = []
    for enrollment in enrollments:
        course = enrollment.course
        courses.append({
            'course_code': course.code,
            'course_name': course.name,
            'credits': course.credits,
            'level': course.level,
            'department': course.department_name,
            'semester': enrollment.semester,
            'status': enrollment.status,
            'enrolled_at': enrollment.enrolled_at.isoformat(),
        })
    data = {'student_id': student_id, 'courses': courses,
            'total': len(courses)}
    return data, HTTPStatus.OK, {}


def get_student_grades(auth: domain.Authorization,
                       student_id: str) -> ResponseData:
    """Get a student's transcript."""
    student_id = _check_student_access(auth, student_id)
    grades = datastore.load_student_grades(student_id)
    data = {
        'student_id': student_id,
        'grades': [{
            'course_code': grade.course.code,
            'course_name': grade.course.name,
            'credits': grade.course.credits,
            'ca_marks': grade.ca_marks,
            'final_exam': grade.final_exam,
            'total_marks': grade.total_marks,
            'letter_grade': grade.letter_grade,
            'grade_point': grade.grade_point,
            'semester': grade.semester,
            'remark': grade.remarks,
            'submitted_at': grade.submitted_at.isoformat()
            if grade.submitted_at else None,
        } for grade in grades],
        'total': len(grades),
    }
    return data, HTTPStatus.OK, {}


def get_student_timetable(auth: domain.Authorization,
                          student_id: str) -> ResponseData:
    """Get this semester's weekly lectures for a student."""
    student_id = _check_student_access(auth, student_id)
    lectures = datastore.load_student_timetable(student_id)
    data = {
        'student_id': student_id,
        'timetable': [{
            'course_code': lecture.course.code,
            'course_name': lecture.course.name,
            'day': lecture.day_of_week,
            'start_time': lecture.start_time,
            'end_time': lecture.end_time,
            'venue': lecture.venue,
            'lecturer': lecture.lecturer,
            'semester': lecture.semester,
        } for lecture in lectures],
        'semester': _current_semester(),
    }
    return data, HTTPStatus.OK, {}


def get_faculty_courses(auth: domain.Authorization,
                        faculty_id: str) -> ResponseData:
    """Get the courses a lecturer teaches, once per semester."""
    faculty_id = _parse_id(faculty_id, 'faculty')
    try:
        datastore.load_faculty(faculty_id)
    except datastore.NoSuchFaculty as e:
        raise NotFound('faculty not found') from e
    logger.debug('User %s reads courses of faculty %s', auth.user.user_id,
                 faculty_id)

    courses = []
    seen = set()
    for lecture in datastore.load_faculty_lectures(faculty_id):
        if (lecture.course.code, lecture.semester) in seen:
            continue
        seen.add((lecture.course.code, lecture.semester))
        summary = course_summary(lecture.course)
        courses.append({
            'course_code': summary['code'],
            'course_name': summary['name'],
            'credits': summary['credits'],
            'level': summary['level'],
            'department': summary['department'],
            'role': 'Lecturer',
            'semester': lecture.semester,
        })
    data = {'faculty_id': faculty_id, 'courses': courses,
            'total': len(courses)}
    return data, HTTPStatus.OK, {}


def _check_student_access(auth: domain.Authorization,
                          student_id: str) -> str:
    student_id = _parse_id(student_id, 'student')
    if auth.user.kind is domain.UserKind.STUDENT:
        try:
            own = datastore.load_profile(auth.user)
        except (datastore.NoSuchProfile, datastore.NoSuchUser) as e:
            raise Forbidden(NOT_YOUR_RECORD) from e
        if own.student_id != student_id:     # type: ignore
            logger.debug('Student %s may not read records of %s',
                         auth.user.user_id, student_id)
            raise Forbidden(NOT_YOUR_RECORD)

    try:
        datastore.load_student(student_id)
    except datastore.NoSuchStudent as e:
        raise NotFound('student not found') from e
    return student_id


def _parse_id(value: str, label: str) -> str:
    try:
        parsed = int(value)
    except ValueError as e:
        raise BadRequest(f'invalid {label} ID') from e
    if parsed < 1:
        raise BadRequest(f'invalid {label} ID')
    return str(parsed)


def _current_semester() -> Optional[str]:
    try:
        return datastore.load_current_semester().name
    except datastore.NoSuchSemester:
        return None
