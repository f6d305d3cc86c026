"""Provides Flask integration for the protected REST API."""

import logging

from flask import Blueprint, Response, current_app, jsonify, request

from ..auth.decorators import protected
from ..controllers import catalogue, profiles, records
from ..domain import UserKind

logger = logging.getLogger(__name__)

blueprint = Blueprint('api', __name__, url_prefix='')


def _respond(data: dict, code: int, headers: dict) -> Response:
    response: Response = jsonify(data)
    response.status_code = code
    response.headers.extend(headers)
    return response


@blueprint.route('/health', methods=['GET'])
def health() -> Response:
    """Get if the app is running."""
    return jsonify(status='ok', service='mock-sims',
                   version=current_app.config['APP_VERSION'])


@blueprint.route('/api/me', methods=['GET'])
@protected()
def me() -> Response:
    """Identity of the user on whose behalf the token was issued."""
    return _respond(*profiles.get_me(request.auth))


@blueprint.route('/api/students/me', methods=['GET'])
@protected(UserKind.STUDENT)
def student_me() -> Response:
    """Profile of the authenticated student."""
    return _respond(*profiles.get_student(request.auth))


@blueprint.route('/api/faculty/me', methods=['GET'])
@protected(UserKind.FACULTY)
def faculty_me() -> Response:
    """Profile of the authenticated lecturer."""
    return _respond(*profiles.get_faculty(request.auth))


@blueprint.route('/api/admin/me', methods=['GET'])
@protected(UserKind.ADMIN)
def admin_me() -> Response:
    """Profile of the authenticated administrator."""
    return _respond(*profiles.get_admin(request.auth))


@blueprint.route('/api/students/<student_id>/courses', methods=['GET'])
@protected()
def student_courses(student_id: str) -> Response:
    """Courses a student is or was enrolled in."""
    return _respond(*records.get_student_courses(request.auth, student_id))


@blueprint.route('/api/students/<student_id>/grades', methods=['GET'])
@protected()
def student_grades(student_id: str) -> Response:
    """A student's transcript."""
    return _respond(*records.get_student_grades(request.auth, student_id))


@blueprint.route('/api/students/<student_id>/timetable', methods=['GET'])
@protected()
def student_timetable(student_id: str) -> Response:
    """A student's lectures for the current semester."""
    return _respond(*records.get_student_timetable(request.auth,
                                                   student_id))


@blueprint.route('/api/faculty/<faculty_id>/courses', methods=['GET'])
@protected()
def faculty_courses(faculty_id: str) -> Response:
    """Courses a lecturer teaches."""
    return _respond(*records.get_faculty_courses(request.auth, faculty_id))


@blueprint.route('/api/courses', methods=['GET'])
@protected()
def courses() -> Response:
    """One page of the course catalogue."""
    return _respond(*catalogue.list_courses(request.args))


@blueprint.route('/api/courses/<code>', methods=['GET'])
@protected()
def course(code: str) -> Response:
    return _respond(*catalogue.get_course(code))


@blueprint.route('/api/courses/<code>/lectures', methods=['GET'])
@protected()
def course_lectures(code: str) -> Response:
    return _respond(*catalogue.get_course_lectures(code))


@blueprint.route('/api/courses/<code>/students', methods=['GET'])
@protected(UserKind.FACULTY, UserKind.ADMIN)
def course_students(code: str) -> Response:
    """Roster of a course; not visible to students."""
    return _respond(*catalogue.get_course_students(code))


@blueprint.route('/api/colleges', methods=['GET'])
@protected()
def colleges() -> Response:
    return _respond(*catalogue.list_colleges())


@blueprint.route('/api/departments', methods=['GET'])
@protected()
def departments() -> Response:
    return _respond(*catalogue.list_departments(request.args))


@blueprint.route('/api/programs', methods=['GET'])
@protected()
def programs() -> Response:
    return _respond(*catalogue.list_programs(request.args))
