"""Controllers for the profile of the user on whose behalf the LMS acts."""

import logging
from http import HTTPStatus

from werkzeug.exceptions import NotFound

from . import ResponseData
from .. import domain
from ..services import datastore

logger = logging.getLogger(__name__)


def get_me(auth: domain.Authorization) -> ResponseData:
    """Describe the authenticated user, whatever their kind."""
    user = auth.user
    data = {
        'user_id': user.user_id,
        'email': user.email,
        'user_type': user.kind.value,
        'scope': auth.token.scope,
    }
    return data, HTTPStatus.OK, {}


def get_student(auth: domain.Authorization) -> ResponseData:
    """Get the student profile of the authenticated user."""
    student = _load_profile(auth.user, domain.StudentProfile)
    data = {
        'student_id': student.student_id,
        'reg_number': student.reg_number,
        'name': student.full_name,
        'first_name': student.first_name,
        'middle_name': student.middle_name,
        'last_name': student.last_name,
        'email': auth.user.email,
        'program': {
            'code': student.program_code,
            'name': student.program_name,
        },
        'year_of_study': student.year_of_study,
        'gpa': student.gpa,
        'enrollment_status': student.enrollment_status,
        'payment_status': student.payment_status,
        'admission_year': student.admission_year,
    }
    return data, HTTPStatus.OK, {}


def get_faculty(auth: domain.Authorization) -> ResponseData:
    """Get the faculty profile of the authenticated user."""
    faculty = _load_profile(auth.user, domain.FacultyProfile)
    data = {
        'faculty_id': faculty.faculty_id,
        'staff_id': faculty.staff_id,
        'first_name': faculty.first_name,
        'middle_name': faculty.middle_name,
        'last_name': faculty.last_name,
        'email': auth.user.email,
        'department': faculty.department,
        'rank': faculty.rank,
        'specialization': faculty.specialization,
    }
    return data, HTTPStatus.OK, {}


def get_admin(auth: domain.Authorization) -> ResponseData:
    """Get the admin profile of the authenticated user."""
    admin = _load_profile(auth.user, domain.AdminProfile)
    data = {
        'admin_id': admin.admin_id,
        'first_name': admin.first_name,
        'last_name': admin.last_name,
        'email': auth.user.email,
        'role': admin.role,
    }
    return data, HTTPStatus.OK, {}


def _load_profile(user: domain.User, expected: type) -> domain.Profile:
    label = user.kind.value
    try:
        profile = datastore.load_profile(user)
    except (datastore.NoSuchProfile, datastore.NoSuchUser) as e:
        logger.error('User %s has no %s profile: %s', user.user_id, label, e)
        raise NotFound(f'{label} profile not found') from e
    if not isinstance(profile, expected):
        raise NotFound(f'{label} profile not found')
    return profile
