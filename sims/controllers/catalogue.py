"""Controllers for the academic catalogue: courses, colleges and programs."""

import logging
from http import HTTPStatus
from typing import Any, Dict, Mapping

from werkzeug.exceptions import NotFound

from . import ResponseData
from .. import domain
from ..services import datastore

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def list_courses(params: Mapping[str, str]) -> ResponseData:
    """
    Get one page of the course catalogue.

    ``page`` counts from 1. ``limit`` falls back to
    :const:`DEFAULT_PAGE_SIZE` if it is missing, not a number, or outside
    1 to :const:`MAX_PAGE_SIZE`.
    """
    page = _int_param(params, 'page', 1)
    limit = _int_param(params, 'limit', DEFAULT_PAGE_SIZE)
    if page < 1:
        page = 1
    if limit < 1 or limit > MAX_PAGE_SIZE:
        limit = DEFAULT_PAGE_SIZE
    courses, total = datastore.list_courses(offset=(page - 1) * limit,
                                            limit=limit)
    data = {
        'courses': [course_summary(course) for course in courses],
        'total': total,
        'page': page,
        'limit': limit,
    }
    return data, HTTPStatus.OK, {}


def get_course(code: str) -> ResponseData:
    """Get the details of a course by its code."""
    course = _load_course(code)
    data = {
        'code': course.code,
        'name': course.name,
        'credits': course.credits,
        'level': course.level,
        'description': course.description,
        'department': {
            'name': course.department_name,
            'code': course.department_code,
        },
        'college': {
            'name': course.college_name,
            'code': course.college_code,
        },
    }
    return data, HTTPStatus.OK, {}


def get_course_lectures(code: str) -> ResponseData:
    """Get the weekly schedule of a course."""
    try:
        lectures = datastore.load_course_lectures(code)
    except datastore.NoSuchCourse as e:
        raise NotFound('course not found') from e
    data = {
        'course_code': code,
        'lectures': [{
            'day': lecture.day_of_week,
            'start_time': lecture.start_time,
            'end_time': lecture.end_time,
            'venue': lecture.venue,
            'capacity': lecture.capacity,
            'lecturer': lecture.lecturer,
            'semester': lecture.semester,
        } for lecture in lectures],
        'total': len(lectures),
    }
    return data, HTTPStatus.OK, {}


def get_course_students(code: str) -> ResponseData:
    """Get the students enrolled in a course."""
    try:
        enrollments = datastore.load_course_enrollments(code)
    except datastore.NoSuchCourse as e:
        raise NotFound('course not found') from e
    data = {
        'course_code': code,
        'students': [{
            'student_id': enrollment.student_id,
            'reg_number': enrollment.reg_number,
            'name': enrollment.student_name,
            'program': enrollment.program_name,
            'year': enrollment.year_of_study,
            'semester': enrollment.semester,
            'status': enrollment.status,
            'enrolled_at': enrollment.enrolled_at.isoformat(),
        } for enrollment in enrollments],
        'total': len(enrollments),
    }
    return data, HTTPStatus.OK, {}


def list_colleges() -> ResponseData:
    """Get every college."""
    colleges = datastore.list_colleges()
    data = {
        'colleges': [{
            'id': college.college_id,
            'code': college.code,
            'name': college.name,
            'short_name': college.short_name,
            'dean': college.dean,
            'departments_count': college.departments_count,
        } for college in colleges],
        'total': len(colleges),
    }
    return data, HTTPStatus.OK, {}


def list_departments(params: Mapping[str, str]) -> ResponseData:
    """Get every department, or only those of ``college_id``."""
    college_id = _int_param(params, 'college_id', 0)
    departments = datastore.list_departments(
        str(college_id) if college_id > 0 else None
    )
    data = {
        'departments': [{
            'id': department.department_id,
            'code': department.code,
            'name': department.name,
            'head': department.head,
            'college': department.college_name,
            'programs_count': department.programs_count,
        } for department in departments],
        'total': len(departments),
    }
    return data, HTTPStatus.OK, {}


def list_programs(params: Mapping[str, str]) -> ResponseData:
    """Get programs, by ``department_id`` or by degree ``level``."""
    department_id = _int_param(params, 'department_id', 0)
    programs = datastore.list_programs(
        department_id=str(department_id) if department_id > 0 else None,
        degree_level=params.get('level') or None
    )
    data = {
        'programs': [{
            'id': program.program_id,
            'code': program.code,
            'name': program.name,
            'degree_level': program.degree_level,
            'nta_level': program.nta_level,
            'duration': program.duration,
            'tuition_fees': program.tuition_fees,
            'department': program.department_name,
            'college': program.college_name,
        } for program in programs],
        'total': len(programs),
    }
    return data, HTTPStatus.OK, {}


def course_summary(course: domain.Course) -> Dict[str, Any]:
    """The fields of a course that appear in every listing."""
    return {
        'code': course.code,
        'name': course.name,
        'credits': course.credits,
        'level': course.level,
        'description': course.description,
        'department': course.department_name,
        'college': course.college_name,
    }


def _load_course(code: str) -> domain.Course:
    try:
        return datastore.load_course(code)
    except datastore.NoSuchCourse as e:
        logger.debug('No such course: %s', code)
        raise NotFound('course not found') from e


def _int_param(params: Mapping[str, str], key: str, default: int) -> int:
    try:
        return int(params.get(key, default))
    except (TypeError, ValueError):
        return default
