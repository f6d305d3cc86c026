"""
Commands for populating and maintaining a development database.

.. warning: DO NOT USE THIS ON A PRODUCTION DATABASE.

``seed`` registers the LMS client, the academic catalogue, a set of demo
users, and their lectures, enrollments and grades. Every demo user has the
password ``password123``. Running it twice is harmless: clients and
catalogue entries are updated in place, and existing users and records are
left alone.

``purge`` deletes authorization codes that have expired or been used, and
access tokens whose refresh window (``OAUTH_REFRESH_TOKEN_EXPIRY``) has also
passed.
"""

import logging
import random
from datetime import datetime, time, timedelta
from typing import Any, Dict, Iterable, List, Mapping, NamedTuple, \
    Optional, Tuple

import click
from flask import Flask

from . import domain, passwords
from .factory import create_web_app
from .seed_data import COLLEGES, COURSES, DEPARTMENTS, ENROLLMENT_STATUSES, \
    FIRST_NAMES, LAST_NAMES, LECTURE_DAYS, LECTURE_SLOTS, LECTURERS, \
    MIDDLE_NAMES, PAYMENT_STATUSES, PROGRAMS, SEMESTERS, VENUES
from .services import datastore

logger = logging.getLogger(__name__)

DEMO_PASSWORD = 'password123'
SEED = 20241002
"""Seed for the synthetic data; unrelated to any token material."""

STUDENT_PROGRAMS = ['MB011', 'MB006', 'MD010', 'MB020']
"""Programs in which synthetic students are placed, in rotation."""

COURSES_PER_SEMESTER = 6

GRADE_BOUNDARIES = [(70, 'A', 5.0, 'PASS'), (65, 'B+', 4.0, 'PASS'),
                    (60, 'B', 3.0, 'PASS'), (50, 'C', 2.0, 'PASS'),
                    (40, 'D', 1.0, 'SUPP'), (0, 'F', 0.0, 'RETAKE')]
"""Lowest total mark for each letter grade, its grade point and remark."""

_PROGRAMS = {program.code: program for program in PROGRAMS}
_DEPARTMENTS = {department.code: department for department in DEPARTMENTS}


class Records(NamedTuple):
    """What :func:`seed_records` wrote."""

    lectures: int
    enrollments: int
    grades: int


def registration_number(admission_year: int, college_code: int,
                        sequence: int) -> str:
    """Registration numbers look like ``YYCCSSSSSSSSS``."""
    return f'{admission_year % 100:02d}{college_code:02d}{sequence:09d}'


def college_code(program_code: str) -> int:
    """The numeric code of the college that offers a program."""
    department = _DEPARTMENTS[_PROGRAMS[program_code].department_code]
    return int(department.college_code)


def letter_grade(total: float) -> Tuple[str, float, str]:
    """The letter grade, grade point and remark for a total mark."""
    for lowest, letter, point, remark in GRADE_BOUNDARIES:
        if total >= lowest:
            return letter, point, remark
    raise ValueError(f'Negative total mark {total}')


def seed_client(config: Mapping[str, Any]) -> domain.Client:
    """Register (or update) the LMS client described by ``config``."""
    client = domain.Client(
        client_id=config['OAUTH_CLIENT_ID'],
        name=config['OAUTH_CLIENT_NAME'],
        redirect_uris=[uri.strip() for uri
                       in config['OAUTH_REDIRECT_URIS'].split(',')
                       if uri.strip()],
        scopes=config['OAUTH_DEFAULT_SCOPE'].split(),
        client_secret=passwords.hash_password(config['OAUTH_CLIENT_SECRET'])
    )
    datastore.save_client(client)
    logger.info('Seeded client %s', client.client_id)
    return client


def seed_catalogue() -> int:
    """
    Create or update colleges, departments, programs, courses, semesters
    and venues.

    Returns the number of courses in the catalogue.
    """
    for college in COLLEGES:
        datastore.save_college(college)
    for department in DEPARTMENTS:
        datastore.save_department(department)
    for program in PROGRAMS:
        datastore.save_program(program)
    for course, program_codes in COURSES:
        datastore.save_course(course, program_codes)
    for semester in SEMESTERS:
        datastore.save_semester(semester)
    for venue in VENUES:
        datastore.save_venue(venue)
    logger.info('Seeded %i colleges, %i departments, %i programs and %i'
                ' courses', len(COLLEGES), len(DEPARTMENTS), len(PROGRAMS),
                len(COURSES))
    return len(COURSES)


def seed_users(n_students: int = 20,
               rng: Optional[random.Random] = None) -> List[str]:
    """
    Create the demo users, plus ``n_students`` synthetic students.

    Parameters
    ----------
    n_students : int
        Number of synthetic students to generate in addition to the fixed
        demo accounts.
    rng : :class:`random.Random`
        Source of synthetic values. Defaults to one seeded with
        :const:`SEED`, so the same database comes out every time.

    Returns
    -------
    list
        IDs of the users that were created by this call.

    """
    rng = rng or random.Random(SEED)
    hashed = passwords.hash_password(DEMO_PASSWORD)
    created = []

    fixed = [
        (domain.User(user_id='', email='john.doe@must.ac.tz',
                     kind=domain.UserKind.STUDENT, password_hash=hashed),
         domain.StudentProfile(
             student_id='', user_id='',
             reg_number=registration_number(2022, college_code('MB011'),
                                            10000001),
             first_name='John', middle_name='Doe', last_name='Mwamba',
             program_code='MB011', program_name=_PROGRAMS['MB011'].name,
             year_of_study=3, admission_year=2022, gpa=3.8,
             enrollment_status='active', payment_status='paid'
         )),
        (domain.User(user_id='', email='admin@must.ac.tz',
                     kind=domain.UserKind.ADMIN, password_hash=hashed),
         domain.AdminProfile(admin_id='', user_id='', first_name='System',
                             last_name='Administrator', role='Registrar')),
    ]
    for lecturer in LECTURERS:
        fixed.append((
            domain.User(user_id='', email=lecturer.email,
                        kind=domain.UserKind.FACULTY, password_hash=hashed),
            domain.FacultyProfile(
                faculty_id='', user_id='', staff_id=lecturer.staff_id,
                first_name=lecturer.first_name,
                middle_name=lecturer.middle_name,
                last_name=lecturer.last_name,
                department=_DEPARTMENTS[lecturer.department_code].name,
                rank=lecturer.rank,
                specialization=lecturer.specialization
            )
        ))

    for i in range(n_students):
        program = _PROGRAMS[STUDENT_PROGRAMS[i % len(STUDENT_PROGRAMS)]]
        admission_year = rng.choice([2022, 2023, 2024])
        sequence = 20000000 + i + 1
        first_name = rng.choice(FIRST_NAMES)
        last_name = rng.choice(LAST_NAMES)
        email = f'{first_name}.{last_name}{sequence % 1000}@must.ac.tz'
        fixed.append((
            domain.User(user_id='', email=email.lower(),
                        kind=domain.UserKind.STUDENT, password_hash=hashed),
            domain.StudentProfile(
                student_id='', user_id='',
                reg_number=registration_number(admission_year,
                                               college_code(program.code),
                                               sequence),
                first_name=first_name,
                middle_name=rng.choice(MIDDLE_NAMES),
                last_name=last_name,
                program_code=program.code,
                program_name=program.name,
                year_of_study=2025 - admission_year,
                admission_year=admission_year,
                gpa=round(rng.uniform(2.5, 4.9), 2),
                enrollment_status=rng.choice(ENROLLMENT_STATUSES),
                payment_status=rng.choice(PAYMENT_STATUSES)
            )
        ))

    for user, profile in fixed:
        try:
            datastore.load_user_by_email(user.email)
        except datastore.NoSuchUser:
            created.append(datastore.save_user(user, profile))
            continue
        logger.debug('User %s already exists', user.email)
    logger.info('Seeded %i new users', len(created))
    return created


def select_courses(program_code: str, year_of_study: int,
                   exclude: Iterable[str] = ()) -> List[str]:
    """
    Pick up to :const:`COURSES_PER_SEMESTER` courses for a student.

    Courses at the level of the student's year come first, then the level
    below, the level above, and finally any other level.
    """
    by_level: Dict[int, List[str]] = {}
    for course, program_codes in COURSES:
        if program_code in program_codes:
            by_level.setdefault(course.level, []).append(course.code)

    level = max(year_of_study, 1) * 100
    chosen: List[str] = []
    skip = set(exclude)
    for wanted in [level, level - 100, level + 100, 300, 200, 100]:
        for code in by_level.get(wanted, []):
            if code in skip or code in chosen:
                continue
            chosen.append(code)
            if len(chosen) == COURSES_PER_SEMESTER:
                return chosen
    return chosen


def seed_records(rng: Optional[random.Random] = None) -> Records:
    """
    Schedule lectures, enroll every student and grade the last semester.

    Each course gets one weekly lecture in the current semester, taught by a
    lecturer from its department if there is one. Each student is enrolled
    in courses for the current semester and, with completed status and a
    grade, for the semester before it. Requires :func:`seed_catalogue` and
    :func:`seed_users` to have been run.
    """
    rng = rng or random.Random(SEED)
    current = next(sem for sem in SEMESTERS if sem.is_current)
    previous = max((sem for sem in SEMESTERS
                    if sem.start_date < current.start_date),
                   key=lambda sem: sem.start_date)

    n_lectures = 0
    for i, (course, _) in enumerate(COURSES):
        pool = [lecturer for lecturer in LECTURERS
                if lecturer.department_code == course.department_code]
        lecturer = (pool or LECTURERS)[i % len(pool or LECTURERS)]
        start_time, end_time = LECTURE_SLOTS[i % len(LECTURE_SLOTS)]
        datastore.save_lecture(course.code, lecturer.staff_id, current.name,
                               VENUES[i % len(VENUES)],
                               LECTURE_DAYS[i % len(LECTURE_DAYS)],
                               start_time, end_time)
        n_lectures += 1

    n_enrollments = n_grades = 0
    submitted_at = datetime.combine(previous.end_date, time(12))
    for student in datastore.list_students():
        completed = select_courses(student.program_code,
                                   student.year_of_study - 1)
        ongoing = select_courses(student.program_code,
                                 student.year_of_study, exclude=completed)
        for code in completed:
            enrollment_id = datastore.enroll_student(
                student.student_id, code, previous.name, 'completed',
                datetime.combine(previous.start_date - timedelta(days=7),
                                 time(9))
            )
            n_enrollments += 1
            total = round(rng.uniform(52, 89), 2)
            if int(enrollment_id) % 7 == 0:
                total = round(rng.uniform(36, 55), 2)
            ca_marks = round(total * 0.4, 2)
            letter, point, remark = letter_grade(total)
            if datastore.save_grade(enrollment_id, ca_marks,
                                    round(total - ca_marks, 2), letter,
                                    point, remark, submitted_at):
                n_grades += 1
        for code in ongoing:
            datastore.enroll_student(
                student.student_id, code, current.name, 'active',
                datetime.combine(current.start_date - timedelta(days=7),
                                 time(9))
            )
            n_enrollments += 1
    logger.info('Seeded %i lectures, %i enrollments and %i new grades',
                n_lectures, n_enrollments, n_grades)
    return Records(n_lectures, n_enrollments, n_grades)


def _app(ctx: click.Context) -> Flask:
    if ctx.obj is None:
        ctx.obj = create_web_app()
    app: Flask = ctx.obj
    return app


@click.group()
def cli() -> None:
    """Manage the SIMS development database."""


@cli.command()
@click.option('--students', default=20, show_default=True,
              help='Number of synthetic students to generate.')
@click.pass_context
def seed(ctx: click.Context, students: int) -> None:
    """Create tables, the LMS client, the catalogue, and demo users."""
    app = _app(ctx)
    with app.app_context():
        datastore.create_all()
        client = seed_client(app.config)
        n_courses = seed_catalogue()
        created = seed_users(students)
        records = seed_records()
    click.echo(f'Registered client {client.client_id} with redirect URIs'
               f' {", ".join(client.redirect_uris)}')
    click.echo(f'Catalogue has {n_courses} courses;'
               f' scheduled {records.lectures} lectures')
    click.echo(f'Created {len(created)} users and {records.grades} grades.'
               f' Demo login: john.doe@must.ac.tz / {DEMO_PASSWORD}')


@cli.command()
@click.pass_context
def purge(ctx: click.Context) -> None:
    """Delete used or expired codes, and tokens past their refresh window."""
    app = _app(ctx)
    with app.app_context():
        n_codes, n_tokens = datastore.purge_expired(
            refresh_expires_in=app.config['OAUTH_REFRESH_TOKEN_EXPIRY']
        )
    click.echo(f'Deleted {n_codes} authorization codes and {n_tokens}'
               f' access tokens')


if __name__ == '__main__':
    cli()
