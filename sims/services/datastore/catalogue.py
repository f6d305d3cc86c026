"""
Academic catalogue and student records.

Colleges, departments, programs and courses make up the catalogue. Lectures,
enrollments and grades tie courses to people and semesters. All of it is
written by the seed commands and only read by the API.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Query

from . import util, models
from ... import domain

logger = logging.getLogger(__name__)


class NoSuchCollege(RuntimeError):
    """A non-existant :class:`domain.College` was requested."""


class NoSuchDepartment(RuntimeError):
    """A non-existant :class:`domain.Department` was requested."""


class NoSuchCourse(RuntimeError):
    """A non-existant :class:`domain.Course` was requested."""


class NoSuchSemester(RuntimeError):
    """A non-existant :class:`domain.Semester` was requested."""


class NoSuchVenue(RuntimeError):
    """A non-existant :class:`domain.Venue` was requested."""


class NoSuchStudent(RuntimeError):
    """No student has the requested ID."""


class NoSuchFaculty(RuntimeError):
    """No lecturer has the requested ID or staff ID."""


class NoSuchEnrollment(RuntimeError):
    """A non-existant :class:`domain.Enrollment` was requested."""


# Writes. Each is an upsert on the natural key, so seeding can be repeated.

def save_college(college: domain.College) -> str:
    """Create or update a college, keyed on its code."""
    with util.transaction() as dbsession:
        db_college = dbsession.query(models.DBCollege) \
            .filter(models.DBCollege.code == college.code) \
            .first()
        if db_college is None:
            db_college = models.DBCollege(code=college.code)
            dbsession.add(db_college)
        db_college.name = college.name
        db_college.short_name = college.short_name
        db_college.dean = college.dean
        dbsession.commit()
        return str(db_college.college_id)


def save_department(department: domain.Department) -> str:
    """Create or update a department, keyed on its code."""
    with util.transaction() as dbsession:
        db_college = _get_college(dbsession, department.college_code)
        db_department = dbsession.query(models.DBDepartment) \
            .filter(models.DBDepartment.code == department.code) \
            .first()
        if db_department is None:
            db_department = models.DBDepartment(code=department.code)
            dbsession.add(db_department)
        db_department.college = db_college
        db_department.name = department.name
        db_department.head = department.head
        dbsession.commit()
        return str(db_department.department_id)


def save_program(program: domain.Program) -> str:
    """Create or update a program, keyed on its code."""
    with util.transaction() as dbsession:
        db_department = _get_department(dbsession, program.department_code)
        db_program = dbsession.query(models.DBProgram) \
            .filter(models.DBProgram.code == program.code) \
            .first()
        if db_program is None:
            db_program = models.DBProgram(code=program.code)
            dbsession.add(db_program)
        db_program.department = db_department
        db_program.name = program.name
        db_program.degree_level = program.degree_level
        db_program.nta_level = program.nta_level
        db_program.duration = program.duration
        db_program.tuition_fees = program.tuition_fees
        dbsession.commit()
        return str(db_program.program_id)


def save_semester(semester: domain.Semester) -> None:
    """Create or update a semester, keyed on its name."""
    with util.transaction() as dbsession:
        db_semester = dbsession.query(models.DBSemester) \
            .filter(models.DBSemester.name == semester.name) \
            .first()
        if db_semester is None:
            db_semester = models.DBSemester(name=semester.name)
            dbsession.add(db_semester)
        db_semester.academic_year = semester.academic_year
        db_semester.number = semester.number
        db_semester.start_date = semester.start_date
        db_semester.end_date = semester.end_date
        db_semester.is_current = semester.is_current


def save_venue(venue: domain.Venue) -> None:
    """Create or update a venue, keyed on its building and room."""
    with util.transaction() as dbsession:
        db_venue = _find_venue(dbsession, venue.building, venue.room_number)
        if db_venue is None:
            db_venue = models.DBVenue(building=venue.building,
                                      room_number=venue.room_number)
            dbsession.add(db_venue)
        db_venue.capacity = venue.capacity
        db_venue.venue_type = venue.venue_type


def save_course(course: domain.Course, program_codes: Iterable[str]) -> str:
    """
    Create or update a course, keyed on its code.

    The course is attached to exactly the programs in ``program_codes``;
    codes that do not match a program are skipped.
    """
    program_codes = list(program_codes)
    with util.transaction() as dbsession:
        db_department = _get_department(dbsession, course.department_code)
        db_course = dbsession.query(models.DBCourse) \
            .filter(models.DBCourse.code == course.code) \
            .first()
        if db_course is None:
            db_course = models.DBCourse(code=course.code)
            dbsession.add(db_course)
        db_course.department = db_department
        db_course.name = course.name
        db_course.credits = course.credits
        db_course.level = course.level
        db_course.description = course.description
        db_course.programs = dbsession.query(models.DBProgram) \
            .filter(models.DBProgram.code.in_(program_codes)) \
            .all()
        dbsession.commit()
        return str(db_course.course_id)


def save_lecture(course_code: str, staff_id: str, semester_name: str,
                 venue: domain.Venue, day_of_week: str, start_time: str,
                 end_time: str) -> None:
    """
    Schedule a weekly lecture.

    A course has at most one lecture per semester, day and start time; if
    that slot is already taken, its lecturer, venue and end time are
    updated.
    """
    with util.transaction() as dbsession:
        db_course = _get_course(dbsession, course_code)
        db_semester = _get_semester(dbsession, semester_name)
        db_faculty = dbsession.query(models.DBFaculty) \
            .filter(models.DBFaculty.staff_id == staff_id) \
            .first()
        if db_faculty is None:
            raise NoSuchFaculty(f'No lecturer with staff ID {staff_id}')
        db_venue = _find_venue(dbsession, venue.building, venue.room_number)
        if db_venue is None:
            raise NoSuchVenue(f'No venue {venue.label}')

        db_lecture = dbsession.query(models.DBLecture) \
            .filter(models.DBLecture.course_id == db_course.course_id) \
            .filter(models.DBLecture.semester_id == db_semester.semester_id) \
            .filter(models.DBLecture.day_of_week == day_of_week) \
            .filter(models.DBLecture.start_time == start_time) \
            .first()
        if db_lecture is None:
            db_lecture = models.DBLecture(course=db_course,
                                          semester=db_semester,
                                          day_of_week=day_of_week,
                                          start_time=start_time)
            dbsession.add(db_lecture)
        db_lecture.faculty = db_faculty
        db_lecture.venue = db_venue
        db_lecture.end_time = end_time


def enroll_student(student_id: str, course_code: str, semester_name: str,
                   status: str, enrolled_at: datetime) -> str:
    """
    Enroll a student in a course for a semester.

    If the student is already enrolled, the existing enrollment is left
    alone and its ID is returned.
    """
    with util.transaction() as dbsession:
        db_student = get_student(dbsession, student_id)
        db_course = _get_course(dbsession, course_code)
        db_semester = _get_semester(dbsession, semester_name)
        db_enrollment = dbsession.query(models.DBEnrollment) \
            .filter(models.DBEnrollment.student_id == db_student.student_id) \
            .filter(models.DBEnrollment.course_id == db_course.course_id) \
            .filter(models.DBEnrollment.semester_id
                    == db_semester.semester_id) \
            .first()
        if db_enrollment is None:
            db_enrollment = models.DBEnrollment(
                student=db_student,
                course=db_course,
                semester=db_semester,
                status=status,
                enrolled_at=enrolled_at
            )
            dbsession.add(db_enrollment)
            dbsession.commit()
        return str(db_enrollment.enrollment_id)


def save_grade(enrollment_id: str, ca_marks: float, final_exam: float,
               letter_grade: str, grade_point: float, remarks: str = '',
               submitted_at: Optional[datetime] = None) -> bool:
    """
    Record the grade for an enrollment, unless one is already recorded.

    Returns
    -------
    bool
        True if a grade was created.

    """
    with util.transaction() as dbsession:
        db_enrollment = dbsession.get(models.DBEnrollment, int(enrollment_id))
        if db_enrollment is None:
            raise NoSuchEnrollment(f'No enrollment {enrollment_id}')
        if db_enrollment.grade is not None:
            return False
        db_enrollment.grade = models.DBGrade(
            ca_marks=ca_marks,
            final_exam=final_exam,
            total_marks=round(ca_marks + final_exam, 2),
            letter_grade=letter_grade,
            grade_point=grade_point,
            remarks=remarks,
            submitted_at=submitted_at
        )
        return True


# Reads.

def list_colleges() -> List[domain.College]:
    """All colleges, in order of their codes."""
    with util.transaction() as dbsession:
        db_colleges = dbsession.query(models.DBCollege) \
            .order_by(models.DBCollege.code) \
            .all()
        return [_to_college(db_college) for db_college in db_colleges]


def list_departments(college_id: Optional[str] = None) \
        -> List[domain.Department]:
    """All departments, or only those of one college."""
    with util.transaction() as dbsession:
        query = dbsession.query(models.DBDepartment)
        if college_id:
            query = query.filter(models.DBDepartment.college_id
                                 == int(college_id))
        db_departments = query.order_by(models.DBDepartment.department_id) \
            .all()
        return [_to_department(db_dept) for db_dept in db_departments]


def list_programs(department_id: Optional[str] = None,
                  degree_level: Optional[str] = None) -> List[domain.Program]:
    """
    All programs, optionally filtered.

    If ``department_id`` is given, ``degree_level`` is ignored.
    """
    with util.transaction() as dbsession:
        query = dbsession.query(models.DBProgram)
        if department_id:
            query = query.filter(models.DBProgram.department_id
                                 == int(department_id))
        elif degree_level:
            query = query.filter(models.DBProgram.degree_level
                                 == degree_level)
        db_programs = query.order_by(models.DBProgram.code).all()
        return [_to_program(db_program) for db_program in db_programs]


def list_courses(offset: int = 0, limit: int = 20) \
        -> Tuple[List[domain.Course], int]:
    """
    One page of the course catalogue, in order of course code.

    Returns
    -------
    list
        The courses on the page.
    int
        The total number of courses in the catalogue.

    """
    with util.transaction() as dbsession:
        total = dbsession.query(func.count(models.DBCourse.course_id)) \
            .scalar()
        db_courses = dbsession.query(models.DBCourse) \
            .order_by(models.DBCourse.code) \
            .offset(offset) \
            .limit(limit) \
            .all()
        return [_to_course(db_course) for db_course in db_courses], total


def load_course(code: str) -> domain.Course:
    """Load a course by its code."""
    with util.transaction() as dbsession:
        return _to_course(_get_course(dbsession, code))


def load_current_semester() -> domain.Semester:
    """Load the semester that is currently in session."""
    with util.transaction() as dbsession:
        db_semester = dbsession.query(models.DBSemester) \
            .filter(models.DBSemester.is_current.is_(True)) \
            .order_by(models.DBSemester.start_date.desc()) \
            .first()
        if db_semester is None:
            raise NoSuchSemester('No semester is current')
        return _to_semester(db_semester)


def list_semesters() -> List[domain.Semester]:
    """All semesters, oldest first."""
    with util.transaction() as dbsession:
        db_semesters = dbsession.query(models.DBSemester) \
            .order_by(models.DBSemester.start_date) \
            .all()
        return [_to_semester(db_semester) for db_semester in db_semesters]


def load_course_lectures(code: str) -> List[domain.Lecture]:
    """The weekly lectures of a course, in every semester."""
    with util.transaction() as dbsession:
        db_course = _get_course(dbsession, code)
        query = _lectures(dbsession) \
            .filter(models.DBLecture.course_id == db_course.course_id)
        return [_to_lecture(db_lecture) for db_lecture in query.all()]


def load_course_enrollments(code: str) -> List[domain.Enrollment]:
    """Students enrolled in a course, in every semester."""
    with util.transaction() as dbsession:
        db_course = _get_course(dbsession, code)
        db_enrollments = dbsession.query(models.DBEnrollment) \
            .filter(models.DBEnrollment.course_id == db_course.course_id) \
            .order_by(models.DBEnrollment.enrollment_id) \
            .all()
        return [_to_enrollment(db_enr) for db_enr in db_enrollments]


def load_student_enrollments(student_id: str) -> List[domain.Enrollment]:
    """A student's enrollments, most recent semester first."""
    with util.transaction() as dbsession:
        db_student = get_student(dbsession, student_id)
        db_enrollments = dbsession.query(models.DBEnrollment) \
            .join(models.DBSemester) \
            .join(models.DBCourse) \
            .filter(models.DBEnrollment.student_id == db_student.student_id) \
            .order_by(models.DBSemester.start_date.desc(),
                      models.DBCourse.code) \
            .all()
        return [_to_enrollment(db_enr) for db_enr in db_enrollments]


def load_student_grades(student_id: str) -> List[domain.Grade]:
    """Grades for a student's completed enrollments, oldest first."""
    with util.transaction() as dbsession:
        db_student = get_student(dbsession, student_id)
        db_grades = dbsession.query(models.DBGrade) \
            .join(models.DBEnrollment) \
            .join(models.DBSemester) \
            .join(models.DBCourse) \
            .filter(models.DBEnrollment.student_id == db_student.student_id) \
            .order_by(models.DBSemester.start_date, models.DBCourse.code) \
            .all()
        return [_to_grade(db_grade) for db_grade in db_grades]


def load_student_timetable(student_id: str) -> List[domain.Lecture]:
    """Lectures this semester for the courses a student is enrolled in."""
    with util.transaction() as dbsession:
        db_student = get_student(dbsession, student_id)
        enrolled = select(models.DBEnrollment.course_id) \
            .join(models.DBSemester) \
            .where(models.DBEnrollment.student_id == db_student.student_id) \
            .where(models.DBEnrollment.status == 'active') \
            .where(models.DBSemester.is_current.is_(True))
        query = _lectures(dbsession) \
            .filter(models.DBSemester.is_current.is_(True)) \
            .filter(models.DBLecture.course_id.in_(enrolled))
        return [_to_lecture(db_lecture) for db_lecture in query.all()]


def load_faculty_lectures(faculty_id: str) -> List[domain.Lecture]:
    """Every lecture taught by a lecturer."""
    with util.transaction() as dbsession:
        db_faculty = get_faculty(dbsession, faculty_id)
        query = _lectures(dbsession) \
            .filter(models.DBLecture.faculty_id == db_faculty.faculty_id)
        return [_to_lecture(db_lecture) for db_lecture in query.all()]


def _lectures(dbsession) -> Query:
    return dbsession.query(models.DBLecture) \
        .join(models.DBSemester) \
        .join(models.DBCourse) \
        .order_by(models.DBSemester.start_date.desc(),
                  models.DBLecture.day_of_week,
                  models.DBLecture.start_time,
                  models.DBCourse.code)


def _get_college(dbsession, code: str) -> models.DBCollege:
    db_college = dbsession.query(models.DBCollege) \
        .filter(models.DBCollege.code == code) \
        .first()
    if db_college is None:
        raise NoSuchCollege(f'No college with code {code}')
    return db_college


def _get_department(dbsession, code: str) -> models.DBDepartment:
    db_department = dbsession.query(models.DBDepartment) \
        .filter(models.DBDepartment.code == code) \
        .first()
    if db_department is None:
        raise NoSuchDepartment(f'No department with code {code}')
    return db_department


def _get_course(dbsession, code: str) -> models.DBCourse:
    db_course = dbsession.query(models.DBCourse) \
        .filter(models.DBCourse.code == code) \
        .first()
    if db_course is None:
        raise NoSuchCourse(f'No course with code {code}')
    return db_course


def _get_semester(dbsession, name: str) -> models.DBSemester:
    db_semester = dbsession.query(models.DBSemester) \
        .filter(models.DBSemester.name == name) \
        .first()
    if db_semester is None:
        raise NoSuchSemester(f'No semester named {name}')
    return db_semester


def get_student(dbsession, student_id: str) -> models.DBStudent:
    db_student = dbsession.get(models.DBStudent, int(student_id))
    if db_student is None:
        raise NoSuchStudent(f'No student {student_id}')
    return db_student


def get_faculty(dbsession, faculty_id: str) -> models.DBFaculty:
    db_faculty = dbsession.get(models.DBFaculty, int(faculty_id))
    if db_faculty is None:
        raise NoSuchFaculty(f'No lecturer {faculty_id}')
    return db_faculty


def _find_venue(dbsession, building: str, room_number: str) \
        -> Optional[models.DBVenue]:
    return dbsession.query(models.DBVenue) \
        .filter(models.DBVenue.building == building) \
        .filter(models.DBVenue.room_number == room_number) \
        .first()


def _to_college(db_college: models.DBCollege) -> domain.College:
    return domain.College(
        code=db_college.code,
        name=db_college.name,
        short_name=db_college.short_name or '',
        dean=db_college.dean or '',
        college_id=str(db_college.college_id),
        departments_count=len(db_college.departments)
    )


def _to_department(db_department: models.DBDepartment) -> domain.Department:
    return domain.Department(
        code=db_department.code,
        name=db_department.name,
        college_code=db_department.college.code,
        head=db_department.head or '',
        department_id=str(db_department.department_id),
        college_name=db_department.college.name,
        programs_count=len(db_department.programs)
    )


def _to_program(db_program: models.DBProgram) -> domain.Program:
    return domain.Program(
        code=db_program.code,
        name=db_program.name,
        department_code=db_program.department.code,
        degree_level=db_program.degree_level,
        nta_level=db_program.nta_level,
        duration=db_program.duration,
        tuition_fees=db_program.tuition_fees,
        program_id=str(db_program.program_id),
        department_name=db_program.department.name,
        college_name=db_program.department.college.name
    )


def _to_semester(db_semester: models.DBSemester) -> domain.Semester:
    return domain.Semester(
        name=db_semester.name,
        academic_year=db_semester.academic_year,
        number=db_semester.number,
        start_date=db_semester.start_date,
        end_date=db_semester.end_date,
        is_current=bool(db_semester.is_current)
    )


def _to_course(db_course: models.DBCourse) -> domain.Course:
    department = db_course.department
    return domain.Course(
        code=db_course.code,
        name=db_course.name,
        credits=db_course.credits,
        level=db_course.level,
        department_code=department.code,
        description=db_course.description or '',
        department_name=department.name,
        college_code=department.college.code,
        college_name=department.college.name
    )


def _to_lecture(db_lecture: models.DBLecture) -> domain.Lecture:
    faculty = db_lecture.faculty
    return domain.Lecture(
        course=_to_course(db_lecture.course),
        staff_id=faculty.staff_id,
        lecturer=f'{faculty.first_name} {faculty.last_name}',
        semester=db_lecture.semester.name,
        day_of_week=db_lecture.day_of_week,
        start_time=db_lecture.start_time,
        end_time=db_lecture.end_time,
        venue=f'{db_lecture.venue.building} {db_lecture.venue.room_number}',
        capacity=db_lecture.venue.capacity
    )


def _to_enrollment(db_enrollment: models.DBEnrollment) -> domain.Enrollment:
    student = db_enrollment.student
    return domain.Enrollment(
        enrollment_id=str(db_enrollment.enrollment_id),
        student_id=str(student.student_id),
        reg_number=student.reg_number,
        student_name=f'{student.first_name} {student.last_name}',
        program_name=student.program_name,
        year_of_study=student.year_of_study,
        course=_to_course(db_enrollment.course),
        semester=db_enrollment.semester.name,
        status=db_enrollment.status,
        enrolled_at=db_enrollment.enrolled_at
    )


def _to_grade(db_grade: models.DBGrade) -> domain.Grade:
    enrollment = db_grade.enrollment
    return domain.Grade(
        course=_to_course(enrollment.course),
        semester=enrollment.semester.name,
        ca_marks=db_grade.ca_marks,
        final_exam=db_grade.final_exam,
        total_marks=db_grade.total_marks,
        letter_grade=db_grade.letter_grade,
        grade_point=db_grade.grade_point,
        remarks=db_grade.remarks or '',
        submitted_at=db_grade.submitted_at
    )
