"""SQLAlchemy models for database integration."""

from datetime import datetime

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import Boolean, Column, Date, DateTime, Enum, Float, \
    ForeignKey, Integer, SmallInteger, String, Table, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from ... import domain

db: SQLAlchemy = SQLAlchemy()


class DBUser(db.Model):
    """Persistence for :class:`domain.User`."""

    __tablename__ = 'user'

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(100), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)
    """Bcrypt hash of the user's password."""

    user_type = Column(Enum(*[kind.value for kind in domain.UserKind],
                            name='user_type'),
                       nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created = Column(DateTime, default=datetime.now)

    student = relationship('DBStudent', uselist=False,
                           back_populates='user')
    faculty = relationship('DBFaculty', uselist=False,
                           back_populates='user')
    admin = relationship('DBAdmin', uselist=False, back_populates='user')


class DBStudent(db.Model):
    """Persistence for :class:`domain.StudentProfile`."""

    __tablename__ = 'student'

    student_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(ForeignKey('user.user_id'), unique=True, nullable=False)
    reg_number = Column(String(50), unique=True, nullable=False, index=True)
    first_name = Column(String(100), nullable=False)
    middle_name = Column(String(100), default='')
    last_name = Column(String(100), nullable=False)
    program_code = Column(String(20), nullable=False)
    program_name = Column(String(200), nullable=False)
    year_of_study = Column(SmallInteger, nullable=False)
    gpa = Column(Float, default=0.0)
    enrollment_status = Column(String(20), default='active')
    payment_status = Column(String(20), default='pending')
    admission_year = Column(Integer, nullable=False)

    user = relationship('DBUser', back_populates='student')


class DBFaculty(db.Model):
    """Persistence for :class:`domain.FacultyProfile`."""

    __tablename__ = 'faculty'

    faculty_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(ForeignKey('user.user_id'), unique=True, nullable=False)
    staff_id = Column(String(50), unique=True, nullable=False)
    first_name = Column(String(100), nullable=False)
    middle_name = Column(String(100), default='')
    last_name = Column(String(100), nullable=False)
    department = Column(String(200), nullable=False)
    rank = Column(String(50), default='')
    specialization = Column(String(200), default='')

    user = relationship('DBUser', back_populates='faculty')


class DBAdmin(db.Model):
    """Persistence for :class:`domain.AdminProfile`."""

    __tablename__ = 'admin'

    admin_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(ForeignKey('user.user_id'), unique=True, nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    role = Column(String(50), default='')

    user = relationship('DBUser', back_populates='admin')


class DBClient(db.Model):
    """Persistence for :class:`domain.Client`."""

    __tablename__ = 'oauth_client'

    client_id = Column(String(100), primary_key=True)
    client_secret = Column(String(255), nullable=False)
    """Bcrypt hash of the client secret."""

    name = Column(String(100), nullable=False)
    redirect_uris = Column(Text, nullable=False)
    """Comma-separated list of allowed redirect URIs."""

    scopes = Column(Text, default='')
    """Space-separated list of allowed scopes."""

    is_active = Column(Boolean, default=True, nullable=False)
    created = Column(DateTime, default=datetime.now)


class DBAuthorizationCode(db.Model):
    """Persistence for :class:`domain.AuthorizationCode`."""

    __tablename__ = 'oauth_authorization_code'

    code = Column(String(255), primary_key=True)
    """The authorization code itself."""

    client_id = Column(ForeignKey('oauth_client.client_id'), nullable=False,
                       index=True)
    """The client to which the code was issued."""

    user_id = Column(ForeignKey('user.user_id'), nullable=False, index=True)
    """The user who logged in."""

    redirect_uri = Column(String(500), nullable=False)
    """The redirect URI for which the code was issued."""

    scope = Column(Text, default='')
    created = Column(DateTime, default=datetime.now)
    expires = Column(DateTime, nullable=False, index=True)
    used = Column(Boolean, default=False, nullable=False)


class DBAccessToken(db.Model):
    """Persistence for :class:`domain.AccessToken`."""

    __tablename__ = 'oauth_access_token'

    token = Column(String(255), primary_key=True)
    client_id = Column(ForeignKey('oauth_client.client_id'), nullable=False,
                       index=True)
    user_id = Column(ForeignKey('user.user_id'), nullable=False, index=True)
    scope = Column(Text, default='')
    created = Column(DateTime, default=datetime.now)
    expires = Column(DateTime, nullable=False, index=True)
    refresh_token = Column(String(255), nullable=False, index=True)


class DBCollege(db.Model):
    """Persistence for :class:`domain.College`."""

    __tablename__ = 'college'

    college_id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(10), unique=True, nullable=False)
    name = Column(String(200), nullable=False)
    short_name = Column(String(20), default='')
    dean = Column(String(100), default='')

    departments = relationship('DBDepartment', back_populates='college')


class DBDepartment(db.Model):
    """Persistence for :class:`domain.Department`."""

    __tablename__ = 'department'

    department_id = Column(Integer, primary_key=True, autoincrement=True)
    college_id = Column(ForeignKey('college.college_id'), nullable=False,
                        index=True)
    code = Column(String(20), unique=True, nullable=False)
    name = Column(String(200), nullable=False)
    head = Column(String(100), default='')

    college = relationship('DBCollege', back_populates='departments')
    programs = relationship('DBProgram', back_populates='department')


program_course = Table(
    'program_course',
    db.metadata,
    Column('program_id', ForeignKey('program.program_id'), primary_key=True),
    Column('course_id', ForeignKey('course.course_id'), primary_key=True)
)
"""Courses taught in each program."""


class DBProgram(db.Model):
    """Persistence for :class:`domain.Program`."""

    __tablename__ = 'program'

    program_id = Column(Integer, primary_key=True, autoincrement=True)
    department_id = Column(ForeignKey('department.department_id'),
                           nullable=False, index=True)
    code = Column(String(20), unique=True, nullable=False)
    name = Column(String(200), nullable=False)
    degree_level = Column(String(50), nullable=False)
    nta_level = Column(SmallInteger, nullable=False)
    duration = Column(SmallInteger, nullable=False)
    tuition_fees = Column(Integer, nullable=False)

    department = relationship('DBDepartment', back_populates='programs')
    courses = relationship('DBCourse', secondary=program_course,
                           back_populates='programs')


class DBSemester(db.Model):
    """Persistence for :class:`domain.Semester`."""

    __tablename__ = 'semester'

    semester_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), unique=True, nullable=False)
    academic_year = Column(String(20), nullable=False)
    number = Column(SmallInteger, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    is_current = Column(Boolean, default=False, nullable=False)


class DBVenue(db.Model):
    """Persistence for :class:`domain.Venue`."""

    __tablename__ = 'venue'
    __table_args__ = (UniqueConstraint('building', 'room_number'),)

    venue_id = Column(Integer, primary_key=True, autoincrement=True)
    building = Column(String(100), nullable=False)
    room_number = Column(String(20), nullable=False)
    capacity = Column(Integer, nullable=False)
    venue_type = Column(String(50), default='')


class DBCourse(db.Model):
    """Persistence for :class:`domain.Course`."""

    __tablename__ = 'course'

    course_id = Column(Integer, primary_key=True, autoincrement=True)
    department_id = Column(ForeignKey('department.department_id'),
                           nullable=False, index=True)
    code = Column(String(20), unique=True, nullable=False)
    name = Column(String(200), nullable=False)
    credits = Column(SmallInteger, nullable=False)
    level = Column(SmallInteger, nullable=False)
    description = Column(Text, default='')

    department = relationship('DBDepartment')
    programs = relationship('DBProgram', secondary=program_course,
                            back_populates='courses')


class DBLecture(db.Model):
    """Persistence for :class:`domain.Lecture`."""

    __tablename__ = 'lecture'
    __table_args__ = (UniqueConstraint('course_id', 'semester_id',
                                       'day_of_week', 'start_time'),)

    lecture_id = Column(Integer, primary_key=True, autoincrement=True)
    course_id = Column(ForeignKey('course.course_id'), nullable=False,
                       index=True)
    faculty_id = Column(ForeignKey('faculty.faculty_id'), nullable=False,
                        index=True)
    semester_id = Column(ForeignKey('semester.semester_id'), nullable=False,
                         index=True)
    venue_id = Column(ForeignKey('venue.venue_id'), nullable=False)
    day_of_week = Column(String(20), nullable=False)
    start_time = Column(String(10), nullable=False)
    end_time = Column(String(10), nullable=False)

    course = relationship('DBCourse')
    faculty = relationship('DBFaculty')
    semester = relationship('DBSemester')
    venue = relationship('DBVenue')


class DBEnrollment(db.Model):
    """Persistence for :class:`domain.Enrollment`."""

    __tablename__ = 'enrollment'
    __table_args__ = (UniqueConstraint('student_id', 'course_id',
                                       'semester_id'),)

    enrollment_id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(ForeignKey('student.student_id'), nullable=False,
                        index=True)
    course_id = Column(ForeignKey('course.course_id'), nullable=False,
                       index=True)
    semester_id = Column(ForeignKey('semester.semester_id'), nullable=False,
                         index=True)
    status = Column(String(20), default='active', nullable=False)
    enrolled_at = Column(DateTime, nullable=False)

    student = relationship('DBStudent')
    course = relationship('DBCourse')
    semester = relationship('DBSemester')
    grade = relationship('DBGrade', uselist=False,
                         back_populates='enrollment')


class DBGrade(db.Model):
    """Persistence for :class:`domain.Grade`."""

    __tablename__ = 'grade'

    grade_id = Column(Integer, primary_key=True, autoincrement=True)
    enrollment_id = Column(ForeignKey('enrollment.enrollment_id'),
                           unique=True, nullable=False)
    ca_marks = Column(Float, nullable=False)
    final_exam = Column(Float, nullable=False)
    total_marks = Column(Float, nullable=False)
    letter_grade = Column(String(5), nullable=False)
    grade_point = Column(Float, nullable=False)
    remarks = Column(Text, default='')
    submitted_at = Column(DateTime)

    enrollment = relationship('DBEnrollment', back_populates='grade')
