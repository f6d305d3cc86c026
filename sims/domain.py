"""
Core domain classes for the mock SIMS.

Persistence lives in :mod:`sims.services.datastore`; everything here is a
plain immutable value that can be passed around freely.
"""

from datetime import date, datetime, timedelta
from enum import Enum
from typing import NamedTuple, Optional, List, Union


class UserKind(Enum):
    """The closed set of user kinds. Each selects exactly one profile type."""

    STUDENT = 'student'
    FACULTY = 'faculty'
    ADMIN = 'admin'


class User(NamedTuple):
    """The identity shared by every kind of user."""

    user_id: str
    email: str
    kind: UserKind
    is_active: bool = True
    password_hash: Optional[str] = None
    """Bcrypt hash of the user's password; never the password itself."""


class StudentProfile(NamedTuple):
    """Profile data for a :attr:`UserKind.STUDENT` user."""

    student_id: str
    user_id: str
    reg_number: str
    first_name: str
    last_name: str
    program_code: str
    program_name: str
    year_of_study: int
    admission_year: int
    middle_name: str = ''
    gpa: float = 0.0
    enrollment_status: str = 'active'
    payment_status: str = 'pending'

    @property
    def full_name(self) -> str:
        """First, middle and last names, skipping any that are empty."""
        parts = [self.first_name, self.middle_name, self.last_name]
        return ' '.join(part for part in parts if part)


class FacultyProfile(NamedTuple):
    """Profile data for a :attr:`UserKind.FACULTY` user."""

    faculty_id: str
    user_id: str
    staff_id: str
    first_name: str
    last_name: str
    department: str
    middle_name: str = ''
    rank: str = ''
    specialization: str = ''


class AdminProfile(NamedTuple):
    """Profile data for a :attr:`UserKind.ADMIN` user."""

    admin_id: str
    user_id: str
    first_name: str
    last_name: str
    role: str = ''


Profile = Union[StudentProfile, FacultyProfile, AdminProfile]


class Client(NamedTuple):
    """An LMS application registered to request delegated access."""

    client_id: str
    name: str
    redirect_uris: List[str]
    """Exact-match list of URIs to which users may be sent back."""

    scopes: List[str]
    client_secret: Optional[str] = None
    """Bcrypt hash of the client secret."""

    is_active: bool = True

    def allows_redirect_uri(self, redirect_uri: str) -> bool:
        """Check ``redirect_uri`` against the registered URIs."""
        return redirect_uri in self.redirect_uris


class AuthorizationCode(NamedTuple):
    """A single-use grant issued to a client when a user logs in."""

    code: str
    """The authorization code itself."""

    client_id: str
    """The client to which the code was issued."""

    user_id: str
    """The user who logged in."""

    redirect_uri: str
    """The exact redirect URI for which the code was issued."""

    scope: str
    """The scope granted by the code."""

    created: datetime
    expires: datetime
    used: bool = False


class AccessToken(NamedTuple):
    """An opaque bearer credential, paired with a refresh token."""

    token: str
    client_id: str
    user_id: str
    scope: str
    created: datetime
    expires: datetime
    refresh_token: str

    def expires_in(self, now: datetime) -> int:
        """Seconds remaining before the token expires."""
        return max(0, round((self.expires - now).total_seconds()))

    def refreshable(self, now: datetime, refresh_expires_in: int) -> bool:
        """Whether the refresh token may still be used at ``now``."""
        return self.expires + timedelta(seconds=refresh_expires_in) > now


class Authorization(NamedTuple):
    """An authenticated API request: the token presented and its owner."""

    token: AccessToken
    user: User


class College(NamedTuple):
    """A college (faculty) of the university."""

    code: str
    name: str
    short_name: str = ''
    dean: str = ''
    college_id: str = ''
    departments_count: int = 0


class Department(NamedTuple):
    """An academic department, belonging to one :class:`College`."""

    code: str
    name: str
    college_code: str
    head: str = ''
    department_id: str = ''
    college_name: str = ''
    programs_count: int = 0


class Program(NamedTuple):
    """A degree program offered by a :class:`Department`."""

    code: str
    name: str
    department_code: str
    degree_level: str
    """Certificate, Diploma, Bachelor, Masters or PhD."""

    nta_level: int
    duration: int
    """Length of the program, in years."""

    tuition_fees: int
    """Annual fees, in TZS."""

    program_id: str = ''
    department_name: str = ''
    college_name: str = ''


class Semester(NamedTuple):
    """One half of an academic year."""

    name: str
    academic_year: str
    number: int
    start_date: date
    end_date: date
    is_current: bool = False


class Venue(NamedTuple):
    """A room in which lectures are held."""

    building: str
    room_number: str
    capacity: int
    venue_type: str = ''

    @property
    def label(self) -> str:
        return f'{self.building} {self.room_number}'


class Course(NamedTuple):
    """A course in the catalogue."""

    code: str
    name: str
    credits: int
    level: int
    """100 for first-year courses, 200 for second-year, and so on."""

    department_code: str
    description: str = ''
    department_name: str = ''
    college_code: str = ''
    college_name: str = ''


class Lecture(NamedTuple):
    """A weekly timetable slot for a course."""

    course: Course
    staff_id: str
    lecturer: str
    semester: str
    day_of_week: str
    start_time: str
    end_time: str
    venue: str
    capacity: int


class Enrollment(NamedTuple):
    """A student's registration in a course for one semester."""

    enrollment_id: str
    student_id: str
    reg_number: str
    student_name: str
    program_name: str
    year_of_study: int
    course: Course
    semester: str
    status: str
    """active, dropped or completed."""

    enrolled_at: datetime


class Grade(NamedTuple):
    """The result of a completed :class:`Enrollment`."""

    course: Course
    semester: str
    ca_marks: float
    """Continuous assessment, out of 40."""

    final_exam: float
    """Final examination, out of 60."""

    total_marks: float
    letter_grade: str
    grade_point: float
    remarks: str = ''
    submitted_at: Optional[datetime] = None
