"""
Database integration for users, API clients, OAuth2 credentials, and the
academic catalogue.

This is the only shared mutable resource in the system. Callers get plain
:mod:`sims.domain` objects back; "not found" conditions are raised as the
exceptions below so that controllers can decide how to present them.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from sqlalchemy import or_

from . import catalogue, util, models
from .catalogue import NoSuchCollege, NoSuchDepartment, NoSuchCourse, \
    NoSuchSemester, NoSuchVenue, NoSuchStudent, NoSuchFaculty, \
    NoSuchEnrollment, save_college, save_department, save_program, \
    save_semester, save_venue, save_course, save_lecture, enroll_student, \
    save_grade, list_colleges, list_departments, list_programs, \
    list_courses, list_semesters, load_course, load_current_semester, \
    load_course_lectures, load_course_enrollments, load_student_enrollments, \
    load_student_grades, load_student_timetable, load_faculty_lectures
from ... import domain

logger = logging.getLogger(__name__)


class NoSuchClient(RuntimeError):
    """A client was requested that does not exist, or is inactive."""


class NoSuchUser(RuntimeError):
    """A non-existant :class:`domain.User` was requested."""


class NoSuchProfile(RuntimeError):
    """A user has no profile matching their kind."""


class NoSuchAuthCode(RuntimeError):
    """A non-existant or already used auth code was requested."""


class AuthCodeExpired(NoSuchAuthCode):
    """An auth code exists, but can no longer be redeemed."""


class NoSuchToken(RuntimeError):
    """A non-existant :class:`domain.AccessToken` was requested."""


init_app = util.init_app
create_all = util.create_all
drop_all = util.drop_all
transaction = util.transaction
now = util.now


def save_client(client: domain.Client) -> str:
    """
    Persist a :class:`domain.Client`.

    The ``client_secret`` on ``client`` must already be hashed. If a client
    with the same ID exists it is updated in place.
    """
    with util.transaction() as dbsession:
        db_client = dbsession.get(models.DBClient, client.client_id)
        if db_client is None:
            db_client = models.DBClient(client_id=client.client_id)
        db_client.name = client.name
        db_client.client_secret = client.client_secret
        db_client.redirect_uris = ','.join(client.redirect_uris)
        db_client.scopes = ' '.join(client.scopes)
        db_client.is_active = client.is_active
        dbsession.add(db_client)
    return client.client_id


def load_client(client_id: str) -> domain.Client:
    """
    Load an active :class:`.Client` from the datastore.

    Raises
    ------
    :class:`NoSuchClient`
        Raised if the client does not exist or is not active.

    """
    with util.transaction() as dbsession:
        db_client: Optional[models.DBClient] = \
            dbsession.query(models.DBClient) \
            .filter(models.DBClient.client_id == client_id) \
            .filter(models.DBClient.is_active.is_(True)) \
            .first()
        if db_client is None:
            raise NoSuchClient(f'Client {client_id} does not exist')
        return _to_client(db_client)


def save_user(user: domain.User, profile: domain.Profile) -> str:
    """
    Persist a new :class:`domain.User` along with its profile.

    Returns the new user ID. The profile type must match ``user.kind``.
    """
    profile_types = {
        domain.UserKind.STUDENT: domain.StudentProfile,
        domain.UserKind.FACULTY: domain.FacultyProfile,
        domain.UserKind.ADMIN: domain.AdminProfile,
    }
    if not isinstance(profile, profile_types[user.kind]):
        raise ValueError(f'{type(profile).__name__} is not a profile for'
                         f' a {user.kind.value} user')

    with util.transaction() as dbsession:
        db_user = models.DBUser(
            email=user.email,
            password=user.password_hash,
            user_type=user.kind.value,
            is_active=user.is_active
        )
        dbsession.add(db_user)
        if isinstance(profile, domain.StudentProfile):
            db_user.student = models.DBStudent(
                reg_number=profile.reg_number,
                first_name=profile.first_name,
                middle_name=profile.middle_name,
                last_name=profile.last_name,
                program_code=profile.program_code,
                program_name=profile.program_name,
                year_of_study=profile.year_of_study,
                gpa=profile.gpa,
                enrollment_status=profile.enrollment_status,
                payment_status=profile.payment_status,
                admission_year=profile.admission_year
            )
        elif isinstance(profile, domain.FacultyProfile):
            db_user.faculty = models.DBFaculty(
                staff_id=profile.staff_id,
                first_name=profile.first_name,
                middle_name=profile.middle_name,
                last_name=profile.last_name,
                department=profile.department,
                rank=profile.rank,
                specialization=profile.specialization
            )
        else:
            db_user.admin = models.DBAdmin(
                first_name=profile.first_name,
                last_name=profile.last_name,
                role=profile.role
            )
        dbsession.commit()
        return str(db_user.user_id)


def load_user(user_id: str) -> domain.User:
    """Load a :class:`domain.User` by its ID."""
    with util.transaction() as dbsession:
        db_user = dbsession.get(models.DBUser, int(user_id))
        if db_user is None:
            raise NoSuchUser(f'User {user_id} does not exist')
        return _to_user(db_user)


def load_user_by_email(email: str) -> domain.User:
    """Load a :class:`domain.User` by e-mail address."""
    with util.transaction() as dbsession:
        db_user = dbsession.query(models.DBUser) \
            .filter(models.DBUser.email == email) \
            .first()
        if db_user is None:
            raise NoSuchUser('No user with that e-mail address')
        return _to_user(db_user)


def load_user_by_reg_number(reg_number: str) -> domain.User:
    """Load the :class:`domain.User` for a student registration number."""
    with util.transaction() as dbsession:
        db_student = dbsession.query(models.DBStudent) \
            .filter(models.DBStudent.reg_number == reg_number) \
            .first()
        if db_student is None:
            raise NoSuchUser('No student with that registration number')
        return _to_user(db_student.user)


def load_profile(user: domain.User) -> domain.Profile:
    """
    Load the profile matching the kind of ``user``.

    Raises
    ------
    :class:`NoSuchProfile`
        Raised if the user has no profile of the expected kind.

    """
    with util.transaction() as dbsession:
        db_user = dbsession.get(models.DBUser, int(user.user_id))
        if db_user is None:
            raise NoSuchUser(f'User {user.user_id} does not exist')
        if user.kind is domain.UserKind.STUDENT and db_user.student:
            return _to_student(db_user.student)
        if user.kind is domain.UserKind.FACULTY and db_user.faculty:
            return _to_faculty(db_user.faculty)
        if user.kind is domain.UserKind.ADMIN and db_user.admin:
            return _to_admin(db_user.admin)
    raise NoSuchProfile(f'No {user.kind.value} profile for {user.user_id}')


def load_student(student_id: str) -> domain.StudentProfile:
    """Load a student profile by student ID."""
    with util.transaction() as dbsession:
        return _to_student(catalogue.get_student(dbsession, student_id))


def list_students() -> List[domain.StudentProfile]:
    """All student profiles, in order of registration."""
    with util.transaction() as dbsession:
        db_students = dbsession.query(models.DBStudent) \
            .order_by(models.DBStudent.student_id) \
            .all()
        return [_to_student(db_student) for db_student in db_students]


def load_faculty(faculty_id: str) -> domain.FacultyProfile:
    """Load a lecturer's profile by faculty ID."""
    with util.transaction() as dbsession:
        return _to_faculty(catalogue.get_faculty(dbsession, faculty_id))


def save_auth_code(code: domain.AuthorizationCode) -> None:
    """Save a new authorization code."""
    with util.transaction() as dbsession:
        dbsession.add(models.DBAuthorizationCode(
            code=code.code,
            client_id=code.client_id,
            user_id=int(code.user_id),
            redirect_uri=code.redirect_uri,
            scope=code.scope,
            created=code.created,
            expires=code.expires,
            used=code.used
        ))


def load_auth_code(code: str) -> domain.AuthorizationCode:
    """Load an authorization code, used or not."""
    with util.transaction() as dbsession:
        db_code = dbsession.get(models.DBAuthorizationCode, code)
        if db_code is None:
            raise NoSuchAuthCode('Auth code does not exist')
        return _to_auth_code(db_code)


def redeem_auth_code(code: str, client_id: str, redirect_uri: str,
                     token: str, refresh_token: str,
                     token_expires_in: int) -> domain.AccessToken:
    """
    Mark an authorization code as used, and issue an access token for it.

    The code is claimed with a single conditional ``UPDATE``, issued as the
    first statement of the transaction, so that of any number of concurrent
    redemptions of the same code exactly one sees a matching row. The new
    access token is stored in the same transaction.

    Parameters
    ----------
    code : str
    client_id : str
        Must match the client to which the code was issued.
    redirect_uri : str
        Must exactly match the redirect URI for which the code was issued.
    token : str
        The new access token.
    refresh_token : str
        The new refresh token.
    token_expires_in : int
        Lifetime of the new access token, in seconds.

    Returns
    -------
    :class:`domain.AccessToken`

    Raises
    ------
    :class:`AuthCodeExpired`
        Raised if the code matches but is past its expiry.
    :class:`NoSuchAuthCode`
        Raised if there is no unused code matching the client and redirect
        URI.

    """
    current = util.now()
    with util.transaction() as dbsession:
        claimed = dbsession.query(models.DBAuthorizationCode) \
            .filter(models.DBAuthorizationCode.code == code) \
            .filter(models.DBAuthorizationCode.client_id == client_id) \
            .filter(models.DBAuthorizationCode.redirect_uri == redirect_uri) \
            .filter(models.DBAuthorizationCode.used.is_(False)) \
            .filter(models.DBAuthorizationCode.expires > current) \
            .update({models.DBAuthorizationCode.used: True},
                    synchronize_session=False)
        if claimed != 1:
            dbsession.rollback()
            raise _unclaimed_reason(code, client_id, redirect_uri, current)

        db_code = dbsession.get(models.DBAuthorizationCode, code)
        db_token = models.DBAccessToken(
            token=token,
            client_id=db_code.client_id,
            user_id=db_code.user_id,
            scope=db_code.scope,
            created=current,
            expires=_add_seconds(current, token_expires_in),
            refresh_token=refresh_token
        )
        dbsession.add(db_token)
        dbsession.commit()
        return _to_access_token(db_token)


def _unclaimed_reason(code: str, client_id: str, redirect_uri: str,
                      current: datetime) -> NoSuchAuthCode:
    """Work out why a code could not be claimed, for the caller's logs."""
    try:
        auth_code = load_auth_code(code)
    except NoSuchAuthCode as e:
        return e
    if auth_code.client_id != client_id:
        return NoSuchAuthCode(f'Auth code was not issued to {client_id}')
    if auth_code.redirect_uri != redirect_uri:
        return NoSuchAuthCode('Redirect URI does not match auth code')
    if auth_code.used:
        return NoSuchAuthCode('Auth code has already been used')
    if auth_code.expires <= current:
        return AuthCodeExpired(f'Auth code expired at {auth_code.expires}')
    return NoSuchAuthCode('Auth code could not be claimed')


def load_access_token(token: str) -> domain.AccessToken:
    """Load an access token by its opaque token string."""
    with util.transaction() as dbsession:
        db_token = dbsession.get(models.DBAccessToken, token)
        if db_token is None:
            raise NoSuchToken('Access token does not exist')
        return _to_access_token(db_token)


def load_access_token_by_refresh(refresh_token: str) -> domain.AccessToken:
    """Load the current access token paired with ``refresh_token``."""
    with util.transaction() as dbsession:
        db_token = dbsession.query(models.DBAccessToken) \
            .filter(models.DBAccessToken.refresh_token == refresh_token) \
            .order_by(models.DBAccessToken.created.desc()) \
            .first()
        if db_token is None:
            raise NoSuchToken('No access token for refresh token')
        return _to_access_token(db_token)


def replace_access_token(old: domain.AccessToken, token: str,
                         token_expires_in: int) -> domain.AccessToken:
    """
    Supersede ``old`` with a new access token.

    The new token keeps the client, user, scope and refresh token of
    ``old``. The old record is deleted in the same transaction.

    Raises
    ------
    :class:`NoSuchToken`
        Raised if ``old`` has already been superseded or deleted.

    """
    current = util.now()
    with util.transaction() as dbsession:
        deleted = dbsession.query(models.DBAccessToken) \
            .filter(models.DBAccessToken.token == old.token) \
            .delete(synchronize_session=False)
        if deleted != 1:
            dbsession.rollback()
            raise NoSuchToken('Access token was already superseded')
        db_token = models.DBAccessToken(
            token=token,
            client_id=old.client_id,
            user_id=int(old.user_id),
            scope=old.scope,
            created=current,
            expires=_add_seconds(current, token_expires_in),
            refresh_token=old.refresh_token
        )
        dbsession.add(db_token)
        dbsession.commit()
        return _to_access_token(db_token)


def delete_access_token(token: str) -> None:
    """Delete an access token."""
    with util.transaction() as dbsession:
        db_token = dbsession.get(models.DBAccessToken, token)
        if db_token is None:
            raise NoSuchToken('Access token does not exist')
        dbsession.delete(db_token)


def purge_expired(before: Optional[datetime] = None,
                  refresh_expires_in: int = 0) -> Tuple[int, int]:
    """
    Delete authorization codes and access tokens that can no longer be used.

    A code is purged once it has expired or been used. An access token
    record also carries its refresh token, so it is kept until
    ``refresh_expires_in`` seconds after the access token expired. With the
    default of zero, a refresh token is purged along with its access token.

    Parameters
    ----------
    before : datetime
        Reference time (naive UTC). Defaults to now.
    refresh_expires_in : int
        Seconds after access token expiry that the refresh token stays
        usable; see ``OAUTH_REFRESH_TOKEN_EXPIRY``.

    Returns
    -------
    int
        Number of authorization codes deleted.
    int
        Number of access tokens deleted.

    """
    before = before or util.now()
    token_cutoff = _add_seconds(before, -refresh_expires_in)
    with util.transaction() as dbsession:
        n_codes = dbsession.query(models.DBAuthorizationCode) \
            .filter(or_(models.DBAuthorizationCode.expires <= before,
                        models.DBAuthorizationCode.used.is_(True))) \
            .delete(synchronize_session=False)
        n_tokens = dbsession.query(models.DBAccessToken) \
            .filter(models.DBAccessToken.expires <= token_cutoff) \
            .delete(synchronize_session=False)
        dbsession.commit()
    logger.info('Purged %i auth codes and %i access tokens',
                n_codes, n_tokens)
    return n_codes, n_tokens


def _add_seconds(t: datetime, seconds: int) -> datetime:
    return t + timedelta(seconds=seconds)


def _split(value: Optional[str], sep: Optional[str] = None) -> List[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(sep) if part.strip()]


def _to_client(db_client: models.DBClient) -> domain.Client:
    return domain.Client(
        client_id=db_client.client_id,
        name=db_client.name,
        redirect_uris=_split(db_client.redirect_uris, ','),
        scopes=_split(db_client.scopes),
        client_secret=db_client.client_secret,
        is_active=bool(db_client.is_active)
    )


def _to_user(db_user: models.DBUser) -> domain.User:
    return domain.User(
        user_id=str(db_user.user_id),
        email=db_user.email,
        kind=domain.UserKind(db_user.user_type),
        is_active=bool(db_user.is_active),
        password_hash=db_user.password
    )


def _to_student(db_student: models.DBStudent) -> domain.StudentProfile:
    return domain.StudentProfile(
        student_id=str(db_student.student_id),
        user_id=str(db_student.user_id),
        reg_number=db_student.reg_number,
        first_name=db_student.first_name,
        middle_name=db_student.middle_name or '',
        last_name=db_student.last_name,
        program_code=db_student.program_code,
        program_name=db_student.program_name,
        year_of_study=db_student.year_of_study,
        gpa=db_student.gpa or 0.0,
        enrollment_status=db_student.enrollment_status,
        payment_status=db_student.payment_status,
        admission_year=db_student.admission_year
    )


def _to_faculty(db_faculty: models.DBFaculty) -> domain.FacultyProfile:
    return domain.FacultyProfile(
        faculty_id=str(db_faculty.faculty_id),
        user_id=str(db_faculty.user_id),
        staff_id=db_faculty.staff_id,
        first_name=db_faculty.first_name,
        middle_name=db_faculty.middle_name or '',
        last_name=db_faculty.last_name,
        department=db_faculty.department,
        rank=db_faculty.rank or '',
        specialization=db_faculty.specialization or ''
    )


def _to_admin(db_admin: models.DBAdmin) -> domain.AdminProfile:
    return domain.AdminProfile(
        admin_id=str(db_admin.admin_id),
        user_id=str(db_admin.user_id),
        first_name=db_admin.first_name,
        last_name=db_admin.last_name,
        role=db_admin.role or ''
    )


def _to_auth_code(db_code: models.DBAuthorizationCode) \
        -> domain.AuthorizationCode:
    return domain.AuthorizationCode(
        code=db_code.code,
        client_id=db_code.client_id,
        user_id=str(db_code.user_id),
        redirect_uri=db_code.redirect_uri,
        scope=db_code.scope or '',
        created=db_code.created,
        expires=db_code.expires,
        used=bool(db_code.used)
    )


def _to_access_token(db_token: models.DBAccessToken) -> domain.AccessToken:
    return domain.AccessToken(
        token=db_token.token,
        client_id=db_token.client_id,
        user_id=str(db_token.user_id),
        scope=db_token.scope or '',
        created=db_token.created,
        expires=db_token.expires,
        refresh_token=db_token.refresh_token
    )
