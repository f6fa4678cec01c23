"""
User service: registration, login, profiles and role assignment.

Usernames and emails are unique regardless of case.  Registration checks
first so it can say which of the two is taken; the unique indexes catch
the remaining race between check and insert, which is reported the same
way.  The first account ever created becomes an admin.

Users are not cached.
"""
import logging

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from newsdesk.auth import Role, parse_assignable_role
from newsdesk.errors import AuthenticationError, ValidationError
from newsdesk.models import User, UserInterest
from newsdesk.schemas import ProfileUpdate, RegisterRequest, UserProfile
from newsdesk.security import PASSWORD_RULES, hash_password, is_strong_password, verify_password

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def user_to_dict(user: User) -> dict:
    """Serialise a User without its credential."""
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "country": user.country,
        "firstname": user.firstname,
        "lastname": user.lastname,
        "role": user.role,
        "biography": user.biography,
        "created_at": user.created_at.isoformat() if user.created_at else None,
    }


# ---------------------------------------------------------------------------
# Uniqueness
# ---------------------------------------------------------------------------

async def find_conflicts(
    db: AsyncSession,
    username: str | None,
    email: str | None,
    exclude_user_id: int | None = None,
) -> tuple[bool, bool]:
    """Return (username_taken, email_taken), comparing case-insensitively."""
    username = (username or "").lower()
    email = (email or "").lower()
    clauses = []
    if username:
        clauses.append(func.lower(User.username) == username)
    if email:
        clauses.append(User.email == email)
    if not clauses:
        return False, False

    q = select(User.username, User.email).where(or_(*clauses))
    if exclude_user_id is not None:
        q = q.where(User.id != exclude_user_id)
    rows = (await db.execute(q)).all()
    username_taken = bool(username) and any(r.username.lower() == username for r in rows)
    email_taken = bool(email) and any(r.email.lower() == email for r in rows)
    return username_taken, email_taken


def _duplicate_error(username_taken: bool, email_taken: bool) -> ValidationError:
    return ValidationError(
        "Username already exists" if username_taken else "Email already exists",
        usernameExists=username_taken,
        emailExists=email_taken,
    )


async def check_availability(db: AsyncSession, username: str | None, email: str | None) -> dict:
    if not username and not email:
        raise ValidationError("Username or email required")
    username_taken, email_taken = await find_conflicts(db, username, email)
    return {"usernameTaken": username_taken, "emailTaken": email_taken}


# ---------------------------------------------------------------------------
# Registration / login
# ---------------------------------------------------------------------------

async def register_user(db: AsyncSession, data: RegisterRequest) -> dict:
    """Create an account; the very first one is an admin, later ones users."""
    if not is_strong_password(data.password):
        raise ValidationError(PASSWORD_RULES)

    username_taken, email_taken = await find_conflicts(db, data.username, data.email)
    if username_taken or email_taken:
        raise _duplicate_error(username_taken, email_taken)

    user_count = (await db.execute(select(func.count()).select_from(User))).scalar_one()
    role = Role.ADMIN if user_count == 0 else Role.USER

    user = User(
        username=data.username,
        email=data.email.lower(),
        password=await run_in_threadpool(hash_password, data.password),
        country=data.country,
        firstname=data.first_name,
        lastname=data.last_name,
        role=role.value,
        biography=data.biography,
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError:
        # Lost the race against a concurrent registration.
        await db.rollback()
        username_taken, email_taken = await find_conflicts(db, data.username, data.email)
        raise _duplicate_error(username_taken, email_taken) from None
    await db.commit()

    logger.info("Registered user %s (%r) as %s", user.id, user.username, role.value)
    return {"message": "User registered successfully", "userId": user.id, "role": role.value}


async def login(db: AsyncSession, email: str, password: str) -> dict:
    """Return the user (without credential) whose email and password match."""
    q = select(User).where(User.email == email.lower())
    user = (await db.execute(q)).scalar_one_or_none()
    if user is None or not await run_in_threadpool(verify_password, password, user.password):
        logger.warning("Failed login for %r", email)
        raise AuthenticationError("Invalid email or password")
    return {"user": user_to_dict(user)}


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------

async def get_profile(db: AsyncSession, user_id: int) -> UserProfile | None:
    user = await db.get(User, user_id, populate_existing=True)
    if user is None:
        return None
    q = select(UserInterest.interest).where(UserInterest.user_id == user_id).order_by(UserInterest.interest)
    interests = list((await db.execute(q)).scalars().all())
    return UserProfile.from_user(user, interests)


async def update_profile(db: AsyncSession, user_id: int, data: ProfileUpdate) -> UserProfile | None:
    """Update identity fields; username/email must not collide with another user."""
    user = await db.get(User, user_id, populate_existing=True)
    if user is None:
        return None

    username_taken, email_taken = await find_conflicts(db, data.username, data.email, user_id)
    if username_taken or email_taken:
        raise ValidationError(
            "Username or email already in use.",
            usernameExists=username_taken,
            emailExists=email_taken,
        )

    user.username = data.username
    user.email = data.email.lower()
    if data.country is not None:
        user.country = data.country
    if data.first_name is not None:
        user.firstname = data.first_name
    if data.last_name is not None:
        user.lastname = data.last_name
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise ValidationError("Username or email already in use.") from None
    await db.commit()
    return await get_profile(db, user_id)


async def update_biography(db: AsyncSession, user_id: int, biography: str) -> None:
    await db.execute(
        update(User)
        .where(User.id == user_id)
        .values(biography=biography)
        .execution_options(synchronize_session=False)
    )
    await db.commit()


# ---------------------------------------------------------------------------
# Roles
# ---------------------------------------------------------------------------

async def assign_role(db: AsyncSession, target_user_id: int, role: str, assigned_by: int) -> bool:
    """
    Set the role of *target_user_id*.  Only the four account roles are
    accepted.  Returns False when the target user does not exist.
    """
    new_role = parse_assignable_role(role)
    result = await db.execute(
        update(User)
        .where(User.id == target_user_id)
        .values(role=new_role.value)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        return False
    await db.commit()
    logger.info("User %s set role of user %s to %s", assigned_by, target_user_id, new_role.value)
    return True
