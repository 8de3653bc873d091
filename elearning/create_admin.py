"""Create an admin account, or promote an existing user to admin.

Usage:
    python -m elearning.create_admin --email admin@example.com --name Admin
"""
import argparse
import getpass
import sys

from sqlalchemy.orm import Session

from elearning.auth.passwords import hash_password
from elearning.auth.permissions import Role
from elearning.database import Base, SessionLocal, engine
from elearning.models import course, lesson, revoked_token, topic  # noqa: F401
from elearning.models.user import User
from elearning.routes.user_routes import normalize_email


def ensure_admin(db: Session, email: str, name: str, password: str | None) -> tuple[User, bool]:
    """Return the admin user and whether it was newly created."""
    user = db.query(User).filter(User.email == email).first()
    if user is not None:
        user.role = Role.ADMIN.value
        if password:
            user.hashed_password = hash_password(password)
        db.commit()
        db.refresh(user)
        return user, False

    if not password:
        raise ValueError("A password is required to create a new admin.")

    user = User(
        name=name,
        email=email,
        hashed_password=hash_password(password),
        role=Role.ADMIN.value,
        courses=[],
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user, True


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Create or promote an admin account.")
    parser.add_argument("--email", required=True)
    parser.add_argument("--name", default="Administrator")
    parser.add_argument("--password", help="Prompted for when omitted.")
    args = parser.parse_args(argv)

    try:
        email = normalize_email(args.email)
    except ValueError as exc:
        print(exc, file=sys.stderr)
        sys.exit(2)

    password = args.password or getpass.getpass("Password (leave blank to keep existing): ")

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        user, created = ensure_admin(db, email, args.name, password)
    except ValueError as exc:
        print(exc, file=sys.stderr)
        sys.exit(1)
    finally:
        db.close()

    action = "Created" if created else "Promoted"
    print(f"{action} admin {user.email} (id={user.id})")


if __name__ == "__main__":
    main()
