"""Print a bearer token for a doctor account to stdout.

Usage:
    python -m hospital.print_access_token doctor@example.org
"""
import sys

from hospital.auth.jwt_handler import create_access_token
from hospital.database import SessionLocal
from hospital.models.doctor import Doctor


def main(argv: list[str] | None = None) -> None:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print("Usage: python -m hospital.print_access_token <doctor-email>", file=sys.stderr)
        sys.exit(2)

    email = args[0].strip().lower()
    db = SessionLocal()
    try:
        doctor = db.query(Doctor).filter(Doctor.email == email).first()
    finally:
        db.close()

    if doctor is None:
        print(f"No doctor registered with email {email}.", file=sys.stderr)
        sys.exit(1)

    print(create_access_token(subject=doctor.email))


if __name__ == "__main__":
    main()
