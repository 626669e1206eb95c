import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from hospital.auth import jwt_handler
from hospital.database import get_db
from hospital.models.doctor import Doctor

security = HTTPBearer()


def get_current_doctor(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> Doctor:
    token = credentials.credentials
    try:
        payload = jwt_handler.decode_access_token(token)
    except jwt.PyJWTError as exc:
        raise HTTPException(status_code=401, detail="Invalid token") from exc

    email = payload.get("sub")
    if not email:
        raise HTTPException(status_code=401, detail="Invalid token subject")
    if payload.get("role") != jwt_handler.DOCTOR_ROLE:
        raise HTTPException(status_code=403, detail="Only doctors can manage schedules.")

    doctor = db.query(Doctor).filter(Doctor.email == email.strip().lower()).first()
    if doctor is None:
        raise HTTPException(status_code=401, detail="Doctor not found")
    if doctor.is_active is False:
        raise HTTPException(status_code=403, detail="Doctor account is inactive.")
    return doctor
