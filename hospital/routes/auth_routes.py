from fastapi import APIRouter, Depends
from pydantic import BaseModel

from hospital.auth.dependencies import get_current_doctor
from hospital.models.doctor import Doctor

router = APIRouter(tags=['auth'])


class CurrentDoctorResponse(BaseModel):
    id: int
    email: str
    name: str | None = None
    specialization: str | None = None


@router.get('/me', response_model=CurrentDoctorResponse)
def me(current_doctor: Doctor = Depends(get_current_doctor)):
    return CurrentDoctorResponse(
        id=current_doctor.id,
        email=current_doctor.email,
        name=current_doctor.name,
        specialization=current_doctor.specialization,
    )
