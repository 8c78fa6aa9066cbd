from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime


def new_id() -> str:
    return str(uuid4())


class UserRole(str, Enum):
    WORKER = "worker"
    EMPLOYER = "employer"
    SUPERUSER = "superuser"


class MatchStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


# Estados a los que un participante puede llevar un match
DECISION_STATUSES = (MatchStatus.ACCEPTED, MatchStatus.REJECTED)


class UserAccount(BaseModel):
    """Cuenta de usuario con su rol en la plataforma."""
    uid: str
    role: UserRole
    secondary_role: Optional[UserRole] = None
    email: Optional[str] = None
    disabled: bool = False
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    deleted_at: Optional[datetime] = None

    @property
    def effective_role(self) -> Optional[UserRole]:
        """Rol con el que el usuario opera en la app (los superusuarios usan su rol secundario)."""
        if self.role == UserRole.SUPERUSER:
            return self.secondary_role
        return self.role


class WorkerProfileCreate(BaseModel):
    rubro: str = Field(..., min_length=1)
    puesto: str = Field(..., min_length=1)
    zona: Optional[str] = None
    video_url: Optional[str] = None
    description: Optional[str] = None
    experience: Optional[str] = None


class WorkerProfile(WorkerProfileCreate):
    """Perfil de trabajador, guardado completo en cada envío (upsert)."""
    uid: str
    active: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class WorkerStatusUpdate(BaseModel):
    active: bool


class EmployerProfileCreate(BaseModel):
    business_name: str = Field(..., min_length=1)
    rubro: str = Field(..., min_length=1)
    description: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None


class EmployerProfile(EmployerProfileCreate):
    uid: str
    active: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class JobOfferCreate(BaseModel):
    rubro: str = Field(..., min_length=1)
    puesto: str = Field(..., min_length=1)
    description: Optional[str] = None
    requirements: Optional[str] = None
    salary: Optional[str] = None
    schedule: Optional[str] = None


class JobOfferUpdate(BaseModel):
    """Subconjunto de campos que el empleador puede modificar."""
    rubro: Optional[str] = Field(None, min_length=1)
    puesto: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    requirements: Optional[str] = None
    salary: Optional[str] = None
    schedule: Optional[str] = None
    active: Optional[bool] = None


class JobOffer(JobOfferCreate):
    id: str = Field(default_factory=new_id)
    employer_id: str
    active: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    def public_view(self) -> dict:
        """Campos de la oferta visibles para el trabajador."""
        return self.model_dump(include={"id", "rubro", "puesto", "description", "requirements",
                                        "salary", "schedule", "active"})


class Match(BaseModel):
    """
    Emparejamiento entre un trabajador y una oferta.

    rubro y puesto son una foto tomada al crearlo y no se resincronizan si la
    oferta o el perfil cambian después; solo status y updated_at son mutables.
    """
    id: str
    worker_id: str
    employer_id: str
    offer_id: str
    rubro: str
    puesto: str
    status: MatchStatus = MatchStatus.PENDING
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None

    @staticmethod
    def make_id(worker_id: str, offer_id: str) -> str:
        return f"{worker_id}:{offer_id}"

    def has_participant(self, uid: str) -> bool:
        return uid in (self.worker_id, self.employer_id)


class MatchStatusUpdate(BaseModel):
    status: MatchStatus

    @field_validator("status")
    @classmethod
    def status_must_be_decision(cls, value: MatchStatus) -> MatchStatus:
        if value not in DECISION_STATUSES:
            raise ValueError('Invalid status. Must be "accepted" or "rejected"')
        return value


class Chat(BaseModel):
    id: str = Field(default_factory=new_id)
    match_id: str
    worker_id: str
    employer_id: str
    created_at: datetime = Field(default_factory=datetime.utcnow)
    last_message: Optional[str] = None
    last_message_at: Optional[datetime] = None

    def has_participant(self, uid: str) -> bool:
        return uid in (self.worker_id, self.employer_id)


class Message(BaseModel):
    id: str = Field(default_factory=new_id)
    chat_id: str
    sender_id: str
    text: str
    created_at: datetime = Field(default_factory=datetime.utcnow)


class MessageCreate(BaseModel):
    text: str


class RoleRegistration(BaseModel):
    role: UserRole

    @field_validator("role")
    @classmethod
    def role_must_be_app_role(cls, value: UserRole) -> UserRole:
        if value == UserRole.SUPERUSER:
            raise ValueError('Invalid role. Must be "worker" or "employer"')
        return value


class SecondaryRoleUpdate(BaseModel):
    secondary_role: UserRole

    @field_validator("secondary_role")
    @classmethod
    def secondary_role_must_be_app_role(cls, value: UserRole) -> UserRole:
        if value == UserRole.SUPERUSER:
            raise ValueError('Invalid secondary_role. Must be "worker" or "employer"')
        return value


class AdminUserUpdate(BaseModel):
    role: Optional[UserRole] = None
    disabled: Optional[bool] = None
