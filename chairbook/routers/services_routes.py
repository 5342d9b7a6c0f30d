# chairbook/routers/services_routes.py

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from chairbook.db import get_session
from chairbook.models import Service
from chairbook.schemas import ServiceCreate, ServicePublic

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/services",
    tags=["services"],
)

@router.get("", response_model=List[ServicePublic])
def list_services(session: Session = Depends(get_session)):
    return session.exec(select(Service).order_by(Service.name)).all()

@router.post("", response_model=ServicePublic, status_code=201)
def create_service(
    service: ServiceCreate,
    session: Session = Depends(get_session),
):
    existing = session.exec(select(Service).where(Service.name == service.name)).first()
    if existing is not None:
        raise HTTPException(status_code=409, detail="Service already exists")

    db_service = Service(
        name=service.name,
        duration_minutes=service.duration_minutes,
        price=service.price,
    )
    session.add(db_service)
    session.commit()
    session.refresh(db_service)

    logger.info("Created service %r (%d min)", db_service.name, db_service.duration_minutes)
    return db_service
