"""Place and service endpoints."""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.models.place import Place
from app.schemas.place import PlaceCreate, PlaceOut, ServiceCreate, ServiceOut
from app.services.recommendation import upsert_place, upsert_service

router = APIRouter(tags=["places"])


@router.post("/places", response_model=PlaceOut)
def create_place(payload: PlaceCreate, db: Session = Depends(get_db)) -> PlaceOut:
    """Create or update a place."""
    place = upsert_place(db, payload)
    return PlaceOut.model_validate(place)


@router.get("/places", response_model=list[PlaceOut])
def list_places(ids: str | None = None, db: Session = Depends(get_db)) -> list[PlaceOut]:
    """Return places; optionally filter by comma-separated ids."""
    query = db.query(Place)
    if ids:
        id_list = [int(i.strip()) for i in ids.split(",") if i.strip().isdigit()]
        if id_list:
            query = query.filter(Place.id.in_(id_list))
    places = query.order_by(Place.id).all()
    return [PlaceOut.model_validate(p) for p in places]


@router.post("/services", response_model=ServiceOut)
def create_service(
    payload: ServiceCreate,
    response: Response,
    db: Session = Depends(get_db),
) -> ServiceOut:
    """Create a service, or merge into the one sharing its phone/email."""
    service, created = upsert_service(db, payload)
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return ServiceOut.model_validate(service)
