# smartbazaar/api/routes.py
from fastapi import APIRouter, Depends, Header, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from .. import crud, schemas
from ..db import get_session_factory
from ..identity import Actor, actor_from_claims
from ..notifications import list_notifications, mark_all_read, mark_read, unread_count
from ..services import OrderService

router = APIRouter()

def get_db(session_factory=Depends(get_session_factory)):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()

def get_order_service(session_factory=Depends(get_session_factory)) -> OrderService:
    return OrderService(session_factory)

def get_actor(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> Actor:
    return actor_from_claims(x_user_id, x_user_role)

@router.get("/health")
def health():
    return {"status": "ok"}

@router.post("/users/me", response_model=schemas.UserOut)
def register_user(payload: schemas.UserProfile, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    return crud.upsert_user(db, actor, payload.model_dump(exclude_unset=True))

@router.post("/listings", response_model=schemas.ListingOut, status_code=201)
def create_listing(payload: schemas.ListingCreate, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    return crud.create_listing(db, actor, payload.model_dump())

@router.get("/listings", response_model=List[schemas.ListingOut])
def listings(
    skip: int = 0,
    limit: int = Query(20, le=100),
    category: str | None = Query(None),
    location: str | None = Query(None),
    min_price: float | None = Query(None),
    max_price: float | None = Query(None),
    keyword: str | None = Query(None),
    db: Session = Depends(get_db)
):
    filters = schemas.ListingFilter(
        category=category,
        location=location,
        min_price=min_price,
        max_price=max_price,
        keyword=keyword,
    ).model_dump()
    res = crud.list_listings(db, skip=skip, limit=limit, filters=filters)
    return res["items"]

@router.get("/listings/{listing_id}", response_model=schemas.ListingOut)
def get_listing(listing_id: str, db: Session = Depends(get_db)):
    obj = crud.get_listing(db, listing_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Listing not found")
    return obj

@router.post("/listings/{listing_id}/withdraw", response_model=schemas.ListingOut)
def withdraw_listing(listing_id: str, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    return crud.withdraw_listing(db, actor, listing_id)

@router.get("/me/listings", response_model=List[schemas.ListingOut])
def my_listings(actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    return crud.farmer_listings(db, actor.user_id)

@router.get("/me/bookmarks", response_model=List[schemas.ListingOut])
def my_bookmarks(actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    return crud.list_bookmarks(db, actor.user_id)

@router.put("/me/bookmarks/{listing_id}")
def add_bookmark(listing_id: str, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    crud.add_bookmark(db, actor, listing_id)
    return {"bookmarked": True}

@router.delete("/me/bookmarks/{listing_id}")
def remove_bookmark(listing_id: str, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    return {"removed": crud.remove_bookmark(db, actor, listing_id)}

@router.post("/orders", response_model=schemas.OrderOut, status_code=201)
def place_order(payload: schemas.OrderCreate, actor: Actor = Depends(get_actor),
                service: OrderService = Depends(get_order_service)):
    return service.place_order(actor, payload.listing_id, payload.quantity)

@router.get("/orders/{order_id}", response_model=schemas.OrderOut)
def get_order(order_id: str, actor: Actor = Depends(get_actor),
              service: OrderService = Depends(get_order_service)):
    return service.get_order(actor, order_id)

@router.post("/orders/{order_id}/status", response_model=schemas.OrderOut)
def update_order_status(order_id: str, payload: schemas.StatusUpdate, actor: Actor = Depends(get_actor),
                        service: OrderService = Depends(get_order_service)):
    return service.transition(actor, order_id, payload.status)

@router.get("/me/orders", response_model=List[schemas.OrderOut])
def my_orders(status: str | None = Query(None), actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    return crud.farmer_orders(db, actor.user_id, status=status)

@router.get("/me/purchases", response_model=List[schemas.OrderOut])
def my_purchases(scope: str = Query("ongoing"), actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    return crud.buyer_purchases(db, actor.user_id, scope=scope)

@router.get("/me/sales", response_model=schemas.SalesSummary)
def my_sales(actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    return crud.sales_history(db, actor.user_id)

@router.get("/me/notifications", response_model=schemas.NotificationList)
def my_notifications(skip: int = 0, limit: int = Query(50, le=200),
                     actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    return {
        "unread_count": unread_count(db, actor.user_id),
        "items": list_notifications(db, actor.user_id, skip=skip, limit=limit),
    }

@router.post("/me/notifications/read")
def read_notifications(payload: schemas.MarkRead, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    updated = mark_read(db, actor.user_id, payload.ids)
    return {"updated": updated}

@router.post("/me/notifications/read-all")
def read_all_notifications(actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    return {"updated": mark_all_read(db, actor.user_id)}
