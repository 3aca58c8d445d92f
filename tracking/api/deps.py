from functools import lru_cache
from typing import Optional
from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session
from tracking.application.auth import AuthSession
from tracking.application.lookup import LookupService
from tracking.application.service import QuoteService, ShipmentService
from tracking.core_settings import get_settings
from tracking.infrastructure.db import get_db
from tracking.infrastructure.storage import FileStorage
from tracking.infrastructure.store import ShipmentStore

SESSION_COOKIE = "admin_session"
BEARER_PREFIX = "Bearer "

@lru_cache
def get_auth() -> AuthSession:
    settings = get_settings()
    return AuthSession(
        password=settings.ADMIN_PASSWORD,
        secret=settings.SESSION_SECRET,
        algorithm=settings.SESSION_ALG,
        ttl_minutes=settings.SESSION_TTL_MINUTES,
    )

@lru_cache
def get_storage() -> FileStorage:
    settings = get_settings()
    return FileStorage(settings.UPLOAD_DIR, settings.UPLOAD_URL_PREFIX)

def get_store(db: Session = Depends(get_db)) -> ShipmentStore:
    return ShipmentStore(db)

def get_lookup_service(store: ShipmentStore = Depends(get_store)) -> LookupService:
    return LookupService(store)

def get_shipment_service(
    store: ShipmentStore = Depends(get_store),
    storage: FileStorage = Depends(get_storage),
) -> ShipmentService:
    settings = get_settings()
    return ShipmentService(
        store,
        storage,
        prefix=settings.TRACKING_PREFIX,
        default_delivery_days=settings.DEFAULT_DELIVERY_DAYS,
        max_upload_bytes=settings.MAX_UPLOAD_BYTES,
    )

def get_quote_service(store: ShipmentStore = Depends(get_store)) -> QuoteService:
    return QuoteService(store)

def session_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith(BEARER_PREFIX):
        return auth_header[len(BEARER_PREFIX):]
    return request.cookies.get(SESSION_COOKIE)

def is_admin(request: Request, auth: AuthSession) -> bool:
    return auth.is_valid(session_token(request))

def require_admin(request: Request, auth: AuthSession = Depends(get_auth)) -> None:
    if not is_admin(request, auth):
        raise HTTPException(status_code=401, detail="Admin session required")
