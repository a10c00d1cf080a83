"""Admin authentication, profile and user listing endpoints."""
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from sitecms.api.deps import auth_rate_limiter, get_current_admin, get_db
from sitecms.api.responses import format_response
from sitecms.db.models.admin import Admin
from sitecms.db.models.user import User
from sitecms.schemas.admin import AdminCreate, AdminLogin, AdminResponse, AdminToken
from sitecms.schemas.user import UserResponse
from sitecms.services import accounts
from sitecms.services.query_features import QueryFeatures, parse_query_params

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post("/setup", status_code=status.HTTP_201_CREATED)
async def setup_admin(
    admin_in: AdminCreate,
    db: Session = Depends(get_db)
):
    """Create the first admin account. Refused once an active admin exists."""
    admin, token = accounts.setup_first_admin(db, admin_in.name, admin_in.email, admin_in.password)
    payload = AdminToken(token=token, admin=AdminResponse.model_validate(admin))
    return format_response("Initial admin created successfully", payload.model_dump(by_alias=True, mode="json"))


@router.post("/login", dependencies=[Depends(auth_rate_limiter)])
async def login(
    credentials: AdminLogin,
    db: Session = Depends(get_db)
):
    """Authenticate an admin and return a JWT."""
    admin, token = accounts.authenticate_admin(db, credentials.email, credentials.password)
    payload = AdminToken(token=token, admin=AdminResponse.model_validate(admin))
    return format_response("Login successful", payload.model_dump(by_alias=True, mode="json"))


@router.post("/logout")
async def logout():
    """Tokens are stateless; the client discards its copy."""
    return format_response("Logged out successfully")


@router.get("/profile")
async def get_profile(current_admin: Admin = Depends(get_current_admin)):
    admin = AdminResponse.model_validate(current_admin).model_dump(by_alias=True, mode="json")
    return format_response("Admin profile retrieved successfully", {"admin": admin})


@router.get("/users")
async def list_users(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin)
):
    """List end users with filtering, sorting, field selection and pagination.

    Example: ``/admin/users?isActive=true&sort=-createdAt&fields=name,email&page=2&limit=5``
    """
    params = parse_query_params(request.query_params.multi_items())
    features = (
        QueryFeatures(db.query(User), User, params)
        .filter()
        .sort()
        .limit_fields()
        .paginate()
    )
    records = features.all()
    meta = features.pagination_meta(features.count())

    if features.fields:
        users = [features.project(record) for record in records]
    else:
        users = [UserResponse.model_validate(record).model_dump(by_alias=True, mode="json") for record in records]

    return format_response("Users retrieved successfully", {"users": users}, meta=meta)
