"""
SSP Realty - REST API Routes
==============================
All HTTP API endpoints of the backend.

Route groups:
    /api/health      - Liveness and readiness probes
    /api/auth/login  - Admin login, returns a bearer token
    /api/properties  - Public read; create/update/delete require admin
    /api/team        - Public read; create/update/delete require admin
    /api/contact     - Public contact form submission and listing
    /api/leads       - Public lead submission; listing requires admin

Protected routes take the decoded AdminClaims as a parameter. When the
auth gate rejects a request it raises before the handler body runs, so no
store mutation happens without a valid token. Protected routes read their
JSON body themselves (read_body) so the gate runs before any parsing and an
unauthenticated caller always gets 401, whatever the body looks like.
"""

import json
import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from realty_api.auth import AdminClaims, CredentialVerifier, TokenService, require_admin
from realty_api.errors import AuthError, BadRequestError
from realty_api.models import (
    Contact, Lead, LoginRequest, LoginResponse, Property, Record, TeamMember,
)
from realty_api.resources import CONTACTS, LEADS, PROPERTIES, TEAM, ResourceHandlers
from realty_api.store import RecordStore


logger = logging.getLogger(__name__)


async def read_body(request: Request, model: type[Record]) -> Record:
    """
    Parse and validate a JSON request body after the auth gate has passed.

    Raises:
        BadRequestError: If the body is not JSON or does not fit the model.
    """
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise BadRequestError()
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        logger.warning("Invalid %s body on %s at %s", model.__name__, request.url.path,
                       [err.get("loc") for err in e.errors()])
        raise BadRequestError()


def create_router(
    verifier: CredentialVerifier,
    token_service: TokenService,
    store: RecordStore,
) -> APIRouter:
    """
    Create and configure the API router with all endpoints.

    Args:
        verifier:      Checks admin credentials on login.
        token_service: Issues tokens on login and backs the auth gate.
        store:         Record store shared by every collection.

    Returns:
        Configured APIRouter with all endpoints registered.
    """
    router = APIRouter(prefix="/api")

    # Shorthand for the auth gate dependency
    admin = require_admin(token_service)

    properties = ResourceHandlers(PROPERTIES, store)
    team = ResourceHandlers(TEAM, store)
    contacts = ResourceHandlers(CONTACTS, store)
    leads = ResourceHandlers(LEADS, store)

    # =========================================================================
    # HEALTH ROUTES
    # =========================================================================

    @router.get("/health")
    async def health():
        """Liveness probe. Returns 200 while the process is up."""
        return {"status": "✓ Backend is running"}

    @router.get("/health/ready")
    async def ready():
        """Readiness probe. 503 when the record store does not answer."""
        if not await store.ping():
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "not_ready"},
            )
        return {"status": "ready"}

    # =========================================================================
    # AUTH ROUTES
    # =========================================================================

    @router.post("/auth/login", response_model=LoginResponse)
    async def login(req: LoginRequest):
        """
        Login with the admin email and password. Returns a JWT token valid
        for 24 hours.
        """
        try:
            identity = await run_in_threadpool(verifier.verify, req.email, req.password)
        except AuthError as e:
            logger.warning("Admin login rejected: %s", e.reason.value)
            raise
        logger.info("Admin login succeeded for %s", identity.email)
        return LoginResponse(token=token_service.issue(identity))

    # =========================================================================
    # PROPERTY ROUTES
    # =========================================================================

    @router.get("/properties")
    async def list_properties():
        return await properties.list()

    @router.get("/properties/{property_id}")
    async def get_property(property_id: str):
        return await properties.get(property_id)

    @router.post("/properties")
    async def create_property(request: Request, claims: AdminClaims = Depends(admin)):
        record = await properties.create(await read_body(request, Property))
        return {"success": True, "data": record}

    @router.put("/properties/{property_id}")
    async def update_property(
        property_id: str, request: Request, claims: AdminClaims = Depends(admin),
    ):
        """Reports success even when no property has this id."""
        body = await read_body(request, Property)
        await properties.update(property_id, body, require_match=False)
        return {"success": True}

    @router.delete("/properties/{property_id}")
    async def delete_property(property_id: str, claims: AdminClaims = Depends(admin)):
        await properties.delete(property_id)
        return {"success": True}

    # =========================================================================
    # TEAM ROUTES
    # =========================================================================

    @router.get("/team")
    async def list_team():
        return await team.list()

    @router.get("/team/{member_id}")
    async def get_team_member(member_id: str):
        return await team.get(member_id)

    @router.post("/team")
    async def create_team_member(request: Request, claims: AdminClaims = Depends(admin)):
        record = await team.create(await read_body(request, TeamMember))
        return {"success": True, "data": record}

    @router.put("/team/{member_id}")
    async def update_team_member(
        member_id: str, request: Request, claims: AdminClaims = Depends(admin),
    ):
        """Returns the updated member, or 404 when no member has this id."""
        body = await read_body(request, TeamMember)
        record = await team.update(member_id, body, require_match=True)
        return {"success": True, "data": record}

    @router.delete("/team/{member_id}")
    async def delete_team_member(member_id: str, claims: AdminClaims = Depends(admin)):
        await team.delete(member_id)
        return {"success": True}

    # =========================================================================
    # CONTACT ROUTES - Public
    # =========================================================================

    @router.post("/contact")
    async def submit_contact(body: Contact):
        record = await contacts.create(body)
        return {"success": True, "data": record}

    @router.get("/contact")
    async def list_contacts():
        """All contact submissions, newest first."""
        return await contacts.list()

    # =========================================================================
    # LEAD ROUTES
    # =========================================================================

    @router.post("/leads")
    async def submit_lead(body: Lead):
        record = await leads.create(body)
        return {"success": True, "data": record}

    @router.get("/leads")
    async def list_leads(claims: AdminClaims = Depends(admin)):
        """All leads, newest first. Admin only."""
        return await leads.list()

    return router
