"""
SSP Realty - Backend Package
==============================
HTTP/JSON backend for the SSP Realty website.

This package provides:
- Public read endpoints for properties and team members
- Public submission endpoints for contact forms and leads
- A single-admin login that issues 24-hour JWT bearer tokens
- An auth gate protecting every create/update/delete on listings

Architecture:
    main.py          -> FastAPI app factory, CORS, error handlers, lifespan
    config.py        -> Layered settings (defaults, config.yaml, .env, env vars)
    auth.py          -> Credential check, token issue/verify, auth gate
    routes.py        -> All REST API endpoint handlers
    resources.py     -> Generic CRUD contract per collection
    models.py        -> Pydantic record and login models
    store.py         -> Record store (MongoDB or in-memory)
    errors.py        -> Error hierarchy and client-facing messages
    observability.py -> Logging setup
"""
