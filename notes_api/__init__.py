"""
Notes API.

- core/: Configuration, logging, errors, security, validation, query building
- models/: SQLAlchemy models (notes, note tags, users)
- repositories/: Data access
- services/: Business logic
- schemas/: Pydantic request/response schemas
- api/: FastAPI routers
- migrations/: Alembic migration environment and revisions
"""
