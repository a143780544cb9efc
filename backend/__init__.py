# backend -- FastAPI server + SQL models for location reference data
#
# Modules:
#   app        -- FastAPI application with lifespan management
#   database   -- PostgreSQL / SQLite async engine
#   models     -- SQLAlchemy ORM models (regions, sub-regions, local areas,
#                 settlements, their localized names, population jobs)
#   schemas    -- Pydantic request/response schemas
#   routes/    -- API endpoints (locations)
#   populate/  -- population engine and job control (also a CLI: python -m backend.populate)
