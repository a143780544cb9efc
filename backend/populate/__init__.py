# backend.populate -- LLM-driven location hierarchy population
#
# Modules:
#   client          -- OpenAI-compatible data source (child listings, translations)
#   response_parser -- tolerant JSON extraction + child-name DTO
#   translator      -- batched localized names
#   completeness    -- skip rules for already populated parents
#   populator       -- the recursive Region -> Settlement walk
#   jobs            -- background job control (single-flight per region)
#   coverage        -- per-region totals and gaps

from backend.populate.errors import (
    DataSourceError,
    JobAlreadyActive,
    JobAlreadyCompleted,
    JobConflictError,
    JobNotFound,
    NodeNotFound,
    PopulateError,
    RootResolutionError,
)
from backend.populate.jobs import JobManager
from backend.populate.populator import HierarchyPopulator, PopulateStats
from backend.populate.settings import PopulateSettings
