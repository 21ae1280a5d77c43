"""
Shared module for cross-cutting concerns of the ordering API and the CLI.

STRUCTURE:
- shared.config: Configuration
  - settings.py: Environment config (pydantic-settings)
  - logging.py: Structured logging
  - constants.py: SubmissionStatus, FlavorStatus, Limits

- shared.infrastructure: Database and request tracing
  - db.py: Engine, get_db, atomic_commit (optimistic concurrency)
  - correlation.py: X-Request-ID middleware and log filter

- shared.security: Abuse protection
  - rate_limit.py: slowapi limiter for public order endpoints

- shared.utils: Utilities
  - exceptions.py: HTTP exceptions with auto-logging
  - validators.py: Input sanitization, table number checks
  - schemas.py: Request/response Pydantic schemas

IMPORT EXAMPLES:
    from shared.infrastructure.db import get_db, atomic_commit
    from shared.config.settings import settings
    from shared.config.constants import SubmissionStatus
    from shared.utils.exceptions import NotFoundError, ConflictError
"""
