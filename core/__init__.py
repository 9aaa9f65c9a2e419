# =============================================================================
# core/ - Business Logic
# =============================================================================
# - models/: Pydantic schemas (request constraints and stored rows)
# - services/: Owner-scoped resource services and menu image storage
# - validation.py: Generic schema validation for raw inputs
#
# Nothing in core/ knows about HTTP beyond raising app.exceptions kinds.
# =============================================================================
