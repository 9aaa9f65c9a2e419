# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Street Food Finder API:
# - fakes.py: In-memory Supabase client used instead of the real service
# - test_validation.py: Schema and pagination validation
# - test_exceptions.py: Error taxonomy and response envelope
# - test_image_storage.py: Menu image upload/delete rules
# - test_*_service.py: Service-level behaviour against the fake store
# - test_api.py: End-to-end requests through the FastAPI app
#
# Run tests with: pytest
# =============================================================================
