# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the EcoShare API:
# - fake_supabase.py: In-memory stand-in for the Supabase client
# - test_models.py: Unit tests for Pydantic model validation
# - test_food_analyzer.py: AI analysis normalization and fallbacks
# - test_listings.py, test_pickups.py, test_notifications.py,
#   test_stats.py, test_auth.py, test_analysis.py, test_health.py:
#   API endpoint tests
# - test_frontend.py: SPA static serving
# - test_workers.py: Celery periodic tasks
#
# Run tests with: pytest
# =============================================================================
