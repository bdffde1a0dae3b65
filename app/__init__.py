# =============================================================================
# app/ - FastAPI Application Package
# =============================================================================
# This package contains the FastAPI web application:
# - main.py: App entry point, ERP client lifespan, error handlers
# - config.py: Environment variable loading and settings
# - dependencies.py: Per-request context (settings + ERP client)
# - handler.py: The request wrapper every route goes through
# - exceptions.py: Gateway errors and their envelope handlers
# - routers/: API endpoint definitions organized by ERP area
#
# The app layer is thin - it handles HTTP concerns and delegates
# ERP access and aggregation to the core/ and lib/ packages.
# =============================================================================
