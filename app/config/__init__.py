# =============================================================================
# Django Project Configuration Package
# =============================================================================
# This package contains the chat backend configuration: settings, URLs and
# the ASGI/WSGI applications.
# =============================================================================
