# =============================================================================
# Django Project Configuration Package
# =============================================================================
# Settings, URL routing and the ASGI/WSGI entry points for the marketplace
# backend. HTTP is served by Django; the live channel by Django Channels.
# =============================================================================
