"""Shared test fixtures and configuration."""
import os

# Settings are read lazily on first access; provide the required variables
# before any test imports the application.
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-the-backoffice-suite")
os.environ.setdefault("ALLOWED_ORIGINS", "http://localhost:3000")
