"""
Root pytest configuration.
Environment must be set before the app modules are imported.
"""
import os

# Set testing environment before importing app
os.environ["TESTING"] = "True"
os.environ["DEBUG"] = "False"
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("REFRESH_SECRET", "test-refresh")
