# business_hub/core/__init__.py
"""
Core application modules.
Contains essential infrastructure components:
- bootstrap: Application initialization, default admin and seeded credit grants
- db: Database configuration and connection management
- errors: Application error taxonomy rendered by the API
- pubsub: Room topic fan-out and per-connection disconnect cleanup
- security: Authentication tokens and password hashing
"""
