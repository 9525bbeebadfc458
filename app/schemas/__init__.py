"""
Schemas module - Request/Response schemas for API endpoints.

Difference from models:
- Models: Internal data structures (principal, status enums)
- Schemas: API contract (what client sends/receives)
"""
