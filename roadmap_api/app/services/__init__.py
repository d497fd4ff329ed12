"""
Service layer.

Each service encapsulates the business rules for one resource.
Services receive the storage handle (and, for owner lookups, the users
client) from the endpoint so that both can be swapped through FastAPI
dependency overrides without touching the rules themselves.
"""
