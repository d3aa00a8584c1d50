# API Layer - FastAPI routes, schemas and dependencies
