# Shared Common Library for the Course Authoring Service
# Cross-cutting utilities: exceptions, authentication, permissions,
# pagination, middleware, model mixins, validators, HTTP clients and
# health checks.

__version__ = "1.0.0"
