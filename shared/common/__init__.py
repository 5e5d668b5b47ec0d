# Shared Common Library for the studio marketplace services.
# Authentication, error handling, middleware, caching and model mixins
# used across the services.

__version__ = "1.0.0"
