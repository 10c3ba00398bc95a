"""
Core Application - Infrastructure & Base Classes

Generic building blocks used by the domain apps. Nothing in here knows
about conversations or messages.

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Services (import from core.services):
    - BaseService: Base class for service layer
    - ServiceResult: Standard result wrapper for success/failure handling

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes
    - ValidationError, NotFoundError, PermissionDeniedError, ConflictError
    - exception_for: Build the exception matching a service error code

Validators (import from core.validators):
    - validate_file_size: File size validation
    - validate_content_type: MIME type allow-list validation

Views (import from core.views):
    - health_check: Database/cache/channel-layer probe
"""
