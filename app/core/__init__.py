"""
Core Application - Infrastructure & Base Classes

This app contains infrastructure code shared by the domain apps
(authentication, chat):

- Generic, reusable base classes (no chat-specific logic)
- Error taxonomy and its HTTP mapping
- Health check endpoint

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Services (import from core.services):
    - BaseService: Base class for service layer
    - ServiceResult: Standard result wrapper for success/failure handling

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes
    - ExternalServiceError, TransientStoreError, TransientBroadcastError
    - api_exception_handler: DRF EXCEPTION_HANDLER

Responses (import from core.responses):
    - failure_response: ServiceResult failure -> DRF Response

Note:
    Nothing is re-exported here: core is an installed app, and importing
    DRF while the app registry is loading is not safe.
"""
