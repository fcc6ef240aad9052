"""
Core app - Shared abstractions and utilities.

This app provides platform-agnostic pieces used by every feature app:
- Task execution (TaskService)
- Domain errors and their HTTP mapping (errors)
- Message catalogs (i18n)
- File uploads (uploads)
- Transactional email (email_service)

Task execution can switch between:
- Local development (sync execution)
- AWS Lambda + SQS (production)
- Celery + Redis (fallback)
"""
