"""
ASGI config for ManzelHelp project.

Serves traditional ASGI servers (Daphne, Uvicorn) and AWS Lambda
through Mangum.
"""
import os

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

# =============================================================================
# Cold Start Optimization
# =============================================================================
# Django is initialized at import time so Lambda pays for it once per
# container rather than per request.

from django.core.asgi import get_asgi_application

application = get_asgi_application()


# =============================================================================
# Lambda Handler (via Mangum)
# =============================================================================

_lambda_handler = None


def lambda_handler(event, context):
    """
    AWS Lambda entry point for HTTP requests.

    lambda_handlers.api_handler wraps this same application.
    """
    global _lambda_handler
    if _lambda_handler is None:
        from mangum import Mangum
        _lambda_handler = Mangum(application, lifespan="off")
    return _lambda_handler(event, context)
