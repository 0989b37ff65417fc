# drapes/auth/utils.py
"""Per-request access to the order service."""

from flask import session

from drapes.integrations.order_service import Credentials, OrderServiceClient

TOKEN_KEY = 'order_api_token'


def credentials() -> Credentials:
    return Credentials(session.get(TOKEN_KEY))


def service_client() -> OrderServiceClient:
    return OrderServiceClient.from_app()
