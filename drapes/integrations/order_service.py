import logging
import random
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import click
import requests
from flask import current_app
from flask.cli import with_appcontext

from drapes.billing import ledger_summary, reconcile_billing
from drapes.domain import Order, OrderBilling
from drapes.normalize import order_from_backend, order_to_backend, unwrap_list

MAX_RETRIES = 3

EMPTY_KPIS = {'orders': 0, 'fabric_pending': 0, 'stitching': 0, 'installation': 0, 'completed': 0}


class OrderServiceError(Exception):
    """Non-success response from the order service."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthRequired(OrderServiceError):
    """The service rejected our token; the user has to log in again."""


@dataclass(frozen=True)
class Credentials:
    token: Optional[str] = None

    def headers(self) -> Dict[str, str]:
        return {'Authorization': f'Bearer {self.token}'} if self.token else {}


class OrderServiceClient:
    def __init__(self, base_url: str, timeout: int = 10) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    @classmethod
    def from_app(cls, app=None) -> "OrderServiceClient":
        app = app or current_app
        return cls(app.config["ORDER_API_URL"], timeout=app.config.get("ORDER_API_TIMEOUT", 10))

    def request(
        self,
        method: str,
        path: str,
        creds: Optional[Credentials] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        headers = creds.headers() if creds else {}
        tries = 0
        while True:
            try:
                r = self.session.request(method, url, json=json, headers=headers, timeout=self.timeout)
            except requests.RequestException:  # network issue
                tries += 1
                if tries > MAX_RETRIES:
                    raise
                delay = min(2 ** tries, 30) + random.random()
                time.sleep(delay)
                continue
            if r.status_code == 429 or r.status_code >= 500:
                tries += 1
                if tries <= MAX_RETRIES:
                    delay = min(2 ** tries, 30) + random.random()
                    time.sleep(delay)
                    continue
            return self._handle(r)

    @staticmethod
    def _handle(r) -> Any:
        if r.status_code == 401:
            raise AuthRequired("AUTH_REQUIRED", 401)
        if r.status_code >= 400:
            logging.error("order service error (%s): %s", r.status_code, r.text)
            raise OrderServiceError(r.text or f"Error {r.status_code}", r.status_code)
        content_type = r.headers.get("content-type") or ""
        if "application/json" in content_type:
            return r.json()
        return r.text

    def login(self, username: str, password: str) -> Optional[Credentials]:
        try:
            data = self.request("POST", "/login", json={"username": username, "password": password})
        except AuthRequired:
            return None
        token = data.get("token") if isinstance(data, dict) else None
        return Credentials(token) if token else None

    def list_orders(self, creds: Credentials) -> List[Order]:
        data = self.request("GET", "/orders/list", creds)
        return [order_from_backend(o, self.base_url) for o in unwrap_list(data, "orders", "data")]

    def get_order(self, creds: Credentials, order_id: str) -> Optional[Order]:
        try:
            data = self.request("GET", f"/orders/{order_id}", creds)
        except AuthRequired:
            raise
        except OrderServiceError as e:
            logging.info("order %s not loaded: %s", order_id, e)
            return None
        return order_from_backend(data, self.base_url)

    def save_order(self, creds: Credentials, order: Order) -> Any:
        """Create or fully replace ``order`` on the service."""
        order.ensure_valid()
        payload = order_to_backend(order)
        if order.order_id:
            return self.request("PUT", f"/orders/{order.order_id}", creds, json=payload)
        return self.request("POST", "/orders", creds, json=payload)

    def delete_order(self, creds: Credentials, order_id: str) -> None:
        self.request("DELETE", f"/orders/{order_id}", creds)

    def get_kpis(self, creds: Credentials) -> Dict[str, Any]:
        try:
            data = self.request("GET", "/dashboard/kpis", creds)
        except AuthRequired:
            raise
        except (OrderServiceError, requests.RequestException) as e:
            logging.warning("kpis unavailable: %s", e)
            return dict(EMPTY_KPIS)
        return data if isinstance(data, dict) else dict(EMPTY_KPIS)

    def list_billing(self, creds: Credentials) -> List[OrderBilling]:
        data = self.request("GET", "/billing", creds)
        return [reconcile_billing(b) for b in unwrap_list(data, "billing")]


@click.group("ledger")
def ledger_cli() -> None:
    """Billing ledger commands."""


@ledger_cli.command("audit")
@click.option("--token", envvar="ORDER_API_TOKEN", help="Bearer token for the order service")
@with_appcontext
def audit_command(token: Optional[str]) -> None:
    bills = OrderServiceClient.from_app().list_billing(Credentials(token))
    summary = ledger_summary(bills)
    corrected = [b.order_id for b in bills if b.corrected]
    click.echo(f"orders={len(bills)} revenue={summary['revenue']:.2f} "
               f"paid={summary['paid']:.2f} pending={summary['pending']:.2f}")
    click.echo(f"corrected={len(corrected)}")
    for order_id in corrected:
        click.echo(f"  {order_id}")
