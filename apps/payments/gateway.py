"""
Payment provider adapters.

`PayPalGateway` talks to the PayPal Orders v2 REST API. `SandboxGateway`
emulates the provider in-process and is used when no credentials are
configured (development and tests).

Failure classification:
- GatewayError: network errors, timeouts, HTTP 5xx/429; nothing changed,
  the call may be repeated
- GatewayConfigurationError: the provider refused our credentials; a
  GatewayError that is not retryable
- GatewayRejection: the provider refused this order (declined card, invalid
  order); the order is dead
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Optional, Protocol

import requests
from django.conf import settings  # type: ignore

from shared.domain.exceptions import GatewayConfigurationError, GatewayError, GatewayRejection
from shared.domain.value_objects import Money

logger = logging.getLogger(__name__)

PAYPAL_SANDBOX_URL = "https://api-m.sandbox.paypal.com"
ALREADY_CAPTURED_ISSUE = "ORDER_ALREADY_CAPTURED"
RETRYABLE_STATUSES = {408, 409, 429}


@dataclass(frozen=True)
class CaptureResult:
    order_id: str
    transaction_id: str
    status: str
    payer_id: str = ""
    payer_email: str = ""
    already_captured: bool = False


class PaymentGateway(Protocol):
    name: str

    def create_order(
        self,
        reference_id: str,
        amount: Money,
        description: str = "",
        *,
        payee_merchant_id: str = "",
        platform_fee: Optional[Money] = None,
        request_id: str = "",
    ) -> str:
        ...

    def capture_order(self, order_id: str, *, timeout: Optional[float] = None) -> CaptureResult:
        ...

    def get_order(self, order_id: str, *, timeout: Optional[float] = None) -> CaptureResult:
        ...


def _extract_capture(order_id: str, data: dict, *, already_captured: bool = False) -> CaptureResult:
    """Pull the capture id and payer out of an order/capture representation."""
    units = data.get("purchase_units") or [{}]
    captures = (units[0].get("payments") or {}).get("captures") or []
    capture = captures[0] if captures else {}
    payer = data.get("payer") or {}
    return CaptureResult(
        order_id=order_id,
        transaction_id=capture.get("id", ""),
        status=capture.get("status") or data.get("status", ""),
        payer_id=payer.get("payer_id", ""),
        payer_email=payer.get("email_address", ""),
        already_captured=already_captured,
    )


class PayPalGateway:
    """PayPal Orders v2 client built on requests."""

    name = "paypal"

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        base_url: str = PAYPAL_SANDBOX_URL,
        *,
        timeout: float = 10.0,
        return_url: str = "",
        cancel_url: str = "",
        session: Optional[requests.Session] = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.return_url = return_url
        self.cancel_url = cancel_url
        self.session = session or requests.Session()
        self._access_token = ""
        self._token_expires_at = 0.0

    # ----------------------------------------------------------------- auth

    def _token(self, timeout: float) -> str:
        if self._access_token and time.monotonic() < self._token_expires_at:
            return self._access_token
        try:
            response = self.session.post(
                f"{self.base_url}/v1/oauth2/token",
                data={"grant_type": "client_credentials"},
                auth=(self.client_id, self.client_secret),
                headers={"Accept": "application/json"},
                timeout=timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"PayPal token request failed: {e}")
            raise GatewayError(f"Payment provider unreachable: {e}")
        if response.status_code >= 500 or response.status_code in RETRYABLE_STATUSES:
            raise GatewayError(f"Payment provider authentication unavailable ({response.status_code})")
        if not response.ok:
            logger.error(f"PayPal rejected credentials: {response.status_code} {response.text[:200]}")
            raise GatewayConfigurationError(
                f"Payment provider rejected the configured credentials ({response.status_code})"
            )
        data = response.json()
        self._access_token = data["access_token"]
        # Renew a minute early
        self._token_expires_at = time.monotonic() + max(int(data.get("expires_in", 0)) - 60, 0)
        return self._access_token

    # -------------------------------------------------------------- helpers

    def _request(self, method: str, path: str, *, request_id: str = "", timeout=None, json=None) -> requests.Response:
        timeout = timeout or self.timeout
        headers = {
            "Authorization": f"Bearer {self._token(timeout)}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Prefer": "return=representation",
        }
        if request_id:
            headers["PayPal-Request-Id"] = request_id
        try:
            response = self.session.request(
                method,
                f"{self.base_url}{path}",
                json=json,
                headers=headers,
                timeout=timeout,
            )
        except requests.exceptions.Timeout as e:
            logger.warning(f"PayPal {method} {path} timed out after {timeout}s")
            raise GatewayError(f"Payment provider timed out: {e}")
        except requests.exceptions.RequestException as e:
            logger.error(f"PayPal {method} {path} failed: {e}")
            raise GatewayError(f"Payment provider unreachable: {e}")

        if response.status_code == 401:
            self._access_token = ""
            raise GatewayError("Payment provider session expired")
        if response.status_code >= 500 or response.status_code in RETRYABLE_STATUSES:
            raise GatewayError(f"Payment provider unavailable ({response.status_code})")
        return response

    @staticmethod
    def _issues(response: requests.Response) -> list[str]:
        try:
            body = response.json()
        except ValueError:
            return []
        return [detail.get("issue", "") for detail in body.get("details") or []]

    def _reject(self, action: str, order_id: str, response: requests.Response) -> GatewayRejection:
        issues = self._issues(response)
        reason = ", ".join(issue for issue in issues if issue) or f"HTTP {response.status_code}"
        logger.warning(f"PayPal rejected {action} for order {order_id}: {reason}")
        return GatewayRejection(f"Payment provider rejected {action}: {reason}")

    # ------------------------------------------------------------ contract

    def create_order(
        self,
        reference_id: str,
        amount: Money,
        description: str = "",
        *,
        payee_merchant_id: str = "",
        platform_fee: Optional[Money] = None,
        request_id: str = "",
    ) -> str:
        value = amount.to_major_string()
        purchase_unit: dict = {
            "reference_id": reference_id,
            "description": description[:127],
            "amount": {
                "currency_code": amount.currency,
                "value": value,
                "breakdown": {"item_total": {"currency_code": amount.currency, "value": value}},
            },
        }
        if payee_merchant_id:
            purchase_unit["payee"] = {"merchant_id": payee_merchant_id}
            if platform_fee and platform_fee.amount_minor:
                purchase_unit["payment_instruction"] = {
                    "disbursement_mode": "INSTANT",
                    "platform_fees": [
                        {
                            "amount": {
                                "currency_code": platform_fee.currency,
                                "value": platform_fee.to_major_string(),
                            }
                        }
                    ],
                }
        payload: dict = {"intent": "CAPTURE", "purchase_units": [purchase_unit]}
        if self.return_url or self.cancel_url:
            payload["application_context"] = {"return_url": self.return_url, "cancel_url": self.cancel_url}

        response = self._request(
            "POST",
            "/v2/checkout/orders",
            request_id=request_id or f"create-{reference_id}",
            json=payload,
        )
        if not response.ok:
            raise self._reject("order creation", reference_id, response)

        order_id = response.json()["id"]
        logger.info(f"PayPal order {order_id} created for {reference_id}: {amount}")
        return order_id

    def get_order(self, order_id: str, *, timeout: Optional[float] = None) -> CaptureResult:
        response = self._request("GET", f"/v2/checkout/orders/{order_id}", timeout=timeout)
        if not response.ok:
            raise self._reject("order lookup", order_id, response)
        return _extract_capture(order_id, response.json())

    def capture_order(self, order_id: str, *, timeout: Optional[float] = None) -> CaptureResult:
        response = self._request(
            "POST",
            f"/v2/checkout/orders/{order_id}/capture",
            request_id=f"capture-{order_id}",
            timeout=timeout,
        )
        if response.status_code == 422 and ALREADY_CAPTURED_ISSUE in self._issues(response):
            logger.warning(f"PayPal reports order {order_id} already captured, fetching existing capture")
            existing = self.get_order(order_id, timeout=timeout)
            return CaptureResult(
                order_id=order_id,
                transaction_id=existing.transaction_id,
                status=existing.status,
                payer_id=existing.payer_id,
                payer_email=existing.payer_email,
                already_captured=True,
            )
        if not response.ok:
            raise self._reject("capture", order_id, response)

        result = _extract_capture(order_id, response.json())
        if result.status == "PENDING":
            raise GatewayError(f"Capture for order {order_id} is pending at the provider")
        if result.status != "COMPLETED" or not result.transaction_id:
            raise GatewayRejection(f"Capture for order {order_id} ended with status {result.status or 'unknown'}")
        logger.info(f"PayPal order {order_id} captured: transaction {result.transaction_id}")
        return result


@dataclass
class SandboxGateway:
    """
    In-process provider emulator.

    Captures are idempotent like the real provider: a second capture of the
    same order answers "already captured" with the first transaction.
    """

    name: str = "sandbox"
    orders: dict = field(default_factory=dict)
    captures: dict = field(default_factory=dict)
    declined_orders: set = field(default_factory=set)
    unavailable: bool = False
    capture_calls: int = 0

    def _check_available(self):
        if self.unavailable:
            raise GatewayError("Sandbox payment provider unavailable")

    def create_order(
        self,
        reference_id: str,
        amount: Money,
        description: str = "",
        *,
        payee_merchant_id: str = "",
        platform_fee: Optional[Money] = None,
        request_id: str = "",
    ) -> str:
        self._check_available()
        for order_id, order in self.orders.items():
            if request_id and order["request_id"] == request_id:
                return order_id
        order_id = f"SANDBOX-{uuid.uuid4().hex[:17].upper()}"
        self.orders[order_id] = {
            "reference_id": reference_id,
            "amount": amount,
            "request_id": request_id,
            "payee_merchant_id": payee_merchant_id,
        }
        logger.warning(f"Sandbox payment order {order_id} created for {reference_id}: {amount}")
        return order_id

    def get_order(self, order_id: str, *, timeout: Optional[float] = None) -> CaptureResult:
        self._check_available()
        if order_id not in self.orders:
            raise GatewayRejection(f"Unknown order {order_id}")
        transaction_id = self.captures.get(order_id, "")
        return CaptureResult(
            order_id=order_id,
            transaction_id=transaction_id,
            status="COMPLETED" if transaction_id else "CREATED",
            payer_id="SANDBOXPAYER",
        )

    def capture_order(self, order_id: str, *, timeout: Optional[float] = None) -> CaptureResult:
        self._check_available()
        self.capture_calls += 1
        if order_id not in self.orders:
            raise GatewayRejection(f"Unknown order {order_id}")
        if order_id in self.declined_orders:
            raise GatewayRejection("Payment provider rejected capture: INSTRUMENT_DECLINED")
        if order_id in self.captures:
            existing = self.get_order(order_id)
            return CaptureResult(
                order_id=order_id,
                transaction_id=existing.transaction_id,
                status=existing.status,
                payer_id=existing.payer_id,
                already_captured=True,
            )
        self.captures[order_id] = f"SANDBOXTXN{uuid.uuid4().hex[:12].upper()}"
        return self.get_order(order_id)


def build_gateway() -> PaymentGateway:
    """PayPal when credentials are configured, the sandbox emulator otherwise."""
    client_id = getattr(settings, "PAYPAL_CLIENT_ID", "")
    client_secret = getattr(settings, "PAYPAL_CLIENT_SECRET", "")
    if not client_id or not client_secret:
        logger.warning("PayPal credentials missing, using the sandbox payment emulator")
        return SandboxGateway()
    site_url = getattr(settings, "PUBLIC_SITE_URL", "").rstrip("/")
    return PayPalGateway(
        client_id,
        client_secret,
        getattr(settings, "PAYPAL_API_BASE_URL", PAYPAL_SANDBOX_URL),
        timeout=float(getattr(settings, "PAYPAL_TIMEOUT_SECONDS", 10)),
        return_url=f"{site_url}/payment-success" if site_url else "",
        cancel_url=f"{site_url}/payment-cancel" if site_url else "",
    )
