"""FedEx carrier adapter — REST APIs with OAuth client credentials.

Every request carries a bearer token obtained from `/oauth/token`. The
token is cached on the adapter until shortly before it expires.
"""

import hashlib
import hmac
import os
import time
from datetime import date

import httpx
import structlog

from fulfillment.carrier.port import CarrierPort, PickupRequest, ShipmentRequest

logger = structlog.get_logger(__name__)

DEFAULT_API_URL = "https://apis-sandbox.fedex.com"
DEFAULT_SERVICE_TYPE = "FEDEX_INTERNATIONAL_PRIORITY"
DEFAULT_PACKAGING_TYPE = "YOUR_PACKAGING"
DEFAULT_PICKUP_TYPE = "USE_SCHEDULED_PICKUP"
CARRIER_CODE = "FDXE"
TIMEOUT_SECONDS = 30.0
TOKEN_EXPIRY_MARGIN = 60  # seconds


class CarrierError(Exception):
    """A FedEx call failed or returned something unusable."""


def _address(address: dict) -> dict:
    lines = address.get("street_lines") or [address.get("street", "")]
    return {
        "streetLines": [line for line in lines if line],
        "city": address.get("city", ""),
        "stateOrProvinceCode": address.get("state", ""),
        "postalCode": address.get("postal_code", ""),
        "countryCode": address.get("country_code", ""),
    }


def _contact(contact: dict) -> dict:
    return {
        "personName": contact.get("name", ""),
        "phoneNumber": contact.get("phone", ""),
        "emailAddress": contact.get("email", ""),
        "companyName": contact.get("company", ""),
    }


def _package(request: ShipmentRequest) -> dict:
    package = {"weight": {"units": "KG", "value": request.weight_kg}}
    if request.dimensions:
        package["dimensions"] = {
            "length": request.dimensions.get("length"),
            "width": request.dimensions.get("width"),
            "height": request.dimensions.get("height"),
            "units": request.dimensions.get("units", "CM"),
        }
    return package


def _error_message(response: httpx.Response) -> str:
    try:
        errors = response.json().get("errors") or []
    except ValueError:
        errors = []
    if errors:
        return errors[0].get("message") or errors[0].get("code") or "FedEx request failed"
    return f"FedEx request failed with status {response.status_code}"


class FedExCarrier(CarrierPort):
    """Production FedEx adapter."""

    name = "fedex"

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        account_number: str,
        api_url: str = DEFAULT_API_URL,
        webhook_secret: str | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        if not client_id or not client_secret:
            raise ValueError("FEDEX_KEY and FEDEX_SECRET are required")
        self.client_id = client_id
        self.client_secret = client_secret
        self.account_number = account_number
        self.api_url = api_url.rstrip("/")
        self.webhook_secret = webhook_secret
        self.http = http_client or httpx.Client(timeout=TIMEOUT_SECONDS)
        self._token: str | None = None
        self._token_expires_at = 0.0

    @classmethod
    def from_env(cls) -> "FedExCarrier":
        return cls(
            client_id=os.environ.get("FEDEX_KEY", ""),
            client_secret=os.environ.get("FEDEX_SECRET", ""),
            account_number=os.environ.get("FEDEX_ACCOUNT", ""),
            api_url=os.environ.get("FEDEX_API_URL", DEFAULT_API_URL),
            webhook_secret=os.environ.get("FEDEX_WEBHOOK_SECRET"),
        )

    # -------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------
    def access_token(self) -> str:
        if self._token and time.monotonic() < self._token_expires_at:
            return self._token

        try:
            response = self.http.post(
                f"{self.api_url}/oauth/token",
                data={
                    "grant_type": "client_credentials",
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                },
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        except httpx.HTTPError as exc:
            raise CarrierError("Failed to authenticate with FedEx") from exc
        if response.status_code != 200:
            raise CarrierError("Failed to authenticate with FedEx")

        payload = response.json()
        self._token = payload["access_token"]
        expires_in = int(payload.get("expires_in", 3600))
        self._token_expires_at = time.monotonic() + max(expires_in - TOKEN_EXPIRY_MARGIN, 0)
        return self._token

    def _call(self, method: str, path: str, payload: dict) -> dict:
        headers = {
            "Authorization": f"Bearer {self.access_token()}",
            "Content-Type": "application/json",
            "X-locale": "en_US",
        }
        try:
            response = self.http.request(method, f"{self.api_url}{path}", json=payload, headers=headers)
        except httpx.HTTPError as exc:
            raise CarrierError(f"FedEx request to {path} failed") from exc
        if response.status_code >= 400:
            raise CarrierError(_error_message(response))
        return response.json().get("output") or {}

    def _safely(self, operation: str, func, *args) -> dict:
        try:
            return {"success": True, "data": func(*args)}
        except (CarrierError, KeyError, IndexError, ValueError) as exc:
            logger.error("FedEx call failed", operation=operation, error=str(exc))
            return {"success": False, "error": str(exc) or f"FedEx {operation} failed"}

    # -------------------------------------------------------------------
    # Port
    # -------------------------------------------------------------------
    def get_rates(self, request: ShipmentRequest) -> dict:
        return self._safely("get_rates", self._rates, request)

    def _rates(self, request: ShipmentRequest) -> list[dict]:
        payload = {
            "accountNumber": {"value": self.account_number},
            "requestedShipment": {
                "shipper": {"address": _address(request.from_address)},
                "recipient": {"address": _address(request.to_address)},
                "pickupType": request.pickup_type or DEFAULT_PICKUP_TYPE,
                "packagingType": request.packaging_type or DEFAULT_PACKAGING_TYPE,
                "shipDateStamp": request.ship_date or date.today().isoformat(),
                "rateRequestType": ["ACCOUNT"],
                "requestedPackageLineItems": [_package(request)] * request.package_count,
            },
        }
        if request.service_type:
            payload["requestedShipment"]["serviceType"] = request.service_type

        output = self._call("POST", "/rate/v1/rates/quotes", payload)
        rates = []
        for detail in output.get("rateReplyDetails", []):
            rated = (detail.get("ratedShipmentDetails") or [{}])[0]
            rates.append(
                {
                    "service_type": detail.get("serviceType"),
                    "service_name": detail.get("serviceName"),
                    "total_charge": rated.get("totalNetCharge"),
                    "currency": rated.get("currency"),
                    "transit_days": (detail.get("commit") or {}).get("transitDays"),
                }
            )
        return rates

    def create_shipment(self, request: ShipmentRequest) -> dict:
        return self._safely("create_shipment", self._ship, request)

    def _ship(self, request: ShipmentRequest) -> dict:
        payload = {
            "labelResponseOptions": "URL_ONLY",
            "accountNumber": {"value": self.account_number},
            "requestedShipment": {
                "shipper": {"contact": _contact(request.from_contact), "address": _address(request.from_address)},
                "recipients": [{"contact": _contact(request.to_contact), "address": _address(request.to_address)}],
                "shipDatestamp": request.ship_date or date.today().isoformat(),
                "serviceType": request.service_type or DEFAULT_SERVICE_TYPE,
                "packagingType": request.packaging_type or DEFAULT_PACKAGING_TYPE,
                "pickupType": request.pickup_type or DEFAULT_PICKUP_TYPE,
                "shippingChargesPayment": {"paymentType": "SENDER"},
                "labelSpecification": {"imageType": "PDF", "labelStockType": "PAPER_85X11_TOP_HALF_LABEL"},
                "requestedPackageLineItems": [_package(request)] * request.package_count,
            },
        }
        output = self._call("POST", "/ship/v1/shipments", payload)
        shipment = output["transactionShipments"][0]
        documents = shipment["pieceResponses"][0].get("packageDocuments") or [{}]
        return {
            "tracking_number": shipment["masterTrackingNumber"],
            "shipment_id": shipment.get("shipmentId") or shipment["masterTrackingNumber"],
            "label_url": documents[0].get("url"),
        }

    def track(self, tracking_number: str) -> dict:
        return self._safely("track", self._track, tracking_number)

    def _track(self, tracking_number: str) -> dict:
        payload = {
            "includeDetailedScans": True,
            "trackingInfo": [{"trackingNumberInfo": {"trackingNumber": tracking_number}}],
        }
        output = self._call("POST", "/track/v1/trackingnumbers", payload)
        result = output["completeTrackResults"][0]["trackResults"][0]
        latest = result.get("latestStatusDetail") or {}
        events = []
        for scan in result.get("scanEvents", []):
            location = scan.get("scanLocation") or {}
            events.append(
                {
                    "code": scan.get("eventType"),
                    "description": scan.get("eventDescription"),
                    "location": ", ".join(p for p in (location.get("city"), location.get("countryCode")) if p),
                    "occurred_at": scan.get("date"),
                }
            )
        return {
            "tracking_number": tracking_number,
            "code": latest.get("code"),
            "status": latest.get("description"),
            "events": events,
        }

    def schedule_pickup(self, request: PickupRequest) -> dict:
        return self._safely("schedule_pickup", self._pickup, request)

    def _pickup(self, request: PickupRequest) -> dict:
        payload = {
            "associatedAccountNumber": {"value": self.account_number},
            "originDetail": {
                "pickupLocation": {
                    "contact": _contact(request.pickup_contact),
                    "address": _address(request.pickup_address),
                },
                "readyDateTimestamp": f"{request.pickup_date}T{request.ready_time}:00",
                "customerCloseTime": f"{request.close_time}:00",
            },
            "packageCount": request.package_count,
            "totalWeight": {"units": "KG", "value": request.total_weight_kg},
            "carrierCode": CARRIER_CODE,
        }
        output = self._call("POST", "/pickup/v1/pickups", payload)
        return {"confirmation_code": output["pickupConfirmationCode"], "pickup_date": request.pickup_date}

    def get_pickup_availability(self, postal_code: str, country: str) -> dict:
        return self._safely("get_pickup_availability", self._availability, postal_code, country)

    def _availability(self, postal_code: str, country: str) -> dict:
        payload = {
            "pickupAddress": {"postalCode": postal_code, "countryCode": country},
            "pickupRequestType": ["SAME_DAY", "FUTURE_DAY"],
            "carriers": [CARRIER_CODE],
            "countryRelationship": "INTERNATIONAL",
        }
        output = self._call("POST", "/pickup/v1/pickups/availabilities", payload)
        dates = [option["pickupDate"] for option in output.get("options", []) if option.get("available")]
        return {"dates": dates}

    def cancel_shipment(self, tracking_number: str) -> dict:
        result = self._safely("cancel_shipment", self._cancel, tracking_number)
        if result["success"] and not result["data"]:
            return {"success": False, "error": "FedEx did not cancel the shipment"}
        return {"success": result["success"], "error": result.get("error")}

    def _cancel(self, tracking_number: str) -> bool:
        payload = {
            "accountNumber": {"value": self.account_number},
            "deletionControl": "DELETE_ALL_PACKAGES",
            "trackingNumber": tracking_number,
        }
        output = self._call("PUT", "/ship/v1/shipments/cancel", payload)
        return bool(output.get("cancelledShipment"))

    def verify_webhook_signature(self, payload: str | bytes, signature: str) -> bool:
        if not self.webhook_secret or not signature:
            return False
        if isinstance(payload, str):
            payload = payload.encode()
        expected = hmac.new(self.webhook_secret.encode(), payload, hashlib.sha256).hexdigest()
        return hmac.compare_digest(expected, signature)
