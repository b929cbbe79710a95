"""Wise API Service for quoting, creating recipients and submitting transfers."""

import json
import uuid
from typing import Any, Dict, Optional, Tuple, cast
import httpx
from remitbot.schemas.core import (
    ArgentinaBankDetails,
    BankDetails,
    BrazilBankDetails,
    ChileBankDetails,
    ColombiaBankDetails,
    EuropeBankDetails,
    MexicoBankDetails,
    TransferResult,
    UKBankDetails,
)
from remitbot.services.errors import ProviderError
from remitbot.utils.config import settings
from remitbot.utils.logger import get_logger

logger = get_logger("wise_service")

SOURCE_CURRENCY = "USD"
SOURCE_OF_FUNDS = "verification.source.of.funds.other"
DEFAULT_REFERENCE = "WhatsApp transfer"


class WiseAPIError(ProviderError):
    """Custom exception for Wise API errors."""


def build_recipient_details(bank_details: BankDetails) -> Tuple[str, Dict[str, Any]]:
    """Map typed bank details to the Wise recipient ``type`` and ``details`` body."""
    if isinstance(bank_details, MexicoBankDetails):
        return "mexican", {"legalType": "PRIVATE", "clabe": bank_details.clabe}

    if isinstance(bank_details, BrazilBankDetails):
        return "brazilian", {
            "legalType": "PRIVATE",
            "cpf": bank_details.cpf,
            "accountNumber": bank_details.account_number,
            "accountType": bank_details.account_type.lower(),
            "bankCode": bank_details.bank_code,
        }

    if isinstance(bank_details, UKBankDetails):
        return "sort_code", {
            "legalType": "PRIVATE",
            "sortCode": bank_details.sort_code,
            "accountNumber": bank_details.account_number,
        }

    if isinstance(bank_details, EuropeBankDetails):
        return "iban", {"legalType": "PRIVATE", "iban": bank_details.iban}

    if isinstance(bank_details, ColombiaBankDetails):
        return "colombia", {
            "legalType": "PRIVATE",
            "bankCode": "COLOCOBM",
            "accountNumber": bank_details.account_number,
            "accountType": bank_details.account_type.upper(),
            "phoneNumber": bank_details.phone_number,
            "idDocumentType": "CC",
            "idDocumentNumber": bank_details.id_document_number,
            "address": {
                "country": "CO",
                "city": bank_details.city,
                "firstLine": bank_details.address,
                "postCode": bank_details.post_code,
            },
        }

    if isinstance(bank_details, ArgentinaBankDetails):
        return "argentina", {
            "legalType": "PRIVATE",
            "accountNumber": bank_details.account_number,
            "accountType": bank_details.account_type.upper(),
            "phoneNumber": bank_details.phone_number,
            "idDocumentNumber": bank_details.id_document_number,
            "address": {"country": "AR", "city": bank_details.city},
        }

    if isinstance(bank_details, ChileBankDetails):
        return "chile", {
            "legalType": "PRIVATE",
            "bankCode": bank_details.bank_code,
            "accountNumber": bank_details.account_number,
            "rut": bank_details.id_document_number,
            "accountType": bank_details.account_type.upper(),
        }

    raise ValueError(f"Unsupported bank details type: {type(bank_details).__name__}")


class WiseService:
    """Service class for interacting with the Wise API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        profile_id: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.wise_api_key
        self.profile_id = profile_id if profile_id is not None else settings.wise_profile_id
        self.base_url = (base_url or settings.wise_api_url).rstrip("/")
        self.timeout = timeout or settings.wise_timeout
        self._transport = transport

        if not self.api_key:
            logger.warning("⚠️  Wise API key not configured, transfers will run in demo mode")
        else:
            logger.info("✅ Wise API key configured")

        self.headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.profile_id)

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        data: Optional[Dict] = None,
        params: Optional[Dict] = None,
    ) -> Dict[str, Any]:
        """Make a single HTTP request to the Wise API. Failures raise WiseAPIError."""
        if not self.is_configured:
            error_msg = "Wise API not configured. Please set WISE_API_KEY and WISE_PROFILE_ID in environment variables."
            logger.error(error_msg)
            raise WiseAPIError(message=error_msg, status_code=401)

        url = f"{self.base_url}{endpoint}"

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                response = await client.request(
                    method=method,
                    url=url,
                    headers=self.headers,
                    json=data,
                    params=params,
                )
        except httpx.RequestError as e:
            logger.error(f"Network error calling Wise {method} {endpoint}: {str(e)}")
            raise WiseAPIError(f"Network error: {str(e)}")

        logger.info(f"{method} {endpoint} - Status: {response.status_code}")

        try:
            response_data = response.json()
        except ValueError:
            response_data = {}

        if response.status_code >= 400:
            error_message = self._error_message(response_data, response.status_code)
            logger.error(f"Wise error {response.status_code} on {endpoint}: {error_message}")
            raise WiseAPIError(
                message=error_message,
                status_code=response.status_code,
                response_data=response_data if isinstance(response_data, dict) else None,
            )

        return cast(Dict[str, Any], response_data)

    @staticmethod
    def _error_message(response_data: Any, status_code: int) -> str:
        if isinstance(response_data, dict):
            if response_data.get("errors"):
                return json.dumps(response_data["errors"])
            if response_data.get("message"):
                return str(response_data["message"])
            if response_data.get("error"):
                return str(response_data["error"])
        return f"Wise API returned status {status_code}"

    async def create_quote(self, target_currency: str, source_amount: float) -> Dict[str, Any]:
        """Create a USD -> target currency quote."""
        return await self._make_request("POST", "/v2/quotes", data={
            "sourceCurrency": SOURCE_CURRENCY,
            "targetCurrency": target_currency,
            "sourceAmount": source_amount,
            "targetAmount": None,
            "profile": self.profile_id,
        })

    async def create_recipient(self, recipient_name: str, bank_details: BankDetails) -> Dict[str, Any]:
        """Create a recipient account from typed bank details."""
        recipient_type, details = build_recipient_details(bank_details)
        logger.info(f"Creating {recipient_type} recipient for {bank_details.currency}")
        return await self._make_request("POST", "/v1/accounts", data={
            "currency": bank_details.currency,
            "type": recipient_type,
            "profile": self.profile_id,
            "accountHolderName": recipient_name,
            "details": details,
        })

    async def create_transfer(self, target_account: Any, quote_uuid: str, reference: Optional[str] = None) -> Dict[str, Any]:
        return await self._make_request("POST", "/v1/transfers", data={
            "targetAccount": target_account,
            "quoteUuid": quote_uuid,
            "customerTransactionId": str(uuid.uuid4()),
            "details": {
                "reference": reference or DEFAULT_REFERENCE,
                "sourceOfFunds": SOURCE_OF_FUNDS,
            },
        })

    async def fund_transfer(self, transfer_id: Any) -> Dict[str, Any]:
        """Pay a transfer from the profile's Wise balance."""
        return await self._make_request(
            "POST",
            f"/v3/profiles/{self.profile_id}/transfers/{transfer_id}/payments",
            data={"type": "BALANCE"},
        )

    async def get_transfer_status(self, transfer_id: Any) -> Dict[str, Any]:
        return await self._make_request("GET", f"/v1/transfers/{transfer_id}")

    async def submit_transfer(
        self,
        amount: float,
        recipient_name: str,
        country: str,
        bank_details: BankDetails,
        reference: Optional[str] = None,
    ) -> TransferResult:
        """
        Quote, create the recipient, create the transfer, then try to fund it.

        A 403 from the funding step is not fatal: personal API tokens cannot
        fund transfers, so the transfer is reported as ``pending_funding``.
        Any other failure raises WiseAPIError. Nothing is retried.
        """
        currency = bank_details.currency
        logger.info(f"Submitting transfer of {amount} USD -> {currency} ({country})")

        quote = await self.create_quote(currency, amount)
        recipient = await self.create_recipient(recipient_name, bank_details)
        transfer = await self.create_transfer(recipient.get("id"), quote.get("id"), reference)

        status = transfer.get("status", "incoming_payment_waiting")
        try:
            await self.fund_transfer(transfer.get("id"))
            logger.info(f"✅ Transfer {transfer.get('id')} funded")
        except WiseAPIError as e:
            if e.status_code != 403:
                raise
            logger.warning(f"⚠️  Funding transfer {transfer.get('id')} was forbidden, leaving it pending")
            status = "pending_funding"

        return TransferResult(
            transfer_id=str(transfer.get("id")),
            status=status,
            amount=amount,
            target_amount=float(quote.get("targetAmount") or 0),
            target_currency=currency,
            rate=float(quote.get("rate") or 0),
            fee=float(quote.get("fee") or 0),
            estimated_delivery=quote.get("estimatedDelivery"),
            recipient_name=recipient_name,
            recipient_country=country,
        )
