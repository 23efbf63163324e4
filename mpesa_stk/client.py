import logging
from typing import Protocol

import requests

from .auth import TokenManager
from .callback import parse_callback
from .config import MpesaConfig, load_config
from .errors import AuthenticationError, ConfigurationError, ProviderDeclinedError, TransportError
from .signing import build_push_request
from .types import CallbackOutcome, CallbackResult, PushRequest, PushResult

logger = logging.getLogger(__name__)

STK_PUSH_PATH = "/mpesa/stkpush/v1/processrequest"


class DonationStore(Protocol):
    """Persists completed donations. Should reject a repeated checkout_request_id."""

    def save_donation(self, result: CallbackResult) -> None:
        ...


class ReceiptSender(Protocol):
    """Sends the donor a receipt for a completed donation."""

    def send_receipt(self, result: CallbackResult) -> None:
        ...


class MpesaSTK:
    def __init__(
        self,
        config: MpesaConfig,
        token_manager: TokenManager | None = None,
        store: DonationStore | None = None,
        notifier: ReceiptSender | None = None,
        timeout: float | None = None,
    ):
        self.config = config
        self.token_manager = token_manager or TokenManager(config, timeout=timeout)
        self.store = store
        self.notifier = notifier
        self.timeout = timeout

    def initiate(
        self,
        phone_number: str,
        amount,
        account_reference: str,
        transaction_desc: str,
    ) -> PushResult:
        """
        Prompt the donor's phone for payment (STK push).

        Never raises; provider, network and encoding failures come back as
        PushResult(success=False) with the provider's error body when
        there was one.

        Args:
            phone_number: Payer MSISDN, e.g. "254712345678"
            amount: Amount in KES
            account_reference: Reference shown to the payer
            transaction_desc: Description shown to the payer

        Returns:
            PushResult with the checkout and merchant request IDs on success
        """
        try:
            token = self.token_manager.ensure_token()
        except AuthenticationError as e:
            logger.error("STK push aborted, no access token: %s", e)
            return PushResult(success=False, error=str(e))

        try:
            push_request = build_push_request(
                self.config,
                phone_number=phone_number,
                amount=amount,
                account_reference=account_reference,
                transaction_desc=transaction_desc,
            )
            data = self._submit(push_request, token)
        except TransportError as e:
            logger.error("STK push error: %s", e)
            return PushResult(success=False, error=e.detail)
        except Exception as e:
            logger.exception("STK push error")
            return PushResult(success=False, error=str(e))

        logger.info(
            "STK push accepted: checkout=%s merchant=%s",
            data["CheckoutRequestID"],
            data.get("MerchantRequestID"),
        )
        return PushResult(
            success=True,
            checkout_request_id=data["CheckoutRequestID"],
            merchant_request_id=data.get("MerchantRequestID"),
            customer_message=data.get("CustomerMessage"),
        )

    def handle_callback(self, payload: dict) -> CallbackOutcome:
        """
        Process the provider's asynchronous STK push result.

        On a successful payment the donation is saved and then a receipt
        is sent. A failure in either step is reported, not retried, and a
        saved donation is left in place if the receipt fails.

        Returns:
            CallbackOutcome; for a declined payment, error is the
            provider's ResultDesc

        Raises:
            MalformedCallbackError: if the payload lacks the callback
                envelope or a successful payment lacks required metadata
        """
        try:
            result = parse_callback(payload)
        except ProviderDeclinedError as e:
            logger.warning(
                "M-Pesa payment failed: %s (code %s, checkout %s)",
                e.result_description,
                e.result_code,
                e.checkout_request_id,
            )
            return CallbackOutcome(success=False, error=e.result_description)

        try:
            if self.store is not None:
                self.store.save_donation(result)
            else:
                logger.warning("No donation store configured, %s not saved", result.checkout_request_id)

            if self.notifier is not None:
                self.notifier.send_receipt(result)
            else:
                logger.warning("No receipt sender configured, no receipt for %s", result.checkout_request_id)
        except Exception as e:
            logger.exception("Callback handling error for %s", result.checkout_request_id)
            return CallbackOutcome(success=False, data=result, error=str(e))

        return CallbackOutcome(success=True, data=result)

    def _submit(self, push_request: PushRequest, token: str) -> dict:
        url = f"{self.config.base_url}{STK_PUSH_PATH}"
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        payload = push_request.to_payload()
        logger.debug("STK push request: %s", {k: v for k, v in payload.items() if k != "Password"})

        try:
            response = requests.post(url, json=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise TransportError(str(e)) from e

        if not response.ok:
            try:
                detail = response.json()
            except ValueError:
                detail = response.text
            raise TransportError(detail, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(
                f"STK push response is not JSON: {response.text}", status_code=response.status_code
            ) from e

        if not isinstance(data, dict) or not data.get("CheckoutRequestID"):
            raise TransportError(f"STK push response missing CheckoutRequestID: {data}", status_code=response.status_code)
        return data


# Factory function for one-line usage
def stk_push(
    phone_number: str,
    amount,
    account_reference: str,
    transaction_desc: str,
    timeout: float | None = None,
) -> PushResult:
    """
    One-line STK push using configuration from the environment.

    Reads MPESA_CONSUMER_KEY, MPESA_CONSUMER_SECRET, MPESA_SHORTCODE,
    MPESA_PASSKEY, MPESA_CALLBACK_URL and optionally MPESA_ENVIRONMENT.

    Usage:
        from mpesa_stk import stk_push

        result = stk_push("254712345678", 100, "DONATION", "Donation")
        if result.success:
            print(result.checkout_request_id)

    Returns:
        PushResult; missing configuration is reported as a failed result
    """
    try:
        config = load_config()
    except ConfigurationError as e:
        return PushResult(success=False, error=str(e))

    client = MpesaSTK(config, timeout=timeout)
    return client.initiate(
        phone_number=phone_number,
        amount=amount,
        account_reference=account_reference,
        transaction_desc=transaction_desc,
    )
