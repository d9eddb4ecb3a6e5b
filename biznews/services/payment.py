"""
Payment gate for paid tools.

This module provides the PaymentGate class, which builds x402 payment
requirements for a priced tool and asks a facilitator service to verify and
settle the payment the client attached.
"""

import base64
import json
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

import requests
from biznews.config import Config
from biznews.errors import ConfigurationError, PaymentError

logger = logging.getLogger(__name__)

X402_VERSION = 1

# USDC contract / mint per network
_USDC_ASSETS = {
    "base": "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",
    "base-sepolia": "0x036CbD53842c5426634e7929541eC2318f3dCF7e",
    "solana": "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
    "solana-devnet": "4zMMC9srt5Ri5X14GAgXhaHii3GnPAEERYPJgZJDncDU",
}

_NETWORKS = {
    # chain: (mainnet, testnet)
    "evm": ("base", "base-sepolia"),
    "svm": ("solana", "solana-devnet"),
}


def price_to_atomic(price: str, decimals: int = 6) -> str:
    """Converts a "$0.05" style price to token base units."""
    try:
        amount = Decimal(price.strip().lstrip("$"))
    except InvalidOperation:
        raise ConfigurationError(f"Invalid price {price!r}") from None
    if amount < 0:
        raise ConfigurationError(f"Invalid price {price!r}")
    return str(int(amount.scaleb(decimals)))


def decode_payment(header: str) -> Dict[str, Any]:
    """Decodes a base64 X-PAYMENT header into its JSON payload."""
    try:
        decoded = json.loads(base64.b64decode(header, validate=True))
    except (ValueError, TypeError) as e:
        raise PaymentError(f"Malformed payment header: {e}") from e
    if not isinstance(decoded, dict):
        raise PaymentError("Malformed payment header: expected an object")
    return decoded


class PaymentGate:
    """Verifies and settles per-call payments through an x402 facilitator."""

    def __init__(self, config: Config, timeout: Optional[float] = None):
        self.facilitator_url = config.facilitator_url.rstrip("/")
        self.testnet = config.testnet
        self.recipients = {
            "evm": config.evm_recipient_address,
            "svm": config.svm_recipient_address,
        }
        self.timeout = timeout if timeout is not None else config.http_timeout

    def requirements(
        self, resource: str, price: str, description: str = ""
    ) -> List[Dict[str, Any]]:
        """Returns one payment requirement per configured recipient."""
        amount = price_to_atomic(price)
        accepts = []
        for chain, address in self.recipients.items():
            if not address:
                continue
            mainnet, testnet = _NETWORKS[chain]
            network = testnet if self.testnet else mainnet
            accepts.append(
                {
                    "scheme": "exact",
                    "network": network,
                    "maxAmountRequired": amount,
                    "resource": resource,
                    "description": description,
                    "mimeType": "application/json",
                    "payTo": address,
                    "maxTimeoutSeconds": 300,
                    "asset": _USDC_ASSETS[network],
                }
            )
        return accepts

    def _post(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        if not self.facilitator_url:
            raise ConfigurationError("Missing FACILITATOR_URL")
        try:
            resp = requests.post(
                f"{self.facilitator_url}/{path}", json=body, timeout=self.timeout
            )
            resp.raise_for_status()
            return resp.json()
        except requests.RequestException as req_err:
            logger.error("Facilitator %s request failed: %s", path, req_err)
            raise PaymentError(f"Payment facilitator unavailable: {req_err}") from req_err
        except ValueError as e:
            raise PaymentError(f"Invalid facilitator response: {e}") from e

    def verify(
        self, payment: Dict[str, Any], accepts: List[Dict[str, Any]]
    ) -> Dict[str, Any]:
        """Returns the requirement the payment satisfies, or raises PaymentError."""
        if not accepts:
            raise ConfigurationError("No payment recipient configured")

        network = payment.get("network")
        matching = [req for req in accepts if req["network"] == network]
        if not matching:
            raise PaymentError(f"Unsupported payment network: {network!r}")

        requirement = matching[0]
        result = self._post(
            "verify",
            {
                "x402Version": X402_VERSION,
                "paymentPayload": payment,
                "paymentRequirements": requirement,
            },
        )
        if not result.get("isValid"):
            reason = result.get("invalidReason") or "payment rejected"
            logger.warning("Payment rejected on %s: %s", network, reason)
            raise PaymentError(f"Payment verification failed: {reason}")

        logger.info("Payment verified on %s (payer=%s).", network, result.get("payer"))
        return requirement

    def settle(self, payment: Dict[str, Any], requirement: Dict[str, Any]) -> Dict[str, Any]:
        """Settles a verified payment."""
        result = self._post(
            "settle",
            {
                "x402Version": X402_VERSION,
                "paymentPayload": payment,
                "paymentRequirements": requirement,
            },
        )
        if not result.get("success"):
            raise PaymentError(
                f"Payment settlement failed: {result.get('errorReason') or 'unknown'}"
            )
        logger.info("Payment settled (tx=%s).", result.get("transaction"))
        return result
