"""
Input Validator

Checks the checkout and wallet handed to the SDK facade before any engine
work happens. This is the only layer that fails hard: malformed input
raises SmartPayInputError.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ValidationError as PydanticValidationError

from smartpay.execution.models import ExecutionOptions
from smartpay.routing.models import RankedRoute, RouteCandidate
from smartpay.schema.checkout import Checkout
from smartpay.wallet.models import Wallet


logger = logging.getLogger(__name__)


class SmartPayInputError(Exception):
    """Malformed checkout or wallet passed to the SDK."""

    def __init__(self, message: str, errors: list[Dict[str, Any]] = None):
        self.message = message
        self.errors = errors or []
        super().__init__(self.message)


class InputValidator:
    """
    Facade input validator.

    Accepts model instances or plain mappings. Mappings are parsed into
    models; pydantic errors are flattened into field-level error dicts.
    """

    def __init__(self):
        self.logger = logger

    def validate_checkout(self, checkout: Any) -> Checkout:
        """
        Validate a checkout.

        Raises:
            SmartPayInputError: If checkout is missing or malformed
        """
        if checkout is None or not isinstance(checkout, (Checkout, Mapping)):
            raise SmartPayInputError('SmartPay: "checkout" is required and must be an object.')

        if isinstance(checkout, Checkout):
            return checkout
        return self._parse(Checkout, checkout, "checkout")

    def validate_wallet(self, wallet: Any) -> Wallet:
        """
        Validate a wallet. It must hold at least one balance.

        Raises:
            SmartPayInputError: If wallet is missing, malformed, or has no balances
        """
        if wallet is None or not isinstance(wallet, (Wallet, Mapping)):
            raise SmartPayInputError('SmartPay: "wallet" is required and must be an object.')

        if not isinstance(wallet, Wallet):
            balances = wallet.get("balances")
            if not isinstance(balances, list) or not balances:
                raise SmartPayInputError('SmartPay: wallet must have a non-empty "balances" list.')
            wallet = self._parse(Wallet, wallet, "wallet")

        if not wallet.balances:
            raise SmartPayInputError('SmartPay: wallet must have a non-empty "balances" list.')
        return wallet

    def validate_quote_input(self, checkout: Any, wallet: Any) -> tuple[Checkout, Wallet]:
        """Validate both quote inputs, checkout first."""
        return self.validate_checkout(checkout), self.validate_wallet(wallet)

    def validate_route(self, route: Any) -> Optional[RouteCandidate]:
        """
        Parse a route for execution. None passes through (nothing selected).

        Mappings parse as RankedRoute when they carry ranking fields,
        else as RouteCandidate.
        """
        if route is None or isinstance(route, RouteCandidate):
            return route
        if not isinstance(route, Mapping):
            raise SmartPayInputError('SmartPay: "route" must be an object.')

        if "rank" in route:
            return self._parse(RankedRoute, route, "route")
        return self._parse(RouteCandidate, route, "route")

    def validate_execution_wallet(self, wallet: Any) -> Any:
        """
        Parse a mapping wallet for execution; balances are not required.

        Wallet instances and other wallet-like objects pass through.
        """
        if isinstance(wallet, Mapping):
            return self._parse(Wallet, wallet, "wallet")
        return wallet

    def validate_execution_options(self, wallet: Any, options: Mapping[str, Any]) -> ExecutionOptions:
        """
        Build per-call execution options.

        Raises:
            SmartPayInputError: If an option has the wrong type or is out of range
        """
        return self._parse(ExecutionOptions, {**options, "wallet": wallet}, "options")

    def _parse(self, model: type[BaseModel], data: Mapping, label: str):
        try:
            return model.model_validate(dict(data))
        except PydanticValidationError as e:
            errors = []
            for error in e.errors():
                errors.append({
                    "field": ".".join(str(loc) for loc in error["loc"]),
                    "type": error["type"],
                    "msg": error["msg"],
                })

            self.logger.error(f"Invalid {label}: {errors}")
            raise SmartPayInputError(
                message=f'SmartPay: "{label}" failed validation.',
                errors=errors,
            )
