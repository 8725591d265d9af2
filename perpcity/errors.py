"""
Exception types raised by PerpCity conversions and decoders.

Validation failures raise InvalidArgumentError, magnitudes that no longer fit
a float exactly raise ScaledOverflowError, and decoded contract reverts are
wrapped in ContractError with a category telling callers who is at fault.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Sequence


class ErrorCategory(str, Enum):
    """Who is expected to act on an error."""
    USER_ERROR = "USER_ERROR"
    STATE_ERROR = "STATE_ERROR"
    SYSTEM_ERROR = "SYSTEM_ERROR"
    CONFIG_ERROR = "CONFIG_ERROR"


class ErrorSource(str, Enum):
    """Contract that produced a revert."""
    PERP_MANAGER = "PERP_MANAGER"
    POOL_MANAGER = "POOL_MANAGER"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class ErrorDebugInfo:
    source: ErrorSource
    category: ErrorCategory
    can_retry: bool = False
    retry_guidance: Optional[str] = None


class PerpCityError(Exception):
    """Base class for all errors raised by this package."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        return self.message


class InvalidArgumentError(PerpCityError, ValueError):
    """An input violates a precondition, e.g. a non-positive price."""


class ScaledOverflowError(PerpCityError, OverflowError):
    """A derived value exceeds the range a float represents exactly."""


class ContractError(PerpCityError):
    """A contract call reverted with a known or unknown custom error."""

    def __init__(
        self,
        message: str,
        error_name: Optional[str] = None,
        args: Sequence[Any] = (),
        debug: Optional[ErrorDebugInfo] = None,
        cause: Optional[BaseException] = None
    ):
        super().__init__(message, cause)
        self.error_name = error_name
        self.error_args = tuple(args)
        self.debug = debug


POOL_MANAGER_ERRORS = frozenset({
    "CurrencyNotSettled",
    "PoolNotInitialized",
    "AlreadyUnlocked",
    "ManagerLocked",
    "TickSpacingTooLarge",
    "TickSpacingTooSmall",
    "CurrenciesOutOfOrderOrEqual",
    "UnauthorizedDynamicLPFeeUpdate",
    "SwapAmountCannotBeZero",
    "NonzeroNativeValue",
    "MustClearExactPositiveDelta",
})

_USER = ErrorCategory.USER_ERROR
_STATE = ErrorCategory.STATE_ERROR
_SYSTEM = ErrorCategory.SYSTEM_ERROR
_CONFIG = ErrorCategory.CONFIG_ERROR

# name -> (message template over positional args, category)
PERP_MANAGER_MESSAGES = {
    "InvalidBeaconAddress": ("Invalid beacon address: {0}", _CONFIG),
    "InvalidTradingFeeSplits": (
        "Invalid trading fee splits. Insurance split: {0}, Creator split: {1}", _CONFIG),
    "InvalidMaxOpeningLev": ("Invalid maximum opening leverage: {0}", _CONFIG),
    "InvalidLiquidationLev": (
        "Invalid liquidation leverage: {0}. Must be less than max opening leverage: {1}", _CONFIG),
    "InvalidLiquidationFee": ("Invalid liquidation fee: {0}", _CONFIG),
    "InvalidLiquidatorFeeSplit": ("Invalid liquidator fee split: {0}", _CONFIG),
    "InvalidClose": ("Cannot close position. Caller: {0}, Holder: {1}, Is Liquidated: {2}", _USER),
    "InvalidCaller": ("Invalid caller. Expected: {1}, Got: {0}", _USER),
    "InvalidLiquidity": ("Invalid liquidity amount: {0}", _USER),
    "InvalidMargin": ("Invalid margin amount: {0}", _USER),
    "InvalidLevX96": ("Invalid leverage: {0}. Maximum allowed: {1}", _USER),
    "MaximumAmountExceeded": ("Maximum amount exceeded. Maximum: {0}, Requested: {1}", _USER),
    "MinimumAmountInsufficient": ("Minimum amount not met. Required: {0}, Received: {1}", _USER),
    "PriceImpactTooHigh": (
        "Price impact too high. Current price: {0}, Min acceptable: {1}, Max acceptable: {2}", _USER),
    "SwapReverted": (
        "Swap failed. This may be due to insufficient liquidity or slippage tolerance.", _STATE),
    "ZeroSizePosition": ("Cannot create zero-size position. Perp delta: {0}, USD delta: {1}", _USER),
    "InvalidFundingInterval": ("Invalid funding interval: {0}", _CONFIG),
    "InvalidPriceImpactBand": ("Invalid price impact band: {0}", _CONFIG),
    "InvalidMarketDeathThreshold": ("Invalid market death threshold: {0}", _CONFIG),
    "InvalidTickRange": ("Invalid tick range. Lower: {0}, Upper: {1}", _CONFIG),
    "MarketNotKillable": (
        "Market health ({0}) is above death threshold ({1}). Market cannot be killed yet.", _STATE),
    "InvalidStartingSqrtPriceX96": ("Invalid starting sqrt price: {0}", _CONFIG),
    "AccountBalanceOverflow": ("Account balance overflow detected.", _SYSTEM),
    "BalanceQueryForZeroAddress": ("Cannot query balance for the zero address.", _USER),
    "NotOwnerNorApproved": (
        "Caller is not the owner or an approved operator for this position.", _USER),
    "TokenAlreadyExists": ("A position with this ID already exists.", _STATE),
    "TokenDoesNotExist": ("The specified position does not exist.", _USER),
    "TransferFromIncorrectOwner": ("Attempting to transfer position from incorrect owner.", _USER),
    "TransferToNonERC721ReceiverImplementer": (
        "Cannot transfer position to a contract that does not implement ERC721 receiver interface.", _USER),
    "TransferToZeroAddress": ("Cannot transfer position to the zero address.", _USER),
    "NewOwnerIsZeroAddress": ("New owner cannot be the zero address.", _USER),
    "NoHandoverRequest": ("No pending ownership handover request exists.", _STATE),
    "Unauthorized": (
        "Unauthorized access. Caller does not have permission to perform this operation.", _USER),
    "TransferFromFailed": (
        "ERC20 transferFrom operation failed. Ensure you have approved sufficient tokens "
        "and have enough balance.", _USER),
    "TransferFailed": (
        "ERC20 transfer operation failed. This may indicate insufficient balance "
        "or a token contract issue.", _SYSTEM),
    "ApproveFailed": ("ERC20 approve operation failed. Please check the token contract.", _SYSTEM),
    "AlreadyInitialized": ("Contract has already been initialized.", _CONFIG),
    "FeesNotRegistered": ("Fees module has not been registered for this pool.", _CONFIG),
    "FeeTooLarge": ("The specified fee exceeds the maximum allowed value.", _CONFIG),
    "MarginRatiosNotRegistered": ("Margin ratios module has not been registered for this pool.", _CONFIG),
    "LockupPeriodNotRegistered": ("Lockup period module has not been registered for this pool.", _CONFIG),
    "SqrtPriceImpactLimitNotRegistered": (
        "Sqrt price impact limit module has not been registered for this pool.", _CONFIG),
    "ModuleAlreadyRegistered": ("This module has already been registered.", _CONFIG),
    "InvalidAction": ("Invalid action type: {0}. Please specify a valid action.", _USER),
    "InvalidMarginRatio": (
        "Invalid margin ratio: {0}. The margin ratio must be within acceptable bounds.", _USER),
    "MakerNotAllowed": ("Maker positions are not allowed for this operation.", _USER),
    "PositionLocked": (
        "This position is currently locked. Maker positions have a time-based lockup period.", _STATE),
    "ZeroDelta": ("Position has zero size. Cannot perform operation on a position with no open size.", _STATE),
    "NotPoolManager": ("Only the Uniswap V4 Pool Manager can call this function.", _SYSTEM),
    "NoLiquidityToReceiveFees": ("No liquidity available to receive fees.", _STATE),
}

POOL_MANAGER_MESSAGES = {
    "CurrencyNotSettled": (
        "Currency balance not settled after operation. The pool manager requires all "
        "currency deltas to be settled before unlocking.", _SYSTEM),
    "PoolNotInitialized": ("Pool does not exist or has not been initialized.", _STATE),
    "AlreadyUnlocked": (
        "Pool manager is already unlocked. This indicates a potential reentrancy issue.", _SYSTEM),
    "ManagerLocked": ("Uniswap V4 Pool Manager is currently locked.", _STATE),
    "TickSpacingTooLarge": ("Tick spacing ({0}) exceeds the maximum allowed value.", _CONFIG),
    "TickSpacingTooSmall": ("Tick spacing ({0}) is below the minimum allowed value.", _CONFIG),
    "CurrenciesOutOfOrderOrEqual": (
        "Currencies must be ordered (currency0 < currency1) and not equal. "
        "Got currency0: {0}, currency1: {1}", _CONFIG),
    "UnauthorizedDynamicLPFeeUpdate": ("Unauthorized attempt to update dynamic LP fee.", _USER),
    "SwapAmountCannotBeZero": ("Swap amount cannot be zero.", _USER),
    "NonzeroNativeValue": ("Native ETH was sent with the transaction when none was expected.", _USER),
    "MustClearExactPositiveDelta": ("Must clear exact positive delta.", _SYSTEM),
}

RETRY_GUIDANCE = {
    "CurrencyNotSettled": (False, "This indicates an issue with the transaction flow. Please try again."),
    "AlreadyUnlocked": (True, "This is a temporary state. Please retry your transaction."),
    "ManagerLocked": (True, "Please retry your transaction in a moment."),
}


def detect_error_source(error_name: str) -> ErrorSource:
    if error_name in POOL_MANAGER_ERRORS:
        return ErrorSource.POOL_MANAGER
    if error_name in PERP_MANAGER_MESSAGES or error_name == "MakerPositionLocked":
        return ErrorSource.PERP_MANAGER
    return ErrorSource.UNKNOWN


_PLACEHOLDER = "?"


def _iso_timestamp(value: Any) -> str:
    if value == _PLACEHOLDER:
        return value
    return datetime.fromtimestamp(int(value), tz=timezone.utc).isoformat()


def format_contract_error(error_name: str, args: Sequence[Any] = ()) -> ContractError:
    """
    Turn a decoded custom-error revert into a ContractError.

    Args:
        error_name: Solidity custom error name, e.g. "InvalidMargin".
        args: Decoded error arguments in declaration order.

    Returns:
        A ContractError with a readable message and debug info. Unknown names
        fall back to "Contract error: Name (args)" as a SYSTEM_ERROR.

    Examples:
        >>> err = format_contract_error("InvalidMargin", [0])
        >>> str(err)
        'Invalid margin amount: 0'
        >>> err.debug.category
        <ErrorCategory.USER_ERROR: 'USER_ERROR'>
    """
    args = tuple(args)
    source = detect_error_source(error_name)
    # reverts decoded without arguments still get a readable message
    padded = args + (_PLACEHOLDER,) * 3

    if error_name == "MakerPositionLocked":
        message = (
            f"Maker position is locked until {_iso_timestamp(padded[1])}. "
            f"Current time: {_iso_timestamp(padded[0])}"
        )
        debug = ErrorDebugInfo(source=source, category=ErrorCategory.STATE_ERROR)
        return ContractError(message, error_name, args, debug)

    entry = PERP_MANAGER_MESSAGES.get(error_name) or POOL_MANAGER_MESSAGES.get(error_name)
    if entry is None:
        suffix = f" ({', '.join(str(a) for a in args)})" if args else ""
        debug = ErrorDebugInfo(source=ErrorSource.UNKNOWN, category=ErrorCategory.SYSTEM_ERROR)
        return ContractError(f"Contract error: {error_name}{suffix}", error_name, args, debug)

    template, category = entry
    can_retry, guidance = RETRY_GUIDANCE.get(error_name, (False, None))
    debug = ErrorDebugInfo(
        source=source,
        category=category,
        can_retry=can_retry,
        retry_guidance=guidance
    )
    return ContractError(template.format(*padded), error_name, args, debug)


def with_context(error: BaseException, context: str) -> PerpCityError:
    """
    Prefix an error message with the operation that produced it.

    PerpCityError instances keep their type; anything else is wrapped in a
    plain PerpCityError with the original exception kept as ``cause``.
    """
    if isinstance(error, PerpCityError):
        error.message = f"{context}: {error.message}"
        error.args = (error.message,)
        return error
    return PerpCityError(f"{context}: {error}", cause=error)
