"""
tychee_core.errors
------------------
Abort reasons for contract invocations.

Raising any ContractError aborts the whole invocation: storage writes and
buffered events are rolled back. Soft denials (retrieve_token -> None,
revoke_token -> False, verify_* -> False) are return values, not errors.
"""


class ContractError(Exception):
    pass


class AlreadyInitialized(ContractError):
    pass


class NotInitialized(ContractError):
    pass


class AuthenticationFailure(ContractError):
    """The principal could not prove authorization for this call."""

    def __init__(self, message: str, principal: str = ""):
        super().__init__(message)
        self.principal = principal


class InvalidThreshold(ContractError):
    pass


class NoSponsor(ContractError):
    pass


class UnsupportedMode(ContractError):
    pass


class InsufficientGasPool(ContractError):
    pass


class GasPoolOverflow(ContractError):
    pass


class AlreadyExists(ContractError):
    pass


class ExpiredAtCreation(ContractError):
    pass


class InvalidArgument(ContractError):
    pass


class ContractPaused(ContractError):
    pass
