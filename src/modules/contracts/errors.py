class ContractError(Exception):
    """Base class for contract workflow errors.

    ``message`` is safe to show to an end user; ``code`` is stable and meant
    for the client to branch on.
    """
    code = "contract_error"
    status_code = 400
    default_message = "The contract request could not be processed"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(ContractError):
    code = "not_found"
    status_code = 404
    default_message = "Contract not found or link is invalid"


class ExpiredError(ContractError):
    code = "expired"
    status_code = 410
    default_message = "This signing link has expired"


class AlreadySignedError(ContractError):
    code = "already_signed"
    status_code = 409
    default_message = "This contract has already been signed"


class ContractValidationError(ContractError):
    code = "validation_error"
    status_code = 400
    default_message = "The submitted data is invalid"


class EmptySignatureError(ContractValidationError):
    code = "empty_signature"
    default_message = "A signature is required"


class StrokeStateError(ContractValidationError):
    code = "stroke_state"
    default_message = "No stroke is in progress"


class InvalidTransitionError(ContractError):
    code = "invalid_transition"
    status_code = 409
    default_message = "The contract cannot change to the requested status"


class PersistenceError(ContractError):
    code = "persistence_error"
    status_code = 503
    default_message = "The contract could not be saved, please try again"
