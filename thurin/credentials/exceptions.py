"""
Error taxonomy for credential issuance and verification.

Integrators branch on the kind (the intermediate classes); the leaf classes
name the exact condition. Nothing in the core retries automatically.
"""


class CredentialError(Exception):
    """Base exception for credential protocol errors."""

    retryable = False


# ----------------------------------------------------------------------------
# Kinds
# ----------------------------------------------------------------------------


class PreconditionViolation(CredentialError):
    """Caller state or payment does not allow the operation."""


class FreshnessViolation(CredentialError):
    """Proof date outside the accepted window; regenerate the proof."""


class TrustViolation(CredentialError):
    """Permanent rejection for this input (root or nullifier)."""


class ProofInvalid(CredentialError):
    """Cryptographic rejection of this exact proof."""


class StalePrice(CredentialError):
    """Price source unavailable or out of date."""

    retryable = True


class AdministrativeViolation(CredentialError):
    """Caller is not allowed to change configuration, or the change is unsafe."""


class MalformedInput(CredentialError, ValueError):
    """Fixed-width input rejected before encoding."""


# ----------------------------------------------------------------------------
# Conditions
# ----------------------------------------------------------------------------


class AlreadyHolder(PreconditionViolation):
    pass


class NoCredentialToRenew(PreconditionViolation):
    pass


class NoCredentialToBurn(PreconditionViolation):
    pass


class InsufficientPayment(PreconditionViolation):
    def __init__(self, required: int, paid: int):
        super().__init__(f"payment {paid} below required {required}")
        self.required = required
        self.paid = paid


class NoValidCredential(PreconditionViolation):
    pass


class ProofDateFromFuture(FreshnessViolation):
    pass


class ProofDateTooOld(FreshnessViolation):
    pass


class UntrustedRoot(TrustViolation):
    pass


class NullifierUsed(TrustViolation):
    pass


class InvalidProof(ProofInvalid):
    pass


class NotAdministrator(AdministrativeViolation):
    pass


class NotPendingOwner(AdministrativeViolation):
    pass


class NotAuthorized(AdministrativeViolation):
    pass


class ValidityPeriodTooShort(AdministrativeViolation):
    pass


class InvalidConfiguration(AdministrativeViolation):
    pass
