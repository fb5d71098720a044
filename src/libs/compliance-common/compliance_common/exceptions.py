# src/libs/compliance-common/compliance_common/exceptions.py

class ComplianceValidationError(Exception):
    """
    Base exception for user-facing validation failures. Carries the title and
    message the host form shows in its alert dialog.
    """
    default_title = "Validation Error"

    def __init__(self, message="An unspecified compliance validation error occurred.", title=None):
        self.title = title or self.default_title
        self.message = message
        super().__init__(self.message)


class InvalidPartyGstinError(ComplianceValidationError):
    """Raised when the transaction date falls outside the GSTIN's registration window."""
    default_title = "Invalid Party GSTIN"

    def __init__(self, message="The party GSTIN is not valid on the transaction date.", title=None):
        super().__init__(message, title)


class InvalidGstinStatusError(ComplianceValidationError):
    """Raised when the registry reports a status other than Active or Cancelled."""
    default_title = "Invalid GSTIN Status"

    def __init__(self, message="The party GSTIN has an unexpected registry status.", title=None):
        super().__init__(message, title)


class ConfigurationRequiredError(ComplianceValidationError):
    """Raised when a GST Settings feature must be enabled before the transaction can proceed."""
    default_title = "Configuration Required"

    def __init__(self, message="Please enable SEZ / Overseas transactions in GST Settings first", title=None):
        super().__init__(message, title)


class InvalidTransporterIdError(ComplianceValidationError):
    """Raised when a GST Transporter ID fails the format or checksum check."""
    default_title = "Invalid GST Transporter ID"

    def __init__(self, message="Invalid GST Transporter ID.", title=None):
        super().__init__(message, title)
