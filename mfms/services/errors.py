"""
Workflow error taxonomy.

Every error raised out of the feedback workflow is a ``WorkflowError``. The
``category`` distinguishes "not found", "business rule", "validation" and
"infrastructure" failures so a request layer can choose a status code
without string matching; ``http_status`` is the suggested one.
"""


class WorkflowError(RuntimeError):
    """Base class for recognised feedback workflow failures."""

    category = "infrastructure"
    http_status = 500


class NotFound(WorkflowError):
    category = "not_found"
    http_status = 404

    def __init__(self, kind: str, key, field: str = "ID"):
        self.kind = kind
        self.key = key
        self.field = field
        super().__init__(f"{kind} with {field}: {key} is not found")


class BusinessRuleViolation(WorkflowError):
    category = "business_rule"
    http_status = 409

    DEVICE_NOT_ASSIGNED_TO_MERCHANT = "DeviceNotAssignedToMerchant"

    def __init__(self, kind: str, message: str, **details):
        self.kind = kind
        self.details = details
        super().__init__(message)

    @classmethod
    def device_not_assigned(cls, device_id, merchant_id) -> "BusinessRuleViolation":
        return cls(
            cls.DEVICE_NOT_ASSIGNED_TO_MERCHANT,
            f"Device with ID: {device_id} is not assigned to Merchant with ID: {merchant_id}",
            device_id=device_id,
            merchant_id=merchant_id,
        )


class ValidationFailure(WorkflowError):
    category = "validation"
    http_status = 400

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"{field}: {reason}")


class PersistenceFailure(WorkflowError):
    def __init__(self, resource: str, reason: str):
        self.resource = resource
        self.reason = reason
        super().__init__(f"{resource} is unable to create at this moment: {reason}")


class NotificationFailure(WorkflowError):
    http_status = 502

    def __init__(self, recipient: str):
        self.recipient = recipient
        super().__init__(f"Email is unable to send to {recipient}")


class FailureNotificationError(WorkflowError):
    """The failure notice itself blew up; ``original`` is the error it was reporting."""

    def __init__(self, message: str, original: WorkflowError):
        self.original = original
        super().__init__(f"failed to send email: {message}")
