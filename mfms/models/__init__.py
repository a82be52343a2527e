from .employee import Employee, ROLE_ADMIN, ROLE_EMPLOYEE, EMPLOYEE_TYPES
from .merchant import Merchant
from .device import Device
from .question import Question
from .merchant_device import MerchantDeviceAssociation
from .feedback import Feedback
from .feedback_question import FeedbackQuestionAssociation
from .email_log import EmailLog

__all__ = [
    "Employee",
    "Merchant",
    "Device",
    "Question",
    "MerchantDeviceAssociation",
    "Feedback",
    "FeedbackQuestionAssociation",
    "EmailLog",
    "ROLE_ADMIN",
    "ROLE_EMPLOYEE",
    "EMPLOYEE_TYPES",
]
