import math

from mfms.services.errors import ValidationFailure
from mfms.services.feedback import FeedbackSubmission

_IMAGE_REF_MAX = 1000

def require_text(val, field: str, max_len: int | None = None) -> str:
    """
    Non-blank string, returned exactly as given (no trimming or collapsing).
    Longer than ``max_len`` is rejected, never truncated.
    """
    if not isinstance(val, str) or not val.strip():
        raise ValidationFailure(field, "is required")
    if max_len is not None and len(val) > max_len:
        raise ValidationFailure(field, f"must be at most {max_len} characters")
    return val

def to_id(val, field: str) -> int:
    """Positive integer id; bools and floats with a fraction are rejected."""
    if isinstance(val, bool):
        raise ValidationFailure(field, "must be a positive integer")
    try:
        num = int(str(val).strip())
    except (TypeError, ValueError):
        raise ValidationFailure(field, "must be a positive integer")
    if num <= 0:
        raise ValidationFailure(field, "must be a positive integer")
    return num

def to_rating(val) -> float:
    if isinstance(val, bool) or val is None:
        raise ValidationFailure("feedbackRating", "is required")
    try:
        rating = float(val)
    except (TypeError, ValueError):
        raise ValidationFailure("feedbackRating", "must be a number")
    # json.load accepts NaN and Infinity
    if not math.isfinite(rating):
        raise ValidationFailure("feedbackRating", "must be a finite number")
    return rating

def parse_answers(items, required: int) -> tuple:
    """
    [{"questionId": 1, "questionAnswer": "..."}] -> ((1, "..."), ...)

    The request layer insists on exactly ``required`` entries.
    """
    if not isinstance(items, list):
        raise ValidationFailure("questionAnswers", "must be a list")
    if len(items) != required:
        raise ValidationFailure("questionAnswers", f"expected {required} answers but received {len(items)}")
    pairs = []
    for idx, item in enumerate(items):
        if not isinstance(item, dict):
            raise ValidationFailure(f"questionAnswers[{idx}]", "must be an object")
        qid = to_id(item.get("questionId"), f"questionAnswers[{idx}].questionId")
        answer = item.get("questionAnswer")
        if answer is not None and not isinstance(answer, str):
            raise ValidationFailure(f"questionAnswers[{idx}].questionAnswer", "must be a string")
        pairs.append((qid, answer))
    return tuple(pairs)

def parse_submission(payload: dict, required_answers: int = 10) -> FeedbackSubmission:
    """
    Check the request-layer shape of a feedback submission:

        {"feedbackRequest": {"feedbackEmployeeId": 7, "feedbackMerchantId": 3,
                             "feedbackDeviceId": 9, "feedbackRating": 4.0,
                             "feedback": "...", "feedbackImage1": "..."},
         "questionAnswers": [{"questionId": 1, "questionAnswer": "..."}, ...]}
    """
    if not isinstance(payload, dict):
        raise ValidationFailure("payload", "Feedback request cannot be null")
    req = payload.get("feedbackRequest")
    if not isinstance(req, dict):
        raise ValidationFailure("feedbackRequest", "Feedback request cannot be null")

    comment = require_text(req.get("feedback"), "feedback")
    image_ref = require_text(req.get("feedbackImage1"), "feedbackImage1", max_len=_IMAGE_REF_MAX)

    return FeedbackSubmission(
        employee_id=to_id(req.get("feedbackEmployeeId"), "feedbackEmployeeId"),
        merchant_id=to_id(req.get("feedbackMerchantId"), "feedbackMerchantId"),
        device_id=to_id(req.get("feedbackDeviceId"), "feedbackDeviceId"),
        rating=to_rating(req.get("feedbackRating")),
        comment=comment,
        image_ref=image_ref,
        answers=parse_answers(payload.get("questionAnswers"), required_answers),
    )
