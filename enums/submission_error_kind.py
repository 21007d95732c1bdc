from enum import Enum


class SubmissionErrorKind(Enum):
    MISSING_REQUIRED_FIELDS = "MISSING_REQUIRED_FIELDS"
    SUBMISSION_FAILED = "SUBMISSION_FAILED"
    SUBMISSION_IN_PROGRESS = "SUBMISSION_IN_PROGRESS"
