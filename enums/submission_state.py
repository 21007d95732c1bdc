from enum import Enum


class SubmissionState(Enum):
    IDLE = "IDLE"
    VALIDATING = "VALIDATING"
    RESOLVING_FALLBACKS = "RESOLVING_FALLBACKS"    # Address/warehouse fallback lookups
    BUILDING_PAYLOAD = "BUILDING_PAYLOAD"          # Cart + assignments snapshot is frozen here
    SUBMITTING = "SUBMITTING"                      # Remote create call in flight
    CONFIRMING = "CONFIRMING"                      # Order exists remotely, confirming
    SUCCEEDED = "SUCCEEDED"                        # Terminal
    FAILED = "FAILED"                              # Terminal
