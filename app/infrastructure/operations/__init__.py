"""Operation result types and status enums.

Standardized result types for the AWS adapters, including the status enum,
the result dataclass and the botocore error classifier.
"""

from infrastructure.operations.classifiers import classify_aws_error
from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

__all__ = [
    "OperationResult",
    "OperationStatus",
    "classify_aws_error",
]
