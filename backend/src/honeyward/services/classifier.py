# backend/src/honeyward/services/classifier.py
#
# Runs every catalog signature over one untrusted string.
# Pure: no logging of incidents happens here, the caller hands the
# result to the IncidentRecorder.
#
# Inputs are matched as given. Nothing is URL-decoded here; callers
# choose whether to submit the raw or the decoded form.

import logging
from typing import Mapping, Optional, Set, Tuple

from honeyward.models import (
    Category,
    ClassificationResult,
    InputValidationError,
    Match,
    Severity,
    Signature,
)
from honeyward.services import signatures
from honeyward.services.severity import SeverityPolicy

logger = logging.getLogger(__name__)

# Inputs are cut to this many characters before matching
MAX_CLASSIFY_LENGTH = 32_768

# Length of the input copy kept on the result
RESULT_INPUT_LENGTH = 500


class Classifier:
    def __init__(
        self,
        catalog:             Mapping[Category, Tuple[Signature, ...]] = signatures.CATALOG,
        policy:              Optional[SeverityPolicy] = None,
        max_input_length:    int = MAX_CLASSIFY_LENGTH,
        result_input_length: int = RESULT_INPUT_LENGTH,
    ):
        self.catalog             = catalog
        self.policy              = policy or SeverityPolicy()
        self.max_input_length    = max_input_length
        self.result_input_length = result_input_length

    def classify(
        self,
        input:             str,
        location:          str,
        context_severity:  Optional[Severity] = None,
    ) -> ClassificationResult:
        """
        Classify one input. A category matches when any of its signatures
        matches; every category is evaluated, so one payload can land in
        several categories at once.
        """
        if not isinstance(input, str):
            raise InputValidationError(
                f"classify() expects str input, got {type(input).__name__}"
            )
        if not isinstance(location, str):
            raise InputValidationError(
                f"classify() expects str location, got {type(location).__name__}"
            )

        text    = input[: self.max_input_length]
        matches = []

        if text:
            for category, sigs in self.catalog.items():
                hits = [sig for sig in sigs if sig.search(text)]
                if not hits:
                    continue
                first = hits[0]
                matches.append(Match(
                    category=       category,
                    severity=       self.policy.resolve(first, location, context_severity),
                    signature=      first.name,
                    all_signatures= tuple(sig.name for sig in hits),
                ))

        if matches:
            logger.debug(
                "[classifier] %s matched %s",
                location, [m.category.value for m in matches],
            )

        return ClassificationResult(
            input=    text[: self.result_input_length],
            location= location,
            matches=  matches,
        )

    def categories(self, input: str, location: str) -> Set[Tuple[Category, Severity]]:
        return self.classify(input, location).categories()
