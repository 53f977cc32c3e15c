"""Example extraction client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseExtractionClient and register the provider in ExtractorFactory.
"""

import json
from typing import ClassVar

from app.extraction.client_base import BaseExtractionClient


class ExampleClientAdapter(BaseExtractionClient):
    """Example adapter that answers with a fixed utility bill analysis.

    No network calls. Useful for local development, tests, and as a template
    for building real provider adapters.
    """

    provider = "example"

    DETECTED_TYPE: ClassVar[str] = "Utility Bill"

    DEFAULT_RESPONSE: ClassVar[dict[str, object]] = {
        "documentType": "Utility Bill",
        "summary": (
            "This is a Gas bill from Example Energy for Not stated, billing "
            "period 2025-01-01 to 2025-01-31. The total amount due is $120.00 by "
            "2025-02-15. Usage for this period was 52 therms."
        ),
        "keyPoints": [
            "Account holder name and account number: Not stated",
            "Billing period and due date: 2025-01-01 to 2025-01-31, due 2025-02-15",
            "Current charges and total amount due: $120.00",
            "Usage/consumption amount: 52 therms",
            "Payment methods available: online, phone, mail",
        ],
        "criticalDates": [{"date": "2025-02-15", "description": "Payment due"}],
        "financialDetails": [{"label": "Total due", "value": "$120.00"}],
        "importantClauses": [],
        "redFlags": [],
        "plainEnglish": (
            "This is a utility bill showing charges for Gas service. Your "
            "current balance is $120.00, which includes charges of $120.00 for this "
            "billing period. Payment is due by 2025-02-15, and you can pay online, "
            "by phone, by mail, or in person. Late payments may result in service "
            "disconnection or late fees."
        ),
    }

    DEFAULT_ANSWER: ClassVar[str] = "The total amount due is $120.00."

    def create_vision_completion(
        self,
        *,
        model: str,
        temperature: float,
        seed: int,
        max_tokens: int,
        prompt: str,
        image_url: str,
        json_mode: bool = False,
    ) -> str:
        _ = model, temperature, seed, max_tokens, prompt, image_url
        if json_mode:
            return json.dumps(self.DEFAULT_RESPONSE)
        return self.DETECTED_TYPE

    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        max_tokens: int,
        messages: list[dict[str, str]],
    ) -> str:
        _ = model, temperature, max_tokens, messages
        return self.DEFAULT_ANSWER
