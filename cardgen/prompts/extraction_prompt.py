"""Extraction prompts for card, credit, perk and multiplier records.

The prompt is a single string: JSON-only output rules, the record schema for
the requested type, type-specific notes, the category catalogue, then the
user's data (or, for refinements, the previous output and the correction).
"""

import json

from cardgen.pydantic_models.generation import GenerationRequest, GenerationType

BASE_INSTRUCTIONS = """You are a credit card data extraction assistant.

CRITICAL REQUIREMENTS:
1. Output ONLY valid, complete JSON - no text before or after
2. Do NOT wrap JSON in code blocks, backticks, or markdown
3. Do NOT include explanations, comments, or any prose text
4. Ensure ALL strings are properly closed with quotes
5. Ensure ALL objects and arrays are properly closed with braces/brackets
6. The response must be parseable by a strict JSON parser without any modifications

Your response should start with { and end with } (or [ and ] for arrays). Nothing else."""

CARD_SCHEMA: dict[str, str] = {
    "id": "string (kebab-case, e.g., chase-sapphire-preferred)",
    "VersionName": 'string (e.g., "2024 Version")',
    "ReferenceCardId": "string (same as id for base cards)",
    "IsActive": "boolean",
    "CardName": "string",
    "CardIssuer": 'string (e.g., "Chase", "American Express", "Capital One")',
    "CardNetwork": 'string (e.g., "Visa", "Mastercard", "Amex")',
    "CardDetails": "string (brief description)",
    "CardImage": "string (URL or empty)",
    "CardPrimaryColor": 'string (hex color, e.g., "#1A1F71")',
    "CardSecondaryColor": "string (hex color)",
    "effectiveFrom": "ISO date string",
    "effectiveTo": "ISO date string",
    "lastUpdated": "ISO date string",
    "AnnualFee": "number or null",
    "ForeignExchangeFee": 'string (e.g., "3%" or "None")',
    "ForeignExchangeFeePercentage": "number or null",
    "RewardsCurrency": 'string (e.g., "Ultimate Rewards", "Membership Rewards")',
    "PointsPerDollar": "number or null",
    "Perks": '[{id: "perk-id"}]',
    "Credits": '[{id: "credit-id"}]',
    "Multipliers": '[{id: "multiplier-id"}]',
}

CREDIT_SCHEMA: dict[str, str] = {
    "id": "string (kebab-case)",
    "ReferenceCardId": "string",
    "Title": "string",
    "Category": 'string (e.g., "travel", "dining", "entertainment", "shopping")',
    "SubCategory": 'string (e.g., "streaming", "hotels", "flights")',
    "Description": "string",
    "Value": 'string (e.g., "$200", "$100/year")',
    "TimePeriod": 'string (e.g., "annual", "monthly", "quarterly")',
    "Requirements": "string",
    "Details": "string",
    "EffectiveFrom": "ISO date string",
    "EffectiveTo": "ISO date string",
    "LastUpdated": "ISO date string",
}

PERK_SCHEMA: dict[str, str] = {
    "id": "string (kebab-case)",
    "ReferenceCardId": "string",
    "Title": "string",
    "Category": 'string (e.g., "travel", "insurance", "shopping")',
    "SubCategory": "string",
    "Description": "string",
    "Requirements": "string",
    "Details": "string",
    "EffectiveFrom": "ISO date string",
    "EffectiveTo": "ISO date string",
    "LastUpdated": "ISO date string",
}

MULTIPLIER_SCHEMA: dict[str, str] = {
    "id": "string (kebab-case)",
    "ReferenceCardId": "string",
    "Name": 'string (e.g., "3X on Dining")',
    "Category": "string",
    "SubCategory": "string",
    "Description": "string",
    "Multiplier": "number (e.g., 3 for 3X points)",
    "Requirements": "string",
    "Details": "string",
    "EffectiveFrom": "ISO date string",
    "EffectiveTo": "ISO date string",
    "LastUpdated": "ISO date string",
}

SCHEMAS: dict[GenerationType, dict[str, str]] = {
    GenerationType.CARD: CARD_SCHEMA,
    GenerationType.CREDIT: CREDIT_SCHEMA,
    GenerationType.PERK: PERK_SCHEMA,
    GenerationType.MULTIPLIER: MULTIPLIER_SCHEMA,
}

CATEGORIES: dict[str, list[str]] = {
    "travel": ["flights", "hotels", "portal", "lounge access", "ground transportation", "car rental", "tsa"],
    "dining": [],
    "shopping": ["supermarkets", "online shopping", "online grocery", "drugstores", "retail"],
    "gas": ["gas stations", "ev charging"],
    "entertainment": ["streaming"],
    "transportation": ["rideshare"],
    "Transit": [],
    "general": [],
    "custom category": [],
    "insurance": ["purchase", "travel", "car rental", "cell phone protection", "rental car protection"],
    "rent": [],
    "Rewards Boost": [],
}

# Batch-mode definitions: (singular, plural, what it is, what to exclude)
_BATCH_RULES: dict[GenerationType, tuple[str, str, str, list[str]]] = {
    GenerationType.CREDIT: (
        "credit",
        "credits/statement credits",
        'A credit is a statement credit, reimbursement, or dollar-value benefit '
        '(e.g., "$200 travel credit", "$10/month streaming credit")',
        [
            'Do NOT include multipliers/rewards rates (like "3X on dining") - those are NOT credits',
            'Do NOT include perks/benefits without a specific dollar value (like "lounge access") - those are NOT credits',
        ],
    ),
    GenerationType.PERK: (
        "perk",
        "perks/benefits",
        'A perk is a non-monetary benefit or feature (e.g., "lounge access", '
        '"travel insurance", "priority boarding", "concierge service")',
        [
            'Do NOT include multipliers/rewards rates (like "3X on dining") - those are NOT perks',
            'Do NOT include statement credits with dollar values (like "$200 travel credit") - those are credits, NOT perks',
        ],
    ),
    GenerationType.MULTIPLIER: (
        "multiplier",
        "multipliers/rewards rates",
        'A multiplier is a rewards rate or points multiplier (e.g., "3X on dining", '
        '"5X on flights", "2% cashback on groceries")',
        [
            'Do NOT include statement credits with dollar values (like "$200 travel credit") - those are credits, NOT multipliers',
            'Do NOT include perks/benefits (like "lounge access") - those are NOT multipliers',
        ],
    ),
}

_TYPE_NOTES: dict[GenerationType, list[str]] = {
    GenerationType.CARD: [
        'Generate a unique kebab-case id from the card name (e.g., "chase-sapphire-preferred")',
        "ReferenceCardId should be the same as id for base cards",
        "Use current date for lastUpdated",
        "Set effectiveFrom to current date and effectiveTo to end of next year",
        "IsActive should be true by default",
        "For colors, try to match the card's actual brand colors if known",
        "Leave Perks, Credits, and Multipliers as empty arrays - they will be added separately",
    ],
    GenerationType.CREDIT: [
        'Generate a descriptive kebab-case id (e.g., "dining-credit-200-annual")',
        "Value should include the dollar sign and amount",
        "TimePeriod should be: annual, monthly, quarterly, or one-time",
        "Match Category and SubCategory to available options",
    ],
    GenerationType.PERK: [
        'Generate a descriptive kebab-case id (e.g., "priority-pass-lounge-access")',
        "Match Category and SubCategory to available options",
    ],
    GenerationType.MULTIPLIER: [
        'Generate a descriptive kebab-case id (e.g., "3x-dining")',
        "Multiplier should be a number (e.g., 3 for 3X, 5 for 5X)",
        'Name should be descriptive (e.g., "3X on Dining", "5X on Flights")',
        "Match Category and SubCategory to available options",
    ],
}


def format_categories() -> str:
    """Category catalogue, one category per line with its subcategories."""
    lines = ["Available categories and subcategories:"]
    for category, subcategories in CATEGORIES.items():
        if subcategories:
            lines.append(f"- {category}: {', '.join(subcategories)}")
        else:
            lines.append(f"- {category}")
    return "\n".join(lines)


def _bullets(items: list[str]) -> str:
    return "\n".join(f"- {item}" for item in items)


def build_system_prompt(generation_type: GenerationType, batch_mode: bool = False) -> str:
    """System instructions for one generation type.

    Cards are always extracted as a single object. The other types switch to
    a JSON array with explicit inclusion rules in batch mode.
    """
    schema = json.dumps(SCHEMAS[generation_type], indent=2)
    notes = _TYPE_NOTES[generation_type]

    if batch_mode and generation_type in _BATCH_RULES:
        singular, plural, definition, exclusions = _BATCH_RULES[generation_type]
        rules = [definition, *exclusions,
                 f"If something doesn't clearly fit as a {singular}, SKIP IT entirely",
                 f"If no {singular}s are found, return an empty array: []"]
        batch_notes = [
            "Output a JSON array, e.g., [{...}, {...}, {...}]",
            f"Generate a distinct id for each {singular}",
            *notes,
        ]
        return (
            f"{BASE_INSTRUCTIONS}\n\n"
            f"Extract ONLY {plural} from the data and output a JSON ARRAY of objects. "
            f"Each object should follow this schema:\n{schema}\n\n"
            f"CRITICAL - ONLY EXTRACT {plural.split('/')[0].upper()}:\n{_bullets(rules)}\n\n"
            f"Important notes:\n{_bullets(batch_notes)}\n\n"
            f"{format_categories()}"
        )

    subject = {
        GenerationType.CARD: "credit card details",
        GenerationType.CREDIT: "credit/benefit details",
        GenerationType.PERK: "perk/benefit details",
        GenerationType.MULTIPLIER: "multiplier/rewards rate details",
    }[generation_type]
    return (
        f"{BASE_INSTRUCTIONS}\n\n"
        f"Extract {subject} and output a JSON object with the following schema:\n{schema}\n\n"
        f"Important notes:\n{_bullets(notes)}\n\n"
        f"{format_categories()}"
    )


def build_user_prompt(request: GenerationRequest) -> str:
    """User section: raw data, or previous output plus refinement instructions."""
    if request.is_refinement:
        output_format = (
            "Output ONLY the updated JSON array."
            if isinstance(request.previous_output, list)
            else "Output ONLY the updated JSON object."
        )
        return (
            f"Previous output:\n{json.dumps(request.previous_output, indent=2)}\n\n"
            f"Refinement instructions: {request.refinement_prompt}\n\n"
            f"Please update the output according to the refinement instructions. {output_format}"
        )
    return f"Extract and structure the following credit card information:\n\n{request.raw_data}"


def build_generation_prompt(request: GenerationRequest) -> str:
    """Complete prompt for a generation request."""
    system_prompt = build_system_prompt(request.generation_type, request.effective_batch_mode)
    return f"{system_prompt}\n\n{build_user_prompt(request)}"
