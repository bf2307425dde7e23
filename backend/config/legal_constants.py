"""
Fixed enumerations for legal request types, locations and urgency levels.

These are the default axes of the coverage matrix and the enum values offered
to the LLM tools. The coverage analyzer takes them as constructor arguments,
so nothing in the rule engine depends on this module directly.
"""

REQUEST_TYPES: tuple[str, ...] = (
    "contracts",
    "employment_hr",
    "litigation_disputes",
    "intellectual_property",
    "regulatory_compliance",
    "corporate_ma",
    "real_estate",
    "privacy_data",
    "general_advice",
)

LOCATIONS: tuple[str, ...] = (
    "australia",
    "united states",
    "united kingdom",
    "canada",
    "europe",
    "asia_pacific",
    "other",
)

URGENCY_LEVELS: tuple[str, ...] = ("low", "medium", "high")

# Labels and descriptions shown in clarification forms and the system prompt
REQUEST_TYPE_OPTIONS: list[dict[str, str]] = [
    {
        "value": "contracts",
        "label": "Contracts & Agreements",
        "description": "NDAs, vendor contracts, terms & conditions",
    },
    {
        "value": "employment_hr",
        "label": "Employment & HR",
        "description": "Hiring, termination, workplace issues",
    },
    {
        "value": "litigation_disputes",
        "label": "Litigation & Disputes",
        "description": "Lawsuits, legal threats, disputes",
    },
    {
        "value": "intellectual_property",
        "label": "Intellectual Property",
        "description": "Patents, trademarks, copyrights",
    },
    {
        "value": "regulatory_compliance",
        "label": "Regulatory & Compliance",
        "description": "Regulations, licenses, compliance",
    },
    {
        "value": "corporate_ma",
        "label": "Corporate & M&A",
        "description": "Fundraising, acquisitions, investments",
    },
    {
        "value": "real_estate",
        "label": "Real Estate",
        "description": "Property, leases, office space",
    },
    {
        "value": "privacy_data",
        "label": "Privacy & Data",
        "description": "Data privacy, GDPR, security breaches",
    },
    {
        "value": "general_advice",
        "label": "General Legal Advice",
        "description": "General questions or unclear requests",
    },
]

LOCATION_OPTIONS: list[dict[str, str]] = [
    {"value": "australia", "label": "Australia"},
    {"value": "united states", "label": "United States"},
    {"value": "united kingdom", "label": "United Kingdom"},
    {"value": "canada", "label": "Canada"},
    {"value": "europe", "label": "Europe"},
    {"value": "asia_pacific", "label": "Asia Pacific"},
    {"value": "other", "label": "Other"},
]
