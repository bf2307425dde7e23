"""
Default rule set loaded into the in-memory store at startup.
"""

from models.rule_models import Rule


def _rule(
    rule_id: str,
    name: str,
    description: str,
    priority: int,
    conditions: list[dict],
    assign_to: str,
) -> Rule:
    return Rule(
        id=rule_id,
        name=name,
        description=description,
        enabled=True,
        priority=priority,
        conditions=conditions,
        action={"assign_to": assign_to},
    )


def _equals(field: str, value) -> dict:
    return {"field": field, "operator": "equals", "value": value}


def get_seed_rules() -> list[Rule]:
    """Fresh copies of the default rules."""
    return [
        _rule(
            "rule-1", "US Contracts",
            "Standard contracts (NDAs, customer/vendor agreements) for US-based requests",
            1,
            [_equals("requestType", "contracts"), _equals("location", "united states")],
            "john.smith@acme.corp",
        ),
        _rule(
            "rule-2", "Australia Contracts",
            "Standard contracts for Australian-based requests",
            1,
            [_equals("requestType", "contracts"), _equals("location", "australia")],
            "jane.doe@acme.corp",
        ),
        _rule(
            "rule-3", "Global Employment/HR",
            "Employment matters (hiring, terminations, workplace issues)",
            1,
            [_equals("requestType", "employment_hr")],
            "sarah.johnson@acme.corp",
        ),
        _rule(
            "rule-4", "High-Value Contracts (US)",
            "High-value contracts over $100k require senior attorney review",
            2,
            [
                _equals("requestType", "contracts"),
                _equals("location", "united states"),
                {"field": "value", "operator": "greater_than", "value": 100000},
            ],
            "michael.chen@acme.corp",
        ),
        _rule(
            "rule-5", "Litigation & Disputes",
            "All litigation, lawsuits, and legal disputes",
            3,
            [_equals("requestType", "litigation_disputes")],
            "robert.martinez@acme.corp",
        ),
        _rule(
            "rule-6", "Intellectual Property",
            "Trademarks, patents, copyrights, and IP protection",
            2,
            [_equals("requestType", "intellectual_property")],
            "emily.wong@acme.corp",
        ),
        _rule(
            "rule-7", "Privacy & Data Protection (Europe)",
            "GDPR, data breaches, and privacy matters for European operations",
            2,
            [_equals("requestType", "privacy_data"), _equals("location", "europe")],
            "lisa.schmidt@acme.corp",
        ),
        _rule(
            "rule-8", "Corporate/M&A",
            "Fundraising, acquisitions, and equity/stock matters",
            2,
            [_equals("requestType", "corporate_ma")],
            "david.lee@acme.corp",
        ),
        _rule(
            "rule-9", "Regulatory/Compliance",
            "Government regulations, licenses, and compliance audits",
            1,
            [_equals("requestType", "regulatory_compliance")],
            "amanda.taylor@acme.corp",
        ),
        _rule(
            "rule-10", "General Legal Advice",
            "General questions or requests that don't fit other categories",
            0,  # catch-all
            [_equals("requestType", "general_advice")],
            "legal-general@acme.corp",
        ),
    ]
