"""Markdown and JSON renderers for entity checks."""

from __future__ import annotations

import json

from jinja2 import Template

from .models import EntityCheck

RISK_LABELS = {
    1: "Low",
    2: "Guarded",
    3: "Elevated",
    4: "High",
    5: "Critical",
}

CHECK_TEMPLATE = Template(
    """## FraudShield check: {{ entity_type }} `{{ entity_id }}`

**Risk level:** {{ risk_level }}/5 ({{ risk_label }})
{% if record %}
| Trust score | Badge | Verifications | Reports | Transactions |
|---|---|---|---|---|
| {{ record.score }} | {{ record.badge }} | {{ record.verification_count }} | {{ record.report_count }} | {{ record.successful_transaction_count }} |
{% else %}
_No community trust record for this {{ entity_type }}._
{% endif %}
{% if factors %}
### Risk factors
{% for factor in factors %}- {{ factor }}
{% endfor %}{% endif %}
{% if recommendations %}
### Recommendations
{% for rec in recommendations %}- {{ rec }}
{% endfor %}{% endif %}
{% if reports %}
### Community reports
{% for r in reports %}- **{{ r.title }}** ({{ r.scam_type }}, risk {{ r.risk_level }}/5, {{ r.upvotes }} upvotes, {{ r.corroborations }} confirmations)
{% endfor %}{% endif %}""",
    keep_trailing_newline=True,
)


def check_to_dict(check: EntityCheck) -> dict:
    """JSON-ready form of an entity check."""
    data = check.to_dict()
    data["assessment"]["risk_label"] = RISK_LABELS[check.assessment.risk_level]
    return data


def render_check_json(check: EntityCheck) -> str:
    return json.dumps(check_to_dict(check), indent=2)


def render_check_markdown(check: EntityCheck) -> str:
    """Render an entity check as a Markdown summary."""
    record = check.trust_record.to_dict() if check.trust_record else None
    return CHECK_TEMPLATE.render(
        entity_type=check.entity_type.value,
        entity_id=check.entity_id,
        risk_level=check.assessment.risk_level,
        risk_label=RISK_LABELS[check.assessment.risk_level],
        record=record,
        factors=check.assessment.risk_factors,
        recommendations=check.assessment.recommendations,
        reports=[r.to_dict() for r in check.reports],
    )
