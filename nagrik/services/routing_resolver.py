"""Maps an issue type to the authority responsible for it"""

from typing import Optional, Tuple, Union

from nagrik.models.complaint import IssueType

ELECTRICITY_DEPARTMENT = "Electricity Department"
WATER_AUTHORITY = "Jal Board / Water Supply Department"
MUNICIPAL_SANITATION = "Nagar Nigam / Municipal Corporation"
PUBLIC_WORKS = "Public Works Department (PWD)"
STREET_LIGHTING = "Nagar Nigam / Municipal Corporation (Street Lighting Division)"
TRANSPORT_AUTHORITY = "Local Transport Authority / RTO"
POLLUTION_AUTHORITY = "Pollution Control Board / Local Police Authority"

# Ordered, first match wins
ROUTING_RULES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("electric",), ELECTRICITY_DEPARTMENT),
    (("water", "drain"), WATER_AUTHORITY),
    (("garbage",), MUNICIPAL_SANITATION),
    (("pothole", "road"), PUBLIC_WORKS),
    (("street",), STREET_LIGHTING),
    (("transport",), TRANSPORT_AUTHORITY),
    (("noise",), POLLUTION_AUTHORITY),
)


def resolve(issue_type: Union[IssueType, str, None]) -> Optional[str]:
    """Authority for the issue type, or None to leave it for manual triage"""
    if isinstance(issue_type, IssueType):
        token = issue_type.value
    else:
        token = issue_type or ""
    normalized = token.lower()

    for needles, authority in ROUTING_RULES:
        if any(needle in normalized for needle in needles):
            return authority
    return None


def routing_note(issue_type: Union[IssueType, str]) -> str:
    token = issue_type.value if isinstance(issue_type, IssueType) else issue_type
    return f"Auto-routed based on issue type: {token}"
