"""
Access matrix for campaign-scoped resources.

Each (resource, action) pair maps to a rule:
  - "capabilities": any one of these campaign capabilities must hold
    (member | owner | dm). Empty means any authenticated principal.
  - "self": the acting principal must also be the row's user_id.
  - None marks an operation that has no path at all.

The guard layer reads this table; nothing else encodes who may do what.
"""

MEMBER = "member"
OWNER = "owner"
DM = "dm"

CAPABILITIES = (MEMBER, OWNER, DM)

ACTIONS = ("create", "read", "update", "delete")

RESOURCES = {
    "campaigns": {
        "description": "Campaigns and their scene/game state",
        "rules": {
            "create": {"capabilities": [], "self": True},
            "read": {"capabilities": [MEMBER], "self": False},
            "update": {"capabilities": [OWNER], "self": False},
            "delete": {"capabilities": [OWNER], "self": False},
        },
    },
    "campaign_members": {
        "description": "Campaign membership (joined via invite code)",
        "rules": {
            # Invite-code validation replaces the capability check on join
            "create": {"capabilities": [], "self": True},
            "read": {"capabilities": [MEMBER], "self": False},
            "update": None,
            "delete": {"capabilities": [MEMBER], "self": True},
        },
    },
    "characters": {
        "description": "Player characters",
        "rules": {
            "create": {"capabilities": [MEMBER], "self": True},
            "read": {"capabilities": [MEMBER], "self": False},
            "update": {"capabilities": [MEMBER], "self": True},
            "delete": {"capabilities": [MEMBER], "self": True},
        },
    },
    "combat_state": {
        "description": "Combat state machine (initiative, rounds, enemies)",
        "rules": {
            "create": {"capabilities": [OWNER, DM], "self": False},
            "read": {"capabilities": [MEMBER], "self": False},
            "update": {"capabilities": [OWNER, DM], "self": False},
            "delete": None,
        },
    },
}


def get_rule(resource: str, action: str):
    """Return the rule dict for (resource, action), or None when no path exists."""
    if resource not in RESOURCES:
        raise KeyError(f"Unknown resource: {resource}")
    if action not in ACTIONS:
        raise KeyError(f"Unknown action: {action}")
    return RESOURCES[resource]["rules"][action]


def get_access_matrix():
    """
    Returns a serializable view of the matrix
    Format: {
        "resources": [
            {
                "name": "characters",
                "description": "...",
                "rules": {"create": {"capabilities": ["member"], "self": True}, ..., "update": None}
            },
            ...
        ]
    }
    """
    resources = []
    for name, config in RESOURCES.items():
        resources.append({
            "name": name,
            "description": config["description"],
            "rules": {action: config["rules"][action] for action in ACTIONS},
        })
    return {"resources": resources}


ACCESS_MATRIX = get_access_matrix()
