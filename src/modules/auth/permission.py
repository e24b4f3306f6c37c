from modules.auth.models.user import Role

ROLE_PERMISSIONS = {
    Role.ADMIN: ["send_contract", "view_contracts", "manage_templates", "manage_users"],
    Role.CLIENT: [],
    Role.SUBCONTRACTOR: [],
}


def can_perform_action(role: Role, action: str) -> bool:
    return action in ROLE_PERMISSIONS.get(role, [])
