import enum

class Role(str, enum.Enum):
    admin = "ADMIN"
    site_engineer = "SITE_ENGINEER"
    procurement = "PROCUREMENT"
    project_manager = "PROJECT_MANAGER"

class OrderStatus(str, enum.Enum):
    draft = "DRAFT"
    pending_approval = "PENDING_APPROVAL"
    approved = "APPROVED"
    rejected = "REJECTED"
    ordered = "ORDERED"
    partially_received = "PARTIALLY_RECEIVED"
    completed = "COMPLETED"
    cancelled = "CANCELLED"

# Seuls statuts atteignables à la création d'une commande
INITIAL_ORDER_STATUSES = {
    OrderStatus.draft,
    OrderStatus.pending_approval,
}

# Rôles autorisés à créer des commandes
ORDER_CREATOR_ROLES = {
    Role.admin,
    Role.site_engineer,
}
