"""
Notification message templates.

Every user-facing message the engine can emit is defined here, in French, with
{variable} placeholders filled in by str.format().

Design decisions:
- One template per message key, each carrying its notification type
- The email echo has its own template plus a subject line for the mock channel
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from shared.models import NotificationType


class MessageKey(str, Enum):
    """Every message the notification cascade knows how to produce."""
    CATEGORY_ADDED = "category_added"
    CATEGORY_IN_USE = "category_in_use"
    CATEGORY_DELETED = "category_deleted"
    CATEGORY_NOT_FOUND = "category_not_found"

    PRODUCT_ADDED = "product_added"
    PRODUCT_UPDATED = "product_updated"
    PRODUCT_NOT_FOUND = "product_not_found"
    PRODUCT_DELETED = "product_deleted"

    SALE_PRODUCT_NOT_FOUND = "sale_product_not_found"
    SALE_INSUFFICIENT_STOCK = "sale_insufficient_stock"
    SALE_RECORDED = "sale_recorded"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"

    SETTINGS_UPDATED = "settings_updated"

    EMAIL_ECHO = "email_echo"


@dataclass(frozen=True)
class MessageTemplate:
    """A message text and the notification type it is emitted with."""
    key: MessageKey
    type: NotificationType
    text: str

    def render(self, **kwargs) -> str:
        return self.text.format(**kwargs)


def _t(key: MessageKey, type_: NotificationType, text: str) -> MessageTemplate:
    return MessageTemplate(key=key, type=type_, text=text)


TEMPLATES: dict[MessageKey, MessageTemplate] = {
    # Categories
    MessageKey.CATEGORY_ADDED: _t(
        MessageKey.CATEGORY_ADDED, NotificationType.SUCCESS,
        'Catégorie "{category_name}" ajoutée avec succès.',
    ),
    MessageKey.CATEGORY_IN_USE: _t(
        MessageKey.CATEGORY_IN_USE, NotificationType.ERROR,
        'Impossible de supprimer la catégorie "{category_name}". Elle contient des produits.',
    ),
    MessageKey.CATEGORY_DELETED: _t(
        MessageKey.CATEGORY_DELETED, NotificationType.INFO,
        'Catégorie "{category_name}" supprimée.',
    ),
    MessageKey.CATEGORY_NOT_FOUND: _t(
        MessageKey.CATEGORY_NOT_FOUND, NotificationType.ERROR,
        "Catégorie non trouvée. ID: {category_id}",
    ),

    # Products
    MessageKey.PRODUCT_ADDED: _t(
        MessageKey.PRODUCT_ADDED, NotificationType.SUCCESS,
        'Produit "{product_name}" ajouté avec succès.',
    ),
    MessageKey.PRODUCT_UPDATED: _t(
        MessageKey.PRODUCT_UPDATED, NotificationType.INFO,
        'Produit "{product_name}" mis à jour.',
    ),
    MessageKey.PRODUCT_NOT_FOUND: _t(
        MessageKey.PRODUCT_NOT_FOUND, NotificationType.ERROR,
        'Impossible de mettre à jour "{product_name}": produit non trouvé. ID: {product_id}',
    ),
    MessageKey.PRODUCT_DELETED: _t(
        MessageKey.PRODUCT_DELETED, NotificationType.INFO,
        'Produit "{product_name}" supprimé.',
    ),

    # Sales
    MessageKey.SALE_PRODUCT_NOT_FOUND: _t(
        MessageKey.SALE_PRODUCT_NOT_FOUND, NotificationType.ERROR,
        "Produit non trouvé. ID: {product_id}",
    ),
    MessageKey.SALE_INSUFFICIENT_STOCK: _t(
        MessageKey.SALE_INSUFFICIENT_STOCK, NotificationType.ERROR,
        'Stock insuffisant pour "{product_name}". Restant: {stock}',
    ),
    MessageKey.SALE_RECORDED: _t(
        MessageKey.SALE_RECORDED, NotificationType.SUCCESS,
        'Vente de {quantity}x "{product_name}" enregistrée.',
    ),
    MessageKey.LOW_STOCK: _t(
        MessageKey.LOW_STOCK, NotificationType.WARNING,
        'Stock faible pour "{product_name}"! Restant: {stock}',
    ),
    MessageKey.OUT_OF_STOCK: _t(
        MessageKey.OUT_OF_STOCK, NotificationType.ERROR,
        '"{product_name}" est en rupture de stock!',
    ),

    # Settings
    MessageKey.SETTINGS_UPDATED: _t(
        MessageKey.SETTINGS_UPDATED, NotificationType.SUCCESS,
        "Paramètres mis à jour.",
    ),

    # Simulated email delivery
    MessageKey.EMAIL_ECHO: _t(
        MessageKey.EMAIL_ECHO, NotificationType.INFO,
        "[Email Simulé] Envoyé à {email}: {message}",
    ),
}

EMAIL_SUBJECTS: dict[NotificationType, str] = {
    NotificationType.ERROR: "[POS Pro] Erreur",
    NotificationType.WARNING: "[POS Pro] Avertissement",
}


# =============================================================================
# Template Access Functions
# =============================================================================

def get_template(key: MessageKey) -> Optional[MessageTemplate]:
    """Get a template by message key."""
    return TEMPLATES.get(key)


def render_message(key: MessageKey, **context) -> tuple[NotificationType, str]:
    """
    Render a message.

    Args:
        key: Which message to render
        **context: Variables to substitute in the template

    Returns:
        (notification type, rendered text)

    Raises:
        ValueError: If no template exists for key
        KeyError: If a placeholder is missing from context
    """
    template = get_template(key)
    if not template:
        raise ValueError(f"No template found for message key: {key}")
    return template.type, template.render(**context)


def email_subject_for(notification_type: NotificationType) -> str:
    return EMAIL_SUBJECTS.get(notification_type, "[POS Pro] Notification")
