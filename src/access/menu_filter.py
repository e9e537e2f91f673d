"""
LOT 6: Access - Role Menu Filter

Filtrage pur et récursif de l'arbre de navigation selon l'identité courante.
"""

from typing import List, Optional, Sequence

from ..session import Identity
from .interfaces import DEFAULT_ADMIN_ROLE, NavEntry
from .roles import role_satisfies

DEFAULT_NAVIGATION: List[NavEntry] = [
    NavEntry(label="Inicio", path="/dashboard"),
    NavEntry(
        label="Gestión Acceso",
        required_role=DEFAULT_ADMIN_ROLE,
        children=(
            NavEntry(label="Gestionar Usuarios", path="/dashboard/users"),
            NavEntry(label="Gestionar Roles y Permisos", path="/dashboard/roles-permissions"),
            NavEntry(label="Gestionar Unidades Habitacionales", path="/dashboard/units-map"),
        ),
    ),
    NavEntry(label="Propiedades", path="/dashboard/properties"),
    NavEntry(label="Comunicados", path="/dashboard/communications"),
]


def filter_navigation(
    entries: Sequence[NavEntry],
    identity: Optional[Identity],
    admin_role: str = DEFAULT_ADMIN_ROLE,
) -> List[NavEntry]:
    """
    Retourne le sous-arbre visible pour l'identité.

    Règles:
        - Sans identité (session absente ou morte) → liste vide
        - Entrée avec rôle requis non satisfait → retirée avec ses enfants
        - Enfants filtrés récursivement
        - Groupe dont tous les enfants ont disparu → conservé seulement
          s'il est navigable (path), sinon retiré

    Fonction pure et idempotente.
    """
    if identity is None:
        return []

    visible: List[NavEntry] = []
    for entry in entries:
        if not role_satisfies(identity, entry.required_role, admin_role):
            continue

        if not entry.children:
            visible.append(entry)
            continue

        children = filter_navigation(entry.children, identity, admin_role)
        if not children and not entry.path:
            continue
        visible.append(
            NavEntry(
                label=entry.label,
                path=entry.path,
                required_role=entry.required_role,
                children=tuple(children),
            )
        )
    return visible


def find_entry(entries: Sequence[NavEntry], label: str) -> Optional[NavEntry]:
    """Recherche en profondeur d'une entrée par libellé."""
    for entry in entries:
        if entry.label == label:
            return entry
        found = find_entry(entry.children, label)
        if found is not None:
            return found
    return None
